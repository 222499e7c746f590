"""Internal data models for checks."""

from enum import Enum


class CheckEvent(str, Enum):
    """Event that triggered a check, as matched by rule conditions."""

    OPENED = "opened"
    EDITED = "edited"
    CLOSED = "closed"
    SYNC = "sync"
    RECHECK = "recheck"


class CheckConclusion(str, Enum):
    """Conclusion of a completed check run."""

    SUCCESS = "success"
    FAILURE = "failure"
    NEUTRAL = "neutral"
