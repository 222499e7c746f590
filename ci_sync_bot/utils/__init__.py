"""Utility modules for shared functionality."""

from .constants import (
    CHECK_RUN_NAME,
    INTERNAL_ERROR_MARKER,
    RECHECK_COMMAND_PATTERN,
    REF_VERSION_PATTERN,
    TITLE_JIRA_KEY_PATTERN,
)

__all__ = [
    "CHECK_RUN_NAME",
    "INTERNAL_ERROR_MARKER",
    "RECHECK_COMMAND_PATTERN",
    "REF_VERSION_PATTERN",
    "TITLE_JIRA_KEY_PATTERN",
]
