"""Webhook payload schemas and the internal events decoded from them.

Payload models only declare the fields the bot reads; everything else in a
GitHub webhook delivery is ignored.
"""

from dataclasses import dataclass, field
from typing import Any, TypeAlias

from pydantic import BaseModel

from ci_sync_bot.github.models import CheckSuiteModel, PullRequestModel, RepositoryModel

# Webhook payloads
# ----------------


class PushPayload(BaseModel):
    """Payload of a push event."""

    ref: str
    after: str | None = None
    repository: RepositoryModel


class CheckSuitePayload(BaseModel):
    """Payload of a check_suite event."""

    action: str
    check_suite: CheckSuiteModel
    repository: RepositoryModel


class IssuePayload(BaseModel):
    """The issue an issue_comment event refers to."""

    number: int
    title: str = ""
    state: str
    pull_request: dict[str, Any] | None = None


class CommentPayload(BaseModel):
    """The comment of an issue_comment event."""

    body: str = ""


class IssueCommentPayload(BaseModel):
    """Payload of an issue_comment event."""

    action: str
    issue: IssuePayload
    comment: CommentPayload
    repository: RepositoryModel


class PullRequestPayload(BaseModel):
    """Payload of a pull_request event."""

    action: str
    pull_request: PullRequestModel
    repository: RepositoryModel


# Internal events
# ---------------


@dataclass(frozen=True)
class BranchPushEvent:
    """Commits were pushed to a branch."""

    owner: str
    repo: str
    branch: str


@dataclass(frozen=True)
class TagPushEvent:
    """A tag was pushed."""

    owner: str
    repo: str
    tag: str


@dataclass(frozen=True)
class CheckSuiteRerequestedEvent:
    """A user asked to re-run the checks of a check suite."""

    owner: str
    repo: str
    app_id: int | None
    pull_request_numbers: tuple[int, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class IssueCommentCreatedEvent:
    """A comment was posted on an issue or a pull request."""

    owner: str
    repo: str
    issue_number: int
    issue_state: str
    is_pull_request: bool
    body: str


@dataclass(frozen=True)
class PullRequestEvent:
    """A pull request was opened, edited, closed or synchronized."""

    action: str
    pull_request: PullRequestModel = field(compare=False)


Event: TypeAlias = BranchPushEvent | TagPushEvent | CheckSuiteRerequestedEvent | IssueCommentCreatedEvent | PullRequestEvent
