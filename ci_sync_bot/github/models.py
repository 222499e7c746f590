"""Pydantic models for the subset of GitHub objects the bot works with.

The same models validate webhook payloads and REST API responses, so that a
pull request embedded in an event and one fetched from the API look alike
to the rest of the application.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Account(BaseModel):
    """A GitHub user, bot or organization."""

    login: str
    id: int | None = None


class RepositoryModel(BaseModel):
    """A GitHub repository."""

    name: str
    owner: Account
    full_name: str | None = None


class PullRequestBranch(BaseModel):
    """The head or base of a pull request."""

    ref: str
    sha: str
    repo: RepositoryModel | None = None


class PullRequestModel(BaseModel):
    """A GitHub pull request; unknown fields are kept so templates can use them."""

    model_config = ConfigDict(extra="allow")

    number: int
    title: str = ""
    state: str | None = None
    html_url: str | None = None
    merged_at: datetime | None = None
    head: PullRequestBranch
    base: PullRequestBranch

    @property
    def merged(self) -> bool:
        """Whether the pull request has been merged."""
        return self.merged_at is not None


class IssueCommentModel(BaseModel):
    """A comment on an issue or a pull request."""

    id: int
    body: str = ""
    user: Account | None = None
    created_at: datetime


class CheckRunOutput(BaseModel):
    """Title and summary shown for a check run."""

    title: str
    summary: str


class CheckRunModel(BaseModel):
    """A check run reported against a commit."""

    id: int
    status: str | None = None
    conclusion: str | None = None
    completed_at: datetime | None = None


class AppModel(BaseModel):
    """A GitHub App."""

    id: int
    slug: str | None = None
    name: str | None = None


class CheckSuitePullRequest(BaseModel):
    """A pull request attached to a check suite."""

    number: int


class CheckSuiteModel(BaseModel):
    """A GitHub check suite."""

    id: int | None = None
    app: AppModel | None = None
    pull_requests: list[CheckSuitePullRequest] = Field(default_factory=list)
