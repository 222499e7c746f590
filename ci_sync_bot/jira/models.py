"""Internal models of the Jira objects the bot works with."""

from pydantic import BaseModel, Field


class JiraIssue(BaseModel):
    """A Jira issue reduced to the fields rules are evaluated against."""

    key: str
    status: str
    fix_versions: list[str] = Field(default_factory=list)

    def has_fix_version(self, fix_version: str) -> bool:
        """Whether the issue already carries a fix version."""
        return fix_version in self.fix_versions


class JiraTransition(BaseModel):
    """A workflow transition currently available on an issue."""

    id: str
    name: str
    to_status: str
