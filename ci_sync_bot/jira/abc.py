"""Base ABC for Jira clients."""

from abc import ABC, abstractmethod

from ci_sync_bot.jira.models import JiraIssue, JiraTransition


class JiraClientBase(ABC):
    """Base ABC for Jira clients."""

    @abstractmethod
    async def get_issue(self, key: str) -> JiraIssue:
        """Get an issue by its key."""
        pass

    @abstractmethod
    async def list_transitions(self, key: str) -> list[JiraTransition]:
        """List the transitions currently available on an issue."""
        pass

    @abstractmethod
    async def do_transition(self, key: str, transition_id: str) -> None:
        """Execute a transition on an issue."""
        pass

    @abstractmethod
    async def add_fix_version(self, key: str, fix_version: str) -> None:
        """Add a fix version to an issue."""
        pass

    @abstractmethod
    async def add_comment(self, key: str, body: str) -> None:
        """Comment on an issue."""
        pass

    @abstractmethod
    async def aclose(self) -> None:
        """Release the underlying connections."""
        pass
