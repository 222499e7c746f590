"""Base ABC for GitHub clients."""

from abc import ABC, abstractmethod

from ci_sync_bot.github.models import AppModel, CheckRunModel, CheckRunOutput, IssueCommentModel, PullRequestModel


class GitHubClientBase(ABC):
    """Base ABC for GitHub clients."""

    # Git references
    @abstractmethod
    async def get_ref_sha(self, owner: str, repo: str, ref: str) -> str:
        """Get the commit a reference (e.g. heads/main) points to."""
        pass

    @abstractmethod
    async def update_ref(self, owner: str, repo: str, ref: str, sha: str, force: bool = False) -> None:
        """Move a reference to a commit."""
        pass

    @abstractmethod
    async def list_matching_refs(self, owner: str, repo: str, prefix: str) -> list[str]:
        """List the fully-qualified references starting with a prefix (e.g. tags/v)."""
        pass

    # Pull requests
    @abstractmethod
    async def get_pull_request(self, owner: str, repo: str, pull_number: int) -> PullRequestModel:
        """Get a pull request."""
        pass

    # Issue comments
    @abstractmethod
    async def list_issue_comments(self, owner: str, repo: str, issue_number: int) -> list[IssueCommentModel]:
        """List all comments of an issue or a pull request."""
        pass

    @abstractmethod
    async def create_issue_comment(self, owner: str, repo: str, issue_number: int, body: str) -> IssueCommentModel:
        """Comment on an issue or a pull request."""
        pass

    @abstractmethod
    async def delete_issue_comment(self, owner: str, repo: str, comment_id: int) -> None:
        """Delete a comment."""
        pass

    # Checks
    @abstractmethod
    async def create_check_run(
        self,
        owner: str,
        repo: str,
        name: str,
        head_sha: str,
        status: str,
        conclusion: str | None = None,
        output: CheckRunOutput | None = None,
    ) -> CheckRunModel:
        """Report a check run against a commit."""
        pass

    # Identity
    @abstractmethod
    async def get_authenticated_app(self) -> AppModel:
        """Get the GitHub App the bot runs as."""
        pass

    @abstractmethod
    async def get_bot_login(self) -> str:
        """Get the login that authors the bot's comments."""
        pass
