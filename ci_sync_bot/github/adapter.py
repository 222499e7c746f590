"""GitHub client adapter for the githubkit library."""

from functools import wraps
from pathlib import Path
from typing import Any, Awaitable, Callable, Self, TypeVar

import structlog
from githubkit import GitHub, Response
from githubkit.auth import AppAuthStrategy
from githubkit.exception import RequestFailed
from githubkit.versions.latest.models import GitRef

from ci_sync_bot.configuration.models import GitHubAuthenticationType
from ci_sync_bot.github.exceptions import NonFastForwardError
from ci_sync_bot.github.models import AppModel, CheckRunModel, CheckRunOutput, IssueCommentModel, PullRequestModel

from .abc import GitHubClientBase
from .client import GitHubClient, get_github_clients

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def handle_github_422(func: F) -> F:
    """Decorator translating a 422 Unprocessable Entity on a reference update into a NonFastForwardError."""

    @wraps(func)
    async def wrapper(self: "GitHubKitAdapter", owner: str, repo: str, ref: str, *args: Any, **kwargs: Any) -> Any:
        try:
            return await func(self, owner, repo, ref, *args, **kwargs)
        except RequestFailed as exc:
            if exc.response.status_code == 422:
                try:
                    error_data = exc.response.json()
                except Exception:
                    error_data = {}
                message = error_data.get("message", "Unprocessable Entity")
                logger.error(
                    "GitHub 422 Unprocessable Entity",
                    function=func.__name__,
                    owner=owner,
                    repo=repo,
                    ref=ref,
                    message=message,
                    status_code=422,
                )
                raise NonFastForwardError(owner, repo, ref, message) from exc
            raise

    return wrapper  # type: ignore


class GitHubKitAdapter(GitHubClientBase):
    """GitHub client adapter for the githubkit library.

    Unlike a per-repository client, one adapter serves every repository the
    installation has access to, so each call names its owner and repository.
    """

    def __init__(self, client: GitHubClient, app_client: GitHub[AppAuthStrategy] | None = None) -> None:
        """Initialize the adapter with already-initialized clients.

        Args:
            client: Client used for repository operations (installation or PAT)
            app_client: Client authenticated as the GitHub App itself, if any
        """
        self.client = client
        self.app_client = app_client

    @classmethod
    def create(
        cls,
        github_auth_type: GitHubAuthenticationType,
        github_pat_token: str | None = None,
        github_app_id: int | None = None,
        github_app_private_key_path: Path | None = None,
        github_app_installation_id: int | None = None,
        github_api_url: str = "https://api.github.com",
    ) -> Self:
        """Create a new GitHub client adapter."""
        logger.info("Creating client for GitHub instance", github_api_url=github_api_url, github_auth_type=github_auth_type.value)
        client, app_client = get_github_clients(
            github_auth_type=github_auth_type,
            github_pat_token=github_pat_token,
            github_app_id=github_app_id,
            github_app_private_key_path=github_app_private_key_path,
            github_app_installation_id=github_app_installation_id,
            github_api_url=github_api_url,
        )
        return cls(client, app_client)

    # Git references
    async def get_ref_sha(self, owner: str, repo: str, ref: str) -> str:
        """Get the commit a reference (e.g. heads/main) points to."""
        response: Response[GitRef] = await self.client.rest.git.async_get_ref(owner=owner, repo=repo, ref=ref)
        return response.parsed_data.object_.sha

    @handle_github_422
    async def update_ref(self, owner: str, repo: str, ref: str, sha: str, force: bool = False) -> None:
        """Move a reference to a commit; GitHub rejects non-fast-forward moves unless forced."""
        await self.client.rest.git.async_update_ref(owner=owner, repo=repo, ref=ref, sha=sha, force=force)
        logger.info("Updated reference", owner=owner, repo=repo, ref=ref, sha=sha)

    async def list_matching_refs(self, owner: str, repo: str, prefix: str) -> list[str]:
        """List the fully-qualified references starting with a prefix (e.g. tags/v)."""
        response: Response[list[GitRef]] = await self.client.rest.git.async_list_matching_refs(owner=owner, repo=repo, ref=prefix)
        return [git_ref.ref for git_ref in response.parsed_data]

    # Pull requests
    async def get_pull_request(self, owner: str, repo: str, pull_number: int) -> PullRequestModel:
        """Get a pull request."""
        response = await self.client.rest.pulls.async_get(owner=owner, repo=repo, pull_number=pull_number)
        return PullRequestModel.model_validate(response.json())

    # Issue comments
    async def list_issue_comments(self, owner: str, repo: str, issue_number: int, per_page: int = 100) -> list[IssueCommentModel]:
        """List all comments of an issue or a pull request, handling pagination."""
        all_comments: list[IssueCommentModel] = []
        page: int = 1
        while True:
            response = await self.client.rest.issues.async_list_comments(
                owner=owner,
                repo=repo,
                issue_number=issue_number,
                per_page=per_page,
                page=page,
            )
            comments = [IssueCommentModel.model_validate(comment) for comment in response.json()]
            if not comments:
                break
            all_comments.extend(comments)
            if len(comments) < per_page:
                break
            page += 1
        return all_comments

    async def create_issue_comment(self, owner: str, repo: str, issue_number: int, body: str) -> IssueCommentModel:
        """Comment on an issue or a pull request."""
        response = await self.client.rest.issues.async_create_comment(owner=owner, repo=repo, issue_number=issue_number, body=body)
        return IssueCommentModel.model_validate(response.json())

    async def delete_issue_comment(self, owner: str, repo: str, comment_id: int) -> None:
        """Delete a comment."""
        await self.client.rest.issues.async_delete_comment(owner=owner, repo=repo, comment_id=comment_id)

    # Checks
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
        data: dict[str, Any] = {"name": name, "head_sha": head_sha, "status": status}
        if conclusion is not None:
            data["conclusion"] = conclusion
        if output is not None:
            data["output"] = output.model_dump()
        response = await self.client.rest.checks.async_create(owner=owner, repo=repo, data=data)  # type: ignore[arg-type]
        return CheckRunModel.model_validate(response.json())

    # Identity
    async def get_authenticated_app(self) -> AppModel:
        """Get the GitHub App the bot runs as (requires GitHub App authentication)."""
        if self.app_client is None:
            raise RuntimeError("The authenticated GitHub App is only known with GitHub App authentication.")
        response = await self.app_client.rest.apps.async_get_authenticated()
        return AppModel.model_validate(response.json())

    async def get_bot_login(self) -> str:
        """Get the login that authors the bot's comments."""
        if self.app_client is not None:
            app = await self.get_authenticated_app()
            return f"{app.slug}[bot]"
        response = await self.client.rest.users.async_get_authenticated()
        return str(response.json()["login"])
