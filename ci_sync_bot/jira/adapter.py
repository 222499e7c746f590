"""Jira client adapter for the Jira REST API (v2) over httpx."""

from functools import wraps
from pathlib import Path
from typing import Any, Awaitable, Callable, Self, TypeVar

import httpx
import structlog

from ci_sync_bot.jira.abc import JiraClientBase
from ci_sync_bot.jira.client import get_jira_client, read_jira_token
from ci_sync_bot.jira.exceptions import JiraRequestFailedError, JiraUnreachableError
from ci_sync_bot.jira.models import JiraIssue, JiraTransition

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def handle_jira_errors(func: F) -> F:
    """Decorator translating httpx failures into Jira error kinds.

    A request that never got a response becomes JiraUnreachableError; a
    response with a non-2xx status code becomes JiraRequestFailedError.
    """

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            try:
                error_data = exc.response.json()
            except ValueError:
                error_data = {}
            error_messages = error_data.get("errorMessages", []) if isinstance(error_data, dict) else []
            message = "; ".join(error_messages) or exc.response.reason_phrase
            logger.debug("Jira request failed", function=func.__name__, status_code=status_code, message=message)
            raise JiraRequestFailedError(status_code, message) from exc
        except httpx.RequestError as exc:
            logger.debug("Jira is not reachable", function=func.__name__, error=str(exc), error_type=type(exc).__name__)
            raise JiraUnreachableError(f"Jira is not reachable: {exc}") from exc

    return wrapper  # type: ignore


class JiraAdapter(JiraClientBase):
    """Jira client adapter for the Jira REST API."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        """Initialize the Jira adapter with an already-initialized client."""
        self.client = client

    @classmethod
    def create(cls, jira_endpoint: str, jira_token_file: Path) -> Self:
        """Create a new Jira adapter authenticated with the token stored in a file."""
        logger.info("Creating client for Jira instance", jira_endpoint=jira_endpoint)
        token = read_jira_token(jira_token_file)
        return cls(get_jira_client(jira_endpoint, token))

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        response = await self.client.request(method, path, **kwargs)
        response.raise_for_status()
        return response

    @handle_jira_errors
    async def get_issue(self, key: str) -> JiraIssue:
        """Get an issue by its key."""
        response = await self._request("GET", f"/rest/api/2/issue/{key}", params={"fields": "status,fixVersions"})
        data = response.json()
        fields = data.get("fields") or {}
        return JiraIssue(
            key=data.get("key", key),
            status=(fields.get("status") or {}).get("name", ""),
            fix_versions=[version["name"] for version in fields.get("fixVersions") or []],
        )

    @handle_jira_errors
    async def list_transitions(self, key: str) -> list[JiraTransition]:
        """List the transitions currently available on an issue."""
        response = await self._request("GET", f"/rest/api/2/issue/{key}/transitions")
        return [
            JiraTransition(id=str(transition["id"]), name=transition.get("name", ""), to_status=transition.get("to", {}).get("name", ""))
            for transition in response.json().get("transitions", [])
        ]

    @handle_jira_errors
    async def do_transition(self, key: str, transition_id: str) -> None:
        """Execute a transition on an issue."""
        await self._request("POST", f"/rest/api/2/issue/{key}/transitions", json={"transition": {"id": transition_id}})
        logger.info("Transitioned Jira issue", key=key, transition_id=transition_id)

    @handle_jira_errors
    async def add_fix_version(self, key: str, fix_version: str) -> None:
        """Add a fix version to an issue, keeping the ones it already has."""
        await self._request("PUT", f"/rest/api/2/issue/{key}", json={"update": {"fixVersions": [{"add": {"name": fix_version}}]}})
        logger.info("Added fix version to Jira issue", key=key, fix_version=fix_version)

    @handle_jira_errors
    async def add_comment(self, key: str, body: str) -> None:
        """Comment on an issue."""
        await self._request("POST", f"/rest/api/2/issue/{key}/comment", json={"body": body})
        logger.info("Commented on Jira issue", key=key)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()
