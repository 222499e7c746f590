"""Unit tests for the JiraAdapter class."""

import json
from pathlib import Path
from typing import Callable

import httpx
import pytest

from ci_sync_bot.jira.adapter import JiraAdapter
from ci_sync_bot.jira.client import read_jira_token
from ci_sync_bot.jira.exceptions import JiraRequestFailedError, JiraUnreachableError


def make_adapter(handler: Callable[[httpx.Request], httpx.Response], requests: list[httpx.Request] | None = None) -> JiraAdapter:
    """Build an adapter whose requests are answered by a handler."""

    def record(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return handler(request)

    client = httpx.AsyncClient(base_url="https://jira.example.com", transport=httpx.MockTransport(record))
    return JiraAdapter(client)


@pytest.mark.asyncio
async def test_get_issue() -> None:
    """Status and fix versions are read from the issue fields."""
    requests: list[httpx.Request] = []
    adapter = make_adapter(
        lambda request: httpx.Response(
            200,
            json={
                "key": "PROJQUAY-123",
                "fields": {"status": {"name": "In Progress"}, "fixVersions": [{"name": "quay-v3.8.1"}, {"name": "quay-v3.9.0"}]},
            },
        ),
        requests,
    )

    issue = await adapter.get_issue("PROJQUAY-123")

    assert issue.key == "PROJQUAY-123"
    assert issue.status == "In Progress"
    assert issue.fix_versions == ["quay-v3.8.1", "quay-v3.9.0"]
    assert requests[0].url.path == "/rest/api/2/issue/PROJQUAY-123"


@pytest.mark.asyncio
async def test_missing_issue_is_a_404() -> None:
    """A missing issue keeps the status code of the response."""
    adapter = make_adapter(lambda request: httpx.Response(404, json={"errorMessages": ["Issue Does Not Exist"], "errors": {}}))

    with pytest.raises(JiraRequestFailedError, match="Issue Does Not Exist") as exc_info:
        await adapter.get_issue("PROJQUAY-404")

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_non_json_error_body() -> None:
    """Errors without a JSON body are still reported with their status code."""
    adapter = make_adapter(lambda request: httpx.Response(502, text="<html>Bad Gateway</html>"))

    with pytest.raises(JiraRequestFailedError) as exc_info:
        await adapter.get_issue("PROJQUAY-1")

    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_transport_failure_is_unreachable() -> None:
    """A request that never got a response means Jira is unreachable."""

    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    adapter = make_adapter(refuse)

    with pytest.raises(JiraUnreachableError):
        await adapter.get_issue("PROJQUAY-1")


@pytest.mark.asyncio
async def test_list_and_do_transition() -> None:
    """Transitions are listed with their target status and executed by ID."""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(
                200,
                json={
                    "transitions": [
                        {"id": "11", "name": "Start Progress", "to": {"name": "In Progress"}},
                        {"id": "21", "name": "Close", "to": {"name": "Closed"}},
                    ]
                },
            )
        return httpx.Response(204)

    adapter = make_adapter(handler, requests)

    transitions = await adapter.list_transitions("PROJQUAY-123")
    await adapter.do_transition("PROJQUAY-123", "21")

    assert [(transition.id, transition.to_status) for transition in transitions] == [("11", "In Progress"), ("21", "Closed")]
    assert requests[1].method == "POST"
    assert requests[1].url.path == "/rest/api/2/issue/PROJQUAY-123/transitions"
    assert json.loads(requests[1].content) == {"transition": {"id": "21"}}


@pytest.mark.asyncio
async def test_add_fix_version_keeps_existing_ones() -> None:
    """Fix versions are added with an update operation, not replaced."""
    requests: list[httpx.Request] = []
    adapter = make_adapter(lambda request: httpx.Response(204), requests)

    await adapter.add_fix_version("PROJQUAY-123", "quay-v3.8.2")

    assert requests[0].method == "PUT"
    assert json.loads(requests[0].content) == {"update": {"fixVersions": [{"add": {"name": "quay-v3.8.2"}}]}}


@pytest.mark.asyncio
async def test_add_comment() -> None:
    """Comments are posted to the issue."""
    requests: list[httpx.Request] = []
    adapter = make_adapter(lambda request: httpx.Response(201, json={"id": "1"}), requests)

    await adapter.add_comment("PROJQUAY-123", "Merged")

    assert requests[0].url.path == "/rest/api/2/issue/PROJQUAY-123/comment"
    assert json.loads(requests[0].content) == {"body": "Merged"}


@pytest.mark.asyncio
async def test_aclose_closes_the_http_client() -> None:
    """Closing the adapter releases its connections."""
    adapter = make_adapter(lambda request: httpx.Response(200))

    await adapter.aclose()

    assert adapter.client.is_closed


def test_create_reads_token_file(tmp_path: Path) -> None:
    """The token is read from its file and sent as a bearer token."""
    token_file = tmp_path / "jira-token"
    token_file.write_text("secret\n", encoding="utf-8")

    adapter = JiraAdapter.create("https://jira.example.com/", token_file)

    assert adapter.client.headers["Authorization"] == "Bearer secret"
    assert adapter.client.base_url.host == "jira.example.com"


def test_unreadable_token_file(tmp_path: Path) -> None:
    """A missing token file is reported."""
    with pytest.raises(RuntimeError, match="Failed to read Jira token file"):
        read_jira_token(tmp_path / "missing")
