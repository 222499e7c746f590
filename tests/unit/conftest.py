"""Fixtures for unit tests."""

from typing import Any, Callable, Generator
from unittest.mock import AsyncMock

import pytest
import structlog

from ci_sync_bot.github.abc import GitHubClientBase
from ci_sync_bot.github.models import PullRequestModel
from ci_sync_bot.jira.abc import JiraClientBase


@pytest.fixture(autouse=True)
def configure_structlog_for_caplog() -> Generator[None, None, None]:
    """Configure structlog for use with caplog."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def github() -> AsyncMock:
    """A GitHub client double; every method is an AsyncMock."""
    return AsyncMock(spec=GitHubClientBase)


@pytest.fixture
def jira() -> AsyncMock:
    """A Jira client double; every method is an AsyncMock."""
    return AsyncMock(spec=JiraClientBase)


def make_pull_request(
    number: int = 7,
    title: str = "Fix the build (PROJQUAY-123)",
    base_ref: str = "master",
    owner: str = "org",
    repo: str = "app",
    **extra: Any,
) -> PullRequestModel:
    """Build a pull request on org/app as found in webhook payloads."""
    repository = {"name": repo, "owner": {"login": owner}}
    return PullRequestModel.model_validate(
        {
            "number": number,
            "title": title,
            "state": "open",
            "html_url": f"https://github.com/{owner}/{repo}/pull/{number}",
            "head": {"ref": "feature", "sha": "head-sha", "repo": repository},
            "base": {"ref": base_ref, "sha": "base-sha", "repo": repository},
            **extra,
        }
    )


@pytest.fixture
def pull_request_factory() -> Callable[..., PullRequestModel]:
    """Factory building pull requests on org/app."""
    return make_pull_request
