"""Sets up the authenticated httpx client for the Jira REST API."""

from pathlib import Path

import httpx


def read_jira_token(jira_token_file: Path) -> str:
    """Read the Jira personal access token from a file."""
    try:
        with open(jira_token_file, encoding="utf-8") as f:
            return f.read().strip()
    except OSError as exc:
        raise RuntimeError(f"Failed to read Jira token file {jira_token_file}: {exc}") from exc


def get_jira_client(jira_endpoint: str, jira_token: str, timeout: float = 30.0) -> httpx.AsyncClient:
    """Returns an httpx client sending bearer-authenticated requests to a Jira instance."""
    return httpx.AsyncClient(
        base_url=jira_endpoint.rstrip("/"),
        headers={"Authorization": f"Bearer {jira_token}", "Accept": "application/json"},
        timeout=timeout,
    )
