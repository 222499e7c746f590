# This file is intended to hold the setup for the authenticated githubkit clients.

"""Sets up the authenticated githubkit clients."""

from pathlib import Path
from typing import TypeAlias

from githubkit import GitHub
from githubkit.auth import AppAuthStrategy, AppInstallationAuthStrategy, TokenAuthStrategy

from ci_sync_bot.configuration.models import GitHubAuthenticationType

GitHubClient: TypeAlias = GitHub[AppInstallationAuthStrategy] | GitHub[TokenAuthStrategy]


def get_github_app_client(github_app_id: int, github_app_private_key_path: Path, github_api_url: str) -> GitHub[AppAuthStrategy]:
    """Returns a client authenticated as the GitHub App itself (JWT)."""
    with open(github_app_private_key_path) as f:
        private_key = f.read()
    auth = AppAuthStrategy(app_id=github_app_id, private_key=private_key)
    # Disable HTTP caching; refs must always be read fresh
    return GitHub(auth=auth, base_url=github_api_url, http_cache=False)


def get_github_installation_client(
    app_client: GitHub[AppAuthStrategy],
    github_app_installation_id: int,
) -> GitHub[AppInstallationAuthStrategy]:
    """Returns a client authenticated as an installation of the GitHub App."""
    return app_client.with_auth(app_client.auth.as_installation(github_app_installation_id))


def get_github_pat_client(github_pat_token: str, github_api_url: str) -> GitHub[TokenAuthStrategy]:
    """Returns an authenticated GitHub client using GitHub PAT credentials."""
    if not github_pat_token:
        raise RuntimeError("GitHub PAT authentication requires github_pat_token in config.")
    return GitHub(auth=TokenAuthStrategy(github_pat_token), base_url=github_api_url, http_cache=False)


def get_github_clients(
    github_auth_type: GitHubAuthenticationType,
    github_pat_token: str | None,
    github_app_id: int | None,
    github_app_private_key_path: Path | None,
    github_app_installation_id: int | None,
    github_api_url: str,
) -> tuple[GitHubClient, GitHub[AppAuthStrategy] | None]:
    """Returns the client used for repository operations and, for App authentication, the App client.

    Supports custom base URL for GitHub Enterprise Server (GHES).
    """
    if github_auth_type == GitHubAuthenticationType.APP:
        if not (github_app_id and github_app_private_key_path and github_app_installation_id):
            raise RuntimeError("GitHub App authentication requires app_id, private_key_path, and installation_id in config.")
        app_client = get_github_app_client(github_app_id, github_app_private_key_path, github_api_url)
        return get_github_installation_client(app_client, github_app_installation_id), app_client
    if not github_pat_token:
        raise RuntimeError("GitHub PAT authentication requires github_pat_token in config.")
    return get_github_pat_client(github_pat_token, github_api_url), None
