"""Reconcile GitHub authentication configuration."""

from pathlib import Path
from typing import Any

from ci_sync_bot.configuration.exceptions import GitHubAuthenticationConfigurationUndefinedError
from ci_sync_bot.configuration.models import GitHubAuthenticationType


def _missing_app_settings(app_settings: list[tuple[Any, str, str, str]]) -> str:
    """Describe the unset GitHub App settings, naming both the CLI option and the environment variable."""
    return ", ".join(
        f"{name} (command line option {cli_name}, environment variable {env_name})"
        for value, name, cli_name, env_name in app_settings
        if not value
    )


async def validate_github_authentication_configuration(
    github_pat_token: str | None,
    github_app_id: int | None,
    github_app_private_key_path: Path | None,
    github_app_installation_id: int | None,
) -> GitHubAuthenticationType:
    """Validates the GitHub authentication configuration.

    The bot can act either as a GitHub App installation (required for check
    runs to be attributed to the app) or with a personal access token.

    Raises:
        GitHubAuthenticationConfigurationUndefinedError: If neither or both configurations are defined,
            or if the GitHub App configuration is incomplete.

    Returns:
        GitHubAuthenticationType: The type of GitHub authentication used.
    """
    app_settings: list[tuple[Any, str, str, str]] = [
        (github_app_id, "GitHub App ID", "github_app_id", "GITHUB_APP_ID"),
        (github_app_private_key_path, "GitHub App private key path", "github_app_private_key_path", "GITHUB_APP_PRIVATE_KEY_PATH"),
        (github_app_installation_id, "GitHub App installation ID", "github_app_installation_id", "GITHUB_APP_INSTALLATION_ID"),
    ]
    any_app_setting = any(value for value, *_ in app_settings)
    all_app_settings = all(value for value, *_ in app_settings)

    if github_pat_token and any_app_setting:
        raise GitHubAuthenticationConfigurationUndefinedError("Both PAT and GitHub App configurations are defined. Please use one or the other.")
    if github_pat_token:
        return GitHubAuthenticationType.PAT
    if all_app_settings:
        return GitHubAuthenticationType.APP
    if any_app_setting:
        raise GitHubAuthenticationConfigurationUndefinedError(
            "Incomplete GitHub App configuration - missing settings include " + _missing_app_settings(app_settings)
        )
    raise GitHubAuthenticationConfigurationUndefinedError(
        "No GitHub authentication configuration provided. Please provide either a PAT or a GitHub App configuration."
    )
