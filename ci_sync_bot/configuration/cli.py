"""Defines the Command Line Interface (CLI) using Typer."""

import asyncio
import sys
from pathlib import Path

import typer
import uvicorn
from dotenv import load_dotenv
from typer import Option
from typing_extensions import Annotated

from ci_sync_bot.configuration.loader import load_configuration_from_file
from ci_sync_bot.configuration.models import GitHubAuthenticationType
from ci_sync_bot.configuration.reconcile import validate_github_authentication_configuration
from ci_sync_bot.engine import ReconciliationEngine
from ci_sync_bot.github.adapter import GitHubKitAdapter
from ci_sync_bot.jira.adapter import JiraAdapter
from ci_sync_bot.server.app import create_app
from ci_sync_bot.synchronize.exceptions import BranchSyncError
from ci_sync_bot.utils.constants import DEFAULT_RESYNC_INTERVAL
from ci_sync_bot.utils.logging import configure_logging

load_dotenv()

typer_app = typer.Typer(pretty_exceptions_show_locals=False)


@typer_app.callback()
def main_callback(
    ctx: typer.Context,
    config_path: Annotated[Path, Option(envvar="CONFIG_PATH", help="Path to the repository configuration YAML file.")] = Path("config.yaml"),
    github_api_url: Annotated[str, Option(envvar="GITHUB_API_URL", help="GitHub API URL.")] = "https://api.github.com",
    github_pat_token: Annotated[str | None, Option(envvar="GITHUB_PAT_TOKEN", help="GitHub Personal Access Token.")] = None,
    github_app_id: Annotated[int | None, Option(envvar="GITHUB_APP_ID", help="GitHub App ID.")] = None,
    github_app_private_key_path: Annotated[Path | None, Option(envvar="GITHUB_APP_PRIVATE_KEY_PATH", help="Path to GitHub App private key.")] = None,
    github_app_installation_id: Annotated[int | None, Option(envvar="GITHUB_APP_INSTALLATION_ID", help="GitHub App Installation ID.")] = None,
    jira_endpoint: Annotated[str, Option(envvar="JIRA_ENDPOINT", help="Jira server URL.")] = "https://issues.redhat.com",
    jira_token_file: Annotated[Path, Option(envvar="JIRA_TOKEN_FILE", help="Path to a file containing the Jira personal access token.")] = Path(
        "jira-token"
    ),
    debug: Annotated[bool, Option(envvar="DEBUG", help="Enable debug mode.")] = False,
) -> None:
    """Keep release branches in sync and reflect pull requests into Jira."""
    configure_logging(debug)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["github_api_url"] = github_api_url
    ctx.obj["github_pat_token"] = github_pat_token
    ctx.obj["github_app_id"] = github_app_id
    ctx.obj["github_app_private_key_path"] = github_app_private_key_path
    ctx.obj["github_app_installation_id"] = github_app_installation_id
    ctx.obj["jira_endpoint"] = jira_endpoint
    ctx.obj["jira_token_file"] = jira_token_file
    # Validate GitHub authentication configuration
    ctx.obj["github_auth_type"] = asyncio.run(
        validate_github_authentication_configuration(
            github_pat_token=github_pat_token,
            github_app_id=github_app_id,
            github_app_private_key_path=github_app_private_key_path,
            github_app_installation_id=github_app_installation_id,
        )
    )


def build_engine(ctx: typer.Context) -> ReconciliationEngine:
    """Build the engine from the options stored on the context."""
    configuration = load_configuration_from_file(ctx.obj["config_path"])
    github = GitHubKitAdapter.create(
        github_auth_type=ctx.obj["github_auth_type"],
        github_pat_token=ctx.obj["github_pat_token"],
        github_app_id=ctx.obj["github_app_id"],
        github_app_private_key_path=ctx.obj["github_app_private_key_path"],
        github_app_installation_id=ctx.obj["github_app_installation_id"],
        github_api_url=ctx.obj["github_api_url"],
    )
    jira = JiraAdapter.create(ctx.obj["jira_endpoint"], ctx.obj["jira_token_file"])
    return ReconciliationEngine(configuration, github, jira, app_id=ctx.obj["github_app_id"])


@typer_app.command(name="serve")
def serve_cli(
    ctx: typer.Context,
    host: Annotated[str, Option(envvar="HOST", help="Address to listen on.")] = "0.0.0.0",
    port: Annotated[int, Option(envvar="PORT", help="Port to listen on.")] = 8080,
    resync_interval: Annotated[
        float, Option(envvar="RESYNC_INTERVAL", help="Seconds between two periodic synchronizations of every configured branch.")
    ] = DEFAULT_RESYNC_INTERVAL,
) -> None:
    """Receive GitHub webhooks and periodically synchronize every configured branch."""
    if ctx.obj["github_auth_type"] != GitHubAuthenticationType.APP:
        typer.echo(
            "Serving webhooks requires GitHub App authentication; check runs can only be created by a GitHub App.",
            err=True,
        )
        raise typer.Exit(1)
    engine = build_engine(ctx)
    typer.echo(f"Listening on {host}:{port}")
    uvicorn.run(create_app(engine, resync_interval), host=host, port=port, log_config=None)


async def _reconcile_once(engine: ReconciliationEngine) -> list[BranchSyncError]:
    try:
        return await engine.run_reconciliation_pass()
    finally:
        await engine.aclose()


@typer_app.command(name="reconcile")
def reconcile_cli(ctx: typer.Context) -> None:
    """Synchronize every configured branch once."""
    engine = build_engine(ctx)
    errors = asyncio.run(_reconcile_once(engine))
    if errors:
        typer.echo("Error(s) encountered while synchronizing branches:", err=True)
        for err in errors:
            typer.echo(str(err), err=True)
        sys.exit(1)
    typer.echo(f"Synchronized {len(engine.configuration.sync_pairs())} branch(es)")


if __name__ == "__main__":
    typer_app()
