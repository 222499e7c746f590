"""The reconciliation engine owning every stateful component of the bot."""

import structlog

from ci_sync_bot.checks.jira import JiraCheck
from ci_sync_bot.configuration.models import Configuration
from ci_sync_bot.events.dispatcher import EventDispatcher
from ci_sync_bot.events.reactor import Reactor
from ci_sync_bot.github.abc import GitHubClientBase
from ci_sync_bot.jira.abc import JiraClientBase
from ci_sync_bot.synchronize.branches import BranchSynchronizer
from ci_sync_bot.synchronize.exceptions import BranchSyncError
from ci_sync_bot.synchronize.reconcile import run_periodic_reconciliation, run_reconciliation_pass
from ci_sync_bot.synchronize.status import Status, StatusStore
from ci_sync_bot.synchronize.versions import VersionCache

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class ReconciliationEngine:
    """Owns the version cache and the status store and shares them with the components using them.

    Engines are independent of each other; nothing is kept at module level.
    """

    def __init__(
        self,
        configuration: Configuration,
        github: GitHubClientBase,
        jira: JiraClientBase,
        app_id: int | None = None,
    ) -> None:
        """Initialize the engine and its components."""
        self.configuration = configuration
        self.github = github
        self.jira = jira
        self.version_cache = VersionCache(github)
        self.status_store = StatusStore()
        self.synchronizer = BranchSynchronizer(github, self.status_store)
        self.jira_check = JiraCheck(github, jira, self.version_cache)
        self.reactor = Reactor(configuration, github, self.synchronizer, self.version_cache, self.jira_check, app_id=app_id)
        self.dispatcher = EventDispatcher(self.reactor)

    async def dispatch(self, event_type: str, body: bytes | str) -> None:
        """Handle a webhook delivery."""
        await self.dispatcher.dispatch(event_type, body)

    async def get_status(self) -> Status:
        """Get the status of every known branch."""
        return await self.status_store.get_status(self.configuration, self.version_cache)

    async def run_reconciliation_pass(self) -> list[BranchSyncError]:
        """Synchronize every configured branch pair once."""
        return await run_reconciliation_pass(self.configuration, self.synchronizer)

    async def run_periodic_reconciliation(self, interval: float) -> None:
        """Synchronize every configured branch pair every interval seconds."""
        logger.info("Starting periodic reconciliation", interval=interval, pair_count=len(self.configuration.sync_pairs()))
        await run_periodic_reconciliation(self.configuration, self.synchronizer, interval)

    async def aclose(self) -> None:
        """Release the connections held by the engine's clients."""
        await self.jira.aclose()
