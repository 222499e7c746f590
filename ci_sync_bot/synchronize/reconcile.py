"""Periodic reconciliation of every configured branch pair.

Webhook deliveries can be missed or fail; this pass is the backstop that
eventually brings every destination branch back in sync.
"""

import asyncio

import structlog

from ci_sync_bot.configuration.models import Configuration
from ci_sync_bot.synchronize.branches import BranchSynchronizer
from ci_sync_bot.synchronize.exceptions import BranchSyncError

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


async def run_reconciliation_pass(configuration: Configuration, synchronizer: BranchSynchronizer) -> list[BranchSyncError]:
    """Synchronize every configured branch pair once, returning the failures."""
    errors: list[BranchSyncError] = []
    for destination, source in configuration.sync_pairs():
        try:
            await synchronizer.sync(destination, source)
        except BranchSyncError as exc:
            logger.error("Failed to sync branch", destination=str(destination), source=str(source), error=str(exc))
            errors.append(exc)
    return errors


async def run_periodic_reconciliation(configuration: Configuration, synchronizer: BranchSynchronizer, interval: float) -> None:
    """Run a reconciliation pass every interval seconds, forever."""
    while True:
        errors = await run_reconciliation_pass(configuration, synchronizer)
        logger.info("Completed reconciliation pass", failed_count=len(errors), next_pass_in=interval)
        await asyncio.sleep(interval)
