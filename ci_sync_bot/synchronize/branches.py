"""Contains synchronization logic for branches."""

import structlog

from ci_sync_bot.configuration.models import BranchReference
from ci_sync_bot.github.abc import GitHubClientBase
from ci_sync_bot.synchronize.exceptions import BranchSyncError
from ci_sync_bot.synchronize.status import StatusStore, SyncState

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class BranchSynchronizer:
    """Advances destination branches to the commit of their source branch."""

    def __init__(self, github: GitHubClientBase, status_store: StatusStore) -> None:
        """Initialize the synchronizer."""
        self.github = github
        self.status_store = status_store

    def _fail(self, destination: BranchReference, message: str, exc: Exception) -> BranchSyncError:
        message = f"{message}: {exc}"
        self.status_store.update_branch_sync_status(str(destination), SyncState.ERROR, message)
        return BranchSyncError(destination, message)

    async def sync(self, destination: BranchReference, source: BranchReference) -> None:
        """Make the destination branch point to the head of the source branch.

        The update is never forced, so a destination that has diverged from
        its source fails with an Error status instead of losing commits.
        Calling it again once in sync only reads both references.
        """
        try:
            source_sha = await self.github.get_ref_sha(source.owner, source.repo, f"heads/{source.branch}")
        except Exception as exc:
            raise self._fail(destination, "failed to get source ref", exc) from exc

        try:
            destination_sha = await self.github.get_ref_sha(destination.owner, destination.repo, f"heads/{destination.branch}")
        except Exception as exc:
            raise self._fail(destination, "failed to get destination ref", exc) from exc

        logger.debug(
            "Checking if branch is synced",
            destination=str(destination),
            destination_sha=destination_sha,
            source=str(source),
            source_sha=source_sha,
        )

        if destination_sha != source_sha:
            logger.info("Updating branch", destination=str(destination), old_sha=destination_sha, new_sha=source_sha)
            try:
                await self.github.update_ref(destination.owner, destination.repo, f"heads/{destination.branch}", source_sha, force=False)
            except Exception as exc:
                raise self._fail(destination, f"failed to update {destination}", exc) from exc

        self.status_store.update_branch_sync_status(str(destination), SyncState.SYNCED, f"synced from {source}, commit: {source_sha}")
