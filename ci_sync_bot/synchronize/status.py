"""Record of the last known synchronization state of every destination branch."""

import threading
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

import structlog
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ci_sync_bot.configuration.models import Configuration
from ci_sync_bot.synchronize.versions import VersionCache

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class SyncState(str, Enum):
    """State of a destination branch."""

    SYNCED = "Synced"
    ERROR = "Error"


class StatusModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BranchSyncStatus(StatusModel):
    """Last observed synchronization of a branch."""

    status: SyncState
    message: str
    last_heartbeat_time: datetime
    last_transition_time: datetime


class BranchStatus(StatusModel):
    """Status of a branch, keyed by owner/repo:branch."""

    branch: str
    fix_version: str | None = None
    sync_status: BranchSyncStatus | None = None


class Status(StatusModel):
    """Status document served by the status endpoint."""

    branches: list[BranchStatus] = Field(default_factory=list)

    def find(self, branch: str) -> BranchStatus | None:
        """Get the status of a branch."""
        for branch_status in self.branches:
            if branch_status.branch == branch:
                return branch_status
        return None

    def set_fix_version(self, branch: str, fix_version: str) -> None:
        """Set the prospective fix version of a branch, adding the branch if needed."""
        branch_status = self.find(branch)
        if branch_status is None:
            self.branches.append(BranchStatus(branch=branch, fix_version=fix_version))
        else:
            branch_status.fix_version = fix_version


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StatusStore:
    """Thread-safe store of branch synchronization statuses."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        """Initialize an empty store."""
        self._clock = clock
        self._lock = threading.Lock()
        self._status = Status()

    def update_branch_sync_status(self, branch: str, state: SyncState, message: str) -> None:
        """Record an observation of a branch.

        The heartbeat time is refreshed on every observation; the transition
        time only when the state or the message changes.
        """
        with self._lock:
            now = self._clock()
            branch_status = self._status.find(branch)
            if branch_status is None:
                branch_status = BranchStatus(branch=branch)
                self._status.branches.append(branch_status)
            sync_status = branch_status.sync_status
            if sync_status is None:
                branch_status.sync_status = BranchSyncStatus(
                    status=state,
                    message=message,
                    last_heartbeat_time=now,
                    last_transition_time=now,
                )
                return
            if sync_status.status != state or sync_status.message != message:
                sync_status.status = state
                sync_status.message = message
                sync_status.last_transition_time = now
            sync_status.last_heartbeat_time = now

    def snapshot(self) -> Status:
        """Get a deep copy of the current statuses."""
        with self._lock:
            return self._status.model_copy(deep=True)

    async def get_status(self, configuration: Configuration, version_cache: VersionCache) -> Status:
        """Get the current statuses together with the prospective fix version of every versioned branch."""
        status = self.snapshot()
        for repository in configuration.repositories:
            for branch in repository.branches:
                if not branch.version:
                    continue
                try:
                    next_version = await version_cache.next_version(repository.owner, repository.repo, branch.version)
                except Exception as exc:
                    logger.error(
                        "Failed to get next version",
                        owner=repository.owner,
                        repo=repository.repo,
                        version=branch.version,
                        error=str(exc),
                    )
                    continue
                status.set_fix_version(
                    f"{repository.owner}/{repository.repo}:{branch.name}",
                    repository.jira.fix_version_prefix + next_version,
                )
        return status
