"""Unit tests for branch synchronization and periodic reconciliation."""

from unittest.mock import AsyncMock

import pytest

from ci_sync_bot.configuration.models import BranchReference, Configuration
from ci_sync_bot.github.exceptions import NonFastForwardError
from ci_sync_bot.synchronize.branches import BranchSynchronizer
from ci_sync_bot.synchronize.exceptions import BranchSyncError
from ci_sync_bot.synchronize.reconcile import run_reconciliation_pass
from ci_sync_bot.synchronize.status import StatusStore, SyncState

SOURCE = BranchReference(owner="org", repo="app", branch="master")
DESTINATION = BranchReference(owner="org", repo="app", branch="release")


def heads(shas: dict[str, str]) -> AsyncMock:
    """Return a get_ref_sha double resolving heads/<branch> references."""

    async def get_ref_sha(owner: str, repo: str, ref: str) -> str:
        return shas[ref]

    return AsyncMock(side_effect=get_ref_sha)


@pytest.mark.asyncio
async def test_sync_moves_destination_to_source_head(github: AsyncMock) -> None:
    """A destination behind its source is fast-forwarded without force."""
    github.get_ref_sha = heads({"heads/master": "new", "heads/release": "old"})
    store = StatusStore()

    await BranchSynchronizer(github, store).sync(DESTINATION, SOURCE)

    github.update_ref.assert_awaited_once_with("org", "app", "heads/release", "new", force=False)
    sync_status = store.snapshot().find("org/app:release").sync_status
    assert sync_status.status == SyncState.SYNCED
    assert sync_status.message == "synced from org/app:master, commit: new"


@pytest.mark.asyncio
async def test_sync_of_synced_branch_only_reads(github: AsyncMock) -> None:
    """Syncing twice performs no second update."""
    github.get_ref_sha = heads({"heads/master": "same", "heads/release": "same"})
    store = StatusStore()
    synchronizer = BranchSynchronizer(github, store)

    await synchronizer.sync(DESTINATION, SOURCE)
    await synchronizer.sync(DESTINATION, SOURCE)

    github.update_ref.assert_not_awaited()
    assert store.snapshot().find("org/app:release").sync_status.status == SyncState.SYNCED


@pytest.mark.asyncio
async def test_source_read_failure_records_error(github: AsyncMock) -> None:
    """A failure reading the source is recorded and raised."""
    github.get_ref_sha.side_effect = RuntimeError("not found")
    store = StatusStore()

    with pytest.raises(BranchSyncError, match="failed to get source ref: not found"):
        await BranchSynchronizer(github, store).sync(DESTINATION, SOURCE)

    sync_status = store.snapshot().find("org/app:release").sync_status
    assert sync_status.status == SyncState.ERROR
    assert sync_status.message == "failed to get source ref: not found"


@pytest.mark.asyncio
async def test_destination_read_failure_records_error(github: AsyncMock) -> None:
    """A failure reading the destination is recorded and raised."""
    github.get_ref_sha.side_effect = ["new", RuntimeError("not found")]

    with pytest.raises(BranchSyncError, match="failed to get destination ref: not found") as exc_info:
        await BranchSynchronizer(github, StatusStore()).sync(DESTINATION, SOURCE)

    assert exc_info.value.destination == DESTINATION
    github.update_ref.assert_not_awaited()


@pytest.mark.asyncio
async def test_diverged_destination_is_not_forced(github: AsyncMock) -> None:
    """A rejected non-fast-forward update leaves an Error status."""
    github.get_ref_sha = heads({"heads/master": "new", "heads/release": "diverged"})
    github.update_ref.side_effect = NonFastForwardError("org", "app", "heads/release", "Update is not a fast forward")
    store = StatusStore()

    with pytest.raises(BranchSyncError, match="failed to update org/app:release"):
        await BranchSynchronizer(github, store).sync(DESTINATION, SOURCE)

    assert store.snapshot().find("org/app:release").sync_status.status == SyncState.ERROR


@pytest.mark.asyncio
async def test_reconciliation_pass_syncs_every_pair_and_collects_failures(github: AsyncMock) -> None:
    """A failing pair does not stop the pass."""
    configuration = Configuration.model_validate(
        {
            "repositories": [
                {
                    "owner": "org",
                    "repo": "app",
                    "branches": [
                        {"name": "release", "syncFrom": {"branch": "master"}},
                        {"name": "broken", "syncFrom": {"branch": "missing"}},
                        {"name": "mirror", "syncFrom": {"owner": "upstream", "repo": "app", "branch": "main"}},
                    ],
                }
            ]
        }
    )

    async def get_ref_sha(owner: str, repo: str, ref: str) -> str:
        if ref == "heads/missing":
            raise RuntimeError("not found")
        return f"{owner}-{ref}"

    github.get_ref_sha = AsyncMock(side_effect=get_ref_sha)
    store = StatusStore()

    errors = await run_reconciliation_pass(configuration, BranchSynchronizer(github, store))

    assert [str(error.destination) for error in errors] == ["org/app:broken"]
    assert github.update_ref.await_count == 2
    github.update_ref.assert_any_await("org", "app", "heads/mirror", "upstream-heads/main", force=False)
    assert store.snapshot().find("org/app:release").sync_status.status == SyncState.SYNCED
