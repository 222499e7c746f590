"""Cache of release tags used to compute the next version of a release stream.

Tags named vMAJOR.MINOR.PATCH are grouped by their MAJOR.MINOR stream. The
next version of a stream is one patch above the highest existing tag, or
the first patch (MAJOR.MINOR.0) when the stream has no tags yet.
"""

import bisect
import threading

import structlog

from ci_sync_bot.github.abc import GitHubClientBase
from ci_sync_bot.utils.constants import REF_VERSION_PATTERN, RELEASE_TAG_REF_PREFIX

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class PatchStream:
    """Patch numbers observed for one release stream."""

    def __init__(self) -> None:
        """Initialize an empty stream."""
        # Always sorted ascending and duplicate-free.
        self._patch_versions: list[int] = []

    @property
    def patch_versions(self) -> tuple[int, ...]:
        """The observed patch numbers, in ascending order."""
        return tuple(self._patch_versions)

    def add(self, patch: int) -> None:
        """Insert a patch number, keeping the sequence sorted; duplicates are ignored."""
        i = bisect.bisect_left(self._patch_versions, patch)
        if i < len(self._patch_versions) and self._patch_versions[i] == patch:
            return
        self._patch_versions.insert(i, patch)

    def next(self) -> int:
        """The patch number of the next release."""
        if not self._patch_versions:
            return 0
        return self._patch_versions[-1] + 1


class VersionCache:
    """Per-repository cache of release tags, populated lazily from GitHub."""

    def __init__(self, github: GitHubClientBase) -> None:
        """Initialize an empty cache reading tags through a GitHub client."""
        self.github = github
        # Guards _synced and _streams. Never held while awaiting a remote call.
        self._lock = threading.Lock()
        self._synced: dict[str, bool] = {}
        self._streams: dict[str, PatchStream] = {}

    @staticmethod
    def _repository_key(owner: str, repo: str) -> str:
        return f"{owner}/{repo}"

    @staticmethod
    def _stream_key(owner: str, repo: str, stream: str) -> str:
        return f"{owner}/{repo}:{stream}"

    def has_synced(self, owner: str, repo: str) -> bool:
        """Whether the tags of a repository have been fetched since the last invalidation."""
        with self._lock:
            return self._synced.get(self._repository_key(owner, repo), False)

    def invalidate(self) -> None:
        """Forget every tag and every synced flag; the next lookups fetch tags again."""
        with self._lock:
            self._synced = {}
            self._streams = {}
        logger.info("Invalidated version cache")

    def add_refs(self, owner: str, repo: str, refs: list[str]) -> None:
        """Merge release tag references into the cache and mark the repository as synced."""
        with self._lock:
            for ref in refs:
                match = REF_VERSION_PATTERN.match(ref)
                if match is None:
                    continue
                stream, patch = match.group(1), int(match.group(2))
                key = self._stream_key(owner, repo, stream)
                if key not in self._streams:
                    self._streams[key] = PatchStream()
                self._streams[key].add(patch)
            self._synced[self._repository_key(owner, repo)] = True

    async def _populate(self, owner: str, repo: str) -> None:
        logger.debug("Fetching release tags", owner=owner, repo=repo)
        refs = await self.github.list_matching_refs(owner, repo, RELEASE_TAG_REF_PREFIX)
        self.add_refs(owner, repo, refs)
        logger.debug("Fetched release tags", owner=owner, repo=repo, tag_count=len(refs))

    async def next_version(self, owner: str, repo: str, stream: str) -> str:
        """Get the next version of a release stream, e.g. 3.8.2 for the stream 3.8.

        Raises whatever the GitHub client raises when the tags cannot be
        listed; the repository then stays unsynced so that the next call
        fetches again.
        """
        if not self.has_synced(owner, repo):
            await self._populate(owner, repo)

        with self._lock:
            patch_stream = self._streams.get(self._stream_key(owner, repo, stream))
            next_patch = patch_stream.next() if patch_stream is not None else 0
        return f"{stream}.{next_patch}"
