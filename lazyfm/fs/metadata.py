"""Short-lived per-path metadata cache.

Rendering classifies every visible row on every frame; this cache bounds that
to one ``stat`` per path per TTL window. A path whose type changes inside the
window may be reported stale until its entry expires.
"""

from __future__ import annotations

import os
import stat as stat_module
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

METADATA_TTL_SECONDS = 5.0


class EntryKind(Enum):
    """Coarse filesystem object kind."""

    FILE = "file"
    DIR = "dir"
    OTHER = "other"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class PathMetadata:
    """Observed kind and byte size (files only) for one path."""

    kind: EntryKind
    size: int | None = None


@dataclass(frozen=True)
class _MetadataCacheEntry:
    metadata: PathMetadata
    fetched_at: float


def _metadata_from_stat(st: os.stat_result) -> PathMetadata:
    if stat_module.S_ISDIR(st.st_mode):
        return PathMetadata(kind=EntryKind.DIR)
    if stat_module.S_ISREG(st.st_mode):
        return PathMetadata(kind=EntryKind.FILE, size=int(st.st_size))
    return PathMetadata(kind=EntryKind.OTHER)


class MetadataCache:
    """TTL cache of ``PathMetadata`` keyed by path.

    Expired entries are purged lazily at the start of every lookup, so the
    cache only grows between sweeps.
    """

    def __init__(
        self,
        ttl_seconds: float = METADATA_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        stat: Callable[[Path], os.stat_result] = os.stat,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._stat = stat
        self._entries: dict[Path, _MetadataCacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _purge_expired(self, now: float) -> None:
        expired = [path for path, entry in self._entries.items() if now - entry.fetched_at > self._ttl_seconds]
        for path in expired:
            del self._entries[path]

    def lookup(self, path: Path) -> PathMetadata:
        """Return cached metadata for ``path``, querying the filesystem on a miss.

        Any ``OSError`` maps to ``EntryKind.UNKNOWN``; that answer is cached
        too, so a vanished path is not re-stat'ed on every frame.
        """
        now = self._clock()
        self._purge_expired(now)
        cached = self._entries.get(path)
        if cached is not None:
            return cached.metadata

        try:
            metadata = _metadata_from_stat(self._stat(path))
        except OSError:
            metadata = PathMetadata(kind=EntryKind.UNKNOWN)
        self._entries[path] = _MetadataCacheEntry(metadata=metadata, fetched_at=now)
        return metadata

    def classify(self, path: Path) -> EntryKind:
        """Return ``FILE``, ``DIR``, ``OTHER`` or ``UNKNOWN`` for ``path``."""
        return self.lookup(path).kind

    def size(self, path: Path) -> int | None:
        """Return the cached byte size of a regular file, else ``None``."""
        return self.lookup(path).size

    def clear(self) -> None:
        self._entries.clear()


__all__ = [
    "METADATA_TTL_SECONDS",
    "EntryKind",
    "PathMetadata",
    "MetadataCache",
]
