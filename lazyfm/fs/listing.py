"""Directory scanning and the mtime-validated listing cache."""

from __future__ import annotations

import os
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from ..errors import AccessError


@dataclass(frozen=True)
class DirectoryEntry:
    """One visible child of a directory, by bare name."""

    name: str
    is_dir: bool = False


Listing = tuple[DirectoryEntry, ...]


def is_hidden_name(name: str) -> bool:
    return name.startswith(".")


def sort_listing(entries: Iterable[DirectoryEntry]) -> Listing:
    """Sort directories first, then by case-insensitive name.

    The exact name breaks ties so ``README`` and ``readme`` keep a stable order.
    """
    return tuple(sorted(entries, key=lambda entry: (not entry.is_dir, entry.name.casefold(), entry.name)))


def scan_directory(directory: Path, show_hidden: bool) -> Listing:
    """Read ``directory`` once and return its sorted listing.

    Raises ``AccessError`` when the directory cannot be opened. Children whose
    type cannot be determined are listed as files.
    """
    entries: list[DirectoryEntry] = []
    try:
        with os.scandir(directory) as it:
            for child in it:
                name = child.name
                if not show_hidden and is_hidden_name(name):
                    continue
                try:
                    is_dir = child.is_dir()
                except OSError:
                    is_dir = False
                entries.append(DirectoryEntry(name=name, is_dir=is_dir))
    except OSError as exc:
        raise AccessError.from_os_error(directory, exc) from exc
    return sort_listing(entries)


def directory_mtime_ns(directory: Path) -> int:
    """Return ``st_mtime_ns`` for ``directory`` or raise ``AccessError``."""
    try:
        return int(os.stat(directory).st_mtime_ns)
    except OSError as exc:
        raise AccessError.from_os_error(directory, exc) from exc


def _normalize_directory(directory: Path) -> Path:
    """Make ``directory`` absolute without touching the filesystem.

    Symlinks are not resolved here; callers hand in paths that were resolved
    once when navigation started.
    """
    return directory if directory.is_absolute() else directory.absolute()


@dataclass(frozen=True)
class DirectoryCacheEntry:
    """Listing snapshot plus the directory mtime it was read at."""

    path: Path
    show_hidden: bool
    listing: Listing
    source_mtime_ns: int


class DirectoryCache:
    """Memoized sorted listings keyed by ``(directory, show_hidden)``.

    A cached listing is reused until the directory's mtime is strictly newer
    than the snapshot's, so a hit costs one ``stat`` call. Both the render
    thread and background loaders call into this, so the table is locked; the
    actual read happens outside the lock.
    """

    def __init__(
        self,
        read_directory: Callable[[Path, bool], Listing] = scan_directory,
        mtime_ns: Callable[[Path], int] = directory_mtime_ns,
    ) -> None:
        self._read_directory = read_directory
        self._mtime_ns = mtime_ns
        self._lock = threading.Lock()
        self._entries: dict[tuple[Path, bool], DirectoryCacheEntry] = {}

    def get_listing(self, directory: Path, show_hidden: bool) -> Listing:
        """Return the listing for ``directory``, re-reading only when it changed."""
        key = (_normalize_directory(directory), bool(show_hidden))
        current_mtime = self._mtime_ns(key[0])
        with self._lock:
            cached = self._entries.get(key)
        if cached is not None and not current_mtime > cached.source_mtime_ns:
            return cached.listing

        listing = self._read_directory(key[0], key[1])
        entry = DirectoryCacheEntry(
            path=key[0],
            show_hidden=key[1],
            listing=listing,
            source_mtime_ns=current_mtime,
        )
        with self._lock:
            previous = self._entries.get(key)
            # A concurrent reader may already have stored a newer snapshot.
            if previous is None or previous.source_mtime_ns <= current_mtime:
                self._entries[key] = entry
        return listing

    def cached_entry(self, directory: Path, show_hidden: bool) -> DirectoryCacheEntry | None:
        """Return the stored snapshot without touching the filesystem."""
        key = (_normalize_directory(directory), bool(show_hidden))
        with self._lock:
            return self._entries.get(key)

    def invalidate(self, directory: Path | None = None) -> None:
        """Drop one directory (both hidden-file variants) or the whole cache."""
        with self._lock:
            if directory is None:
                self._entries.clear()
                return
            normalized = _normalize_directory(directory)
            self._entries.pop((normalized, False), None)
            self._entries.pop((normalized, True), None)


__all__ = [
    "DirectoryEntry",
    "Listing",
    "is_hidden_name",
    "sort_listing",
    "scan_directory",
    "directory_mtime_ns",
    "DirectoryCacheEntry",
    "DirectoryCache",
]
