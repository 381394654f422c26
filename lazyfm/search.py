"""Name search inside a single directory."""

from __future__ import annotations

from pathlib import Path

from .fs.listing import DirectoryCache, Listing


def search_directory(
    directory_cache: DirectoryCache,
    directory: Path,
    query: str,
    show_hidden: bool,
) -> Listing:
    """Return entries of ``directory`` whose name contains ``query``.

    Matching is a case-sensitive substring test on the bare name and does not
    recurse. An empty query returns the normal listing instead of matching
    everything. ``AccessError`` from the listing read propagates.
    """
    listing = directory_cache.get_listing(directory, show_hidden)
    if query == "":
        return listing
    return tuple(entry for entry in listing if query in entry.name)


__all__ = ["search_directory"]
