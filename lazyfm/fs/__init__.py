"""Filesystem-facing caches: per-path metadata and directory listings."""

from __future__ import annotations

from .listing import (
    DirectoryCache,
    DirectoryCacheEntry,
    DirectoryEntry,
    Listing,
    directory_mtime_ns,
    is_hidden_name,
    scan_directory,
    sort_listing,
)
from .metadata import METADATA_TTL_SECONDS, EntryKind, MetadataCache, PathMetadata

__all__ = [
    "DirectoryCache",
    "DirectoryCacheEntry",
    "DirectoryEntry",
    "Listing",
    "directory_mtime_ns",
    "is_hidden_name",
    "scan_directory",
    "sort_listing",
    "METADATA_TTL_SECONDS",
    "EntryKind",
    "MetadataCache",
    "PathMetadata",
]
