"""Exception taxonomy for the browser engine.

Only ``ConfigError`` is fatal, and only before the interactive loop starts.
Everything else is turned into placeholder rows or status messages.
"""

from __future__ import annotations

import errno
from pathlib import Path


class LazyFMError(Exception):
    """Base class for all lazyfm errors."""


class ConfigError(LazyFMError):
    """Opener configuration is missing or malformed."""


class AccessError(LazyFMError):
    """A directory could not be listed or stat'ed."""

    def __init__(self, path: Path, reason: str, errno_value: int | None = None) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
        self.errno = errno_value

    @classmethod
    def from_os_error(cls, path: Path, exc: OSError) -> AccessError:
        """Wrap an ``OSError`` raised while touching ``path``."""
        return cls(path, exc.strerror or str(exc), exc.errno)

    def placeholder(self) -> str:
        """Return the single listing row shown in place of the directory."""
        if self.errno in {errno.EACCES, errno.EPERM}:
            return "<Permission denied>"
        if self.errno in {errno.ENOENT, errno.ENOTDIR}:
            return "<Directory not found>"
        return "<Unreadable directory>"


class OpenerError(LazyFMError):
    """A file could not be handed to its configured opener."""


__all__ = [
    "LazyFMError",
    "ConfigError",
    "AccessError",
    "OpenerError",
]
