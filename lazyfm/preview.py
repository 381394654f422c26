"""Bounded file previews for the right-hand pane.

A preview is at most ``PREVIEW_MAX_LINES`` rows. ``bat`` does the work when it
is installed; otherwise the file head is read directly, highlighted with
pygments, and numbered like ``nl``. Failures come back as one sentinel row.
"""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.util import ClassNotFound

from .fs.metadata import EntryKind, MetadataCache

PREVIEW_MAX_LINES = 20
PREVIEW_MAX_BYTES = 1_000_000
BINARY_SNIFF_BYTES = 8192
PAGER_TIMEOUT_SECONDS = 2.0
PAGER_CANDIDATES: tuple[str, ...] = ("batcat", "bat")

TOO_LARGE_SENTINEL = "<File too large to preview>"
MISSING_SENTINEL = "<File does not exist>"
EMPTY_SENTINEL = "<Empty file>"
FAILED_SENTINEL = "<Failed to preview file>"
BINARY_SENTINEL = "<Binary file>"
LOADING_SENTINEL = "<Loading preview...>"


def read_text(path: Path) -> str:
    """Decode a file as UTF-8, then UTF-8 with BOM, then Latin-1."""
    raw = path.read_bytes()
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return raw.decode(encoding)
        except UnicodeDecodeError:
            continue
    return raw.decode("utf-8", errors="replace")


def number_lines(lines: list[str]) -> list[str]:
    """Number non-blank lines the way ``nl`` does by default."""
    out: list[str] = []
    number = 0
    for line in lines:
        if not line.strip():
            out.append(" " * 7)
            continue
        number += 1
        out.append(f"{number:>6}\t{line}")
    return out


def colorize(source: str, path: Path, style: str) -> str:
    """Highlight ``source`` with the pygments lexer guessed from ``path``."""
    try:
        lexer = get_lexer_for_filename(path.name, source)
    except ClassNotFound:
        lexer = TextLexer()
    return highlight(source, lexer, TerminalFormatter(style=style))


def find_pager(candidates: tuple[str, ...] = PAGER_CANDIDATES) -> str | None:
    """Return the first pager executable available on ``PATH``."""
    for candidate in candidates:
        resolved = shutil.which(candidate)
        if resolved is not None:
            return resolved
    return None


class PreviewGenerator:
    """Produce preview rows for files, cheapest check first.

    Besides the too-large, missing, empty and failed sentinels, files with a
    NUL byte in their first 8 KiB get ``<Binary file>`` and never reach the
    pager. That sentinel is an extra on top of the usual four.
    """

    def __init__(
        self,
        metadata: MetadataCache,
        pager: str | None = None,
        color: bool = True,
        style: str = "monokai",
        max_lines: int = PREVIEW_MAX_LINES,
        max_bytes: int = PREVIEW_MAX_BYTES,
        timeout_seconds: float = PAGER_TIMEOUT_SECONDS,
        run: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ) -> None:
        self._metadata = metadata
        self._pager = pager if pager is not None else find_pager()
        self._color = color
        self._style = style
        self.max_lines = max_lines
        self.max_bytes = max_bytes
        self._timeout_seconds = timeout_seconds
        self._run = run

    def pager_command(self, path: Path) -> list[str] | None:
        if self._pager is None:
            return None
        return [
            self._pager,
            "-n",
            "--style=plain",
            f"--color={'always' if self._color else 'never'}",
            "--paging=never",
            "--wrap=never",
            str(path),
        ]

    def _run_pager(self, path: Path) -> list[str]:
        command = self.pager_command(path)
        if command is None:
            return []
        try:
            proc = self._run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                check=False,
                timeout=self._timeout_seconds,
            )
        except (OSError, subprocess.SubprocessError):
            return []
        if proc.returncode != 0:
            return []
        text = proc.stdout.decode("utf-8", errors="replace")
        return text.splitlines()[: self.max_lines]

    def _fallback(self, path: Path) -> list[str]:
        try:
            source = read_text(path)
        except OSError:
            return []
        head = source.splitlines()[: self.max_lines]
        if not head:
            return []
        if self._color:
            head = colorize("\n".join(head) + "\n", path, self._style).splitlines()
        return number_lines(head)

    def _is_binary(self, path: Path) -> bool:
        try:
            with path.open("rb") as handle:
                return b"\0" in handle.read(BINARY_SNIFF_BYTES)
        except OSError:
            return False

    def _explain_empty(self, path: Path) -> list[str]:
        try:
            size = path.stat().st_size
        except FileNotFoundError:
            return [MISSING_SENTINEL]
        except OSError:
            return [FAILED_SENTINEL]
        if size == 0:
            return [EMPTY_SENTINEL]
        return [FAILED_SENTINEL]

    def preview(self, path: Path) -> list[str]:
        """Return at most ``max_lines`` rows previewing ``path``."""
        metadata = self._metadata.lookup(path)
        if metadata.kind == EntryKind.UNKNOWN and not path.exists():
            return [MISSING_SENTINEL]
        if metadata.size is not None and metadata.size > self.max_bytes:
            return [TOO_LARGE_SENTINEL]
        if self._is_binary(path):
            return [BINARY_SENTINEL]

        lines = self._run_pager(path)
        if not lines:
            lines = self._fallback(path)
        if not lines:
            return self._explain_empty(path)
        return lines[: self.max_lines]


class PreviewCache:
    """Single-slot preview memo keyed by path."""

    def __init__(self, build: Callable[[Path], list[str]]) -> None:
        self._build = build
        self._path: Path | None = None
        self._lines: list[str] = []

    @property
    def cached_path(self) -> Path | None:
        return self._path

    def lines_for(self, path: Path) -> list[str]:
        if path != self._path:
            self._lines = self._build(path)
            self._path = path
        return self._lines

    def clear(self) -> None:
        self._path = None
        self._lines = []


__all__ = [
    "PREVIEW_MAX_LINES",
    "PREVIEW_MAX_BYTES",
    "TOO_LARGE_SENTINEL",
    "MISSING_SENTINEL",
    "EMPTY_SENTINEL",
    "FAILED_SENTINEL",
    "BINARY_SENTINEL",
    "LOADING_SENTINEL",
    "read_text",
    "number_lines",
    "colorize",
    "find_pager",
    "PreviewGenerator",
    "PreviewCache",
]
