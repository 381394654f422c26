"""ANSI-aware width measurement and clipping.

Preview rows from ``bat`` and pygments carry SGR sequences; these helpers fit
such rows into a pane without counting escapes as visible columns.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterator

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_WIDTH = 8
RESET_SGR = "\033[0m"


def char_display_width(ch: str, col: int) -> int:
    """Columns ``ch`` occupies when printed at visual column ``col``."""
    if ch == "\t":
        return TAB_WIDTH - col % TAB_WIDTH
    if ch < " " or ch == "\x7f" or unicodedata.combining(ch):
        return 0
    return 2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1


def _segments(text: str) -> Iterator[tuple[bool, str]]:
    """Yield ``(is_escape, chunk)`` pairs in order."""
    pos = 0
    for match in ANSI_ESCAPE_RE.finditer(text):
        if match.start() > pos:
            yield False, text[pos : match.start()]
        yield True, match.group(0)
        pos = match.end()
    if pos < len(text):
        yield False, text[pos:]


def display_width(text: str) -> int:
    width = 0
    for is_escape, chunk in _segments(text):
        if is_escape:
            continue
        for ch in chunk:
            width += char_display_width(ch, width)
    return width


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Cut a styled line down to ``max_cols`` visible columns.

    Escapes pass through untouched. Tabs are expanded to spaces and other
    control characters are dropped so the cursor stays on its row.
    """
    if max_cols <= 0:
        return ""
    pieces: list[str] = []
    used = 0
    for is_escape, chunk in _segments(text):
        if is_escape:
            pieces.append(chunk)
            continue
        for ch in chunk:
            if used >= max_cols:
                return "".join(pieces)
            width = char_display_width(ch, used)
            if ch == "\t":
                width = min(width, max_cols - used)
                pieces.append(" " * width)
            elif width == 0 and not unicodedata.combining(ch):
                continue
            elif used + width > max_cols:
                return "".join(pieces)
            else:
                pieces.append(ch)
            used += width
    return "".join(pieces)


def fit_ansi_line(text: str, width: int) -> str:
    """Clip ``text`` to ``width`` columns and pad the rest with spaces."""
    clipped = clip_ansi_line(text, width)
    padding = max(0, width - display_width(clipped))
    reset = RESET_SGR if "\x1b" in clipped else ""
    return f"{clipped}{reset}{' ' * padding}"


__all__ = [
    "ANSI_ESCAPE_RE",
    "char_display_width",
    "display_width",
    "clip_ansi_line",
    "fit_ansi_line",
]
