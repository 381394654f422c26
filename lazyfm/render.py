"""Frame composition for the two-column browser view.

Left column: current directory and the file list. Right column: preview of
the selected entry above the to-do panel. The bottom row is the status line.
Composition is pure; ``write_frame`` is the only function touching the tty.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .ansi import fit_ansi_line
from .runtime.navigation import ListingKind, NavigationSnapshot
from .todos import TodoList

HELP_HINT = "│ q quit  / search  . hidden  ⇥ to-dos"
DIVIDER = "\033[2m│\033[0m"
HEADER_SGR = "\033[1;38;5;81m"
TODO_DONE_SGR = "\033[2;38;5;250m"
FOCUS_FILES = "files"
FOCUS_TODOS = "todos"


@dataclass(frozen=True)
class FrameLayout:
    """Column widths and row budgets derived from the terminal size."""

    width: int
    height: int
    left_width: int
    right_width: int
    content_rows: int
    list_rows: int
    preview_rows: int
    todo_rows: int


def compute_layout(width: int, height: int, todo_count: int) -> FrameLayout:
    width = max(4, width)
    height = max(3, height)
    content_rows = height - 1
    left_width = max(1, width // 2)
    right_width = max(1, width - left_width - 1)
    # Header row plus up to one row per to-do, capped at a third of the pane.
    todo_rows = min(max(2, todo_count + 1), max(2, content_rows // 3))
    todo_rows = min(todo_rows, content_rows - 1)
    return FrameLayout(
        width=width,
        height=height,
        left_width=left_width,
        right_width=right_width,
        content_rows=content_rows,
        list_rows=max(1, content_rows - 1),
        preview_rows=max(0, content_rows - todo_rows - 1),
        todo_rows=todo_rows,
    )


def scroll_start(cursor: int, start: int, visible_rows: int, total_rows: int) -> int:
    """Return a window start that keeps ``cursor`` visible."""
    visible_rows = max(1, visible_rows)
    if cursor < start:
        start = cursor
    elif cursor >= start + visible_rows:
        start = cursor - visible_rows + 1
    return max(0, min(start, max(0, total_rows - visible_rows)))


def selected_with_ansi(text: str) -> str:
    """Apply reverse video without discarding existing ANSI colors."""
    if not text:
        return text
    return "\033[7m" + text.replace("\033[0m", "\033[0;7m") + "\033[0m"


def build_status_line(left_text: str, width: int, right_text: str = HELP_HINT) -> str:
    usable = max(1, width - 1)
    if usable <= len(right_text):
        return right_text[-usable:]
    left_limit = max(0, usable - len(right_text) - 1)
    left = left_text[:left_limit]
    gap = " " * (usable - len(left) - len(right_text))
    return f"{left}{gap}{right_text}"


def _status_text(snapshot: NavigationSnapshot, focus: str) -> str:
    if snapshot.status_message:
        return snapshot.status_message
    parts: list[str] = []
    if snapshot.mode == ListingKind.SEARCH:
        parts.append(f"search: {snapshot.query} (esc to clear)")
    elif snapshot.mode == ListingKind.LOADING:
        parts.append("loading…")
    parts.append(f"hidden {'on' if snapshot.show_hidden else 'off'}")
    if focus == FOCUS_TODOS:
        parts.append("to-dos: a add  x toggle  d delete")
    return "  ".join(parts)


def _left_column(snapshot: NavigationSnapshot, layout: FrameLayout, list_start: int, focus: str) -> list[str]:
    width = layout.left_width
    title = f"{HEADER_SGR} {snapshot.current_dir}\033[0m"
    column = [fit_ansi_line(title, width)]
    for offset in range(layout.list_rows):
        idx = list_start + offset
        if idx >= len(snapshot.rows):
            column.append(" " * width)
            continue
        row = snapshot.rows[idx]
        cell = fit_ansi_line(f"{row.style} {row.text}\033[0m", width)
        if idx == snapshot.cursor and focus == FOCUS_FILES and not row.is_placeholder:
            cell = selected_with_ansi(cell)
        column.append(cell)
    return column


def _todo_lines(todos: TodoList, rows: int, focus: str) -> list[str]:
    open_count = sum(1 for item in todos.items if not item.completed)
    lines = [f"{HEADER_SGR} To-do ({open_count} open)\033[0m"]
    item_rows = max(0, rows - 1)
    if not todos.items:
        if item_rows:
            lines.append(f"{TODO_DONE_SGR} <Nothing to do>\033[0m")
        return lines
    start = scroll_start(todos.cursor, 0, item_rows, len(todos.items))
    for idx in range(start, min(len(todos.items), start + item_rows)):
        item = todos.items[idx]
        marker = "[x]" if item.completed else "[ ]"
        text = f" {marker} {item.description}"
        if item.completed:
            text = f"{TODO_DONE_SGR}{text}\033[0m"
        if focus == FOCUS_TODOS and idx == todos.cursor:
            text = selected_with_ansi(text)
        lines.append(text)
    return lines


def _right_column(snapshot: NavigationSnapshot, todos: TodoList, layout: FrameLayout, focus: str) -> list[str]:
    width = layout.right_width
    column = [fit_ansi_line(f"{HEADER_SGR} Preview\033[0m", width)]
    for idx in range(layout.preview_rows):
        line = snapshot.preview_lines[idx] if idx < len(snapshot.preview_lines) else ""
        column.append(fit_ansi_line(line, width))
    todo_lines = _todo_lines(todos, layout.todo_rows, focus)
    for idx in range(layout.todo_rows):
        line = todo_lines[idx] if idx < len(todo_lines) else ""
        column.append(fit_ansi_line(line, width))
    return column[: layout.content_rows]


def render_frame(
    snapshot: NavigationSnapshot,
    todos: TodoList,
    width: int,
    height: int,
    list_start: int = 0,
    focus: str = FOCUS_FILES,
) -> str:
    """Compose one full-screen ANSI frame."""
    layout = compute_layout(width, height, len(todos))
    left = _left_column(snapshot, layout, list_start, focus)
    right = _right_column(snapshot, todos, layout, focus)
    out: list[str] = ["\033[H\033[J"]
    for row in range(layout.content_rows):
        left_cell = left[row] if row < len(left) else " " * layout.left_width
        right_cell = right[row] if row < len(right) else ""
        out.append(left_cell)
        out.append(DIVIDER)
        out.append(right_cell)
        out.append("\r\n")
    out.append("\033[7m")
    out.append(build_status_line(_status_text(snapshot, focus), layout.width))
    out.append("\033[0m")
    return "".join(out)


def write_frame(frame: str, fd: int) -> None:
    os.write(fd, frame.encode("utf-8", errors="replace"))


__all__ = [
    "FOCUS_FILES",
    "FOCUS_TODOS",
    "FrameLayout",
    "compute_layout",
    "scroll_start",
    "selected_with_ansi",
    "build_status_line",
    "render_frame",
    "write_frame",
]
