"""Main interactive loop.

Each iteration advances background loads, redraws when the frame changed,
and waits for at most one key with a bounded timeout so the cancellation
token is observed even without keyboard input.
"""

from __future__ import annotations

import os
import shutil
import threading
from collections.abc import Callable
from dataclasses import dataclass

from ..render import compute_layout, render_frame, scroll_start, write_frame
from ..todos import TodoList
from .keys import BrowserKeyHandler
from .navigation import Navigator

INPUT_TIMEOUT_MS = 100


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    input_timeout_ms: int = INPUT_TIMEOUT_MS


def run_main_loop(
    navigator: Navigator,
    todos: TodoList,
    key_handler: BrowserKeyHandler,
    terminal,
    read_key: Callable[[int], str],
    cancel: threading.Event,
    timing: RuntimeLoopTiming = RuntimeLoopTiming(),
    stdout_fd: int | None = None,
    terminal_size: Callable[[tuple[int, int]], os.terminal_size] = shutil.get_terminal_size,
) -> None:
    """Run until a quit key is pressed or ``cancel`` is set."""
    out_fd = stdout_fd if stdout_fd is not None else terminal.stdout_fd
    list_start = 0
    last_frame: str | None = None

    with terminal.raw_mode():
        while not cancel.is_set():
            navigator.tick()
            term = terminal_size((80, 24))
            snapshot = navigator.snapshot()
            layout = compute_layout(term.columns, term.lines, len(todos))
            list_start = scroll_start(snapshot.cursor, list_start, layout.list_rows, len(snapshot.rows))
            frame = render_frame(
                snapshot,
                todos,
                term.columns,
                term.lines,
                list_start=list_start,
                focus=key_handler.focus,
            )
            if frame != last_frame:
                write_frame(frame, out_fd)
                last_frame = frame

            key = read_key(timing.input_timeout_ms)
            if cancel.is_set():
                break
            if key == "":
                continue
            if key_handler.handle(key):
                break
            # Prompts and foreground openers leave the alternate screen.
            last_frame = None


__all__ = ["INPUT_TIMEOUT_MS", "RuntimeLoopTiming", "run_main_loop"]
