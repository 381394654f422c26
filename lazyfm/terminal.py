"""Terminal control helpers for the TUI session.

Owns raw-mode lifecycle and alternate-screen switching. ``released()`` hands
the terminal back in cooked mode for line prompts and foreground programs.
"""

from __future__ import annotations

import contextlib
import os
import signal
import sys
import termios
import tty
from collections.abc import Callable


class TerminalController:
    """Manage terminal mode transitions around the interactive loop."""

    def __init__(
        self,
        stdin_fd: int,
        stdout_fd: int,
        on_interrupt: Callable[[], object] | None = None,
    ) -> None:
        """Capture tty state and bind stdin/stdout file descriptors.

        ``on_interrupt`` runs when Ctrl-C cancels a line prompt.
        """
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self.on_interrupt = on_interrupt
        self._saved_tty_state = termios.tcgetattr(stdin_fd)
        self._tui_active = False

    @property
    def tui_active(self) -> bool:
        return self._tui_active

    def enable_tui_mode(self) -> None:
        """Enter raw alternate-screen mode with the cursor hidden."""
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        os.write(self.stdout_fd, b"\x1b[?1049h\x1b[?25l")
        self._tui_active = True

    def disable_tui_mode(self) -> None:
        """Restore the cursor, main screen buffer, and saved tty state."""
        os.write(self.stdout_fd, b"\x1b[?25h\x1b[?1049l")
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)
        self._tui_active = False

    @contextlib.contextmanager
    def raw_mode(self):
        """Context manager that brackets code with TUI enter/exit calls."""
        try:
            self.enable_tui_mode()
            yield
        finally:
            self.disable_tui_mode()

    @contextlib.contextmanager
    def released(self):
        """Temporarily leave TUI mode, re-entering it afterwards."""
        was_active = self._tui_active
        if was_active:
            self.disable_tui_mode()
        try:
            yield
        finally:
            if was_active:
                self.enable_tui_mode()

    def prompt_line(self, prompt: str, readline: Callable[[], str] | None = None) -> str | None:
        """Read one line in cooked mode; return ``None`` on EOF or Ctrl-C.

        The session's SIGINT handler only flags cancellation, and a blocked
        ``readline`` is retried after such a handler returns. While the prompt
        is up SIGINT raises ``KeyboardInterrupt`` instead; ``on_interrupt`` is
        then called and the previous handler restored.
        """
        reader = readline if readline is not None else sys.stdin.readline
        with self.released():
            os.write(self.stdout_fd, prompt.encode("utf-8", errors="replace"))
            previous_handler = signal.signal(signal.SIGINT, signal.default_int_handler)
            try:
                line = reader()
            except KeyboardInterrupt:
                if self.on_interrupt is not None:
                    self.on_interrupt()
                return None
            finally:
                if previous_handler is not None:
                    signal.signal(signal.SIGINT, previous_handler)
        if not line:
            return None
        return line.rstrip("\r\n")


__all__ = ["TerminalController"]
