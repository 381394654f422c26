"""Raw-mode lifecycle and cooked-mode prompts."""

from __future__ import annotations

import os
import signal
import termios
import threading
import time
import unittest
from unittest import mock

from lazyfm.terminal import TerminalController


def _controller(on_interrupt=None) -> TerminalController:
    with mock.patch("lazyfm.terminal.termios.tcgetattr", return_value=[0]):
        return TerminalController(stdin_fd=0, stdout_fd=1, on_interrupt=on_interrupt)


class TerminalControllerTests(unittest.TestCase):
    def test_enable_and_disable_use_alternate_screen(self) -> None:
        saved_state = [1, 2, 3]
        with mock.patch("lazyfm.terminal.termios.tcgetattr", return_value=saved_state), mock.patch(
            "lazyfm.terminal.tty.setraw"
        ) as setraw_mock, mock.patch("lazyfm.terminal.os.write") as write_mock, mock.patch(
            "lazyfm.terminal.termios.tcsetattr"
        ) as setattr_mock:
            controller = TerminalController(stdin_fd=0, stdout_fd=1)
            controller.enable_tui_mode()
            self.assertTrue(controller.tui_active)
            controller.disable_tui_mode()

        setraw_mock.assert_called_once_with(0, termios.TCSAFLUSH)
        self.assertEqual(write_mock.call_args_list[0].args, (1, b"\x1b[?1049h\x1b[?25l"))
        self.assertEqual(write_mock.call_args_list[1].args, (1, b"\x1b[?25h\x1b[?1049l"))
        setattr_mock.assert_called_once_with(0, termios.TCSAFLUSH, saved_state)
        self.assertFalse(controller.tui_active)

    def test_raw_mode_restores_terminal_after_exception(self) -> None:
        controller = _controller()
        with mock.patch.object(controller, "enable_tui_mode") as enable_mock, mock.patch.object(
            controller, "disable_tui_mode"
        ) as disable_mock:
            with self.assertRaises(RuntimeError):
                with controller.raw_mode():
                    raise RuntimeError("boom")

        enable_mock.assert_called_once()
        disable_mock.assert_called_once()

    def test_released_only_toggles_active_session(self) -> None:
        controller = _controller()
        with mock.patch.object(controller, "enable_tui_mode") as enable_mock, mock.patch.object(
            controller, "disable_tui_mode"
        ) as disable_mock:
            with controller.released():
                pass
            enable_mock.assert_not_called()
            disable_mock.assert_not_called()

            controller._tui_active = True
            with controller.released():
                disable_mock.assert_called_once()
                enable_mock.assert_not_called()
            enable_mock.assert_called_once()

    def test_prompt_line(self) -> None:
        controller = _controller()
        with mock.patch("lazyfm.terminal.os.write") as write_mock:
            self.assertEqual(controller.prompt_line("Search: ", readline=lambda: "notes\n"), "notes")
            self.assertIsNone(controller.prompt_line("Search: ", readline=lambda: ""))

        self.assertEqual(write_mock.call_args_list[0].args, (1, b"Search: "))

    def test_prompt_line_interrupted(self) -> None:
        on_interrupt = mock.Mock()
        controller = _controller(on_interrupt)

        def interrupted() -> str:
            raise KeyboardInterrupt

        with mock.patch("lazyfm.terminal.os.write"):
            self.assertIsNone(controller.prompt_line("New to-do: ", readline=interrupted))
        on_interrupt.assert_called_once_with()

    def test_sigint_cancels_blocked_prompt_and_restores_handler(self) -> None:
        flagged = threading.Event()

        def flag_only(_signum, _frame) -> None:
            flagged.set()

        original = signal.signal(signal.SIGINT, flag_only)
        self.addCleanup(signal.signal, signal.SIGINT, original)

        read_fd, write_fd = os.pipe()
        reader = os.fdopen(read_fd, "r")
        writer = os.fdopen(write_fd, "w")
        self.addCleanup(reader.close)
        self.addCleanup(writer.close)

        def unblock() -> None:
            writer.write("typed anyway\n")
            writer.flush()

        interrupt = threading.Timer(0.2, os.kill, (os.getpid(), signal.SIGINT))
        fallback = threading.Timer(2.0, unblock)
        self.addCleanup(interrupt.cancel)
        self.addCleanup(fallback.cancel)

        on_interrupt = mock.Mock()
        controller = _controller(on_interrupt)
        with mock.patch("lazyfm.terminal.os.write"):
            started = time.monotonic()
            interrupt.start()
            fallback.start()
            result = controller.prompt_line("New to-do: ", readline=reader.readline)
            elapsed = time.monotonic() - started

        self.assertIsNone(result)
        self.assertLess(elapsed, 1.0)
        on_interrupt.assert_called_once_with()
        self.assertFalse(flagged.is_set())
        self.assertIs(signal.getsignal(signal.SIGINT), flag_only)


if __name__ == "__main__":
    unittest.main()
