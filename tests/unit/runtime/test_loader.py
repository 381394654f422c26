"""Tests for background directory loads and load debouncing."""

from __future__ import annotations

import threading
import time
import unittest
from pathlib import Path

from lazyfm.errors import AccessError
from lazyfm.fs.listing import DirectoryEntry
from lazyfm.runtime.loader import BackgroundLoader, LoadDebouncer


def _wait_for_result(loader: BackgroundLoader, handle, timeout_seconds: float = 2.0):
    deadline = time.monotonic() + timeout_seconds
    while time.monotonic() < deadline:
        result = loader.poll(handle)
        if result is not None:
            return result
        time.sleep(0.005)
    return None


class _Clock:
    def __init__(self, now: float = 50.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class BackgroundLoaderTests(unittest.TestCase):
    def test_submit_reads_off_thread_and_delivers_once(self) -> None:
        caller = threading.current_thread()
        worker_threads: list[threading.Thread] = []

        def get_listing(directory: Path, show_hidden: bool):
            worker_threads.append(threading.current_thread())
            return (DirectoryEntry(directory.name),)

        loader = BackgroundLoader(get_listing)
        handle = loader.submit(Path("/data/photos"), False)

        result = _wait_for_result(loader, handle)
        self.assertIsNotNone(result)
        self.assertEqual(result.listing, (DirectoryEntry("photos"),))
        self.assertIsNone(result.error)
        self.assertIsNot(worker_threads[0], caller)
        self.assertIsNone(loader.poll(handle))

    def test_poll_returns_nothing_before_completion(self) -> None:
        release = threading.Event()

        def get_listing(_directory: Path, _show_hidden: bool):
            release.wait(timeout=2.0)
            return ()

        loader = BackgroundLoader(get_listing)
        handle = loader.submit(Path("/slow"), False)
        self.assertIsNone(loader.poll(handle))
        release.set()
        self.assertIsNotNone(_wait_for_result(loader, handle))

    def test_newer_submission_supersedes_older(self) -> None:
        a_started = threading.Event()
        release_a = threading.Event()
        finished: list[str] = []

        def get_listing(directory: Path, _show_hidden: bool):
            if directory.name == "a":
                a_started.set()
                release_a.wait(timeout=2.0)
            finished.append(directory.name)
            return (DirectoryEntry(f"in-{directory.name}"),)

        loader = BackgroundLoader(get_listing)
        handle_a = loader.submit(Path("/a"), False)
        self.assertTrue(a_started.wait(timeout=2.0))
        handle_b = loader.submit(Path("/b"), False)

        self.assertFalse(loader.is_current(handle_a))
        self.assertTrue(loader.is_current(handle_b))

        observed = []
        result_b = _wait_for_result(loader, loader.latest)
        observed.append(result_b.listing)
        release_a.set()

        deadline = time.monotonic() + 2.0
        while "a" not in finished and time.monotonic() < deadline:
            time.sleep(0.005)
        self.assertIn("a", finished)
        self.assertIs(loader.latest, handle_b)
        self.assertIsNone(loader.poll(loader.latest))
        self.assertEqual(observed, [(DirectoryEntry("in-b"),)])

    def test_access_error_is_delivered_as_result(self) -> None:
        def get_listing(directory: Path, _show_hidden: bool):
            raise AccessError(directory, "Permission denied", 13)

        loader = BackgroundLoader(get_listing)
        handle = loader.submit(Path("/root/secret"), True)
        result = _wait_for_result(loader, handle)

        self.assertIsNotNone(result)
        self.assertEqual(result.listing, ())
        self.assertIsNotNone(result.error)
        self.assertEqual(result.error.placeholder(), "<Permission denied>")
        self.assertTrue(result.show_hidden)


class LoadDebouncerTests(unittest.TestCase):
    def test_first_request_is_due_immediately(self) -> None:
        debouncer = LoadDebouncer(clock=_Clock())
        debouncer.request(Path("/a"), False)
        request = debouncer.due(loading=False)
        self.assertEqual(request.target_dir, Path("/a"))
        self.assertIsNone(debouncer.pending)

    def test_requests_inside_loading_window_collapse_to_latest(self) -> None:
        clock = _Clock()
        debouncer = LoadDebouncer(clock=clock)
        debouncer.request(Path("/a"), False)
        debouncer.due(loading=False)
        debouncer.mark_submitted()

        clock.now += 0.05
        debouncer.request(Path("/b"), False)
        debouncer.request(Path("/c"), False)
        self.assertIsNone(debouncer.due(loading=True))

        clock.now += 0.06
        request = debouncer.due(loading=True)
        self.assertEqual(request.target_dir, Path("/c"))

    def test_idle_window_is_longer_than_loading_window(self) -> None:
        clock = _Clock()
        debouncer = LoadDebouncer(clock=clock)
        debouncer.mark_submitted()
        debouncer.request(Path("/a"), True)

        clock.now += 0.2
        self.assertIsNone(debouncer.due(loading=False))
        self.assertIsNotNone(debouncer.pending)
        clock.now += 0.11
        self.assertEqual(debouncer.due(loading=False).target_dir, Path("/a"))

    def test_due_without_request_is_none(self) -> None:
        self.assertIsNone(LoadDebouncer(clock=_Clock()).due(loading=False))


if __name__ == "__main__":
    unittest.main()
