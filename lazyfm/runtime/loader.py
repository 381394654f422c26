"""Background directory loading with latest-submission-wins semantics.

Every submission gets its own worker thread and its own one-slot queue. The
navigator only ever polls the newest handle, so a slow read for a directory
the user already left finishes in the background and is never looked at.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from queue import Empty, Queue

from ..errors import AccessError
from ..fs.listing import Listing

logger = logging.getLogger(__name__)

LOADING_DEBOUNCE_SECONDS = 0.1
IDLE_DEBOUNCE_SECONDS = 0.3


@dataclass(frozen=True)
class LoadResult:
    """Outcome of one background read: a listing or the error that stopped it."""

    target_dir: Path
    show_hidden: bool
    listing: Listing = ()
    error: AccessError | None = None


@dataclass(frozen=True)
class LoadHandle:
    """One submitted read plus the private channel its worker answers on."""

    request_id: int
    target_dir: Path
    show_hidden: bool
    channel: Queue[LoadResult] = field(compare=False, repr=False)


class BackgroundLoader:
    """Spawn listing reads off the render thread.

    ``get_listing`` is usually ``DirectoryCache.get_listing``; it may raise
    ``AccessError``, which is delivered as a result rather than re-raised.
    """

    def __init__(self, get_listing: Callable[[Path, bool], Listing]) -> None:
        self._get_listing = get_listing
        self._next_request_id = 1
        self._latest: LoadHandle | None = None

    @property
    def latest(self) -> LoadHandle | None:
        return self._latest

    def is_current(self, handle: LoadHandle) -> bool:
        return self._latest is not None and handle.request_id == self._latest.request_id

    def _worker(self, handle: LoadHandle) -> None:
        try:
            listing = self._get_listing(handle.target_dir, handle.show_hidden)
        except AccessError as exc:
            logger.info("directory load failed: %s", exc)
            result = LoadResult(target_dir=handle.target_dir, show_hidden=handle.show_hidden, error=exc)
        else:
            result = LoadResult(target_dir=handle.target_dir, show_hidden=handle.show_hidden, listing=listing)
        handle.channel.put(result)

    def submit(self, directory: Path, show_hidden: bool) -> LoadHandle:
        """Start reading ``directory`` in the background and return its handle."""
        handle = LoadHandle(
            request_id=self._next_request_id,
            target_dir=directory,
            show_hidden=bool(show_hidden),
            channel=Queue(maxsize=1),
        )
        self._next_request_id += 1
        self._latest = handle
        worker = threading.Thread(
            target=self._worker,
            args=(handle,),
            name=f"lazyfm-load-{handle.request_id}",
            daemon=True,
        )
        worker.start()
        return handle

    def poll(self, handle: LoadHandle) -> LoadResult | None:
        """Return the handle's result once available; never blocks.

        A result is handed out at most once.
        """
        try:
            return handle.channel.get_nowait()
        except Empty:
            return None


@dataclass(frozen=True)
class LoadRequest:
    """A directory load the navigator wants but has not submitted yet."""

    target_dir: Path
    show_hidden: bool


class LoadDebouncer:
    """Collapse bursts of directory changes into one submission.

    A request waits until ``loading_interval`` (while a load is outstanding)
    or ``idle_interval`` (otherwise) has elapsed since the previous
    submission; newer requests replace the waiting one.
    """

    def __init__(
        self,
        loading_interval: float = LOADING_DEBOUNCE_SECONDS,
        idle_interval: float = IDLE_DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.loading_interval = loading_interval
        self.idle_interval = idle_interval
        self._clock = clock
        self._pending: LoadRequest | None = None
        self._last_submit: float | None = None

    @property
    def pending(self) -> LoadRequest | None:
        return self._pending

    def request(self, target_dir: Path, show_hidden: bool) -> None:
        self._pending = LoadRequest(target_dir=target_dir, show_hidden=bool(show_hidden))

    def due(self, loading: bool) -> LoadRequest | None:
        """Return the pending request if its debounce window has passed."""
        if self._pending is None:
            return None
        if self._last_submit is not None:
            interval = self.loading_interval if loading else self.idle_interval
            if self._clock() - self._last_submit < interval:
                return None
        request = self._pending
        self._pending = None
        return request

    def mark_submitted(self) -> None:
        self._last_submit = self._clock()


__all__ = [
    "LOADING_DEBOUNCE_SECONDS",
    "IDLE_DEBOUNCE_SECONDS",
    "LoadResult",
    "LoadHandle",
    "BackgroundLoader",
    "LoadRequest",
    "LoadDebouncer",
]
