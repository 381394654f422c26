"""Cursor/listing state machine driving the browser.

``Navigator`` is the single owner of ``NavigationState``. Directory reads go
through ``BackgroundLoader``, both for the listing and for the preview of a
selected directory; everything else (search, file previews, metadata) is
synchronous and kept cheap by the caches. A listing source is one of:

* ``NORMAL``  - the cached listing of ``current_dir`` (or one placeholder row
  when the directory is empty or unreadable),
* ``LOADING`` - a read is outstanding or debounced; a placeholder row is shown
  and directory-entering actions are ignored,
* ``SEARCH``  - name matches of the last search query.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..config import DEFAULT_FILE_SGR, DIRECTORY_SGR, OpenerConfig
from ..errors import AccessError, OpenerError
from ..fs.listing import DirectoryCache, DirectoryEntry, Listing
from ..fs.metadata import EntryKind, MetadataCache
from ..opener import FileOpener
from ..preview import LOADING_SENTINEL, PREVIEW_MAX_LINES, PreviewCache
from ..search import search_directory
from .loader import BackgroundLoader, LoadDebouncer, LoadHandle, LoadResult

logger = logging.getLogger(__name__)

LOADING_PLACEHOLDER = "<Loading...>"
EMPTY_PLACEHOLDER = "<Empty>"
NO_MATCHES_PLACEHOLDER = "<No matches>"
SPECIAL_FILE_SENTINEL = "<Not a regular file>"
PLACEHOLDER_SGR = "\033[2m"
STATUS_MESSAGE_SECONDS = 3.0


class ListingKind(Enum):
    NORMAL = "normal"
    LOADING = "loading"
    SEARCH = "search"


@dataclass(frozen=True)
class ListingSource:
    """Rows currently backing the file list."""

    kind: ListingKind
    entries: Listing = ()
    placeholder: str | None = None
    query: str = ""

    @classmethod
    def loading(cls) -> ListingSource:
        return cls(kind=ListingKind.LOADING, placeholder=LOADING_PLACEHOLDER)

    @classmethod
    def normal(cls, entries: Listing) -> ListingSource:
        return cls(kind=ListingKind.NORMAL, entries=entries, placeholder=None if entries else EMPTY_PLACEHOLDER)

    @classmethod
    def failed(cls, error: AccessError) -> ListingSource:
        return cls(kind=ListingKind.NORMAL, placeholder=error.placeholder())

    @classmethod
    def search(cls, entries: Listing, query: str) -> ListingSource:
        return cls(
            kind=ListingKind.SEARCH,
            entries=entries,
            placeholder=None if entries else NO_MATCHES_PLACEHOLDER,
            query=query,
        )

    @property
    def row_count(self) -> int:
        return len(self.entries) if self.entries else 1


@dataclass
class NavigationState:
    current_dir: Path
    cursor: int
    show_hidden: bool
    source: ListingSource


@dataclass(frozen=True)
class RowView:
    """One file-list row as the renderer should draw it."""

    text: str
    style: str
    is_dir: bool = False
    is_placeholder: bool = False


@dataclass(frozen=True)
class NavigationSnapshot:
    """Render-ready view of the navigator for one frame."""

    current_dir: Path
    rows: tuple[RowView, ...]
    cursor: int
    preview_lines: tuple[str, ...]
    show_hidden: bool
    mode: ListingKind
    query: str = ""
    status_message: str = ""


def _resolve_once(directory: Path) -> Path:
    """Canonicalize the start directory; later paths are derived from it."""
    try:
        return directory.resolve()
    except (OSError, RuntimeError):
        return directory.absolute()


class Navigator:
    """React to navigation events and keep the listing/preview consistent."""

    def __init__(
        self,
        start_dir: Path,
        *,
        directory_cache: DirectoryCache,
        metadata: MetadataCache,
        loader: BackgroundLoader,
        debouncer: LoadDebouncer,
        build_preview: Callable[[Path], list[str]],
        config: OpenerConfig,
        opener: FileOpener,
        show_hidden: bool = False,
        clock: Callable[[], float] = time.monotonic,
        preview_loader: BackgroundLoader | None = None,
    ) -> None:
        self.directory_cache = directory_cache
        self.metadata = metadata
        self.loader = loader
        self.preview_loader = (
            preview_loader if preview_loader is not None else BackgroundLoader(directory_cache.get_listing)
        )
        self.debouncer = debouncer
        self.config = config
        self.opener = opener
        self._build_file_preview = build_preview
        self._clock = clock
        self.previews = PreviewCache(self._build_preview)
        self.state = NavigationState(
            current_dir=_resolve_once(start_dir),
            cursor=0,
            show_hidden=show_hidden,
            source=ListingSource.loading(),
        )
        self.status_message = ""
        self.status_message_until = 0.0
        self._handle: LoadHandle | None = None
        self._handle_done = True
        self._select_after_load: str | None = None
        self._preview_handle: LoadHandle | None = None
        self._preview_result: LoadResult | None = None
        self._schedule_load()

    # -- background loading -------------------------------------------------

    @property
    def load_outstanding(self) -> bool:
        return self._handle is not None and not self._handle_done

    def _schedule_load(self) -> None:
        self.state.source = ListingSource.loading()
        self.debouncer.request(self.state.current_dir, self.state.show_hidden)
        self._submit_due_load()

    def _submit_due_load(self) -> None:
        request = self.debouncer.due(loading=self.load_outstanding)
        if request is None:
            return
        if self.state.source.kind != ListingKind.LOADING:
            return
        self._handle = self.loader.submit(request.target_dir, request.show_hidden)
        self._handle_done = False
        self.debouncer.mark_submitted()

    def _apply_load_result(self, result: LoadResult) -> bool:
        state = self.state
        if state.source.kind != ListingKind.LOADING:
            return False
        if result.target_dir != state.current_dir or result.show_hidden != state.show_hidden:
            return False

        if result.error is not None:
            state.source = ListingSource.failed(result.error)
        else:
            state.source = ListingSource.normal(result.listing)
        if self._select_after_load is not None:
            self._select_name(self._select_after_load)
            self._select_after_load = None
        self._clamp_cursor()
        return True

    def tick(self) -> bool:
        """Advance background work; return ``True`` when the view changed."""
        changed = False
        self._submit_due_load()
        handle = self._handle
        if handle is not None and not self._handle_done and self.loader.is_current(handle):
            result = self.loader.poll(handle)
            if result is not None:
                self._handle_done = True
                changed = self._apply_load_result(result)
        if self._poll_directory_preview():
            changed = True
        if self.status_message and self._clock() >= self.status_message_until:
            self.status_message = ""
            self.status_message_until = 0.0
            changed = True
        return changed

    def _poll_directory_preview(self) -> bool:
        handle = self._preview_handle
        if handle is None or not self.preview_loader.is_current(handle):
            return False
        result = self.preview_loader.poll(handle)
        if result is None:
            return False
        self._preview_handle = None
        # Only a directory still on screen gets its preview rebuilt.
        if result.show_hidden != self.state.show_hidden or self.previews.cached_path != result.target_dir:
            return False
        self._preview_result = result
        self.previews.clear()
        return True

    def _forget_directory_preview(self) -> None:
        self._preview_handle = None
        self._preview_result = None

    # -- cursor ---------------------------------------------------------------

    def _clamp_cursor(self) -> None:
        last = self.state.source.row_count - 1
        self.state.cursor = max(0, min(self.state.cursor, last))

    def _select_name(self, name: str) -> None:
        for idx, entry in enumerate(self.state.source.entries):
            if entry.name == name:
                self.state.cursor = idx
                return

    def move_cursor(self, delta: int) -> bool:
        """Move the cursor by ``delta`` rows, saturating at both ends."""
        before = self.state.cursor
        self.state.cursor = before + delta
        self._clamp_cursor()
        return self.state.cursor != before

    def move_to_top(self) -> bool:
        return self.move_cursor(-self.state.cursor)

    def move_to_bottom(self) -> bool:
        return self.move_cursor(self.state.source.row_count)

    def selected_entry(self) -> DirectoryEntry | None:
        """Return the entry under the cursor, or ``None`` for placeholder rows."""
        source = self.state.source
        if source.kind == ListingKind.LOADING:
            return None
        if 0 <= self.state.cursor < len(source.entries):
            return source.entries[self.state.cursor]
        return None

    def selected_path(self) -> Path | None:
        entry = self.selected_entry()
        if entry is None:
            return None
        return self.state.current_dir / entry.name

    # -- transitions ----------------------------------------------------------

    def _change_directory(self, target: Path, select: str | None = None) -> None:
        self.state.current_dir = target
        self.state.cursor = 0
        self._select_after_load = select
        self._schedule_load()

    def enter_selected(self) -> bool:
        """Descend into the selected entry when it is a directory."""
        target = self.selected_path()
        if target is None:
            return False
        if self.metadata.classify(target) != EntryKind.DIR:
            return False
        self._change_directory(target)
        return True

    def go_parent(self) -> bool:
        """Move to the parent directory, preselecting the one just left."""
        current = self.state.current_dir
        parent = current.parent
        if parent == current:
            return False
        self._change_directory(parent, select=current.name)
        return True

    def open_selected(self) -> bool:
        """Open the selected file; directories are entered instead."""
        target = self.selected_path()
        if target is None:
            return False
        kind = self.metadata.classify(target)
        if kind == EntryKind.DIR:
            return self.enter_selected()
        if kind != EntryKind.FILE:
            self.set_status(f"{target.name} is not a regular file")
            return False
        try:
            message = self.opener.open(target)
        except OpenerError as exc:
            logger.warning("cannot open %s: %s", target, exc)
            self.set_status(str(exc))
            return False
        self.set_status(message)
        return True

    def toggle_hidden(self) -> None:
        self.state.show_hidden = not self.state.show_hidden
        self.state.cursor = 0
        self._select_after_load = None
        self.previews.clear()
        self._forget_directory_preview()
        self._schedule_load()

    def start_search(self, query: str) -> None:
        """Replace the listing with name matches; an empty query restores it."""
        if query == "":
            self.clear_search()
            return
        self.state.cursor = 0
        try:
            matches = search_directory(self.directory_cache, self.state.current_dir, query, self.state.show_hidden)
        except AccessError as exc:
            self.state.source = ListingSource.failed(exc)
            return
        self.state.source = ListingSource.search(matches, query)

    def clear_search(self) -> bool:
        """Return from search results to the normal cached listing."""
        if self.state.source.kind == ListingKind.LOADING:
            return False
        self.state.cursor = 0
        try:
            listing = self.directory_cache.get_listing(self.state.current_dir, self.state.show_hidden)
        except AccessError as exc:
            self.state.source = ListingSource.failed(exc)
            return True
        self.state.source = ListingSource.normal(listing)
        return True

    def reload(self) -> None:
        """Forget cached data for the current directory and read it again."""
        selected = self.selected_entry()
        self.directory_cache.invalidate(self.state.current_dir)
        self.metadata.clear()
        self.previews.clear()
        self._forget_directory_preview()
        self.state.cursor = 0
        self._select_after_load = selected.name if selected is not None else None
        self._schedule_load()

    def set_status(self, message: str, seconds: float = STATUS_MESSAGE_SECONDS) -> None:
        self.status_message = message
        self.status_message_until = self._clock() + seconds

    # -- rendering ------------------------------------------------------------

    def _style_for(self, entry: DirectoryEntry) -> str:
        if entry.is_dir:
            return DIRECTORY_SGR
        return self.config.color_for(entry.name) or DEFAULT_FILE_SGR

    def _directory_preview(self, directory: Path) -> list[str]:
        """Preview a directory without reading it on the calling thread.

        A finished background read is used once. Otherwise a read is started
        and the last cached listing, if any, is shown until it arrives.
        """
        show_hidden = self.state.show_hidden
        result = self._preview_result
        self._preview_result = None
        if result is not None and result.target_dir == directory and result.show_hidden == show_hidden:
            if result.error is not None:
                return [result.error.placeholder()]
            return self._format_directory_preview(result.listing)

        handle = self._preview_handle
        if handle is None or handle.target_dir != directory or handle.show_hidden != show_hidden:
            self._preview_handle = self.preview_loader.submit(directory, show_hidden)
        cached = self.directory_cache.cached_entry(directory, show_hidden)
        if cached is None:
            return [LOADING_SENTINEL]
        return self._format_directory_preview(cached.listing)

    def _format_directory_preview(self, listing: Listing) -> list[str]:
        if not listing:
            return [EMPTY_PLACEHOLDER]
        lines: list[str] = []
        for entry in listing[:PREVIEW_MAX_LINES]:
            suffix = "/" if entry.is_dir else ""
            lines.append(f"{self._style_for(entry)}{entry.name}{suffix}\033[0m")
        return lines

    def _build_preview(self, path: Path) -> list[str]:
        kind = self.metadata.classify(path)
        if kind == EntryKind.DIR:
            return self._directory_preview(path)
        if kind == EntryKind.OTHER:
            return [SPECIAL_FILE_SENTINEL]
        return self._build_file_preview(path)

    def preview_lines(self) -> list[str]:
        if self.state.source.kind == ListingKind.LOADING:
            return [LOADING_SENTINEL]
        target = self.selected_path()
        if target is None:
            return []
        return self.previews.lines_for(target)

    def rows(self) -> tuple[RowView, ...]:
        source = self.state.source
        if not source.entries:
            return (RowView(text=source.placeholder or "", style=PLACEHOLDER_SGR, is_placeholder=True),)
        return tuple(
            RowView(
                text=f"{entry.name}/" if entry.is_dir else entry.name,
                style=self._style_for(entry),
                is_dir=entry.is_dir,
            )
            for entry in source.entries
        )

    def snapshot(self) -> NavigationSnapshot:
        return NavigationSnapshot(
            current_dir=self.state.current_dir,
            rows=self.rows(),
            cursor=self.state.cursor,
            preview_lines=tuple(self.preview_lines()),
            show_hidden=self.state.show_hidden,
            mode=self.state.source.kind,
            query=self.state.source.query,
            status_message=self.status_message,
        )


__all__ = [
    "LOADING_PLACEHOLDER",
    "EMPTY_PLACEHOLDER",
    "NO_MATCHES_PLACEHOLDER",
    "SPECIAL_FILE_SENTINEL",
    "ListingKind",
    "ListingSource",
    "NavigationState",
    "RowView",
    "NavigationSnapshot",
    "Navigator",
]
