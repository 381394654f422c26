"""Wire caches, loader, navigator, and terminal into a running session."""

from __future__ import annotations

import logging
import shutil
import signal
import sys
import threading
from pathlib import Path

from ..config import OpenerConfig
from ..fs.listing import DirectoryCache
from ..fs.metadata import MetadataCache
from ..input import KeyReader
from ..opener import FileOpener
from ..preview import PreviewGenerator
from ..render import compute_layout
from ..terminal import TerminalController
from ..todos import DEFAULT_TODO_PATH, TodoList, load_todos, save_todos
from .keys import BrowserKeyHandler
from .loader import BackgroundLoader, LoadDebouncer
from .loop import RuntimeLoopTiming, run_main_loop
from .navigation import Navigator

logger = logging.getLogger(__name__)


def resolve_start_dir(fallback: Path, cwd_file: Path | None = None) -> Path:
    """Pick the start directory, preferring the one recorded in ``cwd_file``."""
    if cwd_file is not None and cwd_file.exists():
        try:
            recorded = Path(cwd_file.read_text(encoding="utf-8").strip())
        except OSError as exc:
            logger.warning("cannot read cwd file %s: %s", cwd_file, exc)
        else:
            if recorded.is_dir():
                return recorded.resolve()
            logger.warning("cwd file %s does not name a directory, using %s", cwd_file, fallback)
    return fallback.resolve()


def write_cwd_file(cwd_file: Path, directory: Path) -> bool:
    """Record the final directory for shell ``cd``-on-exit integration."""
    try:
        cwd_file.write_text(str(directory), encoding="utf-8")
    except OSError as exc:
        logger.warning("cannot write cwd file %s: %s", cwd_file, exc)
        return False
    return True


def build_navigator(
    start_dir: Path,
    config: OpenerConfig,
    opener: FileOpener,
    color: bool = True,
    show_hidden: bool = False,
) -> Navigator:
    """Construct a navigator with fresh caches and its own background loader."""
    directory_cache = DirectoryCache()
    metadata = MetadataCache()
    previews = PreviewGenerator(
        metadata,
        pager=config.pager,
        color=color,
        style=config.preview_style,
    )
    return Navigator(
        start_dir,
        directory_cache=directory_cache,
        metadata=metadata,
        loader=BackgroundLoader(directory_cache.get_listing),
        debouncer=LoadDebouncer(),
        build_preview=previews.preview,
        config=config,
        opener=opener,
        show_hidden=show_hidden,
    )


def viewport_rows(todos: TodoList) -> int:
    """Number of file rows visible in the current terminal, used as the page size."""
    size = shutil.get_terminal_size((80, 24))
    return compute_layout(size.columns, size.lines, len(todos)).list_rows


def run_browser(
    start_dir: Path,
    config: OpenerConfig,
    todo_path: Path = DEFAULT_TODO_PATH,
    color: bool = True,
    timing: RuntimeLoopTiming = RuntimeLoopTiming(),
) -> Path:
    """Run the interactive browser and return the directory it ended in.

    SIGINT only sets the loop's cancellation token, also when it cancels a
    line prompt. The previous handler is restored and the to-do list saved
    however the loop ends.
    """
    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    cancel = threading.Event()
    terminal = TerminalController(stdin_fd, stdout_fd, on_interrupt=cancel.set)
    opener = FileOpener(config, release_terminal=terminal.released)
    navigator = build_navigator(start_dir, config, opener, color=color)
    todos = load_todos(todo_path)
    key_handler = BrowserKeyHandler(
        navigator,
        todos,
        prompt_line=terminal.prompt_line,
        persist_todos=lambda: save_todos(todos, todo_path),
        page_rows=lambda: viewport_rows(todos),
    )
    reader = KeyReader(stdin_fd)

    def on_interrupt(_signum, _frame) -> None:
        cancel.set()

    previous_handler = signal.signal(signal.SIGINT, on_interrupt)
    try:
        run_main_loop(
            navigator,
            todos,
            key_handler,
            terminal,
            reader.read_key,
            cancel,
            timing=timing,
            stdout_fd=stdout_fd,
        )
    finally:
        signal.signal(signal.SIGINT, previous_handler)
        save_todos(todos, todo_path)
    return navigator.state.current_dir


__all__ = [
    "resolve_start_dir",
    "write_cwd_file",
    "build_navigator",
    "viewport_rows",
    "run_browser",
]
