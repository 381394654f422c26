"""Key bindings for the file list and the to-do panel."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..render import FOCUS_FILES, FOCUS_TODOS
from ..todos import TodoList
from .navigation import ListingKind, Navigator

QUIT_KEYS = frozenset({"q", "CTRL_C"})
DEFAULT_PAGE_ROWS = 10


@dataclass(frozen=True)
class KeyComboBinding:
    """Mapping from one or more key tokens to a single action callback."""

    combos: tuple[str, ...]
    handler: Callable[[], object]


class KeyComboRegistry:
    """Small exact-match key dispatch table."""

    def __init__(self) -> None:
        self._handlers: dict[str, Callable[[], object]] = {}

    def register_bindings(self, *bindings: KeyComboBinding) -> KeyComboRegistry:
        """Register bindings, later ones overwriting earlier combos."""
        for binding in bindings:
            for combo in binding.combos:
                self._handlers[combo] = binding.handler
        return self

    def dispatch(self, key: str) -> bool:
        """Invoke the handler bound to ``key``; return whether one existed."""
        handler = self._handlers.get(key)
        if handler is None:
            return False
        handler()
        return True


class BrowserKeyHandler:
    """Route key tokens to the navigator or the to-do list based on focus."""

    def __init__(
        self,
        navigator: Navigator,
        todos: TodoList,
        prompt_line: Callable[[str], str | None],
        persist_todos: Callable[[], object],
        page_rows: Callable[[], int] = lambda: DEFAULT_PAGE_ROWS,
    ) -> None:
        self.navigator = navigator
        self.todos = todos
        self.focus = FOCUS_FILES
        self._prompt_line = prompt_line
        self._persist_todos = persist_todos
        self._page_rows = page_rows

        nav = navigator
        self._file_keys = KeyComboRegistry().register_bindings(
            KeyComboBinding(("j", "DOWN"), lambda: nav.move_cursor(1)),
            KeyComboBinding(("k", "UP"), lambda: nav.move_cursor(-1)),
            KeyComboBinding(("PAGE_DOWN",), lambda: nav.move_cursor(max(1, self._page_rows()))),
            KeyComboBinding(("PAGE_UP",), lambda: nav.move_cursor(-max(1, self._page_rows()))),
            KeyComboBinding(("g", "HOME"), nav.move_to_top),
            KeyComboBinding(("G", "END"), nav.move_to_bottom),
            KeyComboBinding(("l", "RIGHT"), nav.enter_selected),
            KeyComboBinding(("h", "LEFT", "BACKSPACE"), nav.go_parent),
            KeyComboBinding(("ENTER",), nav.open_selected),
            KeyComboBinding((".",), nav.toggle_hidden),
            KeyComboBinding(("/",), self.prompt_search),
            KeyComboBinding(("ESC",), self.clear_search),
            KeyComboBinding(("CTRL_R",), nav.reload),
        )
        self._todo_keys = KeyComboRegistry().register_bindings(
            KeyComboBinding(("j", "DOWN"), lambda: todos.move_cursor(1)),
            KeyComboBinding(("k", "UP"), lambda: todos.move_cursor(-1)),
            KeyComboBinding(("x", " "), lambda: self._mutate_todos(todos.toggle(todos.cursor))),
            KeyComboBinding(("d",), lambda: self._mutate_todos(todos.remove(todos.cursor))),
            KeyComboBinding(("a",), self.prompt_new_todo),
            KeyComboBinding(("ESC",), self.toggle_focus),
        )

    def toggle_focus(self) -> None:
        self.focus = FOCUS_TODOS if self.focus == FOCUS_FILES else FOCUS_FILES

    def prompt_search(self) -> None:
        query = self._prompt_line("Search: ")
        if query is None:
            return
        self.navigator.start_search(query.strip())

    def clear_search(self) -> None:
        if self.navigator.state.source.kind == ListingKind.SEARCH:
            self.navigator.clear_search()

    def prompt_new_todo(self) -> None:
        description = self._prompt_line("New to-do: ")
        if description is None:
            return
        self._mutate_todos(self.todos.add(description))

    def _mutate_todos(self, changed: bool) -> None:
        if changed:
            self._persist_todos()

    def handle(self, key: str) -> bool:
        """Handle one key token; return ``True`` when the app should quit."""
        if key in QUIT_KEYS:
            return True
        if key == "TAB":
            self.toggle_focus()
            return False
        registry = self._todo_keys if self.focus == FOCUS_TODOS else self._file_keys
        registry.dispatch(key)
        return False


__all__ = [
    "QUIT_KEYS",
    "KeyComboBinding",
    "KeyComboRegistry",
    "BrowserKeyHandler",
]
