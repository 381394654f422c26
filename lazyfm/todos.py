"""Persistent to-do list shown next to the file browser.

Stored as a JSON array of ``{"description", "completed"}`` objects. Loading
and saving are deliberately forgiving: a bad file yields an empty list and a
failed save is logged, so neither can end a browsing session.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_data_dir

from .config import APP_NAME

logger = logging.getLogger(__name__)

TODO_FILENAME = "todos.json"
DEFAULT_TODO_PATH = Path(user_data_dir(APP_NAME, appauthor=False)) / TODO_FILENAME


@dataclass
class Todo:
    description: str
    completed: bool = False


class TodoList:
    """Ordered to-dos plus the cursor used by the to-do panel."""

    def __init__(self, items: list[Todo] | None = None) -> None:
        self.items: list[Todo] = list(items or [])
        self.cursor = 0

    def __len__(self) -> int:
        return len(self.items)

    def _clamp_cursor(self) -> None:
        self.cursor = max(0, min(self.cursor, len(self.items) - 1))

    def move_cursor(self, delta: int) -> None:
        self.cursor += delta
        self._clamp_cursor()

    def add(self, description: str) -> bool:
        """Append a new open to-do; blank descriptions are ignored."""
        text = description.strip()
        if not text:
            return False
        self.items.append(Todo(description=text))
        self.cursor = len(self.items) - 1
        return True

    def toggle(self, index: int) -> bool:
        if not 0 <= index < len(self.items):
            return False
        item = self.items[index]
        item.completed = not item.completed
        return True

    def remove(self, index: int) -> bool:
        if not 0 <= index < len(self.items):
            return False
        del self.items[index]
        self._clamp_cursor()
        return True

    def to_json_data(self) -> list[dict[str, object]]:
        return [{"description": item.description, "completed": item.completed} for item in self.items]


def load_todos(path: Path = DEFAULT_TODO_PATH) -> TodoList:
    """Load to-dos from ``path``, skipping anything malformed."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return TodoList()
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable to-do file %s: %s", path, exc)
        return TodoList()
    if not isinstance(data, list):
        return TodoList()

    items: list[Todo] = []
    for raw in data:
        if not isinstance(raw, dict):
            continue
        description = raw.get("description")
        if not isinstance(description, str) or not description.strip():
            continue
        completed = raw.get("completed", False)
        items.append(Todo(description=description, completed=completed if isinstance(completed, bool) else False))
    return TodoList(items)


def save_todos(todos: TodoList, path: Path = DEFAULT_TODO_PATH) -> bool:
    """Write ``todos`` as pretty JSON; return ``False`` (and log) on failure."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(todos.to_json_data(), indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.warning("failed to save to-dos to %s: %s", path, exc)
        return False
    return True


__all__ = [
    "TODO_FILENAME",
    "DEFAULT_TODO_PATH",
    "Todo",
    "TodoList",
    "load_todos",
    "save_todos",
]
