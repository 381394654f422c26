from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from lazyfm.todos import Todo, TodoList, load_todos, save_todos


class TodoListTests(unittest.TestCase):
    def test_add_strips_and_ignores_blank(self) -> None:
        todos = TodoList()
        self.assertTrue(todos.add("  water plants "))
        self.assertFalse(todos.add("   "))
        self.assertEqual(todos.items, [Todo("water plants")])

    def test_cursor_follows_new_item_and_clamps(self) -> None:
        todos = TodoList([Todo("a"), Todo("b")])
        todos.add("c")
        self.assertEqual(todos.cursor, 2)
        todos.move_cursor(5)
        self.assertEqual(todos.cursor, 2)
        todos.remove(2)
        self.assertEqual(todos.cursor, 1)
        todos.move_cursor(-9)
        self.assertEqual(todos.cursor, 0)

    def test_toggle_and_remove_out_of_range(self) -> None:
        todos = TodoList([Todo("a")])
        self.assertTrue(todos.toggle(0))
        self.assertTrue(todos.items[0].completed)
        self.assertFalse(todos.toggle(3))
        self.assertFalse(todos.remove(-1))
        self.assertTrue(todos.remove(0))
        self.assertEqual(len(todos), 0)
        self.assertEqual(todos.cursor, 0)


class TodoPersistenceTests(unittest.TestCase):
    def test_save_then_load(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "nested" / "todos.json"
            todos = TodoList([Todo("a"), Todo("b", completed=True)])
            self.assertTrue(save_todos(todos, path))

            data = json.loads(path.read_text(encoding="utf-8"))
            self.assertEqual(data, [{"description": "a", "completed": False}, {"description": "b", "completed": True}])
            self.assertEqual(load_todos(path).items, todos.items)

    def test_missing_file_is_empty_list(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual(len(load_todos(Path(tmp) / "none.json")), 0)

    def test_corrupt_file_is_logged_and_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "todos.json"
            path.write_text("{not json", encoding="utf-8")
            with self.assertLogs("lazyfm.todos", level="WARNING"):
                self.assertEqual(len(load_todos(path)), 0)

    def test_malformed_items_are_skipped(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "todos.json"
            path.write_text(
                json.dumps([{"description": "ok", "completed": "yes"}, {"description": ""}, 7, {"completed": True}]),
                encoding="utf-8",
            )
            self.assertEqual(load_todos(path).items, [Todo("ok", completed=False)])

    def test_failed_save_returns_false(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "file"
            blocker.write_text("", encoding="utf-8")
            with self.assertLogs("lazyfm.todos", level="WARNING"):
                self.assertFalse(save_todos(TodoList([Todo("a")]), blocker / "todos.json"))


if __name__ == "__main__":
    unittest.main()
