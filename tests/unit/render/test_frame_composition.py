from __future__ import annotations

import unittest
from pathlib import Path

from lazyfm.ansi import ANSI_ESCAPE_RE
from lazyfm.render import (
    FOCUS_TODOS,
    build_status_line,
    compute_layout,
    render_frame,
    scroll_start,
    selected_with_ansi,
)
from lazyfm.runtime.navigation import ListingKind, NavigationSnapshot, RowView
from lazyfm.todos import Todo, TodoList


def _snapshot(**overrides) -> NavigationSnapshot:
    values = dict(
        current_dir=Path("/tmp/x"),
        rows=(
            RowView(text="sub/", style="\033[1;34m", is_dir=True),
            RowView(text="a.txt", style=""),
            RowView(text="b.txt", style=""),
        ),
        cursor=1,
        preview_lines=("     1\thello",),
        show_hidden=False,
        mode=ListingKind.NORMAL,
    )
    values.update(overrides)
    return NavigationSnapshot(**values)


def _plain_rows(frame: str) -> list[str]:
    body = frame.removeprefix("\033[H\033[J")
    return [ANSI_ESCAPE_RE.sub("", row) for row in body.split("\r\n")]


class LayoutTests(unittest.TestCase):
    def test_columns_fill_width(self) -> None:
        layout = compute_layout(81, 24, todo_count=3)
        self.assertEqual(layout.left_width + 1 + layout.right_width, 81)
        self.assertEqual(layout.content_rows, 23)
        self.assertEqual(layout.todo_rows, 4)
        self.assertEqual(layout.preview_rows + layout.todo_rows + 1, layout.content_rows)

    def test_todo_panel_is_capped(self) -> None:
        layout = compute_layout(80, 12, todo_count=50)
        self.assertEqual(layout.todo_rows, 3)

    def test_scroll_start_keeps_cursor_visible(self) -> None:
        self.assertEqual(scroll_start(0, 0, 5, 20), 0)
        self.assertEqual(scroll_start(7, 0, 5, 20), 3)
        self.assertEqual(scroll_start(2, 3, 5, 20), 2)
        self.assertEqual(scroll_start(19, 18, 5, 20), 15)
        self.assertEqual(scroll_start(0, 4, 5, 3), 0)


class RenderFrameTests(unittest.TestCase):
    def test_frame_shows_listing_preview_and_todos(self) -> None:
        todos = TodoList([Todo("ship it"), Todo("done", completed=True)])
        frame = render_frame(_snapshot(), todos, 60, 12)
        rows = _plain_rows(frame)

        self.assertTrue(frame.startswith("\033[H\033[J"))
        self.assertEqual(len(rows), 12)
        self.assertIn("/tmp/x", rows[0])
        self.assertIn("Preview", rows[0])
        self.assertIn("sub/", rows[1])
        self.assertIn("hello", rows[1])
        self.assertTrue(any("To-do (1 open)" in row for row in rows))
        self.assertTrue(any("[ ] ship it" in row for row in rows))
        self.assertTrue(any("[x] done" in row for row in rows))
        self.assertIn("hidden off", rows[-1])

    def test_selected_row_is_reversed(self) -> None:
        frame = render_frame(_snapshot(), TodoList(), 60, 12)
        self.assertIn("\033[7m", frame.split("\r\n")[2])
        self.assertNotIn("\033[7m", frame.split("\r\n")[1])

    def test_placeholder_row_is_not_highlighted(self) -> None:
        snapshot = _snapshot(
            rows=(RowView(text="<Loading...>", style="\033[2m", is_placeholder=True),),
            cursor=0,
            preview_lines=(),
            mode=ListingKind.LOADING,
        )
        frame = render_frame(snapshot, TodoList(), 60, 8)
        row = frame.split("\r\n")[1]
        self.assertIn("<Loading...>", row)
        self.assertNotIn("\033[7m", row)
        self.assertIn("loading", _plain_rows(frame)[-1])

    def test_empty_todo_panel(self) -> None:
        rows = _plain_rows(render_frame(_snapshot(), TodoList(), 60, 12))
        self.assertTrue(any("<Nothing to do>" in row for row in rows))

    def test_status_line_variants(self) -> None:
        search = _plain_rows(render_frame(_snapshot(mode=ListingKind.SEARCH, query="txt"), TodoList(), 70, 8))
        self.assertIn("search: txt", search[-1])

        message = _plain_rows(render_frame(_snapshot(status_message="Opened b.txt with vim"), TodoList(), 70, 8))
        self.assertIn("Opened b.txt with vim", message[-1])

        todo_focus = _plain_rows(render_frame(_snapshot(), TodoList(), 90, 8, focus=FOCUS_TODOS))
        self.assertIn("a add", todo_focus[-1])

    def test_wide_preview_lines_are_clipped(self) -> None:
        snapshot = _snapshot(preview_lines=("x" * 500,))
        rows = _plain_rows(render_frame(snapshot, TodoList(), 40, 8))
        for row in rows[:-1]:
            self.assertEqual(len(row), 40)


class HelperTests(unittest.TestCase):
    def test_status_line_fits_width(self) -> None:
        line = build_status_line("left", 60)
        self.assertEqual(len(line), 59)
        self.assertTrue(line.startswith("left"))
        self.assertEqual(build_status_line("left", 5, right_text="abcdef"), "cdef")

    def test_selected_with_ansi_keeps_reverse_after_reset(self) -> None:
        self.assertEqual(selected_with_ansi("a\033[0mb"), "\033[7ma\033[0;7mb\033[0m")
        self.assertEqual(selected_with_ansi(""), "")


if __name__ == "__main__":
    unittest.main()
