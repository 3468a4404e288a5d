"""Headless tests for the interactive selector.

A scripted backend feeds key tokens and records rendered views, so the
session's cursor, windowing, and exit paths run without a terminal.
"""

from __future__ import annotations

import unittest
from contextlib import contextmanager
from pathlib import Path

from cargo_select.errors import NoMatch, UserCancelled
from cargo_select.selector import SelectorSession, SelectorView, select_target, window_bounds
from cargo_select.targets import Binary, Example, Test

ROOT = Path("ws")


def _bin(name: str) -> Binary:
    return Binary(name=name, source_path=ROOT / "src" / "bin" / f"{name}.rs", workspace_root=ROOT)


class _ScriptedBackend:
    def __init__(self, events: list[str], sizes: list[tuple[int, int]] | None = None) -> None:
        self.events = list(events)
        self.sizes = list(sizes or [(80, 24)])
        self.frames: list[SelectorView] = []
        self.entered = 0
        self.exited = 0

    @contextmanager
    def session(self):
        self.entered += 1
        try:
            yield
        finally:
            self.exited += 1

    def current_size(self) -> tuple[int, int]:
        if len(self.sizes) > 1:
            return self.sizes.pop(0)
        return self.sizes[0]

    def next_event(self) -> str:
        if not self.events:
            raise OSError("script exhausted")
        return self.events.pop(0)

    def render_frame(self, view: SelectorView) -> None:
        self.frames.append(view)


class SelectorRunTests(unittest.TestCase):
    def test_empty_target_list_renders_empty_and_enter_is_no_match(self) -> None:
        backend = _ScriptedBackend(["ENTER_CR"])

        with self.assertRaises(NoMatch):
            select_target([], backend)

        self.assertEqual(backend.frames[0].rows, [])
        self.assertEqual(backend.frames[0].filtered_count, 0)
        self.assertEqual((backend.entered, backend.exited), (1, 1))

    def test_enter_without_pattern_selects_last_target(self) -> None:
        targets = [_bin("a"), _bin("b"), _bin("c")]

        self.assertEqual(select_target(targets, _ScriptedBackend(["ENTER_CR"])), targets[-1])

    def test_typed_pattern_selects_best_match(self) -> None:
        alpha = _bin("alpha")
        targets = [alpha, _bin("beta"), Example("alphabet", ROOT / "examples" / "alphabet.rs", ROOT)]
        backend = _ScriptedBackend(list("alpha") + ["ENTER_LF"])

        chosen = select_target(targets, backend)

        self.assertEqual(chosen, alpha)
        self.assertEqual(backend.frames[-1].pattern, "alpha")
        self.assertEqual(backend.frames[-1].filtered_count, 2)

    def test_enter_with_no_matches_raises_no_match(self) -> None:
        backend = _ScriptedBackend(list("zzz") + ["ENTER_CR"])

        with self.assertRaises(NoMatch) as ctx:
            select_target([_bin("alpha")], backend)

        self.assertEqual(ctx.exception.pattern, "zzz")

    def test_single_character_inside_a_name_keeps_the_target(self) -> None:
        handler = Example("request_handler", Path("crates/http-server-core/examples/request_handler.rs"), ROOT)
        session = SelectorSession([handler, _bin("beta")])
        session.handle_key("q")

        view = session.view(80, 24)

        self.assertEqual(view.filtered_count, 1)
        self.assertEqual(session.handle_key("ENTER_CR"), handler)

    def test_escape_and_ctrl_c_cancel_and_release_terminal(self) -> None:
        for key in ("ESC", "CTRL_C"):
            with self.subTest(key=key):
                backend = _ScriptedBackend(["x", key])

                with self.assertRaises(UserCancelled):
                    select_target([_bin("x")], backend)

                self.assertEqual(backend.exited, 1)

    def test_backend_failure_still_releases_terminal(self) -> None:
        backend = _ScriptedBackend([])

        with self.assertRaises(OSError):
            select_target([_bin("x")], backend)

        self.assertEqual(backend.exited, 1)

    def test_resize_and_mouse_only_trigger_rerender(self) -> None:
        targets = [_bin(name) for name in "abcdef"]
        backend = _ScriptedBackend(["MOUSE", "RESIZE", "ENTER_CR"], sizes=[(80, 24), (80, 24), (40, 3)])

        chosen = select_target(targets, backend)

        self.assertEqual(chosen, targets[-1])
        self.assertEqual(len(backend.frames), 3)
        self.assertEqual(len(backend.frames[-1].rows), 2)
        self.assertEqual(backend.frames[-1].columns, 40)


class CursorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.targets = [_bin(f"t{i}") for i in range(5)]
        self.session = SelectorSession(self.targets)

    def test_cursor_one_selects_last_and_cursor_len_selects_first(self) -> None:
        self.assertEqual(self.session.handle_key("ENTER_CR"), self.targets[4])
        for _ in range(4):
            self.session.handle_key("UP")
        self.assertEqual(self.session.state.cursor, 5)
        self.assertEqual(self.session.handle_key("ENTER_CR"), self.targets[0])

    def test_up_moves_toward_the_start_of_the_list(self) -> None:
        self.session.handle_key("UP")
        self.session.handle_key("UP")

        self.assertEqual(self.session.selected_index(5), 2)
        self.assertEqual(self.session.handle_key("ENTER_CR"), self.targets[2])

    def test_cursor_is_clamped_to_filtered_length(self) -> None:
        for _ in range(20):
            self.session.handle_key("UP")
        self.assertEqual(self.session.state.cursor, 5)

        for _ in range(20):
            self.session.handle_key("DOWN")
        self.assertEqual(self.session.state.cursor, 1)

    def test_cursor_reclamps_when_filter_shrinks_view(self) -> None:
        for _ in range(4):
            self.session.handle_key("UP")
        for ch in "t3":
            self.session.handle_key(ch)

        view = self.session.view(80, 24)

        self.assertEqual(view.filtered_count, 1)
        self.assertEqual(self.session.state.cursor, 1)
        self.assertEqual(view.selected_row, 0)

    def test_down_saturates_at_zero_while_view_is_empty(self) -> None:
        session = SelectorSession([])
        session.handle_key("DOWN")
        session.handle_key("DOWN")

        self.assertEqual(session.state.cursor, 0)


class PatternEditingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = SelectorSession([_bin("x")])

    def _type(self, text: str) -> None:
        for ch in text:
            self.session.handle_key(ch)

    def test_backspace_drops_last_character_and_is_noop_when_empty(self) -> None:
        self._type("ab")
        self.session.handle_key("BACKSPACE")
        self.assertEqual(self.session.state.pattern, "a")
        self.session.handle_key("BACKSPACE")
        self.session.handle_key("BACKSPACE")
        self.assertEqual(self.session.state.pattern, "")

    def test_word_delete_pops_through_the_trailing_space(self) -> None:
        self._type("serve http")
        self.session.handle_key("CTRL_W")
        self.assertEqual(self.session.state.pattern, "serve")
        self.session.handle_key("ALT_BACKSPACE")
        self.assertEqual(self.session.state.pattern, "")

    def test_word_delete_on_trailing_space_removes_only_the_space(self) -> None:
        self._type("a b ")
        self.session.handle_key("CTRL_W")

        self.assertEqual(self.session.state.pattern, "a b")

    def test_unknown_tokens_do_not_edit_pattern(self) -> None:
        self._type("a")
        for key in ("LEFT", "RIGHT", "UNKNOWN", "TAB"):
            self.session.handle_key(key)

        self.assertEqual(self.session.state.pattern, "a")

    def test_non_ascii_characters_are_appended(self) -> None:
        self._type("é")

        self.assertEqual(self.session.state.pattern, "é")


class WindowingTests(unittest.TestCase):
    def test_window_is_bottom_anchored_suffix(self) -> None:
        for count in range(0, 8):
            for lines in range(1, 8):
                start, padding = window_bounds(count, lines)
                visible = count - start
                with self.subTest(count=count, lines=lines):
                    self.assertEqual(visible, min(count, lines - 1))
                    self.assertEqual(padding + visible, lines - 1)

    def test_view_shows_suffix_and_marks_selection(self) -> None:
        targets = [_bin(f"t{i}") for i in range(5)]
        session = SelectorSession(targets)

        short = session.view(80, 4)
        tall = session.view(80, 10)

        self.assertEqual(short.rows, targets[2:])
        self.assertEqual(short.padding, 0)
        self.assertEqual(short.selected_row, 2)
        self.assertEqual(tall.rows, targets)
        self.assertEqual(tall.padding, 4)
        self.assertEqual(tall.selected_row, 4)

    def test_selection_above_window_is_not_marked(self) -> None:
        targets = [_bin(f"t{i}") for i in range(5)]
        session = SelectorSession(targets)
        for _ in range(4):
            session.handle_key("UP")

        view = session.view(80, 3)

        self.assertEqual(view.rows, targets[3:])
        self.assertIsNone(view.selected_row)

    def test_view_reports_counts(self) -> None:
        session = SelectorSession([_bin("alpha"), _bin("beta"), Test("alpha_test", Path("lib.rs"))])
        for ch in "alpha":
            session.handle_key(ch)

        view = session.view(80, 24)

        self.assertEqual(view.total_count, 3)
        self.assertEqual(view.filtered_count, len(view.rows))
        self.assertNotIn(_bin("beta"), view.rows)


if __name__ == "__main__":
    unittest.main()
