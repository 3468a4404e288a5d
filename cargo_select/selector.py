"""Interactive fuzzy selector over a fixed target list.

The session re-derives the filtered, windowed view on every event and
drives a terminal backend until a target is chosen or the user gives up.

Cursor convention: ``cursor`` counts up from the end of the filtered list,
so ``cursor == 1`` is the last (best) match and the selected index is
``len(filtered) - cursor``. Whenever the filtered list is non-empty the
cursor is clamped to ``[1, len(filtered)]``.

A backend is any object providing:

- ``session()``: context manager owning the terminal for the whole loop;
- ``current_size() -> (columns, lines)``;
- ``next_event() -> str``: blocking read of the next key token;
- ``render_frame(view)``: draw one ``SelectorView``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from .errors import NoMatch, UserCancelled
from .fuzzy import Matcher, fuzzy_score, score_targets
from .input import RESIZE
from .targets import Target

logger = logging.getLogger(__name__)

ENTER_KEYS = frozenset({"ENTER_CR", "ENTER_LF"})
CANCEL_KEYS = frozenset({"ESC", "CTRL_C"})
WORD_DELETE_KEYS = frozenset({"CTRL_W", "ALT_BACKSPACE"})


@dataclass
class SessionState:
    pattern: str = ""
    cursor: int = 1


@dataclass(frozen=True)
class SelectorView:
    """Everything one frame needs, computed from session state and size."""

    pattern: str
    rows: list[Target]
    selected_row: int | None
    padding: int
    filtered_count: int
    total_count: int
    columns: int
    lines: int


def window_bounds(filtered_count: int, lines: int) -> tuple[int, int]:
    """Return ``(start, padding)`` for a bottom-anchored window.

    The window is the suffix ``filtered[start:]`` of length
    ``min(filtered_count, lines - 1)``; ``padding`` blank rows sit above it so
    the list ends right above the input line.
    """
    list_rows = max(0, lines - 1)
    visible = min(filtered_count, list_rows)
    return filtered_count - visible, list_rows - visible


class SelectorSession:
    """Pattern buffer and cursor over a borrowed target list."""

    def __init__(self, targets: Sequence[Target], match: Matcher = fuzzy_score) -> None:
        self.targets = targets
        self.match = match
        self.state = SessionState()

    def filtered(self) -> list[Target]:
        """Targets matching the current pattern, best match last.

        An empty pattern shows every target in discovery order.
        """
        if not self.state.pattern:
            return list(self.targets)
        return score_targets(self.targets, self.state.pattern, self.match)

    def _clamp_cursor(self, filtered_count: int) -> None:
        if filtered_count > 0:
            self.state.cursor = max(1, min(filtered_count, self.state.cursor))

    def selected_index(self, filtered_count: int) -> int | None:
        if filtered_count <= 0:
            return None
        self._clamp_cursor(filtered_count)
        return filtered_count - self.state.cursor

    def view(self, columns: int, lines: int) -> SelectorView:
        filtered = self.filtered()
        count = len(filtered)
        start, padding = window_bounds(count, lines)
        selected = self.selected_index(count)
        selected_row = None
        if selected is not None and selected >= start:
            selected_row = selected - start
        return SelectorView(
            pattern=self.state.pattern,
            rows=filtered[start:],
            selected_row=selected_row,
            padding=padding,
            filtered_count=count,
            total_count=len(self.targets),
            columns=columns,
            lines=lines,
        )

    def _delete_word(self) -> None:
        pattern = self.state.pattern
        while pattern:
            removed = pattern[-1]
            pattern = pattern[:-1]
            if removed == " ":
                break
        self.state.pattern = pattern

    def handle_key(self, key: str) -> Target | None:
        """Apply one key token; return the chosen target when Enter selects one.

        Raises ``NoMatch`` on Enter with nothing to select and
        ``UserCancelled`` on Escape or Ctrl+C.
        """
        state = self.state
        if key in CANCEL_KEYS:
            raise UserCancelled()
        if key in ENTER_KEYS:
            filtered = self.filtered()
            index = self.selected_index(len(filtered))
            if index is None:
                raise NoMatch(state.pattern)
            return filtered[index]
        if key == "BACKSPACE":
            state.pattern = state.pattern[:-1]
        elif key in WORD_DELETE_KEYS:
            self._delete_word()
        elif key == "UP":
            state.cursor += 1
        elif key == "DOWN":
            state.cursor = max(0, state.cursor - 1)
        elif key == RESIZE or key.startswith("MOUSE"):
            pass
        elif len(key) == 1 and key.isprintable():
            state.pattern += key
        else:
            logger.debug("Ignoring key: %r", key)
            return None
        self._clamp_cursor(len(self.filtered()))
        return None

    def run(self, backend) -> Target:
        """Render, read, and dispatch events until a target is chosen.

        The backend's ``session()`` is held around the whole loop, so the
        terminal is restored before any result or exception reaches the caller.
        """
        with backend.session():
            while True:
                columns, lines = backend.current_size()
                backend.render_frame(self.view(columns, lines))
                chosen = self.handle_key(backend.next_event())
                if chosen is not None:
                    logger.info("Selected target: %s", chosen)
                    return chosen


def select_target(targets: Sequence[Target], backend, match: Matcher = fuzzy_score) -> Target:
    return SelectorSession(targets, match).run(backend)
