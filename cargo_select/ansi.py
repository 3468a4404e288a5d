"""Display-width helpers for selector rows.

Target labels contain tabs and may contain wide characters. Rows are
expanded and clipped to terminal cells before any styling is applied.
"""

from __future__ import annotations

import unicodedata

TAB_STOP = 8


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next 8-column stop, combining marks consume no columns,
    and East Asian wide/fullwidth characters consume two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def clip_text(text: str, max_cols: int) -> tuple[str, int]:
    """Expand tabs and trim ``text`` to at most ``max_cols`` display columns.

    Returns the clipped text and the number of columns it occupies. Control
    characters other than tab are dropped so they cannot move the cursor.
    """
    if max_cols <= 0 or not text:
        return "", 0

    out: list[str] = []
    col = 0
    for ch in text:
        if ch != "\t" and unicodedata.category(ch) == "Cc":
            continue
        w = char_display_width(ch, col)
        if col + w > max_cols:
            if ch == "\t":
                out.append(" " * (max_cols - col))
                col = max_cols
            break
        out.append(" " * w if ch == "\t" else ch)
        col += w
    return "".join(out), col


def pad_text(text: str, width: int) -> str:
    """Clip ``text`` to ``width`` columns and pad the remainder with spaces."""
    clipped, used = clip_text(text, width)
    return clipped + " " * max(0, width - used)
