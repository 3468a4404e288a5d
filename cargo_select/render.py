"""Frame composition for the selector screen.

``build_frame`` turns a ``SelectorView`` into one ANSI string: blank padding
rows, the bottom-anchored target rows, and the pattern line on the last row.
``render_frame`` writes it to the terminal in a single call.
"""

from __future__ import annotations

import os
import sys

from .ansi import clip_text, pad_text
from .selector import SelectorView
from .targets import Binary, Example, Target, display_string, kind_label
from .ui_theme import DEFAULT_THEME, UITheme

PROMPT = "> "


def _kind_style(target: Target, theme: UITheme) -> str:
    if isinstance(target, Binary):
        return theme.kind_binary
    if isinstance(target, Example):
        return theme.kind_example
    return theme.kind_test


def format_target_row(target: Target, width: int, selected: bool, theme: UITheme = DEFAULT_THEME) -> str:
    """Render one target row padded to ``width`` columns."""
    text = pad_text(display_string(target), width)
    if selected:
        return f"{theme.selected}{text}{theme.reset}"
    kind_len = min(len(kind_label(target)) + 1, len(text))
    style = _kind_style(target, theme)
    if not style:
        return text
    return f"{style}{text[:kind_len]}{theme.reset}{text[kind_len:]}"


def format_input_line(view: SelectorView, theme: UITheme = DEFAULT_THEME) -> tuple[str, int]:
    """Render the pattern line; also return the 1-based cursor column."""
    width = max(1, view.columns)
    counter = f" {view.filtered_count}/{view.total_count} "
    prompt, prompt_cols = clip_text(PROMPT + view.pattern, width)
    room = width - prompt_cols
    tail = counter if len(counter) <= room else ""
    gap = " " * (room - len(tail))
    line = f"{theme.prompt}{prompt}{gap}{theme.reset}{theme.count}{tail}{theme.reset}"
    return line, min(width, prompt_cols + 1)


def build_frame(view: SelectorView, theme: UITheme = DEFAULT_THEME) -> str:
    width = max(1, view.columns)
    out: list[str] = ["\033[H"]
    rows: list[str] = [""] * view.padding
    for idx, target in enumerate(view.rows):
        rows.append(format_target_row(target, width, idx == view.selected_row, theme))
    input_line, cursor_col = format_input_line(view, theme)
    rows.append(input_line)
    out.append("\r\n".join("\033[2K" + row for row in rows))
    out.append(f"\033[{max(1, view.lines)};{cursor_col}H\033[?25h")
    return "".join(out)


def render_frame(view: SelectorView, theme: UITheme = DEFAULT_THEME, fd: int | None = None) -> None:
    target_fd = sys.stdout.fileno() if fd is None else fd
    os.write(target_fd, build_frame(view, theme).encode("utf-8", errors="replace"))
