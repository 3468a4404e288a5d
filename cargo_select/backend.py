"""Real-terminal backend for ``SelectorSession``.

Binds the session's capability interface to raw-mode stdin/stdout.
"""

from __future__ import annotations

from .input import read_key
from .render import render_frame
from .selector import SelectorView
from .terminal import TerminalController
from .ui_theme import DEFAULT_THEME, UITheme


class TerminalBackend:
    def __init__(self, stdin_fd: int, stdout_fd: int, theme: UITheme = DEFAULT_THEME) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self.theme = theme
        self.controller = TerminalController(stdin_fd, stdout_fd)

    def session(self):
        return self.controller.raw_mode()

    def current_size(self) -> tuple[int, int]:
        return self.controller.size()

    def next_event(self) -> str:
        key = read_key(self.stdin_fd, self.controller.resize_fd)
        if key == "":
            raise EOFError("terminal input closed")
        return key

    def render_frame(self, view: SelectorView) -> None:
        render_frame(view, self.theme, self.stdout_fd)
