"""Terminal control helpers for the selector session.

Owns raw-mode lifecycle, alternate-screen switching, mouse reporting, and
resize notification. Every acquisition is undone by ``raw_mode`` on exit.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import signal
import termios
import tty


class TerminalController:
    """Manage terminal mode transitions for one interactive session."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        """Capture tty state and bind stdin/stdout file descriptors."""
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)
        self._resize_read_fd: int | None = None
        self._resize_write_fd: int | None = None
        self._previous_winch_handler = None

    def enable_tui_mode(self) -> None:
        """Enter raw alternate-screen mode with mouse reporting enabled."""
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        # Enter alternate screen, hide cursor, enable SGR mouse reporting.
        os.write(self.stdout_fd, b"\x1b[?1049h\x1b[?25l\x1b[?1000h\x1b[?1006h")

    def disable_tui_mode(self) -> None:
        """Restore cooked mode, the main screen buffer, and the cursor."""
        try:
            os.write(self.stdout_fd, b"\x1b[?1000l\x1b[?1006l\x1b[?25h\x1b[?1049l")
        finally:
            termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    @property
    def resize_fd(self) -> int | None:
        """Read end of the self-pipe that becomes readable on SIGWINCH."""
        return self._resize_read_fd

    def _on_winch(self, _signum, _frame) -> None:
        if self._resize_write_fd is not None:
            try:
                os.write(self._resize_write_fd, b"R")
            except BlockingIOError:
                pass

    def install_resize_handler(self) -> None:
        read_fd, write_fd = os.pipe()
        os.set_blocking(read_fd, False)
        os.set_blocking(write_fd, False)
        self._resize_read_fd = read_fd
        self._resize_write_fd = write_fd
        self._previous_winch_handler = signal.signal(signal.SIGWINCH, self._on_winch)

    def remove_resize_handler(self) -> None:
        if self._resize_read_fd is None:
            return
        signal.signal(signal.SIGWINCH, self._previous_winch_handler or signal.SIG_DFL)
        self._previous_winch_handler = None
        for fd in (self._resize_read_fd, self._resize_write_fd):
            if fd is not None:
                os.close(fd)
        self._resize_read_fd = None
        self._resize_write_fd = None

    def size(self) -> tuple[int, int]:
        """Return ``(columns, lines)`` of the terminal."""
        term = shutil.get_terminal_size((80, 24))
        return term.columns, term.lines

    @contextlib.contextmanager
    def raw_mode(self):
        """Context manager that brackets code with TUI enter/exit calls."""
        self.install_resize_handler()
        try:
            try:
                self.enable_tui_mode()
                yield
            finally:
                self.disable_tui_mode()
        finally:
            self.remove_resize_handler()
