"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into normalized key tokens.
Handles ESC-sequence timing, UTF-8 characters, resize wakeups, and SGR
mouse events (reported as ``MOUSE`` tokens so the selector can ignore them).
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []

RESIZE = "RESIZE"

_CONTROL_KEYS: dict[bytes, str] = {
    b"\x03": "CTRL_C",
    b"\x17": "CTRL_W",
    b"\x08": "BACKSPACE",
    b"\x7f": "BACKSPACE",
    b"\r": "ENTER_CR",
    b"\n": "ENTER_LF",
    b"\x10": "UP",  # Ctrl+P
    b"\x0e": "DOWN",  # Ctrl+N
}

_ARROWS: dict[bytes, str] = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def _decode_utf8(fd: int, first: bytes) -> str:
    data = first
    for _ in range(_utf8_length(first[0]) - 1):
        nxt = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if nxt is None:
            break
        data += nxt
    return data.decode("utf-8", errors="replace")


def _drain(fd: int) -> None:
    try:
        while os.read(fd, 64):
            pass
    except BlockingIOError:
        pass


def _read_csi(fd: int) -> str:
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq in _ARROWS:
        return _ARROWS[seq]
    if seq == b"<":
        # SGR mouse: ESC [ < btn ; col ; row (M/m)
        count = 0
        while True:
            part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
            if part is None:
                return "ESC"
            if part in {b"M", b"m"}:
                return "MOUSE"
            count += 1
            if count > 64:
                return "ESC"
    # Other CSI sequences (Home, Delete, F-keys, modified arrows) end in a
    # byte in 0x40..0x7E; consume them whole and report an unhandled key.
    while not (0x40 <= seq[0] <= 0x7E):
        seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if seq is None:
            return "ESC"
    return "UNKNOWN"


def read_key(fd: int, resize_fd: int | None = None) -> str:
    """Block until the next key (or resize) and return its token.

    Printable input is returned as the character itself. When ``resize_fd``
    becomes readable first, its bytes are drained and ``RESIZE`` is returned.
    """
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        watched = [fd] if resize_fd is None else [fd, resize_fd]
        ready, _, _ = select.select(watched, [], [])
        if resize_fd is not None and resize_fd in ready:
            _drain(resize_fd)
            return RESIZE
        ch = os.read(fd, 1)
        if not ch:
            return ""

    if ch in _CONTROL_KEYS:
        return _CONTROL_KEYS[ch]

    if ch != b"\x1b":
        if ch[0] < 0x20:
            return "UNKNOWN"
        return _decode_utf8(fd, ch)

    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq in {b"\x7f", b"\x08"}:
        return "ALT_BACKSPACE"
    if seq == b"O":
        nxt = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if nxt is not None and nxt in _ARROWS:
            return _ARROWS[nxt]
        return "ESC"
    if seq != b"[":
        _PENDING_BYTES.append(seq)
        return "ESC"
    return _read_csi(fd)
