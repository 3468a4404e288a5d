"""Logging setup for the command-line entrypoint.

Level comes from ``CARGO_SELECT_LOG`` (default ``WARNING``). While the
selector owns the terminal, records are held in memory and replayed to
stderr once the screen has been restored.
"""

from __future__ import annotations

import contextlib
import logging
import logging.handlers
import os
import sys
from collections.abc import Iterator

LOG_ENV_VAR = "CARGO_SELECT_LOG"
DEFAULT_LEVEL = logging.WARNING
LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
ROOT_LOGGER_NAME = "cargo_select"
BUFFER_CAPACITY = 10_000


def parse_level(value: str | None) -> int:
    """Map a level name or number to a ``logging`` level, falling back to WARNING."""
    if not value:
        return DEFAULT_LEVEL
    stripped = value.strip()
    if stripped.isdigit():
        return int(stripped)
    level = logging.getLevelName(stripped.upper())
    return level if isinstance(level, int) else DEFAULT_LEVEL


def init_logging(stream=None) -> logging.Handler:
    """Attach a single stderr handler to the package logger and return it."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(parse_level(os.environ.get(LOG_ENV_VAR)))
    logger.propagate = False
    return handler


class ReplayBufferHandler(logging.handlers.BufferingHandler):
    """Keep records in memory until ``replay`` hands them to ``target``.

    ``shouldFlush`` only reports full capacity; once full, the oldest record is
    dropped instead of writing mid-frame.
    """

    def __init__(self, target: logging.Handler, capacity: int = BUFFER_CAPACITY) -> None:
        super().__init__(capacity)
        self.target = target

    def flush(self) -> None:
        self.acquire()
        try:
            if len(self.buffer) >= self.capacity:
                del self.buffer[0]
        finally:
            self.release()

    def replay(self) -> None:
        self.acquire()
        try:
            for record in self.buffer:
                self.target.handle(record)
            self.buffer.clear()
        finally:
            self.release()


@contextlib.contextmanager
def buffered_logging() -> Iterator[ReplayBufferHandler | None]:
    """Route package log records into memory for the duration of the block."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    handlers = list(logger.handlers)
    if not handlers:
        yield None
        return
    buffer = ReplayBufferHandler(handlers[0])
    for handler in handlers:
        logger.removeHandler(handler)
    logger.addHandler(buffer)
    try:
        yield buffer
    finally:
        logger.removeHandler(buffer)
        for handler in handlers:
            logger.addHandler(handler)
        buffer.replay()
