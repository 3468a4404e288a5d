"""Discover ``#[test]`` functions by scanning Rust source text.

Nothing is compiled or parsed: a test is a line that is exactly ``#[test]``
followed by a line starting with a ``fn`` declaration. Signatures that put
``fn`` and the name on different lines are skipped.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable, Iterator
from pathlib import Path

from .config import DEFAULT_SKIP_DIRS
from .targets import Test

logger = logging.getLogger(__name__)

SOURCE_SUFFIX = ".rs"
TEST_MARKER = "#[test]"
FN_DECL_RE = re.compile(r"^(?:pub(?:\([^)]*\))?\s+)?(?:async\s+)?fn\s+")


def name_from_signature(line: str) -> str | None:
    """Return the function name declared on ``line``, or ``None``.

    ``line`` must already be stripped. The name is everything between the
    ``fn`` keyword and the first ``(``.
    """
    match = FN_DECL_RE.match(line)
    if match is None:
        return None
    rest = line[match.end():]
    paren = rest.find("(")
    name = (rest if paren < 0 else rest[:paren]).strip()
    return name or None


def find_tests_in_lines(lines: Iterable[str], source_file: Path) -> list[Test]:
    found: list[Test] = []
    awaiting_signature = False
    for raw in lines:
        line = raw.strip()
        if awaiting_signature:
            awaiting_signature = False
            name = name_from_signature(line)
            if name is not None:
                logger.debug("Found test: %s", name)
                found.append(Test(name=name, source_file=source_file))
                continue
        if line == TEST_MARKER:
            awaiting_signature = True
    return found


def find_tests_in_file(path: Path) -> list[Test]:
    """Scan one source file; unreadable files log a warning and yield nothing."""
    logger.debug("Getting tests from file: %s", path)
    try:
        with path.open(encoding="utf-8", errors="replace") as handle:
            return find_tests_in_lines(handle, path)
    except OSError as exc:
        logger.warning("Skipping unreadable source file %s: %s", path, exc)
        return []


def _sorted_entries(directory: Path) -> Iterator[os.DirEntry]:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as exc:
        logger.warning("Skipping unreadable directory %s: %s", directory, exc)
        return iter(())
    return iter(entries)


def _is_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError:
        return False


def iter_source_files(root: Path, skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS) -> Iterator[Path]:
    """Yield ``.rs`` files under ``root`` depth-first in sorted name order.

    Directories named in ``skip_dirs`` are pruned. A subdirectory is walked
    completely before its later siblings are visited.
    """
    skipped = set(skip_dirs)
    stack = [_sorted_entries(root)]
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue
        if _is_dir(entry):
            if entry.name not in skipped:
                stack.append(_sorted_entries(Path(entry.path)))
        elif entry.name.endswith(SOURCE_SUFFIX):
            yield Path(entry.path)


def scan_tests(root: Path, skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS) -> list[Test]:
    """Return every test function found under ``root``, in walk order."""
    logger.debug("Getting tests recursively from path: %s", root)
    found: list[Test] = []
    for path in iter_source_files(root, skip_dirs):
        found.extend(find_tests_in_file(path))
    return found
