"""Target datatypes shared by discovery, ranking, and dispatch.

``Target`` is a closed union of three frozen records. Per-kind behavior lives
in the module-level helpers below so every branch sits next to the others.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union

NAME_COLUMN_WIDTH = 30


@dataclass(frozen=True)
class Binary:
    """A ``[[bin]]`` product, declared or discovered under ``src/``."""

    name: str
    source_path: Path
    workspace_root: Path


@dataclass(frozen=True)
class Example:
    """An ``[[example]]`` product, declared or discovered under ``examples/``."""

    name: str
    source_path: Path
    workspace_root: Path


@dataclass(frozen=True)
class Test:
    """A ``#[test]`` function found by scanning source text."""

    # Keep pytest from collecting this dataclass when it is imported in tests.
    __test__ = False

    name: str
    source_file: Path


Target = Union[Binary, Example, Test]


def _unknown(target: object) -> TypeError:
    return TypeError(f"not a target: {target!r}")


def kind_label(target: Target) -> str:
    if isinstance(target, Binary):
        return "Binary"
    if isinstance(target, Example):
        return "Example"
    if isinstance(target, Test):
        return "Test"
    raise _unknown(target)


def target_path(target: Target) -> Path:
    """Return the source file a target points at."""
    if isinstance(target, (Binary, Example)):
        return target.source_path
    if isinstance(target, Test):
        return target.source_file
    raise _unknown(target)


def display_string(target: Target) -> str:
    """Return the label used for fuzzy matching, ordering, and rendering.

    Shape is ``"<Kind>: <name padded to 30>\\t(<path>)"``.
    """
    return f"{kind_label(target)}: {target.name:<{NAME_COLUMN_WIDTH}}\t({target_path(target)})"


def cargo_flag(target: Target) -> str | None:
    """Return the cargo option selecting this target, or ``None`` for tests.

    Tests are picked by passing their name as cargo's positional test filter.
    """
    if isinstance(target, Binary):
        return "--bin"
    if isinstance(target, Example):
        return "--example"
    if isinstance(target, Test):
        return None
    raise _unknown(target)
