"""Typed failures raised by discovery, selection, and dispatch.

Manifest errors are fatal for a run. Selection errors describe how an
interactive session ended without a usable pick.
"""

from __future__ import annotations

from pathlib import Path


class CargoSelectError(Exception):
    """Base class for every error cargo-select reports to the user."""


class ManifestError(CargoSelectError):
    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{message}: {path}")
        self.path = path


class ManifestMissing(ManifestError):
    def __init__(self, path: Path) -> None:
        super().__init__(path, "No Cargo.toml found")


class ManifestInvalid(ManifestError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(path, f"Invalid manifest ({reason})")
        self.reason = reason


class SelectionError(CargoSelectError):
    pass


class NoMatch(SelectionError):
    """Enter was pressed while the filtered view was empty."""

    def __init__(self, pattern: str = "") -> None:
        super().__init__("No targets matched" + (f" {pattern!r}" if pattern else ""))
        self.pattern = pattern


class UserCancelled(SelectionError):
    """Escape or Ctrl+C ended the session."""

    def __init__(self) -> None:
        super().__init__("Selection cancelled")


class DispatchError(CargoSelectError):
    pass
