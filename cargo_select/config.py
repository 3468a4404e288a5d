"""Read-only JSON user config.

Holds the UI theme, test-scan skip directories, and the command used after
an interactive pick. All access is defensive: malformed or missing config
falls back to built-in defaults.
"""

from __future__ import annotations

import json
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "cargo-select"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

DEFAULT_SKIP_DIRS: tuple[str, ...] = ("target",)
DEFAULT_COMMAND = "run"


def load_config() -> dict[str, object]:
    """Load the JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def load_theme_name() -> str | None:
    """Load configured UI theme name, returning ``None`` when unset/invalid."""
    value = load_config().get("theme")
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if stripped else None


def load_skip_dirs() -> tuple[str, ...]:
    """Directory names pruned from the test scan.

    Configured names extend the defaults; they never replace them. Non-string,
    blank, and duplicate entries are dropped.
    """
    value = load_config().get("skip_dirs")
    if not isinstance(value, list):
        return DEFAULT_SKIP_DIRS
    names = list(DEFAULT_SKIP_DIRS)
    for item in value:
        if isinstance(item, str) and item.strip() and item.strip() not in names:
            names.append(item.strip())
    return tuple(names)


def load_default_command() -> str:
    value = load_config().get("default_command")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return DEFAULT_COMMAND
