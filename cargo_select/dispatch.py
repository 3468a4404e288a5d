"""Turn a selected target into a cargo invocation and run it."""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Sequence

from .errors import DispatchError
from .manifest import MANIFEST_FILENAME, find_manifest_dir
from .targets import Binary, Example, Target, Test, cargo_flag

logger = logging.getLogger(__name__)

COMMAND_ALIASES: dict[str, str] = {
    "run": "run",
    "r": "run",
    "test": "test",
    "t": "test",
    "build": "build",
    "b": "build",
}


def normalize_command(command: str) -> str:
    try:
        return COMMAND_ALIASES[command]
    except KeyError:
        choices = ", ".join(sorted(COMMAND_ALIASES))
        raise DispatchError(f"Unknown cargo command {command!r} (expected one of: {choices})") from None


def build_cargo_command(target: Target, command: str, extra_args: Sequence[str] = ()) -> list[str]:
    """Return argv for running ``command`` on ``target``.

    Binaries and examples are selected with ``--bin``/``--example`` against
    the manifest that declared them. Tests only support ``test``; their name
    becomes cargo's test filter.
    """
    command = normalize_command(command)
    if isinstance(target, (Binary, Example)):
        argv = [
            "cargo",
            command,
            cargo_flag(target),
            target.name,
            "--manifest-path",
            str(target.workspace_root / MANIFEST_FILENAME),
        ]
    elif isinstance(target, Test):
        if command != "test":
            raise DispatchError(f"Cannot {command} a test target; use 'test'")
        argv = ["cargo", "test", target.name]
        manifest_dir = find_manifest_dir(target.source_file)
        if manifest_dir is not None:
            argv.extend(["--manifest-path", str(manifest_dir / MANIFEST_FILENAME)])
    else:
        raise TypeError(f"not a target: {target!r}")
    argv.extend(extra_args)
    return argv


def run_target(target: Target, command: str, extra_args: Sequence[str] = ()) -> int:
    """Run cargo for ``target`` in the foreground and return its exit status."""
    argv = build_cargo_command(target, command, extra_args)
    logger.info("Spawning cargo command: %s", shlex.join(argv))
    try:
        completed = subprocess.run(argv, check=False)
    except FileNotFoundError as exc:
        raise DispatchError("cargo executable not found on PATH") from exc
    return completed.returncode
