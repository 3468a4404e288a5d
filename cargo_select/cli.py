"""Command-line front door for cargo-select.

Discovers targets under the project root, then either lists ranked matches,
dispatches the best match for a pattern, or opens the interactive selector.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .backend import TerminalBackend
from .config import load_default_command, load_skip_dirs, load_theme_name
from .dispatch import normalize_command, run_target
from .errors import CargoSelectError, NoMatch, UserCancelled
from .fuzzy import rank_targets, score_targets
from .log import buffered_logging, init_logging
from .manifest import resolve_targets
from .scanner import scan_tests
from .selector import select_target
from .targets import Target, Test, display_string, kind_label
from .ui_theme import available_theme_names, resolve_theme

logger = logging.getLogger(__name__)

PLUGIN_SUBCOMMAND = "select"
EXIT_NO_MATCH = 1
EXIT_CANCELLED = 130


def _split_passthrough(argv: list[str]) -> tuple[list[str], list[str]]:
    """Split ``argv`` at the first ``--``; the tail goes to cargo untouched."""
    if "--" in argv:
        idx = argv.index("--")
        return argv[:idx], argv[idx + 1:]
    return argv, []


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cargo select",
        description="Fuzzy-pick a cargo binary, example, or test and run it.",
    )
    parser.add_argument("pattern", nargs="?", default=None, help="Fuzzy pattern. Omit to choose interactively.")
    parser.add_argument(
        "command",
        nargs="?",
        default=None,
        help="Cargo command for the best match (run/r, test/t, build/b). Omit to list matches.",
    )
    parser.add_argument("cargo_args", nargs="*", help="Extra arguments passed to cargo.")
    parser.add_argument("--tests", action="store_true", help="Select among #[test] functions instead of binaries/examples.")
    parser.add_argument("--path", default=".", help="Project root. Defaults to current directory.")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--scores", action="store_true", help="Show match scores when listing.")
    return parser


def discover_targets(root: Path, tests: bool) -> list[Target]:
    if tests:
        return list(scan_tests(root, load_skip_dirs()))
    return resolve_targets(root)


def print_targets(targets: list[Target]) -> None:
    for target in targets:
        print(display_string(target))


def _announce(target: Target) -> None:
    logger.info("Selected target: %s (%s)", target.name, kind_label(target))
    print(f"Selected target: {target.name} ({kind_label(target)})")


def _interactive(targets: list[Target], theme_name: str | None) -> Target:
    if not sys.stdin.isatty():
        raise SystemExit("Interactive selection needs a terminal; pass a PATTERN instead.")
    theme = resolve_theme(theme_name or load_theme_name())
    backend = TerminalBackend(sys.stdin.fileno(), sys.stdout.fileno(), theme)
    with buffered_logging():
        try:
            return select_target(targets, backend)
        except EOFError:
            # Terminal input closed mid-session.
            raise UserCancelled() from None


def main(argv: list[str] | None = None) -> None:
    """Parse arguments, discover targets, and select/dispatch one.

    Exits with cargo's status after a dispatch, 1 when nothing matched, and
    130 when the interactive selector was cancelled.
    """
    init_logging()
    args_list = list(sys.argv[1:] if argv is None else argv)
    if args_list and args_list[0] == PLUGIN_SUBCOMMAND:
        # cargo invokes plugins as ``cargo-select select ...``.
        args_list = args_list[1:]
    own_args, passthrough = _split_passthrough(args_list)
    args = build_parser().parse_args(own_args)
    extra_args = list(args.cargo_args) + passthrough

    root = Path(args.path)
    if not root.is_dir():
        raise SystemExit(f"Path not found: {root}")

    try:
        targets = discover_targets(root, args.tests)

        if args.pattern is None:
            try:
                target = _interactive(targets, args.theme)
            except UserCancelled:
                raise SystemExit(EXIT_CANCELLED) from None
            command = "test" if isinstance(target, Test) else load_default_command()
        elif args.command is None:
            if not args.pattern:
                print_targets(targets)
            elif args.scores:
                for ranked in rank_targets(targets, args.pattern):
                    print(f"{ranked.score:6d}  {display_string(ranked.target)}")
            else:
                print_targets(score_targets(targets, args.pattern))
            return
        else:
            command = normalize_command(args.command)
            matches = score_targets(targets, args.pattern) if args.pattern else targets
            if not matches:
                raise NoMatch(args.pattern)
            target = matches[-1]

        _announce(target)
        raise SystemExit(run_target(target, command, extra_args))
    except NoMatch as exc:
        print(str(exc), file=sys.stderr)
        raise SystemExit(EXIT_NO_MATCH) from None
    except CargoSelectError as exc:
        raise SystemExit(str(exc)) from None


if __name__ == "__main__":
    main()
