"""Command-line front door for cherrypiq.

Parses CLI options, merges them over the persisted config, probes external
tools, and dispatches into the interactive picker runtime.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import shlex
import sys
from pathlib import Path

from .capabilities import probe_capabilities
from .config import TOKENIZER_CHOICES, Settings, load_settings
from .errors import DirectoryUnreadable, RequiredToolMissing
from .ignore import load_ignore_patterns
from .listing import Entry, list_directory
from .logs import configure_logging
from .runtime import run_picker
from .selection import SelectionSet
from .ui_theme import available_theme_names

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _command(value: str) -> tuple[str, ...]:
    """argparse type splitting a shell-style command string into argv."""
    try:
        parts = tuple(shlex.split(value))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid command: {exc}") from exc
    if not parts:
        raise argparse.ArgumentTypeError("command must not be empty")
    return parts


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Pick files from a directory tree and bundle them with repomix."
    )
    parser.add_argument("path", nargs="?", default=None, help="Working root. Defaults to current directory.")
    parser.add_argument("--bundler", type=_command, default=None, help="Bundler command, e.g. 'npx repomix'.")
    parser.add_argument("--page-size", type=_positive_int, default=None, help="Rows moved by page up/down.")
    parser.add_argument("--tokenizer", choices=TOKENIZER_CHOICES, default=None, help="Token counting strategy.")
    parser.add_argument("--style", default=None, help="Pygments style name for preview fallback.")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--log-level", default=None, help="Log level for the session log file.")
    parser.add_argument("--list", action="store_true", help="Print the root listing and exit.")
    return parser


def merge_settings(settings: Settings, args: argparse.Namespace) -> Settings:
    """Apply CLI flags that were given over config-file settings."""
    overrides: dict[str, object] = {}
    if args.bundler is not None:
        overrides["bundler_command"] = args.bundler
    if args.page_size is not None:
        overrides["page_size"] = args.page_size
    if args.tokenizer is not None:
        overrides["tokenizer"] = args.tokenizer
    if args.style is not None:
        overrides["pygments_style"] = args.style
    if args.theme is not None:
        overrides["theme"] = args.theme
    return dataclasses.replace(settings, **overrides)


def format_listing_row(entry: Entry) -> str:
    marker = "[✓] " if entry.selected else "[+] " if entry.is_dir else "    "
    name = f"{entry.name}/" if entry.is_dir else entry.name
    suffix = " (ignored)" if entry.ignored else ""
    return f"{marker}{name}{suffix}"


def render_listing(root: Path) -> str:
    """Plain-text projection of ``root`` as the picker would first show it."""
    entries = list_directory(root, load_ignore_patterns(root), SelectionSet())
    return "".join(format_listing_row(entry) + "\n" for entry in entries)


def main(default_path: Path | None = None) -> None:
    """Parse CLI arguments and launch the picker on a directory.

    ``default_path`` is primarily for tests; when omitted the current working
    directory is used.
    """
    args = build_parser().parse_args()
    log_path = configure_logging(args.log_level)

    if default_path is None:
        default_path = Path.cwd()
    root = Path(args.path or default_path)
    if not root.exists():
        raise SystemExit(f"Path not found: {root}")
    if not root.is_dir():
        raise SystemExit(f"Not a directory: {root}")
    root = root.resolve()

    if args.list:
        try:
            sys.stdout.write(render_listing(root))
        except DirectoryUnreadable as exc:
            raise SystemExit(str(exc)) from exc
        return

    settings = merge_settings(load_settings(), args)
    try:
        capabilities = probe_capabilities(settings.bundler_command, settings.tokenizer)
    except RequiredToolMissing as exc:
        logger.error("%s", exc)
        print(exc, file=sys.stderr)
        raise SystemExit(1) from exc

    try:
        exit_code, exit_message = run_picker(root, settings, capabilities)
    except DirectoryUnreadable as exc:
        logger.error("%s", exc)
        print(exc, file=sys.stderr)
        raise SystemExit(1) from exc
    except Exception as exc:
        logger.exception("unhandled error in picker session")
        detail = f" (see {log_path})" if log_path is not None else ""
        print(f"cherrypiq failed: {exc}{detail}", file=sys.stderr)
        raise SystemExit(1) from exc

    if exit_message:
        print(exit_message, file=sys.stdout if exit_code == 0 else sys.stderr)
    if exit_code != 0:
        raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
