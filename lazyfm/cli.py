"""Command-line front door for lazyfm.

Parses CLI options, configures logging, loads the opener config, and then
dispatches into the interactive browser. Config problems end the process
here, before the terminal is switched into raw mode.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import DEFAULT_CONFIG_PATH, load_opener_config
from .errors import ConfigError
from .todos import DEFAULT_TODO_PATH

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _log_level(value: str) -> int:
    """argparse type for logging level names."""
    level = logging.getLevelName(value.upper())
    if not isinstance(level, int):
        raise argparse.ArgumentTypeError(f"unknown log level: {value!r}")
    return level


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazyfm",
        description="Browse directories, preview files, and keep a to-do list in the terminal.",
    )
    parser.add_argument("path", nargs="?", default=None, help="Directory to start in. Defaults to current directory.")
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help=f"Opener/color TOML config (default: {DEFAULT_CONFIG_PATH}).",
    )
    parser.add_argument(
        "--todo-file",
        type=Path,
        default=DEFAULT_TODO_PATH,
        help=f"JSON to-do list location (default: {DEFAULT_TODO_PATH}).",
    )
    parser.add_argument(
        "--cwd-file",
        type=Path,
        default=None,
        help="Read the start directory from this file and write the final directory back on exit.",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable colored previews.")
    parser.add_argument("--log-file", type=Path, default=None, help="Append log records to this file.")
    parser.add_argument("--log-level", type=_log_level, default=logging.INFO, help="Log level for --log-file.")
    return parser


def configure_logging(log_file: Path | None, level: int = logging.INFO) -> None:
    """Route ``lazyfm`` log records to ``log_file``, or drop them.

    The terminal belongs to the TUI, so nothing is ever logged to stderr.
    """
    package_logger = logging.getLogger("lazyfm")
    package_logger.propagate = False
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    if log_file is None:
        package_logger.addHandler(logging.NullHandler())
        return
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)
    package_logger.setLevel(level)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and launch the browser."""
    from .runtime.app import resolve_start_dir, run_browser, write_cwd_file

    args = build_parser().parse_args(argv)
    try:
        configure_logging(args.log_file, args.log_level)
    except OSError as exc:
        raise SystemExit(f"lazyfm: cannot open log file: {exc}") from exc

    fallback = Path(args.path) if args.path is not None else Path.cwd()
    if not fallback.is_dir():
        raise SystemExit(f"lazyfm: not a directory: {fallback}")

    try:
        config = load_opener_config(args.config)
    except ConfigError as exc:
        raise SystemExit(f"lazyfm: {exc}") from exc

    if not sys.stdin.isatty() or not sys.stdout.isatty():
        raise SystemExit("lazyfm: an interactive terminal is required")

    start_dir = resolve_start_dir(fallback, args.cwd_file)
    final_dir = run_browser(
        start_dir,
        config,
        todo_path=args.todo_file,
        color=not args.no_color,
    )
    if args.cwd_file is not None:
        write_cwd_file(args.cwd_file, final_dir)


if __name__ == "__main__":
    main()
