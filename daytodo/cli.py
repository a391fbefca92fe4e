from __future__ import annotations

import argparse
import curses
import datetime as dt
import logging
import sys
from pathlib import Path
from typing import List

from . import __version__
from .app import run
from .config import CONFIG_PATH, load_config
from .logs import setup_logging
from .screen import CursesTerminal
from .session import Session
from .tasks import TaskFileError, backup_file, format_listing, load_tasks, save_tasks

logger = logging.getLogger(__name__)

DATE_FORMAT = "%d-%m-%y"
MASTER_FILE = "master.todo"


def parse_date(text: str) -> dt.date:
    try:
        return dt.datetime.strptime(text.strip(), DATE_FORMAT).date()
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"unable to read {text!r} as a date; should follow day-month-year, e.g. 09-03-01"
        ) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="daytodo", description="Per-day prioritized task lists in the terminal.")
    parser.add_argument("-s", "--simple", action="store_true", help="print tasks to stdout instead of opening the interface")
    parser.add_argument("-m", "--master", action="store_true", help="load the master task list")
    parser.add_argument("-y", "--yesterday", action="store_true", help="load the day before (applies to --date too)")
    parser.add_argument("-d", "--date", type=parse_date, metavar="DD-MM-YY", help="load a specific date")
    parser.add_argument("-c", "--config", type=Path, default=CONFIG_PATH, help=f"config file (default: {CONFIG_PATH})")
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def resolve_date(args: argparse.Namespace, today: dt.date) -> dt.date | None:
    """Date whose list to open, or None for the master list."""
    if args.master:
        return None
    date = args.date or today
    if args.yesterday:
        date -= dt.timedelta(days=1)
    return date


def target_file(data_dir: Path, date: dt.date | None) -> Path:
    if date is None:
        return data_dir / MASTER_FILE
    return data_dir / f"{date.strftime(DATE_FORMAT)}.todo"


def fail(message: str) -> int:
    print(f"daytodo: error: {message}", file=sys.stderr)
    return 1


def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config, config_errors = load_config(args.config)
    try:
        setup_logging(log_dir=config.data_dir, file_level=config.log_level_value)
    except OSError as exc:
        return fail(f"could not open data directory {config.data_dir}: {exc}")
    for error in config_errors:
        logger.warning("%s: %s", args.config, error)

    path = target_file(config.data_dir, resolve_date(args, dt.date.today()))
    try:
        loaded = load_tasks(path, skip_malformed=config.skip_malformed)
    except TaskFileError as exc:
        return fail(f"{exc}\nfix the line or set on_malformed = skip in {args.config}")
    except (OSError, UnicodeDecodeError) as exc:
        return fail(f"could not read {path}: {exc}")

    if args.simple:
        print(format_listing(loaded.tasks))
        return 0

    session = Session(tasks=loaded.tasks, file_label=path.name)
    try:
        with CursesTerminal() as terminal:
            run(session, terminal, config.palette, config.poll_timeout_ms)
    except curses.error as exc:
        logger.exception("Terminal failure")
        return fail(f"terminal failure: {exc}")

    try:
        if loaded.skipped:
            backup = backup_file(path)
            print(f"daytodo: skipped {len(loaded.skipped)} malformed line(s); original kept at {backup}", file=sys.stderr)
        save_tasks(session.tasks, path)
    except OSError as exc:
        return fail(f"could not save {path}: {exc}")
    return 0
