from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_NAME = "daytodo.log"


def setup_logging(*, log_dir: str | Path, file_level: int = logging.INFO, console_level: int = logging.WARNING) -> Path:
    """
    Configure logging with:
    - File handler: full session log, curses owns the screen while it runs
    - Console handler: warnings and errors only, on stderr

    Call this once, before the task file is loaded.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_NAME

    root = logging.getLogger()
    root.setLevel(min(file_level, console_level))

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root.addHandler(ch)

    logging.captureWarnings(True)
    return log_file
