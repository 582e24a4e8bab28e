# src/daily_tracker/logging_setup.py

"""
Logging for the tracker process.

Two handlers on the root logger:
- stderr: what an operator watching the server wants (rollovers, task
  changes, errors); the HTTP access log is kept out of it
- <data_dir>/daily.log: everything at DEBUG, including every request line
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "daily.log"
LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# werkzeug logs one INFO line per request; only its warnings reach the console.
_ACCESS_LOGGERS = ("werkzeug",)


class _ConsoleFilter(logging.Filter):
    """Pass tracker records; hold back access logs and third-party chatter."""

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith("daily_tracker"):
            return True
        if name.startswith(_ACCESS_LOGGERS):
            return record.levelno >= logging.WARNING
        return record.levelno >= logging.ERROR


def _reset_root(root: logging.Logger) -> None:
    for h in list(root.handlers):
        root.removeHandler(h)


def setup_logging(
    *,
    log_dir: str | Path = ".local/daily",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Install the console and file handlers; returns the log file path.

    Safe to call again (handlers are replaced, not stacked), but it is meant
    to run once from cli.main before the store is opened.
    """
    log_file = Path(log_dir) / LOG_FILE_NAME
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    _reset_root(root)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(formatter)
    console.addFilter(_ConsoleFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
