# src/taskbell/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "taskbell.log"
LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Decides what reaches stderr while the REPL is open.

    Our own records pass, except the status poller, which ticks every
    poll interval and only speaks up on WARNING or worse. Captured
    `warnings.warn` calls and other libraries need ERROR.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if not name.startswith("taskbell."):
            return record.levelno >= logging.ERROR
        if name.startswith("taskbell.tasks."):
            return record.levelno >= logging.WARNING
        return True


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskbell",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Install a filtered stderr handler and a full DEBUG file log on the root logger.

    Replaces whatever handlers the root logger already had, so calling it
    twice does not duplicate output. Returns the path of the log file.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(formatter)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    # warnings.warn(...) shows up as the 'py.warnings' logger.
    logging.captureWarnings(True)

    return log_file
