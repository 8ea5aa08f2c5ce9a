# src/taskminder/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "taskminder.log"
_LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keeps the prompt readable.

    taskminder loggers pass, except notification dispatch below WARNING.
    Third-party loggers and captured warnings need ERROR.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if not name.startswith("taskminder."):
            return record.levelno >= logging.ERROR
        if name.startswith("taskminder.notifications."):
            return record.levelno >= logging.WARNING
        return True


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskminder",
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Install the console and file handlers on the root logger.

    Meant to run once from the entry point; handlers installed earlier are
    replaced. Returns the path of the log file.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(formatter)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    # warnings.warn() -> 'py.warnings' logger
    logging.captureWarnings(True)

    return log_file
