# tests/test_logging_setup.py

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from taskminder.logging_setup import _ConsoleNoiseFilter, setup_logging


@pytest.fixture()
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    logging.captureWarnings(False)


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_levels() -> None:
    f = _ConsoleNoiseFilter()
    assert f.filter(_record("taskminder.tasks.task_service", logging.DEBUG))
    assert not f.filter(_record("taskminder.notifications.bus", logging.INFO))
    assert f.filter(_record("taskminder.notifications.bus", logging.WARNING))
    assert not f.filter(_record("urllib3", logging.WARNING))
    assert not f.filter(_record("py.warnings", logging.WARNING))
    assert f.filter(_record("py.warnings", logging.ERROR))


def test_setup_logging_writes_debug_to_file(tmp_path: Path, restore_root_logger: None) -> None:
    log_file = setup_logging(log_dir=tmp_path / "logs")
    assert log_file == tmp_path / "logs" / "taskminder.log"
    assert len(logging.getLogger().handlers) == 2

    logging.getLogger("taskminder.test").debug("hello file")
    for h in logging.getLogger().handlers:
        h.flush()
    assert "hello file" in log_file.read_text(encoding="utf-8")
