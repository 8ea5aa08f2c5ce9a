# tests/conftest.py

from __future__ import annotations

from datetime import UTC, date, datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskminder.cli.bootstrap import create_initial_state
from taskminder.core.state import AppState
from taskminder.notifications.bus import NotificationBus
from taskminder.tasks.task_service import TaskService

from .fakes import FixedClock, InMemoryTaskRepo, RecordingObserver


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(datetime(2026, 10, 18, 12, 0, 0, tzinfo=UTC))


@pytest.fixture()
def today(clock: FixedClock) -> date:
    return clock.today()


@pytest.fixture()
def repo() -> InMemoryTaskRepo:
    return InMemoryTaskRepo()


@pytest.fixture()
def recorder() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture()
def bus(recorder: RecordingObserver) -> NotificationBus:
    b = NotificationBus()
    b.add_observer(recorder)
    return b


@pytest.fixture()
def service(repo: InMemoryTaskRepo, bus: NotificationBus, clock: FixedClock) -> TaskService:
    return TaskService(repo, bus, clock=clock, owner_id="alice")


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the composition root.

    We intentionally use a SimpleNamespace rather than reading the environment,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskminder-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        timezone="UTC",
        default_owner="alice",
        default_sort="default",
        due_soon_days=1,
        export_format="csv",
        notify_system=False,
        notify_email=False,
        smtp_host=None,
        smtp_port=25,
        mail_from="taskminder@localhost",
        mail_to_template="{owner_id}@localhost",
    )


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """AppState wired by the real composition root (SQLite store in tmp_path)."""
    return create_initial_state(settings=settings)
