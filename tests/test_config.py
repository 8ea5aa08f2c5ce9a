# tests/test_config.py

from __future__ import annotations

import os
from pathlib import Path

import pytest

from taskminder.cli.bootstrap import build_observers
from taskminder.config import Settings
from taskminder.core.clock import Clock
from taskminder.core.errors import ValidationError
from taskminder.notifications.observers import EmailNotifier, LoggingObserver, LogMailer, SmtpMailer, SystemNotifier


def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("TASKMINDER_"):
            monkeypatch.delenv(name, raising=False)


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("USER", "carol")

    s = Settings.from_env(load_env_file=False)
    assert s.app_name == "taskminder"
    assert s.data_dir == Path(".local/taskminder")
    assert s.tasks_db_path == Path(".local/taskminder/tasks.sqlite3")
    assert s.default_owner == "carol"
    assert s.default_sort == "default"
    assert s.due_soon_days == 1
    assert s.timezone is None
    assert s.notify_system is False
    assert s.smtp_host is None


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("TASKMINDER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("TASKMINDER_OWNER", "dave")
    monkeypatch.setenv("TASKMINDER_TIMEZONE", "Europe/Berlin")
    monkeypatch.setenv("TASKMINDER_DUE_SOON_DAYS", "3")
    monkeypatch.setenv("TASKMINDER_SMTP_PORT", "not-a-number")
    monkeypatch.setenv("TASKMINDER_NOTIFY_EMAIL", "yes")

    s = Settings.from_env(load_env_file=False)
    assert s.tasks_db_path == tmp_path / "tasks.sqlite3"
    assert s.default_owner == "dave"
    assert s.timezone == "Europe/Berlin"
    assert s.due_soon_days == 3
    assert s.smtp_port == 25
    assert s.notify_email is True


def test_clock_rejects_unknown_zone() -> None:
    with pytest.raises(ValidationError):
        Clock("Mars/Olympus_Mons")
    assert Clock("UTC").now().utcoffset().total_seconds() == 0


def test_build_observers_follows_settings(settings) -> None:
    observers = build_observers(settings)
    assert [type(o) for o in observers] == [LoggingObserver]

    settings.notify_system = True
    settings.notify_email = True
    observers = build_observers(settings, emit=lambda _: None)
    assert [type(o) for o in observers] == [LoggingObserver, SystemNotifier, EmailNotifier]
    assert isinstance(observers[2].mailer, LogMailer)

    settings.smtp_host = "mail.example.org"
    assert isinstance(build_observers(settings)[2].mailer, SmtpMailer)


def test_create_initial_state_wires_store_and_owner(state, settings) -> None:
    assert state.service.current_owner_id == "alice"
    assert state.bus.count_observers() == 1
    assert settings.tasks_db_path.exists()
    assert state.task_store.count_tasks() == 0
