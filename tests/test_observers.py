# tests/test_observers.py

from __future__ import annotations

import logging

from taskminder.notifications.events import EventKind
from taskminder.notifications.observers import (
    EmailNotifier,
    LoggingObserver,
    LogMailer,
    SystemNotifier,
    detect_platform,
)

from .fakes import make_task


def test_detect_platform() -> None:
    assert detect_platform("darwin") == "macos"
    assert detect_platform("linux") == "linux"
    assert detect_platform("win32") == "windows"
    assert detect_platform("sunos5") == "unknown"


def test_system_notifier_falls_back_to_console() -> None:
    out: list[str] = []
    n = SystemNotifier(platform="unknown", emit=out.append)

    n.receive(make_task(title="Pay rent", due_date="2026-10-01"), EventKind.OVERDUE_CHECK)
    assert out == ["[CRITICAL] Task Overdue!: Your task 'Pay rent' was due on 2026-10-01 and is now overdue!"]


def test_system_notifier_skips_due_events_for_completed_tasks() -> None:
    out: list[str] = []
    n = SystemNotifier(platform="unknown", emit=out.append)
    done = make_task(status="completed", due_date="2026-10-01")

    n.receive(done, EventKind.OVERDUE_CHECK)
    n.receive(done, EventKind.DUE_SOON)
    assert out == []

    n.receive(done, EventKind.COMPLETED)
    assert len(out) == 1
    assert out[0].startswith("[NORMAL] Task Completed: Great job!")


def test_email_notifier_mails_completion_and_overdue_only() -> None:
    mailer = LogMailer()
    n = EmailNotifier(mailer, address_template="{owner_id}@example.org")

    task = make_task(title="Report", due_date="2026-10-01")
    n.receive(task, EventKind.CREATED)
    n.receive(task, EventKind.OVERDUE_CHECK)
    task.mark_completed()
    n.receive(task, EventKind.COMPLETED)
    n.receive(task, EventKind.OVERDUE_CHECK)

    assert [(to, subject) for to, subject, _ in mailer.sent] == [
        ("alice@example.org", "Urgent: Task Overdue! - Report"),
        ("alice@example.org", "Task Completed: Report"),
    ]
    assert task.id in mailer.sent[1][2]


def test_logging_observer_logs_event(caplog) -> None:
    caplog.set_level(logging.INFO, logger="taskminder.notifications.observers")
    task = make_task(title="Write docs")
    LoggingObserver().receive(task, EventKind.UPDATED)
    assert "Task updated: 'Write docs'" in caplog.text
