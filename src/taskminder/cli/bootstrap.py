# src/taskminder/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the SQLite store, notification bus, observers and TaskService into AppState.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..config import Settings
from ..core.clock import Clock
from ..core.ports import Mailer, TaskObserver
from ..core.state import AppState
from ..notifications.bus import NotificationBus
from ..notifications.observers import (
    EmailNotifier,
    LoggingObserver,
    LogMailer,
    SmtpMailer,
    SystemNotifier,
)
from ..tasks.task_service import TaskService
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings: Settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def build_observers(settings: Settings, *, emit: Callable[[str], None] = print) -> list[TaskObserver]:
    observers: list[TaskObserver] = [LoggingObserver()]

    if settings.notify_system:
        observers.append(SystemNotifier(emit=emit))

    if settings.notify_email:
        mailer: Mailer
        if settings.smtp_host:
            mailer = SmtpMailer(settings.smtp_host, settings.smtp_port, sender=settings.mail_from)
        else:
            mailer = LogMailer()
        observers.append(EmailNotifier(mailer, address_template=settings.mail_to_template))

    return observers


def create_initial_state(*, settings: Settings | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, reads them from the environment.
    """
    if settings is None:
        settings = Settings.from_env()

    _ensure_local_dirs(settings)

    bus = NotificationBus()
    for observer in build_observers(settings):
        bus.add_observer(observer)

    store = TaskStore(settings.tasks_db_path)
    service = TaskService(
        store,
        bus,
        clock=Clock(settings.timezone),
        default_sort=settings.default_sort,
        due_soon_days=settings.due_soon_days,
        owner_id=settings.default_owner,
    )
    logger.info(
        "State ready owner=%s observers=%d db=%s",
        settings.default_owner,
        bus.count_observers(),
        settings.tasks_db_path,
    )
    return AppState(settings=settings, task_store=store, bus=bus, service=service)
