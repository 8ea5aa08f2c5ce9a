# src/taskminder/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The engine depends on Protocols instead of concrete implementations.
This keeps storage and notification channels swappable and makes testing easier.
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..notifications.events import EventKind
    from ..tasks.task_models import Task


class TaskRepo(Protocol):
    """
    Owner-scoped task storage.

    save() returns the stored task (with its new version); it raises
    ConflictError when the stored row changed since the task was loaded,
    and DuplicateError when a new task reuses an existing id.
    """

    def load_by_owner(self, owner_id: str) -> Sequence[Task]: ...
    def find(self, task_id: str, owner_id: str) -> Task | None: ...
    def save(self, task: Task) -> Task: ...
    def delete(self, task_id: str, owner_id: str) -> bool: ...


class TaskObserver(Protocol):
    """Receives lifecycle events. Exceptions are contained by the bus."""

    def receive(self, task: Task, event_kind: EventKind) -> None: ...


class Mailer(Protocol):
    def send(self, *, to: str, subject: str, body: str) -> None: ...
