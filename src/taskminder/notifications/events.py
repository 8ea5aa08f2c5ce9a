# src/taskminder/notifications/events.py

from __future__ import annotations

from enum import StrEnum


class EventKind(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    COMPLETED = "completed"
    REOPENED = "reopened"
    DELETED = "deleted"
    OVERDUE_CHECK = "overdue_check"
    DUE_SOON = "due_soon"
