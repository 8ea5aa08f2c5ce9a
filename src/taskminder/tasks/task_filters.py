# src/taskminder/tasks/task_filters.py

"""
Filter strategies.

Each filter is pure and order-preserving: it returns a new list holding the
retained tasks in their input order. Filters compose by sequential
application (intersection).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date
from typing import Protocol

from .task_models import Task, TaskStatus, normalize_tags, parse_date


class TaskFilter(Protocol):
    def filter(self, tasks: Iterable[Task]) -> list[Task]: ...


class TagFilter:
    """Keep tasks carrying at least one of the tags (case-insensitive)."""

    def __init__(self, tags: str | Iterable[str] | None) -> None:
        self.tags = normalize_tags(tags)

    def filter(self, tasks: Iterable[Task]) -> list[Task]:
        if not self.tags:
            return list(tasks)
        return [t for t in tasks if any(t.has_tag(tag) for tag in self.tags)]


class DueDateRangeFilter:
    """
    Keep tasks whose due date satisfies every configured bound.

    `on` alone decides when given. Bounds are inclusive. With any bound set,
    tasks without a due date are dropped; with none set, everything passes.
    """

    def __init__(
        self,
        *,
        before: date | str | None = None,
        after: date | str | None = None,
        on: date | str | None = None,
    ) -> None:
        self.before = parse_date(before)
        self.after = parse_date(after)
        self.on = parse_date(on)

    @property
    def is_empty(self) -> bool:
        return self.before is None and self.after is None and self.on is None

    def _matches(self, due: date) -> bool:
        if self.on is not None:
            return due == self.on
        if self.before is not None and due > self.before:
            return False
        if self.after is not None and due < self.after:
            return False
        return True

    def filter(self, tasks: Iterable[Task]) -> list[Task]:
        if self.is_empty:
            return list(tasks)
        return [t for t in tasks if t.due_date is not None and self._matches(t.due_date)]


class StatusFilter:
    def __init__(self, status: TaskStatus | str) -> None:
        self.status = TaskStatus.parse(status)

    def filter(self, tasks: Iterable[Task]) -> list[Task]:
        return [t for t in tasks if t.status is self.status]


class OverdueFilter:
    def __init__(self, today: date) -> None:
        self.today = today

    def filter(self, tasks: Iterable[Task]) -> list[Task]:
        return [t for t in tasks if t.is_overdue(self.today)]


def apply_filters(tasks: Iterable[Task], filters: Sequence[TaskFilter]) -> list[Task]:
    out = list(tasks)
    for f in filters:
        out = f.filter(out)
    return out
