# src/taskminder/tasks/task_ordering.py

"""
Task ordering.

compare_tasks() is the default total order:
  1. incomplete before completed
  2. overdue before not overdue
  3. earlier due date first; tasks without a due date go after dated ones
  4. higher priority first (high > medium > low > none)
  5. earlier creation time first

Sort strategies are looked up by name; unknown names get the default order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import date
from functools import cmp_to_key
from typing import Protocol

from .task_models import Task, priority_rank

logger = logging.getLogger(__name__)


def _cmp(a: object, b: object) -> int:
    return (a > b) - (a < b)  # type: ignore[operator]


def _cmp_completion(a: Task, b: Task) -> int:
    return _cmp(int(a.is_completed), int(b.is_completed))


def _cmp_priority(a: Task, b: Task) -> int:
    # Descending rank.
    return _cmp(priority_rank(b.priority), priority_rank(a.priority))


def compare_tasks(a: Task, b: Task, *, today: date) -> int:
    result = _cmp_completion(a, b)
    if result:
        return result

    result = _cmp(int(b.is_overdue(today)), int(a.is_overdue(today)))
    if result:
        return result

    if a.due_date is not None and b.due_date is not None:
        result = _cmp(a.due_date, b.due_date)
        if result:
            return result
    elif a.due_date is not None:
        return -1
    elif b.due_date is not None:
        return 1

    result = _cmp_priority(a, b)
    if result:
        return result

    return _cmp(a.created_at, b.created_at)


def compare_by_priority(a: Task, b: Task) -> int:
    """Completion, then priority, then creation time. Due dates are ignored."""
    result = _cmp_completion(a, b)
    if result:
        return result
    result = _cmp_priority(a, b)
    if result:
        return result
    return _cmp(a.created_at, b.created_at)


class SortStrategy(Protocol):
    name: str

    def sort(self, tasks: Iterable[Task]) -> list[Task]: ...


class DefaultSort:
    name = "default"

    def __init__(self, today: date) -> None:
        self.today = today

    def sort(self, tasks: Iterable[Task]) -> list[Task]:
        today = self.today
        return sorted(tasks, key=cmp_to_key(lambda a, b: compare_tasks(a, b, today=today)))


class DueDateSort(DefaultSort):
    # Due date already dominates the default order once completion and
    # overdue state are settled; the name exists for callers.
    name = "due_date"


class PrioritySort:
    name = "priority"

    def __init__(self, today: date | None = None) -> None:
        self.today = today

    def sort(self, tasks: Iterable[Task]) -> list[Task]:
        return sorted(tasks, key=cmp_to_key(compare_by_priority))


SORT_STRATEGIES: dict[str, Callable[[date], SortStrategy]] = {
    DefaultSort.name: DefaultSort,
    "natural": DefaultSort,
    DueDateSort.name: DueDateSort,
    PrioritySort.name: PrioritySort,
}


def get_sort_strategy(name: str | None, *, today: date) -> SortStrategy:
    key = (name or "").strip().lower().replace("-", "_")
    factory = SORT_STRATEGIES.get(key)
    if factory is None:
        if key:
            logger.debug("Unknown sort strategy %r; using default order", name)
        factory = DefaultSort
    return factory(today)
