# src/taskminder/tasks/task_service.py

from __future__ import annotations

"""
Task service.

Implements the use cases on top of an injected TaskRepo:
- every operation is scoped to the current owner,
- each write is one load -> mutate -> save round trip,
- a lifecycle event is published after the write succeeds.

Notification failures never reach the caller (the bus contains them);
validation, lookup and I/O errors do.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import replace
from datetime import date, timedelta
from pathlib import Path
from typing import Any, TextIO

from ..core.clock import Clock
from ..core.errors import DuplicateError, FileError, NotFoundError, ValidationError
from ..core.ports import TaskRepo
from ..notifications.bus import NotificationBus
from ..notifications.events import EventKind
from .task_filters import (
    DueDateRangeFilter,
    OverdueFilter,
    StatusFilter,
    TagFilter,
    TaskFilter,
    apply_filters,
)
from .task_io import ImportReport, TaskFormat, get_format
from .task_models import Task, TaskStatus
from .task_ordering import get_sort_strategy

logger = logging.getLogger(__name__)

_CREATE_FIELDS = frozenset(
    {
        "id",
        "owner_id",
        "title",
        "description",
        "status",
        "due_date",
        "tags",
        "priority",
        "recurrence",
        "parent_task_id",
        "created_at",
        "completed_at",
    }
)
_UPDATE_FIELDS = frozenset(
    {"title", "description", "status", "due_date", "tags", "priority", "recurrence", "parent_task_id"}
)
_READ_ONLY_FIELDS = frozenset({"id", "owner_id", "created_at", "completed_at", "version"})


class TaskService:
    def __init__(
        self,
        repo: TaskRepo,
        bus: NotificationBus | None = None,
        *,
        clock: Clock | None = None,
        default_sort: str = "default",
        due_soon_days: int = 1,
        owner_id: str | None = None,
    ) -> None:
        self.repo = repo
        self.bus = bus if bus is not None else NotificationBus()
        self.clock = clock if clock is not None else Clock()
        self.default_sort = default_sort
        self.due_soon_days = max(0, int(due_soon_days))
        self._owner_id: str | None = None
        if owner_id:
            self.set_current_owner(owner_id)

    # ---- owner context ----

    @property
    def current_owner_id(self) -> str | None:
        return self._owner_id

    def set_current_owner(self, owner_id: str) -> None:
        owner_id = (owner_id or "").strip()
        if not owner_id:
            raise ValidationError("owner_id must not be blank")
        self._owner_id = owner_id
        logger.debug("Current owner set to %s", owner_id)

    def clear_current_owner(self) -> None:
        self._owner_id = None

    def _require_owner(self) -> str:
        if not self._owner_id:
            raise NotFoundError("no current owner set")
        return self._owner_id

    # ---- helpers ----

    @staticmethod
    def _check_fields(attrs: Mapping[str, Any], allowed: frozenset[str]) -> dict[str, Any]:
        unknown = sorted(set(attrs) - allowed)
        if unknown:
            locked = [k for k in unknown if k in _READ_ONLY_FIELDS]
            if locked:
                raise ValidationError(f"read-only task field(s): {', '.join(locked)}")
            raise ValidationError(f"unknown task field(s): {', '.join(unknown)}")
        return dict(attrs)

    def _apply_status(self, task: Task, target: TaskStatus) -> EventKind | None:
        if target is TaskStatus.COMPLETED:
            return EventKind.COMPLETED if task.mark_completed(self.clock.now()) else None
        return EventKind.REOPENED if task.reopen() else None

    def _apply_update(self, task: Task, attrs: Mapping[str, Any]) -> Task:
        changes = self._check_fields(attrs, _UPDATE_FIELDS)
        if not changes:
            return task

        # Work on a copy so a failing field leaves the loaded task untouched.
        updated = replace(task)
        target = changes.pop("status", None)
        for name, value in changes.items():
            setattr(updated, name, value)

        status_event = None
        if target is not None:
            status_event = self._apply_status(updated, TaskStatus.parse(target))

        saved = self.repo.save(updated)
        event = status_event or EventKind.UPDATED
        logger.info("Task %s id=%s", event.value, saved.id)
        self.bus.publish(saved, event)
        return saved

    # ---- use cases ----

    def add_task(self, attrs: Mapping[str, Any]) -> Task:
        owner_id = self._require_owner()
        fields = self._check_fields(attrs, _CREATE_FIELDS)

        given_owner = fields.pop("owner_id", None)
        if given_owner not in (None, "", owner_id):
            raise ValidationError("cannot create a task for another owner")

        if not fields.get("id"):
            fields.pop("id", None)
        elif self.repo.find(str(fields["id"]), owner_id) is not None:
            raise DuplicateError(f"task '{fields['id']}' already exists")

        if not fields.get("created_at"):
            fields["created_at"] = self.clock.now()
        status = TaskStatus.parse(fields.get("status"))
        if status is TaskStatus.COMPLETED and not fields.get("completed_at"):
            fields["completed_at"] = self.clock.now()

        try:
            task = Task(owner_id=owner_id, **fields)
        except TypeError as exc:
            raise ValidationError(str(exc)) from exc

        saved = self.repo.save(task)
        logger.info("Task created id=%s owner=%s", saved.id, owner_id)
        self.bus.publish(saved, EventKind.CREATED)
        return saved

    def find_task_by_id(self, task_id: str) -> Task:
        owner_id = self._require_owner()
        task = self.repo.find(str(task_id or "").strip(), owner_id) if task_id else None
        if task is None:
            raise NotFoundError(f"task '{task_id}' not found")
        return task

    def list_tasks(
        self,
        *,
        tags: str | Iterable[str] | None = None,
        status: TaskStatus | str | None = None,
        overdue: bool = False,
        due_before: date | str | None = None,
        due_after: date | str | None = None,
        due_on: date | str | None = None,
        sort_by: str | None = None,
    ) -> list[Task]:
        owner_id = self._require_owner()
        today = self.clock.today()

        filters: list[TaskFilter] = []
        if status:
            filters.append(StatusFilter(status))
        if overdue:
            filters.append(OverdueFilter(today))
        if tags:
            filters.append(TagFilter(tags))
        date_filter = DueDateRangeFilter(before=due_before, after=due_after, on=due_on)
        if not date_filter.is_empty:
            filters.append(date_filter)

        tasks = apply_filters(self.repo.load_by_owner(owner_id), filters)
        return get_sort_strategy(sort_by or self.default_sort, today=today).sort(tasks)

    def update_task(self, task_id: str, attrs: Mapping[str, Any]) -> Task:
        return self._apply_update(self.find_task_by_id(task_id), attrs)

    def complete_task(self, task_id: str) -> Task:
        """Re-completing is a no-op: completed_at is kept and nothing is published."""
        task = self.find_task_by_id(task_id)
        if task.is_completed:
            logger.debug("Task id=%s already completed", task.id)
            return task
        return self._apply_update(task, {"status": TaskStatus.COMPLETED})

    def reopen_task(self, task_id: str) -> Task:
        task = self.find_task_by_id(task_id)
        if not task.is_completed:
            logger.debug("Task id=%s already pending", task.id)
            return task
        return self._apply_update(task, {"status": TaskStatus.PENDING})

    def delete_task(self, task_id: str) -> Task:
        task = self.find_task_by_id(task_id)
        if not self.repo.delete(task.id, task.owner_id):
            raise NotFoundError(f"task '{task_id}' not found")
        logger.info("Task deleted id=%s", task.id)
        self.bus.publish(task, EventKind.DELETED)
        return task

    def check_overdue_tasks(self) -> list[Task]:
        tasks = self.list_tasks(status=TaskStatus.PENDING, overdue=True)
        for task in tasks:
            self.bus.publish(task, EventKind.OVERDUE_CHECK)
        logger.info("Overdue check: %d task(s)", len(tasks))
        return tasks

    def check_due_soon_tasks(self) -> list[Task]:
        today = self.clock.today()
        tasks = self.list_tasks(
            status=TaskStatus.PENDING,
            due_after=today,
            due_before=today + timedelta(days=self.due_soon_days),
        )
        for task in tasks:
            self.bus.publish(task, EventKind.DUE_SOON)
        logger.info("Due-soon check: %d task(s)", len(tasks))
        return tasks

    # ---- export / import ----

    def export_tasks(self, fmt: str, destination: str | Path | TextIO) -> int:
        """Write all of the owner's tasks (default order). Returns the number written."""
        codec = get_format(fmt)
        tasks = self.list_tasks()
        try:
            if hasattr(destination, "write"):
                n = codec.write(tasks, destination, self.clock)  # type: ignore[arg-type]
            else:
                path = Path(destination)  # type: ignore[arg-type]
                path.parent.mkdir(parents=True, exist_ok=True)
                with path.open("w", encoding="utf-8", newline="") as fp:
                    n = codec.write(tasks, fp, self.clock)
        except OSError as exc:
            raise FileError(f"failed to export tasks to {destination}: {exc}") from exc
        logger.info("Exported %d task(s) as %s", n, codec.name)
        return n

    def import_tasks(self, fmt: str, source: str | Path | TextIO) -> ImportReport:
        """
        Create a task per row, with fresh ids and the current owner.

        Malformed rows are skipped and reported in ImportReport.warnings;
        a missing/unsupported file or header aborts the whole import.
        """
        codec = get_format(fmt)
        self._require_owner()
        report = ImportReport()
        try:
            if hasattr(source, "read"):
                self._import_rows(codec, source, report)  # type: ignore[arg-type]
            else:
                with Path(source).open("r", encoding="utf-8", newline="") as fp:  # type: ignore[arg-type]
                    self._import_rows(codec, fp, report)
        except OSError as exc:
            raise FileError(f"failed to import tasks from {source}: {exc}") from exc

        logger.info(
            "Imported %d task(s) as %s, skipped %d row(s)",
            report.count,
            codec.name,
            len(report.warnings),
        )
        return report

    def _import_rows(self, codec: TaskFormat, fp: TextIO, report: ImportReport) -> None:
        for row_no, raw in codec.read(fp):
            try:
                task = self.add_task(codec.to_attrs(raw, self.clock))
            except ValidationError as exc:
                warning = f"row {row_no}: {exc}"
                report.warnings.append(warning)
                logger.warning("Import skipped %s", warning)
                continue
            report.imported.append(task)
