# src/taskminder/tasks/task_models.py

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any
from uuid import uuid4

from ..core.errors import ValidationError

_UNSET: Any = object()


class TaskStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, raw: Any) -> TaskStatus:
        """Blank means pending; anything else must name a known status."""
        if isinstance(raw, cls):
            return raw
        text = str(raw or "").strip().lower()
        if not text:
            return cls.PENDING
        try:
            return cls(text)
        except ValueError:
            raise ValidationError(f"invalid status: {raw!r}") from None


class TaskPriority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def parse(cls, raw: Any) -> TaskPriority | None:
        if raw is None or isinstance(raw, cls):
            return raw
        text = str(raw).strip().lower()
        if not text:
            return None
        try:
            return cls(text)
        except ValueError:
            raise ValidationError(f"invalid priority: {raw!r}") from None


PRIORITY_RANK: dict[TaskPriority | None, int] = {
    TaskPriority.HIGH: 3,
    TaskPriority.MEDIUM: 2,
    TaskPriority.LOW: 1,
    None: 0,
}


def priority_rank(priority: TaskPriority | None) -> int:
    return PRIORITY_RANK.get(priority, 0)


# ---- field coercion ----


def normalize_tags(raw: str | Iterable[Any] | None) -> list[str]:
    """
    Split comma-separated input, trim pieces, drop empties and duplicates.

    Case is preserved; duplicates are detected case-insensitively and the
    first spelling wins.
    """
    if raw is None:
        return []
    pieces = [raw] if isinstance(raw, str) else list(raw)

    out: list[str] = []
    seen: set[str] = set()
    for piece in pieces:
        for part in str(piece).split(","):
            tag = part.strip()
            key = tag.casefold()
            if not tag or key in seen:
                continue
            seen.add(key)
            out.append(tag)
    return out


def parse_date(raw: Any) -> date | None:
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    text = str(raw).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"invalid date (expected YYYY-MM-DD): {raw!r}") from None


def parse_timestamp(raw: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp. Naive values are taken as UTC."""
    if raw is None:
        return None
    if isinstance(raw, datetime):
        value = raw
    else:
        text = str(raw).strip()
        if not text:
            return None
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(f"invalid timestamp: {raw!r}") from None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value


def _required_text(name: str) -> Callable[[Any], str]:
    def coerce(value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{name} must not be blank")
        return value.strip()

    return coerce


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _recurrence(value: Any) -> dict[str, Any] | None:
    if value is None or value == "":
        return None
    if not isinstance(value, Mapping):
        raise ValidationError(f"recurrence must be a mapping, got {type(value).__name__}")
    return dict(value) or None


def _created_at(value: Any) -> datetime:
    ts = parse_timestamp(value)
    if ts is None:
        raise ValidationError("created_at is required")
    return ts


_COERCERS: dict[str, Callable[[Any], Any]] = {
    "id": _required_text("id"),
    "owner_id": _required_text("owner_id"),
    "title": _required_text("title"),
    "description": _required_text("description"),
    "status": TaskStatus.parse,
    "due_date": parse_date,
    "tags": normalize_tags,
    "priority": TaskPriority.parse,
    "recurrence": _recurrence,
    "parent_task_id": _optional_text,
    "created_at": _created_at,
    "completed_at": parse_timestamp,
    "version": int,
}

_IMMUTABLE = frozenset({"id", "owner_id", "created_at"})


@dataclass(slots=True)
class Task:
    """
    A unit of work owned by one user.

    Every assignment goes through field coercion, so tags are normalized and
    title/description stay non-blank whichever way a value arrives.
    `completed_at` is set iff status is completed; change status through
    mark_completed()/reopen() to control the completion timestamp.
    """

    owner_id: str
    title: str
    description: str
    id: str = field(default_factory=lambda: str(uuid4()))
    status: TaskStatus = TaskStatus.PENDING
    due_date: date | None = None
    tags: list[str] = field(default_factory=list)
    priority: TaskPriority | None = None
    recurrence: dict[str, Any] | None = None
    parent_task_id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None

    # Optimistic-concurrency counter; 0 until first saved.
    version: int = 0

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _IMMUTABLE and getattr(self, name, _UNSET) is not _UNSET:
            raise ValidationError(f"{name} cannot be changed")
        coerce = _COERCERS.get(name)
        if coerce is not None:
            value = coerce(value)
        # After __init__ (version is the last field), keep completed_at in step with status.
        if name == "completed_at" and getattr(self, "version", _UNSET) is not _UNSET:
            if (value is None) == self.is_completed:
                raise ValidationError("completed_at must be set iff the task is completed")
        object.__setattr__(self, name, value)
        if name == "status":
            self._sync_completion()

    def __post_init__(self) -> None:
        self._sync_completion()

    def _sync_completion(self) -> None:
        completed_at = getattr(self, "completed_at", _UNSET)
        if completed_at is _UNSET:
            # Still inside __init__; __post_init__ runs the sync.
            return
        if self.status is TaskStatus.COMPLETED:
            if completed_at is None:
                object.__setattr__(self, "completed_at", datetime.now(UTC))
        elif completed_at is not None:
            object.__setattr__(self, "completed_at", None)

    # ---- state machine ----

    @property
    def is_completed(self) -> bool:
        return self.status is TaskStatus.COMPLETED

    def mark_completed(self, at: datetime | None = None) -> bool:
        """Returns False (and keeps completed_at) if already completed."""
        if self.is_completed:
            return False
        object.__setattr__(self, "status", TaskStatus.COMPLETED)
        object.__setattr__(self, "completed_at", parse_timestamp(at) or datetime.now(UTC))
        return True

    def reopen(self) -> bool:
        if not self.is_completed:
            return False
        object.__setattr__(self, "status", TaskStatus.PENDING)
        object.__setattr__(self, "completed_at", None)
        return True

    # ---- queries ----

    def is_overdue(self, today: date | None = None) -> bool:
        if self.is_completed or self.due_date is None:
            return False
        return self.due_date < (today or date.today())

    def has_tag(self, tag: str) -> bool:
        key = str(tag).strip().casefold()
        return any(t.casefold() == key for t in self.tags)

    # ---- plain record mapping ----

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "id": self.id,
            "owner_id": self.owner_id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "tags": list(self.tags),
            "priority": self.priority.value if self.priority else None,
            "recurrence": dict(self.recurrence) if self.recurrence else None,
            "parent_task_id": self.parent_task_id,
            "created_at": self.created_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
        return {k: v for k, v in record.items() if v is not None}

    @classmethod
    def from_record(cls, raw: Mapping[str, Any]) -> Task:
        kwargs: dict[str, Any] = {
            "owner_id": raw.get("owner_id"),
            "title": raw.get("title"),
            "description": raw.get("description"),
            "status": raw.get("status"),
            "due_date": raw.get("due_date"),
            "tags": raw.get("tags"),
            "priority": raw.get("priority"),
            "recurrence": raw.get("recurrence"),
            "parent_task_id": raw.get("parent_task_id"),
            "completed_at": raw.get("completed_at"),
        }
        if raw.get("id"):
            kwargs["id"] = raw["id"]
        if raw.get("created_at"):
            kwargs["created_at"] = raw["created_at"]
        return cls(**kwargs)
