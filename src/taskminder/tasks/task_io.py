# src/taskminder/tasks/task_io.py

"""
Export/import codecs.

CSV uses a fixed header:
  ID, Title, Description, Status, Due Date, Tags, Priority, Created At, Completed At
Dates are YYYY-MM-DD, timestamps YYYY-MM-DD HH:MM:SS in the clock's zone,
tags comma-joined, empty optional fields blank.

JSON is a list of Task.to_record() dicts.

Readers yield (row_number, raw_row); to_attrs() turns one raw row into
add_task() attributes and raises ValidationError when that row is malformed.
"""

from __future__ import annotations

import csv
import json
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, TextIO

from ..core.clock import Clock
from ..core.errors import FileError, UnsupportedFormatError, ValidationError
from .task_models import Task

CSV_COLUMNS: tuple[str, ...] = (
    "ID",
    "Title",
    "Description",
    "Status",
    "Due Date",
    "Tags",
    "Priority",
    "Created At",
    "Completed At",
)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Fields an imported row may carry into add_task(); identity is never imported.
_IMPORTABLE = (
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
)


@dataclass(slots=True)
class ImportReport:
    imported: list[Task] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.imported)


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _parse_local_ts(raw: str | None, clock: Clock) -> datetime | None:
    text = _blank_to_none(raw)
    if text is None:
        return None
    try:
        return clock.localize(datetime.fromisoformat(text))
    except ValueError:
        raise ValidationError(f"invalid timestamp: {raw!r}") from None


# ---- CSV ----


def write_csv(tasks: Iterable[Task], fp: TextIO, clock: Clock) -> int:
    writer = csv.writer(fp)
    writer.writerow(CSV_COLUMNS)
    n = 0
    for task in tasks:
        completed = clock.to_local(task.completed_at).strftime(TIMESTAMP_FORMAT) if task.completed_at else ""
        writer.writerow(
            [
                task.id,
                task.title,
                task.description,
                task.status.value,
                task.due_date.isoformat() if task.due_date else "",
                ",".join(task.tags),
                task.priority.value if task.priority else "",
                clock.to_local(task.created_at).strftime(TIMESTAMP_FORMAT),
                completed,
            ]
        )
        n += 1
    return n


def read_csv(fp: TextIO) -> Iterator[tuple[int, dict[str, str]]]:
    reader = csv.DictReader(fp)
    try:
        header = reader.fieldnames
        if header is None:
            raise ValidationError("CSV file is empty (header required)")
        missing = [c for c in CSV_COLUMNS if c not in header]
        if missing:
            raise ValidationError(f"CSV header is missing column(s): {', '.join(missing)}")
        for row in reader:
            yield reader.line_num, row
    except csv.Error as exc:
        raise FileError(f"failed to parse CSV near line {reader.line_num}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise FileError(f"CSV file is not valid UTF-8 near line {reader.line_num}: {exc}") from exc


def csv_row_to_attrs(row: Mapping[str, str | None], clock: Clock) -> dict[str, Any]:
    if None in row:
        raise ValidationError("row has more fields than the header")
    return {
        "title": row.get("Title") or "",
        "description": row.get("Description") or "",
        "status": _blank_to_none(row.get("Status")),
        "due_date": _blank_to_none(row.get("Due Date")),
        "tags": row.get("Tags") or "",
        "priority": _blank_to_none(row.get("Priority")),
        "created_at": _parse_local_ts(row.get("Created At"), clock),
        "completed_at": _parse_local_ts(row.get("Completed At"), clock),
    }


# ---- JSON ----


def write_json(tasks: Iterable[Task], fp: TextIO, clock: Clock) -> int:
    records = [t.to_record() for t in tasks]
    json.dump(records, fp, ensure_ascii=False, indent=2)
    fp.write("\n")
    return len(records)


def read_json(fp: TextIO) -> Iterator[tuple[int, Any]]:
    try:
        data = json.load(fp)
    except ValueError as exc:
        raise FileError(f"failed to parse JSON: {exc}") from exc
    if not isinstance(data, list):
        raise ValidationError("JSON import must contain a list of tasks")
    for i, item in enumerate(data, start=1):
        yield i, item


def json_item_to_attrs(item: Any, clock: Clock) -> dict[str, Any]:
    if not isinstance(item, Mapping):
        raise ValidationError(f"expected an object, got {type(item).__name__}")
    return {k: item[k] for k in _IMPORTABLE if k in item}


# ---- registry ----


@dataclass(frozen=True, slots=True)
class TaskFormat:
    name: str
    write: Callable[[Iterable[Task], TextIO, Clock], int]
    read: Callable[[TextIO], Iterator[tuple[int, Any]]]
    to_attrs: Callable[[Any, Clock], dict[str, Any]]


FORMATS: dict[str, TaskFormat] = {
    "csv": TaskFormat("csv", write_csv, read_csv, csv_row_to_attrs),
    "json": TaskFormat("json", write_json, read_json, json_item_to_attrs),
}


def get_format(name: str) -> TaskFormat:
    key = str(name or "").strip().lower().lstrip(".")
    fmt = FORMATS.get(key)
    if fmt is None:
        raise UnsupportedFormatError(f"unsupported format: {name!r} (supported: {', '.join(FORMATS)})")
    return fmt
