# src/taskminder/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..core.errors import ConflictError, DuplicateError, FileError
from .task_models import Task

logger = logging.getLogger(__name__)


class TaskStore:
    """
    SQLite task repository.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Writes use optimistic versioning: an update only lands if the stored
    version still matches the version the caller loaded.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FileError(f"failed to create data directory: {exc}") from exc
        self._ensure_schema()
        logger.info("TaskStore ready db=%s total=%s", self._db_path, self.count_tasks())

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.DatabaseError):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    owner_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'pending',
                    due_date TEXT,
                    tags TEXT NOT NULL DEFAULT '[]',
                    priority TEXT,
                    recurrence TEXT,
                    parent_task_id TEXT,
                    created_at TEXT NOT NULL,
                    completed_at TEXT,
                    version INTEGER NOT NULL DEFAULT 1
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("priority", "TEXT")
            add_col("recurrence", "TEXT")
            add_col("parent_task_id", "TEXT")
            add_col("version", "INTEGER NOT NULL DEFAULT 1")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_owner ON tasks(owner_id, status)")

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _ts_to_str(value: datetime | None) -> str | None:
        if value is None:
            return None
        return value.astimezone(UTC).isoformat()

    @staticmethod
    def _json_or_none(value: Any) -> str | None:
        if value is None:
            return None
        return json.dumps(value, ensure_ascii=False)

    @staticmethod
    def _str_to_json(s: str | None, default: Any) -> Any:
        if not s:
            return default
        try:
            return json.loads(s)
        except ValueError:
            logger.warning("Corrupt JSON column value %r; using default", s)
            return default

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        return Task(
            id=row["id"],
            owner_id=row["owner_id"],
            title=row["title"],
            description=row["description"],
            status=row["status"],
            due_date=row["due_date"],
            tags=self._str_to_json(row["tags"], []),
            priority=row["priority"],
            recurrence=self._str_to_json(row["recurrence"], None),
            parent_task_id=row["parent_task_id"],
            created_at=row["created_at"],
            completed_at=row["completed_at"],
            version=int(row["version"] or 1),
        )

    def _task_params(self, task: Task) -> dict[str, Any]:
        return {
            "id": task.id,
            "owner_id": task.owner_id,
            "title": task.title,
            "description": task.description,
            "status": task.status.value,
            "due_date": task.due_date.isoformat() if task.due_date else None,
            "tags": json.dumps(task.tags, ensure_ascii=False),
            "priority": task.priority.value if task.priority else None,
            "recurrence": self._json_or_none(task.recurrence),
            "parent_task_id": task.parent_task_id,
            "created_at": self._ts_to_str(task.created_at),
            "completed_at": self._ts_to_str(task.completed_at),
            "version": task.version,
        }

    # ---- public API ----

    def count_tasks(self) -> int:
        conn = self._get_conn()
        try:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)
        finally:
            conn.close()

    def load_by_owner(self, owner_id: str) -> list[Task]:
        conn = self._get_conn()
        try:
            cur = conn.execute(
                "SELECT * FROM tasks WHERE owner_id = ? ORDER BY created_at ASC, id ASC",
                (owner_id,),
            )
            return [self._row_to_task(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def find(self, task_id: str, owner_id: str) -> Task | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM tasks WHERE id = ? AND owner_id = ?",
                (task_id, owner_id),
            ).fetchone()
            return self._row_to_task(row) if row else None
        finally:
            conn.close()

    def save(self, task: Task) -> Task:
        """
        Insert a new task or update an existing one.

        Update is a compare-and-swap on (id, owner_id, version):
          version = expected -> version = expected + 1
        Zero affected rows on an existing id raises ConflictError; a never-saved
        task (version 0) whose id is already taken raises DuplicateError.
        """
        params = self._task_params(task)

        conn = self._get_conn()
        try:
            cur = conn.cursor()
            exists = cur.execute("SELECT 1 FROM tasks WHERE id = ?", (task.id,)).fetchone()

            if exists is None:
                params["version"] = 1
                cur.execute(
                    """
                    INSERT INTO tasks(
                        id, owner_id, title, description, status, due_date, tags,
                        priority, recurrence, parent_task_id, created_at, completed_at, version
                    )
                    VALUES (
                        :id, :owner_id, :title, :description, :status, :due_date, :tags,
                        :priority, :recurrence, :parent_task_id, :created_at, :completed_at, :version
                    )
                    """,
                    params,
                )
                conn.commit()
                logger.debug("Task inserted id=%s owner=%s", task.id, task.owner_id)
                return replace(task, version=1)

            if task.version == 0:
                raise DuplicateError(f"task id '{task.id}' is already in use")

            cur.execute(
                """
                UPDATE tasks
                SET title = :title,
                    description = :description,
                    status = :status,
                    due_date = :due_date,
                    tags = :tags,
                    priority = :priority,
                    recurrence = :recurrence,
                    parent_task_id = :parent_task_id,
                    completed_at = :completed_at,
                    version = version + 1
                WHERE id = :id
                  AND owner_id = :owner_id
                  AND version = :version
                """,
                params,
            )
            if cur.rowcount != 1:
                conn.rollback()
                raise ConflictError(
                    f"task '{task.id}' was modified or reassigned since version {task.version}"
                )
            conn.commit()
            logger.debug("Task updated id=%s version=%s", task.id, task.version + 1)
            return replace(task, version=task.version + 1)
        finally:
            conn.close()

    def delete(self, task_id: str, owner_id: str) -> bool:
        conn = self._get_conn()
        try:
            cur = conn.execute(
                "DELETE FROM tasks WHERE id = ? AND owner_id = ?",
                (task_id, owner_id),
            )
            conn.commit()
            return cur.rowcount == 1
        finally:
            conn.close()
