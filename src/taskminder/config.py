# src/taskminder/config.py

"""Settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object, built once by the entry point and passed down.
- No secrets required at import time.
- No module-level singleton; tests build their own Settings.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKMINDER"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_optional(name: str) -> str | None:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return None
    return v.strip()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths ----
    data_dir: Path
    tasks_db_path: Path

    # ---- Engine ----
    timezone: str | None
    default_owner: str
    default_sort: str
    due_soon_days: int
    export_format: str

    # ---- Notifications ----
    notify_system: bool
    notify_email: bool
    smtp_host: str | None
    smtp_port: int
    mail_from: str
    mail_to_template: str

    @staticmethod
    def from_env(*, load_env_file: bool = True) -> "Settings":
        if load_env_file:
            load_dotenv(override=False)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskminder"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")

        default_owner = (
            _env_optional(_k("OWNER")) or _env_optional("USER") or _env_optional("USERNAME") or "local"
        )

        return Settings(
            app_name=_env(_k("APP_NAME"), "taskminder"),
            log_level=_env(_k("LOG_LEVEL"), "INFO"),
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            timezone=_env_optional(_k("TIMEZONE")),
            default_owner=default_owner,
            default_sort=_env(_k("DEFAULT_SORT"), "default"),
            due_soon_days=max(0, _env_int(_k("DUE_SOON_DAYS"), 1)),
            export_format=_env(_k("EXPORT_FORMAT"), "csv"),
            notify_system=_env_bool(_k("NOTIFY_SYSTEM"), False),
            notify_email=_env_bool(_k("NOTIFY_EMAIL"), False),
            smtp_host=_env_optional(_k("SMTP_HOST")),
            smtp_port=_env_int(_k("SMTP_PORT"), 25),
            mail_from=_env(_k("MAIL_FROM"), "taskminder@localhost"),
            mail_to_template=_env(_k("MAIL_TO_TEMPLATE"), "{owner_id}@localhost"),
        )
