# src/taskminder/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..config import Settings
from ..notifications.bus import NotificationBus
from ..tasks.task_service import TaskService
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Store Settings on the state for easy access in command handlers.
    settings: Settings

    task_store: TaskStore
    bus: NotificationBus
    service: TaskService
