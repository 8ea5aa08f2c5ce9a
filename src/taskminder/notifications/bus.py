# src/taskminder/notifications/bus.py

from __future__ import annotations

"""
Notification bus.

A plain observer registry with synchronous dispatch in registration order.
A failing observer is logged and skipped; publish() never raises, so the
business operation that triggered the event is unaffected.
"""

import logging
from dataclasses import dataclass

from ..core.ports import TaskObserver
from ..tasks.task_models import Task
from .events import EventKind

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BusStats:
    events_published: int = 0
    deliveries_succeeded: int = 0
    deliveries_failed: int = 0


class NotificationBus:
    def __init__(self) -> None:
        self._observers: list[TaskObserver] = []
        self.stats = BusStats()

    def add_observer(self, observer: TaskObserver) -> None:
        if any(o is observer for o in self._observers):
            return
        self._observers.append(observer)
        logger.debug("Observer added: %s", type(observer).__name__)

    def remove_observer(self, observer: TaskObserver) -> bool:
        for i, o in enumerate(self._observers):
            if o is observer:
                del self._observers[i]
                logger.debug("Observer removed: %s", type(observer).__name__)
                return True
        return False

    def count_observers(self) -> int:
        return len(self._observers)

    def publish(self, task: Task, event_kind: EventKind) -> int:
        """Deliver the event to every observer. Returns the number of successful deliveries."""
        self.stats.events_published += 1
        logger.debug(
            "Publishing %s for task id=%s to %d observer(s)",
            event_kind,
            task.id,
            len(self._observers),
        )

        delivered = 0
        # Snapshot: observers may (un)register while we dispatch.
        for observer in list(self._observers):
            try:
                observer.receive(task, event_kind)
            except Exception:
                self.stats.deliveries_failed += 1
                logger.exception(
                    "Observer %s failed on %s task_id=%s",
                    type(observer).__name__,
                    event_kind,
                    task.id,
                )
                continue
            delivered += 1

        self.stats.deliveries_succeeded += delivered
        return delivered
