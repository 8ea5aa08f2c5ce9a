# tests/test_notification_bus.py

from __future__ import annotations

from taskminder.notifications.bus import NotificationBus
from taskminder.notifications.events import EventKind

from .fakes import ExplodingObserver, RecordingObserver, make_task


def test_observers_receive_events_in_registration_order() -> None:
    bus = NotificationBus()
    seen: list[str] = []

    class Named:
        def __init__(self, name: str) -> None:
            self.name = name

        def receive(self, task, event_kind) -> None:
            seen.append(self.name)

    bus.add_observer(Named("first"))
    bus.add_observer(Named("second"))
    assert bus.publish(make_task(), EventKind.CREATED) == 2
    assert seen == ["first", "second"]


def test_failing_observer_does_not_stop_delivery() -> None:
    bus = NotificationBus()
    boom = ExplodingObserver()
    rec = RecordingObserver()
    bus.add_observer(boom)
    bus.add_observer(rec)

    task = make_task()
    assert bus.publish(task, EventKind.COMPLETED) == 1
    assert boom.calls == 1
    assert rec.events == [(task.id, EventKind.COMPLETED)]
    assert bus.stats.events_published == 1
    assert bus.stats.deliveries_failed == 1
    assert bus.stats.deliveries_succeeded == 1


def test_add_remove_count() -> None:
    bus = NotificationBus()
    rec = RecordingObserver()
    bus.add_observer(rec)
    bus.add_observer(rec)
    assert bus.count_observers() == 1

    assert bus.remove_observer(rec) is True
    assert bus.remove_observer(rec) is False
    assert bus.count_observers() == 0
    assert bus.publish(make_task(), EventKind.DELETED) == 0


def test_publish_accepts_plain_string_kinds() -> None:
    bus = NotificationBus()
    rec = RecordingObserver()
    bus.add_observer(rec)

    task = make_task()
    assert bus.publish(task, "created") == 1
    assert rec.events == [(task.id, "created")]
