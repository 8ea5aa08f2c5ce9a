# tests/test_task_service.py

from __future__ import annotations

from dataclasses import replace

import pytest

from taskminder.core.errors import ConflictError, DuplicateError, NotFoundError, ValidationError
from taskminder.notifications.events import EventKind
from taskminder.tasks.task_models import TaskStatus
from taskminder.tasks.task_service import TaskService

from .fakes import ExplodingObserver, days


def _add(service, title: str = "Buy milk", **extra):
    return service.add_task({"title": title, "description": f"{title}!", **extra})


def test_add_task_assigns_identity_and_publishes(service, repo, recorder, clock) -> None:
    t = _add(service, tags="Shop, shop ,home")
    assert t.owner_id == "alice"
    assert t.created_at == clock.now()
    assert t.tags == ["Shop", "home"]
    assert t.version == 1
    assert t.id in repo.tasks
    assert recorder.events == [(t.id, EventKind.CREATED)]


def test_add_invalid_task_saves_and_publishes_nothing(service, repo, recorder) -> None:
    with pytest.raises(ValidationError):
        service.add_task({"title": "", "description": "x"})
    with pytest.raises(ValidationError):
        service.add_task({"title": "t", "description": "d", "colour": "red"})
    with pytest.raises(ValidationError):
        service.add_task({"title": "t", "description": "d", "owner_id": "bob"})
    assert repo.tasks == {}
    assert recorder.events == []


def test_add_completed_task_gets_completed_at(service, clock) -> None:
    t = _add(service, status="completed")
    assert t.completed_at == clock.now()


def test_add_with_existing_id_is_duplicate(service) -> None:
    _add(service, id="fixed-id")
    with pytest.raises(DuplicateError):
        _add(service, id="fixed-id")


def test_operations_without_owner_raise(repo, clock) -> None:
    svc = TaskService(repo, clock=clock)
    with pytest.raises(NotFoundError):
        svc.list_tasks()
    with pytest.raises(NotFoundError):
        _add(svc)
    with pytest.raises(ValidationError):
        svc.set_current_owner("  ")


def test_tasks_are_scoped_to_the_current_owner(service) -> None:
    t = _add(service)
    service.set_current_owner("bob")
    assert service.list_tasks() == []
    with pytest.raises(NotFoundError):
        service.find_task_by_id(t.id)
    with pytest.raises(NotFoundError):
        service.delete_task(t.id)

    service.set_current_owner("alice")
    assert service.find_task_by_id(t.id).id == t.id


def test_find_unknown_id_raises(service) -> None:
    with pytest.raises(NotFoundError):
        service.find_task_by_id("nope")


def test_list_sorted_by_due_date_and_priority(service, today) -> None:
    d2 = _add(service, "D2", due_date=days(today, 2), priority="high")
    d1 = _add(service, "D1", due_date=days(today, 1), priority="low")

    assert [t.title for t in service.list_tasks(sort_by="due_date")] == ["D1", "D2"]
    assert [t.id for t in service.list_tasks(sort_by="priority")] == [d2.id, d1.id]
    assert [t.id for t in service.list_tasks(sort_by="unknown")] == [d1.id, d2.id]


def test_list_filters(service, today) -> None:
    work = _add(service, "A", tags="Work", due_date=days(today, -1))
    home = _add(service, "B", tags="home", due_date=days(today, 3))
    done = _add(service, "C", tags="work", status="completed")

    assert {t.id for t in service.list_tasks(tags="WORK")} == {work.id, done.id}
    assert [t.id for t in service.list_tasks(status="completed")] == [done.id]
    assert [t.id for t in service.list_tasks(overdue=True)] == [work.id]
    assert [t.id for t in service.list_tasks(due_after=today)] == [home.id]
    assert [t.id for t in service.list_tasks(due_on=days(today, -1).isoformat())] == [work.id]


def test_list_returns_copies(service, repo) -> None:
    t = _add(service)
    listed = service.list_tasks()[0]
    listed.title = "changed locally"
    assert repo.tasks[t.id].title == "Buy milk"


def test_update_renormalizes_and_publishes(service, recorder, today) -> None:
    t = _add(service)
    updated = service.update_task(t.id, {"tags": "a, A, b", "due_date": days(today, 5).isoformat()})
    assert updated.tags == ["a", "b"]
    assert updated.due_date == days(today, 5)
    assert updated.version == 2
    assert recorder.kinds()[-1] is EventKind.UPDATED


def test_update_rejects_read_only_and_invalid_values(service, repo, recorder) -> None:
    t = _add(service)
    with pytest.raises(ValidationError, match="read-only"):
        service.update_task(t.id, {"id": "x"})
    with pytest.raises(ValidationError):
        service.update_task(t.id, {"title": "new", "description": "  "})

    stored = repo.tasks[t.id]
    assert stored.title == "Buy milk"
    assert stored.version == 1
    assert recorder.kinds() == [EventKind.CREATED]


def test_status_change_through_update(service, recorder, clock) -> None:
    t = _add(service)
    done = service.update_task(t.id, {"status": "completed"})
    assert done.completed_at == clock.now()
    again = service.update_task(t.id, {"status": "pending"})
    assert again.completed_at is None
    assert recorder.kinds() == [EventKind.CREATED, EventKind.COMPLETED, EventKind.REOPENED]


def test_complete_is_idempotent(service, recorder, clock) -> None:
    t = _add(service)
    done = service.complete_task(t.id)
    assert done.status is TaskStatus.COMPLETED
    first = done.completed_at
    assert first == clock.now()

    clock.advance(hours=2)
    again = service.complete_task(t.id)
    assert again.completed_at == first
    assert again.version == done.version
    assert recorder.kinds().count(EventKind.COMPLETED) == 1


def test_reopen_clears_completion(service, recorder) -> None:
    t = _add(service, status="completed")
    reopened = service.reopen_task(t.id)
    assert reopened.status is TaskStatus.PENDING
    assert reopened.completed_at is None
    service.reopen_task(t.id)
    assert recorder.kinds() == [EventKind.CREATED, EventKind.REOPENED]


def test_completion_invariant_holds_across_operations(service, repo) -> None:
    t = _add(service)
    service.complete_task(t.id)
    service.update_task(t.id, {"title": "renamed"})
    service.reopen_task(t.id)
    service.update_task(t.id, {"status": "completed"})
    for stored in repo.tasks.values():
        assert (stored.status is TaskStatus.COMPLETED) == (stored.completed_at is not None)


def test_delete_removes_and_publishes(service, repo, recorder) -> None:
    t = _add(service)
    deleted = service.delete_task(t.id)
    assert deleted.id == t.id
    assert repo.tasks == {}
    assert recorder.kinds()[-1] is EventKind.DELETED
    with pytest.raises(NotFoundError):
        service.find_task_by_id(t.id)


def test_check_overdue_tasks(service, recorder, today) -> None:
    late = _add(service, "late", due_date=days(today, -1))
    _add(service, "late but done", due_date=days(today, -1), status="completed")
    _add(service, "due today", due_date=today)
    _add(service, "undated")

    found = service.check_overdue_tasks()
    assert [t.id for t in found] == [late.id]
    assert recorder.events[-1] == (late.id, EventKind.OVERDUE_CHECK)


def test_check_due_soon_tasks(service, recorder, today) -> None:
    _add(service, "late", due_date=days(today, -1))
    now = _add(service, "today", due_date=today)
    tomorrow = _add(service, "tomorrow", due_date=days(today, 1))
    _add(service, "later", due_date=days(today, 2))

    found = service.check_due_soon_tasks()
    assert [t.id for t in found] == [now.id, tomorrow.id]
    assert recorder.kinds()[-2:] == [EventKind.DUE_SOON, EventKind.DUE_SOON]


def test_observer_failure_does_not_fail_the_operation(service, bus, recorder) -> None:
    bus.add_observer(ExplodingObserver())
    t = _add(service)
    done = service.complete_task(t.id)
    assert done.is_completed
    assert recorder.kinds() == [EventKind.CREATED, EventKind.COMPLETED]


def test_stale_write_raises_conflict(service, repo) -> None:
    t = _add(service)
    stale = service.find_task_by_id(t.id)
    service.update_task(t.id, {"title": "fresh"})

    with pytest.raises(ConflictError):
        repo.save(replace(stale, title="stale"))
    assert repo.tasks[t.id].title == "fresh"


def test_add_with_id_owned_by_someone_else_is_duplicate(service, repo) -> None:
    _add(service, id="shared")
    service.set_current_owner("bob")
    with pytest.raises(DuplicateError):
        _add(service, "Bob's", id="shared")
    assert repo.tasks["shared"].owner_id == "alice"
