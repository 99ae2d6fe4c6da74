from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel import Session, select

from tasktracker.errors import TaskNotFoundError
from tasktracker.handlers import create_task, delete_task, get_tasks, toggle_task, update_task
from tasktracker.handlers.tasks import _next_updated_at
from tasktracker.models import Task, as_utc, utcnow
from tasktracker.schemas.task import TaskCreate, TaskDelete, TaskToggle, TaskUpdate


def _insert(session: Session, **fields) -> Task:
    task = Task(**fields)
    session.add(task)
    session.commit()
    session.refresh(task)
    return task


def test_create_task_defaults(session: Session) -> None:
    task = create_task(session, TaskCreate(title="Buy milk"))

    assert task.id is not None
    assert task.title == "Buy milk"
    assert task.description is None
    assert task.completed is False
    assert task.created_at == task.updated_at


def test_create_task_stamps_current_utc_time(session: Session) -> None:
    before = utcnow()
    task = create_task(session, TaskCreate(title="Stamped"))

    stored = session.exec(select(Task).where(Task.id == task.id)).one()
    assert stored.created_at == stored.updated_at
    assert before - timedelta(seconds=1) <= as_utc(stored.created_at) <= utcnow() + timedelta(seconds=1)


def test_create_task_persists_description(session: Session) -> None:
    created = create_task(session, TaskCreate(title="Write report", description="Q3 numbers"))

    stored = session.exec(select(Task).where(Task.id == created.id)).one()
    assert stored.description == "Q3 numbers"
    assert stored.completed is False


def test_get_tasks_empty(session: Session) -> None:
    assert get_tasks(session) == []


def test_get_tasks_newest_first(session: Session) -> None:
    first = create_task(session, TaskCreate(title="A"))
    second = create_task(session, TaskCreate(title="B"))

    assert [t.id for t in get_tasks(session)] == [second.id, first.id]


def test_get_tasks_orders_by_created_at(session: Session) -> None:
    jan, mar, jun = (datetime(2024, month, 1, tzinfo=timezone.utc) for month in (1, 3, 6))
    old = _insert(session, title="old", created_at=jan, updated_at=jan)
    new = _insert(session, title="new", created_at=jun, updated_at=jun)
    mid = _insert(session, title="mid", created_at=mar, updated_at=mar)

    assert [t.id for t in get_tasks(session)] == [new.id, mid.id, old.id]


def test_update_title_only(session: Session) -> None:
    original = _insert(session, title="Original Title", description="Original description")
    before = original.updated_at

    result = update_task(session, TaskUpdate(id=original.id, title="Updated Title"))

    assert result.title == "Updated Title"
    assert result.description == "Original description"
    assert result.completed is False
    assert result.updated_at > before
    assert result.created_at == original.created_at


def test_update_description_null_clears(session: Session) -> None:
    original = _insert(session, title="Test Task", description="Has description")

    result = update_task(session, TaskUpdate(id=original.id, description=None))

    assert result.description is None
    assert result.title == "Test Task"


def test_update_without_description_keeps_it(session: Session) -> None:
    original = _insert(session, title="Test Task", description="Keep me")

    result = update_task(session, TaskUpdate(id=original.id, completed=True))

    assert result.description == "Keep me"
    assert result.completed is True


def test_update_multiple_fields(session: Session) -> None:
    original = _insert(session, title="Original", description="Original description")

    result = update_task(
        session,
        TaskUpdate(id=original.id, title="Updated", description="Updated description", completed=True),
    )

    assert (result.title, result.description, result.completed) == ("Updated", "Updated description", True)


def test_update_missing_task_raises(session: Session) -> None:
    with pytest.raises(TaskNotFoundError, match="Task with id 999999 not found"):
        update_task(session, TaskUpdate(id=999999, title="Updated Title"))


def test_toggle_flips_and_bumps_updated_at(session: Session) -> None:
    original = _insert(session, title="Test Task", description="A task for testing")
    before = original.updated_at

    done = toggle_task(session, TaskToggle(id=original.id, completed=True))
    assert done.completed is True
    assert done.updated_at > before
    assert done.description == "A task for testing"
    done_at = done.updated_at

    undone = toggle_task(session, TaskToggle(id=original.id, completed=False))
    assert undone.completed is False
    assert undone.updated_at > done_at


def test_toggle_keeps_null_description(session: Session) -> None:
    original = _insert(session, title="No description")

    result = toggle_task(session, TaskToggle(id=original.id, completed=True))

    assert result.description is None


def test_toggle_missing_task_raises(session: Session) -> None:
    with pytest.raises(TaskNotFoundError, match="Task with id 999 not found"):
        toggle_task(session, TaskToggle(id=999, completed=True))


def test_delete_existing_task(session: Session) -> None:
    task = _insert(session, title="Task to Delete")
    keep = _insert(session, title="Task to Keep")

    assert delete_task(session, TaskDelete(id=task.id)).success is True

    remaining = [t.id for t in get_tasks(session)]
    assert remaining == [keep.id]


def test_delete_missing_task_is_not_an_error(session: Session) -> None:
    assert delete_task(session, TaskDelete(id=999999)).success is False


def test_delete_twice(session: Session) -> None:
    task = _insert(session, title="Once")

    assert delete_task(session, TaskDelete(id=task.id)).success is True
    assert delete_task(session, TaskDelete(id=task.id)).success is False


def test_next_updated_at_accepts_naive_timestamps() -> None:
    naive = datetime(2024, 1, 1, 12, 0, 0)
    bumped = _next_updated_at(naive)

    assert bumped.tzinfo is not None
    assert bumped > naive.replace(tzinfo=timezone.utc)
