import logging
from datetime import datetime, timedelta
from typing import List

from sqlalchemy import delete
from sqlmodel import Session, select

from ..errors import TaskNotFoundError
from ..models import Task, as_utc, utcnow
from ..schemas.task import DeleteResult, TaskCreate, TaskDelete, TaskToggle, TaskUpdate

logger = logging.getLogger(__name__)


def _next_updated_at(previous: datetime) -> datetime:
    # updated_at must move forward on every mutation, even within one clock tick
    previous = as_utc(previous)
    now = utcnow()
    if now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


def _get_or_raise(db: Session, task_id: int) -> Task:
    task = db.get(Task, task_id)
    if task is None:
        raise TaskNotFoundError(task_id)
    return task


def create_task(db: Session, task: TaskCreate) -> Task:
    """Insert a new, not yet completed task."""
    now = utcnow()
    db_task = Task(
        title=task.title,
        description=task.description,
        completed=False,
        created_at=now,
        updated_at=now,
    )
    try:
        db.add(db_task)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Task creation failed")
        raise
    db.refresh(db_task)
    logger.info("Created task %s", db_task.id)
    return db_task


def get_tasks(db: Session) -> List[Task]:
    """All tasks, newest first."""
    try:
        query = select(Task).order_by(Task.created_at.desc(), Task.id.desc())
        return list(db.exec(query).all())
    except Exception:
        logger.exception("Get tasks failed")
        raise


def update_task(db: Session, task_update: TaskUpdate) -> Task:
    """Apply the fields present in ``task_update`` to an existing task."""
    try:
        task = _get_or_raise(db, task_update.id)

        for field, value in task_update.changes().items():
            setattr(task, field, value)

        task.updated_at = _next_updated_at(task.updated_at)

        db.commit()
    except TaskNotFoundError as exc:
        logger.warning("Task update failed: %s", exc)
        raise
    except Exception:
        db.rollback()
        logger.exception("Task update failed")
        raise
    db.refresh(task)
    return task


def toggle_task(db: Session, toggle: TaskToggle) -> Task:
    """Set the completion flag of an existing task."""
    try:
        task = _get_or_raise(db, toggle.id)

        task.completed = toggle.completed
        task.updated_at = _next_updated_at(task.updated_at)

        db.commit()
    except TaskNotFoundError as exc:
        logger.warning("Task toggle failed: %s", exc)
        raise
    except Exception:
        db.rollback()
        logger.exception("Task toggle failed")
        raise
    db.refresh(task)
    return task


def delete_task(db: Session, target: TaskDelete) -> DeleteResult:
    """Remove a task; a missing id is reported as ``success=False``, not raised."""
    try:
        result = db.exec(delete(Task).where(Task.id == target.id))
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Task deletion failed")
        raise
    return DeleteResult(success=(result.rowcount or 0) > 0)
