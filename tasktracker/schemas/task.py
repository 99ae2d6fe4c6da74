from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Annotated, Optional

# Ids are SQLite/Postgres signed 64-bit integers assigned from 1 upwards.
TaskId = Annotated[int, Field(ge=1, le=2**63 - 1)]


def _check_title(value: Optional[str]) -> Optional[str]:
    if value is None:
        raise ValueError("Title cannot be null")
    if not value.strip():
        raise ValueError("Title is required")
    return value


class _Input(BaseModel):
    """Procedure inputs reject unknown keys and loosely typed values."""

    model_config = ConfigDict(extra="forbid", strict=True)


class TaskCreate(_Input):
    """Schema for creating new tasks."""
    title: str
    description: Optional[str] = None

    _title_not_blank = field_validator("title")(_check_title)


class TaskUpdate(_Input):
    """Schema for updating existing tasks.

    Only the fields actually sent are applied: an absent ``description``
    leaves the stored value alone, an explicit ``None`` clears it.
    """
    id: TaskId
    title: Optional[str] = None
    description: Optional[str] = None
    completed: Optional[bool] = None

    _title_not_blank = field_validator("title")(_check_title)

    @field_validator("completed")
    @classmethod
    def _completed_not_null(cls, value):
        if value is None:
            raise ValueError("Completed cannot be null")
        return value

    def changes(self) -> dict:
        """Fields present in the request, minus the id."""
        return self.model_dump(exclude_unset=True, exclude={"id"})


class TaskToggle(_Input):
    """Schema for setting the completion flag of a task."""
    id: TaskId
    completed: bool


class TaskDelete(_Input):
    id: TaskId


class TaskRead(BaseModel):
    """Complete task schema with all fields."""
    id: int
    title: str
    description: Optional[str] = None
    completed: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DeleteResult(BaseModel):
    success: bool


class HealthStatus(BaseModel):
    status: str
    timestamp: datetime
