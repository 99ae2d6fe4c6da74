from .task import (
    DeleteResult,
    HealthStatus,
    TaskCreate,
    TaskDelete,
    TaskRead,
    TaskToggle,
    TaskUpdate,
)

__all__ = [
    "DeleteResult",
    "HealthStatus",
    "TaskCreate",
    "TaskDelete",
    "TaskRead",
    "TaskToggle",
    "TaskUpdate",
]
