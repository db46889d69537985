"""
Import all models here so that:
1. Alembic can auto-detect them when generating migrations
2. Relationships between models resolve correctly

Order matters — import parent tables before child tables.
"""

from taskapi.models.user import User
from taskapi.models.refresh_token import RefreshToken
from taskapi.models.task import Task, TaskStatus, TaskPriority, task_assignees

__all__ = [
    "User",
    "RefreshToken",
    "Task",
    "TaskStatus",
    "TaskPriority",
    "task_assignees",
]
