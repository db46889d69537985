from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from uuid import UUID

from taskapi.models.task import TaskStatus, TaskPriority


def _ids_to_str(v):
    if v is None:
        return v
    # Duplicates collapse; order of first appearance is kept
    return list(dict.fromkeys(str(i) for i in v))


# ─── Request ──────────────────────────────────────────────────────────────────
class TaskCreateRequest(BaseModel):
    title:       str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    status:      Optional[TaskStatus] = None
    priority:    Optional[TaskPriority] = None
    deadline:    Optional[datetime] = None
    authorId:    Optional[UUID] = None
    assigneeIds: Optional[list[UUID]] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, v):
        if not v.strip(): raise ValueError("Title is required")
        return v.strip()

    @field_validator("assigneeIds")
    @classmethod
    def check_assignees(cls, v): return _ids_to_str(v)


class TaskBatchCreateRequest(BaseModel):
    tasks: list[TaskCreateRequest]


class TaskUpdateRequest(BaseModel):
    """Every field is optional; only fields present in the body are applied."""
    title:       Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    status:      Optional[TaskStatus] = None
    priority:    Optional[TaskPriority] = None
    deadline:    Optional[datetime] = None
    assigneeIds: Optional[list[UUID]] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, v):
        if v is not None and not v.strip(): raise ValueError("Title is required")
        return v.strip() if v else v

    @field_validator("assigneeIds")
    @classmethod
    def check_assignees(cls, v): return _ids_to_str(v)
