from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from taskapi.database import get_db
from taskapi.dependencies import get_current_user, get_task_service
from taskapi.models.task import TaskStatus, TaskPriority
from taskapi.models.user import User
from taskapi.schemas.task import TaskCreateRequest, TaskBatchCreateRequest, TaskUpdateRequest
from taskapi.schemas.common import success_response, paginated_response
from taskapi.services.task_service import TaskService

router = APIRouter(prefix="/tasks")


@router.get("", summary="List tasks (paginated)")
def list_tasks(
    page:       int                    = Query(1, ge=1),
    limit:      int                    = Query(20, ge=1, le=100),
    status:     Optional[TaskStatus]   = Query(None, description="pending | in_progress | completed"),
    priority:   Optional[TaskPriority] = Query(None, description="low | medium | high"),
    authorId:   Optional[UUID]         = Query(None),
    assigneeId: Optional[UUID]         = Query(None),
    search:     Optional[str]          = Query(None, description="Search title and description"),
    db:         Session                = Depends(get_db),
    _:          User                   = Depends(get_current_user),
    task_service: TaskService          = Depends(get_task_service),
):
    data, total = task_service.list_tasks(
        db, page, limit, status, priority,
        str(authorId) if authorId else None,
        str(assigneeId) if assigneeId else None,
        search,
    )
    return paginated_response("Tasks retrieved successfully", data, total, page, limit)


@router.get("/{task_id}", summary="Get task by ID")
def get_task(
    task_id: UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    return success_response("Task retrieved", task_service.get_task(db, str(task_id)))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create task")
def create_task(
    body: TaskCreateRequest,
    db:   Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    data = task_service.create_task(db, body, current_user.id)
    return success_response("Task created successfully", data)


@router.post("/batch", status_code=status.HTTP_201_CREATED, summary="Create several tasks at once")
def create_tasks_batch(
    body: TaskBatchCreateRequest,
    db:   Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    data = task_service.create_tasks_batch(db, body.tasks, current_user.id)
    return success_response(f"{len(data)} tasks created successfully", data)


@router.patch("/{task_id}", summary="Update task")
def update_task(
    task_id: UUID,
    body:    TaskUpdateRequest,
    db:      Session = Depends(get_db),
    _:       User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    data = task_service.update_task(db, str(task_id), body)
    return success_response("Task updated successfully", data)


@router.delete("/{task_id}", summary="Delete task")
def delete_task(
    task_id: UUID,
    db:      Session = Depends(get_db),
    _:       User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    task_service.delete_task(db, str(task_id))
    return success_response("Task deleted successfully", None)
