from sqlalchemy.orm import Session, selectinload
from sqlalchemy import or_

from taskapi.models.task import Task, TaskStatus
from taskapi.models.user import User
from taskapi.schemas.task import TaskCreateRequest, TaskUpdateRequest
from taskapi.utils.exceptions import BadRequestException, NotFoundException
from taskapi.utils.search import LIKE_ESCAPE, contains_pattern


def _serialize_user(u: User) -> dict:
    return {"id": u.id, "name": u.name, "email": u.email}


def _serialize(t: Task) -> dict:
    return {
        "id":          t.id,
        "title":       t.title,
        "description": t.description,
        "status":      t.status.value,
        "priority":    t.priority.value if t.priority else None,
        "deadline":    t.deadline.isoformat() if t.deadline else None,
        "authorId":    t.authorId,
        "author":      _serialize_user(t.author),
        "assignees":   [_serialize_user(u) for u in t.assignees],
        "createdAt":   t.createdAt.isoformat(),
        "updatedAt":   t.updatedAt.isoformat(),
    }


def _load_assignees(db: Session, assignee_ids: list[str]) -> list[User]:
    """Fetch every assignee or fail; a partial match is an error."""
    if not assignee_ids:
        return []
    users = db.query(User).filter(User.id.in_(assignee_ids)).all()
    if len(users) != len(assignee_ids):
        raise NotFoundException("One or more assignees")
    return users


class TaskService:

    def __init__(self, batch_limit: int = 50):
        self.batch_limit = batch_limit

    def _get_or_404(self, db: Session, task_id: str) -> Task:
        t = db.query(Task).filter(Task.id == task_id).first()
        if not t:
            raise NotFoundException("Task")
        return t

    # ─── List ─────────────────────────────────────────────────────────────────
    def list_tasks(
        self, db: Session, page: int, limit: int,
        status: str | None, priority: str | None,
        author_id: str | None, assignee_id: str | None, search: str | None,
    ) -> tuple[list[dict], int]:
        q = db.query(Task)

        if status:    q = q.filter(Task.status == status)
        if priority:  q = q.filter(Task.priority == priority)
        if author_id: q = q.filter(Task.authorId == author_id)
        if assignee_id:
            q = q.filter(Task.assignees.any(User.id == assignee_id))
        if search:
            kw = contains_pattern(search)
            q = q.filter(or_(
                Task.title.ilike(kw, escape=LIKE_ESCAPE),
                Task.description.ilike(kw, escape=LIKE_ESCAPE),
            ))

        total = q.count()
        items = (
            q.options(selectinload(Task.author), selectinload(Task.assignees))
            .order_by(Task.createdAt.desc(), Task.id)
            .offset((page - 1) * limit).limit(limit).all()
        )
        return [_serialize(t) for t in items], total

    # ─── Get by ID ────────────────────────────────────────────────────────────
    def get_task(self, db: Session, task_id: str) -> dict:
        return _serialize(self._get_or_404(db, task_id))

    # ─── Create ───────────────────────────────────────────────────────────────
    def _build(self, db: Session, data: TaskCreateRequest, actor_id: str) -> Task:
        author_id = str(data.authorId) if data.authorId else actor_id
        if not db.query(User.id).filter(User.id == author_id).first():
            raise NotFoundException("Author")

        t = Task(
            title=data.title,
            description=data.description,
            status=data.status or TaskStatus.PENDING,
            priority=data.priority,
            deadline=data.deadline,
            authorId=author_id,
            assignees=_load_assignees(db, data.assigneeIds or []),
        )
        db.add(t)
        return t

    def create_task(self, db: Session, data: TaskCreateRequest, actor_id: str) -> dict:
        t = self._build(db, data, actor_id)
        db.commit()
        db.refresh(t)
        return _serialize(t)

    def create_tasks_batch(self, db: Session, items: list[TaskCreateRequest], actor_id: str) -> list[dict]:
        if not items:
            raise BadRequestException("Tasks array is required", field="tasks")
        if len(items) > self.batch_limit:
            raise BadRequestException(f"Maximum {self.batch_limit} tasks per batch", field="tasks")

        # All or nothing: any failure leaves the session uncommitted
        created = [self._build(db, data, actor_id) for data in items]
        db.commit()
        for t in created:
            db.refresh(t)
        return [_serialize(t) for t in created]

    # ─── Update ───────────────────────────────────────────────────────────────
    def update_task(self, db: Session, task_id: str, data: TaskUpdateRequest) -> dict:
        t = self._get_or_404(db, task_id)
        fields = data.model_fields_set

        if data.assigneeIds is not None:
            t.assignees = _load_assignees(db, data.assigneeIds)

        if data.title:                   t.title       = data.title
        if "description" in fields:      t.description = data.description
        if data.status:                  t.status      = data.status
        if "priority" in fields:         t.priority    = data.priority
        if "deadline" in fields:         t.deadline    = data.deadline

        db.commit()
        db.refresh(t)
        return _serialize(t)

    # ─── Delete ───────────────────────────────────────────────────────────────
    def delete_task(self, db: Session, task_id: str) -> None:
        t = self._get_or_404(db, task_id)
        db.delete(t)
        db.commit()

    # ─── Per-user Listing ─────────────────────────────────────────────────────
    def tasks_for_user(self, db: Session, user_id: str, type: str | None) -> list[dict]:
        q = db.query(Task)
        if type == "authored":
            q = q.filter(Task.authorId == user_id)
        elif type == "assigned":
            q = q.filter(Task.assignees.any(User.id == user_id))
        else:
            q = q.filter(or_(Task.authorId == user_id, Task.assignees.any(User.id == user_id)))

        items = q.order_by(Task.createdAt.desc(), Task.id).all()
        return [_serialize(t) for t in items]
