import logging

from sqlalchemy.orm import Session
from sqlalchemy import func, or_

from taskapi.models.task import Task, task_assignees
from taskapi.models.user import User
from taskapi.schemas.user import UserUpdateRequest
from taskapi.services.task_service import TaskService
from taskapi.utils.exceptions import (
    NotFoundException, ConflictException, ForbiddenException
)
from taskapi.utils.search import LIKE_ESCAPE, contains_pattern

logger = logging.getLogger(__name__)


def _serialize_user(u: User) -> dict:
    return {
        "id":        u.id,
        "email":     u.email,
        "name":      u.name,
        "createdAt": u.createdAt.isoformat(),
    }


def _counts(authored: int, assigned: int) -> dict:
    return {"authoredTasks": authored, "assignedTasks": assigned}


def _task_summary(t: Task) -> dict:
    return {
        "id":        t.id,
        "title":     t.title,
        "status":    t.status.value,
        "createdAt": t.createdAt.isoformat(),
    }


class UserService:

    def __init__(self, task_service: TaskService):
        self.task_service = task_service

    def _get_or_404(self, db: Session, user_id: str) -> User:
        u = db.query(User).filter(User.id == user_id).first()
        if not u:
            raise NotFoundException("User")
        return u

    # ─── List ─────────────────────────────────────────────────────────────────
    def list_users(
        self, db: Session, page: int, limit: int, search: str | None,
    ) -> tuple[list[dict], int]:
        q = db.query(User)

        if search:
            kw = contains_pattern(search)
            q = q.filter(or_(User.name.ilike(kw, escape=LIKE_ESCAPE), User.email.ilike(kw, escape=LIKE_ESCAPE)))

        total = q.count()
        users = q.order_by(User.createdAt.desc(), User.id).offset((page - 1) * limit).limit(limit).all()

        ids = [u.id for u in users]
        authored = dict(
            db.query(Task.authorId, func.count(Task.id))
            .filter(Task.authorId.in_(ids)).group_by(Task.authorId).all()
        )
        assigned = dict(
            db.query(task_assignees.c.userId, func.count(task_assignees.c.taskId))
            .filter(task_assignees.c.userId.in_(ids)).group_by(task_assignees.c.userId).all()
        )

        data = []
        for u in users:
            item = _serialize_user(u)
            item["_count"] = _counts(authored.get(u.id, 0), assigned.get(u.id, 0))
            data.append(item)
        return data, total

    # ─── Get by ID ────────────────────────────────────────────────────────────
    def get_user(self, db: Session, user_id: str) -> dict:
        u = self._get_or_404(db, user_id)

        data = _serialize_user(u)
        data["authoredTasks"] = [
            {**_task_summary(t), "assignees": [
                {"id": a.id, "name": a.name, "email": a.email} for a in t.assignees
            ]}
            for t in u.authored_tasks
        ]
        data["assignedTasks"] = [
            {**_task_summary(t), "author": {
                "id": t.author.id, "name": t.author.name, "email": t.author.email,
            }}
            for t in u.assigned_tasks
        ]
        data["_count"] = _counts(len(u.authored_tasks), len(u.assigned_tasks))
        return data

    # ─── Tasks ────────────────────────────────────────────────────────────────
    def get_user_tasks(self, db: Session, user_id: str, type: str | None) -> list[dict]:
        self._get_or_404(db, user_id)
        return self.task_service.tasks_for_user(db, user_id, type)

    # ─── Update ───────────────────────────────────────────────────────────────
    def update_user(self, db: Session, user_id: str, data: UserUpdateRequest, actor_id: str) -> dict:
        u = self._get_or_404(db, user_id)
        if u.id != actor_id:
            raise ForbiddenException("You can only update your own account")

        email = str(data.email) if data.email else None
        if email and email != u.email:
            if db.query(User).filter(User.email == email, User.id != user_id).first():
                raise ConflictException("User with this email already exists", field="email")

        if data.name:  u.name  = data.name
        if email:      u.email = email

        db.commit()
        db.refresh(u)
        return _serialize_user(u)

    # ─── Delete ───────────────────────────────────────────────────────────────
    def delete_user(self, db: Session, user_id: str, actor_id: str) -> None:
        u = self._get_or_404(db, user_id)
        if u.id != actor_id:
            raise ForbiddenException("You can only delete your own account")

        # Refresh tokens and authored tasks go with the user
        db.delete(u)
        db.commit()
        logger.info(f"Deleted user {user_id}")
