import enum
import uuid

from sqlalchemy import Column, String, Text, ForeignKey, TIMESTAMP, Enum, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from taskapi.database import Base


class TaskStatus(str, enum.Enum):
    PENDING     = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED   = "completed"


class TaskPriority(str, enum.Enum):
    LOW    = "low"
    MEDIUM = "medium"
    HIGH   = "high"


task_assignees = Table(
    "task_assignees",
    Base.metadata,
    Column("taskId", String(36), ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("userId", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Task(Base):
    __tablename__ = "tasks"

    id          = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title       = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    # Stored by value ("in_progress"), not by member name
    status      = Column(Enum(TaskStatus, values_callable=lambda e: [m.value for m in e]),
                         default=TaskStatus.PENDING, nullable=False, index=True)
    priority    = Column(Enum(TaskPriority, values_callable=lambda e: [m.value for m in e]),
                         nullable=True)
    deadline    = Column(TIMESTAMP(timezone=True), nullable=True)
    authorId    = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    createdAt   = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt   = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                         onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    author    = relationship("User", foreign_keys=[authorId], back_populates="authored_tasks")
    assignees = relationship("User", secondary=task_assignees, back_populates="assigned_tasks")

    def __repr__(self):
        return f"<Task id={self.id} status={self.status} authorId={self.authorId}>"
