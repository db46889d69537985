import uuid

from sqlalchemy import Column, String, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from taskapi.database import Base


class User(Base):
    __tablename__ = "users"

    id        = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email     = Column(String(255), unique=True, nullable=False, index=True)
    name      = Column(String(150), nullable=True)
    password  = Column(String(255), nullable=False)
    createdAt = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                       onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan")
    authored_tasks = relationship("Task", back_populates="author", cascade="all, delete-orphan",
                                  foreign_keys="Task.authorId")
    assigned_tasks = relationship("Task", secondary="task_assignees", back_populates="assignees")

    def __repr__(self):
        return f"<User id={self.id} email={self.email}>"
