import enum
from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional

from taskapi.schemas.auth import validate_name


class UserTasksType(str, enum.Enum):
    AUTHORED = "authored"
    ASSIGNED = "assigned"


# ─── Request ──────────────────────────────────────────────────────────────────
class UserUpdateRequest(BaseModel):
    name:  Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v): return validate_name(v)

