from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional


# ─── Helpers ──────────────────────────────────────────────────────────────────
def validate_name(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if len(v) < 2:
        raise ValueError("Name must be at least 2 characters")
    return v


# ─── Request Schemas ──────────────────────────────────────────────────────────
class RegisterRequest(BaseModel):
    name:     Optional[str] = None
    email:    EmailStr
    password: str = Field(min_length=6)

    @field_validator("name")
    @classmethod
    def check_name(cls, v): return validate_name(v)


class LoginRequest(BaseModel):
    email:    EmailStr
    password: str = Field(min_length=1)


class RefreshTokenRequest(BaseModel):
    refreshToken: str = Field(min_length=1)


class LogoutRequest(BaseModel):
    refreshToken: str = Field(min_length=1)


# ─── Response Schemas ─────────────────────────────────────────────────────────
class UserInToken(BaseModel):
    id:    str
    email: str
    name:  Optional[str] = None

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    user:         UserInToken
    accessToken:  str
    refreshToken: str
