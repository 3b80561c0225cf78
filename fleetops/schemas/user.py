from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional
import re

from fleetops.models.user import UserRole, UserStatus


def validate_password_strength(v: str) -> str:
    if len(v) < 8:
        raise ValueError("Password must be at least 8 characters")
    if not re.search(r"[A-Z]", v):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[0-9]", v):
        raise ValueError("Password must contain at least one digit")
    return v


# ─── Request ──────────────────────────────────────────────────────────────────
class UserCreateRequest(BaseModel):
    name:     str
    email:    EmailStr
    password: str
    role:     UserRole   = UserRole.OPERATOR
    status:   UserStatus = UserStatus.ACTIVE

    @field_validator("password")
    @classmethod
    def check_password(cls, v): return validate_password_strength(v)

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        if not v.strip(): raise ValueError("Name cannot be empty")
        return v.strip()


class UserUpdateRequest(BaseModel):
    name:  Optional[str]      = None
    email: Optional[EmailStr] = None
    role:  Optional[UserRole] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        if v is not None and not v.strip(): raise ValueError("Name cannot be empty")
        return v.strip() if v else v
