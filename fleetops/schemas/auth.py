from pydantic import BaseModel, EmailStr, field_validator

from fleetops.schemas.user import validate_password_strength


class LoginRequest(BaseModel):
    email:    EmailStr
    password: str


class ChangePasswordRequest(BaseModel):
    currentPassword: str
    newPassword:     str

    @field_validator("newPassword")
    @classmethod
    def check_password(cls, v): return validate_password_strength(v)
