from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from fleetops.database import get_db
from fleetops.dependencies import get_current_user
from fleetops.models.user import User
from fleetops.schemas.auth import LoginRequest, ChangePasswordRequest
from fleetops.schemas.common import SuccessResponse, success_response
from fleetops.services.auth_service import auth_service
from fleetops.services.user_service import serialize_user

router = APIRouter(prefix="/auth")


# ─── POST /auth/login ─────────────────────────────────────────────────────────
@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    summary="Login and receive an access token",
    response_model=SuccessResponse,
)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    result = auth_service.login(db, data)
    return success_response("Login successful", result)


# ─── PATCH /auth/change-password ──────────────────────────────────────────────
@router.patch(
    "/change-password",
    status_code=status.HTTP_200_OK,
    summary="Change password (requires current password, authenticated)",
    response_model=SuccessResponse,
)
def change_password(
    data: ChangePasswordRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    auth_service.change_password(db, data, current_user)
    return success_response("Password changed successfully.", None)


# ─── GET /auth/me ─────────────────────────────────────────────────────────────
@router.get(
    "/me",
    status_code=status.HTTP_200_OK,
    summary="Get current authenticated user profile",
    response_model=SuccessResponse,
)
def get_me(current_user: User = Depends(get_current_user)):
    return success_response("User profile retrieved", serialize_user(current_user))
