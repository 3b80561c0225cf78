from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from fleetops.database import get_db
from fleetops.dependencies import get_admin_user
from fleetops.models.user import User, UserRole, UserStatus
from fleetops.schemas.user import UserCreateRequest, UserUpdateRequest
from fleetops.schemas.common import success_response, paginated_response
from fleetops.services.user_service import user_service

router = APIRouter(prefix="/users")


# GET /users (Admin only)
@router.get("", status_code=status.HTTP_200_OK, summary="List all users (paginated)")
def list_users(
    page:   int                  = Query(1,    ge=1),
    limit:  int                  = Query(20,   ge=1, le=100),
    search: Optional[str]        = Query(None, description="Search by name or email"),
    role:   Optional[UserRole]   = Query(None),
    status: Optional[UserStatus] = Query(None),
    db:     Session              = Depends(get_db),
    _:      User                 = Depends(get_admin_user),
):
    data, total = user_service.list_users(db, page, limit, search, role, status)
    return paginated_response("Users retrieved successfully", data, total, page, limit)


# GET /users/{id} (Admin only)
@router.get("/{user_id}", status_code=status.HTTP_200_OK, summary="Get user by ID")
def get_user(
    user_id: str,
    db:      Session = Depends(get_db),
    _:       User    = Depends(get_admin_user),
):
    data = user_service.get_user(db, user_id)
    return success_response("User retrieved", data)


# POST /users (Admin only)
@router.post("", status_code=status.HTTP_201_CREATED, summary="Create new user")
def create_user(
    body: UserCreateRequest,
    db:   Session = Depends(get_db),
    current_user: User = Depends(get_admin_user),
):
    data = user_service.create_user(db, body, current_user.id)
    return success_response("User created successfully", data)


# PUT /users/{id} (Admin only)
@router.put("/{user_id}", status_code=status.HTTP_200_OK, summary="Update user")
def update_user(
    user_id: str,
    body:    UserUpdateRequest,
    db:      Session = Depends(get_db),
    current_user: User = Depends(get_admin_user),
):
    data = user_service.update_user(db, user_id, body, current_user.id)
    return success_response("User updated successfully", data)


# PATCH /users/{id}/toggle-status (Admin only)
@router.patch("/{user_id}/toggle-status", status_code=status.HTTP_200_OK,
              summary="Activate or deactivate a user")
def toggle_status(
    user_id: str,
    db:      Session = Depends(get_db),
    current_user: User = Depends(get_admin_user),
):
    data = user_service.toggle_status(db, user_id, current_user.id)
    status_str = "activated" if data["isActive"] else "deactivated"
    return success_response(f"User {status_str} successfully", data)


# DELETE /users/{id} (Admin only)
@router.delete("/{user_id}", status_code=status.HTTP_200_OK, summary="Delete user")
def delete_user(
    user_id: str,
    db:      Session = Depends(get_db),
    current_user: User = Depends(get_admin_user),
):
    user_service.delete_user(db, user_id, current_user.id)
    return success_response("User deleted successfully", None)
