from sqlalchemy.orm import Session
from sqlalchemy import or_

from fleetops.models.checklist import Checklist
from fleetops.models.fine import Fine
from fleetops.models.incident import Incident
from fleetops.models.user import User, UserRole, UserStatus
from fleetops.models.vehicle import Vehicle
from fleetops.models.vehicle_usage_log import VehicleUsageLog
from fleetops.schemas.user import UserCreateRequest, UserUpdateRequest
from fleetops.utils.security import hash_password
from fleetops.schemas.common import paginate
from fleetops.utils.audit import log_action
from fleetops.utils.dates import iso
from fleetops.utils.exceptions import (
    NotFoundException, DuplicateEntryException, ForbiddenException, ConflictException,
)


def serialize_user(u: User) -> dict:
    return {
        "id":        u.id,
        "name":      u.name,
        "email":     u.email,
        "role":      u.role.value,
        "status":    u.status.value,
        "isActive":  u.isActive,
        "createdAt": iso(u.createdAt),
        "updatedAt": iso(u.updatedAt),
    }


class UserService:

    # ─── List ─────────────────────────────────────────────────────────────────
    def list_users(
        self, db: Session,
        page: int, limit: int,
        search: str | None,
        role: UserRole | None,
        status: UserStatus | None,
    ) -> tuple[list[dict], int]:
        q = db.query(User)

        if search:
            kw = f"%{search}%"
            q = q.filter(or_(User.name.ilike(kw), User.email.ilike(kw)))
        if role is not None:
            q = q.filter(User.role == role)
        if status is not None:
            q = q.filter(User.status == status)

        users, total = paginate(q.order_by(User.name), page, limit)
        return [serialize_user(u) for u in users], total

    # ─── Get by ID ────────────────────────────────────────────────────────────
    def get_user(self, db: Session, user_id: str) -> dict:
        u = db.query(User).filter(User.id == user_id).first()
        if not u:
            raise NotFoundException("User")
        return serialize_user(u)

    # ─── Create ───────────────────────────────────────────────────────────────
    def create_user(self, db: Session, data: UserCreateRequest, actor_id: str | None) -> dict:
        if db.query(User).filter(User.email == data.email).first():
            raise DuplicateEntryException("Email already registered", field="email")

        u = User(
            name=data.name,
            email=data.email,
            password=hash_password(data.password),
            role=data.role,
            status=data.status,
        )
        db.add(u)
        db.flush()
        log_action(db, actor_id, "CREATE", u,
                   f"Created {u.role.value} {u.name} ({u.email})")
        db.commit()
        db.refresh(u)
        return serialize_user(u)

    # ─── Update ───────────────────────────────────────────────────────────────
    def update_user(self, db: Session, user_id: str, data: UserUpdateRequest, actor_id: str) -> dict:
        u = db.query(User).filter(User.id == user_id).first()
        if not u:
            raise NotFoundException("User")

        if data.email and data.email != u.email:
            if db.query(User).filter(User.email == data.email, User.id != user_id).first():
                raise DuplicateEntryException("Email already used by another user", field="email")
        if data.role and u.id == actor_id and data.role != u.role:
            raise ForbiddenException("You cannot change your own role")

        if data.name:  u.name  = data.name
        if data.email: u.email = data.email
        if data.role:  u.role  = data.role

        log_action(db, actor_id, "UPDATE", u, f"Admin updated user {u.name}")
        db.commit()
        db.refresh(u)
        return serialize_user(u)

    # ─── Toggle Status ────────────────────────────────────────────────────────
    def toggle_status(self, db: Session, user_id: str, actor_id: str) -> dict:
        u = db.query(User).filter(User.id == user_id).first()
        if not u:
            raise NotFoundException("User")
        if u.id == actor_id:
            raise ForbiddenException("You cannot deactivate your own account")

        u.status = UserStatus.INACTIVE if u.isActive else UserStatus.ACTIVE
        action = "ACTIVATE" if u.isActive else "DEACTIVATE"
        log_action(db, actor_id, action, u,
                   f"Admin {action.lower()}d user {u.name}")
        db.commit()
        db.refresh(u)
        return serialize_user(u)

    # ─── Delete ───────────────────────────────────────────────────────────────
    def delete_user(self, db: Session, user_id: str, actor_id: str) -> None:
        u = db.query(User).filter(User.id == user_id).first()
        if not u:
            raise NotFoundException("User")
        if u.id == actor_id:
            raise ForbiddenException("You cannot delete your own account")
        if db.query(Vehicle).filter(Vehicle.assignedOperatorId == u.id).first():
            raise ConflictException("User currently holds a vehicle; it must be returned first")

        for model in (VehicleUsageLog, Checklist, Incident, Fine):
            if db.query(model).filter(model.operatorId == u.id).first():
                raise ConflictException("User has history records; deactivate the account instead")

        log_action(db, actor_id, "DELETE", u,
                   f"Admin deleted user {u.name} ({u.email})")
        db.delete(u)
        db.commit()


user_service = UserService()
