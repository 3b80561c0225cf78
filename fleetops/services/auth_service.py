from sqlalchemy.orm import Session

from fleetops.config import settings
from fleetops.models.user import User
from fleetops.schemas.auth import LoginRequest, ChangePasswordRequest
from fleetops.services.user_service import serialize_user
from fleetops.utils.security import verify_password, hash_password, create_access_token
from fleetops.utils.audit import log_action
from fleetops.utils.exceptions import UnauthorizedException, AccountInactiveException


class AuthService:

    # ─── Login ────────────────────────────────────────────────────────────────
    def login(self, db: Session, data: LoginRequest) -> dict:
        user = db.query(User).filter(User.email == data.email).first()

        if not user or not verify_password(data.password, user.password):
            raise UnauthorizedException("Invalid email or password")

        if not user.isActive:
            raise AccountInactiveException()

        access_token = create_access_token(user.id, user.role.value)

        log_action(db, user.id, "LOGIN", user, f"{user.name} logged in")
        db.commit()

        return {
            "accessToken": access_token,
            "tokenType":   "Bearer",
            "expiresIn":   settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            "user":        serialize_user(user),
        }

    # ─── Change Password ──────────────────────────────────────────────────────
    def change_password(
        self, db: Session, data: ChangePasswordRequest, current_user: User
    ) -> None:
        if not verify_password(data.currentPassword, current_user.password):
            raise UnauthorizedException("Current password is incorrect")

        current_user.password = hash_password(data.newPassword)
        log_action(db, current_user.id, "CHANGE_PASSWORD", current_user,
                   f"{current_user.name} changed their password")
        db.commit()


auth_service = AuthService()
