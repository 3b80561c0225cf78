import enum
from sqlalchemy import Column, String, Enum, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from fleetops.database import Base, generate_id


class UserRole(str, enum.Enum):
    OPERATOR = "operator"
    ADMIN    = "admin"


class UserStatus(str, enum.Enum):
    ACTIVE   = "active"
    INACTIVE = "inactive"


class User(Base):
    __tablename__ = "users"

    id        = Column(String(36), primary_key=True, default=generate_id)
    name      = Column(String(150), nullable=False)
    email     = Column(String(255), unique=True, nullable=False, index=True)
    password  = Column(String(255), nullable=False)
    role      = Column(Enum(UserRole), default=UserRole.OPERATOR, nullable=False)
    status    = Column(Enum(UserStatus), default=UserStatus.ACTIVE, nullable=False)
    createdAt = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                       onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    assigned_vehicle = relationship("Vehicle", back_populates="assigned_operator", uselist=False)
    audit_logs       = relationship("AuditLog", back_populates="user")

    @property
    def isActive(self) -> bool:
        return self.status == UserStatus.ACTIVE

    def __repr__(self):
        return f"<User id={self.id} email={self.email} role={self.role}>"
