import enum
from sqlalchemy import Column, Integer, String, Date, Enum, ForeignKey, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from fleetops.database import Base, generate_id


class VehicleStatus(str, enum.Enum):
    ACTIVE      = "active"
    MAINTENANCE = "maintenance"
    INACTIVE    = "inactive"


class Vehicle(Base):
    __tablename__ = "vehicles"

    id                   = Column(String(36), primary_key=True, default=generate_id)
    plate                = Column(String(20), unique=True, nullable=False, index=True)
    make                 = Column(String(100), nullable=False)
    model                = Column(String(100), nullable=False)
    year                 = Column(Integer, nullable=False)
    acquisitionDate      = Column(Date, nullable=True)
    status               = Column(Enum(VehicleStatus), default=VehicleStatus.ACTIVE, nullable=False)
    imageUrl             = Column(String(500), nullable=True)
    mileage              = Column(Integer, default=0, nullable=False)
    initialMileageSystem = Column(Integer, nullable=True)   # km when registered in the system

    # ─── Possession ────────────────────────────────────────────────────────────
    # unique: an operator holds at most one vehicle (NULLs do not collide)
    assignedOperatorId   = Column(String(36), ForeignKey("users.id"), unique=True, nullable=True)
    pickedUpDate         = Column(TIMESTAMP(timezone=True), nullable=True)
    version              = Column(Integer, nullable=False, default=1)

    createdAt            = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    assigned_operator = relationship("User", back_populates="assigned_vehicle")
    usage_logs        = relationship("VehicleUsageLog", back_populates="vehicle")
    checklists        = relationship("Checklist", back_populates="vehicle")
    maintenances      = relationship("Maintenance", back_populates="vehicle")
    incidents         = relationship("Incident", back_populates="vehicle")
    fines             = relationship("Fine", back_populates="vehicle")

    # Stale writes raise StaleDataError instead of overwriting a concurrent pickup/return
    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Vehicle id={self.id} plate={self.plate} status={self.status}>"
