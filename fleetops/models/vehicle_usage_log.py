import enum
from sqlalchemy import Column, Integer, String, Enum, ForeignKey, TIMESTAMP
from sqlalchemy.orm import relationship
from fleetops.database import Base, generate_id


class UsageLogStatus(str, enum.Enum):
    ACTIVE    = "active"
    COMPLETED = "completed"


class VehicleUsageLog(Base):
    __tablename__ = "vehicle_usage_logs"

    id                = Column(String(36), primary_key=True, default=generate_id)
    vehicleId         = Column(String(36), ForeignKey("vehicles.id"), nullable=False, index=True)
    vehiclePlate      = Column(String(20), nullable=False)      # denormalized
    operatorId        = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    operatorName      = Column(String(150), nullable=False)     # denormalized
    pickedUpTimestamp = Column(TIMESTAMP(timezone=True), nullable=False, index=True)
    initialMileage    = Column(Integer, nullable=False)

    # Filled once, on return
    returnedTimestamp = Column(TIMESTAMP(timezone=True), nullable=True)
    finalMileage      = Column(Integer, nullable=True)
    kmDriven          = Column(Integer, nullable=True)
    durationMinutes   = Column(Integer, nullable=True)
    routeDescription  = Column(String(100), nullable=True)

    status            = Column(Enum(UsageLogStatus), default=UsageLogStatus.ACTIVE, nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    vehicle  = relationship("Vehicle", back_populates="usage_logs")
    operator = relationship("User")

    def __repr__(self):
        return f"<VehicleUsageLog id={self.id} vehicleId={self.vehicleId} status={self.status}>"
