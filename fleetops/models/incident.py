import enum
from sqlalchemy import Column, String, Text, Enum, ForeignKey, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from fleetops.database import Base, generate_id


class IncidentStatus(str, enum.Enum):
    REPORTED       = "reported"
    UNDER_ANALYSIS = "under_analysis"
    PENDING_ACTION = "pending_action"
    RESOLVED       = "resolved"
    CANCELLED      = "cancelled"


# Incidents still waiting on an admin; shown as a warning before pickup
OPEN_INCIDENT_STATUSES = (IncidentStatus.REPORTED, IncidentStatus.UNDER_ANALYSIS)


class Incident(Base):
    __tablename__ = "incidents"

    id           = Column(String(36), primary_key=True, default=generate_id)
    vehicleId    = Column(String(36), ForeignKey("vehicles.id"), nullable=False, index=True)
    operatorId   = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    operatorName = Column(String(150), nullable=False)
    date         = Column(TIMESTAMP(timezone=True), nullable=False, index=True)
    description  = Column(Text, nullable=False)
    status       = Column(Enum(IncidentStatus), default=IncidentStatus.REPORTED, nullable=False)
    createdAt    = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    vehicle  = relationship("Vehicle", back_populates="incidents")
    operator = relationship("User")

    def __repr__(self):
        return f"<Incident id={self.id} vehicleId={self.vehicleId} status={self.status}>"
