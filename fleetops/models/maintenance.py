import enum
from sqlalchemy import Column, Integer, String, Text, Date, Enum, ForeignKey, TIMESTAMP, Numeric, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from fleetops.database import Base, generate_id


class MaintenanceType(str, enum.Enum):
    PREVENTIVE = "preventive"
    CORRECTIVE = "corrective"


class MaintenancePriority(str, enum.Enum):
    LOW    = "low"
    MEDIUM = "medium"
    HIGH   = "high"


class MaintenanceStatus(str, enum.Enum):
    PLANNED     = "planned"
    IN_PROGRESS = "in_progress"
    COMPLETED   = "completed"
    CANCELLED   = "cancelled"


class WorkshopCheckValue(str, enum.Enum):
    OK  = "ok"
    NOK = "nok"
    NA  = "na"


class Maintenance(Base):
    __tablename__ = "maintenances"

    id             = Column(String(36), primary_key=True, default=generate_id)
    vehicleId      = Column(String(36), ForeignKey("vehicles.id"), nullable=False, index=True)
    type           = Column(Enum(MaintenanceType), nullable=False)
    description    = Column(Text, nullable=False)
    scheduledDate  = Column(Date, nullable=True)
    scheduledKm    = Column(Integer, nullable=True)
    priority       = Column(Enum(MaintenancePriority), default=MaintenancePriority.MEDIUM, nullable=False)
    status         = Column(Enum(MaintenanceStatus), default=MaintenanceStatus.PLANNED, nullable=False)
    cost           = Column(Numeric(12, 2), nullable=True)
    observations   = Column(Text, nullable=True)
    completionDate = Column(Date, nullable=True)   # only set while status == completed

    # Workshop visit: drop-off moves planned work to in_progress, pick-up completes it
    workshopName                = Column(String(150), nullable=True)
    workshopDropOffDate         = Column(TIMESTAMP(timezone=True), nullable=True)
    workshopPickUpDate          = Column(TIMESTAMP(timezone=True), nullable=True)
    workshopChecklist           = Column(JSON, nullable=True)   # {"dropOffItems": [...], "pickUpItems": [...]}
    workshopDropOffObservations = Column(Text, nullable=True)
    workshopPickUpObservations  = Column(Text, nullable=True)

    createdAt      = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    vehicle = relationship("Vehicle", back_populates="maintenances")

    def __repr__(self):
        return f"<Maintenance id={self.id} vehicleId={self.vehicleId} status={self.status}>"
