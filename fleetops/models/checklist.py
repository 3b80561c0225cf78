from sqlalchemy import Column, Integer, String, Text, JSON, ForeignKey, TIMESTAMP
from sqlalchemy.orm import relationship
from fleetops.utils.dates import utcnow
from fleetops.database import Base, generate_id


class Checklist(Base):
    __tablename__ = "checklists"

    id               = Column(String(36), primary_key=True, default=generate_id)
    vehicleId        = Column(String(36), ForeignKey("vehicles.id"), nullable=False, index=True)
    operatorId       = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    operatorName     = Column(String(150), nullable=False)
    date             = Column(TIMESTAMP(timezone=True), nullable=False, index=True)
    items            = Column(JSON, nullable=False)     # [{"id", "label", "value"}] in definition order
    mileage          = Column(Integer, nullable=False)
    observations     = Column(Text, nullable=False, default="")
    signature        = Column(String(150), nullable=False)
    routeDescription = Column(String(100), nullable=True)
    createdAt        = Column(TIMESTAMP(timezone=True), default=utcnow, nullable=False)   # tie-break for equal dates

    # ─── Relationships ─────────────────────────────────────────────────────────
    vehicle  = relationship("Vehicle", back_populates="checklists")
    operator = relationship("User")

    def __repr__(self):
        return f"<Checklist id={self.id} vehicleId={self.vehicleId} operatorId={self.operatorId}>"
