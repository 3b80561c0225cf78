import enum
from sqlalchemy import Column, String, Text, Enum, ForeignKey, TIMESTAMP, Numeric
from sqlalchemy.orm import relationship
from fleetops.database import Base, generate_id


class FineStatus(str, enum.Enum):
    PENDING   = "pending"
    PAID      = "paid"
    APPEALED  = "appealed"
    CANCELLED = "cancelled"


class Fine(Base):
    __tablename__ = "fines"

    id             = Column(String(36), primary_key=True, default=generate_id)
    operatorId     = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    operatorName   = Column(String(150), nullable=False)    # denormalized
    vehicleId      = Column(String(36), ForeignKey("vehicles.id"), nullable=False, index=True)
    vehiclePlate   = Column(String(20), nullable=False)     # denormalized
    infractionCode = Column(String(50), nullable=False)
    description    = Column(Text, nullable=False)
    location       = Column(String(255), nullable=False)
    date           = Column(TIMESTAMP(timezone=True), nullable=False, index=True)   # infraction
    dueDate        = Column(TIMESTAMP(timezone=True), nullable=False)
    amount         = Column(Numeric(12, 2), nullable=False)
    status         = Column(Enum(FineStatus), default=FineStatus.PENDING, nullable=False)
    adminNotes     = Column(Text, nullable=True)
    createdAt      = Column(TIMESTAMP(timezone=True), nullable=False)   # set by the service, immutable

    # ─── Relationships ─────────────────────────────────────────────────────────
    vehicle  = relationship("Vehicle", back_populates="fines")
    operator = relationship("User")

    def __repr__(self):
        return f"<Fine id={self.id} vehicleId={self.vehicleId} amount={self.amount}>"
