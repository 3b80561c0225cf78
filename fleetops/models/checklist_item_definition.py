from sqlalchemy import Column, Integer, String, Boolean
from fleetops.database import Base, generate_id


class ChecklistItemDefinition(Base):
    __tablename__ = "checklist_item_definitions"

    id       = Column(String(36), primary_key=True, default=generate_id)
    itemId   = Column(String(50), unique=True, nullable=False, index=True)   # e.g. "tires"
    label    = Column(String(255), nullable=False)
    order    = Column(Integer, nullable=False, default=0)
    isActive = Column(Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<ChecklistItemDefinition itemId={self.itemId} order={self.order}>"
