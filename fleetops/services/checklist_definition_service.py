import logging
from typing import Optional
from pydantic import BaseModel, ConfigDict, StrictBool, ValidationError, create_model
from sqlalchemy.orm import Session

from fleetops.models.checklist_item_definition import ChecklistItemDefinition
from fleetops.schemas.checklist import (
    ChecklistItemDefinitionCreateRequest,
    ChecklistItemDefinitionUpdateRequest,
    ChecklistReorderRequest,
)
from fleetops.utils.audit import log_action
from fleetops.utils.exceptions import (
    NotFoundException, DuplicateEntryException, ChecklistInvalidException,
)

logger = logging.getLogger(__name__)


# Seeded the first time the item list is read and the table is empty
DEFAULT_ITEMS: list[tuple[str, str]] = [
    ("tires",               "Tires (condition and pressure)"),
    ("lights",              "Lights (headlights, brake lights, indicators)"),
    ("brakes",              "Brakes"),
    ("oilLevel",            "Oil level"),
    ("waterLevel",          "Coolant level"),
    ("brakeFluid",          "Brake fluid"),
    ("fireExtinguisher",    "Fire extinguisher (present and valid)"),
    ("warningTriangle",     "Warning triangle"),
    ("jackAndWrench",       "Jack and wheel wrench"),
    ("vehicleDocuments",    "Vehicle documents"),
    ("interiorCleanliness", "Interior cleanliness"),
    ("exteriorCleanliness", "Exterior cleanliness"),
]


def _serialize(d: ChecklistItemDefinition) -> dict:
    return {
        "id":       d.id,
        "itemId":   d.itemId,
        "label":    d.label,
        "order":    d.order,
        "isActive": d.isActive,
    }


# ─── Answer validation ────────────────────────────────────────────────────────
def build_answers_model(definitions: list[ChecklistItemDefinition]) -> type[BaseModel]:
    """
    Build a pydantic model whose fields are the given item ids.

    Every item must be answered; the answer is True, False or None (N/A).
    Unknown ids are rejected.
    """
    fields = {d.itemId: (Optional[StrictBool], ...) for d in definitions}
    return create_model(
        "ChecklistAnswers",
        __config__=ConfigDict(extra="forbid"),
        **fields,
    )


def validate_answers(definitions: list[ChecklistItemDefinition], answers: dict) -> dict:
    model = build_answers_model(definitions)
    try:
        parsed = model.model_validate(answers)
    except ValidationError as e:
        details = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise ChecklistInvalidException(details)
    return parsed.model_dump()


class ChecklistDefinitionService:

    def ensure_defaults(self, db: Session) -> bool:
        """Insert the default items when none exist. Flushes; the caller commits."""
        if db.query(ChecklistItemDefinition).count() > 0:
            return False
        for index, (item_id, label) in enumerate(DEFAULT_ITEMS):
            db.add(ChecklistItemDefinition(itemId=item_id, label=label, order=index, isActive=True))
        db.flush()
        logger.info(f"Seeded {len(DEFAULT_ITEMS)} default checklist items")
        return True

    def get_active_definitions(self, db: Session) -> list[ChecklistItemDefinition]:
        self.ensure_defaults(db)
        return db.query(ChecklistItemDefinition) \
                 .filter(ChecklistItemDefinition.isActive == True) \
                 .order_by(ChecklistItemDefinition.order, ChecklistItemDefinition.itemId).all()

    def list_definitions(self, db: Session, active_only: bool = False) -> list[dict]:
        if self.ensure_defaults(db):
            db.commit()

        q = db.query(ChecklistItemDefinition)
        if active_only:
            q = q.filter(ChecklistItemDefinition.isActive == True)
        items = q.order_by(ChecklistItemDefinition.order, ChecklistItemDefinition.itemId).all()
        return [_serialize(d) for d in items]

    def create_definition(self, db: Session, data: ChecklistItemDefinitionCreateRequest, actor_id: str) -> dict:
        if db.query(ChecklistItemDefinition).filter(ChecklistItemDefinition.itemId == data.itemId).first():
            raise DuplicateEntryException("Checklist item id already exists", field="itemId")

        d = ChecklistItemDefinition(
            itemId=data.itemId,
            label=data.label,
            order=data.order,
            isActive=data.isActive,
        )
        db.add(d)
        db.flush()
        log_action(db, actor_id, "CREATE", d,
                   f"Created checklist item '{d.itemId}'")
        db.commit()
        db.refresh(d)
        return _serialize(d)

    def update_definition(
        self, db: Session, definition_id: str,
        data: ChecklistItemDefinitionUpdateRequest, actor_id: str,
    ) -> dict:
        d = db.query(ChecklistItemDefinition).filter(ChecklistItemDefinition.id == definition_id).first()
        if not d: raise NotFoundException("Checklist item")

        if data.label is not None:    d.label    = data.label
        if data.order is not None:    d.order    = data.order
        if data.isActive is not None: d.isActive = data.isActive

        log_action(db, actor_id, "UPDATE", d,
                   f"Updated checklist item '{d.itemId}'")
        db.commit()
        db.refresh(d)
        return _serialize(d)

    def delete_definition(self, db: Session, definition_id: str, actor_id: str) -> None:
        """Past checklists keep their own copy of labels, so deleting is safe."""
        d = db.query(ChecklistItemDefinition).filter(ChecklistItemDefinition.id == definition_id).first()
        if not d: raise NotFoundException("Checklist item")
        log_action(db, actor_id, "DELETE", d,
                   f"Deleted checklist item '{d.itemId}'")
        db.delete(d)
        db.commit()

    def reorder_definitions(self, db: Session, data: ChecklistReorderRequest, actor_id: str) -> list[dict]:
        ids = [item.id for item in data.items]
        found = {
            d.id: d for d in
            db.query(ChecklistItemDefinition).filter(ChecklistItemDefinition.id.in_(ids)).all()
        }
        missing = [i for i in ids if i not in found]
        if missing:
            raise NotFoundException("Checklist item")

        for item in data.items:
            found[item.id].order = item.order

        log_action(db, actor_id, "UPDATE", ChecklistItemDefinition,
                   f"Reordered {len(ids)} checklist items")
        db.commit()
        return self.list_definitions(db)


checklist_definition_service = ChecklistDefinitionService()
