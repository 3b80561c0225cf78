import logging
from sqlalchemy.orm import Session
from fleetops.models.audit_log import AuditLog

logger = logging.getLogger("fleetops.audit")


def log_action(
    db: Session,
    user_id: str | None,
    action: str,
    entity,
    description: str | None = None,
) -> AuditLog:
    """
    Record who did what to which row of the fleet.

    `entity` is the mapped instance being acted on (a Vehicle on PICKUP/RETURN,
    the Checklist on CREATE, ...) or a model class when the action spans many
    rows (reordering checklist items). A pending instance is flushed first so
    its generated id lands in the trail.

    The entry is added to the caller's session and committed together with the
    change it describes; a rolled back pickup leaves no PICKUP entry behind.

        log_action(db, operator.id, "PICKUP", vehicle,
                   f"{operator.name} picked up {vehicle.plate} at {vehicle.mileage} km")
        db.commit()
    """
    if isinstance(entity, type):
        entity_type, entity_id = entity.__name__, None
    else:
        if entity.id is None:
            db.flush()
        entity_type, entity_id = type(entity).__name__, entity.id

    entry = AuditLog(
        userId=user_id,
        action=action,
        entityType=entity_type,
        entityId=entity_id,
        description=description,
    )
    db.add(entry)
    logger.info(f"{action} {entity_type}:{entity_id} by {user_id or 'system'}")
    return entry
