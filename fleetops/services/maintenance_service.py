import logging
from datetime import date, timedelta
from sqlalchemy.orm import Session

from fleetops.config import settings
from fleetops.models.maintenance import Maintenance, MaintenanceStatus
from fleetops.models.vehicle import Vehicle, VehicleStatus
from fleetops.schemas.maintenance import (
    MaintenanceCreateRequest, MaintenanceUpdateRequest,
    WorkshopDropOffRequest, WorkshopPickUpRequest, WORKSHOP_CHECKLIST_ITEMS,
)
from fleetops.schemas.common import paginate
from fleetops.utils.audit import log_action
from fleetops.utils.dates import iso, utcnow
from fleetops.utils.exceptions import (
    NotFoundException, InvalidMaintenanceStatusException, MileageDecreaseException,
    VehicleInUseException, VehicleUnavailableException,
)

logger = logging.getLogger(__name__)

# Still to be done; completed and cancelled work never warns
PENDING_STATUSES = (MaintenanceStatus.PLANNED, MaintenanceStatus.IN_PROGRESS)


def serialize_maintenance(m: Maintenance) -> dict:
    return {
        "id":             m.id,
        "vehicleId":      m.vehicleId,
        "vehiclePlate":   m.vehicle.plate if m.vehicle else None,
        "type":           m.type.value,
        "description":    m.description,
        "priority":       m.priority.value,
        "status":         m.status.value,
        "scheduledDate":  iso(m.scheduledDate),
        "scheduledKm":    m.scheduledKm,
        "cost":           float(m.cost) if m.cost is not None else None,
        "observations":   m.observations,
        "completionDate": iso(m.completionDate),
        "workshopName":                m.workshopName,
        "workshopDropOffDate":         iso(m.workshopDropOffDate),
        "workshopPickUpDate":          iso(m.workshopPickUpDate),
        "workshopChecklist":           m.workshopChecklist,
        "workshopDropOffObservations": m.workshopDropOffObservations,
        "workshopPickUpObservations":  m.workshopPickUpObservations,
        "createdAt":      iso(m.createdAt),
    }


def is_due_for_pickup(m: Maintenance, vehicle: Vehicle, today: date) -> bool:
    """Pending work scheduled within the alert window by date or by km."""
    if m.status not in PENDING_STATUSES:
        return False
    if m.scheduledDate is not None:
        if m.scheduledDate <= today + timedelta(days=settings.MAINTENANCE_ALERT_DAYS):
            return True
    if m.scheduledKm is not None:
        if m.scheduledKm <= vehicle.mileage + settings.MAINTENANCE_ALERT_KM:
            return True
    return False


def upcoming_reason(m: Maintenance, vehicle: Vehicle, today: date) -> str | None:
    """
    Reason text when a planned maintenance is close ahead of the vehicle, else None.

    Only future targets count: a km target already passed, or a date already
    reached, is overdue rather than upcoming.
    When both targets are close the reasons are joined with " and ".
    """
    if m.status != MaintenanceStatus.PLANNED:
        return None

    reasons = []
    if m.scheduledKm is not None:
        km_left = m.scheduledKm - vehicle.mileage
        if 0 < km_left <= settings.MAINTENANCE_NOTIFY_KM:
            reasons.append(f"{km_left} km remaining until scheduled maintenance ({m.scheduledKm} km)")

    if m.scheduledDate is not None:
        days_left = (m.scheduledDate - today).days
        if 0 < days_left <= settings.MAINTENANCE_ALERT_DAYS:
            reasons.append(f"{days_left} day(s) remaining until scheduled maintenance ({m.scheduledDate.isoformat()})")

    return " and ".join(reasons) or None


def _apply_completion_rule(m: Maintenance) -> None:
    if m.status != MaintenanceStatus.COMPLETED:
        m.completionDate = None


def _workshop_items(answers: dict) -> list[dict]:
    return [
        {"id": item_id, "label": label, "value": answers[item_id].value}
        for item_id, label in WORKSHOP_CHECKLIST_ITEMS
    ]


class MaintenanceService:

    def list_records(
        self, db: Session, page: int, limit: int,
        vehicle_id: str | None, status: MaintenanceStatus | None,
    ) -> tuple[list[dict], int]:
        q = db.query(Maintenance)

        if vehicle_id: q = q.filter(Maintenance.vehicleId == vehicle_id)
        if status:     q = q.filter(Maintenance.status == status)

        items, total = paginate(
            q.order_by(Maintenance.scheduledDate.desc().nulls_last(), Maintenance.createdAt.desc()), page, limit,
        )
        return [serialize_maintenance(m) for m in items], total

    def get_record(self, db: Session, record_id: str) -> dict:
        m = db.query(Maintenance).filter(Maintenance.id == record_id).first()
        if not m: raise NotFoundException("Maintenance")
        return serialize_maintenance(m)

    def create_record(self, db: Session, data: MaintenanceCreateRequest, actor_id: str) -> dict:
        vehicle = db.query(Vehicle).filter(Vehicle.id == data.vehicleId).first()
        if not vehicle: raise NotFoundException("Vehicle")

        record = Maintenance(
            vehicleId=vehicle.id,
            type=data.type,
            description=data.description,
            priority=data.priority,
            status=data.status,
            scheduledDate=data.scheduledDate,
            scheduledKm=data.scheduledKm,
            cost=data.cost,
            observations=data.observations,
            completionDate=data.completionDate,
        )
        _apply_completion_rule(record)
        db.add(record)
        db.flush()
        log_action(db, actor_id, "CREATE", record,
                   f"Scheduled {record.type.value} maintenance for {vehicle.plate}")
        db.commit()
        db.refresh(record)
        return serialize_maintenance(record)

    def update_record(self, db: Session, record_id: str, data: MaintenanceUpdateRequest, actor_id: str) -> dict:
        m = db.query(Maintenance).filter(Maintenance.id == record_id).first()
        if not m: raise NotFoundException("Maintenance")

        changes = data.model_dump(exclude_unset=True)
        for field in ("type", "description", "priority", "status"):
            # Required columns: an explicit null is ignored
            if changes.get(field) is not None:
                setattr(m, field, changes[field])
        for field in ("scheduledDate", "scheduledKm", "cost", "observations", "completionDate"):
            if field in changes:
                setattr(m, field, changes[field])
        _apply_completion_rule(m)

        if "status" in changes and m.status == MaintenanceStatus.COMPLETED:
            log_action(db, actor_id, "COMPLETE", m,
                       f"Maintenance completed for {m.vehicle.plate}")
        else:
            log_action(db, actor_id, "UPDATE", m,
                       f"Updated maintenance {m.id}")

        db.commit()
        db.refresh(m)
        return serialize_maintenance(m)

    def delete_record(self, db: Session, record_id: str, actor_id: str) -> None:
        m = db.query(Maintenance).filter(Maintenance.id == record_id).first()
        if not m: raise NotFoundException("Maintenance")
        log_action(db, actor_id, "DELETE", m,
                   f"Deleted maintenance {record_id}")
        db.delete(m)
        db.commit()

    # ─── Workshop visit ───────────────────────────────────────────────────────
    def drop_off_at_workshop(
        self, db: Session, record_id: str, data: WorkshopDropOffRequest, actor_id: str,
    ) -> dict:
        """
        Hand the vehicle over to a workshop for a planned maintenance.

        The vehicle must be active and not with an operator; the odometer read
        at the workshop counter cannot be lower than the recorded one. The
        maintenance becomes in_progress and the vehicle leaves the pickup pool
        (status maintenance) until `pick_up_from_workshop`.
        """
        m = db.query(Maintenance).filter(Maintenance.id == record_id).first()
        if not m: raise NotFoundException("Maintenance")
        if m.status != MaintenanceStatus.PLANNED:
            raise InvalidMaintenanceStatusException(
                f"Only planned maintenance can go to a workshop (current status: {m.status.value})"
            )

        vehicle = m.vehicle
        if vehicle.assignedOperatorId:
            raise VehicleInUseException("Vehicle must be returned by its operator before going to a workshop")
        if vehicle.status != VehicleStatus.ACTIVE:
            raise VehicleUnavailableException(vehicle.status.value)
        if data.mileage < vehicle.mileage:
            raise MileageDecreaseException(data.mileage, vehicle.mileage, field="mileage")

        vehicle.mileage = data.mileage
        vehicle.status  = VehicleStatus.MAINTENANCE

        m.status                      = MaintenanceStatus.IN_PROGRESS
        m.workshopName                = data.workshopName
        m.workshopDropOffDate         = utcnow()
        m.workshopDropOffObservations = data.observations
        m.workshopChecklist           = {"dropOffItems": _workshop_items(data.checklist), "pickUpItems": []}

        log_action(db, actor_id, "WORKSHOP_DROP_OFF", m,
                   f"{vehicle.plate} dropped off at {m.workshopName} at {data.mileage} km")
        db.commit()
        db.refresh(m)
        logger.info(f"Vehicle {vehicle.plate} at workshop {m.workshopName} (maintenance {m.id})")
        return serialize_maintenance(m)

    def pick_up_from_workshop(
        self, db: Session, record_id: str, data: WorkshopPickUpRequest, actor_id: str,
    ) -> dict:
        """Close a workshop visit: the maintenance completes and the vehicle is active again."""
        m = db.query(Maintenance).filter(Maintenance.id == record_id).first()
        if not m: raise NotFoundException("Maintenance")
        if m.status != MaintenanceStatus.IN_PROGRESS or m.workshopDropOffDate is None:
            raise InvalidMaintenanceStatusException("Maintenance has no open workshop visit")

        now = utcnow()
        previous = m.workshopChecklist or {}
        m.workshopChecklist = {
            "dropOffItems": previous.get("dropOffItems", []),
            "pickUpItems":  _workshop_items(data.checklist),
        }
        m.workshopPickUpDate         = now
        m.workshopPickUpObservations = data.observations
        if data.cost is not None:
            m.cost = data.cost
        m.status         = MaintenanceStatus.COMPLETED
        m.completionDate = now.date()

        vehicle = m.vehicle
        # An admin may have deactivated it meanwhile; only release what the drop-off blocked
        if vehicle.status == VehicleStatus.MAINTENANCE:
            vehicle.status = VehicleStatus.ACTIVE

        log_action(db, actor_id, "WORKSHOP_PICK_UP", m,
                   f"{vehicle.plate} picked up from {m.workshopName}")
        db.commit()
        db.refresh(m)
        logger.info(f"Vehicle {vehicle.plate} back from workshop {m.workshopName} (maintenance {m.id})")
        return serialize_maintenance(m)

    # ─── Pickup / return checks ───────────────────────────────────────────────
    def due_for_pickup(self, db: Session, vehicle: Vehicle, today: date) -> list[Maintenance]:
        pending = db.query(Maintenance).filter(
            Maintenance.vehicleId == vehicle.id,
            Maintenance.status.in_(PENDING_STATUSES),
        ).order_by(Maintenance.scheduledDate.asc().nulls_last()).all()
        return [m for m in pending if is_due_for_pickup(m, vehicle, today)]

    def find_upcoming(self, db: Session, vehicle: Vehicle, today: date) -> list[tuple[Maintenance, str]]:
        planned = db.query(Maintenance).filter(
            Maintenance.vehicleId == vehicle.id,
            Maintenance.status == MaintenanceStatus.PLANNED,
        ).all()
        upcoming = []
        for m in planned:
            reason = upcoming_reason(m, vehicle, today)
            if reason:
                upcoming.append((m, reason))
        return upcoming


maintenance_service = MaintenanceService()
