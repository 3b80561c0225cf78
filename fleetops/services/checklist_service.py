import logging
from datetime import date, datetime
from sqlalchemy.orm import Session

from fleetops.models.checklist import Checklist
from fleetops.models.user import User, UserRole
from fleetops.models.vehicle import Vehicle
from fleetops.schemas.checklist import ChecklistSubmitRequest, ChecklistUpdateRequest
from fleetops.services.checklist_definition_service import checklist_definition_service, validate_answers
from fleetops.services.usage_log_service import usage_log_service
from fleetops.schemas.common import paginate
from fleetops.utils.audit import log_action
from fleetops.utils.dates import as_utc, iso, utcnow, start_of_day, end_of_day
from fleetops.utils.exceptions import NotFoundException, ForbiddenException

logger = logging.getLogger(__name__)


def serialize_checklist(c: Checklist) -> dict:
    return {
        "id":               c.id,
        "vehicleId":        c.vehicleId,
        "operatorId":       c.operatorId,
        "operatorName":     c.operatorName,
        "date":             iso(c.date),
        "items":            c.items,
        "mileage":          c.mileage,
        "observations":     c.observations,
        "signature":        c.signature,
        "routeDescription": c.routeDescription,
        "createdAt":        iso(c.createdAt),
    }


class ChecklistService:

    # ─── Submission ───────────────────────────────────────────────────────────
    def submit_checklist(self, db: Session, data: ChecklistSubmitRequest, operator: User) -> dict:
        vehicle = db.query(Vehicle).filter(Vehicle.id == data.vehicleId).first()
        if not vehicle:
            raise NotFoundException("Vehicle")

        definitions = checklist_definition_service.get_active_definitions(db)
        answers = validate_answers(definitions, data.answers)
        items = [
            {"id": d.itemId, "label": d.label, "value": answers[d.itemId]}
            for d in definitions
        ]

        now = utcnow()
        checklist = Checklist(
            vehicleId=vehicle.id,
            operatorId=operator.id,
            operatorName=operator.name,
            date=now,
            items=items,
            mileage=data.mileage,
            observations=data.observations,
            signature=data.signature,
            routeDescription=data.routeDescription,
        )
        db.add(checklist)

        # The odometer only moves forward
        if data.mileage > vehicle.mileage:
            vehicle.mileage = data.mileage

        # Possession recorded without a usage log: open one so the return has something to close
        if vehicle.assignedOperatorId == operator.id and vehicle.pickedUpDate is not None:
            if usage_log_service.get_active_log(db, vehicle.id, operator.id) is None:
                logger.warning(
                    f"No active usage log for vehicle {vehicle.plate} held by {operator.name}; "
                    f"opening one from checklist mileage {data.mileage}"
                )
                usage_log_service.create_log(db, vehicle, operator, data.mileage, as_utc(vehicle.pickedUpDate))

        db.flush()
        log_action(db, operator.id, "CREATE", checklist,
                   f"{operator.name} submitted checklist for {vehicle.plate}")
        db.commit()

        db.refresh(checklist)
        return serialize_checklist(checklist)

    # ─── Possession lookup ────────────────────────────────────────────────────
    def get_checklist_for_possession(
        self, db: Session, vehicle_id: str, operator_id: str,
        picked_up_date: datetime | None, until: datetime | None = None,
    ) -> Checklist | None:
        """Most recent checklist by this operator for this vehicle inside the possession window."""
        if picked_up_date is None:
            return None

        q = db.query(Checklist).filter(
            Checklist.vehicleId == vehicle_id,
            Checklist.operatorId == operator_id,
            Checklist.date >= as_utc(picked_up_date),
        )
        if until is not None:
            q = q.filter(Checklist.date <= as_utc(until))
        return q.order_by(Checklist.date.desc(), Checklist.createdAt.desc()).first()

    def get_current_possession(self, db: Session, operator: User) -> dict:
        vehicle = db.query(Vehicle).filter(Vehicle.assignedOperatorId == operator.id).first()
        if not vehicle:
            return {
                "hasVehicle":         False,
                "vehicleId":          None,
                "pickedUpDate":       None,
                "checklistCompleted": False,
                "checklist":          None,
            }

        checklist = self.get_checklist_for_possession(db, vehicle.id, operator.id, vehicle.pickedUpDate)
        return {
            "hasVehicle":         True,
            "vehicleId":          vehicle.id,
            "pickedUpDate":       iso(vehicle.pickedUpDate),
            "checklistCompleted": checklist is not None,
            "checklist":          serialize_checklist(checklist) if checklist else None,
        }

    # ─── CRUD ─────────────────────────────────────────────────────────────────
    def list_checklists(
        self, db: Session, current_user: User, page: int, limit: int,
        vehicle_id: str | None, operator_id: str | None, day: date | None,
    ) -> tuple[list[dict], int]:
        q = db.query(Checklist)

        if current_user.role == UserRole.OPERATOR:
            q = q.filter(Checklist.operatorId == current_user.id)
        elif operator_id:
            q = q.filter(Checklist.operatorId == operator_id)

        if vehicle_id: q = q.filter(Checklist.vehicleId == vehicle_id)
        if day:
            q = q.filter(Checklist.date >= start_of_day(day), Checklist.date <= end_of_day(day))

        items, total = paginate(q.order_by(Checklist.date.desc(), Checklist.createdAt.desc()), page, limit)
        return [serialize_checklist(c) for c in items], total

    def _get_or_404(self, db: Session, checklist_id: str) -> Checklist:
        c = db.query(Checklist).filter(Checklist.id == checklist_id).first()
        if not c: raise NotFoundException("Checklist")
        return c

    def get_checklist(self, db: Session, checklist_id: str, current_user: User) -> dict:
        c = self._get_or_404(db, checklist_id)
        if current_user.role == UserRole.OPERATOR and c.operatorId != current_user.id:
            raise ForbiddenException("You can only view your own checklists")
        return serialize_checklist(c)

    def update_checklist(self, db: Session, checklist_id: str, data: ChecklistUpdateRequest, actor_id: str) -> dict:
        c = self._get_or_404(db, checklist_id)

        if data.observations is not None:     c.observations     = data.observations
        if data.routeDescription is not None: c.routeDescription = data.routeDescription

        log_action(db, actor_id, "UPDATE", c, f"Updated checklist {c.id}")
        db.commit()
        db.refresh(c)
        return serialize_checklist(c)

    def delete_checklist(self, db: Session, checklist_id: str, actor_id: str) -> None:
        c = self._get_or_404(db, checklist_id)
        log_action(db, actor_id, "DELETE", c,
                   f"Deleted checklist by {c.operatorName} from {iso(c.date)}")
        db.delete(c)
        db.commit()


checklist_service = ChecklistService()
