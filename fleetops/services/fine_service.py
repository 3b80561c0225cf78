from datetime import date
from sqlalchemy.orm import Session

from fleetops.models.fine import Fine, FineStatus
from fleetops.models.user import User, UserRole
from fleetops.models.vehicle import Vehicle
from fleetops.schemas.fine import FineCreateRequest, FineUpdateRequest
from fleetops.schemas.common import paginate
from fleetops.utils.audit import log_action
from fleetops.utils.dates import as_utc, iso, utcnow, start_of_day, end_of_day
from fleetops.utils.exceptions import NotFoundException, ForbiddenException, InvalidDateRangeException


def serialize_fine(f: Fine) -> dict:
    return {
        "id":             f.id,
        "operatorId":     f.operatorId,
        "operatorName":   f.operatorName,
        "vehicleId":      f.vehicleId,
        "vehiclePlate":   f.vehiclePlate,
        "infractionCode": f.infractionCode,
        "description":    f.description,
        "location":       f.location,
        "date":           iso(f.date),
        "dueDate":        iso(f.dueDate),
        "amount":         float(f.amount),
        "status":         f.status.value,
        "adminNotes":     f.adminNotes,
        "createdAt":      iso(f.createdAt),
    }


class FineService:
    """Fines are never deleted; cancelling one is a status change."""

    def create_fine(self, db: Session, data: FineCreateRequest, actor_id: str) -> dict:
        operator = db.query(User).filter(User.id == data.operatorId).first()
        if not operator: raise NotFoundException("Operator")
        vehicle = db.query(Vehicle).filter(Vehicle.id == data.vehicleId).first()
        if not vehicle: raise NotFoundException("Vehicle")

        fine = Fine(
            operatorId=operator.id,
            operatorName=operator.name,
            vehicleId=vehicle.id,
            vehiclePlate=vehicle.plate,
            infractionCode=data.infractionCode,
            description=data.description,
            location=data.location,
            date=data.date,
            dueDate=data.dueDate,
            amount=data.amount,
            status=data.status,
            adminNotes=data.adminNotes,
            createdAt=utcnow(),
        )
        db.add(fine)
        db.flush()
        log_action(db, actor_id, "CREATE", fine,
                   f"Registered fine {fine.infractionCode} for {operator.name} ({vehicle.plate})")
        db.commit()
        db.refresh(fine)
        return serialize_fine(fine)

    def list_fines(
        self, db: Session, current_user: User, page: int, limit: int,
        operator_id: str | None, vehicle_id: str | None, status: FineStatus | None,
        start_date: date | None, end_date: date | None,
    ) -> tuple[list[dict], int]:
        if start_date and end_date and end_date < start_date:
            raise InvalidDateRangeException()

        q = db.query(Fine)
        if current_user.role == UserRole.OPERATOR:
            q = q.filter(Fine.operatorId == current_user.id)
        elif operator_id:
            q = q.filter(Fine.operatorId == operator_id)

        if vehicle_id: q = q.filter(Fine.vehicleId == vehicle_id)
        if status:     q = q.filter(Fine.status == status)
        if start_date: q = q.filter(Fine.date >= start_of_day(start_date))
        if end_date:   q = q.filter(Fine.date <= end_of_day(end_date))

        items, total = paginate(q.order_by(Fine.date.desc()), page, limit)
        return [serialize_fine(f) for f in items], total

    def get_fine(self, db: Session, fine_id: str, current_user: User) -> dict:
        f = db.query(Fine).filter(Fine.id == fine_id).first()
        if not f: raise NotFoundException("Fine")
        if current_user.role == UserRole.OPERATOR and f.operatorId != current_user.id:
            raise ForbiddenException("You can only view your own fines")
        return serialize_fine(f)

    def update_fine(self, db: Session, fine_id: str, data: FineUpdateRequest, actor_id: str) -> dict:
        f = db.query(Fine).filter(Fine.id == fine_id).first()
        if not f: raise NotFoundException("Fine")

        new_date     = data.date if data.date is not None else f.date
        new_due_date = data.dueDate if data.dueDate is not None else f.dueDate
        if as_utc(new_due_date) < as_utc(new_date):
            raise InvalidDateRangeException("Due date cannot be before the infraction date")

        if data.infractionCode is not None: f.infractionCode = data.infractionCode
        if data.description is not None:    f.description    = data.description
        if data.location is not None:       f.location       = data.location
        if data.date is not None:           f.date           = data.date
        if data.dueDate is not None:        f.dueDate        = data.dueDate
        if data.amount is not None:         f.amount         = data.amount
        if data.status is not None:         f.status         = data.status
        if data.adminNotes is not None:     f.adminNotes     = data.adminNotes

        log_action(db, actor_id, "UPDATE", f,
                   f"Updated fine {f.infractionCode} (status {f.status.value})")
        db.commit()
        db.refresh(f)
        return serialize_fine(f)


fine_service = FineService()
