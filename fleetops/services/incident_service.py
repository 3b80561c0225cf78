from datetime import date
from sqlalchemy.orm import Session

from fleetops.models.incident import Incident, IncidentStatus, OPEN_INCIDENT_STATUSES
from fleetops.models.user import User, UserRole
from fleetops.models.vehicle import Vehicle
from fleetops.schemas.incident import IncidentReportRequest, IncidentUpdateRequest
from fleetops.schemas.common import paginate
from fleetops.utils.audit import log_action
from fleetops.utils.dates import iso, utcnow, start_of_day, end_of_day
from fleetops.utils.exceptions import NotFoundException, ForbiddenException, InvalidDateRangeException
from fleetops.utils.notifications import notify_incident_reported


def serialize_incident(i: Incident) -> dict:
    return {
        "id":           i.id,
        "vehicleId":    i.vehicleId,
        "vehiclePlate": i.vehicle.plate if i.vehicle else None,
        "operatorId":   i.operatorId,
        "operatorName": i.operatorName,
        "date":         iso(i.date),
        "description":  i.description,
        "status":       i.status.value,
        "createdAt":    iso(i.createdAt),
    }


class IncidentService:

    def report_incident(self, db: Session, data: IncidentReportRequest, reporter: User) -> dict:
        vehicle = db.query(Vehicle).filter(Vehicle.id == data.vehicleId).first()
        if not vehicle: raise NotFoundException("Vehicle")

        incident = Incident(
            vehicleId=vehicle.id,
            operatorId=reporter.id,
            operatorName=reporter.name,
            date=data.date or utcnow(),
            description=data.description,
            status=IncidentStatus.REPORTED,
        )
        db.add(incident)
        db.flush()
        log_action(db, reporter.id, "CREATE", incident,
                   f"{reporter.name} reported an incident on {vehicle.plate}")
        db.commit()
        db.refresh(incident)

        result = serialize_incident(incident)
        notify_incident_reported(result, {
            "id": vehicle.id, "plate": vehicle.plate, "make": vehicle.make, "model": vehicle.model,
        })
        return result

    def list_incidents(
        self, db: Session, current_user: User, page: int, limit: int,
        vehicle_id: str | None, operator_id: str | None, status: IncidentStatus | None,
        start_date: date | None, end_date: date | None,
    ) -> tuple[list[dict], int]:
        if start_date and end_date and end_date < start_date:
            raise InvalidDateRangeException()

        q = db.query(Incident)
        if current_user.role == UserRole.OPERATOR:
            q = q.filter(Incident.operatorId == current_user.id)
        elif operator_id:
            q = q.filter(Incident.operatorId == operator_id)

        if vehicle_id: q = q.filter(Incident.vehicleId == vehicle_id)
        if status:     q = q.filter(Incident.status == status)
        if start_date: q = q.filter(Incident.date >= start_of_day(start_date))
        if end_date:   q = q.filter(Incident.date <= end_of_day(end_date))

        items, total = paginate(q.order_by(Incident.date.desc()), page, limit)
        return [serialize_incident(i) for i in items], total

    def open_for_vehicle(self, db: Session, vehicle_id: str) -> list[Incident]:
        return db.query(Incident).filter(
            Incident.vehicleId == vehicle_id,
            Incident.status.in_(OPEN_INCIDENT_STATUSES),
        ).order_by(Incident.date.desc()).all()

    def _get_or_404(self, db: Session, incident_id: str) -> Incident:
        i = db.query(Incident).filter(Incident.id == incident_id).first()
        if not i: raise NotFoundException("Incident")
        return i

    def get_incident(self, db: Session, incident_id: str, current_user: User) -> dict:
        i = self._get_or_404(db, incident_id)
        if current_user.role == UserRole.OPERATOR and i.operatorId != current_user.id:
            raise ForbiddenException("You can only view incidents you reported")
        return serialize_incident(i)

    def update_incident(self, db: Session, incident_id: str, data: IncidentUpdateRequest, actor_id: str) -> dict:
        i = self._get_or_404(db, incident_id)

        old_status = i.status.value
        if data.description is not None: i.description = data.description
        if data.date is not None:        i.date        = data.date
        if data.status is not None:      i.status      = data.status

        log_action(db, actor_id, "UPDATE", i,
                   f"Incident updated (status {old_status} -> {i.status.value})")
        db.commit()
        db.refresh(i)
        return serialize_incident(i)

    def delete_incident(self, db: Session, incident_id: str, actor_id: str) -> None:
        i = self._get_or_404(db, incident_id)
        log_action(db, actor_id, "DELETE", i, f"Deleted incident {i.id}")
        db.delete(i)
        db.commit()


incident_service = IncidentService()
