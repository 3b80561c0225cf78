import logging
from datetime import date, datetime
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_

from fleetops.models.checklist import Checklist
from fleetops.models.fine import Fine
from fleetops.models.incident import Incident
from fleetops.models.maintenance import Maintenance
from fleetops.models.user import User
from fleetops.models.vehicle import Vehicle, VehicleStatus
from fleetops.models.vehicle_usage_log import VehicleUsageLog
from fleetops.schemas.vehicle import VehicleCreateRequest, VehicleUpdateRequest
from fleetops.services.checklist_service import checklist_service, serialize_checklist
from fleetops.services.incident_service import incident_service, serialize_incident
from fleetops.services.maintenance_service import maintenance_service, serialize_maintenance
from fleetops.services.usage_log_service import usage_log_service, serialize_usage_log
from fleetops.schemas.common import paginate
from fleetops.utils.audit import log_action
from fleetops.utils.dates import as_utc, iso, utcnow, start_of_day
from fleetops.utils.exceptions import (
    NotFoundException, DuplicateEntryException,
    VehicleAlreadyAssignedException, VehicleUnavailableException, VehicleInUseException,
    OperatorHasVehicleException, VehicleNotAssignedToOperatorException, MileageDecreaseException,
)
from fleetops.utils.notifications import (
    notify_vehicle_picked_up, notify_vehicle_returned, notify_maintenance_upcoming,
)

logger = logging.getLogger(__name__)


def _serialize(v: Vehicle) -> dict:
    return {
        "id":                   v.id,
        "plate":                v.plate,
        "make":                 v.make,
        "model":                v.model,
        "year":                 v.year,
        "acquisitionDate":      iso(v.acquisitionDate),
        "status":               v.status.value,
        "imageUrl":             v.imageUrl,
        "mileage":              v.mileage,
        "initialMileageSystem": v.initialMileageSystem,
        "assignedOperatorId":   v.assignedOperatorId,
        "pickedUpDate":         iso(v.pickedUpDate),
        "createdAt":            iso(v.createdAt),
    }


def _serialize_operator(u: User) -> dict:
    return {"id": u.id, "name": u.name, "email": u.email}


class VehicleService:

    def _get_or_404(self, db: Session, vehicle_id: str) -> Vehicle:
        v = db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()
        if not v:
            raise NotFoundException("Vehicle")
        return v

    # ─── Registry ─────────────────────────────────────────────────────────────
    def list_vehicles(
        self, db: Session, page: int, limit: int,
        search: str | None, status: VehicleStatus | None, assigned: bool | None,
    ) -> tuple[list[dict], int]:
        q = db.query(Vehicle)

        if search:
            kw = f"%{search}%"
            q = q.filter(or_(
                Vehicle.plate.ilike(kw),
                Vehicle.make.ilike(kw),
                Vehicle.model.ilike(kw),
            ))
        if status:
            q = q.filter(Vehicle.status == status)
        if assigned is True:  q = q.filter(Vehicle.assignedOperatorId != None)
        if assigned is False: q = q.filter(Vehicle.assignedOperatorId == None)

        items, total = paginate(q.order_by(Vehicle.plate), page, limit)
        return [_serialize(v) for v in items], total

    def get_vehicle(self, db: Session, vehicle_id: str) -> dict:
        return _serialize(self._get_or_404(db, vehicle_id))

    def get_operator_vehicle(self, db: Session, operator_id: str) -> dict | None:
        v = db.query(Vehicle).filter(Vehicle.assignedOperatorId == operator_id).first()
        return _serialize(v) if v else None

    def create_vehicle(self, db: Session, data: VehicleCreateRequest, actor_id: str) -> dict:
        if db.query(Vehicle).filter(Vehicle.plate == data.plate).first():
            raise DuplicateEntryException("Plate already registered", field="plate")

        vehicle = Vehicle(
            plate=data.plate,
            make=data.make,
            model=data.model,
            year=data.year,
            acquisitionDate=data.acquisitionDate,
            status=data.status,
            imageUrl=data.imageUrl,
            mileage=data.mileage,
            initialMileageSystem=data.mileage,
        )
        db.add(vehicle)
        db.flush()
        log_action(db, actor_id, "CREATE", vehicle,
                   f"Created vehicle {data.plate} ({data.make} {data.model})")
        db.commit()
        db.refresh(vehicle)
        return _serialize(vehicle)

    def update_vehicle(self, db: Session, vehicle_id: str, data: VehicleUpdateRequest, actor_id: str) -> dict:
        v = self._get_or_404(db, vehicle_id)

        # A corrected acquisition date restarts the baseline used for fleet km statistics
        if data.acquisitionDate and v.acquisitionDate and data.acquisitionDate != v.acquisitionDate:
            v.initialMileageSystem = data.mileage if data.mileage is not None else v.mileage

        if data.make:                     v.make            = data.make
        if data.model:                    v.model           = data.model
        if data.year:                     v.year            = data.year
        if data.acquisitionDate:          v.acquisitionDate = data.acquisitionDate
        if data.status:                   v.status          = data.status
        if data.imageUrl is not None:     v.imageUrl        = data.imageUrl
        if data.mileage is not None:      v.mileage         = data.mileage

        log_action(db, actor_id, "UPDATE", v, f"Updated vehicle {v.plate}")
        db.commit()
        db.refresh(v)
        return _serialize(v)

    def delete_vehicle(self, db: Session, vehicle_id: str, actor_id: str) -> None:
        v = self._get_or_404(db, vehicle_id)
        if v.assignedOperatorId:
            raise VehicleInUseException("Cannot delete a vehicle that is currently assigned to an operator")

        for model in (VehicleUsageLog, Checklist, Maintenance, Incident, Fine):
            if db.query(model).filter(model.vehicleId == v.id).first():
                raise VehicleInUseException("Vehicle has history records; set its status to inactive instead")

        log_action(db, actor_id, "DELETE", v, f"Deleted vehicle {v.plate}")
        db.delete(v)
        db.commit()

    # ─── Pickup ───────────────────────────────────────────────────────────────
    def pickup_vehicle(self, db: Session, vehicle_id: str, operator_id: str) -> dict:
        """
        Assign the vehicle to the operator and open a usage log, in one transaction.

        Checks run in this order: vehicle exists, vehicle unassigned, vehicle
        active, operator holds no other vehicle, operator exists. A concurrent
        pickup of the same vehicle fails on the version column; a concurrent
        pickup by the same operator fails on the unique assignment column.
        """
        v = self._get_or_404(db, vehicle_id)
        if v.assignedOperatorId:
            raise VehicleAlreadyAssignedException()
        if v.status != VehicleStatus.ACTIVE:
            raise VehicleUnavailableException(v.status.value)
        if db.query(Vehicle).filter(Vehicle.assignedOperatorId == operator_id).first():
            raise OperatorHasVehicleException()

        operator = db.query(User).filter(User.id == operator_id).first()
        if not operator:
            raise NotFoundException("Operator")

        now = utcnow()
        initial_mileage = v.mileage
        try:
            v.assignedOperatorId = operator.id
            v.pickedUpDate       = now
            log = usage_log_service.create_log(db, v, operator, initial_mileage, now)
            log_action(db, operator.id, "PICKUP", v,
                       f"{operator.name} picked up {v.plate} at {initial_mileage} km")
            db.commit()
        except StaleDataError:
            db.rollback()
            raise VehicleAlreadyAssignedException()
        except IntegrityError:
            db.rollback()
            raise OperatorHasVehicleException()

        db.refresh(v)
        result = {"vehicle": _serialize(v), "usageLog": serialize_usage_log(log)}
        logger.info(f"Vehicle {v.plate} picked up by {operator.name} (log {log.id})")
        notify_vehicle_picked_up(result["vehicle"], _serialize_operator(operator), iso(now))
        return result

    # ─── Return ───────────────────────────────────────────────────────────────
    def return_vehicle(self, db: Session, vehicle_id: str, operator_id: str, new_mileage: int) -> dict:
        """
        Release the vehicle, record the odometer and close the active usage log.

        A missing active log is logged and skipped; the vehicle is still released.
        """
        v = self._get_or_404(db, vehicle_id)
        if v.assignedOperatorId != operator_id:
            raise VehicleNotAssignedToOperatorException()
        if new_mileage < v.mileage:
            raise MileageDecreaseException(new_mileage, v.mileage)

        operator = db.query(User).filter(User.id == operator_id).first()
        now = utcnow()

        log = usage_log_service.get_active_log(db, v.id, operator_id)
        v.assignedOperatorId = None
        v.pickedUpDate       = None
        v.mileage            = new_mileage

        if log is None:
            logger.warning(
                f"No active usage log found for vehicle {v.plate} and operator {operator_id}; "
                f"vehicle released without closing a log"
            )
        else:
            checklist = checklist_service.get_checklist_for_possession(
                db, v.id, operator_id, log.pickedUpTimestamp, until=now,
            )
            usage_log_service.complete_log(
                db, log, new_mileage, now,
                route_description=checklist.routeDescription if checklist else None,
            )

        # A concurrent write to the vehicle fails this commit (version column) and rolls back both rows
        log_action(db, operator_id, "RETURN", v,
                   f"Vehicle {v.plate} returned at {new_mileage} km")
        db.commit()

        db.refresh(v)
        vehicle_data = _serialize(v)
        log_data = serialize_usage_log(log) if log else None
        logger.info(f"Vehicle {v.plate} returned at {new_mileage} km")

        if operator:
            notify_vehicle_returned(vehicle_data, _serialize_operator(operator), log_data)
        self._notify_upcoming_maintenance(db, v, vehicle_data, now.date())
        return {"vehicle": vehicle_data, "usageLog": log_data}

    def _notify_upcoming_maintenance(self, db: Session, v: Vehicle, vehicle_data: dict, today: date) -> None:
        for m, reason in maintenance_service.find_upcoming(db, v, today):
            logger.info(f"Upcoming maintenance for {v.plate}: {reason}")
            notify_maintenance_upcoming(serialize_maintenance(m), vehicle_data, reason)

    # ─── Advisories ───────────────────────────────────────────────────────────
    def get_pickup_advisories(self, db: Session, vehicle_id: str, today: date | None = None) -> dict:
        """Open incidents and near-due maintenance to confirm before a pickup. Read-only."""
        v = self._get_or_404(db, vehicle_id)
        today = today or utcnow().date()

        incidents = incident_service.open_for_vehicle(db, v.id)
        maintenances = maintenance_service.due_for_pickup(db, v, today)
        return {
            "vehicleId":            v.id,
            "openIncidents":        [serialize_incident(i) for i in incidents],
            "dueMaintenances":      [serialize_maintenance(m) for m in maintenances],
            "requiresConfirmation": bool(incidents or maintenances),
        }

    # ─── History ──────────────────────────────────────────────────────────────
    def get_vehicle_history(self, db: Session, vehicle_id: str) -> dict:
        """Checklists, usage, maintenance and incidents merged newest first."""
        v = self._get_or_404(db, vehicle_id)
        events: list[tuple[datetime, dict]] = []

        for c in db.query(Checklist).filter(Checklist.vehicleId == v.id).all():
            events.append((as_utc(c.date), {"type": "checklist", "date": iso(c.date), "data": serialize_checklist(c)}))

        for log in db.query(VehicleUsageLog).filter(VehicleUsageLog.vehicleId == v.id).all():
            events.append((as_utc(log.pickedUpTimestamp),
                           {"type": "usage", "date": iso(log.pickedUpTimestamp), "data": serialize_usage_log(log)}))

        for m in db.query(Maintenance).filter(Maintenance.vehicleId == v.id).all():
            day = m.completionDate or m.scheduledDate
            when = start_of_day(day) if day else as_utc(m.createdAt)
            events.append((when, {"type": "maintenance", "date": iso(when), "data": serialize_maintenance(m)}))

        for i in db.query(Incident).filter(Incident.vehicleId == v.id).all():
            events.append((as_utc(i.date), {"type": "incident", "date": iso(i.date), "data": serialize_incident(i)}))

        events.sort(key=lambda e: e[0], reverse=True)
        return {"vehicle": _serialize(v), "events": [e for _, e in events]}


vehicle_service = VehicleService()
