import logging
from datetime import date, datetime
from sqlalchemy.orm import Session

from fleetops.models.user import User, UserRole
from fleetops.models.vehicle import Vehicle
from fleetops.models.vehicle_usage_log import VehicleUsageLog, UsageLogStatus
from fleetops.schemas.common import paginate
from fleetops.utils.dates import as_utc, iso, start_of_day, end_of_day
from fleetops.utils.exceptions import NotFoundException, ForbiddenException, InvalidDateRangeException

logger = logging.getLogger(__name__)


def serialize_usage_log(log: VehicleUsageLog) -> dict:
    return {
        "id":                log.id,
        "vehicleId":         log.vehicleId,
        "vehiclePlate":      log.vehiclePlate,
        "operatorId":        log.operatorId,
        "operatorName":      log.operatorName,
        "pickedUpTimestamp": iso(log.pickedUpTimestamp),
        "returnedTimestamp": iso(log.returnedTimestamp),
        "durationMinutes":   log.durationMinutes,
        "initialMileage":    log.initialMileage,
        "finalMileage":      log.finalMileage,
        "kmDriven":          log.kmDriven,
        "routeDescription":  log.routeDescription,
        "status":            log.status.value,
    }


def compute_km_driven(initial_mileage: int, final_mileage: int) -> int:
    """Distance for one possession window, floored at 0."""
    return max(0, final_mileage - initial_mileage)


def compute_duration_minutes(picked_up_at: datetime, returned_at: datetime) -> int:
    """Whole minutes elapsed, truncated."""
    seconds = (as_utc(returned_at) - as_utc(picked_up_at)).total_seconds()
    return max(0, int(seconds // 60))


class UsageLogService:

    # ─── Lifecycle hooks (no commit, the calling service owns the transaction)
    def create_log(
        self, db: Session, vehicle: Vehicle, operator: User,
        initial_mileage: int, picked_up_at: datetime,
    ) -> VehicleUsageLog:
        log = VehicleUsageLog(
            vehicleId=vehicle.id,
            vehiclePlate=vehicle.plate,
            operatorId=operator.id,
            operatorName=operator.name,
            pickedUpTimestamp=picked_up_at,
            initialMileage=initial_mileage,
            status=UsageLogStatus.ACTIVE,
        )
        db.add(log)
        db.flush()
        return log

    def get_active_log(self, db: Session, vehicle_id: str, operator_id: str) -> VehicleUsageLog | None:
        """Latest active log for the pair; older active rows (if any) are left untouched."""
        return db.query(VehicleUsageLog).filter(
            VehicleUsageLog.vehicleId == vehicle_id,
            VehicleUsageLog.operatorId == operator_id,
            VehicleUsageLog.status == UsageLogStatus.ACTIVE,
        ).order_by(VehicleUsageLog.pickedUpTimestamp.desc()).first()

    def complete_log(
        self, db: Session, log: VehicleUsageLog,
        final_mileage: int, returned_at: datetime,
        route_description: str | None = None,
    ) -> VehicleUsageLog:
        if final_mileage < log.initialMileage:
            logger.warning(
                f"Final mileage ({final_mileage}) is below initial mileage ({log.initialMileage}) "
                f"for usage log {log.id}; kmDriven set to 0"
            )
        log.returnedTimestamp = returned_at
        log.finalMileage      = final_mileage
        log.kmDriven          = compute_km_driven(log.initialMileage, final_mileage)
        log.durationMinutes   = compute_duration_minutes(log.pickedUpTimestamp, returned_at)
        log.status            = UsageLogStatus.COMPLETED
        if route_description:
            log.routeDescription = route_description
        db.flush()
        return log

    # ─── Queries ──────────────────────────────────────────────────────────────
    def list_logs(
        self, db: Session, current_user: User,
        page: int, limit: int,
        start_date: date | None, end_date: date | None,
        vehicle_id: str | None, operator_id: str | None,
        status: UsageLogStatus | None,
    ) -> tuple[list[dict], int]:
        if start_date and end_date and end_date < start_date:
            raise InvalidDateRangeException()

        q = db.query(VehicleUsageLog)
        if current_user.role == UserRole.OPERATOR:
            q = q.filter(VehicleUsageLog.operatorId == current_user.id)
        elif operator_id:
            q = q.filter(VehicleUsageLog.operatorId == operator_id)

        if start_date: q = q.filter(VehicleUsageLog.pickedUpTimestamp >= start_of_day(start_date))
        if end_date:   q = q.filter(VehicleUsageLog.pickedUpTimestamp <= end_of_day(end_date))
        if vehicle_id: q = q.filter(VehicleUsageLog.vehicleId == vehicle_id)
        if status:     q = q.filter(VehicleUsageLog.status == status)

        items, total = paginate(q.order_by(VehicleUsageLog.pickedUpTimestamp.desc()), page, limit)
        return [serialize_usage_log(log) for log in items], total

    def get_log(self, db: Session, log_id: str, current_user: User) -> dict:
        log = db.query(VehicleUsageLog).filter(VehicleUsageLog.id == log_id).first()
        if not log:
            raise NotFoundException("Usage log")
        if current_user.role == UserRole.OPERATOR and log.operatorId != current_user.id:
            raise ForbiddenException("You can only view your own usage logs")
        return serialize_usage_log(log)


usage_log_service = UsageLogService()
