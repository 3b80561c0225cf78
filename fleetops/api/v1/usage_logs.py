from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from fleetops.database import get_db
from fleetops.dependencies import get_current_user
from fleetops.models.user import User
from fleetops.models.vehicle_usage_log import UsageLogStatus
from fleetops.schemas.common import success_response, paginated_response
from fleetops.services.usage_log_service import usage_log_service

router = APIRouter(prefix="/usage-logs")


@router.get("", summary="List usage logs (operators see their own)")
def list_logs(
    page:       int                      = Query(1, ge=1),
    limit:      int                      = Query(20, ge=1, le=100),
    startDate:  Optional[date]           = Query(None),
    endDate:    Optional[date]           = Query(None),
    vehicleId:  Optional[str]            = Query(None),
    operatorId: Optional[str]            = Query(None, description="Admin only"),
    status:     Optional[UsageLogStatus] = Query(None),
    db:         Session                  = Depends(get_db),
    current_user: User                   = Depends(get_current_user),
):
    data, total = usage_log_service.list_logs(
        db, current_user, page, limit, startDate, endDate, vehicleId, operatorId, status,
    )
    return paginated_response("Usage logs retrieved successfully", data, total, page, limit)


@router.get("/{log_id}", summary="Get usage log by ID")
def get_log(log_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return success_response("Usage log retrieved", usage_log_service.get_log(db, log_id, current_user))
