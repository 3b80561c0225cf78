from datetime import date
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from fleetops.database import get_db
from fleetops.dependencies import get_current_user, get_admin_user
from fleetops.models.fine import FineStatus
from fleetops.models.user import User
from fleetops.schemas.fine import FineCreateRequest, FineUpdateRequest
from fleetops.schemas.common import success_response, paginated_response
from fleetops.services.fine_service import fine_service

router = APIRouter(prefix="/fines")


@router.get("", summary="List fines (operators see their own)")
def list_fines(
    page:       int                  = Query(1, ge=1),
    limit:      int                  = Query(20, ge=1, le=100),
    operatorId: Optional[str]        = Query(None, description="Admin only"),
    vehicleId:  Optional[str]        = Query(None),
    status:     Optional[FineStatus] = Query(None),
    startDate:  Optional[date]       = Query(None),
    endDate:    Optional[date]       = Query(None),
    db:         Session              = Depends(get_db),
    current_user: User               = Depends(get_current_user),
):
    data, total = fine_service.list_fines(
        db, current_user, page, limit, operatorId, vehicleId, status, startDate, endDate,
    )
    return paginated_response("Fines retrieved", data, total, page, limit)


@router.get("/{fine_id}", summary="Get fine")
def get_fine(fine_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return success_response("Fine retrieved", fine_service.get_fine(db, fine_id, current_user))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Register a fine (Admin)")
def create_fine(
    body: FineCreateRequest,
    db:   Session = Depends(get_db),
    current_user: User = Depends(get_admin_user),
):
    data = fine_service.create_fine(db, body, current_user.id)
    return success_response("Fine registered", data)


@router.put("/{fine_id}", summary="Update fine (Admin)")
def update_fine(
    fine_id: str,
    body:    FineUpdateRequest,
    db:      Session = Depends(get_db),
    current_user: User = Depends(get_admin_user),
):
    data = fine_service.update_fine(db, fine_id, body, current_user.id)
    return success_response("Fine updated", data)
