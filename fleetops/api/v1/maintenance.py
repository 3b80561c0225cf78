from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from fleetops.database import get_db
from fleetops.dependencies import get_current_user, get_admin_user
from fleetops.models.maintenance import MaintenanceStatus
from fleetops.models.user import User
from fleetops.schemas.maintenance import (
    MaintenanceCreateRequest, MaintenanceUpdateRequest,
    WorkshopDropOffRequest, WorkshopPickUpRequest, WORKSHOP_CHECKLIST_ITEMS,
)
from fleetops.schemas.common import success_response, paginated_response
from fleetops.services.maintenance_service import maintenance_service

router = APIRouter(prefix="/maintenance")


@router.get("", summary="List maintenance records")
def list_records(
    page:      int                         = Query(1, ge=1),
    limit:     int                         = Query(20, ge=1, le=100),
    vehicleId: Optional[str]               = Query(None),
    status:    Optional[MaintenanceStatus] = Query(None),
    db:        Session                     = Depends(get_db),
    _:         User                        = Depends(get_current_user),
):
    data, total = maintenance_service.list_records(db, page, limit, vehicleId, status)
    return paginated_response("Maintenance records retrieved", data, total, page, limit)


@router.get("/{record_id}", summary="Get maintenance record")
def get_record(record_id: str, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return success_response("Maintenance record retrieved", maintenance_service.get_record(db, record_id))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create maintenance record (Admin)")
def create_record(
    body: MaintenanceCreateRequest,
    db:   Session = Depends(get_db),
    current_user: User = Depends(get_admin_user),
):
    data = maintenance_service.create_record(db, body, current_user.id)
    return success_response("Maintenance record created", data)


@router.put("/{record_id}", summary="Update maintenance record (Admin)")
def update_record(
    record_id: str,
    body:      MaintenanceUpdateRequest,
    db:        Session = Depends(get_db),
    current_user: User = Depends(get_admin_user),
):
    data = maintenance_service.update_record(db, record_id, body, current_user.id)
    return success_response("Maintenance record updated", data)


@router.delete("/{record_id}", summary="Delete maintenance record (Admin)")
def delete_record(
    record_id: str,
    db:        Session = Depends(get_db),
    current_user: User = Depends(get_admin_user),
):
    maintenance_service.delete_record(db, record_id, current_user.id)
    return success_response("Maintenance record deleted")


# ─── Workshop visit ───────────────────────────────────────────────────────────
@router.get("/workshop/checklist-items", summary="Items inspected at workshop drop-off and pick-up")
def workshop_checklist_items(_: User = Depends(get_current_user)):
    items = [{"id": item_id, "label": label} for item_id, label in WORKSHOP_CHECKLIST_ITEMS]
    return success_response("Workshop checklist items retrieved", items)


@router.post("/{record_id}/workshop/drop-off", summary="Drop the vehicle off at a workshop (Admin)")
def workshop_drop_off(
    record_id: str,
    body:      WorkshopDropOffRequest,
    db:        Session = Depends(get_db),
    current_user: User = Depends(get_admin_user),
):
    data = maintenance_service.drop_off_at_workshop(db, record_id, body, current_user.id)
    return success_response("Vehicle dropped off at workshop", data)


@router.post("/{record_id}/workshop/pick-up", summary="Pick the vehicle up from the workshop (Admin)")
def workshop_pick_up(
    record_id: str,
    body:      WorkshopPickUpRequest,
    db:        Session = Depends(get_db),
    current_user: User = Depends(get_admin_user),
):
    data = maintenance_service.pick_up_from_workshop(db, record_id, body, current_user.id)
    return success_response("Vehicle picked up from workshop", data)
