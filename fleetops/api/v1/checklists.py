from datetime import date
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from fleetops.database import get_db
from fleetops.dependencies import get_current_user, get_admin_user, get_operator_user
from fleetops.models.user import User
from fleetops.schemas.checklist import ChecklistSubmitRequest, ChecklistUpdateRequest
from fleetops.schemas.common import success_response, paginated_response
from fleetops.services.checklist_service import checklist_service

router = APIRouter(prefix="/checklists")


@router.get("", summary="List checklists (operators see their own)")
def list_checklists(
    page:       int            = Query(1, ge=1),
    limit:      int            = Query(20, ge=1, le=100),
    vehicleId:  Optional[str]  = Query(None),
    operatorId: Optional[str]  = Query(None, description="Admin only"),
    day:        Optional[date] = Query(None, description="Only checklists submitted on this day (UTC)"),
    db:         Session        = Depends(get_db),
    current_user: User         = Depends(get_current_user),
):
    data, total = checklist_service.list_checklists(db, current_user, page, limit, vehicleId, operatorId, day)
    return paginated_response("Checklists retrieved successfully", data, total, page, limit)


@router.get("/current-possession", summary="Checklist status for the vehicle the operator holds")
def get_current_possession(db: Session = Depends(get_db), current_user: User = Depends(get_operator_user)):
    data = checklist_service.get_current_possession(db, current_user)
    return success_response("Current possession retrieved", data)


@router.get("/{checklist_id}", summary="Get checklist by ID")
def get_checklist(checklist_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return success_response("Checklist retrieved", checklist_service.get_checklist(db, checklist_id, current_user))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Submit a checklist (Operator)")
def submit_checklist(
    body: ChecklistSubmitRequest,
    db:   Session = Depends(get_db),
    current_user: User = Depends(get_operator_user),
):
    data = checklist_service.submit_checklist(db, body, current_user)
    return success_response("Checklist submitted successfully", data)


@router.patch("/{checklist_id}", summary="Correct checklist notes (Admin)")
def update_checklist(
    checklist_id: str,
    body:         ChecklistUpdateRequest,
    db:           Session = Depends(get_db),
    current_user: User    = Depends(get_admin_user),
):
    data = checklist_service.update_checklist(db, checklist_id, body, current_user.id)
    return success_response("Checklist updated successfully", data)


@router.delete("/{checklist_id}", summary="Delete checklist (Admin)")
def delete_checklist(
    checklist_id: str,
    db:           Session = Depends(get_db),
    current_user: User    = Depends(get_admin_user),
):
    checklist_service.delete_checklist(db, checklist_id, current_user.id)
    return success_response("Checklist deleted successfully")
