from datetime import date
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from fleetops.database import get_db
from fleetops.dependencies import get_current_user, get_admin_user
from fleetops.models.incident import IncidentStatus
from fleetops.models.user import User
from fleetops.schemas.incident import IncidentReportRequest, IncidentUpdateRequest
from fleetops.schemas.common import success_response, paginated_response
from fleetops.services.incident_service import incident_service

router = APIRouter(prefix="/incidents")


@router.get("", summary="List incidents (operators see the ones they reported)")
def list_incidents(
    page:       int                      = Query(1, ge=1),
    limit:      int                      = Query(20, ge=1, le=100),
    vehicleId:  Optional[str]            = Query(None),
    operatorId: Optional[str]            = Query(None, description="Admin only"),
    status:     Optional[IncidentStatus] = Query(None),
    startDate:  Optional[date]           = Query(None),
    endDate:    Optional[date]           = Query(None),
    db:         Session                  = Depends(get_db),
    current_user: User                   = Depends(get_current_user),
):
    data, total = incident_service.list_incidents(
        db, current_user, page, limit, vehicleId, operatorId, status, startDate, endDate,
    )
    return paginated_response("Incidents retrieved", data, total, page, limit)


@router.get("/{incident_id}", summary="Get incident")
def get_incident(incident_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return success_response("Incident retrieved", incident_service.get_incident(db, incident_id, current_user))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Report an incident")
def report_incident(
    body: IncidentReportRequest,
    db:   Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    data = incident_service.report_incident(db, body, current_user)
    return success_response("Incident reported", data)


@router.put("/{incident_id}", summary="Update incident (Admin)")
def update_incident(
    incident_id: str,
    body:        IncidentUpdateRequest,
    db:          Session = Depends(get_db),
    current_user: User   = Depends(get_admin_user),
):
    data = incident_service.update_incident(db, incident_id, body, current_user.id)
    return success_response("Incident updated", data)


@router.delete("/{incident_id}", summary="Delete incident (Admin)")
def delete_incident(
    incident_id: str,
    db:          Session = Depends(get_db),
    current_user: User   = Depends(get_admin_user),
):
    incident_service.delete_incident(db, incident_id, current_user.id)
    return success_response("Incident deleted")
