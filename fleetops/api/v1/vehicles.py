from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from fleetops.database import get_db
from fleetops.dependencies import get_current_user, get_admin_user, get_operator_user
from fleetops.models.user import User
from fleetops.models.vehicle import VehicleStatus
from fleetops.schemas.vehicle import VehicleCreateRequest, VehicleUpdateRequest, VehicleReturnRequest
from fleetops.schemas.common import success_response, paginated_response
from fleetops.services.vehicle_service import vehicle_service

router = APIRouter(prefix="/vehicles")


@router.get("", summary="List vehicles (paginated)")
def list_vehicles(
    page:     int                     = Query(1, ge=1),
    limit:    int                     = Query(20, ge=1, le=100),
    search:   Optional[str]           = Query(None, description="Search by plate, make or model"),
    status:   Optional[VehicleStatus] = Query(None),
    assigned: Optional[bool]          = Query(None, description="Only assigned (true) or free (false) vehicles"),
    db:       Session                 = Depends(get_db),
    _:        User                    = Depends(get_current_user),
):
    data, total = vehicle_service.list_vehicles(db, page, limit, search, status, assigned)
    return paginated_response("Vehicles retrieved successfully", data, total, page, limit)


@router.get("/me/current", summary="Vehicle currently held by the calling operator")
def get_my_vehicle(db: Session = Depends(get_db), current_user: User = Depends(get_operator_user)):
    data = vehicle_service.get_operator_vehicle(db, current_user.id)
    return success_response("Current vehicle retrieved" if data else "No vehicle assigned", data)


@router.get("/{vehicle_id}", summary="Get vehicle by ID")
def get_vehicle(vehicle_id: str, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return success_response("Vehicle retrieved", vehicle_service.get_vehicle(db, vehicle_id))


@router.get("/{vehicle_id}/pickup-advisories", summary="Open incidents and due maintenance before pickup")
def get_pickup_advisories(vehicle_id: str, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    data = vehicle_service.get_pickup_advisories(db, vehicle_id)
    return success_response("Pickup advisories retrieved", data)


@router.get("/{vehicle_id}/history", summary="Vehicle timeline (Admin)")
def get_vehicle_history(vehicle_id: str, db: Session = Depends(get_db), _: User = Depends(get_admin_user)):
    return success_response("Vehicle history retrieved", vehicle_service.get_vehicle_history(db, vehicle_id))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create vehicle (Admin)")
def create_vehicle(
    body: VehicleCreateRequest,
    db:   Session = Depends(get_db),
    current_user: User = Depends(get_admin_user),
):
    data = vehicle_service.create_vehicle(db, body, current_user.id)
    return success_response("Vehicle created successfully", data)


@router.put("/{vehicle_id}", summary="Update vehicle (Admin)")
def update_vehicle(
    vehicle_id: str,
    body:       VehicleUpdateRequest,
    db:         Session = Depends(get_db),
    current_user: User  = Depends(get_admin_user),
):
    data = vehicle_service.update_vehicle(db, vehicle_id, body, current_user.id)
    return success_response("Vehicle updated successfully", data)


@router.delete("/{vehicle_id}", summary="Delete vehicle (Admin)")
def delete_vehicle(
    vehicle_id: str,
    db:         Session = Depends(get_db),
    current_user: User  = Depends(get_admin_user),
):
    vehicle_service.delete_vehicle(db, vehicle_id, current_user.id)
    return success_response("Vehicle deleted successfully")


# ─── Possession ───────────────────────────────────────────────────────────────
@router.post("/{vehicle_id}/pickup", summary="Pick up a vehicle (Operator)")
def pickup_vehicle(
    vehicle_id: str,
    db:         Session = Depends(get_db),
    current_user: User  = Depends(get_operator_user),
):
    data = vehicle_service.pickup_vehicle(db, vehicle_id, current_user.id)
    return success_response("Vehicle picked up successfully", data)


@router.post("/{vehicle_id}/return", summary="Return a vehicle (Operator)")
def return_vehicle(
    vehicle_id: str,
    body:       VehicleReturnRequest,
    db:         Session = Depends(get_db),
    current_user: User  = Depends(get_operator_user),
):
    data = vehicle_service.return_vehicle(db, vehicle_id, current_user.id, body.newMileage)
    return success_response("Vehicle returned successfully", data)
