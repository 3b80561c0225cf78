from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from fleetops.database import get_db
from fleetops.dependencies import get_current_user, get_admin_user
from fleetops.models.user import User
from fleetops.schemas.checklist import (
    ChecklistItemDefinitionCreateRequest,
    ChecklistItemDefinitionUpdateRequest,
    ChecklistReorderRequest,
)
from fleetops.schemas.common import success_response
from fleetops.services.checklist_definition_service import checklist_definition_service

router = APIRouter(prefix="/checklist-items")


@router.get("", summary="List checklist item definitions")
def list_items(
    activeOnly: bool    = Query(False),
    db:         Session = Depends(get_db),
    _:          User    = Depends(get_current_user),
):
    data = checklist_definition_service.list_definitions(db, active_only=activeOnly)
    return success_response("Checklist items retrieved", data)


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create checklist item (Admin)")
def create_item(
    body: ChecklistItemDefinitionCreateRequest,
    db:   Session = Depends(get_db),
    current_user: User = Depends(get_admin_user),
):
    data = checklist_definition_service.create_definition(db, body, current_user.id)
    return success_response("Checklist item created successfully", data)


@router.put("/reorder", summary="Reorder checklist items (Admin)")
def reorder_items(
    body: ChecklistReorderRequest,
    db:   Session = Depends(get_db),
    current_user: User = Depends(get_admin_user),
):
    data = checklist_definition_service.reorder_definitions(db, body, current_user.id)
    return success_response("Checklist items reordered", data)


@router.put("/{item_id}", summary="Update checklist item (Admin)")
def update_item(
    item_id: str,
    body:    ChecklistItemDefinitionUpdateRequest,
    db:      Session = Depends(get_db),
    current_user: User = Depends(get_admin_user),
):
    data = checklist_definition_service.update_definition(db, item_id, body, current_user.id)
    return success_response("Checklist item updated successfully", data)


@router.delete("/{item_id}", summary="Delete checklist item (Admin)")
def delete_item(
    item_id: str,
    db:      Session = Depends(get_db),
    current_user: User = Depends(get_admin_user),
):
    checklist_definition_service.delete_definition(db, item_id, current_user.id)
    return success_response("Checklist item deleted successfully")
