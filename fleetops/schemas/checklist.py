from pydantic import BaseModel, Field, field_validator
from typing import Any, Optional


# ─── Checklist submission ─────────────────────────────────────────────────────
class ChecklistSubmitRequest(BaseModel):
    """
    `answers` maps each checklist item id to true (OK), false (not OK) or null (N/A).
    Values are passed through untouched so the runtime model can reject "yes" or 0.
    Which ids are required is decided at runtime from the active item definitions.
    """
    vehicleId:        str
    answers:          dict[str, Any]
    mileage:          int
    observations:     str = Field("", max_length=500)
    signature:        str
    routeDescription: Optional[str] = Field(None, max_length=100)

    @field_validator("mileage")
    @classmethod
    def check_mileage(cls, v):
        if v <= 0: raise ValueError("Mileage must be a positive number")
        return v

    @field_validator("signature")
    @classmethod
    def check_signature(cls, v):
        if len(v.strip()) < 3: raise ValueError("Signature is required (at least 3 characters)")
        return v.strip()


class ChecklistUpdateRequest(BaseModel):
    """Admin corrections; the inspection answers themselves are immutable."""
    observations:     Optional[str] = Field(None, max_length=500)
    routeDescription: Optional[str] = Field(None, max_length=100)


# ─── Item definitions ─────────────────────────────────────────────────────────
class ChecklistItemDefinitionCreateRequest(BaseModel):
    itemId:   str
    label:    str
    order:    int = 0
    isActive: bool = True

    @field_validator("itemId")
    @classmethod
    def check_item_id(cls, v):
        v = v.strip()
        if not v: raise ValueError("Item id cannot be empty")
        if not v.isidentifier(): raise ValueError("Item id may only contain letters, digits and underscores")
        return v

    @field_validator("label")
    @classmethod
    def check_label(cls, v):
        if not v.strip(): raise ValueError("Label cannot be empty")
        return v.strip()


class ChecklistItemDefinitionUpdateRequest(BaseModel):
    label:    Optional[str]  = None
    order:    Optional[int]  = None
    isActive: Optional[bool] = None

    @field_validator("label")
    @classmethod
    def check_label(cls, v):
        if v is not None and not v.strip(): raise ValueError("Label cannot be empty")
        return v.strip() if v else v


class ChecklistItemOrder(BaseModel):
    id:    str
    order: int


class ChecklistReorderRequest(BaseModel):
    items: list[ChecklistItemOrder]
