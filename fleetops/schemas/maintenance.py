from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import date
from decimal import Decimal
from fleetops.models.maintenance import MaintenanceType, MaintenancePriority, MaintenanceStatus, WorkshopCheckValue


def _check_non_negative(v):
    if v is not None and v < 0: raise ValueError("Value cannot be negative")
    return v


class MaintenanceCreateRequest(BaseModel):
    vehicleId:      str
    type:           MaintenanceType
    description:    str
    priority:       MaintenancePriority = MaintenancePriority.MEDIUM
    status:         MaintenanceStatus   = MaintenanceStatus.PLANNED
    scheduledDate:  Optional[date]      = None
    scheduledKm:    Optional[int]       = None
    cost:           Optional[Decimal]   = None
    observations:   Optional[str]       = None
    completionDate: Optional[date]      = None

    @field_validator("description")
    @classmethod
    def check_desc(cls, v):
        if not v.strip(): raise ValueError("Description cannot be empty")
        return v.strip()

    @field_validator("cost", "scheduledKm")
    @classmethod
    def check_amounts(cls, v): return _check_non_negative(v)


class MaintenanceUpdateRequest(BaseModel):
    """Only fields present in the request body are applied (explicit null clears)."""
    type:           Optional[MaintenanceType]     = None
    description:    Optional[str]                 = None
    priority:       Optional[MaintenancePriority] = None
    status:         Optional[MaintenanceStatus]   = None
    scheduledDate:  Optional[date]                = None
    scheduledKm:    Optional[int]                 = None
    cost:           Optional[Decimal]             = None
    observations:   Optional[str]                 = None
    completionDate: Optional[date]                = None

    @field_validator("cost", "scheduledKm")
    @classmethod
    def check_amounts(cls, v): return _check_non_negative(v)


# ─── Workshop visit ───────────────────────────────────────────────────────────
# Inspected when the vehicle is handed to the workshop and again when it comes back
WORKSHOP_CHECKLIST_ITEMS: list[tuple[str, str]] = [
    ("documents", "Vehicle registration documents"),
    ("keys",      "Keys (main and spare)"),
    ("tools",     "Tools (jack, wheel wrench)"),
    ("spareTire", "Spare tire"),
    ("bodywork",  "Bodywork and paint"),
    ("tires",     "Tires"),
    ("interior",  "Interior (clean, no personal items)"),
]


def _check_workshop_checklist(v: dict[str, WorkshopCheckValue]) -> dict[str, WorkshopCheckValue]:
    expected = {item_id for item_id, _ in WORKSHOP_CHECKLIST_ITEMS}
    missing = sorted(expected - v.keys())
    unknown = sorted(v.keys() - expected)
    if missing: raise ValueError(f"Missing answers for: {', '.join(missing)}")
    if unknown: raise ValueError(f"Unknown checklist items: {', '.join(unknown)}")
    return v


class WorkshopDropOffRequest(BaseModel):
    """Every workshop item is answered ok / nok / na."""
    workshopName: str
    mileage:      int
    observations: Optional[str] = None
    checklist:    dict[str, WorkshopCheckValue]

    @field_validator("workshopName")
    @classmethod
    def check_workshop_name(cls, v):
        if len(v.strip()) < 3: raise ValueError("Workshop name must be at least 3 characters")
        return v.strip()

    @field_validator("mileage")
    @classmethod
    def check_mileage(cls, v): return _check_non_negative(v)

    @field_validator("checklist")
    @classmethod
    def check_checklist(cls, v): return _check_workshop_checklist(v)


class WorkshopPickUpRequest(BaseModel):
    cost:         Optional[Decimal] = None
    observations: Optional[str]     = None
    checklist:    dict[str, WorkshopCheckValue]

    @field_validator("cost")
    @classmethod
    def check_cost(cls, v): return _check_non_negative(v)

    @field_validator("checklist")
    @classmethod
    def check_checklist(cls, v): return _check_workshop_checklist(v)
