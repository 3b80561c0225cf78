from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import date
from fleetops.models.vehicle import VehicleStatus


def _check_year(v):
    if v is not None and not (1900 <= v <= 2100):
        raise ValueError("Year must be between 1900 and 2100")
    return v


def _check_mileage(v):
    if v is not None and v < 0:
        raise ValueError("Mileage cannot be negative")
    return v


# ─── Requests ─────────────────────────────────────────────────────────────────
class VehicleCreateRequest(BaseModel):
    plate:           str
    make:            str
    model:           str
    year:            int
    acquisitionDate: Optional[date] = None
    status:          VehicleStatus = VehicleStatus.ACTIVE
    imageUrl:        Optional[str] = None
    mileage:         int = 0

    @field_validator("plate")
    @classmethod
    def check_plate(cls, v):
        if not v.strip(): raise ValueError("Plate cannot be empty")
        return v.strip().upper()

    @field_validator("make", "model")
    @classmethod
    def check_text(cls, v):
        if not v.strip(): raise ValueError("Field cannot be empty")
        return v.strip()

    @field_validator("year")
    @classmethod
    def check_year(cls, v): return _check_year(v)

    @field_validator("mileage")
    @classmethod
    def check_mileage(cls, v): return _check_mileage(v)


class VehicleUpdateRequest(BaseModel):
    """Plate is the vehicle's identity and cannot be changed."""
    make:            Optional[str]           = None
    model:           Optional[str]           = None
    year:            Optional[int]           = None
    acquisitionDate: Optional[date]          = None
    status:          Optional[VehicleStatus] = None
    imageUrl:        Optional[str]           = None
    mileage:         Optional[int]           = None

    @field_validator("year")
    @classmethod
    def check_year(cls, v): return _check_year(v)

    @field_validator("mileage")
    @classmethod
    def check_mileage(cls, v): return _check_mileage(v)


class VehicleReturnRequest(BaseModel):
    newMileage: int

    @field_validator("newMileage")
    @classmethod
    def check_mileage(cls, v): return _check_mileage(v)
