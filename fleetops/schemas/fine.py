from pydantic import BaseModel, field_validator, model_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal
from fleetops.models.fine import FineStatus
from fleetops.utils.dates import as_utc


class FineCreateRequest(BaseModel):
    operatorId:     str
    vehicleId:      str
    infractionCode: str
    description:    str
    location:       str
    date:           datetime
    dueDate:        datetime
    amount:         Decimal
    status:         FineStatus = FineStatus.PENDING
    adminNotes:     Optional[str] = None

    @field_validator("infractionCode", "description", "location")
    @classmethod
    def check_text(cls, v):
        if not v.strip(): raise ValueError("Field cannot be empty")
        return v.strip()

    @field_validator("amount")
    @classmethod
    def check_amount(cls, v):
        if v < 0: raise ValueError("Amount cannot be negative")
        return v

    @model_validator(mode="after")
    def check_due_date(self):
        if as_utc(self.dueDate) < as_utc(self.date):
            raise ValueError("Due date cannot be before the infraction date")
        return self


class FineUpdateRequest(BaseModel):
    infractionCode: Optional[str]        = None
    description:    Optional[str]        = None
    location:       Optional[str]        = None
    date:           Optional[datetime]   = None
    dueDate:        Optional[datetime]   = None
    amount:         Optional[Decimal]    = None
    status:         Optional[FineStatus] = None
    adminNotes:     Optional[str]        = None

    @field_validator("amount")
    @classmethod
    def check_amount(cls, v):
        if v is not None and v < 0: raise ValueError("Amount cannot be negative")
        return v
