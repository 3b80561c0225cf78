from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime
from fleetops.models.incident import IncidentStatus


class IncidentReportRequest(BaseModel):
    vehicleId:   str
    description: str
    date:        Optional[datetime] = None   # defaults to now

    @field_validator("description")
    @classmethod
    def check_desc(cls, v):
        if not v.strip(): raise ValueError("Description cannot be empty")
        return v.strip()


class IncidentUpdateRequest(BaseModel):
    description: Optional[str]            = None
    status:      Optional[IncidentStatus] = None
    date:        Optional[datetime]       = None
