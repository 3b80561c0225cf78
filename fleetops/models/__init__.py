"""
Import all models here so that:
1. Alembic can auto-detect them when generating migrations
2. Relationships between models resolve correctly

Order matters: import parent tables before child tables.
"""

from fleetops.models.user import User, UserRole, UserStatus
from fleetops.models.vehicle import Vehicle, VehicleStatus
from fleetops.models.vehicle_usage_log import VehicleUsageLog, UsageLogStatus
from fleetops.models.checklist_item_definition import ChecklistItemDefinition
from fleetops.models.checklist import Checklist
from fleetops.models.maintenance import (
    Maintenance, MaintenanceType, MaintenancePriority, MaintenanceStatus, WorkshopCheckValue,
)
from fleetops.models.incident import Incident, IncidentStatus
from fleetops.models.fine import Fine, FineStatus
from fleetops.models.audit_log import AuditLog

__all__ = [
    "User",
    "UserRole",
    "UserStatus",
    "Vehicle",
    "VehicleStatus",
    "VehicleUsageLog",
    "UsageLogStatus",
    "ChecklistItemDefinition",
    "Checklist",
    "Maintenance",
    "MaintenanceType",
    "MaintenancePriority",
    "MaintenanceStatus",
    "WorkshopCheckValue",
    "Incident",
    "IncidentStatus",
    "Fine",
    "FineStatus",
    "AuditLog",
]
