import asyncio
import json

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker
from starlette.requests import Request

from fleetops.middleware.error_handler import integrity_error_handler
from fleetops.models.audit_log import AuditLog
from fleetops.models.vehicle import Vehicle

API = "/api/v1/vehicles"


def _handle(raw_message):
    request = Request({"type": "http", "method": "POST", "path": "/api/v1/vehicles",
                       "headers": [], "query_string": b""})
    exc = IntegrityError("INSERT INTO vehicles ...", {}, Exception(raw_message))
    response = asyncio.run(integrity_error_handler(request, exc))
    return response.status_code, json.loads(response.body)


# ─── Unique violations ────────────────────────────────────────────────────────
@pytest.mark.parametrize("raw, code, field", [
    ("UNIQUE constraint failed: vehicles.assignedOperatorId",                            "OPERATOR_HAS_VEHICLE", None),
    ('duplicate key value violates unique constraint "vehicles_assignedOperatorId_key"', "OPERATOR_HAS_VEHICLE", None),
    ("UNIQUE constraint failed: vehicles.plate",                                          "DUPLICATE_ENTRY",      "plate"),
    ('duplicate key value violates unique constraint "users_email_key"',                  "DUPLICATE_ENTRY",      "email"),
    ("FOREIGN KEY constraint failed",                                                     "DUPLICATE_ENTRY",      None),
])
def test_integrity_error_mapped_by_column(raw, code, field):
    status_code, body = _handle(raw)
    assert status_code == 409
    assert body["success"] is False
    assert body["error"]["code"] == code
    assert body["error"]["field"] == field


# ─── Version conflicts ────────────────────────────────────────────────────────
def test_stale_vehicle_update_answers_409_conflict(client, db, engine, vehicle, admin_headers):
    other_session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    try:
        fresh = other_session.query(Vehicle).filter(Vehicle.id == vehicle.id).first()
        fresh.model = "Toro"
        other_session.commit()
    finally:
        other_session.close()

    # `vehicle` still holds the old version in the request's session
    r = client.put(f"{API}/{vehicle.id}", json={"model": "Mobi"}, headers=admin_headers)
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "CONFLICT"

    db.refresh(vehicle)
    assert vehicle.model == "Toro"
    assert db.query(AuditLog).filter(AuditLog.action == "UPDATE").count() == 0


# ─── Audit trail ──────────────────────────────────────────────────────────────
def test_pickup_and_return_leave_audit_entries(client, db, vehicle, operator, operator_headers):
    client.post(f"{API}/{vehicle.id}/pickup", headers=operator_headers)
    client.post(f"{API}/{vehicle.id}/return", json={"newMileage": 1100}, headers=operator_headers)

    entries = db.query(AuditLog).filter(AuditLog.entityType == "Vehicle").order_by(AuditLog.id).all()
    assert [e.action for e in entries] == ["PICKUP", "RETURN"]
    assert {e.entityId for e in entries} == {vehicle.id}
    assert {e.userId for e in entries} == {operator.id}


def test_reorder_audited_against_model_without_id(client, db, admin_headers):
    items = client.get("/api/v1/checklist-items", headers=admin_headers).json()["data"]
    client.put("/api/v1/checklist-items/reorder",
               json={"items": [{"id": items[0]["id"], "order": 99}]}, headers=admin_headers)

    entry = db.query(AuditLog).filter(AuditLog.entityType == "ChecklistItemDefinition").one()
    assert entry.action == "UPDATE"
    assert entry.entityId is None
