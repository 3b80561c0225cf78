import pytest

from fleetops.models.audit_log import AuditLog
from fleetops.models.vehicle import VehicleStatus
from fleetops.schemas.maintenance import WORKSHOP_CHECKLIST_ITEMS

API = "/api/v1/maintenance"


def _checklist(value="ok", **overrides):
    answers = {item_id: value for item_id, _ in WORKSHOP_CHECKLIST_ITEMS}
    answers.update(overrides)
    return answers


def _drop_off(client, headers, record_id, **overrides):
    body = {
        "workshopName": "Central Garage",
        "mileage":      1200,
        "observations": "Noise from the front left wheel",
        "checklist":    _checklist(),
    }
    body.update(overrides)
    return client.post(f"{API}/{record_id}/workshop/drop-off", json=body, headers=headers)


def _pick_up(client, headers, record_id, **overrides):
    body = {"checklist": _checklist(), "cost": 350.5, "observations": "Bearing replaced"}
    body.update(overrides)
    return client.post(f"{API}/{record_id}/workshop/pick-up", json=body, headers=headers)


@pytest.fixture
def planned(client, vehicle, admin_headers):
    r = client.post(API, json={
        "vehicleId":   vehicle.id,
        "type":        "corrective",
        "description": "Wheel bearing",
    }, headers=admin_headers)
    assert r.status_code == 201, r.text
    return r.json()["data"]


# ─── Drop-off ─────────────────────────────────────────────────────────────────
def test_drop_off_takes_vehicle_out_of_the_pool(client, db, vehicle, planned, admin_headers, operator_headers):
    r = _drop_off(client, admin_headers, planned["id"], checklist=_checklist(spareTire="nok"))
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["status"] == "in_progress"
    assert data["workshopName"] == "Central Garage"
    assert data["workshopDropOffDate"] is not None
    assert data["workshopPickUpDate"] is None
    assert data["workshopDropOffObservations"] == "Noise from the front left wheel"

    items = data["workshopChecklist"]["dropOffItems"]
    assert [i["id"] for i in items] == [item_id for item_id, _ in WORKSHOP_CHECKLIST_ITEMS]
    assert {i["id"]: i["value"] for i in items}["spareTire"] == "nok"
    assert items[0]["label"] == WORKSHOP_CHECKLIST_ITEMS[0][1]
    assert data["workshopChecklist"]["pickUpItems"] == []

    db.refresh(vehicle)
    assert vehicle.status == VehicleStatus.MAINTENANCE
    assert vehicle.mileage == 1200

    r = client.post(f"/api/v1/vehicles/{vehicle.id}/pickup", headers=operator_headers)
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "VEHICLE_UNAVAILABLE"


def test_drop_off_with_lower_mileage_rejected(client, db, vehicle, planned, admin_headers):
    r = _drop_off(client, admin_headers, planned["id"], mileage=900)
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "MILEAGE_DECREASE"
    assert r.json()["error"]["field"] == "mileage"

    db.refresh(vehicle)
    assert vehicle.status == VehicleStatus.ACTIVE
    assert vehicle.mileage == 1000
    assert client.get(f"{API}/{planned['id']}", headers=admin_headers).json()["data"]["status"] == "planned"


def test_drop_off_of_vehicle_held_by_operator_conflicts(client, vehicle, planned, admin_headers, operator_headers):
    client.post(f"/api/v1/vehicles/{vehicle.id}/pickup", headers=operator_headers)

    r = _drop_off(client, admin_headers, planned["id"])
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "VEHICLE_IN_USE"


def test_drop_off_of_inactive_vehicle_conflicts(client, make_vehicle, admin_headers):
    v = make_vehicle(status=VehicleStatus.INACTIVE)
    record = client.post(API, json={"vehicleId": v.id, "type": "preventive", "description": "Revision"},
                         headers=admin_headers).json()["data"]

    r = _drop_off(client, admin_headers, record["id"])
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "VEHICLE_UNAVAILABLE"


def test_drop_off_requires_planned_maintenance(client, vehicle, admin_headers):
    record = client.post(API, json={
        "vehicleId": vehicle.id, "type": "preventive", "description": "Done already",
        "status": "completed", "completionDate": "2026-03-01",
    }, headers=admin_headers).json()["data"]

    r = _drop_off(client, admin_headers, record["id"])
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "INVALID_MAINTENANCE_STATUS"


@pytest.mark.parametrize("overrides", [
    {"workshopName": " ab "},
    {"checklist": {"documents": "ok"}},
    {"checklist": _checklist(wings="ok")},
    {"checklist": _checklist(tires="yes")},
    {"mileage": -1},
])
def test_drop_off_body_validation(client, planned, admin_headers, overrides):
    r = _drop_off(client, admin_headers, planned["id"], **overrides)
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"


def test_drop_off_unknown_maintenance_is_404(client, admin_headers):
    assert _drop_off(client, admin_headers, "missing").status_code == 404


def test_operator_cannot_drop_off(client, planned, operator_headers):
    assert _drop_off(client, operator_headers, planned["id"]).status_code == 403


# ─── Pick-up ──────────────────────────────────────────────────────────────────
def test_pick_up_completes_and_releases_vehicle(client, db, vehicle, planned, admin_headers, operator_headers):
    _drop_off(client, admin_headers, planned["id"], checklist=_checklist(keys="nok"))

    r = _pick_up(client, admin_headers, planned["id"], checklist=_checklist(interior="na"))
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["status"] == "completed"
    assert data["completionDate"] is not None
    assert data["workshopPickUpDate"] is not None
    assert data["cost"] == 350.5
    assert data["workshopPickUpObservations"] == "Bearing replaced"

    checklist = data["workshopChecklist"]
    assert {i["id"]: i["value"] for i in checklist["dropOffItems"]}["keys"] == "nok"
    assert {i["id"]: i["value"] for i in checklist["pickUpItems"]}["interior"] == "na"

    db.refresh(vehicle)
    assert vehicle.status == VehicleStatus.ACTIVE

    r = client.post(f"/api/v1/vehicles/{vehicle.id}/pickup", headers=operator_headers)
    assert r.status_code == 200
    assert r.json()["data"]["usageLog"]["initialMileage"] == 1200


def test_pick_up_keeps_cost_when_not_sent(client, planned, admin_headers):
    client.put(f"{API}/{planned['id']}", json={"cost": 90}, headers=admin_headers)
    _drop_off(client, admin_headers, planned["id"])

    r = _pick_up(client, admin_headers, planned["id"], cost=None)
    assert r.json()["data"]["cost"] == 90.0


def test_pick_up_negative_cost_rejected(client, planned, admin_headers):
    _drop_off(client, admin_headers, planned["id"])
    assert _pick_up(client, admin_headers, planned["id"], cost=-5).status_code == 422


def test_pick_up_without_drop_off_conflicts(client, planned, admin_headers):
    r = _pick_up(client, admin_headers, planned["id"])
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "INVALID_MAINTENANCE_STATUS"


def test_pick_up_twice_conflicts(client, planned, admin_headers):
    _drop_off(client, admin_headers, planned["id"])
    assert _pick_up(client, admin_headers, planned["id"]).status_code == 200
    assert _pick_up(client, admin_headers, planned["id"]).status_code == 409


def test_pick_up_leaves_admin_deactivation_alone(client, db, vehicle, planned, admin_headers):
    _drop_off(client, admin_headers, planned["id"])
    client.put(f"/api/v1/vehicles/{vehicle.id}", json={"status": "inactive"}, headers=admin_headers)

    _pick_up(client, admin_headers, planned["id"])
    db.refresh(vehicle)
    assert vehicle.status == VehicleStatus.INACTIVE


def test_workshop_visit_is_audited(client, db, planned, admin, admin_headers):
    _drop_off(client, admin_headers, planned["id"])
    _pick_up(client, admin_headers, planned["id"])

    entries = db.query(AuditLog).filter(AuditLog.entityId == planned["id"]).order_by(AuditLog.id).all()
    assert [e.action for e in entries] == ["CREATE", "WORKSHOP_DROP_OFF", "WORKSHOP_PICK_UP"]
    assert {e.userId for e in entries} == {admin.id}


def test_workshop_checklist_items_listed(client, operator_headers):
    r = client.get(f"{API}/workshop/checklist-items", headers=operator_headers)
    assert r.status_code == 200
    assert [i["id"] for i in r.json()["data"]] == [item_id for item_id, _ in WORKSHOP_CHECKLIST_ITEMS]
