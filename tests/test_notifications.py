from datetime import timedelta

import httpx
import pytest

from fleetops.config import settings
from fleetops.models.maintenance import Maintenance, MaintenanceStatus, MaintenanceType
from fleetops.utils import notifications
from fleetops.utils.dates import utcnow


class _Recorder:
    def __init__(self, fail: bool = False):
        self.calls = []
        self.fail = fail

    def __call__(self, url, json=None, timeout=None):
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        if self.fail:
            raise httpx.ConnectError("connection refused")
        return httpx.Response(200, request=httpx.Request("POST", url))


@pytest.fixture
def webhooks(monkeypatch):
    monkeypatch.setattr(settings, "PICKUP_WEBHOOK_URL", "http://hooks.test/pickup")
    monkeypatch.setattr(settings, "INCIDENT_WEBHOOK_URL", "http://hooks.test/incident")
    monkeypatch.setattr(settings, "MAINTENANCE_WEBHOOK_URL", "http://hooks.test/maintenance")
    recorder = _Recorder()
    monkeypatch.setattr(notifications.httpx, "post", recorder)
    return recorder


def test_send_event_without_url_is_noop(monkeypatch):
    recorder = _Recorder()
    monkeypatch.setattr(notifications.httpx, "post", recorder)
    assert notifications.send_event("", "anything", {}) is False
    assert recorder.calls == []


def test_send_event_failure_is_swallowed(monkeypatch, caplog):
    monkeypatch.setattr(notifications.httpx, "post", _Recorder(fail=True))
    with caplog.at_level("ERROR"):
        assert notifications.send_event("http://hooks.test/x", "vehicle_picked_up", {}) is False
    assert "delivery" in caplog.text


def test_pickup_and_return_notify(client, vehicle, operator, operator_headers, webhooks):
    client.post(f"/api/v1/vehicles/{vehicle.id}/pickup", headers=operator_headers)
    client.post(f"/api/v1/vehicles/{vehicle.id}/return", json={"newMileage": 1300}, headers=operator_headers)

    events = [c["json"]["event"] for c in webhooks.calls]
    assert events == ["vehicle_picked_up", "vehicle_returned"]

    picked = webhooks.calls[0]["json"]
    assert picked["vehicle"]["plate"] == vehicle.plate
    assert picked["operator"]["id"] == operator.id

    returned = webhooks.calls[1]["json"]
    assert returned["vehicle"]["kmDriven"] == 300
    assert returned["vehicle"]["finalMileage"] == 1300


def test_failed_webhook_does_not_fail_pickup(client, monkeypatch, vehicle, operator_headers):
    monkeypatch.setattr(settings, "PICKUP_WEBHOOK_URL", "http://hooks.test/pickup")
    monkeypatch.setattr(notifications.httpx, "post", _Recorder(fail=True))

    r = client.post(f"/api/v1/vehicles/{vehicle.id}/pickup", headers=operator_headers)
    assert r.status_code == 200


def test_incident_notifies(client, vehicle, operator_headers, webhooks):
    client.post("/api/v1/incidents", json={"vehicleId": vehicle.id, "description": "Cracked windshield"},
                headers=operator_headers)
    assert webhooks.calls[0]["url"] == "http://hooks.test/incident"
    assert webhooks.calls[0]["json"]["incident"]["description"] == "Cracked windshield"


def test_return_notifies_upcoming_maintenance(client, db, vehicle, operator_headers, webhooks):
    db.add_all([
        Maintenance(vehicleId=vehicle.id, type=MaintenanceType.PREVENTIVE, description="Oil change",
                    status=MaintenanceStatus.PLANNED, scheduledKm=2500),
        Maintenance(vehicleId=vehicle.id, type=MaintenanceType.PREVENTIVE, description="Tires",
                    status=MaintenanceStatus.PLANNED, scheduledKm=9000),
        Maintenance(vehicleId=vehicle.id, type=MaintenanceType.PREVENTIVE, description="Inspection",
                    status=MaintenanceStatus.PLANNED, scheduledDate=(utcnow() + timedelta(days=3)).date()),
    ])
    db.commit()

    client.post(f"/api/v1/vehicles/{vehicle.id}/pickup", headers=operator_headers)
    client.post(f"/api/v1/vehicles/{vehicle.id}/return", json={"newMileage": 1200}, headers=operator_headers)

    upcoming = [c["json"] for c in webhooks.calls if c["json"]["event"] == "maintenance_upcoming"]
    descriptions = sorted(u["maintenance"]["description"] for u in upcoming)
    assert descriptions == ["Inspection", "Oil change"]
    assert all(u["vehicle"]["currentMileage"] == 1200 for u in upcoming)
