from datetime import datetime, timedelta, timezone

import pytest

from fleetops.services.usage_log_service import compute_duration_minutes, compute_km_driven

API = "/api/v1/usage-logs"


@pytest.mark.parametrize("initial, final, expected", [
    (1000, 1200, 200),
    (1000, 1000, 0),
    (1000, 800, 0),
])
def test_compute_km_driven(initial, final, expected):
    assert compute_km_driven(initial, final) == expected


def test_compute_duration_handles_naive_and_aware():
    picked = datetime(2026, 1, 1, 8, 0, 0)                                   # naive, as read from SQLite
    returned = datetime(2026, 1, 1, 9, 59, 59, tzinfo=timezone.utc)
    assert compute_duration_minutes(picked, returned) == 119


def test_operator_sees_own_logs(client, make_vehicle, operator, operator_headers, other_operator_headers, admin_headers):
    first, second = make_vehicle(), make_vehicle()
    client.post(f"/api/v1/vehicles/{first.id}/pickup", headers=operator_headers)
    client.post(f"/api/v1/vehicles/{second.id}/pickup", headers=other_operator_headers)

    mine = client.get(API, headers=operator_headers).json()
    assert mine["meta"]["total"] == 1
    assert mine["data"][0]["operatorId"] == operator.id

    # operatorId filter is ignored for operators
    theirs = client.get(API, params={"operatorId": "someone-else"}, headers=operator_headers).json()
    assert theirs["meta"]["total"] == 1

    everyone = client.get(API, headers=admin_headers).json()
    assert everyone["meta"]["total"] == 2

    filtered = client.get(API, params={"vehicleId": second.id}, headers=admin_headers).json()
    assert filtered["meta"]["total"] == 1


def test_status_and_date_filters(client, vehicle, operator_headers, admin_headers):
    client.post(f"/api/v1/vehicles/{vehicle.id}/pickup", headers=operator_headers)
    client.post(f"/api/v1/vehicles/{vehicle.id}/return", json={"newMileage": 1050}, headers=operator_headers)
    client.post(f"/api/v1/vehicles/{vehicle.id}/pickup", headers=operator_headers)

    r = client.get(API, params={"status": "completed"}, headers=admin_headers)
    assert r.json()["meta"]["total"] == 1
    assert r.json()["data"][0]["kmDriven"] == 50

    today = datetime.now(timezone.utc).date()
    r = client.get(API, params={"startDate": str(today), "endDate": str(today)}, headers=admin_headers)
    assert r.json()["meta"]["total"] == 2

    r = client.get(API, params={"startDate": str(today + timedelta(days=1))}, headers=admin_headers)
    assert r.json()["meta"]["total"] == 0


def test_get_log_access(client, vehicle, operator_headers, other_operator_headers):
    data = client.post(f"/api/v1/vehicles/{vehicle.id}/pickup", headers=operator_headers).json()["data"]
    log_id = data["usageLog"]["id"]

    assert client.get(f"{API}/{log_id}", headers=operator_headers).status_code == 200
    assert client.get(f"{API}/{log_id}", headers=other_operator_headers).status_code == 403
    assert client.get(f"{API}/missing", headers=operator_headers).status_code == 404
