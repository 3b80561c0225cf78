from conftest import TEST_PASSWORD, auth_header
from fleetops.models.user import UserRole, UserStatus


def test_login_and_me(client, operator):
    r = client.post("/api/v1/auth/login", json={"email": operator.email, "password": TEST_PASSWORD})
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["tokenType"] == "Bearer"
    assert data["user"]["role"] == "operator"

    r = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {data['accessToken']}"})
    assert r.status_code == 200
    assert r.json()["data"]["id"] == operator.id


def test_login_wrong_password(client, operator):
    r = client.post("/api/v1/auth/login", json={"email": operator.email, "password": "Wrong1234"})
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "UNAUTHORIZED"


def test_inactive_user_cannot_login_or_use_token(client, make_user):
    user = make_user(UserRole.OPERATOR, status=UserStatus.INACTIVE)

    r = client.post("/api/v1/auth/login", json={"email": user.email, "password": TEST_PASSWORD})
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "ACCOUNT_INACTIVE"

    r = client.get("/api/v1/auth/me", headers=auth_header(user))
    assert r.status_code == 403


def test_invalid_token_rejected(client):
    r = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401


def test_change_password(client, operator, operator_headers):
    r = client.patch("/api/v1/auth/change-password", json={
        "currentPassword": "Nope12345", "newPassword": "NewPassword9",
    }, headers=operator_headers)
    assert r.status_code == 401

    r = client.patch("/api/v1/auth/change-password", json={
        "currentPassword": TEST_PASSWORD, "newPassword": "NewPassword9",
    }, headers=operator_headers)
    assert r.status_code == 200

    r = client.post("/api/v1/auth/login", json={"email": operator.email, "password": "NewPassword9"})
    assert r.status_code == 200


def test_weak_password_rejected(client, admin_headers):
    r = client.post("/api/v1/users", json={
        "name": "Dan", "email": "dan@fleetops.com", "password": "short",
    }, headers=admin_headers)
    assert r.status_code == 422


# ─── User administration ──────────────────────────────────────────────────────
def test_admin_creates_and_lists_users(client, admin_headers, operator_headers):
    r = client.post("/api/v1/users", json={
        "name": "Dan Driver", "email": "dan@fleetops.com", "password": "Password9",
    }, headers=admin_headers)
    assert r.status_code == 201, r.text
    assert r.json()["data"]["role"] == "operator"

    r = client.post("/api/v1/users", json={
        "name": "Dan Again", "email": "dan@fleetops.com", "password": "Password9",
    }, headers=admin_headers)
    assert r.status_code == 409

    r = client.get("/api/v1/users", params={"role": "operator", "search": "dan"}, headers=admin_headers)
    assert r.json()["meta"]["total"] == 1

    assert client.get("/api/v1/users", headers=operator_headers).status_code == 403


def test_toggle_status(client, admin, admin_headers, operator):
    r = client.patch(f"/api/v1/users/{operator.id}/toggle-status", headers=admin_headers)
    assert r.json()["data"]["status"] == "inactive"

    r = client.patch(f"/api/v1/users/{admin.id}/toggle-status", headers=admin_headers)
    assert r.status_code == 403


def test_cannot_delete_user_holding_vehicle(client, vehicle, operator, operator_headers, admin_headers):
    client.post(f"/api/v1/vehicles/{vehicle.id}/pickup", headers=operator_headers)
    r = client.delete(f"/api/v1/users/{operator.id}", headers=admin_headers)
    assert r.status_code == 409


def test_cannot_delete_user_with_history(client, vehicle, operator, operator_headers, admin_headers):
    client.post(f"/api/v1/vehicles/{vehicle.id}/pickup", headers=operator_headers)
    client.post(f"/api/v1/vehicles/{vehicle.id}/return", json={"newMileage": 1001}, headers=operator_headers)
    r = client.delete(f"/api/v1/users/{operator.id}", headers=admin_headers)
    assert r.status_code == 409


def test_delete_user_without_history(client, make_user, admin, admin_headers):
    user = make_user(UserRole.OPERATOR)
    assert client.delete(f"/api/v1/users/{user.id}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/v1/users/{user.id}", headers=admin_headers).status_code == 404
    assert client.delete(f"/api/v1/users/{admin.id}", headers=admin_headers).status_code == 403
