"""
Pytest configuration and shared fixtures for the fleetops test suite.

- In-memory SQLite database (StaticPool, shared by the app and the tests)
- FastAPI TestClient with get_db overridden
- User / vehicle factories and bearer headers
"""

import os

# Settings are read at import time; configure before importing fleetops
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["PICKUP_WEBHOOK_URL"] = ""
os.environ["INCIDENT_WEBHOOK_URL"] = ""
os.environ["MAINTENANCE_WEBHOOK_URL"] = ""

from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from fleetops.database import Base, get_db
from fleetops.main import app
from fleetops.models.user import User, UserRole, UserStatus
from fleetops.models.vehicle import Vehicle, VehicleStatus
from fleetops.utils.security import create_access_token, hash_password

import fleetops.models  # noqa: F401

TEST_PASSWORD = "Password1"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine) -> Generator[Session, None, None]:
    TestingSession = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db) -> Generator[TestClient, None, None]:
    def override_get_db():
        try:
            yield db
        except Exception:
            db.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ─── Factories ────────────────────────────────────────────────────────────────
@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role: UserRole = UserRole.OPERATOR, name: str | None = None,
              status: UserStatus = UserStatus.ACTIVE) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            name=name or f"{role.value.title()} {n}",
            email=f"{role.value}{n}@fleetops.com",
            password=hash_password(TEST_PASSWORD),
            role=role,
            status=status,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_vehicle(db):
    counter = {"n": 0}

    def _make(mileage: int = 1000, status: VehicleStatus = VehicleStatus.ACTIVE,
              plate: str | None = None) -> Vehicle:
        counter["n"] += 1
        vehicle = Vehicle(
            plate=plate or f"ABC{counter['n']:04d}",
            make="Fiat",
            model="Strada",
            year=2022,
            status=status,
            mileage=mileage,
            initialMileageSystem=mileage,
        )
        db.add(vehicle)
        db.commit()
        db.refresh(vehicle)
        return vehicle

    return _make


@pytest.fixture
def operator(make_user) -> User:
    return make_user(UserRole.OPERATOR, name="Alice Operator")


@pytest.fixture
def other_operator(make_user) -> User:
    return make_user(UserRole.OPERATOR, name="Bob Operator")


@pytest.fixture
def admin(make_user) -> User:
    return make_user(UserRole.ADMIN, name="Carol Admin")


@pytest.fixture
def vehicle(make_vehicle) -> Vehicle:
    return make_vehicle(mileage=1000)


def auth_header(user: User) -> dict:
    token = create_access_token(user.id, user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def operator_headers(operator) -> dict:
    return auth_header(operator)


@pytest.fixture
def other_operator_headers(other_operator) -> dict:
    return auth_header(other_operator)


@pytest.fixture
def admin_headers(admin) -> dict:
    return auth_header(admin)


def default_answers(db: Session, value: bool | None = True) -> dict:
    """Answer every active checklist item with the same value."""
    from fleetops.services.checklist_definition_service import checklist_definition_service
    definitions = checklist_definition_service.get_active_definitions(db)
    db.commit()
    return {d.itemId: value for d in definitions}
