# Set test environment before any application or db imports.
import os

os.environ["TESTING"] = "true"
os.environ["TESTING_DATABASE_URL"] = "sqlite:///:memory:"
os.environ["AUTO_CREATE_SCHEMA"] = "true"

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select

from db import database
from main import app
from models import Base
from models.active_device import ActiveDevice
from models.location import Location
from models.location_parameters import LocationParameters
from models.main_metric import MainMetric
from models.pending_deactivation import PendingDeactivation


@pytest.fixture
def engine():
    """In-memory engine with a fresh schema per test; tables dropped on teardown."""
    eng = database.engine
    database.create_schema()
    yield eng
    Base.metadata.drop_all(database.engine)


@pytest.fixture
def db_session(engine):
    """Function-scoped session on the app's engine. Writes made here must be committed to be seen by the API."""
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(engine):
    """API test client sharing the in-memory database with db_session.

    Not entered as a context manager: the lifespan would dispose the shared
    in-memory engine while db_session still holds its connection.
    """
    yield TestClient(app)


@pytest.fixture
def location_payload():
    """Valid POST /v1/locations/add body."""
    return {
        "id": "loc1",
        "name": "A",
        "address": "addr",
        "googleMapsUrl": "http://x",
        "openingHours": "9-5",
        "parameters": {
            "avgDevicesPerPerson": 0,
            "avgSimsPerPerson": 1,
            "wifiUsageRatio": 0.5,
            "cellularUsageRatio": 0.5,
            "updateInterval": 60,
        },
    }


def insert_location(session, location_id: str, name: str = "Site", with_parameters: bool = True) -> None:
    """Insert a location (optionally with parameters) directly and commit."""
    session.add(
        Location(
            id=location_id,
            name=name,
            address="1 Test St",
            google_maps_url="https://maps.example/loc",
            opening_hours="08:00-20:00",
        )
    )
    session.flush()
    if with_parameters:
        session.add(
            LocationParameters(
                location_id=location_id,
                avg_devices_per_person=1.5,
                avg_sims_per_person=1.1,
                wifi_usage_ratio=0.7,
                cellular_usage_ratio=0.3,
                update_interval=300,
                last_updated=datetime(2024, 1, 1, 12, 0, 0),
            )
        )
    session.commit()


def insert_dependents(session, location_id: str, metric_dates: list[datetime] | None = None) -> None:
    """Insert one active device, one pending deactivation and the given metric rows, then commit."""
    session.add(ActiveDevice(location_id=location_id, device_hash=f"dev-{location_id}"))
    session.add(
        PendingDeactivation(
            location_id=location_id,
            device_hash=f"dev-{location_id}",
            deactivate_at=datetime(2024, 1, 2) + timedelta(hours=1),
        )
    )
    for d in metric_dates or [datetime(2024, 1, 1)]:
        session.add(MainMetric(location_id=location_id, date=d, estimated_people=10, device_count=12))
    session.commit()


def count_rows(session, model, location_id: str) -> int:
    """Count rows of model for a location (fresh SELECT, bypasses the identity map)."""
    column = model.id if model is Location else model.location_id
    return session.execute(select(func.count()).select_from(model).where(column == location_id)).scalar() or 0
