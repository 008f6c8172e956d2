"""API tests: health and root endpoints, app lifespan."""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import inspect

from db import database
from main import app

pytestmark = pytest.mark.api


def test_health_returns_200(client):
    """GET /health returns 200 and service info."""
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "service": "location-api"}


def test_root_returns_info(client):
    """GET / returns service info and docs link."""
    r = client.get("/")
    assert r.status_code == 200
    data = r.json()
    assert data["service"] == "location-api"
    assert data["health"] == "/health"


def test_lifespan_creates_schema_and_disposes_engine():
    """Entering the app creates tables; leaving it releases the pool."""
    with TestClient(app) as c:
        assert "location" in inspect(database.engine).get_table_names()
        assert c.get("/health").status_code == 200
    assert database._engine is None
