"""
Tests for the HTTP entry point: health, metrics and CORS wiring.
"""

import pytest
from sqlalchemy.orm import Session

from app.core.database import get_db, ping
from app.core.errors import TransportError
from main import app


class BrokenSession(Session):
    def execute(self, *args, **kwargs):
        raise ConnectionRefusedError("[Errno 111] Connection refused")


class TestHealthChecks:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["message"] == "JobSphere API"

    def test_basic_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_detailed_health_check(self, client):
        response = client.get("/health/detailed")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["checks"]["database"]["status"] == "healthy"

    def test_detailed_health_check_reports_unreachable_database(self, client):
        app.dependency_overrides[get_db] = lambda: BrokenSession()

        response = client.get("/health/detailed")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["checks"]["database"]["message"] == "Database connection failed. Please try again later."


def test_ping_raises_transport_error(db_session):
    ping(db_session)
    with pytest.raises(TransportError) as exc_info:
        ping(BrokenSession())
    assert exc_info.value.status_code == 503


class TestMetrics:

    def test_counts(self, client, job_seeker, job, make_application):
        make_application(job_seeker, job)

        response = client.get("/metrics")

        assert response.status_code == 200
        metrics = response.json()["metrics"]
        assert metrics["total_users"] == 2
        assert metrics["job_seekers"] == 1
        assert metrics["employers"] == 1
        assert metrics["total_jobs"] == 1
        assert metrics["pending_newsletters"] == 1
        assert metrics["total_applications"] == 1
