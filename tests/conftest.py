"""
Pytest configuration and fixtures for testing.

This file provides reusable test fixtures for:
- Database setup/teardown
- FastAPI test client
- Users, jobs and applications in a known state
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event, update
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.security import Identity
from app.crud import application as crud_application
from app.crud import job as crud_job
from app.crud import user as crud_user
from main import app


# Use in-memory SQLite for testing (fast, isolated)
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@event.listens_for(engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # ON DELETE CASCADE is only honoured with foreign keys switched on
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def db_session():
    """
    Create a fresh database for each test.
    Tables are dropped after the test completes.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """
    FastAPI test client with overridden database dependency.

    Used without a context manager so the lifespan (which targets the real
    database) does not run.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    yield TestClient(app, raise_server_exceptions=False)

    app.dependency_overrides.clear()


def user_data(**overrides):
    data = {
        "name": "Asha Verma",
        "email": "asha@example.com",
        "phone": 9876543210,
        "address": "12 MG Road, Pune",
        "password": "secret123",
        "role": "Job Seeker",
        "firstNiche": "Software",
        "secondNiche": "Data",
        "thirdNiche": "Design",
    }
    data.update(overrides)
    return data


def job_data(posted_by, **overrides):
    data = {
        "title": "Backend Engineer",
        "jobType": "Full-time",
        "location": "Pune",
        "companyName": "Acme Corp",
        "responsibilities": "Build APIs",
        "qualifications": "3 years of Python",
        "salary": "12 LPA",
        "jobNiche": "Software",
        "postedBy": posted_by,
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_user(db_session):
    """Factory: make_user(email=..., role=...) inserts a user (Job Seeker by default)."""
    def _make_user(**overrides):
        return crud_user.create(db_session, user_data(**overrides))
    return _make_user


@pytest.fixture
def make_job(db_session):
    """Factory: make_job(employer_id, **fields) inserts a posting."""
    def _make_job(posted_by, **overrides):
        return crud_job.create(db_session, job_data(posted_by, **overrides))
    return _make_job


@pytest.fixture
def make_application(db_session):
    """Factory: make_application(job_seeker, job) snapshots the seeker onto a new application."""
    def _make_application(job_seeker, job, **overrides):
        data = {
            "jobSeekerUserId": job_seeker["id"],
            "jobSeekerName": job_seeker["name"],
            "jobSeekerEmail": job_seeker["email"],
            "jobSeekerPhone": job_seeker["phone"],
            "jobSeekerAddress": job_seeker["address"],
            "coverLetter": "I would love to join.",
            "employerUserId": job["postedBy"],
            "jobId": job["id"],
            "jobTitle": job["title"],
        }
        data.update(overrides)
        return crud_application.create(db_session, data)
    return _make_application


@pytest.fixture
def set_created_at(db_session):
    """Pin created_at so ordering and window tests do not depend on the clock."""
    def _set_created_at(table, row_id, when):
        db_session.execute(update(table).where(table.c.id == row_id).values(created_at=when))
        db_session.commit()
    return _set_created_at


@pytest.fixture
def job_seeker(make_user):
    return make_user()


@pytest.fixture
def employer(make_user):
    return make_user(name="Ravi Kumar", email="ravi@acme.example.com", role="Employer")


@pytest.fixture
def job(make_job, employer):
    return make_job(employer["id"])


@pytest.fixture
def identity_of():
    """Turn a user dict into the Identity the services expect."""
    def _identity_of(user):
        return Identity(user_id=user["id"], role=user["role"])
    return _identity_of


@pytest.fixture
def now():
    return datetime.now(timezone.utc)
