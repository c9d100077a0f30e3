import itertools
import os
import sys
import tempfile
from datetime import datetime
from types import SimpleNamespace
from typing import Optional

import pytest

# Ensure project root on sys.path
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# File-based SQLite so the app, the tests and worker threads share state.
# Must be set before app.core.config is imported.
_DB_DIR = tempfile.mkdtemp(prefix="dispatch-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'dispatch_test.db')}"
os.environ["ENABLE_OUTBOUND_LOGGING"] = "false"

from fastapi import Depends
from fastapi.testclient import TestClient

from main import app
from app.db.base_class import Base
from app.db import base as models_import  # noqa: F401 - ensure models are imported
from app.db.session import engine, SessionLocal
from app.db.models.user import User
from app.db.models.vendor import Vendor
from app.db.models.job import Job
from app.api.dependencies.database import get_db
from app.api.dependencies.auth import get_current_user
from app.api.dependencies.services import get_correlation_id, get_file_service
from app.services.file_services import FileService


class FakeMinio:
    """In-memory stand-in for the MinIO client used by FileService."""

    def __init__(self):
        self.objects = {}
        self.removed = []
        self.fail_puts = False

    def put_object(self, bucket_name, object_name, data, length, content_type=None):
        if self.fail_puts:
            raise ConnectionError("object storage unreachable")
        self.objects[object_name] = data.read(length)

    def remove_object(self, bucket_name, object_name):
        self.objects.pop(object_name, None)
        self.removed.append(object_name)


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(schema):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage():
    return FakeMinio()


@pytest.fixture
def client(schema, storage):
    def _override_get_db():
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    def _override_get_file_service(correlation_id: Optional[str] = Depends(get_correlation_id)):
        return FileService(correlation_id=correlation_id, client=storage)

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_file_service] = _override_get_file_service

    test_client = TestClient(app)
    try:
        yield test_client
    finally:
        test_client.close()
        app.dependency_overrides.clear()


@pytest.fixture
def act_as():
    """Make every following request run as ``user``."""
    def _act_as(user):
        app.dependency_overrides[get_current_user] = lambda: user
        return user
    return _act_as


@pytest.fixture
def make_vendor(db):
    counter = itertools.count(1)

    def _make_vendor(is_active: bool = True, name: Optional[str] = None) -> int:
        n = next(counter)
        vendor = Vendor(
            name=name or f"Vendor {n}",
            phone_number=f"555-010{n}",
            email=f"vendor{n}@example.com",
            is_active=is_active,
        )
        db.add(vendor)
        db.commit()
        return vendor.id

    return _make_vendor


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make_user(role: str = "registered_user", vendor_id: Optional[int] = None, permissions=None):
        n = next(counter)
        user = User(
            email=f"user{n}@example.com",
            name=f"User {n}",
            hashed_password="not-a-real-hash",
            role=role,
            vendor_id=vendor_id,
            permissions=list(permissions or []),
            is_active=True,
        )
        db.add(user)
        db.commit()
        return SimpleNamespace(
            id=user.id,
            email=user.email,
            name=user.name,
            role=role,
            vendor_id=vendor_id,
            permissions=list(permissions or []),
            is_active=True,
        )

    return _make_user


@pytest.fixture
def make_job(db):
    counter = itertools.count(1)

    def _make_job(
        scheduled_date: datetime = datetime(2026, 11, 2, 9, 0),
        priority: str = "medium",
        city: str = "Austin",
        appliance_type: str = "Refrigerator",
        status: str = "available",
        so_number: Optional[str] = None,
    ) -> int:
        n = next(counter)
        job = Job(
            so_number=so_number or f"SO-{n:05d}",
            customer_name="Dana",
            customer_last_name="Reyes",
            customer_address=f"{n} Main St",
            customer_city=city,
            customer_state="TX",
            customer_zip="78701",
            customer_phone="512-555-0100",
            appliance_type=appliance_type,
            service_description="Unit not cooling",
            scheduled_date=scheduled_date,
            scheduled_time_window="08:00-12:00",
            priority=priority,
            status=status,
        )
        db.add(job)
        db.commit()
        return job.id

    return _make_job


@pytest.fixture
def dispatcher(make_user):
    return make_user(role="dispatcher")


@pytest.fixture
def vendor_user(make_vendor, make_user):
    """A vendor-portal user linked to a fresh active vendor."""
    return make_user(vendor_id=make_vendor())


@pytest.fixture
def claimed(client, act_as, make_job, vendor_user):
    """A job claimed by ``vendor_user``; the client keeps acting as that user."""
    job_id = make_job()
    act_as(vendor_user)
    resp = client.post(f"/jobs/{job_id}/claims", json={"vendor_notes": "on my way"})
    assert resp.status_code == 201, resp.text
    return SimpleNamespace(job_id=job_id, assignment_id=resp.json()["assignment"]["id"], user=vendor_user)
