"""
Shared fixtures: an in-memory MongoDB (mongomock) wired into the connection
singleton for every test.
"""

import mongomock
import pytest
from fastapi.testclient import TestClient

from admissions.core.config import get_settings
from admissions.db import mongodb
from admissions.services.mongo_service import AdminService
from tests.factories import make_student, make_college, make_profile


@pytest.fixture(autouse=True)
def mongo(tmp_path, monkeypatch):
    """Fresh mongomock database with the production indexes."""
    monkeypatch.setattr(get_settings(), "upload_dir", str(tmp_path / "uploads"))
    mongodb.set_mongo_client(mongomock.MongoClient())
    mongodb.init_mongo_indexes()
    yield mongodb.get_mongo_db()
    mongodb.set_mongo_client(None)


@pytest.fixture
def client():
    from admissions.main import app
    return TestClient(app)


@pytest.fixture
def student_id():
    return make_student()


@pytest.fixture
def college_id():
    return make_college()


@pytest.fixture
def profile_id(college_id):
    return make_profile(
        college_id,
        name="NIT Example",
        courses=[{"name": "B.Tech", "sub_courses": [{"name": "CSE", "fee": "1.5L", "eligibility": ["JEE"]}]}]
    )


@pytest.fixture
def admin_id():
    return AdminService().register(name="Root", email="admin@example.com", password_hash="x")
