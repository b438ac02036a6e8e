import pytest
from fastapi.testclient import TestClient
import mongomock
from datetime import datetime, timezone

from nextplay.main import app
from nextplay import db as real_db
from nextplay import settings
from nextplay.auth import create_access_token, get_password_hash


@pytest.fixture(autouse=True)
def mock_db(monkeypatch):
    # replace the mongodb database with mongomock in-memory
    mock_client = mongomock.MongoClient()
    mock_db = mock_client["test_db"]

    monkeypatch.setattr(real_db, "_client", mock_client)
    monkeypatch.setattr(real_db, "_database", mock_db)
    # mail is only logged in tests
    monkeypatch.setattr(settings, "BREVO_API_KEY", "")

    yield mock_db


@pytest.fixture
def client():
    # no `with`: the lifespan (indexes, buckets) stays out of unit tests
    return TestClient(app)


def _make_user(mock_db, name, email, role="parent", password="secret123", verified=True):
    now = datetime.now(timezone.utc)
    doc = {
        "name": name,
        "email": email,
        "password": get_password_hash(password),
        "role": role,
        "children": [],
        "isEmailVerified": verified,
        "createdAt": now,
        "updatedAt": now,
    }
    doc["_id"] = mock_db.users.insert_one(doc).inserted_id
    return doc


@pytest.fixture
def make_user(mock_db):
    def _make(name, email, **kwargs):
        return _make_user(mock_db, name, email, **kwargs)
    return _make


def bearer(user):
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def parent(mock_db):
    user = _make_user(mock_db, "Pat Parent", "pat@example.com")
    return {"user": user, "headers": bearer(user)}


@pytest.fixture
def other_parent(mock_db):
    user = _make_user(mock_db, "Olive Other", "olive@example.com")
    return {"user": user, "headers": bearer(user)}


@pytest.fixture
def admin(mock_db):
    user = _make_user(mock_db, "Ada Admin", "ada@example.com", role="admin")
    return {"user": user, "headers": bearer(user)}


@pytest.fixture
def child(client, parent):
    res = client.post(
        "/api/children",
        headers=parent["headers"],
        json={"name": "Sam", "age": 11, "gender": "male", "sport": "soccer"},
    )
    assert res.status_code == 201
    return res.json()


@pytest.fixture
def injury(client, parent, child):
    res = client.post(
        "/api/injuries",
        headers=parent["headers"],
        json={
            "childId": child["_id"],
            "type": "Ankle Sprain",
            "description": "Rolled it at practice",
            "location": "left ankle",
            "severity": "mild",
        },
    )
    assert res.status_code == 201
    return res.json()
