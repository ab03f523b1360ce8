"""
Centralized Test Configuration.
"""
import uuid
from datetime import datetime, timezone

import pytest
from httpx import AsyncClient, ASGITransport
from mongomock_motor import AsyncMongoMockClient

import database
from core.limiter import limiter
from core.security import create_access_token
from main import app


def auth_headers(email: str) -> dict:
    token = create_access_token({"sub": email, "email": email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(autouse=True)
def mongo(monkeypatch):
    """Base MongoDB en mémoire, neuve pour chaque test."""
    test_db = AsyncMongoMockClient()["parcelDB_test"]
    monkeypatch.setattr(database, "_db_instance", test_db)
    limiter.reset()
    return test_db


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def create_user(mongo):
    async def _create(email: str, role: str = "user") -> dict:
        doc = {
            "id":         f"usr_{uuid.uuid4().hex[:12]}",
            "email":      email,
            "role":       role,
            "created_at": datetime.now(timezone.utc),
        }
        await mongo.users.insert_one(doc)
        return {k: v for k, v in doc.items() if k != "_id"}
    return _create


@pytest.fixture
async def admin_headers(create_user):
    await create_user("admin@x.com", "admin")
    return auth_headers("admin@x.com")


@pytest.fixture
async def rider_headers(create_user):
    await create_user("rider@x.com", "rider")
    return auth_headers("rider@x.com")


@pytest.fixture
async def user_headers(create_user):
    await create_user("user@x.com", "user")
    return auth_headers("user@x.com")


@pytest.fixture
def create_parcel(client, user_headers):
    async def _create(**fields) -> dict:
        body = {"title": "Books", "type": "document", "cost": 150, **fields}
        resp = await client.post("/parcels", json=body, headers=user_headers)
        assert resp.status_code == 200, resp.text
        return resp.json()["parcel"]
    return _create


@pytest.fixture
def create_rider(mongo):
    async def _create(email: str = "rider@x.com", status: str = "active", district: str = "Dhaka") -> dict:
        doc = {
            "id":          f"rdr_{uuid.uuid4().hex[:12]}",
            "name":        "Rahim",
            "email":       email,
            "district":    district,
            "status":      status,
            "work_status": "idle",
            "created_at":  datetime.now(timezone.utc),
        }
        await mongo.riders.insert_one(doc)
        return {k: v for k, v in doc.items() if k != "_id"}
    return _create
