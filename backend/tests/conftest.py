import uuid
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from config.database import get_async_supabase_client
from main import app
from models.schemas import User
from fake_supabase import FakeAsyncClient

# Monday
MONDAY_MORNING = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)

@pytest.fixture
def fake_db():
    return FakeAsyncClient()

@pytest.fixture
def client(fake_db):
    app.dependency_overrides[get_async_supabase_client] = lambda: fake_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()

def make_user(fake_db: FakeAsyncClient, name: str = "Alice", tz: str = "UTC") -> User:
    row = {
        "id": str(uuid.uuid4()),
        "name": name,
        "email": f"{name.lower()}-{uuid.uuid4().hex[:6]}@example.com",
        "password_hash": "not-used",
        "timezone": tz,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    fake_db.rows("users").append(row)
    return User(**row)

@pytest.fixture
def alice(fake_db):
    return make_user(fake_db, "Alice")

@pytest.fixture
def bob(fake_db):
    return make_user(fake_db, "Bob")

def register(client: TestClient, name: str = "Alice", email: str = None, password: str = "secret123", tz: str = "UTC") -> dict:
    response = client.post("/api/v1/auth/register", json={
        "name": name,
        "email": email or f"{name.lower()}@example.com",
        "password": password,
        "timezone": tz,
    })
    assert response.status_code == 201, response.text
    return response.json()

def auth_headers(tokens: dict) -> dict:
    return {"Authorization": f"Bearer {tokens['access_token']}"}
