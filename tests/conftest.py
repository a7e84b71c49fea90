"""
Shared fixtures: a throw-away SQLite database, an HTTP client over the
ASGI app, and helpers to sign users up.
"""
import os
import tempfile

_db_dir = tempfile.mkdtemp(prefix="travel-planner-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["UNSPLASH_ACCESS_KEY"] = ""
os.environ["LLM_PROVIDER"] = "ionet"
os.environ["IONET_API_KEY"] = ""

import pytest
from httpx import ASGITransport, AsyncClient

from travel_planner.infrastructure.database import AsyncSessionLocal, create_all, drop_all
from travel_planner.main import app


@pytest.fixture
async def database():
    """Fresh schema for every test that touches the database."""
    await drop_all()
    await create_all()
    yield


@pytest.fixture
async def db(database):
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
async def client(database):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


async def signup(client: AsyncClient, email: str, name: str = None, password: str = "correct-horse") -> dict:
    """Create an account; returns the session JSON plus ready-made auth headers."""
    response = await client.post(
        "/api/auth/signup",
        json={"email": email, "password": password, "display_name": name},
    )
    assert response.status_code == 201, response.text
    data = response.json()
    data["headers"] = {"Authorization": f"Bearer {data['access_token']}"}
    return data


@pytest.fixture
async def alice(client):
    return await signup(client, "alice@example.com", "Alice")


@pytest.fixture
async def bob(client):
    return await signup(client, "bob@example.com", "Bob")


@pytest.fixture
async def carol(client):
    return await signup(client, "carol@example.com", "Carol")


async def create_trip(client: AsyncClient, user: dict, **fields) -> dict:
    payload = {
        "title": "Rome Trip",
        "destination": "Rome",
        "start_date": "2025-06-01",
        "end_date": "2025-06-03",
    }
    payload.update(fields)
    response = await client.post("/api/trips", json=payload, headers=user["headers"])
    assert response.status_code == 201, response.text
    return response.json()


async def make_friends(client: AsyncClient, sender: dict, receiver: dict) -> dict:
    response = await client.post(
        "/api/friends/requests",
        json={"email": receiver["user"]["email"]},
        headers=sender["headers"],
    )
    assert response.status_code == 201, response.text
    friendship_id = response.json()["id"]
    response = await client.post(
        f"/api/friends/requests/{friendship_id}/accept", headers=receiver["headers"]
    )
    assert response.status_code == 200, response.text
    return response.json()


async def share_trip(client: AsyncClient, owner: dict, guest: dict, trip_id: str, accept: bool = True) -> dict:
    response = await client.post(
        f"/api/trips/{trip_id}/collaborators",
        json={"user_id": guest["user"]["id"]},
        headers=owner["headers"],
    )
    assert response.status_code == 201, response.text
    collaborator = response.json()
    if accept:
        response = await client.post(
            f"/api/collaborators/{collaborator['id']}/accept", headers=guest["headers"]
        )
        assert response.status_code == 200, response.text
        collaborator = response.json()
    return collaborator
