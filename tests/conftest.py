"""
Pytest configuration and fixtures

Nothing here talks to Supabase: services get an in-memory FakeSupabase and the
auth service is wired to FakeAuth with a recording sleep.
"""

import pytest
from fastapi.testclient import TestClient

from app.dependencies import get_db
from main import app
from services.auth_service import AuthService
from tests.fakes import FakeAuth, FakeSupabase


class RecordingSleep:
    """Replaces asyncio.sleep; remembers the requested delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def auth(db):
    return FakeAuth(db)


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def auth_service(auth, db, sleep, clock):
    return AuthService(lambda: auth.client, lambda: db, sleep=sleep, clock=clock)


@pytest.fixture
def client(db, auth_service):
    """TestClient with the database and auth provider replaced by fakes"""
    previous = app.state.auth_service
    app.state.auth_service = auth_service
    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    app.state.auth_service = previous


@pytest.fixture
def athlete(auth):
    return {"email": "athlete@box.test", "password": "secret123", "id": auth.add_user("athlete@box.test")}


@pytest.fixture
def master(auth):
    return {
        "email": "coach@box.test",
        "password": "secret123",
        "id": auth.add_user("coach@box.test", role="master", full_name="Head Coach"),
    }


def login(client, user):
    response = client.post(
        "/api/auth/login", json={"email": user["email"], "password": user["password"]}
    )
    assert response.status_code == 200, response.text
    return response.json()


@pytest.fixture
def athlete_client(client, athlete):
    login(client, athlete)
    return client


@pytest.fixture
def master_client(client, master):
    login(client, master)
    return client
