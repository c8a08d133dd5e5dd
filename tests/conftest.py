"""
Shared fixtures for the EWERS API tests.

Each test gets a fresh app lifespan, so the store, sessions and
WebSocket registry start empty. Sample data seeding and the AI key are
switched off so results do not depend on the environment.
"""

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

import ai_service
import storage
from main import app


INCIDENT = {
    "title": "Market clash",
    "description": "Traders and youths clashed near the central market",
    "location": "Jos",
    "coordinates": {"lat": 9.8965, "lng": 8.8583},
    "incidentType": "communal",
    "severity": "high",
}

ALERT = {
    "title": "Road blocked",
    "description": "Armed men reported on the Kaduna-Abuja road",
    "alertType": "security",
    "severity": "critical",
    "source": "field_report",
}


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(storage, "SEED_SAMPLE_DATA", False)
    monkeypatch.setattr(ai_service, "ANTHROPIC_API_KEY", None)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def store(client):
    return client.app.state.store


@pytest.fixture
def operator(store):
    return store.users.create({
        "username": "operator",
        "password": "s3cret",
        "full_name": "Duty Operator",
        "email": "operator@example.com",
        "role": "call_agent",
        "agency": "IPCR",
    })


@pytest.fixture
def auth_client(client, operator):
    """client carrying a live session cookie for `operator`"""
    resp = client.post("/api/auth/login", json={"username": "operator", "password": "s3cret"})
    assert resp.status_code == 200
    return client


# =============================================================================
# FAKE AI PROVIDER
# =============================================================================

class FakeMessages:
    def __init__(self, reply="", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=self.reply)])


class FakeAnthropic:
    """Stands in for anthropic.AsyncAnthropic - only messages.create is used"""

    def __init__(self, reply="", error=None):
        self.messages = FakeMessages(reply=reply, error=error)


@pytest.fixture
def lenient_client(monkeypatch):
    """Like `client`, but unhandled errors come back as responses instead of raising in the test"""
    monkeypatch.setattr(storage, "SEED_SAMPLE_DATA", False)
    monkeypatch.setattr(ai_service, "ANTHROPIC_API_KEY", None)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
