"""Shared fixtures for Nester property chat tests."""

import os
import pytest
from fastapi.testclient import TestClient

# Ensure we use test/mock settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LLM_PROVIDER"] = "openai"
os.environ["OPENAI_API_KEY"] = "test-key"
os.environ["RATE_LIMIT_PER_MINUTE"] = "100000"
os.environ["N8N_WEBHOOK_URL"] = "http://n8n.test/webhook"
os.environ.pop("APP_URL", None)
os.environ.pop("NESTER_API_KEY", None)

AGENT_ID = "agent-1"
AGENT_HEADERS = {"X-Agent-Id": AGENT_ID}


class StubLLM:
    """Records prompts and returns a canned reply (or raises)."""

    def __init__(self, reply: str = "It's a lovely home. Would you like to know more?"):
        self.reply = reply
        self.fail = False
        self.calls = []

    async def agenerate(self, prompt, system=None):
        self.calls.append({"prompt": prompt, "system": system})
        if self.fail:
            raise RuntimeError("LLM unavailable")
        return self.reply


@pytest.fixture
def client():
    """FastAPI test client with a fresh in-memory database."""
    from api.main import app
    with TestClient(app) as c:
        yield c


@pytest.fixture
def services(client):
    from api.services import get_services
    return get_services()


@pytest.fixture
def llm(services, monkeypatch):
    stub = StubLLM()
    monkeypatch.setattr(services.orchestrator, "llm", stub)
    return stub


@pytest.fixture
def sent_leads(services, monkeypatch):
    """Qualified leads passed to the notifier."""
    sent = []

    async def record(lead):
        sent.append(lead)
        return True

    monkeypatch.setattr(services.notifier, "notify_qualified_lead", record)
    return sent


@pytest.fixture
def agent_headers():
    return dict(AGENT_HEADERS)


@pytest.fixture
def sample_property():
    return {
        "address": "42 Maple Street, Springfield",
        "price": 500000,
        "bedrooms": 4,
        "bathrooms": 2.5,
        "square_feet": 2400,
        "property_type": "single_family",
        "description": "Renovated family home close to parks.",
        "features": ["Open kitchen", "Two-car garage"],
        "neighborhood_info": "Quiet street near Lincoln Elementary",
        "year_built": 1998,
    }


@pytest.fixture
def property_id(client, agent_headers, sample_property):
    resp = client.post("/api/properties", json=sample_property, headers=agent_headers)
    assert resp.status_code == 201
    return resp.json()["id"]
