"""Tests for 70-day social campaign planning and routes."""

import asyncio
import json
from datetime import datetime, timedelta

import httpx
import pytest

from campaigns import n8n_client
from campaigns.n8n_client import CampaignTriggerError, N8NClient
from campaigns.social_campaign import (
    CONTENT_ARCHETYPES,
    PLATFORMS,
    TOTAL_POSTS,
    WEEKLY_THEMES,
    build_campaign_payload,
    campaign_analytics,
    posts_from_callback,
    recent_posts,
)


def _generated_post(day, number, platform="instagram", archetype="feature_spotlight", **extra):
    return {
        "platform": platform,
        "content": f"Day {day} post {number}: " + "Sunlit living room. " * 10,
        "hashtags": ["#newlisting"],
        "archetype": archetype,
        "week_theme": "The Grand Unveiling",
        "day_number": day,
        "post_number_of_day": number,
        "scheduled_for": f"2026-03-{day:02d}T{8 + number:02d}:00:00Z",
        "call_to_action": "Book a tour",
        **extra,
    }


# ── Plan ──────────────────────────────────────────────

def test_plan_constants():
    assert TOTAL_POSTS == 210
    assert len(WEEKLY_THEMES) == 10
    assert len(CONTENT_ARCHETYPES) == 10
    assert len(PLATFORMS) == 7


def test_payload_uses_brand_defaults():
    payload = build_campaign_payload(
        {"id": "prop-1", "address": "42 Maple", "price": 500000},
        "agent-1",
        None,
        {"auto_publish": True},
        callback_url="http://app.test/api/property/social-campaign/callback",
    )

    assert payload["property_id"] == "prop-1"
    assert payload["property_data"]["address"] == "42 Maple"
    assert payload["brand_context"]["company_name"] == "Nester"
    assert payload["brand_context"]["avoid_phrases"] == ["cheap", "deal"]
    assert payload["campaign_structure"]["total_posts"] == 210
    assert payload["scheduling_algorithm"]["exclusion_windows_hours"] == {
        "archetype": 24, "room_feature": 48, "style": 72,
    }
    assert payload["campaign_settings"]["auto_publish"] is True
    assert payload["campaign_settings"]["timezone"] == "America/New_York"
    json.dumps(payload)


def test_posts_from_callback_status_and_timestamps():
    rows = posts_from_callback(
        "prop-1", "agent-1", "job-9",
        [_generated_post(1, 1, auto_publish=True), _generated_post(1, 2)],
    )
    assert [r["status"] for r in rows] == ["scheduled", "draft"]
    assert rows[0]["scheduled_for"] == datetime(2026, 3, 1, 9, 0)
    assert rows[0]["ai_generation_metadata"]["job_id"] == "job-9"


def test_campaign_analytics():
    posts = [
        {"platform": "instagram", "status": "published", "archetype": "local_gem",
         "impressions": 100, "engagements": 5, "clicks": 2, "shares": 1},
        {"platform": "instagram", "status": "scheduled", "archetype": "poll_question",
         "impressions": 50, "engagements": 1},
        {"platform": "linkedin", "status": "draft", "archetype": None},
    ]
    started = datetime(2026, 3, 1, 12, 0)
    analytics = campaign_analytics(posts, started, now=started + timedelta(days=3, hours=5))

    assert analytics["posts_by_platform"] == {"instagram": 2, "linkedin": 1}
    assert analytics["posts_by_archetype"] == {"local_gem": 1, "poll_question": 1}
    assert analytics["total_engagement"] == 9
    assert analytics["total_reach"] == 150
    assert analytics["campaign_progress"] == {
        "days_elapsed": 3,
        "posts_published": 1,
        "posts_scheduled": 1,
        "completion_percentage": 1,
    }


def test_recent_posts_preview():
    posts = [{"id": str(i), "content": "x" * 300} for i in range(12)]
    recent = recent_posts(posts)
    assert len(recent) == 10
    assert recent[0]["content"] == "x" * 100 + "..."


# ── N8N client ────────────────────────────────────────

@pytest.fixture
def mock_n8n(monkeypatch):
    captured = {"requests": [], "status": 200}
    real_client = httpx.AsyncClient

    def handler(request):
        captured["requests"].append(request)
        return httpx.Response(captured["status"], json={"execution_id": "exec-1"})

    def factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(n8n_client.httpx, "AsyncClient", factory)
    return captured


def test_n8n_trigger_sends_bearer(mock_n8n):
    client = N8NClient(webhook_url="http://n8n.test/webhook/", api_key="n8n-key")
    result = asyncio.run(client.trigger_social_campaign({"property_id": "prop-1"}))

    assert result == {"execution_id": "exec-1"}
    request = mock_n8n["requests"][0]
    assert str(request.url) == "http://n8n.test/webhook/social-campaign-generator"
    assert request.headers["Authorization"] == "Bearer n8n-key"


def test_n8n_non_2xx_raises(mock_n8n):
    mock_n8n["status"] = 502
    client = N8NClient(webhook_url="http://n8n.test/webhook")
    with pytest.raises(CampaignTriggerError):
        asyncio.run(client.trigger_social_campaign({}))


def test_n8n_unconfigured_raises():
    with pytest.raises(CampaignTriggerError):
        asyncio.run(N8NClient().trigger_social_campaign({}))


# ── Routes ────────────────────────────────────────────

@pytest.fixture
def triggered(services, monkeypatch):
    payloads = []

    async def trigger(payload):
        payloads.append(payload)
        return {"execution_id": "exec-1"}

    monkeypatch.setattr(services.n8n, "trigger_social_campaign", trigger)
    return payloads


@pytest.fixture
def completions(services, monkeypatch):
    calls = []

    async def record(**kwargs):
        calls.append(kwargs)
        return True

    monkeypatch.setattr(services.notifier, "notify_campaign_complete", record)
    return calls


def _callback(client, property_id, posts, agent_id="agent-1", **extra):
    return client.post("/api/property/social-campaign/callback", json={
        "property_id": property_id,
        "agent_id": agent_id,
        "status": "completed",
        "job_id": "exec-1",
        "generated_posts": posts,
        **extra,
    })


def test_start_campaign(client, agent_headers, property_id, triggered):
    resp = client.post(
        "/api/property/social-campaign",
        json={"property_id": property_id, "campaign_settings": {"timezone": "Europe/London"}},
        headers=agent_headers,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["job_id"] == "exec-1"
    assert data["status"] == "generating"
    assert data["campaign_details"]["total_posts"] == 210
    assert datetime.fromisoformat(data["estimated_completion"]) > datetime.utcnow()

    assert triggered[0]["campaign_settings"]["timezone"] == "Europe/London"
    assert triggered[0]["callback_url"].endswith("/api/property/social-campaign/callback")

    status = client.get(
        f"/api/property/social-campaign?property_id={property_id}", headers=agent_headers
    ).json()
    assert status["status"] == "generating_social_campaign"
    assert status["campaign_analytics"]["total_posts"] == 0


def test_start_campaign_other_agents_property(client, property_id, triggered):
    resp = client.post(
        "/api/property/social-campaign",
        json={"property_id": property_id},
        headers={"X-Agent-Id": "agent-2"},
    )
    assert resp.status_code == 404
    assert triggered == []


def test_start_campaign_n8n_failure(client, agent_headers, property_id, services, monkeypatch):
    async def fail(payload):
        raise CampaignTriggerError("N8N returned 500")

    monkeypatch.setattr(services.n8n, "trigger_social_campaign", fail)
    resp = client.post(
        "/api/property/social-campaign", json={"property_id": property_id}, headers=agent_headers
    )
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Failed to initiate social media campaign generation"}


def test_callback_stores_posts(client, agent_headers, property_id, completions):
    posts = [_generated_post(1, n, platform=p) for n, p in ((1, "instagram"), (2, "linkedin"))]
    resp = _callback(client, property_id, posts, generation_stats={"platforms_count": 2})
    assert resp.status_code == 200
    assert resp.json()["stats"]["total_posts"] == 2

    assert completions == [{
        "agent_id": "agent-1",
        "property_id": property_id,
        "total_posts": 2,
        "campaign_duration": 70,
        "platforms": 2,
    }]

    status = client.get(
        f"/api/property/social-campaign?property_id={property_id}", headers=agent_headers
    ).json()
    assert status["status"] == "social_campaign_completed"
    assert status["campaign_analytics"]["posts_by_platform"] == {"instagram": 1, "linkedin": 1}
    assert status["campaign_analytics"]["posts_by_status"] == {"draft": 2}
    assert status["recent_posts"][0]["platform"] == "instagram"
    assert status["recent_posts"][0]["content"].endswith("...")

    prop = client.get(f"/api/properties/{property_id}", headers=agent_headers).json()
    assert prop["social_campaign_stats"]["total_posts_generated"] == 2


def test_existing_campaign_needs_regenerate(client, agent_headers, property_id, triggered, completions):
    _callback(client, property_id, [_generated_post(1, 1)])

    body = {"property_id": property_id}
    resp = client.post("/api/property/social-campaign", json=body, headers=agent_headers)
    assert resp.status_code == 400

    body["campaign_settings"] = {"regenerate": True}
    resp = client.post("/api/property/social-campaign", json=body, headers=agent_headers)
    assert resp.status_code == 200


def test_callback_error_status(client, agent_headers, property_id):
    resp = client.post("/api/property/social-campaign/callback", json={
        "property_id": property_id,
        "agent_id": "agent-1",
        "status": "error",
        "error_message": "Image generation quota exceeded",
    })
    assert resp.json() == {"success": False, "error": "Image generation quota exceeded"}

    prop = client.get(f"/api/properties/{property_id}", headers=agent_headers).json()
    assert prop["content_generation_status"] == "error"
    assert prop["content_generation_error"] == "Image generation quota exceeded"


def test_callback_requires_ids(client):
    resp = client.post("/api/property/social-campaign/callback", json={"status": "completed"})
    assert resp.status_code == 400
    assert resp.json() == {"detail": "Property ID and Agent ID are required"}


def test_callback_unknown_status(client, property_id):
    resp = client.post("/api/property/social-campaign/callback", json={
        "property_id": property_id, "agent_id": "agent-1", "status": "processing",
    })
    assert resp.json() == {"success": False, "error": "Unknown generation status"}
