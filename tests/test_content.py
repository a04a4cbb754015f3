"""Tests for brochure, microsite and AI image generation."""

import json
from datetime import datetime

import pytest

from campaigns.content_workflows import (
    build_brochure_payload,
    build_image_payload,
    build_microsite_payload,
    image_status,
    microsite_engagement,
    microsite_slug,
)
from campaigns.n8n_client import CampaignTriggerError

LISTING = {
    "id": "3f2a9c1e-aaaa-bbbb-cccc-000000000001",
    "address": "42 Maple Street, Springfield",
    "price": 480000,
    "square_feet": 2400,
    "bedrooms": 4,
    "bathrooms": 2.5,
    "property_type": "single_family",
    "description": "Renovated family home close to parks.",
    "features": ["Open kitchen", "Two-car garage"],
    "image_urls": ["https://cdn.test/front.jpg", "https://cdn.test/kitchen.jpg"],
}


# ── Payloads ──────────────────────────────────────────

def test_microsite_slug():
    slug = microsite_slug("42 Maple Street, Springfield!", "3f2a9c1e-aaaa")
    assert slug == "42-maple-street-springfield-3f2a9c1e"


def test_brochure_payload_defaults():
    payload = build_brochure_payload(
        LISTING, "agent-1", None, {"generate_flipbook": False},
        callback_url="http://app.test/api/property/brochure/callback",
    )

    spec = payload["brochure_specifications"]
    assert spec["template_style"] == "modern_luxury"
    assert spec["page_count"] == "auto"
    assert spec["include_sections"][0] == "cover_page"
    assert spec["include_qr_code"] is True
    assert payload["output_formats"]["interactive_flipbook"] is False
    assert payload["property_data"]["price_per_sqft"] == 200.0
    assert payload["property_data"]["images"][0] == {
        "url": "https://cdn.test/front.jpg", "is_primary": True,
    }
    assert payload["brand_context"]["company_name"] == "Nester"
    assert payload["brand_context"]["white_label_enabled"] is False
    json.dumps(payload)


def test_microsite_payload_uses_brand():
    brand = {
        "agent_name": "Dana Reyes",
        "company_name": "Harbor Homes",
        "agent_email": "dana@harbor.example",
        "brand_tier": "enterprise",
    }
    payload = build_microsite_payload(
        LISTING, "agent-1", brand, {"enable_mortgage_calculator": False},
        slug="42-maple", microsite_url="https://homes.test/42-maple",
        callback_url="http://app.test/api/property/microsite/callback",
    )

    config = payload["microsite_configuration"]
    assert config["enable_chat_widget"] is True
    assert config["enable_mortgage_calculator"] is False
    assert config["seo_optimization"]["meta_title"] == "42 Maple Street, Springfield - Harbor Homes"
    assert "Springfield" in config["seo_optimization"]["keywords"]
    assert config["lead_capture"]["lead_notification_email"] == "dana@harbor.example"
    assert payload["brand_configuration"]["agent_name"] == "Dana Reyes"
    assert payload["brand_configuration"]["hide_nester_branding"] is True


def test_image_payload_covers_every_style():
    payload = build_image_payload(LISTING, "agent-1", None, False, "http://app.test/cb")
    assert payload["styles"] == ["contemporary", "bohemian", "traditional", "scandinavian"]
    assert payload["aspect_ratios"] == ["1:1", "9:16", "16:9"]
    assert len(payload["images"]) == 2


def test_image_status_completion():
    info = {
        "id": "prop-1",
        "image_urls": LISTING["image_urls"],
        "generated_images": [
            {"url": "a", "style": "bohemian"},
            {"url": "b", "style": "bohemian"},
            {"url": "c", "style": "scandinavian"},
            {"url": "d", "style": "contemporary"},
        ],
    }
    status = image_status(info)
    assert status["images_by_style"] == {
        "contemporary": 1, "bohemian": 2, "traditional": 0, "scandinavian": 1,
    }
    assert status["generated_images"] == 4
    assert status["completion_percentage"] == 50


def test_microsite_engagement():
    sessions = [
        {"lead_qualification_score": 80, "total_messages": 6},
        {"lead_qualification_score": 20, "total_messages": 1},
    ]
    assert microsite_engagement(sessions) == {
        "chat_sessions": 2,
        "qualified_leads": 1,
        "total_messages": 7,
        "average_lead_score": 50.0,
    }


# ── Routes ────────────────────────────────────────────

@pytest.fixture
def workflows(services, monkeypatch):
    """Workflow triggers sent to N8N, as (workflow, payload) pairs."""
    calls = []

    async def trigger(workflow, payload):
        calls.append((workflow, payload))
        return {"execution_id": f"exec-{len(calls)}"}

    monkeypatch.setattr(services.n8n, "trigger", trigger)
    return calls


@pytest.fixture
def content_notices(services, monkeypatch):
    sent = []

    def recorder(kind):
        async def record(agent_id, property_id, details):
            sent.append((kind, agent_id, property_id, details))
            return True
        return record

    monkeypatch.setattr(services.notifier, "notify_brochure_complete", recorder("brochure"))
    monkeypatch.setattr(services.notifier, "notify_microsite_complete", recorder("microsite"))
    return sent


def _property(client, agent_headers, sample_property, **extra):
    resp = client.post("/api/properties", json={**sample_property, **extra}, headers=agent_headers)
    return resp.json()["id"]


def _stats(client, agent_headers):
    return client.get("/api/dashboard/stats", headers=agent_headers).json()


def test_start_brochure(client, agent_headers, property_id, workflows):
    resp = client.post(
        "/api/property/brochure",
        json={"property_id": property_id, "brochure_settings": {"template_style": "family_friendly"}},
        headers=agent_headers,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["job_id"] == "exec-1"
    assert data["status"] == "generating"
    assert data["brochure_details"]["template_style"] == "family_friendly"
    assert datetime.fromisoformat(data["estimated_completion"]) > datetime.utcnow()

    workflow, payload = workflows[0]
    assert workflow == "brochure-generator"
    assert payload["callback_url"].endswith("/api/property/brochure/callback")

    status = client.get(f"/api/property/brochure?property_id={property_id}", headers=agent_headers)
    assert status.json()["status"] == "generating_brochure"


def test_brochure_callback_completes(client, agent_headers, property_id, content_notices):
    resp = client.post("/api/property/brochure/callback", json={
        "property_id": property_id,
        "agent_id": "agent-1",
        "status": "completed",
        "job_id": "exec-1",
        "brochure_files": {
            "pdf_high_quality": "https://cdn.test/brochure.pdf",
            "interactive_flipbook": "https://cdn.test/flipbook",
        },
        "generation_metadata": {"page_count": 6, "template_style": "modern_luxury"},
    })
    assert resp.status_code == 200
    assert resp.json()["files"]["pdf_high_quality"] == "https://cdn.test/brochure.pdf"

    status = client.get(
        f"/api/property/brochure?property_id={property_id}", headers=agent_headers
    ).json()
    assert status["status"] == "brochure_completed"
    assert status["downloads"]["interactive_flipbook"] == "https://cdn.test/flipbook"
    assert status["generation_details"]["page_count"] == 6

    assert content_notices == [(
        "brochure", "agent-1", property_id,
        {
            "brochure_url": "https://cdn.test/brochure.pdf",
            "flipbook_url": "https://cdn.test/flipbook",
            "page_count": 6,
            "template_style": "modern_luxury",
        },
    )]
    assert _stats(client, agent_headers)["brochures_created"] == 1


def test_start_microsite(client, agent_headers, property_id, workflows, services, monkeypatch):
    monkeypatch.setattr(services.settings, "microsite_domain", "https://homes.test/")
    resp = client.post(
        "/api/property/microsite", json={"property_id": property_id}, headers=agent_headers
    )
    assert resp.status_code == 200
    data = resp.json()
    slug = f"42-maple-street-springfield-{property_id[:8]}"
    assert data["microsite_slug"] == slug
    assert data["microsite_url"] == f"https://homes.test/{slug}"
    assert data["microsite_details"]["sections_count"] == 9
    assert workflows[0][0] == "microsite-generator"

    # A planned microsite is not regenerated unless asked
    again = client.post(
        "/api/property/microsite", json={"property_id": property_id}, headers=agent_headers
    ).json()
    assert again["status"] == "existing"
    assert len(workflows) == 1

    client.post(
        "/api/property/microsite",
        json={"property_id": property_id, "microsite_settings": {"regenerate": True}},
        headers=agent_headers,
    )
    assert len(workflows) == 2


def test_microsite_callback_counts_as_live(
    client, agent_headers, property_id, content_notices, llm
):
    assert _stats(client, agent_headers)["microsites_live"] == 0
    client.post("/api/chat", json={"message": "Hello", "property_id": property_id})

    resp = client.post("/api/property/microsite/callback", json={
        "property_id": property_id,
        "agent_id": "agent-1",
        "status": "completed",
        "job_id": "exec-1",
        "microsite_data": {
            "template_style": "modern_luxury",
            "sections_generated": ["hero_gallery", "contact_form"],
            "features": {"chat_widget": True, "virtual_tour": False},
        },
        "deployment_info": {
            "live_url": "https://homes.test/42-maple",
            "slug": "42-maple",
            "performance_score": 97,
        },
    })
    assert resp.status_code == 200
    assert resp.json()["generation_stats"]["features_enabled"] == 1

    assert _stats(client, agent_headers)["microsites_live"] == 1

    status = client.get(
        f"/api/property/microsite?property_id={property_id}", headers=agent_headers
    ).json()
    assert status["status"] == "microsite_completed"
    assert status["microsite_url"] == "https://homes.test/42-maple"
    assert status["analytics"]["total_visits"] == 0
    assert status["engagement"]["chat_sessions"] == 1
    assert len(status["recent_visitors"]) == 1

    kind, _, _, details = content_notices[0]
    assert kind == "microsite"
    assert details["microsite_url"] == "https://homes.test/42-maple"
    assert details["performance_score"] == 97


def test_image_generation_needs_photos(client, agent_headers, property_id, workflows):
    resp = client.post(
        "/api/property/generate-images", json={"property_id": property_id}, headers=agent_headers
    )
    assert resp.status_code == 400
    assert resp.json() == {"detail": "No images found for this property"}
    assert workflows == []


def test_image_generation_round_trip(client, agent_headers, sample_property, workflows):
    prop_id = _property(
        client, agent_headers, sample_property, image_urls=["https://cdn.test/front.jpg"]
    )
    resp = client.post(
        "/api/property/generate-images", json={"property_id": prop_id}, headers=agent_headers
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "processing"
    assert workflows[0][0] == "ai-image-generator"
    assert workflows[0][1]["callback_url"].endswith("/api/property/images/callback")

    status = client.get(f"/api/property/generate-images?property_id={prop_id}", headers=agent_headers)
    assert status.json()["status"] == "processing_images"

    client.post("/api/property/images/callback", json={
        "property_id": prop_id,
        "agent_id": "agent-1",
        "status": "completed",
        "generated_images": [
            {"url": f"https://cdn.test/{style}.jpg", "style": style}
            for style in ("contemporary", "bohemian", "traditional", "scandinavian")
        ],
    })

    status = client.get(
        f"/api/property/generate-images?property_id={prop_id}", headers=agent_headers
    ).json()
    assert status["status"] == "images_completed"
    assert status["completion_percentage"] == 100
    assert _stats(client, agent_headers)["images_generated"] == 1


@pytest.mark.parametrize("path,detail", [
    ("/api/property/brochure", "Failed to initiate brochure generation"),
    ("/api/property/microsite", "Failed to initiate microsite generation"),
])
def test_trigger_failure(client, agent_headers, property_id, services, monkeypatch, path, detail):
    async def fail(workflow, payload):
        raise CampaignTriggerError("N8N returned 502")

    monkeypatch.setattr(services.n8n, "trigger", fail)
    resp = client.post(path, json={"property_id": property_id}, headers=agent_headers)
    assert resp.status_code == 500
    assert resp.json() == {"detail": detail}

    prop = client.get(f"/api/properties/{property_id}", headers=agent_headers).json()
    assert prop["content_generation_status"] is None


def test_trigger_requires_owned_property(client, property_id, workflows):
    other_agent = {"X-Agent-Id": "agent-2"}
    resp = client.post("/api/property/brochure", json={"property_id": property_id}, headers=other_agent)
    assert resp.status_code == 404

    resp = client.post("/api/property/microsite", json={}, headers=other_agent)
    assert resp.status_code == 400
    assert workflows == []


@pytest.mark.parametrize("path", [
    "/api/property/brochure/callback",
    "/api/property/microsite/callback",
    "/api/property/images/callback",
])
def test_callback_error_and_progress(client, agent_headers, property_id, path):
    base = {"property_id": property_id, "agent_id": "agent-1"}

    resp = client.post(path, json={**base, "status": "processing"})
    assert resp.json()["success"] is True
    assert resp.json()["status"] == "processing"

    resp = client.post(path, json={**base, "status": "error", "error_message": "Render farm down"})
    assert resp.json() == {"success": False, "error": "Render farm down"}
    prop = client.get(f"/api/properties/{property_id}", headers=agent_headers).json()
    assert prop["content_generation_status"] == "error"
    assert prop["content_generation_error"] == "Render farm down"

    resp = client.post(path, json={**base, "status": "completed"})
    assert resp.json() == {"success": False, "error": "Unknown generation status"}

    resp = client.post(path, json={"status": "completed"})
    assert resp.status_code == 400

    resp = client.post(path, json={**base, "agent_id": "agent-2", "status": "error"})
    assert resp.status_code == 404
