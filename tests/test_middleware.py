"""Tests for rate limiting and settings loading."""

from api.middleware.rate_limit import RateLimitMiddleware, WINDOW_SECONDS
from config.settings import Settings


def _limiter(per_minute=2):
    return RateLimitMiddleware(app=None, requests_per_minute=per_minute)


def test_limit_within_window():
    limiter = _limiter()
    assert limiter._consume("ip:1", 100.0) == 1
    assert limiter._consume("ip:1", 101.0) == 0
    assert limiter._consume("ip:1", 102.0) is None
    # Other clients have their own window
    assert limiter._consume("ip:2", 102.0) == 1


def test_window_slides():
    limiter = _limiter()
    limiter._consume("ip:1", 100.0)
    limiter._consume("ip:1", 130.0)
    assert limiter._consume("ip:1", 100.0 + WINDOW_SECONDS) == 0


def test_idle_clients_are_forgotten():
    limiter = _limiter()
    limiter._consume("ip:1", 100.0)
    limiter._consume("ip:2", 110.0)

    limiter._consume("ip:3", 100.0 + WINDOW_SECONDS + 5)
    assert set(limiter._hits) == {"ip:2", "ip:3"}

    limiter._consume("ip:3", 110.0 + WINDOW_SECONDS + 5)
    assert set(limiter._hits) == {"ip:3"}


def test_rate_limit_response(client, monkeypatch):
    from api.main import app

    limiter = app.middleware_stack
    while limiter is not None and not isinstance(limiter, RateLimitMiddleware):
        limiter = getattr(limiter, "app", None)
    assert limiter is not None
    monkeypatch.setattr(limiter, "requests_per_minute", 1)

    headers = {"X-Agent-Id": "agent-rl"}
    assert client.get("/api/properties", headers=headers).status_code == 200
    resp = client.get("/api/properties", headers=headers)
    assert resp.status_code == 429
    assert resp.headers["Retry-After"] == str(WINDOW_SECONDS)

    # Health checks are never limited
    assert client.get("/health", headers=headers).status_code == 200


def test_settings_read_upper_case_env(monkeypatch):
    monkeypatch.setenv("MICROSITE_DOMAIN", "https://homes.test")
    monkeypatch.setenv("LEAD_QUALIFIED_THRESHOLD", "80")
    settings = Settings()
    assert settings.microsite_domain == "https://homes.test"
    assert settings.lead_qualified_threshold == 80


def test_settings_fields_have_no_env_overrides():
    for name, field in Settings.model_fields.items():
        assert not field.json_schema_extra, name
