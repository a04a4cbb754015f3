"""
Prometheus metrics middleware for the Nester property chat API.

Exposes /metrics endpoint with request counters, latency histograms,
and lead qualification business metrics.
"""

import logging
import time
from typing import Iterable

from fastapi import Request, Response
from prometheus_client import (
    Counter, Histogram, Gauge,
    generate_latest, CONTENT_TYPE_LATEST,
)
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

# Request metrics
REQUEST_COUNT = Counter(
    "nester_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "nester_http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)
ACTIVE_REQUESTS = Gauge(
    "nester_http_active_requests",
    "Currently active HTTP requests",
)

# Business metrics
LEAD_SCORE_HIST = Histogram(
    "nester_lead_score",
    "Session lead score after each chat turn",
    buckets=[10, 20, 30, 40, 50, 60, 70, 80, 90, 100],
)
SIGNAL_COUNT = Counter(
    "nester_lead_signals_total",
    "Lead signals detected in visitor messages",
    ["signal"],
)
LLM_LATENCY = Histogram(
    "nester_llm_duration_seconds",
    "LLM generation latency",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0],
)
LLM_FALLBACKS = Counter(
    "nester_llm_fallbacks_total",
    "Chat turns answered with the fallback reply",
)
QUALIFIED_LEAD_NOTIFICATIONS = Counter(
    "nester_qualified_lead_notifications_total",
    "Qualified lead notifications sent to agents",
)


def record_lead_score(score: float):
    """Record a lead score."""
    LEAD_SCORE_HIST.observe(score)


def record_signals(signals: Iterable[str]):
    """Record detected lead signals."""
    for signal in signals:
        SIGNAL_COUNT.labels(signal=signal).inc()


def record_llm_latency(seconds: float):
    """Record LLM generation latency."""
    LLM_LATENCY.observe(seconds)


def record_llm_fallback():
    LLM_FALLBACKS.inc()


def record_lead_notification():
    QUALIFIED_LEAD_NOTIFICATIONS.inc()


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware that records HTTP request metrics."""

    async def dispatch(self, request: Request, call_next):
        ACTIVE_REQUESTS.inc()
        start = time.time()

        try:
            response = await call_next(request)
        finally:
            ACTIVE_REQUESTS.dec()

        duration = time.time() - start
        endpoint = request.url.path

        REQUEST_COUNT.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()
        REQUEST_LATENCY.labels(
            method=request.method,
            endpoint=endpoint,
        ).observe(duration)

        return response


async def metrics_endpoint(request: Request) -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
