"""
Rate limiting middleware for the Nester property chat API.

Sliding one-minute window per client. Agents are keyed by bearer token,
API key or X-Agent-Id; anonymous chat visitors by IP.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

EXEMPT_PATHS = frozenset({"/", "/health", "/metrics", "/docs", "/openapi.json"})
WINDOW_SECONDS = 60


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-client sliding-window limiter."""

    def __init__(self, app, requests_per_minute: int = 100):
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)

    def _expire(self, now: float) -> None:
        """Drop hits older than the window, and clients with none left."""
        cutoff = now - WINDOW_SECONDS
        for client_id in list(self._hits):
            hits = self._hits[client_id]
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if not hits:
                del self._hits[client_id]

    def _consume(self, client_id: str, now: float) -> Optional[int]:
        """Record a hit; returns the remaining allowance, or None when over the limit."""
        self._expire(now)
        hits = self._hits[client_id]

        if len(hits) >= self.requests_per_minute:
            return None

        hits.append(now)
        return self.requests_per_minute - len(hits)

    async def dispatch(self, request: Request, call_next):
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        client_id = client_key(request)
        remaining = self._consume(client_id, time.monotonic())

        if remaining is None:
            logger.warning("Rate limit exceeded", extra={"client": client_id})
            # Returned, not raised: BaseHTTPMiddleware sits outside the exception handlers
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"detail": "Rate limit exceeded. Please try again later."},
                headers={"Retry-After": str(WINDOW_SECONDS)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.requests_per_minute)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response


def client_key(request: Request) -> str:
    headers = request.headers

    auth = headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return f"token:{auth[7:23]}"
    if headers.get("X-API-Key"):
        return f"key:{headers['X-API-Key'][:8]}:{headers.get('X-Agent-Id', '')}"
    if headers.get("X-Agent-Id"):
        return f"agent:{headers['X-Agent-Id']}"

    return f"ip:{request.client.host}" if request.client else "ip:unknown"
