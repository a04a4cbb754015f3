"""
API Middleware.
"""

from .auth import get_current_agent
from .metrics import MetricsMiddleware, metrics_endpoint
from .rate_limit import RateLimitMiddleware

__all__ = ["get_current_agent", "MetricsMiddleware", "metrics_endpoint", "RateLimitMiddleware"]
