"""
API Module for the Nester property chat service.

FastAPI application with routes for:
- Property chat with lead qualification
- Agent notifications, properties and branding
- Social campaign generation and dashboard stats
"""

from .main import create_app, app

__all__ = ["create_app", "app"]
