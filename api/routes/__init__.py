"""
API Routes for the Nester property chat service.
"""

from . import chat, notifications, properties, social_campaign, content, dashboard

__all__ = ["chat", "notifications", "properties", "social_campaign", "content", "dashboard"]
