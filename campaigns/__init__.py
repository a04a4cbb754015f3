"""
N8N-generated listing content: social campaigns, brochures, microsites and
AI-styled images.
"""

from .n8n_client import CampaignTriggerError, N8NClient
from .social_campaign import (
    DURATION_DAYS,
    POSTS_PER_DAY,
    TOTAL_POSTS,
    brand_context,
    build_campaign_payload,
    campaign_analytics,
    campaign_details,
    completion_stats,
    posts_from_callback,
    recent_posts,
)
from .content_workflows import (
    build_brochure_payload,
    build_image_payload,
    build_microsite_payload,
    microsite_slug,
)

__all__ = [
    "CampaignTriggerError",
    "N8NClient",
    "DURATION_DAYS",
    "POSTS_PER_DAY",
    "TOTAL_POSTS",
    "brand_context",
    "build_campaign_payload",
    "campaign_analytics",
    "campaign_details",
    "completion_stats",
    "posts_from_callback",
    "recent_posts",
    "build_brochure_payload",
    "build_image_payload",
    "build_microsite_payload",
    "microsite_slug",
]
