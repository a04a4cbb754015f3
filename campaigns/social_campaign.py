"""
70-day social media campaign planning.

Builds the generation payload sent to the N8N campaign workflow, turns the
workflow's callback into social post rows, and summarises a property's
campaign for the status endpoint.
"""

import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

DURATION_DAYS = 70
POSTS_PER_DAY = 3
TOTAL_POSTS = DURATION_DAYS * POSTS_PER_DAY

WEEKLY_THEMES = [
    {"week": 1, "theme": "The Grand Unveiling", "focus": "property_introduction"},
    {"week": 2, "theme": "Home Features Spotlight", "focus": "feature_highlights"},
    {"week": 3, "theme": "Neighborhood Discovery", "focus": "location_benefits"},
    {"week": 4, "theme": "Lifestyle & Community", "focus": "lifestyle_appeal"},
    {"week": 5, "theme": "Investment Opportunity", "focus": "financial_benefits"},
    {"week": 6, "theme": "Behind the Scenes", "focus": "process_transparency"},
    {"week": 7, "theme": "Buyer Stories & Testimonials", "focus": "social_proof"},
    {"week": 8, "theme": "Final Features Showcase", "focus": "unique_selling_points"},
    {"week": 9, "theme": "Last Call Marketing", "focus": "urgency_creation"},
    {"week": 10, "theme": "Closing Push", "focus": "final_opportunity"},
]

CONTENT_ARCHETYPES = [
    "feature_spotlight",
    "before_after_styling",
    "local_gem",
    "data_insight",
    "poll_question",
    "lifestyle_story",
    "meet_the_expert",
    "virtual_tour_teaser",
    "neighborhood_highlight",
    "investment_analysis",
]

PLATFORMS = ["instagram", "facebook", "linkedin", "tiktok", "twitter", "bluesky", "threads"]

# Minimum hours before the same archetype / room or feature / styling repeats
NEVER_REPEAT_WINDOWS_HOURS = {
    "archetype": 24,
    "room_feature": 48,
    "style": 72,
}

STYLE_VARIATIONS = ["contemporary", "bohemian", "traditional", "scandinavian"]
ASPECT_RATIOS = ["1:1", "9:16", "16:9"]
DEFAULT_TIMEZONE = "America/New_York"

PREVIEW_CHARS = 100
RECENT_POSTS_LIMIT = 10

# content_generation_status values
STATUS_GENERATING = "generating_social_campaign"
STATUS_COMPLETED = "social_campaign_completed"
STATUS_ERROR = "error"
STATUS_NOT_STARTED = "not_started"


def campaign_details() -> Dict[str, Any]:
    """Summary of the campaign plan returned when generation starts."""
    return {
        "duration_days": DURATION_DAYS,
        "total_posts": TOTAL_POSTS,
        "posts_per_day": POSTS_PER_DAY,
        "platforms": len(PLATFORMS),
        "weekly_themes": len(WEEKLY_THEMES),
        "content_archetypes": len(CONTENT_ARCHETYPES),
        "never_repeat_guarantee": True,
    }


def brand_context(brand: Optional[Dict[str, Any]], brand_name: str = "Nester") -> Dict[str, Any]:
    """Agent brand and persona as sent to N8N workflows, with Nester defaults."""
    brand = brand or {}
    tier = brand.get("brand_tier") or "nester_default"
    return {
        "company_name": brand.get("company_name") or brand_name,
        "persona_tone": brand.get("persona_tone") or "Professional & Authoritative",
        "persona_style": brand.get("persona_style") or "Concise & Factual",
        "key_phrases": brand.get("persona_key_phrases") or ["Discover your dream home"],
        "avoid_phrases": brand.get("persona_phrases_to_avoid") or ["cheap", "deal"],
        "brand_tier": tier,
        "white_label_enabled": tier != "nester_default",
        "primary_color": brand.get("primary_color"),
        "secondary_color": brand.get("secondary_color"),
    }


def build_campaign_payload(
    property_info: Dict[str, Any],
    agent_id: str,
    brand: Optional[Dict[str, Any]],
    campaign_settings: Optional[Dict[str, Any]],
    callback_url: str,
    brand_name: str = "Nester",
    available_images: int = 0,
) -> Dict[str, Any]:
    """
    Build the N8N campaign generation payload.

    Args:
        property_info: Property fields
        agent_id: Owning agent
        brand: Agent brand row as a dict, if any
        campaign_settings: auto_publish, start_date, timezone, regenerate
        callback_url: Where N8N posts the generated campaign
        brand_name: Company name used when the agent has no brand
        available_images: Number of listing images N8N may use

    Returns:
        JSON-serialisable payload
    """
    settings = campaign_settings or {}

    return {
        "property_id": property_info["id"],
        "agent_id": agent_id,
        "property_data": {
            key: property_info.get(key)
            for key in (
                "address", "price", "bedrooms", "bathrooms", "square_feet",
                "property_type", "description", "features", "neighborhood_info",
                "year_built",
            )
        },
        "brand_context": brand_context(brand, brand_name),
        "campaign_structure": {
            "duration_days": DURATION_DAYS,
            "posts_per_day": POSTS_PER_DAY,
            "total_posts": TOTAL_POSTS,
            "weekly_themes": WEEKLY_THEMES,
            "content_archetypes": CONTENT_ARCHETYPES,
            "platforms": PLATFORMS,
        },
        "visual_assets": {
            "available_images": available_images,
            "style_variations": STYLE_VARIATIONS,
            "aspect_ratios": ASPECT_RATIOS,
        },
        "scheduling_algorithm": {
            "never_repeat_rule": True,
            "exclusion_windows_hours": NEVER_REPEAT_WINDOWS_HOURS,
            "optimal_timing": True,
            "platform_specific_optimization": True,
            "engagement_based_adjustment": True,
        },
        "campaign_settings": {
            "auto_publish": bool(settings.get("auto_publish", False)),
            "start_date": settings.get("start_date") or datetime.utcnow().isoformat(),
            "timezone": settings.get("timezone") or DEFAULT_TIMEZONE,
            "regenerate": bool(settings.get("regenerate", False)),
        },
        "callback_url": callback_url,
    }


def _parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO timestamp into naive UTC."""
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            logger.warning(f"Unparseable scheduled_for: {value!r}")
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def posts_from_callback(
    property_id: str,
    agent_id: str,
    job_id: Optional[str],
    generated_posts: Iterable[Dict[str, Any]],
) -> List[Dict[str, Any]]:
    """Map generated posts from the workflow callback to social post rows."""
    generated_at = datetime.utcnow().isoformat()
    rows = []
    for post in generated_posts:
        rows.append({
            "property_id": property_id,
            "agent_id": agent_id,
            "platform": post.get("platform"),
            "content": post.get("content"),
            "hashtags": post.get("hashtags") or [],
            "archetype": post.get("archetype"),
            "week_theme": post.get("week_theme"),
            "day_number": post.get("day_number"),
            "post_number_of_day": post.get("post_number_of_day"),
            "scheduled_for": _parse_timestamp(post.get("scheduled_for")),
            "status": "scheduled" if post.get("auto_publish") else "draft",
            "image_urls": post.get("image_urls") or [],
            "call_to_action": post.get("call_to_action"),
            "ai_generation_metadata": {
                "job_id": job_id,
                "archetype": post.get("archetype"),
                "week_theme": post.get("week_theme"),
                "generation_prompt": post.get("generation_prompt"),
                "style_instructions": post.get("style_instructions"),
                "never_repeat_check": post.get("never_repeat_check"),
                "generated_at": generated_at,
            },
        })
    return rows


def completion_stats(total_posts: int, generation_stats: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Stats stored on the property once a campaign is generated."""
    stats = generation_stats or {}
    return {
        "total_posts_generated": total_posts,
        "posts_by_platform": stats.get("posts_by_platform") or {},
        "posts_by_archetype": stats.get("posts_by_archetype") or {},
        "posts_by_week": stats.get("posts_by_week") or {},
        "generation_duration_minutes": stats.get("generation_duration_minutes") or 0,
        "never_repeat_violations": stats.get("never_repeat_violations") or 0,
        "quality_score": stats.get("quality_score") or 0,
        "completed_at": datetime.utcnow().isoformat(),
    }


def campaign_analytics(
    posts: List[Dict[str, Any]],
    started_at: Optional[datetime],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Aggregate a property's social posts.

    Args:
        posts: Social posts as dicts
        started_at: When campaign generation started
        now: Reference time for days elapsed (defaults to utcnow)
    """
    now = now or datetime.utcnow()
    by_status = Counter(p.get("status") for p in posts)

    return {
        "total_posts": len(posts),
        "posts_by_platform": dict(Counter(p["platform"] for p in posts if p.get("platform"))),
        "posts_by_status": dict(by_status),
        "posts_by_archetype": dict(Counter(p["archetype"] for p in posts if p.get("archetype"))),
        "total_engagement": sum(
            (p.get("engagements") or 0) + (p.get("clicks") or 0) + (p.get("shares") or 0)
            for p in posts
        ),
        "total_reach": sum(p.get("impressions") or 0 for p in posts),
        "total_impressions": sum(p.get("impressions") or 0 for p in posts),
        "campaign_progress": {
            "days_elapsed": (now - started_at).days if started_at else 0,
            "posts_published": by_status.get("published", 0),
            "posts_scheduled": by_status.get("scheduled", 0),
            "completion_percentage": round(len(posts) / TOTAL_POSTS * 100),
        },
    }


def recent_posts(posts: List[Dict[str, Any]], limit: int = RECENT_POSTS_LIMIT) -> List[Dict[str, Any]]:
    """The earliest scheduled posts with a short content preview."""
    return [
        {
            "id": p.get("id"),
            "platform": p.get("platform"),
            "content": f"{(p.get('content') or '')[:PREVIEW_CHARS]}...",
            "archetype": p.get("archetype"),
            "status": p.get("status"),
            "scheduled_for": p.get("scheduled_for"),
            "published_at": p.get("posted_at"),
        }
        for p in posts[:limit]
    ]
