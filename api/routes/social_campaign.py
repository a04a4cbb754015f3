"""
70-day social media campaign routes for the Nester API.

Campaign generation runs in an N8N workflow: the trigger endpoint hands the
listing and brand to the workflow, which later posts the generated posts
back to the callback endpoint.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import get_current_agent
from ..services import get_services
from campaigns.n8n_client import CampaignTriggerError
from campaigns.social_campaign import (
    DURATION_DAYS,
    PLATFORMS,
    STATUS_COMPLETED,
    STATUS_ERROR,
    STATUS_GENERATING,
    STATUS_NOT_STARTED,
    build_campaign_payload,
    campaign_analytics,
    campaign_details,
    completion_stats,
    posts_from_callback,
    recent_posts,
)
from database.repositories import (
    AgentBrandRepository,
    PropertyRepository,
    SocialPostRepository,
)
from database.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()

CALLBACK_PATH = "/api/property/social-campaign/callback"
ESTIMATED_GENERATION_MINUTES = 15


class CampaignRequest(BaseModel):
    property_id: Optional[str] = None
    campaign_settings: Dict[str, Any] = Field(default_factory=dict)


class CampaignCallback(BaseModel):
    property_id: Optional[str] = None
    agent_id: Optional[str] = None
    status: Optional[str] = None
    job_id: Optional[str] = None
    generated_posts: Optional[List[Dict[str, Any]]] = None
    error_message: Optional[str] = None
    generation_stats: Optional[Dict[str, Any]] = None


@router.post("/property/social-campaign")
async def start_campaign(
    request: CampaignRequest,
    agent_id: str = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    """Start generating a 70-day social media campaign for a property."""
    if not request.property_id:
        raise HTTPException(status_code=400, detail="Property ID is required")

    properties = PropertyRepository(db)
    prop = await properties.get_for_agent(request.property_id, agent_id)
    if prop is None:
        raise HTTPException(status_code=404, detail="Property not found or access denied")

    posts = SocialPostRepository(db)
    regenerate = bool(request.campaign_settings.get("regenerate"))
    if await posts.exists_for_property(prop.id) and not regenerate:
        raise HTTPException(
            status_code=400,
            detail="Social media campaign already exists for this property. "
                   "Use regenerate=true to recreate.",
        )

    brand = await AgentBrandRepository(db).get(agent_id)
    services = get_services()
    settings = services.settings
    payload = build_campaign_payload(
        prop.to_dict(),
        agent_id,
        brand.to_dict() if brand else None,
        request.campaign_settings,
        callback_url=f"{(settings.app_url or '').rstrip('/')}{CALLBACK_PATH}",
        brand_name=settings.brand_name,
    )

    try:
        result = await services.n8n.trigger_social_campaign(payload)
    except CampaignTriggerError:
        raise HTTPException(
            status_code=500,
            detail="Failed to initiate social media campaign generation",
        )

    await properties.update(
        prop.id,
        content_generation_status=STATUS_GENERATING,
        content_generation_started_at=datetime.utcnow(),
        content_generation_error=None,
    )
    logger.info(f"Social campaign generation started for property {prop.id}")

    return {
        "success": True,
        "job_id": result.get("execution_id") or result.get("job_id"),
        "status": "generating",
        "message": f"{DURATION_DAYS}-day social media campaign generation initiated. "
                   "This will take 10-15 minutes.",
        "estimated_completion": (
            datetime.utcnow() + timedelta(minutes=ESTIMATED_GENERATION_MINUTES)
        ).isoformat(),
        "campaign_details": campaign_details(),
    }


@router.get("/property/social-campaign")
async def campaign_status(
    property_id: str = Query(...),
    agent_id: str = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    """Campaign status and analytics for a property."""
    prop = await PropertyRepository(db).get_for_agent(property_id, agent_id)
    if prop is None:
        raise HTTPException(status_code=404, detail="Property not found or access denied")

    info = prop.to_dict()
    posts = [p.to_dict() for p in await SocialPostRepository(db).list_by_property(property_id)]

    return {
        "property_id": property_id,
        "status": info["content_generation_status"] or STATUS_NOT_STARTED,
        "started_at": info["content_generation_started_at"],
        "completed_at": info["content_generation_completed_at"],
        "campaign_analytics": campaign_analytics(posts, prop.content_generation_started_at),
        "recent_posts": recent_posts(posts),
    }


@router.post("/property/social-campaign/callback")
async def campaign_callback(
    payload: CampaignCallback,
    db: AsyncSession = Depends(get_db),
):
    """Receive the generated campaign (or a failure) from the N8N workflow."""
    if not payload.property_id or not payload.agent_id:
        raise HTTPException(status_code=400, detail="Property ID and Agent ID are required")

    properties = PropertyRepository(db)
    if await properties.get_for_agent(payload.property_id, payload.agent_id) is None:
        raise HTTPException(status_code=404, detail="Property not found")

    if payload.status == "completed" and payload.generated_posts is not None:
        rows = posts_from_callback(
            payload.property_id, payload.agent_id, payload.job_id, payload.generated_posts
        )
        posts = SocialPostRepository(db)
        # A regenerated campaign replaces the previous posts
        await posts.delete_for_property(payload.property_id)
        await posts.bulk_create(rows)

        stats = payload.generation_stats or {}
        await properties.update(
            payload.property_id,
            content_generation_status=STATUS_COMPLETED,
            content_generation_completed_at=datetime.utcnow(),
            social_campaign_stats=completion_stats(len(rows), stats),
        )
        await db.commit()
        logger.info(
            f"Social campaign generation completed for property {payload.property_id}",
            extra={"total_posts": len(rows), "job_id": payload.job_id},
        )

        platforms = stats.get("platforms_count") or len(PLATFORMS)
        await get_services().notifier.notify_campaign_complete(
            agent_id=payload.agent_id,
            property_id=payload.property_id,
            total_posts=len(rows),
            campaign_duration=DURATION_DAYS,
            platforms=platforms,
        )

        return {
            "success": True,
            "message": "Social media campaign generated successfully",
            "stats": {
                "total_posts": len(rows),
                "platforms": platforms,
                "duration_days": DURATION_DAYS,
                "never_repeat_violations": stats.get("never_repeat_violations") or 0,
            },
        }

    if payload.status == "error":
        error = payload.error_message or "Social media campaign generation failed"
        logger.error(f"Social campaign generation failed for property {payload.property_id}: {error}")
        await properties.update(
            payload.property_id,
            content_generation_status=STATUS_ERROR,
            content_generation_error=error,
        )
        return {"success": False, "error": error}

    logger.warning(
        f"Unknown social campaign generation status for property {payload.property_id}: {payload.status}"
    )
    return {"success": False, "error": "Unknown generation status"}
