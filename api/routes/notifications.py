"""
Agent notification routes for the Nester API.

Qualified-lead and content-complete events are posted here by the chat
orchestrator and the N8N callbacks, stored per agent, and listed for
the agent's notification center.
"""

import logging
from typing import Optional, List, Dict, Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import get_current_agent
from database.repositories import NotificationRepository
from database.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()

QUALIFIED_LEAD = "qualified_lead"
CAMPAIGN_COMPLETE = "social_campaign_complete"
BROCHURE_COMPLETE = "brochure_complete"
MICROSITE_COMPLETE = "microsite_complete"


# ── Models ────────────────────────────────────────────────────────

class QualifiedLeadNotification(BaseModel):
    agent_id: str
    property_id: str
    session_id: str
    lead_score: int = Field(..., ge=0, le=100)
    visitor_info: Dict[str, Any] = {}
    key_interests: List[str] = []
    conversation_summary: Optional[str] = None


class CampaignCompleteNotification(BaseModel):
    agent_id: str
    property_id: str
    total_posts: int = 0
    campaign_duration: int = 70
    platforms: int = 7


class ContentCompleteNotification(BaseModel):
    """Brochure or microsite ready; extra fields (urls, template, scores) are kept as the payload."""
    model_config = ConfigDict(extra="allow")

    agent_id: str
    property_id: str


# ── Endpoints ─────────────────────────────────────────────────────

@router.post("/notifications/qualified-lead")
async def qualified_lead(
    request: QualifiedLeadNotification,
    db: AsyncSession = Depends(get_db),
):
    """Store a qualified lead notification for the agent."""
    notif = await NotificationRepository(db).create(
        agent_id=request.agent_id,
        property_id=request.property_id,
        session_id=request.session_id,
        notification_type=QUALIFIED_LEAD,
        payload=request.model_dump(exclude={"agent_id", "property_id", "session_id"}),
    )
    logger.info(
        f"Qualified lead for agent {request.agent_id}",
        extra={"session_id": request.session_id, "lead_score": request.lead_score},
    )
    return {"status": "stored", "notification_id": notif.id}


@router.post("/notifications/social-campaign-complete")
async def social_campaign_complete(
    request: CampaignCompleteNotification,
    db: AsyncSession = Depends(get_db),
):
    """Store a campaign-complete notification for the agent."""
    notif = await NotificationRepository(db).create(
        agent_id=request.agent_id,
        property_id=request.property_id,
        notification_type=CAMPAIGN_COMPLETE,
        payload=request.model_dump(exclude={"agent_id", "property_id"}),
    )
    logger.info(f"Social campaign complete for property {request.property_id}")
    return {"status": "stored", "notification_id": notif.id}


async def _store_content_complete(
    request: ContentCompleteNotification, notification_type: str, db: AsyncSession
):
    notif = await NotificationRepository(db).create(
        agent_id=request.agent_id,
        property_id=request.property_id,
        notification_type=notification_type,
        payload=request.model_dump(exclude={"agent_id", "property_id"}),
    )
    logger.info(f"{notification_type} for property {request.property_id}")
    return {"status": "stored", "notification_id": notif.id}


@router.post("/notifications/brochure-complete")
async def brochure_complete(
    request: ContentCompleteNotification,
    db: AsyncSession = Depends(get_db),
):
    """Store a brochure-ready notification for the agent."""
    return await _store_content_complete(request, BROCHURE_COMPLETE, db)


@router.post("/notifications/microsite-complete")
async def microsite_complete(
    request: ContentCompleteNotification,
    db: AsyncSession = Depends(get_db),
):
    """Store a microsite-live notification for the agent."""
    return await _store_content_complete(request, MICROSITE_COMPLETE, db)


@router.get("/notifications")
async def list_notifications(
    limit: int = Query(50, ge=1, le=200),
    agent_id: str = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    """The calling agent's notifications, newest first."""
    notifications = await NotificationRepository(db).list_for_agent(agent_id, limit=limit)
    return {
        "notifications": [n.to_dict() for n in notifications],
        "total": len(notifications),
    }
