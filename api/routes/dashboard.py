"""
Agent dashboard routes for the Nester API.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..analytics.stats import compute_dashboard_stats
from ..middleware.auth import get_current_agent
from ..services import get_services
from database.repositories import ChatSessionRepository, PropertyRepository
from database.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/dashboard/stats")
async def dashboard_stats(
    agent_id: str = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    """Headline listing, content and lead numbers for the calling agent."""
    properties = await PropertyRepository(db).list_by_agent(agent_id, limit=None)
    sessions = await ChatSessionRepository(db).list_for_agent(agent_id, limit=None)

    return compute_dashboard_stats(
        [p.to_dict() for p in properties],
        [s.to_dict() for s in sessions],
        qualified_score=get_services().settings.lead_qualified_threshold,
    )
