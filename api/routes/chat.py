"""
Chat API Routes for the Nester property chat assistant.
"""

import logging
from typing import List, Dict, Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import get_current_agent
from ..middleware.metrics import (
    record_lead_notification,
    record_lead_score,
    record_llm_fallback,
    record_llm_latency,
    record_signals,
)
from ..services import get_services
from database.repositories import ChatSessionRepository, PropertyRepository
from database.session import get_db
from llm.orchestrator import (
    FALLBACK_RESPONSE,
    ChatRequest as OrchestratorRequest,
    PropertyNotFoundError,
    SessionCreateError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Request / Response Models ─────────────────────────────────────

class ChatRequest(BaseModel):
    message: Optional[str] = None
    property_id: Optional[str] = None
    session_id: Optional[str] = None
    visitor_info: Dict[str, Any] = Field(default_factory=dict)
    context: Dict[str, Any] = Field(default_factory=dict)


class LeadQualification(BaseModel):
    score: int
    is_qualified: bool
    interests: List[str] = []
    next_questions: List[str] = []


class AgentContact(BaseModel):
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    should_show_contact: bool


class ChatResponse(BaseModel):
    response: str
    session_id: str
    lead_qualification: LeadQualification
    agent_contact: AgentContact
    suggested_actions: List[str] = []


# ── Endpoints ─────────────────────────────────────────────────────

@router.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest, db: AsyncSession = Depends(get_db)):
    """
    Process a visitor message about a property.

    1. Load property, brand and session  2. Generate LLM response
    3. Score the message  4. Persist session  5. Notify agent on qualification
    """
    if not (request.message or "").strip() or not (request.property_id or "").strip():
        raise HTTPException(status_code=400, detail="Message and property ID are required")

    services = get_services()
    try:
        result = await services.orchestrator.process(
            OrchestratorRequest(
                message=request.message,
                property_id=request.property_id,
                session_id=request.session_id,
                visitor_info=request.visitor_info,
                context=request.context,
            ),
            db,
        )
    except PropertyNotFoundError:
        raise HTTPException(status_code=404, detail="Property not found")
    except SessionCreateError:
        raise HTTPException(status_code=500, detail="Failed to create chat session")
    except Exception as e:
        logger.error(f"Chat API error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    record_lead_score(result.score)
    record_signals(result.lead_signals)
    record_llm_latency(result.llm_latency_s)
    if result.response == FALLBACK_RESPONSE:
        record_llm_fallback()
    if result.notified:
        record_lead_notification()

    return result.to_dict()


@router.get("/chat/sessions")
async def list_sessions(
    property_id: Optional[str] = None,
    min_score: Optional[int] = Query(None, ge=0, le=100),
    limit: int = Query(50, ge=1, le=500),
    agent_id: str = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    """List the agent's chat sessions, most recent interaction first."""
    sessions = await ChatSessionRepository(db).list_for_agent(
        agent_id, property_id=property_id, min_score=min_score, limit=limit
    )
    return {
        "sessions": [s.to_dict() for s in sessions],
        "total": len(sessions),
    }


async def _agent_session(session_id: str, agent_id: str, db: AsyncSession):
    chat_session = await ChatSessionRepository(db).get_by_id(session_id)
    if chat_session is None:
        raise HTTPException(status_code=404, detail="Session not found")

    owned = await PropertyRepository(db).get_for_agent(chat_session.property_id, agent_id)
    if owned is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return chat_session


@router.get("/chat/sessions/{session_id}")
async def get_session(
    session_id: str,
    agent_id: str = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    """Get a chat session with its full conversation history."""
    chat_session = await _agent_session(session_id, agent_id, db)
    return chat_session.to_dict()


@router.delete("/chat/sessions/{session_id}")
async def delete_session(
    session_id: str,
    agent_id: str = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    """Delete a chat session."""
    await _agent_session(session_id, agent_id, db)
    await ChatSessionRepository(db).delete(session_id)
    logger.info(f"Chat session {session_id} deleted by agent {agent_id}")
    return {"status": "deleted", "session_id": session_id}
