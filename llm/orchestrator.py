"""
Chat Orchestrator for the Nester property chat assistant.

Runs one visitor turn: load the listing and session, ask the LLM, score the
visitor's message, persist the session, and notify the agent about newly
qualified leads.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from database.repositories import (
    AgentBrandRepository,
    ChatSessionRepository,
    PropertyRepository,
)
from lead_scoring.follow_up import (
    determine_suggested_actions,
    generate_conversation_summary,
    generate_follow_up_questions,
)
from lead_scoring.lead_notifier import LeadNotifier, QualifiedLead
from lead_scoring.qualification import LeadQualifier, TurnAnalysis
from .prompt_templates import PromptTemplates
from .providers import LLMClient

logger = logging.getLogger(__name__)

FALLBACK_RESPONSE = (
    "I apologize, but I'm experiencing technical difficulties. "
    "Please feel free to contact our agent directly for immediate assistance."
)
FALLBACK_SUMMARY = "Technical error occurred during conversation"

DEFAULT_AGENT_NAME = "Real Estate Professional"
DEFAULT_PERSONA = {
    "tone": "Professional & Authoritative",
    "style": "Concise & Factual",
    "key_phrases": ["Discover your dream home"],
    "avoid_phrases": ["cheap", "deal"],
}

VISITOR_FIELDS = ("ip_address", "user_agent", "referrer", "location", "device_type")


class PropertyNotFoundError(Exception):
    """The chat names a property that does not exist."""


class SessionCreateError(Exception):
    """A new chat session could not be stored."""


@dataclass
class ChatRequest:
    """One visitor message for a property."""
    message: str
    property_id: str
    session_id: Optional[str] = None
    visitor_info: Dict[str, Any] = field(default_factory=dict)
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AssistantReply:
    """LLM answer plus the deterministic analysis of the visitor's message."""
    response: str
    analysis: TurnAnalysis
    suggested_questions: List[str] = field(default_factory=list)
    suggested_actions: List[str] = field(default_factory=list)
    conversation_summary: str = ""
    llm_failed: bool = False
    llm_latency_s: float = 0.0


@dataclass
class ChatResponse:
    """Result of a chat turn, shaped for the API."""
    response: str
    session_id: str
    score: int
    is_qualified: bool
    interests: List[str]
    next_questions: List[str]
    agent_contact: Dict[str, Any]
    suggested_actions: List[str] = field(default_factory=list)
    lead_signals: List[str] = field(default_factory=list)
    notified: bool = False
    llm_latency_s: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the public response body."""
        return {
            "response": self.response,
            "session_id": self.session_id,
            "lead_qualification": {
                "score": self.score,
                "is_qualified": self.is_qualified,
                "interests": self.interests,
                "next_questions": self.next_questions,
            },
            "agent_contact": self.agent_contact,
            "suggested_actions": self.suggested_actions,
        }


class ChatOrchestrator:
    """
    Orchestrates a property chat turn.

    Pipeline:
    1. Load property and agent brand
    2. Load or create the chat session
    3. Build prompt and generate LLM response
    4. Analyse the visitor's message (signals, interests, budget/timeline)
    5. Update score and interests, persist the session
    6. Notify the agent once the lead qualifies
    """

    def __init__(
        self,
        llm: Optional[LLMClient] = None,
        qualifier: Optional[LeadQualifier] = None,
        notifier: Optional[LeadNotifier] = None,
        history_window: int = 10,
        brand_name: str = "Nester",
    ):
        """
        Initialize the orchestrator.

        Args:
            llm: Provider with an async `agenerate(prompt, system)`; None
                always yields the fallback reply
            qualifier: Lead qualifier (default thresholds when omitted)
            notifier: Qualified-lead notifier (disabled when omitted)
            history_window: Number of past turns included in the prompt
            brand_name: Company name used when the agent has no brand
        """
        self.llm = llm
        self.qualifier = qualifier or LeadQualifier()
        self.notifier = notifier or LeadNotifier()
        self.history_window = history_window
        self.brand_name = brand_name

    # ── Context ───────────────────────────────────────────────────

    def build_context(
        self,
        property_info: Dict[str, Any],
        brand: Optional[Dict[str, Any]],
        session_state: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Assemble the AI context from the listing, the brand and the session."""
        brand = brand or {}
        return {
            "property": property_info,
            "agent": {
                "name": brand.get("agent_name") or DEFAULT_AGENT_NAME,
                "company": brand.get("company_name") or self.brand_name,
                "phone": brand.get("agent_phone"),
                "email": brand.get("agent_email"),
                "website": brand.get("agent_website"),
            },
            "brand_persona": {
                "tone": brand.get("persona_tone") or DEFAULT_PERSONA["tone"],
                "style": brand.get("persona_style") or DEFAULT_PERSONA["style"],
                "key_phrases": brand.get("persona_key_phrases") or DEFAULT_PERSONA["key_phrases"],
                "avoid_phrases": brand.get("persona_phrases_to_avoid") or DEFAULT_PERSONA["avoid_phrases"],
            },
            "conversation_history": session_state.get("conversation_history") or [],
            "lead_qualification": {
                "current_score": session_state.get("lead_qualification_score") or 0,
                "identified_interests": session_state.get("identified_interests") or [],
            },
        }

    # ── LLM ───────────────────────────────────────────────────────

    async def generate_reply(self, message: str, context: Dict[str, Any]) -> AssistantReply:
        """
        Ask the LLM for an answer and analyse the visitor's message.

        Any LLM failure yields the canned apology with a single
        `contact_agent` action; the turn is not aborted.
        """
        history = context["conversation_history"]
        system = PromptTemplates.build_system_prompt(
            context["property"], context["agent"], context["brand_persona"]
        )
        prompt = PromptTemplates.build_user_prompt(message, history, self.history_window)

        start = time.time()
        try:
            if self.llm is None:
                raise RuntimeError("No LLM provider configured")
            response = await self.llm.agenerate(prompt, system=system)
        except Exception as e:
            logger.error(f"LLM generation failed, using fallback reply: {e}")
            return AssistantReply(
                response=FALLBACK_RESPONSE,
                analysis=TurnAnalysis(),
                suggested_actions=["contact_agent"],
                conversation_summary=FALLBACK_SUMMARY,
                llm_failed=True,
                llm_latency_s=time.time() - start,
            )
        latency = time.time() - start

        score = context["lead_qualification"]["current_score"]
        analysis = TurnAnalysis.from_message(message)

        return AssistantReply(
            response=response,
            analysis=analysis,
            suggested_questions=generate_follow_up_questions(score),
            suggested_actions=determine_suggested_actions(analysis.lead_signals, score),
            conversation_summary=generate_conversation_summary(history, message),
            llm_latency_s=latency,
        )

    # ── Turn ──────────────────────────────────────────────────────

    async def _load_or_create_session(
        self,
        sessions: ChatSessionRepository,
        request: ChatRequest,
    ) -> Dict[str, Any]:
        if request.session_id:
            existing = await sessions.get_for_property(request.session_id, request.property_id)
            if existing:
                return existing.to_dict()

        visitor = request.visitor_info or {}
        context = request.context or {}
        try:
            created = await sessions.create(
                property_id=request.property_id,
                visitor_info={k: visitor.get(k) for k in VISITOR_FIELDS},
                conversation_history=[],
                lead_qualification_score=0,
                identified_interests=[],
                session_metadata={
                    "started_at": datetime.utcnow().isoformat(),
                    "platform": context.get("platform") or "web",
                    "source": context.get("source") or "property_page",
                },
            )
            await sessions.session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error creating chat session: {e}")
            await sessions.session.rollback()
            raise SessionCreateError("Failed to create chat session") from e

        logger.info(f"Chat session {created.id} started for property {request.property_id}")
        return created.to_dict()

    async def process(self, request: ChatRequest, db: AsyncSession) -> ChatResponse:
        """
        Process a chat turn.

        Args:
            request: Visitor message
            db: Database session for this request

        Returns:
            ChatResponse built from the computed (not necessarily persisted)
            session bookkeeping

        Raises:
            PropertyNotFoundError: Unknown property
            SessionCreateError: New session could not be stored
        """
        properties = PropertyRepository(db)
        sessions = ChatSessionRepository(db)

        prop = await properties.get_by_id(request.property_id)
        if prop is None:
            raise PropertyNotFoundError(request.property_id)
        property_info = prop.to_dict()
        agent_id = prop.agent_id

        brand_row = await AgentBrandRepository(db).get(agent_id)
        brand = brand_row.to_dict() if brand_row else None

        state = await self._load_or_create_session(sessions, request)
        session_id = state["id"]
        context = self.build_context(property_info, brand, state)

        reply = await self.generate_reply(request.message, context)
        analysis = reply.analysis

        history = [
            *context["conversation_history"],
            {
                "timestamp": datetime.utcnow().isoformat(),
                "user_message": request.message,
                "ai_response": reply.response,
                "lead_signals": analysis.lead_signals,
                "qualification_updates": analysis.qualification_updates,
            },
        ]
        result = self.qualifier.apply(
            state["lead_qualification_score"],
            state["identified_interests"],
            analysis,
            already_notified=state["lead_notified"],
        )

        try:
            await sessions.record_turn(
                session_id,
                conversation_history=history,
                lead_qualification_score=result.score,
                identified_interests=result.interests,
                total_messages=state["total_messages"] + 1,
            )
            await db.commit()
        except SQLAlchemyError as e:
            # Response still reports the computed score
            logger.error(f"Error updating chat session {session_id}: {e}")
            await db.rollback()

        notified = False
        if result.should_notify:
            notified = await self._notify_agent(
                sessions,
                QualifiedLead(
                    agent_id=agent_id,
                    property_id=request.property_id,
                    session_id=session_id,
                    lead_score=result.score,
                    visitor_info=state["visitor_info"],
                    key_interests=result.interests,
                    conversation_summary=reply.conversation_summary,
                ),
            )

        agent = context["agent"]
        return ChatResponse(
            response=reply.response,
            session_id=session_id,
            score=result.score,
            is_qualified=result.is_qualified,
            interests=result.interests,
            next_questions=reply.suggested_questions,
            agent_contact={
                "name": agent["name"],
                "phone": agent["phone"],
                "email": agent["email"],
                "should_show_contact": result.should_show_contact,
            },
            suggested_actions=reply.suggested_actions,
            lead_signals=analysis.lead_signals,
            notified=notified,
            llm_latency_s=reply.llm_latency_s,
        )

    async def _notify_agent(self, sessions: ChatSessionRepository, lead: QualifiedLead) -> bool:
        """Send the qualified-lead notification and flag the session on success."""
        if not await self.notifier.notify_qualified_lead(lead):
            return False

        try:
            await sessions.mark_notified(lead.session_id)
            await sessions.session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to flag session {lead.session_id} as notified: {e}")
            await sessions.session.rollback()

        logger.info(
            "Qualified lead notification sent",
            extra={"session_id": lead.session_id, "lead_score": lead.lead_score},
        )
        return True
