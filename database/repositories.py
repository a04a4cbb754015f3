"""
Repository classes for the Nester data access layer.

Each repository encapsulates CRUD operations for a specific model.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Property, AgentBrand, ChatSession, SocialPost, Notification

logger = logging.getLogger(__name__)


class PropertyRepository:
    """Data access for properties."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **kwargs) -> Property:
        prop = Property(**kwargs)
        self.session.add(prop)
        await self.session.flush()
        return prop

    async def get_by_id(self, property_id: str) -> Optional[Property]:
        result = await self.session.execute(
            select(Property).where(Property.id == property_id)
        )
        return result.scalar_one_or_none()

    async def get_for_agent(self, property_id: str, agent_id: str) -> Optional[Property]:
        result = await self.session.execute(
            select(Property).where(Property.id == property_id, Property.agent_id == agent_id)
        )
        return result.scalar_one_or_none()

    async def list_by_agent(
        self, agent_id: str, limit: Optional[int] = 100, offset: int = 0
    ) -> List[Property]:
        q = (
            select(Property)
            .where(Property.agent_id == agent_id)
            .order_by(Property.created_at.desc())
            .offset(offset)
        )
        if limit is not None:
            q = q.limit(limit)
        result = await self.session.execute(q)
        return list(result.scalars().all())

    async def update(self, property_id: str, **kwargs) -> None:
        await self.session.execute(
            update(Property).where(Property.id == property_id).values(**kwargs)
        )
        await self.session.flush()

    async def delete(self, prop: Property) -> None:
        await self.session.delete(prop)
        await self.session.flush()


class AgentBrandRepository:
    """Data access for agent branding and persona."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, agent_id: str) -> Optional[AgentBrand]:
        result = await self.session.execute(
            select(AgentBrand).where(AgentBrand.agent_id == agent_id)
        )
        return result.scalar_one_or_none()

    async def upsert(self, agent_id: str, **kwargs) -> AgentBrand:
        brand = await self.get(agent_id)
        if brand is None:
            brand = AgentBrand(agent_id=agent_id, **kwargs)
            self.session.add(brand)
        else:
            for k, v in kwargs.items():
                if hasattr(brand, k):
                    setattr(brand, k, v)
        await self.session.flush()
        return brand


class ChatSessionRepository:
    """Data access for property chat sessions."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, property_id: str, **kwargs) -> ChatSession:
        chat = ChatSession(property_id=property_id, **kwargs)
        self.session.add(chat)
        await self.session.flush()
        return chat

    async def get_by_id(self, session_id: str) -> Optional[ChatSession]:
        result = await self.session.execute(
            select(ChatSession).where(ChatSession.id == session_id)
        )
        return result.scalar_one_or_none()

    async def get_for_property(self, session_id: str, property_id: str) -> Optional[ChatSession]:
        result = await self.session.execute(
            select(ChatSession).where(
                ChatSession.id == session_id,
                ChatSession.property_id == property_id,
            )
        )
        return result.scalar_one_or_none()

    async def record_turn(
        self,
        session_id: str,
        conversation_history: List[Dict[str, Any]],
        lead_qualification_score: int,
        identified_interests: List[str],
        total_messages: int,
    ) -> None:
        """Persist the bookkeeping of one chat turn."""
        await self.session.execute(
            update(ChatSession)
            .where(ChatSession.id == session_id)
            .values(
                conversation_history=conversation_history,
                lead_qualification_score=lead_qualification_score,
                identified_interests=identified_interests,
                total_messages=total_messages,
                last_interaction_at=datetime.utcnow(),
            )
        )
        await self.session.flush()

    async def mark_notified(self, session_id: str) -> None:
        await self.session.execute(
            update(ChatSession)
            .where(ChatSession.id == session_id)
            .values(lead_notified=True)
        )
        await self.session.flush()

    async def list_for_agent(
        self,
        agent_id: str,
        property_id: Optional[str] = None,
        min_score: Optional[int] = None,
        limit: Optional[int] = 50,
    ) -> List[ChatSession]:
        q = (
            select(ChatSession)
            .join(Property, ChatSession.property_id == Property.id)
            .where(Property.agent_id == agent_id)
            .order_by(ChatSession.last_interaction_at.desc())
        )
        if property_id:
            q = q.where(ChatSession.property_id == property_id)
        if min_score is not None:
            q = q.where(ChatSession.lead_qualification_score >= min_score)
        if limit is not None:
            q = q.limit(limit)
        result = await self.session.execute(q)
        return list(result.scalars().all())

    async def delete(self, session_id: str) -> bool:
        result = await self.session.execute(
            delete(ChatSession).where(ChatSession.id == session_id)
        )
        await self.session.flush()
        return result.rowcount > 0


class SocialPostRepository:
    """Data access for generated social posts."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def exists_for_property(self, property_id: str) -> bool:
        result = await self.session.execute(
            select(SocialPost.id).where(SocialPost.property_id == property_id).limit(1)
        )
        return result.first() is not None

    async def bulk_create(self, posts: List[Dict[str, Any]]) -> int:
        self.session.add_all([SocialPost(**p) for p in posts])
        await self.session.flush()
        return len(posts)

    async def list_by_property(self, property_id: str) -> List[SocialPost]:
        result = await self.session.execute(
            select(SocialPost)
            .where(SocialPost.property_id == property_id)
            .order_by(SocialPost.scheduled_for.asc())
        )
        return list(result.scalars().all())

    async def delete_for_property(self, property_id: str) -> None:
        await self.session.execute(
            delete(SocialPost).where(SocialPost.property_id == property_id)
        )
        await self.session.flush()


class NotificationRepository:
    """Data access for agent notifications."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **kwargs) -> Notification:
        notif = Notification(**kwargs)
        self.session.add(notif)
        await self.session.flush()
        return notif

    async def list_for_agent(self, agent_id: str, limit: int = 50) -> List[Notification]:
        result = await self.session.execute(
            select(Notification)
            .where(Notification.agent_id == agent_id)
            .order_by(Notification.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
