"""
SQLAlchemy ORM models for the Nester property chat service.

Persistent entities: properties, agent brands, chat sessions, social posts
and agent notifications.
"""

import uuid
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import (
    Column, String, Integer, Float, Boolean, DateTime, Text, ForeignKey,
    JSON, Index,
)
from sqlalchemy.orm import DeclarativeBase, relationship


def _uuid() -> str:
    return str(uuid.uuid4())


def _iso(value: datetime) -> Any:
    return value.isoformat() if value else None


class Base(DeclarativeBase):
    pass


class Property(Base):
    __tablename__ = "properties"

    id = Column(String(36), primary_key=True, default=_uuid)
    agent_id = Column(String(64), nullable=False, index=True)
    address = Column(String(500), nullable=False)
    price = Column(Float, nullable=True)
    bedrooms = Column(Integer, nullable=True)
    bathrooms = Column(Float, nullable=True)
    square_feet = Column(Integer, nullable=True)
    property_type = Column(String(50), default="single_family")
    description = Column(Text, nullable=True)
    features = Column(JSON, default=list)
    neighborhood_info = Column(Text, nullable=True)
    year_built = Column(Integer, nullable=True)
    listing_status = Column(String(20), default="active")  # active, pending, sold
    days_on_market = Column(Integer, nullable=True)
    school_district = Column(String(255), nullable=True)
    walkability_score = Column(Integer, nullable=True)
    hoa_fees = Column(Float, nullable=True)
    property_taxes = Column(Float, nullable=True)
    content_generation_status = Column(String(50), nullable=True)
    content_generation_started_at = Column(DateTime, nullable=True)
    content_generation_completed_at = Column(DateTime, nullable=True)
    content_generation_error = Column(Text, nullable=True)
    content_generation_progress = Column(Integer, default=0)
    social_campaign_stats = Column(JSON, nullable=True)
    image_urls = Column(JSON, default=list)
    generated_images = Column(JSON, default=list)
    brochure_pdf_url = Column(String(1000), nullable=True)
    brochure_flipbook_url = Column(String(1000), nullable=True)
    brochure_generation_metadata = Column(JSON, nullable=True)
    microsite_url = Column(String(1000), nullable=True)
    microsite_slug = Column(String(100), nullable=True)
    microsite_generation_started_at = Column(DateTime, nullable=True)
    microsite_generation_metadata = Column(JSON, nullable=True)
    microsite_analytics = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    chat_sessions = relationship("ChatSession", back_populates="listing", cascade="all, delete-orphan")
    social_posts = relationship("SocialPost", back_populates="listing", cascade="all, delete-orphan")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "agent_id": self.agent_id,
            "address": self.address,
            "price": self.price,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "square_feet": self.square_feet,
            "property_type": self.property_type,
            "description": self.description,
            "features": self.features or [],
            "neighborhood_info": self.neighborhood_info,
            "year_built": self.year_built,
            "listing_status": self.listing_status,
            "days_on_market": self.days_on_market,
            "school_district": self.school_district,
            "walkability_score": self.walkability_score,
            "hoa_fees": self.hoa_fees,
            "property_taxes": self.property_taxes,
            "content_generation_status": self.content_generation_status,
            "content_generation_started_at": _iso(self.content_generation_started_at),
            "content_generation_completed_at": _iso(self.content_generation_completed_at),
            "content_generation_error": self.content_generation_error,
            "content_generation_progress": self.content_generation_progress or 0,
            "social_campaign_stats": self.social_campaign_stats,
            "image_urls": self.image_urls or [],
            "generated_images": self.generated_images or [],
            "brochure_pdf_url": self.brochure_pdf_url,
            "brochure_flipbook_url": self.brochure_flipbook_url,
            "brochure_generation_metadata": self.brochure_generation_metadata,
            "microsite_url": self.microsite_url,
            "microsite_slug": self.microsite_slug,
            "microsite_generation_started_at": _iso(self.microsite_generation_started_at),
            "microsite_generation_metadata": self.microsite_generation_metadata,
            "microsite_analytics": self.microsite_analytics,
            "created_at": _iso(self.created_at),
        }


class AgentBrand(Base):
    __tablename__ = "agent_brands"

    agent_id = Column(String(64), primary_key=True)
    agent_name = Column(String(255), nullable=True)
    company_name = Column(String(255), nullable=True)
    agent_phone = Column(String(32), nullable=True)
    agent_email = Column(String(255), nullable=True)
    agent_website = Column(String(500), nullable=True)
    persona_tone = Column(String(100), default="Professional & Authoritative")
    persona_style = Column(String(100), default="Concise & Factual")
    persona_key_phrases = Column(JSON, nullable=True)
    persona_phrases_to_avoid = Column(JSON, nullable=True)
    brand_tier = Column(String(30), default="nester_default")
    primary_color = Column(String(16), nullable=True)
    secondary_color = Column(String(16), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "agent_id": self.agent_id,
            "agent_name": self.agent_name,
            "company_name": self.company_name,
            "agent_phone": self.agent_phone,
            "agent_email": self.agent_email,
            "agent_website": self.agent_website,
            "persona_tone": self.persona_tone,
            "persona_style": self.persona_style,
            "persona_key_phrases": self.persona_key_phrases,
            "persona_phrases_to_avoid": self.persona_phrases_to_avoid,
            "brand_tier": self.brand_tier,
            "primary_color": self.primary_color,
            "secondary_color": self.secondary_color,
        }


class ChatSession(Base):
    __tablename__ = "chat_sessions"

    id = Column(String(36), primary_key=True, default=_uuid)
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    visitor_info = Column(JSON, default=dict)
    conversation_history = Column(JSON, default=list)
    lead_qualification_score = Column(Integer, default=0)
    identified_interests = Column(JSON, default=list)
    session_metadata = Column(JSON, default=dict)
    lead_notified = Column(Boolean, default=False)
    total_messages = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    last_interaction_at = Column(DateTime, default=datetime.utcnow)

    listing = relationship("Property", back_populates="chat_sessions")

    __table_args__ = (
        Index("ix_session_property_score", "property_id", "lead_qualification_score"),
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "property_id": self.property_id,
            "visitor_info": self.visitor_info or {},
            "conversation_history": self.conversation_history or [],
            "lead_qualification_score": self.lead_qualification_score or 0,
            "identified_interests": self.identified_interests or [],
            "session_metadata": self.session_metadata or {},
            "lead_notified": bool(self.lead_notified),
            "total_messages": self.total_messages or 0,
            "created_at": _iso(self.created_at),
            "last_interaction_at": _iso(self.last_interaction_at),
        }


class SocialPost(Base):
    __tablename__ = "social_posts"

    id = Column(String(36), primary_key=True, default=_uuid)
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    agent_id = Column(String(64), nullable=False)
    platform = Column(String(20), nullable=True)
    content = Column(Text, nullable=True)
    hashtags = Column(JSON, default=list)
    archetype = Column(String(50), nullable=True)
    week_theme = Column(String(100), nullable=True)
    day_number = Column(Integer, nullable=True)
    post_number_of_day = Column(Integer, nullable=True)
    scheduled_for = Column(DateTime, nullable=True)
    posted_at = Column(DateTime, nullable=True)
    status = Column(String(15), default="draft")  # draft, scheduled, published, failed
    image_urls = Column(JSON, default=list)
    call_to_action = Column(Text, nullable=True)
    impressions = Column(Integer, default=0)
    engagements = Column(Integer, default=0)
    clicks = Column(Integer, default=0)
    shares = Column(Integer, default=0)
    ai_generation_metadata = Column(JSON, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)

    listing = relationship("Property", back_populates="social_posts")

    __table_args__ = (
        Index("ix_post_property_schedule", "property_id", "scheduled_for"),
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "property_id": self.property_id,
            "agent_id": self.agent_id,
            "platform": self.platform,
            "content": self.content,
            "hashtags": self.hashtags or [],
            "archetype": self.archetype,
            "week_theme": self.week_theme,
            "day_number": self.day_number,
            "post_number_of_day": self.post_number_of_day,
            "scheduled_for": _iso(self.scheduled_for),
            "posted_at": _iso(self.posted_at),
            "status": self.status,
            "image_urls": self.image_urls or [],
            "call_to_action": self.call_to_action,
            "impressions": self.impressions or 0,
            "engagements": self.engagements or 0,
            "clicks": self.clicks or 0,
            "shares": self.shares or 0,
        }


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=_uuid)
    agent_id = Column(String(64), nullable=False, index=True)
    property_id = Column(String(36), nullable=True)
    session_id = Column(String(36), nullable=True)
    notification_type = Column(String(40), nullable=False)  # qualified_lead, social_campaign_complete, brochure_complete, microsite_complete
    payload = Column(JSON, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "agent_id": self.agent_id,
            "property_id": self.property_id,
            "session_id": self.session_id,
            "notification_type": self.notification_type,
            "payload": self.payload or {},
            "created_at": _iso(self.created_at),
        }
