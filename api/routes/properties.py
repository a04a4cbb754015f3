"""
Property listing and agent brand routes for the Nester API.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import get_current_agent
from database.repositories import AgentBrandRepository, PropertyRepository
from database.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


# Models
class PropertyCreate(BaseModel):
    """Property creation request."""
    address: str = Field(..., min_length=1, max_length=500)
    price: Optional[float] = Field(None, ge=0)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[float] = Field(None, ge=0)
    square_feet: Optional[int] = Field(None, ge=0)
    property_type: str = "single_family"
    description: Optional[str] = None
    features: List[str] = []
    image_urls: List[str] = []
    neighborhood_info: Optional[str] = None
    year_built: Optional[int] = None
    listing_status: str = "active"
    days_on_market: Optional[int] = None
    school_district: Optional[str] = None
    walkability_score: Optional[int] = Field(None, ge=0, le=100)
    hoa_fees: Optional[float] = None
    property_taxes: Optional[float] = None


class BrandUpdate(BaseModel):
    """Agent brand and persona."""
    agent_name: Optional[str] = None
    company_name: Optional[str] = None
    agent_phone: Optional[str] = None
    agent_email: Optional[str] = None
    agent_website: Optional[str] = None
    persona_tone: Optional[str] = None
    persona_style: Optional[str] = None
    persona_key_phrases: Optional[List[str]] = None
    persona_phrases_to_avoid: Optional[List[str]] = None
    brand_tier: Optional[str] = None
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None


# ── Properties ────────────────────────────────────────────────────

@router.post("/properties", status_code=201)
async def create_property(
    request: PropertyCreate,
    agent_id: str = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    """Create a property listing for the calling agent."""
    prop = await PropertyRepository(db).create(agent_id=agent_id, **request.model_dump())
    logger.info(f"Property {prop.id} created by agent {agent_id}")
    return prop.to_dict()


@router.get("/properties")
async def list_properties(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    agent_id: str = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    """List the calling agent's properties, newest first."""
    props = await PropertyRepository(db).list_by_agent(agent_id, limit=limit, offset=offset)
    return {"properties": [p.to_dict() for p in props], "total": len(props)}


@router.get("/properties/{property_id}")
async def get_property(
    property_id: str,
    agent_id: str = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    prop = await PropertyRepository(db).get_for_agent(property_id, agent_id)
    if prop is None:
        raise HTTPException(status_code=404, detail="Property not found")
    return prop.to_dict()


@router.delete("/properties/{property_id}")
async def delete_property(
    property_id: str,
    agent_id: str = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    """Delete a property along with its chat sessions and social posts."""
    repo = PropertyRepository(db)
    prop = await repo.get_for_agent(property_id, agent_id)
    if prop is None:
        raise HTTPException(status_code=404, detail="Property not found")
    await repo.delete(prop)
    logger.info(f"Property {property_id} deleted by agent {agent_id}")
    return {"status": "deleted", "property_id": property_id}


# ── Agent brand ───────────────────────────────────────────────────

@router.put("/agents/me/brand")
async def upsert_brand(
    request: BrandUpdate,
    agent_id: str = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    """Create or update the calling agent's brand and persona."""
    brand = await AgentBrandRepository(db).upsert(
        agent_id, **request.model_dump(exclude_unset=True)
    )
    return brand.to_dict()


@router.get("/agents/me/brand")
async def get_brand(
    agent_id: str = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    brand = await AgentBrandRepository(db).get(agent_id)
    if brand is None:
        raise HTTPException(status_code=404, detail="Brand not found")
    return brand.to_dict()
