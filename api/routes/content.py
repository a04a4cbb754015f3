"""
Listing content routes for the Nester API: PDF brochures, white-label
microsites and AI-restyled images.

Each kind has a trigger that starts its N8N workflow, a status endpoint for
the agent, and a public callback the workflow posts its result to.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import get_current_agent
from ..services import get_services
from campaigns.content_workflows import (
    BROCHURE_ESTIMATE_MINUTES,
    BROCHURE_WORKFLOW,
    IMAGE_ESTIMATE_MINUTES,
    IMAGE_WORKFLOW,
    MICROSITE_ESTIMATE_MINUTES,
    MICROSITE_WORKFLOW,
    STATUS_GENERATING_BROCHURE,
    STATUS_GENERATING_MICROSITE,
    STATUS_PROCESSING_IMAGES,
    brochure_completion,
    brochure_details,
    brochure_status,
    build_brochure_payload,
    build_image_payload,
    build_microsite_payload,
    image_completion,
    image_status,
    microsite_completion,
    microsite_details,
    microsite_slug,
    microsite_status,
)
from campaigns.n8n_client import CampaignTriggerError
from campaigns.social_campaign import STATUS_ERROR
from database.models import Property
from database.repositories import (
    AgentBrandRepository,
    ChatSessionRepository,
    PropertyRepository,
)
from database.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()

BROCHURE_CALLBACK_PATH = "/api/property/brochure/callback"
MICROSITE_CALLBACK_PATH = "/api/property/microsite/callback"
IMAGE_CALLBACK_PATH = "/api/property/images/callback"


# ── Models ────────────────────────────────────────────────────────

class BrochureRequest(BaseModel):
    property_id: Optional[str] = None
    brochure_settings: Dict[str, Any] = Field(default_factory=dict)


class MicrositeRequest(BaseModel):
    property_id: Optional[str] = None
    microsite_settings: Dict[str, Any] = Field(default_factory=dict)


class ImageRequest(BaseModel):
    property_id: Optional[str] = None
    regenerate: bool = False


class WorkflowCallback(BaseModel):
    property_id: Optional[str] = None
    agent_id: Optional[str] = None
    status: Optional[str] = None
    job_id: Optional[str] = None
    error_message: Optional[str] = None


class BrochureCallback(WorkflowCallback):
    brochure_files: Optional[Dict[str, Any]] = None
    generation_metadata: Optional[Dict[str, Any]] = None


class MicrositeCallback(WorkflowCallback):
    microsite_data: Optional[Dict[str, Any]] = None
    deployment_info: Optional[Dict[str, Any]] = None


class ImageCallback(WorkflowCallback):
    generated_images: Optional[List[Dict[str, Any]]] = None
    progress_percentage: Optional[int] = None
    current_step: Optional[str] = None


# ── Shared steps ──────────────────────────────────────────────────

async def _owned_property(db: AsyncSession, property_id: Optional[str], agent_id: str) -> Property:
    if not property_id:
        raise HTTPException(status_code=400, detail="Property ID is required")
    prop = await PropertyRepository(db).get_for_agent(property_id, agent_id)
    if prop is None:
        raise HTTPException(status_code=404, detail="Property not found or access denied")
    return prop


async def _brand(db: AsyncSession, agent_id: str) -> Optional[Dict[str, Any]]:
    brand = await AgentBrandRepository(db).get(agent_id)
    return brand.to_dict() if brand else None


def _callback_url(path: str) -> str:
    return f"{(get_services().settings.app_url or '').rstrip('/')}{path}"


async def _trigger(workflow: str, payload: Dict[str, Any], failure: str) -> Dict[str, Any]:
    try:
        return await get_services().n8n.trigger(workflow, payload)
    except CampaignTriggerError:
        raise HTTPException(status_code=500, detail=failure)


def _started(result: Dict[str, Any], status: str, message: str, minutes: int) -> Dict[str, Any]:
    return {
        "success": True,
        "job_id": result.get("execution_id") or result.get("job_id"),
        "status": status,
        "message": message,
        "estimated_completion": (datetime.utcnow() + timedelta(minutes=minutes)).isoformat(),
    }


async def _callback_target(db: AsyncSession, payload: WorkflowCallback) -> PropertyRepository:
    if not payload.property_id or not payload.agent_id:
        raise HTTPException(status_code=400, detail="Property ID and Agent ID are required")
    properties = PropertyRepository(db)
    if await properties.get_for_agent(payload.property_id, payload.agent_id) is None:
        raise HTTPException(status_code=404, detail="Property not found")
    return properties


async def _record_failure(
    properties: PropertyRepository, payload: WorkflowCallback, default: str
) -> Dict[str, Any]:
    error = payload.error_message or default
    logger.error(f"{default} for property {payload.property_id}: {error}")
    await properties.update(
        payload.property_id,
        content_generation_status=STATUS_ERROR,
        content_generation_error=error,
    )
    return {"success": False, "error": error}


async def _record_progress(
    properties: PropertyRepository,
    payload: WorkflowCallback,
    status: str,
    progress: Optional[int],
    current_step: Optional[str],
) -> Dict[str, Any]:
    await properties.update(
        payload.property_id,
        content_generation_status=status,
        content_generation_progress=progress or 0,
    )
    return {
        "success": True,
        "status": "processing",
        "progress": progress or 0,
        "current_step": current_step or "Processing",
    }


def _unknown_status(kind: str, payload: WorkflowCallback) -> Dict[str, Any]:
    logger.warning(f"Unknown {kind} generation status for property {payload.property_id}: {payload.status}")
    return {"success": False, "error": "Unknown generation status"}


# ── Brochure ──────────────────────────────────────────────────────

@router.post("/property/brochure")
async def start_brochure(
    request: BrochureRequest,
    agent_id: str = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    """Start generating a print-ready PDF brochure for a property."""
    prop = await _owned_property(db, request.property_id, agent_id)
    settings = get_services().settings

    payload = build_brochure_payload(
        prop.to_dict(),
        agent_id,
        await _brand(db, agent_id),
        request.brochure_settings,
        callback_url=_callback_url(BROCHURE_CALLBACK_PATH),
        brand_name=settings.brand_name,
    )
    result = await _trigger(BROCHURE_WORKFLOW, payload, "Failed to initiate brochure generation")

    await PropertyRepository(db).update(
        prop.id,
        content_generation_status=STATUS_GENERATING_BROCHURE,
        content_generation_started_at=datetime.utcnow(),
        content_generation_error=None,
        content_generation_progress=0,
    )
    logger.info(f"Brochure generation started for property {prop.id}")

    response = _started(
        result,
        "generating",
        "Professional PDF brochure generation initiated. This will take 5-8 minutes.",
        BROCHURE_ESTIMATE_MINUTES,
    )
    response["brochure_details"] = brochure_details(payload)
    return response


@router.get("/property/brochure")
async def get_brochure_status(
    property_id: str = Query(...),
    agent_id: str = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    """Brochure generation status and download links."""
    prop = await _owned_property(db, property_id, agent_id)
    return brochure_status(prop.to_dict())


@router.post("/property/brochure/callback")
async def brochure_callback(
    payload: BrochureCallback,
    db: AsyncSession = Depends(get_db),
):
    """Receive the generated brochure files (or a failure) from N8N."""
    properties = await _callback_target(db, payload)
    metadata = payload.generation_metadata or {}

    if payload.status == "completed" and payload.brochure_files:
        files = payload.brochure_files
        await properties.update(
            payload.property_id, **brochure_completion(payload.job_id, files, metadata)
        )
        await db.commit()
        logger.info(f"Brochure generation completed for property {payload.property_id}")

        await get_services().notifier.notify_brochure_complete(
            payload.agent_id,
            payload.property_id,
            {
                "brochure_url": files.get("pdf_high_quality"),
                "flipbook_url": files.get("interactive_flipbook"),
                "page_count": metadata.get("page_count"),
                "template_style": metadata.get("template_style"),
            },
        )
        return {
            "success": True,
            "message": "PDF brochure generated successfully",
            "files": {
                key: files.get(key)
                for key in ("pdf_high_quality", "pdf_web_optimized", "interactive_flipbook", "cover_preview")
            },
            "metadata": {
                "page_count": metadata.get("page_count"),
                "file_size_mb": (metadata.get("file_sizes") or {}).get("pdf_high_quality_mb"),
                "generation_duration": metadata.get("generation_duration_minutes"),
                "quality_score": metadata.get("quality_score"),
            },
        }

    if payload.status == "error":
        return await _record_failure(properties, payload, "Brochure generation failed")

    if payload.status == "processing":
        return await _record_progress(
            properties, payload, STATUS_GENERATING_BROCHURE,
            metadata.get("progress_percentage"), metadata.get("current_step"),
        )

    return _unknown_status("brochure", payload)


# ── Microsite ─────────────────────────────────────────────────────

@router.post("/property/microsite")
async def start_microsite(
    request: MicrositeRequest,
    agent_id: str = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    """Start generating and deploying a white-label microsite for a property."""
    prop = await _owned_property(db, request.property_id, agent_id)

    if prop.microsite_url and not request.microsite_settings.get("regenerate"):
        return {
            "success": True,
            "microsite_url": prop.microsite_url,
            "status": "existing",
            "message": "Microsite already exists. Use regenerate=true to recreate.",
        }

    settings = get_services().settings
    slug = microsite_slug(prop.address, prop.id)
    url = f"{settings.microsite_domain.rstrip('/')}/{slug}" if settings.microsite_domain else None

    payload = build_microsite_payload(
        prop.to_dict(),
        agent_id,
        await _brand(db, agent_id),
        request.microsite_settings,
        slug=slug,
        microsite_url=url,
        callback_url=_callback_url(MICROSITE_CALLBACK_PATH),
        brand_name=settings.brand_name,
    )
    result = await _trigger(MICROSITE_WORKFLOW, payload, "Failed to initiate microsite generation")

    now = datetime.utcnow()
    await PropertyRepository(db).update(
        prop.id,
        microsite_url=url,
        microsite_slug=slug,
        microsite_generation_started_at=now,
        content_generation_status=STATUS_GENERATING_MICROSITE,
        content_generation_started_at=now,
        content_generation_error=None,
        content_generation_progress=0,
    )
    logger.info(f"Microsite generation started for property {prop.id}", extra={"slug": slug})

    response = _started(
        result,
        "generating",
        "White-label microsite generation initiated. This will take 3-5 minutes.",
        MICROSITE_ESTIMATE_MINUTES,
    )
    response.update({
        "microsite_url": url,
        "microsite_slug": slug,
        "microsite_details": microsite_details(payload),
    })
    return response


@router.get("/property/microsite")
async def get_microsite_status(
    property_id: str = Query(...),
    agent_id: str = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    """Microsite status with visitor engagement from the property's chat sessions."""
    prop = await _owned_property(db, property_id, agent_id)
    sessions = await ChatSessionRepository(db).list_for_agent(
        agent_id, property_id=property_id, limit=None
    )
    return microsite_status(
        prop.to_dict(),
        [s.to_dict() for s in sessions],
        qualified_score=get_services().settings.lead_qualified_threshold,
    )


@router.post("/property/microsite/callback")
async def microsite_callback(
    payload: MicrositeCallback,
    db: AsyncSession = Depends(get_db),
):
    """Receive the deployed microsite (or a failure) from N8N."""
    properties = await _callback_target(db, payload)
    data = payload.microsite_data or {}

    if payload.status == "completed" and payload.microsite_data and payload.deployment_info:
        deployment = payload.deployment_info
        await properties.update(
            payload.property_id, **microsite_completion(payload.job_id, data, deployment)
        )
        await db.commit()
        logger.info(
            f"Microsite deployed for property {payload.property_id}",
            extra={"live_url": deployment.get("live_url")},
        )

        features_enabled = sum(1 for on in (data.get("features") or {}).values() if on)
        await get_services().notifier.notify_microsite_complete(
            payload.agent_id,
            payload.property_id,
            {
                "microsite_url": deployment.get("live_url"),
                "preview_url": deployment.get("preview_url"),
                "admin_url": deployment.get("admin_url"),
                "template_style": data.get("template_style"),
                "features_enabled": features_enabled,
                "performance_score": deployment.get("performance_score"),
            },
        )
        return {
            "success": True,
            "message": "White-label microsite generated and deployed successfully",
            "microsite": {
                key: deployment.get(key)
                for key in ("live_url", "preview_url", "admin_url", "ssl_enabled", "performance_score")
            },
            "generation_stats": {
                "template_used": data.get("template_style"),
                "sections_generated": len(data.get("sections_generated") or []),
                "features_enabled": features_enabled,
                "generation_time_minutes": data.get("generation_duration_minutes"),
            },
        }

    if payload.status == "error":
        return await _record_failure(properties, payload, "Microsite generation failed")

    if payload.status == "processing":
        return await _record_progress(
            properties, payload, STATUS_GENERATING_MICROSITE,
            data.get("progress_percentage"), data.get("current_step"),
        )

    return _unknown_status("microsite", payload)


# ── AI images ─────────────────────────────────────────────────────

@router.post("/property/generate-images")
async def start_image_generation(
    request: ImageRequest,
    agent_id: str = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    """Start restyling the listing's photos in every interior style."""
    prop = await _owned_property(db, request.property_id, agent_id)
    if not prop.image_urls:
        raise HTTPException(status_code=400, detail="No images found for this property")

    payload = build_image_payload(
        prop.to_dict(),
        agent_id,
        await _brand(db, agent_id),
        request.regenerate,
        callback_url=_callback_url(IMAGE_CALLBACK_PATH),
        brand_name=get_services().settings.brand_name,
    )
    result = await _trigger(IMAGE_WORKFLOW, payload, "Failed to initiate AI image generation")

    await PropertyRepository(db).update(
        prop.id,
        content_generation_status=STATUS_PROCESSING_IMAGES,
        content_generation_started_at=datetime.utcnow(),
        content_generation_error=None,
        content_generation_progress=0,
    )
    logger.info(f"AI image generation started for property {prop.id}")

    return _started(
        result,
        "processing",
        "AI image generation initiated. This will take 5-10 minutes.",
        IMAGE_ESTIMATE_MINUTES,
    )


@router.get("/property/generate-images")
async def get_image_status(
    property_id: str = Query(...),
    agent_id: str = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    """Image generation status and counts per style."""
    prop = await _owned_property(db, property_id, agent_id)
    return image_status(prop.to_dict())


@router.post("/property/images/callback")
async def image_callback(
    payload: ImageCallback,
    db: AsyncSession = Depends(get_db),
):
    """Receive the restyled images (or a failure) from N8N."""
    properties = await _callback_target(db, payload)

    if payload.status == "completed" and payload.generated_images:
        updates = image_completion(payload.job_id, payload.generated_images)
        await properties.update(payload.property_id, **updates)
        logger.info(
            f"AI image generation completed for property {payload.property_id}",
            extra={"images": len(updates["generated_images"])},
        )
        return {
            "success": True,
            "message": "AI images generated successfully",
            "generated_images": len(updates["generated_images"]),
        }

    if payload.status == "error":
        return await _record_failure(properties, payload, "AI image generation failed")

    if payload.status == "processing":
        return await _record_progress(
            properties, payload, STATUS_PROCESSING_IMAGES,
            payload.progress_percentage, payload.current_step,
        )

    return _unknown_status("image", payload)
