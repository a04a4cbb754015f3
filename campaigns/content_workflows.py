"""
Listing content generated by N8N workflows: PDF brochures, white-label
microsites and AI-restyled listing images.

Each workflow follows the same round trip as the social campaign. A trigger
payload goes to the N8N webhook, the property is marked as generating, and
the workflow later posts its result to a callback that records it on the
property.
"""

import logging
import re
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional

from .social_campaign import ASPECT_RATIOS, STYLE_VARIATIONS, brand_context

logger = logging.getLogger(__name__)

BROCHURE_WORKFLOW = "brochure-generator"
MICROSITE_WORKFLOW = "microsite-generator"
IMAGE_WORKFLOW = "ai-image-generator"

# content_generation_status values
STATUS_GENERATING_BROCHURE = "generating_brochure"
STATUS_BROCHURE_COMPLETED = "brochure_completed"
STATUS_GENERATING_MICROSITE = "generating_microsite"
STATUS_MICROSITE_COMPLETED = "microsite_completed"
STATUS_PROCESSING_IMAGES = "processing_images"
STATUS_IMAGES_COMPLETED = "images_completed"

BROCHURE_ESTIMATE_MINUTES = 8
MICROSITE_ESTIMATE_MINUTES = 5
IMAGE_ESTIMATE_MINUTES = 10

BROCHURE_TEMPLATES = [
    "modern_luxury",
    "classic_elegance",
    "contemporary_bold",
    "family_friendly",
    "investment_focused",
]
MICROSITE_TEMPLATES = BROCHURE_TEMPLATES

BROCHURE_SECTIONS = [
    "cover_page",
    "property_overview",
    "feature_highlights",
    "photo_gallery",
    "floor_plan",
    "neighborhood_map",
    "market_analysis",
    "agent_profile",
    "contact_information",
]

MICROSITE_SECTIONS = [
    "hero_gallery",
    "property_overview",
    "features_amenities",
    "photo_gallery",
    "neighborhood_info",
    "virtual_tour",
    "contact_form",
    "agent_profile",
    "similar_properties",
]

MICROSITE_FEATURES = [
    "chat_widget",
    "contact_forms",
    "virtual_tour",
    "photo_gallery",
    "neighborhood_map",
    "mortgage_calculator",
    "social_sharing",
]

IMAGE_STYLES = STYLE_VARIATIONS

EMPTY_MICROSITE_ANALYTICS = {
    "total_visits": 0,
    "unique_visitors": 0,
    "page_views": 0,
    "average_session_duration": 0,
    "bounce_rate": 0,
    "conversion_rate": 0,
    "lead_captures": 0,
}

LISTING_FIELDS = (
    "address", "price", "bedrooms", "bathrooms", "square_feet", "property_type",
    "listing_status", "year_built", "description", "features", "neighborhood_info",
)


def _listing(property_info: Dict[str, Any]) -> Dict[str, Any]:
    data = {key: property_info.get(key) for key in LISTING_FIELDS}
    price, sqft = property_info.get("price"), property_info.get("square_feet")
    data["price_per_sqft"] = round(price / sqft, 2) if price and sqft else None
    data["images"] = [
        {"url": url, "is_primary": i == 0}
        for i, url in enumerate(property_info.get("image_urls") or [])
    ]
    return data


def _enabled(settings: Dict[str, Any], key: str) -> bool:
    """Options that are on unless explicitly set to False."""
    return settings.get(key) is not False


# ── Brochure ──────────────────────────────────────────────────────

def build_brochure_payload(
    property_info: Dict[str, Any],
    agent_id: str,
    brand: Optional[Dict[str, Any]],
    brochure_settings: Optional[Dict[str, Any]],
    callback_url: str,
    brand_name: str = "Nester",
) -> Dict[str, Any]:
    """
    Build the N8N brochure generation payload.

    Args:
        property_info: Property fields
        agent_id: Owning agent
        brand: Agent brand row as a dict, if any
        brochure_settings: Layout, section and output options
        callback_url: Where N8N posts the generated files
        brand_name: Company name used when the agent has no brand
    """
    s = brochure_settings or {}
    return {
        "property_id": property_info["id"],
        "agent_id": agent_id,
        "property_data": _listing(property_info),
        "brand_context": brand_context(brand, brand_name),
        "brochure_specifications": {
            "template_style": s.get("template_style") or "modern_luxury",
            "page_count": s.get("page_count") or "auto",
            "orientation": s.get("orientation") or "portrait",
            "size": s.get("size") or "letter",
            "include_sections": s.get("include_sections") or BROCHURE_SECTIONS,
            "color_scheme": s.get("color_scheme") or "brand_colors",
            "typography": s.get("typography") or "modern_serif",
            "content_density": s.get("content_density") or "balanced",
            "include_qr_code": _enabled(s, "include_qr_code"),
            "include_virtual_tour_link": _enabled(s, "include_virtual_tour_link"),
            "include_social_media": _enabled(s, "include_social_media"),
            "watermark_protection": bool(s.get("watermark_protection")),
        },
        "output_formats": {
            "pdf_high_quality": True,
            "pdf_web_optimized": True,
            "interactive_flipbook": _enabled(s, "generate_flipbook"),
            "social_media_snippets": bool(s.get("generate_social_snippets")),
            "email_friendly_version": bool(s.get("generate_email_version")),
        },
        "callback_url": callback_url,
    }


def brochure_details(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Summary returned when brochure generation starts."""
    spec = payload["brochure_specifications"]
    return {
        "template_style": spec["template_style"],
        "estimated_pages": spec["page_count"],
        "output_formats": [k for k, on in payload["output_formats"].items() if on],
        "brand_customization": payload["brand_context"]["white_label_enabled"],
        "ai_enhanced": True,
    }


def brochure_completion(
    job_id: Optional[str],
    files: Dict[str, Any],
    metadata: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    """Property column updates for a finished brochure."""
    metadata = metadata or {}
    return {
        "content_generation_status": STATUS_BROCHURE_COMPLETED,
        "content_generation_completed_at": datetime.utcnow(),
        "content_generation_progress": 100,
        "brochure_pdf_url": files.get("pdf_high_quality"),
        "brochure_flipbook_url": files.get("interactive_flipbook"),
        "brochure_generation_metadata": {
            "job_id": job_id,
            "template_style": metadata.get("template_style"),
            "page_count": metadata.get("page_count"),
            "file_sizes": metadata.get("file_sizes") or {},
            "generation_duration_minutes": metadata.get("generation_duration_minutes"),
            "quality_score": metadata.get("quality_score") or 0,
            "web_pdf_url": files.get("pdf_web_optimized"),
            "social_snippets_urls": files.get("social_media_snippets"),
            "email_version_url": files.get("email_friendly_version"),
            "cover_preview_url": files.get("cover_preview"),
            "page_thumbnails": files.get("page_thumbnails") or [],
            "completed_at": datetime.utcnow().isoformat(),
        },
    }


def brochure_status(info: Dict[str, Any]) -> Dict[str, Any]:
    status = info.get("content_generation_status") or ""
    if "brochure" not in status:
        status = "completed" if info.get("brochure_pdf_url") else "not_started"

    metadata = info.get("brochure_generation_metadata") or {}
    return {
        "property_id": info["id"],
        "status": status,
        "started_at": info.get("content_generation_started_at"),
        "downloads": {
            "pdf_high_quality": info.get("brochure_pdf_url"),
            "interactive_flipbook": info.get("brochure_flipbook_url"),
            "web_optimized_pdf": metadata.get("web_pdf_url"),
            "social_snippets": metadata.get("social_snippets_urls"),
        },
        "generation_details": metadata or None,
    }


# ── Microsite ─────────────────────────────────────────────────────

def microsite_slug(address: str, property_id: str) -> str:
    """URL slug from the address plus the first 8 chars of the property id."""
    clean = re.sub(r"[^a-z0-9\s]", "", (address or "").lower())
    clean = re.sub(r"\s+", "-", clean)[:50]
    return f"{clean}-{property_id[:8]}"


def seo_keywords(property_info: Dict[str, Any], company_name: str) -> List[str]:
    address_parts = (property_info.get("address") or "").split(",")
    keywords = [
        property_info.get("property_type"),
        "for sale",
        address_parts[1].strip() if len(address_parts) > 1 else None,
        f"{property_info['bedrooms']} bedroom" if property_info.get("bedrooms") else None,
        f"{property_info['bathrooms']:g} bathroom" if property_info.get("bathrooms") else None,
        company_name,
        "home",
        "house",
        "property",
    ]
    keywords = [k for k in keywords if k]
    keywords.extend((property_info.get("features") or [])[:5])
    return keywords


def build_microsite_payload(
    property_info: Dict[str, Any],
    agent_id: str,
    brand: Optional[Dict[str, Any]],
    microsite_settings: Optional[Dict[str, Any]],
    slug: str,
    microsite_url: Optional[str],
    callback_url: str,
    brand_name: str = "Nester",
) -> Dict[str, Any]:
    """Build the N8N microsite generation and deployment payload."""
    s = microsite_settings or {}
    brand = brand or {}
    context = brand_context(brand, brand_name)
    context.update({
        "agent_name": brand.get("agent_name") or "Real Estate Professional",
        "agent_phone": brand.get("agent_phone"),
        "agent_email": brand.get("agent_email"),
        "agent_website": brand.get("agent_website"),
        "hide_nester_branding": context["brand_tier"] == "enterprise",
        "custom_domain_enabled": context["brand_tier"] == "enterprise",
    })

    description = property_info.get("description")
    configuration = {
        "template_style": s.get("template_style") or "modern_luxury",
        "layout_type": s.get("layout_type") or "single_page",
        "hero_style": s.get("hero_style") or "full_screen_gallery",
        "enabled_sections": s.get("enabled_sections") or MICROSITE_SECTIONS,
        "seo_optimization": {
            "meta_title": f"{property_info.get('address')} - {context['company_name']}",
            "meta_description": description[:160] if description
            else f"Beautiful {property_info.get('property_type')} for sale",
            "keywords": seo_keywords(property_info, context["company_name"]),
            "structured_data": True,
        },
        "lead_capture": {
            "contact_form_style": s.get("contact_form_style") or "floating_button",
            "required_fields": s.get("required_fields") or ["name", "email", "phone"],
            "auto_responder_enabled": _enabled(s, "auto_responder_enabled"),
            "lead_notification_email": brand.get("agent_email"),
        },
    }
    for feature in MICROSITE_FEATURES:
        configuration[f"enable_{feature}"] = _enabled(s, f"enable_{feature}")

    return {
        "property_id": property_info["id"],
        "agent_id": agent_id,
        "microsite_slug": slug,
        "microsite_url": microsite_url,
        "property_data": _listing(property_info),
        "brand_configuration": context,
        "microsite_configuration": configuration,
        "callback_url": callback_url,
    }


def microsite_details(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Summary returned when microsite generation starts."""
    config = payload["microsite_configuration"]
    return {
        "template_style": config["template_style"],
        "white_label_enabled": payload["brand_configuration"]["white_label_enabled"],
        "sections_count": len(config["enabled_sections"]),
        "interactive_features": sum(
            1 for key, on in config.items() if key.startswith("enable_") and on
        ),
        "seo_optimized": True,
        "mobile_responsive": True,
    }


def microsite_completion(
    job_id: Optional[str],
    microsite_data: Dict[str, Any],
    deployment_info: Dict[str, Any],
) -> Dict[str, Any]:
    """Property column updates for a deployed microsite."""
    features = microsite_data.get("features") or {}
    updates = {
        "content_generation_status": STATUS_MICROSITE_COMPLETED,
        "content_generation_completed_at": datetime.utcnow(),
        "content_generation_progress": 100,
        "microsite_generation_metadata": {
            "job_id": job_id,
            "deployment_info": {
                key: deployment_info.get(key)
                for key in ("live_url", "preview_url", "admin_url", "deployment_id", "domain")
            },
            "template_used": microsite_data.get("template_style"),
            "sections_generated": microsite_data.get("sections_generated") or [],
            "features_enabled": sorted(k for k, on in features.items() if on),
            "performance_score": deployment_info.get("performance_score"),
            "generation_duration_minutes": microsite_data.get("generation_duration_minutes"),
            "completed_at": datetime.utcnow().isoformat(),
        },
        "microsite_analytics": dict(EMPTY_MICROSITE_ANALYTICS),
    }
    # The deployed URL replaces the planned one; a missing value keeps it
    if deployment_info.get("live_url"):
        updates["microsite_url"] = deployment_info["live_url"]
    if deployment_info.get("slug"):
        updates["microsite_slug"] = deployment_info["slug"]
    return updates


def microsite_engagement(
    sessions: List[Dict[str, Any]],
    qualified_score: int = 70,
) -> Dict[str, Any]:
    """Chat engagement on a microsite, from the property's chat sessions."""
    scores = [s.get("lead_qualification_score") or 0 for s in sessions]
    return {
        "chat_sessions": len(sessions),
        "qualified_leads": sum(1 for score in scores if score >= qualified_score),
        "total_messages": sum(s.get("total_messages") or 0 for s in sessions),
        "average_lead_score": round(sum(scores) / len(scores), 1) if scores else 0,
    }


def microsite_status(
    info: Dict[str, Any],
    sessions: List[Dict[str, Any]],
    qualified_score: int = 70,
) -> Dict[str, Any]:
    status = info.get("content_generation_status") or ""
    if "microsite" not in status:
        status = "completed" if info.get("microsite_url") else "not_started"

    return {
        "property_id": info["id"],
        "microsite_url": info.get("microsite_url"),
        "microsite_slug": info.get("microsite_slug"),
        "status": status,
        "started_at": info.get("microsite_generation_started_at"),
        "analytics": info.get("microsite_analytics") or dict(EMPTY_MICROSITE_ANALYTICS),
        "engagement": microsite_engagement(sessions, qualified_score),
        "recent_visitors": [
            {
                "session_id": s["id"],
                "started_at": s.get("created_at"),
                "lead_score": s.get("lead_qualification_score"),
                "interests": s.get("identified_interests"),
                "location": (s.get("visitor_info") or {}).get("location"),
                "device": (s.get("visitor_info") or {}).get("device_type"),
            }
            for s in sessions[:5]
        ],
    }


# ── AI images ─────────────────────────────────────────────────────

def build_image_payload(
    property_info: Dict[str, Any],
    agent_id: str,
    brand: Optional[Dict[str, Any]],
    regenerate: bool,
    callback_url: str,
    brand_name: str = "Nester",
) -> Dict[str, Any]:
    """Build the N8N virtual-staging payload: every listing image in every style."""
    context = brand_context(brand, brand_name)
    return {
        "property_id": property_info["id"],
        "agent_id": agent_id,
        "property_data": {
            key: property_info.get(key)
            for key in ("address", "property_type", "description", "features")
        },
        "brand_context": {
            "company_name": context["company_name"],
            "brand_tier": context["brand_tier"],
        },
        "images": _listing(property_info)["images"],
        "styles": IMAGE_STYLES,
        "aspect_ratios": ASPECT_RATIOS,
        "regenerate": regenerate,
        "callback_url": callback_url,
    }


def image_completion(job_id: Optional[str], generated: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Property column updates once restyled images arrive."""
    images = [
        {
            "url": img.get("url"),
            "style": img.get("style"),
            "aspect_ratio": img.get("aspect_ratio"),
            "source_url": img.get("source_url"),
            "job_id": job_id,
        }
        for img in generated
        if img.get("url")
    ]
    return {
        "content_generation_status": STATUS_IMAGES_COMPLETED,
        "content_generation_completed_at": datetime.utcnow(),
        "content_generation_progress": 100,
        "generated_images": images,
    }


def image_status(info: Dict[str, Any]) -> Dict[str, Any]:
    generated = info.get("generated_images") or []
    counts = Counter(img.get("style") for img in generated)
    by_style = {style: counts.get(style, 0) for style in IMAGE_STYLES}
    total = sum(by_style.values())
    originals = len(info.get("image_urls") or [])

    return {
        "property_id": info["id"],
        "status": info.get("content_generation_status") or "not_started",
        "started_at": info.get("content_generation_started_at"),
        "original_images": originals,
        "generated_images": total,
        "images_by_style": by_style,
        "completion_percentage": (
            round(total / (originals * len(IMAGE_STYLES)) * 100) if originals else 0
        ),
    }
