"""
Agent dashboard statistics.

Aggregates an agent's listings and chat sessions into the headline numbers
shown on the dashboard.
"""

import logging
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

QUALIFIED_SCORE = 70


def _status_count(properties: List[Dict[str, Any]], predicate) -> int:
    return sum(1 for p in properties if predicate(p.get("content_generation_status") or ""))


def compute_dashboard_stats(
    properties: List[Dict[str, Any]],
    sessions: List[Dict[str, Any]],
    qualified_score: int = QUALIFIED_SCORE,
) -> Dict[str, Any]:
    """
    Compute dashboard statistics.

    Args:
        properties: The agent's properties as dicts
        sessions: Chat sessions on those properties as dicts
        qualified_score: Score at which a session counts as a qualified lead

    Returns:
        Dict of stats; rates and averages are 0 when there is nothing to average
    """
    prices = [p["price"] for p in properties if p.get("price") is not None]
    scores = [s.get("lead_qualification_score") or 0 for s in sessions]

    total_leads = len(sessions)
    qualified_leads = sum(1 for score in scores if score >= qualified_score)

    return {
        "total_properties": len(properties),
        "active_listings": sum(1 for p in properties if p.get("listing_status") == "active"),
        "average_price": round(sum(prices) / len(prices), 2) if prices else 0,
        "content_generated": _status_count(
            properties, lambda status: bool(status) and "not_started" not in status
        ),
        "microsites_live": _status_count(properties, lambda status: status == "microsite_completed"),
        "images_generated": _status_count(properties, lambda status: "images_completed" in status),
        "brochures_created": _status_count(properties, lambda status: status == "brochure_completed"),
        "active_campaigns": _status_count(
            properties, lambda status: status == "social_campaign_completed"
        ),
        "total_leads": total_leads,
        "qualified_leads": qualified_leads,
        "conversion_rate": round(qualified_leads / total_leads * 100, 1) if total_leads else 0,
        "average_lead_score": round(sum(scores) / total_leads, 1) if total_leads else 0,
    }
