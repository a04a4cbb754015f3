"""
Qualified lead notifier.

Posts qualified-lead and content-complete events to the notifications
endpoint of the app. Delivery is best effort: failures are logged and
reported as False, never raised.
"""

import logging
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

QUALIFIED_LEAD_PATH = "/api/notifications/qualified-lead"
CAMPAIGN_COMPLETE_PATH = "/api/notifications/social-campaign-complete"
BROCHURE_COMPLETE_PATH = "/api/notifications/brochure-complete"
MICROSITE_COMPLETE_PATH = "/api/notifications/microsite-complete"


@dataclass
class QualifiedLead:
    """Payload describing a lead that crossed the notification threshold."""
    agent_id: str
    property_id: str
    session_id: str
    lead_score: int
    visitor_info: Dict[str, Any] = field(default_factory=dict)
    key_interests: List[str] = field(default_factory=list)
    conversation_summary: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class LeadNotifier:
    """
    Sends agent notifications to the app's notification endpoints.

    No retries; one attempt per event.
    """

    def __init__(
        self,
        app_url: Optional[str] = None,
        timeout: float = 30.0,
    ):
        """
        Initialize the notifier.

        Args:
            app_url: Base URL of the app hosting the notification endpoints
            timeout: Request timeout in seconds
        """
        self.app_url = app_url.rstrip("/") if app_url else None
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return self.app_url is not None

    async def notify_qualified_lead(self, lead: QualifiedLead) -> bool:
        """
        Tell the agent about a qualified lead.

        Returns:
            True if the endpoint accepted the notification
        """
        return await self._post(QUALIFIED_LEAD_PATH, lead.to_dict())

    async def notify_campaign_complete(
        self,
        agent_id: str,
        property_id: str,
        total_posts: int,
        campaign_duration: int,
        platforms: int,
    ) -> bool:
        """Tell the agent a social campaign finished generating."""
        return await self._post(CAMPAIGN_COMPLETE_PATH, {
            "agent_id": agent_id,
            "property_id": property_id,
            "total_posts": total_posts,
            "campaign_duration": campaign_duration,
            "platforms": platforms,
        })

    async def notify_brochure_complete(
        self, agent_id: str, property_id: str, details: Dict[str, Any]
    ) -> bool:
        return await self._post(
            BROCHURE_COMPLETE_PATH,
            {"agent_id": agent_id, "property_id": property_id, **details},
        )

    async def notify_microsite_complete(
        self, agent_id: str, property_id: str, details: Dict[str, Any]
    ) -> bool:
        return await self._post(
            MICROSITE_COMPLETE_PATH,
            {"agent_id": agent_id, "property_id": property_id, **details},
        )

    async def _post(self, path: str, payload: Dict[str, Any]) -> bool:
        if not self.enabled:
            logger.warning(f"No app URL configured, notification to {path} not sent")
            return False

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(f"{self.app_url}{path}", json=payload)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to send notification to {path}: {e}")
            return False

        logger.info(f"Notification delivered to {path}")
        return True
