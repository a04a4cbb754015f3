"""
N8N workflow client.

Triggers content-generation workflows hosted on an N8N instance. Each
workflow is a webhook under the configured base URL, authenticated with a
bearer API key.
"""

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

SOCIAL_CAMPAIGN_WORKFLOW = "social-campaign-generator"


class CampaignTriggerError(Exception):
    """The N8N workflow could not be started."""


class N8NClient:
    """Async client for N8N webhook workflows."""

    def __init__(
        self,
        webhook_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
    ):
        """
        Initialize the client.

        Args:
            webhook_url: Base URL of the N8N webhooks
            api_key: Bearer token sent with each trigger
            timeout: Request timeout in seconds
        """
        self.webhook_url = webhook_url.rstrip("/") if webhook_url else None
        self.api_key = api_key
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return self.webhook_url is not None

    async def trigger(self, workflow: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Start a workflow.

        Args:
            workflow: Webhook path of the workflow
            payload: JSON body

        Returns:
            The workflow's JSON reply (empty dict when it has no body)

        Raises:
            CampaignTriggerError: Not configured, transport failure, or non-2xx
        """
        if not self.enabled:
            raise CampaignTriggerError("N8N_WEBHOOK_URL is not configured")

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        url = f"{self.webhook_url}/{workflow}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"N8N request to {workflow} failed: {e}")
            raise CampaignTriggerError(str(e)) from e

        if not response.is_success:
            logger.error(f"N8N {workflow} error: {response.status_code} - {response.text}")
            raise CampaignTriggerError(f"N8N returned {response.status_code}")

        try:
            return response.json()
        except ValueError:
            return {}

    async def trigger_social_campaign(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.trigger(SOCIAL_CAMPAIGN_WORKFLOW, payload)
