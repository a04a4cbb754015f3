"""
Service initialization and dependency injection for the Nester API.

Creates and manages all service instances used by the API.
"""

import logging
from typing import Optional

from campaigns.n8n_client import N8NClient
from config.settings import get_settings, Settings
from lead_scoring.lead_notifier import LeadNotifier
from lead_scoring.qualification import LeadQualifier
from llm.orchestrator import ChatOrchestrator
from llm.providers import BedrockProvider, LLMClient, OpenAIProvider

logger = logging.getLogger(__name__)


class Services:
    """Container for all application services."""

    def __init__(self):
        self.settings: Optional[Settings] = None
        self.llm: Optional[LLMClient] = None
        self.qualifier: Optional[LeadQualifier] = None
        self.notifier: Optional[LeadNotifier] = None
        self.n8n: Optional[N8NClient] = None
        self.orchestrator: Optional[ChatOrchestrator] = None
        self._initialized = False

    def initialize(self):
        """Initialize all services."""
        if self._initialized:
            return

        self.settings = get_settings()
        logger.info(f"Initializing services with provider: {self.settings.llm_provider}")

        self._init_llm()
        self._init_lead_scoring()
        self._init_n8n()
        self._init_orchestrator()
        self._initialized = True
        logger.info("All services initialized")

    def _init_llm(self):
        """Initialize the LLM provider; the chat falls back to a canned reply without one."""
        s = self.settings
        try:
            if s.is_openai:
                self.llm = OpenAIProvider(
                    api_key=s.openai_api_key,
                    model_id=s.llm_model_id,
                    max_tokens=s.max_tokens,
                    temperature=s.temperature,
                )
            else:
                self.llm = BedrockProvider(
                    model_id=s.llm_model_id,
                    region=s.aws_region,
                    max_tokens=s.max_tokens,
                    temperature=s.temperature,
                )
        except Exception as e:
            logger.error(f"LLM provider initialization failed: {e}")
            logger.warning("Chat starting in degraded mode")
            self.llm = None

    def _init_lead_scoring(self):
        """Initialize lead qualification and notification."""
        s = self.settings
        self.qualifier = LeadQualifier(
            qualified_threshold=s.lead_qualified_threshold,
            contact_threshold=s.lead_contact_threshold,
            notify_threshold=s.lead_notify_threshold,
        )
        self.notifier = LeadNotifier(app_url=s.app_url, timeout=s.http_timeout)
        if not self.notifier.enabled:
            logger.warning("APP_URL not set, qualified lead notifications disabled")

    def _init_n8n(self):
        s = self.settings
        self.n8n = N8NClient(
            webhook_url=s.n8n_webhook_url,
            api_key=s.n8n_api_key,
            timeout=s.http_timeout,
        )

    def _init_orchestrator(self):
        """Initialize the chat orchestrator."""
        self.orchestrator = ChatOrchestrator(
            llm=self.llm,
            qualifier=self.qualifier,
            notifier=self.notifier,
            history_window=self.settings.chat_history_window,
            brand_name=self.settings.brand_name,
        )
        logger.info("Chat orchestrator ready")

    @property
    def is_ready(self) -> bool:
        return self._initialized and self.orchestrator is not None

    def health(self) -> dict:
        """Return health status of all services."""
        return {
            "initialized": self._initialized,
            "llm": self.llm is not None,
            "notifications": bool(self.notifier and self.notifier.enabled),
            "n8n": bool(self.n8n and self.n8n.enabled),
            "orchestrator": self.orchestrator is not None,
        }


# Singleton
_services = Services()


def get_services() -> Services:
    """Get the global services instance."""
    return _services


def initialize_services():
    """Initialize all services (called at startup)."""
    _services.initialize()
