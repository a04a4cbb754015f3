"""
Centralized configuration for the Nester property chat service.

All settings are loaded from environment variables via .env file. Each field
reads the upper-cased variable of the same name (BRAND_NAME, APP_URL, ...).
"""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Brand
    brand_name: str = "Nester"

    # LLM provider selection
    llm_provider: str = "bedrock"  # bedrock | openai
    max_tokens: int = 1000
    temperature: float = 0.7

    # AWS / Bedrock
    aws_region: str = "us-east-1"
    bedrock_llm_model_id: str = "us.anthropic.claude-sonnet-4-20250514-v1:0"

    # OpenAI
    openai_api_key: Optional[str] = None
    openai_llm_model: str = "gpt-4o-mini"

    # Lead qualification
    lead_qualified_threshold: int = 70
    lead_contact_threshold: int = 50
    lead_notify_threshold: int = 70
    chat_history_window: int = 10

    # Database
    database_url: Optional[str] = "sqlite:///./nester.db"

    # Outbound webhooks
    app_url: Optional[str] = None
    n8n_webhook_url: Optional[str] = None
    n8n_api_key: Optional[str] = None
    http_timeout: float = 30.0

    # Generated microsites are served from {MICROSITE_DOMAIN}/{slug}
    microsite_domain: Optional[str] = None

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_version: str = "1.0.0"
    nester_api_key: Optional[str] = None
    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60
    cors_origins: str = "*"
    rate_limit_per_minute: int = 100

    # Logging
    log_level: str = "INFO"

    @property
    def is_openai(self) -> bool:
        return self.llm_provider.lower() == "openai"

    @property
    def llm_model_id(self) -> str:
        if self.is_openai:
            return self.openai_llm_model
        return self.bedrock_llm_model_id

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
