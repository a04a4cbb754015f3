"""
LLM Provider implementations.
"""

from typing import Optional, Protocol

from .bedrock import BedrockProvider
from .openai_provider import OpenAIProvider


class LLMClient(Protocol):
    """What the chat orchestrator needs from a provider."""

    async def agenerate(self, prompt: str, system: Optional[str] = None) -> str:
        ...


__all__ = ["BedrockProvider", "OpenAIProvider", "LLMClient"]
