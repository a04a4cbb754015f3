"""
LLM Orchestration Module for the Nester property chat assistant.

This module handles:
- LLM provider abstraction (Bedrock, OpenAI)
- Prompt template management
- Chat turn orchestration with lead qualification
"""

from .orchestrator import (
    ChatOrchestrator,
    ChatRequest,
    ChatResponse,
    PropertyNotFoundError,
    SessionCreateError,
)
from .prompt_templates import PromptTemplates

__all__ = [
    "ChatOrchestrator",
    "ChatRequest",
    "ChatResponse",
    "PropertyNotFoundError",
    "SessionCreateError",
    "PromptTemplates",
]
