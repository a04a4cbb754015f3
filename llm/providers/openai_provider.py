"""
OpenAI LLM Provider.
"""

import logging
from typing import List, Dict, Optional

from openai import AsyncOpenAI, OpenAIError

logger = logging.getLogger(__name__)


class OpenAIProvider:
    """OpenAI chat completions provider (GPT-4o family)."""

    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_id: str = DEFAULT_MODEL,
        max_tokens: int = 1000,
        temperature: float = 0.7
    ):
        """
        Args:
            api_key: OpenAI API key (falls back to OPENAI_API_KEY)
            model_id: Chat model
            max_tokens: Maximum tokens in the reply
            temperature: Generation temperature
        """
        self._client = AsyncOpenAI(api_key=api_key) if api_key else AsyncOpenAI()
        self.model_id = model_id
        self.max_tokens = max_tokens
        self.temperature = temperature

        logger.info(f"OpenAI provider initialized: {model_id}")

    @staticmethod
    def _messages(prompt: str, system: Optional[str]) -> List[Dict[str, str]]:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages

    async def agenerate(self, prompt: str, system: Optional[str] = None) -> str:
        """Generate a reply for the user prompt under the given system prompt."""
        try:
            response = await self._client.chat.completions.create(
                model=self.model_id,
                messages=self._messages(prompt, system),
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except OpenAIError as e:
            logger.error(f"OpenAI generation failed: {e}")
            raise

        return (response.choices[0].message.content or "").strip()
