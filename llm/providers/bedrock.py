"""
AWS Bedrock LLM Provider.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "bedrock-2023-05-31"


class BedrockProvider:
    """
    Claude on AWS Bedrock.

    boto3 is blocking; `agenerate` runs the invoke in a worker thread.
    """

    DEFAULT_MODEL = "us.anthropic.claude-sonnet-4-20250514-v1:0"

    def __init__(
        self,
        model_id: str = DEFAULT_MODEL,
        region: str = "us-east-1",
        max_tokens: int = 1000,
        temperature: float = 0.7
    ):
        self.model_id = model_id
        self.region = region
        self.max_tokens = max_tokens
        self.temperature = temperature

        self._client = boto3.client("bedrock-runtime", region_name=region)
        logger.info(f"Bedrock provider initialized: {model_id} in {region}")

    def _body(self, prompt: str, system: Optional[str]) -> Dict[str, Any]:
        body = {
            "anthropic_version": ANTHROPIC_VERSION,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [
                {"role": "user", "content": [{"type": "text", "text": prompt}]}
            ],
        }
        if system:
            body["system"] = system
        return body

    def generate(self, prompt: str, system: Optional[str] = None) -> str:
        """
        Invoke the model once.

        Returns:
            The first text block of the reply, or "" when there is none
        """
        try:
            response = self._client.invoke_model(
                modelId=self.model_id,
                body=json.dumps(self._body(prompt, system)),
                contentType="application/json",
                accept="application/json",
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Bedrock API error: {e}")
            raise

        content = json.loads(response["body"].read()).get("content") or []
        if content and content[0].get("type") == "text":
            return content[0]["text"].strip()

        logger.warning("Empty response from Bedrock")
        return ""

    async def agenerate(self, prompt: str, system: Optional[str] = None) -> str:
        return await asyncio.to_thread(self.generate, prompt, system)
