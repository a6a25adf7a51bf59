"""Qwen (DashScope) LLM client for the agent pipeline.

One completion per call, fixed sampling parameters. Failures never raise:
they come back as a failed ``GenerationOutcome`` whose text is the diagnostic,
so the next pipeline stage still has something to read.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ... import config
from ...schemas.chat import GenerationOutcome

logger = logging.getLogger(__name__)

NO_RESPONSE_PLACEHOLDER = "Qwen APIからの応答を取得できませんでした"
ERROR_PREFIX = "Qwen API接続エラー"


def extract_completion_text(data: Any) -> Optional[str]:
    """Pull the generated text out of a DashScope response envelope.

    Accepts both ``output.text`` and ``output.choices[0].message.content``.
    Returns None when neither is present.
    """
    output = data.get("output") if isinstance(data, dict) else None
    if not isinstance(output, dict):
        return None

    text = output.get("text")
    if isinstance(text, str) and text:
        return text

    choices = output.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        message = choices[0].get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if isinstance(content, str) and content:
            return content

    return None


class GenerationClient:
    """Thin wrapper around a single text-generation completion call."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = config.LLM_TEMPERATURE,
        max_tokens: int = config.LLM_MAX_TOKENS,
        timeout: float = config.LLM_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else config.QWEN_API_KEY
        self.api_url = api_url or config.QWEN_API_URL
        self.model = model or config.QWEN_MODEL
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "input": {
                "messages": [
                    {"role": "user", "content": prompt},
                ],
            },
            "parameters": {
                "temperature": self.temperature,
                "max_tokens": self.max_tokens,
            },
        }

    def _failed(self, reason: str) -> GenerationOutcome:
        return GenerationOutcome(text=f"{ERROR_PREFIX}: {reason}", failed=True)

    async def generate(self, prompt: str) -> GenerationOutcome:
        """Run one completion.

        Args:
            prompt: The full prompt, sent as a single user message

        Returns:
            GenerationOutcome with the generated text, or ``failed=True`` and
            a diagnostic string
        """
        if not self.is_configured:
            logger.warning("[LLM] QWEN_API_KEY not configured, skipping API call")
            return self._failed("Qwen API key not configured")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.api_url, json=self._build_payload(prompt), headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"[LLM] HTTP error: {e.response.status_code}")
            return self._failed(f"Qwen API error: {e.response.status_code}")
        except Exception as e:
            logger.exception(f"[LLM] Exception during API call: {e}")
            return self._failed(str(e) or e.__class__.__name__)

        text = extract_completion_text(data)
        if text is None:
            logger.warning("[LLM] Response envelope had no completion text")
            return GenerationOutcome(text=NO_RESPONSE_PLACEHOLDER, failed=True)
        return GenerationOutcome(text=text)


# Global client instance
_client: Optional[GenerationClient] = None


def get_generation_client() -> GenerationClient:
    """Get or create the global generation client."""
    global _client
    if _client is None:
        _client = GenerationClient()
    return _client
