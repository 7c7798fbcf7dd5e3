"""
Anthropic Provider — Claude messages API.

Client is lazily initialized; a missing key fails the call, not the import.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from anthropic import AsyncAnthropic

from epistemica.llm import LLMProvider

logger = logging.getLogger(__name__)


class AnthropicProvider(LLMProvider):
    """Claude completion provider."""

    name = "anthropic"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        self._api_key = api_key or os.getenv("ANTHROPIC_API_KEY", "")
        self._model = model or os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-5")
        self._base_url = base_url or os.getenv("ANTHROPIC_BASE_URL") or None
        self._client: Optional[AsyncAnthropic] = None

    def _get_client(self) -> AsyncAnthropic:
        if self._client is None:
            if not self._api_key:
                raise RuntimeError("ANTHROPIC_API_KEY is not configured")
            self._client = AsyncAnthropic(
                api_key=self._api_key, base_url=self._base_url,
            )
        return self._client

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 4096,
    ) -> str:
        message = await self._get_client().messages.create(
            model=self._model,
            max_tokens=max_tokens,
            temperature=temperature,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )

        if message.usage:
            logger.debug(
                "[TOKENS] %s - Input: %d, Output: %d",
                self._model, message.usage.input_tokens, message.usage.output_tokens,
            )

        content = message.content[0] if message.content else None
        if content is not None and content.type == "text":
            return content.text

        raise RuntimeError("Unexpected response format from Anthropic")
