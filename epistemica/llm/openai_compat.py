"""
OpenAI-compatible Providers — OpenAI and DeepSeek.

DeepSeek exposes an OpenAI-compatible chat completions API, so both
providers share one implementation and differ by base URL and model.
"""

from __future__ import annotations

import os
from typing import Optional

from openai import AsyncOpenAI

from epistemica.llm import LLMProvider


class OpenAIProvider(LLMProvider):
    """Chat-completions provider for OpenAI."""

    name = "openai"
    _key_env = "OPENAI_API_KEY"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        self._api_key = api_key or os.getenv(self._key_env, "")
        self._model = model or self._default_model()
        self._base_url = base_url
        self._client: Optional[AsyncOpenAI] = None

    def _default_model(self) -> str:
        return os.getenv("OPENAI_MODEL", "gpt-4o")

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._api_key:
                raise RuntimeError(f"{self._key_env} is not configured")
            self._client = AsyncOpenAI(api_key=self._api_key, base_url=self._base_url)
        return self._client

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 4096,
    ) -> str:
        completion = await self._get_client().chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )

        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            raise RuntimeError(f"No response from {self.name}")
        return content


class DeepSeekProvider(OpenAIProvider):
    """DeepSeek through its OpenAI-compatible endpoint."""

    name = "deepseek"
    _key_env = "DEEPSEEK_API_KEY"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        super().__init__(
            api_key=api_key,
            model=model,
            base_url=base_url or os.getenv("DEEPSEEK_BASE_URL", "https://api.deepseek.com"),
        )

    def _default_model(self) -> str:
        return os.getenv("DEEPSEEK_MODEL", "deepseek-chat")
