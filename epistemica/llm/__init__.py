"""
LLM Provider — Abstract Interface

All completion calls go through this interface. Concrete providers
are handed to the CompletionGateway, which owns the failover order.
"""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from enum import Enum

from epistemica.errors import MalformedReply


class ProviderId(str, Enum):
    """Known completion backends. Member order is the canonical failover order."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    DEEPSEEK = "deepseek"
    GEMINI = "gemini"


class LLMProvider(ABC):
    """Abstract base for text-completion providers."""

    name: str = "provider"

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 4096,
    ) -> str:
        """Return the raw text of one completion. Raises on any failure."""
        ...


_FENCE = re.compile(r"^```(?:json)?\s*\n?([\s\S]*?)\n?```$")


def strip_code_fence(text: str) -> str:
    """Remove a single outer ``` or ```json fence, if present."""
    cleaned = text.strip()
    match = _FENCE.match(cleaned)
    if match:
        cleaned = match.group(1).strip()
    return cleaned


def parse_json_object(text: str) -> dict:
    """Parse a completion as a JSON object, raising MalformedReply otherwise."""
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedReply(
            f"LLM returned invalid JSON: {e}. Raw response: {text[:300]}",
            raw=text,
        ) from e
    if not isinstance(parsed, dict):
        raise MalformedReply(
            f"LLM returned JSON {type(parsed).__name__}, expected an object",
            raw=text,
        )
    return parsed


__all__ = [
    "LLMProvider",
    "ProviderId",
    "strip_code_fence",
    "parse_json_object",
]
