"""
Chunked analysis — the state machine every module shares.

    single chunk:  one call → parse with defaults → done
    many chunks:   call per chunk, strictly in order → synthesize → done

Chunks are never fanned out in parallel.
A malformed reply on any chunk fails the whole analysis; there is no
partial result and no checkpoint to resume from.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Generic, Optional, TypeVar, Union

from epistemica.config import settings
from epistemica.llm import ProviderId
from epistemica.llm.gateway import CompletionGateway, CompletionRequest
from epistemica.text import segment_text

logger = logging.getLogger(__name__)

R = TypeVar("R")


# ============================================================
# REPLY COERCION
# ============================================================

def coerce_score(value: Any, default: float, lo: float = 0.0, hi: float = 1.0) -> float:
    """Numeric field with default for missing/invalid values, clamped to [lo, hi]."""
    if isinstance(value, bool) or value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    return max(lo, min(hi, number))


def coerce_str(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value
    return default


def coerce_str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item.strip()]


def coerce_dict_list(value: Any) -> list[dict]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def coerce_choice(value: Any, allowed: tuple[str, ...], default: str) -> str:
    if isinstance(value, str) and value.strip().lower() in allowed:
        return value.strip().lower()
    return default


def as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def mean(values: list[float]) -> float:
    return sum(values) / len(values)


def bucket(score: float, high: str, moderate: str, low: str,
           high_above: float = 0.7, moderate_above: float = 0.5) -> str:
    """Three-tier qualitative label (strictly above each threshold)."""
    if score > high_above:
        return high
    if score > moderate_above:
        return moderate
    return low


def join_rewrites(parts: list[str]) -> str:
    return "\n\n".join(parts)


# ============================================================
# ANALYZER
# ============================================================

class ChunkedAnalyzer(Generic[R]):
    """Base class: subclasses supply prompts, parse() and synthesize()."""

    module_type: str = ""
    system_prompt: str = ""
    user_template: str = ""
    temperature: float = 0.7
    max_tokens: int = 4096

    def __init__(self, gateway: CompletionGateway,
                 preferred_provider: Optional[Union[ProviderId, str]] = None):
        self.gateway = gateway
        self.preferred_provider = preferred_provider

    def build_request(self, chunk: str) -> CompletionRequest:
        return CompletionRequest(
            system_prompt=self.system_prompt,
            user_prompt=self.user_template.format(text=chunk),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

    def parse(self, data: dict, chunk: str) -> R:
        raise NotImplementedError

    def synthesize(self, results: list[R], chunks: list[str], text: str) -> R:
        raise NotImplementedError

    async def analyze_chunk(self, chunk: str) -> R:
        data = await self.gateway.complete_json(
            self.build_request(chunk), self.preferred_provider,
        )
        return self.parse(data, chunk)

    async def run(self, text: str, max_words: Optional[int] = None) -> R:
        chunks = segment_text(text, max_words or settings.CHUNK_MAX_WORDS)

        if len(chunks) == 1:
            return await self.analyze_chunk(text)

        logger.info(
            "Processing %d chunks for %s", len(chunks), self.module_type,
            extra={"module_type": self.module_type, "chunk_count": len(chunks)},
        )
        results: list[R] = []
        for index, chunk in enumerate(chunks, start=1):
            logger.info(
                "Processing chunk %d/%d", index, len(chunks),
                extra={"module_type": self.module_type,
                       "chunk_index": index, "chunk_count": len(chunks)},
            )
            results.append(await self.analyze_chunk(chunk))

        return self.synthesize(results, chunks, text)
