"""
Argument Gate — is this text argumentative at all?

A regex over inference markers settles the common case for free.
Only inconclusive text goes to the completion backend. The gate is
advisory: when the AI path fails it returns a permissive default,
and the failure is carried on the returned Detection instead of
being raised.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

from epistemica import prompts
from epistemica.errors import DetectionError
from epistemica.llm import ProviderId
from epistemica.llm.gateway import CompletionGateway, CompletionRequest
from epistemica.modules.base import coerce_score, coerce_str

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Detection(Generic[T]):
    """
    Outcome of an advisory detector.

    `value` is always the effective value to act on. When the detector
    had to fall back to its default, `error` says why.
    """
    value: T
    error: Optional[DetectionError] = None

    @property
    def degraded(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class ArgumentDetection:
    is_argumentative: bool
    confidence: float
    reasoning: str

    def to_dict(self) -> dict:
        return {
            "isArgumentative": self.is_argumentative,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
        }


INFERENCE_MARKERS = re.compile(
    r"\b(therefore|thus|hence|consequently|because|since|as|implies|"
    r"suggests?|indicates?|shows?|proves?|demonstrates?|leads? to|"
    r"causes?|results? in)\b",
    re.IGNORECASE,
)

HEURISTIC_DETECTION = ArgumentDetection(
    is_argumentative=True,
    confidence=0.9,
    reasoning="Contains explicit inference markers",
)

UNAVAILABLE_DETECTION = ArgumentDetection(
    is_argumentative=True,
    confidence=0.5,
    reasoning="Detection service unavailable, proceeding with analysis",
)


def has_inference_markers(text: str) -> bool:
    return INFERENCE_MARKERS.search(text) is not None


async def detect_argument(
    text: str,
    gateway: CompletionGateway,
    preferred_provider: Optional[Union[ProviderId, str]] = None,
) -> Detection[ArgumentDetection]:
    """Classify text as argumentative or not. Never raises."""
    if has_inference_markers(text):
        return Detection(HEURISTIC_DETECTION)

    request = CompletionRequest(
        system_prompt=prompts.ARGUMENT_DETECTION_SYSTEM,
        user_prompt=prompts.ARGUMENT_DETECTION_USER.format(text=text),
        temperature=0.2,
        max_tokens=500,
    )
    try:
        data = await gateway.complete_json(request, preferred_provider)
    except Exception as e:
        logger.warning(
            "Argument detection failed: %s", e,
            extra={"error": str(e), "error_type": type(e).__name__},
        )
        return Detection(
            UNAVAILABLE_DETECTION,
            DetectionError(f"Argument detection failed: {e}", cause=e),
        )

    flag = data.get("isArgumentative")
    return Detection(ArgumentDetection(
        is_argumentative=flag if isinstance(flag, bool) else True,
        confidence=coerce_score(data.get("confidence"), 0.5),
        reasoning=coerce_str(data.get("reasoning"), "Unable to determine"),
    ))
