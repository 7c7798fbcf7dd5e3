"""
Stance Extractor — where does the text stand on laws of nature?

Four independent rule-based scorers (law kind, explanation order,
DN commitment, regularity role). Each counts how many of a
category's patterns match; the category with the most matches wins
and ties go to the category listed first. When the four scorers are
not confident enough on average, the rule tokens are discarded and
the completion backend is asked instead.

Extraction is total: backend failures fall back to an all-unclear
stance carried on a Detection, never an exception.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass
from typing import Optional, Union

from epistemica import prompts
from epistemica.detector import Detection
from epistemica.errors import DetectionError
from epistemica.llm import ProviderId
from epistemica.llm.gateway import CompletionGateway, CompletionRequest
from epistemica.modules.base import coerce_choice, coerce_score

logger = logging.getLogger(__name__)

RULE_CONFIDENCE_THRESHOLD = 0.6
NO_MATCH_CONFIDENCE = 0.3


@dataclass(frozen=True)
class StanceTokens:
    law_kind: str = "unclear"
    explanation_order: str = "unclear"
    dn_commitment: str = "neutral"
    regularity_role: str = "unclear"
    confidence: float = 0.5

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class StanceScore:
    value: str
    confidence: float


class StanceScorer:
    """
    One stance dimension.

    categories maps each candidate value to its patterns; dict order
    is the tie-break order.
    """

    def __init__(self, dimension: str, categories: dict[str, list[str]], fallback: str):
        self.dimension = dimension
        self.fallback = fallback
        self.categories = {
            value: [re.compile(p, re.IGNORECASE) for p in patterns]
            for value, patterns in categories.items()
        }

    @property
    def values(self) -> tuple[str, ...]:
        return tuple(self.categories) + (self.fallback,)

    def score(self, text: str) -> StanceScore:
        counts = {
            value: sum(1 for p in patterns if p.search(text))
            for value, patterns in self.categories.items()
        }
        best = max(counts.values())
        if best == 0:
            return StanceScore(self.fallback, NO_MATCH_CONFIDENCE)

        # ties: first category in dict order
        winner = next(value for value, count in counts.items() if count == best)
        return StanceScore(winner, min(0.9, 0.6 + 0.1 * best))


LAW_KIND = StanceScorer(
    "law_kind",
    {
        "universal_regularities": [
            r"\b(universal|exceptionless)\s+(regularity|regularities|law|laws)",
            r"laws?\s+(are|as)\s+(universal|exceptionless)\s+regularity",
            r"constant\s+conjunction",
            r"humean\s+regularity",
        ],
        "proportional_dependencies": [
            r"proportional\s+(dependenc|constraint|relationship)",
            r"dispositional\s+(law|property|properties)",
            r"causal\s+power",
            r"law\s+(?:encodes|expresses|quantifies)\s+proportion",
        ],
        "probabilistic_nomic": [
            r"probabilistic\s+(law|nomic)",
            r"statistical\s+law",
            r"ratio\s+under\s+uncertainty",
        ],
    },
    fallback="unclear",
)

EXPLANATION_ORDER = StanceScorer(
    "explanation_order",
    {
        "instance_to_law": [
            r"instance\s+(?:first|before|precedes)\s+law",
            r"singular\s+(?:causal|cause)\s+(?:first|before|recognition)",
            r"(?:we|one)\s+learn(?:s)?\s+(?:singular|individual)\s+(?:cases?|instances?)\s+(?:before|first)",
            r"law\s+(?:quantifies|generalizes|abstracts)\s+(?:from\s+)?(?:singular|individual|particular)",
        ],
        "law_to_instance": [
            r"\b(?:subsume|subsumption|subsuming)\b",
            r"law\s+(?:explains|predicts)\s+(?:the\s+)?instance",
            r"explain(?:ing)?\s+by\s+(?:deduction|deriving)",
            r"dn\s+(?:model|explanation|framework)",
        ],
    },
    fallback="unclear",
)

DN_COMMITMENT = StanceScorer(
    "dn_commitment",
    {
        "accept": [
            r"dn\s+(?:is|provides|offers)\s+(?:correct|valid|adequate)",
            r"deductive[- ]nomological\s+(?:is|provides|offers)\s+(?:correct|valid|adequate)",
            r"hempel\s+(?:is|was)\s+(?:correct|right)",
            r"covering[- ]law\s+(?:model|account)\s+(?:is|provides)",
        ],
        "reject": [
            r"dn\s+(?:is|model)\s+(?:rejected|mistaken|wrong|flawed|inadequate)",
            r"deductive[- ]nomological\s+(?:is|model)\s+(?:rejected|mistaken|wrong|flawed)",
            r"(?:reject|rejecting)\s+(?:the\s+)?dn",
            r"hempel\s+(?:is|was)\s+(?:mistaken|wrong)",
        ],
    },
    fallback="neutral",
)

REGULARITY_ROLE = StanceScorer(
    "regularity_role",
    {
        "surface": [
            r"regularit(?:y|ies)\s+(?:are|is)\s+(?:the\s+)?(?:surface|shadow|derivative|consequence)",
            r"regularit(?:y|ies)\s+(?:follow|result)\s+from",
            r"not\s+constitutive",
        ],
        "foundational": [
            r"regularit(?:y|ies)\s+(?:are|is)\s+(?:the\s+)?(?:foundation|basis|ground)",
            r"regularit(?:y|ies)\s+(?:constitute|constitutive)",
            r"(?:laws?\s+are|laws?\s+as)\s+regularit",
        ],
    },
    fallback="unclear",
)

SCORERS = (LAW_KIND, EXPLANATION_ORDER, DN_COMMITMENT, REGULARITY_ROLE)

UNAVAILABLE_STANCE = StanceTokens(confidence=0.5)


def extract_rule_based(text: str) -> tuple[StanceTokens, dict[str, StanceScore]]:
    """Run the four scorers; return the tokens and each dimension's score."""
    scores = {scorer.dimension: scorer.score(text) for scorer in SCORERS}
    avg = sum(s.confidence for s in scores.values()) / len(scores)
    tokens = StanceTokens(
        law_kind=scores["law_kind"].value,
        explanation_order=scores["explanation_order"].value,
        dn_commitment=scores["dn_commitment"].value,
        regularity_role=scores["regularity_role"].value,
        confidence=avg,
    )
    return tokens, scores


def _tokens_from_reply(data: dict) -> StanceTokens:
    return StanceTokens(
        law_kind=coerce_choice(data.get("law_kind"), LAW_KIND.values, "unclear"),
        explanation_order=coerce_choice(
            data.get("explanation_order"), EXPLANATION_ORDER.values, "unclear",
        ),
        dn_commitment=coerce_choice(data.get("dn_commitment"), DN_COMMITMENT.values, "neutral"),
        regularity_role=coerce_choice(
            data.get("regularity_role"), REGULARITY_ROLE.values, "unclear",
        ),
        confidence=coerce_score(data.get("confidence"), 0.5),
    )


async def extract_stance(
    text: str,
    gateway: CompletionGateway,
    preferred_provider: Optional[Union[ProviderId, str]] = None,
) -> Detection[StanceTokens]:
    """Rule-based stance when confident, backend stance otherwise. Never raises."""
    tokens, _ = extract_rule_based(text)
    if tokens.confidence >= RULE_CONFIDENCE_THRESHOLD:
        return Detection(tokens)

    logger.info(
        "Rule-based stance inconclusive (%.2f), asking backend", tokens.confidence,
        extra={"confidence": tokens.confidence},
    )
    request = CompletionRequest(
        system_prompt=prompts.STANCE_EXTRACTION_SYSTEM,
        user_prompt=prompts.STANCE_EXTRACTION_USER.format(text=text),
        temperature=0.1,
        max_tokens=1024,
    )
    try:
        data = await gateway.complete_json(request, preferred_provider)
    except Exception as e:
        logger.warning(
            "AI stance extraction failed: %s", e,
            extra={"error": str(e), "error_type": type(e).__name__},
        )
        return Detection(
            UNAVAILABLE_STANCE,
            DetectionError(f"Stance extraction failed: {e}", cause=e),
        )

    return Detection(_tokens_from_reply(data))
