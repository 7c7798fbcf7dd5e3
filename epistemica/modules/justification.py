"""
Justification Builder — find underdeveloped claims and rebuild their support.
"""

from __future__ import annotations

from typing import Optional, Union

from epistemica import prompts
from epistemica.llm import ProviderId
from epistemica.llm.gateway import CompletionGateway
from epistemica.modules.base import (
    ChunkedAnalyzer,
    bucket,
    coerce_choice,
    coerce_dict_list,
    coerce_score,
    coerce_str,
    coerce_str_list,
    join_rewrites,
    mean,
)
from epistemica.schemas.results import (
    EVIDENCE_TYPES,
    Claim,
    JustificationChain,
    JustificationResult,
)


def _parse_claims(raw: object) -> list[Claim]:
    claims = []
    for item in coerce_dict_list(raw):
        flag = item.get("isUnderdeveloped")
        claims.append(Claim(
            claim=coerce_str(item.get("claim"), ""),
            is_underdeveloped=flag if isinstance(flag, bool) else True,
        ))
    return claims


def _parse_chains(raw: object) -> list[JustificationChain]:
    return [
        JustificationChain(
            claim=coerce_str(item.get("claim"), ""),
            premises=coerce_str_list(item.get("premises")),
            conclusion=coerce_str(item.get("conclusion"), ""),
            evidence_type=coerce_choice(item.get("evidenceType"), EVIDENCE_TYPES, "conceptual"),
        )
        for item in coerce_dict_list(raw)
    ]


class JustificationAnalyzer(ChunkedAnalyzer[JustificationResult]):
    module_type = "justification-builder"
    system_prompt = prompts.JUSTIFICATION_BUILDER_SYSTEM
    user_template = prompts.JUSTIFICATION_BUILDER_USER

    def parse(self, data: dict, chunk: str) -> JustificationResult:
        return JustificationResult(
            detected_claims=_parse_claims(data.get("detectedClaims")),
            justification_chains=_parse_chains(data.get("justificationChains")),
            coherence_score=coerce_score(data.get("coherenceScore"), 0.5),
            completeness=coerce_str(data.get("completeness"), "Unable to assess"),
            weaknesses=coerce_str_list(data.get("weaknesses")),
            rewritten_text=coerce_str(data.get("rewrittenText"), chunk),
        )

    def synthesize(self, results: list[JustificationResult], chunks: list[str],
                   text: str) -> JustificationResult:
        avg = mean([r.coherence_score for r in results])
        label = bucket(avg, "Complete", "Moderately complete", "Incomplete")
        return JustificationResult(
            detected_claims=[c for r in results for c in r.detected_claims],
            justification_chains=[c for r in results for c in r.justification_chains],
            coherence_score=avg,
            completeness=(
                f"Analyzed across {len(chunks)} text segments. "
                f"Overall assessment: {label}"
            ),
            weaknesses=[w for r in results for w in r.weaknesses],
            rewritten_text=join_rewrites([r.rewritten_text for r in results]),
        )


async def process_justification(
    text: str,
    gateway: CompletionGateway,
    *,
    preferred_provider: Optional[Union[ProviderId, str]] = None,
    max_words: Optional[int] = None,
) -> JustificationResult:
    return await JustificationAnalyzer(gateway, preferred_provider).run(text, max_words)
