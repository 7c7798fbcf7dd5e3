"""
Epistemic Inference — reconstruct arguments, judge coherence, rewrite explicitly.

Synthesis across chunks: arguments and issues are concatenated,
coherence is the unweighted mean of chunk coherences, the reasoning
type is the first chunk's, and the soundness line is regenerated
from the mean.
"""

from __future__ import annotations

from typing import Optional, Union

from epistemica import prompts
from epistemica.llm import ProviderId
from epistemica.llm.gateway import CompletionGateway
from epistemica.modules.base import (
    ChunkedAnalyzer,
    as_dict,
    bucket,
    coerce_choice,
    coerce_dict_list,
    coerce_score,
    coerce_str,
    coerce_str_list,
    join_rewrites,
    mean,
)
from epistemica.schemas.results import INFERENCE_TYPES, Argument, InferenceResult, Judgment
from epistemica.text import count_words


def _parse_arguments(raw: object) -> list[Argument]:
    parsed = []
    for index, item in enumerate(coerce_dict_list(raw), start=1):
        parsed.append(Argument(
            id=coerce_str(item.get("id"), f"arg-{index}"),
            core_claim=coerce_str(item.get("coreClaim"), ""),
            explicit_premises=coerce_str_list(item.get("explicitPremises")),
            hidden_premises=coerce_str_list(item.get("hiddenPremises")),
            inference_type=coerce_choice(
                item.get("inferenceType"), INFERENCE_TYPES, "unspecified",
            ),
        ))
    return parsed


class InferenceAnalyzer(ChunkedAnalyzer[InferenceResult]):
    module_type = "epistemic-inference"
    system_prompt = prompts.EPISTEMIC_INFERENCE_SYSTEM
    user_template = prompts.EPISTEMIC_INFERENCE_USER

    def parse(self, data: dict, chunk: str) -> InferenceResult:
        judgment = as_dict(data.get("judgment"))
        coherence = coerce_score(judgment.get("coherenceScore"), 0.5)
        meta = data.get("metaJudgment")
        return InferenceResult(
            arguments=_parse_arguments(data.get("arguments")),
            judgment=Judgment(
                coherence_score=coherence,
                reasoning_type=coerce_str(judgment.get("reasoningType"), "Unknown"),
                logical_soundness=coerce_str(judgment.get("logicalSoundness"), "Unable to assess"),
                conceptual_completeness=coerce_str(
                    judgment.get("conceptualCompleteness"), "Unable to assess",
                ),
                issues=coerce_str_list(judgment.get("issues")),
            ),
            rewritten_text=coerce_str(data.get("rewrittenText"), chunk),
            # Falls back to the judgment's score before the global default
            overall_coherence=coerce_score(data.get("overallCoherence"), coherence),
            meta_judgment=meta if isinstance(meta, str) and meta.strip() else None,
        )

    def synthesize(self, results: list[InferenceResult], chunks: list[str],
                   text: str) -> InferenceResult:
        n = len(chunks)
        avg = mean([r.overall_coherence for r in results])
        return InferenceResult(
            arguments=[a for r in results for a in r.arguments],
            judgment=Judgment(
                coherence_score=avg,
                reasoning_type=results[0].judgment.reasoning_type,
                logical_soundness=(
                    f"Synthesized from {n} chunks. Overall: "
                    f"{bucket(avg, 'Sound', 'Moderate', 'Weak')}"
                ),
                conceptual_completeness=f"Analysis across {n} text segments",
                issues=[i for r in results for i in r.judgment.issues],
            ),
            rewritten_text=join_rewrites([r.rewritten_text for r in results]),
            overall_coherence=avg,
            meta_judgment=(
                f"This analysis synthesizes results from {n} text chunks "
                f"({count_words(text)} words total). Individual chunk coherence "
                "scores averaged to produce the overall assessment."
            ),
        )


async def process_inference(
    text: str,
    gateway: CompletionGateway,
    *,
    preferred_provider: Optional[Union[ProviderId, str]] = None,
    max_words: Optional[int] = None,
) -> InferenceResult:
    """Run the epistemic inference module over text of any length."""
    return await InferenceAnalyzer(gateway, preferred_provider).run(text, max_words)
