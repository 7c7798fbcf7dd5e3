"""
Knowledge-to-Utility Mapper — what can be done with what the text knows.

utilityRank lives on a 0-10 scale, so the shared 0.5/0.7 buckets
are applied to the rank divided by ten.
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
from epistemica.schemas.results import (
    UTILITY_TYPES,
    JudgmentReport,
    UtilityMapping,
    UtilityResult,
)


def _parse_mappings(raw: object) -> list[UtilityMapping]:
    return [
        UtilityMapping(
            type=coerce_choice(item.get("type"), UTILITY_TYPES, "explanatory"),
            derived_utility=coerce_str(item.get("derivedUtility"), ""),
            description=coerce_str(item.get("description"), ""),
        )
        for item in coerce_dict_list(raw)
    ]


class UtilityAnalyzer(ChunkedAnalyzer[UtilityResult]):
    module_type = "knowledge-utility-mapper"
    system_prompt = prompts.KNOWLEDGE_UTILITY_SYSTEM
    user_template = prompts.KNOWLEDGE_UTILITY_USER

    def parse(self, data: dict, chunk: str) -> UtilityResult:
        report = as_dict(data.get("judgmentReport"))
        return UtilityResult(
            operative_knowledge=coerce_str_list(data.get("operativeKnowledge")),
            utility_mappings=_parse_mappings(data.get("utilityMappings")),
            utility_augmented_rewrite=coerce_str(data.get("utilityAugmentedRewrite"), chunk),
            judgment_report=JudgmentReport(
                breadth=coerce_str(report.get("breadth"), "Unable to assess"),
                depth=coerce_str(report.get("depth"), "Unable to assess"),
                limitations=coerce_str_list(report.get("limitations")),
                transformative_potential=coerce_str(
                    report.get("transformativePotential"), "Unable to assess",
                ),
            ),
            utility_rank=coerce_score(data.get("utilityRank"), 5.0, hi=10.0),
        )

    def synthesize(self, results: list[UtilityResult], chunks: list[str],
                   text: str) -> UtilityResult:
        n = len(chunks)
        avg_rank = mean([r.utility_rank for r in results])
        potential = bucket(avg_rank / 10, "high", "moderate", "limited")
        return UtilityResult(
            operative_knowledge=[k for r in results for k in r.operative_knowledge],
            utility_mappings=[m for r in results for m in r.utility_mappings],
            utility_augmented_rewrite=join_rewrites(
                [r.utility_augmented_rewrite for r in results]
            ),
            judgment_report=JudgmentReport(
                breadth=f"Synthesized from {n} text segments",
                depth=results[0].judgment_report.depth,
                limitations=[
                    lim for r in results for lim in r.judgment_report.limitations
                ],
                transformative_potential=(
                    f"Analysis across {n} chunks reveals {potential} "
                    "transformative potential"
                ),
            ),
            utility_rank=avg_rank,
        )


async def process_utility(
    text: str,
    gateway: CompletionGateway,
    *,
    preferred_provider: Optional[Union[ProviderId, str]] = None,
    max_words: Optional[int] = None,
) -> UtilityResult:
    return await UtilityAnalyzer(gateway, preferred_provider).run(text, max_words)
