"""
Cognitive Integrity Layer — genuine reasoning vs. simulated reasoning.

When several chunks are merged, every diagnostic metric is averaged
and IntegrityType is re-derived from the averaged CompositeScore
rather than voted from the chunk labels.
"""

from __future__ import annotations

from typing import Optional, Union

from epistemica import prompts
from epistemica.llm import ProviderId
from epistemica.llm.gateway import CompletionGateway
from epistemica.modules.base import (
    ChunkedAnalyzer,
    as_dict,
    coerce_score,
    coerce_str,
    join_rewrites,
    mean,
)
from epistemica.schemas.results import DIAGNOSTIC_METRICS, DiagnosticBlock, IntegrityResult
from epistemica.text import count_words

# Wire key for each metric attribute
_METRIC_KEYS = {
    "reality_anchor": "RealityAnchor",
    "causal_depth": "CausalDepth",
    "friction": "Friction",
    "compression": "Compression",
    "simulation_index": "SimulationIndex",
    "level_coherence": "LevelCoherence",
    "composite_score": "CompositeScore",
}

HIGH_INTEGRITY = 0.80
PARTIAL_INTEGRITY = 0.50


def classify_integrity(composite: float) -> str:
    """Integrity label for a synthesized composite score."""
    if composite >= HIGH_INTEGRITY:
        return "High-Integrity Source (Synthesized)"
    if composite >= PARTIAL_INTEGRITY:
        return "Authentic Partial (Synthesized)"
    return "Requires Conceptual Reconstruction (Synthesized)"


class IntegrityAnalyzer(ChunkedAnalyzer[IntegrityResult]):
    module_type = "cognitive-integrity"
    system_prompt = prompts.COGNITIVE_INTEGRITY_SYSTEM
    user_template = prompts.COGNITIVE_INTEGRITY_USER

    def parse(self, data: dict, chunk: str) -> IntegrityResult:
        block = as_dict(data.get("diagnostic_block"))
        metrics = {
            attr: coerce_score(block.get(key), 0.5)
            for attr, key in _METRIC_KEYS.items()
        }
        return IntegrityResult(
            authenticity_commentary=coerce_str(
                data.get("authenticity_commentary"), "Unable to assess authenticity",
            ),
            reconstructed_passage=coerce_str(data.get("reconstructed_passage"), chunk),
            diagnostic_block=DiagnosticBlock(
                **metrics,
                integrity_type=coerce_str(block.get("IntegrityType"), "Unknown"),
            ),
            interpretation_summary=coerce_str(
                data.get("interpretation_summary"), "Unable to provide interpretation",
            ),
        )

    def synthesize(self, results: list[IntegrityResult], chunks: list[str],
                   text: str) -> IntegrityResult:
        averaged = {
            attr: mean([getattr(r.diagnostic_block, attr) for r in results])
            for attr in DIAGNOSTIC_METRICS
        }
        commentaries = " ".join(
            f"Chunk {i}: {r.authenticity_commentary}"
            for i, r in enumerate(results, start=1)
        )
        interpretations = " ".join(
            f"Chunk {i}: {r.interpretation_summary}"
            for i, r in enumerate(results, start=1)
        )
        return IntegrityResult(
            authenticity_commentary=(
                f"Synthesized analysis from {len(chunks)} text chunks "
                f"({count_words(text)} words total). {commentaries}"
            ),
            reconstructed_passage=join_rewrites([r.reconstructed_passage for r in results]),
            diagnostic_block=DiagnosticBlock(
                **averaged,
                integrity_type=classify_integrity(averaged["composite_score"]),
            ),
            interpretation_summary=f"Multi-chunk synthesis: {interpretations}",
        )


async def process_integrity(
    text: str,
    gateway: CompletionGateway,
    *,
    preferred_provider: Optional[Union[ProviderId, str]] = None,
    max_words: Optional[int] = None,
) -> IntegrityResult:
    return await IntegrityAnalyzer(gateway, preferred_provider).run(text, max_words)
