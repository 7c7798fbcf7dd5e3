"""
Cognitive Continuity Layer — how continuous is a new text with earlier ones?

References are earlier analyses pulled from the record store. Each
reference is embedded once (the centroid of its segment embeddings);
each chunk of the new text is compared against every reference by
cosine similarity. With align_rewrite, the backend also rewrites each
chunk to be continuous with the references.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

from epistemica import prompts
from epistemica.config import settings
from epistemica.llm import ProviderId
from epistemica.llm.embeddings import Embedder, cosine_similarity
from epistemica.llm.gateway import CompletionGateway, CompletionRequest
from epistemica.modules.base import ChunkedAnalyzer, coerce_str, join_rewrites, mean
from epistemica.schemas.results import ContinuityResult
from epistemica.storage import AnalysisStore
from epistemica.text import segment_text

logger = logging.getLogger(__name__)

TARGET_LABEL = "New Text"
STRONG_CONTINUITY = 0.80
MODERATE_CONTINUITY = 0.50
# Reference excerpt length sent along with rewrite requests
_REFERENCE_EXCERPT_WORDS = 400


@dataclass(frozen=True)
class Reference:
    label: str
    text: str
    vector: tuple[float, ...]


def continuity_label(score: float) -> str:
    if score >= STRONG_CONTINUITY:
        return "Strong"
    if score >= MODERATE_CONTINUITY:
        return "Moderate"
    return "Low"


def _summarize(pairwise: dict[str, float], composite: float) -> list[str]:
    if not pairwise:
        return ["No reference texts selected; continuity defaults to neutral"]
    lines = [
        f"{continuity_label(composite)} continuity overall "
        f"(composite {composite:.3f} across {len(pairwise)} reference(s))"
    ]
    lines.extend(
        f"{label}: {continuity_label(score).lower()} continuity ({score:.3f})"
        for label, score in pairwise.items()
    )
    return lines


async def load_references(
    record_store: AnalysisStore,
    embedder: Embedder,
    reference_ids: Sequence[str],
    max_words: int,
) -> list[Reference]:
    """Fetch and embed the referenced analyses. Unknown ids are skipped."""
    references: list[Reference] = []
    for record_id in reference_ids:
        record = await record_store.get_by_id(record_id)
        if record is None:
            logger.warning("Reference analysis %s not found, skipping", record_id,
                           extra={"record_id": record_id})
            continue
        vectors = [await embedder.embed(seg) for seg in segment_text(record.input_text, max_words)]
        centroid = np.mean(np.asarray(vectors, dtype=float), axis=0)
        references.append(Reference(
            label=f"{record.module_type}:{record_id}",
            text=record.input_text,
            vector=tuple(float(x) for x in centroid),
        ))
    return references


class ContinuityAnalyzer(ChunkedAnalyzer[ContinuityResult]):
    module_type = "cognitive-continuity"
    system_prompt = prompts.CONTINUITY_REWRITE_SYSTEM
    user_template = prompts.CONTINUITY_REWRITE_USER

    def __init__(
        self,
        gateway: CompletionGateway,
        embedder: Embedder,
        references: list[Reference],
        align_rewrite: bool = False,
        preferred_provider: Optional[Union[ProviderId, str]] = None,
    ):
        super().__init__(gateway, preferred_provider)
        self.embedder = embedder
        self.references = references
        self.align_rewrite = align_rewrite

    def build_request(self, chunk: str) -> CompletionRequest:
        excerpts = "\n\n".join(
            f"[{ref.label}]\n" + " ".join(ref.text.split()[:_REFERENCE_EXCERPT_WORDS])
            for ref in self.references
        ) or "(none)"
        return CompletionRequest(
            system_prompt=self.system_prompt,
            user_prompt=self.user_template.format(text=chunk, references=excerpts),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

    async def analyze_chunk(self, chunk: str) -> ContinuityResult:
        vector = await self.embedder.embed(chunk)
        pairwise = {
            ref.label: max(0.0, min(1.0, cosine_similarity(vector, ref.vector)))
            for ref in self.references
        }
        composite = mean(list(pairwise.values())) if pairwise else 0.5

        rewrite = None
        if self.align_rewrite:
            data = await self.gateway.complete_json(
                self.build_request(chunk), self.preferred_provider,
            )
            rewrite = coerce_str(data.get("continuityRewrite"), chunk)

        return ContinuityResult(
            target=TARGET_LABEL,
            reference_set=[ref.label for ref in self.references],
            composite_score=composite,
            pairwise=pairwise,
            alignment_summary=_summarize(pairwise, composite),
            continuity_rewrite=rewrite,
        )

    def synthesize(self, results: list[ContinuityResult], chunks: list[str],
                   text: str) -> ContinuityResult:
        pairwise = {
            ref.label: mean([r.pairwise[ref.label] for r in results])
            for ref in self.references
        }
        composite = mean([r.composite_score for r in results])
        summary = [f"Synthesized from {len(chunks)} text chunks"]
        summary.extend(_summarize(pairwise, composite))
        return ContinuityResult(
            target=TARGET_LABEL,
            reference_set=[ref.label for ref in self.references],
            composite_score=composite,
            pairwise=pairwise,
            alignment_summary=summary,
            continuity_rewrite=(
                join_rewrites([r.continuity_rewrite or "" for r in results])
                if self.align_rewrite else None
            ),
        )


async def process_continuity(
    text: str,
    gateway: CompletionGateway,
    *,
    embedder: Embedder,
    record_store: AnalysisStore,
    reference_ids: Sequence[str] = (),
    align_rewrite: bool = False,
    preferred_provider: Optional[Union[ProviderId, str]] = None,
    max_words: Optional[int] = None,
) -> ContinuityResult:
    """Compare text against earlier analyses; optionally rewrite for continuity."""
    max_words = max_words or settings.CHUNK_MAX_WORDS
    references = await load_references(record_store, embedder, reference_ids, max_words)
    analyzer = ContinuityAnalyzer(
        gateway, embedder, references,
        align_rewrite=align_rewrite, preferred_provider=preferred_provider,
    )
    return await analyzer.run(text, max_words)
