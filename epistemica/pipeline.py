"""
Pipeline — one analysis request from raw text to persisted result.

    hard cap → argument gate → module dispatch → persist

The hard cap is checked before any backend call. The gate only stops a
request when it is confident the text is not argumentative; a degraded
gate never blocks. Persistence is best effort: the caller always gets
the result it paid for, even if saving it failed.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Union

from epistemica.config import settings
from epistemica.detector import detect_argument
from epistemica.doctrine import DoctrineAlignment, compute_doctrine_alignment
from epistemica.errors import OverLength
from epistemica.llm import ProviderId
from epistemica.llm.embeddings import Embedder
from epistemica.llm.gateway import CompletionGateway
from epistemica.modules import (
    process_continuity,
    process_inference,
    process_integrity,
    process_justification,
    process_utility,
)
from epistemica.schemas.results import ModuleResult
from epistemica.stance import StanceTokens, extract_stance
from epistemica.storage import AnalysisRecord, AnalysisStore, PolicyStore
from epistemica.text import count_words

logger = logging.getLogger(__name__)


class ModuleType(str, Enum):
    EPISTEMIC_INFERENCE = "epistemic-inference"
    JUSTIFICATION_BUILDER = "justification-builder"
    KNOWLEDGE_UTILITY_MAPPER = "knowledge-utility-mapper"
    COGNITIVE_INTEGRITY = "cognitive-integrity"
    COGNITIVE_CONTINUITY = "cognitive-continuity"


NOT_ARGUMENTATIVE_MESSAGE = (
    "No inferential content detected. The passage appears to be descriptive, "
    "narrative, or rhetorical rather than argumentative."
)

_SIMPLE_MODULES = {
    ModuleType.EPISTEMIC_INFERENCE: process_inference,
    ModuleType.JUSTIFICATION_BUILDER: process_justification,
    ModuleType.KNOWLEDGE_UTILITY_MAPPER: process_utility,
    ModuleType.COGNITIVE_INTEGRITY: process_integrity,
}


@dataclass
class AnalysisOutcome:
    success: bool
    word_count: int
    is_argumentative: bool
    result: Optional[ModuleResult] = None
    processing_time_ms: int = 0
    diagnostic_message: Optional[str] = None
    record_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "wordCount": self.word_count,
            "isArgumentative": self.is_argumentative,
            "result": self.result.model_dump(by_alias=True) if self.result is not None else None,
            "processingTimeMs": self.processing_time_ms,
            "diagnosticMessage": self.diagnostic_message,
            "recordId": self.record_id,
        }


async def _persist(
    record_store: AnalysisStore,
    record: AnalysisRecord,
) -> Optional[str]:
    try:
        stored = await record_store.save(record)
    except Exception as e:
        logger.exception(
            "Failed to save analysis: %s", e,
            extra={"module_type": record.module_type,
                   "error": str(e), "error_type": type(e).__name__},
        )
        return None
    return stored.id


async def analyze(
    text: str,
    module_type: Union[ModuleType, str],
    gateway: CompletionGateway,
    *,
    record_store: Optional[AnalysisStore] = None,
    embedder: Optional[Embedder] = None,
    reference_ids: Sequence[str] = (),
    align_rewrite: bool = False,
    user_id: Optional[str] = None,
    preferred_provider: Optional[Union[ProviderId, str]] = None,
) -> AnalysisOutcome:
    """
    Run one analysis request.

    Raises:
        ValueError: blank text, unknown module, or continuity without
            an embedder and record store.
        OverLength: text above MAX_INPUT_WORDS.
        BackendExhausted / MalformedReply: from the module call.
    """
    if not text or not text.strip():
        raise ValueError("Text is required")
    module = ModuleType(module_type)

    word_count = count_words(text)
    if word_count > settings.MAX_INPUT_WORDS:
        raise OverLength(word_count, settings.MAX_INPUT_WORDS)

    if module is ModuleType.COGNITIVE_CONTINUITY and (embedder is None or record_store is None):
        raise ValueError("Cognitive continuity needs an embedder and a record store")

    start = time.perf_counter()

    detection = await detect_argument(text, gateway, preferred_provider)
    gate = detection.value
    if not gate.is_argumentative and gate.confidence > settings.REJECT_CONFIDENCE:
        logger.info(
            "Text rejected as non-argumentative", extra={
                "module_type": module.value, "word_count": word_count,
                "confidence": gate.confidence,
            },
        )
        return AnalysisOutcome(
            success=False,
            word_count=word_count,
            is_argumentative=False,
            processing_time_ms=int((time.perf_counter() - start) * 1000),
            diagnostic_message=gate.reasoning or NOT_ARGUMENTATIVE_MESSAGE,
        )

    if module is ModuleType.COGNITIVE_CONTINUITY:
        result = await process_continuity(
            text, gateway,
            embedder=embedder,
            record_store=record_store,
            reference_ids=reference_ids,
            align_rewrite=align_rewrite,
            preferred_provider=preferred_provider,
        )
    else:
        result = await _SIMPLE_MODULES[module](
            text, gateway, preferred_provider=preferred_provider,
        )

    elapsed_ms = int((time.perf_counter() - start) * 1000)
    logger.info(
        "Analysis complete", extra={
            "module_type": module.value, "word_count": word_count,
            "duration_ms": elapsed_ms,
        },
    )

    record_id = None
    if record_store is not None:
        record_id = await _persist(record_store, AnalysisRecord(
            module_type=module.value,
            input_text=text,
            word_count=word_count,
            result=result.model_dump(by_alias=True),
            processing_time_ms=elapsed_ms,
            user_id=user_id,
        ))

    return AnalysisOutcome(
        success=True,
        word_count=word_count,
        is_argumentative=True,
        result=result,
        processing_time_ms=elapsed_ms,
        record_id=record_id,
    )


# ============================================================
# DOCTRINE CHECK
# ============================================================

@dataclass
class DoctrineCheck:
    stance: StanceTokens
    alignment: DoctrineAlignment
    stance_degraded: bool = False

    def to_dict(self) -> dict:
        return {
            "stance": self.stance.to_dict(),
            "alignment": self.alignment.to_dict(),
            "stanceDegraded": self.stance_degraded,
        }


async def check_doctrine(
    text: str,
    gateway: CompletionGateway,
    policy_store: PolicyStore,
    preferred_provider: Optional[Union[ProviderId, str]] = None,
) -> DoctrineCheck:
    """Extract the stance of text and score it against the stored doctrine."""
    if not text or not text.strip():
        raise ValueError("Text is required")
    detection = await extract_stance(text, gateway, preferred_provider)
    policy = await policy_store.get_all()
    return DoctrineCheck(
        stance=detection.value,
        alignment=compute_doctrine_alignment(detection.value, policy),
        stance_degraded=detection.degraded,
    )
