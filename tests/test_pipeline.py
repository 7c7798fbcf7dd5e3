"""
Pipeline Tests

Covers:
  1. Input validation and the hard word cap
  2. Argument gate: confident rejection vs. permissive pass-through
  3. Module dispatch and persistence (best effort)
  4. Doctrine check end to end
"""

from __future__ import annotations

import json

import pytest

from epistemica import prompts
from epistemica.errors import OverLength, PersistenceFailure
from epistemica.llm import LLMProvider, ProviderId
from epistemica.llm.embeddings import Embedder
from epistemica.llm.gateway import CompletionGateway
from epistemica.pipeline import ModuleType, analyze, check_doctrine
from epistemica.schemas.results import ContinuityResult, InferenceResult, UtilityResult
from epistemica.storage import InMemoryAnalysisStore, InMemoryPolicyStore


ARGUMENT = "It rained all night, therefore the streets are wet."
DESCRIPTION = "The sky is blue. Grass is green."


# ============================================================
# MOCKS
# ============================================================

class RoutedLLM(LLMProvider):
    """Answers the argument gate and the analysis modules separately."""

    def __init__(self, gate=None, module=None):
        self._gate = gate
        self._module = module if module is not None else {"overallCoherence": 0.7}
        self.module_calls = 0
        self.gate_calls = 0

    async def complete(self, system_prompt, user_prompt, temperature=0.7, max_tokens=4096):
        if system_prompt == prompts.ARGUMENT_DETECTION_SYSTEM:
            self.gate_calls += 1
            if isinstance(self._gate, Exception) or self._gate is None:
                raise self._gate or RuntimeError("gate offline")
            return json.dumps(self._gate)
        self.module_calls += 1
        return json.dumps(self._module)


class FailingStore(InMemoryAnalysisStore):
    async def save(self, record):
        raise PersistenceFailure("disk full")


class UnitEmbedder(Embedder):
    async def embed(self, text: str) -> list[float]:
        return [1.0, 0.0]


def _gateway(llm):
    return CompletionGateway({ProviderId.ANTHROPIC: llm})


# ============================================================
# VALIDATION
# ============================================================

class TestValidation:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   \n  "])
    async def test_blank_text(self, text):
        with pytest.raises(ValueError):
            await analyze(text, ModuleType.EPISTEMIC_INFERENCE, _gateway(RoutedLLM()))

    @pytest.mark.asyncio
    async def test_unknown_module(self):
        with pytest.raises(ValueError):
            await analyze(ARGUMENT, "vibe-check", _gateway(RoutedLLM()))

    @pytest.mark.asyncio
    async def test_over_length_before_any_call(self):
        llm = RoutedLLM()
        text = "because " * 10_001
        with pytest.raises(OverLength) as exc_info:
            await analyze(text, ModuleType.EPISTEMIC_INFERENCE, _gateway(llm))
        assert exc_info.value.word_count == 10_001
        assert exc_info.value.limit == 10_000
        assert "10,000-word limit" in str(exc_info.value)
        assert llm.module_calls == 0 and llm.gate_calls == 0

    @pytest.mark.asyncio
    async def test_continuity_needs_embedder_and_store(self):
        with pytest.raises(ValueError):
            await analyze(ARGUMENT, ModuleType.COGNITIVE_CONTINUITY, _gateway(RoutedLLM()))


# ============================================================
# ARGUMENT GATE
# ============================================================

class TestGate:

    @pytest.mark.asyncio
    async def test_confident_rejection(self):
        llm = RoutedLLM(gate={"isArgumentative": False, "confidence": 0.95,
                              "reasoning": "Purely descriptive"})
        store = InMemoryAnalysisStore()
        outcome = await analyze(
            DESCRIPTION, ModuleType.EPISTEMIC_INFERENCE, _gateway(llm), record_store=store,
        )
        assert outcome.success is False
        assert outcome.is_argumentative is False
        assert outcome.result is None
        assert outcome.diagnostic_message == "Purely descriptive"
        assert outcome.word_count == 7
        assert llm.module_calls == 0
        assert await store.list_recent() == []

    @pytest.mark.asyncio
    async def test_unsure_rejection_proceeds(self):
        llm = RoutedLLM(gate={"isArgumentative": False, "confidence": 0.85, "reasoning": "?"})
        outcome = await analyze(DESCRIPTION, ModuleType.EPISTEMIC_INFERENCE, _gateway(llm))
        assert outcome.success is True
        assert llm.module_calls == 1

    @pytest.mark.asyncio
    async def test_processed_text_reported_argumentative(self):
        llm = RoutedLLM(gate={"isArgumentative": False, "confidence": 0.8})
        outcome = await analyze(DESCRIPTION, ModuleType.EPISTEMIC_INFERENCE, _gateway(llm))
        assert outcome.success is True
        assert outcome.is_argumentative is True
        assert outcome.to_dict()["isArgumentative"] is True

    @pytest.mark.asyncio
    async def test_degraded_gate_never_blocks(self):
        llm = RoutedLLM(gate=RuntimeError("gate offline"))
        outcome = await analyze(DESCRIPTION, ModuleType.EPISTEMIC_INFERENCE, _gateway(llm))
        assert outcome.success is True
        assert outcome.is_argumentative is True
        assert isinstance(outcome.result, InferenceResult)

    @pytest.mark.asyncio
    async def test_markers_skip_gate_call(self):
        llm = RoutedLLM()
        await analyze(ARGUMENT, ModuleType.EPISTEMIC_INFERENCE, _gateway(llm))
        assert llm.gate_calls == 0


# ============================================================
# DISPATCH & PERSISTENCE
# ============================================================

class TestDispatch:

    @pytest.mark.asyncio
    async def test_module_dispatch(self):
        llm = RoutedLLM(module={"utilityRank": 7})
        outcome = await analyze(ARGUMENT, "knowledge-utility-mapper", _gateway(llm))
        assert isinstance(outcome.result, UtilityResult)
        assert outcome.result.utility_rank == 7.0

    @pytest.mark.asyncio
    async def test_result_persisted(self):
        store = InMemoryAnalysisStore()
        outcome = await analyze(
            ARGUMENT, ModuleType.EPISTEMIC_INFERENCE, _gateway(RoutedLLM()),
            record_store=store, user_id="reader-1",
        )
        record = await store.get_by_id(outcome.record_id)
        assert record.module_type == "epistemic-inference"
        assert record.user_id == "reader-1"
        assert record.word_count == outcome.word_count
        assert record.result["overallCoherence"] == 0.7
        assert record.processing_time_ms == outcome.processing_time_ms

    @pytest.mark.asyncio
    async def test_persistence_failure_swallowed(self):
        outcome = await analyze(
            ARGUMENT, ModuleType.EPISTEMIC_INFERENCE, _gateway(RoutedLLM()),
            record_store=FailingStore(),
        )
        assert outcome.success is True
        assert outcome.record_id is None

    @pytest.mark.asyncio
    async def test_continuity_dispatch(self):
        store = InMemoryAnalysisStore()
        first = await analyze(
            ARGUMENT, ModuleType.EPISTEMIC_INFERENCE, _gateway(RoutedLLM()), record_store=store,
        )
        outcome = await analyze(
            ARGUMENT, ModuleType.COGNITIVE_CONTINUITY, _gateway(RoutedLLM()),
            record_store=store, embedder=UnitEmbedder(), reference_ids=[first.record_id],
        )
        assert isinstance(outcome.result, ContinuityResult)
        assert outcome.result.composite_score == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_to_dict(self):
        outcome = await analyze(ARGUMENT, ModuleType.EPISTEMIC_INFERENCE, _gateway(RoutedLLM()))
        payload = outcome.to_dict()
        assert payload["success"] is True
        assert payload["wordCount"] == 9
        assert payload["isArgumentative"] is True
        assert payload["result"]["overallCoherence"] == 0.7
        assert "rewrittenText" in payload["result"]


# ============================================================
# DOCTRINE CHECK
# ============================================================

class TestCheckDoctrine:

    @pytest.mark.asyncio
    async def test_aligned_text(self):
        policy = InMemoryPolicyStore()
        await policy.initialize_defaults()
        text = (
            "Laws encode proportional dependencies. Singular causal recognition comes "
            "first: the instance before law. We reject the DN model. Regularities are "
            "the surface shadow of laws."
        )
        check = await check_doctrine(text, _gateway(RoutedLLM()), policy)
        assert check.alignment.composite_score == 1.0
        assert check.stance_degraded is False
        assert check.to_dict()["alignment"]["crossPhaseCoherence"] == 1.0

    @pytest.mark.asyncio
    async def test_degraded_stance(self):
        class Down(LLMProvider):
            async def complete(self, system_prompt, user_prompt, temperature=0.7, max_tokens=4096):
                raise RuntimeError("offline")

        policy = InMemoryPolicyStore()
        await policy.initialize_defaults()
        check = await check_doctrine("Laws matter to science.", _gateway(Down()), policy)
        assert check.stance_degraded is True
        assert check.alignment.composite_score == 1.0
        assert check.alignment.conflicts == []
