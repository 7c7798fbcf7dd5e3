"""
Analysis Module Tests

Covers the four single-call modules:
  1. Single-chunk: one call, reply parsed with defaults
  2. Score bounds under malformed or out-of-range replies
  3. Multi-chunk synthesis (one call per chunk, in order)
  4. Errors propagate: BackendExhausted, MalformedReply
"""

from __future__ import annotations

import json

import pytest

from epistemica.errors import BackendExhausted, MalformedReply
from epistemica.llm import LLMProvider, ProviderId
from epistemica.llm.gateway import CompletionGateway
from epistemica.modules import (
    process_inference,
    process_integrity,
    process_justification,
    process_utility,
)
from epistemica.modules.integrity import classify_integrity


# ============================================================
# MOCK LLM
# ============================================================

class ScriptedLLM(LLMProvider):
    """Replays one reply per call, in order. Records the user prompts."""

    def __init__(self, *replies):
        self._replies = [r if isinstance(r, str) else json.dumps(r) for r in replies]
        self.prompts = []

    async def complete(self, system_prompt, user_prompt, temperature=0.7, max_tokens=4096):
        self.prompts.append(user_prompt)
        if not self._replies:
            raise RuntimeError("script exhausted")
        return self._replies.pop(0)


class DownLLM(LLMProvider):
    async def complete(self, system_prompt, user_prompt, temperature=0.7, max_tokens=4096):
        raise RuntimeError("service unavailable")


def _gateway(llm):
    return CompletionGateway({ProviderId.ANTHROPIC: llm})


def _long_text(paragraphs: int, words_each: int) -> str:
    return "\n\n".join(
        " ".join(f"p{i}w{j}" for j in range(words_each)) for i in range(paragraphs)
    )


# ~4500 words that segment into three chunks at 2000
LONG_TEXT = _long_text(9, 500)


# ============================================================
# EPISTEMIC INFERENCE
# ============================================================

class TestInference:

    @pytest.mark.asyncio
    async def test_single_chunk(self):
        llm = ScriptedLLM({
            "arguments": [{
                "id": "arg-1",
                "coreClaim": "Wet streets follow rain",
                "explicitPremises": ["It rained"],
                "hiddenPremises": ["Rain wets streets"],
                "inferenceType": "causal",
            }],
            "judgment": {
                "coherenceScore": 0.8,
                "reasoningType": "Causal",
                "logicalSoundness": "Valid",
                "conceptualCompleteness": "Complete",
                "issues": [],
            },
            "rewrittenText": "Because it rained, and rain wets streets, the street is wet.",
            "overallCoherence": 0.82,
        })
        text = "It rained, therefore the street is wet."
        result = await process_inference(text, _gateway(llm))

        assert len(llm.prompts) == 1
        assert text in llm.prompts[0]
        assert result.arguments[0].core_claim == "Wet streets follow rain"
        assert result.arguments[0].inference_type == "causal"
        assert result.judgment.coherence_score == 0.8
        assert result.overall_coherence == 0.82
        assert result.meta_judgment is None

    @pytest.mark.asyncio
    async def test_empty_reply_uses_defaults(self):
        text = "It rained, therefore the street is wet."
        result = await process_inference(text, _gateway(ScriptedLLM({})))
        assert result.arguments == []
        assert result.judgment.coherence_score == 0.5
        assert result.judgment.reasoning_type == "Unknown"
        assert result.overall_coherence == 0.5
        assert result.rewritten_text == text

    @pytest.mark.asyncio
    async def test_overall_falls_back_to_judgment_score(self):
        result = await process_inference(
            "x", _gateway(ScriptedLLM({"judgment": {"coherenceScore": 0.3}})),
        )
        assert result.overall_coherence == 0.3

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw, expected", [
        (1.7, 1.0), (-0.4, 0.0), ("0.65", 0.65), ("high", 0.5), (None, 0.5), (True, 0.5),
    ])
    async def test_scores_bounded(self, raw, expected):
        llm = ScriptedLLM({"judgment": {"coherenceScore": raw}, "overallCoherence": raw})
        result = await process_inference("x", _gateway(llm))
        assert result.judgment.coherence_score == pytest.approx(expected)
        assert result.overall_coherence == pytest.approx(expected)

    @pytest.mark.asyncio
    async def test_unknown_inference_type(self):
        llm = ScriptedLLM({"arguments": [{"coreClaim": "c", "inferenceType": "telepathic"}]})
        result = await process_inference("x", _gateway(llm))
        assert result.arguments[0].inference_type == "unspecified"
        assert result.arguments[0].id == "arg-1"

    @pytest.mark.asyncio
    async def test_three_chunk_synthesis(self):
        replies = [
            {
                "arguments": [{"id": f"arg-{i}", "coreClaim": f"claim {i}"}],
                "judgment": {"coherenceScore": score, "reasoningType": f"type {i}",
                             "issues": [f"issue {i}"]},
                "rewrittenText": f"rewrite {i}",
                "overallCoherence": score,
            }
            for i, score in enumerate((0.6, 0.8, 0.7), start=1)
        ]
        llm = ScriptedLLM(*replies)
        result = await process_inference(LONG_TEXT, _gateway(llm))

        assert len(llm.prompts) == 3
        assert "p0w0" in llm.prompts[0] and "p8w0" in llm.prompts[2]
        assert result.overall_coherence == pytest.approx(0.70)
        assert result.judgment.coherence_score == pytest.approx(0.70)
        assert result.judgment.reasoning_type == "type 1"
        assert result.judgment.logical_soundness.startswith("Synthesized from 3 chunks. Overall:")
        assert result.judgment.conceptual_completeness == "Analysis across 3 text segments"
        assert [a.core_claim for a in result.arguments] == ["claim 1", "claim 2", "claim 3"]
        assert result.judgment.issues == ["issue 1", "issue 2", "issue 3"]
        assert result.rewritten_text == "rewrite 1\n\nrewrite 2\n\nrewrite 3"
        assert "3 text chunks (4500 words total)" in result.meta_judgment

    @pytest.mark.asyncio
    @pytest.mark.parametrize("scores, label", [
        ((0.9, 0.9), "Sound"), ((0.6, 0.6), "Moderate"), ((0.2, 0.5), "Weak"),
    ])
    async def test_soundness_label(self, scores, label):
        llm = ScriptedLLM(*[{"overallCoherence": s} for s in scores])
        result = await process_inference(_long_text(2, 60), _gateway(llm), max_words=60)
        assert result.judgment.logical_soundness == f"Synthesized from 2 chunks. Overall: {label}"


# ============================================================
# JUSTIFICATION BUILDER
# ============================================================

class TestJustification:

    @pytest.mark.asyncio
    async def test_single_chunk(self):
        llm = ScriptedLLM({
            "detectedClaims": [
                {"claim": "Taxes fund roads", "isUnderdeveloped": False},
                {"claim": "Roads matter", "isUnderdeveloped": "yes"},
                {"claim": "", "isUnderdeveloped": True},
                "not a dict",
            ],
            "justificationChains": [{
                "claim": "Roads matter",
                "premises": ["Trade needs transport"],
                "conclusion": "Roads matter",
                "evidenceType": "hearsay",
            }],
            "coherenceScore": 0.75,
            "completeness": "Mostly complete",
            "weaknesses": ["No data"],
            "rewrittenText": "Expanded",
        })
        result = await process_justification("x", _gateway(llm))

        assert [c.claim for c in result.detected_claims] == ["Taxes fund roads", "Roads matter", ""]
        assert result.detected_claims[0].is_underdeveloped is False
        assert result.detected_claims[1].is_underdeveloped is True
        assert result.detected_claims[2].is_underdeveloped is True
        assert result.justification_chains[0].evidence_type == "conceptual"
        assert result.coherence_score == 0.75

    @pytest.mark.asyncio
    async def test_claim_without_text_kept(self):
        llm = ScriptedLLM({"detectedClaims": [{"isUnderdeveloped": False}, {"claim": None}]})
        result = await process_justification("x", _gateway(llm))
        assert [c.claim for c in result.detected_claims] == ["", ""]
        assert [c.is_underdeveloped for c in result.detected_claims] == [False, True]

    @pytest.mark.asyncio
    async def test_synthesis(self):
        llm = ScriptedLLM(
            {"detectedClaims": [{"claim": "a"}], "coherenceScore": 0.9,
             "weaknesses": ["w1"], "rewrittenText": "r1"},
            {"detectedClaims": [{"claim": "b"}], "coherenceScore": 0.7,
             "weaknesses": ["w2"], "rewrittenText": "r2"},
        )
        result = await process_justification(_long_text(2, 60), _gateway(llm), max_words=60)
        assert [c.claim for c in result.detected_claims] == ["a", "b"]
        assert result.coherence_score == pytest.approx(0.8)
        assert result.completeness == (
            "Analyzed across 2 text segments. Overall assessment: Complete"
        )
        assert result.weaknesses == ["w1", "w2"]
        assert result.rewritten_text == "r1\n\nr2"


# ============================================================
# KNOWLEDGE-TO-UTILITY MAPPER
# ============================================================

class TestUtility:

    @pytest.mark.asyncio
    async def test_rank_bounded_to_ten(self):
        result = await process_utility("x", _gateway(ScriptedLLM({"utilityRank": 14})))
        assert result.utility_rank == 10.0

    @pytest.mark.asyncio
    async def test_defaults(self):
        result = await process_utility("source text", _gateway(ScriptedLLM({
            "utilityMappings": [{"type": "magical", "derivedUtility": "u"}],
        })))
        assert result.utility_rank == 5.0
        assert result.utility_mappings[0].type == "explanatory"
        assert result.utility_augmented_rewrite == "source text"

    @pytest.mark.asyncio
    async def test_synthesis(self):
        llm = ScriptedLLM(
            {"utilityRank": 8, "operativeKnowledge": ["k1"],
             "judgmentReport": {"depth": "deep", "limitations": ["l1"]}},
            {"utilityRank": 9, "operativeKnowledge": ["k2"],
             "judgmentReport": {"depth": "shallow", "limitations": ["l2"]}},
        )
        result = await process_utility(_long_text(2, 60), _gateway(llm), max_words=60)
        assert result.utility_rank == pytest.approx(8.5)
        assert result.operative_knowledge == ["k1", "k2"]
        report = result.judgment_report
        assert report.breadth == "Synthesized from 2 text segments"
        assert report.depth == "deep"
        assert report.limitations == ["l1", "l2"]
        assert report.transformative_potential == (
            "Analysis across 2 chunks reveals high transformative potential"
        )


# ============================================================
# COGNITIVE INTEGRITY LAYER
# ============================================================

def _integrity_reply(value: float, commentary: str) -> dict:
    return {
        "authenticity_commentary": commentary,
        "reconstructed_passage": f"passage {commentary}",
        "diagnostic_block": {
            "RealityAnchor": value, "CausalDepth": value, "Friction": value,
            "Compression": value, "SimulationIndex": value, "LevelCoherence": value,
            "CompositeScore": value, "IntegrityType": "Authentic",
        },
        "interpretation_summary": f"summary {commentary}",
    }


class TestIntegrity:

    @pytest.mark.asyncio
    async def test_single_chunk_keeps_wire_keys(self):
        result = await process_integrity("x", _gateway(ScriptedLLM(_integrity_reply(0.9, "c"))))
        dumped = result.model_dump(by_alias=True)
        assert dumped["diagnostic_block"]["CompositeScore"] == 0.9
        assert dumped["diagnostic_block"]["IntegrityType"] == "Authentic"
        assert dumped["authenticity_commentary"] == "c"

    @pytest.mark.asyncio
    async def test_missing_metrics_default(self):
        result = await process_integrity("x", _gateway(ScriptedLLM({
            "diagnostic_block": {"Friction": 3, "CausalDepth": "n/a"},
        })))
        block = result.diagnostic_block
        assert block.friction == 1.0
        assert block.causal_depth == 0.5
        assert block.composite_score == 0.5
        assert block.integrity_type == "Unknown"

    @pytest.mark.asyncio
    async def test_synthesis(self):
        llm = ScriptedLLM(_integrity_reply(0.9, "one"), _integrity_reply(0.5, "two"))
        text = _long_text(2, 60)
        result = await process_integrity(text, _gateway(llm), max_words=60)

        assert result.diagnostic_block.composite_score == pytest.approx(0.7)
        assert result.diagnostic_block.friction == pytest.approx(0.7)
        assert result.diagnostic_block.integrity_type == "Authentic Partial (Synthesized)"
        assert result.authenticity_commentary == (
            "Synthesized analysis from 2 text chunks (120 words total). "
            "Chunk 1: one Chunk 2: two"
        )
        assert result.interpretation_summary == (
            "Multi-chunk synthesis: Chunk 1: summary one Chunk 2: summary two"
        )
        assert result.reconstructed_passage == "passage one\n\npassage two"

    @pytest.mark.parametrize("score, label", [
        (0.80, "High-Integrity Source (Synthesized)"),
        (0.79, "Authentic Partial (Synthesized)"),
        (0.50, "Authentic Partial (Synthesized)"),
        (0.49, "Requires Conceptual Reconstruction (Synthesized)"),
    ])
    def test_classify_integrity(self, score, label):
        assert classify_integrity(score) == label


# ============================================================
# ERRORS
# ============================================================

class TestErrorPropagation:

    @pytest.mark.asyncio
    async def test_backend_exhausted_propagates(self):
        with pytest.raises(BackendExhausted):
            await process_inference("x", _gateway(DownLLM()))

    @pytest.mark.asyncio
    async def test_malformed_reply_propagates(self):
        with pytest.raises(MalformedReply):
            await process_justification("x", _gateway(ScriptedLLM("Here you go!")))

    @pytest.mark.asyncio
    async def test_failure_on_later_chunk_fails_whole_analysis(self):
        llm = ScriptedLLM({"overallCoherence": 0.9}, "garbage")
        with pytest.raises(MalformedReply):
            await process_inference(_long_text(2, 60), _gateway(llm), max_words=60)
        assert len(llm.prompts) == 2
