"""
Module Result Schemas

Pydantic models for the five analysis results. Wire names follow the
JSON the prompts ask for: camelCase for most modules, the integrity
module keeps its snake_case / PascalCase keys. Dump with
model_dump(by_alias=True) to get the wire shape.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================
# EPISTEMIC INFERENCE
# ============================================================

INFERENCE_TYPES = (
    "deductive", "inductive", "analogical", "analytic",
    "causal", "definitional", "probabilistic",
)


class Argument(_CamelModel):
    id: str
    core_claim: str = ""
    explicit_premises: list[str] = Field(default_factory=list)
    hidden_premises: list[str] = Field(default_factory=list)
    inference_type: str = "unspecified"


class Judgment(_CamelModel):
    coherence_score: float = Field(0.5, ge=0.0, le=1.0)
    reasoning_type: str = "Unknown"
    logical_soundness: str = "Unable to assess"
    conceptual_completeness: str = "Unable to assess"
    issues: list[str] = Field(default_factory=list)


class InferenceResult(_CamelModel):
    arguments: list[Argument] = Field(default_factory=list)
    judgment: Judgment = Field(default_factory=Judgment)
    rewritten_text: str = ""
    overall_coherence: float = Field(0.5, ge=0.0, le=1.0)
    meta_judgment: Optional[str] = None


# ============================================================
# JUSTIFICATION BUILDER
# ============================================================

EVIDENCE_TYPES = ("empirical", "conceptual", "definitional")


class Claim(_CamelModel):
    claim: str
    is_underdeveloped: bool = True


class JustificationChain(_CamelModel):
    claim: str = ""
    premises: list[str] = Field(default_factory=list)
    conclusion: str = ""
    evidence_type: str = "conceptual"


class JustificationResult(_CamelModel):
    detected_claims: list[Claim] = Field(default_factory=list)
    justification_chains: list[JustificationChain] = Field(default_factory=list)
    coherence_score: float = Field(0.5, ge=0.0, le=1.0)
    completeness: str = "Unable to assess"
    weaknesses: list[str] = Field(default_factory=list)
    rewritten_text: str = ""


# ============================================================
# KNOWLEDGE-TO-UTILITY MAPPER
# ============================================================

UTILITY_TYPES = (
    "explanatory", "predictive", "prescriptive",
    "methodological", "philosophical-epistemic",
)


class UtilityMapping(_CamelModel):
    type: str = "explanatory"
    derived_utility: str = ""
    description: str = ""


class JudgmentReport(_CamelModel):
    breadth: str = "Unable to assess"
    depth: str = "Unable to assess"
    limitations: list[str] = Field(default_factory=list)
    transformative_potential: str = "Unable to assess"


class UtilityResult(_CamelModel):
    operative_knowledge: list[str] = Field(default_factory=list)
    utility_mappings: list[UtilityMapping] = Field(default_factory=list)
    utility_augmented_rewrite: str = ""
    judgment_report: JudgmentReport = Field(default_factory=JudgmentReport)
    utility_rank: float = Field(5.0, ge=0.0, le=10.0)


# ============================================================
# COGNITIVE INTEGRITY LAYER
# ============================================================

class DiagnosticBlock(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reality_anchor: float = Field(0.5, ge=0.0, le=1.0, alias="RealityAnchor")
    causal_depth: float = Field(0.5, ge=0.0, le=1.0, alias="CausalDepth")
    friction: float = Field(0.5, ge=0.0, le=1.0, alias="Friction")
    compression: float = Field(0.5, ge=0.0, le=1.0, alias="Compression")
    simulation_index: float = Field(0.5, ge=0.0, le=1.0, alias="SimulationIndex")
    level_coherence: float = Field(0.5, ge=0.0, le=1.0, alias="LevelCoherence")
    composite_score: float = Field(0.5, ge=0.0, le=1.0, alias="CompositeScore")
    integrity_type: str = Field("Unknown", alias="IntegrityType")


# Metric attributes, in the order the UI and reports list them.
DIAGNOSTIC_METRICS = (
    "reality_anchor", "causal_depth", "friction", "compression",
    "simulation_index", "level_coherence", "composite_score",
)


class IntegrityResult(BaseModel):
    authenticity_commentary: str = "Unable to assess authenticity"
    reconstructed_passage: str = ""
    diagnostic_block: DiagnosticBlock = Field(default_factory=DiagnosticBlock)
    interpretation_summary: str = "Unable to provide interpretation"


# ============================================================
# COGNITIVE CONTINUITY LAYER
# ============================================================

class ContinuityResult(_CamelModel):
    target: str = "New Text"
    reference_set: list[str] = Field(default_factory=list)
    composite_score: float = Field(0.5, ge=0.0, le=1.0)
    pairwise: dict[str, float] = Field(default_factory=dict)
    alignment_summary: list[str] = Field(default_factory=list)
    continuity_rewrite: Optional[str] = None


ModuleResult = Union[
    InferenceResult,
    JustificationResult,
    UtilityResult,
    IntegrityResult,
    ContinuityResult,
]
