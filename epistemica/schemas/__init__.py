from epistemica.schemas.results import (
    Argument,
    Claim,
    ContinuityResult,
    DiagnosticBlock,
    InferenceResult,
    IntegrityResult,
    Judgment,
    JudgmentReport,
    JustificationChain,
    JustificationResult,
    ModuleResult,
    UtilityMapping,
    UtilityResult,
)

__all__ = [
    "Argument",
    "Claim",
    "ContinuityResult",
    "DiagnosticBlock",
    "InferenceResult",
    "IntegrityResult",
    "Judgment",
    "JudgmentReport",
    "JustificationChain",
    "JustificationResult",
    "ModuleResult",
    "UtilityMapping",
    "UtilityResult",
]
