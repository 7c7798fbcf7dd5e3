"""
Doctrine Alignment Scorer

Compares extracted stance tokens against the reference doctrine.

Scoring:
  Start at 1.0.
  law_kind mismatch:           -0.4
  explanation_order mismatch:  -0.4
  dn_commitment mismatch:      -0.4
  regularity_role mismatch:    -0.2
  Unclear / neutral dimensions are skipped entirely.
  Clamped to [0, 1].

Dimensions are checked in the order above, which is also the order
of the conflicts and alignments lists.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Mapping

if TYPE_CHECKING:
    from epistemica.stance import StanceTokens


# key -> (default value, description)
DEFAULT_DOCTRINES: dict[str, tuple[str, str]] = {
    "LAW_TYPE": (
        "proportional_dependencies",
        "Laws encode proportional dependencies, not universal regularities",
    ),
    "EXPLANATION_ORDER": (
        "instance_to_law",
        "Singular causal instances are grasped before the laws that quantify them",
    ),
    "DN_MODEL": (
        "rejected",
        "The deductive-nomological model of explanation is rejected",
    ),
    "REGULARITY_STATUS": (
        "surface shadow; not constitutive",
        "Regularities are the surface shadow of laws, not constitutive of them",
    ),
}

PENALTIES = {
    "law_kind": 0.4,
    "explanation_order": 0.4,
    "dn_commitment": 0.4,
    "regularity_role": 0.2,
}

_DN_POLICY_TO_STANCE = {"accepted": "accept", "rejected": "reject"}
_REGULARITY_ROLES = ("surface", "foundational")


@dataclass
class DoctrineAlignment:
    composite_score: float
    conflicts: list[str] = field(default_factory=list)
    alignments: list[str] = field(default_factory=list)
    mismatch_details: dict[str, dict[str, str]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "crossPhaseCoherence": self.composite_score,
            "conflicts": list(self.conflicts),
            "alignments": list(self.alignments),
            "mismatchDetails": {k: dict(v) for k, v in self.mismatch_details.items()},
        }


def _policy(policy: Mapping[str, str], key: str) -> str:
    value = policy.get(key)
    return value if value else DEFAULT_DOCTRINES[key][0]


def _expected_regularity_role(policy_value: str) -> str:
    """
    First role keyword in the free-text policy, else the text itself.

    Plain keyword search: "not foundational; surface" still reads as
    foundational.
    """
    lowered = policy_value.lower()
    hits = [(lowered.find(role), role) for role in _REGULARITY_ROLES if role in lowered]
    return min(hits)[1] if hits else policy_value


def compute_doctrine_alignment(
    stance: "StanceTokens",
    policy: Mapping[str, str],
) -> DoctrineAlignment:
    """Score how well the stance agrees with the doctrine policy."""
    score = 1.0
    conflicts: list[str] = []
    alignments: list[str] = []
    details: dict[str, dict[str, str]] = {}

    def mismatch(dimension: str, label: str, expected: str, found: str) -> None:
        nonlocal score
        score -= PENALTIES[dimension]
        conflicts.append(f'{label}: found "{found}", expected "{expected}"')
        details[dimension] = {"expected": expected, "found": found}

    # --- law kind ---
    expected_law = _policy(policy, "LAW_TYPE")
    if stance.law_kind != "unclear":
        if stance.law_kind != expected_law:
            mismatch("law_kind", "Law conception", expected_law, stance.law_kind)
        else:
            alignments.append("Law conception aligns with doctrine")

    # --- explanation order ---
    expected_order = _policy(policy, "EXPLANATION_ORDER")
    if stance.explanation_order != "unclear":
        if stance.explanation_order != expected_order:
            mismatch("explanation_order", "Explanation order",
                     expected_order, stance.explanation_order)
        else:
            alignments.append("Explanation order aligns with doctrine")

    # --- DN commitment (policy says accepted/rejected, stance says accept/reject) ---
    expected_dn = _policy(policy, "DN_MODEL")
    if stance.dn_commitment != "neutral":
        wanted = _DN_POLICY_TO_STANCE.get(expected_dn.strip().lower())
        if stance.dn_commitment != wanted:
            mismatch("dn_commitment", "DN model commitment",
                     expected_dn, stance.dn_commitment)
        else:
            alignments.append("DN model position aligns with doctrine")

    # --- regularity role ---
    expected_role = _expected_regularity_role(_policy(policy, "REGULARITY_STATUS"))
    if stance.regularity_role != "unclear":
        if stance.regularity_role != expected_role:
            mismatch("regularity_role", "Regularity role",
                     expected_role, stance.regularity_role)
        else:
            alignments.append("Regularity status aligns with doctrine")

    return DoctrineAlignment(
        composite_score=max(0.0, min(1.0, score)),
        conflicts=conflicts,
        alignments=alignments,
        mismatch_details=details,
    )
