"""
Epistemica — Chunked LLM Analysis of Argumentative Text

Long texts are split into bounded chunks, each chunk is analyzed by an
external completion backend behind a multi-provider failover chain,
and the per-chunk results are merged back into one report.

Public API:
  - analyze:          hard cap + argument gate + module dispatch + persist
  - check_doctrine:   stance extraction scored against the doctrine policy
  - segment_text:     paragraph/sentence aware chunking
  - CompletionGateway: sequential provider failover
  - detect_argument:  advisory argument gate (never raises)
  - extract_stance:   rule-based stance with AI fallback (never raises)
  - compute_doctrine_alignment: stance vs. policy diff
  - LLMProvider:      abstract completion interface for provider swapping
  - setup_logging:    route the epistemica loggers to stdout (call once at startup)

Usage:
    from epistemica import analyze, ModuleType, setup_logging
    from epistemica.llm.factory import build_gateway
"""

__version__ = "0.3.0"

from epistemica.detector import ArgumentDetection, Detection, detect_argument
from epistemica.doctrine import DEFAULT_DOCTRINES, DoctrineAlignment, compute_doctrine_alignment
from epistemica.errors import (
    BackendExhausted,
    DetectionError,
    EpistemicaError,
    MalformedReply,
    OverLength,
    PersistenceFailure,
)
from epistemica.llm import LLMProvider, ProviderId
from epistemica.llm.gateway import CompletionGateway, CompletionRequest
from epistemica.logging import setup_logging
from epistemica.pipeline import AnalysisOutcome, DoctrineCheck, ModuleType, analyze, check_doctrine
from epistemica.stance import StanceTokens, extract_stance
from epistemica.storage import (
    AnalysisRecord,
    InMemoryAnalysisStore,
    InMemoryPolicyStore,
    SQLiteAnalysisStore,
)
from epistemica.text import count_words, segment_text

__all__ = [
    "ArgumentDetection",
    "Detection",
    "detect_argument",
    "DEFAULT_DOCTRINES",
    "DoctrineAlignment",
    "compute_doctrine_alignment",
    "BackendExhausted",
    "DetectionError",
    "EpistemicaError",
    "MalformedReply",
    "OverLength",
    "PersistenceFailure",
    "LLMProvider",
    "ProviderId",
    "CompletionGateway",
    "CompletionRequest",
    "setup_logging",
    "AnalysisOutcome",
    "DoctrineCheck",
    "ModuleType",
    "analyze",
    "check_doctrine",
    "StanceTokens",
    "extract_stance",
    "AnalysisRecord",
    "InMemoryAnalysisStore",
    "InMemoryPolicyStore",
    "SQLiteAnalysisStore",
    "count_words",
    "segment_text",
]
