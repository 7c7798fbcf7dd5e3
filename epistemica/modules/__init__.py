"""Analysis modules. Each exposes an analyzer class and a process_* entry point."""

from epistemica.modules.base import ChunkedAnalyzer
from epistemica.modules.continuity import ContinuityAnalyzer, process_continuity
from epistemica.modules.inference import InferenceAnalyzer, process_inference
from epistemica.modules.integrity import IntegrityAnalyzer, process_integrity
from epistemica.modules.justification import JustificationAnalyzer, process_justification
from epistemica.modules.utility import UtilityAnalyzer, process_utility

__all__ = [
    "ChunkedAnalyzer",
    "ContinuityAnalyzer",
    "InferenceAnalyzer",
    "IntegrityAnalyzer",
    "JustificationAnalyzer",
    "UtilityAnalyzer",
    "process_continuity",
    "process_inference",
    "process_integrity",
    "process_justification",
    "process_utility",
]
