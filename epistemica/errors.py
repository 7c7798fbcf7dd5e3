"""
Error taxonomy.

  BackendExhausted   every provider in the failover chain failed
  MalformedReply     backend reply is not the JSON object we asked for
  OverLength         input exceeds the hard word cap (raised before any call)
  PersistenceFailure saving a produced result failed (logged, never surfaced)
  DetectionError     advisory detector fell back to its default
"""

from __future__ import annotations

from typing import Optional


class EpistemicaError(Exception):
    """Base class for all package errors."""


class BackendExhausted(EpistemicaError):
    """Raised when every provider in the trial order has failed."""

    def __init__(
        self,
        message: str,
        attempts: Optional[list[str]] = None,
        errors: Optional[list[BaseException]] = None,
    ):
        super().__init__(message)
        self.attempts = attempts or []
        self.errors = errors or []


class MalformedReply(EpistemicaError):
    """Raised when a backend reply cannot be parsed into the expected shape."""

    def __init__(self, message: str, raw: str = ""):
        super().__init__(message)
        self.raw = raw[:300]


class OverLength(EpistemicaError):
    """Raised when input exceeds the absolute word cap."""

    def __init__(self, word_count: int, limit: int):
        super().__init__(
            f"Text exceeds {limit:,}-word limit ({word_count:,} words)"
        )
        self.word_count = word_count
        self.limit = limit


class PersistenceFailure(EpistemicaError):
    """Raised by stores when a record cannot be written."""


class DetectionError(EpistemicaError):
    """Attached to a Detection when the AI path failed and a default was used."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
