"""
errors.py - Error taxonomy for tree extraction.

Three outcomes are kept apart:

- absence: a query found nothing. Represented as ``None`` or an
  ``Extraction`` with status ``ABSENT``; not an error.
- extraction failure: a sub-structure the grammar guarantees is missing
  (e.g. a parameter without a name). ``ExtractionError`` / status ``FAILED``.
- invariant violation: a classification that the calling predicate promised
  was exhaustive fell through. ``InvariantViolation``.

None of them is allowed to escape a function-info extractor.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class AstMineError(Exception):
    """Base class for all ast-mine errors."""


class ExtractionError(AstMineError):
    """A required sub-structure was not found where the grammar puts it."""


class InvariantViolation(AstMineError):
    """An internal classification reached a branch it should never reach."""


class ExtractionStatus(str, Enum):
    OK = "ok"
    ABSENT = "absent"
    FAILED = "failed"


@dataclass(frozen=True)
class Extraction(Generic[T]):
    """Result of a lookup that can succeed, find nothing, or fail."""
    status: ExtractionStatus
    value: Optional[T] = None
    reason: Optional[str] = None

    @classmethod
    def ok(cls, value: T) -> "Extraction[T]":
        return cls(ExtractionStatus.OK, value)

    @classmethod
    def absent(cls) -> "Extraction[T]":
        return cls(ExtractionStatus.ABSENT)

    @classmethod
    def failed(cls, reason: str) -> "Extraction[T]":
        return cls(ExtractionStatus.FAILED, reason=reason)

    @property
    def is_ok(self) -> bool:
        return self.status is ExtractionStatus.OK

    @property
    def is_failed(self) -> bool:
        return self.status is ExtractionStatus.FAILED
