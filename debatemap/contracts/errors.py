"""
Error Contracts

Every validating store operation fails with one of these typed errors.
No silent fallbacks - every error state is enumerated.

POLICY:
=======
- Fail-atomic: on any error nothing in the store changes
- Fail-loud: the error carries one human-readable sentence
- Internal invariant breakage is a programmer error (InvariantViolation)
"""

from __future__ import annotations
from enum import Enum, auto


class ErrorCode(Enum):
    """Explicit error codes for deterministic error handling."""
    CONSTRAINT_VIOLATION = auto()
    NOT_FOUND = auto()
    CYCLE = auto()
    DUPLICATE_SUMMARY = auto()
    UNSUPPORTED_SNAPSHOT = auto()


class DebateMapError(Exception):
    """Base class for all user-facing debate map errors."""
    code = ErrorCode.CONSTRAINT_VIOLATION

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConstraintError(DebateMapError):
    """A proposed edge or mutation violates a kind/participant rule."""
    code = ErrorCode.CONSTRAINT_VIOLATION


class NotFoundError(DebateMapError):
    """A referenced node, edge or participant id does not exist."""
    code = ErrorCode.NOT_FOUND


class CycleError(ConstraintError):
    """A re-parent or re-target would create a hierarchical cycle."""
    code = ErrorCode.CYCLE


class DuplicateSummaryError(ConstraintError):
    """A Thesis already has an Argument Summary."""
    code = ErrorCode.DUPLICATE_SUMMARY


class UnsupportedSnapshotError(DebateMapError):
    """Snapshot version or shape not recognized."""
    code = ErrorCode.UNSUPPORTED_SNAPSHOT


class InvariantViolation(AssertionError):
    """Raised when internal state is found inconsistent. Never user-facing."""
    pass
