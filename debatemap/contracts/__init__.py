"""
Contracts shared by the debate map core and its view layer.
"""

from .base import (
    StatementKind, StrengthType, EdgeKind, FilterMode,
    Participant, Statement, Relation, canonical_pair,
    STRENGTH_KINDS, HIERARCHICAL_KINDS, PEER_KINDS, CHILD_SOURCED_KINDS,
    PARENT_EDGE_KIND,
)
from .errors import (
    ErrorCode, DebateMapError, ConstraintError, NotFoundError, CycleError,
    DuplicateSummaryError, UnsupportedSnapshotError, InvariantViolation,
)
from .events import Timestamp, AuditEventType, AuditLogEntry

__all__ = [
    'StatementKind', 'StrengthType', 'EdgeKind', 'FilterMode',
    'Participant', 'Statement', 'Relation', 'canonical_pair',
    'STRENGTH_KINDS', 'HIERARCHICAL_KINDS', 'PEER_KINDS', 'CHILD_SOURCED_KINDS',
    'PARENT_EDGE_KIND',
    'ErrorCode', 'DebateMapError', 'ConstraintError', 'NotFoundError', 'CycleError',
    'DuplicateSummaryError', 'UnsupportedSnapshotError', 'InvariantViolation',
    'Timestamp', 'AuditEventType', 'AuditLogEntry',
]
