"""
Debate Map Core

This package holds the authoritative state of a debate map: participants,
typed statements and typed relations between them. Each layer communicates
only through explicit contracts.

LAYER STRUCTURE:
================

1. CONTRACTS (contracts/)
   - Responsibility: Enums, frozen records, error codes, audit entries
   - Outputs: Statement, Relation, Participant, DebateMapError hierarchy
   - MUST NOT: Hold state or depend on any other layer

2. CORE GRAPH STORE (core/)
   - Responsibility: Constraint rules, the graph container, the store facade
   - Allowed inputs: Mutation requests with explicit ids
   - Outputs: New ids, immutable records, typed errors
   - MUST NOT: Leave the graph in a state that fails validation

3. SNAPSHOT STORAGE (storage/)
   - Responsibility: Versioned, self-contained serialization
   - Outputs: Snapshot documents and their JSON bytes
   - MUST NOT: Persist anything itself or write UI state

4. OBSERVABILITY & AUDIT (observability/)
   - Responsibility: Append-only record of successful mutations
   - MUST NOT: Modify store behavior

5. API (api/)
   - Responsibility: HTTP driver over a single store
   - MUST NOT: Apply rules of its own; every decision is the store's

The derived view (projection, layout, render contracts) lives in the
separate debateview package and only reads from this one.

CONSTRAINTS ENFORCED:
=====================
- Atomic mutations: a failed operation changes nothing
- Acyclic hierarchy: every non-Thesis has at most one parent relation
- Deterministic: identical snapshots yield identical graphs
- Explicit errors: no silent fallbacks
"""

from .config import DebateMapConfig, StoreConfig, LayoutConfig, ObservabilityConfig
from .core import DebateStore, DebateGraph, UiState
from .contracts import (
    StatementKind, StrengthType, EdgeKind, FilterMode,
    Participant, Statement, Relation,
    DebateMapError, ConstraintError, NotFoundError, CycleError,
    DuplicateSummaryError, UnsupportedSnapshotError, InvariantViolation,
)

__version__ = "1.0.0"

__all__ = [
    'DebateMapConfig', 'StoreConfig', 'LayoutConfig', 'ObservabilityConfig',
    'DebateStore', 'DebateGraph', 'UiState',
    'StatementKind', 'StrengthType', 'EdgeKind', 'FilterMode',
    'Participant', 'Statement', 'Relation',
    'DebateMapError', 'ConstraintError', 'NotFoundError', 'CycleError',
    'DuplicateSummaryError', 'UnsupportedSnapshotError', 'InvariantViolation',
]
