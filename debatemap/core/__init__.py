"""
Core Graph Store

RESPONSIBILITY: Hold the debate graph and enforce every rule on mutation
ALLOWED INPUTS: Store operations with explicit ids and field values
OUTPUTS: New ids, immutable Statement/Relation records, typed errors

WHAT THIS LAYER MUST NOT DO:
============================
- Compute positions or visual state (debateview's job)
- Encode bytes (storage layer's job)
- Partially apply a rejected mutation

BOUNDARY ENFORCEMENT:
=====================
- DebateGraph mutators are primitive and unchecked; only the store calls them
- constraints holds pure predicates; the store runs them before any write
- UiState is transient and never validated
"""

from .participants import ParticipantRegistry
from .graph import DebateGraph
from .constraints import (
    check_hierarchical_edge, check_no_cycle, is_hierarchical_edge_allowed,
    t2_link_violation, refers_to_violation, peer_violation,
    eligible_parents, eligible_targets_for_new, eligible_t2_peers,
    validate_graph, assert_invariants,
)
from .ui_state import LinkHighlight, ViewFilters, UiState
from .store import DebateStore, PATCHABLE_FIELDS, LEGEND_KINDS

__all__ = [
    'ParticipantRegistry', 'DebateGraph',
    'check_hierarchical_edge', 'check_no_cycle', 'is_hierarchical_edge_allowed',
    't2_link_violation', 'refers_to_violation', 'peer_violation',
    'eligible_parents', 'eligible_targets_for_new', 'eligible_t2_peers',
    'validate_graph', 'assert_invariants',
    'LinkHighlight', 'ViewFilters', 'UiState',
    'DebateStore', 'PATCHABLE_FIELDS', 'LEGEND_KINDS',
]
