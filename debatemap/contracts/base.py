"""
Base Contracts and Shared Types

These are the foundational types used across the debate map core and the
derived view. All types here are IMMUTABLE and represent pure data.

BOUNDARY ENFORCEMENT:
=====================
- Statements, relations and participants are frozen dataclasses
- The store replaces records, it never mutates them in place
- Enum values are the exact strings written to snapshot documents
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Tuple


# =============================================================================
# ENUMERATIONS (Wire values)
# =============================================================================

class StatementKind(Enum):
    """The six kinds of argumentative statement."""
    THESIS = "Thesis"
    ARGUMENT = "Argument"
    ARGUMENT_SUMMARY = "Argument Summary"
    COUNTER = "Counter"
    EVIDENCE = "Evidence"
    AGREEMENT = "Agreement"

    @property
    def requires_strength(self) -> bool:
        return self in STRENGTH_KINDS


class StrengthType(Enum):
    """How a statement logically relates to its parent."""
    TYPE_1 = "Type 1"
    TYPE_2 = "Type 2"
    TYPE_3 = "Type 3"
    TYPE_4 = "Type 4"


class EdgeKind(Enum):
    """
    Relation kinds.

    HIERARCHICAL kinds define parent/child.
    PEER kinds are undirected and purely visual.
    """
    SUPPORTS = "supports"
    ATTACKS = "attacks"
    EVIDENCE_OF = "evidence-of"
    AGREES_WITH = "agrees-with"
    T2_LINK = "t2-link"
    REFERS_TO = "refers-to"

    @property
    def is_hierarchical(self) -> bool:
        return self in HIERARCHICAL_KINDS

    @property
    def is_peer(self) -> bool:
        return self in PEER_KINDS


class FilterMode(Enum):
    """How non-passing nodes are treated by the view."""
    DIM = "dim"
    HIDE = "hide"


STRENGTH_KINDS: FrozenSet[StatementKind] = frozenset({
    StatementKind.ARGUMENT,
    StatementKind.COUNTER,
    StatementKind.EVIDENCE,
})

HIERARCHICAL_KINDS: FrozenSet[EdgeKind] = frozenset({
    EdgeKind.SUPPORTS,
    EdgeKind.ATTACKS,
    EdgeKind.EVIDENCE_OF,
    EdgeKind.AGREES_WITH,
})

PEER_KINDS: FrozenSet[EdgeKind] = frozenset({
    EdgeKind.T2_LINK,
    EdgeKind.REFERS_TO,
})

# Edge kinds whose source is the child (the child points at its parent)
CHILD_SOURCED_KINDS: FrozenSet[EdgeKind] = frozenset({
    EdgeKind.ATTACKS,
    EdgeKind.EVIDENCE_OF,
    EdgeKind.AGREES_WITH,
})

# The one hierarchical parent edge kind each non-root statement kind carries
PARENT_EDGE_KIND = {
    StatementKind.ARGUMENT: EdgeKind.SUPPORTS,
    StatementKind.ARGUMENT_SUMMARY: EdgeKind.SUPPORTS,
    StatementKind.COUNTER: EdgeKind.ATTACKS,
    StatementKind.EVIDENCE: EdgeKind.EVIDENCE_OF,
    StatementKind.AGREEMENT: EdgeKind.AGREES_WITH,
}


# =============================================================================
# DOMAIN RECORDS
# =============================================================================

@dataclass(frozen=True)
class Participant:
    """A debate participant."""
    id: str
    name: str

    def __post_init__(self):
        if not self.id or not isinstance(self.id, str):
            raise ValueError("Participant id must be a non-empty string")


@dataclass(frozen=True)
class Statement:
    """
    A node of the debate map.

    strength_type is present iff kind is Argument, Counter or Evidence.
    collapsed hides hierarchical descendants in the view; self_collapsed is
    an auxiliary flag set by hosts that collapse a node on its own behalf.
    """
    id: str
    kind: StatementKind
    participant_id: str
    title: str
    body: Optional[str] = None
    first_mention: Optional[str] = None
    strength_type: Optional[StrengthType] = None
    collapsed: bool = False
    self_collapsed: bool = False

    @property
    def is_type2(self) -> bool:
        return self.strength_type == StrengthType.TYPE_2


@dataclass(frozen=True)
class Relation:
    """A typed edge between two statements."""
    id: str
    source: str
    target: str
    kind: EdgeKind

    def parent_child(self) -> Optional[Tuple[str, str]]:
        """
        Return (parent, child) for hierarchical kinds, None for peer kinds.

        supports(S->T): S is the parent.
        attacks / evidence-of / agrees-with (S->T): T is the parent.
        """
        if self.kind == EdgeKind.SUPPORTS:
            return (self.source, self.target)
        if self.kind in CHILD_SOURCED_KINDS:
            return (self.target, self.source)
        return None

    def touches(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id

    def other_end(self, node_id: str) -> str:
        return self.target if self.source == node_id else self.source


def canonical_pair(a: str, b: str) -> Tuple[str, str]:
    """Peer edges are stored smaller id first."""
    return (a, b) if a < b else (b, a)
