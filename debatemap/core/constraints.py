"""
Constraint Rules
================

Pure predicates deciding whether a proposed edge is legal given the current
graph. Nothing here mutates state.

RULE TABLE (hierarchical edges):
================================
supports      parent -> Argument          parent in {Thesis, Argument, Counter, Evidence}, same participant
supports      Thesis -> Argument Summary  same participant, at most one Summary per Thesis
attacks       Counter -> target           target in {Argument, Counter, Evidence}, DIFFERENT participant
evidence-of   Evidence -> target          target in {Argument, Counter, Argument Summary}, same participant
agrees-with   Agreement -> target         target in {Argument, Counter}, DIFFERENT participant

Every hierarchical edge must also keep the hierarchy acyclic and leave each
child with exactly one parent edge.

PEER RULES:
===========
t2-link     same kind in {Argument, Counter, Evidence}, same participant, both Type 2
refers-to   any two distinct nodes
"""

from __future__ import annotations
from typing import List, Optional
import networkx as nx

from ..contracts.base import (
    EdgeKind, Statement, StatementKind, STRENGTH_KINDS, PARENT_EDGE_KIND,
)
from ..contracts.errors import (
    ConstraintError, CycleError, DuplicateSummaryError, InvariantViolation,
)
from .graph import DebateGraph


ARGUMENT_PARENT_KINDS = frozenset({
    StatementKind.THESIS, StatementKind.ARGUMENT,
    StatementKind.COUNTER, StatementKind.EVIDENCE,
})
ATTACK_TARGET_KINDS = frozenset({
    StatementKind.ARGUMENT, StatementKind.COUNTER, StatementKind.EVIDENCE,
})
EVIDENCE_TARGET_KINDS = frozenset({
    StatementKind.ARGUMENT, StatementKind.COUNTER, StatementKind.ARGUMENT_SUMMARY,
})
AGREEMENT_TARGET_KINDS = frozenset({
    StatementKind.ARGUMENT, StatementKind.COUNTER,
})


# =============================================================================
# HIERARCHICAL RULES
# =============================================================================

def check_supports(
    graph: DebateGraph,
    parent: Statement,
    child: Statement,
    replacing_edge_id: Optional[str] = None,
) -> None:
    """
    Validate supports(parent -> child).

    replacing_edge_id names the child's current supports edge when the call
    is a re-parent; that edge is ignored by the one-parent and summary checks.
    """
    if child.kind == StatementKind.ARGUMENT:
        if parent.kind not in ARGUMENT_PARENT_KINDS:
            raise ConstraintError(
                "Arguments can only attach to a Thesis, Argument, Counter, or Evidence."
            )
        if parent.participant_id != child.participant_id:
            raise ConstraintError(
                "Arguments can only attach to statements of the same Debate Participant."
            )
    elif child.kind == StatementKind.ARGUMENT_SUMMARY:
        if parent.kind != StatementKind.THESIS:
            raise ConstraintError("Argument Summaries can only attach to a Thesis.")
        if parent.participant_id != child.participant_id:
            raise ConstraintError(
                "Argument Summaries can only attach to a Thesis of the same Debate Participant."
            )
        if graph.summary_of(parent.id, excluding=child.id) is not None:
            raise DuplicateSummaryError("That Thesis already has an Argument Summary.")
    else:
        raise ConstraintError(
            "Only Arguments and Argument Summaries can be the target of a supports relation."
        )

    _check_single_parent(graph, child, replacing_edge_id)
    check_no_cycle(graph, parent.id, child.id)


def check_attacks(graph: DebateGraph, source: Statement, target: Statement,
                  replacing_edge_id: Optional[str] = None) -> None:
    if source.kind != StatementKind.COUNTER:
        raise ConstraintError("Only Counters can attack another statement.")
    if target.kind not in ATTACK_TARGET_KINDS or source.participant_id == target.participant_id:
        raise ConstraintError("Counters must target an opponent Argument, Counter, or Evidence.")
    _check_single_parent(graph, source, replacing_edge_id)
    check_no_cycle(graph, target.id, source.id)


def check_evidence_of(graph: DebateGraph, source: Statement, target: Statement,
                      replacing_edge_id: Optional[str] = None) -> None:
    if source.kind != StatementKind.EVIDENCE:
        raise ConstraintError("Only Evidence can be evidence of another statement.")
    if target.kind not in EVIDENCE_TARGET_KINDS or source.participant_id != target.participant_id:
        raise ConstraintError(
            "Evidence must target an Argument, Counter, or Argument Summary "
            "of the same Debate Participant."
        )
    _check_single_parent(graph, source, replacing_edge_id)
    check_no_cycle(graph, target.id, source.id)


def check_agrees_with(graph: DebateGraph, source: Statement, target: Statement,
                      replacing_edge_id: Optional[str] = None) -> None:
    if source.kind != StatementKind.AGREEMENT:
        raise ConstraintError("Only Agreements can agree with another statement.")
    if target.kind not in AGREEMENT_TARGET_KINDS or source.participant_id == target.participant_id:
        raise ConstraintError("Agreements must target an opponent Argument or Counter.")
    _check_single_parent(graph, source, replacing_edge_id)
    check_no_cycle(graph, target.id, source.id)


def check_hierarchical_edge(
    graph: DebateGraph,
    kind: EdgeKind,
    source_id: str,
    target_id: str,
    replacing_edge_id: Optional[str] = None,
) -> None:
    """Validate a proposed hierarchical edge (kind, source, target)."""
    check_hierarchical_edge_for(graph, kind, graph.require_node(source_id),
                                graph.require_node(target_id), replacing_edge_id)


def check_hierarchical_edge_for(
    graph: DebateGraph,
    kind: EdgeKind,
    source: Statement,
    target: Statement,
    replacing_edge_id: Optional[str] = None,
) -> None:
    """Same as check_hierarchical_edge, for statements not yet in the graph."""
    if kind == EdgeKind.SUPPORTS:
        check_supports(graph, source, target, replacing_edge_id)
    elif kind == EdgeKind.ATTACKS:
        check_attacks(graph, source, target, replacing_edge_id)
    elif kind == EdgeKind.EVIDENCE_OF:
        check_evidence_of(graph, source, target, replacing_edge_id)
    elif kind == EdgeKind.AGREES_WITH:
        check_agrees_with(graph, source, target, replacing_edge_id)
    else:
        raise ConstraintError(f"{kind.value} is not a hierarchical relation.")


def check_no_cycle(graph: DebateGraph, parent_id: str, child_id: str) -> None:
    """Refuse parent -> child when parent is child or one of its descendants."""
    if parent_id == child_id:
        raise CycleError("A statement cannot be attached to itself.")
    if graph.has_node(child_id) and parent_id in graph.descendants_of(child_id):
        raise CycleError("A statement cannot be attached to one of its own descendants.")


def _check_single_parent(graph: DebateGraph, child: Statement,
                         replacing_edge_id: Optional[str]) -> None:
    existing = [e for e in graph.parent_edges(child.id) if e.id != replacing_edge_id]
    if existing:
        raise ConstraintError(f"{child.kind.value} {child.title!r} already has a parent relation.")


def is_hierarchical_edge_allowed(graph: DebateGraph, kind: EdgeKind, source_id: str,
                                 target_id: str, replacing_edge_id: Optional[str] = None) -> bool:
    try:
        check_hierarchical_edge(graph, kind, source_id, target_id, replacing_edge_id)
    except ConstraintError:
        return False
    return True


# =============================================================================
# PEER RULES
# =============================================================================

def t2_link_violation(a: Statement, b: Statement) -> Optional[str]:
    """Reason a t2-link between a and b is illegal, or None."""
    if a.id == b.id:
        return "A statement cannot be linked to itself."
    if a.kind not in STRENGTH_KINDS or a.kind != b.kind:
        return "Type 2 links join two statements of the same kind (Argument, Counter, or Evidence)."
    if a.participant_id != b.participant_id:
        return "Type 2 links join statements of the same Debate Participant."
    if not (a.is_type2 and b.is_type2):
        return "Type 2 links join two Type 2 statements."
    return None


def refers_to_violation(a: Statement, b: Statement) -> Optional[str]:
    if a.id == b.id:
        return "A statement cannot refer to itself."
    return None


def peer_violation(kind: EdgeKind, a: Statement, b: Statement) -> Optional[str]:
    if kind == EdgeKind.T2_LINK:
        return t2_link_violation(a, b)
    if kind == EdgeKind.REFERS_TO:
        return refers_to_violation(a, b)
    return f"{kind.value} is not a peer relation."


# =============================================================================
# ELIGIBILITY (derived from the rules above)
# =============================================================================

def eligible_parents(graph: DebateGraph, node_id: str) -> List[str]:
    """
    Nodes the statement could legally be re-attached to.

    For Arguments/Summaries this is the supports parent; for Counters,
    Evidence and Agreements it is the target of their parent edge.
    """
    node = graph.require_node(node_id)
    edge_kind = PARENT_EDGE_KIND.get(node.kind)
    if edge_kind is None:
        return []
    current = graph.parent_edge(node_id)
    replacing = current.id if current else None

    result = []
    for candidate in graph.nodes:
        if candidate.id == node_id:
            continue
        if edge_kind == EdgeKind.SUPPORTS:
            allowed = is_hierarchical_edge_allowed(graph, edge_kind, candidate.id, node_id, replacing)
        else:
            allowed = is_hierarchical_edge_allowed(graph, edge_kind, node_id, candidate.id, replacing)
        if allowed:
            result.append(candidate.id)
    return result


def eligible_targets_for_new(graph: DebateGraph, kind: StatementKind,
                             participant_id: str) -> List[str]:
    """Candidate parents/targets for a statement about to be created."""
    if kind == StatementKind.THESIS:
        return []
    pending = Statement(id="\0pending", kind=kind, participant_id=participant_id, title="")
    edge_kind = PARENT_EDGE_KIND[kind]
    result = []
    for candidate in graph.nodes:
        try:
            if edge_kind == EdgeKind.SUPPORTS:
                check_supports(graph, candidate, pending)
            elif edge_kind == EdgeKind.ATTACKS:
                check_attacks(graph, pending, candidate)
            elif edge_kind == EdgeKind.EVIDENCE_OF:
                check_evidence_of(graph, pending, candidate)
            else:
                check_agrees_with(graph, pending, candidate)
        except ConstraintError:
            continue
        result.append(candidate.id)
    return result


def eligible_t2_peers(graph: DebateGraph, node_id: str) -> List[str]:
    node = graph.require_node(node_id)
    return [
        other.id for other in graph.nodes
        if t2_link_violation(node, other) is None
    ]


# =============================================================================
# WHOLE-GRAPH VALIDATION
# =============================================================================

def validate_graph(graph: DebateGraph) -> None:
    """
    Check every invariant of the data model.

    Raises the typed error matching the first violation found. Used when a
    whole graph arrives at once (snapshot load).
    """
    ids = graph.node_ids()
    for node in graph.nodes:
        if node.participant_id not in graph.participants:
            raise ConstraintError(
                f"Statement {node.id!r} references unknown participant {node.participant_id!r}."
            )
        if node.kind in STRENGTH_KINDS and node.strength_type is None:
            raise ConstraintError(f"{node.kind.value} {node.id!r} requires a strength type.")
        if node.kind not in STRENGTH_KINDS and node.strength_type is not None:
            raise ConstraintError(f"{node.kind.value} {node.id!r} cannot carry a strength type.")

    for edge in graph.edges:
        if edge.source not in ids or edge.target not in ids:
            raise ConstraintError(f"Relation {edge.id!r} references a missing statement.")

    # A child has exactly one parent edge of the kind matching its own kind.
    # Zero is legal: deleting a parent leaves its children as detached roots.
    for node in graph.nodes:
        parents = graph.parent_edges(node.id)
        if node.kind == StatementKind.THESIS:
            if parents:
                raise ConstraintError(f"Thesis {node.id!r} cannot have a parent relation.")
            continue
        expected = PARENT_EDGE_KIND[node.kind]
        if len(parents) > 1 or (parents and parents[0].kind != expected):
            raise ConstraintError(
                f"{node.kind.value} {node.id!r} needs exactly one {expected.value} parent relation."
            )

    hierarchy = graph.hierarchy()
    if not nx.is_directed_acyclic_graph(hierarchy):
        raise CycleError("The hierarchical relations contain a cycle.")

    # Kind/participant rules per hierarchical edge, checked edge by edge
    for edge in graph.edges:
        if edge.kind.is_hierarchical:
            check_hierarchical_edge(graph, edge.kind, edge.source, edge.target,
                                    replacing_edge_id=edge.id)

    for kind in (EdgeKind.T2_LINK, EdgeKind.REFERS_TO):
        seen = set()
        for edge in graph.edges_of_kind(kind):
            pair = frozenset((edge.source, edge.target))
            if pair in seen:
                raise ConstraintError(f"Duplicate {kind.value} relation between the same statements.")
            seen.add(pair)
            reason = peer_violation(kind, graph.node(edge.source), graph.node(edge.target))
            if reason:
                raise ConstraintError(reason)


def assert_invariants(graph: DebateGraph) -> None:
    """validate_graph for internal use: any violation is a programmer error."""
    try:
        validate_graph(graph)
    except ConstraintError as exc:
        raise InvariantViolation(str(exc)) from exc
