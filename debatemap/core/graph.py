"""
Debate Graph
============

Authoritative container for nodes, edges and participants.

TWO RELATIONS, NEVER UNIFIED:
=============================
- Hierarchy: parent -> child, derived from hierarchical edges
  (supports, attacks, evidence-of, agrees-with)
- Peers: unordered pairs from t2-link and refers-to edges

This class holds primitive, unchecked mutators. Rule enforcement lives in
the constraints module and the store facade; nothing else should call the
mutators directly.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Set
import networkx as nx

from ..contracts.base import (
    EdgeKind, Relation, Statement, StatementKind,
)
from ..contracts.errors import NotFoundError
from .participants import ParticipantRegistry


class DebateGraph:
    """
    Nodes, edges and participants, in insertion order.

    Ordering matters: default-parent selection, projection output and the
    layout's stable sorts all follow insertion order.
    """

    def __init__(
        self,
        participants: Optional[ParticipantRegistry] = None,
        nodes: Iterable[Statement] = (),
        edges: Iterable[Relation] = (),
    ):
        self.participants = participants or ParticipantRegistry()
        self._nodes: Dict[str, Statement] = {}
        self._edges: Dict[str, Relation] = {}
        for node in nodes:
            self._nodes[node.id] = node
        for edge in edges:
            self._edges[edge.id] = edge

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def nodes(self) -> List[Statement]:
        return list(self._nodes.values())

    @property
    def edges(self) -> List[Relation]:
        return list(self._edges.values())

    def node_ids(self) -> Set[str]:
        return set(self._nodes)

    def edge_ids(self) -> Set[str]:
        return set(self._edges)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def node(self, node_id: str) -> Optional[Statement]:
        return self._nodes.get(node_id)

    def edge(self, edge_id: str) -> Optional[Relation]:
        return self._edges.get(edge_id)

    def require_node(self, node_id: str) -> Statement:
        node = self._nodes.get(node_id)
        if node is None:
            raise NotFoundError(f"Statement {node_id!r} does not exist.")
        return node

    def require_edge(self, edge_id: str) -> Relation:
        edge = self._edges.get(edge_id)
        if edge is None:
            raise NotFoundError(f"Relation {edge_id!r} does not exist.")
        return edge

    def nodes_of_kind(self, kind: StatementKind) -> List[Statement]:
        return [n for n in self._nodes.values() if n.kind == kind]

    def incident_edges(self, node_id: str) -> List[Relation]:
        return [e for e in self._edges.values() if e.touches(node_id)]

    def edges_of_kind(self, kind: EdgeKind) -> List[Relation]:
        return [e for e in self._edges.values() if e.kind == kind]

    # =========================================================================
    # HIERARCHY
    # =========================================================================

    def hierarchy(self) -> nx.DiGraph:
        """
        Build the parent -> child DiGraph.

        Every node is present; peer edges are ignored.
        """
        graph = nx.DiGraph()
        graph.add_nodes_from(self._nodes)
        for edge in self._edges.values():
            pair = edge.parent_child()
            if pair is None:
                continue
            parent, child = pair
            graph.add_edge(parent, child, edge_id=edge.id, kind=edge.kind.value)
        return graph

    def parent_edges(self, child_id: str) -> List[Relation]:
        """All hierarchical edges in which child_id is the child."""
        result = []
        for edge in self._edges.values():
            pair = edge.parent_child()
            if pair is not None and pair[1] == child_id:
                result.append(edge)
        return result

    def parent_edge(self, child_id: str) -> Optional[Relation]:
        edges = self.parent_edges(child_id)
        return edges[0] if edges else None

    def parent_of(self, child_id: str) -> Optional[str]:
        edge = self.parent_edge(child_id)
        return edge.parent_child()[0] if edge else None

    def children_of(self, parent_id: str) -> List[str]:
        result = []
        for edge in self._edges.values():
            pair = edge.parent_child()
            if pair is not None and pair[0] == parent_id:
                result.append(pair[1])
        return result

    def descendants_of(self, node_id: str) -> Set[str]:
        """All hierarchical descendants, excluding node_id itself."""
        if node_id not in self._nodes:
            raise NotFoundError(f"Statement {node_id!r} does not exist.")
        return set(nx.descendants(self.hierarchy(), node_id))

    def summary_of(self, thesis_id: str, excluding: Optional[str] = None) -> Optional[str]:
        """The Argument Summary hanging off a Thesis, if any."""
        for edge in self._edges.values():
            if edge.kind != EdgeKind.SUPPORTS or edge.source != thesis_id:
                continue
            if edge.target == excluding:
                continue
            child = self._nodes.get(edge.target)
            if child is not None and child.kind == StatementKind.ARGUMENT_SUMMARY:
                return child.id
        return None

    # =========================================================================
    # PEERS
    # =========================================================================

    def peer_edge(self, kind: EdgeKind, a: str, b: str) -> Optional[Relation]:
        """The peer edge of `kind` between a and b, in either direction."""
        for edge in self._edges.values():
            if edge.kind != kind:
                continue
            if {edge.source, edge.target} == {a, b}:
                return edge
        return None

    def peers_of(self, kind: EdgeKind, node_id: str) -> List[str]:
        return [
            e.other_end(node_id)
            for e in self._edges.values()
            if e.kind == kind and e.touches(node_id)
        ]

    # =========================================================================
    # PRIMITIVE MUTATORS (unchecked; store-only)
    # =========================================================================

    def put_node(self, node: Statement) -> None:
        self._nodes[node.id] = node

    def put_edge(self, edge: Relation) -> None:
        self._edges[edge.id] = edge

    def remove_edge(self, edge_id: str) -> Relation:
        return self._edges.pop(edge_id)

    def remove_node(self, node_id: str) -> List[Relation]:
        """Remove a node and every incident edge; returns the removed edges."""
        removed = self.incident_edges(node_id)
        for edge in removed:
            del self._edges[edge.id]
        del self._nodes[node_id]
        return removed

    def copy(self) -> DebateGraph:
        return DebateGraph(
            participants=self.participants.copy(),
            nodes=self._nodes.values(),
            edges=self._edges.values(),
        )
