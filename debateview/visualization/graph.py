"""
Graph Visualization Contracts

Responsibility:
Renderable debate graph: positioned statement cards and styled relations,
ready for a canvas host to draw without further decisions.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple

from debatemap.contracts import EdgeKind


EDGE_COLORS = {
    EdgeKind.SUPPORTS: '#1d4ed8',
    EdgeKind.EVIDENCE_OF: '#b45309',
    EdgeKind.ATTACKS: '#be185d',
    EdgeKind.AGREES_WITH: '#0e7490',
}
EDGE_LABELS = {
    EdgeKind.SUPPORTS: 'Supports',
    EdgeKind.EVIDENCE_OF: 'Evidence of',
    EdgeKind.ATTACKS: 'Counter',
    EdgeKind.AGREES_WITH: 'Agrees',
}
PEER_COLOR = '#64748b'
PEER_ACTIVE_COLOR = '#0ea5e9'
DIMMED_OPACITY = 0.25


@dataclass(frozen=True)
class GraphNode:
    """Renderable statement card."""
    node_id: str
    x: float
    y: float
    width: float
    height: float
    color: str          # participant color
    kind_color: str
    label: str
    entity_type: str    # statement kind
    participant_id: str
    strength: Optional[str]
    is_focal_point: bool  # selected
    hit: bool
    dimmed: bool
    edge_active: bool
    eligible_target: bool
    pickable: bool
    collapsed: bool
    title_marks: Tuple[Tuple[int, int], ...] = ()


@dataclass(frozen=True)
class GraphEdge:
    """Renderable relation."""
    edge_id: str
    source_id: str
    target_id: str
    kind: str
    thickness: float
    style: str  # thick, dashed
    color: str
    opacity: float
    active: bool
    dimmed: bool
    label: Optional[str]


@dataclass(frozen=True)
class DebateGraphView:
    """
    Pre-layouted debate graph.
    Only visible nodes and edges are included.
    """
    view_id: str
    nodes: Tuple[GraphNode, ...]
    edges: Tuple[GraphEdge, ...]
    search_terms: Tuple[str, ...] = ()
    active_edge_id: Optional[str] = None

    def node(self, node_id: str) -> Optional[GraphNode]:
        return next((n for n in self.nodes if n.node_id == node_id), None)

    def edge(self, edge_id: str) -> Optional[GraphEdge]:
        return next((e for e in self.edges if e.edge_id == edge_id), None)
