"""
Graph to View Mapper

Converts the store's graph and UI overlay into a renderable DebateGraphView.

MAPPING BOUNDARY:
=================
This is the ONLY place where projection flags, layout positions and colors
are combined. Hosts draw what comes out and decide nothing themselves.

MAPPING RULES:
==============
1. Only visible nodes and edges are emitted, in graph order
2. Layout runs on the visible subgraph only
3. The reference node (first Thesis by default) keeps its previous
   position when a previous layout is supplied
4. Identical inputs give an identical view, view_id included
"""

from __future__ import annotations
from typing import Dict, Mapping, Optional
import hashlib

from debatemap.config import LayoutConfig
from debatemap.contracts import StatementKind
from debatemap.core.graph import DebateGraph
from debatemap.identity import kind_color

from .layout import Position, anchor_translate, compute_layout
from .projection import EdgeView, NodeView, ViewInputs, project
from .search import highlight_spans
from .visualization.graph import (
    DIMMED_OPACITY, EDGE_COLORS, EDGE_LABELS, PEER_ACTIVE_COLOR, PEER_COLOR,
    DebateGraphView, GraphEdge, GraphNode,
)


class GraphViewMapper:
    """
    Maps a debate graph to its rendered view.

    SINGLE POINT OF CONVERSION:
    ===========================
    projection + layout + anchor policy + colors.
    """

    def __init__(self, config: Optional[LayoutConfig] = None):
        self._config = config or LayoutConfig()

    def build(
        self,
        graph: DebateGraph,
        inputs: Optional[ViewInputs] = None,
        previous: Optional[Mapping[str, Position]] = None,
        reference_id: Optional[str] = None,
    ) -> DebateGraphView:
        projection = project(graph, inputs)
        inputs = inputs or ViewInputs()
        node_flags = {n.node_id: n for n in projection.nodes if n.visible}
        edge_flags = {e.edge_id: e for e in projection.edges if e.visible}

        visible_nodes = [n for n in graph.nodes if n.id in node_flags]
        visible_edges = [e for e in graph.edges if e.id in edge_flags]
        positions = compute_layout(visible_nodes, visible_edges, self._config)
        if previous:
            positions = anchor_translate(
                positions, previous, reference_id or self.default_reference(graph)
            )

        nodes = tuple(
            self._map_node(graph, node, node_flags[node.id], positions[node.id],
                           inputs.selected_node_id, projection.search_terms)
            for node in visible_nodes
        )
        edges = tuple(
            self._map_edge(edge, edge_flags[edge.id]) for edge in visible_edges
        )
        return DebateGraphView(
            view_id=self._view_id(nodes, edges),
            nodes=nodes,
            edges=edges,
            search_terms=projection.search_terms,
            active_edge_id=projection.active_edge_id,
        )

    def build_for_store(self, store, previous: Optional[Mapping[str, Position]] = None
                        ) -> DebateGraphView:
        return self.build(store.graph, ViewInputs.from_ui(store.ui), previous)

    @staticmethod
    def default_reference(graph: DebateGraph) -> Optional[str]:
        theses = graph.nodes_of_kind(StatementKind.THESIS)
        return theses[0].id if theses else None

    @staticmethod
    def positions_of(view: DebateGraphView) -> Dict[str, Position]:
        """Positions of a rendered view, for the next build's anchor."""
        return {n.node_id: Position(n.x, n.y) for n in view.nodes}

    # =========================================================================
    # NODE / EDGE MAPPING
    # =========================================================================

    def _map_node(self, graph, node, flags: NodeView, position: Position,
                  selected_id: str, terms) -> GraphNode:
        return GraphNode(
            node_id=node.id,
            x=position.x,
            y=position.y,
            width=self._config.node_w,
            height=self._config.node_h,
            color=graph.participants.color_of(node.participant_id),
            kind_color=kind_color(node.kind),
            label=node.title,
            entity_type=node.kind.value,
            participant_id=node.participant_id,
            strength=node.strength_type.value if node.strength_type else None,
            is_focal_point=node.id == selected_id,
            hit=flags.hit,
            dimmed=flags.dimmed,
            edge_active=flags.edge_active,
            eligible_target=flags.eligible_target,
            pickable=flags.pickable,
            collapsed=node.collapsed,
            title_marks=tuple(highlight_spans(node.title, terms)),
        )

    def _map_edge(self, edge, flags: EdgeView) -> GraphEdge:
        opacity = DIMMED_OPACITY if flags.dimmed else 1.0
        if edge.kind.is_peer:
            return GraphEdge(
                edge_id=edge.id,
                source_id=edge.source,
                target_id=edge.target,
                kind=edge.kind.value,
                thickness=5.0 if flags.active else 3.0,
                style='dashed',
                color=PEER_ACTIVE_COLOR if flags.active else PEER_COLOR,
                opacity=opacity,
                active=flags.active,
                dimmed=flags.dimmed,
                label=None,
            )
        return GraphEdge(
            edge_id=edge.id,
            source_id=edge.source,
            target_id=edge.target,
            kind=edge.kind.value,
            thickness=10.0 if flags.active else 5.0,
            style='thick',
            color=EDGE_COLORS.get(edge.kind, PEER_COLOR),
            opacity=opacity,
            active=flags.active,
            dimmed=flags.dimmed,
            label=EDGE_LABELS.get(edge.kind),
        )

    @staticmethod
    def _view_id(nodes, edges) -> str:
        digest = hashlib.sha256()
        for n in nodes:
            digest.update(f"{n.node_id}|{n.x}|{n.y}|{n.dimmed}|{n.hit}\n".encode('utf-8'))
        for e in edges:
            digest.update(f"{e.edge_id}|{e.active}|{e.dimmed}\n".encode('utf-8'))
        return f"view_{digest.hexdigest()[:16]}"
