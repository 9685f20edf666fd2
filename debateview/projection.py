"""
View Projection
===============

Turns the graph plus the UI overlay into per-node and per-edge visual flags.

ORDER OF APPLICATION:
=====================
1. Collapse: descendants of every collapsed node are hidden
2. Hide: search and filter in "hide" mode remove failing nodes; an edge
   with a hidden endpoint is hidden
3. Dim flags, in this order:
   a. search / filter in "dim" mode
   b. link highlight (everything outside the pair)
   c. edge focus (endpoints become edge_active and undimmed, others dimmed)
   d. time highlight (the two cursor neighbours undimmed, others dimmed);
      a cursor that is not HH:MM:SS is ignored
   e. attachment mode (non-eligible nodes dimmed and not pickable)

The projection is a pure function of its inputs.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Set, Tuple
import networkx as nx

from debatemap.contracts import FilterMode, Relation, Statement
from debatemap.core.graph import DebateGraph
from debatemap.core.ui_state import LinkHighlight, UiState, ViewFilters
from debatemap.timecodes import parse_cursor

from .search import matches, parse_terms
from .timeline import time_neighbors


@dataclass(frozen=True)
class ViewInputs:
    """Everything the projection reads besides the graph."""
    search_query: str = ""
    search_mode: FilterMode = FilterMode.DIM
    filters: ViewFilters = field(default_factory=ViewFilters)
    filter_mode: FilterMode = FilterMode.DIM
    active_edge_id: str = ""
    hover_edge_id: str = ""
    time_cursor: Optional[str] = None
    eligible_attach_targets: FrozenSet[str] = frozenset()
    selected_node_id: str = ""
    link_highlight: Optional[LinkHighlight] = None

    @classmethod
    def from_ui(cls, ui: UiState) -> ViewInputs:
        return cls(
            search_query=ui.search_query,
            search_mode=ui.search_mode,
            filters=ui.filters,
            filter_mode=ui.filter_mode,
            active_edge_id=ui.active_edge_id,
            hover_edge_id=ui.hover_edge_id,
            time_cursor=ui.time_cursor,
            eligible_attach_targets=frozenset(ui.eligible_attach_targets),
            selected_node_id=ui.selected_node_id,
            link_highlight=ui.link_highlight,
        )


@dataclass(frozen=True)
class NodeView:
    node_id: str
    visible: bool
    hit: bool = False
    dimmed: bool = False
    edge_active: bool = False
    eligible_target: bool = False
    pickable: bool = True


@dataclass(frozen=True)
class EdgeView:
    edge_id: str
    visible: bool
    active: bool = False
    dimmed: bool = False


@dataclass(frozen=True)
class ViewProjection:
    """Flags for every node and edge, in graph order."""
    nodes: Tuple[NodeView, ...]
    edges: Tuple[EdgeView, ...]
    search_terms: Tuple[str, ...] = ()
    active_edge_id: Optional[str] = None

    def node(self, node_id: str) -> Optional[NodeView]:
        return next((n for n in self.nodes if n.node_id == node_id), None)

    def edge(self, edge_id: str) -> Optional[EdgeView]:
        return next((e for e in self.edges if e.edge_id == edge_id), None)

    def visible_node_ids(self) -> Tuple[str, ...]:
        return tuple(n.node_id for n in self.nodes if n.visible)

    def visible_edge_ids(self) -> Tuple[str, ...]:
        return tuple(e.edge_id for e in self.edges if e.visible)


def passes_filter(node: Statement, filters: ViewFilters) -> bool:
    if filters.participants and node.participant_id not in filters.participants:
        return False
    if filters.kinds and node.kind not in filters.kinds:
        return False
    if filters.strengths and node.strength_type is not None \
            and node.strength_type not in filters.strengths:
        return False
    return True


def collapsed_hidden(graph: DebateGraph) -> Set[str]:
    """Hierarchical descendants of every collapsed node."""
    hierarchy = graph.hierarchy()
    hidden: Set[str] = set()
    for node in graph.nodes:
        if node.collapsed:
            hidden |= nx.descendants(hierarchy, node.id)
    return hidden


def project(graph: DebateGraph, inputs: Optional[ViewInputs] = None) -> ViewProjection:
    inputs = inputs or ViewInputs()
    terms = parse_terms(inputs.search_query)
    hidden = collapsed_hidden(graph)

    # Steps 1 and 2: visibility
    visible: Dict[str, bool] = {}
    hits: Dict[str, bool] = {}
    dimmed: Dict[str, bool] = {}
    for node in graph.nodes:
        hit = bool(terms) and matches(terms, node.title, node.body)
        search_ok = not terms or hit
        filter_ok = passes_filter(node, inputs.filters)
        hits[node.id] = hit

        shown = node.id not in hidden
        if not search_ok and inputs.search_mode == FilterMode.HIDE:
            shown = False
        if not filter_ok and inputs.filter_mode == FilterMode.HIDE:
            shown = False
        visible[node.id] = shown
        dimmed[node.id] = (
            (not search_ok and inputs.search_mode == FilterMode.DIM)
            or (not filter_ok and inputs.filter_mode == FilterMode.DIM)
        )

    edge_visible = {
        e.id: visible.get(e.source, False) and visible.get(e.target, False)
        for e in graph.edges
    }
    shown_ids = [nid for nid, flag in visible.items() if flag]

    # Step 3: dim overlays
    if inputs.link_highlight is not None:
        pair = {inputs.link_highlight.source_id, inputs.link_highlight.target_id}
        for nid in shown_ids:
            if nid not in pair:
                dimmed[nid] = True

    active = _active_edge(graph, inputs, edge_visible)
    focus: Set[str] = set()
    if active is not None:
        focus = {active.source, active.target}
        for nid in shown_ids:
            dimmed[nid] = nid not in focus

    if _readable_cursor(inputs.time_cursor):
        neighbours = time_neighbors(
            (graph.node(nid) for nid in shown_ids), inputs.time_cursor
        ).ids()
        for nid in shown_ids:
            dimmed[nid] = nid not in neighbours

    eligible = inputs.eligible_attach_targets
    pickable = {nid: True for nid in visible}
    if eligible:
        for nid in shown_ids:
            if nid not in eligible and nid != inputs.selected_node_id:
                dimmed[nid] = True
                pickable[nid] = False

    node_views = tuple(
        NodeView(
            node_id=node.id,
            visible=visible[node.id],
            hit=hits[node.id],
            dimmed=visible[node.id] and dimmed[node.id],
            edge_active=node.id in focus,
            eligible_target=bool(eligible) and node.id in eligible,
            pickable=visible[node.id] and pickable[node.id],
        )
        for node in graph.nodes
    )
    edge_views = tuple(
        _edge_view(edge, edge_visible[edge.id], active, dimmed)
        for edge in graph.edges
    )
    return ViewProjection(
        nodes=node_views,
        edges=edge_views,
        search_terms=tuple(terms),
        active_edge_id=active.id if active is not None else None,
    )


def project_store(store) -> ViewProjection:
    """Projection of a DebateStore's current graph and UI state."""
    return project(store.graph, ViewInputs.from_ui(store.ui))


def _readable_cursor(cursor: Optional[str]) -> bool:
    """True when the cursor parses as HH:MM:SS."""
    if not cursor:
        return False
    try:
        parse_cursor(cursor)
    except ValueError:
        return False
    return True


def _active_edge(graph: DebateGraph, inputs: ViewInputs,
                 edge_visible: Dict[str, bool]) -> Optional[Relation]:
    """The clicked edge if visible, otherwise the hovered one."""
    for edge_id in (inputs.active_edge_id, inputs.hover_edge_id):
        if edge_id and edge_visible.get(edge_id):
            return graph.edge(edge_id)
    return None


def _edge_view(edge: Relation, visible: bool, active: Optional[Relation],
               dimmed: Dict[str, bool]) -> EdgeView:
    if not visible:
        return EdgeView(edge_id=edge.id, visible=False)
    is_active = active is not None and active.id == edge.id
    return EdgeView(
        edge_id=edge.id,
        visible=True,
        active=is_active,
        dimmed=not is_active and (dimmed[edge.source] or dimmed[edge.target]),
    )
