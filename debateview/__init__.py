"""
Debate Map View

Derived, read-only presentation of a debate map.

LAYER STRUCTURE:
================

1. PROJECTION (projection.py, search.py, timeline.py)
   - Responsibility: visibility and display flags per node and edge
   - Allowed inputs: DebateGraph and the UI overlay
   - MUST NOT: Mutate the store

2. LAYOUT (layout.py)
   - Responsibility: deterministic positions for the visible subgraph
   - MUST NOT: Store positions anywhere; they are recomputed on demand

3. VISUALIZATION CONTRACTS (visualization/) and MAPPER (mapper.py)
   - Responsibility: immutable renderable view for a canvas host
"""

from .search import parse_terms, matches, highlight_spans
from .timeline import TimeNeighbors, time_neighbors
from .projection import (
    ViewInputs, NodeView, EdgeView, ViewProjection,
    passes_filter, collapsed_hidden, project, project_store,
)
from .layout import Position, Extent, compute_layout, anchor_translate, center_x
from .visualization import GraphNode, GraphEdge, DebateGraphView
from .mapper import GraphViewMapper

__all__ = [
    'parse_terms', 'matches', 'highlight_spans',
    'TimeNeighbors', 'time_neighbors',
    'ViewInputs', 'NodeView', 'EdgeView', 'ViewProjection',
    'passes_filter', 'collapsed_hidden', 'project', 'project_store',
    'Position', 'Extent', 'compute_layout', 'anchor_translate', 'center_x',
    'GraphNode', 'GraphEdge', 'DebateGraphView',
    'GraphViewMapper',
]
