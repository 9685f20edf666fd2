"""
Visualization contracts for the rendered debate map.
"""

from .graph import (
    GraphNode, GraphEdge, DebateGraphView,
    EDGE_COLORS, EDGE_LABELS, PEER_COLOR, PEER_ACTIVE_COLOR, DIMMED_OPACITY,
)

__all__ = [
    'GraphNode', 'GraphEdge', 'DebateGraphView',
    'EDGE_COLORS', 'EDGE_LABELS', 'PEER_COLOR', 'PEER_ACTIVE_COLOR', 'DIMMED_OPACITY',
]
