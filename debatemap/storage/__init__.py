"""
Snapshot Storage Layer

RESPONSIBILITY: Versioned, self-contained serialization of the debate graph
OUTPUTS: Snapshot documents (dict) and their UTF-8 JSON encoding

WHAT THIS LAYER MUST NOT DO:
============================
- Persist anything itself (callers supply and consume byte buffers)
- Write transient UI state
- Return a graph that fails validation
"""

from .snapshot import (
    SNAPSHOT_VERSION, SnapshotEncoder,
    graph_to_document, document_to_graph, encode_snapshot, decode_snapshot,
)

__all__ = [
    'SNAPSHOT_VERSION', 'SnapshotEncoder',
    'graph_to_document', 'document_to_graph', 'encode_snapshot', 'decode_snapshot',
]
