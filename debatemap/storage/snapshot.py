"""
Snapshot Codec
==============

Serialize/deserialize the full debate graph to a versioned, self-contained
document:

    {version: 1, participants: [...], nodes: [...], edges: [...]}

RULES:
======
1. version 1 is the only recognized value
2. Node and edge ids are preserved verbatim
3. Transient UI state (selection, highlights, filters) is never written
4. position is advisory: written when supplied, ignored on load
5. Decoding never returns a partially valid graph - it raises instead
"""

from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional, Union
from enum import Enum
import json

from ..contracts.base import (
    EdgeKind, Participant, Relation, Statement, StatementKind, StrengthType,
)
from ..contracts.errors import UnsupportedSnapshotError
from ..core.constraints import validate_graph
from ..core.graph import DebateGraph
from ..core.participants import ParticipantRegistry


SNAPSHOT_VERSION = 1


class SnapshotEncoder(json.JSONEncoder):
    """
    JSON encoder for snapshot documents.

    Documents hold plain JSON values; an Enum handed in by a caller is
    written as its .value.
    """

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


# =============================================================================
# GRAPH -> DOCUMENT
# =============================================================================

def graph_to_document(graph: DebateGraph, positions: Optional[Mapping[str, Any]] = None) -> Dict:
    """Build the snapshot document for a graph."""
    return {
        'version': SNAPSHOT_VERSION,
        'participants': [{'id': p.id, 'name': p.name} for p in graph.participants],
        'nodes': [_node_to_dict(n, positions) for n in graph.nodes],
        'edges': [
            {'id': e.id, 'source': e.source, 'target': e.target, 'kind': e.kind.value}
            for e in graph.edges
        ],
    }


def _node_to_dict(node: Statement, positions: Optional[Mapping[str, Any]]) -> Dict:
    data: Dict[str, Any] = {
        'id': node.id,
        'kind': node.kind.value,
        'participantId': node.participant_id,
        'title': node.title,
        'collapsed': node.collapsed,
    }
    if node.body:
        data['body'] = node.body
    if node.first_mention:
        data['firstMention'] = node.first_mention
    if node.strength_type is not None:
        data['strengthType'] = node.strength_type.value
    if node.self_collapsed:
        data['selfCollapsed'] = True
    if positions and node.id in positions:
        x, y = _xy(positions[node.id])
        data['position'] = {'x': x, 'y': y}
    return data


def _xy(position: Any):
    if hasattr(position, 'x') and hasattr(position, 'y'):
        return float(position.x), float(position.y)
    if isinstance(position, Mapping):
        return float(position['x']), float(position['y'])
    x, y = position
    return float(x), float(y)


# =============================================================================
# DOCUMENT -> GRAPH
# =============================================================================

def document_to_graph(document: Any, collapse_all: bool = False) -> DebateGraph:
    """
    Rebuild and validate a graph from a snapshot document.

    collapse_all forces every node's collapsed flag to True (cold boot).
    Raises UnsupportedSnapshotError for shape problems and the matching
    typed error for invariant violations.
    """
    if not isinstance(document, Mapping):
        raise UnsupportedSnapshotError("A snapshot must be a JSON object.")
    version = document.get('version')
    if isinstance(version, bool) or version != SNAPSHOT_VERSION:
        raise UnsupportedSnapshotError(f"Unsupported snapshot version {version!r}; expected 1.")

    participants = [_parse_participant(p) for p in _list_field(document, 'participants')]
    nodes = [_parse_node(n, collapse_all) for n in _list_field(document, 'nodes')]
    edges = [_parse_edge(e) for e in _list_field(document, 'edges')]

    _reject_duplicates('statement', [n.id for n in nodes])
    _reject_duplicates('relation', [e.id for e in edges])

    graph = DebateGraph(
        participants=ParticipantRegistry(participants),
        nodes=nodes,
        edges=edges,
    )
    validate_graph(graph)
    return graph


def _list_field(document: Mapping, name: str) -> List:
    value = document.get(name, [])
    if not isinstance(value, list):
        raise UnsupportedSnapshotError(f"Snapshot field {name!r} must be a list.")
    return value


def _require_str(record: Mapping, key: str, what: str) -> str:
    value = record.get(key)
    if not isinstance(value, str) or not value:
        raise UnsupportedSnapshotError(f"{what} is missing a valid {key!r}.")
    return value


def _optional_str(record: Mapping, key: str, what: str) -> Optional[str]:
    value = record.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise UnsupportedSnapshotError(f"{what} field {key!r} must be a string.")
    return value or None


def _parse_participant(record: Any) -> Participant:
    if not isinstance(record, Mapping):
        raise UnsupportedSnapshotError("Each participant must be an object.")
    pid = _require_str(record, 'id', 'A participant')
    name = record.get('name', pid)
    if not isinstance(name, str):
        raise UnsupportedSnapshotError(f"Participant {pid!r} has a non-string name.")
    return Participant(id=pid, name=name)


def _parse_node(record: Any, collapse_all: bool) -> Statement:
    if not isinstance(record, Mapping):
        raise UnsupportedSnapshotError("Each node must be an object.")
    node_id = _require_str(record, 'id', 'A node')
    what = f"Node {node_id!r}"
    kind = _parse_enum(StatementKind, record.get('kind'), what, 'kind')
    strength_raw = record.get('strengthType')
    strength = None
    if strength_raw not in (None, ''):
        strength = _parse_enum(StrengthType, strength_raw, what, 'strengthType')
    title = record.get('title', '')
    if not isinstance(title, str):
        raise UnsupportedSnapshotError(f"{what} has a non-string title.")
    collapsed = record.get('collapsed', False)
    self_collapsed = record.get('selfCollapsed', False)
    if not isinstance(collapsed, bool) or not isinstance(self_collapsed, bool):
        raise UnsupportedSnapshotError(f"{what} has a non-boolean collapse flag.")

    return Statement(
        id=node_id,
        kind=kind,
        participant_id=_require_str(record, 'participantId', what),
        title=title,
        body=_optional_str(record, 'body', what),
        first_mention=_optional_str(record, 'firstMention', what),
        strength_type=strength,
        collapsed=True if collapse_all else collapsed,
        self_collapsed=self_collapsed,
    )


def _parse_edge(record: Any) -> Relation:
    if not isinstance(record, Mapping):
        raise UnsupportedSnapshotError("Each edge must be an object.")
    edge_id = _require_str(record, 'id', 'An edge')
    what = f"Edge {edge_id!r}"
    return Relation(
        id=edge_id,
        source=_require_str(record, 'source', what),
        target=_require_str(record, 'target', what),
        kind=_parse_enum(EdgeKind, record.get('kind'), what, 'kind'),
    )


def _parse_enum(enum_cls, raw: Any, what: str, key: str):
    try:
        return enum_cls(raw)
    except ValueError:
        raise UnsupportedSnapshotError(f"{what} has unrecognized {key} {raw!r}.") from None


def _reject_duplicates(what: str, ids: List[str]) -> None:
    seen = set()
    for item in ids:
        if item in seen:
            raise UnsupportedSnapshotError(f"Snapshot contains duplicate {what} id {item!r}.")
        seen.add(item)


# =============================================================================
# BYTES
# =============================================================================

def encode_snapshot(document: Mapping) -> bytes:
    """UTF-8 JSON bytes with sorted keys."""
    return json.dumps(document, cls=SnapshotEncoder, sort_keys=True, indent=2).encode('utf-8')


def decode_snapshot(payload: Union[bytes, str]) -> Dict:
    """Parse snapshot bytes; malformed JSON is an UnsupportedSnapshotError."""
    try:
        if isinstance(payload, bytes):
            payload = payload.decode('utf-8')
        document = json.loads(payload)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise UnsupportedSnapshotError(f"Snapshot is not valid JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise UnsupportedSnapshotError("A snapshot must be a JSON object.")
    return document
