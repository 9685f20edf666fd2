"""
API Mapper
==========

Transforms store records and rendered views into JSON-ready dicts.
Keys follow the snapshot document (camelCase) so a host can use one
vocabulary for both.
"""
from dataclasses import asdict
from typing import Any, Dict

from ..contracts.base import Participant, Relation, Statement


def map_statement(node: Statement) -> Dict[str, Any]:
    return {
        "id": node.id,
        "kind": node.kind.value,
        "participantId": node.participant_id,
        "title": node.title,
        "body": node.body,
        "firstMention": node.first_mention,
        "strengthType": node.strength_type.value if node.strength_type else None,
        "collapsed": node.collapsed,
        "selfCollapsed": node.self_collapsed,
    }


def map_relation(edge: Relation) -> Dict[str, Any]:
    return {"id": edge.id, "source": edge.source, "target": edge.target, "kind": edge.kind.value}


def map_participant(participant: Participant, color: str) -> Dict[str, Any]:
    return {"id": participant.id, "name": participant.name, "color": color}


def map_view(view) -> Dict[str, Any]:
    """DebateGraphView -> dict (tuples become lists)."""
    data = asdict(view)
    for node in data["nodes"]:
        node["title_marks"] = [list(span) for span in node["title_marks"]]
    data["search_terms"] = list(data["search_terms"])
    return data


def map_ui(ui) -> Dict[str, Any]:
    """UiState -> dict (sets become sorted lists)."""
    highlight = ui.link_highlight
    return {
        "selectedNodeId": ui.selected_node_id,
        "reparentTargetId": ui.reparent_target_id,
        "eligibleAttachTargets": list(ui.eligible_attach_targets),
        "linkHighlight": (
            {"sourceId": highlight.source_id, "targetId": highlight.target_id}
            if highlight else None
        ),
        "filters": {
            "participants": sorted(ui.filters.participants),
            "kinds": sorted(k.value for k in ui.filters.kinds),
            "strengths": sorted(s.value for s in ui.filters.strengths),
        },
        "filtersActive": not ui.filters.is_empty,
        "filterMode": ui.filter_mode.value,
        "searchQuery": ui.search_query,
        "searchMode": ui.search_mode.value,
        "activeEdgeId": ui.active_edge_id,
        "hoverEdgeId": ui.hover_edge_id,
        "timeCursor": ui.time_cursor,
    }
