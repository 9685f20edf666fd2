"""
UI Overlay State

Transient, UI-facing fields that live next to the domain state but never
take part in snapshots or invariants. Plain fields with trivial setters.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import FrozenSet, Iterable, Optional, Tuple

from ..contracts.base import FilterMode, StatementKind, StrengthType
from ..timecodes import parse_cursor


@dataclass(frozen=True)
class LinkHighlight:
    """A pair of statements to emphasise (e.g. when hovering a link)."""
    source_id: str
    target_id: str


@dataclass(frozen=True)
class ViewFilters:
    """Active filter sets. An empty set means no restriction."""
    participants: FrozenSet[str] = frozenset()
    kinds: FrozenSet[StatementKind] = frozenset()
    strengths: FrozenSet[StrengthType] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not (self.participants or self.kinds or self.strengths)


@dataclass
class UiState:
    """Selection, attachment, filter, search and focus state."""
    selected_node_id: str = ""
    reparent_target_id: str = ""
    eligible_attach_targets: Tuple[str, ...] = ()
    link_highlight: Optional[LinkHighlight] = None
    filters: ViewFilters = field(default_factory=ViewFilters)
    filter_mode: FilterMode = FilterMode.DIM
    search_query: str = ""
    search_mode: FilterMode = FilterMode.DIM
    active_edge_id: str = ""
    hover_edge_id: str = ""
    time_cursor: Optional[str] = None

    def set_selected_node_id(self, node_id: str) -> None:
        self.selected_node_id = node_id or ""

    def set_reparent_target_id(self, node_id: str) -> None:
        self.reparent_target_id = node_id or ""

    def set_eligible_attach_targets(self, node_ids: Iterable[str]) -> None:
        self.eligible_attach_targets = tuple(node_ids)

    def set_link_highlight(self, highlight: Optional[LinkHighlight]) -> None:
        self.link_highlight = highlight

    def set_participant_filter(self, participant_id: str, active: bool) -> None:
        self.filters = replace(
            self.filters,
            participants=_toggle(self.filters.participants, participant_id, active),
        )

    def set_kind_filter(self, kind: StatementKind, active: bool) -> None:
        self.filters = replace(self.filters, kinds=_toggle(self.filters.kinds, kind, active))

    def set_strength_filter(self, strength: StrengthType, active: bool) -> None:
        self.filters = replace(
            self.filters,
            strengths=_toggle(self.filters.strengths, strength, active),
        )

    def clear_filters(self) -> None:
        self.filters = ViewFilters()

    def set_filter_mode(self, mode: FilterMode) -> None:
        self.filter_mode = FilterMode(mode)

    def set_search(self, query: str, mode: Optional[FilterMode] = None) -> None:
        self.search_query = query or ""
        if mode is not None:
            self.search_mode = FilterMode(mode)

    def set_active_edge_id(self, edge_id: str) -> None:
        self.active_edge_id = edge_id or ""

    def set_hover_edge_id(self, edge_id: str) -> None:
        self.hover_edge_id = edge_id or ""

    def set_time_cursor(self, cursor: Optional[str]) -> None:
        """Set or clear the HH:MM:SS time cursor. Raises ValueError on bad input."""
        if cursor:
            parse_cursor(cursor)
        self.time_cursor = cursor or None

    def clear_pane(self) -> None:
        """What a click on empty canvas resets."""
        self.selected_node_id = ""
        self.active_edge_id = ""
        self.link_highlight = None
        self.eligible_attach_targets = ()

    def forget(self, node_ids: Iterable[str] = (), edge_ids: Iterable[str] = ()) -> None:
        """Drop references to deleted nodes and edges."""
        nodes = set(node_ids)
        edges = set(edge_ids)
        if self.selected_node_id in nodes:
            self.selected_node_id = ""
        if self.reparent_target_id in nodes:
            self.reparent_target_id = ""
        self.eligible_attach_targets = tuple(
            n for n in self.eligible_attach_targets if n not in nodes
        )
        if self.link_highlight and (
            self.link_highlight.source_id in nodes or self.link_highlight.target_id in nodes
        ):
            self.link_highlight = None
        if self.active_edge_id in edges:
            self.active_edge_id = ""
        if self.hover_edge_id in edges:
            self.hover_edge_id = ""


def _toggle(values: FrozenSet, value, active: bool) -> FrozenSet:
    return values | {value} if active else values - {value}
