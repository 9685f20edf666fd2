"""
Graph Store
===========

The single facade through which the debate map is mutated.

GUARANTEES:
===========
- Every mutator validates completely before touching state
- On any error nothing changes and a typed DebateMapError is raised
- Successful mutations are reported to the observability engine (if any)
- Reads hand out immutable records or detached copies

UI overlay state (selection, filters, highlights) lives on `store.ui`; it is
never validated and never written to snapshots.
"""

from __future__ import annotations
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Union

from ..config import StoreConfig
from ..contracts.base import (
    CHILD_SOURCED_KINDS, PARENT_EDGE_KIND, EdgeKind, Participant, Relation,
    Statement, StatementKind, StrengthType, canonical_pair,
)
from ..contracts.errors import ConstraintError, NotFoundError
from ..contracts.events import AuditEventType
from ..identity import IdGenerator, kind_color
from ..observability import ObservabilityEngine
from ..storage.snapshot import decode_snapshot, document_to_graph, graph_to_document
from . import constraints
from .graph import DebateGraph
from .participants import ParticipantRegistry
from .ui_state import UiState


PATCHABLE_FIELDS = frozenset({
    'title', 'body', 'first_mention', 'strength_type', 'participant_id',
    'collapsed', 'self_collapsed',
})

LEGEND_KINDS = tuple(kind.value for kind in StatementKind)


class DebateStore:
    """
    Authoritative mutable state of one debate map.

    All public mutators are synchronous and atomic. The store is not
    thread-safe; the host serializes access.
    """

    def __init__(
        self,
        config: Optional[StoreConfig] = None,
        observability: Optional[ObservabilityEngine] = None,
    ):
        self._config = config or StoreConfig()
        self._observability = observability
        self._ids = IdGenerator(salt=self._config.id_salt, length=self._config.id_length)
        self._graph = DebateGraph()
        self.ui = UiState()
        if self._config.seed_default_debate:
            self._seed_default_debate()

    def _seed_default_debate(self) -> None:
        self._graph.participants = ParticipantRegistry([
            Participant(id='A', name='A'),
            Participant(id='B', name='B'),
        ])
        self._graph.put_node(Statement(
            id='thesisA', kind=StatementKind.THESIS, participant_id='A', title='Thesis A',
        ))
        self._graph.put_node(Statement(
            id='thesisB', kind=StatementKind.THESIS, participant_id='B', title='Thesis B',
        ))

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def graph(self) -> DebateGraph:
        """A detached copy of the current graph."""
        return self._graph.copy()

    @property
    def nodes(self) -> List[Statement]:
        return self._graph.nodes

    @property
    def edges(self) -> List[Relation]:
        return self._graph.edges

    @property
    def participants(self) -> List[Participant]:
        return list(self._graph.participants)

    def node(self, node_id: str) -> Statement:
        return self._graph.require_node(node_id)

    def edge(self, edge_id: str) -> Relation:
        return self._graph.require_edge(edge_id)

    def descendants_of(self, node_id: str) -> Set[str]:
        return self._graph.descendants_of(node_id)

    def eligible_parents(self, node_id: str) -> List[str]:
        return constraints.eligible_parents(self._graph, node_id)

    def eligible_targets_for_new(self, kind: Union[StatementKind, str],
                                 participant_id: str) -> List[str]:
        self._graph.participants.require(participant_id)
        return constraints.eligible_targets_for_new(
            self._graph, StatementKind(kind), participant_id
        )

    def eligible_t2_peers(self, node_id: str) -> List[str]:
        return constraints.eligible_t2_peers(self._graph, node_id)

    def legend_kinds(self) -> List[str]:
        return list(LEGEND_KINDS)

    def participant_color(self, participant_id: str) -> str:
        return self._graph.participants.color_of(participant_id)

    def kind_color(self, kind: Union[StatementKind, str]) -> str:
        return kind_color(StatementKind(kind))

    # =========================================================================
    # STATEMENT CREATION
    # =========================================================================

    def add_thesis(self, participant_id: str, title: str, body: Optional[str] = None,
                   first_mention: Optional[str] = None) -> str:
        node = self._new_statement(StatementKind.THESIS, participant_id, title, body,
                                   None, first_mention)
        self._graph.put_node(node)
        self._audit_created(node)
        return node.id

    def add_argument(self, participant_id: str, title: str, body: Optional[str] = None,
                     parent_id: Optional[str] = None,
                     strength_type: Union[StrengthType, str, None] = None,
                     first_mention: Optional[str] = None) -> str:
        """
        Add an Argument under parent_id.

        Without parent_id the participant's first Thesis is used; if there is
        none and auto_create_thesis is enabled, a Thesis titled
        "<participant> Thesis" is created along with the Argument.
        """
        node = self._new_statement(StatementKind.ARGUMENT, participant_id, title, body,
                                   strength_type, first_mention)
        implicit_thesis = None
        if parent_id is None:
            parent = self._default_thesis(participant_id)
            if parent is None:
                if not self._config.auto_create_thesis:
                    raise NotFoundError(
                        f"Participant {participant_id!r} has no Thesis to attach the Argument to."
                    )
                implicit_thesis = Statement(
                    id=self._next_id(exclude={node.id}),
                    kind=StatementKind.THESIS,
                    participant_id=participant_id,
                    title=f"{participant_id} Thesis",
                )
                parent = implicit_thesis
        else:
            parent = self._graph.require_node(parent_id)

        constraints.check_supports(self._graph, parent, node)
        edge = Relation(id=self._next_id(exclude={node.id, parent.id}), source=parent.id,
                        target=node.id, kind=EdgeKind.SUPPORTS)

        if implicit_thesis is not None:
            self._graph.put_node(implicit_thesis)
            self._audit(AuditEventType.NODE_CREATED, 'thesis_auto_created',
                        implicit_thesis.id, implicit_thesis.kind.value,
                        participant=participant_id)
        self._graph.put_node(node)
        self._graph.put_edge(edge)
        self._audit_created(node, parent=parent.id)
        return node.id

    def add_counter(self, participant_id: str, target_id: str, title: str,
                    body: Optional[str] = None,
                    strength_type: Union[StrengthType, str, None] = None,
                    first_mention: Optional[str] = None) -> str:
        node = self._new_statement(StatementKind.COUNTER, participant_id, title, body,
                                   strength_type, first_mention)
        return self._attach_new(node, EdgeKind.ATTACKS, target_id)

    def add_evidence(self, participant_id: str, target_id: str, title: str,
                     body: Optional[str] = None,
                     strength_type: Union[StrengthType, str, None] = None,
                     first_mention: Optional[str] = None) -> str:
        node = self._new_statement(StatementKind.EVIDENCE, participant_id, title, body,
                                   strength_type, first_mention)
        return self._attach_new(node, EdgeKind.EVIDENCE_OF, target_id)

    def add_agreement(self, participant_id: str, target_id: str, title: str,
                      body: Optional[str] = None, first_mention: Optional[str] = None) -> str:
        node = self._new_statement(StatementKind.AGREEMENT, participant_id, title, body,
                                   None, first_mention)
        return self._attach_new(node, EdgeKind.AGREES_WITH, target_id)

    def add_argument_summary(self, participant_id: str, thesis_id: str, title: str,
                             body: Optional[str] = None,
                             first_mention: Optional[str] = None) -> str:
        node = self._new_statement(StatementKind.ARGUMENT_SUMMARY, participant_id, title,
                                   body, None, first_mention)
        return self._attach_new(node, EdgeKind.SUPPORTS, thesis_id)

    def _attach_new(self, node: Statement, kind: EdgeKind, other_id: str) -> str:
        other = self._graph.require_node(other_id)
        if kind == EdgeKind.SUPPORTS:
            constraints.check_supports(self._graph, other, node)
            source, target = other.id, node.id
        else:
            constraints.check_hierarchical_edge_for(self._graph, kind, node, other)
            source, target = node.id, other.id

        edge = Relation(id=self._next_id(exclude={node.id}), source=source, target=target,
                        kind=kind)
        self._graph.put_node(node)
        self._graph.put_edge(edge)
        self._audit_created(node, parent=other.id)
        return node.id

    def _new_statement(self, kind: StatementKind, participant_id: str, title: str,
                       body: Optional[str], strength_type: Union[StrengthType, str, None],
                       first_mention: Optional[str]) -> Statement:
        self._graph.participants.require(participant_id)
        if not isinstance(title, str):
            raise ConstraintError("A statement title must be text.")
        strength = _coerce_strength(strength_type)
        _check_strength(kind, strength)
        return Statement(
            id=self._next_id(),
            kind=kind,
            participant_id=participant_id,
            title=title,
            body=body or None,
            first_mention=first_mention or None,
            strength_type=strength,
        )

    def _default_thesis(self, participant_id: str) -> Optional[Statement]:
        for node in self._graph.nodes_of_kind(StatementKind.THESIS):
            if node.participant_id == participant_id:
                return node
        return None

    # =========================================================================
    # UPDATE / DELETE
    # =========================================================================

    def update_node(self, node_id: str, patch: Mapping[str, Any]) -> Statement:
        """
        Partially update mutable statement data.

        Changing strength_type away from Type 2 (or changing participant)
        removes every incident t2-link that no longer satisfies the rule.
        """
        current = self._graph.require_node(node_id)
        unknown = set(patch) - PATCHABLE_FIELDS
        if unknown:
            raise ConstraintError(f"Cannot change {', '.join(sorted(unknown))} of a statement.")

        changes: Dict[str, Any] = {}
        for key, value in patch.items():
            if key == 'title':
                if not isinstance(value, str):
                    raise ConstraintError("A statement title must be text.")
                changes[key] = value
            elif key in ('body', 'first_mention'):
                changes[key] = value or None
            elif key == 'strength_type':
                changes[key] = _coerce_strength(value)
            elif key == 'participant_id':
                self._graph.participants.require(value)
                changes[key] = value
            else:
                changes[key] = bool(value)

        updated = replace(current, **changes)
        _check_strength(updated.kind, updated.strength_type)

        candidate = self._graph.copy()
        candidate.put_node(updated)
        dropped = []
        for edge in candidate.incident_edges(node_id):
            if edge.kind == EdgeKind.T2_LINK:
                other = candidate.node(edge.other_end(node_id))
                if constraints.t2_link_violation(updated, other) is not None:
                    candidate.remove_edge(edge.id)
                    dropped.append(edge.id)
            elif edge.kind.is_hierarchical:
                constraints.check_hierarchical_edge(candidate, edge.kind, edge.source,
                                                    edge.target, replacing_edge_id=edge.id)

        self._graph = candidate
        self.ui.forget(edge_ids=dropped)
        self._audit(AuditEventType.NODE_UPDATED, 'node_updated', node_id, updated.kind.value,
                    fields=','.join(sorted(changes)), dropped_links=str(len(dropped)))
        return updated

    def delete_node(self, node_id: str) -> None:
        """
        Remove a statement and every incident edge.

        Children keep existing as detached roots without a parent edge.
        """
        node = self._graph.require_node(node_id)
        removed = self._graph.remove_node(node_id)
        self.ui.forget(node_ids=[node_id], edge_ids=[e.id for e in removed])
        self._audit(AuditEventType.NODE_DELETED, 'node_deleted', node_id, node.kind.value,
                    removed_edges=str(len(removed)))

    def set_all_collapsed(self, flag: bool) -> None:
        for node in self._graph.nodes:
            if node.collapsed != bool(flag):
                self._graph.put_node(replace(node, collapsed=bool(flag)))
        self._audit(AuditEventType.NODE_UPDATED, 'all_collapsed', collapsed=str(bool(flag)))

    def toggle_collapsed(self, node_id: str) -> bool:
        node = self._graph.require_node(node_id)
        self._graph.put_node(replace(node, collapsed=not node.collapsed))
        self._audit(AuditEventType.NODE_UPDATED, 'collapse_toggled', node_id, node.kind.value)
        return not node.collapsed

    def expand_from_edge(self, edge_id: str) -> bool:
        """
        Clear collapsed/self_collapsed on an edge's target if it is self-collapsed.

        Returns True when the target was expanded.
        """
        edge = self._graph.require_edge(edge_id)
        target = self._graph.require_node(edge.target)
        if not target.self_collapsed:
            return False
        self._graph.put_node(replace(target, collapsed=False, self_collapsed=False))
        self._audit(AuditEventType.NODE_UPDATED, 'expanded_from_edge', target.id,
                    target.kind.value, edge=edge_id)
        return True

    # =========================================================================
    # RE-PARENT / RE-TARGET
    # =========================================================================

    def set_supports_parent(self, child_id: str, new_parent_id: str) -> None:
        """
        Re-parent an Argument or Argument Summary.

        The child's supports edge keeps its id; only its source changes. A
        detached child (whose parent was deleted) gets a fresh supports edge.
        """
        child = self._graph.require_node(child_id)
        parent = self._graph.require_node(new_parent_id)
        if child.kind not in (StatementKind.ARGUMENT, StatementKind.ARGUMENT_SUMMARY):
            raise ConstraintError(
                "Only Arguments and Argument Summaries use parent (supports) reattachment."
            )
        current = self._graph.parent_edge(child_id)
        constraints.check_supports(self._graph, parent, child,
                                   replacing_edge_id=current.id if current else None)

        if current is not None:
            edge = replace(current, source=new_parent_id)
        else:
            edge = Relation(id=self._next_id(), source=new_parent_id, target=child_id,
                            kind=EdgeKind.SUPPORTS)
        self._graph.put_edge(edge)
        self._audit(AuditEventType.EDGE_CHANGED, 'reparented', child_id, child.kind.value,
                    parent=new_parent_id, edge=edge.id)

    def set_edge_target(self, source_id: str, edge_kind: Union[EdgeKind, str],
                        new_target_id: str) -> None:
        """
        Re-target a Counter, Evidence or Agreement.

        The single edge of edge_kind leaving source_id keeps its id; only its
        target changes. A detached source gets a fresh edge.
        """
        kind = _coerce_edge_kind(edge_kind)
        if kind not in CHILD_SOURCED_KINDS:
            raise ConstraintError(
                "Only attacks, evidence-of and agrees-with relations can be re-targeted."
            )
        source = self._graph.require_node(source_id)
        target = self._graph.require_node(new_target_id)
        if PARENT_EDGE_KIND.get(source.kind) != kind:
            raise ConstraintError(f"A {source.kind.value} does not own a {kind.value} relation.")

        current = next(
            (e for e in self._graph.parent_edges(source_id) if e.kind == kind), None
        )
        constraints.check_hierarchical_edge_for(self._graph, kind, source, target,
                                                replacing_edge_id=current.id if current else None)

        if current is not None:
            edge = replace(current, target=new_target_id)
        else:
            edge = Relation(id=self._next_id(), source=source_id, target=new_target_id,
                            kind=kind)
        self._graph.put_edge(edge)
        self._audit(AuditEventType.EDGE_CHANGED, 'retargeted', source_id, source.kind.value,
                    target=new_target_id, edge=edge.id)

    # =========================================================================
    # PEER LINKS
    # =========================================================================

    def set_t2_links(self, source_id: str, target_ids: Iterable[str]) -> List[str]:
        return self._write_peer_links(EdgeKind.T2_LINK, source_id, target_ids, replace_all=True)

    def add_t2_links(self, source_id: str, target_ids: Iterable[str]) -> List[str]:
        return self._write_peer_links(EdgeKind.T2_LINK, source_id, target_ids, replace_all=False)

    def set_ref_links(self, source_id: str, target_ids: Iterable[str]) -> List[str]:
        return self._write_peer_links(EdgeKind.REFERS_TO, source_id, target_ids, replace_all=True)

    def add_ref_links(self, source_id: str, target_ids: Iterable[str]) -> List[str]:
        return self._write_peer_links(EdgeKind.REFERS_TO, source_id, target_ids,
                                      replace_all=False)

    def _write_peer_links(self, kind: EdgeKind, source_id: str, target_ids: Iterable[str],
                          replace_all: bool) -> List[str]:
        """
        Replace or extend the peer links of one kind around source_id.

        Candidates failing the peer rule are skipped; unknown ids fail the
        whole call. Pairs are stored smaller id first. Returns new edge ids.
        """
        source = self._graph.require_node(source_id)
        targets = list(dict.fromkeys(target_ids or ()))
        for target_id in targets:
            self._graph.require_node(target_id)

        removed = []
        if replace_all:
            removed = [e for e in self._graph.edges_of_kind(kind) if e.touches(source_id)]
        removed_ids = {e.id for e in removed}
        existing = {
            canonical_pair(e.source, e.target)
            for e in self._graph.edges_of_kind(kind) if e.id not in removed_ids
        }

        created = []
        taken = set()
        for target_id in targets:
            target = self._graph.node(target_id)
            if constraints.peer_violation(kind, source, target) is not None:
                continue
            pair = canonical_pair(source_id, target_id)
            if pair in existing:
                continue
            existing.add(pair)
            edge_id = self._next_id(exclude=taken)
            taken.add(edge_id)
            created.append(Relation(id=edge_id, source=pair[0], target=pair[1], kind=kind))

        for edge in removed:
            self._graph.remove_edge(edge.id)
        for edge in created:
            self._graph.put_edge(edge)
        self.ui.forget(edge_ids=removed_ids)
        self._audit(AuditEventType.EDGE_CHANGED, f"{kind.value}_links_written", source_id,
                    source.kind.value, added=str(len(created)), removed=str(len(removed)))
        return [e.id for e in created]

    # =========================================================================
    # PARTICIPANTS
    # =========================================================================

    def add_participant(self, name: Optional[str] = None) -> str:
        participant = self._graph.participants.add(name)
        self._audit(AuditEventType.PARTICIPANT_CHANGED, 'participant_added', participant.id,
                    'participant')
        return participant.id

    def update_participant(self, participant_id: str, name: str) -> None:
        if not isinstance(name, str):
            raise ConstraintError("A participant name must be text.")
        self._graph.participants.rename(participant_id, name)
        self._audit(AuditEventType.PARTICIPANT_CHANGED, 'participant_renamed', participant_id,
                    'participant')

    # =========================================================================
    # SNAPSHOTS
    # =========================================================================

    def get_snapshot(self, positions: Optional[Mapping[str, Any]] = None) -> Dict:
        """Snapshot document of the domain state; positions are advisory."""
        return graph_to_document(self._graph, positions)

    def load_snapshot(self, snapshot: Union[Mapping, bytes, str],
                      collapse_all: bool = False) -> None:
        """
        Replace the whole domain state with a snapshot.

        collapse_all is the cold-boot mode: every loaded node starts collapsed.
        """
        document = decode_snapshot(snapshot) if isinstance(snapshot, (bytes, str)) else snapshot
        graph = document_to_graph(document, collapse_all=collapse_all)

        stale_nodes = self._graph.node_ids() - graph.node_ids()
        stale_edges = self._graph.edge_ids() - graph.edge_ids()
        self._graph = graph
        self.ui.forget(node_ids=stale_nodes, edge_ids=stale_edges)
        self._audit(AuditEventType.SNAPSHOT_LOADED, 'snapshot_loaded', layer='snapshot',
                    nodes=str(len(graph.nodes)), edges=str(len(graph.edges)),
                    collapse_all=str(collapse_all))

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _next_id(self, exclude: Iterable[str] = ()) -> str:
        taken = self._graph.node_ids() | self._graph.edge_ids() | set(exclude)
        return self._ids.next_id(taken)

    def _audit_created(self, node: Statement, parent: Optional[str] = None) -> None:
        metadata = {'participant': node.participant_id}
        if parent:
            metadata['parent'] = parent
        self._audit(AuditEventType.NODE_CREATED, 'node_created', node.id, node.kind.value,
                    **metadata)

    def _audit(self, event_type: AuditEventType, action: str, entity_id: Optional[str] = None,
               entity_type: Optional[str] = None, layer: str = 'store', **metadata: str) -> None:
        if self._observability is None:
            return
        self._observability.record(
            event_type=event_type,
            action=action,
            entity_id=entity_id,
            entity_type=entity_type,
            metadata=metadata,
            layer=layer,
        )


def _coerce_strength(value: Union[StrengthType, str, None]) -> Optional[StrengthType]:
    if value is None or value == '':
        return None
    if isinstance(value, StrengthType):
        return value
    try:
        return StrengthType(value)
    except ValueError:
        raise ConstraintError(f"Unknown strength type {value!r}.") from None


def _coerce_edge_kind(value: Union[EdgeKind, str]) -> EdgeKind:
    if isinstance(value, EdgeKind):
        return value
    try:
        return EdgeKind(value)
    except ValueError:
        raise ConstraintError(f"Unknown relation kind {value!r}.") from None


def _check_strength(kind: StatementKind, strength: Optional[StrengthType]) -> None:
    if kind.requires_strength and strength is None:
        raise ConstraintError(f"Please select a Type (1 to 4) for this {kind.value}.")
    if not kind.requires_strength and strength is not None:
        raise ConstraintError(f"A {kind.value} does not carry a strength type.")
