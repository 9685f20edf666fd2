"""
Property Tests for the Graph Store
Random sequences of store operations, valid or not, must never leave the
store in a state that breaks the data model.
"""

from hypothesis import given, settings, HealthCheck, strategies as st
from hypothesis.strategies import composite
import pytest

from debatemap.contracts import (
    DebateMapError, NotFoundError, EdgeKind, PARENT_EDGE_KIND, StatementKind, STRENGTH_KINDS,
)
from debatemap.core.constraints import validate_graph
from debatemap.storage import encode_snapshot

from tests.fixtures import make_store


OPERATIONS = (
    "thesis", "argument", "counter", "evidence", "agreement", "summary",
    "update_strength", "update_participant", "delete",
    "reparent", "retarget", "t2", "refs", "participant",
)
STRENGTHS = ("Type 1", "Type 2", "Type 3", "Type 4")

# =============================================================================
# STRATEGIES (Generators)
# =============================================================================

@composite
def operations(draw):
    """One operation: name plus raw picks resolved against the live store."""
    return (
        draw(st.sampled_from(OPERATIONS)),
        draw(st.integers(min_value=0, max_value=63)),
        draw(st.integers(min_value=0, max_value=63)),
        draw(st.sampled_from(STRENGTHS)),
        draw(st.lists(st.integers(min_value=0, max_value=63), max_size=3)),
    )


@composite
def operation_sequences(draw):
    return draw(st.lists(operations(), min_size=1, max_size=40))


def apply(store, op):
    name, i, j, strength, picks = op
    nodes = [n.id for n in store.nodes]
    participants = [p.id for p in store.participants]
    pid = participants[i % len(participants)]
    node = nodes[i % len(nodes)] if nodes else "missing"
    other = nodes[j % len(nodes)] if nodes else "missing"
    targets = [nodes[k % len(nodes)] for k in picks] if nodes else ["missing"]
    title = f"{name} {i}"

    if name == "thesis":
        store.add_thesis(pid, title)
    elif name == "argument":
        store.add_argument(pid, title, parent_id=other, strength_type=strength)
    elif name == "counter":
        store.add_counter(pid, other, title, strength_type=strength)
    elif name == "evidence":
        store.add_evidence(pid, other, title, strength_type=strength)
    elif name == "agreement":
        store.add_agreement(pid, other, title)
    elif name == "summary":
        store.add_argument_summary(pid, other, title)
    elif name == "update_strength":
        store.update_node(node, {"strength_type": strength})
    elif name == "update_participant":
        store.update_node(node, {"participant_id": pid})
    elif name == "delete":
        store.delete_node(node)
    elif name == "reparent":
        store.set_supports_parent(node, other)
    elif name == "retarget":
        kind = [EdgeKind.ATTACKS, EdgeKind.EVIDENCE_OF, EdgeKind.AGREES_WITH][j % 3]
        store.set_edge_target(node, kind, other)
    elif name == "t2":
        store.set_t2_links(node, targets)
    elif name == "refs":
        store.add_ref_links(node, targets)
    elif name == "participant":
        store.add_participant()


def check_model(store):
    graph = store.graph
    validate_graph(graph)

    for node in graph.nodes:
        assert (node.strength_type is not None) == (node.kind in STRENGTH_KINDS)
        parents = graph.parent_edges(node.id)
        assert len(parents) <= 1
        if parents:
            assert parents[0].kind == PARENT_EDGE_KIND[node.kind]

    for thesis in graph.nodes_of_kind(StatementKind.THESIS):
        summaries = [
            c for c in graph.children_of(thesis.id)
            if graph.node(c).kind == StatementKind.ARGUMENT_SUMMARY
        ]
        assert len(summaries) <= 1

    for kind in (EdgeKind.T2_LINK, EdgeKind.REFERS_TO):
        pairs = [frozenset((e.source, e.target)) for e in graph.edges_of_kind(kind)]
        assert len(pairs) == len(set(pairs))

    ids = graph.node_ids()
    for edge in graph.edges:
        assert edge.source in ids and edge.target in ids


# =============================================================================
# PROPERTIES
# =============================================================================

class TestStoreInvariants:

    @given(operation_sequences())
    @settings(max_examples=150, deadline=None,
              suppress_health_check=[HealthCheck.too_slow])
    def test_invariants_hold_after_every_operation(self, sequence):
        store = make_store()
        for op in sequence:
            before = encode_snapshot(store.get_snapshot())
            try:
                apply(store, op)
            except DebateMapError:
                # Rejected operations change nothing
                assert encode_snapshot(store.get_snapshot()) == before
            check_model(store)

    @given(operation_sequences())
    @settings(max_examples=75, deadline=None,
              suppress_health_check=[HealthCheck.too_slow])
    def test_snapshot_round_trip(self, sequence):
        store = make_store()
        for op in sequence:
            try:
                apply(store, op)
            except DebateMapError:
                pass
        snapshot = store.get_snapshot()

        restored = make_store(seed_default_debate=False)
        restored.load_snapshot(encode_snapshot(snapshot))
        assert restored.get_snapshot() == snapshot

    @given(operation_sequences(), st.integers(min_value=0, max_value=63))
    @settings(max_examples=75, deadline=None,
              suppress_health_check=[HealthCheck.too_slow])
    def test_delete_leaves_no_reference(self, sequence, pick):
        store = make_store()
        for op in sequence:
            try:
                apply(store, op)
            except DebateMapError:
                pass
        victim = store.nodes[pick % len(store.nodes)].id if store.nodes else None
        if victim is None:
            return
        store.delete_node(victim)
        for edge in store.edges:
            assert victim not in (edge.source, edge.target)
        check_model(store)

    @pytest.mark.parametrize("name", ["t2", "refs"])
    def test_link_operations_on_empty_store_are_rejected(self, name):
        store = make_store()
        while store.nodes:
            store.delete_node(store.nodes[0].id)
        with pytest.raises(NotFoundError):
            apply(store, (name, 0, 0, "Type 1", [0]))
        check_model(store)
