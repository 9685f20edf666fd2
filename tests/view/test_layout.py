"""
Layout Engine Tests
===================

Placement geometry for the hierarchical layout.

GEOMETRY VERIFICATION:
======================
1. Same visible subgraph -> same positions
2. Parents are centered over their children (Summary case excepted)
3. Summaries sit directly beneath their Thesis, flanked by siblings
4. Boxes of one row never overlap
"""

from hypothesis import given, settings, HealthCheck, strategies as st

from debatemap.config import LayoutConfig
from debatemap.contracts import (
    DebateMapError, EdgeKind, Relation, Statement, StatementKind, StrengthType,
)
from debateview.layout import Position, anchor_translate, center_x, compute_layout

from tests.fixtures import full_debate, make_store, three_arguments


CONFIG = LayoutConfig()


def layout_of(store):
    graph = store.graph
    return compute_layout(graph.nodes, graph.edges, CONFIG)


def cx(position):
    return center_x(position, CONFIG)


def assert_no_overlap(positions):
    rows = {}
    for nid, pos in positions.items():
        rows.setdefault(pos.y, []).append(pos.x)
    for xs in rows.values():
        xs.sort()
        for left, right in zip(xs, xs[1:]):
            assert right - left >= CONFIG.node_w - 1e-6


class TestLayoutScenarios:

    def test_three_arguments_centered(self):
        store = make_store()
        ids = three_arguments(store)
        positions = layout_of(store)

        x, y, z = positions[ids["X"]], positions[ids["Y"]], positions[ids["Z"]]
        assert x.y == y.y == z.y == CONFIG.level_height
        assert x.x < y.x < z.x
        block_center = (cx(x) + cx(z)) / 2
        assert abs(cx(positions["thesisA"]) - block_center) <= 0.5

    def test_summary_beneath_thesis(self):
        store = make_store()
        ids = three_arguments(store)
        summary = store.add_argument_summary("A", "thesisA", "S")
        positions = layout_of(store)

        thesis = positions["thesisA"]
        s = positions[summary]
        assert abs(cx(s) - cx(thesis)) <= 0.5
        assert s.y == CONFIG.level_height - CONFIG.summary_raise
        assert positions[ids["X"]].x < positions[ids["Y"]].x < s.x < positions[ids["Z"]].x
        assert positions[ids["Y"]].x + CONFIG.node_w + CONFIG.x_gap <= s.x + 1e-6
        assert s.x + CONFIG.node_w + CONFIG.x_gap <= positions[ids["Z"]].x + 1e-6

    def test_roots_theses_first_then_title(self):
        store = make_store()
        pid = store.add_participant()
        store.add_thesis(pid, "Another thesis")
        positions = layout_of(store)
        ordered = sorted(positions, key=lambda nid: positions[nid].x)
        titles = [store.node(nid).title for nid in ordered]
        assert titles == ["Another thesis", "Thesis A", "Thesis B"]
        assert all(p.y == 0 for p in positions.values())

    def test_root_spacing(self):
        store = make_store()
        positions = layout_of(store)
        gap = positions["thesisB"].x - (positions["thesisA"].x + CONFIG.node_w)
        assert gap == 2 * CONFIG.x_gap
        assert positions["thesisA"] == Position(0.0, 0.0)

    def test_child_order_by_kind_then_title(self):
        store = make_store()
        arg = store.add_argument("A", "Parent", strength_type="Type 1")
        counter = store.add_counter("B", arg, "a counter", strength_type="Type 1")
        evidence = store.add_evidence("A", arg, "z evidence", strength_type="Type 1")
        child = store.add_argument("A", "m child", parent_id=arg, strength_type="Type 1")
        second_counter = store.add_counter("B", arg, "b counter", strength_type="Type 1")
        positions = layout_of(store)
        row = sorted([counter, evidence, child, second_counter],
                     key=lambda nid: positions[nid].x)
        assert row == [evidence, child, counter, second_counter]

    def test_detached_nodes_become_roots(self):
        store = make_store()
        ids = full_debate(store)
        store.delete_node(ids["X"])
        positions = layout_of(store)
        assert positions[ids["X1"]].y == 0
        assert positions[ids["cX"]].y == 0
        assert_no_overlap(positions)

    def test_peer_edges_ignored(self):
        store = make_store()
        ids = full_debate(store)
        graph = store.graph
        hierarchical = [e for e in graph.edges if e.kind.is_hierarchical]
        assert compute_layout(graph.nodes, hierarchical) == compute_layout(graph.nodes,
                                                                           graph.edges)

    def test_hidden_parent_makes_child_a_root(self):
        store = make_store()
        ids = three_arguments(store)
        graph = store.graph
        nodes = [n for n in graph.nodes if n.id != "thesisA"]
        positions = compute_layout(nodes, graph.edges)
        assert "thesisA" not in positions
        assert positions[ids["X"]].y == 0

    def test_deep_supports_chain(self):
        depth = 3000
        nodes = [Statement("n0", StatementKind.THESIS, "A", "root")]
        edges = []
        for i in range(1, depth):
            nodes.append(Statement(f"n{i}", StatementKind.ARGUMENT, "A", f"step {i}",
                                   strength_type=StrengthType.TYPE_1))
            edges.append(Relation(f"e{i}", f"n{i - 1}", f"n{i}", EdgeKind.SUPPORTS))

        positions = compute_layout(nodes, edges, CONFIG)

        assert len(positions) == depth
        deepest = positions[f"n{depth - 1}"]
        assert deepest.y == (depth - 1) * CONFIG.level_height
        assert deepest.x == positions["n0"].x


class TestAnchor:

    def test_anchor_keeps_reference_fixed(self):
        store = make_store()
        before = layout_of(store)
        three_arguments(store)
        store.add_thesis("A", "AAA first by title")
        after = layout_of(store)
        assert after["thesisA"] != before["thesisA"]

        anchored = anchor_translate(after, before, "thesisA")
        assert anchored["thesisA"] == before["thesisA"]
        dx = anchored["thesisB"].x - after["thesisB"].x
        assert dx == before["thesisA"].x - after["thesisA"].x

    def test_missing_reference_is_identity(self):
        positions = {"a": Position(1, 2)}
        assert anchor_translate(positions, {}, "a") == positions
        assert anchor_translate(positions, positions, None) == positions


# =============================================================================
# PROPERTIES
# =============================================================================

@st.composite
def debates(draw):
    """Random valid debate built through the store."""
    store = make_store()
    steps = draw(st.lists(st.tuples(
        st.sampled_from(("argument", "counter", "evidence", "agreement", "summary", "thesis")),
        st.integers(min_value=0, max_value=40),
        st.sampled_from(("A", "B")),
    ), max_size=25))
    for kind, pick, pid in steps:
        nodes = [n.id for n in store.nodes]
        target = nodes[pick % len(nodes)]
        try:
            if kind == "argument":
                store.add_argument(pid, f"arg {pick}", parent_id=target, strength_type="Type 1")
            elif kind == "counter":
                store.add_counter(pid, target, f"counter {pick}", strength_type="Type 2")
            elif kind == "evidence":
                store.add_evidence(pid, target, f"evidence {pick}", strength_type="Type 3")
            elif kind == "agreement":
                store.add_agreement(pid, target, f"agreement {pick}")
            elif kind == "summary":
                store.add_argument_summary(pid, target, f"summary {pick}")
            else:
                store.add_thesis(pid, f"thesis {pick}")
        except DebateMapError:
            pass
    return store


class TestLayoutProperties:

    @given(debates())
    @settings(max_examples=60, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_deterministic(self, store):
        graph = store.graph
        assert compute_layout(graph.nodes, graph.edges) == compute_layout(graph.nodes,
                                                                           graph.edges)

    @given(debates())
    @settings(max_examples=60, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_parents_centered_over_children(self, store):
        graph = store.graph
        positions = compute_layout(graph.nodes, graph.edges)
        for node in graph.nodes:
            children = graph.children_of(node.id)
            if not children:
                continue
            if node.kind == StatementKind.THESIS and graph.summary_of(node.id):
                summary = positions[graph.summary_of(node.id)]
                assert abs(cx(summary) - cx(positions[node.id])) <= 1e-6
                continue
            centers = [cx(positions[c]) for c in children]
            box_center = (min(centers) + max(centers)) / 2
            assert abs(cx(positions[node.id]) - box_center) <= 1e-6

    @given(debates())
    @settings(max_examples=60, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_children_one_level_down_and_no_overlap(self, store):
        graph = store.graph
        positions = compute_layout(graph.nodes, graph.edges)
        for node in graph.nodes:
            for child in graph.children_of(node.id):
                drop = positions[child].y - positions[node.id].y
                if store.node(child).kind == StatementKind.ARGUMENT_SUMMARY:
                    assert drop == CONFIG.level_height - CONFIG.summary_raise
                else:
                    assert drop == CONFIG.level_height or (
                        store.node(node.id).kind == StatementKind.ARGUMENT_SUMMARY
                        and drop == CONFIG.level_height + CONFIG.summary_raise
                    )
        assert_no_overlap(positions)
