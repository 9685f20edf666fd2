"""
View Projection Tests
=====================

Collapse, search, filter, focus, time and attachment overlays, and the
order in which they compose.
"""

from debatemap.contracts import FilterMode, StatementKind, StrengthType
from debatemap.core.ui_state import LinkHighlight
from debateview.mapper import GraphViewMapper
from debateview.projection import ViewInputs, project, project_store

from tests.fixtures import full_debate, make_store


def debate():
    store = make_store()
    return store, full_debate(store)


class TestCollapse:

    def test_descendants_hidden_node_visible(self):
        store, ids = debate()
        store.update_node(ids["X"], {"collapsed": True})
        view = project_store(store)
        assert view.node(ids["X"]).visible
        for hidden in (ids["X1"], ids["cX"], ids["aC"]):
            assert not view.node(hidden).visible
        assert view.node(ids["Y"]).visible

    def test_edges_to_hidden_nodes_hidden(self):
        store, ids = debate()
        store.update_node(ids["X"], {"collapsed": True})
        view = project_store(store)
        assert not view.edge(store.graph.parent_edge(ids["cX"]).id).visible
        assert view.edge(ids["t2"]).visible

    def test_collapsed_thesis_hides_whole_tree(self):
        store, ids = debate()
        store.toggle_collapsed("thesisA")
        visible = set(project_store(store).visible_node_ids())
        assert visible == {"thesisA", "thesisB", ids["bArg"]}


class TestSearch:

    def test_dim_mode(self):
        store, ids = debate()
        store.ui.set_search("counter")
        view = project_store(store)
        assert view.node(ids["cX"]).hit
        assert not view.node(ids["cX"]).dimmed
        assert view.node(ids["X"]).dimmed
        assert view.node(ids["X"]).visible

    def test_body_matches(self):
        store, ids = debate()
        store.ui.set_search("COSTS")
        assert project_store(store).node(ids["cX"]).hit

    def test_hide_mode(self):
        store, ids = debate()
        store.ui.set_search('"study on"', FilterMode.HIDE)
        view = project_store(store)
        assert view.visible_node_ids() == (ids["eY"],)
        assert view.visible_edge_ids() == ()

    def test_empty_query_matches_nothing_dims_nothing(self):
        store, ids = debate()
        store.ui.set_search("   ")
        view = project_store(store)
        assert not any(n.hit or n.dimmed for n in view.nodes)


class TestFilters:

    def test_participant_filter_dim(self):
        store, ids = debate()
        store.ui.set_participant_filter("B", True)
        view = project_store(store)
        assert view.node(ids["X"]).dimmed
        assert not view.node(ids["cX"]).dimmed

    def test_kind_filter_hide(self):
        store, ids = debate()
        store.ui.set_kind_filter(StatementKind.THESIS, True)
        store.ui.set_filter_mode(FilterMode.HIDE)
        assert set(project_store(store).visible_node_ids()) == {"thesisA", "thesisB"}

    def test_strength_filter_passes_unstrengthened(self):
        store, ids = debate()
        store.ui.set_strength_filter(StrengthType.TYPE_2, True)
        store.ui.set_filter_mode(FilterMode.HIDE)
        visible = set(project_store(store).visible_node_ids())
        assert {ids["X"], ids["Y"], "thesisA", ids["S"], ids["aC"]} <= visible
        assert ids["Z"] not in visible

    def test_filters_combine_with_and(self):
        store, ids = debate()
        store.ui.set_participant_filter("A", True)
        store.ui.set_kind_filter(StatementKind.EVIDENCE, True)
        store.ui.set_filter_mode(FilterMode.HIDE)
        assert project_store(store).visible_node_ids() == (ids["eY"],)

    def test_clear_filters(self):
        store, ids = debate()
        store.ui.set_kind_filter(StatementKind.THESIS, True)
        store.ui.clear_filters()
        assert not any(n.dimmed for n in project_store(store).nodes)


class TestEdgeFocus:

    def test_active_edge(self):
        store, ids = debate()
        store.ui.set_active_edge_id(ids["t2"])
        view = project_store(store)
        assert view.active_edge_id == ids["t2"]
        assert view.node(ids["X"]).edge_active and view.node(ids["Y"]).edge_active
        assert not view.node(ids["X"]).dimmed
        assert view.node(ids["Z"]).dimmed
        assert view.edge(ids["t2"]).active
        assert not view.edge(ids["t2"]).dimmed
        assert view.edge(ids["ref"]).dimmed

    def test_click_wins_over_hover(self):
        store, ids = debate()
        store.ui.set_hover_edge_id(ids["ref"])
        store.ui.set_active_edge_id(ids["t2"])
        assert project_store(store).active_edge_id == ids["t2"]

    def test_hover_used_when_no_click(self):
        store, ids = debate()
        store.ui.set_hover_edge_id(ids["ref"])
        view = project_store(store)
        assert view.active_edge_id == ids["ref"]
        assert view.node(ids["bArg"]).edge_active

    def test_hidden_edge_cannot_be_active(self):
        store, ids = debate()
        store.update_node(ids["X"], {"collapsed": True})
        edge = store.graph.parent_edge(ids["cX"]).id
        store.ui.set_active_edge_id(edge)
        view = project_store(store)
        assert view.active_edge_id is None
        assert not any(n.dimmed for n in view.nodes)


class TestLinkHighlight:

    def test_pair_stays_bright(self):
        store, ids = debate()
        store.ui.set_link_highlight(LinkHighlight(ids["Z"], ids["bArg"]))
        view = project_store(store)
        assert not view.node(ids["Z"]).dimmed
        assert not view.node(ids["bArg"]).dimmed
        assert view.node("thesisA").dimmed


class TestTimeHighlight:

    def test_neighbours_undimmed(self):
        store, ids = debate()
        store.ui.set_time_cursor("00:06:00")
        view = project_store(store)
        assert not view.node(ids["Y"]).dimmed      # 00:05:00, lower neighbour
        assert not view.node(ids["cX"]).dimmed     # 00:10:00, upper neighbour
        assert view.node(ids["X"]).dimmed          # 00:01:00
        assert view.node("thesisA").dimmed         # no timestamp

    def test_cursor_before_everything(self):
        store, ids = debate()
        store.ui.set_time_cursor("00:00:10")
        view = project_store(store)
        assert not view.node(ids["X"]).dimmed
        assert view.node(ids["Y"]).dimmed

    def test_exact_match_is_lower(self):
        store, ids = debate()
        store.ui.set_time_cursor("00:05:00")
        view = project_store(store)
        assert not view.node(ids["Y"]).dimmed
        assert not view.node(ids["cX"]).dimmed
        assert view.node(ids["X"]).dimmed

    def test_malformed_cursor_is_ignored(self):
        store, ids = debate()
        store.ui.time_cursor = "12:3"             # assigned past the setter
        view = project_store(store)
        assert not any(n.dimmed for n in view.nodes)
        rendered = GraphViewMapper().build_for_store(store)
        assert not any(n.dimmed for n in rendered.nodes)

    def test_malformed_cursor_in_inputs(self):
        store, ids = debate()
        view = project(store.graph, ViewInputs(time_cursor="soon"))
        assert not view.node(ids["X"]).dimmed


class TestAttachmentMode:

    def test_only_eligible_pickable(self):
        store, ids = debate()
        store.ui.set_selected_node_id(ids["X1"])
        store.ui.set_eligible_attach_targets(store.eligible_parents(ids["X1"]))
        view = project_store(store)
        assert view.node(ids["Y"]).eligible_target
        assert view.node(ids["Y"]).pickable
        assert view.node(ids["X1"]).pickable       # the selected node itself
        assert not view.node(ids["X1"]).dimmed
        assert not view.node(ids["bArg"]).pickable
        assert view.node(ids["bArg"]).dimmed


class TestComposition:

    def test_hide_before_dim(self):
        store, ids = debate()
        store.ui.set_search("X", FilterMode.HIDE)
        store.ui.set_active_edge_id(ids["ref"])  # Z ~ bArg; both hidden by search
        view = project_store(store)
        assert view.active_edge_id is None
        assert not view.node("thesisA").visible

    def test_pure_function(self):
        store, ids = debate()
        inputs = ViewInputs(search_query="x", active_edge_id=ids["t2"])
        graph = store.graph
        assert project(graph, inputs) == project(graph, inputs)

    def test_defaults_show_everything(self):
        store, ids = debate()
        view = project(store.graph)
        assert len(view.visible_node_ids()) == len(store.nodes)
        assert len(view.visible_edge_ids()) == len(store.edges)
