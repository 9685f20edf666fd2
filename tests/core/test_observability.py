"""
Audit Log Tests

Verifies that the audit layer:
1. Records every successful mutation
2. Never records a rejected one
3. Only observes - store behaviour is identical with or without it
"""

import pytest

from debatemap.config import ObservabilityConfig
from debatemap.contracts import AuditEventType, ConstraintError
from debatemap.observability import AuditCollector, ObservabilityEngine

from tests.fixtures import full_debate, make_store


class TestAuditTrail:

    def test_successful_mutations_recorded(self):
        engine = ObservabilityEngine()
        store = make_store(observability=engine)
        arg = store.add_argument("A", "Arg", strength_type="Type 1")
        store.update_node(arg, {"title": "Arg!"})
        store.delete_node(arg)

        actions = [e.action for e in engine.get_layer_log("store")]
        assert actions == ["node_created", "node_updated", "node_deleted"]
        assert engine.get_layer_log("store")[0].entity_id == arg

    def test_rejections_not_recorded(self):
        engine = ObservabilityEngine()
        store = make_store(observability=engine)
        with pytest.raises(ConstraintError):
            store.add_counter("A", "thesisA", "bad", strength_type="Type 1")
        assert engine.get_unified_log() == []

    def test_auto_created_thesis_is_audited(self):
        engine = ObservabilityEngine()
        store = make_store(observability=engine)
        pid = store.add_participant()
        store.add_argument(pid, "Opening", strength_type="Type 1")
        actions = [e.action for e in engine.get_layer_log("store")]
        assert actions == ["participant_added", "thesis_auto_created", "node_created"]

    def test_snapshot_loads_go_to_snapshot_layer(self):
        engine = ObservabilityEngine()
        store = make_store(observability=engine)
        store.load_snapshot(store.get_snapshot())
        entries = engine.get_layer_log("snapshot")
        assert len(entries) == 1
        assert entries[0].event_type == AuditEventType.SNAPSHOT_LOADED

    def test_observer_does_not_change_behaviour(self):
        observed = make_store(observability=ObservabilityEngine())
        plain = make_store()
        assert full_debate(observed) == full_debate(plain)
        assert observed.get_snapshot() == plain.get_snapshot()

    def test_disabled_engine_records_nothing(self):
        engine = ObservabilityEngine(ObservabilityConfig(enable_audit=False))
        store = make_store(observability=engine)
        full_debate(store)
        assert engine.get_unified_log() == []

    def test_report_counts(self):
        engine = ObservabilityEngine()
        store = make_store(observability=engine)
        full_debate(store)
        report = engine.generate_audit_report()
        assert report["total_entries"] == len(engine.get_unified_log())
        assert report["by_layer"] == {"store": report["total_entries"]}
        assert report["by_event_type"]["edge_changed"] == 2


class TestAuditCollector:

    def test_bounded(self):
        engine = ObservabilityEngine(ObservabilityConfig(max_entries=3))
        for i in range(5):
            engine.record(AuditEventType.SYSTEM, f"tick_{i}")
        log = engine.get_layer_log("store")
        assert [e.action for e in log] == ["tick_2", "tick_3", "tick_4"]
        assert [e.sequence for e in log] == [3, 4, 5]

    def test_filtering(self):
        collector = AuditCollector("store")
        engine = ObservabilityEngine()
        for action in ("a", "b", "a"):
            collector.collect(engine.record(AuditEventType.SYSTEM, action))
        assert len(collector.get_entries(action="a")) == 2
        assert collector.get_entries(event_type=AuditEventType.NODE_CREATED) == []
        assert collector.layer_name == "store"
