"""
Debate Map Test Fixtures

Explicit, deterministic debate maps for tests.
All fixtures use a fixed id salt - no random generation.
"""

from typing import Dict

from debatemap.config import StoreConfig
from debatemap.contracts import StatementKind
from debatemap.core.store import DebateStore
from debatemap.observability import ObservabilityEngine


FIXTURE_SALT = "debate-fixture"


def make_store(observability: ObservabilityEngine = None, **overrides) -> DebateStore:
    """Fresh seeded store: participants A, B and theses thesisA, thesisB."""
    config = StoreConfig(id_salt=FIXTURE_SALT, **overrides)
    return DebateStore(config, observability)


def three_arguments(store: DebateStore) -> Dict[str, str]:
    """Arguments X, Y, Z (in reverse creation order) under thesisA."""
    ids = {}
    for title in ("Z", "Y", "X"):
        ids[title] = store.add_argument("A", title, parent_id="thesisA", strength_type="Type 1")
    return ids


def full_debate(store: DebateStore) -> Dict[str, str]:
    """
    A debate touching every statement kind.

    thesisA
      S   (Argument Summary)
      X   Argument, Type 2
        X1  Argument (child of X)
        cX  Counter by B, attacks X
          aC  Agreement by A, agrees with cX
      Y   Argument, Type 2
        eY  Evidence, evidence of Y
      Z   Argument, Type 1
    thesisB
      bArg  Argument by B
    peer links: X ~ Y (t2-link), Z ~ bArg (refers-to)
    """
    ids = three_arguments(store)
    store.update_node(ids["X"], {"strength_type": "Type 2", "first_mention": "00:01:00"})
    store.update_node(ids["Y"], {"strength_type": "Type 2", "first_mention": "00:05:00"})
    ids["S"] = store.add_argument_summary("A", "thesisA", "Summary of A")
    ids["X1"] = store.add_argument("A", "Deeper X", parent_id=ids["X"], strength_type="Type 3")
    ids["cX"] = store.add_counter("B", ids["X"], "Counter to X", body="X ignores costs",
                                  strength_type="Type 1", first_mention="00:10:00")
    ids["aC"] = store.add_agreement("A", ids["cX"], "Fair point")
    ids["eY"] = store.add_evidence("A", ids["Y"], "Study on Y", strength_type="Type 4")
    ids["bArg"] = store.add_argument("B", "B's reason", strength_type="Type 1")
    ids["t2"] = store.add_t2_links(ids["X"], [ids["Y"]])[0]
    ids["ref"] = store.add_ref_links(ids["Z"], [ids["bArg"]])[0]
    return ids


def kinds_of(store: DebateStore) -> Dict[StatementKind, int]:
    counts: Dict[StatementKind, int] = {}
    for node in store.nodes:
        counts[node.kind] = counts.get(node.kind, 0) + 1
    return counts
