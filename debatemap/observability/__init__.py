"""
Observability & Audit Layer

RESPONSIBILITY: Record successful mutations of the debate map
ALLOWED INPUTS: Audit entries emitted by the store after a mutation commits
OUTPUTS: Append-only audit log, audit report

WHAT THIS LAYER MUST NOT DO:
============================
- Modify store behavior
- Record rejected operations (errors go to the caller, nowhere else)
- Retry, recover or interpret anything it records
"""

from __future__ import annotations
from typing import Dict, List, Optional
import hashlib

from ..config import ObservabilityConfig
from ..contracts.events import AuditEventType, AuditLogEntry, Timestamp


# =============================================================================
# AUDIT COLLECTOR
# =============================================================================

class AuditCollector:
    """
    Append-only audit entry collection for one component.

    When max_entries is reached the oldest entries are discarded.
    """

    def __init__(self, layer_name: str, max_entries: int = 10000):
        self._layer_name = layer_name
        self._max_entries = max_entries
        self._entries: List[AuditLogEntry] = []
        self._sequence: int = 0

    def collect(self, entry: AuditLogEntry):
        """Collect an audit entry (append-only)."""
        self._entries.append(entry)
        self._sequence += 1
        if len(self._entries) > self._max_entries:
            del self._entries[:len(self._entries) - self._max_entries]

    def get_entries(
        self,
        event_type: Optional[AuditEventType] = None,
        action: Optional[str] = None,
    ) -> List[AuditLogEntry]:
        """Get entries, optionally filtered."""
        entries = self._entries
        if event_type:
            entries = [e for e in entries if e.event_type == event_type]
        if action:
            entries = [e for e in entries if e.action == action]
        return list(entries)

    @property
    def layer_name(self) -> str:
        return self._layer_name

    @property
    def entry_count(self) -> int:
        return len(self._entries)

    @property
    def sequence(self) -> int:
        return self._sequence


# =============================================================================
# OBSERVABILITY ENGINE
# =============================================================================

class ObservabilityEngine:
    """
    Central audit sink.

    BOUNDARY ENFORCEMENT:
    - ONLY observes, never modifies
    - Provides read-only access to collected entries
    """

    LAYERS = ('store', 'snapshot')

    def __init__(self, config: Optional[ObservabilityConfig] = None):
        self._config = config or ObservabilityConfig()
        self._collectors: Dict[str, AuditCollector] = {
            name: AuditCollector(name, self._config.max_entries) for name in self.LAYERS
        }

    @property
    def enabled(self) -> bool:
        return self._config.enable_audit

    def record(
        self,
        event_type: AuditEventType,
        action: str,
        entity_id: Optional[str] = None,
        entity_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
        layer: str = 'store',
    ) -> Optional[AuditLogEntry]:
        """Build and collect an entry. Returns None when auditing is disabled."""
        if not self.enabled:
            return None
        collector = self._collectors.setdefault(
            layer, AuditCollector(layer, self._config.max_entries)
        )
        sequence = collector.sequence + 1
        entry_hash = hashlib.sha256(
            f"{layer}|{action}|{entity_id}|{sequence}".encode('utf-8')
        ).hexdigest()[:16]

        entry = AuditLogEntry(
            entry_id=f"audit_{entry_hash}",
            event_type=event_type,
            timestamp=Timestamp.now(),
            layer=layer,
            action=action,
            entity_id=entity_id,
            entity_type=entity_type,
            metadata=tuple(sorted((metadata or {}).items())),
            sequence=sequence,
        )
        collector.collect(entry)
        return entry

    def get_layer_log(self, layer_name: str) -> List[AuditLogEntry]:
        collector = self._collectors.get(layer_name)
        if not collector:
            return []
        return collector.get_entries()

    def get_unified_log(self) -> List[AuditLogEntry]:
        """All entries, ordered by timestamp then per-layer sequence."""
        entries = []
        for collector in self._collectors.values():
            entries.extend(collector.get_entries())
        entries.sort(key=lambda e: (e.timestamp.value, e.sequence))
        return entries

    def generate_audit_report(self) -> Dict:
        """Counts by layer, action and event type."""
        entries = self.get_unified_log()
        by_layer: Dict[str, int] = {}
        by_action: Dict[str, int] = {}
        by_type: Dict[str, int] = {}
        for entry in entries:
            by_layer[entry.layer] = by_layer.get(entry.layer, 0) + 1
            by_action[entry.action] = by_action.get(entry.action, 0) + 1
            by_type[entry.event_type.value] = by_type.get(entry.event_type.value, 0) + 1

        return {
            'total_entries': len(entries),
            'by_layer': by_layer,
            'by_action': by_action,
            'by_event_type': by_type,
            'first_entry_at': entries[0].timestamp.to_iso() if entries else None,
            'last_entry_at': entries[-1].timestamp.to_iso() if entries else None,
            'generated_at': Timestamp.now().to_iso(),
        }
