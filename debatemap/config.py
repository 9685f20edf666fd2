"""
Configuration

One dataclass per layer, aggregated by DebateMapConfig.
Environment overrides are read only by DebateMapConfig.from_env().
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import os


@dataclass
class StoreConfig:
    """Configuration for the graph store."""
    seed_default_debate: bool = True  # participants A, B with thesisA, thesisB
    auto_create_thesis: bool = True  # addArgument may create "<participant> Thesis"
    id_salt: Optional[str] = None  # fixed salt gives reproducible ids
    id_length: int = 8


@dataclass
class LayoutConfig:
    """Nominal layout constants."""
    node_w: float = 320
    node_h: float = 120
    x_gap: float = 60
    y_gap: float = 180
    summary_raise: float = 30

    @property
    def level_height(self) -> float:
        return self.node_h + self.y_gap


@dataclass
class ObservabilityConfig:
    """Configuration for the audit layer."""
    enable_audit: bool = True
    max_entries: int = 10000


@dataclass
class DebateMapConfig:
    """Unified configuration."""
    store: StoreConfig = None
    layout: LayoutConfig = None
    observability: ObservabilityConfig = None
    snapshot_path: Optional[str] = None

    def __post_init__(self):
        self.store = self.store or StoreConfig()
        self.layout = self.layout or LayoutConfig()
        self.observability = self.observability or ObservabilityConfig()

    @classmethod
    def from_env(cls) -> DebateMapConfig:
        """Build configuration from DEBATEMAP_* environment variables."""
        return cls(
            store=StoreConfig(
                seed_default_debate=_env_flag("DEBATEMAP_SEED", True),
                auto_create_thesis=_env_flag("DEBATEMAP_AUTO_THESIS", True),
                id_salt=os.environ.get("DEBATEMAP_ID_SALT") or None,
            ),
            snapshot_path=os.environ.get("DEBATEMAP_SNAPSHOT") or None,
        )


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")
