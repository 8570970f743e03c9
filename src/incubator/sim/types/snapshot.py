from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .metrics import TickMetrics


@dataclass(slots=True)
class Snapshot:
    tick: int
    metrics: TickMetrics
    agents: List[Dict[str, Any]]
    drugs: List[Dict[str, Any]]
    effects: List[Dict[str, Any]]
    captions: List[Dict[str, Any]]
    arena: Dict[str, float]
    metadata: "SnapshotMetadata"
    ending: Optional["SnapshotEnding"] = None


@dataclass(slots=True)
class SnapshotMetadata:
    canvas_width: float
    canvas_height: float
    sim_dt: float
    tick_rate: float
    seed: Optional[int]
    config_version: str


@dataclass(slots=True)
class SnapshotEnding:
    outcome: str
    label: str
    quote: str
    ended_at: float
