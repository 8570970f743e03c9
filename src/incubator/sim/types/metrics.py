from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    sim_time: float
    reindeer: int
    rabbits: int
    reindeer_deaths: int
    rabbit_deaths: int
    reindeer_escapes: int
    rabbit_escapes: int
    reindeer_avg_power: float
    rabbit_avg_power: float
    drugs: int
    arena_width: float
    arena_height: float
    captions: int
    phase: str
    tick_duration_ms: float = 0.0

    @property
    def population(self) -> int:
        return self.reindeer + self.rabbits
