from __future__ import annotations

from typing import TYPE_CHECKING

from ..core.agent import Team
from ..types.metrics import TickMetrics

if TYPE_CHECKING:
    from ..core.world import World


def _team_stats(world: World, team: Team) -> tuple[int, float]:
    count = 0
    power_sum = 0.0
    for agent in world.agents:
        if agent.alive and agent.team == team:
            count += 1
            power_sum += agent.power
    return count, (power_sum / count if count else 0.0)


def create_metrics(world: World, tick: int, duration_ms: float) -> TickMetrics:
    reindeer, reindeer_power = _team_stats(world, Team.REINDEER)
    rabbits, rabbit_power = _team_stats(world, Team.RABBIT)
    return TickMetrics(
        tick=tick,
        sim_time=world.now,
        reindeer=reindeer,
        rabbits=rabbits,
        reindeer_deaths=world.deaths[Team.REINDEER],
        rabbit_deaths=world.deaths[Team.RABBIT],
        reindeer_escapes=world.escapes[Team.REINDEER],
        rabbit_escapes=world.escapes[Team.RABBIT],
        reindeer_avg_power=reindeer_power,
        rabbit_avg_power=rabbit_power,
        drugs=len(world.drugs),
        arena_width=world.arena.width,
        arena_height=world.arena.height,
        captions=len(world.captions.bubbles),
        phase=world.phase.value,
        tick_duration_ms=duration_ms,
    )
