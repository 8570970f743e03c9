from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Dict, FrozenSet, List, Optional

from pygame.math import Vector2

from ...config import SimulationConfig
from ...rng import DeterministicRng
from ..systems import arena, endgame, interactions, metrics as metrics_system, movement
from ..systems.captions import CaptionScheduler
from ..systems.effects import EffectTracker
from ..types.metrics import TickMetrics
from ..types.outcome import Outcome, Phase
from ..types.snapshot import Snapshot, SnapshotEnding, SnapshotMetadata
from .agent import Agent, ArenaBounds, DrugPoint, Team
from .spatial_grid import SpatialGrid

logger = logging.getLogger(__name__)


class World:
    """
    Owns the whole simulation state and advances it one fixed tick at a time.

    Time is a simulated clock (`now`, seconds) advanced by `time_step` per
    tick, so every timer (truce, drug TTL, shrink window, cooldowns) is
    independent of the host frame rate.
    """

    def __init__(self, config: SimulationConfig, rng: Optional[DeterministicRng] = None):
        self._config = config
        self._rng = rng if rng is not None else DeterministicRng(config.seed)
        self._grid = SpatialGrid(config.grid_cell_size)
        self._grid_ready = False
        self._effects = EffectTracker(config.effects)
        self._captions = CaptionScheduler(config.captions, config.canvas_width, config.canvas_height, self._rng)
        self._agents: List[Agent] = []
        self._drugs: List[DrugPoint] = []
        self._arena = ArenaBounds.full(config.canvas_width, config.canvas_height)
        self._now = 0.0
        self._tick = 0
        self._accumulator = 0.0
        self._last_encounter = 0.0
        self._next_drug_id = 0
        self._running = False
        self._terminated = False
        self._outcome: Optional[Outcome] = None
        self._ended_at: Optional[float] = None
        self.phase = Phase.IDLE
        self.final_battle: Optional[endgame.FinalBattle] = None
        self.deaths: Dict[Team, int] = {team: 0 for team in Team}
        self.escapes: Dict[Team, int] = {team: 0 for team in Team}
        self.initial_counts: Dict[Team, int] = {team: 0 for team in Team}
        self._metrics: TickMetrics | None = None
        self.initialize()

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def rng(self) -> DeterministicRng:
        return self._rng

    @property
    def agents(self) -> List[Agent]:
        return self._agents

    @property
    def drugs(self) -> List[DrugPoint]:
        return self._drugs

    @property
    def arena(self) -> ArenaBounds:
        return self._arena

    @property
    def effects(self) -> EffectTracker:
        return self._effects

    @property
    def captions(self) -> CaptionScheduler:
        return self._captions

    @property
    def now(self) -> float:
        return self._now

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def last_encounter(self) -> float:
        return self._last_encounter

    @property
    def running(self) -> bool:
        return self._running

    @property
    def terminated(self) -> bool:
        return self._terminated

    @property
    def ended(self) -> bool:
        return self._terminated

    @property
    def outcome(self) -> Optional[Outcome]:
        return self._outcome

    @property
    def ended_at(self) -> Optional[float]:
        return self._ended_at

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    @property
    def finalist_ids(self) -> FrozenSet[int]:
        if self.final_battle is None:
            return frozenset()
        return self.final_battle.ids()

    def living(self, team: Team) -> List[Agent]:
        return [agent for agent in self._agents if agent.alive and agent.team == team]

    def initialize(self, team_size: Optional[int] = None) -> None:
        """Create a fresh population of `team_size` agents per team and reset every timer."""
        config = self._config
        count = config.agents_per_team if team_size is None else team_size
        self._agents.clear()
        self._drugs.clear()
        self._effects.clear()
        self._arena = ArenaBounds.full(config.canvas_width, config.canvas_height)
        self._last_encounter = self._now
        self._accumulator = 0.0
        self._terminated = False
        self._outcome = None
        self._ended_at = None
        self.final_battle = None
        self._grid_ready = False
        self._metrics = None
        for team in Team:
            self.deaths[team] = 0
            self.escapes[team] = 0
            self.initial_counts[team] = count

        next_id = 0
        width = config.canvas_width
        height = config.canvas_height
        spread = config.wander.initial_spread
        for team in Team:
            team_config = config.team(team)
            for _ in range(count):
                x = self._rng.next_float() * (width * team_config.spawn_width) + width * team_config.spawn_left
                x += team_config.spawn_offset
                y = self._rng.next_float() * (height - 100.0) + 50.0
                power = self._rng.next_range(team_config.power_min, team_config.power_max)
                agent = Agent(
                    id=next_id,
                    team=team,
                    position=Vector2(x, y),
                    power=power,
                    wander_target=Vector2(
                        x + (self._rng.next_float() - 0.5) * spread,
                        y + (self._rng.next_float() - 0.5) * spread,
                    ),
                    last_wander_change=self._now,
                )
                self._agents.append(agent)
                next_id += 1
        self._captions.reset(self._now)

    def start(self) -> None:
        self.initialize()
        self._running = True
        self.phase = Phase.RUNNING
        logger.info(
            "Simulation started: %d reindeer vs %d rabbits (seed=%s)",
            self.initial_counts[Team.REINDEER],
            self.initial_counts[Team.RABBIT],
            self._rng.seed,
        )

    def stop(self) -> None:
        self._running = False

    def reset(self) -> None:
        self.stop()
        self._rng.reset()
        self._now = 0.0
        self._tick = 0
        self._next_drug_id = 0
        self.phase = Phase.IDLE
        self.initialize()
        logger.info("Simulation reset")

    def add_drug(self, x: float, y: float) -> Optional[DrugPoint]:
        """Drop a drug point at a canvas coordinate; invalid drops are ignored."""
        if not self._running or self._terminated:
            logger.debug("Ignoring drop at (%.1f, %.1f): simulation not active", x, y)
            return None
        if not self._arena.contains(x, y):
            logger.debug("Ignoring drop at (%.1f, %.1f): outside arena", x, y)
            return None
        drug_config = self._config.drug
        drug = DrugPoint(
            id=self._next_drug_id,
            position=Vector2(x, y),
            radius=drug_config.radius,
            ttl=drug_config.ttl,
            created_at=self._now,
        )
        self._next_drug_id += 1
        self._drugs.append(drug)
        return drug

    def advance(self, elapsed: float) -> int:
        """Run as many fixed ticks as `elapsed` real seconds cover, with bounded catch-up."""
        if not self._running:
            return 0
        self._accumulator += max(0.0, elapsed)
        dt = self._config.time_step
        steps = 0
        while self._accumulator >= dt and steps < self._config.max_catch_up_steps:
            self.step()
            self._accumulator -= dt
            steps += 1
        if steps >= self._config.max_catch_up_steps:
            self._accumulator = min(self._accumulator, dt)
        return steps

    def step(self) -> TickMetrics:
        start = perf_counter()
        if not self._running:
            return self._metrics if self._metrics is not None else metrics_system.create_metrics(self, self._tick, 0.0)

        dt = self._config.time_step
        self._now += dt
        self._tick += 1

        if not self._terminated:
            finalists = self.finalist_ids
            slack = self._config.duel_speed * dt
            self._rebuild_grid()
            for agent in self._agents:
                if agent.alive and agent.id not in finalists:
                    movement.update_agent_movement(self, agent, dt, slack=slack)

            interactions.process_drug_interactions(self)
            self.remove_dead()
            self._rebuild_grid()
            interactions.process_agent_interactions(self)
            self._grid_ready = False
            self.remove_dead()

            arena.process_arena_shrink(self, dt)
            endgame.check_endgame(self)

        self._grid_ready = False
        self._effects.age_out(self._now)
        self._captions.update(self._now, self._agents, allow_new=not self._terminated)

        elapsed_ms = (perf_counter() - start) * 1000.0
        metrics = metrics_system.create_metrics(self, self._tick, elapsed_ms)
        self._metrics = metrics
        return metrics

    def kill(self, agent: Agent, killer: Optional[Agent] = None, cause: str = "combat") -> None:
        if not agent.alive:
            return
        agent.alive = False
        agent.protected = False
        self.deaths[agent.team] += 1
        self._effects.add_darkening(agent.position, self._now)
        if killer is not None:
            logger.debug(
                "%s #%d (%.2f) killed by %s #%d (%.2f) [%s]",
                agent.team.name, agent.id, agent.power, killer.team.name, killer.id, killer.power, cause,
            )
        else:
            logger.debug("%s #%d died [%s]", agent.team.name, agent.id, cause)

    def escape(self, agent: Agent) -> None:
        if not agent.alive:
            return
        agent.alive = False
        self.escapes[agent.team] += 1

    def remove_dead(self) -> int:
        before = len(self._agents)
        self._agents[:] = [agent for agent in self._agents if agent.alive]
        return before - len(self._agents)

    def mark_encounter(self) -> None:
        self._last_encounter = self._now

    def snapshot(self) -> Snapshot:
        metrics = self._metrics if self._metrics is not None else metrics_system.create_metrics(self, self._tick, 0.0)
        now = self._now
        ending = None
        if self._outcome is not None:
            ending = SnapshotEnding(
                outcome=self._outcome.value,
                label=self._outcome.label,
                quote=self._outcome.quote,
                ended_at=self._ended_at if self._ended_at is not None else now,
            )
        return Snapshot(
            tick=self._tick,
            metrics=metrics,
            agents=[self._agent_snapshot(agent) for agent in self._agents if agent.alive],
            drugs=[
                {
                    "id": drug.id,
                    "x": drug.position.x,
                    "y": drug.position.y,
                    "radius": drug.radius,
                    "remaining": drug.remaining_fraction(now),
                }
                for drug in self._drugs
            ],
            effects=self._effects.export(now),
            captions=[
                {
                    "text": bubble.text,
                    "x": bubble.position.x,
                    "y": bubble.position.y,
                    "kind": bubble.kind.value,
                    "team": int(bubble.team),
                    "alpha": self._captions.alpha(bubble, now),
                }
                for bubble in self._captions.bubbles
            ],
            arena=self._arena.as_dict(),
            metadata=SnapshotMetadata(
                canvas_width=self._config.canvas_width,
                canvas_height=self._config.canvas_height,
                sim_dt=self._config.time_step,
                tick_rate=1.0 / self._config.time_step,
                seed=self._rng.seed,
                config_version=self._config.config_version,
            ),
            ending=ending,
        )

    def _agent_snapshot(self, agent: Agent) -> Dict[str, Any]:
        return {
            "id": agent.id,
            "team": int(agent.team),
            "x": agent.position.x,
            "y": agent.position.y,
            "vx": agent.velocity.x,
            "vy": agent.velocity.y,
            "power": agent.power,
            "protected": agent.protected,
            "in_truce": agent.in_truce(self._now),
            "behavior_state": agent.state.value,
        }

    def _rebuild_grid(self) -> None:
        if not self._config.use_spatial_grid:
            self._grid_ready = False
            return
        self._grid.rebuild(self._agents)
        self._grid_ready = True
