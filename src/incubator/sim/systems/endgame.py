from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, List

from pygame.math import Vector2

from ..core.agent import Agent, AgentState, Team
from ..types.outcome import Outcome, Phase
from ..utils.math2d import _distance, _power_diff, _toward

if TYPE_CHECKING:
    from ..core.world import World

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FinalBattle:
    reindeer: Agent
    rabbit: Agent
    started_at: float

    def ids(self) -> frozenset[int]:
        return frozenset((self.reindeer.id, self.rabbit.id))


def check_endgame(world: World) -> None:
    """
    Advance the endgame state machine by one tick.

    Precedence: 1-vs-1 duel, then team wipe-out, then single-survivor
    protection. After termination this is a no-op.
    """

    if world.terminated:
        return

    reindeer = _living(world, Team.REINDEER)
    rabbits = _living(world, Team.RABBIT)

    if len(reindeer) == 1 and len(rabbits) == 1:
        a0, a1 = reindeer[0], rabbits[0]
        a0.protected = False
        a1.protected = False
        battle = world.final_battle
        if battle is None or battle.reindeer is not a0 or battle.rabbit is not a1:
            world.final_battle = FinalBattle(reindeer=a0, rabbit=a1, started_at=world.now)
            logger.info("Final duel: reindeer %.2f vs rabbit %.2f", a0.power, a1.power)
        world.phase = Phase.ONE_V_ONE
        process_final_battle(world, a0, a1)
        return

    world.final_battle = None

    if not reindeer or not rabbits:
        if not reindeer and not rabbits:
            terminate(world, Outcome.EXTINCTION)
            return
        survivors = rabbits if not reindeer else reindeer
        outcome = Outcome.RABBIT_SURVIVES if not reindeer else Outcome.REINDEER_SURVIVES
        if terminate(world, outcome):
            for agent in survivors:
                world.effects.add_darkening(agent.position, world.now)
        return

    world.phase = Phase.RUNNING
    apply_protection(reindeer, rabbits)
    apply_protection(rabbits, reindeer)


def apply_protection(members: List[Agent], rivals: List[Agent]) -> None:
    shielded = len(members) == 1 and len(rivals) > 1
    for agent in members:
        agent.protected = shielded


def process_final_battle(world: World, reindeer: Agent, rabbit: Agent) -> None:
    config = world.config
    dt = config.time_step
    speed = config.duel_speed
    collision = config.agent_radius * 2.0 + speed * 2.0 * dt

    if _distance(reindeer.position, rabbit.position) <= collision:
        resolve_duel(world, reindeer, rabbit)
        return

    for mover, target in ((reindeer, rabbit), (rabbit, reindeer)):
        mover.state = AgentState.DUEL
        velocity = _toward(mover.position, target.position, speed)
        if velocity is not None:
            mover.velocity = velocity
    for mover in (reindeer, rabbit):
        mover.position.update(mover.position.x + mover.velocity.x * dt, mover.position.y + mover.velocity.y * dt)
        world.arena.clamp(mover.position, config.agent_radius)


def resolve_duel(world: World, reindeer: Agent, rabbit: Agent) -> Outcome:
    if world.terminated:
        return world.outcome
    bands = world.config.duel
    diff = _power_diff(reindeer.power, rabbit.power)
    now = world.now

    if abs(diff) <= bands.escape_band:
        outcome = Outcome.ESCAPE
    elif abs(diff) <= bands.mid_band:
        outcome = Outcome.SURVIVE_TOGETHER
    elif diff > 0:
        outcome = Outcome.RABBIT_KILLS_REINDEER
    else:
        outcome = Outcome.REINDEER_KILLS_RABBIT

    if outcome is Outcome.ESCAPE:
        world.escape(reindeer)
        world.escape(rabbit)
    elif outcome is Outcome.SURVIVE_TOGETHER:
        midpoint = Vector2(
            (reindeer.position.x + rabbit.position.x) / 2.0,
            (reindeer.position.y + rabbit.position.y) / 2.0,
        )
        for position in (midpoint, reindeer.position, rabbit.position):
            world.effects.add_mist(position, now)
            world.effects.add_heart(position, now)
    elif outcome is Outcome.RABBIT_KILLS_REINDEER:
        world.kill(reindeer, killer=rabbit, cause="duel")
    else:
        world.kill(rabbit, killer=reindeer, cause="duel")

    world.remove_dead()
    terminate(world, outcome)
    return outcome


def terminate(world: World, outcome: Outcome) -> bool:
    """Record the terminal outcome once; later calls return False and change nothing."""
    if world.terminated:
        return False
    world._terminated = True
    world._outcome = outcome
    world._ended_at = world.now
    world.phase = Phase.ENDED
    world.final_battle = None
    logger.info("Simulation ended at t=%.2fs: %s", world.now, outcome.label)
    return True


def _living(world: World, team: Team) -> List[Agent]:
    return [agent for agent in world.agents if agent.alive and agent.team == team]
