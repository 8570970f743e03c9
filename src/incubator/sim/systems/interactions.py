from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List

from pygame.math import Vector2

from ..core.agent import Agent, DrugPoint
from ..types.events import EventKind
from ..utils.math2d import _power_diff
from .spatial import agents_in_radius, find_nearby_agents

if TYPE_CHECKING:
    from ..core.world import World


def process_drug_interactions(world: World) -> None:
    """
    Resolve every drug point once.

    Both teams inside the radius always wins over expiry: the point is
    consumed immediately, whatever TTL it has left.
    """

    now = world.now
    remaining: List[DrugPoint] = []
    for drug in world.drugs:
        present = agents_in_radius(world, drug)
        if len({agent.team for agent in present}) == 2:
            _consume_drug(world, drug, present)
            continue
        if drug.expired(now):
            for agent in present:
                if not agent.protected:
                    world.kill(agent, cause="drug expiry")
            continue
        remaining.append(drug)
    world.drugs[:] = remaining


def _consume_drug(world: World, drug: DrugPoint, present: List[Agent]) -> None:
    now = world.now
    config = world.config.drug
    cooldown = world.config.combat.heart_cooldown
    for agent in present:
        agent.power += config.power_gain
        agent.truce_until = now + config.truce_duration
        world.effects.add_mist(agent.position, now)
        if agent.can_trigger_heart(now, cooldown):
            world.effects.add_heart(agent.position, now)
            agent.last_heart_time = now
        if world.rng.chance(config.boost_event_chance):
            world.captions.emit(EventKind.BOOST, agent.team, agent.position, now)
    world.effects.add_mist(drug.position, now)
    world.effects.add_heart(drug.position, now)
    world.captions.emit(EventKind.BOOST, present[0].team, drug.position, now)
    world.mark_encounter()


def process_agent_interactions(world: World) -> None:
    """Resolve each close pair once, in population order, skipping duel finalists."""
    now = world.now
    order: Dict[int, int] = {agent.id: index for index, agent in enumerate(world.agents)}
    finalists = world.finalist_ids
    radius = world.config.combat.collision_radius
    encounter = False

    for agent in world.agents:
        if not agent.alive or agent.id in finalists:
            continue
        agent_index = order[agent.id]
        for other in find_nearby_agents(world, agent, radius):
            if not agent.alive:
                break
            if not other.alive or other.id in finalists or order[other.id] <= agent_index:
                continue
            if agent.team == other.team:
                resolve_same_team(world, agent, other)
                continue
            if agent.in_truce(now) or other.in_truce(now):
                continue
            encounter = True
            resolve_cross_team(world, agent, other)

    if encounter:
        world.mark_encounter()


def resolve_same_team(world: World, agent: Agent, other: Agent) -> None:
    """Any measurable power difference is lethal between teammates."""
    diff = _power_diff(agent.power, other.power)
    if abs(diff) <= world.config.combat.same_team_kill_epsilon:
        return
    winner, loser = (other, agent) if diff > 0 else (agent, other)
    _kill_and_absorb(world, winner, loser, EventKind.SAME_KILL)


def resolve_cross_team(world: World, agent: Agent, other: Agent) -> None:
    diff = _power_diff(agent.power, other.power)
    winner, loser = (other, agent) if diff > 0 else (agent, other)
    threshold = world.config.team(winner.team).aggressiveness
    if abs(diff) > threshold:
        if loser.protected:
            mutual_boost(world, agent, other)
            return
        _kill_and_absorb(world, winner, loser, EventKind.CROSS_KILL)
        return
    mutual_boost(world, agent, other)


def mutual_boost(world: World, agent: Agent, other: Agent) -> None:
    now = world.now
    combat = world.config.combat
    agent.power += combat.cross_team_power_gain
    other.power += combat.cross_team_power_gain
    for participant in (agent, other):
        world.effects.add_mist(participant.position, now)
        if participant.can_trigger_heart(now, combat.heart_cooldown):
            world.effects.add_heart(participant.position, now)
            participant.last_heart_time = now
    if world.rng.chance(combat.boost_event_chance):
        speaker = agent if world.rng.chance(0.5) else other
        midpoint = Vector2((agent.position.x + other.position.x) / 2.0, (agent.position.y + other.position.y) / 2.0)
        world.captions.emit(EventKind.BOOST, speaker.team, midpoint, now)


def _kill_and_absorb(world: World, winner: Agent, loser: Agent, kind: EventKind) -> None:
    winner.power += loser.power * world.config.team(winner.team).kill_bonus
    world.kill(loser, killer=winner)
    world.captions.emit(kind, winner.team, winner.position, world.now)
