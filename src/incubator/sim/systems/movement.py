from __future__ import annotations

import math
from typing import TYPE_CHECKING, Optional

from pygame.math import Vector2

from ..core.agent import Agent, AgentState
from ..utils.math2d import _clamp_value, _distance, _power_diff, _toward
from .spatial import find_nearby_agents, find_nearest_drug

if TYPE_CHECKING:
    from ..core.world import World


def update_agent_movement(world: World, agent: Agent, dt: float, slack: float = 0.0) -> None:
    team = world.config.team(agent.team)
    max_speed = team.max_speed

    drug = find_nearest_drug(world, agent)
    if drug is not None:
        agent.state = AgentState.SEEKING_DRUG
        velocity = _toward(agent.position, drug.position, max_speed)
        if velocity is not None:
            agent.velocity = velocity
    else:
        target, pursuing = select_combat_target(world, agent, slack=slack)
        if target is not None:
            agent.state = AgentState.PURSUE if pursuing else AgentState.FLEE
            velocity = _toward(agent.position, target.position, max_speed)
            if velocity is not None:
                agent.velocity = velocity if pursuing else -velocity
        else:
            agent.state = AgentState.WANDER
            wander(world, agent, max_speed)

    agent.position.update(
        agent.position.x + agent.velocity.x * dt,
        agent.position.y + agent.velocity.y * dt,
    )
    world.arena.clamp(agent.position, world.config.agent_radius)


def select_combat_target(world: World, agent: Agent, slack: float = 0.0) -> tuple[Optional[Agent], bool]:
    """
    Scan sensed neighbours for someone to flee from or chase.

    Every neighbour past the aggressiveness threshold overwrites the previous
    match, so the last one in population order governs this tick.
    """

    aggressiveness = world.config.team(agent.team).aggressiveness
    now = world.now
    in_truce = agent.in_truce(now)
    target: Optional[Agent] = None
    pursuing = False
    for other in find_nearby_agents(world, agent, world.config.combat.sense_radius, slack=slack):
        if in_truce and other.team != agent.team:
            continue
        diff = _power_diff(agent.power, other.power)
        if diff > aggressiveness:
            target = other
            pursuing = False
        elif diff < -aggressiveness:
            target = other
            pursuing = True
    return target, pursuing


def wander(world: World, agent: Agent, max_speed: float) -> None:
    config = world.config.wander
    rng = world.rng
    bounds = world.arena
    now = world.now

    if agent.wander_target is None:
        agent.wander_target = Vector2(
            agent.position.x + (rng.next_float() - 0.5) * config.fallback_spread,
            agent.position.y + (rng.next_float() - 0.5) * config.fallback_spread,
        )
        agent.last_wander_change = now

    dist_to_target = _distance(agent.position, agent.wander_target)
    if dist_to_target < config.arrive_radius or now - agent.last_wander_change > config.retarget_seconds:
        angle = rng.next_angle()
        reach = rng.next_range(config.min_distance, config.max_distance)
        margin = config.edge_margin
        agent.wander_target = Vector2(
            _clamp_value(agent.position.x + math.cos(angle) * reach, bounds.left + margin, bounds.right - margin),
            _clamp_value(agent.position.y + math.sin(angle) * reach, bounds.top + margin, bounds.bottom - margin),
        )
        agent.last_wander_change = now

    velocity = _toward(agent.position, agent.wander_target, max_speed * config.speed_fraction)
    if velocity is None:
        agent.velocity = rng.next_unit_circle() * (max_speed * config.creep_fraction)
    else:
        agent.velocity = velocity
