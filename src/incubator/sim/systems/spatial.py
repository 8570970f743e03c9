from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from ..core.agent import Agent, DrugPoint
from ..utils.math2d import _distance_sq

if TYPE_CHECKING:
    from ..core.world import World


def find_nearby_agents(world: World, agent: Agent, radius: float, slack: float = 0.0) -> List[Agent]:
    """Living agents other than `agent` strictly within `radius`, in population order."""
    if world._grid_ready:
        return world._grid.get_neighbors(agent.position, radius, exclude_id=agent.id, slack=slack)
    radius_sq = radius * radius
    position = agent.position
    return [
        other
        for other in world.agents
        if other.alive and other.id != agent.id and _distance_sq(position, other.position) < radius_sq
    ]


def find_nearest_drug(world: World, agent: Agent) -> Optional[DrugPoint]:
    attraction_sq = world.config.drug.attraction_radius ** 2
    nearest: Optional[DrugPoint] = None
    min_dist_sq = attraction_sq
    for drug in world.drugs:
        dist_sq = _distance_sq(agent.position, drug.position)
        if dist_sq < min_dist_sq:
            min_dist_sq = dist_sq
            nearest = drug
    return nearest


def agents_in_radius(world: World, drug: DrugPoint) -> List[Agent]:
    radius_sq = drug.radius * drug.radius
    return [
        agent
        for agent in world.agents
        if agent.alive and _distance_sq(agent.position, drug.position) < radius_sq
    ]
