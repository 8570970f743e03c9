from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.world import World


def process_arena_shrink(world: World, dt: float) -> bool:
    """Contract the arena once no cross-team encounter happened for the timeout window."""
    config = world.config.arena
    if world.now - world.last_encounter <= config.no_encounter_seconds:
        return False

    shrink = config.shrink_rate * dt
    bounds = world.arena
    bounds.left += shrink
    bounds.right -= shrink
    bounds.top += shrink
    bounds.bottom -= shrink

    if bounds.width < config.min_size or bounds.height < config.min_size:
        half = config.min_size / 2.0
        center_x = world.config.canvas_width / 2.0
        center_y = world.config.canvas_height / 2.0
        bounds.left = center_x - half
        bounds.right = center_x + half
        bounds.top = center_y - half
        bounds.bottom = center_y + half

    margin = world.config.agent_radius
    for agent in world.agents:
        bounds.clamp(agent.position, margin)
    return True
