from __future__ import annotations

import math
from typing import TYPE_CHECKING, Dict, List, Tuple

from pygame.math import Vector2

if TYPE_CHECKING:
    from .agent import Agent


class SpatialGrid:
    """Uniform bucket grid over agents.

    Queries return matches in insertion order so callers that depend on
    population order (last-match target selection, pair resolution) see the
    same sequence as a linear scan.
    """

    def __init__(self, cell_size: float) -> None:
        self._cell_size = cell_size
        self._cells: Dict[Tuple[int, int], List[Tuple[int, "Agent"]]] = {}
        self._active_keys: List[Tuple[int, int]] = []
        self._count = 0

    def clear(self) -> None:
        for key in self._active_keys:
            bucket = self._cells.get(key)
            if bucket:
                bucket.clear()
        self._active_keys.clear()
        self._count = 0

    def insert(self, agent: "Agent") -> None:
        key = self._cell_key(agent.position)
        bucket = self._cells.get(key)
        if bucket is None:
            bucket = []
            self._cells[key] = bucket
            self._active_keys.append(key)
        elif not bucket:
            # Bucket exists but was cleared at the start of this pass; mark it active again.
            self._active_keys.append(key)
        bucket.append((self._count, agent))
        self._count += 1

    def rebuild(self, agents: List["Agent"]) -> None:
        self.clear()
        for agent in agents:
            self.insert(agent)

    def get_neighbors(
        self,
        position: Vector2,
        radius: float,
        exclude_id: int | None = None,
        slack: float = 0.0,
    ) -> List["Agent"]:
        """
        Agents strictly closer than `radius` to `position`.

        `slack` widens the scanned cells for agents that may have moved since
        insertion; the distance test always uses their current position.
        """

        base_key = self._cell_key(position)
        cell_range = int(math.ceil((radius + slack) / self._cell_size))
        radius_sq = radius * radius
        pos_x = position.x
        pos_y = position.y
        found: List[Tuple[int, "Agent"]] = []

        for dx in range(-cell_range, cell_range + 1):
            for dy in range(-cell_range, cell_range + 1):
                bucket = self._cells.get((base_key[0] + dx, base_key[1] + dy))
                if not bucket:
                    continue
                for order, agent in bucket:
                    if not agent.alive:
                        continue
                    if exclude_id is not None and agent.id == exclude_id:
                        continue
                    pos = agent.position
                    offset_x = pos.x - pos_x
                    offset_y = pos.y - pos_y
                    if offset_x * offset_x + offset_y * offset_y < radius_sq:
                        found.append((order, agent))
        found.sort(key=lambda entry: entry[0])
        return [agent for _, agent in found]

    def _cell_key(self, position: Vector2) -> Tuple[int, int]:
        return (int(position.x // self._cell_size), int(position.y // self._cell_size))
