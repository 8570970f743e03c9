from __future__ import annotations

import math
import random
from typing import Optional, Sequence, TypeVar

from pygame.math import Vector2

T = TypeVar("T")


class DeterministicRng:
    """Injectable random source; a ``None`` seed draws from system entropy."""

    def __init__(self, seed: Optional[int] = None):
        self._seed = seed
        self._random = random.Random(seed)

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_float(self) -> float:
        return self._random.random()

    def next_range(self, low: float, high: float) -> float:
        return low + self._random.random() * (high - low)

    def next_int(self, max_value: int) -> int:
        return self._random.randrange(max_value)

    def chance(self, probability: float) -> bool:
        return self._random.random() < probability

    def next_angle(self) -> float:
        return self._random.random() * 2.0 * math.pi

    def next_unit_circle(self) -> Vector2:
        angle = self.next_angle()
        return Vector2(math.cos(angle), math.sin(angle))

    def sample_choice(self, items: Sequence[T]) -> Optional[T]:
        if not items:
            return None
        return self._random.choice(items)
