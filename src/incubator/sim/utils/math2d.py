from __future__ import annotations

import math

from pygame.math import Vector2


def _distance(a: Vector2, b: Vector2) -> float:
    dx = b.x - a.x
    dy = b.y - a.y
    return math.sqrt(dx * dx + dy * dy)


def _distance_sq(a: Vector2, b: Vector2) -> float:
    dx = b.x - a.x
    dy = b.y - a.y
    return dx * dx + dy * dy


def _clamp_value(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, value))


def _toward(origin: Vector2, target: Vector2, speed: float) -> Vector2 | None:
    """Velocity of magnitude `speed` from origin to target, None when they coincide."""
    dx = target.x - origin.x
    dy = target.y - origin.y
    dist = math.sqrt(dx * dx + dy * dy)
    if dist <= 0.0:
        return None
    return Vector2(dx / dist * speed, dy / dist * speed)


def _power_diff(self_power: float, other_power: float) -> float:
    """Normalized difference (other - self) / max(self, other)."""
    strongest = max(self_power, other_power)
    if strongest <= 0.0:
        return 0.0
    return (other_power - self_power) / strongest
