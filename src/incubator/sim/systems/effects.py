from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List

from pygame.math import Vector2

from ...config import EffectConfig


class EffectKind(str, Enum):
    DARKENING = "darkening"
    MIST = "mist"
    HEART = "heart"


@dataclass(slots=True)
class Effect:
    kind: EffectKind
    position: Vector2
    created_at: float

    def age(self, now: float) -> float:
        return now - self.created_at


class EffectTracker:
    """Time-decayed cosmetic effects; nothing here feeds back into the simulation."""

    def __init__(self, config: EffectConfig):
        self._config = config
        self._effects: Dict[EffectKind, List[Effect]] = {kind: [] for kind in EffectKind}

    def clear(self) -> None:
        for effects in self._effects.values():
            effects.clear()

    def add(self, kind: EffectKind, position: Vector2, now: float) -> None:
        self._effects[kind].append(Effect(kind=kind, position=Vector2(position), created_at=now))

    def add_darkening(self, position: Vector2, now: float) -> None:
        self.add(EffectKind.DARKENING, position, now)

    def add_mist(self, position: Vector2, now: float) -> None:
        self.add(EffectKind.MIST, position, now)

    def add_heart(self, position: Vector2, now: float) -> None:
        self.add(EffectKind.HEART, position, now)

    def lifetime(self, kind: EffectKind) -> float:
        if kind is EffectKind.DARKENING:
            return self._config.darkening_lifetime
        if kind is EffectKind.MIST:
            return self._config.mist_lifetime
        return self._config.heart_lifetime

    def age_out(self, now: float) -> None:
        for kind, effects in self._effects.items():
            lifetime = self.lifetime(kind)
            effects[:] = [effect for effect in effects if now - effect.created_at < lifetime]

    def of_kind(self, kind: EffectKind) -> List[Effect]:
        return self._effects[kind]

    def alpha(self, effect: Effect, now: float) -> float:
        lifetime = self.lifetime(effect.kind)
        if lifetime <= 0:
            return 0.0
        return max(0.0, 1.0 - effect.age(now) / lifetime)

    def mist_radius(self, effect: Effect, now: float) -> float:
        return min(self._config.mist_max_radius, effect.age(now) * self._config.mist_growth_per_second)

    def heart_scale(self, effect: Effect, now: float) -> float:
        lifetime = self._config.heart_lifetime
        if lifetime <= 0:
            return 1.0
        return 0.5 + effect.age(now) / lifetime

    def count(self) -> int:
        return sum(len(effects) for effects in self._effects.values())

    def export(self, now: float) -> List[Dict[str, object]]:
        payload: List[Dict[str, object]] = []
        for kind, effects in self._effects.items():
            for effect in effects:
                payload.append(
                    {
                        "kind": kind.value,
                        "x": effect.position.x,
                        "y": effect.position.y,
                        "alpha": self.alpha(effect, now),
                    }
                )
        return payload
