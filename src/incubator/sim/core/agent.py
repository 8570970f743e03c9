from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional

from pygame.math import Vector2


class Team(IntEnum):
    REINDEER = 0
    RABBIT = 1

    @property
    def rival(self) -> "Team":
        return Team.RABBIT if self is Team.REINDEER else Team.REINDEER


class AgentState(str, Enum):
    SEEKING_DRUG = "SeekingDrug"
    PURSUE = "Pursue"
    FLEE = "Flee"
    WANDER = "Wander"
    DUEL = "Duel"


@dataclass(slots=True)
class Agent:
    id: int
    team: Team
    position: Vector2
    power: float
    velocity: Vector2 = field(default_factory=Vector2)
    state: AgentState = AgentState.WANDER
    protected: bool = False
    truce_until: float = 0.0
    wander_target: Optional[Vector2] = None
    last_wander_change: float = 0.0
    last_heart_time: Optional[float] = None
    alive: bool = True

    def in_truce(self, now: float) -> bool:
        return now < self.truce_until

    def can_trigger_heart(self, now: float, cooldown: float) -> bool:
        return self.last_heart_time is None or now - self.last_heart_time >= cooldown


@dataclass(slots=True)
class DrugPoint:
    id: int
    position: Vector2
    radius: float
    ttl: float
    created_at: float

    def age(self, now: float) -> float:
        return now - self.created_at

    def expired(self, now: float) -> bool:
        return now - self.created_at >= self.ttl

    def remaining_fraction(self, now: float) -> float:
        if self.ttl <= 0:
            return 0.0
        return max(0.0, (self.ttl - self.age(now)) / self.ttl)


@dataclass(slots=True)
class ArenaBounds:
    left: float
    top: float
    right: float
    bottom: float

    @classmethod
    def full(cls, width: float, height: float) -> "ArenaBounds":
        return cls(left=0.0, top=0.0, right=width, bottom=height)

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x <= self.right and self.top <= y <= self.bottom

    def clamp(self, position: Vector2, margin: float = 0.0) -> None:
        """Clamp `position` in place to the bounds inset by `margin`."""
        position.update(
            max(self.left + margin, min(self.right - margin, position.x)),
            max(self.top + margin, min(self.bottom - margin, position.y)),
        )

    def as_dict(self) -> dict[str, float]:
        return {"left": self.left, "top": self.top, "right": self.right, "bottom": self.bottom}
