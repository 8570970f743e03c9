from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pygame.math import Vector2

from ..core.agent import Team


class EventKind(str, Enum):
    BOOST = "boost"
    CROSS_KILL = "cross_kill"
    SAME_KILL = "same_kill"
    IDLE = "idle"


EVENT_PRIORITY = {
    EventKind.BOOST: 4,
    EventKind.CROSS_KILL: 3,
    EventKind.IDLE: 2,
    EventKind.SAME_KILL: 1,
}


@dataclass(slots=True)
class SpeechEvent:
    kind: EventKind
    team: Team
    position: Vector2
    created_at: float

    @property
    def priority(self) -> int:
        return EVENT_PRIORITY[self.kind]


@dataclass(slots=True)
class CaptionBubble:
    text: str
    position: Vector2
    origin: Vector2
    created_at: float
    kind: EventKind
    team: Team

    def age(self, now: float) -> float:
        return now - self.created_at
