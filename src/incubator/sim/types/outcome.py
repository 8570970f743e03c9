from __future__ import annotations

from enum import Enum


class Phase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    ONE_V_ONE = "one_v_one"
    ENDED = "ended"


class Outcome(str, Enum):
    REINDEER_SURVIVES = "reindeer_survives"
    RABBIT_SURVIVES = "rabbit_survives"
    REINDEER_KILLS_RABBIT = "reindeer_kills_rabbit"
    RABBIT_KILLS_REINDEER = "rabbit_kills_reindeer"
    SURVIVE_TOGETHER = "survive_together"
    ESCAPE = "escape"
    EXTINCTION = "extinction"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def quote(self) -> str:
        return _QUOTES[self]


_LABELS = {
    Outcome.REINDEER_SURVIVES: "Reindeer survive",
    Outcome.RABBIT_SURVIVES: "Rabbits survive",
    Outcome.REINDEER_KILLS_RABBIT: "Reindeer kills Rabbit",
    Outcome.RABBIT_KILLS_REINDEER: "Rabbit kills Reindeer",
    Outcome.SURVIVE_TOGETHER: "Survive",
    Outcome.ESCAPE: "Escape",
    Outcome.EXTINCTION: "Silence",
}

_QUOTES = {
    Outcome.REINDEER_SURVIVES: "Nature, red in tooth and claw.",
    Outcome.RABBIT_SURVIVES: "Nature, red in tooth and claw.",
    Outcome.REINDEER_KILLS_RABBIT: "The strong do what they can.",
    Outcome.RABBIT_KILLS_REINDEER: "The race is not to the swift, yet here it was.",
    Outcome.SURVIVE_TOGETHER: "Whatever our souls are made of, his and mine are the same.",
    Outcome.ESCAPE: "Two roads diverged in a wood.",
    Outcome.EXTINCTION: "The rest is silence.",
}
