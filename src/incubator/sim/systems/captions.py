from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from pygame.math import Vector2

from ...config import CaptionConfig
from ...rng import DeterministicRng
from ..core.agent import Agent, Team
from ..types.events import CaptionBubble, EventKind, SpeechEvent
from ..utils.math2d import _clamp_value, _distance_sq
from .dialogue import lines_for

logger = logging.getLogger(__name__)


class CaptionScheduler:
    """
    Turns gameplay events into short-lived captions.

    Runs on its own cadence (`CaptionConfig.interval`) measured on the
    simulation clock and emits at most one caption per scheduler tick.
    Events not consumed within `event_expiry` are dropped.
    """

    def __init__(self, config: CaptionConfig, canvas_width: float, canvas_height: float, rng: DeterministicRng):
        self._config = config
        self._canvas_width = canvas_width
        self._canvas_height = canvas_height
        self._rng = rng
        self._events: List[SpeechEvent] = []
        self._bubbles: List[CaptionBubble] = []
        self._cooldown_until: Dict[EventKind, float] = {}
        self._started_at = 0.0
        self._last_tick: Optional[float] = None

    @property
    def events(self) -> List[SpeechEvent]:
        return self._events

    @property
    def bubbles(self) -> List[CaptionBubble]:
        return self._bubbles

    def reset(self, now: float) -> None:
        self._events.clear()
        self._bubbles.clear()
        self._cooldown_until.clear()
        self._started_at = now
        self._last_tick = None

    def emit(self, kind: EventKind, team: Team, position: Vector2, now: float) -> None:
        if not self._config.enabled:
            return
        self._events.append(SpeechEvent(kind=kind, team=team, position=Vector2(position), created_at=now))

    def update(self, now: float, agents: Sequence[Agent], allow_new: bool = True) -> Optional[CaptionBubble]:
        """Age captions every frame; run a scheduler tick when the interval has elapsed."""
        lifetime = self._config.lifetime
        self._bubbles[:] = [bubble for bubble in self._bubbles if now - bubble.created_at < lifetime]
        if self._last_tick is not None and now - self._last_tick < self._config.interval:
            return None
        self._last_tick = now
        if not allow_new:
            self._events.clear()
            return None
        return self.tick(now, agents)

    def tick(self, now: float, agents: Sequence[Agent]) -> Optional[CaptionBubble]:
        config = self._config
        expiry = config.event_expiry
        self._events[:] = [event for event in self._events if now - event.created_at < expiry]

        visible = len(self._bubbles)
        if visible >= config.max_visible:
            return None
        if visible >= config.min_visible and not self._events:
            return None

        eligible = [event for event in self._events if self._eligible(event, now)]
        if not eligible:
            idle = self._synthesize_idle(agents, now)
            if idle is None or not self._eligible(idle, now):
                return None
            eligible = [idle]

        event = max(eligible, key=lambda item: (item.priority, item.created_at))
        lines = lines_for(event.kind, event.team)
        if not lines:
            return None
        position = self._place(event.position, event.kind)
        if position is None:
            logger.debug("No free caption slot near (%.0f, %.0f)", event.position.x, event.position.y)
            return None

        bubble = CaptionBubble(
            text=self._rng.sample_choice(lines),
            position=position,
            origin=Vector2(event.position),
            created_at=now,
            kind=event.kind,
            team=event.team,
        )
        self._bubbles.append(bubble)
        self._cooldown_until[event.kind] = now + self.cooldown(event.kind)
        self._events[:] = [pending for pending in self._events if pending is not event]
        logger.debug("Caption %s for %s: %s", event.kind.value, event.team.name, bubble.text)
        return bubble

    def cooldown(self, kind: EventKind) -> float:
        config = self._config
        if kind is EventKind.BOOST:
            return config.boost_cooldown
        if kind is EventKind.CROSS_KILL:
            return config.cross_kill_cooldown
        if kind is EventKind.SAME_KILL:
            return config.same_kill_cooldown
        return config.idle_cooldown

    def alpha(self, bubble: CaptionBubble, now: float) -> float:
        if self._config.lifetime <= 0:
            return 0.0
        return max(0.0, 1.0 - bubble.age(now) / self._config.lifetime)

    def _eligible(self, event: SpeechEvent, now: float) -> bool:
        if now < self._cooldown_until.get(event.kind, float("-inf")):
            return False
        if event.kind is EventKind.SAME_KILL and now - self._started_at < self._config.same_kill_grace:
            return False
        radius_sq = self._config.dedupe_radius ** 2
        for bubble in self._bubbles:
            if bubble.kind is not event.kind:
                continue
            if (
                _distance_sq(bubble.origin, event.position) < radius_sq
                or _distance_sq(bubble.position, event.position) < radius_sq
            ):
                return False
        return True

    def _synthesize_idle(self, agents: Sequence[Agent], now: float) -> Optional[SpeechEvent]:
        living = [agent for agent in agents if agent.alive]
        speaker = self._rng.sample_choice(living)
        if speaker is None:
            return None
        return SpeechEvent(kind=EventKind.IDLE, team=speaker.team, position=Vector2(speaker.position), created_at=now)

    def _place(self, origin: Vector2, kind: EventKind) -> Optional[Vector2]:
        config = self._config
        half_w = config.bubble_width / 2.0
        half_h = config.bubble_height / 2.0
        for _ in range(max(1, config.placement_retries)):
            x = origin.x + self._rng.next_range(-config.placement_jitter, config.placement_jitter)
            y = origin.y - config.placement_lift - self._rng.next_range(0.0, config.placement_jitter)
            candidate = Vector2(
                _clamp_value(x, half_w, max(half_w, self._canvas_width - half_w)),
                _clamp_value(y, half_h, max(half_h, self._canvas_height - half_h)),
            )
            if not self._overlaps(candidate) and not self._crowds(candidate, kind):
                return candidate
        return None

    def _overlaps(self, candidate: Vector2) -> bool:
        width = self._config.bubble_width
        height = self._config.bubble_height
        for bubble in self._bubbles:
            if abs(bubble.position.x - candidate.x) < width and abs(bubble.position.y - candidate.y) < height:
                return True
        return False

    def _crowds(self, candidate: Vector2, kind: EventKind) -> bool:
        radius_sq = self._config.dedupe_radius ** 2
        for bubble in self._bubbles:
            if bubble.kind is kind and _distance_sq(bubble.position, candidate) < radius_sq:
                return True
        return False
