from __future__ import annotations

from pygame.math import Vector2
from pytest import approx

from incubator.config import EffectConfig
from incubator.sim.systems.effects import EffectKind, EffectTracker


def test_effects_fade_and_age_out():
    tracker = EffectTracker(EffectConfig())
    tracker.add_darkening(Vector2(1, 1), 0.0)
    tracker.add_mist(Vector2(2, 2), 0.0)
    tracker.add_heart(Vector2(3, 3), 0.0)

    darkening = tracker.of_kind(EffectKind.DARKENING)[0]
    assert tracker.alpha(darkening, 0.25) == approx(0.5)

    tracker.age_out(0.6)
    assert tracker.of_kind(EffectKind.DARKENING) == []
    assert tracker.count() == 2

    tracker.age_out(2.0)
    assert tracker.count() == 0


def test_mist_grows_to_a_cap_and_hearts_scale_up():
    tracker = EffectTracker(EffectConfig())
    tracker.add_mist(Vector2(), 0.0)
    tracker.add_heart(Vector2(), 0.0)
    mist = tracker.of_kind(EffectKind.MIST)[0]
    heart = tracker.of_kind(EffectKind.HEART)[0]

    assert tracker.mist_radius(mist, 0.3) == approx(30.0)
    assert tracker.mist_radius(mist, 1.5) == approx(60.0)
    assert tracker.heart_scale(heart, 0.0) == approx(0.5)
    assert tracker.heart_scale(heart, 0.75) == approx(1.0)


def test_effect_positions_are_copied():
    tracker = EffectTracker(EffectConfig())
    position = Vector2(5, 5)
    tracker.add_mist(position, 0.0)
    position.x = 100

    exported = tracker.export(0.0)
    assert exported == [{"kind": "mist", "x": 5.0, "y": 5.0, "alpha": 1.0}]
