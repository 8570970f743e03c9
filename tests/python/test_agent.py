from __future__ import annotations

from pygame.math import Vector2
from pytest import approx

from incubator.sim.core.agent import Agent, ArenaBounds, DrugPoint, Team
from incubator.sim.utils.math2d import _power_diff


def _make_agent(agent_id: int) -> Agent:
    return Agent(id=agent_id, team=Team.REINDEER, position=Vector2(), power=1.0)


def test_agent_uses_slots_and_isolates_defaults():
    agent_a = _make_agent(1)
    agent_b = _make_agent(2)

    assert not hasattr(agent_a, "__dict__")
    assert hasattr(Agent, "__slots__")
    agent_a.velocity.x = 1.5
    assert agent_b.velocity.x == 0.0


def test_truce_and_heart_cooldown_follow_the_clock():
    agent = _make_agent(1)
    agent.truce_until = 2.0

    assert agent.in_truce(1.99)
    assert not agent.in_truce(2.0)
    assert agent.can_trigger_heart(0.0, 0.5)
    agent.last_heart_time = 1.0
    assert not agent.can_trigger_heart(1.2, 0.5)
    assert agent.can_trigger_heart(1.5, 0.5)


def test_team_rival():
    assert Team.REINDEER.rival is Team.RABBIT
    assert Team.RABBIT.rival is Team.REINDEER


def test_drug_point_ttl():
    drug = DrugPoint(id=0, position=Vector2(10, 10), radius=50.0, ttl=5.0, created_at=1.0)

    assert not drug.expired(5.9)
    assert drug.expired(6.0)
    assert drug.remaining_fraction(3.5) == approx(0.5)
    assert drug.remaining_fraction(9.0) == 0.0


def test_arena_bounds_clamp_in_place():
    bounds = ArenaBounds.full(100.0, 50.0)
    position = Vector2(-10.0, 70.0)

    bounds.clamp(position, 4.0)

    assert position == Vector2(4.0, 46.0)
    assert bounds.contains(100.0, 50.0)
    assert not bounds.contains(100.1, 10.0)


def test_power_difference_is_normalised_by_the_stronger():
    assert _power_diff(5.0, 3.0) == approx(-0.4)
    assert _power_diff(3.0, 5.0) == approx(0.4)
    assert _power_diff(0.0, 0.0) == 0.0
