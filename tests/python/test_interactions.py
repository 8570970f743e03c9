from __future__ import annotations

from pytest import approx

from incubator.sim.core.agent import Team
from incubator.sim.systems.effects import EffectKind
from incubator.sim.systems.interactions import process_agent_interactions, process_drug_interactions

R = Team.REINDEER
B = Team.RABBIT


def _far_rabbits(make_agent, start_id=10):
    return [
        make_agent(start_id, B, 1000.0, 700.0, 1.0),
        make_agent(start_id + 1, B, 1100.0, 700.0, 1.0),
    ]


def test_same_team_differing_power_is_one_kill_and_one_gain(make_world, make_agent):
    strong = make_agent(0, R, 100.0, 100.0, 5.0)
    weak = make_agent(1, R, 105.0, 100.0, 3.0)
    world = make_world([strong, weak, *_far_rabbits(make_agent)])

    process_agent_interactions(world)

    assert weak.alive is False
    assert strong.alive is True
    assert strong.power == approx(5.0 + 3.0 * 0.6)
    assert world.deaths[R] == 1
    assert world.deaths[B] == 0
    assert len(world.effects.of_kind(EffectKind.DARKENING)) == 1


def test_same_team_equal_power_is_no_kill(make_world, make_agent):
    a = make_agent(0, R, 100.0, 100.0, 5.0)
    b = make_agent(1, R, 105.0, 100.0, 5.0)
    world = make_world([a, b, *_far_rabbits(make_agent)])

    process_agent_interactions(world)

    assert a.alive and b.alive
    assert a.power == 5.0 and b.power == 5.0
    assert world.deaths[R] == 0


def test_cross_team_beyond_threshold_kills_weaker(make_world, make_agent):
    reindeer = make_agent(0, R, 100.0, 100.0, 5.0)
    rabbit = make_agent(1, B, 105.0, 100.0, 1.0)
    world = make_world([reindeer, rabbit])
    world._now = 3.0

    process_agent_interactions(world)

    assert rabbit.alive is False
    assert reindeer.power == approx(5.0 + 1.0 * 0.6)
    assert world.last_encounter == approx(3.0)
    assert any(event.kind.value == "cross_kill" for event in world.captions.events)


def test_cross_team_within_threshold_is_mutual_boost(make_world, make_agent):
    reindeer = make_agent(0, R, 100.0, 100.0, 5.0)
    rabbit = make_agent(1, B, 105.0, 100.0, 4.5)
    world = make_world([reindeer, rabbit])

    process_agent_interactions(world)

    assert reindeer.alive and rabbit.alive
    assert reindeer.power == approx(8.0)
    assert rabbit.power == approx(7.5)
    assert world.effects.of_kind(EffectKind.MIST)


def test_cross_team_kill_threshold_uses_winner_aggressiveness(make_world, make_agent):
    # Rabbit wins with |diff| = 0.25: above its own 0.2, below the reindeer's 0.3.
    reindeer = make_agent(0, R, 100.0, 100.0, 3.0)
    rabbit = make_agent(1, B, 105.0, 100.0, 4.0)
    world = make_world([reindeer, rabbit])

    process_agent_interactions(world)

    assert reindeer.alive is False
    assert rabbit.power == approx(4.0 + 3.0 * 0.5)


def test_cross_team_pair_in_truce_is_skipped(make_world, make_agent):
    reindeer = make_agent(0, R, 100.0, 100.0, 5.0)
    rabbit = make_agent(1, B, 105.0, 100.0, 1.0, truce_until=10.0)
    world = make_world([reindeer, rabbit])
    world._now = 1.0
    world._last_encounter = 0.0

    process_agent_interactions(world)

    assert rabbit.alive and reindeer.alive
    assert reindeer.power == 5.0
    assert world.last_encounter == 0.0


def test_pairs_out_of_collision_radius_do_not_interact(make_world, make_agent):
    reindeer = make_agent(0, R, 100.0, 100.0, 5.0)
    rabbit = make_agent(1, B, 112.0, 100.0, 1.0)
    world = make_world([reindeer, rabbit])

    process_agent_interactions(world)

    assert rabbit.alive


def test_drug_with_both_teams_is_consumed(make_world, make_agent):
    reindeer = make_agent(0, R, 210.0, 200.0, 2.0)
    rabbit = make_agent(1, B, 190.0, 200.0, 1.0)
    world = make_world([reindeer, rabbit])
    world._now = 1.5
    drug = world.add_drug(200.0, 200.0)
    assert drug is not None

    process_drug_interactions(world)

    assert world.drugs == []
    assert reindeer.power == approx(7.0)
    assert rabbit.power == approx(6.0)
    assert reindeer.truce_until == approx(world.now + 2.0)
    assert rabbit.truce_until == approx(world.now + 2.0)
    assert world.last_encounter == approx(1.5)
    assert any(event.kind.value == "boost" for event in world.captions.events)


def test_drug_consumption_wins_over_expiry(make_world, make_agent):
    reindeer = make_agent(0, R, 210.0, 200.0, 2.0)
    rabbit = make_agent(1, B, 190.0, 200.0, 1.0)
    world = make_world([reindeer, rabbit])
    drug = world.add_drug(200.0, 200.0)
    drug.created_at = -100.0

    process_drug_interactions(world)

    assert reindeer.alive and rabbit.alive
    assert reindeer.power == approx(7.0)
    assert world.drugs == []


def test_expired_drug_kills_unprotected_single_team(make_world, make_agent):
    exposed = make_agent(0, R, 210.0, 200.0, 2.0)
    shielded = make_agent(1, R, 190.0, 200.0, 2.0, protected=True)
    outside = make_agent(2, R, 400.0, 200.0, 2.0)
    world = make_world([exposed, shielded, outside, *_far_rabbits(make_agent)])
    drug = world.add_drug(200.0, 200.0)
    drug.created_at = -10.0

    process_drug_interactions(world)

    assert exposed.alive is False
    assert shielded.alive is True
    assert outside.alive is True
    assert world.drugs == []
    assert world.deaths[R] == 1


def test_fresh_drug_with_one_team_stays(make_world, make_agent):
    reindeer = make_agent(0, R, 210.0, 200.0, 2.0)
    world = make_world([reindeer, *_far_rabbits(make_agent)])
    world.add_drug(200.0, 200.0)

    process_drug_interactions(world)

    assert len(world.drugs) == 1
    assert reindeer.alive
    assert reindeer.power == 2.0


def test_duel_finalists_are_skipped_by_pair_resolution(make_world, make_agent):
    from incubator.sim.systems.endgame import FinalBattle

    reindeer = make_agent(0, R, 100.0, 100.0, 5.0)
    rabbit = make_agent(1, B, 105.0, 100.0, 1.0)
    world = make_world([reindeer, rabbit])
    world.final_battle = FinalBattle(reindeer=reindeer, rabbit=rabbit, started_at=0.0)

    process_agent_interactions(world)

    assert rabbit.alive
    assert reindeer.power == 5.0
