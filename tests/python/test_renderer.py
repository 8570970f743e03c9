from __future__ import annotations

import pygame
import pytest

from incubator.render.renderer import BG_COLOR, PROTECTED_COLOR, Renderer
from incubator.sim.core.agent import Team


@pytest.fixture(autouse=True)
def _pygame():
    pygame.init()
    yield
    pygame.quit()


def _colors_near(surface, x, y, reach=10):
    found = set()
    for dx in range(-reach, reach + 1):
        for dy in range(-reach, reach + 1):
            found.add(tuple(surface.get_at((x + dx, y + dy)))[:3])
    return found


def test_empty_world_renders_background(make_world):
    world = make_world([], start=False)
    surface = Renderer(world.config).render(world)

    assert surface.get_size() == (1200, 800)
    assert tuple(surface.get_at((600, 400)))[:3] == BG_COLOR


def test_agents_use_team_colours_and_protected_ring(make_world, make_agent):
    reindeer = make_agent(0, Team.REINDEER, 300.0, 300.0, 2.0, protected=True)
    rabbit = make_agent(1, Team.RABBIT, 900.0, 500.0, 2.0)
    world = make_world([reindeer, rabbit])
    surface = Renderer(world.config).render(world)

    assert tuple(surface.get_at((300, 300)))[:3] == world.config.team(Team.REINDEER).color
    assert tuple(surface.get_at((900, 500)))[:3] == world.config.team(Team.RABBIT).color
    assert PROTECTED_COLOR in _colors_near(surface, 300, 300)
    assert PROTECTED_COLOR not in _colors_near(surface, 900, 500)


def test_drug_draws_a_disc(make_world, make_agent):
    world = make_world([make_agent(0, Team.REINDEER, 100.0, 700.0, 2.0)])
    world.add_drug(600.0, 400.0)
    surface = Renderer(world.config).render(world)

    assert tuple(surface.get_at((600, 400)))[:3] != BG_COLOR


def test_ending_overlay_darkens_the_frame(make_world, make_agent):
    world = make_world([make_agent(0, Team.RABBIT, 100.0, 100.0, 2.0)])
    world.step()
    assert world.ended

    surface = Renderer(world.config).render(world)

    r, g, b = tuple(surface.get_at((1100, 700)))[:3]
    assert r < BG_COLOR[0] and g < BG_COLOR[1] and b < BG_COLOR[2]
