import os
import sys
from pathlib import Path

import pytest

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

ROOT = Path(__file__).resolve().parents[2]
src_root = ROOT / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

from pygame.math import Vector2  # noqa: E402

from incubator.config import SimulationConfig  # noqa: E402
from incubator.sim.core.agent import Agent, Team  # noqa: E402
from incubator.sim.core.world import World  # noqa: E402


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-config-tests",
        action="store_true",
        default=False,
        help="run tests that are intended only for configuration changes",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "config_change: marks tests that should only run when configuration files change",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-config-tests"):
        return

    skip_marker = pytest.mark.skip(
        reason="Run only when configuration is modified (use --run-config-tests)",
    )

    for item in items:
        if "config_change" in item.keywords:
            item.add_marker(skip_marker)


@pytest.fixture
def make_agent():
    """Build a hand-placed agent; ids are chosen by the test."""

    def _make(agent_id: int, team: Team, x: float, y: float, power: float, **kwargs) -> Agent:
        return Agent(id=agent_id, team=team, position=Vector2(x, y), power=power, **kwargs)

    return _make


@pytest.fixture
def make_world():
    """Started world with an empty population plus the given agents."""

    def _make(agents=(), seed: int = 1, start: bool = True, **overrides) -> World:
        config = SimulationConfig(seed=seed, agents_per_team=0, **overrides)
        world = World(config)
        if start:
            world.start()
        world.agents.extend(agents)
        return world

    return _make
