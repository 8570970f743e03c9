import os
import subprocess
import sys
from pathlib import Path

SCRIPT = """
import incubator.headless
from incubator.config import SimulationConfig
from incubator.sim.core.world import World

world = World(SimulationConfig(seed=2, agents_per_team=3))
world.start()
world.step()
alive = sum(1 for agent in world.agents if agent.alive)
print(world.tick, alive + sum(world.deaths.values()) + sum(world.escapes.values()))
print(incubator.headless.__file__)
"""


def test_repo_imports_and_steps_without_editable_install():
    repo_root = Path(__file__).resolve().parents[2]
    env = os.environ.copy()
    env.pop("PYTHONPATH", None)
    env.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
    env.setdefault("SDL_VIDEODRIVER", "dummy")

    proc = subprocess.run(
        [sys.executable, "-c", SCRIPT],
        cwd=repo_root,
        env=env,
        capture_output=True,
        text=True,
    )

    assert proc.returncode == 0, proc.stderr

    lines = proc.stdout.strip().splitlines()
    assert len(lines) >= 2, proc.stdout
    assert lines[-2] == "1 6"

    output_path = Path(lines[-1]).resolve()
    expected_path = (repo_root / "src" / "incubator" / "headless.py").resolve()
    assert output_path.samefile(expected_path)
