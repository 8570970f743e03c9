#!/usr/bin/env python3
"""Render a PNG of the incubator after a number of simulated ticks."""
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import pygame  # noqa: E402

from incubator.config import SimulationConfig  # noqa: E402
from incubator.render.renderer import Renderer  # noqa: E402
from incubator.rng import DeterministicRng  # noqa: E402
from incubator.sim.core.world import World  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render an incubator frame to PNG.")
    parser.add_argument("--output", type=Path, default=Path("frame.png"), help="PNG file to write.")
    parser.add_argument("--ticks", type=int, default=300, help="Ticks to simulate before rendering.")
    parser.add_argument("--seed", type=int, default=1)
    parser.add_argument("--config", type=Path, default=None, help="YAML simulation config")
    parser.add_argument("--drugs", type=int, default=3, help="Drugs dropped at random arena points first.")
    parser.add_argument("--overwrite", action="store_true", help="Overwrite an existing file.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    output: Path = args.output
    if output.exists() and not args.overwrite:
        raise FileExistsError(f"{output} already exists. Use --overwrite to replace.")

    config = SimulationConfig.from_yaml(args.config) if args.config else SimulationConfig()
    config.seed = args.seed
    world = World(config)
    world.start()
    drop_rng = DeterministicRng(args.seed)
    for _ in range(args.drugs):
        world.add_drug(
            drop_rng.next_range(0.0, config.canvas_width),
            drop_rng.next_range(0.0, config.canvas_height),
        )
    for _ in range(args.ticks):
        world.step()

    pygame.init()
    try:
        surface = Renderer(config).render(world)
        output.parent.mkdir(parents=True, exist_ok=True)
        pygame.image.save(surface, str(output))
    finally:
        pygame.quit()

    print(f"Rendered tick {world.tick} to {output}")


if __name__ == "__main__":
    main()
