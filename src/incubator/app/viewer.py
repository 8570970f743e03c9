from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

import pygame

from ..config import SimulationConfig
from ..render.renderer import Renderer
from ..sim.core.world import World

logger = logging.getLogger(__name__)


def run_viewer(config: SimulationConfig, frame_rate: float = 60.0, max_frames: Optional[int] = None) -> World:
    """
    Desktop window: SPACE starts a run, R resets, left click drops a drug.

    The physics advances by real elapsed time through `World.advance`, so the
    frame rate only changes how often we draw.
    """

    pygame.init()
    pygame.display.set_caption("Incubator Observation")
    screen = pygame.display.set_mode((int(config.canvas_width), int(config.canvas_height)))
    clock = pygame.time.Clock()
    world = World(config)
    renderer = Renderer(config)

    frames = 0
    running = True
    try:
        while running:
            elapsed = clock.tick(frame_rate) / 1000.0

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_SPACE:
                        if not world.running or world.ended:
                            world.start()
                    elif event.key == pygame.K_r:
                        world.reset()
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    world.add_drug(float(event.pos[0]), float(event.pos[1]))

            world.advance(elapsed)
            renderer.draw(world, screen)
            pygame.display.flip()

            frames += 1
            if max_frames is not None and frames >= max_frames:
                running = False
    finally:
        pygame.quit()
    return world


def main() -> None:
    parser = argparse.ArgumentParser(description="Incubator observation desktop viewer")
    parser.add_argument("--config", type=Path, default=None, help="YAML simulation config")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--fps", type=float, default=60.0)
    parser.add_argument("--log-level", default="INFO", help="Python logging level")
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config = SimulationConfig.from_yaml(args.config) if args.config else SimulationConfig()
    if args.seed is not None:
        config.seed = args.seed
    run_viewer(config, frame_rate=args.fps)


if __name__ == "__main__":
    main()
