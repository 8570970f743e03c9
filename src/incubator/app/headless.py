from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from pathlib import Path
from typing import Optional

from ..config import SimulationConfig
from ..rng import DeterministicRng
from ..sim.core.world import World

logger = logging.getLogger(__name__)


_HEADER = [
    "tick",
    "sim_time",
    "phase",
    "reindeer",
    "rabbits",
    "reindeer_deaths",
    "rabbit_deaths",
    "reindeer_escapes",
    "rabbit_escapes",
    "reindeer_avg_power",
    "rabbit_avg_power",
    "drugs",
    "arena_width",
    "arena_height",
    "captions",
    "tick_ms",
]


def _format_row(metrics: object, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        f"{metrics.sim_time:.4f}",
        metrics.phase,
        metrics.reindeer,
        metrics.rabbits,
        metrics.reindeer_deaths,
        metrics.rabbit_deaths,
        metrics.reindeer_escapes,
        metrics.rabbit_escapes,
        f"{metrics.reindeer_avg_power:.4f}",
        f"{metrics.rabbit_avg_power:.4f}",
        metrics.drugs,
        f"{metrics.arena_width:.2f}",
        f"{metrics.arena_height:.2f}",
        metrics.captions,
        f"{tick_ms:.3f}",
    ]


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0, "p99": 0.0}
    sorted_values = sorted(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / len(values)),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
        "p99": _percentile(sorted_values, 0.99),
    }


def _drop_scripted_drug(world: World, rng: DeterministicRng) -> None:
    bounds = world.arena
    x = rng.next_range(bounds.left, bounds.right)
    y = rng.next_range(bounds.top, bounds.bottom)
    world.add_drug(x, y)


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    summary_path: Optional[Path] = None,
    drug_interval: int = 0,
    config: Optional[SimulationConfig] = None,
    stop_on_end: bool = True,
) -> World:
    """
    Run the simulation without a display.

    `drug_interval` > 0 drops a drug at a random point inside the arena every
    that many ticks, using its own RNG stream so the world's stream is untouched.
    """

    config = config if config is not None else SimulationConfig()
    if seed is not None:
        config.seed = seed
    world = World(config)
    world.start()
    drop_rng = DeterministicRng(None if config.seed is None else config.seed + 1)

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_HEADER)

    tick_ms_series: list[float] = []
    peak_population = (-1, -1)
    ticks_run = 0

    try:
        for tick in range(steps):
            if drug_interval > 0 and tick % drug_interval == 0:
                _drop_scripted_drug(world, drop_rng)
            metrics = world.step()
            ticks_run += 1
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
            tick_ms_series.append(tick_ms)
            if metrics.population > peak_population[0]:
                peak_population = (metrics.population, metrics.tick)
            if writer:
                writer.writerow(_format_row(metrics, tick_ms))
            if stop_on_end and world.ended:
                break
    finally:
        if csv_file:
            csv_file.close()

    outcome = world.outcome
    logger.info(
        "Headless run finished after %d ticks: %s",
        ticks_run,
        outcome.label if outcome is not None else "no outcome",
    )

    if summary_path:
        summary = {
            "steps": steps,
            "ticks_run": ticks_run,
            "seed": config.seed,
            "deterministic_log": deterministic_log,
            "drug_interval": drug_interval,
            "outcome": outcome.value if outcome is not None else None,
            "outcome_label": outcome.label if outcome is not None else None,
            "ended_at": world.ended_at,
            "survivors": {
                "reindeer": len(world.living(0)),
                "rabbits": len(world.living(1)),
            },
            "deaths": {team.name.lower(): count for team, count in world.deaths.items()},
            "escapes": {team.name.lower(): count for team, count in world.escapes.items()},
            "tick_ms": _summary_stats(tick_ms_series),
            "peaks": {
                "population": {"value": peak_population[0], "tick": peak_population[1]},
            },
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))

    return world


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless incubator simulation")
    parser.add_argument("--steps", type=int, default=3600)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML simulation config")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write metrics")
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats for the run.",
    )
    parser.add_argument(
        "--drug-interval",
        type=int,
        default=0,
        help="Drop a drug at a random arena point every N ticks (0 disables).",
    )
    parser.add_argument(
        "--keep-running",
        action="store_true",
        help="Keep ticking after the simulation has reached an outcome.",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="INFO", help="Python logging level")
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config = SimulationConfig.from_yaml(args.config) if args.config else None
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        summary_path=args.summary,
        drug_interval=args.drug_interval,
        config=config,
        stop_on_end=not args.keep_running,
    )


if __name__ == "__main__":
    main()
