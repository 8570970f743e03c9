from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import List, Optional

import yaml


@dataclass
class TeamConfig:
    name: str = "Reindeer"
    color: tuple[int, int, int] = (107, 212, 192)
    max_speed: float = 120.0
    aggressiveness: float = 0.3
    kill_bonus: float = 0.6
    power_min: float = 1.5
    power_max: float = 4.0
    # Spawn band as fractions of the canvas width.
    spawn_left: float = 0.0
    spawn_width: float = 0.3
    spawn_offset: float = 50.0


def _default_teams() -> List[TeamConfig]:
    return [
        TeamConfig(),
        TeamConfig(
            name="Rabbit",
            color=(123, 91, 137),
            max_speed=180.0,
            aggressiveness=0.2,
            kill_bonus=0.5,
            power_min=1.0,
            power_max=3.0,
            spawn_left=0.7,
            spawn_offset=-50.0,
        ),
    ]


@dataclass
class DrugConfig:
    radius: float = 50.0
    ttl: float = 5.0
    attraction_radius: float = 500.0
    power_gain: float = 5.0
    truce_duration: float = 2.0
    boost_event_chance: float = 0.5


@dataclass
class CombatConfig:
    sense_radius: float = 100.0
    collision_radius: float = 12.0
    cross_team_power_gain: float = 3.0
    same_team_kill_epsilon: float = 1e-6
    boost_event_chance: float = 0.5
    heart_cooldown: float = 0.5


@dataclass
class WanderConfig:
    arrive_radius: float = 30.0
    retarget_seconds: float = 3.0
    min_distance: float = 150.0
    max_distance: float = 350.0
    edge_margin: float = 50.0
    speed_fraction: float = 0.6
    creep_fraction: float = 0.3
    initial_spread: float = 200.0
    fallback_spread: float = 300.0


@dataclass
class ArenaConfig:
    no_encounter_seconds: float = 5.0
    shrink_rate: float = 10.0
    min_size: float = 200.0


@dataclass
class DuelConfig:
    escape_band: float = 0.05
    mid_band: float = 0.25


@dataclass
class EffectConfig:
    darkening_lifetime: float = 0.5
    mist_lifetime: float = 2.0
    mist_growth_per_second: float = 100.0
    mist_max_radius: float = 60.0
    heart_lifetime: float = 1.5


@dataclass
class CaptionConfig:
    enabled: bool = True
    interval: float = 0.2
    event_expiry: float = 1.5
    lifetime: float = 2.5
    min_visible: int = 1
    max_visible: int = 4
    dedupe_radius: float = 80.0
    same_kill_grace: float = 5.0
    boost_cooldown: float = 1.0
    cross_kill_cooldown: float = 1.5
    idle_cooldown: float = 3.0
    same_kill_cooldown: float = 2.0
    placement_retries: int = 8
    placement_jitter: float = 40.0
    placement_lift: float = 30.0
    bubble_width: float = 150.0
    bubble_height: float = 26.0


@dataclass
class SimulationConfig:
    time_step: float = 1.0 / 60.0
    max_catch_up_steps: int = 5
    canvas_width: float = 1200.0
    canvas_height: float = 800.0
    agent_radius: float = 4.0
    agents_per_team: int = 200
    use_spatial_grid: bool = True
    grid_cell_size: float = 100.0
    seed: Optional[int] = None
    config_version: str = "v1"
    teams: List[TeamConfig] = field(default_factory=_default_teams)
    drug: DrugConfig = field(default_factory=DrugConfig)
    combat: CombatConfig = field(default_factory=CombatConfig)
    wander: WanderConfig = field(default_factory=WanderConfig)
    arena: ArenaConfig = field(default_factory=ArenaConfig)
    duel: DuelConfig = field(default_factory=DuelConfig)
    effects: EffectConfig = field(default_factory=EffectConfig)
    captions: CaptionConfig = field(default_factory=CaptionConfig)

    def __post_init__(self) -> None:
        if len(self.teams) != 2:
            raise ValueError(f"Exactly two teams are required, got {len(self.teams)}")
        if self.time_step <= 0:
            raise ValueError("time_step must be positive")
        if self.canvas_width <= 0 or self.canvas_height <= 0:
            raise ValueError("canvas dimensions must be positive")
        if not 0.0 <= self.duel.escape_band <= self.duel.mid_band:
            raise ValueError("duel bands must satisfy 0 <= escape_band <= mid_band")

    def team(self, team: int) -> TeamConfig:
        return self.teams[int(team)]

    @property
    def duel_speed(self) -> float:
        return max(team.max_speed for team in self.teams)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)


@dataclass
class AppConfig:
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    broadcast_interval: int = 2
    frame_rate: float = 60.0


def _color(value: object, default: tuple[int, int, int]) -> tuple[int, int, int]:
    if isinstance(value, (tuple, list)) and len(value) == 3:
        return (int(value[0]), int(value[1]), int(value[2]))
    return default


def _load_teams(raw_teams: list[dict] | None) -> List[TeamConfig]:
    teams = _default_teams()
    if not raw_teams:
        return teams
    if len(raw_teams) != 2:
        raise ValueError(f"Exactly two teams are required, got {len(raw_teams)}")
    loaded = []
    for default, raw in zip(teams, raw_teams):
        values = {k: v for k, v in raw.items() if k != "color"}
        team = replace(default, **values)
        team.color = _color(raw.get("color"), default.color)
        loaded.append(team)
    return loaded


_SECTIONS = {
    "drug": DrugConfig,
    "combat": CombatConfig,
    "wander": WanderConfig,
    "arena": ArenaConfig,
    "duel": DuelConfig,
    "effects": EffectConfig,
    "captions": CaptionConfig,
}


def load_config(raw: dict) -> SimulationConfig:
    sections = {name: cls(**(raw.get(name) or {})) for name, cls in _SECTIONS.items()}
    teams = _load_teams(raw.get("teams"))
    known = {f.name for f in fields(SimulationConfig)}
    sim_values = {k: v for k, v in raw.items() if k not in _SECTIONS and k != "teams"}
    unknown = set(sim_values) - known
    if unknown:
        raise TypeError(f"Unknown simulation config keys: {sorted(unknown)}")
    return SimulationConfig(teams=teams, **sections, **sim_values)


def load_app_config(raw: dict) -> AppConfig:
    simulation = load_config(raw.get("simulation") or {})
    values = {k: v for k, v in raw.items() if k != "simulation"}
    return AppConfig(simulation=simulation, **values)
