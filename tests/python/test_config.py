from __future__ import annotations

from pathlib import Path

import pytest
from pytest import approx

from incubator.config import SimulationConfig, load_app_config, load_config

CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "default.yaml"


def test_defaults_describe_the_asymmetric_teams():
    config = SimulationConfig()
    reindeer, rabbit = config.teams

    assert reindeer.max_speed < rabbit.max_speed
    assert (reindeer.power_min + reindeer.power_max) > (rabbit.power_min + rabbit.power_max)
    assert config.duel_speed == approx(rabbit.max_speed)


def test_load_config_overrides_nested_sections():
    config = load_config(
        {
            "seed": 9,
            "agents_per_team": 12,
            "drug": {"ttl": 3.0},
            "teams": [{"aggressiveness": 0.4, "color": [1, 2, 3]}, {"max_speed": 200}],
        }
    )

    assert config.seed == 9
    assert config.agents_per_team == 12
    assert config.drug.ttl == approx(3.0)
    assert config.drug.radius == approx(50.0)
    assert config.teams[0].aggressiveness == approx(0.4)
    assert config.teams[0].color == (1, 2, 3)
    assert config.teams[1].max_speed == approx(200.0)
    assert config.teams[1].name == "Rabbit"


def test_unknown_keys_are_rejected():
    with pytest.raises(TypeError):
        load_config({"warp_speed": 3})
    with pytest.raises(TypeError):
        load_config({"drug": {"flavour": "mint"}})


def test_invalid_values_are_rejected():
    with pytest.raises(ValueError):
        load_config({"duel": {"escape_band": 0.5, "mid_band": 0.25}})
    with pytest.raises(ValueError):
        load_config({"time_step": 0})
    with pytest.raises(ValueError):
        load_config({"teams": [{}]})


def test_app_config_wraps_simulation():
    app = load_app_config({"broadcast_interval": 3, "simulation": {"seed": 4}})

    assert app.broadcast_interval == 3
    assert app.simulation.seed == 4


@pytest.mark.config_change
def test_default_yaml_matches_dataclass_defaults():
    from_file = SimulationConfig.from_yaml(CONFIG_PATH)
    defaults = SimulationConfig()

    assert from_file.time_step == approx(defaults.time_step, rel=1e-4)
    assert from_file.teams == defaults.teams
    assert from_file.drug == defaults.drug
    assert from_file.combat == defaults.combat
    assert from_file.arena == defaults.arena
    assert from_file.duel == defaults.duel
    assert from_file.captions == defaults.captions
