"""
Configuration System Tests

Tests for YAML rocket configuration loading and saving.
"""

import pytest
import yaml
import os
import sys

# Add repository root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from rocketsim.core.parameters import example_rocket
from rocketsim.core.options import SimulationConfig
from rocketsim.io.config import (
    RocketConfig,
    load_rocket_config,
    save_rocket_config,
    create_example_config,
)


class TestRocketConfig:
    """Test configuration parsing."""

    def test_example_config(self):
        config = RocketConfig(create_example_config())

        assert config.name == 'C6 Reference'
        assert config.rocket == example_rocket()
        assert config.launch_angle == 0.0
        assert config.wind_profile == 'uniform'
        assert config.simulation.physical_attitude_control is True

    def test_missing_sections_use_defaults(self):
        config = RocketConfig({})

        assert config.rocket == example_rocket()
        assert config.wind_speed == 0.0
        assert config.simulation == SimulationConfig()

    def test_camel_case_rocket_section(self):
        config = RocketConfig({'rocket': {'selectedMotor': 'B6-4', 'finCount': 3}})

        assert config.rocket.motor == 'B6-4'
        assert config.rocket.fin_count == 3

    @pytest.mark.parametrize("section,key,value", [
        ('rocket', 'motor', 'Q9-1'),
        ('rocket', 'parachute', '300'),
        ('rocket', 'fin_material', 'steel'),
        ('rocket', 'nose_shape', 'blunt'),
        ('launch', 'wind_profile', 'mountain'),
    ])
    def test_unknown_identifiers(self, section, key, value):
        data = create_example_config()
        data[section][key] = value

        with pytest.raises(ValueError):
            RocketConfig(data)

    def test_invalid_geometry_still_flies(self):
        data = create_example_config()
        data['rocket']['body_width'] = 0
        config = RocketConfig(data)
        result = config.run()

        assert config.rocket.validate()
        assert not result.profile.is_valid
        assert result.max_height > 0

    def test_zero_weight(self):
        data = create_example_config()
        data['rocket']['weight'] = 0

        with pytest.raises(ValueError):
            RocketConfig(data)

    def test_run(self):
        data = create_example_config()
        data['launch']['angle'] = 5.0
        result = RocketConfig(data).run()

        assert result.max_height > 0
        assert result.max_distance > 0


class TestConfigFiles:
    """Test YAML round trips."""

    def test_save_and_load(self, tmp_path):
        original = RocketConfig.from_parameters(
            example_rocket(fin_count=3), name='Three Fin', launch_angle=8.0,
            wind_speed=-2.5, wind_profile='suburban',
            simulation=SimulationConfig(enhanced_attitude_control=True))
        path = tmp_path / 'rocket.yaml'

        save_rocket_config(original, str(path))
        loaded = load_rocket_config(str(path))

        assert loaded.name == 'Three Fin'
        assert loaded.rocket == original.rocket
        assert loaded.launch_angle == 8.0
        assert loaded.wind_speed == -2.5
        assert loaded.wind_profile == 'suburban'
        assert loaded.simulation.enhanced_attitude_control is True

    def test_load_hand_written_file(self, tmp_path):
        path = tmp_path / 'custom.yaml'
        path.write_text(yaml.safe_dump({
            'rocket': {'name': 'Light', 'weight': 120.0, 'motor': 'A8-3'},
            'launch': {'angle': 2.0, 'wind_speed': 1.0, 'wind_profile': 'open'},
        }), encoding='utf-8')

        config = load_rocket_config(str(path))

        assert config.rocket.weight == 120.0
        assert config.rocket.motor == 'A8-3'
        assert config.wind_profile == 'open'

    def test_shipped_config(self):
        """The three-fin example in config/ parses cleanly."""
        path = os.path.join(os.path.dirname(__file__), '..', 'config', 'alpha_3fin.yaml')

        config = load_rocket_config(path)

        assert config.name == 'Alpha 3-Fin'
        assert config.rocket.fin_count == 3
        assert config.rocket.parachute == 'φ250'
        assert config.simulation.wind_angle_limitation is True
