"""
Rocket Configuration System

Provides YAML-based configuration loading for rocket definitions,
launch conditions and simulation options.
"""

import logging
import yaml
from typing import Dict, Any, Optional

from rocketsim.core.catalog import get_motor, get_fin_material, get_nose_profile, parachute_diameter
from rocketsim.core.integrator import FlightSimulator, check_flight_mass
from rocketsim.core.options import SimulationConfig
from rocketsim.core.parameters import RocketParameters
from rocketsim.core.results import FlightResult
from rocketsim.environment.wind import get_wind_profile

logger = logging.getLogger(__name__)


class RocketConfig:
    """
    Rocket configuration loaded from YAML file.

    Sections:
    - rocket: geometry, mass, CG and hardware selection (snake_case or
      the front-end camelCase names); unset fields take the reference
      rocket's values
    - launch: angle (deg), wind_speed (m/s), wind_profile
    - simulation: SimulationConfig switches

    Attributes
    ----------
    name : str
        Rocket name
    rocket : RocketParameters
        Rocket definition
    launch_angle : float
        Launch angle from vertical (deg)
    wind_speed : float
        Base wind speed (m/s)
    wind_profile : str
        Wind profile name
    simulation : SimulationConfig
        Simulation options

    Raises
    ------
    ValueError
        If the weight is not a positive number or an identifier (nose
        shape, fin material, motor, parachute, wind profile) is unknown.
        Invalid geometry is logged and flown with no aerodynamic torque.
    """

    def __init__(self, config_dict: Dict[str, Any]):
        """
        Initialize rocket configuration from dictionary.

        Parameters
        ----------
        config_dict : dict
            Configuration dictionary (typically from YAML)
        """
        self.raw_config = config_dict or {}
        self._parse_config()

    def _parse_config(self):
        """Parse and check configuration dictionary."""
        rocket = dict(self.raw_config.get('rocket') or {})
        launch = self.raw_config.get('launch') or {}

        self.name = rocket.pop('name', 'Unnamed Rocket')

        merged = RocketParameters().to_dict()
        merged.update(rocket)
        self.rocket = RocketParameters.from_dict(merged)

        check_flight_mass(self.rocket)
        errors = self.rocket.validate()
        if errors:
            logger.warning("Rocket '%s' has invalid geometry: %s", self.name, "; ".join(errors))

        # Catalog lookups raise ValueError on unknown identifiers
        get_nose_profile(self.rocket.nose_shape)
        get_motor(self.rocket.motor)
        get_fin_material(self.rocket.fin_material)
        parachute_diameter(self.rocket.parachute)

        self.launch_angle = float(launch.get('angle', 0.0))
        self.wind_speed = float(launch.get('wind_speed', 0.0))
        self.wind_profile = launch.get('wind_profile', 'uniform')
        get_wind_profile(self.wind_profile)

        self.simulation = SimulationConfig.from_dict(self.raw_config.get('simulation'))

    @classmethod
    def from_parameters(cls, rocket: RocketParameters, name: str = 'Unnamed Rocket',
                        launch_angle: float = 0.0, wind_speed: float = 0.0,
                        wind_profile: str = 'uniform',
                        simulation: Optional[SimulationConfig] = None) -> 'RocketConfig':
        """Build a configuration from already constructed objects."""
        rocket_section = {'name': name}
        rocket_section.update(rocket.to_dict())
        simulation_section = {key: value
                              for key, value in (simulation or SimulationConfig()).to_dict().items()
                              if value is not None}
        return cls({
            'rocket': rocket_section,
            'launch': {
                'angle': launch_angle,
                'wind_speed': wind_speed,
                'wind_profile': wind_profile,
            },
            'simulation': simulation_section,
        })

    def create_simulator(self) -> FlightSimulator:
        """
        Create a FlightSimulator from configuration.

        Returns
        -------
        FlightSimulator
            Simulator for the configured rocket and options
        """
        return FlightSimulator(self.rocket, self.simulation)

    def run(self) -> FlightResult:
        """Simulate the configured launch."""
        logger.info("Simulating '%s' at %.1f deg, wind %.1f m/s (%s)", self.name,
                    self.launch_angle, self.wind_speed, self.wind_profile)
        return self.create_simulator().run(self.launch_angle, self.wind_speed, self.wind_profile)

    def to_dict(self) -> Dict[str, Any]:
        """Normalized configuration dictionary (snake_case keys)."""
        rocket_section = {'name': self.name}
        rocket_section.update(self.rocket.to_dict())
        return {
            'rocket': rocket_section,
            'launch': {
                'angle': self.launch_angle,
                'wind_speed': self.wind_speed,
                'wind_profile': self.wind_profile,
            },
            'simulation': {key: value for key, value in self.simulation.to_dict().items()
                           if value is not None},
        }

    def __repr__(self):
        """String representation."""
        return (f"RocketConfig(name='{self.name}', "
                f"motor='{self.rocket.motor}', "
                f"weight={self.rocket.weight}, "
                f"launch_angle={self.launch_angle})")


def load_rocket_config(yaml_file: str) -> RocketConfig:
    """
    Load rocket configuration from YAML file.

    Parameters
    ----------
    yaml_file : str
        Path to YAML configuration file

    Returns
    -------
    RocketConfig
        Loaded rocket configuration

    Examples
    --------
    >>> config = load_rocket_config('config/alpha_3fin.yaml')
    >>> result = config.run()
    """
    with open(yaml_file, 'r', encoding='utf-8') as f:
        config_dict = yaml.safe_load(f)

    return RocketConfig(config_dict)


def save_rocket_config(config: RocketConfig, yaml_file: str):
    """
    Save rocket configuration to YAML file.

    Parameters
    ----------
    config : RocketConfig
        Rocket configuration to save
    yaml_file : str
        Output YAML file path
    """
    with open(yaml_file, 'w', encoding='utf-8') as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False,
                       allow_unicode=True)

    logger.info("Configuration saved to: %s", yaml_file)


def create_example_config() -> Dict[str, Any]:
    """
    Create example rocket configuration dictionary.

    Returns
    -------
    dict
        Example configuration
    """
    config = {
        'rocket': {
            'name': 'C6 Reference',
            'nose_shape': 'cone',
            'nose_height': 100.0,       # mm
            'body_height': 400.0,       # mm
            'body_width': 40.0,         # mm
            'fin_height': 60.0,         # mm
            'fin_base_width': 80.0,     # mm
            'fin_tip_width': 40.0,      # mm
            'fin_sweep_length': 20.0,   # mm
            'fin_thickness': 2.0,       # mm
            'fin_material': 'balsa',
            'fin_count': 4,
            'motor': 'C6-5',
            'parachute': 'φ300',
            'weight': 200.0,            # g
            'center_of_gravity': 250.0  # mm from nose tip
        },
        'launch': {
            'angle': 0.0,               # deg from vertical
            'wind_speed': 0.0,          # m/s at 1.5 m
            'wind_profile': 'uniform'
        },
        'simulation': {
            'physical_attitude_control': True,
            'enhanced_attitude_control': False,
            'wind_angle_limitation': False,
            'stability_threshold_deg': 10.0
        }
    }

    return config


def test_config():
    """Test configuration system."""
    print("=" * 60)
    print("Configuration System Test")
    print("=" * 60)
    print()

    config = RocketConfig(create_example_config())

    print(f"Rocket: {config.name}")
    print(f"Motor: {config.rocket.motor}")
    print(f"Weight: {config.rocket.weight} g")
    print()

    result = config.run()
    print(f"Max height: {result.max_height:.1f} m")
    print(f"Stable: {result.is_angle_stable_ok}")
    print()


if __name__ == "__main__":
    test_config()
