"""
Core model rocket flight components.

Rocket definition and catalogs, aerodynamic geometry, moment and fin
load models, and the flight integrator.
"""

from .parameters import RocketParameters, NoseShape, example_rocket, fin_correction
from .catalog import Motor, get_motor, parachute_diameter, MOTORS, PARACHUTES
from .geometry import (
    AerodynamicProfile,
    calculate_projected_area,
    calculate_volume,
    calculate_center_of_pressure,
    calculate_aerodynamic_center,
    calculate_stability_center_of_pressure,
    calculate_static_margin,
    calculate_fin_divergence_speed,
    calculate_fin_flutter_speed,
    compute_aerodynamic_profile
)
from .fin_deflection import FinDeflection, compute_fin_deflection, calculate_fin_deflection
from .moments import (
    MomentSet,
    lift_moment,
    drag_moment,
    wind_moment,
    fin_moment,
    thrust_moment,
    compute_moments
)
from .options import SimulationConfig
from .state import SimulationState, FlightSample, KeyPoint, ParachuteState
from .results import FlightResult
from .integrator import FlightSimulator, simulate_flight

__all__ = [
    'RocketParameters',
    'NoseShape',
    'example_rocket',
    'fin_correction',
    'Motor',
    'get_motor',
    'parachute_diameter',
    'MOTORS',
    'PARACHUTES',
    'AerodynamicProfile',
    'calculate_projected_area',
    'calculate_volume',
    'calculate_center_of_pressure',
    'calculate_aerodynamic_center',
    'calculate_stability_center_of_pressure',
    'calculate_static_margin',
    'calculate_fin_divergence_speed',
    'calculate_fin_flutter_speed',
    'compute_aerodynamic_profile',
    'FinDeflection',
    'compute_fin_deflection',
    'calculate_fin_deflection',
    'MomentSet',
    'lift_moment',
    'drag_moment',
    'wind_moment',
    'fin_moment',
    'thrust_moment',
    'compute_moments',
    'SimulationConfig',
    'SimulationState',
    'FlightSample',
    'KeyPoint',
    'ParachuteState',
    'FlightResult',
    'FlightSimulator',
    'simulate_flight'
]
