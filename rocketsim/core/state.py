"""
Planar flight state for model rocket simulation.

State includes:
- Position (x horizontal, y vertical) in meters
- Velocity (vx, vy) and the previous step's velocity
- Attitude angle omega from vertical and its rates
- Torque accumulator for the coarse attitude update
- Parachute state and deployment progress
- Recent attitude changes for the stability check

Angles are radians, positive toward +x.
"""

import numpy as np
from dataclasses import dataclass, replace
from enum import Enum
from typing import Tuple

from archimedes import struct


class ParachuteState(str, Enum):
    """Recovery system state."""
    NOT_DEPLOYED = 'not_deployed'
    DEPLOYING = 'deploying'
    DEPLOYED = 'deployed'


@struct(frozen=True)
class SimulationState:
    """
    Mutable-by-replacement simulation state.

    Owned by one simulation run. Step functions take a state and return
    a new one via ``evolve``; nothing is modified in place.
    """

    # Time
    time: float = 0.0
    step_index: int = 0

    # Position (m)
    x: float = 0.0
    y: float = 0.0

    # Velocity (m/s)
    vx: float = 0.0
    vy: float = 0.0
    prev_vx: float = 0.0
    prev_vy: float = 0.0

    # Attitude (rad, rad/s, rad/s²)
    omega: float = 0.0
    angular_velocity: float = 0.0
    angular_acceleration: float = 0.0

    # Coarse attitude update bookkeeping
    accumulated_torque: float = 0.0
    steps_since_update: int = 0
    angle_change_per_update: float = 0.0  # rad per response interval

    # Recovery
    parachute: ParachuteState = ParachuteState.NOT_DEPLOYED
    deployment_progress: float = 0.0

    # Loads
    fin_deflection: float = 0.0

    # Stability tracking
    prev_omega: float = 0.0
    angle_changes: Tuple[float, ...] = ()  # deg per step, most recent last
    thrust_ended: bool = False
    is_angle_stable: bool = True
    max_angle_change: float = 0.0  # deg per response interval

    @classmethod
    def initial(cls, launch_angle_deg: float) -> 'SimulationState':
        """State at ignition for a launch angle in degrees."""
        omega = float(np.radians(launch_angle_deg))
        return cls(omega=omega, prev_omega=omega)

    def evolve(self, **changes) -> 'SimulationState':
        """Return a copy with some fields changed."""
        return replace(self, **changes)

    @property
    def speed(self) -> float:
        """Speed magnitude (m/s)."""
        return float(np.hypot(self.vx, self.vy))

    @property
    def distance_from_origin(self) -> float:
        """Straight-line distance from the launch point (m)."""
        return float(np.hypot(self.x, self.y))

    @property
    def is_parachute_ejected(self) -> bool:
        return self.parachute is not ParachuteState.NOT_DEPLOYED

    @property
    def is_parachute_active(self) -> bool:
        return self.parachute is ParachuteState.DEPLOYED

    @property
    def window_angle_change(self) -> float:
        """Summed attitude change over the recent window (deg)."""
        return float(sum(self.angle_changes))

    @property
    def omega_degrees(self) -> float:
        return float(np.degrees(self.omega))


@dataclass(frozen=True)
class KeyPoint:
    """Flight event snapshot. ``speed`` is the vertical velocity (m/s)."""
    time: float = 0.0
    height: float = 0.0
    speed: float = 0.0


@dataclass(frozen=True)
class FlightSample:
    """
    One recorded integration step.

    Units: s, m, m/s, m/s², rad (omega), deg (omega_degrees and angle
    changes), N·m, mm (fin deflection).
    """
    time: float
    x: float
    y: float
    vx: float
    vy: float
    ax: float
    ay: float
    speed: float
    acceleration: float
    angular_velocity: float
    angular_acceleration: float
    is_parachute_ejected: bool
    is_parachute_active: bool
    parachute_deployment_progress: float
    omega: float
    omega_degrees: float
    torque: float
    angle_change_per_interval: float
    horizontal_distance: float
    fin_deflection: float
    angle_deviation_degrees: float
    effective_wind_speed: float
    is_thrust_active: bool

    @property
    def height(self) -> float:
        return self.y
