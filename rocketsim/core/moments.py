"""
Pitching moments about the center of gravity.

Provides lift, drag, wind, fin and thrust moments for the planar
flight model. Every moment follows the same sign rule: with P the
application point and a the driving angle (angle of attack, or wind
speed for the wind moment), the moment is negative when
(P >= CG and a < 0) or (P < CG and a >= 0), positive otherwise.
Nonzero moments smaller than 1e-5 N·m are raised to 1e-5 so the
attitude integrator never stalls at tiny angles.

Functions return None when the result is not a finite number; the
caller decides how to fall back.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional

try:
    from .parameters import RocketParameters
    from .catalog import AIR_DENSITY, GRAVITY
except ImportError:
    from parameters import RocketParameters
    from catalog import AIR_DENSITY, GRAVITY


MIN_MOMENT = 1e-5                   # N·m
MAX_VELOCITY_SQUARED = 10000.0      # (m/s)², i.e. 100 m/s
MAX_WIND_SPEED = 25.0               # m/s

LIFT_SLOPE = 0.6
STALL_ANGLE = 0.5                   # rad
STALL_AMPLIFICATION = 1.2

# Fin lean drag slope: Cd 0.3 at 5 degrees
FIN_LEAN_CD_SLOPE = 0.3 / (5 * 3.14 / 180)

WIND_FIN_COEFFICIENT = 0.05
WIND_BODY_CD = 0.23


def angle_of_attack(omega: float, flight_angle: float) -> float:
    """
    Incidence between body axis and velocity (rad).

    The difference omega - flight_angle is wrapped to (-pi, pi] and
    folded into [-pi/2, pi/2]: moving tail-first along the body axis is
    zero incidence, like moving nose-first.

    The fold departs from a plain wrap, which leaves tail-first flight at
    pi. Together with the cross-flow drag term it gives zero drag torque
    at alpha = 0, where a Cd(alpha)·q·A·arm drag moment would not vanish.
    """
    alpha = omega - flight_angle
    if abs(alpha) > np.pi:
        alpha = (alpha + np.pi) % (2 * np.pi) - np.pi

    if alpha > np.pi / 2:
        alpha -= np.pi
    elif alpha < -np.pi / 2:
        alpha += np.pi
    return float(alpha)


def _dynamic_pressure(velocity: float) -> float:
    return 0.5 * AIR_DENSITY * min(velocity * velocity, MAX_VELOCITY_SQUARED)


def _finish(magnitude: float, application_point: float, center_of_gravity: float,
            driving_angle: float) -> Optional[float]:
    """Apply the sign rule and the minimum-magnitude floor."""
    if not np.isfinite(magnitude):
        return None

    if ((application_point >= center_of_gravity and driving_angle < 0) or
            (application_point < center_of_gravity and driving_angle >= 0)):
        moment = -magnitude
    else:
        moment = magnitude

    if 0 < abs(moment) < MIN_MOMENT:
        moment = np.sign(moment) * MIN_MOMENT
    return float(moment)


def lift_moment(velocity: float, omega: float, flight_angle: float, side_area: float,
                aerodynamic_center: float, center_of_gravity: float) -> Optional[float]:
    """
    Lift moment (N·m).

    Parameters
    ----------
    velocity : float
        Airspeed (m/s)
    omega : float
        Attitude angle from vertical (rad)
    flight_angle : float
        Velocity direction from vertical (rad)
    side_area : float
        Side projected area (m²)
    aerodynamic_center, center_of_gravity : float
        Positions from nose tip (mm)
    """
    alpha = angle_of_attack(omega, flight_angle)
    lift_coefficient = LIFT_SLOPE * alpha
    magnitude = abs(lift_coefficient * _dynamic_pressure(velocity) * side_area
                    * (aerodynamic_center - center_of_gravity) * 0.001)

    moment = _finish(magnitude, aerodynamic_center, center_of_gravity, alpha)
    if moment is not None and abs(alpha) > STALL_ANGLE:
        moment *= STALL_AMPLIFICATION
    return moment


def drag_coefficient(alpha: float) -> float:
    """Body drag coefficient versus angle of attack."""
    return 0.01 * alpha ** 2 - 0.02 * alpha + 0.63


def drag_moment(velocity: float, omega: float, flight_angle: float, frontal_area: float,
                aerodynamic_center: float, center_of_gravity: float) -> Optional[float]:
    """
    Drag moment (N·m) from the cross-flow component of body drag.

    Uses Cd(alpha)·sin(alpha)·q·A·arm instead of the full axial
    Cd(alpha)·q·A·arm, so the torque is zero at alpha = 0.
    """
    alpha = angle_of_attack(omega, flight_angle)
    cross_flow = drag_coefficient(alpha) * np.sin(alpha)
    magnitude = abs(cross_flow * _dynamic_pressure(velocity) * frontal_area
                    * (aerodynamic_center - center_of_gravity) * 0.001)
    return _finish(magnitude, aerodynamic_center, center_of_gravity, alpha)


def wind_moment(wind_speed: float, omega: float, total_fin_area: float,
                body_diameter: float, total_length: float,
                center_of_pressure: float, center_of_gravity: float) -> Optional[float]:
    """
    Crosswind moment (N·m).

    Fin and body crosswind forces use separate empirical coefficients
    and are projected by cos(omega).

    Parameters
    ----------
    wind_speed : float
        Effective wind speed (m/s, signed), clamped to ±25
    omega : float
        Attitude angle (rad)
    total_fin_area : float
        Side-view fin area (m²)
    body_diameter, total_length : float
        Body dimensions (mm)
    center_of_pressure, center_of_gravity : float
        Positions from nose tip (mm)
    """
    wind = float(np.clip(wind_speed, -MAX_WIND_SPEED, MAX_WIND_SPEED))

    fin_force = GRAVITY * WIND_FIN_COEFFICIENT * wind ** 2 * total_fin_area
    body_force = (WIND_BODY_CD * 0.5 * AIR_DENSITY * wind ** 2
                  * body_diameter * total_length / 1e6)

    magnitude = abs((fin_force + body_force) * np.cos(omega)
                    * (center_of_pressure - center_of_gravity) * 0.001)
    return _finish(magnitude, center_of_pressure, center_of_gravity, wind_speed)


def fin_moment(velocity: float, omega: float, flight_angle: float,
               params: RocketParameters, fin_cp: float,
               center_of_gravity: float) -> Optional[float]:
    """
    Fin lean moment (N·m).

    Drag on the fin planform exposed by the angle of attack, with a drag
    coefficient proportional to that angle.
    """
    alpha = angle_of_attack(omega, flight_angle)
    side_factor = params.fin_geometry.side_factor

    lean_area = (params.fin_height * 0.001 * side_factor
                 * params.fin_base_width * 0.001 * np.sin(alpha))
    total_lean_area = lean_area * 2

    lean_drag = FIN_LEAN_CD_SLOPE * alpha * _dynamic_pressure(velocity) * total_lean_area
    moment_arm = abs(fin_cp - center_of_gravity) * 0.001

    magnitude = abs(lean_drag * moment_arm)
    return _finish(magnitude, fin_cp, center_of_gravity, alpha)


def thrust_moment(thrust: float, omega: float, flight_angle: float,
                  thrust_position: float, center_of_gravity: float) -> Optional[float]:
    """Moment of the thrust component normal to the flight path (N·m)."""
    alpha = angle_of_attack(omega, flight_angle)
    magnitude = abs(thrust * np.sin(alpha) * np.cos(alpha)
                    * (thrust_position - center_of_gravity) * 0.001)
    return _finish(magnitude, thrust_position, center_of_gravity, alpha)


@dataclass(frozen=True)
class MomentSet:
    """Moments acting during one step (N·m). None marks a failed term."""
    lift: Optional[float]
    drag: Optional[float]
    wind: Optional[float]
    fin: Optional[float]
    thrust: Optional[float] = 0.0

    @property
    def is_valid(self) -> bool:
        return None not in (self.lift, self.drag, self.wind, self.fin, self.thrust)

    def total(self) -> Optional[float]:
        """Sum of all terms, or None if any term failed."""
        if not self.is_valid:
            return None
        return self.lift + self.drag + self.wind + self.fin + self.thrust


def compute_moments(velocity: float, omega: float, flight_angle: float, wind_speed: float,
                    params: RocketParameters, profile, thrust: Optional[float] = None) -> MomentSet:
    """
    Evaluate every moment for the current step.

    Parameters
    ----------
    velocity : float
        Airspeed (m/s)
    omega : float
        Attitude angle (rad)
    flight_angle : float
        Velocity direction (rad)
    wind_speed : float
        Effective wind speed (m/s)
    params : RocketParameters
        Rocket definition
    profile : AerodynamicProfile
        Precomputed aerodynamic profile
    thrust : float, optional
        Current thrust (N). None omits the thrust moment.
    """
    cg = params.center_of_gravity

    return MomentSet(
        lift=lift_moment(velocity, omega, flight_angle, profile.side_area,
                         profile.aerodynamic_center, cg),
        drag=drag_moment(velocity, omega, flight_angle, profile.frontal_area,
                         profile.aerodynamic_center, cg),
        wind=wind_moment(wind_speed, omega, profile.total_fin_area,
                         params.body_width, params.total_length,
                         profile.center_of_pressure, cg),
        fin=fin_moment(velocity, omega, flight_angle, params, profile.fin_cp, cg),
        thrust=(0.0 if thrust is None else
                thrust_moment(thrust, omega, flight_angle, params.total_length, cg)),
    )
