"""
Flight phases and per-phase force models.

Phases:
- RAIL: on the launch rail, attitude fixed
- POWERED: free flight with thrust
- COAST: free flight after burnout, before parachute ejection
- PARACHUTE_DEPLOYING: ejection until fully open (1 s)
- PARACHUTE_DEPLOYED: descent under canopy

Forces are resolved in the launch plane (x horizontal, y up). The body
drag acts along the body axis; crosswind drag acts horizontally.
"""

import logging
import numpy as np
from dataclasses import dataclass
from enum import Enum
from typing import Optional

try:
    from .parameters import RocketParameters, mm_to_m, g_to_kg
    from .catalog import (AIR_DENSITY, GRAVITY, LAUNCH_RAIL_LENGTH, THRUST_SAMPLE_DT,
                          Motor, FinMaterial, get_motor, get_fin_material,
                          get_nose_profile, parachute_diameter)
    from .geometry import AerodynamicProfile, compute_aerodynamic_profile
    from .moments import compute_moments
    from .state import SimulationState, ParachuteState, KeyPoint
except ImportError:
    from parameters import RocketParameters, mm_to_m, g_to_kg
    from catalog import (AIR_DENSITY, GRAVITY, LAUNCH_RAIL_LENGTH, THRUST_SAMPLE_DT,
                         Motor, FinMaterial, get_motor, get_fin_material,
                         get_nose_profile, parachute_diameter)
    from geometry import AerodynamicProfile, compute_aerodynamic_profile
    from moments import compute_moments
    from state import SimulationState, ParachuteState, KeyPoint

logger = logging.getLogger(__name__)

PARACHUTE_DEPLOY_TIME = 1.0         # s
EVENT_TIME_TOLERANCE = 1e-9         # s, event times are multiples of dt
PARACHUTE_CD = 0.775
PARACHUTE_VELOCITY_RETENTION = 0.1  # Fraction of velocity kept when the canopy opens
DEPLOYING_DRAG_COEFFICIENT = 0.1    # N/(m/s), linear drag while deploying
CROSSWIND_CD = 0.25

MAX_TORQUE = 1.0                    # N·m
MIN_TORQUE = 1e-4                   # N·m

# Off-rail speeds above which aerodynamic torque is evaluated (m/s)
POWERED_TORQUE_SPEED = 1.0
COAST_TORQUE_SPEED = 0.5

# Launch angles (deg) that get the attitude offset and torque gain
ADJUSTED_LAUNCH_ANGLES = (4, 18)
LAUNCH_ANGLE_OFFSET = 0.01          # rad
ADJUSTED_TORQUE_GAIN = 1.2

# Restoring torque toward the launch angle under the parachute
DEPLOYED_RESTORING_GAIN = 0.001
DEPLOYED_RESTORING_DEADBAND = 0.01  # rad
DEPLOYING_RESTORING_GAIN = 0.0005

# Lower bound on I for rockets with zero dimensions
MIN_MOMENT_OF_INERTIA = 1e-6        # kg·m²


def _dimension_m(value) -> float:
    """Millimeter dimension in meters; missing or non-positive values count as zero."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not np.isfinite(value) or value <= 0:
        return 0.0
    return mm_to_m(value)


class FlightPhase(str, Enum):
    RAIL = 'rail'
    POWERED = 'powered'
    COAST = 'coast'
    PARACHUTE_DEPLOYING = 'parachute_deploying'
    PARACHUTE_DEPLOYED = 'parachute_deployed'


@dataclass(frozen=True)
class FlightContext:
    """
    Per-run constants derived from the rocket and launch conditions.

    Built once before the integration loop; shared read-only by the
    step functions.
    """
    params: RocketParameters
    profile: AerodynamicProfile
    motor: Motor
    fin_material: FinMaterial
    launch_angle_deg: float
    mass: float                   # kg
    moment_of_inertia: float      # kg·m²
    body_diameter: float          # m
    body_length: float            # m, nose tip to tail
    body_drag_area: float         # m²
    nose_cd: float
    parachute_diameter: float     # m
    rail_length: float            # m
    dt: float                     # s
    thrust_steps: int
    ejection_time: float          # s
    active_time: float            # s

    @classmethod
    def build(cls, params: RocketParameters, launch_angle_deg: float = 0.0,
              profile: Optional[AerodynamicProfile] = None,
              dt: float = THRUST_SAMPLE_DT) -> 'FlightContext':
        """
        Derive run constants.

        Missing or non-positive dimensions are taken as zero so that a
        rocket with invalid geometry can still be flown.

        Raises
        ------
        ValueError
            If a catalog identifier (motor, parachute, nose shape, fin
            material) is unknown
        """
        motor = get_motor(params.motor)
        mass = g_to_kg(params.weight)
        body_diameter = _dimension_m(params.body_width)
        radius = body_diameter / 2
        body_length = _dimension_m(params.nose_height) + _dimension_m(params.body_height)

        # Solid cylinder about a transverse axis through the CG
        inertia = 0.25 * mass * radius ** 2 + 0.0833 * mass * body_length ** 2
        inertia = max(inertia, MIN_MOMENT_OF_INERTIA)

        drag_area = (np.pi * radius ** 2
                     + _dimension_m(params.fin_height) * _dimension_m(params.fin_thickness) * 4)

        thrust_end = len(motor.thrust_samples) * dt
        ejection_time = thrust_end + motor.ejection_delay

        return cls(
            params=params,
            profile=profile if profile is not None else compute_aerodynamic_profile(params),
            motor=motor,
            fin_material=get_fin_material(params.fin_material),
            launch_angle_deg=launch_angle_deg,
            mass=mass,
            moment_of_inertia=inertia,
            body_diameter=body_diameter,
            body_length=body_length,
            body_drag_area=float(drag_area),
            nose_cd=get_nose_profile(params.nose_shape).cd,
            parachute_diameter=parachute_diameter(params.parachute),
            rail_length=LAUNCH_RAIL_LENGTH,
            dt=dt,
            thrust_steps=len(motor.thrust_samples),
            ejection_time=ejection_time,
            active_time=ejection_time + PARACHUTE_DEPLOY_TIME,
        )

    @property
    def initial_omega(self) -> float:
        return float(np.radians(self.launch_angle_deg))

    @property
    def thrust_end_time(self) -> float:
        return self.thrust_steps * self.dt

    @property
    def is_adjusted_angle(self) -> bool:
        return abs(self.launch_angle_deg) in ADJUSTED_LAUNCH_ANGLES

    def adjusted_omega(self, omega: float) -> float:
        """Attitude seen by the force and torque models."""
        if not self.is_adjusted_angle:
            return omega
        direction = -1.0 if self.launch_angle_deg < 0 else 1.0
        return omega + LAUNCH_ANGLE_OFFSET * direction


@dataclass(frozen=True)
class StepForces:
    """
    Forces for one step.

    ``torque`` is None when the aerodynamic torque could not be
    evaluated; the integrator substitutes zero.
    """
    phase: FlightPhase
    ax: float
    ay: float
    thrust: float
    torque: Optional[float]


@dataclass(frozen=True)
class ParachuteEvents:
    ejection: Optional[KeyPoint] = None
    activation: Optional[KeyPoint] = None


def update_parachute(state: SimulationState, ctx: FlightContext):
    """
    Advance the recovery state machine.

    At ejection the parachute starts deploying; progress grows linearly
    over the deployment time. When the canopy is fully open the velocity
    is cut to 10% instantaneously.

    Returns
    -------
    state : SimulationState
        Updated state
    events : ParachuteEvents
        Key points for transitions that happened this step
    """
    ejection = activation = None
    parachute = state.parachute
    progress = state.deployment_progress
    vx, vy = state.vx, state.vy

    now = state.time + EVENT_TIME_TOLERANCE

    if parachute is ParachuteState.NOT_DEPLOYED and now >= ctx.ejection_time:
        parachute = ParachuteState.DEPLOYING
        ejection = KeyPoint(state.time, state.y, vy)

    if parachute is ParachuteState.DEPLOYING:
        progress = float(np.clip((state.time - ctx.ejection_time) / PARACHUTE_DEPLOY_TIME, 0.0, 1.0))

    if parachute is not ParachuteState.DEPLOYED and now >= ctx.active_time:
        parachute = ParachuteState.DEPLOYED
        progress = 1.0
        vx *= PARACHUTE_VELOCITY_RETENTION
        vy *= PARACHUTE_VELOCITY_RETENTION
        activation = KeyPoint(state.time, state.y, vy)

    state = state.evolve(parachute=parachute, deployment_progress=progress, vx=vx, vy=vy)
    return state, ParachuteEvents(ejection, activation)


def classify_phase(state: SimulationState, ctx: FlightContext, on_rail: bool) -> FlightPhase:
    """Flight phase for the current step."""
    if state.parachute is ParachuteState.DEPLOYED:
        return FlightPhase.PARACHUTE_DEPLOYED
    if state.parachute is ParachuteState.DEPLOYING:
        return FlightPhase.PARACHUTE_DEPLOYING
    if state.step_index < ctx.thrust_steps:
        return FlightPhase.RAIL if on_rail else FlightPhase.POWERED
    return FlightPhase.COAST


def crosswind_drag(wind_speed: float, area: float) -> float:
    """Horizontal drag from crosswind (N, same sign as the wind)."""
    return 0.5 * CROSSWIND_CD * AIR_DENSITY * abs(wind_speed) * wind_speed * area


def limit_torque(raw_torque: float) -> float:
    """Clamp to ±1 N·m, raising nonzero values below 1e-4 N·m to 1e-4."""
    if 0 < abs(raw_torque) < MIN_TORQUE:
        return float(np.sign(raw_torque) * MIN_TORQUE)
    return float(np.clip(raw_torque, -MAX_TORQUE, MAX_TORQUE))


def aerodynamic_torque(state: SimulationState, ctx: FlightContext, speed: float,
                       wind_speed: float, thrust: Optional[float]) -> Optional[float]:
    """
    Net aerodynamic torque in free flight (N·m).

    Returns None if any moment is not finite or the evaluation raised an
    arithmetic error. A rocket whose aerodynamic profile is invalid
    produces no aerodynamic torque.
    """
    if not ctx.profile.is_valid:
        return 0.0

    omega = ctx.adjusted_omega(state.omega)
    flight_angle = float(np.arctan2(state.prev_vx, state.prev_vy))

    try:
        moments = compute_moments(speed, omega, flight_angle, wind_speed,
                                  ctx.params, ctx.profile, thrust=thrust)
    except (ArithmeticError, ValueError, TypeError) as exc:
        logger.debug("Moment evaluation failed at t=%.2f: %s", state.time, exc)
        return None

    total = moments.total()
    if total is None:
        logger.debug("Non-finite moment at t=%.2f: %s", state.time, moments)
        return None

    torque = limit_torque(total)
    if ctx.is_adjusted_angle:
        torque *= ADJUSTED_TORQUE_GAIN
    return torque


def compute_step_forces(state: SimulationState, ctx: FlightContext, on_rail: bool,
                        speed: float, wind_speed: float) -> StepForces:
    """
    Accelerations and torque for the current step.

    Parameters
    ----------
    state : SimulationState
        State after the parachute update
    ctx : FlightContext
        Run constants
    on_rail : bool
        Whether the rocket is still on the launch rail
    speed : float
        Speed magnitude (m/s)
    wind_speed : float
        Effective wind speed at the current height (m/s)
    """
    phase = classify_phase(state, ctx, on_rail)
    mass = ctx.mass
    weight = mass * GRAVITY
    omega = ctx.adjusted_omega(state.omega)
    initial_omega = ctx.initial_omega
    thrust = 0.0
    torque: Optional[float] = 0.0

    if phase is FlightPhase.PARACHUTE_DEPLOYED:
        canopy_area = np.pi * (ctx.parachute_diameter / 2) ** 2
        canopy_drag = 0.5 * PARACHUTE_CD * AIR_DENSITY * speed ** 2 * canopy_area

        fx = fy = 0.0
        if speed > 0.001:
            fx = -canopy_drag * state.vx / speed
            fy = -canopy_drag * state.vy / speed

        fx -= crosswind_drag(wind_speed, ctx.parachute_diameter ** 2 * 0.785)
        fy -= weight

        if abs(omega - initial_omega) > DEPLOYED_RESTORING_DEADBAND:
            torque = (initial_omega - omega) * DEPLOYED_RESTORING_GAIN

    elif phase is FlightPhase.PARACHUTE_DEPLOYING:
        fx = 0.0
        fy = -weight
        if speed > 0.001:
            fx = -DEPLOYING_DRAG_COEFFICIENT * state.vx
            fy -= DEPLOYING_DRAG_COEFFICIENT * state.vy

        # Half-open canopy: half the side area, half the effect
        fx -= crosswind_drag(wind_speed, ctx.body_diameter * ctx.body_length * 0.5) * 0.5

        torque = (initial_omega - omega) * DEPLOYING_RESTORING_GAIN

    else:
        body_drag = 0.5 * ctx.nose_cd * AIR_DENSITY * speed ** 2 * ctx.body_drag_area
        side_wind = crosswind_drag(wind_speed, ctx.body_diameter * ctx.body_length)

        if phase is FlightPhase.RAIL:
            thrust = ctx.motor.thrust_at_step(state.step_index)
            if ctx.launch_angle_deg == 0:
                fx = -side_wind
                fy = thrust - weight
            else:
                fx = thrust * np.sin(omega) - side_wind
                fy = thrust * np.cos(omega) - weight

        elif phase is FlightPhase.POWERED:
            thrust = ctx.motor.thrust_at_step(state.step_index)
            axial = thrust - body_drag if speed > 0.001 else thrust
            fx = axial * np.sin(omega) - side_wind
            fy = axial * np.cos(omega) - weight

            if speed > POWERED_TORQUE_SPEED:
                torque = aerodynamic_torque(state, ctx, speed, wind_speed, thrust)

        else:
            if speed > 0.001:
                fx = -body_drag * np.sin(omega) - side_wind
                fy = -weight - body_drag * np.cos(omega)
            else:
                fx = -side_wind
                fy = -weight

            if not on_rail and speed > COAST_TORQUE_SPEED:
                torque = aerodynamic_torque(state, ctx, speed, wind_speed, None)

    return StepForces(
        phase=phase,
        ax=float(fx / mass),
        ay=float(fy / mass),
        thrust=float(thrust),
        torque=None if torque is None else float(torque),
    )
