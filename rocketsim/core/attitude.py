"""
Attitude dynamics for the planar flight model.

Two rates:
- Every step, torque is accumulated and the attitude is nudged by a
  tenth of the last computed angle change.
- Every ANGLE_STEPS_PER_UPDATE steps (one angular response interval),
  the accumulated torque drives the angular velocity and sets the next
  angle change.

Also tracks the windowed attitude change used for the stability
verdict, and the optional weathercocking model (enhanced attitude
control).
"""

import numpy as np

try:
    from .state import SimulationState
    from .phases import FlightContext
except ImportError:
    from state import SimulationState
    from phases import FlightContext


ANGLE_RESPONSE_DT = 0.2             # s
ANGLE_STEPS_PER_UPDATE = 10

MIN_UPDATE_TORQUE = 1e-5            # N·m
MAX_UPDATE_ANGULAR_VELOCITY = 3.0   # rad/s, right after the coarse update
MIN_ANGLE_CHANGE_PER_UPDATE = 0.001  # rad
MIN_ANGLE_NUDGE = 1e-4              # rad

# Weathercocking
MAX_ADJUST_RATE = 0.05
ADJUST_RATE_PER_SPEED = 0.002       # per m/s
MAX_WIND_FACTOR = 0.8
WIND_FACTOR_SCALE = 6.0             # m/s
MIN_WEATHERCOCK_WIND = 0.5          # m/s
MAX_ATTITUDE_CHANGE_PER_STEP = 0.2  # rad


def wrap_degrees(angle: float) -> float:
    """Wrap an angle in degrees to [-180, 180)."""
    return (angle + 180.0) % 360.0 - 180.0


def _with_floor(value: float, floor: float) -> float:
    """Raise a nonzero magnitude below ``floor`` to ``floor``, keeping the sign."""
    if 0 < abs(value) < floor:
        return float(np.sign(value) * floor)
    return float(value)


def _stability_window_open(state: SimulationState) -> bool:
    """Stability is judged from burnout until parachute ejection."""
    return state.thrust_ended and not state.is_parachute_ejected


def coarse_attitude_update(state: SimulationState, ctx: FlightContext,
                           threshold_deg: float) -> SimulationState:
    """
    Update angular velocity from the torque accumulated over one interval.

    The accumulated (summed, not averaged) torque gives the angular
    acceleration; angular velocity is capped at ±3 rad/s and sets the
    angle change for the next interval.
    """
    torque = state.accumulated_torque
    if not np.isfinite(torque):
        torque = 0.0
    torque = _with_floor(torque, MIN_UPDATE_TORQUE)

    angular_acceleration = torque / ctx.moment_of_inertia
    angular_velocity = state.angular_velocity + angular_acceleration * ANGLE_RESPONSE_DT
    angular_velocity = float(np.clip(angular_velocity, -MAX_UPDATE_ANGULAR_VELOCITY,
                                     MAX_UPDATE_ANGULAR_VELOCITY))

    angle_change = _with_floor(angular_velocity * ANGLE_RESPONSE_DT, MIN_ANGLE_CHANGE_PER_UPDATE)

    is_stable = state.is_angle_stable
    max_change = state.max_angle_change
    if _stability_window_open(state):
        change_deg = float(np.degrees(angle_change))
        if abs(change_deg) > abs(max_change):
            max_change = change_deg
        if abs(change_deg) > threshold_deg:
            is_stable = False

    return state.evolve(
        angular_acceleration=float(angular_acceleration),
        angular_velocity=angular_velocity,
        angle_change_per_update=angle_change,
        accumulated_torque=0.0,
        steps_since_update=0,
        is_angle_stable=is_stable,
        max_angle_change=max_change,
    )


def accumulate_torque(state: SimulationState, torque: float, ctx: FlightContext,
                      threshold_deg: float) -> SimulationState:
    """Add this step's torque; run the coarse update when an interval completes."""
    state = state.evolve(
        accumulated_torque=state.accumulated_torque + torque,
        steps_since_update=state.steps_since_update + 1,
    )
    if state.steps_since_update >= ANGLE_STEPS_PER_UPDATE:
        state = coarse_attitude_update(state, ctx, threshold_deg)
    return state


def apply_attitude_nudge(state: SimulationState, threshold_deg: float) -> SimulationState:
    """
    Move the attitude by one step's share of the current angle change.

    Records the per-step change (degrees) in the stability window and
    checks the window sum against the threshold.
    """
    nudge = _with_floor(state.angle_change_per_update / ANGLE_STEPS_PER_UPDATE, MIN_ANGLE_NUDGE)
    omega = state.omega + nudge

    delta = wrap_degrees(float(np.degrees(omega) - np.degrees(state.prev_omega)))
    window = (state.angle_changes + (delta,))[-ANGLE_STEPS_PER_UPDATE:]
    window_sum = float(sum(window))

    is_stable = state.is_angle_stable
    max_change = state.max_angle_change
    if _stability_window_open(state):
        if abs(window_sum) > abs(max_change):
            max_change = window_sum
        if abs(window_sum) > threshold_deg:
            is_stable = False

    return state.evolve(
        omega=omega,
        prev_omega=omega,
        angle_changes=window,
        is_angle_stable=is_stable,
        max_angle_change=max_change,
    )


def weathercock_target(flight_angle: float, wind_speed: float, vx: float,
                       limit_to_wind_axis: bool) -> float:
    """
    Target attitude during powered flight.

    Normally the flight path direction. With the wind limitation enabled
    and the rocket heading upwind in a wind of at least 0.5 m/s, the
    target may not pass beyond 90° from the wind axis.
    """
    if abs(wind_speed) < MIN_WEATHERCOCK_WIND or not limit_to_wind_axis:
        return flight_angle

    moving_upwind = (wind_speed < 0 and vx > 0) or (wind_speed > 0 and vx < 0)
    if not moving_upwind:
        return flight_angle

    wind_angle = 0.0 if wind_speed > 0 else np.pi
    if wind_speed < 0:
        return max(flight_angle, wind_angle - np.pi / 2)
    return min(flight_angle, wind_angle + np.pi / 2)


def apply_enhanced_attitude_control(state: SimulationState, speed: float, wind_speed: float,
                                    limit_to_wind_axis: bool) -> SimulationState:
    """
    Blend the attitude toward the velocity vector (weathercocking).

    Coast: pure velocity alignment. Powered flight: the blend rate grows
    with wind speed and the target may be limited relative to the wind
    axis. The change is capped at 0.2 rad per step.
    """
    flight_angle = float(np.arctan2(state.vx, state.vy))
    adjust_rate = min(MAX_ADJUST_RATE, ADJUST_RATE_PER_SPEED * speed)

    if state.thrust_ended:
        target = flight_angle
    else:
        target = weathercock_target(flight_angle, wind_speed, state.vx, limit_to_wind_axis)
        wind_factor = min(MAX_WIND_FACTOR, abs(wind_speed) / WIND_FACTOR_SCALE)
        adjust_rate *= 1.0 + wind_factor

    blended = state.omega * (1.0 - adjust_rate) + target * adjust_rate
    change = blended - state.omega
    if abs(change) > MAX_ATTITUDE_CHANGE_PER_STEP:
        change = np.sign(change) * MAX_ATTITUDE_CHANGE_PER_STEP

    return state.evolve(omega=float(state.omega + change))
