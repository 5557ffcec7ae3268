"""
Fixed-step flight integrator for model rockets.

Advances a SimulationState with explicit Euler at dt = 0.02 s from
ignition until the rocket returns to the ground (or 20 s elapse):
- Parachute state machine (ejection, deployment, full canopy)
- Phase force model (rail, powered, coast, parachute)
- Two-rate attitude update with stability tracking
- Optional weathercocking
- Translation with speed and angular-rate caps

Each run owns its state; FlightSimulator instances hold only
read-only inputs and can be reused or run in parallel.
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

try:
    from .parameters import RocketParameters
    from .catalog import THRUST_SAMPLE_DT
    from .geometry import AerodynamicProfile, compute_aerodynamic_profile
    from .fin_deflection import calculate_fin_deflection
    from .options import SimulationConfig
    from .state import SimulationState, FlightSample, KeyPoint
    from .phases import (FlightContext, FlightPhase, StepForces, ParachuteEvents,
                         update_parachute, compute_step_forces)
    from .attitude import (accumulate_torque, apply_attitude_nudge,
                           apply_enhanced_attitude_control)
    from .results import FlightRecorder, FlightResult
    from ..environment.wind import WindModel
except ImportError:
    from parameters import RocketParameters
    from catalog import THRUST_SAMPLE_DT
    from geometry import AerodynamicProfile, compute_aerodynamic_profile
    from fin_deflection import calculate_fin_deflection
    from options import SimulationConfig
    from state import SimulationState, FlightSample, KeyPoint
    from phases import (FlightContext, FlightPhase, StepForces, ParachuteEvents,
                        update_parachute, compute_step_forces)
    from attitude import (accumulate_torque, apply_attitude_nudge,
                          apply_enhanced_attitude_control)
    from results import FlightRecorder, FlightResult
    from rocketsim.environment.wind import WindModel

logger = logging.getLogger(__name__)

MAX_TIME = 20.0                 # s
GROUND_GRACE_TIME = 0.1         # s, height may be negative before this
MAX_SPEED = 100.0               # m/s
MAX_ANGULAR_VELOCITY = 5.0      # rad/s
FIN_DEFLECTION_MIN_SPEED = 5.0  # m/s


@dataclass(frozen=True)
class StepOutcome:
    """Everything one integration step produced besides the new state."""
    sample: FlightSample
    forces: StepForces
    events: ParachuteEvents
    torque_degraded: bool


def integrate_translation(state: SimulationState, ax: float, ay: float, speed: float,
                          on_rail: bool, ctx: FlightContext) -> SimulationState:
    """
    Explicit Euler update of velocity and position.

    Speed is capped at 100 m/s (direction kept) and angular velocity at
    ±5 rad/s. On the rail the position follows the rail direction.
    """
    vx = state.vx + ax * ctx.dt
    vy = state.vy + ay * ctx.dt

    speed_after = float(np.hypot(vx, vy))
    if speed_after > MAX_SPEED:
        factor = MAX_SPEED / speed_after
        vx *= factor
        vy *= factor

    angular_velocity = float(np.clip(state.angular_velocity,
                                     -MAX_ANGULAR_VELOCITY, MAX_ANGULAR_VELOCITY))

    if on_rail:
        if ctx.launch_angle_deg == 0:
            x = 0.0
            y = state.y + vy * ctx.dt
        else:
            rail_distance = min(state.distance_from_origin + speed * ctx.dt, ctx.rail_length)
            x = rail_distance * np.sin(state.omega)
            y = rail_distance * np.cos(state.omega)
    else:
        x = state.x + vx * ctx.dt
        y = state.y + vy * ctx.dt

    return state.evolve(x=float(x), y=float(y), vx=float(vx), vy=float(vy),
                        angular_velocity=angular_velocity)


def check_flight_mass(params: RocketParameters):
    """Raise ValueError unless the rocket weight is a positive finite number."""
    weight = params.weight
    if isinstance(weight, bool) or not isinstance(weight, (int, float, np.integer, np.floating)):
        raise ValueError(f"Cannot simulate rocket: weight must be a number, got {weight!r}")
    if not np.isfinite(weight) or weight <= 0:
        raise ValueError(f"Cannot simulate rocket: weight must be positive, got {weight!r}")


class FlightSimulator:
    """
    Model rocket flight simulator.

    Parameters
    ----------
    params : RocketParameters
        Rocket definition
    config : SimulationConfig, optional
        Feature switches; unset fields use module defaults
    max_time : float
        Simulated time limit (s)

    Raises
    ------
    ValueError
        If the weight is not a positive number or the rocket references
        unknown catalog entries. Invalid geometry does not raise; the
        flight runs with a zeroed aerodynamic profile and no aerodynamic
        torque.
    """

    def __init__(self, params: RocketParameters, config: Optional[SimulationConfig] = None,
                 max_time: float = MAX_TIME):
        check_flight_mass(params)
        self.params = params
        self.config = (config or SimulationConfig()).resolved()
        self.max_time = max_time
        self.profile: AerodynamicProfile = compute_aerodynamic_profile(params)

        # Unknown motor, parachute or material identifiers raise here
        self.context()

    def context(self, launch_angle: float = 0.0) -> FlightContext:
        """Run constants for a launch angle (deg)."""
        return FlightContext.build(self.params, launch_angle, profile=self.profile,
                                   dt=THRUST_SAMPLE_DT)

    def step(self, state: SimulationState, ctx: FlightContext,
             wind: WindModel) -> Tuple[SimulationState, StepOutcome]:
        """
        Advance one time step.

        Parameters
        ----------
        state : SimulationState
            State at the start of the step
        ctx : FlightContext
            Run constants
        wind : WindModel
            Wind field

        Returns
        -------
        new_state : SimulationState
            State at the end of the step (time advanced by dt)
        outcome : StepOutcome
            Sample and diagnostics for this step
        """
        config = self.config
        threshold = config.stability_threshold_deg

        state = state.evolve(prev_vx=state.vx, prev_vy=state.vy)
        state, events = update_parachute(state, ctx)

        on_rail = state.distance_from_origin < ctx.rail_length
        speed = state.speed
        wind_speed = wind.speed_at(state.y)

        fin_deflection = 0.0
        if speed > FIN_DEFLECTION_MIN_SPEED:
            fin_deflection = calculate_fin_deflection(speed, ctx.fin_material, self.params)

        forces = compute_step_forces(state, ctx, on_rail, speed, wind_speed)
        if forces.phase is FlightPhase.COAST and not state.thrust_ended:
            state = state.evolve(thrust_ended=True)

        torque_degraded = forces.torque is None
        torque = 0.0 if torque_degraded else forces.torque

        state = state.evolve(fin_deflection=fin_deflection)
        state = accumulate_torque(state, torque, ctx, threshold)

        if config.physical_attitude_control:
            state = apply_attitude_nudge(state, threshold)

        if config.enhanced_attitude_control and not on_rail and not state.is_parachute_ejected:
            state = apply_enhanced_attitude_control(state, speed, wind_speed,
                                                    config.wind_angle_limitation)

        state = integrate_translation(state, forces.ax, forces.ay, speed, on_rail, ctx)

        sample = FlightSample(
            time=state.time,
            x=state.x,
            y=state.y,
            vx=state.vx,
            vy=state.vy,
            ax=forces.ax,
            ay=forces.ay,
            speed=state.speed,
            acceleration=float(np.hypot(forces.ax, forces.ay)),
            angular_velocity=state.angular_velocity,
            angular_acceleration=state.angular_acceleration,
            is_parachute_ejected=state.is_parachute_ejected,
            is_parachute_active=state.is_parachute_active,
            parachute_deployment_progress=state.deployment_progress,
            omega=state.omega,
            omega_degrees=state.omega_degrees,
            torque=torque,
            angle_change_per_interval=state.window_angle_change,
            horizontal_distance=abs(state.x),
            fin_deflection=fin_deflection,
            angle_deviation_degrees=state.omega_degrees - ctx.launch_angle_deg,
            effective_wind_speed=wind_speed,
            is_thrust_active=state.time <= ctx.thrust_end_time,
        )

        step_index = state.step_index + 1
        state = state.evolve(step_index=step_index, time=step_index * ctx.dt)

        return state, StepOutcome(sample, forces, events, torque_degraded)

    def run(self, launch_angle: float = 0.0, wind_speed: float = 0.0,
            wind_profile: str = 'uniform') -> FlightResult:
        """
        Simulate one flight.

        Parameters
        ----------
        launch_angle : float
            Launch rail angle from vertical (deg, signed)
        wind_speed : float
            Base wind speed at 1.5 m (m/s, signed)
        wind_profile : str
            Wind profile name

        Returns
        -------
        FlightResult
            Samples, summaries and the aerodynamic profile
        """
        ctx = self.context(launch_angle)
        wind = WindModel(wind_speed, wind_profile)
        state = SimulationState.initial(launch_angle)
        recorder = FlightRecorder()

        while (state.y >= 0 or state.time < GROUND_GRACE_TIME) and state.time < self.max_time:
            event_time, event_y, event_vy = state.time, state.y, state.vy
            thrust_ended_before = state.thrust_ended

            state, outcome = self.step(state, ctx, wind)

            if state.thrust_ended and not thrust_ended_before:
                recorder.thrust_end = KeyPoint(event_time, event_y, event_vy)
            if outcome.events.ejection is not None:
                recorder.parachute_ejection = outcome.events.ejection
            if outcome.events.activation is not None:
                recorder.parachute_active = outcome.events.activation
            if outcome.torque_degraded:
                recorder.degraded_torque_steps += 1

            recorder.record(outcome.sample)

        result = recorder.finalize(state, self.profile, self.config)
        logger.info("Simulation complete: %d steps, max height %.2f m, max speed %.2f m/s, "
                    "max distance %.2f m, attitude %s",
                    len(result.samples), result.max_height, result.max_speed,
                    result.max_distance, "stable" if result.is_angle_stable_ok else "unstable")
        if result.summary.degraded_torque_steps:
            logger.warning("%d steps fell back to zero torque",
                           result.summary.degraded_torque_steps)
        return result


def simulate_flight(params: Union[RocketParameters, Dict[str, Any]],
                    launch_angle: float = 0.0,
                    wind_speed: float = 0.0,
                    wind_profile: str = 'uniform',
                    config: Union[SimulationConfig, Dict[str, Any], None] = None) -> FlightResult:
    """
    Simulate a model rocket flight.

    Parameters
    ----------
    params : RocketParameters or dict
        Rocket definition (dicts may use the front-end camelCase keys)
    launch_angle : float
        Launch angle from vertical (deg)
    wind_speed : float
        Base wind speed (m/s, signed)
    wind_profile : str
        'uniform', 'ocean', 'open', 'suburban' or 'urban'
    config : SimulationConfig or dict, optional
        Feature switches

    Returns
    -------
    FlightResult

    Examples
    --------
    >>> from rocketsim.core.parameters import example_rocket
    >>> result = simulate_flight(example_rocket(), launch_angle=0.0)
    >>> result.max_height > 0
    True
    """
    if isinstance(params, dict):
        params = RocketParameters.from_dict(params)
    if isinstance(config, dict):
        config = SimulationConfig.from_dict(config)

    simulator = FlightSimulator(params, config)
    return simulator.run(launch_angle, wind_speed, wind_profile)


if __name__ == "__main__":
    from rocketsim.core.parameters import example_rocket

    logging.basicConfig(level=logging.INFO)
    result = simulate_flight(example_rocket(), launch_angle=0.0, wind_speed=0.0)

    print("=" * 60)
    print("C6-5 reference flight")
    print("=" * 60)
    print(f"Max height:    {result.max_height:.1f} m")
    print(f"Max speed:     {result.max_speed:.1f} m/s")
    print(f"Flight time:   {result.summary.flight_time:.2f} s")
    print(f"Apogee at:     {result.key_points.max_height.time:.2f} s")
    print(f"Chute open at: {result.key_points.parachute_active.time:.2f} s")
    print(f"Stable:        {result.is_angle_stable_ok}")
