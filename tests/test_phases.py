"""
Flight Phase and Attitude Tests

Tests for:
- Run constants (mass, inertia, event times)
- Parachute state machine
- Phase classification and force models
- Torque accumulation, coarse attitude update and stability tracking
- Weathercocking
"""

import pytest
import numpy as np
import os
import sys

# Add repository root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from rocketsim.core.parameters import example_rocket
from rocketsim.core.catalog import GRAVITY
from rocketsim.core.state import SimulationState, ParachuteState
from rocketsim.core.phases import (
    FlightContext,
    FlightPhase,
    update_parachute,
    classify_phase,
    compute_step_forces,
    crosswind_drag,
    limit_torque,
    aerodynamic_torque,
    MIN_MOMENT_OF_INERTIA,
)
from rocketsim.core import phases
from rocketsim.core.moments import MomentSet
from rocketsim.core.attitude import (
    accumulate_torque,
    apply_attitude_nudge,
    apply_enhanced_attitude_control,
    weathercock_target,
    wrap_degrees,
    ANGLE_STEPS_PER_UPDATE,
)


@pytest.fixture
def ctx():
    return FlightContext.build(example_rocket())


class TestFlightContext:
    """Test run constants."""

    def test_moment_of_inertia(self, ctx):
        """Solid cylinder about the CG: 0.25 m r² + 0.0833 m L²."""
        m, r, L = 0.2, 0.02, 0.5
        expected = 0.25 * m * r ** 2 + 0.0833 * m * L ** 2

        assert ctx.moment_of_inertia == pytest.approx(expected)
        assert ctx.moment_of_inertia < 0.25 * m * r ** 2 + 0.833 * m * L ** 2

    def test_event_times(self, ctx):
        assert ctx.thrust_steps == 93
        assert ctx.ejection_time == pytest.approx(6.86)
        assert ctx.active_time == pytest.approx(7.86)

    def test_adjusted_launch_angles(self):
        assert FlightContext.build(example_rocket(), 4.0).is_adjusted_angle
        assert FlightContext.build(example_rocket(), -18.0).is_adjusted_angle
        assert not FlightContext.build(example_rocket(), 5.0).is_adjusted_angle

    def test_unknown_motor(self):
        with pytest.raises(ValueError):
            FlightContext.build(example_rocket().replace(motor='X1-1'))

    def test_invalid_dimensions_count_as_zero(self):
        ctx = FlightContext.build(example_rocket().replace(body_width=-5.0))

        assert ctx.body_diameter == 0.0
        assert not ctx.profile.is_valid
        assert np.isfinite(ctx.body_drag_area) and ctx.body_drag_area > 0
        assert ctx.moment_of_inertia >= MIN_MOMENT_OF_INERTIA

    def test_inertia_floor(self):
        rocket = example_rocket().replace(body_width=0.0, nose_height=0.0, body_height=0.0)
        ctx = FlightContext.build(rocket)

        assert ctx.body_length == 0.0
        assert ctx.moment_of_inertia == MIN_MOMENT_OF_INERTIA


class TestParachute:
    """Test the recovery state machine."""

    def test_not_deployed_before_ejection(self, ctx):
        state = SimulationState(time=6.0, vy=-5.0)
        new_state, events = update_parachute(state, ctx)

        assert new_state.parachute is ParachuteState.NOT_DEPLOYED
        assert events.ejection is None and events.activation is None

    def test_ejection(self, ctx):
        state = SimulationState(time=6.9, y=60.0, vy=-8.0)
        new_state, events = update_parachute(state, ctx)

        assert new_state.parachute is ParachuteState.DEPLOYING
        assert new_state.is_parachute_ejected
        assert not new_state.is_parachute_active
        assert new_state.deployment_progress == pytest.approx(0.04, abs=1e-6)
        assert events.ejection.time == 6.9
        assert events.ejection.height == 60.0

    def test_activation_cuts_velocity(self, ctx):
        """Full deployment keeps 10% of the velocity."""
        state = SimulationState(time=7.9, y=40.0, vx=1.0, vy=-20.0,
                                parachute=ParachuteState.DEPLOYING)
        new_state, events = update_parachute(state, ctx)

        assert new_state.parachute is ParachuteState.DEPLOYED
        assert new_state.deployment_progress == 1.0
        assert new_state.vx == pytest.approx(0.1)
        assert new_state.vy == pytest.approx(-2.0)
        assert events.activation.speed == pytest.approx(-2.0)


class TestPhaseForces:
    """Test phase classification and forces."""

    def test_classify(self, ctx):
        assert classify_phase(SimulationState(), ctx, on_rail=True) is FlightPhase.RAIL
        assert classify_phase(SimulationState(step_index=50), ctx, False) is FlightPhase.POWERED
        assert classify_phase(SimulationState(step_index=93), ctx, False) is FlightPhase.COAST
        assert (classify_phase(SimulationState(parachute=ParachuteState.DEPLOYING), ctx, False)
                is FlightPhase.PARACHUTE_DEPLOYING)
        assert (classify_phase(SimulationState(parachute=ParachuteState.DEPLOYED), ctx, False)
                is FlightPhase.PARACHUTE_DEPLOYED)

    def test_vertical_rail_forces(self, ctx):
        state = SimulationState(step_index=1)
        forces = compute_step_forces(state, ctx, on_rail=True, speed=0.0, wind_speed=0.0)
        thrust = ctx.motor.thrust_at_step(1)

        assert forces.phase is FlightPhase.RAIL
        assert forces.ax == 0.0
        assert forces.ay == pytest.approx((thrust - ctx.mass * GRAVITY) / ctx.mass)
        assert forces.torque == 0.0

    def test_coast_decelerates(self, ctx):
        state = SimulationState(step_index=100, y=50.0, vy=20.0, prev_vy=20.0)
        forces = compute_step_forces(state, ctx, on_rail=False, speed=20.0, wind_speed=0.0)

        assert forces.phase is FlightPhase.COAST
        assert forces.ay < -GRAVITY
        assert forces.thrust == 0.0

    def test_crosswind_drag(self):
        assert crosswind_drag(2.0, 1.0) == pytest.approx(0.5 * 0.25 * 1.225 * 4.0)
        assert crosswind_drag(-2.0, 1.0) == pytest.approx(-0.5 * 0.25 * 1.225 * 4.0)

    def test_limit_torque(self):
        assert limit_torque(5.0) == 1.0
        assert limit_torque(-5.0) == -1.0
        assert limit_torque(1e-6) == pytest.approx(1e-4)
        assert limit_torque(-1e-6) == pytest.approx(-1e-4)
        assert limit_torque(0.0) == 0.0


class TestAttitude:
    """Test the two-rate attitude update."""

    def test_coarse_update_every_interval(self, ctx):
        state = SimulationState()
        for _ in range(ANGLE_STEPS_PER_UPDATE - 1):
            state = accumulate_torque(state, 0.001, ctx, 10.0)

        assert state.steps_since_update == ANGLE_STEPS_PER_UPDATE - 1
        assert state.angular_velocity == 0.0

        state = accumulate_torque(state, 0.001, ctx, 10.0)

        assert state.steps_since_update == 0
        assert state.accumulated_torque == 0.0
        assert state.angular_velocity == pytest.approx(0.01 / ctx.moment_of_inertia * 0.2)

    def test_angular_velocity_capped(self, ctx):
        state = SimulationState()
        for _ in range(ANGLE_STEPS_PER_UPDATE):
            state = accumulate_torque(state, 1.0, ctx, 10.0)

        assert state.angular_velocity == 3.0
        assert state.angle_change_per_update == pytest.approx(0.6)

    def test_large_change_after_burnout_is_unstable(self, ctx):
        state = SimulationState(thrust_ended=True)
        for _ in range(ANGLE_STEPS_PER_UPDATE):
            state = accumulate_torque(state, 1.0, ctx, 10.0)

        assert not state.is_angle_stable
        assert state.max_angle_change == pytest.approx(np.degrees(0.6))

    def test_powered_flight_not_judged(self, ctx):
        state = SimulationState(thrust_ended=False)
        for _ in range(ANGLE_STEPS_PER_UPDATE):
            state = accumulate_torque(state, 1.0, ctx, 10.0)

        assert state.is_angle_stable

    def test_nudge(self):
        state = SimulationState(angle_change_per_update=0.05)
        state = apply_attitude_nudge(state, 10.0)

        assert state.omega == pytest.approx(0.005)
        assert state.prev_omega == state.omega
        assert state.window_angle_change == pytest.approx(np.degrees(0.005))

    def test_window_keeps_last_interval(self):
        state = SimulationState(angle_change_per_update=0.05)
        for _ in range(3 * ANGLE_STEPS_PER_UPDATE):
            state = apply_attitude_nudge(state, 10.0)

        assert len(state.angle_changes) == ANGLE_STEPS_PER_UPDATE
        assert state.window_angle_change == pytest.approx(np.degrees(0.05))

    def test_wrap_degrees(self):
        assert wrap_degrees(190.0) == pytest.approx(-170.0)
        assert wrap_degrees(-190.0) == pytest.approx(170.0)
        assert wrap_degrees(10.0) == pytest.approx(10.0)


class TestWeathercocking:
    """Test enhanced attitude control."""

    def test_target_without_limitation(self):
        assert weathercock_target(0.3, -5.0, 2.0, limit_to_wind_axis=False) == 0.3

    def test_light_wind_ignored(self):
        assert weathercock_target(0.3, -0.2, 2.0, limit_to_wind_axis=True) == 0.3

    def test_upwind_target_limited(self):
        target = weathercock_target(0.3, -5.0, 2.0, limit_to_wind_axis=True)

        assert target == pytest.approx(np.pi / 2)

    def test_coast_blends_toward_velocity(self):
        state = SimulationState(omega=0.5, vx=0.0, vy=10.0, thrust_ended=True)
        state = apply_enhanced_attitude_control(state, 10.0, 0.0, False)

        assert state.omega == pytest.approx(0.5 * (1 - 0.02))

    def test_change_capped_per_step(self):
        state = SimulationState(omega=3.0, vx=0.0, vy=100.0, thrust_ended=False)
        state = apply_enhanced_attitude_control(state, 100.0, 6.0, False)

        assert state.omega == pytest.approx(3.0 - 0.2)


class TestAerodynamicTorque:
    """Test the free-flight torque and its fallback when a moment fails."""

    @staticmethod
    def coasting_state():
        return SimulationState(step_index=100, y=50.0, vx=1.0, vy=20.0,
                               prev_vx=1.0, prev_vy=20.0, omega=0.1)

    def test_healthy_rocket(self, ctx):
        torque = aerodynamic_torque(self.coasting_state(), ctx, 20.0, 3.0, None)

        assert torque is not None
        assert np.isfinite(torque)
        assert abs(torque) <= 1.0

    def test_invalid_profile_gives_zero(self):
        ctx = FlightContext.build(example_rocket().replace(body_width=-5.0))

        assert aerodynamic_torque(self.coasting_state(), ctx, 20.0, 3.0, None) == 0.0

    def test_raising_moment_gives_none(self, ctx, monkeypatch):
        def failing(*args, **kwargs):
            raise ZeroDivisionError("lever arm")

        monkeypatch.setattr(phases, 'compute_moments', failing)

        assert aerodynamic_torque(self.coasting_state(), ctx, 20.0, 3.0, None) is None

    def test_missing_moment_gives_none(self, ctx, monkeypatch):
        monkeypatch.setattr(phases, 'compute_moments',
                            lambda *args, **kwargs: MomentSet(lift=None, drag=0.0,
                                                              wind=0.0, fin=0.0))
        forces = compute_step_forces(self.coasting_state(), ctx, on_rail=False,
                                     speed=20.0, wind_speed=3.0)

        assert forces.phase is FlightPhase.COAST
        assert forces.torque is None
        assert forces.ay < -GRAVITY
