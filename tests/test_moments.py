"""
Moment Function Tests

Tests for:
- Angle of attack folding
- Sign convention shared by every moment
- Minimum-magnitude floor and stall amplification
- Non-finite inputs reported as None
"""

import pytest
import numpy as np
import os
import sys

# Add repository root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from rocketsim.core.parameters import example_rocket
from rocketsim.core.geometry import compute_aerodynamic_profile
from rocketsim.core.catalog import AIR_DENSITY
from rocketsim.core.moments import (
    angle_of_attack,
    lift_moment,
    drag_moment,
    wind_moment,
    fin_moment,
    thrust_moment,
    compute_moments,
    MomentSet,
    MIN_MOMENT,
)

SIDE_AREA = 0.03       # m²
AC = 387.6             # mm
CG = 250.0             # mm


class TestAngleOfAttack:
    """Test angle of attack wrapping."""

    def test_small_angle_unchanged(self):
        assert np.isclose(angle_of_attack(0.1, 0.0), 0.1)
        assert np.isclose(angle_of_attack(0.0, 0.2), -0.2)

    def test_tail_first_descent_is_zero_incidence(self):
        """Falling straight down along the body axis has no incidence."""
        assert np.isclose(angle_of_attack(0.0, np.pi), 0.0)
        assert np.isclose(angle_of_attack(0.0, -np.pi), 0.0)

    def test_folded_into_half_circle(self):
        for omega in np.linspace(-6.0, 6.0, 25):
            alpha = angle_of_attack(omega, 0.3)
            assert -np.pi / 2 <= alpha <= np.pi / 2

    def test_obtuse_angle_folds(self):
        assert np.isclose(angle_of_attack(3 * np.pi / 4, 0.0), -np.pi / 4)


class TestSignConvention:
    """The same sign rule holds for every moment function."""

    def test_lift_point_behind_cg_positive_angle(self):
        """P >= CG with a >= 0 gives a positive moment."""
        assert lift_moment(30.0, 0.1, 0.0, SIDE_AREA, AC, CG) > 0

    def test_lift_point_behind_cg_negative_angle(self):
        """P >= CG with a < 0 gives a negative moment."""
        assert lift_moment(30.0, -0.1, 0.0, SIDE_AREA, AC, CG) < 0

    def test_lift_point_ahead_of_cg(self):
        """P < CG flips both cases."""
        assert lift_moment(30.0, 0.1, 0.0, SIDE_AREA, 200.0, CG) < 0
        assert lift_moment(30.0, -0.1, 0.0, SIDE_AREA, 200.0, CG) > 0

    def test_drag_follows_rule(self):
        assert drag_moment(30.0, 0.1, 0.0, 0.0017, AC, CG) > 0
        assert drag_moment(30.0, -0.1, 0.0, 0.0017, AC, CG) < 0

    def test_wind_uses_wind_direction(self):
        """The driving quantity of the wind moment is the wind speed."""
        assert wind_moment(5.0, 0.0, 0.0072, 40.0, 500.0, 327.2, CG) > 0
        assert wind_moment(-5.0, 0.0, 0.0072, 40.0, 500.0, 327.2, CG) < 0

    def test_fin_follows_rule(self):
        params = example_rocket()
        assert fin_moment(30.0, 0.1, 0.0, params, 460.0, CG) > 0
        assert fin_moment(30.0, -0.1, 0.0, params, 460.0, CG) < 0

    def test_thrust_follows_rule(self):
        assert thrust_moment(10.0, 0.1, 0.0, 500.0, CG) > 0
        assert thrust_moment(10.0, -0.1, 0.0, 500.0, CG) < 0


class TestMagnitude:
    """Test floors, caps and amplification."""

    def test_zero_incidence_gives_zero(self):
        assert lift_moment(30.0, 0.0, 0.0, SIDE_AREA, AC, CG) == 0
        assert drag_moment(30.0, 0.0, 0.0, 0.0017, AC, CG) == 0
        assert wind_moment(0.0, 0.0, 0.0072, 40.0, 500.0, 327.2, CG) == 0

    def test_tail_first_drag_gives_zero(self):
        """Flying tail-first along the axis produces no drag torque."""
        assert drag_moment(30.0, 0.0, np.pi, 0.0017, AC, CG) == 0

    def test_drag_uses_cross_flow(self):
        """Drag moment is Cd(alpha)·sin(alpha)·q·A·arm."""
        alpha = 0.2
        cd = 0.01 * alpha ** 2 - 0.02 * alpha + 0.63
        expected = (cd * np.sin(alpha) * 0.5 * AIR_DENSITY * 900.0 * 0.0017
                    * (AC - CG) * 0.001)

        assert drag_moment(30.0, alpha, 0.0, 0.0017, AC, CG) == pytest.approx(expected)

    def test_tiny_moment_raised_to_floor(self):
        """Nonzero moments below 1e-5 N·m are raised to the floor."""
        moment = lift_moment(0.01, 0.1, 0.0, SIDE_AREA, AC, CG)

        assert moment == pytest.approx(MIN_MOMENT)

    def test_lift_value(self):
        moment = lift_moment(30.0, 0.1, 0.0, SIDE_AREA, AC, CG)
        expected = 0.6 * 0.1 * 0.5 * AIR_DENSITY * 900.0 * SIDE_AREA * (AC - CG) * 0.001

        assert moment == pytest.approx(expected)

    def test_lift_amplified_past_stall(self):
        """Lift moment is amplified by 20% above 0.5 rad."""
        alpha = 0.6
        moment = lift_moment(30.0, alpha, 0.0, SIDE_AREA, AC, CG)
        expected = 0.6 * alpha * 0.5 * AIR_DENSITY * 900.0 * SIDE_AREA * (AC - CG) * 0.001 * 1.2

        assert moment == pytest.approx(expected)

    def test_velocity_capped_at_100(self):
        """Dynamic pressure stops growing above 100 m/s."""
        at_100 = lift_moment(100.0, 0.1, 0.0, SIDE_AREA, AC, CG)
        at_200 = lift_moment(200.0, 0.1, 0.0, SIDE_AREA, AC, CG)

        assert at_100 == pytest.approx(at_200)

    def test_wind_clamped_at_25(self):
        at_25 = wind_moment(25.0, 0.0, 0.0072, 40.0, 500.0, 327.2, CG)
        at_40 = wind_moment(40.0, 0.0, 0.0072, 40.0, 500.0, 327.2, CG)

        assert at_25 == pytest.approx(at_40)


class TestDegenerateInputs:
    """Non-finite results are reported as None."""

    def test_nan_area_gives_none(self):
        assert lift_moment(30.0, 0.1, 0.0, float('nan'), AC, CG) is None
        assert drag_moment(30.0, 0.1, 0.0, float('nan'), AC, CG) is None

    def test_moment_set_total_none_when_any_term_failed(self):
        moments = MomentSet(lift=0.1, drag=None, wind=0.0, fin=0.0)

        assert not moments.is_valid
        assert moments.total() is None

    def test_moment_set_total(self):
        moments = MomentSet(lift=0.1, drag=0.02, wind=-0.05, fin=0.01, thrust=0.001)

        assert moments.is_valid
        assert moments.total() == pytest.approx(0.081)


class TestComputeMoments:
    """Test the combined moment evaluation."""

    def test_vertical_flight_without_wind_is_zero(self):
        params = example_rocket()
        profile = compute_aerodynamic_profile(params)
        moments = compute_moments(30.0, 0.0, 0.0, 0.0, params, profile, thrust=10.0)

        assert moments.is_valid
        assert moments.total() == 0

    def test_thrust_omitted_by_default(self):
        params = example_rocket()
        profile = compute_aerodynamic_profile(params)
        moments = compute_moments(30.0, 0.1, 0.0, 0.0, params, profile)

        assert moments.thrust == 0.0
