"""
Geometry and Aerodynamics Tests

Tests for:
- Projected areas and volumes
- Centers of pressure and aerodynamic center
- Static margins
- Fin divergence and flutter speeds
- Invalid geometry handling
"""

import pytest
import numpy as np
import os
import sys

# Add repository root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from rocketsim.core.parameters import RocketParameters, example_rocket, fin_correction
from rocketsim.core.geometry import (
    calculate_projected_area,
    calculate_volume,
    calculate_center_of_pressure,
    calculate_aerodynamic_center,
    calculate_stability_center_of_pressure,
    calculate_static_margin,
    calculate_fin_divergence_speed,
    calculate_fin_flutter_speed,
    compute_aerodynamic_profile,
    DIVERGENCE_SPEED_RANGE,
    FLUTTER_SPEED_RANGE,
)


@pytest.fixture
def rocket():
    return example_rocket()


class TestProjectedArea:
    """Test projected area calculations."""

    def test_areas_non_negative(self, rocket):
        """All areas of the reference rocket are positive."""
        areas = calculate_projected_area(rocket)

        assert areas.frontal_area > 0
        assert areas.side_area > 0
        assert areas.nose_area > 0
        assert areas.fin_area > 0
        assert np.isclose(areas.total_fin_area, 2 * areas.fin_area)

    def test_frontal_area(self, rocket):
        """Frontal area is the body circle plus the fin thickness term."""
        areas = calculate_projected_area(rocket)
        expected = np.pi * 0.02 ** 2 + 60.0 * 2.0 * 4e-7

        assert np.isclose(areas.frontal_area, expected)

    def test_four_fin_area_is_trapezoid(self, rocket):
        """Four fins: one fin seen at full height, no overlap removed."""
        areas = calculate_projected_area(rocket)

        assert np.isclose(areas.fin_area, 0.06 * (0.08 + 0.04) / 2)

    def test_three_fins_project_less_area(self):
        """Three fins are foreshortened in side view."""
        four = calculate_projected_area(example_rocket(fin_count=4))
        three = calculate_projected_area(example_rocket(fin_count=3))

        assert three.fin_area < four.fin_area
        assert three.side_area < four.side_area

    def test_cone_nose_area(self, rocket):
        """Cone nose is a triangle in side view."""
        areas = calculate_projected_area(rocket)

        assert np.isclose(areas.nose_area, 0.5 * 0.04 * 0.1)


class TestVolume:
    """Test volume calculations."""

    def test_volumes(self, rocket):
        """Body cylinder plus cone volume."""
        volumes = calculate_volume(rocket)
        base = np.pi * 0.02 ** 2

        assert np.isclose(volumes.body_volume, base * 0.4)
        assert np.isclose(volumes.nose_volume, base * 0.1 / 3)
        assert np.isclose(volumes.total_volume, volumes.body_volume + volumes.nose_volume)

    def test_ogive_holds_more_than_cone(self, rocket):
        """Ogive nose is fuller than a cone of the same length."""
        cone = calculate_volume(rocket)
        ogive = calculate_volume(rocket.replace(nose_shape='ogive'))

        assert ogive.nose_volume > cone.nose_volume


class TestCenterOfPressure:
    """Test center of pressure and aerodynamic center."""

    def test_components_ordered_along_body(self, rocket):
        """Nose CP ahead of body CP ahead of fin CP."""
        centers = calculate_center_of_pressure(rocket)

        assert centers.nose_cp < centers.body_cp < centers.fin_cp
        assert centers.fin_cp < rocket.total_length

    def test_fin_moves_cp_aft(self, rocket):
        """Fins pull the overall CP behind the nose and body CP."""
        centers = calculate_center_of_pressure(rocket)

        assert centers.center_of_pressure > centers.fore_body_cp

    def test_reference_rocket_values(self, rocket):
        """Reference rocket CP and AC."""
        centers = calculate_center_of_pressure(rocket)
        ac = calculate_aerodynamic_center(rocket)

        assert centers.center_of_pressure == pytest.approx(327.2, abs=0.5)
        assert ac == pytest.approx(387.6, abs=0.5)

    def test_stability_cp_inside_rocket(self, rocket):
        """Stability CP lies between the nose tip and the tail."""
        cp = calculate_stability_center_of_pressure(rocket)

        assert 0 < cp < rocket.total_length


class TestStaticMargin:
    """Test static margin."""

    def test_positive_for_stable_preset(self, rocket):
        """CP behind CG gives a positive standard margin."""
        margins = calculate_static_margin(rocket)
        cp = calculate_center_of_pressure(rocket).center_of_pressure

        assert cp > rocket.center_of_gravity
        assert margins.standard > 0
        assert margins.standard == pytest.approx(1.93, abs=0.01)

    def test_cg_behind_cp_is_negative(self, rocket):
        """Moving the CG behind the CP makes the margin negative."""
        margins = calculate_static_margin(rocket.replace(center_of_gravity=450.0))

        assert margins.standard < 0


class TestFinSpeeds:
    """Test fin divergence and flutter speeds."""

    def test_divergence_within_range(self, rocket):
        low, high = DIVERGENCE_SPEED_RANGE
        speed = calculate_fin_divergence_speed(rocket)

        assert low <= speed <= high

    def test_flutter_within_range(self, rocket):
        low, high = FLUTTER_SPEED_RANGE
        speed = calculate_fin_flutter_speed(rocket)

        assert low <= speed <= high

    @pytest.mark.parametrize("thickness", [0.0, 1e-6])
    def test_near_zero_thickness_stays_in_range(self, rocket, thickness):
        """Degenerate fin thickness never produces NaN or out-of-range speeds."""
        thin = rocket.replace(fin_thickness=thickness)
        divergence = calculate_fin_divergence_speed(thin)
        flutter = calculate_fin_flutter_speed(thin)

        assert np.isfinite(divergence) and np.isfinite(flutter)
        assert DIVERGENCE_SPEED_RANGE[0] <= divergence <= DIVERGENCE_SPEED_RANGE[1]
        assert FLUTTER_SPEED_RANGE[0] <= flutter <= FLUTTER_SPEED_RANGE[1]

    def test_stiffer_material_diverges_later(self, rocket):
        """Fiberglass fins resist divergence better than balsa."""
        balsa = calculate_fin_divergence_speed(rocket)
        fiberglass = calculate_fin_divergence_speed(rocket.replace(fin_material='fiberglass'))

        assert fiberglass >= balsa


class TestAerodynamicProfile:
    """Test the combined aerodynamic profile."""

    def test_profile_is_idempotent(self, rocket):
        """Same parameters give identical results."""
        assert compute_aerodynamic_profile(rocket) == compute_aerodynamic_profile(rocket)

    def test_profile_matches_individual_functions(self, rocket):
        profile = compute_aerodynamic_profile(rocket)

        assert profile.is_valid
        assert profile.errors == ()
        assert np.isclose(profile.aerodynamic_center, calculate_aerodynamic_center(rocket))
        assert np.isclose(profile.side_area, calculate_projected_area(rocket).side_area)

    def test_invalid_geometry_gives_zeroed_profile(self, rocket):
        """Zero body width is reported, not raised."""
        profile = compute_aerodynamic_profile(rocket.replace(body_width=0.0))

        assert not profile.is_valid
        assert any('body_width' in error for error in profile.errors)
        assert profile.side_area == 0.0
        assert profile.center_of_pressure == 0.0
        assert profile.standard_static_margin == 0.0

    def test_missing_fields_are_invalid(self):
        """Missing numeric fields in a dictionary make the profile invalid."""
        params = RocketParameters.from_dict({'noseShape': 'cone', 'finCount': 4})
        profile = compute_aerodynamic_profile(params)

        assert not profile.is_valid
        assert calculate_projected_area(params).side_area == 0.0

    def test_unsupported_fin_count(self):
        with pytest.raises(ValueError):
            fin_correction(5)


class TestReferenceValues:
    """
    Hand-computed figures for the reference rocket with three and four fins.

    Cone nose 100 mm, body 400 x 40 mm, fins h=60 b=80 t=40 sweep=20 mm,
    2 mm balsa, CG 250 mm.
    """

    @pytest.fixture
    def four(self):
        return example_rocket(fin_count=4)

    @pytest.fixture
    def three(self):
        return example_rocket(fin_count=3)

    def test_fin_corrections(self):
        three = fin_correction(3)
        four = fin_correction(4)

        assert three.side_factor == pytest.approx(0.866)
        assert three.area_side_factor == pytest.approx(0.865)
        assert three.normal_force_factor == 12.0
        assert four.side_factor == four.area_side_factor == 1.0
        assert four.normal_force_factor == 16.0

    def test_four_fin_areas(self, four):
        areas = calculate_projected_area(four)

        assert areas.frontal_area == pytest.approx(0.00130464, rel=1e-5)
        assert areas.fin_area == pytest.approx(0.0036)
        assert areas.total_fin_area == pytest.approx(0.0072)
        assert areas.side_area == pytest.approx(0.0252)

    def test_three_fin_areas(self, three):
        """Foreshortened trapezoid minus the strip hidden by the body."""
        areas = calculate_projected_area(three)

        assert areas.fin_area == pytest.approx(0.003114 - 0.000210384)
        assert areas.total_fin_area == pytest.approx(0.005807232)
        assert areas.side_area == pytest.approx(0.023807232)

    def test_four_fin_centers(self, four):
        centers = calculate_center_of_pressure(four)

        assert centers.nose_cp == pytest.approx(66.6)
        assert centers.body_cp == pytest.approx(300.0)
        assert centers.fin_cp == pytest.approx(460.0)
        assert centers.center_of_pressure == pytest.approx(327.1905, abs=1e-3)
        assert centers.fore_body_cp == pytest.approx(274.0667, abs=1e-3)

    def test_three_fin_centers(self, three):
        """The fin CP does not depend on the fin count, only its weight does."""
        centers = calculate_center_of_pressure(three)

        assert centers.fin_cp == pytest.approx(460.0)
        assert centers.center_of_pressure == pytest.approx(319.4209, abs=1e-3)

    def test_stability_center_of_pressure(self, four, three):
        assert calculate_stability_center_of_pressure(four) == pytest.approx(417.547, abs=0.01)
        assert calculate_stability_center_of_pressure(three) == pytest.approx(409.413, abs=0.01)

    def test_aerodynamic_center(self, four, three):
        assert calculate_aerodynamic_center(four) == pytest.approx(387.605, abs=0.05)
        assert calculate_aerodynamic_center(three) == pytest.approx(354.478, abs=0.05)

    def test_static_margins(self, four, three):
        margins_4 = calculate_static_margin(four)
        margins_3 = calculate_static_margin(three)

        assert margins_4.standard == pytest.approx(1.92976, abs=1e-4)
        assert margins_4.stability == pytest.approx(4.1887, abs=1e-3)
        assert margins_3.standard == pytest.approx(1.73552, abs=1e-4)
        assert margins_3.stability == pytest.approx(3.9853, abs=1e-3)

    @pytest.mark.parametrize("fin_count", [3, 4])
    def test_divergence_speed(self, fin_count):
        rocket = example_rocket(fin_count=fin_count)

        assert calculate_fin_divergence_speed(rocket) == pytest.approx(74.47, abs=0.05)
        assert calculate_fin_divergence_speed(rocket.replace(fin_material='fiberglass')) == 300.0
        assert calculate_fin_divergence_speed(rocket.replace(fin_thickness=0.0)) == 20.0

    @pytest.mark.parametrize("fin_count", [3, 4])
    def test_flutter_speed(self, fin_count):
        """Balsa fins flutter far above the display cap; zero thickness uses the length fallback."""
        rocket = example_rocket(fin_count=fin_count)

        assert calculate_fin_flutter_speed(rocket) == 400.0
        assert calculate_fin_flutter_speed(rocket.replace(fin_thickness=0.0)) == pytest.approx(100.0)
