"""
Rocket geometry and aerodynamic coefficients.

Computes, from static rocket geometry:
- Projected areas (frontal, side, fins) and volumes
- Centers of pressure (component, overall, stability-specific)
- Aerodynamic center from a simplified wing-theory estimate
- Static margins
- Fin divergence and flutter speeds

Inputs are RocketParameters in millimeters. Areas and volumes are
returned in SI units; positions along the body stay in millimeters from
the nose tip. The empirical constants are part of the model and are
reproduced as-is rather than derived.
"""

import logging
import numpy as np
from dataclasses import dataclass, asdict
from typing import Any, Dict, Tuple

try:
    from .parameters import RocketParameters, FinCorrection, fin_correction, mm_to_m
    from .catalog import AIR_DENSITY, get_nose_profile, get_fin_material
except ImportError:
    from parameters import RocketParameters, FinCorrection, fin_correction, mm_to_m
    from catalog import AIR_DENSITY, get_nose_profile, get_fin_material

logger = logging.getLogger(__name__)

# Display ranges for the fin structural speeds (m/s)
DIVERGENCE_SPEED_RANGE = (20.0, 300.0)
FLUTTER_SPEED_RANGE = (30.0, 400.0)

# Fin thickness contribution to the frontal area (mm² -> m², empirical)
FIN_FRONTAL_AREA_FACTOR = 4e-7

# Side-view fin/body overlap coefficient (3-fin layout)
FIN_OVERLAP_COEFFICIENT = 0.078

# Flutter model constants
FLUTTER_EPSILON = 0.25
FLUTTER_SPECIFIC_HEAT_TERM = 0.221
SEA_LEVEL_PRESSURE = 101325.0  # Pa
SPEED_OF_SOUND = 343.0         # m/s

_ARITHMETIC_ERRORS = (ZeroDivisionError, FloatingPointError, OverflowError, ValueError, TypeError)


@dataclass(frozen=True)
class ProjectedAreas:
    """Projected areas (m²)."""
    frontal_area: float
    side_area: float
    nose_area: float
    fin_area: float        # One fin, side view
    total_fin_area: float  # Two fins' worth, for 3 and 4 fins alike
    angled_area: float


@dataclass(frozen=True)
class Volumes:
    """Volumes (m³)."""
    nose_volume: float
    body_volume: float
    total_volume: float


@dataclass(frozen=True)
class PressureCenters:
    """Center-of-pressure positions (mm from nose tip)."""
    nose_cp: float
    body_cp: float
    fin_cp: float
    center_of_pressure: float
    fore_body_cp: float  # Nose and body only


@dataclass(frozen=True)
class StaticMargins:
    """Static margins in body diameters."""
    standard: float
    stability: float


@dataclass(frozen=True)
class AerodynamicProfile:
    """
    Derived aerodynamic description of a rocket.

    Computed once per RocketParameters. When the input geometry is
    invalid every number is zero, ``is_valid`` is False and ``errors``
    lists the offending fields.
    """
    frontal_area: float = 0.0
    side_area: float = 0.0
    nose_area: float = 0.0
    fin_area: float = 0.0
    total_fin_area: float = 0.0
    angled_area: float = 0.0
    nose_volume: float = 0.0
    body_volume: float = 0.0
    total_volume: float = 0.0
    nose_cp: float = 0.0
    body_cp: float = 0.0
    fin_cp: float = 0.0
    center_of_pressure: float = 0.0
    fore_body_cp: float = 0.0
    aerodynamic_center: float = 0.0
    stability_center_of_pressure: float = 0.0
    standard_static_margin: float = 0.0
    stability_static_margin: float = 0.0
    fin_divergence_speed: float = 0.0
    fin_flutter_speed: float = 0.0
    is_valid: bool = True
    errors: Tuple[str, ...] = ()

    @classmethod
    def invalid(cls, errors) -> 'AerodynamicProfile':
        """Zeroed profile flagged as invalid."""
        return cls(is_valid=False, errors=tuple(errors))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _fin_dimensions_m(params: RocketParameters):
    return (mm_to_m(params.fin_height), mm_to_m(params.fin_base_width),
            mm_to_m(params.fin_tip_width), mm_to_m(params.fin_sweep_length),
            mm_to_m(params.fin_thickness))


def _side_fin_area(params: RocketParameters, correction: FinCorrection) -> float:
    """
    Side-view area of one fin (m²).

    Trapezoid of span h, chords b and t. With three fins the span is
    foreshortened by the correction factor and the strip hidden behind
    the body is subtracted.
    """
    h, b, t, _, _ = _fin_dimensions_m(params)
    d = mm_to_m(params.body_width)
    k = correction.area_side_factor

    if not correction.subtracts_overlap:
        return h * k * (b + t) / 2

    overlap = (t - b) * b * FIN_OVERLAP_COEFFICIENT / h + b
    if params.fin_sweep_length + params.fin_tip_width >= params.fin_base_width:
        overlap -= t * d * FIN_OVERLAP_COEFFICIENT / h

    hidden_depth = d / 2 - d * k / 2
    return h * k * (b + t) / 2 - (overlap + b) * hidden_depth / 2


def calculate_projected_area(params: RocketParameters) -> ProjectedAreas:
    """
    Projected areas of the rocket.

    Parameters
    ----------
    params : RocketParameters
        Rocket geometry (mm)

    Returns
    -------
    ProjectedAreas
        Areas in m². All zero if the geometry is invalid.
    """
    errors = params.validate()
    if errors:
        logger.warning("calculate_projected_area: invalid geometry: %s", "; ".join(errors))
        return ProjectedAreas(0.0, 0.0, 0.0, 0.0, 0.0, 0.0)

    nose = get_nose_profile(params.nose_shape)
    correction = params.fin_geometry

    nose_height = mm_to_m(params.nose_height)
    body_height = mm_to_m(params.body_height)
    body_width = mm_to_m(params.body_width)
    radius = body_width / 2

    frontal_area = (np.pi * radius ** 2
                    + params.fin_height * params.fin_thickness * FIN_FRONTAL_AREA_FACTOR)

    body_area = body_width * body_height
    nose_area = nose.area_factor * body_width * nose_height

    fin_area = _side_fin_area(params, correction)
    total_fin_area = fin_area * 2  # Only two fins project in side view

    side_area = body_area + nose_area + total_fin_area
    angled_area = np.sqrt(frontal_area ** 2 + side_area ** 2)

    return ProjectedAreas(
        frontal_area=float(frontal_area),
        side_area=float(side_area),
        nose_area=float(nose_area),
        fin_area=float(fin_area),
        total_fin_area=float(total_fin_area),
        angled_area=float(angled_area),
    )


def calculate_volume(params: RocketParameters) -> Volumes:
    """Nose, body and total volume (m³). Fins are neglected."""
    errors = params.validate()
    if errors:
        logger.warning("calculate_volume: invalid geometry: %s", "; ".join(errors))
        return Volumes(0.0, 0.0, 0.0)

    nose = get_nose_profile(params.nose_shape)
    radius = mm_to_m(params.body_width) / 2
    base_area = np.pi * radius ** 2

    body_volume = base_area * mm_to_m(params.body_height)
    nose_volume = nose.volume_factor * base_area * mm_to_m(params.nose_height)

    return Volumes(
        nose_volume=float(nose_volume),
        body_volume=float(body_volume),
        total_volume=float(nose_volume + body_volume),
    )


def _fin_center_of_pressure(params: RocketParameters, correction: FinCorrection) -> float:
    """
    Fin CP from the nose tip (mm).

    The planform is split into two triangles (root and tip side) whose
    centroids are weighted by their areas.
    """
    h = params.fin_height * correction.side_factor
    b = params.fin_base_width
    t = params.fin_tip_width
    sweep = params.fin_sweep_length

    root_area = b * h / 2
    tip_area = t * h / 2
    root_centroid = (b + sweep) / 3
    tip_centroid = (b + sweep + (sweep + t)) / 3

    single_fin_cp = (root_centroid * root_area + tip_centroid * tip_area) / ((b + t) * h / 2)
    return params.nose_height + params.body_height - b + single_fin_cp


def calculate_center_of_pressure(params: RocketParameters) -> PressureCenters:
    """
    Component and overall centers of pressure (mm from nose tip).

    The overall CP is the side-area weighted average of nose, body and
    fin CPs.
    """
    areas = calculate_projected_area(params)
    if areas.side_area <= 0:
        return PressureCenters(0.0, 0.0, 0.0, 0.0, 0.0)

    nose = get_nose_profile(params.nose_shape)
    correction = params.fin_geometry

    nose_cp = params.nose_height * nose.cp_fraction
    body_cp = params.nose_height + params.body_height / 2
    fin_cp = _fin_center_of_pressure(params, correction)

    # m² -> mm²
    nose_area = areas.nose_area * 1e6
    fin_area = areas.total_fin_area * 1e6
    body_area = areas.side_area * 1e6 - nose_area - fin_area

    total_area = nose_area + body_area + fin_area
    center_of_pressure = (nose_cp * nose_area + body_cp * body_area + fin_cp * fin_area) / total_area

    fore_body_area = nose_area + body_area
    fore_body_cp = (nose_cp * nose_area + body_cp * body_area) / fore_body_area

    return PressureCenters(
        nose_cp=float(nose_cp),
        body_cp=float(body_cp),
        fin_cp=float(fin_cp),
        center_of_pressure=float(center_of_pressure),
        fore_body_cp=float(fore_body_cp),
    )


def calculate_aerodynamic_center(params: RocketParameters) -> float:
    """
    Aerodynamic center (mm from nose tip).

    The fin set is treated as a low aspect-ratio wing extended to the
    body axis. Its mean aerodynamic chord, lift-curve slope and a
    fuselage volume term locate the neutral point aft of the nose.

    Returns 0.0 for invalid geometry.
    """
    errors = params.validate()
    if errors:
        logger.warning("calculate_aerodynamic_center: invalid geometry: %s", "; ".join(errors))
        return 0.0

    k = params.fin_geometry.side_factor
    r = params.body_width / 2
    h = params.fin_height
    b = params.fin_base_width
    t = params.fin_tip_width
    sweep = params.fin_sweep_length

    semi_span = (r + h) * k

    # Root chord extrapolated to the body axis and taper ratio
    root_chord = ((b - t) / (h * k)) * semi_span + t
    taper = t / root_chord

    mean_chord = (2 * root_chord / 3) * (1 + taper + taper ** 2) / (1 + taper)
    mean_chord_station = semi_span * (1 + 2 * taper) / (3 * (1 + taper))

    wing_area = (t + root_chord) * semi_span
    total_volume_mm3 = calculate_volume(params).total_volume * 1e9
    fuselage_volume_ratio = total_volume_mm3 / (mean_chord * wing_area)

    aspect_ratio = (2 * semi_span) ** 2 / wing_area
    lift_slope = (3.14 * aspect_ratio * 0.5) * (1 - (r / (semi_span / 2)) ** 2) ** 2

    neutral_point = 0.25 - 2 * fuselage_volume_ratio / lift_slope

    body_sweep_offset = r * k * sweep / (h * k)
    mac_offset = mean_chord_station * (body_sweep_offset + sweep + t - root_chord) / semi_span

    xac = mean_chord - mac_offset - neutral_point * mean_chord
    return float(params.nose_height + params.body_height - xac)


def calculate_stability_center_of_pressure(params: RocketParameters) -> float:
    """
    Center of pressure for static stability checks (mm from nose tip).

    Weighted by normal-force coefficients: 2 for the nose and an
    interference-corrected fin coefficient whose base factor depends on
    the fin count.
    """
    errors = params.validate()
    if errors:
        logger.warning("calculate_stability_center_of_pressure: invalid geometry: %s",
                       "; ".join(errors))
        return 0.0

    nose = get_nose_profile(params.nose_shape)
    correction = params.fin_geometry
    h = params.fin_height
    b = params.fin_base_width
    t = params.fin_tip_width
    sweep = params.fin_sweep_length
    d = params.body_width

    mid_chord_line = np.sqrt((sweep + t / 2 - b / 2) ** 2 + h ** 2)
    nose_cp = params.nose_height * nose.cp_fraction

    interference = 1 + h / (h + d / 2)
    fin_base_cn = correction.normal_force_factor * (h / d) ** 2
    planform_term = 1 + np.sqrt(1 + (2 * mid_chord_line / (t + b)) ** 2)
    fin_cn = interference * fin_base_cn / planform_term

    fin_cp = ((params.nose_height + params.body_height - b)
              + (sweep / 3) * ((b + 2 * t) / (b + t))
              + ((b + t) - (b * t) / (b + t)) / 6)

    return float((2 * nose_cp + fin_cn * fin_cp) / (2 + fin_cn))


def calculate_static_margin(params: RocketParameters) -> StaticMargins:
    """
    Static margins (CP - CG) / body diameter.

    Positive means the CP is behind the CG (stable).
    """
    if params.validate():
        return StaticMargins(0.0, 0.0)

    cp = calculate_center_of_pressure(params).center_of_pressure
    stability_cp = calculate_stability_center_of_pressure(params)
    cg = params.center_of_gravity

    return StaticMargins(
        standard=float((cp - cg) / params.body_width),
        stability=float((stability_cp - cg) / params.body_width),
    )


def calculate_fin_divergence_speed(params: RocketParameters) -> float:
    """
    Fin torsional divergence speed (m/s), clamped to [20, 300].

    Degenerate geometry (zero span or chord) returns the lower bound.
    """
    low, high = DIVERGENCE_SPEED_RANGE
    material = get_fin_material(params.fin_material)

    try:
        h, b, t, sweep, thickness = _fin_dimensions_m(params)
        mean_chord = (b + t) / 2
        sweep_angle = np.arctan((sweep + 0.5 * t - 0.5 * b) * 3.14 / mean_chord)
        torsion_constant = 0.3333 * t * thickness ** 3
        lift_slope = (9 / 3.14) * np.cos(sweep_angle)

        with np.errstate(all='ignore'):
            speed = (3.14 / (2 * h)) * np.sqrt(
                2 * material.G * torsion_constant
                / (AIR_DENSITY * mean_chord ** 2 * 0.25 * lift_slope))
    except _ARITHMETIC_ERRORS:
        logger.debug("Fin divergence speed degenerate for %s", params)
        return low

    if not np.isfinite(speed):
        return low
    return float(np.clip(speed, low, high))


def calculate_fin_flutter_speed(params: RocketParameters) -> float:
    """
    Fin flutter speed (m/s), clamped to [30, 400].

    Uses the NACA TN 4197 style expression with an effective shear
    modulus from the 3/4-chord section. When the expression cannot be
    evaluated the speed falls back to 40 + 120 * rocket length (m).
    """
    low, high = FLUTTER_SPEED_RANGE
    material = get_fin_material(params.fin_material)

    try:
        h, b, t, _, thickness = _fin_dimensions_m(params)
        d = mm_to_m(params.body_width)
        root_chord = ((b - t) / h) * (d / 2 + h) + t
        aspect_ratio = (h + d / 2) / (root_chord * 0.5)
        chord_75 = root_chord * 0.75
        taper = t / root_chord

        polar_moment = chord_75 * thickness * (thickness ** 2 + chord_75 ** 2) / 12
        effective_shear = 6 * polar_moment * material.G / (chord_75 * thickness ** 3)

        with np.errstate(all='ignore'):
            speed = np.sqrt(
                3.14 * (thickness / chord_75) ** 3 * effective_shear
                / (12 * FLUTTER_EPSILON * (aspect_ratio ** 3 / (aspect_ratio + 2))
                   * (taper + 1) * FLUTTER_SPECIFIC_HEAT_TERM * SEA_LEVEL_PRESSURE)
            ) * SPEED_OF_SOUND
    except _ARITHMETIC_ERRORS:
        speed = np.nan

    if not np.isfinite(speed):
        logger.debug("Fin flutter speed degenerate, using length-based fallback")
        speed = 40 + mm_to_m(params.total_length) * 120

    return float(np.clip(speed, low, high))


def compute_aerodynamic_profile(params: RocketParameters) -> AerodynamicProfile:
    """
    Compute the full aerodynamic profile of a rocket.

    Parameters
    ----------
    params : RocketParameters
        Rocket geometry

    Returns
    -------
    AerodynamicProfile
        Derived quantities. Invalid geometry gives a zeroed profile with
        ``is_valid`` False; this function never raises for bad numbers.
    """
    errors = params.validate()
    if errors:
        logger.warning("Invalid rocket geometry, aerodynamic profile zeroed: %s", "; ".join(errors))
        return AerodynamicProfile.invalid(errors)

    areas = calculate_projected_area(params)
    volumes = calculate_volume(params)
    centers = calculate_center_of_pressure(params)
    margins = calculate_static_margin(params)

    return AerodynamicProfile(
        frontal_area=areas.frontal_area,
        side_area=areas.side_area,
        nose_area=areas.nose_area,
        fin_area=areas.fin_area,
        total_fin_area=areas.total_fin_area,
        angled_area=areas.angled_area,
        nose_volume=volumes.nose_volume,
        body_volume=volumes.body_volume,
        total_volume=volumes.total_volume,
        nose_cp=centers.nose_cp,
        body_cp=centers.body_cp,
        fin_cp=centers.fin_cp,
        center_of_pressure=centers.center_of_pressure,
        fore_body_cp=centers.fore_body_cp,
        aerodynamic_center=calculate_aerodynamic_center(params),
        stability_center_of_pressure=calculate_stability_center_of_pressure(params),
        standard_static_margin=margins.standard,
        stability_static_margin=margins.stability,
        fin_divergence_speed=calculate_fin_divergence_speed(params),
        fin_flutter_speed=calculate_fin_flutter_speed(params),
    )


if __name__ == "__main__":
    from rocketsim.core.parameters import example_rocket

    for count in (3, 4):
        profile = compute_aerodynamic_profile(example_rocket(fin_count=count))
        print(f"{count} fins:")
        print(f"  Side area:        {profile.side_area:.5f} m²")
        print(f"  CP:               {profile.center_of_pressure:.1f} mm")
        print(f"  AC:               {profile.aerodynamic_center:.1f} mm")
        print(f"  Stability CP:     {profile.stability_center_of_pressure:.1f} mm")
        print(f"  Static margin:    {profile.standard_static_margin:.2f} cal")
        print(f"  Divergence speed: {profile.fin_divergence_speed:.0f} m/s")
        print(f"  Flutter speed:    {profile.fin_flutter_speed:.0f} m/s")
