"""
Fin bending under aerodynamic load.

Each fin is treated as a cantilever beam of rectangular section (mean
chord x thickness) carrying a uniform pressure load:

    delta = w * L**4 * cos(sweep) / (8 * E * I) / (1 - taper)

The result is reported in millimeters and capped at 15 mm. The cap is
also returned whenever the computation degenerates, so 15 reads as
"15 mm or more / unsafe".
"""

import logging
import numpy as np
from dataclasses import dataclass

try:
    from .parameters import RocketParameters
    from .catalog import AIR_DENSITY, FinMaterial
except ImportError:
    from parameters import RocketParameters
    from catalog import AIR_DENSITY, FinMaterial

logger = logging.getLogger(__name__)

MAX_DEFLECTION_MM = 15.0
MIN_REPORTED_DEFLECTION_MM = 0.01

FLAT_PLATE_CD = 1.28
MAX_LOAD_VELOCITY = 300.0          # m/s
TAPER_LIMIT = 0.9
MIN_SECOND_MOMENT = 1e-12          # m^4
MIN_LOAD_SPAN = 0.001              # m


@dataclass(frozen=True)
class FinDeflection:
    """
    Fin deflection result.

    Attributes
    ----------
    value_mm : float
        Tip deflection (mm), capped at 15
    is_degenerate : bool
        True when the calculation failed and the cap was substituted
    """
    value_mm: float
    is_degenerate: bool = False

    @property
    def exceeds_limit(self) -> bool:
        return self.value_mm >= MAX_DEFLECTION_MM


def compute_fin_deflection(velocity: float, material: FinMaterial,
                           params: RocketParameters) -> FinDeflection:
    """
    Fin tip deflection at a given airspeed.

    Parameters
    ----------
    velocity : float
        Airspeed (m/s)
    material : FinMaterial
        Fin material (uses Young's modulus E)
    params : RocketParameters
        Fin geometry (mm)

    Returns
    -------
    FinDeflection
        0 at rest, non-decreasing in speed up to the 15 mm cap
    """
    if abs(velocity) < 0.001:
        return FinDeflection(0.0)

    speed = min(velocity, MAX_LOAD_VELOCITY)

    try:
        height = params.fin_height * 0.001
        base = params.fin_base_width * 0.001
        tip = params.fin_tip_width * 0.001
        sweep = params.fin_sweep_length * 0.001
        thickness = params.fin_thickness * 0.001

        fin_area = (base + tip) * height / 2

        taper = 0.0
        if params.fin_height > 0:
            taper = float(np.clip((base - tip) / height, -TAPER_LIMIT, TAPER_LIMIT))

        sweep_angle = np.arctan((sweep + 0.5 * tip - 0.5 * base) * np.pi / height)

        mean_chord = (base + tip) / 2
        second_moment = max(mean_chord * thickness ** 3 / 12, MIN_SECOND_MOMENT)

        load = 0.5 * AIR_DENSITY * speed ** 2 * FLAT_PLATE_CD * fin_area
        load_per_span = load / max(MIN_LOAD_SPAN, height)

        deflection_m = (load_per_span * height ** 4 * np.cos(sweep_angle)
                        / (8 * material.E * second_moment)) / (1 - taper)
        deflection = float(deflection_m * 1000)
    except (ZeroDivisionError, FloatingPointError, OverflowError, ValueError, TypeError) as exc:
        logger.debug("Fin deflection failed (%s), reporting limit", exc)
        return FinDeflection(MAX_DEFLECTION_MM, is_degenerate=True)

    if not np.isfinite(deflection):
        logger.debug("Fin deflection not finite, reporting limit")
        return FinDeflection(MAX_DEFLECTION_MM, is_degenerate=True)

    if abs(deflection) > MAX_DEFLECTION_MM:
        return FinDeflection(MAX_DEFLECTION_MM)

    if abs(deflection) < MIN_REPORTED_DEFLECTION_MM:
        return FinDeflection(deflection)

    return FinDeflection(max(MIN_REPORTED_DEFLECTION_MM, abs(deflection)))


def calculate_fin_deflection(velocity: float, material: FinMaterial,
                             params: RocketParameters) -> float:
    """Fin tip deflection (mm); the 15 mm cap doubles as the failure value."""
    return compute_fin_deflection(velocity, material, params).value_mm
