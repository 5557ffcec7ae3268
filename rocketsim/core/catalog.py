"""
Hardware and environment catalog.

Motor thrust curves, nose drag coefficients, fin materials, parachutes
and physical constants used by the flight simulator.
"""

import re
import numpy as np
from dataclasses import dataclass
from typing import Dict, Tuple
from scipy.interpolate import interp1d

try:
    from .parameters import NoseShape, mm_to_m
except ImportError:
    from parameters import NoseShape, mm_to_m


# Physical constants (SI)
GRAVITY = 9.81             # m/s²
AIR_DENSITY = 1.225        # kg/m³ (sea level)
LAUNCH_RAIL_LENGTH = 1.0   # m

# Thrust samples are tabulated on the integrator time step
THRUST_SAMPLE_DT = 0.02    # s


@dataclass(frozen=True)
class NoseProfile:
    """Nose shape properties."""
    name: str
    cd: float           # Body drag coefficient for this nose
    cp_fraction: float  # CP position as fraction of nose height
    area_factor: float  # Side silhouette area / (diameter * height)
    volume_factor: float  # Volume / (pi r² h)


NOSE_SHAPES: Dict[str, NoseProfile] = {
    NoseShape.CONE.value: NoseProfile('cone', cd=0.45, cp_fraction=0.666,
                                      area_factor=0.5, volume_factor=1.0 / 3.0),
    NoseShape.PARABOLA.value: NoseProfile('parabola', cd=0.42, cp_fraction=0.614,
                                          area_factor=2.0 / 3.0, volume_factor=0.5),
    NoseShape.OGIVE.value: NoseProfile('ogive', cd=0.40, cp_fraction=0.575,
                                       area_factor=2.0 / 3.0, volume_factor=2.0 / 3.0),
}


@dataclass(frozen=True)
class FinMaterial:
    """Fin material elastic properties."""
    name: str
    G: float  # Shear modulus (Pa)
    E: float  # Young's modulus (Pa)


FIN_MATERIALS: Dict[str, FinMaterial] = {
    'balsa': FinMaterial('balsa', G=1.2e8, E=3.0e9),
    'basswood': FinMaterial('basswood', G=7.0e8, E=1.0e10),
    'plywood': FinMaterial('plywood', G=6.0e8, E=7.0e9),
    'cardboard': FinMaterial('cardboard', G=4.0e8, E=2.0e9),
    'fiberglass': FinMaterial('fiberglass', G=3.0e9, E=1.7e10),
}


# Thrust curve breakpoints (time s, thrust N)
MOTOR_THRUST_CURVES: Dict[str, Tuple[Tuple[float, float], ...]] = {
    'A8': ((0.0, 0.0), (0.02, 3.0), (0.05, 5.5), (0.15, 9.0), (0.21, 10.7),
           (0.26, 7.0), (0.33, 3.5), (0.50, 2.8), (0.70, 2.2), (0.74, 0.0)),
    'B6': ((0.0, 0.0), (0.02, 3.0), (0.05, 6.0), (0.12, 9.5), (0.21, 12.1),
           (0.28, 6.5), (0.36, 4.9), (0.60, 4.6), (0.82, 4.3), (0.86, 0.0)),
    'C6': ((0.0, 0.0), (0.02, 3.0), (0.05, 6.0), (0.12, 10.0), (0.21, 14.1),
           (0.28, 7.5), (0.36, 5.3), (0.60, 4.8), (1.20, 4.6), (1.80, 4.5),
           (1.86, 0.0)),
}

MOTORS = ('A8-3', 'A8-5', 'B6-4', 'B6-6', 'C6-3', 'C6-5', 'C6-7')

PARACHUTES = ('φ180', 'φ250', 'φ300', 'φ450', 'φ600')

_MOTOR_PATTERN = re.compile(r'^([A-Z]\d+)-(\d+)$')
_PARACHUTE_PATTERN = re.compile(r'^φ(\d+)$')


def _resample_thrust(curve: Tuple[Tuple[float, float], ...], dt: float) -> np.ndarray:
    """Sample a breakpoint curve at the midpoint of each time step."""
    t, thrust = np.array(curve).T
    n_samples = int(round(t[-1] / dt))
    curve_func = interp1d(t, thrust, kind='linear', bounds_error=False, fill_value=0.0)
    return curve_func((np.arange(n_samples) + 0.5) * dt)


@dataclass(frozen=True)
class Motor:
    """
    Model rocket motor.

    Attributes
    ----------
    designation : str
        Full identifier, e.g. 'C6-5'
    thrust_samples : np.ndarray
        Thrust (N) for each integrator step while burning
    ejection_delay : int
        Delay from burnout to parachute ejection (s)
    """
    designation: str
    thrust_samples: np.ndarray
    ejection_delay: int

    @property
    def burn_time(self) -> float:
        """Thrust duration (s)."""
        return len(self.thrust_samples) * THRUST_SAMPLE_DT

    @property
    def total_impulse(self) -> float:
        """Total impulse (N·s)."""
        return float(np.sum(self.thrust_samples) * THRUST_SAMPLE_DT)

    def thrust_at_step(self, step: int) -> float:
        """Thrust (N) during integrator step ``step``."""
        index = min(step, len(self.thrust_samples) - 1)
        return float(self.thrust_samples[index])


def get_motor(designation: str) -> Motor:
    """
    Look up a motor by identifier.

    The ejection delay is read from the identifier suffix ("C6-5" -> 5 s).

    Raises
    ------
    ValueError
        If the identifier is malformed or the motor class is unknown
    """
    match = _MOTOR_PATTERN.match(str(designation))
    if match is None:
        raise ValueError(f"Malformed motor identifier: {designation!r} (expected e.g. 'C6-5')")

    motor_class, delay = match.groups()
    if motor_class not in MOTOR_THRUST_CURVES:
        raise ValueError(f"Unknown motor class: {motor_class!r}")

    return Motor(
        designation=designation,
        thrust_samples=_resample_thrust(MOTOR_THRUST_CURVES[motor_class], THRUST_SAMPLE_DT),
        ejection_delay=int(delay),
    )


def parachute_diameter(identifier: str) -> float:
    """
    Parachute diameter in meters from its identifier ("φ300" -> 0.3).

    Raises
    ------
    ValueError
        If the identifier is malformed
    """
    match = _PARACHUTE_PATTERN.match(str(identifier))
    if match is None:
        raise ValueError(f"Malformed parachute identifier: {identifier!r} (expected e.g. 'φ300')")
    return mm_to_m(int(match.group(1)))


def get_nose_profile(shape: str) -> NoseProfile:
    """Look up nose properties, raising ValueError for unknown shapes."""
    try:
        return NOSE_SHAPES[shape]
    except KeyError:
        raise ValueError(f"Unknown nose shape: {shape!r}")


def get_fin_material(name: str) -> FinMaterial:
    """Look up a fin material, raising ValueError for unknown names."""
    try:
        return FIN_MATERIALS[name]
    except KeyError:
        raise ValueError(f"Unknown fin material: {name!r}")


if __name__ == "__main__":
    for name in MOTORS:
        motor = get_motor(name)
        print(f"{name}: burn {motor.burn_time:.2f} s, "
              f"impulse {motor.total_impulse:.2f} N·s, "
              f"peak {motor.thrust_samples.max():.1f} N, "
              f"delay {motor.ejection_delay} s")
