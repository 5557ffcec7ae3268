"""
Altitude-dependent wind model.

Power-law boundary layer profile:

    V(h) = V_ref * (h / h_ref) ** alpha

with the reference height at a typical anemometer height (1.5 m). The
exponent alpha depends on terrain roughness: open water is flattest,
dense urban terrain steepest. Units: m, m/s.
"""

import numpy as np
from dataclasses import dataclass
from typing import Dict


REFERENCE_HEIGHT = 1.5      # m
MAX_WIND_MULTIPLIER = 3.0   # Cap on V(h) / V_ref


@dataclass(frozen=True)
class WindProfile:
    """Terrain category for the power-law wind profile."""
    name: str
    alpha: float


WIND_PROFILES: Dict[str, WindProfile] = {
    'uniform': WindProfile('uniform', alpha=0.0),
    'ocean': WindProfile('ocean', alpha=0.10),
    'open': WindProfile('open', alpha=0.14),
    'suburban': WindProfile('suburban', alpha=0.22),
    'urban': WindProfile('urban', alpha=0.33),
}


def get_wind_profile(name: str) -> WindProfile:
    """Look up a wind profile, raising ValueError for unknown names."""
    try:
        return WIND_PROFILES[name]
    except KeyError:
        raise ValueError(f"Unknown wind profile: {name!r}")


def wind_speed_at_height(base_wind_speed: float, height: float, profile: str = 'uniform') -> float:
    """
    Effective wind speed at a given height.

    Parameters
    ----------
    base_wind_speed : float
        Wind speed at the reference height (m/s, signed; the sign gives
        the direction)
    height : float
        Height above ground (m)
    profile : str
        Wind profile name (see WIND_PROFILES)

    Returns
    -------
    float
        Wind speed at height (m/s). At or below ground level this is the
        base wind speed exactly.
    """
    if height <= 0:
        return base_wind_speed

    alpha = get_wind_profile(profile).alpha
    if alpha == 0:
        return base_wind_speed

    multiplier = min((height / REFERENCE_HEIGHT) ** alpha, MAX_WIND_MULTIPLIER)
    return base_wind_speed * multiplier


class WindModel:
    """
    Wind field for one simulation run.

    Parameters
    ----------
    base_wind_speed : float
        Wind speed at the reference height (m/s, signed)
    profile : str
        Wind profile name
    """

    def __init__(self, base_wind_speed: float = 0.0, profile: str = 'uniform'):
        self.base_wind_speed = base_wind_speed
        self.profile: WindProfile = get_wind_profile(profile)

    def speed_at(self, height: float) -> float:
        """Wind speed at height (m/s)."""
        return wind_speed_at_height(self.base_wind_speed, height, self.profile.name)

    def profile_over(self, heights: np.ndarray) -> np.ndarray:
        """Wind speeds for an array of heights (m/s)."""
        return np.array([self.speed_at(h) for h in np.asarray(heights, dtype=float)])

    def __repr__(self):
        return (f"WindModel(base_wind_speed={self.base_wind_speed}, "
                f"profile='{self.profile.name}', alpha={self.profile.alpha})")


if __name__ == "__main__":
    heights = np.array([0.0, 1.5, 10.0, 50.0, 100.0, 500.0])
    for name in WIND_PROFILES:
        model = WindModel(4.0, name)
        speeds = model.profile_over(heights)
        print(f"{name:10s}: " + "  ".join(f"{v:5.2f}" for v in speeds))
