"""
Simulation options.

Feature switches for the flight integrator. Each run receives a
SimulationConfig; fields left as None take the module defaults below.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


# Module defaults
PHYSICAL_ATTITUDE_CONTROL = True    # Torque-driven attitude nudges every step
ENHANCED_ATTITUDE_CONTROL = False   # Weathercocking toward the velocity vector
WIND_ANGLE_LIMITATION = False       # Keep upwind weathercocking within ±90° of the wind axis
STABILITY_THRESHOLD_DEG = 10.0      # Allowed attitude change per response interval

_CAMEL_CASE_KEYS = {
    'physicalAttitudeControl': 'physical_attitude_control',
    'enhancedAttitudeControl': 'enhanced_attitude_control',
    'windAngleLimitation': 'wind_angle_limitation',
    'stabilityThresholdDeg': 'stability_threshold_deg',
}


@dataclass(frozen=True)
class SimulationConfig:
    """
    Per-run simulation options.

    Attributes
    ----------
    enhanced_attitude_control : bool, optional
        Blend attitude toward the flight path after leaving the rail
    wind_angle_limitation : bool, optional
        Limit the upwind weathercocking target to ±90° from the wind axis
    physical_attitude_control : bool, optional
        Apply torque-driven attitude changes every step
    stability_threshold_deg : float, optional
        Attitude change per response interval above which the flight is
        judged unstable
    """
    enhanced_attitude_control: Optional[bool] = None
    wind_angle_limitation: Optional[bool] = None
    physical_attitude_control: Optional[bool] = None
    stability_threshold_deg: Optional[float] = None

    def resolved(self) -> 'SimulationConfig':
        """Copy with every unset field replaced by its module default."""
        return SimulationConfig(
            enhanced_attitude_control=(ENHANCED_ATTITUDE_CONTROL
                                       if self.enhanced_attitude_control is None
                                       else bool(self.enhanced_attitude_control)),
            wind_angle_limitation=(WIND_ANGLE_LIMITATION
                                   if self.wind_angle_limitation is None
                                   else bool(self.wind_angle_limitation)),
            physical_attitude_control=(PHYSICAL_ATTITUDE_CONTROL
                                       if self.physical_attitude_control is None
                                       else bool(self.physical_attitude_control)),
            stability_threshold_deg=(STABILITY_THRESHOLD_DEG
                                     if self.stability_threshold_deg is None
                                     else float(self.stability_threshold_deg)),
        )

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'SimulationConfig':
        """
        Build options from a dictionary.

        Accepts snake_case names and the camelCase names used by the
        front end (``enhancedAttitudeControl``, ``windAngleLimitation``).
        Unrecognized keys are ignored.
        """
        if not data:
            return cls()

        kwargs = {}
        for key, value in data.items():
            name = _CAMEL_CASE_KEYS.get(key, key)
            if name in cls.__dataclass_fields__:
                kwargs[name] = value
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
