"""
Rocket parameter definitions.

Provides:
- RocketParameters: static geometry, mass and hardware selection for one run
- NoseShape enumeration
- Fin-count geometry correction table
- Unit helpers (all interface lengths are millimeters, mass is grams)
"""

import math
import numpy as np
from dataclasses import dataclass, fields, asdict
from enum import Enum
from typing import Any, Dict, List, Optional


def mm_to_m(value: float) -> float:
    """Convert millimeters to meters."""
    return value * 0.001


def g_to_kg(value: float) -> float:
    """Convert grams to kilograms."""
    return value * 0.001


class NoseShape(str, Enum):
    """Supported nose cone shapes."""
    CONE = 'cone'
    PARABOLA = 'parabola'
    OGIVE = 'ogive'


@dataclass(frozen=True)
class FinCorrection:
    """
    Geometry correction for a fin count.

    Attributes
    ----------
    fin_count : int
        Number of fins
    side_factor : float
        Foreshortening of fin height seen in side view, used for the fin
        center of pressure, aerodynamic center and fin moment. Four fins put
        two fins edge-on at full height; three fins at 120 degrees show two
        fins at sqrt(3)/2 of their height, taken as 1.732/2.
    area_side_factor : float
        The same foreshortening for the side-view fin area and the strip
        hidden by the body, taken as 1.73/2.
    normal_force_factor : float
        Fin normal-force coefficient multiplier used by the stability CP
    subtracts_overlap : bool
        Whether the side-view fin area loses the strip hidden by the body
    """
    fin_count: int
    side_factor: float
    area_side_factor: float
    normal_force_factor: float
    subtracts_overlap: bool


FIN_CORRECTIONS: Dict[int, FinCorrection] = {
    3: FinCorrection(fin_count=3, side_factor=1.732 / 2, area_side_factor=1.73 / 2,
                     normal_force_factor=12.0, subtracts_overlap=True),
    4: FinCorrection(fin_count=4, side_factor=1.0, area_side_factor=1.0,
                     normal_force_factor=16.0, subtracts_overlap=False),
}


def fin_correction(fin_count: int) -> FinCorrection:
    """
    Look up the geometry correction for a fin count.

    Raises
    ------
    ValueError
        If the fin count is not 3 or 4
    """
    try:
        return FIN_CORRECTIONS[int(fin_count)]
    except (KeyError, TypeError, ValueError):
        raise ValueError(f"Unsupported fin count: {fin_count!r} (expected 3 or 4)")


# UI field names accepted by RocketParameters.from_dict
_CAMEL_CASE_KEYS = {
    'noseShape': 'nose_shape',
    'noseHeight': 'nose_height',
    'bodyHeight': 'body_height',
    'bodyWidth': 'body_width',
    'finHeight': 'fin_height',
    'finBaseWidth': 'fin_base_width',
    'finTipWidth': 'fin_tip_width',
    'finSweepLength': 'fin_sweep_length',
    'finThickness': 'fin_thickness',
    'finMaterial': 'fin_material',
    'finCount': 'fin_count',
    'selectedMotor': 'motor',
    'selectedParachute': 'parachute',
    'centerOfGravity': 'center_of_gravity',
}

# Lengths that must be strictly positive for the geometry formulas
_POSITIVE_FIELDS = ('body_width', 'fin_height', 'fin_base_width')

_NUMERIC_FIELDS = (
    'nose_height', 'body_height', 'body_width',
    'fin_height', 'fin_base_width', 'fin_tip_width',
    'fin_sweep_length', 'fin_thickness',
    'weight', 'center_of_gravity',
)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if not isinstance(value, (int, float, np.integer, np.floating)):
        return False
    return math.isfinite(value)


@dataclass(frozen=True)
class RocketParameters:
    """
    Static rocket definition (immutable per simulation run).

    All lengths are millimeters measured from the nose tip where a
    position is implied. Mass is grams.

    Attributes
    ----------
    nose_shape : str
        'cone', 'parabola' or 'ogive'
    nose_height : float
        Nose cone length (mm)
    body_height : float
        Body tube length (mm)
    body_width : float
        Body diameter (mm)
    fin_height : float
        Fin span from body surface (mm)
    fin_base_width : float
        Fin root chord (mm)
    fin_tip_width : float
        Fin tip chord (mm)
    fin_sweep_length : float
        Leading-edge sweep distance from root to tip (mm)
    fin_thickness : float
        Fin thickness (mm)
    fin_material : str
        Fin material identifier (see catalog.FIN_MATERIALS)
    fin_count : int
        3 or 4
    motor : str
        Motor identifier "<class>-<delay>", e.g. "C6-5"
    parachute : str
        Parachute identifier "φ<diameter mm>", e.g. "φ300"
    weight : float
        Total mass (g)
    center_of_gravity : float
        CG position from nose tip (mm)
    """
    nose_shape: str = 'cone'
    nose_height: float = 100.0
    body_height: float = 400.0
    body_width: float = 40.0
    fin_height: float = 60.0
    fin_base_width: float = 80.0
    fin_tip_width: float = 40.0
    fin_sweep_length: float = 20.0
    fin_thickness: float = 2.0
    fin_material: str = 'balsa'
    fin_count: int = 4
    motor: str = 'C6-5'
    parachute: str = 'φ300'
    weight: float = 200.0
    center_of_gravity: float = 250.0

    @property
    def total_length(self) -> float:
        """Nose tip to tail (mm)."""
        return self.nose_height + self.body_height

    @property
    def fin_geometry(self) -> FinCorrection:
        """Fin-count correction for this configuration."""
        return fin_correction(self.fin_count)

    def validate(self) -> List[str]:
        """
        Check that the geometry can be fed to the aerodynamic formulas.

        Returns
        -------
        errors : list of str
            One message per offending field (empty when valid)
        """
        errors = []
        for name in _NUMERIC_FIELDS:
            value = getattr(self, name)
            if not _is_number(value):
                errors.append(f"{name} must be a finite number, got {value!r}")
            elif name in _POSITIVE_FIELDS and value <= 0:
                errors.append(f"{name} must be positive, got {value!r}")
            elif value < 0:
                errors.append(f"{name} must not be negative, got {value!r}")

        if self.nose_shape not in {shape.value for shape in NoseShape}:
            errors.append(f"nose_shape must be one of cone/parabola/ogive, got {self.nose_shape!r}")

        if self.fin_count not in FIN_CORRECTIONS:
            errors.append(f"fin_count must be 3 or 4, got {self.fin_count!r}")

        return errors

    @property
    def is_valid(self) -> bool:
        return not self.validate()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RocketParameters':
        """
        Build parameters from a dictionary.

        Accepts snake_case field names and the camelCase names used by
        the front end (``noseHeight``, ``selectedMotor``...). Missing
        numeric fields are set to None so that ``validate`` reports them.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = _CAMEL_CASE_KEYS.get(key, key)
            if name in known:
                kwargs[name] = value

        for name in _NUMERIC_FIELDS:
            kwargs.setdefault(name, None)

        if isinstance(kwargs.get('nose_shape'), NoseShape):
            kwargs['nose_shape'] = kwargs['nose_shape'].value

        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary (snake_case keys)."""
        return asdict(self)

    def replace(self, **changes: Any) -> 'RocketParameters':
        """Return a copy with some fields changed."""
        data = self.to_dict()
        data.update(changes)
        return RocketParameters(**data)


def example_rocket(fin_count: Optional[int] = None) -> RocketParameters:
    """
    Reference rocket: 40 mm body, cone nose, C6-5 motor, φ300 parachute.
    """
    params = RocketParameters()
    if fin_count is not None:
        params = params.replace(fin_count=fin_count)
    return params
