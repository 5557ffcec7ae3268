"""
Simulation output containers.

A run produces an append-only sequence of FlightSample records plus run
summaries (maxima, key events, stability verdict) and the aerodynamic
profile used for the run.
"""

import numpy as np
import pandas as pd
from dataclasses import dataclass, asdict, fields
from typing import Dict, List, Tuple

try:
    from .state import FlightSample, KeyPoint, SimulationState
    from .geometry import AerodynamicProfile
    from .options import SimulationConfig
except ImportError:
    from state import FlightSample, KeyPoint, SimulationState
    from geometry import AerodynamicProfile
    from options import SimulationConfig


@dataclass(frozen=True)
class KeyPoints:
    """Flight events. Events that never happened stay at time 0."""
    thrust_end: KeyPoint = KeyPoint()
    max_height: KeyPoint = KeyPoint()
    parachute_ejection: KeyPoint = KeyPoint()
    parachute_active: KeyPoint = KeyPoint()


@dataclass(frozen=True)
class AngleStability:
    """
    Attitude stability verdict.

    Attributes
    ----------
    max_angle_change : float
        Largest attitude change per response interval between burnout
        and parachute ejection (deg, signed)
    is_angle_stable_ok : bool
        False if that change ever exceeded the threshold
    threshold_deg : float
        Threshold used
    """
    max_angle_change: float
    is_angle_stable_ok: bool
    threshold_deg: float


@dataclass(frozen=True)
class FlightSummary:
    """Run-level aggregates."""
    max_height: float = 0.0          # m
    max_speed: float = 0.0           # m/s
    max_distance: float = 0.0        # m, horizontal
    max_fin_deflection: float = 0.0  # mm
    flight_time: float = 0.0         # s, time of the last sample
    degraded_torque_steps: int = 0   # Steps whose torque fell back to zero


@dataclass(frozen=True)
class CalculationSummary:
    """Rounded aerodynamic figures for display."""
    aerodynamic_center: int
    pressure_center: int
    stability_center_of_pressure: int
    standard_static_margin: float
    stability_static_margin: float
    fin_divergence_speed: int
    fin_flutter_speed: int

    @classmethod
    def from_profile(cls, profile: AerodynamicProfile) -> 'CalculationSummary':
        return cls(
            aerodynamic_center=int(round(profile.aerodynamic_center)),
            pressure_center=int(round(profile.center_of_pressure)),
            stability_center_of_pressure=int(round(profile.stability_center_of_pressure)),
            standard_static_margin=round(profile.standard_static_margin, 2),
            stability_static_margin=round(profile.stability_static_margin, 2),
            fin_divergence_speed=int(round(profile.fin_divergence_speed)),
            fin_flutter_speed=int(round(profile.fin_flutter_speed)),
        )


@dataclass(frozen=True)
class FlightResult:
    """
    Complete output of one simulation run.

    Attributes
    ----------
    samples : tuple of FlightSample
        One record per integration step, increasing in time
    summary : FlightSummary
        Maxima and counters
    key_points : KeyPoints
        Thrust end, apogee, ejection, full deployment
    angle_stability : AngleStability
        Stability verdict
    profile : AerodynamicProfile
        Aerodynamic profile of the rocket
    calculations : CalculationSummary
        Rounded profile figures for display
    config : SimulationConfig
        Resolved options used for the run
    """
    samples: Tuple[FlightSample, ...]
    summary: FlightSummary
    key_points: KeyPoints
    angle_stability: AngleStability
    profile: AerodynamicProfile
    calculations: CalculationSummary
    config: SimulationConfig

    @property
    def max_height(self) -> float:
        return self.summary.max_height

    @property
    def max_speed(self) -> float:
        return self.summary.max_speed

    @property
    def max_distance(self) -> float:
        return self.summary.max_distance

    @property
    def max_fin_deflection(self) -> float:
        return self.summary.max_fin_deflection

    @property
    def is_angle_stable_ok(self) -> bool:
        return self.angle_stability.is_angle_stable_ok

    def to_arrays(self) -> Dict[str, np.ndarray]:
        """Time histories as numpy arrays keyed by FlightSample field name."""
        names = [f.name for f in fields(FlightSample)]
        return {name: np.array([getattr(s, name) for s in self.samples]) for name in names}

    def to_dataframe(self) -> pd.DataFrame:
        """Time histories as a pandas DataFrame (one row per sample)."""
        return pd.DataFrame([asdict(s) for s in self.samples])


class FlightRecorder:
    """
    Append-only sample log with running maxima and key points.

    Local to one run.
    """

    def __init__(self):
        self._samples: List[FlightSample] = []
        self.max_height = 0.0
        self.max_speed = 0.0
        self.max_distance = 0.0
        self.max_fin_deflection = 0.0
        self.degraded_torque_steps = 0
        self.thrust_end = KeyPoint()
        self.max_height_point = KeyPoint()
        self.parachute_ejection = KeyPoint()
        self.parachute_active = KeyPoint()

    def __len__(self):
        return len(self._samples)

    def record(self, sample: FlightSample):
        """Append a sample and update maxima."""
        if self._samples and sample.time <= self._samples[-1].time:
            raise ValueError("Samples must be recorded in increasing time order")
        self._samples.append(sample)

        if sample.y > self.max_height:
            self.max_height = sample.y
            self.max_height_point = KeyPoint(sample.time, sample.y, sample.vy)

        self.max_speed = max(self.max_speed, sample.speed)
        self.max_distance = max(self.max_distance, abs(sample.x))
        self.max_fin_deflection = max(self.max_fin_deflection, sample.fin_deflection)

    def finalize(self, state: SimulationState, profile: AerodynamicProfile,
                 config: SimulationConfig) -> FlightResult:
        """Freeze the log into a FlightResult."""
        samples = tuple(self._samples)
        return FlightResult(
            samples=samples,
            summary=FlightSummary(
                max_height=self.max_height,
                max_speed=self.max_speed,
                max_distance=self.max_distance,
                max_fin_deflection=self.max_fin_deflection,
                flight_time=samples[-1].time if samples else 0.0,
                degraded_torque_steps=self.degraded_torque_steps,
            ),
            key_points=KeyPoints(
                thrust_end=self.thrust_end,
                max_height=self.max_height_point,
                parachute_ejection=self.parachute_ejection,
                parachute_active=self.parachute_active,
            ),
            angle_stability=AngleStability(
                max_angle_change=state.max_angle_change,
                is_angle_stable_ok=state.is_angle_stable,
                threshold_deg=config.stability_threshold_deg,
            ),
            profile=profile,
            calculations=CalculationSummary.from_profile(profile),
            config=config,
        )
