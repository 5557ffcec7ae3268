"""
Attitude stability analysis.

Provides:
- Windowed attitude change over one angular response interval
- Post-flight stability verdict with an adjustable threshold
- Launch angle sweeps tabulated with pandas
"""

import logging
import numpy as np
import pandas as pd
from dataclasses import dataclass
from typing import Iterable, Optional

from rocketsim.core.attitude import ANGLE_STEPS_PER_UPDATE
from rocketsim.core.integrator import FlightSimulator
from rocketsim.core.options import STABILITY_THRESHOLD_DEG, SimulationConfig
from rocketsim.core.parameters import RocketParameters
from rocketsim.core.results import AngleStability, FlightResult

logger = logging.getLogger(__name__)


def window_angle_changes(omega_degrees: np.ndarray, initial_degrees: float = 0.0,
                         window_steps: int = ANGLE_STEPS_PER_UPDATE) -> np.ndarray:
    """
    Summed attitude change over a trailing window of steps.

    Parameters
    ----------
    omega_degrees : ndarray
        Attitude history, one value per step (deg)
    initial_degrees : float
        Attitude before the first step (deg)
    window_steps : int
        Window length in steps

    Returns
    -------
    ndarray
        Same length as ``omega_degrees``; entry i is the sum of the
        per-step changes (each wrapped to [-180, 180)) over steps
        max(0, i - window_steps + 1) .. i
    """
    omega_degrees = np.asarray(omega_degrees, dtype=float)
    if omega_degrees.size == 0:
        return omega_degrees

    previous = np.concatenate(([initial_degrees], omega_degrees[:-1]))
    deltas = (omega_degrees - previous + 180.0) % 360.0 - 180.0

    cumulative = np.concatenate(([0.0], np.cumsum(deltas)))
    idx = np.arange(1, len(deltas) + 1)
    start = np.maximum(idx - window_steps, 0)
    return cumulative[idx] - cumulative[start]


@dataclass
class StabilityPolicy:
    """
    Stability verdict from a recorded attitude history.

    The flight is judged from thrust burnout until parachute ejection;
    it is unstable if the attitude changes by more than ``threshold_deg``
    within any window of ``window_steps`` steps.

    Attributes
    ----------
    threshold_deg : float
        Allowed change per window (deg)
    window_steps : int
        Window length in steps (one angular response interval)
    """
    threshold_deg: float = STABILITY_THRESHOLD_DEG
    window_steps: int = ANGLE_STEPS_PER_UPDATE

    def judged_mask(self, result: FlightResult) -> np.ndarray:
        """Boolean mask of samples between burnout and parachute ejection."""
        arrays = result.to_arrays()
        if arrays['time'].size == 0:
            return np.zeros(0, dtype=bool)

        burnout = result.key_points.thrust_end.time
        after_burnout = arrays['time'] >= burnout
        if burnout == 0.0:
            # Burnout never happened
            after_burnout[:] = False
        return after_burnout & ~arrays['is_parachute_ejected'].astype(bool)

    def evaluate(self, result: FlightResult) -> AngleStability:
        """
        Judge a completed flight.

        Parameters
        ----------
        result : FlightResult
            Simulation output

        Returns
        -------
        AngleStability
            Largest windowed change inside the judged span and the verdict
        """
        arrays = result.to_arrays()
        if arrays['time'].size == 0:
            return AngleStability(0.0, True, self.threshold_deg)

        launch_angle = arrays['omega_degrees'][0] - arrays['angle_deviation_degrees'][0]
        windows = window_angle_changes(arrays['omega_degrees'], launch_angle, self.window_steps)

        judged = windows[self.judged_mask(result)]
        if judged.size == 0:
            return AngleStability(0.0, True, self.threshold_deg)

        worst = float(judged[np.argmax(np.abs(judged))])
        return AngleStability(
            max_angle_change=worst,
            is_angle_stable_ok=bool(abs(worst) <= self.threshold_deg),
            threshold_deg=self.threshold_deg,
        )


def sweep_launch_angles(params: RocketParameters,
                        launch_angles: Iterable[float],
                        wind_speed: float = 0.0,
                        wind_profile: str = 'uniform',
                        config: Optional[SimulationConfig] = None) -> pd.DataFrame:
    """
    Simulate the same rocket over several launch angles.

    Runs share no state; each angle is an independent flight.

    Parameters
    ----------
    params : RocketParameters
        Rocket definition
    launch_angles : iterable of float
        Launch angles from vertical (deg)
    wind_speed : float
        Base wind speed (m/s)
    wind_profile : str
        Wind profile name
    config : SimulationConfig, optional
        Feature switches

    Returns
    -------
    DataFrame
        One row per angle: launch_angle, max_height, max_distance,
        max_speed, max_fin_deflection, flight_time, max_angle_change,
        is_angle_stable_ok
    """
    simulator = FlightSimulator(params, config)

    rows = []
    for angle in launch_angles:
        result = simulator.run(angle, wind_speed, wind_profile)
        logger.debug("Launch angle %.1f deg: max height %.2f m", angle, result.max_height)
        rows.append({
            'launch_angle': float(angle),
            'max_height': result.max_height,
            'max_distance': result.max_distance,
            'max_speed': result.max_speed,
            'max_fin_deflection': result.max_fin_deflection,
            'flight_time': result.summary.flight_time,
            'max_angle_change': result.angle_stability.max_angle_change,
            'is_angle_stable_ok': result.is_angle_stable_ok,
        })

    return pd.DataFrame(rows, columns=['launch_angle', 'max_height', 'max_distance',
                                       'max_speed', 'max_fin_deflection', 'flight_time',
                                       'max_angle_change', 'is_angle_stable_ok'])
