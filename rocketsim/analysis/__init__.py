"""
Analysis tools for simulated flights.

This module provides the attitude stability policy, launch angle sweeps
and display formatting helpers.
"""

from .stability import StabilityPolicy, window_angle_changes, sweep_launch_angles
from .formatting import format_fin_deflection, format_speed_value

__all__ = [
    'StabilityPolicy',
    'window_angle_changes',
    'sweep_launch_angles',
    'format_fin_deflection',
    'format_speed_value'
]
