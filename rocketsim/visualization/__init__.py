"""
Visualization Module

Provides plotting capabilities for simulated rocket flights.
"""

from .plotting import (
    plot_flight_trajectory,
    plot_flight_states,
    plot_attitude_stability,
    setup_plotting_style
)

__all__ = [
    'plot_flight_trajectory',
    'plot_flight_states',
    'plot_attitude_stability',
    'setup_plotting_style'
]
