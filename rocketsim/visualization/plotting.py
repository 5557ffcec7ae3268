"""
Standard Plotting Functions

Provides visualization of simulated rocket flights.
Includes the launch-plane trajectory, state histories and the attitude
stability window.
"""

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from typing import Optional, Tuple

from rocketsim.core.results import FlightResult


def _mark_key_points(ax, result: FlightResult):
    """Vertical lines at burnout, apogee and parachute events."""
    events = [
        ('Burnout', result.key_points.thrust_end.time, 'orange'),
        ('Apogee', result.key_points.max_height.time, 'g'),
        ('Ejection', result.key_points.parachute_ejection.time, 'm'),
        ('Chute open', result.key_points.parachute_active.time, 'r'),
    ]
    for label, time, color in events:
        if time > 0:
            ax.axvline(time, color=color, linestyle='--', linewidth=1, alpha=0.7, label=label)


def plot_flight_trajectory(
    result: FlightResult,
    title: str = "Flight Trajectory",
    figsize: Tuple[float, float] = (8, 8),
    save_path: Optional[str] = None
) -> Figure:
    """
    Plot height against horizontal position in the launch plane.

    Parameters
    ----------
    result : FlightResult
        Simulation output
    title : str, optional
        Plot title
    figsize : Tuple[float, float], optional
        Figure size in inches
    save_path : Optional[str], optional
        Path to save figure (if None, figure is not saved)

    Returns
    -------
    Figure
        Matplotlib figure object
    """
    arrays = result.to_arrays()
    x = arrays['x']
    y = arrays['y']

    fig, ax = plt.subplots(figsize=figsize)

    powered = arrays['is_thrust_active'].astype(bool)
    chute = arrays['is_parachute_ejected'].astype(bool)
    coast = ~powered & ~chute

    ax.plot(x[powered], y[powered], 'r.', markersize=3, label='Powered')
    ax.plot(x[coast], y[coast], 'b.', markersize=3, label='Coast')
    ax.plot(x[chute], y[chute], 'g.', markersize=3, label='Parachute')

    apogee = result.key_points.max_height
    if apogee.height > 0:
        idx = int(np.argmax(y))
        ax.scatter(x[idx], y[idx], c='k', marker='^', s=80, zorder=5,
                   label=f'Apogee {apogee.height:.1f} m')

    ax.set_xlabel('Horizontal distance (m)', fontsize=11)
    ax.set_ylabel('Height (m)', fontsize=11)
    ax.set_title(title, fontsize=13, fontweight='bold')
    ax.legend(loc='best')
    ax.grid(True, alpha=0.3)
    ax.set_aspect('equal', adjustable='datalim')

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')

    return fig


def plot_flight_states(
    result: FlightResult,
    title: str = "Flight States vs Time",
    figsize: Tuple[float, float] = (12, 10),
    save_path: Optional[str] = None
) -> Figure:
    """
    Plot position, velocity, acceleration and attitude vs time.

    Parameters
    ----------
    result : FlightResult
        Simulation output
    title : str, optional
        Main plot title
    figsize : Tuple[float, float], optional
        Figure size in inches
    save_path : Optional[str], optional
        Path to save figure

    Returns
    -------
    Figure
        Matplotlib figure object
    """
    arrays = result.to_arrays()
    time = arrays['time']

    fig, axes = plt.subplots(4, 1, figsize=figsize, sharex=True)

    # Position
    axes[0].plot(time, arrays['y'], 'b-', label='Height', linewidth=1.5)
    axes[0].plot(time, arrays['x'], 'r-', label='Horizontal', linewidth=1.5)
    axes[0].set_ylabel('Position (m)', fontsize=11)
    axes[0].set_title('Position', fontsize=11, fontweight='bold')

    # Velocity
    axes[1].plot(time, arrays['vy'], 'b-', label='Vertical', linewidth=1.5)
    axes[1].plot(time, arrays['vx'], 'r-', label='Horizontal', linewidth=1.5)
    axes[1].plot(time, arrays['speed'], 'k--', label='Speed', linewidth=1.0)
    axes[1].set_ylabel('Velocity (m/s)', fontsize=11)
    axes[1].set_title('Velocity', fontsize=11, fontweight='bold')

    # Acceleration
    axes[2].plot(time, arrays['ay'], 'b-', label='Vertical', linewidth=1.5)
    axes[2].plot(time, arrays['ax'], 'r-', label='Horizontal', linewidth=1.5)
    axes[2].set_ylabel('Acceleration (m/s²)', fontsize=11)
    axes[2].set_title('Acceleration', fontsize=11, fontweight='bold')

    # Attitude
    axes[3].plot(time, arrays['omega_degrees'], 'b-', label='Attitude', linewidth=1.5)
    axes[3].set_ylabel('Angle (deg)', fontsize=11)
    axes[3].set_xlabel('Time (s)', fontsize=11)
    axes[3].set_title('Attitude from vertical', fontsize=11, fontweight='bold')

    for ax in axes:
        _mark_key_points(ax, result)
        ax.grid(True, alpha=0.3)
    for ax in axes[:3]:
        ax.legend(loc='best', ncol=3)

    fig.suptitle(title, fontsize=14, fontweight='bold')
    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')

    return fig


def plot_attitude_stability(
    result: FlightResult,
    title: str = "Attitude Stability",
    figsize: Tuple[float, float] = (12, 6),
    save_path: Optional[str] = None
) -> Figure:
    """
    Plot the windowed attitude change against the stability threshold.

    Parameters
    ----------
    result : FlightResult
        Simulation output
    title : str, optional
        Plot title
    figsize : Tuple[float, float], optional
        Figure size in inches
    save_path : Optional[str], optional
        Path to save figure

    Returns
    -------
    Figure
        Matplotlib figure object
    """
    arrays = result.to_arrays()
    time = arrays['time']
    threshold = result.angle_stability.threshold_deg

    fig, axes = plt.subplots(2, 1, figsize=figsize, sharex=True)

    axes[0].plot(time, arrays['angle_change_per_interval'], 'b-', linewidth=1.5,
                 label='Change per 0.2 s')
    axes[0].axhline(threshold, color='r', linestyle=':', label=f'±{threshold:g}°')
    axes[0].axhline(-threshold, color='r', linestyle=':')
    axes[0].set_ylabel('Angle change (deg)', fontsize=11)
    verdict = 'stable' if result.is_angle_stable_ok else 'unstable'
    axes[0].set_title(f'{title} ({verdict})', fontsize=13, fontweight='bold')

    axes[1].plot(time, arrays['torque'], 'k-', linewidth=1.0, label='Torque')
    axes[1].set_ylabel('Torque (N·m)', fontsize=11)
    axes[1].set_xlabel('Time (s)', fontsize=11)

    for ax in axes:
        _mark_key_points(ax, result)
        ax.legend(loc='best')
        ax.grid(True, alpha=0.3)

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')

    return fig


def setup_plotting_style():
    """
    Set up default matplotlib plotting style for consistent appearance.

    Call this function once at the start of your script for consistent styling.
    """
    plt.style.use('seaborn-v0_8-darkgrid')
    plt.rcParams['figure.facecolor'] = 'white'
    plt.rcParams['axes.facecolor'] = 'white'
    plt.rcParams['grid.alpha'] = 0.3
    plt.rcParams['font.size'] = 10
    plt.rcParams['legend.fontsize'] = 10
    plt.rcParams['lines.linewidth'] = 1.5
