"""
rocketsim - planar flight simulation for model rockets.

Geometry and aerodynamic profile, moment models, fin loads, wind
profiles and a fixed-step flight integrator covering rail, powered,
coast and parachute phases.
"""

__version__ = "0.1.0"
