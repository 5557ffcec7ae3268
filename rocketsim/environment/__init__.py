"""
Environment models for flight simulation.

This module provides the altitude-dependent wind model.
"""

from .wind import (WindModel, WindProfile, WIND_PROFILES, get_wind_profile,
                   wind_speed_at_height, REFERENCE_HEIGHT)

__all__ = ['WindModel', 'WindProfile', 'WIND_PROFILES', 'get_wind_profile',
           'wind_speed_at_height', 'REFERENCE_HEIGHT']
