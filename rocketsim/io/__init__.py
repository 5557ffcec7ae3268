"""
Configuration input/output.
"""

from .config import RocketConfig, load_rocket_config, save_rocket_config, create_example_config

__all__ = ['RocketConfig', 'load_rocket_config', 'save_rocket_config', 'create_example_config']
