"""
Configuration Demonstration

Demonstrates the YAML-based configuration system for rocket setup.
Shows how to:
- Load a rocket configuration from YAML
- Run the flight it describes
- Change launch conditions and compare
- Save and load configurations
"""

import sys
import os

# Add repository root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from rocketsim.io.config import (
    RocketConfig,
    load_rocket_config,
    save_rocket_config,
    create_example_config,
)
from rocketsim.analysis.formatting import format_fin_deflection


def main():
    """Run configuration demonstration."""
    print("=" * 70)
    print("Rocket Configuration Demonstration")
    print("=" * 70)
    print()

    # 1. Load configuration from YAML file
    print("1. Loading rocket configuration from YAML...")
    config_path = os.path.join(os.path.dirname(__file__), '..', 'config', 'alpha_3fin.yaml')

    try:
        config = load_rocket_config(config_path)
    except FileNotFoundError:
        print("   Warning: Config file not found, using example config...")
        config = RocketConfig(create_example_config())

    rocket = config.rocket
    print(f"   Loaded: {config.name}")
    print(f"   Length: {rocket.total_length:.0f} mm, mass: {rocket.weight:.0f} g")
    print(f"   Motor: {rocket.motor}, parachute: {rocket.parachute}")
    print(f"   Launch: {config.launch_angle:.1f} deg, "
          f"wind {config.wind_speed:.1f} m/s ({config.wind_profile})")
    print()

    # 2. Run the configured flight
    print("2. Running configured flight...")
    result = config.run()
    print(f"   Apogee: {result.max_height:.1f} m at t = {result.key_points.max_height.time:.2f} s")
    print(f"   Drift: {result.max_distance:.1f} m")
    print(f"   Max fin deflection: {format_fin_deflection(result.max_fin_deflection)}")
    print(f"   Static margin: {result.calculations.standard_static_margin:.2f} cal")
    print()

    # 3. Compare launch conditions
    print("3. Comparing wind speeds...")
    for wind_speed in (0.0, 2.0, 4.0, 6.0):
        config.wind_speed = wind_speed
        result = config.run()
        verdict = 'stable' if result.is_angle_stable_ok else 'unstable'
        print(f"   wind {wind_speed:3.1f} m/s: apogee {result.max_height:5.1f} m, "
              f"drift {result.max_distance:5.1f} m, {verdict}")
    print()

    # 4. Save and reload configuration
    print("4. Saving and reloading configuration...")
    output_dir = os.path.join(os.path.dirname(__file__), '..', 'output')
    os.makedirs(output_dir, exist_ok=True)
    saved_path = os.path.join(output_dir, 'saved_rocket.yaml')

    save_rocket_config(config, saved_path)
    reloaded = load_rocket_config(saved_path)
    print(f"   Reloaded: {reloaded}")
    print(f"   Parameters match: {reloaded.rocket == config.rocket}")
    print()

    print("=" * 70)
    print("Configuration demonstration complete!")
    print("=" * 70)


if __name__ == "__main__":
    main()
