"""
C6-5 Reference Flight Demonstration

Demonstrates a complete model rocket flight:
- Build the reference rocket from a YAML-style configuration
- Show the aerodynamic calculation summary
- Simulate the flight and print key events
- Plot trajectory, state histories and attitude stability
"""

import logging
import matplotlib.pyplot as plt
import sys
import os

# Add repository root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from rocketsim.io.config import RocketConfig, create_example_config
from rocketsim.analysis.formatting import format_fin_deflection, format_speed_value
from rocketsim.analysis.stability import StabilityPolicy
from rocketsim.visualization.plotting import (
    plot_flight_trajectory,
    plot_flight_states,
    plot_attitude_stability,
)


def main():
    """Run the reference flight."""
    logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')

    print("=" * 70)
    print("C6-5 Reference Flight")
    print("=" * 70)
    print()

    config_dict = create_example_config()
    config_dict['launch']['wind_speed'] = 2.0
    config_dict['launch']['wind_profile'] = 'open'
    config = RocketConfig(config_dict)
    print(f"Rocket: {config}")
    print()

    result = config.run()

    calc = result.calculations
    print("1. Aerodynamic summary")
    print(f"   Center of pressure:     {calc.pressure_center} mm")
    print(f"   Aerodynamic center:     {calc.aerodynamic_center} mm")
    print(f"   Stability CP:           {calc.stability_center_of_pressure} mm")
    print(f"   Static margin:          {calc.standard_static_margin:.2f} cal")
    print(f"   Stability margin:       {calc.stability_static_margin:.2f} cal")
    print(f"   Fin divergence speed:   {format_speed_value(calc.fin_divergence_speed)}")
    print(f"   Fin flutter speed:      {format_speed_value(calc.fin_flutter_speed, limit=400)}")
    print()

    kp = result.key_points
    print("2. Flight events")
    print(f"   Burnout:        t = {kp.thrust_end.time:5.2f} s, h = {kp.thrust_end.height:6.1f} m")
    print(f"   Apogee:         t = {kp.max_height.time:5.2f} s, h = {kp.max_height.height:6.1f} m")
    print(f"   Ejection:       t = {kp.parachute_ejection.time:5.2f} s, "
          f"h = {kp.parachute_ejection.height:6.1f} m")
    print(f"   Canopy open:    t = {kp.parachute_active.time:5.2f} s, "
          f"h = {kp.parachute_active.height:6.1f} m")
    print(f"   Landing:        t = {result.summary.flight_time:5.2f} s")
    print()

    print("3. Maxima")
    print(f"   Height:          {result.max_height:.1f} m")
    print(f"   Speed:           {result.max_speed:.1f} m/s")
    print(f"   Drift:           {result.max_distance:.1f} m")
    print(f"   Fin deflection:  {format_fin_deflection(result.max_fin_deflection)}")
    print(f"   Attitude:        {'stable' if result.is_angle_stable_ok else 'UNSTABLE'} "
          f"(max change {result.angle_stability.max_angle_change:.2f} deg / 0.2 s)")
    strict = StabilityPolicy(threshold_deg=5.0).evaluate(result)
    print(f"   At a 5 deg limit: {'stable' if strict.is_angle_stable_ok else 'UNSTABLE'} "
          f"(worst window {strict.max_angle_change:.2f} deg)")
    print()

    output_dir = os.path.join(os.path.dirname(__file__), '..', 'output')
    os.makedirs(output_dir, exist_ok=True)

    plot_flight_trajectory(result, save_path=os.path.join(output_dir, 'c6_trajectory.png'))
    plot_flight_states(result, save_path=os.path.join(output_dir, 'c6_states.png'))
    plot_attitude_stability(result, save_path=os.path.join(output_dir, 'c6_stability.png'))
    result.to_dataframe().to_csv(os.path.join(output_dir, 'c6_flight.csv'), index=False)

    print(f"Plots and flight log saved to: {os.path.abspath(output_dir)}")
    plt.show()


if __name__ == "__main__":
    main()
