"""
Launch Angle Sweep

Simulates the reference rocket across launch angles in a crosswind and
tabulates height, drift and the attitude stability verdict.
"""

import numpy as np
import matplotlib.pyplot as plt
import sys
import os

# Add repository root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from rocketsim.core.parameters import example_rocket
from rocketsim.core.options import SimulationConfig
from rocketsim.analysis.stability import sweep_launch_angles


def main():
    """Run the sweep."""
    angles = np.arange(-20.0, 21.0, 5.0)
    config = SimulationConfig(enhanced_attitude_control=True)

    for fin_count in (3, 4):
        df = sweep_launch_angles(example_rocket(fin_count=fin_count), angles,
                                 wind_speed=3.0, wind_profile='open', config=config)

        print("=" * 70)
        print(f"{fin_count} fins, 3 m/s wind (open terrain)")
        print("=" * 70)
        print(df[['launch_angle', 'max_height', 'max_distance', 'flight_time',
                  'max_angle_change', 'is_angle_stable_ok']].to_string(index=False,
                                                                        float_format='%.2f'))
        print()

        plt.plot(df['launch_angle'], df['max_height'], 'o-', label=f'{fin_count} fins')

    plt.xlabel('Launch angle (deg)')
    plt.ylabel('Max height (m)')
    plt.title('Apogee vs launch angle')
    plt.grid(True, alpha=0.3)
    plt.legend()
    plt.show()


if __name__ == "__main__":
    main()
