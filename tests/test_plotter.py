import sys
from pathlib import Path
sys.path.append(str(Path(__file__).resolve().parents[1] / 'scripts'))

import matplotlib
matplotlib.use("Agg")

from motion_profile import MotionProfile
from simulator import simulate
from plotter import plot_distance_and_speed, plot_speed_reconstruction


def test_reconstruction_charts_are_saved(tmp_path):
    result = simulate(MotionProfile(start_speed=100, end_speed=20, duration_ms=800, use_jerk=True))
    plot_speed_reconstruction(result, tmp_path)
    plot_distance_and_speed(result, tmp_path)
    assert (tmp_path / "speed_reconstruction.png").stat().st_size > 0
    assert (tmp_path / "distance_and_speed.png").stat().st_size > 0
