import sys
from pathlib import Path
sys.path.append(str(Path(__file__).resolve().parents[1] / 'scripts'))

import numpy as np
import pytest
from motion_profile import MotionProfile
from analysis import (
    analyze_scenarios_from_csv, sweep_duration,
    sweep_duration_end_speed, sweep_jerk_factor,
)

BASE = MotionProfile(start_speed=0, end_speed=100, duration_ms=1000)


def test_sweep_duration():
    durations, deviations, stab_times = sweep_duration(BASE, [500, 1000, 2000])
    assert list(durations) == [500, 1000, 2000]
    assert deviations.shape == (3,)
    assert deviations[1] == pytest.approx(5.5 / 105 * 90)
    assert np.all(stab_times > durations)
    # slower ramps are easier to follow
    assert deviations[0] > deviations[2]


def test_sweep_duration_decelerating_reports_undershoot():
    profile = MotionProfile(start_speed=100, end_speed=0, duration_ms=1000)
    _, deviations, _ = sweep_duration(profile, [1000])
    assert deviations[0] == pytest.approx(5.5 / 105 * 90)


def test_sweep_jerk_factor():
    factors, deviations = sweep_jerk_factor(BASE, np.linspace(0.1, 1.0, 4))
    assert factors.shape == (4,)
    assert deviations.shape == (4,)
    assert np.all(deviations >= 0)


def test_sweep_duration_end_speed_shape():
    D, E, Z = sweep_duration_end_speed(BASE, [500, 1000, 1500], [50, 100])
    assert D.shape == E.shape == Z.shape == (2, 3)
    assert Z[1, 1] == pytest.approx(5.5 / 105 * 90)
    assert Z[0, 1] == pytest.approx(Z[1, 1] / 2)


def test_analyze_scenarios_from_csv(tmp_path):
    csv_path = tmp_path / "scenarios.csv"
    csv_path.write_text(
        "Name,Start Speed (km/h),End Speed (km/h),Duration (ms),Use Jerk,Initial Jerk Factor,Final Jerk Factor\n"
        "Launch,0,100,1000,false,0.3,0.3\n"
        "Smooth,0,100,1000,true,0.3,0.3\n"
        "Broken,0,100,0,false,0.3,0.3\n"
        "Stop,100,0,1000,false,0.3,0.3\n"
    )
    df = analyze_scenarios_from_csv(csv_path)
    assert list(df["Name"]) == ["Launch", "Smooth", "Stop"]
    launch = df.iloc[0]
    assert launch["Overshoot (km/h)"] == pytest.approx(5.5 / 105 * 90)
    assert launch["Stabilized"]
    assert not launch["Use Jerk"]
    smooth = df.iloc[1]
    assert smooth["Use Jerk"]
    assert smooth["Jerk A (m/s^3)"] > 0
    stop = df.iloc[2]
    assert stop["Undershoot (km/h)"] == pytest.approx(5.5 / 105 * 90)


def test_analyze_scenarios_optional_columns(tmp_path):
    csv_path = tmp_path / "scenarios.csv"
    csv_path.write_text(
        "Name,Start Speed (km/h),End Speed (km/h),Duration (ms)\n"
        "Cruise,80,80,1000\n"
    )
    df = analyze_scenarios_from_csv(csv_path)
    assert len(df) == 1
    assert df.iloc[0]["Stabilization Time (ms)"] == 1020


def test_analyze_scenarios_skips_blank_duration(tmp_path):
    csv_path = tmp_path / "scenarios.csv"
    csv_path.write_text(
        "Name,Start Speed (km/h),End Speed (km/h),Duration (ms)\n"
        "Launch,0,100,1000\n"
        "Blank,0,100,\n"
    )
    df = analyze_scenarios_from_csv(csv_path)
    assert list(df["Name"]) == ["Launch"]
