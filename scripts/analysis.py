import logging
from dataclasses import replace

import numpy as np
import pandas as pd
from motion_profile import MotionProfile, ValidationError
from simulator import simulate

logger = logging.getLogger(__name__)


def sweep_duration(base_profile, duration_range):
    """
    Sweep ramp duration, return durations, peak deviation and stabilization time arrays.
    Peak deviation is the overshoot when accelerating and the undershoot otherwise.
    """
    results = []
    for duration in duration_range:
        profile = replace(base_profile, duration_ms=float(duration))
        metrics = simulate(profile).metrics
        deviation = metrics.max_overshoot if metrics.accelerating else metrics.max_undershoot
        results.append((duration, deviation, metrics.stabilization_time))
    durations, deviations, stabilization_times = zip(*results)
    return np.array(durations), np.array(deviations), np.array(stabilization_times)


def sweep_jerk_factor(base_profile, factor_range):
    """
    Sweep both Bezier jerk factors together, return factor_list and peak deviation list.
    """
    results = []
    for factor in factor_range:
        profile = replace(
            base_profile,
            use_jerk=True,
            initial_jerk_factor=float(factor),
            final_jerk_factor=float(factor),
        )
        metrics = simulate(profile).metrics
        deviation = metrics.max_overshoot if metrics.accelerating else metrics.max_undershoot
        results.append((factor, deviation))
    factors, deviations = zip(*results)
    return np.array(factors), np.array(deviations)


def sweep_duration_end_speed(base_profile, duration_range, end_speed_range):
    """
    2D sweep: For each (duration, end speed) pair, compute peak deviation. Returns meshgrid and Z.
    """
    Z = np.zeros((len(end_speed_range), len(duration_range)))
    for i, end_speed in enumerate(end_speed_range):
        for j, duration in enumerate(duration_range):
            profile = replace(
                base_profile, duration_ms=float(duration), end_speed=float(end_speed)
            )
            metrics = simulate(profile).metrics
            Z[i, j] = metrics.max_overshoot if metrics.accelerating else metrics.max_undershoot
    D, E = np.meshgrid(duration_range, end_speed_range)
    return D, E, Z


def _as_bool(value) -> bool:
    if pd.isna(value):
        return False
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y")
    return bool(value)


def analyze_scenarios_from_csv(csv_path, sender_interval_ms=105, receiver_interval_ms=20):
    """
    Reads CSV with columns:
        Name, Start Speed (km/h), End Speed (km/h), Duration (ms)
    and optionally:
        Use Jerk, Initial Jerk Factor, Final Jerk Factor
    Simulates each row and returns a DataFrame with one metrics row per scenario.
    Rows that fail validation are logged and skipped.
    """
    try:
        df = pd.read_csv(csv_path, encoding="utf-8-sig")
    except UnicodeDecodeError:
        df = pd.read_csv(csv_path, encoding="cp1252")

    rows = []
    for _, row in df.iterrows():
        use_jerk = _as_bool(row.get("Use Jerk", False))
        profile = MotionProfile(
            name=str(row["Name"]),
            start_speed=float(row["Start Speed (km/h)"]),
            end_speed=float(row["End Speed (km/h)"]),
            duration_ms=float(row["Duration (ms)"]),
            sender_interval_ms=sender_interval_ms,
            receiver_interval_ms=receiver_interval_ms,
            use_jerk=use_jerk,
            initial_jerk_factor=float(row.get("Initial Jerk Factor", 0.3)),
            final_jerk_factor=float(row.get("Final Jerk Factor", 0.3)),
            color="green" if use_jerk else "blue",
        )
        try:
            result = simulate(profile)
        except ValidationError as exc:
            logger.warning("Skipping scenario %s: %s", profile.name, exc)
            continue
        m = result.metrics
        rows.append({
            "Name": profile.name,
            "Use Jerk": use_jerk,
            "Acceleration (m/s^2)": m.acceleration,
            "Overshoot (km/h)": m.max_overshoot,
            "Undershoot (km/h)": m.max_undershoot,
            "Deviation (%)": m.deviation_percent,
            "Duration Distance (m)": m.duration_distance,
            "Total Distance (m)": m.total_distance,
            "Stabilized": m.stabilized,
            "Stabilization Time (ms)": m.stabilization_time,
            "Stabilization Distance (m)": m.stabilization_distance,
            "Jerk A (m/s^3)": m.jerk_a,
            "Jerk B (m/s^3)": m.jerk_b,
        })
    return pd.DataFrame(rows)
