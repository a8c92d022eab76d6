"""
Metrics derived from a reconstructed speed series.

All speeds are km/h and all times ms on input; distances are reported in
metres and accelerations in m/s^2.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence, Tuple

import numpy as np

from motion_profile import MotionProfile
from jerk import JerkParameters

if TYPE_CHECKING:
    from simulator import ReconstructedPoint

KMH_TO_MPS = 1 / 3.6
KMH_PER_MS_TO_MPS2 = 1000 / 3.6  # ~277.78
STABILIZATION_TOLERANCE_KMH = 0.1
MIN_AXIS_PADDING_KMH = 2


@dataclass(frozen=True)
class DistancePoint:
    time: float  # ms
    distance: float  # m
    interpolated_speed: float  # km/h


@dataclass(frozen=True)
class DistanceSummary:
    points: Tuple[DistancePoint, ...]
    total_distance: float
    duration_distance: float
    stabilization_distance: float
    stabilization_time: float
    stabilized: bool


@dataclass(frozen=True)
class AxisRange:
    min_value: float
    max_value: float


@dataclass(frozen=True)
class SimulationMetrics:
    acceleration_kmh_per_ms: float
    acceleration: float  # m/s^2
    accelerating: bool
    max_overshoot: float  # km/h
    max_undershoot: float  # km/h
    deviation_percent: float
    total_distance: float  # m
    duration_distance: float  # m
    stabilization_distance: float  # m
    stabilization_time: float  # ms
    stabilized: bool
    jerk_a: Optional[float] = None  # m/s^3
    jerk_b: Optional[float] = None  # m/s^3

    @property
    def acceleration_kmh_per_s(self) -> float:
        return self.acceleration_kmh_per_ms * 1000


def _series(points: Sequence[ReconstructedPoint]) -> Tuple[np.ndarray, np.ndarray]:
    """Return (time_ms, interpolated_kmh) arrays of a receiver-rate series."""
    time = np.array([p.time for p in points], dtype=float)
    speed = np.array([p.interpolated for p in points], dtype=float)
    return time, speed


def acceleration_kmh_per_ms(profile: MotionProfile) -> float:
    return (profile.end_speed - profile.start_speed) / profile.duration_ms


def acceleration_mps2(profile: MotionProfile) -> float:
    return acceleration_kmh_per_ms(profile) * KMH_PER_MS_TO_MPS2


def _safe_reference(speed: float) -> float:
    # A zero reference would make the percentage undefined
    return abs(speed) if speed != 0 else 1


def peak_deviation(
    profile: MotionProfile, points: Sequence[ReconstructedPoint]
) -> Tuple[float, float, float]:
    """
    Return (overshoot, undershoot, percent) of the interpolated series
    against the end speed.

    Accelerating ramps are scanned for the highest estimate, decelerating
    ones (including start == end) for the lowest. The percentage is taken
    against the end speed when accelerating and the start speed otherwise.
    """
    end = profile.end_speed
    _, speed = _series(points)
    if profile.accelerating:
        highest = max(end, float(speed.max())) if speed.size else end
        overshoot = max(0.0, highest - end)
        return overshoot, 0.0, overshoot / _safe_reference(end) * 100

    lowest = min(end, float(speed.min())) if speed.size else end
    undershoot = max(0.0, end - lowest)
    return 0.0, undershoot, undershoot / _safe_reference(profile.start_speed) * 100


def integrate_distance(
    profile: MotionProfile, points: Sequence[ReconstructedPoint]
) -> DistanceSummary:
    """
    Trapezoidal integration of the interpolated speed over the receiver grid.

    The duration distance is latched at the first tick at or past the ramp
    duration. Stabilization is latched at the first tick strictly past the
    duration whose estimate is within tolerance of the end speed; if that
    never happens both stabilization values stay 0 and stabilized is False.
    """
    time, speed = _series(points)
    if not time.size:
        return DistanceSummary((), 0.0, 0.0, 0.0, 0.0, False)

    speed_mps = speed * KMH_TO_MPS
    steps = (speed_mps[1:] + speed_mps[:-1]) / 2 * np.diff(time) / 1000
    distance = np.concatenate([[0.0], np.cumsum(steps)])

    reached = np.flatnonzero(time >= profile.duration_ms)
    duration_distance = float(distance[reached[0]]) if reached.size else 0.0

    settled = np.flatnonzero(
        (time > profile.duration_ms)
        & (np.abs(speed - profile.end_speed) <= STABILIZATION_TOLERANCE_KMH)
    )
    if settled.size:
        stabilization_distance = float(distance[settled[0]])
        stabilization_time = float(time[settled[0]])
    else:
        stabilization_distance = stabilization_time = 0.0

    return DistanceSummary(
        points=tuple(
            DistancePoint(time=float(t), distance=float(d), interpolated_speed=float(v))
            for t, d, v in zip(time, distance, speed)
        ),
        total_distance=float(distance[-1]),
        duration_distance=duration_distance,
        stabilization_distance=stabilization_distance,
        stabilization_time=stabilization_time,
        stabilized=bool(settled.size),
    )


def axis_range(profile: MotionProfile, points: Sequence[ReconstructedPoint]) -> AxisRange:
    """Speed axis limits that keep the start, end and every estimate in view."""
    start = profile.start_speed
    end = profile.end_speed
    _, speed = _series(points)
    highest = float(speed.max())
    lowest = float(speed.min())

    upper_padding = max(MIN_AXIS_PADDING_KMH, (highest - end) + 1)
    lower_padding = max(MIN_AXIS_PADDING_KMH, (end - lowest) + 1)
    return AxisRange(
        min_value=max(0, min(start, end, lowest) - lower_padding),
        max_value=max(start, end, highest) + upper_padding,
    )


def compute_metrics(
    profile: MotionProfile,
    points: Sequence[ReconstructedPoint],
    distance: DistanceSummary,
    jerk: Optional[JerkParameters] = None,
) -> SimulationMetrics:
    overshoot, undershoot, percent = peak_deviation(profile, points)
    return SimulationMetrics(
        acceleration_kmh_per_ms=acceleration_kmh_per_ms(profile),
        acceleration=acceleration_mps2(profile),
        accelerating=profile.accelerating,
        max_overshoot=overshoot,
        max_undershoot=undershoot,
        deviation_percent=percent,
        total_distance=distance.total_distance,
        duration_distance=distance.duration_distance,
        stabilization_distance=distance.stabilization_distance,
        stabilization_time=distance.stabilization_time,
        stabilized=distance.stabilized,
        jerk_a=jerk.jerk_a if jerk is not None else None,
        jerk_b=jerk.jerk_b if jerk is not None else None,
    )
