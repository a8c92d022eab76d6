import logging
import math
from bisect import bisect_right
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from motion_profile import MotionProfile, actual_speed
from metrics import (
    AxisRange, DistancePoint, SimulationMetrics,
    axis_range, compute_metrics, integrate_distance,
)
from jerk import JerkParameters, convert_jerk

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Sample:
    time: float  # ms
    speed: float  # km/h


@dataclass(frozen=True)
class ReconstructedPoint:
    time: float  # ms
    actual: float  # km/h
    received: float  # km/h
    interpolated: float  # km/h


@dataclass(frozen=True)
class SimulationResult:
    profile: MotionProfile
    samples: Tuple[Sample, ...]
    points: Tuple[ReconstructedPoint, ...]
    distance_points: Tuple[DistancePoint, ...]
    metrics: SimulationMetrics
    axis: AxisRange
    jerk: Optional[JerkParameters] = None

    def to_frame(self) -> pd.DataFrame:
        """Receiver-rate series as a DataFrame (one row per receiver tick)."""
        return pd.DataFrame({
            "time_ms": [p.time for p in self.points],
            "actual_kmh": [p.actual for p in self.points],
            "received_kmh": [p.received for p in self.points],
            "interpolated_kmh": [p.interpolated for p in self.points],
            "distance_m": [d.distance for d in self.distance_points],
        })


def _time_grid(horizon: float, step: float) -> np.ndarray:
    """Return multiples of step from 0 up to horizon inclusive."""
    count = int(math.floor(horizon / step + 1e-9)) + 1
    return step * np.arange(count)


def sample_times(profile: MotionProfile) -> np.ndarray:
    return _time_grid(profile.horizon_ms, profile.sender_interval_ms)


def receiver_times(profile: MotionProfile) -> np.ndarray:
    return _time_grid(profile.horizon_ms, profile.receiver_interval_ms)


def sample_speeds(profile: MotionProfile) -> Tuple[Sample, ...]:
    """Periodic, jitter-free transmission of the ground truth."""
    return tuple(
        Sample(time=float(t), speed=actual_speed(float(t), profile))
        for t in sample_times(profile)
    )


def _estimate(samples: Sequence[Sample], times: Sequence[float], t: float) -> float:
    seen = bisect_right(times, t)
    if seen == 0:
        raise ValueError(f"No sample received at or before t={t} ms")
    if seen == 1:
        return samples[0].speed
    p1, p2 = samples[seen - 2], samples[seen - 1]
    slope = (p2.speed - p1.speed) / (p2.time - p1.time)
    return p2.speed + slope * (t - p2.time)


def extrapolate_speed(samples: Sequence[Sample], t: float) -> float:
    """
    Estimate speed at t from the samples received so far.
    One sample is held as is; with two or more, the last two define a slope
    that is projected forward from the newer one.
    """
    return _estimate(samples, [s.time for s in samples], t)


def _held(samples: Sequence[Sample], times: Sequence[float], t: float, default: float) -> float:
    seen = bisect_right(times, t)
    if seen == 0:
        return default
    return samples[seen - 1].speed


def held_speed(samples: Sequence[Sample], t: float, default: float) -> float:
    """Most recent sample at or before t, or default when none has arrived."""
    return _held(samples, [s.time for s in samples], t, default)


def reconstruct(profile: MotionProfile, samples: Sequence[Sample]) -> Tuple[ReconstructedPoint, ...]:
    times = [s.time for s in samples]
    points = []
    for t in receiver_times(profile):
        t = float(t)
        points.append(ReconstructedPoint(
            time=t,
            actual=actual_speed(t, profile),
            received=_held(samples, times, t, profile.start_speed),
            interpolated=_estimate(samples, times, t),
        ))
    return tuple(points)


def simulate(profile: MotionProfile) -> SimulationResult:
    """
    Run the full pipeline for one profile:
    ground truth -> sender samples -> receiver reconstruction -> metrics.
    Raises ValidationError before any work if the profile is invalid.
    """
    profile.validate()

    samples = sample_speeds(profile)
    points = reconstruct(profile, samples)
    distance = integrate_distance(profile, points)

    jerk = None
    if profile.use_jerk:
        jerk = convert_jerk(
            profile.start_speed,
            profile.end_speed,
            profile.duration_ms,
            profile.initial_jerk_factor,
            profile.final_jerk_factor,
        )

    metrics = compute_metrics(profile, points, distance, jerk)
    logger.debug(
        "Simulated %s: %d samples, %d receiver ticks, overshoot=%.3f undershoot=%.3f km/h",
        profile.name, len(samples), len(points),
        metrics.max_overshoot, metrics.max_undershoot,
    )
    return SimulationResult(
        profile=profile,
        samples=samples,
        points=points,
        distance_points=distance.points,
        metrics=metrics,
        axis=axis_range(profile, points),
        jerk=jerk,
    )
