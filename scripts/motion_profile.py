"""Speed ramp definitions and ground-truth speed for the reconstruction simulator."""
import math
from dataclasses import dataclass


class ValidationError(ValueError):
    """Raised when a profile cannot be simulated."""


@dataclass(frozen=True)
class MotionProfile:
    start_speed: float  # km/h
    end_speed: float  # km/h
    duration_ms: float  # ms
    sender_interval_ms: float = 105  # ms
    receiver_interval_ms: float = 20  # ms
    use_jerk: bool = False
    initial_jerk_factor: float = 0.3
    final_jerk_factor: float = 0.3
    name: str = "Vehicle"
    color: str = "blue"

    @property
    def horizon_ms(self) -> float:
        """Simulated time span: the ramp plus two sender periods of tail."""
        return self.duration_ms + 2 * self.sender_interval_ms

    @property
    def accelerating(self) -> bool:
        return self.start_speed < self.end_speed

    def validate(self) -> None:
        if not math.isfinite(self.duration_ms) or self.duration_ms <= 0:
            raise ValidationError(
                f"Duration must be greater than 0 ms (got {self.duration_ms})"
            )
        if not math.isfinite(self.receiver_interval_ms) or self.receiver_interval_ms <= 0:
            raise ValidationError(
                f"Receiver interval must be greater than 0 ms (got {self.receiver_interval_ms})"
            )
        if not math.isfinite(self.sender_interval_ms):
            raise ValidationError(
                f"Sender interval must be finite (got {self.sender_interval_ms})"
            )
        if self.sender_interval_ms <= self.receiver_interval_ms:
            raise ValidationError(
                "Sender interval must exceed receiver interval "
                f"({self.sender_interval_ms} <= {self.receiver_interval_ms})"
            )


def bezier_blend(u: float, cp1: float, cp2: float) -> float:
    """Cubic Bezier with anchors 0 and 1 and inner control points cp1, cp2."""
    return (
        3 * (1 - u) ** 2 * u * cp1
        + 3 * (1 - u) * u ** 2 * cp2
        + u ** 3
    )


def linear_speed(t: float, profile: MotionProfile) -> float:
    start = profile.start_speed
    end = profile.end_speed
    duration = profile.duration_ms
    if t <= 0:
        return start
    if t >= duration:
        return end
    accel = (end - start) / duration
    return start + accel * t


def bezier_speed(t: float, profile: MotionProfile) -> float:
    """
    Jerk-limited S-curve ramp.
    Small jerk factors sharpen the curve at that end, factors near 1 soften it.
    """
    start = profile.start_speed
    end = profile.end_speed
    duration = profile.duration_ms
    if t <= 0:
        return start
    if t >= duration:
        return end
    u = min(max(t / duration, 0.0), 1.0)
    cp1 = profile.initial_jerk_factor
    cp2 = 1 - profile.final_jerk_factor
    return start + (end - start) * bezier_blend(u, cp1, cp2)


def actual_speed(t: float, profile: MotionProfile) -> float:
    """Ground-truth speed (km/h) at time t (ms)."""
    if profile.use_jerk:
        return bezier_speed(t, profile)
    return linear_speed(t, profile)


# Example ramps used in notebooks or quick tests
urban_launch = MotionProfile(
    name="Urban Launch",
    start_speed=0,
    end_speed=50,
    duration_ms=4000,
    color="blue",
)

highway_merge = MotionProfile(
    name="Highway Merge",
    start_speed=60,
    end_speed=110,
    duration_ms=6000,
    use_jerk=True,
    color="green",
)

emergency_stop = MotionProfile(
    name="Emergency Stop",
    start_speed=100,
    end_speed=0,
    duration_ms=3000,
    color="red",
)

smooth_launch = MotionProfile(
    name="Smooth Launch",
    start_speed=0,
    end_speed=30,
    duration_ms=1000,
    use_jerk=True,
    initial_jerk_factor=0.5,
    final_jerk_factor=0.5,
    color="orange",
)

PRESETS = {
    "urban_launch": urban_launch,
    "highway_merge": highway_merge,
    "emergency_stop": emergency_stop,
    "smooth_launch": smooth_launch,
}
