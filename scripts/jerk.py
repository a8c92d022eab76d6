"""Physical jerk estimates for the Bezier S-curve ramp.

The Bezier jerk factors are dimensionless shape parameters. These helpers map
them to jerk magnitudes (m/s^3) that can seed an external jerk-limited motion
harness. The values are for display only and never feed back into the ramp.
"""
from dataclasses import dataclass

MIN_JERK = 0.01  # m/s^3
ZERO_FACTOR_SUBSTITUTE = 0.01
HARNESS_INITIALIZER = "PhysicalJerkMotion"


@dataclass(frozen=True)
class JerkParameters:
    jerk_a: float  # m/s^3, ramp-in
    jerk_b: float  # m/s^3, ramp-out


def _jerk_for_factor(avg_accel: float, duration_s: float, factor: float) -> float:
    if factor == 0:
        factor = ZERO_FACTOR_SUBSTITUTE
    return max(MIN_JERK, abs(avg_accel) * (2 - factor) / (duration_s * factor))


def convert_jerk(
    start_speed: float,
    end_speed: float,
    duration_ms: float,
    initial_factor: float,
    final_factor: float,
) -> JerkParameters:
    start_mps = start_speed / 3.6
    end_mps = end_speed / 3.6
    duration_s = duration_ms / 1000
    avg_accel = (end_mps - start_mps) / duration_s
    return JerkParameters(
        jerk_a=_jerk_for_factor(avg_accel, duration_s, initial_factor),
        jerk_b=_jerk_for_factor(avg_accel, duration_s, final_factor),
    )


def format_harness_block(profile, jerk: JerkParameters) -> str:
    """Render the initializer call for the external jerk motion harness."""
    lines = [
        f"{HARNESS_INITIALIZER}(",
        f"    start_speed={profile.start_speed / 3.6:.4f},  # m/s",
        f"    end_speed={profile.end_speed / 3.6:.4f},  # m/s",
        f"    duration={profile.duration_ms / 1000:.4f},  # s",
        f"    jerk_a={jerk.jerk_a:.4f},  # m/s^3",
        f"    jerk_b={jerk.jerk_b:.4f},  # m/s^3",
        ")",
    ]
    return "\n".join(lines)
