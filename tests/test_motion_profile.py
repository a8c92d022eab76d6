import sys
from dataclasses import replace
from pathlib import Path
sys.path.append(str(Path(__file__).resolve().parents[1] / 'scripts'))

import numpy as np
import pytest
from motion_profile import (
    MotionProfile, ValidationError, PRESETS,
    actual_speed, bezier_blend, bezier_speed, linear_speed,
)


def test_linear_ramp_values():
    profile = MotionProfile(start_speed=0, end_speed=100, duration_ms=1000)
    assert linear_speed(-5, profile) == 0
    assert linear_speed(0, profile) == 0
    assert linear_speed(250, profile) == pytest.approx(25)
    assert linear_speed(1000, profile) == 100
    assert linear_speed(5000, profile) == 100


def test_linear_ramp_decelerating():
    profile = MotionProfile(start_speed=80, end_speed=20, duration_ms=600)
    assert linear_speed(300, profile) == pytest.approx(50)
    assert linear_speed(600, profile) == 20


def test_bezier_blend_anchors():
    assert bezier_blend(0, 0.3, 0.7) == 0
    assert bezier_blend(1, 0.3, 0.7) == pytest.approx(1)


def test_bezier_half_factors_midpoint():
    profile = MotionProfile(
        start_speed=0, end_speed=30, duration_ms=1000,
        use_jerk=True, initial_jerk_factor=0.5, final_jerk_factor=0.5,
    )
    # B(0.5) = 3*0.25*0.5*0.5 + 3*0.5*0.25*0.5 + 0.125 = 0.5
    assert bezier_blend(0.5, 0.5, 0.5) == pytest.approx(0.5)
    assert bezier_speed(500, profile) == pytest.approx(15)


def test_bezier_half_factors_monotonic():
    profile = MotionProfile(
        start_speed=0, end_speed=30, duration_ms=1000,
        use_jerk=True, initial_jerk_factor=0.5, final_jerk_factor=0.5,
    )
    v = np.array([bezier_speed(t, profile) for t in np.linspace(0, 1000, 201)])
    assert np.all(np.diff(v) > 0)
    assert v[0] == 0
    assert v[-1] == 30


def test_small_initial_factor_starts_slower():
    sharp = MotionProfile(start_speed=0, end_speed=100, duration_ms=1000, use_jerk=True,
                          initial_jerk_factor=0.05)
    soft = replace(sharp, initial_jerk_factor=0.9)
    assert bezier_speed(100, sharp) < bezier_speed(100, soft)


def test_actual_speed_dispatches_on_use_jerk():
    linear = MotionProfile(start_speed=0, end_speed=100, duration_ms=1000)
    curved = replace(linear, use_jerk=True)
    assert actual_speed(200, linear) == pytest.approx(20)
    assert actual_speed(200, curved) == pytest.approx(bezier_speed(200, curved))
    assert actual_speed(200, curved) != pytest.approx(20)


def test_out_of_range_jerk_factors_are_accepted():
    profile = MotionProfile(start_speed=0, end_speed=100, duration_ms=1000, use_jerk=True,
                            initial_jerk_factor=1.8, final_jerk_factor=-0.4)
    profile.validate()
    assert np.isfinite(bezier_speed(400, profile))


@pytest.mark.parametrize("duration", [0, -1, -1000])
def test_non_positive_duration_rejected(duration):
    with pytest.raises(ValidationError):
        MotionProfile(start_speed=0, end_speed=100, duration_ms=duration).validate()


def test_sender_must_be_slower_than_receiver():
    with pytest.raises(ValidationError):
        MotionProfile(start_speed=0, end_speed=100, duration_ms=1000,
                      sender_interval_ms=20, receiver_interval_ms=20).validate()


def test_validation_error_is_value_error():
    assert issubclass(ValidationError, ValueError)


def test_presets_are_valid():
    for profile in PRESETS.values():
        profile.validate()
    assert PRESETS["emergency_stop"].accelerating is False
    assert PRESETS["urban_launch"].accelerating is True


def test_horizon_covers_two_sender_periods():
    profile = MotionProfile(start_speed=0, end_speed=100, duration_ms=1000)
    assert profile.horizon_ms == 1210


@pytest.mark.parametrize("duration", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_duration_rejected(duration):
    with pytest.raises(ValidationError):
        MotionProfile(start_speed=0, end_speed=100, duration_ms=duration).validate()


@pytest.mark.parametrize("field", ["sender_interval_ms", "receiver_interval_ms"])
@pytest.mark.parametrize("value", [float("nan"), float("inf")])
def test_non_finite_intervals_rejected(field, value):
    profile = replace(MotionProfile(start_speed=0, end_speed=100, duration_ms=1000), **{field: value})
    with pytest.raises(ValidationError):
        profile.validate()
