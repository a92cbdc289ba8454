# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Circular-orbit kinematics.

Angle, angular rate and event timing for bodies on uniform circular
orbits. Times are simulation milliseconds, periods are days.
"""
import math

from orrery.domain.time_systems import days_to_ms

_TWO_PI = 2.0 * math.pi


def _period_ms(period_days: float) -> float:
    if not math.isfinite(period_days) or period_days <= 0.0:
        raise ValueError(f"period_days must be positive and finite, got {period_days}")
    return days_to_ms(period_days)


def orbital_angle(
    simulation_time_ms: float,
    period_days: float,
    start_angle_rad: float = 0.0,
) -> float:
    """Orbital angle at a simulation time, wrapped to [0, 2π)."""
    angle = math.fmod(
        start_angle_rad + simulation_time_ms / _period_ms(period_days) * _TWO_PI,
        _TWO_PI,
    )
    if angle < 0.0:
        angle += _TWO_PI
    return angle if angle < _TWO_PI else 0.0


def angular_velocity(period_days: float) -> float:
    """Mean angular rate in radians per millisecond."""
    return _TWO_PI / _period_ms(period_days)


def orbital_speed(radius: float, period_days: float) -> float:
    """Speed along a circle: v = 2πr / T, in radius units per millisecond."""
    return _TWO_PI * radius / _period_ms(period_days)


def time_to_orbital_event(
    current_angle_rad: float,
    target_angle_rad: float,
    period_days: float,
) -> float:
    """Milliseconds until the body next reaches target_angle_rad."""
    delta = math.fmod(target_angle_rad - current_angle_rad, _TWO_PI)
    if delta < 0.0:
        delta += _TWO_PI
    return delta / _TWO_PI * _period_ms(period_days)


def _angular_separation(angle1_rad: float, angle2_rad: float) -> float:
    """Absolute separation folded into [0, π]."""
    diff = math.fmod(abs(angle1_rad - angle2_rad), _TWO_PI)
    return _TWO_PI - diff if diff > math.pi else diff


def is_conjunction(
    angle1_rad: float,
    angle2_rad: float,
    threshold_rad: float = math.pi / 12,
) -> bool:
    """True when two bodies are on the same side of the centre (within threshold)."""
    return _angular_separation(angle1_rad, angle2_rad) < threshold_rad


def is_opposition(
    angle1_rad: float,
    angle2_rad: float,
    threshold_rad: float = math.pi / 12,
) -> bool:
    """True when two bodies are on opposite sides of the centre (within threshold)."""
    return abs(_angular_separation(angle1_rad, angle2_rad) - math.pi) < threshold_rad
