# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Epoch and calendar utilities: Julian Date, J2000.0 offsets, simulation time.

Simulation time is a millisecond count measured from a start epoch
(J2000.0 unless the caller says otherwise). Orbital elements and their
secular rates are anchored at J2000.0 = JD 2451545.0.
"""

import math
from datetime import datetime, timezone, timedelta

# --------------------------------------------------------------------------- #
# Constants
# --------------------------------------------------------------------------- #

J2000_JD: float = 2451545.0
"""Julian Date of the J2000.0 epoch."""

J2000_EPOCH: datetime = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
"""J2000.0 as a calendar instant (2000-01-01T12:00:00Z)."""

UNIX_EPOCH_JD: float = 2440587.5
"""Julian Date of 1970-01-01T00:00:00Z."""

DAYS_PER_JULIAN_CENTURY: float = 36525.0

DAYS_PER_JULIAN_YEAR: float = 365.25

MS_PER_DAY: float = 86_400_000.0

_SECONDS_PER_DAY: float = 86400.0


def _as_utc(dt: datetime) -> datetime:
    """Naive datetimes are treated as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


# --------------------------------------------------------------------------- #
# Unit helpers
# --------------------------------------------------------------------------- #

def days_to_ms(days: float) -> float:
    """Convert days to milliseconds."""
    return days * MS_PER_DAY


def ms_to_days(ms: float) -> float:
    """Convert milliseconds to days."""
    return ms / MS_PER_DAY


# --------------------------------------------------------------------------- #
# Julian Date utilities
# --------------------------------------------------------------------------- #

def datetime_to_jd(dt: datetime) -> float:
    """Convert a UTC datetime to Julian Date.

    Uses the standard algorithm (Meeus, Astronomical Algorithms, Ch. 7).
    """
    dt = _as_utc(dt).astimezone(timezone.utc)

    y = dt.year
    m = dt.month
    d = (dt.day
         + dt.hour / 24.0
         + dt.minute / 1440.0
         + dt.second / 86400.0
         + dt.microsecond / 86400_000_000.0)

    if m <= 2:
        y -= 1
        m += 12

    A = y // 100
    B = 2 - A + A // 4

    return (math.floor(365.25 * (y + 4716))
            + math.floor(30.6001 * (m + 1))
            + d + B - 1524.5)


def jd_to_datetime(jd: float) -> datetime:
    """Convert Julian Date back to a UTC datetime.

    Inverse of datetime_to_jd. Meeus Ch. 7 inverse.
    """
    if not math.isfinite(jd):
        raise ValueError(f"Julian Date must be finite, got {jd}")

    jd_plus = jd + 0.5
    Z = int(jd_plus)
    F = jd_plus - Z

    if Z < 2299161:
        A = Z
    else:
        alpha = int((Z - 1867216.25) / 36524.25)
        A = Z + 1 + alpha - alpha // 4

    B = A + 1524
    C = int((B - 122.1) / 365.25)
    D = int(365.25 * C)
    E = int((B - D) / 30.6001)

    day_frac = B - D - int(30.6001 * E) + F

    if E < 14:
        month = E - 1
    else:
        month = E - 13

    if month > 2:
        year = C - 4716
    else:
        year = C - 4715

    day = int(day_frac)
    remainder = (day_frac - day) * _SECONDS_PER_DAY
    # Rounding to whole microseconds absorbs float noise; timedelta carries
    # any overflow into the next second/minute/day.
    micros = int(round(remainder * 1_000_000.0))

    return (datetime(year, month, day, tzinfo=timezone.utc)
            + timedelta(microseconds=micros))


def days_since_j2000(dt: datetime) -> float:
    """Days elapsed since J2000.0 (negative before 2000-01-01T12:00Z)."""
    return datetime_to_jd(dt) - J2000_JD


def centuries_since_j2000(dt: datetime) -> float:
    """Julian centuries since J2000.0, the T used to scale secular rates."""
    return days_since_j2000(dt) / DAYS_PER_JULIAN_CENTURY


def julian_centuries_from_jd(jd: float) -> float:
    """Julian centuries between a Julian Date and J2000.0."""
    return (jd - J2000_JD) / DAYS_PER_JULIAN_CENTURY


# --------------------------------------------------------------------------- #
# Simulation time <-> calendar
# --------------------------------------------------------------------------- #

def simulation_time_to_datetime(
    simulation_time_ms: float,
    start_epoch: datetime = J2000_EPOCH,
) -> datetime:
    """Map simulation milliseconds onto an absolute UTC instant."""
    if not math.isfinite(simulation_time_ms):
        raise ValueError(
            f"simulation_time_ms must be finite, got {simulation_time_ms}"
        )
    return _as_utc(start_epoch) + timedelta(milliseconds=simulation_time_ms)


def datetime_to_simulation_time(
    dt: datetime,
    start_epoch: datetime = J2000_EPOCH,
) -> float:
    """Milliseconds between start_epoch and dt (the inverse mapping)."""
    return (_as_utc(dt) - _as_utc(start_epoch)).total_seconds() * 1000.0


def ms_since_j2000(dt: datetime) -> float:
    """Milliseconds since J2000.0; the clock uses this to seek to 'now'."""
    return datetime_to_simulation_time(dt, J2000_EPOCH)


def unix_ms_to_datetime(unix_ms: float) -> datetime:
    """Convert epoch milliseconds (as returned by a wall clock) to UTC."""
    return datetime(1970, 1, 1, tzinfo=timezone.utc) + timedelta(milliseconds=unix_ms)
