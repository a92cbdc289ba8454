# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Simulation clock.

Accumulates simulated milliseconds as real elapsed time × speed, with
pause/resume, reset and a seek to the present instant. One clock is owned
by whoever drives the frame loop and handed to consumers explicitly.
"""
import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from orrery.domain.time_systems import (
    DAYS_PER_JULIAN_YEAR,
    J2000_EPOCH,
    ms_since_j2000,
    ms_to_days,
    simulation_time_to_datetime,
    unix_ms_to_datetime,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClockConfig:
    """Speed bounds and sanity limits for a SimulationClock."""
    min_speed: float = 1.0
    max_speed: float = 500_000.0
    default_speed: float = 100_000.0
    large_delta_warning_ms: float = 1000.0


DEFAULT_CLOCK_CONFIG: ClockConfig = ClockConfig()


def validate_clock_config(config: ClockConfig) -> ClockConfig:
    """Raises ValueError unless 0 < min_speed <= default_speed <= max_speed."""
    for name in ("min_speed", "max_speed", "default_speed", "large_delta_warning_ms"):
        value = getattr(config, name)
        if not math.isfinite(value):
            raise ValueError(f"{name} must be finite, got {value}")
    if config.min_speed <= 0.0:
        raise ValueError(f"min_speed must be positive, got {config.min_speed}")
    if not config.min_speed <= config.default_speed <= config.max_speed:
        raise ValueError(
            f"default_speed must lie in [min_speed, max_speed], got "
            f"{config.default_speed} outside [{config.min_speed}, {config.max_speed}]"
        )
    return config


def _wall_clock_ms() -> float:
    return time.time() * 1000.0


def format_duration(duration_ms: float) -> str:
    """Human-readable span: minutes, hours, days, or years (365.25 d)."""
    days = ms_to_days(duration_ms)
    if days < 1.0:
        hours = days * 24.0
        if hours < 1.0:
            return f"{hours * 60.0:.1f} minutes"
        return f"{hours:.1f} hours"
    if days < 365.0:
        return f"{days:.1f} days"
    return f"{days / DAYS_PER_JULIAN_YEAR:.2f} years"


def format_speed(multiplier: float) -> str:
    """Speed multiplier as '500x' or '12.5kx'."""
    if multiplier >= 1000.0:
        return f"{multiplier / 1000.0:.1f}kx"
    return f"{multiplier:g}x"


class SimulationClock:
    """
    Frame-driven simulation clock.

    Either call ``tick(real_delta_ms)`` with a measured frame delta, or
    ``update()`` to let the clock read its own wall-clock source.
    """

    def __init__(
        self,
        config: ClockConfig = DEFAULT_CLOCK_CONFIG,
        time_source: Callable[[], float] = _wall_clock_ms,
    ) -> None:
        self._config = validate_clock_config(config)
        self._time_source = time_source

        self._simulation_time = 0.0
        self._speed = config.default_speed
        self._paused = False

        self._real_delta = 0.0
        self._simulation_delta = 0.0
        self._last_real_time = time_source()

        self._fps = 0
        self._frame_count = 0
        self._last_fps_update = self._last_real_time

    # -- Frame advance ------------------------------------------------------ #

    def tick(self, real_delta_ms: float) -> float:
        """
        Advance by one frame of real_delta_ms real milliseconds.

        Returns:
            Simulation time after the tick.

        Raises:
            ValueError: If the delta is negative or not finite.
        """
        if not math.isfinite(real_delta_ms):
            raise ValueError(f"real_delta_ms must be finite, got {real_delta_ms}")
        if real_delta_ms < 0.0:
            raise ValueError(f"real_delta_ms must be non-negative, got {real_delta_ms}")
        if real_delta_ms > self._config.large_delta_warning_ms:
            logger.warning("Unusually large frame delta: %.1f ms", real_delta_ms)

        self._real_delta = real_delta_ms
        if self._paused:
            self._simulation_delta = 0.0
        else:
            self._simulation_delta = real_delta_ms * self._speed
            self._simulation_time += self._simulation_delta
        return self._simulation_time

    def update(self) -> float:
        """Measure the real delta since the previous call and tick."""
        now = self._time_source()
        delta = max(0.0, now - self._last_real_time)
        self._last_real_time = now

        self._frame_count += 1
        since_fps = now - self._last_fps_update
        if since_fps >= 1000.0:
            self._fps = round(self._frame_count / since_fps * 1000.0)
            self._frame_count = 0
            self._last_fps_update = now

        return self.tick(delta)

    # -- Control ------------------------------------------------------------ #

    def set_speed(self, multiplier: float) -> float:
        """
        Set the speed multiplier, clamped to the configured bounds.

        Returns:
            The speed actually applied.

        Raises:
            ValueError: If multiplier is NaN or infinite.
        """
        if not isinstance(multiplier, (int, float)) or not math.isfinite(multiplier):
            raise ValueError(f"speed multiplier must be a finite number, got {multiplier!r}")
        self._speed = max(self._config.min_speed, min(self._config.max_speed, float(multiplier)))
        return self._speed

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        """Resume and re-anchor the wall clock so the pause is not counted."""
        self._paused = False
        self._last_real_time = self._time_source()

    def toggle_pause(self) -> bool:
        """Flip the paused state; returns True if now paused."""
        if self._paused:
            self.resume()
        else:
            self.pause()
        return self._paused

    def reset(self) -> None:
        """Back to simulation time zero."""
        self._simulation_time = 0.0
        self._real_delta = 0.0
        self._simulation_delta = 0.0
        self._last_real_time = self._time_source()

    def set_simulation_time(self, simulation_time_ms: float) -> None:
        if not math.isfinite(simulation_time_ms):
            raise ValueError(f"simulation_time_ms must be finite, got {simulation_time_ms}")
        self._simulation_time = float(simulation_time_ms)

    def seek_to_real_now(self) -> float:
        """Jump to the present: simulation time = now - J2000.0 in ms."""
        now = unix_ms_to_datetime(self._time_source())
        self._simulation_time = ms_since_j2000(now)
        logger.info(
            "Simulation time reset to current real-world time (%s since J2000)",
            self.format_simulation_time(),
        )
        return self._simulation_time

    # -- State -------------------------------------------------------------- #

    @property
    def config(self) -> ClockConfig:
        return self._config

    @property
    def simulation_time(self) -> float:
        """Simulated milliseconds since simulation start."""
        return self._simulation_time

    @property
    def simulation_days(self) -> float:
        return ms_to_days(self._simulation_time)

    @property
    def simulation_delta(self) -> float:
        """Simulated milliseconds added by the last tick."""
        return self._simulation_delta

    @property
    def real_delta(self) -> float:
        """Real milliseconds consumed by the last tick."""
        return self._real_delta

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def fps(self) -> int:
        return self._fps

    def current_date(self, start_epoch: datetime = J2000_EPOCH) -> datetime:
        """Calendar instant corresponding to the simulation time."""
        return simulation_time_to_datetime(self._simulation_time, start_epoch)

    def format_simulation_time(self) -> str:
        return format_duration(self._simulation_time)

    def format_time_speed(self) -> str:
        return format_speed(self._speed)
