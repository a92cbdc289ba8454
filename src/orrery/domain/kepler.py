# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Kepler's equation and anomaly conversions.

Solves M = E - e·sin(E) for the eccentric anomaly by Newton-Raphson and
converts between mean, eccentric and true anomaly. Elliptical orbits only
(0 <= e < 1); parabolic and hyperbolic cases are rejected.
"""
import logging
import math
from dataclasses import dataclass

logger = logging.getLogger(__name__)

KEPLER_TOLERANCE: float = 1e-8
"""Convergence threshold on |ΔE| in radians (~0.000002°)."""

KEPLER_MAX_ITERATIONS: int = 50

_HIGH_ECCENTRICITY: float = 0.8


@dataclass(frozen=True)
class KeplerSolution:
    """Outcome of a Kepler's-equation solve.

    A non-converged solution still carries the best estimate; callers
    decide whether to log, retry with a relaxed tolerance, or accept it.
    """
    eccentric_anomaly: float
    iterations: int
    converged: bool
    last_step: float
    mean_anomaly: float
    eccentricity: float

    @property
    def residual(self) -> float:
        """E - e·sin(E) - M evaluated at the returned estimate."""
        E = self.eccentric_anomaly
        return E - self.eccentricity * math.sin(E) - self.mean_anomaly


def _check_eccentricity(e: float) -> None:
    if not math.isfinite(e):
        raise ValueError(f"eccentricity must be finite, got {e}")
    if e < 0.0 or e >= 1.0:
        raise ValueError(
            f"eccentricity must be in [0, 1) for an elliptical orbit, got {e}"
        )


def solve_kepler(
    mean_anomaly: float,
    e: float,
    tolerance: float = KEPLER_TOLERANCE,
    max_iterations: int = KEPLER_MAX_ITERATIONS,
) -> KeplerSolution:
    """
    Solve Kepler's equation M = E - e·sin(E) by Newton-Raphson.

        E_{n+1} = E_n - (E_n - e·sin(E_n) - M) / (1 - e·cos(E_n))

    The starting guess is E₀ = M for e < 0.8 and sign(sin M)·π otherwise
    (Danby, taken in M's revolution), since E₀ = M can overshoot for highly
    eccentric orbits.

    Args:
        mean_anomaly: Mean anomaly M (radians).
        e: Eccentricity, 0 <= e < 1.
        tolerance: Stop once |ΔE| falls below this (radians).
        max_iterations: Hard cap on Newton steps.

    Returns:
        KeplerSolution. Reaching the iteration cap is reported through
        ``converged=False``, never raised.

    Raises:
        ValueError: If e is outside [0, 1) or M is not finite.
    """
    _check_eccentricity(e)
    if not math.isfinite(mean_anomaly):
        raise ValueError(f"mean_anomaly must be finite, got {mean_anomaly}")
    if max_iterations < 1:
        raise ValueError(f"max_iterations must be >= 1, got {max_iterations}")

    M = mean_anomaly
    sin_m = math.sin(M)
    if e < _HIGH_ECCENTRICITY or sin_m == 0.0:
        E = M
    else:
        # ±π within the same revolution as M, so M in (π, 2π) starts at π.
        E = M - math.remainder(M, 2.0 * math.pi) + math.copysign(math.pi, sin_m)

    delta = math.inf
    iterations = 0
    while abs(delta) >= tolerance and iterations < max_iterations:
        f = E - e * math.sin(E) - M
        f_prime = 1.0 - e * math.cos(E)
        delta = f / f_prime
        E -= delta
        iterations += 1

    return KeplerSolution(
        eccentric_anomaly=E,
        iterations=iterations,
        converged=abs(delta) < tolerance,
        last_step=delta,
        mean_anomaly=M,
        eccentricity=e,
    )


def eccentric_anomaly(mean_anomaly: float, e: float) -> float:
    """Eccentric anomaly for (M, e), logging a warning if the solve stalls."""
    solution = solve_kepler(mean_anomaly, e)
    if not solution.converged:
        logger.warning(
            "Kepler's equation did not converge after %d iterations "
            "(M=%r, e=%r, last step=%.3e); using best estimate.",
            solution.iterations, mean_anomaly, e, solution.last_step,
        )
    return solution.eccentric_anomaly


# --------------------------------------------------------------------------- #
# Anomaly conversions
# --------------------------------------------------------------------------- #

def eccentric_to_true_anomaly(E: float, e: float) -> float:
    """
    True anomaly from eccentric anomaly.

    ν = 2·atan2(√(1+e)·sin(E/2), √(1-e)·cos(E/2))

    The half-angle atan2 form stays well conditioned near E = π.
    """
    _check_eccentricity(e)
    return 2.0 * math.atan2(
        math.sqrt(1.0 + e) * math.sin(E / 2.0),
        math.sqrt(1.0 - e) * math.cos(E / 2.0),
    )


def true_to_eccentric_anomaly(nu: float, e: float) -> float:
    """Eccentric anomaly from true anomaly (inverse half-angle form)."""
    _check_eccentricity(e)
    return 2.0 * math.atan2(
        math.sqrt(1.0 - e) * math.sin(nu / 2.0),
        math.sqrt(1.0 + e) * math.cos(nu / 2.0),
    )


def eccentric_to_mean_anomaly(E: float, e: float) -> float:
    """Mean anomaly from eccentric anomaly: M = E - e·sin(E)."""
    _check_eccentricity(e)
    return E - e * math.sin(E)


def orbital_radius(a: float, e: float, E: float) -> float:
    """Distance from the focus: r = a(1 - e·cos E), in the units of a."""
    return a * (1.0 - e * math.cos(E))


def normalize_degrees(angle_deg: float) -> float:
    """Wrap an angle into [0°, 360°)."""
    wrapped = math.fmod(angle_deg, 360.0)
    if wrapped < 0.0:
        wrapped += 360.0
    # fmod of a tiny negative value can round back up to exactly 360.
    if wrapped >= 360.0:
        wrapped -= 360.0
    return wrapped


def mean_longitude_to_mean_anomaly(
    mean_longitude_deg: float,
    long_perihelion_deg: float,
) -> float:
    """
    Mean anomaly (radians) from mean longitude and longitude of perihelion.

    M = L - ϖ, with ϖ = Ω + ω, wrapped into [0°, 360°) before conversion.
    """
    return math.radians(normalize_degrees(mean_longitude_deg - long_perihelion_deg))
