# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Position propagation for elliptical and circular orbits.

Elliptical mode composes mean longitude → mean anomaly → Kepler solve →
true anomaly/radius → orbital-plane position → ecliptic rotation →
scene axes. Circular mode places a body on a flat circle around its
parent's current position; the parent must already be positioned for
the same simulation time.
"""
import logging
import math
from dataclasses import dataclass
from datetime import datetime

import numpy as np

from orrery.domain.circular_orbits import orbital_angle
from orrery.domain.coordinate_frames import (
    DEFAULT_SCALE,
    SceneScale,
    ecliptic_to_scene,
    perifocal_to_ecliptic_matrix,
    rotate_orbital_to_ecliptic,
)
from orrery.domain.kepler import (
    KeplerSolution,
    eccentric_to_true_anomaly,
    mean_longitude_to_mean_anomaly,
    orbital_radius,
    solve_kepler,
)
from orrery.domain.orbital_elements import (
    CircularOrbit,
    OrbitalElements,
    apply_secular_rates as drift_elements,
    validate_circular_orbit,
    validate_elements,
)
from orrery.domain.time_systems import (
    J2000_EPOCH,
    centuries_since_j2000,
    simulation_time_to_datetime,
)

logger = logging.getLogger(__name__)

_TWO_PI = 2.0 * math.pi


@dataclass(frozen=True)
class Position:
    """Scene-frame position (Y up)."""
    x: float
    y: float
    z: float

    def __add__(self, other: "Position") -> "Position":
        if not isinstance(other, Position):
            return NotImplemented
        return Position(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Position") -> "Position":
        if not isinstance(other, Position):
            return NotImplemented
        return Position(self.x - other.x, self.y - other.y, self.z - other.z)

    @property
    def magnitude(self) -> float:
        return math.sqrt(self.x ** 2 + self.y ** 2 + self.z ** 2)

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


ORIGIN: Position = Position(0.0, 0.0, 0.0)


@dataclass(frozen=True)
class PropagationResult:
    """Full outcome of one elliptical propagation."""
    position: Position
    distance_au: float
    true_anomaly_rad: float
    eccentric_anomaly_rad: float
    mean_anomaly_rad: float
    kepler: KeplerSolution
    elements: OrbitalElements


@dataclass(frozen=True)
class OrbitalInfo:
    """Debug snapshot of a body on its orbit."""
    position: Position
    distance_au: float
    perihelion_au: float
    aphelion_au: float
    eccentricity: float
    current_date: str


# --------------------------------------------------------------------------- #
# Elliptical mode
# --------------------------------------------------------------------------- #

def propagate_state(
    elements: OrbitalElements,
    date: datetime,
    apply_secular_rates: bool = False,
    scale: SceneScale = DEFAULT_SCALE,
) -> PropagationResult:
    """
    Propagate an element set to a calendar instant.

    Args:
        elements: J2000 element set.
        date: UTC instant (naive datetimes are treated as UTC).
        apply_secular_rates: Drift the elements by rate × T first.
        scale: Scene scaling.

    Returns:
        PropagationResult, including the Kepler solution so callers can
        inspect convergence.

    Raises:
        ValueError: If the elements (possibly after drift) are invalid.
    """
    if apply_secular_rates:
        T = centuries_since_j2000(date)
        used = drift_elements(elements, T)
    else:
        used = validate_elements(elements)

    e = used.eccentricity
    M = mean_longitude_to_mean_anomaly(used.mean_longitude_deg, used.long_perihelion_deg)

    solution = solve_kepler(M, e)
    if not solution.converged:
        logger.warning(
            "Kepler's equation did not converge after %d iterations "
            "(M=%r, e=%r); using best estimate.",
            solution.iterations, M, e,
        )

    E = solution.eccentric_anomaly
    nu = eccentric_to_true_anomaly(E, e)
    r = orbital_radius(used.semi_major_axis_au, e, E)

    x_ecl, y_ecl, z_ecl = rotate_orbital_to_ecliptic(
        r * math.cos(nu),
        r * math.sin(nu),
        math.radians(used.arg_periapsis_deg),
        math.radians(used.inclination_deg),
        math.radians(used.long_asc_node_deg),
    )
    position = Position(*ecliptic_to_scene(x_ecl, y_ecl, z_ecl, scale.au_to_scene))

    return PropagationResult(
        position=position,
        distance_au=r,
        true_anomaly_rad=nu,
        eccentric_anomaly_rad=E,
        mean_anomaly_rad=M,
        kepler=solution,
        elements=used,
    )


def propagate(
    elements: OrbitalElements,
    date: datetime,
    apply_secular_rates: bool = False,
    scale: SceneScale = DEFAULT_SCALE,
) -> Position:
    """Scene position of an element set at a calendar instant."""
    return propagate_state(elements, date, apply_secular_rates, scale).position


def propagate_at_simulation_time(
    elements: OrbitalElements,
    simulation_time_ms: float,
    start_epoch: datetime = J2000_EPOCH,
    apply_secular_rates: bool = False,
    scale: SceneScale = DEFAULT_SCALE,
) -> Position:
    """Scene position at start_epoch + simulation_time_ms."""
    date = simulation_time_to_datetime(simulation_time_ms, start_epoch)
    return propagate(elements, date, apply_secular_rates, scale)


# --------------------------------------------------------------------------- #
# Circular fast path
# --------------------------------------------------------------------------- #

def circular_phase(orbit: CircularOrbit, simulation_time_ms: float) -> float:
    """θ = θ₀ + 2π·t/P, wrapped to [0, 2π)."""
    if not math.isfinite(simulation_time_ms):
        raise ValueError(f"simulation_time_ms must be finite, got {simulation_time_ms}")
    return orbital_angle(simulation_time_ms, orbit.period_days, orbit.start_angle_rad)


def circular_radius_scene(orbit: CircularOrbit, scale: SceneScale = DEFAULT_SCALE) -> float:
    """Orbit radius in scene units, including the visual exaggeration."""
    return scale.km(orbit.radius_km) * orbit.radius_scale


def propagate_circular(
    orbit: CircularOrbit,
    simulation_time_ms: float,
    parent_position: Position = ORIGIN,
    scale: SceneScale = DEFAULT_SCALE,
) -> Position:
    """
    Position on a circular orbit around the parent's current position.

    The orbit lies in the parent's horizontal (X-Z) plane; no inclination
    or eccentricity. parent_position must be the parent's position for the
    same simulation_time_ms, otherwise the child is off by the same amount.

    Raises:
        ValueError: If the descriptor or time is invalid.
    """
    validate_circular_orbit(orbit)
    theta = circular_phase(orbit, simulation_time_ms)
    r = circular_radius_scene(orbit, scale)
    return Position(
        parent_position.x + r * math.cos(theta),
        parent_position.y,
        parent_position.z + r * math.sin(theta),
    )


# --------------------------------------------------------------------------- #
# Diagnostics
# --------------------------------------------------------------------------- #

def perihelion_distance(a: float, e: float) -> float:
    """Closest approach to the focus: a(1 - e)."""
    return a * (1.0 - e)


def aphelion_distance(a: float, e: float) -> float:
    """Farthest distance from the focus: a(1 + e)."""
    return a * (1.0 + e)


def distance_from_origin(position: Position, scale: SceneScale = DEFAULT_SCALE) -> float:
    """Distance of a scene position from the origin, in AU."""
    return scale.to_au(position.magnitude)


def orbital_info(
    elements: OrbitalElements,
    date: datetime,
    scale: SceneScale = DEFAULT_SCALE,
) -> OrbitalInfo:
    """Position, distance and apsides of an element set at a date."""
    position = propagate(elements, date, scale=scale)
    return OrbitalInfo(
        position=position,
        distance_au=distance_from_origin(position, scale),
        perihelion_au=perihelion_distance(elements.semi_major_axis_au, elements.eccentricity),
        aphelion_au=aphelion_distance(elements.semi_major_axis_au, elements.eccentricity),
        eccentricity=elements.eccentricity,
        current_date=date.isoformat(),
    )


def _orbit_points_scene(
    elements: OrbitalElements,
    eccentric_anomalies: np.ndarray,
    scale: SceneScale,
) -> np.ndarray:
    a = elements.semi_major_axis_au
    e = elements.eccentricity
    E = np.asarray(eccentric_anomalies, dtype=np.float64)

    # Perifocal coordinates straight from E: x = a(cos E - e), y = b sin E.
    x_p = a * (np.cos(E) - e)
    y_p = a * np.sqrt(1.0 - e * e) * np.sin(E)
    perifocal = np.stack([x_p, y_p, np.zeros_like(E)])

    rotation = perifocal_to_ecliptic_matrix(
        math.radians(elements.arg_periapsis_deg),
        math.radians(elements.inclination_deg),
        math.radians(elements.long_asc_node_deg),
    )
    ecl = rotation @ perifocal
    # Ecliptic → scene: (x, z, y), scaled.
    return np.stack([ecl[0], ecl[2], ecl[1]], axis=1) * scale.au_to_scene


def apsis_positions(
    elements: OrbitalElements,
    scale: SceneScale = DEFAULT_SCALE,
) -> tuple[Position, Position]:
    """Scene positions of perihelion (E = 0) and aphelion (E = π)."""
    validate_elements(elements)
    points = _orbit_points_scene(elements, np.array([0.0, math.pi]), scale)
    return Position(*map(float, points[0])), Position(*map(float, points[1]))


def orbit_path(
    elements: OrbitalElements,
    segments: int = 128,
    scale: SceneScale = DEFAULT_SCALE,
) -> np.ndarray:
    """
    Closed polyline of the full ellipse in scene coordinates.

    Sampled uniformly in eccentric anomaly; returns shape (segments + 1, 3)
    with the last point equal to the first.
    """
    if segments < 3:
        raise ValueError(f"segments must be >= 3, got {segments}")
    validate_elements(elements)
    E = np.linspace(0.0, _TWO_PI, segments + 1)
    points = _orbit_points_scene(elements, E, scale)
    points[-1] = points[0]
    return points


def circular_orbit_path(radius_scene: float, segments: int = 128) -> np.ndarray:
    """Closed circle of radius_scene in the X-Z plane, shape (segments + 1, 3)."""
    if segments < 3:
        raise ValueError(f"segments must be >= 3, got {segments}")
    if not radius_scene > 0.0:
        raise ValueError(f"radius_scene must be positive, got {radius_scene}")
    angle = np.linspace(0.0, _TWO_PI, segments + 1)
    return np.stack(
        [np.cos(angle) * radius_scene, np.zeros_like(angle), np.sin(angle) * radius_scene],
        axis=1,
    )
