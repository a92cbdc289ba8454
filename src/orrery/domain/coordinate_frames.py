# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Coordinate frames: orbital plane → J2000 ecliptic → scene.

Ecliptic frame: +X toward the vernal equinox, +Z toward the north
ecliptic pole. Scene frame: right-handed with +Y up, so the ecliptic pole
maps onto scene Y and ecliptic Y onto scene Z.
"""
import math
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class SceneScale:
    """Length scaling between physical units and scene units."""
    au_to_scene: float = 500.0          # scene units per AU
    au_km: float = 149_597_870.7        # km per AU (IAU 2012)

    def au(self, distance_au: float) -> float:
        """AU → scene units."""
        return distance_au * self.au_to_scene

    def km(self, distance_km: float) -> float:
        """km → scene units."""
        return distance_km / self.au_km * self.au_to_scene

    def to_au(self, distance_scene: float) -> float:
        """Scene units → AU."""
        return distance_scene / self.au_to_scene


DEFAULT_SCALE: SceneScale = SceneScale()


def perifocal_to_ecliptic_matrix(
    arg_periapsis_rad: float,
    inclination_rad: float,
    long_asc_node_rad: float,
) -> np.ndarray:
    """
    Rotation matrix from the orbital (perifocal) plane to the ecliptic.

    Composition of three rotations applied in order:
        1. ω about the orbit normal (Z),
        2. i about the line of nodes (X),
        3. Ω about the ecliptic pole (Z),
    i.e. R = Rz(Ω) · Rx(i) · Rz(ω). Reordering gives a different frame.
    """
    cO = float(np.cos(long_asc_node_rad))
    sO = float(np.sin(long_asc_node_rad))
    co = float(np.cos(arg_periapsis_rad))
    so = float(np.sin(arg_periapsis_rad))
    ci = float(np.cos(inclination_rad))
    si = float(np.sin(inclination_rad))

    return np.array([
        [cO * co - sO * so * ci, -cO * so - sO * co * ci, sO * si],
        [sO * co + cO * so * ci, -sO * so + cO * co * ci, -cO * si],
        [so * si, co * si, ci],
    ])


def rotate_orbital_to_ecliptic(
    x_orbit: float,
    y_orbit: float,
    arg_periapsis_rad: float,
    inclination_rad: float,
    long_asc_node_rad: float,
) -> tuple[float, float, float]:
    """
    Rotate an orbital-plane position into J2000 ecliptic coordinates.

    Args:
        x_orbit: Coordinate toward periapsis.
        y_orbit: Coordinate 90° ahead of periapsis in the direction of motion.
        arg_periapsis_rad: ω (radians).
        inclination_rad: i (radians).
        long_asc_node_rad: Ω (radians).

    Returns:
        (x, y, z) ecliptic, in the units of the input.
    """
    rotation = perifocal_to_ecliptic_matrix(
        arg_periapsis_rad, inclination_rad, long_asc_node_rad,
    )
    ecl = rotation @ np.array([x_orbit, y_orbit, 0.0])
    return float(ecl[0]), float(ecl[1]), float(ecl[2])


def ecliptic_to_scene(
    x: float,
    y: float,
    z: float,
    factor: float = 1.0,
) -> tuple[float, float, float]:
    """
    Remap ecliptic axes onto the Y-up scene convention and scale.

    Ecliptic Z (north pole) becomes scene Y; ecliptic Y becomes scene Z.
    """
    return x * factor, z * factor, y * factor


def scene_to_ecliptic(
    x: float,
    y: float,
    z: float,
    factor: float = 1.0,
) -> tuple[float, float, float]:
    """Inverse of ecliptic_to_scene."""
    if factor == 0.0:
        raise ValueError("factor must be non-zero")
    return x / factor, z / factor, y / factor


def orbit_normal(inclination_rad: float, long_asc_node_rad: float) -> tuple[float, float, float]:
    """Unit angular-momentum direction of the orbit in ecliptic coordinates."""
    return (
        math.sin(long_asc_node_rad) * math.sin(inclination_rad),
        -math.cos(long_asc_node_rad) * math.sin(inclination_rad),
        math.cos(inclination_rad),
    )
