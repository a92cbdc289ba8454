# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Orbital element records.

OrbitalElements holds a heliocentric J2000 element set (angles in degrees,
distances in AU) with optional secular rates per Julian century.
CircularOrbit describes a body modelled without eccentricity or
inclination, orbiting its parent's current position.

Records are validated when built; propagation never re-checks types.
"""
import math
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class ElementRates:
    """Linear rates of change per Julian century (AU/cy, 1/cy, deg/cy)."""
    semi_major_axis_au: float = 0.0
    eccentricity: float = 0.0
    inclination_deg: float = 0.0
    long_asc_node_deg: float = 0.0
    arg_periapsis_deg: float = 0.0
    mean_longitude_deg: float = 0.0


@dataclass(frozen=True)
class OrbitalElements:
    """Keplerian elements at J2000.0."""
    semi_major_axis_au: float
    eccentricity: float
    inclination_deg: float
    long_asc_node_deg: float
    arg_periapsis_deg: float
    mean_longitude_deg: float
    rates: ElementRates | None = None

    @property
    def long_perihelion_deg(self) -> float:
        """ϖ = Ω + ω."""
        return self.long_asc_node_deg + self.arg_periapsis_deg

    @property
    def has_rates(self) -> bool:
        return self.rates is not None


@dataclass(frozen=True)
class CircularOrbit:
    """Circular orbit in the parent's horizontal plane."""
    radius_km: float
    period_days: float
    start_angle_rad: float = 0.0
    radius_scale: float = 1.0


def _require_finite(name: str, value: float) -> None:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got {type(value).__name__}")
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value}")


def validate_elements(elements: OrbitalElements) -> OrbitalElements:
    """
    Check an element set for physically usable values.

    Values are never clamped: a bad table entry should fail loudly.

    Raises:
        ValueError: Naming the first offending field.
    """
    for name in (
        "semi_major_axis_au", "eccentricity", "inclination_deg",
        "long_asc_node_deg", "arg_periapsis_deg", "mean_longitude_deg",
    ):
        _require_finite(name, getattr(elements, name))

    if elements.semi_major_axis_au <= 0.0:
        raise ValueError(
            f"semi_major_axis_au must be positive, got {elements.semi_major_axis_au}"
        )
    if not 0.0 <= elements.eccentricity < 1.0:
        raise ValueError(
            f"eccentricity must be in [0, 1), got {elements.eccentricity}"
        )

    if elements.rates is not None:
        for name in (
            "semi_major_axis_au", "eccentricity", "inclination_deg",
            "long_asc_node_deg", "arg_periapsis_deg", "mean_longitude_deg",
        ):
            _require_finite(f"rates.{name}", getattr(elements.rates, name))

    return elements


def make_orbital_elements(
    semi_major_axis_au: float,
    eccentricity: float,
    inclination_deg: float,
    long_asc_node_deg: float,
    arg_periapsis_deg: float,
    mean_longitude_deg: float,
    rates: ElementRates | None = None,
) -> OrbitalElements:
    """Build and validate an OrbitalElements record."""
    return validate_elements(OrbitalElements(
        semi_major_axis_au=semi_major_axis_au,
        eccentricity=eccentricity,
        inclination_deg=inclination_deg,
        long_asc_node_deg=long_asc_node_deg,
        arg_periapsis_deg=arg_periapsis_deg,
        mean_longitude_deg=mean_longitude_deg,
        rates=rates,
    ))


def elements_from_perihelion(
    semi_major_axis_au: float,
    eccentricity: float,
    inclination_deg: float,
    long_asc_node_deg: float,
    long_perihelion_deg: float,
    mean_longitude_deg: float,
    rates: ElementRates | None = None,
) -> OrbitalElements:
    """
    Build elements from the JPL 'approximate positions' form.

    JPL tabulates ϖ (longitude of perihelion) rather than ω; here
    ω = ϖ - Ω, and the rates are converted the same way.
    """
    return make_orbital_elements(
        semi_major_axis_au=semi_major_axis_au,
        eccentricity=eccentricity,
        inclination_deg=inclination_deg,
        long_asc_node_deg=long_asc_node_deg,
        arg_periapsis_deg=long_perihelion_deg - long_asc_node_deg,
        mean_longitude_deg=mean_longitude_deg,
        rates=rates,
    )


def apply_secular_rates(elements: OrbitalElements, centuries: float) -> OrbitalElements:
    """
    Elements advanced by their linear rates over `centuries` Julian centuries.

    Returns a transient, validated copy; the reference record is untouched.
    Elements without rates are returned unchanged.

    Raises:
        ValueError: If the drifted elements leave the valid range.
    """
    _require_finite("centuries", centuries)
    rates = elements.rates
    if rates is None:
        return elements

    drifted = replace(
        elements,
        semi_major_axis_au=elements.semi_major_axis_au + rates.semi_major_axis_au * centuries,
        eccentricity=elements.eccentricity + rates.eccentricity * centuries,
        inclination_deg=elements.inclination_deg + rates.inclination_deg * centuries,
        long_asc_node_deg=elements.long_asc_node_deg + rates.long_asc_node_deg * centuries,
        arg_periapsis_deg=elements.arg_periapsis_deg + rates.arg_periapsis_deg * centuries,
        mean_longitude_deg=elements.mean_longitude_deg + rates.mean_longitude_deg * centuries,
    )
    return validate_elements(drifted)


def validate_circular_orbit(orbit: CircularOrbit) -> CircularOrbit:
    """
    Check a circular orbit descriptor.

    Raises:
        ValueError: Naming the first offending field.
    """
    for name in ("radius_km", "period_days", "start_angle_rad", "radius_scale"):
        _require_finite(name, getattr(orbit, name))
    if orbit.radius_km <= 0.0:
        raise ValueError(f"radius_km must be positive, got {orbit.radius_km}")
    if orbit.period_days <= 0.0:
        raise ValueError(f"period_days must be positive, got {orbit.period_days}")
    if orbit.radius_scale <= 0.0:
        raise ValueError(f"radius_scale must be positive, got {orbit.radius_scale}")
    return orbit


def make_circular_orbit(
    radius_km: float,
    period_days: float,
    start_angle_rad: float = 0.0,
    radius_scale: float = 1.0,
) -> CircularOrbit:
    """Build and validate a CircularOrbit record."""
    return validate_circular_orbit(CircularOrbit(
        radius_km=radius_km,
        period_days=period_days,
        start_angle_rad=start_angle_rad,
        radius_scale=radius_scale,
    ))
