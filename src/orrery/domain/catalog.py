# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Reference-data record parsing.

Converts catalog dicts (as read from JSON) into BodyDefinition objects.
Element records may give either the argument of periapsis or the JPL
longitude of perihelion; both forms yield the same OrbitalElements.
"""
import math

from orrery.domain.orbital_elements import (
    CircularOrbit,
    ElementRates,
    OrbitalElements,
    elements_from_perihelion,
    make_circular_orbit,
    make_orbital_elements,
)
from orrery.domain.solar_system import BodyDefinition, validate_body


_PERIAPSIS_KEYS = ("arg_periapsis_deg", "long_perihelion_deg")


def _periapsis_form(record: dict, context: str) -> str | None:
    """Which periapsis key a record uses, or None if it gives neither."""
    present = [key for key in _PERIAPSIS_KEYS if key in record]
    if len(present) > 1:
        raise ValueError(
            f"{context} gives both arg_periapsis_deg and long_perihelion_deg; use one"
        )
    return present[0] if present else None


def _parse_rates(record: dict, form: str) -> ElementRates:
    """Rates in the same periapsis form as the element record they belong to."""
    other = "long_perihelion_deg" if form == "arg_periapsis_deg" else "arg_periapsis_deg"
    if _periapsis_form(record, "rates_per_century") == other:
        raise ValueError(f"rates_per_century uses {other} but the elements use {form}")

    node = record.get("long_asc_node_deg", 0.0)
    if form == "arg_periapsis_deg":
        argp = record.get("arg_periapsis_deg", 0.0)
    else:
        argp = record.get("long_perihelion_deg", 0.0) - node
    return ElementRates(
        semi_major_axis_au=record.get("semi_major_axis_au", 0.0),
        eccentricity=record.get("eccentricity", 0.0),
        inclination_deg=record.get("inclination_deg", 0.0),
        long_asc_node_deg=node,
        arg_periapsis_deg=argp,
        mean_longitude_deg=record.get("mean_longitude_deg", 0.0),
    )


def parse_elements_record(record: dict) -> OrbitalElements:
    """
    Parse an element record.

    Required: semi_major_axis_au, eccentricity, inclination_deg,
    long_asc_node_deg, mean_longitude_deg, and exactly one of
    arg_periapsis_deg or long_perihelion_deg. Optional: rates_per_century
    with the same keys, in the same periapsis form as the elements.

    Raises:
        KeyError: If a required field is missing.
        ValueError: If a value is out of range or both periapsis forms are given.
    """
    form = _periapsis_form(record, "elements")
    if form is None:
        raise KeyError("arg_periapsis_deg or long_perihelion_deg")

    rates = None
    rates_record = record.get("rates_per_century")
    if rates_record is not None:
        rates = _parse_rates(rates_record, form)

    if form == "arg_periapsis_deg":
        return make_orbital_elements(
            semi_major_axis_au=record["semi_major_axis_au"],
            eccentricity=record["eccentricity"],
            inclination_deg=record["inclination_deg"],
            long_asc_node_deg=record["long_asc_node_deg"],
            arg_periapsis_deg=record["arg_periapsis_deg"],
            mean_longitude_deg=record["mean_longitude_deg"],
            rates=rates,
        )
    return elements_from_perihelion(
        semi_major_axis_au=record["semi_major_axis_au"],
        eccentricity=record["eccentricity"],
        inclination_deg=record["inclination_deg"],
        long_asc_node_deg=record["long_asc_node_deg"],
        long_perihelion_deg=record["long_perihelion_deg"],
        mean_longitude_deg=record["mean_longitude_deg"],
        rates=rates,
    )


def parse_circular_record(record: dict, au_km: float) -> CircularOrbit:
    """
    Parse a circular-orbit record.

    The radius is given as radius_km or radius_au; the start angle as
    start_angle_deg or start_angle_rad.
    """
    if "radius_km" in record:
        radius_km = record["radius_km"]
    elif "radius_au" in record:
        radius_km = record["radius_au"] * au_km
    else:
        raise KeyError("radius_km or radius_au")

    if "start_angle_rad" in record:
        start = record["start_angle_rad"]
    else:
        start = math.radians(record.get("start_angle_deg", 0.0))

    return make_circular_orbit(
        radius_km=radius_km,
        period_days=record["period_days"],
        start_angle_rad=start,
        radius_scale=record.get("radius_scale", 1.0),
    )


def parse_body_record(body_id: str, record: dict, au_km: float) -> BodyDefinition:
    """Parse one body entry keyed by its id."""
    elements = None
    if record.get("elements") is not None:
        elements = parse_elements_record(record["elements"])

    circular = None
    if record.get("circular") is not None:
        circular = parse_circular_record(record["circular"], au_km)

    return validate_body(BodyDefinition(
        body_id=body_id,
        name=record.get("name", body_id.title()),
        kind=record["kind"],
        parent_id=record.get("parent"),
        elements=elements,
        circular=circular,
    ))


def parse_catalog(data: dict, au_km: float = 149_597_870.7) -> list[BodyDefinition]:
    """
    Parse a whole catalog: ``{"bodies": {body_id: record, ...}}``.

    Raises:
        KeyError: If a body or field is missing (message names the body).
        ValueError: If a field is out of range (message names the body).
    """
    bodies = []
    for body_id, record in data["bodies"].items():
        try:
            bodies.append(parse_body_record(body_id, record, au_km))
        except KeyError as exc:
            raise KeyError(f"{body_id}: missing field {exc.args[0]}") from exc
        except ValueError as exc:
            if str(exc).startswith(f"{body_id}:"):
                raise
            raise ValueError(f"{body_id}: {exc}") from exc
    return bodies
