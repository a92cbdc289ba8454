# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Command-line interface for the orrery engine.

Usage:
    # Scene positions of every body at a date
    orrery positions --date 2024-03-20T00:00:00

    # Same, with secular element drift or simplified circular planets
    orrery positions --date 2024-03-20 --secular
    orrery positions --circular

    # Orbital snapshot of one planet
    orrery info mars --date 2030-01-01

    # Headless run of the simulation clock
    orrery simulate --speed 100000 --frames 600 --frame-ms 16.67

    # Use a custom body catalog
    orrery --catalog my_bodies.json positions
"""
import argparse
import logging
import sys
from datetime import datetime, timezone

from orrery.adapters.json_catalog import load_default_system
from orrery.domain.clock import ClockConfig, SimulationClock
from orrery.domain.propagation import Position, distance_from_origin, orbital_info
from orrery.domain.solar_system import SolarSystem
from orrery.domain.time_systems import (
    datetime_to_jd,
    datetime_to_simulation_time,
)

logger = logging.getLogger(__name__)


def parse_date(text: str | None) -> datetime:
    """ISO-8601 date or datetime; naive values are UTC, None means now."""
    if text is None:
        return datetime.now(tz=timezone.utc)
    try:
        value = datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"Invalid date {text!r}; expected ISO-8601, e.g. 2024-03-20T12:00") from None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def format_position_row(body_id: str, position: Position, system: SolarSystem) -> str:
    distance = distance_from_origin(position, system.scale)
    return (
        f"{body_id:<10} {position.x:>12.3f} {position.y:>12.3f} {position.z:>12.3f}"
        f" {distance:>10.4f}"
    )


def _table(system: SolarSystem, positions: dict[str, Position]) -> list[str]:
    header = f"{'body':<10} {'x':>12} {'y':>12} {'z':>12} {'r [AU]':>10}"
    lines = [header, "-" * len(header)]
    for body_id in system.update_order:
        lines.append(format_position_row(body_id, positions[body_id], system))
    return lines


def run_positions(
    date: datetime,
    catalog: str | None = None,
    secular: bool = False,
    circular: bool = False,
) -> list[str]:
    """Positions of every body at a date, as printable lines."""
    system = load_default_system(
        catalog, accurate_orbits=not circular, apply_secular_rates=secular,
    )
    positions = system.update(datetime_to_simulation_time(date, system.start_epoch))
    mode = "circular" if circular else ("keplerian+secular" if secular else "keplerian")
    lines = [f"Date: {date.isoformat()}  JD {datetime_to_jd(date):.5f}  mode: {mode}"]
    return lines + _table(system, positions)


def run_info(body_id: str, date: datetime, catalog: str | None = None) -> list[str]:
    """Orbital snapshot of one body with Keplerian elements."""
    system = load_default_system(catalog)
    body = system.body(body_id)
    if body.elements is None:
        raise ValueError(f"{body_id!r} has no Keplerian elements; info needs an elliptical orbit")

    info = orbital_info(body.elements, date, system.scale)
    elements = body.elements
    return [
        f"{body.name} ({body.kind}, parent: {body.parent_id})",
        f"  date              {info.current_date}",
        f"  semi-major axis   {elements.semi_major_axis_au:.6f} AU",
        f"  eccentricity      {info.eccentricity:.6f}",
        f"  inclination       {elements.inclination_deg:.4f} deg",
        f"  perihelion        {info.perihelion_au:.6f} AU",
        f"  aphelion          {info.aphelion_au:.6f} AU",
        f"  distance          {info.distance_au:.6f} AU",
        f"  scene position    ({info.position.x:.3f}, {info.position.y:.3f}, {info.position.z:.3f})",
    ]


def run_simulate(
    speed: float,
    frames: int,
    frame_ms: float,
    catalog: str | None = None,
    circular: bool = False,
) -> list[str]:
    """
    Drive the clock for a number of fixed-length frames.

    Returns printable lines: the clock summary and final positions.
    """
    if frames < 1:
        raise ValueError(f"frames must be >= 1, got {frames}")
    system = load_default_system(catalog, accurate_orbits=not circular)
    clock = SimulationClock(ClockConfig())
    applied = clock.set_speed(speed)
    if applied != speed:
        logger.warning("Speed %r clamped to %r", speed, applied)

    positions: dict[str, Position] = {}
    for _ in range(frames):
        positions = system.step(clock, frame_ms)

    lines = [
        f"Frames: {frames} x {frame_ms:g} ms at {clock.format_time_speed()}",
        f"Simulated: {clock.format_simulation_time()}",
        f"Date: {clock.current_date(system.start_epoch).isoformat()}",
    ]
    return lines + _table(system, positions)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="orrery",
        description="Keplerian solar-system positions and simulation clock",
    )
    parser.add_argument(
        '--verbose', '-v', action='store_true', default=False,
        help="Enable debug logging",
    )
    parser.add_argument(
        '--catalog',
        help="Path to a body catalog JSON (default: bundled catalog)",
    )
    sub = parser.add_subparsers(dest='command', required=True)

    positions = sub.add_parser('positions', help="Scene positions of all bodies at a date")
    positions.add_argument('--date', help="ISO-8601 date (default: now, UTC)")
    positions.add_argument(
        '--secular', action='store_true', default=False,
        help="Apply per-century element rates",
    )
    positions.add_argument(
        '--circular', action='store_true', default=False,
        help="Use simplified circular planet orbits",
    )

    info = sub.add_parser('info', help="Orbital snapshot of one body")
    info.add_argument('body', help="Body id, e.g. mars")
    info.add_argument('--date', help="ISO-8601 date (default: now, UTC)")

    simulate = sub.add_parser('simulate', help="Run the simulation clock headless")
    simulate.add_argument(
        '--speed', type=float, default=ClockConfig().default_speed,
        help="Time multiplier (default: %(default)g)",
    )
    simulate.add_argument('--frames', type=int, default=60, help="Frame count (default: 60)")
    simulate.add_argument(
        '--frame-ms', type=float, default=1000.0 / 60.0,
        help="Real milliseconds per frame (default: 16.67)",
    )
    simulate.add_argument(
        '--circular', action='store_true', default=False,
        help="Use simplified circular planet orbits",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == 'positions':
            lines = run_positions(
                parse_date(args.date), args.catalog,
                secular=args.secular, circular=args.circular,
            )
        elif args.command == 'info':
            lines = run_info(args.body, parse_date(args.date), args.catalog)
        else:
            lines = run_simulate(
                args.speed, args.frames, args.frame_ms,
                catalog=args.catalog, circular=args.circular,
            )
    except FileNotFoundError as e:
        print(f"Error: catalog not found: {e.filename}", file=sys.stderr)
        sys.exit(1)
    except (KeyError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print("\n".join(lines))


if __name__ == '__main__':
    main()
