# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Orrery

Keplerian orbit propagation and a speed-scaled simulation clock for a
solar-system visualization. Computes heliocentric positions of the planets
from J2000 orbital elements (with optional secular drift), places moons and
satellites on circular orbits around their parents, and positions every
body once per frame in parent-before-child order.
"""

from orrery.domain.time_systems import (
    J2000_JD,
    J2000_EPOCH,
    datetime_to_jd,
    jd_to_datetime,
    centuries_since_j2000,
    julian_centuries_from_jd,
    simulation_time_to_datetime,
    datetime_to_simulation_time,
)
from orrery.domain.kepler import (
    KeplerSolution,
    solve_kepler,
    eccentric_anomaly,
    eccentric_to_true_anomaly,
    true_to_eccentric_anomaly,
    orbital_radius,
)
from orrery.domain.coordinate_frames import (
    SceneScale,
    DEFAULT_SCALE,
    rotate_orbital_to_ecliptic,
    ecliptic_to_scene,
    scene_to_ecliptic,
    orbit_normal,
)
from orrery.domain.orbital_elements import (
    ElementRates,
    OrbitalElements,
    CircularOrbit,
    make_orbital_elements,
    make_circular_orbit,
    apply_secular_rates,
)
from orrery.domain.circular_orbits import (
    orbital_angle,
    angular_velocity,
    orbital_speed,
    time_to_orbital_event,
    is_conjunction,
    is_opposition,
)
from orrery.domain.propagation import (
    Position,
    PropagationResult,
    OrbitalInfo,
    propagate,
    propagate_state,
    propagate_at_simulation_time,
    circular_phase,
    propagate_circular,
    orbital_info,
    orbit_path,
)
from orrery.domain.clock import (
    ClockConfig,
    SimulationClock,
)
from orrery.domain.solar_system import (
    BodyDefinition,
    SolarSystem,
    dependency_order,
)
from orrery.domain.catalog import parse_catalog
from orrery.adapters.json_catalog import (
    JsonCatalogReader,
    load_bodies,
    load_default_system,
)

__version__ = "1.0.0"
