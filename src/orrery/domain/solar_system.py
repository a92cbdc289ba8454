# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Per-frame positioning of a hierarchy of bodies.

Bodies reference their parent by id. The update order is a topological
order of that parent graph, computed once at construction, so every child
is positioned from its parent's position for the same simulation time.
"""
import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime

from orrery.domain.clock import SimulationClock
from orrery.domain.coordinate_frames import DEFAULT_SCALE, SceneScale
from orrery.domain.orbital_elements import (
    CircularOrbit,
    OrbitalElements,
    validate_circular_orbit,
    validate_elements,
)
from orrery.domain.propagation import (
    ORIGIN,
    Position,
    propagate_at_simulation_time,
    propagate_circular,
)
from orrery.domain.time_systems import J2000_EPOCH

logger = logging.getLogger(__name__)

BODY_KINDS = ("star", "planet", "moon", "satellite")


@dataclass(frozen=True)
class BodyDefinition:
    """One body in the hierarchy.

    A body with neither elements nor a circular orbit sits at its parent's
    position (the root sits at the origin).
    """
    body_id: str
    name: str
    kind: str
    parent_id: str | None = None
    elements: OrbitalElements | None = None
    circular: CircularOrbit | None = None

    @property
    def is_fixed(self) -> bool:
        return self.elements is None and self.circular is None


def validate_body(body: BodyDefinition) -> BodyDefinition:
    if not body.body_id:
        raise ValueError("body_id must be a non-empty string")
    if body.kind not in BODY_KINDS:
        raise ValueError(
            f"{body.body_id}: kind must be one of {BODY_KINDS}, got {body.kind!r}"
        )
    if body.parent_id == body.body_id:
        raise ValueError(f"{body.body_id}: a body cannot be its own parent")
    if body.elements is not None:
        validate_elements(body.elements)
    if body.circular is not None:
        validate_circular_orbit(body.circular)
    return body


def dependency_order(bodies: list[BodyDefinition]) -> list[str]:
    """
    Parent-before-child ordering of body ids (Kahn's algorithm).

    Siblings keep their input order.

    Raises:
        ValueError: On duplicate ids, unknown parents, or cycles.
    """
    ids = [b.body_id for b in bodies]
    if len(set(ids)) != len(ids):
        dupes = sorted({i for i in ids if ids.count(i) > 1})
        raise ValueError(f"Duplicate body ids: {dupes}")

    known = set(ids)
    children: dict[str, list[str]] = {i: [] for i in ids}
    pending_parents: dict[str, int] = {}
    for body in bodies:
        if body.parent_id is None:
            pending_parents[body.body_id] = 0
            continue
        if body.parent_id not in known:
            raise ValueError(
                f"{body.body_id}: unknown parent {body.parent_id!r}"
            )
        children[body.parent_id].append(body.body_id)
        pending_parents[body.body_id] = 1

    ready = deque(i for i in ids if pending_parents[i] == 0)
    order: list[str] = []
    while ready:
        current = ready.popleft()
        order.append(current)
        for child in children[current]:
            pending_parents[child] -= 1
            if pending_parents[child] == 0:
                ready.append(child)

    if len(order) != len(ids):
        stuck = sorted(i for i in ids if i not in set(order))
        raise ValueError(f"Cycle in parent references involving: {stuck}")
    return order


class SolarSystem:
    """
    Positions every body once per frame in dependency order.

    Args:
        bodies: Body definitions; parents may appear after children.
        start_epoch: Calendar instant of simulation time zero.
        accurate_orbits: Use Keplerian elements where available; otherwise
            every orbiting body follows its circular descriptor.
        apply_secular_rates: Drift elements by their per-century rates.
        scale: Scene scaling.
    """

    def __init__(
        self,
        bodies: list[BodyDefinition],
        start_epoch: datetime = J2000_EPOCH,
        accurate_orbits: bool = True,
        apply_secular_rates: bool = False,
        scale: SceneScale = DEFAULT_SCALE,
    ) -> None:
        for body in bodies:
            validate_body(body)
        self._bodies = {b.body_id: b for b in bodies}
        self._order = dependency_order(bodies)
        self._start_epoch = start_epoch
        self._accurate = accurate_orbits
        self._apply_rates = apply_secular_rates
        self._scale = scale

        self._check_modes()

        self._positions: dict[str, Position] = {}
        self._last_good: dict[str, Position] = {}
        self._simulation_time: float | None = None

    def _check_modes(self) -> None:
        for body in self._bodies.values():
            if body.is_fixed:
                continue
            if body.circular is None and not self._accurate:
                raise ValueError(
                    f"{body.body_id}: circular mode requested but no circular orbit defined"
                )

    # -- Frame update ------------------------------------------------------- #

    def _position_body(
        self,
        body: BodyDefinition,
        simulation_time_ms: float,
        parent_position: Position,
    ) -> Position:
        if self._accurate and body.elements is not None:
            offset = propagate_at_simulation_time(
                body.elements,
                simulation_time_ms,
                start_epoch=self._start_epoch,
                apply_secular_rates=self._apply_rates,
                scale=self._scale,
            )
            return parent_position + offset
        if body.circular is not None:
            return propagate_circular(
                body.circular, simulation_time_ms, parent_position, self._scale,
            )
        return parent_position

    def update(self, simulation_time_ms: float) -> dict[str, Position]:
        """
        Recompute all positions for one simulation time.

        A body whose propagation fails keeps its last good position for
        this frame; the failure is logged and the loop continues.
        """
        positions: dict[str, Position] = {}
        for body_id in self._order:
            body = self._bodies[body_id]
            parent_position = (
                positions[body.parent_id] if body.parent_id is not None else ORIGIN
            )
            try:
                position = self._position_body(body, simulation_time_ms, parent_position)
            except (ValueError, ArithmeticError) as exc:
                position = self._last_good.get(body_id, parent_position)
                logger.warning(
                    "Propagation failed for %s at t=%r ms, keeping last position: %s",
                    body_id, simulation_time_ms, exc,
                )
            else:
                self._last_good[body_id] = position
            positions[body_id] = position

        self._positions = positions
        self._simulation_time = simulation_time_ms
        return dict(positions)

    def step(self, clock: SimulationClock, real_delta_ms: float) -> dict[str, Position]:
        """Tick the clock, then position every body at the new time."""
        simulation_time = clock.tick(real_delta_ms)
        return self.update(simulation_time)

    # -- Accessors ---------------------------------------------------------- #

    def get_position(self, body_id: str) -> Position:
        """Position from the most recent update."""
        if body_id not in self._bodies:
            raise KeyError(f"Unknown body: {body_id!r}")
        if body_id not in self._positions:
            raise KeyError(f"{body_id!r} has not been positioned yet; call update() first")
        return self._positions[body_id]

    @property
    def positions(self) -> dict[str, Position]:
        return dict(self._positions)

    @property
    def simulation_time(self) -> float | None:
        """Simulation time of the most recent update, or None."""
        return self._simulation_time

    @property
    def update_order(self) -> list[str]:
        return list(self._order)

    @property
    def bodies(self) -> dict[str, BodyDefinition]:
        return dict(self._bodies)

    def body(self, body_id: str) -> BodyDefinition:
        try:
            return self._bodies[body_id]
        except KeyError:
            raise KeyError(f"Unknown body: {body_id!r}") from None

    def children_of(self, body_id: str) -> list[str]:
        self.body(body_id)
        return [i for i in self._order if self._bodies[i].parent_id == body_id]

    @property
    def accurate_orbits(self) -> bool:
        return self._accurate

    def set_accurate_orbits(self, enabled: bool) -> None:
        """Switch between Keplerian and simplified circular planet orbits."""
        previous = self._accurate
        self._accurate = enabled
        try:
            self._check_modes()
        except ValueError:
            self._accurate = previous
            raise

    @property
    def start_epoch(self) -> datetime:
        return self._start_epoch

    @property
    def scale(self) -> SceneScale:
        return self._scale
