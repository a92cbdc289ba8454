# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for elliptical and circular position propagation."""
import logging
import math
from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from orrery.domain.circular_orbits import orbital_angle
from orrery.domain.coordinate_frames import DEFAULT_SCALE, SceneScale
from orrery.domain.kepler import KeplerSolution
from orrery.domain.orbital_elements import (
    ElementRates,
    make_circular_orbit,
    make_orbital_elements,
)
from orrery.domain.propagation import (
    ORIGIN,
    Position,
    PropagationResult,
    aphelion_distance,
    apsis_positions,
    circular_orbit_path,
    circular_phase,
    circular_radius_scene,
    distance_from_origin,
    orbit_path,
    orbital_info,
    perihelion_distance,
    propagate,
    propagate_at_simulation_time,
    propagate_circular,
    propagate_state,
)
from orrery.domain.time_systems import J2000_EPOCH, MS_PER_DAY

MARS = make_orbital_elements(
    semi_major_axis_au=1.52371034,
    eccentricity=0.09339410,
    inclination_deg=1.84969142,
    long_asc_node_deg=49.55953891,
    arg_periapsis_deg=-23.94362959 - 49.55953891,
    mean_longitude_deg=-4.55343205,
    rates=ElementRates(
        semi_major_axis_au=0.00001847,
        eccentricity=0.00007882,
        inclination_deg=-0.00813131,
        long_asc_node_deg=-0.29257343,
        arg_periapsis_deg=0.44441088 + 0.29257343,
        mean_longitude_deg=19140.30268499,
    ),
)


def _flat(a: float, e: float, L: float = 0.0, varpi: float = 0.0):
    return make_orbital_elements(a, e, 0.0, 0.0, varpi, L)


# ── Position value object ─────────────────────────────────────────

class TestPosition:

    def test_arithmetic(self):
        a = Position(1.0, 2.0, 3.0)
        b = Position(0.5, -1.0, 2.0)
        assert a + b == Position(1.5, 1.0, 5.0)
        assert a - b == Position(0.5, 3.0, 1.0)

    def test_magnitude(self):
        assert Position(3.0, 0.0, 4.0).magnitude == 5.0

    def test_as_tuple(self):
        assert Position(1.0, 2.0, 3.0).as_tuple() == (1.0, 2.0, 3.0)

    def test_add_other_type_not_supported(self):
        with pytest.raises(TypeError):
            Position(1.0, 2.0, 3.0) + (1.0, 2.0, 3.0)


# ── Elliptical mode ───────────────────────────────────────────────

class TestPropagateElliptical:

    def test_reference_circle_at_j2000(self):
        """a = 1, e = 0, everything zero: on +X, in the plane, 500 units out."""
        pos = propagate(_flat(1.0, 0.0), J2000_EPOCH)
        assert pos.y == 0.0
        assert pos.magnitude == pytest.approx(500.0)
        assert pos.x == pytest.approx(500.0)

    @pytest.mark.parametrize("days", [0.0, 17.0, 91.3, 200.0, 365.0, 1000.0])
    def test_circular_radius_invariant(self, days):
        el = _flat(1.0, 0.0, L=37.0)
        pos = propagate(el, J2000_EPOCH + timedelta(days=days))
        assert pos.magnitude == pytest.approx(500.0)

    def test_perihelion_distance(self):
        """M = 0 (L = ϖ) puts the body at a(1 - e)."""
        el = _flat(2.0, 0.2, L=30.0, varpi=30.0)
        state = propagate_state(el, J2000_EPOCH)
        assert state.distance_au == pytest.approx(1.6)
        assert distance_from_origin(state.position) == pytest.approx(1.6)

    def test_aphelion_distance(self):
        """M = π puts the body at a(1 + e)."""
        el = _flat(2.0, 0.2, L=210.0, varpi=30.0)
        state = propagate_state(el, J2000_EPOCH)
        assert state.distance_au == pytest.approx(2.4)
        assert distance_from_origin(state.position) == pytest.approx(2.4)

    def test_inclined_orbit_leaves_plane(self):
        el = make_orbital_elements(1.0, 0.0, 30.0, 0.0, 0.0, 90.0)
        pos = propagate(el, J2000_EPOCH)
        # 90° past the ascending node at i = 30°: height = sin 30° AU.
        assert pos.y == pytest.approx(250.0)

    def test_state_carries_kepler_solution(self):
        state = propagate_state(MARS, J2000_EPOCH)
        assert isinstance(state, PropagationResult)
        assert isinstance(state.kepler, KeplerSolution)
        assert state.kepler.converged
        assert state.elements == MARS

    def test_mars_distance_within_apsides(self):
        for years in range(0, 10):
            date = J2000_EPOCH + timedelta(days=365.25 * years)
            d = distance_from_origin(propagate(MARS, date))
            assert MARS.semi_major_axis_au * (1 - MARS.eccentricity) - 1e-9 <= d
            assert d <= MARS.semi_major_axis_au * (1 + MARS.eccentricity) + 1e-9

    def test_secular_rates_change_position(self):
        date = datetime(2040, 1, 1, tzinfo=timezone.utc)
        fixed = propagate(MARS, date)
        drifted = propagate(MARS, date, apply_secular_rates=True)
        assert fixed != drifted

    def test_secular_rates_no_effect_at_j2000(self):
        assert propagate(MARS, J2000_EPOCH) == propagate(MARS, J2000_EPOCH, apply_secular_rates=True)

    def test_secular_rates_used_elements_are_drifted(self):
        date = datetime(2100, 1, 1, 12, tzinfo=timezone.utc)
        state = propagate_state(MARS, date, apply_secular_rates=True)
        assert state.elements.eccentricity == pytest.approx(0.09339410 + 0.00007882)

    def test_custom_scale(self):
        pos = propagate(_flat(1.0, 0.0), J2000_EPOCH, scale=SceneScale(au_to_scene=10.0))
        assert pos.magnitude == pytest.approx(10.0)

    def test_simulation_time_entry_point(self):
        ms = 42.0 * MS_PER_DAY
        expected = propagate(MARS, J2000_EPOCH + timedelta(days=42))
        assert propagate_at_simulation_time(MARS, ms) == expected

    def test_non_convergence_logs_warning(self, caplog, monkeypatch):
        import orrery.domain.propagation as propagation

        def stalled(M, e):
            return KeplerSolution(
                eccentric_anomaly=M, iterations=50, converged=False,
                last_step=1e-4, mean_anomaly=M, eccentricity=e,
            )

        monkeypatch.setattr(propagation, "solve_kepler", stalled)
        with caplog.at_level(logging.WARNING, logger="orrery.domain.propagation"):
            state = propagation.propagate_state(MARS, J2000_EPOCH)

        assert not state.kepler.converged
        assert "did not converge" in caplog.text


# ── Circular mode ─────────────────────────────────────────────────

class TestPropagateCircular:

    def test_phase_wraps_with_period(self):
        orbit = make_circular_orbit(384_400.0, 27.32, start_angle_rad=0.5)
        period_ms = 27.32 * MS_PER_DAY
        assert circular_phase(orbit, 0.0) == 0.5
        assert circular_phase(orbit, period_ms * 3) == pytest.approx(0.5)
        assert circular_phase(orbit, period_ms / 4) == pytest.approx(0.5 + math.pi / 2)

    def test_negative_time_wraps_forward(self):
        orbit = make_circular_orbit(1000.0, 1.0)
        phase = circular_phase(orbit, -0.25 * MS_PER_DAY)
        assert phase == pytest.approx(1.5 * math.pi)

    def test_phase_matches_orbital_angle(self):
        orbit = make_circular_orbit(1000.0, 2.5, start_angle_rad=7.0)
        for t in (0.0, 0.3 * MS_PER_DAY, -4.1 * MS_PER_DAY, 1e12):
            assert circular_phase(orbit, t) == orbital_angle(t, 2.5, 7.0)
        assert 0.0 <= circular_phase(orbit, 0.0) < 2 * math.pi

    @pytest.mark.parametrize("t", [math.nan, math.inf])
    def test_phase_rejects_non_finite_time(self, t):
        orbit = make_circular_orbit(1000.0, 1.0)
        with pytest.raises(ValueError, match="simulation_time_ms"):
            circular_phase(orbit, t)

    def test_moon_radius_with_scale(self):
        orbit = make_circular_orbit(384_400.0, 27.32, radius_scale=50.0)
        assert circular_radius_scene(orbit) == pytest.approx(DEFAULT_SCALE.km(384_400.0) * 50.0)

    def test_flat_circle_around_parent(self):
        orbit = make_circular_orbit(384_400.0, 27.32, radius_scale=50.0)
        parent = Position(100.0, 3.0, -40.0)
        r = circular_radius_scene(orbit)
        for t in (0.0, 5.0 * MS_PER_DAY, 13.0 * MS_PER_DAY):
            pos = propagate_circular(orbit, t, parent)
            assert pos.y == parent.y
            assert (pos - parent).magnitude == pytest.approx(r)

    def test_follows_parent(self):
        """Same time, different parent positions → different child positions."""
        orbit = make_circular_orbit(384_400.0, 27.32, radius_scale=50.0)
        t = 3.0 * MS_PER_DAY
        a = propagate_circular(orbit, t, Position(0.0, 0.0, 0.0))
        b = propagate_circular(orbit, t, Position(500.0, 0.0, 0.0))
        assert a != b
        assert (b - a).as_tuple() == pytest.approx((500.0, 0.0, 0.0))

    def test_default_parent_is_origin(self):
        orbit = make_circular_orbit(DEFAULT_SCALE.au_km, 365.25)
        pos = propagate_circular(orbit, 0.0)
        assert pos == Position(500.0, 0.0, 0.0)

    def test_invalid_descriptor_raises(self):
        from orrery.domain.orbital_elements import CircularOrbit

        with pytest.raises(ValueError, match="period_days"):
            propagate_circular(CircularOrbit(1000.0, -1.0), 0.0, ORIGIN)

    def test_non_finite_time_raises(self):
        orbit = make_circular_orbit(1000.0, 1.0)
        with pytest.raises(ValueError, match="simulation_time_ms"):
            propagate_circular(orbit, math.nan)


# ── Diagnostics ───────────────────────────────────────────────────

class TestDiagnostics:

    def test_apsis_distances(self):
        assert perihelion_distance(2.0, 0.2) == pytest.approx(1.6)
        assert aphelion_distance(2.0, 0.2) == pytest.approx(2.4)

    def test_distance_from_origin_in_au(self):
        assert distance_from_origin(Position(300.0, 0.0, 400.0)) == 1.0

    def test_orbital_info(self):
        date = datetime(2024, 6, 1, tzinfo=timezone.utc)
        info = orbital_info(MARS, date)
        assert info.eccentricity == MARS.eccentricity
        assert info.perihelion_au < info.distance_au < info.aphelion_au
        assert info.current_date == date.isoformat()
        assert info.position == propagate(MARS, date)

    def test_apsis_positions(self):
        peri, aph = apsis_positions(MARS)
        assert distance_from_origin(peri) == pytest.approx(perihelion_distance(1.52371034, 0.0933941))
        assert distance_from_origin(aph) == pytest.approx(aphelion_distance(1.52371034, 0.0933941))

    def test_apsis_matches_propagated_perihelion(self):
        """Propagating at M = 0 lands on the perihelion marker."""
        el = make_orbital_elements(1.2, 0.3, 10.0, 40.0, 70.0, 110.0)
        peri, _ = apsis_positions(el)
        pos = propagate(el, J2000_EPOCH)
        assert pos.as_tuple() == pytest.approx(peri.as_tuple())


class TestOrbitPath:

    def test_shape_and_closed(self):
        path = orbit_path(MARS, segments=64)
        assert path.shape == (65, 3)
        assert np.array_equal(path[0], path[-1])

    def test_points_within_apsides(self):
        path = orbit_path(MARS)
        r = np.linalg.norm(path, axis=1) / DEFAULT_SCALE.au_to_scene
        assert r.min() >= perihelion_distance(1.52371034, 0.0933941) - 1e-9
        assert r.max() <= aphelion_distance(1.52371034, 0.0933941) + 1e-9

    def test_propagated_position_lies_on_path_plane(self):
        """Every point shares the orbit plane with a propagated position."""
        el = make_orbital_elements(1.0, 0.1, 20.0, 30.0, 40.0, 50.0)
        path = orbit_path(el, segments=16)
        normal = np.cross(path[1], path[5])
        pos = np.array(propagate(el, J2000_EPOCH).as_tuple())
        assert abs(np.dot(normal, pos)) / (np.linalg.norm(normal) * np.linalg.norm(pos)) < 1e-9

    def test_too_few_segments(self):
        with pytest.raises(ValueError, match="segments"):
            orbit_path(MARS, segments=2)

    def test_circular_path(self):
        path = circular_orbit_path(10.0, segments=32)
        assert path.shape == (33, 3)
        assert np.allclose(np.linalg.norm(path, axis=1), 10.0)
        assert np.all(path[:, 1] == 0.0)

    def test_circular_path_rejects_bad_radius(self):
        with pytest.raises(ValueError, match="radius_scene"):
            circular_orbit_path(0.0)
