"""Tests for envelope construction, integration and refinement."""

import copy
import io
import math

import pytest

from mlx_arms import ARMSConfig, ConfigurationError, EnvelopeViolation, init_envelope
from mlx_arms.envelope import Point, update
from mlx_arms.envelope.numerics import YCEIL, segment_integral

from conftest import std_normal


def _check_invariants(envelope):
    points = envelope.ordered()
    assert points[0].left is None and points[-1].right is None
    assert points[0].cum == 0.0
    for a, b in zip(points, points[1:]):
        assert a.x <= b.x
        assert a.cum <= b.cum
    # on-curve points alternate with intersection points
    assert [p.on_curve for p in points] == [bool(i % 2) for i in range(len(points))]
    total = sum(segment_integral(a, b) for a, b in zip(points, points[1:]))
    assert envelope.total_mass == pytest.approx(total, rel=1e-12)


class TestConfig:
    """Tests for ARMSConfig defaults and validation."""

    def test_defaults(self):
        """Bounds and starting iterate derive from the initial points."""
        config = ARMSConfig(std_normal)
        assert config.xinit == (-1.0, 0.0, 1.0)
        assert config.xl == pytest.approx(-10.1)
        assert config.xr == pytest.approx(10.1)
        assert config.xprev == 0.0
        assert config.npoint == 100
        assert config.metropolis

    def test_positive_points_bounds(self):
        """Bounds use the smaller/larger of x/10 and 10x."""
        config = ARMSConfig(std_normal, xinit=(2.0, 3.0, 5.0))
        assert config.xl == pytest.approx(0.1)
        assert config.xr == pytest.approx(50.1)

    @pytest.mark.parametrize("settings", [
        {"xinit": (0.0, 1.0)},
        {"xinit": (0.0, 2.0, 1.0)},
        {"xinit": (0.0, 1.0, 1.0)},
        {"xinit": (-1.0, 0.0, 1.0), "xl": -0.5},
        {"xinit": (-1.0, 0.0, 1.0), "xr": 1.0},
        {"convex": -0.1},
        {"npoint": 6},
        {"xprev": 20.0},
    ])
    def test_invalid(self, settings):
        """Malformed settings are rejected before any envelope exists."""
        config = ARMSConfig(std_normal, **settings)
        with pytest.raises(ConfigurationError):
            init_envelope(config)

    def test_xprev_ignored_without_metropolis(self):
        """The starting iterate is only checked when it is used."""
        config = ARMSConfig(std_normal, xprev=20.0, metropolis=False)
        init_envelope(config)

    def test_evaluate_counts(self):
        """Every evaluation increments the counter."""
        config = ARMSConfig(std_normal)
        assert config.evaluate(2.0) == -2.0
        assert config.evaluate(0.0) == 0.0
        assert config.neval == 2


class TestInitEnvelope:
    """Tests for init_envelope."""

    def test_layout(self, normal_envelope):
        """Bounds and intersections bracket each initial point."""
        env = normal_envelope
        assert len(env) == 7
        assert env.head == 0 and env.tail == 6
        assert [p.on_curve for p in env.ordered()] == [
            False, True, False, True, False, True, False
        ]
        assert [p.x for p in env.ordered()] == pytest.approx(
            [-10.1, -1.0, -1.0, 0.0, 1.0, 1.0, 10.1]
        )
        assert [p.y for p in env.ordered()] == pytest.approx(
            [-5.05, -0.5, 0.5, 0.0, 0.5, -0.5, -5.05]
        )
        assert env.ymax == pytest.approx(0.5)
        _check_invariants(env)

    def test_evaluations(self, normal_config):
        """One evaluation per initial point, plus the chain start."""
        init_envelope(normal_config)
        assert normal_config.neval == 3

        config = ARMSConfig(std_normal, metropolis=True)
        env = init_envelope(config)
        assert config.neval == 4
        assert env.xprev == 0.0 and env.yprev == 0.0

    def test_total_mass(self, normal_envelope):
        """Total mass matches the closed form of the starting envelope."""
        a = 2.0 * (math.exp(-0.5) - math.exp(-5.05))
        b = 2.0 * (math.exp(0.5) - 1.0)
        expected = math.exp(YCEIL - 0.5) * 2.0 * (a + b)
        assert normal_envelope.total_mass == pytest.approx(expected, rel=1e-12)

    def test_bounds_density(self, normal_envelope):
        """The envelope lies on or above a log-concave density."""
        for k in range(-100, 101):
            x = k / 10.0
            y, _, _ = normal_envelope.height_at(x)
            assert y >= std_normal(x) - 1e-12

    def test_convex_start_without_metropolis(self):
        """A convex log density is caught at construction."""
        config = ARMSConfig(lambda x: 0.5 * x * x, metropolis=False)
        with pytest.raises(EnvelopeViolation):
            init_envelope(config)

    def test_convex_start_with_metropolis(self):
        """With the Metropolis correction a convex start is accepted."""
        config = ARMSConfig(lambda x: 0.5 * x * x, metropolis=True)
        _check_invariants(init_envelope(config))


class TestEnvelope:
    """Tests for Envelope queries and copies."""

    def test_height_at_interpolates(self, normal_envelope):
        """Heights between points are linear in log space."""
        y, left, right = normal_envelope.height_at(-0.5)
        assert y == pytest.approx(0.25)
        assert (left, right) == (2, 3)

    def test_copy_is_independent(self, normal_envelope):
        """Refining a copy leaves the original untouched."""
        other = normal_envelope.copy()
        other.points[3].y = 7.0
        other.xprev = 1.0
        assert normal_envelope.points[3].y == 0.0
        assert normal_envelope.xprev is None

    def test_display(self, normal_envelope):
        """display writes a header and one line per point."""
        out = io.StringIO()
        normal_envelope.display(out)
        lines = out.getvalue().splitlines()
        assert len(lines) == 8
        assert lines[0].startswith("envelope: 7 of 100 points")


class TestUpdate:
    """Tests for envelope refinement."""

    def _candidate(self, env, x, y, left=2, right=3):
        return Point(x=x, y=y, on_curve=True, left=left, right=right)

    def test_insert(self, normal_config, normal_envelope):
        """An evaluated point is spliced in with a new intersection."""
        env = normal_envelope
        before = env.total_mass * math.exp(env.ymax - YCEIL)
        assert update(env, self._candidate(env, -0.5, -0.125), normal_config)
        assert len(env) == 9
        assert [p.x for p in env.ordered()][3] == -0.5
        # the envelope only gets tighter
        assert env.total_mass * math.exp(env.ymax - YCEIL) < before
        _check_invariants(env)

    def test_insert_right_of_intersection(self, normal_config, normal_envelope):
        """Points between an on-curve point and an intersection also work."""
        env = normal_envelope
        assert update(env, self._candidate(env, 0.5, -0.125, left=3, right=4),
                      normal_config)
        assert [p.x for p in env.ordered()][5] == 0.5
        _check_invariants(env)

    def test_nudge_near_neighbour(self, normal_config, normal_envelope):
        """Points too close to an on-curve neighbour are moved and re-evaluated."""
        env = normal_envelope
        assert update(env, self._candidate(env, -1e-9, 0.0), normal_config)
        q = env.ordered()[3]
        assert q.x == pytest.approx(-1e-5)
        assert q.y == pytest.approx(std_normal(q.x))
        assert normal_config.neval == 4
        _check_invariants(env)

    def test_unevaluated_point_ignored(self, normal_config, normal_envelope):
        """Points off the curve never enter the envelope."""
        point = self._candidate(normal_envelope, -0.5, 0.0)
        point.on_curve = False
        assert not update(normal_envelope, point, normal_config)
        assert len(normal_envelope) == 7

    def test_full_envelope_unchanged(self):
        """Once capacity is reached updates are no-ops."""
        config = ARMSConfig(std_normal, npoint=7, metropolis=False)
        env = init_envelope(config)
        before = copy.deepcopy(env.points)
        assert env.full
        assert not update(env, self._candidate(env, -0.5, -0.125), config)
        assert env.points == before

    def test_capacity_respected(self):
        """The envelope never grows past its capacity."""
        config = ARMSConfig(std_normal, npoint=10, metropolis=False)
        env = init_envelope(config)
        assert update(env, self._candidate(env, -0.5, -0.125), config)
        assert len(env) == 9
        assert env.full
        assert not update(env, Point(x=0.5, y=-0.125, on_curve=True, left=5, right=6),
                          config)
        assert len(env) <= config.npoint

    def test_violation_rolls_back(self, normal_config, normal_envelope):
        """A convexity violation leaves the envelope as it was."""
        env = normal_envelope
        before = copy.deepcopy(env.points)
        with pytest.raises(EnvelopeViolation):
            update(env, self._candidate(env, -0.5, 2.0), normal_config)
        assert env.points == before
        _check_invariants(env)

    def test_density_error_rolls_back(self):
        """An exception from the log density while nudging leaves the envelope as it was."""
        calls = []

        def flaky(x):
            calls.append(x)
            if len(calls) > 3:
                raise ValueError("density failed")
            return std_normal(x)

        config = ARMSConfig(flaky, metropolis=False)
        env = init_envelope(config)
        before = copy.deepcopy(env.points)
        with pytest.raises(ValueError, match="density failed"):
            update(env, self._candidate(env, -1e-9, 0.0), config)
        assert env.points == before
        _check_invariants(env)

    def test_bad_neighbours(self, normal_config, normal_envelope):
        """A candidate between two on-curve points is an invariant violation."""
        env = normal_envelope
        with pytest.raises(EnvelopeViolation):
            update(env, self._candidate(env, -0.5, -0.125, left=1, right=3),
                   normal_config)
        assert len(env) == 7


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
