"""Test module for crspline.segmented_mapper

The tests are run using pytest.
"""

import math

import numpy as np
import pytest

from crspline.common import InvalidConfigurationError
from crspline.segmented_mapper import SegmentedCurveMapper

POINTS_2D = [[1, 1], [4, 2], [6, 4], [7, 8], [8, 13], [9, 27]]
POINTS_3D = [[1, 0, 1], [3, 2, -1], [5, 1, 2], [8, 4, 0], [10, 6, 3]]
POLYLINE_LENGTH = sum(math.dist(p, q) for p, q in zip(POINTS_2D, POINTS_2D[1:]))


def create_mapper(points=POINTS_2D, sub_divisions=300, tension=0.5, alpha=0.0, closed=False):
    """Create a segmented mapper with the given parameters."""
    mapper = SegmentedCurveMapper(sub_divisions)
    mapper.tension = tension
    mapper.alpha = alpha
    mapper.closed = closed
    mapper.points = points
    return mapper


###############################################################################
# Construction
###############################################################################


class TestConstruction:
    """Test class for the mapper construction."""

    def test_default_sub_divisions(self):
        """300 linear pieces by default."""
        assert SegmentedCurveMapper().sub_divisions == 300

    @pytest.mark.parametrize("sub_divisions", [0, -5])
    def test_invalid_sub_divisions(self, sub_divisions):
        """At least one linear piece is required."""
        with pytest.raises(InvalidConfigurationError):
            SegmentedCurveMapper(sub_divisions)


###############################################################################
# Arc lengths
###############################################################################


class TestArcLengths:
    """Test class for the cumulative length table."""

    def test_table_size(self):
        """One entry per subdivision point, starting at 0 and non-decreasing."""
        mapper = create_mapper(sub_divisions=50)
        lengths = mapper.arc_lengths
        assert lengths.shape == (51,)
        assert lengths[0] == 0
        assert np.all(np.diff(lengths) >= 0)

    def test_straight_segments(self):
        """With full tension the curve is the polyline of the control points."""
        mapper = create_mapper(tension=1)
        assert mapper.total_length == pytest.approx(POLYLINE_LENGTH, abs=1e-9)

    def test_tension_ordering(self):
        """Lower tension gives longer curves, all close to the polyline length."""
        lengths = [create_mapper(tension=tension).total_length for tension in (0, 0.5, 1)]
        assert lengths[0] > lengths[1] > lengths[2]
        for length in lengths:
            assert length == pytest.approx(POLYLINE_LENGTH, abs=0.1)

    def test_length_at(self):
        """Length at u is the fraction u of the total length."""
        mapper = create_mapper()
        assert mapper.length_at(0) == 0
        assert mapper.length_at(1) == mapper.total_length
        assert mapper.length_at(0.25) == pytest.approx(0.25 * mapper.total_length)

    def test_cache_invalidation(self):
        """Changing the tension recomputes the table."""
        mapper = create_mapper(tension=0.5)
        before = mapper.total_length
        mapper.tension = 0
        assert mapper.total_length > before


###############################################################################
# Mapping
###############################################################################


class TestMapping:
    """Test class for the mapping between u and t."""

    @pytest.mark.parametrize("points", [POINTS_2D, POINTS_3D])
    def test_end_points(self, points):
        """The ends map exactly onto each other."""
        mapper = create_mapper(points=points)
        assert mapper.get_t(0) == 0
        assert mapper.get_t(1) == 1
        assert mapper.get_u(0) == 0
        assert mapper.get_u(1) == 1

    @pytest.mark.parametrize("alpha", [0, 0.5, 1])
    @pytest.mark.parametrize("closed", [False, True])
    def test_round_trip(self, alpha, closed):
        """get_u(get_t(u)) reproduces u."""
        mapper = create_mapper(alpha=alpha, closed=closed)
        for u in np.linspace(0, 1, 41):
            assert mapper.get_u(mapper.get_t(u)) == pytest.approx(u, abs=1e-3)

    def test_monotonic(self):
        """get_t is non-decreasing in u."""
        mapper = create_mapper(points=POINTS_3D, tension=0)
        ts = [mapper.get_t(u) for u in np.linspace(0, 1, 101)]
        assert all(t1 >= t0 for t0, t1 in zip(ts, ts[1:]))

    def test_uniform_spacing(self):
        """Equal steps in u give approximately equal distances on the curve."""
        mapper = create_mapper(tension=0)
        points = np.array([mapper.get_point_at_t(mapper.get_t(u)) for u in np.linspace(0, 1, 11)])
        distances = np.linalg.norm(np.diff(points, axis=0), axis=1)
        assert np.allclose(distances, mapper.total_length / 10, rtol=5e-2)

    def test_degenerate_points(self):
        """Coincident leading points give finite results."""
        mapper = create_mapper(
            points=[[0, 0], [0, 0], [0, 0], [0.04, 0.03], [0.07, 0.04], [0.07, 0.03], [0.02, 0.04]],
            alpha=0.5,
        )
        t = mapper.get_t(0.00005)
        assert math.isfinite(t)
        assert np.all(np.isfinite(mapper.get_point_at_t(t)))

    def test_zero_length_curve(self):
        """A curve without extent maps u onto t unchanged."""
        mapper = create_mapper(points=[[2, 3], [2, 3], [2, 3]])
        assert mapper.total_length == 0
        assert mapper.get_t(0.3) == 0.3
        assert mapper.get_u(0.3) == 0.3
