"""Test module for crspline.numerical_mapper

The tests are run using pytest.
"""

import math

import numpy as np
import pytest

from crspline.common import InvalidConfigurationError
from crspline.numerical_mapper import NumericalCurveMapper, gauss_legendre_table
from crspline.segmented_mapper import SegmentedCurveMapper

POINTS_2D = [[1, 1], [4, 2], [6, 4], [7, 8], [8, 13], [9, 27]]
POINTS_3D = [[1, 0, 1], [3, 2, -1], [5, 1, 2], [8, 4, 0], [10, 6, 3]]
SQUARE = [[0, 0], [1, 0], [1, 1], [0, 1]]
POLYLINE_LENGTH = sum(math.dist(p, q) for p, q in zip(POINTS_2D, POINTS_2D[1:]))


def create_mapper(points=POINTS_2D, tension=0.5, alpha=0.0, closed=False, **kwargs):
    """Create a numerical mapper with the given parameters."""
    mapper = NumericalCurveMapper(**kwargs)
    mapper.tension = tension
    mapper.alpha = alpha
    mapper.closed = closed
    mapper.points = points
    return mapper


###############################################################################
# Quadrature
###############################################################################


class TestQuadrature:
    """Test class for the Gauss-Legendre table."""

    def test_order_5(self):
        """Abscissae and weights of the 5 point rule."""
        expected = [
            [-0.906179845938664, 0.23692688505618908],
            [-0.5384693101056831, 0.47862867049936647],
            [0.0, 0.5688888888888889],
            [0.5384693101056831, 0.47862867049936647],
            [0.906179845938664, 0.23692688505618908],
        ]
        mapper = NumericalCurveMapper(5)
        assert np.allclose(mapper.gauss, expected, atol=1e-12)

    def test_weights_sum(self):
        """The weights integrate a constant over [-1, 1]."""
        _, weights = gauss_legendre_table(24)
        assert weights.sum() == pytest.approx(2.0)

    def test_table_is_shared_and_read_only(self):
        """Tables are built once per order and cannot be modified."""
        abscissae, weights = gauss_legendre_table(7)
        assert gauss_legendre_table(7)[0] is abscissae
        assert not abscissae.flags.writeable
        assert not weights.flags.writeable

    @pytest.mark.parametrize("kwargs", [{"n_quadrature_points": 0}, {"n_inverse_samples": 1}])
    def test_invalid_construction(self, kwargs):
        """Quadrature order and inverse samples are validated."""
        with pytest.raises(InvalidConfigurationError):
            NumericalCurveMapper(**kwargs)


###############################################################################
# Arc lengths
###############################################################################


class TestArcLengths:
    """Test class for the integrated segment lengths."""

    def test_table_size(self):
        """One entry per segment boundary."""
        mapper = create_mapper()
        assert mapper.arc_lengths.shape == (6,)
        assert mapper.arc_lengths[0] == 0

    def test_straight_segments_are_exact(self):
        """The speed of a straight segment is a quadratic, integrated exactly."""
        mapper = create_mapper(tension=1, alpha=0.5)
        assert mapper.total_length == pytest.approx(POLYLINE_LENGTH, abs=1e-9)

    def test_tension_ordering(self):
        """Lower tension gives longer curves, all close to the polyline length."""
        lengths = [create_mapper(tension=tension).total_length for tension in (0, 0.5, 1)]
        assert lengths[0] > lengths[1] > lengths[2]
        for length in lengths:
            assert length == pytest.approx(POLYLINE_LENGTH, abs=0.1)

    def test_agrees_with_segmented_mapper(self):
        """Both strategies measure the same curve."""
        numerical = create_mapper(points=POINTS_3D, tension=0, alpha=0.5)
        segmented = SegmentedCurveMapper(1000)
        segmented.tension = 0
        segmented.alpha = 0.5
        segmented.points = POINTS_3D
        assert numerical.total_length == pytest.approx(segmented.total_length, abs=1e-3)

    def test_symmetric_segments(self):
        """All sides of a closed square have the same length."""
        mapper = create_mapper(points=SQUARE, tension=0, closed=True)
        segment_lengths = np.diff(mapper.arc_lengths)
        assert np.allclose(segment_lengths, segment_lengths[0])
        assert mapper.compute_arc_length(1, 0, 0.5) == pytest.approx(segment_lengths[1] / 2)

    def test_cache_invalidation(self):
        """Changing the tension recomputes the table."""
        mapper = create_mapper(tension=0.5)
        before = mapper.total_length
        mapper.tension = 0
        assert mapper.total_length > before


###############################################################################
# Inverse samples
###############################################################################


class TestInverseSamples:
    """Test class for the per segment inverse fit."""

    def test_shapes(self):
        """n lengths and slopes, n - 1 interpolant coefficients."""
        mapper = create_mapper(n_inverse_samples=11)
        samples = mapper.get_samples(2)
        assert samples.lengths.shape == (11,)
        assert samples.slopes.shape == (11,)
        assert samples.cis.shape == (10,)
        assert samples.dis.shape == (10,)

    def test_samples_are_cached(self):
        """Samples are computed once per segment until the cache is cleared."""
        mapper = create_mapper()
        samples = mapper.get_samples(0)
        assert mapper.get_samples(0) is samples
        mapper.alpha = 1
        assert mapper.get_samples(0) is not samples

    def test_lengths_match_segment(self):
        """The last sample is the segment length."""
        mapper = create_mapper()
        samples = mapper.get_samples(3)
        assert samples.lengths[0] == 0
        assert samples.lengths[-1] == pytest.approx(mapper.arc_lengths[4] - mapper.arc_lengths[3])

    def test_inverse_limits(self):
        """Lengths outside the segment are clamped to its ends."""
        mapper = create_mapper()
        assert mapper.inverse(1, -1) == 0
        assert mapper.inverse(1, 0) == 0
        assert mapper.inverse(1, 1e6) == 1

    def test_inverse_of_segment_lengths(self):
        """inverse reproduces the local time of a partial length."""
        mapper = create_mapper(tension=0)
        for t in (0.1, 0.33, 0.5, 0.9):
            length = mapper.compute_arc_length(2, 0, t)
            assert mapper.inverse(2, length) == pytest.approx(t, abs=1e-4)


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
            assert mapper.get_u(mapper.get_t(u)) == pytest.approx(u, abs=1e-4)

    def test_segment_boundaries(self):
        """Positions at segment boundaries map onto whole segment times."""
        mapper = create_mapper(points=SQUARE, tension=0, closed=True)
        assert mapper.get_t(0.25) == pytest.approx(0.25)
        assert mapper.get_u(0.5) == pytest.approx(0.5)
        assert mapper.get_u(0.375) == pytest.approx(0.375)

    def test_length_at(self):
        """Length at u is the fraction u of the total length."""
        mapper = create_mapper()
        assert mapper.length_at(0) == 0
        assert mapper.length_at(0.5) == pytest.approx(0.5 * mapper.total_length)

    def test_degenerate_points(self):
        """Coincident leading points give finite results."""
        mapper = create_mapper(
            points=[[0, 0], [0, 0], [0, 0], [0.04, 0.03], [0.07, 0.04], [0.07, 0.03], [0.02, 0.04]],
            alpha=0.5,
        )
        t = mapper.get_t(0.00005)
        assert math.isfinite(t)
        assert np.all(np.isfinite(mapper.get_point_at_t(t)))
        assert np.all(np.isfinite(mapper.get_point_at_t(1e-6)))

    def test_almost_straight_segments(self):
        """Tension close to 1 gives finite results."""
        mapper = create_mapper(points=[[0, 0], [1, 0], [1, 1], [3, 1], [3, 4]], tension=0.999993)
        for u in (0.001, 0.144, 0.5, 0.999):
            t = mapper.get_t(u)
            assert 0 <= t <= 1
            assert np.all(np.isfinite(mapper.get_point_at_t(t)))

    def test_zero_length_curve(self):
        """A curve without extent maps u onto t unchanged."""
        mapper = create_mapper(points=[[2, 3], [2, 3]])
        assert mapper.total_length == 0
        assert mapper.get_t(0.7) == 0.7
        assert mapper.get_u(0.7) == 0.7
