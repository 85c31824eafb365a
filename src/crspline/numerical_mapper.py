"""Arc-length parameterization by Gauss-Legendre quadrature and a monotone cubic inverse.

Segment lengths are integrated numerically over |dP/dt|. To map a length back
to the segment time, a number of (length, dt/dlength) samples per segment is
used to fit a monotone piecewise cubic Hermite interpolant t(length), see
https://stackoverflow.com/questions/35275073/uniform-discretization-of-bezier-curve
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple

import numpy as np
from numpy.polynomial.legendre import leggauss
from numpy.typing import NDArray

from crspline.common import InvalidationCallback, InvalidConfigurationError
from crspline.curve_mapper import AbstractCurveMapper, binary_search
from crspline.spline_segment import SplineSegment
from crspline.vector import VecMath

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def gauss_legendre_table(order: int) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Abscissae and weights of the Gauss-Legendre quadrature rule on [-1, 1].

    Args:
        order (int): number of quadrature points

    Returns:
        Tuple[NDArray, NDArray]: abscissae (ascending) and weights, both read-only
    """
    abscissae, weights = leggauss(order)
    abscissae.flags.writeable = False
    weights.flags.writeable = False
    logger.debug("Created Gauss-Legendre table of order %d", order)
    return abscissae, weights


###############################################################################
# InverseSamples
###############################################################################


@dataclass(frozen=True)
class InverseSamples:
    """Samples and interpolant coefficients of the inverse function t(length) of a segment.

    Attributes:
        lengths: arc length from the segment start at t_i = i / (n - 1), shape (n,)
        slopes: dt/dlength at t_i (0 where the curve does not move), shape (n,)
        cis: degree 2 coefficients of the Hermite pieces, shape (n - 1,)
        dis: degree 3 coefficients of the Hermite pieces, shape (n - 1,)
    """

    lengths: NDArray[np.float64]
    slopes: NDArray[np.float64]
    cis: NDArray[np.float64]
    dis: NDArray[np.float64]


###############################################################################
# NumericalCurveMapper
###############################################################################
class NumericalCurveMapper(AbstractCurveMapper):
    """Curve mapper using numerical integration for near exact arc lengths.

    The arc length table holds one cumulative entry per segment boundary.
    """

    def __init__(
        self,
        n_quadrature_points: int = 24,
        n_inverse_samples: int = 21,
        on_invalidate_cache: Optional[InvalidationCallback] = None,
    ):
        """Initialize the mapper.

        Args:
            n_quadrature_points: number of Gauss-Legendre points for the arc length integration
            n_inverse_samples: number of arc length samples per segment for the inverse fit
            on_invalidate_cache: callback invoked whenever the cache is cleared
        """
        super().__init__(on_invalidate_cache)
        if int(n_quadrature_points) < 1:
            raise InvalidConfigurationError(f"n_quadrature_points must be at least 1, got {n_quadrature_points}")
        if int(n_inverse_samples) < 2:
            raise InvalidConfigurationError(f"n_inverse_samples must be at least 2, got {n_inverse_samples}")
        self._abscissae, self._weights = gauss_legendre_table(int(n_quadrature_points))
        self._n_samples = int(n_inverse_samples)

    @property
    def n_samples(self) -> int:
        """int: number of inverse function samples per segment."""
        return self._n_samples

    @property
    def gauss(self) -> NDArray[np.float64]:
        """Quadrature table as rows of (abscissa, weight)."""
        return np.column_stack((self._abscissae, self._weights))

    def compute_arc_length(self, index: int, t0: float = 0.0, t1: float = 1.0) -> float:
        """
        Integrate the arc length of a segment between two local times.

        Args:
            index (int): segment index
            t0 (float): local start time
            t1 (float): local end time

        Returns:
            float: arc length between t0 and t1
        """
        coefficients = self.get_coefficients(index)
        z = (t1 - t0) * 0.5
        ts = (z * self._abscissae + z + t0)[:, np.newaxis]
        speeds = np.linalg.norm(SplineSegment.derivative_at_t(ts, coefficients), axis=1)
        return float(z * np.dot(self._weights, speeds))

    def compute_arc_lengths(self) -> NDArray[np.float64]:
        """
        Running sum of the segment lengths.

        Returns:
            NDArray[np.float64]: cumulative lengths, shape (segment_count + 1,), first entry 0
        """
        segment_lengths = [self.compute_arc_length(i) for i in range(self.segment_count)]
        lengths = np.concatenate(([0.0], np.cumsum(segment_lengths)))
        logger.debug("Computed %d segment lengths, total length %g", len(segment_lengths), lengths[-1])
        return lengths

    def get_samples(self, idx: int) -> InverseSamples:
        """
        Get the inverse function samples of a segment, computed on first access.

        Args:
            idx (int): segment index

        Returns:
            InverseSamples: lengths, slopes and interpolant coefficients
        """
        samples = self._cache.samples.get(idx)
        if samples is not None:
            return samples

        n = self._n_samples
        coefficients = self.get_coefficients(idx)
        ts = np.linspace(0.0, 1.0, n)
        lengths = np.array([self.compute_arc_length(idx, 0.0, ti) for ti in ts], dtype=np.float64)
        speeds = np.linalg.norm(SplineSegment.derivative_at_t(ts[:, np.newaxis], coefficients), axis=1)
        slopes = np.divide(1.0, speeds, out=np.zeros_like(speeds), where=speeds != 0)

        # Cubic Hermite pieces t(l) = ((d*l + c)*l + slope)*l + t_i on each length interval
        step = 1.0 / (n - 1)
        l_diff = np.diff(lengths)
        cis = np.zeros(n - 1, dtype=np.float64)
        dis = np.zeros(n - 1, dtype=np.float64)
        valid = l_diff != 0
        si = step / l_diff[valid]
        td0 = slopes[:-1][valid]
        td1 = slopes[1:][valid]
        dis[valid] = (td0 + td1 - 2 * si) / (l_diff[valid] * l_diff[valid])
        cis[valid] = (3 * si - 2 * td0 - td1) / l_diff[valid]

        samples = InverseSamples(lengths=lengths, slopes=slopes, cis=cis, dis=dis)
        self._cache.samples[idx] = samples
        return samples

    def inverse(self, idx: int, length: float) -> float:
        """
        Calculate the local time of a segment from an arc length measured from its start.

        Args:
            idx (int): segment index
            length (float): arc length from the segment start

        Returns:
            float: local time t in [0, 1]
        """
        samples = self.get_samples(idx)
        lengths = samples.lengths

        if length >= lengths[-1]:
            return 1.0
        if length <= 0:
            return 0.0

        i = max(0, binary_search(length, lengths))
        ti = i / (self._n_samples - 1)
        if lengths[i] == length:
            return ti

        ld = length - lengths[i]
        # the cubic may overshoot where the speed at a sample is close to 0
        return float(VecMath.clamp(((samples.dis[i] * ld + samples.cis[i]) * ld + samples.slopes[i]) * ld + ti))

    def length_at(self, u: float) -> float:
        """Curve length from the start to the uniform position u."""
        return u * self.total_length

    def get_t(self, u: float) -> float:
        """Map the uniform position u to the curve time t."""
        arc_lengths = self.arc_lengths
        last = len(arc_lengths) - 1
        total_length = arc_lengths[last]
        if total_length == 0:
            logger.warning("Curve has zero length, mapping u to t unchanged")
            return u

        target_arc_length = u * total_length
        i = binary_search(target_arc_length, arc_lengths)
        ti = i / last
        if arc_lengths[i] == target_arc_length:
            return ti

        fraction = self.inverse(i, target_arc_length - arc_lengths[i])
        return (i + fraction) / last

    def get_u(self, t: float) -> float:
        """Map the curve time t to the uniform position u."""
        if t == 0:
            return 0.0
        if t == 1:
            return 1.0

        arc_lengths = self.arc_lengths
        last = len(arc_lengths) - 1
        total_length = arc_lengths[last]
        if total_length == 0:
            logger.warning("Curve has zero length, mapping t to u unchanged")
            return t

        t_idx = t * last
        sub_idx = math.floor(t_idx)
        length = arc_lengths[sub_idx]
        if t_idx == sub_idx:
            return float(length / total_length)

        fraction = self.compute_arc_length(sub_idx, 0.0, t_idx - sub_idx)
        return float((length + fraction) / total_length)
