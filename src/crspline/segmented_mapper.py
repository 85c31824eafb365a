"""Arc-length parameterization by subdividing the curve into linear pieces."""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from crspline.common import InvalidationCallback, InvalidConfigurationError
from crspline.curve_mapper import AbstractCurveMapper, binary_search

logger = logging.getLogger(__name__)


###############################################################################
# SegmentedCurveMapper
###############################################################################
class SegmentedCurveMapper(AbstractCurveMapper):
    """Approximate the curve by a polyline of uniformly spaced curve times.

    The cumulative polyline lengths (one entry per subdivision point) are used
    to map between the uniform position u and the curve time t. Precomputing
    costs O(N), every lookup O(log N).
    """

    def __init__(self, sub_divisions: int = 300, on_invalidate_cache: Optional[InvalidationCallback] = None):
        """Initialize the mapper.

        Args:
            sub_divisions: number of linear pieces used to approximate the curve
            on_invalidate_cache: callback invoked whenever the cache is cleared
        """
        super().__init__(on_invalidate_cache)
        if int(sub_divisions) < 1:
            raise InvalidConfigurationError(f"sub_divisions must be at least 1, got {sub_divisions}")
        self._sub_divisions = int(sub_divisions)

    @property
    def sub_divisions(self) -> int:
        """int: number of linear pieces."""
        return self._sub_divisions

    def compute_arc_lengths(self) -> NDArray[np.float64]:
        """
        Sample the curve at N + 1 uniform curve times and accumulate the distances.

        Returns:
            NDArray[np.float64]: cumulative lengths, shape (N + 1,), first entry 0
        """
        n = self._sub_divisions
        samples = np.array([self.get_point_at_t(i / n) for i in range(n + 1)], dtype=np.float64)
        distances = np.linalg.norm(np.diff(samples, axis=0), axis=1)
        lengths = np.concatenate(([0.0], np.cumsum(distances)))
        logger.debug("Computed %d arc length samples, total length %g", n + 1, lengths[-1])
        return lengths

    def length_at(self, u: float) -> float:
        """Curve length from the start to the uniform position u."""
        return u * self.total_length

    def get_t(self, u: float) -> float:
        """
        Map the uniform position u to the curve time t.

        The position within the bracketing subdivision is interpolated linearly
        in length.
        """
        arc_lengths = self.arc_lengths
        last = len(arc_lengths) - 1
        total_length = arc_lengths[last]
        if total_length == 0:
            logger.warning("Curve has zero length, mapping u to t unchanged")
            return u

        target_arc_length = u * total_length
        i = binary_search(target_arc_length, arc_lengths)
        if arc_lengths[i] == target_arc_length:
            return i / last

        length_before = arc_lengths[i]
        segment_length = arc_lengths[i + 1] - length_before
        segment_fraction = (target_arc_length - length_before) / segment_length
        return float((i + segment_fraction) / last)

    def get_u(self, t: float) -> float:
        """
        Map the curve time t to the uniform position u.

        Within the bracketing subdivision the distance from its start point to the
        actual curve point at t is measured instead of interpolating the table.
        """
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

        p0 = self.get_point_at_t(sub_idx / last)
        p1 = self.get_point_at_t(t)
        return float((length + np.linalg.norm(p1 - p0)) / total_length)
