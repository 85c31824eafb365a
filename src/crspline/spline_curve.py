"""Control point selection for the segments of a Catmull-Rom spline chain."""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np
from numpy.typing import NDArray

from crspline.common import InvalidArgumentError, Vector


###############################################################################
# SplineCurve
###############################################################################
class SplineCurve:
    """Class to map a spline curve (point set + topology) onto its segments.

    A segment is identified by its index. Its four control points are derived
    from the point set and never stored. The end segments of an open curve use
    phantom points extrapolated from the two nearest control points.
    """

    @staticmethod
    def segment_count(n_points: int, closed: bool = False) -> int:
        """Number of segments of a curve with n_points control points."""
        return n_points if closed else n_points - 1

    @staticmethod
    def extrapolate_control_point(u: Vector, v: Vector) -> NDArray[np.float64]:
        """
        Extrapolate a phantom point beyond u, mirroring v: 2*u - v.

        Args:
            u (Vector): adjacent point (the curve end)
            v (Vector): neighbor point of u

        Returns:
            NDArray[np.float64]: the extrapolated point
        """
        return 2.0 * np.asarray(u, dtype=np.float64) - np.asarray(v, dtype=np.float64)

    @staticmethod
    def get_control_points(
        idx: int, points: NDArray[np.float64], closed: bool = False
    ) -> Tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
        """
        Get the four control points (p0, p1, p2, p3) of the segment at idx.

        The segment itself runs from p1 to p2.

        Args:
            idx (int): segment index
            points (NDArray[np.float64]): all control points, shape (n, k)
            closed (bool): True if the curve wraps around from the last to the first point

        Returns:
            Tuple of 4 control points
        """
        n_points = len(points)
        max_index = n_points - 1
        if idx < 0 or idx >= SplineCurve.segment_count(n_points, closed):
            raise InvalidArgumentError(f"There is no spline segment at index {idx}")

        if closed:
            p0 = points[max_index if idx - 1 < 0 else idx - 1]
            p1 = points[idx % n_points]
            p2 = points[(idx + 1) % n_points]
            p3 = points[(idx + 2) % n_points]
        else:
            p1 = points[idx]
            p2 = points[idx + 1]
            p0 = points[idx - 1] if idx > 0 else SplineCurve.extrapolate_control_point(p1, p2)
            p3 = points[idx + 2] if idx < max_index - 1 else SplineCurve.extrapolate_control_point(p2, p1)

        return p0, p1, p2, p3

    @staticmethod
    def get_segment_index_and_t(t: float, n_points: int, closed: bool = False) -> Tuple[int, float]:
        """
        Find the segment index and the local time (weight) at a global curve time t.

        Args:
            t (float): non-uniform time along the whole curve (0..1)
            n_points (int): number of control points
            closed (bool): True for a closed curve

        Returns:
            Tuple[int, float]: segment index and local time within the segment
        """
        n_segments = SplineCurve.segment_count(n_points, closed)
        if t == 1.0:
            return n_segments - 1, 1.0

        p = n_segments * t
        index = math.floor(p)
        weight = p - index
        # floating point rounding of p just below a segment boundary
        if index >= n_segments:
            return n_segments - 1, 1.0
        return index, weight
