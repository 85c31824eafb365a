"""Cubic segment math of Cardinal/Catmull-Rom splines.

A segment between the control points p1 and p2 is described per axis by the cubic
polynomial a*t^3 + b*t^2 + c*t + d with local time t in [0, 1]. The coefficients
are derived from the four control points p0..p3, the tension and the knot
parameterization exponent alpha.
"""

from __future__ import annotations

import math
from typing import List, Optional, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from crspline.common import EPS, Coefficients, SegmentFunction, Vector
from crspline.roots import PolyRoots
from crspline.vector import VecMath


###############################################################################
# SplineSegment
###############################################################################
class SplineSegment:
    """Class to provide static methods for coefficient derivation and evaluation of a segment.

    The evaluation functions accept a single coefficient row of shape (4,) or the
    coefficients of all axes of shape (k, 4). Passing t as an array of shape (m, 1)
    evaluates all axes at m local times at once, giving shape (m, k).
    """

    @staticmethod
    def calc_knot_sequence(
        p0: Vector, p1: Vector, p2: Vector, p3: Vector, alpha: float = 0.0
    ) -> Tuple[float, float, float, float]:
        """
        Calculate the knot sequence [t0, t1, t2, t3] for the control points of a segment.

        Alpha=0 gives uniform spacing [0, 1, 2, 3], alpha=0.5 a centripetal and
        alpha=1 a chordal curve.

        Args:
            p0 (Vector): first control point
            p1 (Vector): second control point
            p2 (Vector): third control point
            p3 (Vector): fourth control point
            alpha (float): knot spacing exponent

        Returns:
            Tuple[float, float, float, float]: increasing knot values, t0 = 0
        """
        if alpha == 0:
            return (0.0, 1.0, 2.0, 3.0)

        def delta_t(u: Vector, v: Vector) -> float:
            return VecMath.sum_of_squares(u, v) ** (0.5 * alpha)

        t1 = delta_t(p1, p0)
        t2 = delta_t(p2, p1) + t1
        t3 = delta_t(p3, p2) + t2
        return (0.0, t1, t2, t3)

    @staticmethod
    def calculate_coefficients(
        # pylint: disable=too-many-arguments,too-many-locals
        p0: Vector,
        p1: Vector,
        p2: Vector,
        p3: Vector,
        tension: float = 0.5,
        alpha: float = 0.0,
    ) -> NDArray[np.float64]:
        """
        Calculate the cubic coefficients of a segment for all axes.

        Knot differences of zero (coincident control points) are skipped, leaving
        the affected velocity term at 0 instead of producing NaN.

        Args:
            p0 (Vector): control point before the segment
            p1 (Vector): segment start point
            p2 (Vector): segment end point
            p3 (Vector): control point after the segment
            tension (float): 0 = Catmull-Rom, 1 = straight lines
            alpha (float): knot spacing exponent (0 = uniform, 0.5 = centripetal, 1 = chordal)

        Returns:
            NDArray[np.float64]: coefficients [a, b, c, d] per axis, shape (k, 4)
        """
        v0 = np.asarray(p0, dtype=np.float64)
        v1 = np.asarray(p1, dtype=np.float64)
        v2 = np.asarray(p2, dtype=np.float64)
        v3 = np.asarray(p3, dtype=np.float64)

        if alpha > 0:
            t0, t1, t2, t3 = SplineSegment.calc_knot_sequence(v0, v1, v2, v3, alpha)
            u = np.zeros_like(v1)
            v = np.zeros_like(v1)
            if t1 - t2 != 0:
                if t0 - t1 != 0 and t0 - t2 != 0:
                    u = (1 - tension) * (t2 - t1) * ((v0 - v1) / (t0 - t1) - (v0 - v2) / (t0 - t2) + (v1 - v2) / (t1 - t2))
                if t1 - t3 != 0 and t2 - t3 != 0:
                    v = (1 - tension) * (t2 - t1) * ((v1 - v2) / (t1 - t2) - (v1 - v3) / (t1 - t3) + (v2 - v3) / (t2 - t3))
        else:
            u = (1 - tension) * (v2 - v0) * 0.5
            v = (1 - tension) * (v3 - v1) * 0.5

        a = 2 * v1 - 2 * v2 + u + v
        b = -3 * v1 + 3 * v2 - 2 * u - v
        c = u
        d = v1
        return np.stack([a, b, c, d], axis=-1)

    @staticmethod
    def value_at_t(t: Union[float, NDArray[np.float64]], coefficients: Coefficients):
        """Value a*t^3 + b*t^2 + c*t + d of the segment polynomial."""
        coeff = np.asarray(coefficients, dtype=np.float64)
        t2 = t * t
        t3 = t * t2
        return coeff[..., 0] * t3 + coeff[..., 1] * t2 + coeff[..., 2] * t + coeff[..., 3]

    @staticmethod
    def derivative_at_t(t: Union[float, NDArray[np.float64]], coefficients: Coefficients):
        """First derivative 3a*t^2 + 2b*t + c."""
        coeff = np.asarray(coefficients, dtype=np.float64)
        return 3 * coeff[..., 0] * (t * t) + 2 * coeff[..., 1] * t + coeff[..., 2]

    @staticmethod
    def second_derivative_at_t(t: Union[float, NDArray[np.float64]], coefficients: Coefficients):
        """Second derivative 6a*t + 2b."""
        coeff = np.asarray(coefficients, dtype=np.float64)
        return 6 * coeff[..., 0] * t + 2 * coeff[..., 1]

    @staticmethod
    def evaluate_for_t(
        func: SegmentFunction, t: float, coefficients: Coefficients, target: Optional[NDArray[np.float64]] = None
    ) -> NDArray[np.float64]:
        """
        Evaluate a segment function for all axes of a segment.

        Args:
            func (SegmentFunction): value_at_t, derivative_at_t or second_derivative_at_t
            t (float): local time within the segment
            coefficients (Coefficients): coefficients of shape (k, 4)
            target (NDArray, optional): array of shape (k,) receiving the result

        Returns:
            NDArray[np.float64]: the evaluated vector (target if given)
        """
        result = np.asarray(func(t, coefficients), dtype=np.float64)
        if target is None:
            return result
        target[:] = result
        return target

    @staticmethod
    def find_roots_of_t(lookup: float, coefficients: Coefficients) -> List[float]:
        """
        Solve the segment polynomial of one axis for a target value.

        Roots within [-EPS, 1 + EPS] are kept and clamped into [0, 1]. If the whole
        segment matches the target (all coefficients zero) the sentinel [0] is returned.

        Args:
            lookup (float): target value
            coefficients (Coefficients): coefficient row [a, b, c, d] of one axis

        Returns:
            List[float]: local times t where the axis value equals lookup
        """
        a, b, c, d = (float(x) for x in coefficients)
        x = d - lookup
        if a == 0 and b == 0 and c == 0 and x == 0:
            return [0.0]
        roots = PolyRoots.get_cubic_roots(a, b, c, x)
        return [VecMath.clamp(t, 0.0, 1.0) for t in roots if -EPS < t <= 1 + EPS]

    @staticmethod
    def calc_curvature(dt: Vector, dt2: Vector) -> Tuple[float, float]:
        """
        Calculate curvature and radius from the first and second derivative.

        In 2D the curvature is signed (positive when turning counter-clockwise),
        in higher dimensions its magnitude is returned.

        Returns:
            Tuple[float, float]: (curvature, radius), radius is inf for zero curvature
        """
        d1 = np.asarray(dt, dtype=np.float64)
        d2 = np.asarray(dt2, dtype=np.float64)
        speed_sq = float(np.dot(d1, d1))
        if speed_sq == 0:
            return 0.0, math.inf

        if d1.shape == (2,):
            numerator = float(d1[0] * d2[1] - d1[1] * d2[0])
        else:
            d12 = float(np.dot(d1, d2))
            numerator = math.sqrt(max(0.0, speed_sq * float(np.dot(d2, d2)) - d12 * d12))

        curvature = numerator / speed_sq**1.5
        radius = math.inf if curvature == 0 else 1.0 / abs(curvature)
        return curvature, radius
