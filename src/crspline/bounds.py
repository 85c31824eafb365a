"""Bounding boxes, axis intersections and sampling of spline curves"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import numpy as np
from numpy.typing import NDArray

from crspline.common import EPS, InvalidArgumentError, Vector
from crspline.curve_mapper import AbstractCurveMapper
from crspline.roots import PolyRoots
from crspline.spline_curve import SplineCurve
from crspline.spline_segment import SplineSegment


###############################################################################
# BoundingBox
###############################################################################
@dataclass
class BoundingBox:
    """
    Axis aligned bounding box of any dimension.

    Attributes:
        min (NDArray[np.float64]): per axis minimum
        max (NDArray[np.float64]): per axis maximum
    """

    min: NDArray[np.float64]
    max: NDArray[np.float64]

    def __post_init__(self):
        self.min = np.asarray(self.min, dtype=np.float64)
        self.max = np.asarray(self.max, dtype=np.float64)
        if self.min.shape != self.max.shape:
            raise InvalidArgumentError(f"min and max must have the same dimensions, got {self.min.shape} and {self.max.shape}")

        # Normalize coordinates to ensure min <= max on every axis
        lower = np.minimum(self.min, self.max)
        upper = np.maximum(self.min, self.max)
        self.min, self.max = lower, upper

    @property
    def dimensions(self) -> int:
        """int: number of axes."""
        return len(self.min)

    @property
    def size(self) -> NDArray[np.float64]:
        """Extent of the box along each axis."""
        return self.max - self.min

    @property
    def centroid(self) -> NDArray[np.float64]:
        """The center of the box."""
        return (self.min + self.max) / 2

    def contains(self, point: Vector, tol: float = 0.0) -> bool:
        """True if the point lies within the box, widened by tol on every side."""
        p = np.asarray(point, dtype=np.float64)
        if p.shape != self.min.shape:
            raise InvalidArgumentError(f"Point must have {self.dimensions} dimensions, got {p.shape}")
        return bool(np.all(p >= self.min - tol) and np.all(p <= self.max + tol))

    @classmethod
    def from_dict(cls, data: dict) -> BoundingBox:
        """Create a BoundingBox instance from a dictionary."""
        return cls(min=data["min"], max=data["max"])

    def to_dict(self) -> dict:
        """Convert the BoundingBox instance to a dictionary."""
        return {"min": self.min.tolist(), "max": self.max.tolist()}

    def __str__(self):
        return f"BoundingBox(min={self.min.tolist()}, max={self.max.tolist()})"


###############################################################################
# CurveAnalysis
###############################################################################
class CurveAnalysis:
    """Collection of static curve queries built on a curve mapper.

    The queries reuse the cached segment coefficients of the mapper and solve
    the segment polynomials in closed form.
    """

    @staticmethod
    def get_bounding_box(mapper: AbstractCurveMapper, u0: float = 0.0, u1: float = 1.0) -> BoundingBox:
        """
        Get the exact bounding box of the curve between the uniform positions u0 and u1.

        The box is seeded with the two end points. Control points at interior
        segment boundaries are added, and the interior extrema of each covered
        segment are found from the roots of its derivative. Segments with
        tension 1 are straight and have no interior extrema.

        Args:
            mapper (AbstractCurveMapper): curve to inspect
            u0 (float): start position (0..1)
            u1 (float): end position (0..1), u1 >= u0

        Returns:
            BoundingBox: per axis min and max
        """
        # pylint: disable=too-many-locals
        points = mapper.points
        t0 = mapper.get_t(u0)
        t1 = mapper.get_t(u1)

        start = mapper.get_point_at_t(t0)
        end = mapper.get_point_at_t(t1)
        lower = np.minimum(start, end)
        upper = np.maximum(start, end)

        n_segments = mapper.segment_count
        i0 = int(np.floor(n_segments * t0))
        i1 = int(np.ceil(n_segments * t1))

        for i in range(i0 + 1, i1 + 1):
            idx = i - 1
            if i < i1:
                _, _, p2, _ = SplineCurve.get_control_points(idx, points, mapper.closed)
                lower = np.minimum(lower, p2)
                upper = np.maximum(upper, p2)

            if mapper.tension >= 1:
                continue

            w0 = n_segments * t0 - idx
            w1 = n_segments * t1 - idx

            def valid(t: float, idx=idx, i=i, w0=w0, w1=w1) -> bool:
                return -EPS < t <= 1 + EPS and (idx != i0 or t > w0) and (i != i1 or t < w1)

            coefficients = mapper.get_coefficients(idx)
            for axis, (a, b, c, _) in enumerate(coefficients):
                for t in filter(valid, PolyRoots.get_quad_roots(3 * a, 2 * b, c)):
                    value = SplineSegment.value_at_t(t, coefficients[axis])
                    lower[axis] = min(lower[axis], value)
                    upper[axis] = max(upper[axis], value)

        return BoundingBox(min=lower, max=upper)

    @staticmethod
    def _segment_ts(
        # pylint: disable=too-many-arguments,too-many-positional-arguments
        mapper: AbstractCurveMapper,
        value: float,
        axis: int,
        max_count: int,
        margin: Optional[float],
    ):
        """Yield (segment index, local t) of the axis crossings in the requested direction."""
        points = mapper.points
        if not 0 <= axis < points.shape[1]:
            raise InvalidArgumentError(f"Axis {axis} is out of range for {points.shape[1]}-dimensional points")
        if margin is None:
            margin = 1 - mapper.tension

        n_segments = mapper.segment_count
        reverse = max_count < 0
        for i in range(n_segments):
            idx = n_segments - (i + 1) if reverse else i

            _, p1, p2, _ = SplineCurve.get_control_points(idx, points, mapper.closed)
            vmin, vmax = sorted((p1[axis], p2[axis]))
            if not (value - margin <= vmax and value + margin >= vmin):
                continue

            coefficients = mapper.get_coefficients(idx)
            ts = sorted(SplineSegment.find_roots_of_t(value, coefficients[axis]), reverse=reverse)
            # a boundary point is shared with the previously visited segment
            duplicate_t = 1.0 if reverse else 0.0
            for t in ts:
                if t == duplicate_t and i > 0:
                    continue
                yield idx, t

    @staticmethod
    def lookup(
        mapper: AbstractCurveMapper,
        value: float,
        axis: int = 0,
        max_count: int = 0,
        margin: Optional[float] = None,
    ) -> List[NDArray[np.float64]]:
        """
        Find the points where the curve crosses value along the given axis.

        Args:
            mapper (AbstractCurveMapper): curve to inspect
            value (float): lookup value
            axis (int): index of the axis (0 = x, 1 = y, 2 = z, ...)
            max_count (int): max solutions, 0 = all, n > 0 = first n along the curve,
                n < 0 = last |n| along the curve (in reverse order)
            margin (float, optional): tolerance widening the per segment range check,
                defaults to 1 - tension

        Returns:
            List[NDArray[np.float64]]: the intersection points
        """
        solutions: List[NDArray[np.float64]] = []
        for idx, t in CurveAnalysis._segment_ts(mapper, value, axis, max_count, margin):
            coord = np.asarray(SplineSegment.value_at_t(t, mapper.get_coefficients(idx)), dtype=np.float64)
            coord[axis] = value
            solutions.append(coord)
            if max_count != 0 and len(solutions) == abs(max_count):
                break
        return solutions

    @staticmethod
    def lookup_positions(
        mapper: AbstractCurveMapper,
        value: float,
        axis: int = 0,
        max_count: int = 0,
        margin: Optional[float] = None,
    ) -> List[float]:
        """
        Find the uniform positions (0..1) where the curve crosses value along the given axis.

        Arguments as for lookup. Positions are unique and ordered like the lookup results.
        """
        n_segments = mapper.segment_count
        positions: List[float] = []
        for idx, t in CurveAnalysis._segment_ts(mapper, value, axis, max_count, margin):
            u = mapper.get_u((t + idx) / n_segments)
            if u in positions:
                continue
            positions.append(u)
            if max_count != 0 and len(positions) == abs(max_count):
                break
        return positions

    @staticmethod
    def get_points(
        mapper: AbstractCurveMapper, samples: int = 100, u0: float = 0.0, u1: float = 1.0
    ) -> NDArray[np.float64]:
        """
        Sample samples + 1 points evenly spaced by arc length between u0 and u1.

        Args:
            mapper (AbstractCurveMapper): curve to sample
            samples (int): number of pieces, at least 1
            u0 (float): start position (0..1)
            u1 (float): end position (0..1), u1 >= u0

        Returns:
            NDArray[np.float64]: sampled points, shape (samples + 1, k)
        """
        if samples is None or samples < 1:
            raise InvalidArgumentError("You must specify at least 1 sample/segment")
        if u0 < 0 or u1 > 1 or u1 < u0:
            raise InvalidArgumentError(f"Invalid range [{u0}, {u1}], must be within [0, 1]")

        points = []
        for d in range(samples + 1):
            u = d / samples if (u0 == 0 and u1 == 1) else u0 + (d / samples) * (u1 - u0)
            points.append(mapper.get_point_at_t(mapper.get_t(u)))
        return np.array(points, dtype=np.float64)
