"""Curve mapper contract shared by the arc-length parameterization strategies.

A curve mapper owns the control points and curve parameters, memoizes the
segment coefficients and maps between the non-uniform curve time t and the
arc-length uniform position u.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from crspline.common import (
    InvalidationCallback,
    InvalidConfigurationError,
    SegmentFunction,
    Vector,
)
from crspline.spline_curve import SplineCurve
from crspline.spline_segment import SplineSegment

logger = logging.getLogger(__name__)


def binary_search(target_value: float, accumulated_values: Sequence[float]) -> int:
    """
    Find the index of the highest accumulated value that is less than or equal to target_value.

    Targets below the first value give 0, targets at or above the last value give
    the last index.

    Args:
        target_value (float): search term
        accumulated_values (Sequence[float]): non-decreasing values

    Returns:
        int: index into accumulated_values
    """
    values = np.asarray(accumulated_values, dtype=np.float64)
    last = len(values) - 1
    if target_value >= values[last]:
        return last
    if target_value <= values[0]:
        return 0
    return int(np.searchsorted(values, target_value, side="right")) - 1


###############################################################################
# MapperCache
###############################################################################


@dataclass
class MapperCache:
    """Lazily populated derived data of a curve mapper. Always cleared as a whole.

    Attributes:
        coefficients: segment coefficients keyed by segment index
        arc_lengths: cumulative arc length table
        samples: inverse-fit samples keyed by segment index
    """

    coefficients: Dict[int, NDArray[np.float64]] = field(default_factory=dict)
    arc_lengths: Optional[NDArray[np.float64]] = None
    samples: Dict[int, Any] = field(default_factory=dict)


###############################################################################
# AbstractCurveMapper
###############################################################################
class AbstractCurveMapper(ABC):
    """Base class of the curve mappers.

    Holds points, tension, alpha and closed. Every change of these clears the
    whole cache and fires the optional invalidation callback before the setter
    returns.
    """

    def __init__(self, on_invalidate_cache: Optional[InvalidationCallback] = None):
        """Initialize the mapper without points.

        Args:
            on_invalidate_cache: callback invoked whenever the cache is cleared
        """
        self._points: Optional[NDArray[np.float64]] = None
        self._tension: float = 0.5
        self._alpha: float = 0.0
        self._closed: bool = False
        self._on_invalidate_cache = on_invalidate_cache
        self._cache = MapperCache()

    ###########################################################################
    # Parameters
    ###########################################################################

    @property
    def points(self) -> Optional[NDArray[np.float64]]:
        """The control points as read-only array of shape (n_points, k), None if not set."""
        return self._points

    @points.setter
    def points(self, points: Sequence[Vector]) -> None:
        try:
            arr = np.array(points, dtype=np.float64)
        except (TypeError, ValueError) as exc:
            raise InvalidConfigurationError(f"Control points must be numeric vectors of equal size: {exc}") from exc

        if arr.ndim != 2 or arr.shape[0] < 2:
            raise InvalidConfigurationError("At least 2 control points are required!")
        if arr.shape[1] < 2:
            raise InvalidConfigurationError(f"Control points must have at least 2 dimensions, got {arr.shape[1]}")
        if not np.all(np.isfinite(arr)):
            raise InvalidConfigurationError("Control points must be finite")

        arr.flags.writeable = False
        self._points = arr
        self._invalidate_cache()

    @property
    def tension(self) -> float:
        """float: 0 = Catmull-Rom curvature, 1 = straight segments."""
        return self._tension

    @tension.setter
    def tension(self, tension: float) -> None:
        tension = self._check_finite("tension", tension)
        if tension != self._tension:
            self._tension = tension
            self._invalidate_cache()

    @property
    def alpha(self) -> float:
        """float: knot spacing exponent, 0 = uniform, 0.5 = centripetal, 1 = chordal."""
        return self._alpha

    @alpha.setter
    def alpha(self, alpha: float) -> None:
        alpha = self._check_finite("alpha", alpha)
        if alpha != self._alpha:
            self._alpha = alpha
            self._invalidate_cache()

    @property
    def closed(self) -> bool:
        """bool: True if the curve wraps around from the last to the first control point."""
        return self._closed

    @closed.setter
    def closed(self, closed: bool) -> None:
        closed = bool(closed)
        if closed != self._closed:
            self._closed = closed
            self._invalidate_cache()

    @property
    def segment_count(self) -> int:
        """int: number of curve segments."""
        if self._points is None:
            return 0
        return SplineCurve.segment_count(len(self._points), self._closed)

    @staticmethod
    def _check_finite(name: str, value: float) -> float:
        try:
            value = float(value)
        except (TypeError, ValueError) as exc:
            raise InvalidConfigurationError(f"{name} must be a number, got {value!r}") from exc
        if not math.isfinite(value):
            raise InvalidConfigurationError(f"{name} must be finite, got {value}")
        return value

    ###########################################################################
    # Cache
    ###########################################################################

    def _invalidate_cache(self) -> None:
        if self._points is None:
            return
        self._cache = MapperCache()
        logger.debug("Cache of %s cleared", type(self).__name__)
        if self._on_invalidate_cache is not None:
            self._on_invalidate_cache()

    def reset(self) -> None:
        """Clear all cached values."""
        self._invalidate_cache()

    @property
    def arc_lengths(self) -> NDArray[np.float64]:
        """The cumulative arc length table, computed on first access."""
        if self._cache.arc_lengths is None:
            self._cache.arc_lengths = self.compute_arc_lengths()
        return self._cache.arc_lengths

    @property
    def total_length(self) -> float:
        """float: the length of the whole curve."""
        return float(self.arc_lengths[-1])

    ###########################################################################
    # Segment evaluation
    ###########################################################################

    def get_coefficients(self, idx: int) -> NDArray[np.float64]:
        """
        Get the coefficients of the segment at idx, computed on first access.

        Returns:
            NDArray[np.float64]: coefficients [a, b, c, d] per axis, shape (k, 4)
        """
        points = self._require_points()
        coefficients = self._cache.coefficients.get(idx)
        if coefficients is None:
            p0, p1, p2, p3 = SplineCurve.get_control_points(idx, points, self._closed)
            coefficients = SplineSegment.calculate_coefficients(
                p0, p1, p2, p3, tension=self._tension, alpha=self._alpha
            )
            coefficients.flags.writeable = False
            self._cache.coefficients[idx] = coefficients
        return coefficients

    def _require_points(self) -> NDArray[np.float64]:
        if self._points is None:
            raise InvalidConfigurationError("Curve has no control points")
        return self._points

    def _segment_at(self, t: float) -> Tuple[int, float]:
        return SplineCurve.get_segment_index_and_t(t, len(self._require_points()), self._closed)

    def evaluate_for_t(self, func: SegmentFunction, t: float) -> NDArray[np.float64]:
        """Evaluate a segment function at the global curve time t."""
        index, weight = self._segment_at(t)
        return SplineSegment.evaluate_for_t(func, weight, self.get_coefficients(index))

    def get_point_at_t(self, t: float) -> NDArray[np.float64]:
        """
        Get the point on the curve at the global curve time t.

        t = 0 and t = 1 return the literal first and last (open) or first (closed)
        control point.
        """
        points = self._require_points()
        if t == 0:
            return points[0].copy()
        if t == 1:
            return (points[0] if self._closed else points[-1]).copy()
        return self.evaluate_for_t(SplineSegment.value_at_t, t)

    def get_tangent_at_t(self, t: float) -> NDArray[np.float64]:
        """Get the (non-normalized) first derivative at the global curve time t."""
        return self.evaluate_for_t(SplineSegment.derivative_at_t, t)

    def get_second_derivative_at_t(self, t: float) -> NDArray[np.float64]:
        """Get the second derivative at the global curve time t."""
        return self.evaluate_for_t(SplineSegment.second_derivative_at_t, t)

    def get_curvature_at_t(self, t: float) -> Tuple[float, float]:
        """Get curvature and radius at the global curve time t."""
        index, weight = self._segment_at(t)
        coefficients = self.get_coefficients(index)
        return SplineSegment.calc_curvature(
            SplineSegment.derivative_at_t(weight, coefficients),
            SplineSegment.second_derivative_at_t(weight, coefficients),
        )

    ###########################################################################
    # Arc length parameterization
    ###########################################################################

    @abstractmethod
    def compute_arc_lengths(self) -> NDArray[np.float64]:
        """Compute the cumulative arc length table of the strategy."""

    @abstractmethod
    def length_at(self, u: float) -> float:
        """Get the curve length from the start to the uniform position u."""

    @abstractmethod
    def get_t(self, u: float) -> float:
        """Map a uniform position u (0..1) to the curve time t (0..1)."""

    @abstractmethod
    def get_u(self, t: float) -> float:
        """Map a curve time t (0..1) to the uniform position u (0..1)."""
