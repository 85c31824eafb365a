"""Central module containing constants, types and exceptions for spline handling."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Sequence, Union

import numpy as np
from numpy.typing import NDArray

###############################################################################
# Types
###############################################################################


# A single control point or vector: any numeric sequence or a 1D numpy array
Vector = Union[Sequence[float], NDArray[np.float64]]

# Per-axis cubic coefficients [a, b, c, d] of a*t^3 + b*t^2 + c*t + d.
# Either one row of shape (4,) or a block of shape (k, 4) for a k-dimensional segment.
Coefficients = NDArray[np.float64]

# Segment function signature shared by value/derivative/second derivative evaluation
SegmentFunction = Callable[[Union[float, NDArray[np.float64]], Coefficients], Union[float, NDArray[np.float64]]]

# Callback fired whenever a curve mapper clears its caches
InvalidationCallback = Callable[[], None]


###############################################################################
# Enums and Consts
###############################################################################


# Tolerance used by the root solvers and root filters. 2^-42 absorbs floating point
# noise on near-degenerate segments (coincident control points).
EPS: float = 2.0**-42


class KnotParameterization(Enum):
    """Enum to define the knot spacing exponent (alpha) of a Catmull-Rom curve."""

    UNIFORM = 0.0
    CENTRIPETAL = 0.5
    CHORDAL = 1.0


###############################################################################
# Exceptions
###############################################################################


class CrSplineError(Exception):
    """Base class for all errors raised by crspline."""


class InvalidConfigurationError(CrSplineError, ValueError):
    """Raised when a curve is configured with invalid points or parameters."""


class InvalidArgumentError(CrSplineError, ValueError):
    """Raised when an operation receives arguments it cannot handle (e.g. dimension mismatch)."""
