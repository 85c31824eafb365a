"""Vector arithmetic on fixed-arity numeric tuples"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray

from crspline.common import InvalidArgumentError, Vector


###############################################################################
# VecMath
###############################################################################
class VecMath:
    """Class to provide static vector operations for points of any dimension.

    All operations accept sequences or numpy arrays and return new numpy arrays
    (or floats), the inputs are never modified.
    """

    @staticmethod
    def _as_array(v: Vector) -> NDArray[np.float64]:
        return np.asarray(v, dtype=np.float64)

    @staticmethod
    def _check_same_dims(u: NDArray[np.float64], v: NDArray[np.float64]) -> None:
        if u.shape != v.shape:
            raise InvalidArgumentError(f"Vectors must have the same dimensions, got {u.shape} and {v.shape}")

    @staticmethod
    def add(u: Vector, v: Vector) -> NDArray[np.float64]:
        """Component-wise sum of two vectors."""
        a, b = VecMath._as_array(u), VecMath._as_array(v)
        VecMath._check_same_dims(a, b)
        return a + b

    @staticmethod
    def sub(u: Vector, v: Vector) -> NDArray[np.float64]:
        """Component-wise difference u - v."""
        a, b = VecMath._as_array(u), VecMath._as_array(v)
        VecMath._check_same_dims(a, b)
        return a - b

    @staticmethod
    def dot(u: Vector, v: Vector) -> float:
        """Dot product of two vectors of equal dimension."""
        a, b = VecMath._as_array(u), VecMath._as_array(v)
        VecMath._check_same_dims(a, b)
        return float(np.dot(a, b))

    @staticmethod
    def cross(u: Vector, v: Vector) -> NDArray[np.float64] | float:
        """
        Cross product of two vectors.

        For 2D vectors the scalar z-component of the 3D cross product is returned,
        for 3D vectors the cross product vector.

        Args:
            u (Vector): first vector (2D or 3D)
            v (Vector): second vector (same dimension as u)

        Returns:
            float | NDArray: scalar for 2D input, vector for 3D input
        """
        a, b = VecMath._as_array(u), VecMath._as_array(v)
        VecMath._check_same_dims(a, b)
        if a.shape == (2,):
            return float(a[0] * b[1] - a[1] * b[0])
        if a.shape == (3,):
            return np.cross(a, b)
        raise InvalidArgumentError(f"Cross product is only supported for 2D and 3D vectors, got {a.shape}")

    @staticmethod
    def sum_of_squares(u: Vector, v: Vector) -> float:
        """Squared euclidean distance between two points."""
        a, b = VecMath._as_array(u), VecMath._as_array(v)
        VecMath._check_same_dims(a, b)
        d = a - b
        return float(np.dot(d, d))

    @staticmethod
    def magnitude(v: Vector) -> float:
        """Length of a vector."""
        return float(np.linalg.norm(VecMath._as_array(v)))

    @staticmethod
    def distance(p1: Vector, p2: Vector) -> float:
        """Euclidean distance between two points."""
        sqrs = VecMath.sum_of_squares(p1, p2)
        return 0.0 if sqrs == 0 else math.sqrt(sqrs)

    @staticmethod
    def normalize(v: Vector) -> NDArray[np.float64]:
        """Unit vector in the direction of v, a zero vector stays zero."""
        a = VecMath._as_array(v)
        length = float(np.linalg.norm(a))
        if length == 0:
            return np.zeros_like(a)
        return a / length

    @staticmethod
    def orthogonal(v: Vector) -> NDArray[np.float64]:
        """Rotate a 2D vector 90 degrees counter-clockwise."""
        a = VecMath._as_array(v)
        if a.shape != (2,):
            raise InvalidArgumentError("Only supported for 2d vectors")
        return np.array([-a[1], a[0]], dtype=np.float64)

    @staticmethod
    def rotate3d(v: Vector, axis: Vector = (0.0, 1.0, 0.0), angle: float = 0.0) -> NDArray[np.float64]:
        """
        Rotate a 3D vector around a unit axis (Rodrigues' rotation formula).

        Args:
            v (Vector): vector to rotate
            axis (Vector): unit rotation axis
            angle (float): rotation angle in radians

        Returns:
            NDArray[np.float64]: the rotated vector
        """
        a = VecMath._as_array(v)
        k = VecMath._as_array(axis)
        if a.shape != (3,) or k.shape != (3,):
            raise InvalidArgumentError("Only supported for 3d vectors")
        c = math.cos(angle)
        s = math.sin(angle)
        return a * c + np.cross(k, a) * s + k * float(np.dot(k, a)) * (1.0 - c)

    @staticmethod
    def clamp(value: float, min_value: float = 0.0, max_value: float = 1.0) -> float:
        """Clamp a value into [min_value, max_value]."""
        if value < min_value:
            return min_value
        if value > max_value:
            return max_value
        return value
