"""Closed-form real roots of quadratic and cubic polynomials."""

from __future__ import annotations

import math
from typing import List

from crspline.common import EPS


###############################################################################
# PolyRoots
###############################################################################
class PolyRoots:
    """Class to provide static closed-form polynomial root solvers.

    Near-zero leading coefficients (|a| < EPS) are routed to the lower degree
    solver instead of dividing by a tiny number.
    """

    @staticmethod
    def cuberoot(x: float) -> float:
        """Real cube root that keeps the sign of x."""
        y = abs(x) ** (1.0 / 3.0)
        return -y if x < 0 else y

    @staticmethod
    def get_quad_roots(a: float, b: float, c: float) -> List[float]:
        """
        Solve a*x^2 + b*x + c = 0.

        Args:
            a (float): 2nd degree coefficient
            b (float): 1st degree coefficient
            c (float): constant coefficient

        Returns:
            List[float]: 0, 1 (double or linear root) or 2 real roots
        """
        if abs(a) < EPS:
            # Linear case b*x + c = 0
            if abs(b) < EPS:
                return []
            return [-c / b]

        discriminant = b * b - 4.0 * a * c
        if abs(discriminant) < EPS:
            return [-b / (2.0 * a)]

        if discriminant > 0:
            sqrt_d = math.sqrt(discriminant)
            return [(-b + sqrt_d) / (2.0 * a), (-b - sqrt_d) / (2.0 * a)]
        return []

    @staticmethod
    def get_cubic_roots(a: float, b: float, c: float, d: float) -> List[float]:
        """
        Solve a*x^3 + b*x^2 + c*x + d = 0.

        The cubic is converted to the depressed form t^3 + p*t + q = 0 using
        x = t - b/(3a). Depending on the discriminant D = q^2/4 + p^3/27 there is
        one real root (Cardano), a double root (D ~ 0) or three real roots
        (trigonometric solution).

        Args:
            a (float): 3rd degree coefficient
            b (float): 2nd degree coefficient
            c (float): 1st degree coefficient
            d (float): constant coefficient

        Returns:
            List[float]: the real roots, unordered
        """
        if abs(a) < EPS:
            return PolyRoots.get_quad_roots(b, c, d)

        p = (3.0 * a * c - b * b) / (3.0 * a * a)
        q = (2.0 * b * b * b - 9.0 * a * b * c + 27.0 * a * a * d) / (27.0 * a * a * a)

        if abs(p) < EPS:
            # t^3 = -q
            roots = [PolyRoots.cuberoot(-q)]
        elif abs(q) < EPS:
            # t * (t^2 + p) = 0
            roots = [0.0] + ([math.sqrt(-p), -math.sqrt(-p)] if p < 0 else [])
        else:
            discriminant = q * q / 4.0 + p * p * p / 27.0
            if abs(discriminant) < EPS:
                roots = [-1.5 * q / p, 3.0 * q / p]
            elif discriminant > 0:
                u = PolyRoots.cuberoot(-q / 2.0 - math.sqrt(discriminant))
                roots = [u - p / (3.0 * u)]
            else:
                # discriminant < 0 implies p < 0, so the acos argument lies in [-1, 1]
                u = 2.0 * math.sqrt(-p / 3.0)
                arg = max(-1.0, min(1.0, 3.0 * q / p / u))
                t = math.acos(arg) / 3.0
                k = 2.0 * math.pi / 3.0
                roots = [u * math.cos(t), u * math.cos(t - k), u * math.cos(t - 2.0 * k)]

        shift = b / (3.0 * a)
        return [root - shift for root in roots]
