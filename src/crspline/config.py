"""Curve configuration and construction of the matching curve mapper."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Optional, Sequence, Union

from crspline.common import (
    InvalidationCallback,
    InvalidConfigurationError,
    KnotParameterization,
    Vector,
)
from crspline.curve_mapper import AbstractCurveMapper
from crspline.numerical_mapper import NumericalCurveMapper
from crspline.segmented_mapper import SegmentedCurveMapper

###############################################################################
# CurveConfig
###############################################################################


@dataclass(frozen=True)
class CurveConfig:
    """Parameters of a curve and the arc length strategy used to map it.

    Attributes:
        tension: 0 = Catmull-Rom curvature, 1 = straight segments.
        alpha: knot spacing exponent or KnotParameterization (0 uniform, 0.5 centripetal, 1 chordal).
        closed: If True, the curve wraps around from the last to the first point.
        arc_divisions: If set, a SegmentedCurveMapper with this many subdivisions is used.
        numerical_approximation_order: Gauss-Legendre points of the NumericalCurveMapper.
        numerical_inverse_samples: Inverse fit samples per segment of the NumericalCurveMapper.
        lookup_margin: Range tolerance for axis lookups. None means 1 - tension.
    """

    tension: float = 0.5
    alpha: Union[float, KnotParameterization] = 0.0
    closed: bool = False
    arc_divisions: Optional[int] = None
    numerical_approximation_order: int = 24
    numerical_inverse_samples: int = 21
    lookup_margin: Optional[float] = None

    def __post_init__(self):
        if isinstance(self.alpha, KnotParameterization):
            object.__setattr__(self, "alpha", self.alpha.value)
        self.validate()

    def validate(self) -> None:
        """Raise InvalidConfigurationError if any parameter is out of its domain."""
        for name in ("tension", "alpha"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value):
                raise InvalidConfigurationError(f"{name} must be a finite number, got {value!r}")
        if self.arc_divisions is not None and self.arc_divisions < 1:
            raise InvalidConfigurationError(f"arc_divisions must be at least 1, got {self.arc_divisions}")
        if self.numerical_approximation_order < 1:
            raise InvalidConfigurationError(
                f"numerical_approximation_order must be at least 1, got {self.numerical_approximation_order}"
            )
        if self.numerical_inverse_samples < 2:
            raise InvalidConfigurationError(
                f"numerical_inverse_samples must be at least 2, got {self.numerical_inverse_samples}"
            )

    @property
    def margin(self) -> float:
        """float: the effective lookup margin."""
        return 1 - self.tension if self.lookup_margin is None else self.lookup_margin

    def with_changes(self, **changes) -> CurveConfig:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def create_mapper(
        self,
        points: Optional[Sequence[Vector]] = None,
        on_invalidate_cache: Optional[InvalidationCallback] = None,
    ) -> AbstractCurveMapper:
        """
        Create the curve mapper selected by this configuration.

        A SegmentedCurveMapper is created if arc_divisions is set, otherwise a
        NumericalCurveMapper.

        Args:
            points: control points, may be set later on the mapper
            on_invalidate_cache: callback invoked whenever the mapper cache is cleared

        Returns:
            AbstractCurveMapper: the configured mapper
        """
        mapper: AbstractCurveMapper
        if self.arc_divisions:
            mapper = SegmentedCurveMapper(self.arc_divisions, on_invalidate_cache)
        else:
            mapper = NumericalCurveMapper(
                self.numerical_approximation_order, self.numerical_inverse_samples, on_invalidate_cache
            )
        mapper.tension = self.tension
        mapper.alpha = self.alpha
        mapper.closed = self.closed
        if points is not None:
            mapper.points = points
        return mapper

    def to_dict(self) -> dict:
        """Convert the configuration to a dictionary for serialization."""
        return {
            "tension": self.tension,
            "alpha": self.alpha,
            "closed": self.closed,
            "arc_divisions": self.arc_divisions,
            "numerical_approximation_order": self.numerical_approximation_order,
            "numerical_inverse_samples": self.numerical_inverse_samples,
            "lookup_margin": self.lookup_margin,
        }

    @classmethod
    def from_dict(cls, data: dict) -> CurveConfig:
        """Create a CurveConfig from a dictionary, missing keys take their defaults."""
        return cls(
            tension=data.get("tension", 0.5),
            alpha=data.get("alpha", 0.0),
            closed=data.get("closed", False),
            arc_divisions=data.get("arc_divisions"),
            numerical_approximation_order=data.get("numerical_approximation_order", 24),
            numerical_inverse_samples=data.get("numerical_inverse_samples", 21),
            lookup_margin=data.get("lookup_margin"),
        )


# Configuration presets
DEFAULT_CONFIG = CurveConfig()

CATMULL_ROM_CONFIG = CurveConfig(tension=0.0, alpha=KnotParameterization.UNIFORM)

CENTRIPETAL_CONFIG = CurveConfig(tension=0.0, alpha=KnotParameterization.CENTRIPETAL)

CHORDAL_CONFIG = CurveConfig(tension=0.0, alpha=KnotParameterization.CHORDAL)
