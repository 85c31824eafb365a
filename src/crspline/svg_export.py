"""SVG rendering of planar spline curves for inspection and plotting."""

from __future__ import annotations

import copy
import gzip
import io
import logging
from typing import Optional, Sequence, Union

import numpy as np
import svgwrite
import svgwrite.base
import svgwrite.elementfactory
from svgwrite.extensions import Inkscape

from crspline.bounds import BoundingBox, CurveAnalysis
from crspline.common import InvalidArgumentError, Vector
from crspline.curve_mapper import AbstractCurveMapper

logger = logging.getLogger(__name__)


def svg_path_string(points: Sequence[Vector], closed: bool = False) -> str:
    """
    Build the SVG path data of a polyline through 2D points.

    Args:
        points (Sequence[Vector]): 2D points, at least one
        closed (bool): True to close the path with "Z"

    Returns:
        str: path data like "M x0 y0 L x1 y1 ..."
    """
    arr = np.asarray(points, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != 2 or len(arr) == 0:
        raise InvalidArgumentError(f"Need 2D points of shape (n, 2), got {arr.shape}")

    commands = [f"M {arr[0][0]:g} {arr[0][1]:g}"]
    commands.extend(f"L {x:g} {y:g}" for x, y in arr[1:])
    if closed:
        commands.append("Z")
    return " ".join(commands)


###############################################################################
# CurveSvgPage
###############################################################################
class CurveSvgPage:
    """A SVG canvas fitted to a bounding box, y-axis pointing up.

    Contains groups/layers:
        - root       -- (group) just contains the y-flip and translation
            - curve  -- the sampled curves
            - debug  -- control points and bounding boxes, hidden
    """

    def __init__(self, box: BoundingBox, padding: float = 0.05, stroke_width: Optional[float] = None):
        """
        Initialize the page so that the box plus padding is visible.

        Args:
            box (BoundingBox): 2D area to show
            padding (float): extra space around the box relative to its larger side
            stroke_width (float, optional): line width in drawing units.
                Defaults to 1/500 of the larger side of the box.
        """
        if box.dimensions != 2:
            raise InvalidArgumentError(f"SVG pages are 2D, got a {box.dimensions}D bounding box")

        extent = float(max(np.max(box.size), 1e-9))
        pad = padding * extent
        x0, y0 = box.min - pad
        width, height = box.size + 2 * pad
        self.stroke_width = stroke_width if stroke_width is not None else extent / 500

        # profile="full" to support numbers with more than 4 decimal digits
        self.drawing = svgwrite.Drawing(viewBox=f"{x0:g} {-(y0 + height):g} {width:g} {height:g}", profile="full")
        self.root_group = self.drawing.g(id="root", transform="scale(1,-1)")

        self._inkscape = Inkscape(self.drawing)
        self.curve_layer = self._inkscape.layer(label="curve", locked=False)
        self.debug_layer = self._inkscape.layer(label="debug", locked=False, display="none")

    def add(
        self,
        element: Union[svgwrite.base.BaseElement, svgwrite.elementfactory.ElementBuilder],
        add_to_debug_layer: bool = False,
    ) -> Union[svgwrite.base.BaseElement, svgwrite.elementfactory.ElementBuilder]:
        """Add a SVG element either to the curve or the debug layer."""
        if add_to_debug_layer:
            return self.debug_layer.add(element)
        return self.curve_layer.add(element)

    def add_curve(self, mapper: AbstractCurveMapper, samples: int = 200, stroke: str = "black"):
        """
        Add the curve sampled evenly by arc length, plus its control points on the debug layer.

        Args:
            mapper (AbstractCurveMapper): 2D curve to draw
            samples (int): number of polyline pieces
            stroke (str): line color
        """
        points = CurveAnalysis.get_points(mapper, samples)
        self.add(
            self.drawing.path(
                svg_path_string(points, closed=mapper.closed),
                fill="none",
                stroke=stroke,
                stroke_width=self.stroke_width,
            )
        )
        for x, y in mapper.points:
            self.add(self.drawing.circle(center=(x, y), r=2 * self.stroke_width, fill="red"), True)
        logger.debug("Added curve with %d control points and %d samples", len(mapper.points), samples)

    def add_bounding_box(self, box: BoundingBox, stroke: str = "blue"):
        """Add a rectangle outlining the box to the debug layer."""
        self.add(
            self.drawing.rect(
                insert=tuple(box.min),
                size=tuple(box.size),
                fill="none",
                stroke=stroke,
                stroke_width=self.stroke_width,
            ),
            True,
        )

    def tostring(self, include_debug_layer: bool = False, pretty: bool = False, indent: int = 2) -> str:
        """Serialize the page as SVG text."""
        drawing = copy.deepcopy(self.drawing)
        root_group = copy.deepcopy(self.root_group)
        drawing.add(root_group)
        if include_debug_layer:
            root_group.add(copy.deepcopy(self.debug_layer))
        root_group.add(copy.deepcopy(self.curve_layer))

        svg_buffer = io.StringIO()
        drawing.write(svg_buffer, pretty=pretty, indent=indent)
        return svg_buffer.getvalue()

    def save_as(
        self,
        filename: str,
        include_debug_layer: bool = False,
        pretty: bool = False,
        indent: int = 2,
        compressed: bool = False,
    ):
        """Save as SVG file

        Args:
            filename (str): path and filename
            include_debug_layer (bool, optional): True if file should contain debug_layer. Defaults to False.
            pretty (bool, optional): True for easy readable output. Defaults to False.
            indent (int, optional): Indention if pretty is enabled. Defaults to 2 spaces.
            compressed (bool, optional): Save as compressed svgz-file. Defaults to False.
        """
        output_data = self.tostring(include_debug_layer, pretty, indent).encode("utf-8")
        if compressed:
            output_data = gzip.compress(output_data)

        with open(filename, "wb") as svg_file:
            svg_file.write(output_data)

    @classmethod
    def from_curve(cls, mapper: AbstractCurveMapper, samples: int = 200, padding: float = 0.05) -> CurveSvgPage:
        """
        Create a page fitted to the bounding box of a 2D curve and draw the curve on it.

        Returns:
            CurveSvgPage: page holding the curve and, on the debug layer, its
            control points and bounding box
        """
        box = CurveAnalysis.get_bounding_box(mapper)
        control_box = BoundingBox(min=np.min(mapper.points, axis=0), max=np.max(mapper.points, axis=0))
        page = cls(BoundingBox(min=np.minimum(box.min, control_box.min), max=np.maximum(box.max, control_box.max)), padding)
        page.add_curve(mapper, samples)
        page.add_bounding_box(box)
        return page

