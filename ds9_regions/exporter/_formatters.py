"""DS9 shape syntax formatters.

Three renderings are part of the file format and are kept distinct:

- ``format_record``: pixel control points of a ``RegionRecord``, two
  decimals, ellipse angle converted back to DS9's x-axis convention and
  written only when positive.
- ``PixelFormatter``: flat pixel quantities, four decimals, ellipse angle
  omitted when zero.
- ``WorldFormatter``: flat world quantities, six decimals for positions
  (degrees) and four for lengths (arcsec, marked ``"``); a non-circle
  ellipse always carries its angle.

Quantity formatters take the flattened control points
``[x, y, a, b]`` (box/ellipse), ``[x, y]`` (point) or
``[x1, y1, x2, y2, ...]`` (polygon) and the angle in degrees.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

import numpy as np
from astropy import units as u

from ds9_regions.models.region import RegionKind

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ds9_regions.models.region import RegionRecord


def format_angle(angle: float) -> str:
    """Shortest single-precision text for an angle (``30``, ``12.5``)."""
    return np.format_float_positional(np.float32(angle), trim="-")


def to_ds9_ellipse_angle(rotation: float) -> float:
    """Convert a y-axis rotation to DS9's x-axis ellipse angle."""
    angle = rotation + 90.0
    if angle > 360.0:
        angle -= 360.0
    return angle


# ---------------------------------------------------------------------------
# RegionRecord (pixel control points)
# ---------------------------------------------------------------------------


def format_record(record: RegionRecord) -> str:
    """Render a pixel-space record, without name or newline."""
    points = record.control_points

    if record.kind is RegionKind.POINT:
        x, y = points[0]
        return f"point({x:.2f}, {y:.2f})"

    if record.kind is RegionKind.RECTANGLE:
        (x, y), (width, height) = points
        return (
            f"box({x:.2f}, {y:.2f}, {width:.2f}, {height:.2f}, "
            f"{format_angle(record.rotation)})"
        )

    if record.kind is RegionKind.ELLIPSE:
        (x, y), (r1, r2) = points
        if r1 == r2:
            return f"circle({x:.2f}, {y:.2f}, {r1:.2f})"
        angle = to_ds9_ellipse_angle(record.rotation)
        if angle > 0.0:
            return f"ellipse({x:.2f}, {y:.2f}, {r1:.2f}, {r2:.2f}, {format_angle(angle)})"
        return f"ellipse({x:.2f}, {y:.2f}, {r1:.2f}, {r2:.2f})"

    first_x, first_y = points[0]
    rest = "".join(f",{x:.2f},{y:.2f}" for x, y in points[1:])
    return f"polygon({first_x:.2f}, {first_y:.2f}{rest})"


# ---------------------------------------------------------------------------
# Quantity strategies
# ---------------------------------------------------------------------------


class QuantityFormatter(abc.ABC):
    """Renders flattened quantity control points for one coordinate space."""

    def format(self, kind: RegionKind, points: Sequence[u.Quantity], angle: float) -> str:
        """Render one region, without name or newline."""
        if kind is RegionKind.POINT:
            return self.point(points)
        if kind is RegionKind.RECTANGLE:
            return self.box(points, angle)
        if kind is RegionKind.ELLIPSE:
            if points[2].value == points[3].value:
                return self.circle(points)
            return self.ellipse(points, angle)
        return self.polygon(points)

    @abc.abstractmethod
    def point(self, points: Sequence[u.Quantity]) -> str: ...

    @abc.abstractmethod
    def box(self, points: Sequence[u.Quantity], angle: float) -> str: ...

    @abc.abstractmethod
    def circle(self, points: Sequence[u.Quantity]) -> str: ...

    @abc.abstractmethod
    def ellipse(self, points: Sequence[u.Quantity], angle: float) -> str: ...

    @abc.abstractmethod
    def polygon(self, points: Sequence[u.Quantity]) -> str: ...


class PixelFormatter(QuantityFormatter):
    """Pixel quantities, four decimals."""

    def point(self, points: Sequence[u.Quantity]) -> str:
        x, y = (q.value for q in points[:2])
        return f"point({x:.4f}, {y:.4f})"

    def box(self, points: Sequence[u.Quantity], angle: float) -> str:
        x, y, width, height = (q.value for q in points[:4])
        return f"box({x:.4f}, {y:.4f}, {width:.4f}, {height:.4f}, {format_angle(angle)})"

    def circle(self, points: Sequence[u.Quantity]) -> str:
        x, y, radius = (q.value for q in points[:3])
        return f"circle({x:.4f}, {y:.4f}, {radius:.4f})"

    def ellipse(self, points: Sequence[u.Quantity], angle: float) -> str:
        x, y, r1, r2 = (q.value for q in points[:4])
        if angle == 0.0:
            return f"ellipse({x:.4f}, {y:.4f}, {r1:.4f}, {r2:.4f})"
        return f"ellipse({x:.4f}, {y:.4f}, {r1:.4f}, {r2:.4f}, {format_angle(angle)})"

    def polygon(self, points: Sequence[u.Quantity]) -> str:
        return "polygon(" + ", ".join(f"{q.value:.4f}" for q in points) + ")"


class WorldFormatter(QuantityFormatter):
    """World quantities: positions in degrees, lengths in arcsec.

    With ``linear=True`` (image without a celestial frame) values are
    written as given, without unit conversion.
    """

    def __init__(self, *, linear: bool = False) -> None:
        self._linear = linear

    def _position(self, quantity: u.Quantity) -> float:
        return float(quantity.value if self._linear else quantity.to_value(u.deg))

    def _length(self, quantity: u.Quantity) -> float:
        return float(quantity.value if self._linear else quantity.to_value(u.arcsec))

    def point(self, points: Sequence[u.Quantity]) -> str:
        x, y = (self._position(q) for q in points[:2])
        return f"point({x:.6f}, {y:.6f})"

    def box(self, points: Sequence[u.Quantity], angle: float) -> str:
        x, y = (self._position(q) for q in points[:2])
        width, height = (self._length(q) for q in points[2:4])
        return f'box({x:.6f}, {y:.6f}, {width:.4f}", {height:.4f}", {format_angle(angle)})'

    def circle(self, points: Sequence[u.Quantity]) -> str:
        x, y = (self._position(q) for q in points[:2])
        radius = self._length(points[2])
        return f'circle({x:.6f}, {y:.6f}, {radius:.4f}")'

    def ellipse(self, points: Sequence[u.Quantity], angle: float) -> str:
        x, y = (self._position(q) for q in points[:2])
        r1, r2 = (self._length(q) for q in points[2:4])
        return f'ellipse({x:.6f}, {y:.6f}, {r1:.4f}", {r2:.4f}", {format_angle(angle)})'

    def polygon(self, points: Sequence[u.Quantity]) -> str:
        return "polygon(" + ",".join(f"{self._position(q):.6f}" for q in points) + ")"
