"""Data model for a canonical region.

A RegionRecord is the output of region import and the input to region
export.  Control points are always pixel coordinates and rotation is
always stored in the internal convention (degrees from the positive
y-axis), so consumers never special-case shapes.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from ds9_regions.core.exceptions import RegionValidationError


class RegionKind(enum.StrEnum):
    """Region shapes a record can describe."""

    POINT = "point"
    RECTANGLE = "rectangle"
    ELLIPSE = "ellipse"
    POLYGON = "polygon"


#: Exact control point count per kind (polygons use ``MIN_POLYGON_VERTICES``).
CONTROL_POINT_COUNTS: dict[RegionKind, int] = {
    RegionKind.POINT: 1,
    RegionKind.RECTANGLE: 2,
    RegionKind.ELLIPSE: 2,
}

MIN_POLYGON_VERTICES = 3


@dataclass(frozen=True, slots=True)
class RegionRecord:
    """A single region anchored to an image.

    Attributes:
        kind: Shape of the region.
        control_points: Pixel-space points.  Point: ``[(x, y)]``.
            Rectangle: ``[(cx, cy), (width, height)]``.  Ellipse:
            ``[(cx, cy), (r1, r2)]``.  Polygon: one point per vertex.
        rotation: Rotation in degrees, measured from the positive y-axis.
        name: Optional display label.
        file_id: Identifier of the image the region is attached to.

    Raises:
        RegionValidationError: If the control point count does not match
            the kind.
    """

    kind: RegionKind
    control_points: list[tuple[float, float]] = field(default_factory=list)
    rotation: float = 0.0
    name: str = ""
    file_id: int = 0

    def __post_init__(self) -> None:
        count = len(self.control_points)
        if self.kind is RegionKind.POLYGON:
            if count < MIN_POLYGON_VERTICES:
                msg = (
                    f"polygon needs at least {MIN_POLYGON_VERTICES} control points, "
                    f"got {count}"
                )
                raise RegionValidationError(msg)
        elif count != CONTROL_POINT_COUNTS[self.kind]:
            msg = (
                f"{self.kind.value} needs exactly {CONTROL_POINT_COUNTS[self.kind]} "
                f"control point(s), got {count}"
            )
            raise RegionValidationError(msg)

    def to_dict(self) -> dict[str, object]:
        """Serialise to a plain dict (JSON friendly)."""
        return {
            "kind": self.kind.value,
            "control_points": [list(p) for p in self.control_points],
            "rotation": self.rotation,
            "name": self.name,
            "file_id": self.file_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> RegionRecord:
        """Deserialise from a plain dict.

        Raises:
            TypeError: If ``control_points`` is not a list.
            ValueError: If ``kind`` is not a known region kind.
            RegionValidationError: If the control points do not fit the kind.
        """
        points_raw = data.get("control_points", [])
        if not isinstance(points_raw, list):
            msg = f"control_points must be a list, got {type(points_raw).__name__}"
            raise TypeError(msg)
        points = [(float(p[0]), float(p[1])) for p in points_raw]

        return cls(
            kind=RegionKind(str(data.get("kind", ""))),
            control_points=points,
            rotation=float(data.get("rotation", 0.0)),  # type: ignore[arg-type]
            name=str(data.get("name", "")),
            file_id=int(data.get("file_id", 0)),  # type: ignore[arg-type]
        )

    @property
    def center(self) -> tuple[float, float]:
        """First control point (the position of points, boxes and ellipses)."""
        return self.control_points[0]

    @property
    def is_circle(self) -> bool:
        """Whether this is an ellipse with equal radii."""
        if self.kind is not RegionKind.ELLIPSE:
            return False
        r1, r2 = self.control_points[1]
        return r1 == r2
