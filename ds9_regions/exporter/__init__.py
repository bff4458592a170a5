"""DS9 region export.

``Ds9Exporter`` accumulates region lines for one image behind a fixed
three-line header (banner, ``global`` style defaults, frame) and flushes
them on request, either as a list of lines or to a file.

The coordinate space is chosen once per exporter:

- ``CoordinateSpace.PIXEL``: frame ``physical``; records are written from
  their pixel control points, quantities with the pixel strategy.
- ``CoordinateSpace.WORLD``: frame derived from the image; records are
  converted through the bridge and written with the world strategy.
"""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING

from astropy import units as u

from ds9_regions.core.config import RegionConfig
from ds9_regions.core.constants import (
    DS9_COORD_MAP,
    DS9_EXPORT_FRAME_OVERRIDES,
    EXPORT_EMPTY_MESSAGE,
    HEADER_BANNER,
    PIXEL_FRAME,
)
from ds9_regions.core.exceptions import RegionExportError
from ds9_regions.exporter._formatters import (
    PixelFormatter,
    QuantityFormatter,
    WorldFormatter,
    format_angle,
    format_record,
    to_ds9_ellipse_angle,
)
from ds9_regions.importer._frames import resolve_image_frame
from ds9_regions.models.region import RegionKind, RegionRecord

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from ds9_regions.coordinates.base import CoordinateBridge

logger = logging.getLogger("ds9_regions.exporter")

__all__ = [
    "CoordinateSpace",
    "Ds9Exporter",
    "PixelFormatter",
    "QuantityFormatter",
    "WorldFormatter",
    "ds9_frame_for",
    "format_angle",
    "format_record",
]


class CoordinateSpace(enum.StrEnum):
    """Coordinate space region lines are written in."""

    PIXEL = "pixel"
    WORLD = "world"


def ds9_frame_for(image_frame: str) -> str:
    """DS9 keyword for a canonical image frame, or ``""`` if none.

    ``B1950`` and ``J2000`` always map to ``fk4`` / ``fk5``.
    """
    if image_frame in DS9_EXPORT_FRAME_OVERRIDES:
        return DS9_EXPORT_FRAME_OVERRIDES[image_frame]
    if image_frame == PIXEL_FRAME:
        return PIXEL_FRAME
    for keyword in sorted(DS9_COORD_MAP):
        if DS9_COORD_MAP[keyword] == image_frame:
            return keyword
    return PIXEL_FRAME


class Ds9Exporter:
    """Accumulates DS9 region lines for one image.

    Args:
        bridge: Coordinate system of the image.  Required for world space.
        coordinate_space: Space the region lines are written in.
        config: Header version and style defaults.

    Raises:
        ValueError: If world space is requested without a bridge.
    """

    def __init__(
        self,
        bridge: CoordinateBridge | None = None,
        coordinate_space: CoordinateSpace = CoordinateSpace.PIXEL,
        *,
        config: RegionConfig | None = None,
    ) -> None:
        self._bridge = bridge
        self._space = CoordinateSpace(coordinate_space)
        self._config = config or RegionConfig()

        if self._space is CoordinateSpace.PIXEL:
            self._file_frame = "physical"
            self._formatter: QuantityFormatter = PixelFormatter()
        else:
            if bridge is None:
                msg = "world space export needs a coordinate bridge"
                raise ValueError(msg)
            self._file_frame = ds9_frame_for(resolve_image_frame(bridge))
            # no celestial frame: values are written as the bridge gives them
            self._formatter = WorldFormatter(linear=not self._file_frame)

        self._lines: list[str] = self._header()
        self._region_count = 0

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def coordinate_space(self) -> CoordinateSpace:
        return self._space

    @property
    def file_frame(self) -> str:
        """DS9 frame keyword written in the header (``""`` means image)."""
        return self._file_frame

    @property
    def region_count(self) -> int:
        return self._region_count

    # ------------------------------------------------------------------
    # Accumulation
    # ------------------------------------------------------------------

    def _header(self) -> list[str]:
        banner = HEADER_BANNER.format(version=self._config.format_version)
        global_line = self._config.global_properties().to_global_line()
        frame = self._file_frame or "image"
        return [f"{banner}\n", f"{global_line}\n", f"{frame}\n"]

    def _append(self, text: str, name: str) -> None:
        if name:
            text = f"{text} # text={{{name}}}"
        self._lines.append(f"{text}\n")
        self._region_count += 1

    def add_record(self, record: RegionRecord) -> None:
        """Add a pixel-space record.

        In world space the control points are converted through the
        bridge first.

        Raises:
            RegionExportError: If the bridge cannot convert pixel to world.
        """
        if self._space is CoordinateSpace.PIXEL:
            self._append(format_record(record), record.name)
            return

        points, angle = self._record_to_world(record)
        self._append(self._formatter.format(record.kind, points, angle), record.name)

    def add_region(
        self,
        kind: RegionKind,
        control_points: Sequence[u.Quantity],
        angle: float = 0.0,
        name: str = "",
    ) -> None:
        """Add a region given as flattened quantities.

        Args:
            kind: Region shape.
            control_points: ``[x, y]`` for a point, ``[x, y, a, b]`` for a
                box or ellipse, ``[x1, y1, x2, y2, ...]`` for a polygon.
            angle: DS9 angle in degrees (ellipses measured from the x-axis).
            name: Optional label written as ``text={name}``.
        """
        kind = RegionKind(kind)
        _check_quantity_count(kind, control_points)
        self._append(self._formatter.format(kind, control_points, angle), name)

    def _record_to_world(self, record: RegionRecord) -> tuple[list[u.Quantity], float]:
        bridge = self._bridge
        try:
            if record.kind is RegionKind.POLYGON:
                points = [q for x, y in record.control_points for q in bridge.pixel_to_world(x, y)]
                return points, 0.0

            points = list(bridge.pixel_to_world(*record.center))
            if record.kind is RegionKind.POINT:
                return points, 0.0

            width, height = record.control_points[1]
            points += [
                bridge.pixel_to_world_length(width, 0),
                bridge.pixel_to_world_length(height, 1),
            ]
        except (NotImplementedError, ValueError) as exc:
            msg = f"Cannot convert {record.kind.value} to world coordinates: {exc}"
            raise RegionExportError(msg, code="REGION_EXPORT_CONVERSION") from exc

        if record.kind is RegionKind.ELLIPSE:
            return points, to_ds9_ellipse_angle(record.rotation)
        return points, record.rotation

    # ------------------------------------------------------------------
    # Flush
    # ------------------------------------------------------------------

    def export_lines(self) -> list[str]:
        """Return header and region lines, each newline-terminated.

        Raises:
            RegionExportError: If no region has been added.
        """
        if not self._region_count:
            raise RegionExportError(EXPORT_EMPTY_MESSAGE, code="REGION_EXPORT_EMPTY")
        return list(self._lines)

    def export_to_file(self, path: Path | str) -> None:
        """Write header and region lines to *path*.

        Raises:
            RegionExportError: If no region has been added, or the file
                cannot be written.  Nothing is written in either case.
        """
        from pathlib import Path

        lines = self.export_lines()
        path = Path(path)
        logger.info("Exporting %d DS9 region(s) to %s", self._region_count, path.name)

        try:
            with path.open("w", encoding="utf-8") as handle:
                handle.writelines(lines)
        except OSError as exc:
            msg = f"Cannot write region file {path.name}: {exc}"
            raise RegionExportError(msg) from exc

        logger.info("Exported %d DS9 region(s) to %s", self._region_count, path.name)


def _check_quantity_count(kind: RegionKind, control_points: Sequence[u.Quantity]) -> None:
    count = len(control_points)
    if kind is RegionKind.POINT:
        valid = count == 2
    elif kind is RegionKind.POLYGON:
        valid = count >= 6 and count % 2 == 0
    else:
        valid = count == 4
    if not valid:
        msg = f"{kind.value} cannot be exported from {count} quantities"
        raise RegionExportError(msg, code="REGION_EXPORT_INVALID")
