"""CoordinateBridge over an astropy ``WCS``.

Celestial images convert through ``SkyCoord`` so a file written in one
frame (e.g. galactic) lands correctly on an image in another (e.g. fk5).
Images with only linear axes report ``has_linear_frame()`` and reject
celestial positions.

Pixel-unit pass-through: a position whose two quantities are both in
pixels, or a length in pixels, is returned unchanged.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
from astropy import units as u
from astropy.coordinates import (
    FK4,
    FK5,
    ICRS,
    BarycentricMeanEcliptic,
    Galactic,
    SkyCoord,
)
from astropy.wcs.utils import proj_plane_pixel_scales, wcs_to_celestial_frame

from ds9_regions.coordinates.base import CoordinateBridge

if TYPE_CHECKING:
    from collections.abc import Sequence

    from astropy.coordinates import BaseCoordinateFrame
    from astropy.wcs import WCS

logger = logging.getLogger("ds9_regions.coordinates")

_FILE_FRAMES: dict[str, BaseCoordinateFrame] = {
    "J2000": FK5(equinox="J2000"),
    "B1950": FK4(equinox="B1950"),
    "GALACTIC": Galactic(),
    "ECLIPTIC": BarycentricMeanEcliptic(equinox="J2000"),
    "ICRS": ICRS(),
}


class WcsCoordinateBridge(CoordinateBridge):
    """Bridge backed by an astropy ``WCS`` (any number of axes).

    Only the celestial axes are used when the WCS has them; otherwise the
    first two axes are treated as linear.
    """

    def __init__(self, wcs: WCS) -> None:
        self._wcs = wcs
        self._celestial = wcs.celestial if wcs.has_celestial else None
        self._linear = wcs.sub([1, 2]) if self._celestial is None else None

    @property
    def wcs(self) -> WCS:
        """Return the wrapped WCS (read-only)."""
        return self._wcs

    # ------------------------------------------------------------------
    # Frame discovery
    # ------------------------------------------------------------------

    def has_celestial_frame(self) -> bool:
        return self._celestial is not None

    def celestial_frame_name(self) -> str:
        if self._celestial is None:
            return ""
        frame = wcs_to_celestial_frame(self._celestial)
        if isinstance(frame, FK5):
            return "J2000"
        if isinstance(frame, FK4):
            return "B1950"
        if isinstance(frame, ICRS):
            return "ICRS"
        if isinstance(frame, Galactic):
            return "GALACTIC"
        if "ecliptic" in type(frame).__name__.lower():
            return "ECLIPTIC"
        return frame.name.upper()

    def has_linear_frame(self) -> bool:
        if self._celestial is not None:
            return False
        return self._wcs.naxis >= 2 and any(ctype.strip() for ctype in self._wcs.wcs.ctype)

    # ------------------------------------------------------------------
    # Import direction
    # ------------------------------------------------------------------

    def point_to_pixel(
        self, frame: str, world: Sequence[u.Quantity]
    ) -> tuple[float, float] | None:
        if len(world) != 2:
            return None
        lon, lat = world
        if lon.unit == u.pix and lat.unit == u.pix:
            return (float(lon.value), float(lat.value))

        target = _FILE_FRAMES.get(frame)
        if target is None or self._celestial is None:
            logger.warning("Cannot convert %s position onto image without that frame", frame)
            return None

        try:
            coord = SkyCoord(lon, lat, frame=target)
            x, y = self._celestial.world_to_pixel(coord)
        except (TypeError, ValueError, u.UnitsError) as exc:
            logger.warning("Position (%s, %s) in %s not convertible: %s", lon, lat, frame, exc)
            return None

        if not (np.isfinite(x) and np.isfinite(y)):
            return None
        return (float(x), float(y))

    def world_to_pixel_length(self, length: u.Quantity, axis: int) -> float:
        if length.unit == u.pix:
            return float(length.value)
        increment, unit = self._axis_increment(axis)
        if unit == u.dimensionless_unscaled:
            return float(length.value / increment)
        return float(length.to_value(unit) / increment)

    # ------------------------------------------------------------------
    # Export direction
    # ------------------------------------------------------------------

    def pixel_to_world(self, x: float, y: float) -> tuple[u.Quantity, u.Quantity]:
        if self._celestial is not None:
            coord = self._celestial.pixel_to_world(x, y)
            spherical = coord.spherical
            return (spherical.lon.to(u.deg), spherical.lat.to(u.deg))

        values = self._linear.pixel_to_world_values(x, y)
        return (
            float(values[0]) * u.Unit(self._linear.wcs.cunit[0]),
            float(values[1]) * u.Unit(self._linear.wcs.cunit[1]),
        )

    def pixel_to_world_length(self, length: float, axis: int) -> u.Quantity:
        increment, unit = self._axis_increment(axis)
        world = length * increment * unit
        if self._celestial is not None:
            return world.to(u.arcsec)
        return world

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _axis_increment(self, axis: int) -> tuple[float, u.UnitBase]:
        """Absolute world increment per pixel along *axis*, with its unit."""
        if self._celestial is not None:
            # celestial increments are always degrees
            return (float(proj_plane_pixel_scales(self._celestial)[axis]), u.deg)
        scales = proj_plane_pixel_scales(self._linear)
        return (float(scales[axis]), u.Unit(self._linear.wcs.cunit[axis]))
