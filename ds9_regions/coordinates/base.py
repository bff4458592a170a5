"""CoordinateBridge abstract base class.

Defines the contract between the region importer/exporter and the image
coordinate system.  The importer never performs coordinate math itself:
it hands world quantities to the bridge and receives pixel values back.

Import contract:
    ``point_to_pixel(frame, world)``   world position -> pixel (x, y) or None
    ``world_to_pixel_length(q, axis)`` world length -> pixel length

Frame discovery:
    ``has_celestial_frame()`` / ``celestial_frame_name()`` / ``has_linear_frame()``

Export contract (world-space export of pixel records):
    ``pixel_to_world(x, y)``            pixel -> world quantities
    ``pixel_to_world_length(px, axis)`` pixel length -> world length
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from astropy.units import Quantity


class CoordinateBridge(abc.ABC):
    """Abstract base class for image coordinate system adapters.

    Pixel coordinates are 0-based.  Frame names are the canonical names of
    ``ds9_regions.core.constants.DS9_COORD_MAP`` (``"J2000"``, ``"GALACTIC"``,
    ``""`` for pixel).
    """

    @abc.abstractmethod
    def point_to_pixel(
        self, frame: str, world: Sequence[Quantity]
    ) -> tuple[float, float] | None:
        """Convert a world position expressed in *frame* to pixel coordinates.

        Args:
            frame: Canonical frame name the quantities are expressed in.
            world: Two quantities (longitude-like, latitude-like).

        Returns:
            Pixel ``(x, y)``, or ``None`` when the conversion is impossible
            (incompatible frame, position off the projection).
        """

    @abc.abstractmethod
    def world_to_pixel_length(self, length: Quantity, axis: int) -> float:
        """Convert a world length to a pixel length along *axis* (0 or 1)."""

    @abc.abstractmethod
    def has_celestial_frame(self) -> bool:
        """Whether the image has a celestial direction coordinate."""

    @abc.abstractmethod
    def celestial_frame_name(self) -> str:
        """Canonical name of the image's celestial frame."""

    @abc.abstractmethod
    def has_linear_frame(self) -> bool:
        """Whether the image has a linear (non-celestial) world coordinate."""

    def pixel_to_world(self, x: float, y: float) -> tuple[Quantity, Quantity]:
        """Convert a pixel position to world quantities in the image frame.

        Raises:
            NotImplementedError: If the bridge only supports import.
        """
        raise NotImplementedError(f"{type(self).__name__} cannot convert pixel to world")

    def pixel_to_world_length(self, length: float, axis: int) -> Quantity:
        """Convert a pixel length along *axis* to a world length.

        Raises:
            NotImplementedError: If the bridge only supports import.
        """
        raise NotImplementedError(f"{type(self).__name__} cannot convert pixel to world")
