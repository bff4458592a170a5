"""Coordinate frame resolution for one import run.

``ParserState`` carries everything that flows from one region line to
the next: the active file frame, whether positions are pixels, the
lazily resolved image frame, and the accumulated result.  It is created
fresh for every import and threaded explicitly through each line call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ds9_regions.core.constants import (
    DS9_COORD_MAP,
    LINEAR_IMAGE_FRAME,
    PHYSICAL_IMAGE_FRAME,
    PIXEL_FRAME,
    PIXEL_KEYWORDS,
    UNSUPPORTED_FRAME,
)
from ds9_regions.models.issue import ImportResult

if TYPE_CHECKING:
    from ds9_regions.coordinates.base import CoordinateBridge

logger = logging.getLogger("ds9_regions.importer")


@dataclass(slots=True)
class ParserState:
    """Mutable state of a single import run.

    Attributes:
        file_id: Image identifier stamped on every imported record.
        pixel_coord: Positions are pixel coordinates (no frame declared,
            or ``physical`` / ``image`` declared).
        file_frame: Canonical frame of the latest declaration.
        image_frame: Image frame, resolved on the first world declaration.
        frame_ok: ``False`` after an unsupported declaration; shape lines
            are skipped until the next valid declaration.
        result: Regions and issues accumulated so far.
    """

    file_id: int = 0
    pixel_coord: bool = True
    file_frame: str = PIXEL_FRAME
    image_frame: str = ""
    frame_ok: bool = True
    result: ImportResult = field(default_factory=ImportResult)


def resolve_image_frame(bridge: CoordinateBridge) -> str:
    """Name of the image's reference frame.

    The celestial frame when present, else ``"linear"``, else
    ``"physical"``.
    """
    if bridge.has_celestial_frame():
        return bridge.celestial_frame_name()
    if bridge.has_linear_frame():
        return LINEAR_IMAGE_FRAME
    return PHYSICAL_IMAGE_FRAME


def set_file_frame(state: ParserState, keyword: str, bridge: CoordinateBridge) -> bool:
    """Apply a frame declaration line to *state*.

    Returns:
        ``False`` if the keyword is unknown or unsupported.  The state is
        then poisoned (``frame_ok`` false, world mode) until the next
        valid declaration.
    """
    keyword = keyword.strip().lower()
    frame = DS9_COORD_MAP.get(keyword, UNSUPPORTED_FRAME)
    state.file_frame = frame

    if frame == UNSUPPORTED_FRAME:
        state.pixel_coord = False
        state.frame_ok = False
        logger.debug("Unsupported frame %r, skipping regions until next frame", keyword)
        return False

    state.frame_ok = True
    if keyword in PIXEL_KEYWORDS:
        state.pixel_coord = True
    else:
        state.pixel_coord = False
        if not state.image_frame:
            state.image_frame = resolve_image_frame(bridge)

    logger.debug(
        "Frame %r active (pixel=%s, image frame=%r)",
        keyword,
        state.pixel_coord,
        state.image_frame,
    )
    return True
