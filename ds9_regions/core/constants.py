"""Shared DS9 region constants.

Centralises the frame keyword table, the unit-suffix table and the
literal strings of the export header so the importer and exporter agree
on one source of truth.
"""

from __future__ import annotations

from types import MappingProxyType

# ---------------------------------------------------------------------------
# Canonical frame names
# ---------------------------------------------------------------------------

PIXEL_FRAME: str = ""
"""Canonical name of the pixel frame (DS9 ``physical`` / ``image``)."""

UNSUPPORTED_FRAME: str = "UNSUPPORTED"
"""Marker for DS9 frames the importer recognises but cannot convert."""

LINEAR_IMAGE_FRAME: str = "linear"
"""Image frame name reported for images with a linear coordinate only."""

PHYSICAL_IMAGE_FRAME: str = "physical"
"""Image frame name reported for images without any world coordinate."""

PIXEL_KEYWORDS = frozenset({"physical", "image"})

# DS9 keyword (lowercase) -> canonical frame name.
DS9_COORD_MAP = MappingProxyType(
    {
        "physical": PIXEL_FRAME,
        "image": PIXEL_FRAME,
        "b1950": "B1950",
        "fk4": "B1950",
        "j2000": "J2000",
        "fk5": "J2000",
        "galactic": "GALACTIC",
        "ecliptic": "ECLIPTIC",
        "icrs": "ICRS",
        "wcs": UNSUPPORTED_FRAME,
        "wcsa": UNSUPPORTED_FRAME,
        "linear": UNSUPPORTED_FRAME,
    }
)

# Other DS9 frame keywords: recognised as frame declarations, never supported.
DS9_UNSUPPORTED_FRAME_KEYWORDS = frozenset(
    {"amplifier", "detector"} | {f"wcs{letter}" for letter in "bcdefghijklmnopqrstuvwxyz"}
)

# Frames with several DS9 spellings are always exported as the fk* keyword.
DS9_EXPORT_FRAME_OVERRIDES = MappingProxyType({"B1950": "fk4", "J2000": "fk5"})

# ---------------------------------------------------------------------------
# Parameter parsing
# ---------------------------------------------------------------------------

PARAMETER_DELIMITERS: str = " ,()"
PROPERTY_MARKER: str = "#"
DEFAULT_LINE_DELIMITER: str = ";"

# Single-character DS9 unit suffix -> unit name understood by read_quantity.
# Arcsecond and arcminute marks are left in place.
DS9_UNIT_SUFFIXES = MappingProxyType(
    {
        "d": "deg",
        "r": "rad",
        "p": "pixel",
        "i": "pixel",
        '"': '"',
        "'": "'",
    }
)

# Default units by parameter position for ellipse and box definitions:
# index 0 is the shape keyword, then x, y, r1/width, r2/height, angle.
SHAPE_DEFAULT_UNITS: tuple[str, ...] = ("", "deg", "deg", "arcsec", "arcsec", "deg")

# ---------------------------------------------------------------------------
# Export header
# ---------------------------------------------------------------------------

HEADER_BANNER: str = "# Region file format: DS9 CARTA {version}"
EXPORT_EMPTY_MESSAGE: str = "Export region failed: no regions to export."
