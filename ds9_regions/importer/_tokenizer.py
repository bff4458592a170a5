"""Line reading and tokenizing for DS9 region files.

Responsibilities:
- Split file content into numbered logical lines (newline and ``;``)
- Classify each line (comment, global, frame declaration, shape, ...)
- Split a shape line into positional parameters and ``#`` properties
"""

from __future__ import annotations

import enum
import re

from ds9_regions.core.constants import (
    DEFAULT_LINE_DELIMITER,
    DS9_COORD_MAP,
    DS9_UNSUPPORTED_FRAME_KEYWORDS,
    PROPERTY_MARKER,
)

_PARAMETER_SPLIT = re.compile(r"[\s,()]+")
_PROPERTY = re.compile(r"""(?P<key>\w+)\s*=\s*(?:\{(?P<braced>[^}]*)\}|"(?P<dquoted>[^"]*)"|'(?P<squoted>[^']*)'|(?P<bare>\S+))""")


class LineKind(enum.Enum):
    """Classification of a logical region file line."""

    BLANK = "blank"
    COMMENT = "comment"
    EXCLUDED = "excluded"
    GLOBAL = "global"
    FRAME = "frame"
    SHAPE = "shape"


# ---------------------------------------------------------------------------
# Logical lines
# ---------------------------------------------------------------------------


def split_region_text(
    text: str, delimiter: str = DEFAULT_LINE_DELIMITER
) -> list[tuple[int, str]]:
    """Split region file content into ``(line_number, line)`` pairs.

    Physical lines are split again on *delimiter*; every piece keeps the
    1-based number of the physical line it came from.  Pieces are stripped.
    """
    lines: list[tuple[int, str]] = []
    for number, physical in enumerate(text.splitlines(), start=1):
        for piece in physical.split(delimiter):
            lines.append((number, piece.strip()))
    return lines


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def is_frame_keyword(line: str) -> bool:
    """Whether *line* is a bare DS9 frame keyword (case-insensitive)."""
    keyword = line.strip().lower()
    return keyword in DS9_COORD_MAP or keyword in DS9_UNSUPPORTED_FRAME_KEYWORDS


def classify_line(line: str) -> LineKind:
    """Classify one stripped logical line."""
    if not line:
        return LineKind.BLANK
    if line.startswith(PROPERTY_MARKER):
        return LineKind.COMMENT
    # excluded regions are annotation-only and not imported
    if line.startswith("-"):
        return LineKind.EXCLUDED
    if "global" in line:
        return LineKind.GLOBAL
    if is_frame_keyword(line):
        return LineKind.FRAME
    return LineKind.SHAPE


# ---------------------------------------------------------------------------
# Parameters and properties
# ---------------------------------------------------------------------------


def parse_region_parameters(definition: str) -> tuple[list[str], dict[str, str]]:
    """Split a shape line into parameters and properties.

    ``ellipse(10, 20, 5, 3, 45) # color=red text={Big one}`` yields
    ``["ellipse", "10", "20", "5", "3", "45"]`` and
    ``{"color": "red", "text": "Big one"}``.  Repeated keys keep the last
    value.
    """
    shape_part, _, property_part = definition.partition(PROPERTY_MARKER)
    parameters = [token for token in _PARAMETER_SPLIT.split(shape_part) if token]
    return parameters, parse_properties(property_part)


def parse_properties(text: str) -> dict[str, str]:
    """Parse ``key=value`` / ``key={value}`` / quoted pairs."""
    properties: dict[str, str] = {}
    for match in _PROPERTY.finditer(text):
        value = next(
            group
            for group in (match["braced"], match["dquoted"], match["squoted"], match["bare"])
            if group is not None
        )
        properties[match["key"]] = value
    return properties
