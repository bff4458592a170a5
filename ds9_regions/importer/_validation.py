"""Validation helpers for DS9 region import.

Responsibilities:
- The per-line exception raised by shape importers
- Parameter arity checks shared by ellipse and box
- Shapely validity check for imported polygons
"""

from __future__ import annotations

import logging

from ds9_regions.core.exceptions import RegionError
from ds9_regions.models.issue import IssueKind

logger = logging.getLogger("ds9_regions.importer")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class RegionLineError(RegionError):
    """Raised when a single region line cannot be imported.

    Never escapes the importer: the line loop turns it into an
    ``ImportIssue`` and moves on to the next line.

    Attributes:
        kind: Failure class recorded on the resulting issue.
    """

    default_stage = "import"
    default_code = "REGION_LINE_REJECTED"

    def __init__(self, message: str, *, kind: IssueKind) -> None:
        self.kind = kind
        super().__init__(message, code=f"REGION_{kind.name}")


# ---------------------------------------------------------------------------
# Arity
# ---------------------------------------------------------------------------


def validate_centered_arity(parameters: list[str], region_type: str) -> None:
    """Check ``<shape> x y a b [angle]`` arity for ellipse and box.

    Raises:
        RegionLineError: UNSUPPORTED for annulus forms (7+ tokens),
            SYNTAX for anything else that is not 5 or 6 tokens.
    """
    count = len(parameters)
    if count in (5, 6):
        return
    if count > 6:
        raise RegionLineError(
            f"Unsupported {region_type} definition.", kind=IssueKind.UNSUPPORTED
        )
    raise RegionLineError(f"{region_type} syntax error.", kind=IssueKind.SYNTAX)


# ---------------------------------------------------------------------------
# Shapely geometry check
# ---------------------------------------------------------------------------


def warn_if_invalid_polygon(vertices: list[tuple[float, float]], line_number: int) -> bool:
    """Log a warning when polygon vertices self-intersect.

    DS9 accepts such polygons, so they are imported unchanged.

    Returns:
        Whether shapely considers the polygon valid.
    """
    from shapely.geometry import Polygon
    from shapely.validation import explain_validity

    polygon = Polygon(vertices)
    if polygon.is_valid:
        return True
    logger.warning(
        "Polygon on line %d is not a simple polygon: %s",
        line_number,
        explain_validity(polygon),
    )
    return False
