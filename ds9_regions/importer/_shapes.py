"""Shape importers and the ordered shape dispatch table.

Each importer receives the tokenized parameters (``parameters[0]`` is the
shape keyword with any ``+``/``-`` prefix removed), parses them into
quantities, maps them to pixel space and returns a ``RegionRecord``.
Any failure raises ``RegionLineError``; ``import_shape_line`` turns it
into exactly one ``ImportIssue`` so the remaining lines still import.

Dispatch order matters: keywords are matched by substring, and a point
may be written with a leading marker word (``circle point 10 20``), so
points are tested first.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from astropy import units as u

from ds9_regions.core.constants import SHAPE_DEFAULT_UNITS
from ds9_regions.importer._quantity import (
    check_and_convert_parameter,
    convert_time_format_to_deg,
    read_quantity,
    to_unit,
)
from ds9_regions.importer._tokenizer import parse_region_parameters
from ds9_regions.importer._validation import (
    RegionLineError,
    validate_centered_arity,
    warn_if_invalid_polygon,
)
from ds9_regions.models.issue import ImportIssue, IssueKind
from ds9_regions.models.region import MIN_POLYGON_VERTICES, RegionKind, RegionRecord

if TYPE_CHECKING:
    from ds9_regions.coordinates.base import CoordinateBridge
    from ds9_regions.importer._frames import ParserState

logger = logging.getLogger("ds9_regions.importer")

ShapeImporter = Callable[..., RegionRecord]


# ---------------------------------------------------------------------------
# Parameter parsing
# ---------------------------------------------------------------------------


def parse_parameter(
    token: str,
    region_type: str,
    default_unit: str,
    *,
    angle_second: bool = False,
) -> u.Quantity:
    """Parse one DS9 token into a quantity with a unit.

    Args:
        token: Raw parameter token.
        region_type: Shape name used in error messages.
        default_unit: Unit applied to a bare number.
        angle_second: Token is the y of a position; ``dd:mm:ss`` is read
            as an angle instead of a time.

    Raises:
        RegionLineError: FORMAT, if the token is not a valid quantity.
    """
    parameter = check_and_convert_parameter(token, region_type)
    if angle_second:
        parameter = convert_time_format_to_deg(parameter)

    quantity = read_quantity(parameter)
    if quantity is None:
        raise RegionLineError(
            f"Invalid {region_type} parameter: {parameter}.", kind=IssueKind.FORMAT
        )
    if quantity.unit == u.dimensionless_unscaled:
        quantity = quantity.value * to_unit(default_unit)
    return quantity


def _position_unit(state: ParserState) -> str:
    return "pixel" if state.pixel_coord else "deg"


def _to_pixel(
    state: ParserState,
    bridge: CoordinateBridge,
    x: u.Quantity,
    y: u.Quantity,
    region_type: str,
) -> tuple[float, float]:
    """Map a parsed position to pixel space for the active frame."""
    if state.pixel_coord:
        return (float(x.value), float(y.value))
    pixel = bridge.point_to_pixel(state.file_frame, [x, y])
    if pixel is None:
        raise RegionLineError(
            f"Failed to apply {region_type} to image.", kind=IssueKind.CONVERSION
        )
    return pixel


# ---------------------------------------------------------------------------
# Importers
# ---------------------------------------------------------------------------


def import_point(
    parameters: list[str],
    name: str,
    state: ParserState,
    bridge: CoordinateBridge,
    line_number: int,
) -> RegionRecord:
    """``point x y`` or ``<marker> point x y``."""
    count = len(parameters)
    if count < 3 or (parameters[0] != "point" and parameters[1] != "point"):
        raise RegionLineError("point syntax error.", kind=IssueKind.SYNTAX)

    first = 2 if parameters[1] == "point" else 1
    if count < first + 2:
        raise RegionLineError("point syntax error.", kind=IssueKind.SYNTAX)

    quantities = [
        parse_parameter(
            parameters[i],
            "point",
            _position_unit(state),
            angle_second=(i == first + 1),
        )
        for i in range(first, count)
    ]

    point = _to_pixel(state, bridge, quantities[0], quantities[1], "point")
    return RegionRecord(
        kind=RegionKind.POINT,
        control_points=[point],
        rotation=0.0,
        name=name,
        file_id=state.file_id,
    )


def import_circle(
    parameters: list[str],
    name: str,
    state: ParserState,
    bridge: CoordinateBridge,
    line_number: int,
) -> RegionRecord:
    """``circle x y r``, imported as an ellipse with two equal radii."""
    if len(parameters) < 4:
        raise RegionLineError("circle syntax error.", kind=IssueKind.SYNTAX)
    radius = parameters[3]
    ellipse = ["ellipse", parameters[1], parameters[2], radius, radius]
    return import_ellipse(ellipse, name, state, bridge, line_number)


def _parse_centered(
    parameters: list[str], region_type: str, state: ParserState
) -> list[u.Quantity]:
    """Parse ``x y a b [angle]`` with the positional default units."""
    count = len(parameters)
    quantities = []
    for i in range(1, count):
        if i == count - 1 or not state.pixel_coord:
            default_unit = SHAPE_DEFAULT_UNITS[i]
        else:
            default_unit = "pixel"
        quantities.append(
            parse_parameter(parameters[i], region_type, default_unit, angle_second=(i == 2))
        )
    return quantities


def _centered_control_points(
    quantities: list[u.Quantity],
    region_type: str,
    state: ParserState,
    bridge: CoordinateBridge,
) -> list[tuple[float, float]]:
    """Center and (a, b) size in pixels.

    Sizes are lengths, so they are converted per axis, never through the
    point transform.
    """
    center = _to_pixel(state, bridge, quantities[0], quantities[1], region_type)
    if state.pixel_coord:
        return [center, (float(quantities[2].value), float(quantities[3].value))]

    try:
        size = (
            bridge.world_to_pixel_length(quantities[2], 0),
            bridge.world_to_pixel_length(quantities[3], 1),
        )
    except ValueError as exc:
        raise RegionLineError(
            f"Failed to apply {region_type} to image.", kind=IssueKind.CONVERSION
        ) from exc
    return [center, size]


def _rotation(quantities: list[u.Quantity], parameters: list[str], region_type: str) -> float:
    """Angle in degrees, or 0 when the optional angle is absent."""
    if len(quantities) <= 4:
        return 0.0
    try:
        return float(quantities[4].to_value(u.deg))
    except u.UnitsError as exc:
        raise RegionLineError(
            f"Invalid {region_type} parameter: {parameters[5]}.", kind=IssueKind.FORMAT
        ) from exc


def import_ellipse(
    parameters: list[str],
    name: str,
    state: ParserState,
    bridge: CoordinateBridge,
    line_number: int,
) -> RegionRecord:
    """``ellipse x y r1 r2 [angle]``.

    Equal radius tokens make a circle with zero rotation.  Otherwise the
    DS9 angle (from the x-axis) is shifted to the y-axis convention.
    """
    validate_centered_arity(parameters, "ellipse")
    # textual equality only: "5" and "5.0" are not a circle
    is_circle = parameters[3] == parameters[4]

    quantities = _parse_centered(parameters, "ellipse", state)
    angle = _rotation(quantities, parameters, "ellipse")
    control_points = _centered_control_points(quantities, "ellipse", state, bridge)

    rotation = 0.0
    if not is_circle:
        rotation = angle - 90.0
        if rotation < 0.0:
            rotation += 360.0

    return RegionRecord(
        kind=RegionKind.ELLIPSE,
        control_points=control_points,
        rotation=rotation,
        name=name,
        file_id=state.file_id,
    )


def import_box(
    parameters: list[str],
    name: str,
    state: ParserState,
    bridge: CoordinateBridge,
    line_number: int,
) -> RegionRecord:
    """``box x y width height [angle]``; the angle is kept as given."""
    validate_centered_arity(parameters, "box")
    quantities = _parse_centered(parameters, "box", state)
    rotation = _rotation(quantities, parameters, "box")
    control_points = _centered_control_points(quantities, "box", state, bridge)
    return RegionRecord(
        kind=RegionKind.RECTANGLE,
        control_points=control_points,
        rotation=rotation,
        name=name,
        file_id=state.file_id,
    )


def import_polygon(
    parameters: list[str],
    name: str,
    state: ParserState,
    bridge: CoordinateBridge,
    line_number: int,
) -> RegionRecord:
    """``polygon x1 y1 x2 y2 x3 y3 ...``.

    Every vertex is converted on its own; one failed vertex drops the
    whole polygon.
    """
    count = len(parameters)
    if count % 2 != 1:
        raise RegionLineError(
            "polygon syntax error, odd number of arguments.", kind=IssueKind.SYNTAX
        )
    if (count - 1) // 2 < MIN_POLYGON_VERTICES:
        raise RegionLineError(
            f"polygon syntax error, at least {MIN_POLYGON_VERTICES} vertices required.",
            kind=IssueKind.SYNTAX,
        )

    quantities = [
        parse_parameter(parameters[i], "polygon", _position_unit(state), angle_second=(i % 2 == 0))
        for i in range(1, count)
    ]

    vertices = [
        _to_pixel(state, bridge, quantities[i], quantities[i + 1], "polygon")
        for i in range(0, len(quantities), 2)
    ]
    warn_if_invalid_polygon(vertices, line_number)

    return RegionRecord(
        kind=RegionKind.POLYGON,
        control_points=vertices,
        rotation=0.0,
        name=name,
        file_id=state.file_id,
    )


def _unsupported(message: str) -> ShapeImporter:
    def reject(
        parameters: list[str],
        name: str,
        state: ParserState,
        bridge: CoordinateBridge,
        line_number: int,
    ) -> RegionRecord:
        raise RegionLineError(message, kind=IssueKind.UNSUPPORTED)

    return reject


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def _is_point(region_type: str, parameters: list[str]) -> bool:
    return "point" in region_type or (len(parameters) > 1 and parameters[1] == "point")


def _contains(keyword: str) -> Callable[[str, list[str]], bool]:
    def matches(region_type: str, parameters: list[str]) -> bool:
        return keyword in region_type

    return matches


#: Evaluated in order; the first matching predicate handles the line.
SHAPE_DISPATCH: tuple[tuple[str, Callable[[str, list[str]], bool], ShapeImporter], ...] = (
    ("point", _is_point, import_point),
    ("circle", _contains("circle"), import_circle),
    ("ellipse", _contains("ellipse"), import_ellipse),
    ("box", _contains("box"), import_box),
    ("polygon", _contains("polygon"), import_polygon),
    ("line", _contains("line"), _unsupported("DS9 line region not supported.")),
    ("vector", _contains("vector"), _unsupported("DS9 vector region not supported.")),
    ("text", _contains("text"), _unsupported("DS9 text not supported.")),
    ("annulus", _contains("annulus"), _unsupported("DS9 annulus region not supported.")),
)


def import_shape_line(
    state: ParserState,
    line_number: int,
    line: str,
    bridge: CoordinateBridge,
) -> None:
    """Import one shape line into ``state.result``.

    Appends a region on success, or exactly one issue on failure.  Lines
    whose keyword matches no known shape are ignored.
    """
    parameters, properties = parse_region_parameters(line)
    if not parameters:
        return

    region_type = parameters[0]
    # exclusion is parsed but does not change the imported geometry
    if region_type.startswith(("+", "-")):
        region_type = region_type[1:]
    parameters = [region_type, *parameters[1:]]
    name = properties.get("text", "")

    for shape, predicate, importer in SHAPE_DISPATCH:
        if not predicate(region_type, parameters):
            continue
        try:
            record = importer(parameters, name, state, bridge, line_number)
        except RegionLineError as exc:
            logger.warning("Skipping %s on line %d: %s", shape, line_number, exc.message)
            state.result.issues.append(
                ImportIssue(line=line_number, shape=shape, kind=exc.kind, message=exc.message)
            )
            return
        state.result.regions.append(record)
        return

    logger.debug("Ignoring unrecognised region line %d: %s", line_number, line)
