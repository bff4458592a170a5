"""DS9 parameter quantity parsing.

Two stages, kept separate because the DS9 dialect and the generic
quantity syntax differ:

1. ``check_and_convert_parameter`` validates a raw DS9 token (a number
   with an optional single-character unit, or a sexagesimal triple) and
   rewrites DS9 unit letters to unit names.
2. ``read_quantity`` turns the rewritten token into an astropy
   ``Quantity``.  It understands ``<number><unit>``, ``h:m:s`` time
   (converted from hours), ``<h>h<m>m<s>s``, ``<d>d<m>m<s>s`` and the
   dotted angle form ``d.m.s``.

Between the two, the y-coordinate of a position has its ``:`` separators
rewritten to ``.`` (``convert_time_format_to_deg``) so ``dd:mm:ss``
declinations read as degrees, not hours.
"""

from __future__ import annotations

import re

from astropy import units as u
from astropy.coordinates import Angle

from ds9_regions.core.constants import DS9_UNIT_SUFFIXES
from ds9_regions.importer._validation import RegionLineError
from ds9_regions.models.issue import IssueKind

_NUMBER = r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?"
_UNSIGNED = r"(?:\d+\.?\d*|\.\d+)"

# Leading numeric prefix of a DS9 token.
_NUMERIC_PREFIX = re.compile(rf"\s*{_NUMBER}")

# Three-component forms accepted as a DS9 parameter.  Prefix matches:
# trailing text after the third component is tolerated here and rejected
# later by read_quantity.
_SEXAGESIMAL_FORMS = (
    re.compile(rf"\s*{_NUMBER}:\s*{_NUMBER}:\s*{_NUMBER}"),
    re.compile(rf"\s*{_NUMBER}h\s*{_NUMBER}m\s*{_NUMBER}s"),
    re.compile(rf"\s*{_NUMBER}d\s*{_NUMBER}m\s*{_NUMBER}s"),
)

_TIME_COLON = re.compile(rf"[+-]?{_UNSIGNED}:{_UNSIGNED}:{_UNSIGNED}")
_TIME_HMS = re.compile(rf"[+-]?{_UNSIGNED}h{_UNSIGNED}m{_UNSIGNED}s")
_ANGLE_DMS = re.compile(rf"[+-]?{_UNSIGNED}d{_UNSIGNED}m{_UNSIGNED}s")
_ANGLE_DOTTED = re.compile(r"(?P<sign>[+-]?)(?P<d>\d+)\.(?P<m>\d+)\.(?P<s>\d+(?:\.\d*)?)")
_VALUE_UNIT = re.compile(rf"(?P<value>{_NUMBER})(?P<unit>.*)")

_UNIT_ALIASES: dict[str, u.UnitBase] = {
    '"': u.arcsec,
    "'": u.arcmin,
    "pixel": u.pix,
}


# ---------------------------------------------------------------------------
# DS9 token validation
# ---------------------------------------------------------------------------


def check_and_convert_parameter(parameter: str, region_type: str) -> str:
    """Validate a DS9 parameter token and rewrite its unit letter.

    ``"5d"`` becomes ``"5deg"``, ``"3p"`` becomes ``"3pixel"``; plain
    numbers, ``"``/``'`` marks and sexagesimal triples pass unchanged.

    Raises:
        RegionLineError: FORMAT, if the token has no numeric prefix or an
            unknown unit.
    """
    error_prefix = f"{region_type} invalid parameter "

    match = _NUMERIC_PREFIX.match(parameter)
    if match is None:
        raise RegionLineError(
            f"{error_prefix}{parameter}, not a numeric value.", kind=IssueKind.FORMAT
        )

    remainder = parameter[match.end() :]
    if not remainder:
        return parameter

    if len(remainder) == 1:
        unit = DS9_UNIT_SUFFIXES.get(remainder)
        if unit is None:
            raise RegionLineError(f"{error_prefix}unit: {parameter}.", kind=IssueKind.FORMAT)
        return parameter[: match.end()] + unit

    if any(form.match(parameter) for form in _SEXAGESIMAL_FORMS):
        return parameter

    raise RegionLineError(f"{error_prefix}unit: {parameter}.", kind=IssueKind.FORMAT)


def convert_time_format_to_deg(parameter: str) -> str:
    """Rewrite ``dd:mm:ss`` to ``dd.mm.ss`` so it reads as an angle."""
    return parameter.replace(":", ".")


# ---------------------------------------------------------------------------
# Quantity reading
# ---------------------------------------------------------------------------


def read_quantity(text: str) -> u.Quantity | None:
    """Parse a normalised parameter into a ``Quantity``.

    A bare number yields a dimensionless quantity; the caller applies the
    positional default unit.  Returns ``None`` when *text* is not a
    recognised quantity.
    """
    text = text.strip()

    try:
        if _TIME_COLON.fullmatch(text):
            return Angle(text, unit=u.hourangle).to(u.deg)
        if _TIME_HMS.fullmatch(text) or _ANGLE_DMS.fullmatch(text):
            return Angle(text).to(u.deg)
    except ValueError:
        return None

    dotted = _ANGLE_DOTTED.fullmatch(text)
    if dotted:
        degrees = (
            int(dotted["d"]) + int(dotted["m"]) / 60.0 + float(dotted["s"]) / 3600.0
        )
        if dotted["sign"] == "-":
            degrees = -degrees
        return degrees * u.deg

    match = _VALUE_UNIT.fullmatch(text)
    if match is None:
        return None

    value = float(match["value"])
    unit_text = match["unit"].strip()
    if not unit_text:
        return u.Quantity(value)
    unit = _UNIT_ALIASES.get(unit_text)
    if unit is None:
        try:
            unit = u.Unit(unit_text)
        except ValueError:
            return None
    return value * unit


def to_unit(name: str) -> u.UnitBase:
    """Resolve a default unit name (``"pixel"``, ``"deg"``, ``"arcsec"``)."""
    return _UNIT_ALIASES.get(name) or u.Unit(name)
