"""DS9 region import.

Parses DS9 region text into pixel-space ``RegionRecord`` objects anchored
to one image.  The work is split into focused stages:
- **_tokenizer**: logical lines, line classification, parameters/properties
- **_quantity**: DS9 unit dialect and sexagesimal parameters
- **_frames**: ``ParserState`` and frame declarations
- **_shapes**: per-shape importers and the ordered dispatch table
- **_validation**: per-line error type, arity and polygon checks

Import is best-effort: a bad line yields one ``ImportIssue`` and the rest
of the file still imports.  Frame declarations are line-order sensitive;
an unsupported declaration skips shape lines until the next valid one.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ds9_regions.core.config import RegionConfig
from ds9_regions.core.exceptions import RegionFileError
from ds9_regions.importer._frames import ParserState, resolve_image_frame, set_file_frame
from ds9_regions.importer._quantity import (
    check_and_convert_parameter,
    convert_time_format_to_deg,
    read_quantity,
)
from ds9_regions.importer._shapes import SHAPE_DISPATCH, import_shape_line, parse_parameter
from ds9_regions.importer._tokenizer import (
    LineKind,
    classify_line,
    is_frame_keyword,
    parse_region_parameters,
    split_region_text,
)
from ds9_regions.importer._validation import RegionLineError
from ds9_regions.models.issue import ImportIssue, ImportResult, IssueKind

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from ds9_regions.coordinates.base import CoordinateBridge

logger = logging.getLogger("ds9_regions.importer")

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    "SHAPE_DISPATCH",
    "LineKind",
    "ParserState",
    "RegionLineError",
    "check_and_convert_parameter",
    "classify_line",
    "convert_time_format_to_deg",
    "import_region_file",
    "import_region_text",
    "import_regions",
    "is_frame_keyword",
    "parse_parameter",
    "parse_region_parameters",
    "process_line",
    "read_quantity",
    "resolve_image_frame",
    "set_file_frame",
    "split_region_text",
]


def _declare_frame(
    state: ParserState, line_number: int, keyword: str, bridge: CoordinateBridge
) -> None:
    keyword = keyword.strip().lower()
    if not set_file_frame(state, keyword, bridge):
        message = f"coord sys {keyword} not supported."
        logger.warning("Line %d: %s", line_number, message)
        state.result.issues.append(
            ImportIssue(line=line_number, shape=keyword, kind=IssueKind.FRAME, message=message)
        )


def process_line(
    state: ParserState, line_number: int, line: str, bridge: CoordinateBridge
) -> None:
    """Process one logical line, updating *state* in place."""
    kind = classify_line(line)
    if kind is LineKind.FRAME:
        _declare_frame(state, line_number, line, bridge)
        return

    if kind is not LineKind.SHAPE:
        return

    # regions declared in an unsupported frame are skipped
    if state.frame_ok:
        import_shape_line(state, line_number, line, bridge)


def _run(
    numbered_lines: Iterable[tuple[int, str]],
    bridge: CoordinateBridge,
    file_id: int,
    initial_frame: str,
) -> ImportResult:
    state = ParserState(file_id=file_id)
    if initial_frame:
        _declare_frame(state, 0, initial_frame, bridge)
    for line_number, line in numbered_lines:
        process_line(state, line_number, line.strip(), bridge)
    return state.result


def import_regions(
    lines: Iterable[str],
    bridge: CoordinateBridge,
    *,
    file_id: int = 0,
    initial_frame: str = "",
) -> ImportResult:
    """Import already-split logical region lines.

    Args:
        lines: One logical line per item, in file order.
        bridge: Coordinate system of the image the regions attach to.
        file_id: Image identifier stamped on each record.
        initial_frame: Optional DS9 frame keyword active before line 1.

    Returns:
        The imported regions and every issue found, both in line order.
    """
    return _run(enumerate(lines, start=1), bridge, file_id, initial_frame)


def import_region_text(
    text: str,
    bridge: CoordinateBridge,
    *,
    file_id: int = 0,
    config: RegionConfig | None = None,
) -> ImportResult:
    """Import DS9 region file content held in memory."""
    config = config or RegionConfig()
    return _run(split_region_text(text, config.line_delimiter), bridge, file_id, "")


def import_region_file(
    path: Path | str,
    bridge: CoordinateBridge,
    *,
    file_id: int = 0,
    config: RegionConfig | None = None,
) -> ImportResult:
    """Read and import a DS9 region file.

    Raises:
        RegionFileError: If the file cannot be read as text.
    """
    from pathlib import Path

    path = Path(path)
    logger.info("Importing DS9 region file: %s", path.name)

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Cannot read region file {path.name}: {exc}"
        raise RegionFileError(msg) from exc

    result = import_region_text(text, bridge, file_id=file_id, config=config)
    logger.info(
        "Imported %d region(s) with %d issue(s) from %s",
        len(result.regions),
        len(result.issues),
        path.name,
    )
    return result
