"""Region exception taxonomy.

Provides a shared base exception for every failure the region subsystem
raises.  Each exception carries structured context fields (stage, code)
so callers can report failures consistently.

Categories
----------
- ``RegionValidationError``: a record violates its geometric invariants.
- ``RegionFileError``: a region file cannot be read.
- ``RegionExportError``: export was requested but cannot be produced.

Per-line import problems are not raised.  They are collected as
``ImportIssue`` records (see ``ds9_regions.models.issue``) so one bad line
never aborts the rest of the file.

All of them render through ``to_error_dict()`` into one structured
error payload suitable for logging and client responses.
"""

from __future__ import annotations


class RegionError(Exception):
    """Base exception for all region-domain errors.

    Attributes:
        message: Description shown to users.
        stage: Subsystem stage where the error occurred
            (e.g. ``"import"``, ``"export"``).
        code: Machine-readable error code (e.g. ``"REGION_EXPORT_EMPTY"``).
    """

    #: Stage used when none is passed; subclasses set their own.
    default_stage: str = ""
    #: Code used when none is passed; subclasses set their own.
    default_code: str = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        super().__init__(message)

    @property
    def category(self) -> str:
        """Category name derived from the concrete exception class."""
        if isinstance(self, RegionValidationError):
            return "validation"
        if isinstance(self, RegionFileError):
            return "file"
        if isinstance(self, RegionExportError):
            return "export"
        return "region"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
        }


# ---------------------------------------------------------------------------
# Category classes
# ---------------------------------------------------------------------------


class RegionValidationError(RegionError):
    """A region record does not satisfy its invariants."""

    default_stage = "model"
    default_code = "REGION_INVALID"


class RegionFileError(RegionError):
    """A region file could not be read."""

    default_stage = "import"
    default_code = "REGION_FILE_UNREADABLE"


class RegionExportError(RegionError):
    """Export failed: nothing to export, or the destination is unwritable."""

    default_stage = "export"
    default_code = "REGION_EXPORT_FAILED"
