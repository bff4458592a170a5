"""Structured import issues and the import result container.

Region import is best-effort: every line that cannot be turned into a
region produces exactly one ``ImportIssue`` and processing continues.
The issue text is the human-readable message; ``kind`` lets callers and
tests branch on the failure class without string matching.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from ds9_regions.models.region import RegionRecord


class IssueKind(enum.StrEnum):
    """Failure classes for a region line."""

    FRAME = "frame"
    SYNTAX = "syntax"
    FORMAT = "format"
    CONVERSION = "conversion"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True, slots=True)
class ImportIssue:
    """One problem found while importing a region file.

    Attributes:
        line: 1-based line number in the source.
        shape: Shape keyword or frame keyword the issue relates to.
        kind: Failure class.
        message: Human-readable description.
    """

    line: int
    shape: str
    kind: IssueKind
    message: str

    def __str__(self) -> str:
        return self.message

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured payload with stable keys."""
        return {
            "line": self.line,
            "shape": self.shape,
            "kind": self.kind.value,
            "message": self.message,
        }


@dataclass(slots=True)
class ImportResult:
    """Regions and issues produced by one import run, in file order."""

    regions: list[RegionRecord] = field(default_factory=list)
    issues: list[ImportIssue] = field(default_factory=list)

    @property
    def errors(self) -> list[str]:
        """Issue messages as plain text."""
        return [issue.message for issue in self.issues]

    @property
    def error_text(self) -> str:
        """All issue messages, one per line."""
        return "".join(f"{message}\n" for message in self.errors)

    @property
    def ok(self) -> bool:
        """Whether the import produced no issues."""
        return not self.issues
