"""Data models.

- RegionRecord / RegionKind: canonical pixel-space region
- ImportIssue / IssueKind / ImportResult: structured import outcome
- Ds9GlobalProperties: style defaults for the export header
"""

from ds9_regions.models.issue import ImportIssue, ImportResult, IssueKind
from ds9_regions.models.properties import Ds9GlobalProperties
from ds9_regions.models.region import MIN_POLYGON_VERTICES, RegionKind, RegionRecord

__all__ = [
    "MIN_POLYGON_VERTICES",
    "Ds9GlobalProperties",
    "ImportIssue",
    "ImportResult",
    "IssueKind",
    "RegionKind",
    "RegionRecord",
]
