"""Image coordinate system bridges.

- CoordinateBridge: abstract contract used by the importer and exporter
- WcsCoordinateBridge: concrete bridge over an astropy WCS
"""

from ds9_regions.coordinates.base import CoordinateBridge
from ds9_regions.coordinates.wcs import WcsCoordinateBridge

__all__ = [
    "CoordinateBridge",
    "WcsCoordinateBridge",
]
