"""Shared pytest fixtures for the DS9 region test suite."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from astropy import units as u

from ds9_regions.coordinates.base import CoordinateBridge

# ---------------------------------------------------------------------------
# Path fixtures
# ---------------------------------------------------------------------------

TESTS_DIR = Path(__file__).parent
DATA_DIR = TESTS_DIR / "data"


@pytest.fixture()
def data_dir() -> Path:
    """Return the path to the test data directory."""
    return DATA_DIR


@pytest.fixture()
def pixel_regions_file(data_dir: Path) -> Path:
    """Path to a region file written in pixel coordinates."""
    return data_dir / "pixel_shapes.reg"


@pytest.fixture()
def fk5_regions_file(data_dir: Path) -> Path:
    """Path to a region file written in fk5 with a few bad lines."""
    return data_dir / "fk5_mixed.reg"


# ---------------------------------------------------------------------------
# Coordinate bridge fixtures
# ---------------------------------------------------------------------------

#: World position of pixel (0, 0) for the fake bridge.
ORIGIN_DEG = (150.0, 2.0)
#: One pixel is one arcsecond on both axes.
SCALE_DEG = 1.0 / 3600.0


class FakeBridge(CoordinateBridge):
    """Deterministic linear bridge: pixel = (world - origin) / scale.

    Attributes:
        calls: ``(method, args)`` tuples in call order.
    """

    def __init__(
        self,
        *,
        frame: str = "J2000",
        linear: bool = False,
        fail_frames: frozenset[str] = frozenset(),
        fail_when: Callable[[float, float], bool] | None = None,
        fail_lengths: bool = False,
    ) -> None:
        self._frame = frame
        self._linear = linear
        self._fail_frames = fail_frames
        self._fail_when = fail_when
        self._fail_lengths = fail_lengths
        self.calls: list[tuple[str, tuple[object, ...]]] = []

    def point_to_pixel(self, frame, world):
        self.calls.append(("point_to_pixel", (frame, tuple(world))))
        lon, lat = world
        if lon.unit == u.pix and lat.unit == u.pix:
            return (float(lon.value), float(lat.value))
        if frame in self._fail_frames:
            return None
        lon_deg = lon.to_value(u.deg)
        lat_deg = lat.to_value(u.deg)
        if self._fail_when is not None and self._fail_when(lon_deg, lat_deg):
            return None
        return (
            float((lon_deg - ORIGIN_DEG[0]) / SCALE_DEG),
            float((lat_deg - ORIGIN_DEG[1]) / SCALE_DEG),
        )

    def world_to_pixel_length(self, length, axis):
        self.calls.append(("world_to_pixel_length", (length, axis)))
        if length.unit == u.pix:
            return float(length.value)
        if self._fail_lengths:
            raise ValueError(f"Cannot convert length {length} on axis {axis}.")
        return float(length.to_value(u.deg) / SCALE_DEG)

    def has_celestial_frame(self) -> bool:
        return bool(self._frame) and not self._linear

    def celestial_frame_name(self) -> str:
        return self._frame if self.has_celestial_frame() else ""

    def has_linear_frame(self) -> bool:
        return self._linear

    def pixel_to_world(self, x, y):
        self.calls.append(("pixel_to_world", (x, y)))
        return (
            (ORIGIN_DEG[0] + x * SCALE_DEG) * u.deg,
            (ORIGIN_DEG[1] + y * SCALE_DEG) * u.deg,
        )

    def pixel_to_world_length(self, length, axis):
        self.calls.append(("pixel_to_world_length", (length, axis)))
        return (length * SCALE_DEG * u.deg).to(u.arcsec)


class ImportOnlyBridge(FakeBridge):
    """Bridge that keeps the base class pixel-to-world methods."""

    pixel_to_world = CoordinateBridge.pixel_to_world
    pixel_to_world_length = CoordinateBridge.pixel_to_world_length


@pytest.fixture()
def bridge() -> FakeBridge:
    """Fake fk5 bridge (J2000 image frame)."""
    return FakeBridge()


@pytest.fixture()
def make_bridge() -> Callable[..., FakeBridge]:
    """Factory for fake bridges with a custom frame or failure rule."""
    return FakeBridge


@pytest.fixture()
def import_only_bridge() -> FakeBridge:
    """Fake bridge that cannot convert pixel to world."""
    return ImportOnlyBridge()
