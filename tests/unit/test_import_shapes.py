"""Tests for shape import through the public import API.

Covers:
- Pixel-mode point, box, ellipse, circle and polygon canonicalisation
- Shape dispatch priority (``circle point`` is a point)
- Arity, parity and unsupported-shape issues
- Frame poisoning and recovery
- World-mode conversion through the coordinate bridge
"""

from __future__ import annotations

import pytest
from astropy import units as u

from ds9_regions.importer import SHAPE_DISPATCH, import_region_text, import_regions
from ds9_regions.models import IssueKind, RegionKind, RegionRecord


def _single(text: str, bridge) -> RegionRecord:
    result = import_region_text(text, bridge)
    assert result.ok, result.error_text
    assert len(result.regions) == 1
    return result.regions[0]


class TestPixelScenarios:
    """Pixel-mode lines map straight to control points."""

    def test_point(self, bridge) -> None:
        record = _single("point(12.00, 24.00)", bridge)
        assert record.kind is RegionKind.POINT
        assert record.control_points == [(12.0, 24.0)]
        assert record.rotation == 0.0

    def test_box_keeps_angle(self, bridge) -> None:
        record = _single("box(10,10,4,2,30)", bridge)
        assert record.kind is RegionKind.RECTANGLE
        assert record.control_points == [(10.0, 10.0), (4.0, 2.0)]
        assert record.rotation == pytest.approx(30.0)

    def test_box_without_angle(self, bridge) -> None:
        record = _single("box(10,10,4,2)", bridge)
        assert record.rotation == 0.0

    def test_equal_radii_ellipse_is_circle(self, bridge) -> None:
        record = _single("ellipse(10,10,5,5)", bridge)
        assert record.kind is RegionKind.ELLIPSE
        assert record.control_points == [(10.0, 10.0), (5.0, 5.0)]
        assert record.rotation == 0.0
        assert record.is_circle

    def test_ellipse_angle_shifted_to_y_axis(self, bridge) -> None:
        record = _single("ellipse(10,10,5,3,45)", bridge)
        assert record.control_points == [(10.0, 10.0), (5.0, 3.0)]
        assert record.rotation == pytest.approx(315.0)

    def test_ellipse_angle_above_ninety(self, bridge) -> None:
        record = _single("ellipse(10,10,5,3,120)", bridge)
        assert record.rotation == pytest.approx(30.0)

    def test_ellipse_angle_in_radians(self, bridge) -> None:
        record = _single("ellipse(10,10,5,3,3.141592653589793r)", bridge)
        assert record.rotation == pytest.approx(90.0)

    def test_circle_ignores_angle(self, bridge) -> None:
        record = _single("ellipse(10,10,5,5,45)", bridge)
        assert record.rotation == 0.0

    def test_circle_radius_tokens_compared_as_text(self, bridge) -> None:
        record = _single("ellipse(10,10,5,5.0,45)", bridge)
        assert record.control_points[1] == (5.0, 5.0)
        assert record.rotation == pytest.approx(315.0)

    def test_circle_becomes_ellipse(self, bridge) -> None:
        record = _single("circle(3,4,2.5)", bridge)
        assert record.kind is RegionKind.ELLIPSE
        assert record.control_points == [(3.0, 4.0), (2.5, 2.5)]
        assert record.rotation == 0.0

    def test_polygon(self, bridge) -> None:
        record = _single("polygon(0,0,1,0,1,1,0,1)", bridge)
        assert record.kind is RegionKind.POLYGON
        assert record.control_points == [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]
        assert record.rotation == 0.0

    def test_self_intersecting_polygon_still_imported(self, bridge, caplog) -> None:
        with caplog.at_level("WARNING", logger="ds9_regions.importer"):
            record = _single("polygon(0,0,1,1,1,0,0,1)", bridge)
        assert len(record.control_points) == 4
        assert "not a simple polygon" in caplog.text

    def test_name_from_text_property(self, bridge) -> None:
        record = _single("circle(1,2,3) # color=red text={My region}", bridge)
        assert record.name == "My region"

    def test_file_id_stamped(self, bridge) -> None:
        result = import_region_text("point(1,2)", bridge, file_id=7)
        assert result.regions[0].file_id == 7

    def test_include_prefix_stripped(self, bridge) -> None:
        record = _single("+box(1,2,3,4)", bridge)
        assert record.kind is RegionKind.RECTANGLE

    def test_excluded_line_skipped(self, bridge) -> None:
        result = import_region_text("-circle(1,2,3)", bridge)
        assert result.regions == []
        assert result.issues == []

    def test_explicit_pixel_units(self, bridge) -> None:
        record = _single("point(3p, 4i)", bridge)
        assert record.control_points == [(3.0, 4.0)]


class TestDispatch:
    """Ordered substring dispatch."""

    def test_priority_order(self) -> None:
        names = [name for name, _, _ in SHAPE_DISPATCH]
        assert names == [
            "point",
            "circle",
            "ellipse",
            "box",
            "polygon",
            "line",
            "vector",
            "text",
            "annulus",
        ]

    def test_circle_point_is_a_point(self, bridge) -> None:
        record = _single("circle point 7 8", bridge)
        assert record.kind is RegionKind.POINT
        assert record.control_points == [(7.0, 8.0)]

    def test_marker_point_needs_both_coordinates(self, bridge) -> None:
        result = import_region_text("circle point 7", bridge)
        assert result.regions == []
        assert result.errors == ["point syntax error."]

    def test_unknown_keyword_ignored(self, bridge) -> None:
        result = import_region_text("hexagon(1,2,3)", bridge)
        assert result.regions == []
        assert result.issues == []


class TestImportIssues:
    """Each bad line yields exactly one issue and import continues."""

    def test_short_box_then_valid_lines(self, bridge) -> None:
        result = import_region_text("box(1,2,3)\npoint(1,2)\ncircle(1,2,3)", bridge)
        assert len(result.regions) == 2
        assert result.errors == ["box syntax error."]
        issue = result.issues[0]
        assert issue.line == 1
        assert issue.shape == "box"
        assert issue.kind is IssueKind.SYNTAX

    def test_short_circle(self, bridge) -> None:
        result = import_region_text("circle(1,2)", bridge)
        assert result.errors == ["circle syntax error."]

    def test_short_point(self, bridge) -> None:
        result = import_region_text("point(1)", bridge)
        assert result.errors == ["point syntax error."]

    def test_ellipse_annulus_unsupported(self, bridge) -> None:
        result = import_region_text("ellipse(1,2,3,4,5,6,7)", bridge)
        assert result.errors == ["Unsupported ellipse definition."]
        assert result.issues[0].kind is IssueKind.UNSUPPORTED

    def test_box_annulus_unsupported(self, bridge) -> None:
        result = import_region_text("box(1,2,3,4,5,6,7)", bridge)
        assert result.errors == ["Unsupported box definition."]

    def test_polygon_even_token_count(self, bridge) -> None:
        result = import_region_text("polygon(0,0,1,0,1)", bridge)
        assert result.regions == []
        assert result.errors == ["polygon syntax error, odd number of arguments."]

    def test_polygon_two_vertices(self, bridge) -> None:
        result = import_region_text("polygon(0,0,1,1)", bridge)
        assert result.regions == []
        assert result.issues[0].kind is IssueKind.SYNTAX

    @pytest.mark.parametrize(
        ("line", "message"),
        [
            ("line(0,0,1,1)", "DS9 line region not supported."),
            ("vector(0,0,5,45)", "DS9 vector region not supported."),
            ("text(10,10) # text={hi}", "DS9 text not supported."),
            ("annulus(10,10,2,4)", "DS9 annulus region not supported."),
        ],
    )
    def test_unsupported_shapes(self, bridge, line: str, message: str) -> None:
        result = import_region_text(line, bridge)
        assert result.regions == []
        assert result.errors == [message]
        assert result.issues[0].kind is IssueKind.UNSUPPORTED

    def test_non_numeric_parameter(self, bridge) -> None:
        result = import_region_text("circle(1,2,abc)", bridge)
        assert result.errors == ["ellipse invalid parameter abc, not a numeric value."]
        assert result.issues[0].shape == "circle"
        assert result.issues[0].kind is IssueKind.FORMAT

    def test_bad_unit_letter(self, bridge) -> None:
        result = import_region_text("point(1x, 2)", bridge)
        assert result.errors == ["point invalid parameter unit: 1x."]

    @pytest.mark.parametrize(
        ("line", "shape", "message"),
        [
            ("box(10,10,4,2,30p)", "box", "Invalid box parameter: 30p."),
            ("ellipse(10,10,5,3,45i)", "ellipse", "Invalid ellipse parameter: 45i."),
        ],
    )
    def test_pixel_unit_angle(self, bridge, line: str, shape: str, message: str) -> None:
        result = import_region_text(f"{line}\npoint(1,2)", bridge)
        assert len(result.regions) == 1
        assert result.regions[0].kind is RegionKind.POINT
        assert result.errors == [message]
        assert result.issues[0].shape == shape
        assert result.issues[0].kind is IssueKind.FORMAT

    def test_error_text_lists_every_issue(self, bridge) -> None:
        result = import_region_text("box(1,2,3)\nline(0,0,1,1)", bridge)
        assert result.error_text == "box syntax error.\nDS9 line region not supported.\n"
        assert not result.ok

    def test_line_numbers_follow_physical_lines(self, bridge) -> None:
        result = import_region_text("point(1,2);box(1)\n\nbox(2)", bridge)
        assert [issue.line for issue in result.issues] == [1, 3]


class TestFramePoisoning:
    """Unsupported declarations skip shape lines until the next valid one."""

    def test_skip_until_next_valid_frame(self, bridge) -> None:
        text = "\n".join(
            [
                "wcs",
                "circle(1,2,3)",
                "box(1,2,3,4)",
                "image",
                "point(5,6)",
            ]
        )
        result = import_region_text(text, bridge)
        assert [r.kind for r in result.regions] == [RegionKind.POINT]
        assert result.errors == ["coord sys wcs not supported."]
        assert result.issues[0].kind is IssueKind.FRAME
        assert result.issues[0].line == 1

    def test_linear_frame_unsupported(self, bridge) -> None:
        result = import_region_text("linear\npoint(1,2)", bridge)
        assert result.regions == []
        assert result.errors == ["coord sys linear not supported."]

    def test_poisoned_lines_record_no_issue(self, bridge) -> None:
        result = import_region_text("wcsb\nbox(1,2,3)", bridge)
        assert len(result.issues) == 1

    def test_initial_frame(self, bridge) -> None:
        result = import_regions(['circle(150, 2, 10")'], bridge, initial_frame="fk5")
        assert result.ok
        (cx, cy), (r1, r2) = result.regions[0].control_points
        assert (cx, cy) == pytest.approx((0.0, 0.0), abs=1e-6)
        assert (r1, r2) == pytest.approx((10.0, 10.0), abs=1e-6)

    def test_unsupported_initial_frame(self, bridge) -> None:
        result = import_regions(["point(1,2)"], bridge, initial_frame="wcs")
        assert result.regions == []
        assert result.issues[0].line == 0


class TestWorldImport:
    """World coordinates go through the bridge."""

    def test_circle_in_fk5(self, bridge) -> None:
        record = _single('fk5\ncircle(150.01, 2.02, 10")', bridge)
        (cx, cy), (r1, r2) = record.control_points
        assert cx == pytest.approx(36.0, abs=1e-6)
        assert cy == pytest.approx(72.0, abs=1e-6)
        assert r1 == pytest.approx(10.0, abs=1e-6)
        assert r2 == pytest.approx(10.0, abs=1e-6)
        assert record.rotation == 0.0

    def test_frame_passed_to_bridge(self, bridge) -> None:
        import_region_text("galactic\npoint(150, 2)", bridge)
        frames = [args[0] for name, args in bridge.calls if name == "point_to_pixel"]
        assert frames == ["GALACTIC"]

    def test_default_length_unit_is_arcsec(self, bridge) -> None:
        record = _single("fk5\nbox(150, 2, 20, 10, 0)", bridge)
        assert record.control_points[1] == pytest.approx((20.0, 10.0), abs=1e-6)

    def test_lengths_use_per_axis_conversion(self, bridge) -> None:
        _single("fk5\nellipse(150, 2, 20, 10, 0)", bridge)
        axes = [args[1] for name, args in bridge.calls if name == "world_to_pixel_length"]
        assert axes == [0, 1]

    def test_sexagesimal_position(self, bridge) -> None:
        record = _single("fk5\npoint(10:00:00, +02:00:00)", bridge)
        assert record.control_points[0] == pytest.approx((0.0, 0.0), abs=1e-6)

    def test_hms_dms_position(self, bridge) -> None:
        record = _single("fk5\npoint(10h00m00s, 2d00m36s)", bridge)
        assert record.control_points[0] == pytest.approx((0.0, 36.0), abs=1e-6)

    def test_arcmin_radius(self, bridge) -> None:
        record = _single("fk5\ncircle(150, 2, 1')", bridge)
        assert record.control_points[1] == pytest.approx((60.0, 60.0), abs=1e-6)

    def test_pixel_units_pass_through(self, bridge) -> None:
        record = _single("fk5\ncircle(10p, 20p, 5p)", bridge)
        assert record.control_points == [(10.0, 20.0), (5.0, 5.0)]

    def test_polygon_vertices_converted_individually(self, bridge) -> None:
        record = _single("fk5\npolygon(150, 2, 150.01, 2, 150.01, 2.01)", bridge)
        assert record.control_points == [
            pytest.approx((0.0, 0.0), abs=1e-6),
            pytest.approx((36.0, 0.0), abs=1e-6),
            pytest.approx((36.0, 36.0), abs=1e-6),
        ]
        conversions = [name for name, _ in bridge.calls if name == "point_to_pixel"]
        assert len(conversions) == 3

    def test_conversion_failure(self, make_bridge) -> None:
        bridge = make_bridge(fail_frames=frozenset({"GALACTIC"}))
        result = import_region_text("galactic\npoint(150, 2)\nfk5\npoint(150, 2)", bridge)
        assert len(result.regions) == 1
        assert result.errors == ["Failed to apply point to image."]
        assert result.issues[0].kind is IssueKind.CONVERSION

    @pytest.mark.parametrize(
        ("line", "shape"),
        [("ellipse(150, 2, 10, 5, 30)", "ellipse"), ("box(150, 2, 10, 5, 30)", "box")],
    )
    def test_center_conversion_failure(self, make_bridge, line: str, shape: str) -> None:
        bridge = make_bridge(fail_frames=frozenset({"J2000"}))
        result = import_region_text(f"fk5\n{line}", bridge)
        assert result.regions == []
        assert result.errors == [f"Failed to apply {shape} to image."]
        assert result.issues[0].kind is IssueKind.CONVERSION

    @pytest.mark.parametrize(
        ("line", "shape"),
        [("ellipse(150, 2, 10, 5, 30)", "ellipse"), ("box(150, 2, 10, 5, 30)", "box")],
    )
    def test_size_conversion_failure(self, make_bridge, line: str, shape: str) -> None:
        bridge = make_bridge(fail_lengths=True)
        result = import_region_text(f"fk5\n{line}", bridge)
        assert result.regions == []
        assert result.errors == [f"Failed to apply {shape} to image."]
        assert result.issues[0].kind is IssueKind.CONVERSION

    def test_partial_polygon_failure_drops_polygon(self, make_bridge) -> None:
        bridge = make_bridge(fail_when=lambda lon, lat: lon > 200.0)
        result = import_region_text("fk5\npolygon(150, 2, 150.01, 2, 250, 2)", bridge)
        assert result.regions == []
        assert result.errors == ["Failed to apply polygon to image."]

    def test_pixel_declaration_after_world(self, bridge) -> None:
        result = import_region_text("fk5\npoint(150, 2)\nphysical\npoint(3, 4)", bridge)
        assert result.regions[1].control_points == [(3.0, 4.0)]

    def test_quantity_units_reach_bridge(self, bridge) -> None:
        import_region_text("fk5\npoint(150, 2)", bridge)
        _, args = next(call for call in bridge.calls if call[0] == "point_to_pixel")
        lon, lat = args[1]
        assert lon.unit == u.deg
        assert lat.unit == u.deg
