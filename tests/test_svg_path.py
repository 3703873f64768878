"""Unit tests for path parsing, the inside test and rasterization."""

import numpy as np
import pytest

from world_map.svg_path import PathSyntaxError, parse_path, rasterize
from world_map.terrain import IconDescriptor, TerrainCategory

SQUARE = "M 0 0 L 10 0 L 10 10 L 0 10 Z"
SQUARE_WITH_HOLE = SQUARE + " M 3 3 L 3 7 L 7 7 L 7 3 Z"


class TestParsing:
    """Path grammar coverage."""

    def test_square_bbox_and_center(self):
        geometry = parse_path(SQUARE)
        assert geometry.bbox == (0.0, 0.0, 10.0, 10.0)
        assert geometry.center == (5.0, 5.0)
        assert geometry.closed == [True]

    def test_relative_commands(self):
        geometry = parse_path("m 10 10 l 10 0 l 0 10 z")
        assert geometry.bbox == (10.0, 10.0, 10.0, 10.0)

    def test_horizontal_and_vertical_lines(self):
        geometry = parse_path("M 0 0 H 10 V 10 H 0 Z")
        assert geometry.contains([[5, 5]])[0]

    def test_implicit_lineto_after_moveto(self):
        geometry = parse_path("M 0 0 10 0 10 10 0 10 Z")
        assert geometry.contains([[5, 5]])[0]

    def test_compact_syntax(self):
        geometry = parse_path("M0,0L10,0L10,10L0,10z")
        assert geometry.bbox == (0.0, 0.0, 10.0, 10.0)

    def test_compact_numbers_and_arc_flags(self):
        geometry = parse_path("M-1-2L1.5.5")
        assert geometry.subpaths[0].tolist() == [[-1.0, -2.0], [1.5, 0.5]]
        arc = parse_path("M0 0A5 5 0 0110 0")
        assert tuple(arc.subpaths[0][-1]) == (10.0, 0.0)

    def test_cubic_is_flattened(self):
        geometry = parse_path("M 0 0 C 0 10 10 10 10 0", segments=16)
        subpath = geometry.subpaths[0]
        assert len(subpath) == 17
        assert tuple(subpath[-1]) == (10.0, 0.0)
        assert subpath[:, 1].max() == pytest.approx(7.5)

    def test_smooth_cubic_reflects_control_point(self):
        geometry = parse_path("M 0 0 C 0 10 10 10 10 0 S 20 -10 20 0", segments=8)
        subpath = geometry.subpaths[0]
        assert tuple(subpath[-1]) == (20.0, 0.0)
        # The second half mirrors the first one below the axis.
        assert subpath[:, 1].min() == pytest.approx(-7.5)

    def test_quadratic_curves(self):
        geometry = parse_path("M 0 0 Q 5 10 10 0 T 20 0", segments=4)
        subpath = geometry.subpaths[0]
        assert tuple(subpath[-1]) == (20.0, 0.0)
        assert subpath[:, 1].min() < 0 < subpath[:, 1].max()

    def test_arc_points_lie_on_the_circle(self):
        geometry = parse_path("M 0 0 A 5 5 0 0 1 10 0")
        points = geometry.subpaths[0]
        assert np.allclose(np.hypot(points[:, 0] - 5, points[:, 1]), 5.0)

    def test_arc_radius_is_scaled_up_when_too_small(self):
        geometry = parse_path("M 0 0 A 1 1 0 0 1 10 0")
        points = geometry.subpaths[0]
        assert np.allclose(np.hypot(points[:, 0] - 5, points[:, 1]), 5.0)

    def test_arc_to_current_point_is_skipped(self):
        geometry = parse_path("M 0 0 A 5 5 0 0 1 0 0 L 10 0")
        assert geometry.subpaths[0].tolist() == [[0.0, 0.0], [10.0, 0.0]]

    def test_empty_data(self):
        geometry = parse_path("")
        assert geometry.is_empty
        assert geometry.bbox == (0.0, 0.0, 0.0, 0.0)

    @pytest.mark.parametrize("d", [
        "L 10 10",
        "M 0 0 L 10",
        "M 0 0 Z 5 5",
        "M 0 0 A 5 5 0 2 1 10 0",
        "M 0 0 L ten 10",
    ])
    def test_malformed_data_raises(self, d):
        with pytest.raises(PathSyntaxError):
            parse_path(d)


class TestContains:
    """Non-zero winding inside test."""

    def test_square(self):
        inside = parse_path(SQUARE).contains([[5, 5], [15, 5], [-1, 5], [5, 11]])
        assert inside.tolist() == [True, False, False, False]

    def test_opposite_subpath_cuts_a_hole(self):
        geometry = parse_path(SQUARE_WITH_HOLE)
        assert geometry.contains([[5, 5], [1, 1]]).tolist() == [False, True]

    def test_same_direction_subpaths_overlap(self):
        geometry = parse_path(SQUARE + " M 3 3 L 7 3 L 7 7 L 3 7 Z")
        assert geometry.contains([[5, 5]])[0]

    def test_unclosed_subpath_is_closed_implicitly(self):
        geometry = parse_path("M 0 0 L 10 0 L 10 10 L 0 10")
        assert geometry.contains([[5, 5]])[0]

    def test_chunking_does_not_change_the_result(self):
        geometry = parse_path(SQUARE_WITH_HOLE)
        points = np.random.default_rng(3).random((200, 2)) * 12 - 1
        assert np.array_equal(geometry.contains(points), geometry.contains(points, chunk_cells=1))

    def test_empty_geometry_contains_nothing(self):
        assert not parse_path("").contains([[0, 0]]).any()


class TestRasterize:
    """Scanline fill agrees with the inside test."""

    def test_square_mask(self):
        mask = rasterize(parse_path("M 2 2 L 8 2 L 8 8 L 2 8 Z"), 10, 10)
        assert mask.shape == (10, 10)
        assert mask.sum() == 36
        assert mask[5, 5] and not mask[0, 0]

    def test_mask_matches_contains(self):
        geometry = parse_path(SQUARE_WITH_HOLE)
        mask = rasterize(geometry, 12, 12)
        ys, xs = np.mgrid[0:12, 0:12]
        centers = np.column_stack([xs.ravel() + 0.5, ys.ravel() + 0.5])
        assert np.array_equal(mask.ravel(), geometry.contains(centers))


class TestIcons:
    """Terrain categories and icon outlines."""

    def test_draw_order(self):
        order = TerrainCategory.in_draw_order()
        assert order[0] is TerrainCategory.SPACE
        assert order[-1] is TerrainCategory.CITY
        assert [c.label for c in order] == ["Space", "Ocean", "Ice", "Desert", "Mountain", "Forest", "City"]

    def test_icon_key_lookup(self):
        assert TerrainCategory.from_icon_key("tree") is TerrainCategory.FOREST
        assert TerrainCategory.from_icon_key("volcano") is None

    def test_outline_is_centered_and_scaled(self):
        geometry = parse_path("M 0 0 L 15 15")
        icon = IconDescriptor(TerrainCategory.FOREST, geometry, geometry.center)
        outline = icon.outline(size=3, reference_size=15)
        assert np.allclose(outline[0], [[-1.5, -1.5], [1.5, 1.5]])
