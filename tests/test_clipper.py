"""Tests for border preparation and lattice clipping."""

import pytest
import numpy as np
from shapely.geometry import MultiPolygon, Polygon

from py_voronoi_fill.config import settings
from py_voronoi_fill.core import (
    InvalidPolygon, RenderedLattice, build_voronoi_cells, clip_lattice, prepare_border,
    render_lattice,
)
from py_voronoi_fill.core.sites import generate_sites
from py_voronoi_fill.utils.random import make_rng


L_SHAPE = [(0, 0), (100, 0), (100, 40), (40, 40), (40, 100), (0, 100)]


def lattice_over(size, n, seed, thickness=2.0, round_radius=1.0):
    diagram = build_voronoi_cells(generate_sites(n, 100.0, make_rng(seed)), 100.0)
    world = diagram.transformed(size / 100.0, [0.0, 0.0])
    return render_lattice(world, thickness, round_radius)


class TestPrepareBorder:
    """Test border validation and normalization."""

    def test_ccw_square(self):
        """Test that a counter-clockwise square is kept as is."""
        border = prepare_border([(0, 0), (10, 0), (10, 10), (0, 10)])
        assert border.area == 100.0
        assert border.exterior.is_ccw

    def test_clockwise_reoriented(self):
        """Test that clockwise input is normalized to counter-clockwise."""
        border = prepare_border([(0, 0), (0, 10), (10, 10), (10, 0)])
        assert border.exterior.is_ccw
        assert border.area == 100.0

    def test_closing_point_allowed(self):
        """Test that an explicitly closed ring is accepted."""
        border = prepare_border([(0, 0), (10, 0), (10, 10), (0, 10), (0, 0)])
        assert border.area == 100.0

    def test_concave_border(self):
        """Test that concave borders are accepted."""
        border = prepare_border(L_SHAPE)
        assert border.area == 100 * 40 + 40 * 60

    @pytest.mark.parametrize("points", [
        [],
        [(0, 0), (1, 1)],
        [(0, 0), (1, 1), (0, 0), (1, 1)],
    ])
    def test_too_few_points(self, points):
        """Test that fewer than three distinct points are rejected."""
        with pytest.raises(InvalidPolygon):
            prepare_border(points)

    def test_collinear_points(self):
        """Test that zero-area borders are rejected."""
        with pytest.raises(InvalidPolygon, match="zero area"):
            prepare_border([(0, 0), (1, 1), (2, 2), (3, 3)])

    @pytest.mark.parametrize("points", [
        "not a polygon",
        [(0, 0, 0), (1, 0, 0), (1, 1, 0)],
        [(0, 0), (1, 0), (float("nan"), 1)],
    ])
    def test_malformed_points(self, points):
        """Test that malformed coordinates are rejected."""
        with pytest.raises(InvalidPolygon):
            prepare_border(points)

    def test_self_intersection_repaired(self):
        """Test that a bow-tie border is repaired into its two lobes."""
        border = prepare_border([(0, 0), (1, 1), (1, 0), (0, 1)])
        assert isinstance(border, MultiPolygon)
        assert len(border.geoms) == 2
        assert abs(border.area - 0.5) < 1e-12
        assert all(part.exterior.is_ccw for part in border.geoms)

    def test_self_intersection_strict(self, monkeypatch):
        """Test that strict mode rejects self-intersecting borders."""
        monkeypatch.setattr(settings, "strict_border", True)
        with pytest.raises(InvalidPolygon, match="self-intersecting"):
            prepare_border([(0, 0), (1, 1), (1, 0), (0, 1)])


class TestClipLattice:
    """Test difference(border, openings)."""

    def test_walls_inside_border(self):
        """Test that clipping never adds area outside the border."""
        border = prepare_border(L_SHAPE)
        walls = clip_lattice(border, lattice_over(100.0, 30, 4))

        assert walls.area > 0
        assert walls.area < border.area
        assert walls.difference(border).area < 1e-9

    def test_walls_match_lattice(self):
        """Test that clipped walls equal the lattice walls inside the border."""
        border = prepare_border(L_SHAPE)
        lattice = lattice_over(100.0, 30, 4)
        walls = clip_lattice(border, lattice)
        expected = lattice.walls.intersection(border)
        assert walls.symmetric_difference(expected).area < 1e-6

    def test_empty_lattice(self):
        """Test that a lattice without cells leaves no walls."""
        border = prepare_border(L_SHAPE)
        walls = clip_lattice(border, lattice_over(100.0, 0, 4))
        assert walls.is_empty

    def test_openings_outside_border(self):
        """Test that openings missing the border leave it whole."""
        border = prepare_border([(0, 0), (10, 0), (10, 10), (0, 10)])
        lattice = RenderedLattice(
            openings=MultiPolygon([Polygon([(50, 50), (60, 50), (60, 60), (50, 60)])]),
            domain=Polygon([(0, 0), (100, 0), (100, 100), (0, 100)]),
            cell_count=1,
            thickness=1.0,
            round_radius=0.0,
        )
        walls = clip_lattice(border, lattice)
        assert abs(walls.area - border.area) < 1e-12

    def test_repaired_border(self):
        """Test clipping against a repaired multi-part border."""
        border = prepare_border([(0, 0), (100, 100), (100, 0), (0, 100)])
        walls = clip_lattice(border, lattice_over(100.0, 20, 2))
        assert 0 < walls.area < border.area
        assert walls.difference(border).area < 1e-9
