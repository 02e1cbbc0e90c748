"""Tests for the bounded Voronoi builder."""

import itertools

import pytest
import numpy as np
from shapely.geometry import Point, Polygon

from py_voronoi_fill.core import BOUNDARY, InvalidParameter, build_voronoi_cells
from py_voronoi_fill.core.sites import generate_sites
from py_voronoi_fill.utils.random import make_rng


def random_diagram(n, seed, size=100.0):
    nuclei = generate_sites(n, size, make_rng(seed))
    return nuclei, build_voronoi_cells(nuclei, size)


class TestCellGeometry:
    """Test cell shapes and tiling."""

    @pytest.mark.parametrize("n,seed", [(1, 0), (2, 1), (30, 7), (120, 42)])
    def test_area_conservation(self, n, seed):
        """Test that the cells tile the domain square."""
        _, diagram = random_diagram(n, seed)
        assert abs(diagram.total_area - 100.0 ** 2) < 1e-6

    def test_cells_do_not_overlap(self):
        """Test that distinct cells only share boundary edges."""
        _, diagram = random_diagram(40, 3)
        polygons = [Polygon(cell.vertices) for cell in diagram.cells.values()]
        for a, b in itertools.combinations(polygons, 2):
            assert a.intersection(b).area < 1e-9

    def test_cells_are_convex_and_ccw(self):
        """Test that every cell is a counter-clockwise convex ring."""
        _, diagram = random_diagram(40, 9)
        for cell in diagram.cells.values():
            polygon = Polygon(cell.vertices)
            assert cell.area > 0
            assert polygon.is_valid
            assert abs(polygon.convex_hull.area - polygon.area) < 1e-9

    def test_nucleus_inside_own_cell(self):
        """Test that each nucleus lies in its own cell."""
        nuclei, diagram = random_diagram(50, 5)
        for index, cell in diagram.cells.items():
            assert Polygon(cell.vertices).buffer(1e-9).contains(Point(nuclei[index]))

    def test_centroid_nearest_nucleus(self):
        """Test that cell centroids are closest to their own nucleus."""
        nuclei, diagram = random_diagram(50, 17)
        for index, cell in diagram.cells.items():
            distances = np.hypot(*(nuclei - cell.centroid).T)
            assert int(np.argmin(distances)) == index

    def test_edge_labels_match_edges(self):
        """Test that every vertex carries one edge label."""
        _, diagram = random_diagram(25, 8)
        for cell in diagram.cells.values():
            assert len(cell.edge_labels) == len(cell.vertices)
            assert len(list(cell.edges())) == len(cell.vertices)


class TestConnectivity:
    """Test neighbour relations between cells."""

    def test_neighbors_symmetric(self):
        """Test that if cell A neighbours B then B neighbours A."""
        _, diagram = random_diagram(60, 21)
        for index, cell in diagram.cells.items():
            for neighbor in cell.neighbors:
                assert index in diagram.neighbors(neighbor), \
                    f"Cell {index} lists {neighbor} as neighbor, but not vice versa"

    def test_border_detection(self):
        """Test that border cells are flagged and interior cells are not."""
        _, diagram = random_diagram(60, 21)
        flags = [cell.is_border for cell in diagram.cells.values()]
        assert any(flags)
        assert not all(flags)

    def test_grid_tie_break(self):
        """Test that cocircular nuclei resolve to a consistent topology."""
        nuclei = np.array([[25.0, 25.0], [75.0, 25.0], [25.0, 75.0], [75.0, 75.0]])
        diagram = build_voronoi_cells(nuclei, 100.0)

        for cell in diagram.cells.values():
            assert abs(cell.area - 2500.0) < 1e-9
            assert len(cell.neighbors) == 2
        assert diagram.neighbors(0) == [1, 2]
        assert diagram.neighbors(3) == [1, 2]


class TestDegenerateInput:
    """Test empty, single and duplicate nucleus sets."""

    def test_single_nucleus(self):
        """Test that one nucleus owns the whole square."""
        diagram = build_voronoi_cells(np.array([[30.0, 60.0]]), 100.0)
        cell = diagram.cells[0]
        assert abs(cell.area - 10000.0) < 1e-9
        assert all(label == BOUNDARY for label in cell.edge_labels)
        assert cell.neighbors == []

    def test_no_nuclei(self):
        """Test that an empty nucleus set gives an empty diagram."""
        diagram = build_voronoi_cells(np.empty((0, 2)), 100.0)
        assert len(diagram) == 0
        assert diagram.total_area == 0

    def test_duplicate_nuclei_merged(self):
        """Test that coincident nuclei are merged instead of crashing."""
        nuclei = np.array([[10.0, 10.0], [10.0, 10.0], [60.0, 40.0], [60.0, 40.0]])
        diagram = build_voronoi_cells(nuclei, 100.0)

        assert sorted(diagram.cells) == [0, 2]
        assert diagram.aliases == {1: 0, 3: 2}
        assert diagram.cell_for(1) is diagram.cells[0]
        assert abs(diagram.total_area - 10000.0) < 1e-9

    def test_invalid_size(self):
        """Test that the domain side must be positive."""
        with pytest.raises(InvalidParameter):
            build_voronoi_cells(np.array([[1.0, 1.0]]), 0.0)


class TestTransform:
    """Test mapping a diagram to world coordinates."""

    def test_transformed_diagram(self):
        """Test uniform scaling and translation of cells and domain."""
        _, diagram = random_diagram(15, 4)
        world = diagram.transformed(2.0, [10.0, -5.0])

        np.testing.assert_allclose(world.origin, [10.0, -5.0])
        assert world.side == 200.0
        assert abs(world.total_area - 4 * diagram.total_area) < 1e-6
        np.testing.assert_allclose(world.nuclei, diagram.nuclei * 2.0 + [10.0, -5.0])
        np.testing.assert_allclose(world.domain_ring()[2], [210.0, 195.0])

    def test_transform_preserves_labels(self):
        """Test that topology survives the transform."""
        _, diagram = random_diagram(15, 4)
        world = diagram.transformed(0.5, [1.0, 1.0])
        for index, cell in diagram.cells.items():
            assert world.cells[index].edge_labels == cell.edge_labels


def test_reproducibility():
    """Test that the same nuclei produce identical cells."""
    nuclei = generate_sites(30, 100.0, make_rng(99))
    diagram1 = build_voronoi_cells(nuclei, 100.0)
    diagram2 = build_voronoi_cells(nuclei, 100.0)

    assert sorted(diagram1.cells) == sorted(diagram2.cells)
    for index in diagram1.cells:
        np.testing.assert_array_equal(diagram1.cells[index].vertices,
                                      diagram2.cells[index].vertices)
        assert diagram1.cells[index].edge_labels == diagram2.cells[index].edge_labels
