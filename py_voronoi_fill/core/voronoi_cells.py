"""Bounded Voronoi diagram built by half-plane intersection."""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np
import structlog
from scipy.spatial import cKDTree

from ..config import settings
from .errors import InvalidParameter
from .geometry import (
    clip_half_plane, drop_short_edges, polygon_area, polygon_centroid, square_ring
)

logger = structlog.get_logger()

# Edge label for sides lying on the domain square
BOUNDARY = -1


@dataclass
class VoronoiCell:
    """Convex Voronoi cell of a single nucleus.

    ``edge_labels[k]`` belongs to the edge from ``vertices[k]`` to
    ``vertices[k + 1]`` and holds the index of the nucleus on the other side
    of that edge, or ``BOUNDARY`` when the edge lies on the domain square.
    """
    index: int
    nucleus: np.ndarray
    vertices: np.ndarray  # (k, 2), counter-clockwise
    edge_labels: List[int]

    @property
    def area(self) -> float:
        return polygon_area(self.vertices)

    @property
    def centroid(self) -> np.ndarray:
        return polygon_centroid(self.vertices)

    @property
    def neighbors(self) -> List[int]:
        return sorted({label for label in self.edge_labels if label != BOUNDARY})

    @property
    def is_border(self) -> bool:
        return BOUNDARY in self.edge_labels

    def edges(self) -> Iterator[Tuple[np.ndarray, np.ndarray, int]]:
        """Yield (start, end, label) for every edge of the cell."""
        n = len(self.vertices)
        for k in range(n):
            yield self.vertices[k], self.vertices[(k + 1) % n], self.edge_labels[k]

    def transformed(self, scale: float, offset: np.ndarray) -> "VoronoiCell":
        return VoronoiCell(
            index=self.index,
            nucleus=self.nucleus * scale + offset,
            vertices=self.vertices * scale + offset,
            edge_labels=list(self.edge_labels),
        )


@dataclass
class VoronoiDiagram:
    """Voronoi cells of a nucleus set, bounded to a square domain.

    The domain is the square of side ``side`` anchored at ``origin``; it is
    ``[0, size]^2`` until the diagram is transformed to world coordinates.
    Nuclei merged into another one are listed in ``aliases`` and own no cell.
    """
    size: float
    nuclei: np.ndarray
    cells: Dict[int, VoronoiCell]
    aliases: Dict[int, int] = field(default_factory=dict)
    origin: np.ndarray = field(default_factory=lambda: np.zeros(2))
    side: Optional[float] = None

    def __post_init__(self):
        if self.side is None:
            self.side = self.size

    def __len__(self) -> int:
        return len(self.cells)

    def cell_for(self, index: int) -> VoronoiCell:
        """Cell owning nucleus ``index``, following merged duplicates."""
        return self.cells[self.aliases.get(index, index)]

    def neighbors(self, index: int) -> List[int]:
        return self.cell_for(index).neighbors

    @property
    def total_area(self) -> float:
        return sum(cell.area for cell in self.cells.values())

    def domain_ring(self) -> np.ndarray:
        vertices, _ = square_ring(self.origin, self.side, BOUNDARY)
        return vertices

    def transformed(self, scale: float, offset) -> "VoronoiDiagram":
        """
        Map the diagram through ``p -> p * scale + offset``.

        Args:
            scale: Uniform scale factor (must be positive)
            offset: Translation applied after scaling

        Returns:
            New diagram in the target coordinate system
        """
        offset = np.asarray(offset, dtype=float)
        return VoronoiDiagram(
            size=self.size,
            nuclei=self.nuclei * scale + offset,
            cells={i: cell.transformed(scale, offset) for i, cell in self.cells.items()},
            aliases=dict(self.aliases),
            origin=self.origin * scale + offset,
            side=self.side * scale,
        )


def merge_coincident_nuclei(nuclei: np.ndarray,
                            tolerance: float) -> Tuple[List[int], Dict[int, int]]:
    """
    Collapse nuclei closer than ``tolerance`` onto the lowest index.

    Args:
        nuclei: (n, 2) nucleus coordinates
        tolerance: Coincidence distance

    Returns:
        Tuple of (kept indices in ascending order, alias -> kept index)
    """
    n = len(nuclei)
    if n < 2:
        return list(range(n)), {}

    parent = list(range(n))

    def find(i: int) -> int:
        while parent[i] != i:
            parent[i] = parent[parent[i]]
            i = parent[i]
        return i

    tree = cKDTree(nuclei)
    for i, j in sorted(tree.query_pairs(r=tolerance)):
        root_i, root_j = find(i), find(j)
        if root_i != root_j:
            parent[max(root_i, root_j)] = min(root_i, root_j)

    aliases = {i: find(i) for i in range(n) if find(i) != i}
    kept = [i for i in range(n) if i not in aliases]

    if aliases:
        logger.warning("Merged coincident nuclei", merged=len(aliases), kept=len(kept))

    return kept, aliases


def build_cell(position: int, kept_points: np.ndarray, kept_indices: List[int],
               size: float, tolerance: float) -> VoronoiCell:
    """
    Intersect the domain square with the bisector half-planes of one nucleus.

    Other nuclei are visited nearest first with ties broken on (x, y), so
    cocircular configurations always resolve to the same topology. The loop
    stops as soon as a bisector lies beyond the farthest vertex of the cell.

    Args:
        position: Row of the nucleus in ``kept_points``
        kept_points: (m, 2) coordinates of the nuclei that own cells
        kept_indices: Original nucleus index for each row of ``kept_points``
        size: Side of the domain square
        tolerance: Minimum edge length kept in the ring

    Returns:
        VoronoiCell for the nucleus
    """
    site = kept_points[position]
    vertices, labels = square_ring((0.0, 0.0), size, BOUNDARY)

    delta = kept_points - site
    distance = np.hypot(delta[:, 0], delta[:, 1])
    order = np.lexsort((kept_points[:, 1], kept_points[:, 0], distance))

    for k in order:
        if k == position:
            continue
        reach = np.max(np.hypot(*(vertices - site).T))
        if distance[k] > 2.0 * reach:
            break
        normal = delta[k]
        midpoint = (site + kept_points[k]) / 2.0
        vertices, labels = clip_half_plane(
            vertices, labels, normal, float(normal @ midpoint), kept_indices[k]
        )
        vertices, labels = drop_short_edges(vertices, labels, tolerance)

    return VoronoiCell(
        index=kept_indices[position],
        nucleus=site.copy(),
        vertices=vertices,
        edge_labels=labels,
    )


def build_voronoi_cells(nuclei, size: float,
                        tolerance: Optional[float] = None) -> VoronoiDiagram:
    """
    Compute the Voronoi diagram of ``nuclei`` bounded to ``[0, size]^2``.

    Each cell is the domain square intersected with the half-planes closer to
    its nucleus than to every other nucleus. Worst case O(n^2).

    Args:
        nuclei: (n, 2) nucleus coordinates inside the domain
        size: Side of the domain square
        tolerance: Coincidence distance, defaults to
            ``settings.merge_tolerance * size``

    Returns:
        VoronoiDiagram whose cells tile the domain square
    """
    if not size > 0:
        raise InvalidParameter("size", size, "must be > 0")

    nuclei = np.asarray(nuclei, dtype=float).reshape(-1, 2)
    if tolerance is None:
        tolerance = settings.merge_tolerance * size

    logger.info("Building Voronoi cells", nuclei=len(nuclei), size=size)

    kept_indices, aliases = merge_coincident_nuclei(nuclei, tolerance)
    kept_points = nuclei[kept_indices]

    cells = {}
    for position, index in enumerate(kept_indices):
        cells[index] = build_cell(position, kept_points, kept_indices, size, tolerance)

    diagram = VoronoiDiagram(size=size, nuclei=nuclei, cells=cells, aliases=aliases)

    logger.info("Voronoi cells built", cells=len(cells), area=round(diagram.total_area, 6))
    return diagram
