"""
Lattice rendering: walls between Voronoi cells.

The lattice is represented by its openings. Every cell is shrunk by half the
wall thickness along the edges it shares with other cells and its corners are
filleted; the walls are whatever the openings leave of the domain. Edges on
the domain square are pushed outward instead, so walls only ever separate
two cells.
"""

import math
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import structlog
from scipy.optimize import linprog
from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union
from shapely.validation import explain_validity, make_valid

from ..config import settings
from .geometry import (
    as_multipolygon, clip_half_plane, drop_short_edges, polygon_area, polygon_parts, square_ring
)
from .voronoi_cells import BOUNDARY, VoronoiCell, VoronoiDiagram

logger = structlog.get_logger()

# Outward push of domain-boundary edges, as a fraction of the domain side
BOUNDARY_MARGIN = 0.01

# Largest share of an edge one fillet may consume, kept below half
FILLET_EDGE_SHARE = 0.5 * (1.0 - 1e-6)


@dataclass
class RenderedLattice:
    """Openings left between the lattice walls, in world coordinates."""
    openings: BaseGeometry
    domain: Polygon
    cell_count: int
    thickness: float
    round_radius: float

    @property
    def is_empty(self) -> bool:
        """True when there are no cells, hence no lattice at all."""
        return self.cell_count == 0

    @property
    def walls(self) -> BaseGeometry:
        if self.is_empty:
            return Polygon()
        return self.domain.difference(self.openings)


def _edge_normals(vertices: np.ndarray):
    edges = np.roll(vertices, -1, axis=0) - vertices
    lengths = np.hypot(edges[:, 0], edges[:, 1])
    keep = lengths > 0
    normals = np.column_stack([edges[keep, 1], -edges[keep, 0]]) / lengths[keep, None]
    return normals, vertices[keep]


def inscribed_radius(vertices: np.ndarray) -> float:
    """
    Radius of the largest circle inside a convex ring (Chebyshev radius).

    Solved as the linear program max r s.t. a_k . c + r <= b_k for the unit
    outward normal a_k of every edge.

    Args:
        vertices: (k, 2) counter-clockwise convex ring

    Returns:
        Inscribed circle radius (0 for degenerate rings)
    """
    if len(vertices) < 3:
        return 0.0

    normals, anchors = _edge_normals(vertices)
    bounds_b = np.einsum("ij,ij->i", normals, anchors)
    constraints = np.column_stack([normals, np.ones(len(normals))])

    result = linprog(
        c=[0.0, 0.0, -1.0],
        A_ub=constraints,
        b_ub=bounds_b,
        bounds=[(None, None), (None, None), (0, None)],
        method="highs",
    )
    if result.status != 0:
        # Area over semi-perimeter is exact for tangential polygons and a
        # lower bound on the Chebyshev radius in general.
        perimeter = float(np.sum(np.hypot(*(np.roll(vertices, -1, axis=0) - vertices).T)))
        estimate = 2.0 * abs(polygon_area(vertices)) / perimeter if perimeter > 0 else 0.0
        logger.warning("Inscribed circle solve failed", message=result.message,
                       estimate=estimate)
        return estimate

    return float(result.x[2])


def shrink_cell(cell: VoronoiCell, others: np.ndarray, half_thickness: float,
                margin: float):
    """
    Move shared edges inward and domain edges outward.

    Beyond the domain square the opening is also kept on its own side of the
    bisector with every other nucleus, so openings of neighbouring border
    cells cannot overlap outside the domain. Those cuts are not walls and
    are labelled ``BOUNDARY``.

    Args:
        cell: Voronoi cell in world coordinates
        others: (m, 2) nuclei of every other cell
        half_thickness: Inward shift of edges shared with other cells
        margin: Outward shift of edges on the domain square

    Returns:
        Tuple of (opening vertices, edge labels); labels follow the cell edge
        each side came from
    """
    vertices = cell.vertices
    lower = vertices.min(axis=0) - 2.0 * margin
    side = float(np.max(vertices.max(axis=0) - vertices.min(axis=0))) + 4.0 * margin
    ring, labels = square_ring(lower, side, BOUNDARY)

    normals, anchors = _edge_normals(vertices)
    edge_labels = [label for label, (start, end, _) in zip(cell.edge_labels, cell.edges())
                   if np.any(end != start)]

    for normal, anchor, label in zip(normals, anchors, edge_labels):
        shift = -half_thickness if label != BOUNDARY else margin
        ring, labels = clip_half_plane(ring, labels, normal, float(normal @ anchor) + shift, label)
        if len(ring) == 0:
            return ring, labels

    site = cell.nucleus
    delta = others - site
    distance = np.hypot(delta[:, 0], delta[:, 1])
    for k in np.argsort(distance, kind="stable"):
        reach = np.max(np.hypot(*(ring - site).T))
        if distance[k] > 2.0 * reach:
            break
        midpoint = (site + others[k]) / 2.0
        ring, labels = clip_half_plane(ring, labels, delta[k], float(delta[k] @ midpoint),
                                       BOUNDARY)

    return drop_short_edges(ring, labels, 1e-12 * max(side, 1.0))


def _drop_repeated_points(ring: np.ndarray, tolerance: float) -> np.ndarray:
    """Remove points coinciding with their successor, wrapping around."""
    if len(ring) < 2:
        return ring
    step = np.hypot(*(np.roll(ring, -1, axis=0) - ring).T)
    return ring[step > tolerance]


def fillet_corners(vertices: np.ndarray, labels: List[int], radius: float,
                   arc_segments: int) -> np.ndarray:
    """
    Round the corners of a convex opening between two shared edges.

    The tangent length of each fillet stays strictly below half the shorter
    adjacent edge, which lowers the effective radius on short edges and keeps
    neighbouring arcs apart. Arcs start and end on the exact tangent points.
    Corners touching a domain edge stay sharp.

    Args:
        vertices: (k, 2) counter-clockwise convex ring
        labels: Edge labels, ``labels[k]`` for the edge leaving vertex k
        radius: Requested fillet radius
        arc_segments: Segments per quarter circle

    Returns:
        (m, 2) ring with arcs substituted for the rounded corners
    """
    n = len(vertices)
    if radius <= 0 or n < 3:
        return vertices

    points = []
    for k in range(n):
        vertex = vertices[k]
        if labels[k - 1] == BOUNDARY or labels[k] == BOUNDARY:
            points.append(vertex)
            continue

        incoming = vertex - vertices[k - 1]
        outgoing = vertices[(k + 1) % n] - vertex
        len_in = math.hypot(*incoming)
        len_out = math.hypot(*outgoing)
        if len_in <= 0 or len_out <= 0:
            points.append(vertex)
            continue
        back = -incoming / len_in
        ahead = outgoing / len_out

        interior = math.acos(float(np.clip(back @ ahead, -1.0, 1.0)))
        if interior >= math.pi - 1e-9 or interior <= 1e-9:
            points.append(vertex)
            continue

        half_angle = interior / 2.0
        tangent = min(radius / math.tan(half_angle),
                      FILLET_EDGE_SHARE * min(len_in, len_out))
        effective = tangent * math.tan(half_angle)

        bisector = back + ahead
        bisector /= math.hypot(*bisector)
        center = vertex + bisector * (effective / math.sin(half_angle))

        start = vertex + back * tangent
        end = vertex + ahead * tangent
        start_angle = math.atan2(start[1] - center[1], start[0] - center[0])
        sweep = math.pi - interior
        steps = max(1, int(math.ceil(sweep / (math.pi / 2.0) * arc_segments)))

        points.append(start)
        for step in range(1, steps):
            angle = start_angle + sweep * step / steps
            points.append(center + effective * np.array([math.cos(angle), math.sin(angle)]))
        points.append(end)

    ring = np.array(points)
    extent = float(np.max(np.ptp(ring, axis=0)))
    return _drop_repeated_points(ring, 1e-12 * max(extent, 1.0))


def _valid_parts(ring: np.ndarray) -> List[Polygon]:
    if len(ring) < 3:
        return []
    opening = Polygon(ring)
    if not opening.is_valid:
        logger.debug("Repairing invalid opening", reason=explain_validity(opening))
        opening = make_valid(opening)
    return [part for part in polygon_parts(opening) if part.area > 0]


def render_lattice(diagram: VoronoiDiagram, thickness: float, round_radius: float,
                   arc_segments: Optional[int] = None) -> RenderedLattice:
    """
    Turn a Voronoi diagram into lattice openings.

    Args:
        diagram: Diagram in world coordinates
        thickness: Wall thickness; values <= 0 give zero-width walls
        round_radius: Fillet radius for opening corners; 0 keeps them sharp
        arc_segments: Segments per quarter circle, defaults to settings

    Returns:
        RenderedLattice with one opening per cell
    """
    arc_segments = arc_segments or settings.arc_segments
    half_thickness = max(thickness, 0.0) / 2.0
    radius = max(round_radius, 0.0)
    margin = BOUNDARY_MARGIN * diagram.side
    indices = sorted(diagram.cells)
    nuclei = np.array([diagram.cells[i].nucleus for i in indices]).reshape(-1, 2)

    logger.info("Rendering lattice", cells=len(diagram), thickness=thickness,
                round_radius=round_radius)

    openings = []
    clamped = 0
    for position, index in enumerate(indices):
        cell = diagram.cells[index]
        cell_half = half_thickness
        if cell_half > 0 and not all(label == BOUNDARY for label in cell.edge_labels):
            limit = settings.max_wall_fraction * inscribed_radius(cell.vertices)
            if cell_half > limit:
                cell_half = limit
                clamped += 1

        ring, labels = shrink_cell(cell, np.delete(nuclei, position, axis=0), cell_half, margin)
        if len(ring) < 3:
            continue
        ring = fillet_corners(ring, labels, radius, arc_segments)
        openings.extend(_valid_parts(ring))

    if clamped:
        logger.warning("Wall thickness clamped to fit cells", cells=clamped)

    domain = Polygon(diagram.domain_ring())
    lattice = RenderedLattice(
        openings=as_multipolygon(unary_union(openings)),
        domain=domain,
        cell_count=len(diagram),
        thickness=thickness,
        round_radius=round_radius,
    )

    logger.info("Lattice rendered", openings=len(openings),
                wall_area=round(lattice.walls.area, 6))
    return lattice
