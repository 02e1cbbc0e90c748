"""Planar geometry primitives shared by the pattern pipeline."""

from typing import List, NamedTuple, Sequence, Tuple

import numpy as np
from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry


class Point2D(NamedTuple):
    """Immutable 2D coordinate pair."""
    x: float
    y: float


class BoundingBox(NamedTuple):
    """Axis-aligned box given by its two corners.

    Only boxes produced by ``normalize_bbox`` are guaranteed to have
    ``min_corner <= max_corner`` componentwise.
    """
    min_corner: Point2D
    max_corner: Point2D

    @property
    def width(self) -> float:
        return self.max_corner.x - self.min_corner.x

    @property
    def height(self) -> float:
        return self.max_corner.y - self.min_corner.y

    @property
    def longest_side(self) -> float:
        return max(self.width, self.height)

    @property
    def center(self) -> Point2D:
        return Point2D((self.min_corner.x + self.max_corner.x) / 2.0,
                       (self.min_corner.y + self.max_corner.y) / 2.0)

    def is_normalized(self) -> bool:
        return (self.min_corner.x <= self.max_corner.x and
                self.min_corner.y <= self.max_corner.y)


def polygon_area(vertices: np.ndarray) -> float:
    """Signed shoelace area (positive for counter-clockwise rings)."""
    vertices = np.asarray(vertices, dtype=float)
    if len(vertices) < 3:
        return 0.0
    x, y = vertices[:, 0], vertices[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))


def polygon_centroid(vertices: np.ndarray) -> np.ndarray:
    """Compute the centroid of a polygon.

    Falls back to the vertex mean for degenerate rings.

    Args:
        vertices: Array of [x, y] vertex coordinates

    Returns:
        [x, y] centroid coordinates
    """
    vertices = np.asarray(vertices, dtype=float)
    if len(vertices) < 3:
        return np.mean(vertices, axis=0)

    x, y = vertices[:, 0], vertices[:, 1]
    x_next, y_next = np.roll(x, -1), np.roll(y, -1)
    cross = x * y_next - x_next * y
    area = 0.5 * np.sum(cross)

    if abs(area) < 1e-12:
        return np.mean(vertices, axis=0)

    cx = np.sum((x + x_next) * cross) / (6.0 * area)
    cy = np.sum((y + y_next) * cross) / (6.0 * area)
    return np.array([cx, cy])


def square_ring(origin: Sequence[float], side: float,
                label: int) -> Tuple[np.ndarray, List[int]]:
    """Counter-clockwise square with every edge carrying ``label``."""
    x0, y0 = float(origin[0]), float(origin[1])
    vertices = np.array([
        [x0, y0],
        [x0 + side, y0],
        [x0 + side, y0 + side],
        [x0, y0 + side],
    ])
    return vertices, [label] * 4


def clip_half_plane(vertices: np.ndarray, labels: List[int], normal: np.ndarray,
                    offset: float, label: int) -> Tuple[np.ndarray, List[int]]:
    """
    Clip a convex ring to the half-plane ``normal . p <= offset``.

    Sutherland-Hodgman against a single line. ``labels[k]`` tags the edge
    running from vertex k to vertex k+1; edges created along the clip line
    are tagged with ``label`` so callers can tell where each side came from.

    Args:
        vertices: (k, 2) counter-clockwise convex ring
        labels: Edge tags, one per vertex
        normal: Outward normal of the half-plane boundary
        offset: Boundary offset along ``normal``
        label: Tag for edges lying on the clip line

    Returns:
        Tuple of (clipped vertices, clipped labels); empty when nothing remains
    """
    if len(vertices) == 0:
        return vertices, labels

    distance = vertices @ normal - offset
    inside = distance <= 0.0
    if inside.all():
        return vertices, labels
    if not inside.any():
        return np.empty((0, 2)), []

    out_vertices = []
    out_labels = []
    n = len(vertices)
    for k in range(n):
        nk = (k + 1) % n
        if inside[k]:
            out_vertices.append(vertices[k])
            out_labels.append(labels[k])
            if not inside[nk]:
                t = distance[k] / (distance[k] - distance[nk])
                out_vertices.append(vertices[k] + t * (vertices[nk] - vertices[k]))
                out_labels.append(label)
        elif inside[nk]:
            t = distance[k] / (distance[k] - distance[nk])
            out_vertices.append(vertices[k] + t * (vertices[nk] - vertices[k]))
            out_labels.append(labels[k])

    return np.array(out_vertices), out_labels


def drop_short_edges(vertices: np.ndarray, labels: List[int],
                     tolerance: float) -> Tuple[np.ndarray, List[int]]:
    """Remove vertices that start an edge shorter than ``tolerance``."""
    points = [np.asarray(v, dtype=float) for v in vertices]
    tags = list(labels)
    k = 0
    while len(points) > 1 and k < len(points):
        nk = (k + 1) % len(points)
        if np.hypot(*(points[nk] - points[k])) <= tolerance:
            del points[k]
            del tags[k]
        else:
            k += 1

    if not points:
        return np.empty((0, 2)), []
    return np.array(points), tags


def polygon_parts(geometry: BaseGeometry) -> List[Polygon]:
    """Polygonal components of any shapely geometry, empty parts skipped."""
    if geometry is None or geometry.is_empty:
        return []
    if isinstance(geometry, Polygon):
        return [geometry]
    if hasattr(geometry, "geoms"):
        parts = []
        for part in geometry.geoms:
            parts.extend(polygon_parts(part))
        return parts
    return []


def as_multipolygon(geometry: BaseGeometry) -> MultiPolygon:
    """Wrap the polygonal parts of ``geometry`` in a MultiPolygon."""
    return MultiPolygon(polygon_parts(geometry))
