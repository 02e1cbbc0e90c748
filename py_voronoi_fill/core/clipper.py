"""
Clipping of the rendered lattice against the target border polygon.

Boolean operations run on GEOS overlay through shapely, which handles
concave borders of either winding. Borders with holes are not supported.
"""

from typing import Sequence

import numpy as np
import structlog
from shapely import STRtree
from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.geometry.polygon import orient
from shapely.ops import unary_union
from shapely.validation import explain_validity, make_valid

from ..config import settings
from .cell_renderer import RenderedLattice
from .errors import InvalidPolygon
from .geometry import polygon_parts

logger = structlog.get_logger()


def _oriented(geometry: BaseGeometry) -> BaseGeometry:
    parts = [orient(part, sign=1.0) for part in polygon_parts(geometry)]
    if len(parts) == 1:
        return parts[0]
    return MultiPolygon(parts)


def prepare_border(points: Sequence[Sequence[float]]) -> BaseGeometry:
    """
    Validate a border point sequence and build its polygon.

    Any winding is accepted; the result is counter-clockwise. A closing point
    equal to the first one is allowed. Self-intersecting borders are repaired
    into their polygonal parts unless ``settings.strict_border`` is set.

    Args:
        points: Ordered [x, y] border vertices

    Returns:
        Polygon (or MultiPolygon after repairing a self-intersection)

    Raises:
        InvalidPolygon: Fewer than 3 distinct points, zero area, or a
            self-intersection that is rejected or cannot be repaired
    """
    try:
        coords = np.asarray(points, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidPolygon(f"Border must be a sequence of (x, y) points: {exc}") from exc

    if coords.ndim != 2 or coords.shape[1] != 2:
        raise InvalidPolygon("Border must be a sequence of (x, y) points")
    if not np.all(np.isfinite(coords)):
        raise InvalidPolygon("Border coordinates must be finite")

    distinct = np.unique(coords, axis=0)
    if len(distinct) < 3:
        raise InvalidPolygon(f"Border needs at least 3 distinct points, got {len(distinct)}")

    polygon = Polygon(coords)
    extent = np.ptp(coords, axis=0)
    area_floor = 1e-12 * float(extent @ extent)

    if polygon.is_valid:
        if polygon.area <= area_floor:
            raise InvalidPolygon("Border is degenerate (zero area)")
        return _oriented(polygon)

    reason = explain_validity(polygon)
    repaired = unary_union(polygon_parts(make_valid(polygon)))
    if repaired.is_empty or repaired.area <= area_floor:
        raise InvalidPolygon(f"Border is degenerate (zero area): {reason}")
    if settings.strict_border:
        raise InvalidPolygon(f"Border is self-intersecting: {reason}")
    if any(len(part.interiors) for part in polygon_parts(repaired)):
        raise InvalidPolygon(f"Border repair produced holes: {reason}")

    logger.warning("Repaired self-intersecting border", reason=reason,
                   parts=len(polygon_parts(repaired)), area=repaired.area)
    return _oriented(repaired)


def clip_lattice(border: BaseGeometry, lattice: RenderedLattice) -> BaseGeometry:
    """
    Cut the lattice openings out of the border polygon.

    Computes difference(border, openings). A lattice without cells has no
    walls, so the result is empty in that case.

    Args:
        border: Prepared border polygon
        lattice: Rendered lattice in the border's coordinate system

    Returns:
        Lattice walls inside the border
    """
    if lattice.is_empty:
        logger.info("Empty lattice, no walls to clip")
        return Polygon()

    openings = polygon_parts(lattice.openings)
    if not openings:
        return border

    tree = STRtree(openings)
    hits = tree.query(border, predicate="intersects")
    cutting = unary_union([openings[i] for i in sorted(hits)])

    walls = border.difference(cutting)

    logger.info("Lattice clipped", openings=len(openings), cutting=len(hits),
                wall_area=round(walls.area, 6))
    return walls
