"""Inward offset of the border and the edging band it leaves."""

from typing import Optional

import structlog
from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry

from ..config import settings

logger = structlog.get_logger()


def inset_polygon(border: BaseGeometry, edging: float,
                  arc_segments: Optional[int] = None) -> BaseGeometry:
    """
    Offset the border inward by ``edging`` with a round join.

    Args:
        border: Prepared border polygon
        edging: Offset distance; values <= 0 return the border unchanged
        arc_segments: Segments per quarter circle, defaults to settings

    Returns:
        Inset polygon, empty when the offset swallows the whole border
    """
    if edging <= 0:
        return border

    arc_segments = arc_segments or settings.arc_segments
    inset = border.buffer(-edging, quad_segs=arc_segments, join_style="round")

    if inset.is_empty or inset.area <= 0:
        return Polygon()
    return inset


def border_band(border: BaseGeometry, edging: Optional[float] = None,
                arc_segments: Optional[int] = None) -> BaseGeometry:
    """
    Band of width ``edging`` running along the inside of the border.

    Where the border is narrower than twice the edging the inset vanishes
    and the band fills that part of the border completely.

    Args:
        border: Prepared border polygon
        edging: Band width; None or <= 0 means no band
        arc_segments: Segments per quarter circle, defaults to settings

    Returns:
        difference(border, inset), or an empty polygon when no band is requested
    """
    if edging is None or edging <= 0:
        return Polygon()

    inset = inset_polygon(border, edging, arc_segments)
    if inset.is_empty:
        logger.warning("Edging exceeds border half width, band covers the whole border",
                       edging=edging)
        return border

    band = border.difference(inset)
    logger.info("Border band generated", edging=edging, area=round(band.area, 6))
    return band
