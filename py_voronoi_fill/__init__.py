"""Fill arbitrary polygons with a clipped Voronoi lattice."""

from .core import (
    FinalPattern, InvalidBoundingBox, InvalidParameter, InvalidPolygon,
    VoronoiFillError, fill_polygon_with_voronoi,
)

__version__ = "0.1.0"

__all__ = ['FinalPattern', 'InvalidBoundingBox', 'InvalidParameter', 'InvalidPolygon',
           'VoronoiFillError', 'fill_polygon_with_voronoi']
