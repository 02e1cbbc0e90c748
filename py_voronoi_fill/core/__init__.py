"""
Core pattern generation functionality.
"""

from .errors import VoronoiFillError, InvalidPolygon, InvalidBoundingBox, InvalidParameter
from .geometry import Point2D, BoundingBox
from .sites import generate_sites, relax_sites
from .voronoi_cells import BOUNDARY, VoronoiCell, VoronoiDiagram, build_voronoi_cells
from .cell_renderer import RenderedLattice, render_lattice
from .clipper import prepare_border, clip_lattice
from .border_inset import inset_polygon, border_band
from .composer import FinalPattern, PatternParameters, normalize_bbox, domain_transform, fill_polygon_with_voronoi

__all__ = ['VoronoiFillError', 'InvalidPolygon', 'InvalidBoundingBox', 'InvalidParameter',
           'Point2D', 'BoundingBox', 'generate_sites', 'relax_sites',
           'BOUNDARY', 'VoronoiCell', 'VoronoiDiagram', 'build_voronoi_cells',
           'RenderedLattice', 'render_lattice', 'prepare_border', 'clip_lattice',
           'inset_polygon', 'border_band', 'FinalPattern', 'PatternParameters',
           'normalize_bbox', 'domain_transform', 'fill_polygon_with_voronoi']
