"""
Pattern composition: fill a border polygon with a clipped Voronoi lattice.

This module wires the pipeline together:
1. Normalize the bounding box and derive the domain -> world transform
2. Place nuclei in the square domain and build their Voronoi cells
3. Render the lattice openings in world coordinates
4. Clip the lattice against the border and add the edging band
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union

from ..config import settings
from ..utils.random import draw_seed, make_rng
from .border_inset import border_band
from .cell_renderer import render_lattice
from .clipper import clip_lattice, prepare_border
from .errors import InvalidBoundingBox, InvalidParameter
from .geometry import BoundingBox, Point2D
from .sites import generate_sites, relax_sites
from .voronoi_cells import build_voronoi_cells

logger = structlog.get_logger()


class PatternParameters(BaseModel):
    """Style parameters of a pattern run."""

    model_config = ConfigDict(frozen=True)

    n: int = Field(ge=0, description="Number of Voronoi nuclei")
    thickness: float = Field(ge=0, allow_inf_nan=False, description="Wall thickness")
    round_radius: float = Field(ge=0, allow_inf_nan=False,
                                description="Fillet radius of the cell openings")
    edging: Optional[float] = Field(ge=0, allow_inf_nan=False,
                                    description="Border band width, None or 0 disables it")
    seed: Optional[int] = Field(None, ge=0, description="Seed for nucleus placement")
    relax_iterations: int = Field(0, ge=0, description="Lloyd relaxation iterations")


@dataclass
class FinalPattern:
    """Border polygon minus the lattice openings, plus the edging band."""
    geometry: BaseGeometry
    walls: BaseGeometry
    band: BaseGeometry
    border: BaseGeometry
    bbox: BoundingBox
    seed: int
    parameters: PatternParameters

    @property
    def area(self) -> float:
        return self.geometry.area

    @property
    def is_empty(self) -> bool:
        return self.geometry.is_empty


def normalize_bbox(corner_a: Sequence[float], corner_b: Sequence[float]) -> BoundingBox:
    """
    Build a bounding box with min <= max per axis from two corners.

    Args:
        corner_a: Any corner [x, y]
        corner_b: The opposite corner [x, y]

    Returns:
        Normalized BoundingBox

    Raises:
        InvalidBoundingBox: Corners coincide or are not finite
    """
    a = np.asarray(corner_a, dtype=float).reshape(-1)
    b = np.asarray(corner_b, dtype=float).reshape(-1)
    if a.shape != (2,) or b.shape != (2,):
        raise InvalidBoundingBox("Bounding box corners must be (x, y) pairs")
    if not (np.all(np.isfinite(a)) and np.all(np.isfinite(b))):
        raise InvalidBoundingBox("Bounding box corners must be finite")
    if np.array_equal(a, b):
        raise InvalidBoundingBox(f"Bounding box corners coincide at {tuple(a)}")

    low = np.minimum(a, b)
    high = np.maximum(a, b)
    return BoundingBox(Point2D(float(low[0]), float(low[1])),
                       Point2D(float(high[0]), float(high[1])))


def domain_transform(bbox: BoundingBox, size: float) -> Tuple[float, np.ndarray]:
    """
    Uniform scale and translation mapping ``[0, size]^2`` onto the bbox.

    The square is scaled to the longest bbox side and centred on the bbox
    centre, so it covers the whole box.

    Returns:
        Tuple of (scale, offset) for ``p -> p * scale + offset``
    """
    scale = bbox.longest_side / size
    center = np.array(bbox.center)
    offset = center - scale * np.array([size / 2.0, size / 2.0])
    return scale, offset


def _validate_parameters(**values) -> PatternParameters:
    try:
        return PatternParameters(**values)
    except ValidationError as exc:
        error = exc.errors()[0]
        field_name = str(error["loc"][0]) if error["loc"] else "parameters"
        raise InvalidParameter(field_name, values.get(field_name), error["msg"]) from exc


def fill_polygon_with_voronoi(border: Sequence[Sequence[float]],
                              bbox: Optional[Sequence[Sequence[float]]] = None,
                              n: int = settings.default_n,
                              thickness: float = settings.default_thickness,
                              round_radius: float = settings.default_round,
                              edging: Optional[float] = settings.default_edging,
                              seed: Optional[int] = None,
                              relax_iterations: int = 0) -> FinalPattern:
    """
    Fill a polygon with a Voronoi lattice clipped to its boundary.

    Args:
        border: Ordered [x, y] vertices of the target polygon (>= 3, no holes)
        bbox: Two opposite corners of the area the lattice spans, in any
            order; defaults to the border's bounds
        n: Number of Voronoi nuclei
        thickness: Wall thickness between cells
        round_radius: Fillet radius of the cell openings
        edging: Width of the band along the border; None or 0 disables it
        seed: Seed for nucleus placement; drawn from entropy when None
        relax_iterations: Lloyd relaxation passes applied to the nuclei

    Returns:
        FinalPattern holding the resulting region and its parts

    Raises:
        InvalidPolygon, InvalidBoundingBox, InvalidParameter
    """
    params = _validate_parameters(
        n=n, thickness=thickness, round_radius=round_radius, edging=edging,
        seed=seed, relax_iterations=relax_iterations,
    )

    border_geometry = prepare_border(border)
    if bbox is None:
        min_x, min_y, max_x, max_y = border_geometry.bounds
        box = normalize_bbox((min_x, min_y), (max_x, max_y))
    else:
        if len(bbox) != 2:
            raise InvalidBoundingBox("Bounding box must be given as two corners")
        box = normalize_bbox(bbox[0], bbox[1])

    run_seed = params.seed if params.seed is not None else draw_seed()
    size = settings.domain_size

    logger.info("Generating Voronoi pattern", n=params.n, thickness=params.thickness,
                round_radius=params.round_radius, edging=params.edging, seed=run_seed)

    rng = make_rng(run_seed)
    nuclei = generate_sites(params.n, size, rng)
    if params.relax_iterations:
        nuclei = relax_sites(nuclei, size, params.relax_iterations)

    diagram = build_voronoi_cells(nuclei, size)
    scale, offset = domain_transform(box, size)
    lattice = render_lattice(diagram.transformed(scale, offset), params.thickness,
                             params.round_radius)

    walls = clip_lattice(border_geometry, lattice)
    band = border_band(border_geometry, params.edging)
    parts = [part for part in (walls, band) if not part.is_empty]
    geometry = unary_union(parts) if parts else Polygon()

    logger.info("Voronoi pattern generated", area=round(geometry.area, 6),
                border_area=round(border_geometry.area, 6))

    return FinalPattern(
        geometry=geometry,
        walls=walls,
        band=band,
        border=border_geometry,
        bbox=box,
        seed=run_seed,
        parameters=params,
    )
