"""Nucleus placement for the Voronoi lattice."""

import numpy as np
import structlog

from .errors import InvalidParameter
from .voronoi_cells import build_voronoi_cells

logger = structlog.get_logger()


def generate_sites(n: int, size: float, rng: np.random.Generator) -> np.ndarray:
    """
    Generate ``n`` nuclei uniformly distributed in ``[0, size]^2``.

    Coordinates are drawn as one (n, 2) block so the sequence only depends on
    the generator state, ``n`` and ``size``.

    Args:
        n: Number of nuclei (0 gives an empty array)
        size: Side of the square domain
        rng: Generator supplying the randomness

    Returns:
        Array of [x, y] nucleus coordinates
    """
    if n < 0:
        raise InvalidParameter("n", n)
    if not size > 0:
        raise InvalidParameter("size", size, "must be > 0")

    if n == 0:
        return np.empty((0, 2))

    sites = rng.uniform(0.0, size, size=(n, 2))
    logger.debug("Sites generated", count=n, size=size)
    return sites


def relax_sites(sites: np.ndarray, size: float, iterations: int = 1) -> np.ndarray:
    """Apply Lloyd's relaxation to even out nucleus spacing.

    Moves each nucleus to the centroid of its Voronoi cell. Merged duplicates
    follow the nucleus they were merged into.

    Args:
        sites: Nuclei to relax
        size: Side of the square domain
        iterations: Number of relaxation iterations

    Returns:
        Relaxed nucleus coordinates
    """
    if iterations < 0:
        raise InvalidParameter("relax_iterations", iterations)

    relaxed = np.array(sites, dtype=float).reshape(-1, 2)
    if iterations == 0 or len(relaxed) == 0:
        return relaxed

    logger.info("Starting Lloyd's relaxation", iterations=iterations, sites=len(relaxed))

    for iteration in range(iterations):
        diagram = build_voronoi_cells(relaxed, size)

        for index, cell in diagram.cells.items():
            relaxed[index] = np.clip(cell.centroid, 0.0, size)
        for alias, kept in diagram.aliases.items():
            relaxed[alias] = relaxed[kept]

        logger.debug(f"Relaxation iteration {iteration + 1} complete")

    return relaxed
