"""Command line entry point: print a Voronoi pattern as WKT or GeoJSON."""

import argparse
import json
import sys
from typing import List, Optional, Tuple

import structlog
from shapely.geometry import mapping

from .config import settings
from .core import VoronoiFillError, fill_polygon_with_voronoi
from .logging_config import configure_logging

logger = structlog.get_logger()


def parse_points(text: str) -> List[Tuple[float, float]]:
    """Parse ``"x,y x,y ..."`` into a list of coordinate pairs."""
    points = []
    for token in text.split():
        try:
            x, y = token.split(",")
            points.append((float(x), float(y)))
        except ValueError as exc:
            raise argparse.ArgumentTypeError(f"Invalid point '{token}', expected x,y") from exc
    return points


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="py-voronoi-fill",
        description="Fill a polygon with a Voronoi lattice clipped to its border",
    )
    parser.add_argument("--border", type=parse_points, required=True,
                        help='Border vertices, e.g. "0,0 100,0 100,60 0,60"')
    parser.add_argument("--bbox", type=parse_points,
                        help='Two bounding box corners, e.g. "0,0 100,60" (defaults to border bounds)')
    parser.add_argument("-n", type=int, default=settings.default_n, help="Number of nuclei")
    parser.add_argument("--thickness", type=float, default=settings.default_thickness,
                        help="Wall thickness")
    parser.add_argument("--round", dest="round_radius", type=float,
                        default=settings.default_round, help="Fillet radius of cell openings")
    parser.add_argument("--edging", type=float, default=settings.default_edging,
                        help="Border band width (0 disables it)")
    parser.add_argument("--seed", type=int, help="Seed for reproducible output")
    parser.add_argument("--relax", type=int, default=0, help="Lloyd relaxation iterations")
    parser.add_argument("--format", choices=["wkt", "geojson"], default="wkt",
                        help="Output format")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main function."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    try:
        pattern = fill_polygon_with_voronoi(
            args.border,
            args.bbox,
            n=args.n,
            thickness=args.thickness,
            round_radius=args.round_radius,
            edging=args.edging,
            seed=args.seed,
            relax_iterations=args.relax,
        )
    except VoronoiFillError as exc:
        logger.error("Pattern generation failed", error=str(exc))
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.format == "geojson":
        print(json.dumps(mapping(pattern.geometry)))
    else:
        print(pattern.geometry.wkt)

    logger.info("Pattern written", seed=pattern.seed, area=round(pattern.area, 6))
    return 0


if __name__ == "__main__":
    sys.exit(main())
