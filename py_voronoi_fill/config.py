"""Configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="plain", description="Logging format (plain or json)")

    # Pattern defaults
    default_n: int = Field(default=30, ge=0, description="Default number of Voronoi nuclei")
    default_thickness: float = Field(default=1.7, ge=0, description="Default wall thickness")
    default_round: float = Field(default=1.0, ge=0, description="Default fillet radius")
    default_edging: float = Field(default=3.0, ge=0, description="Default border band width")

    # Geometry kernel
    domain_size: float = Field(
        default=100.0, gt=0, description="Side of the square domain nuclei are generated in"
    )
    arc_segments: int = Field(
        default=8, ge=1, description="Segments per quarter circle for fillets and round joins"
    )
    merge_tolerance: float = Field(
        default=1e-9, ge=0, description="Coincidence tolerance relative to the domain size"
    )
    max_wall_fraction: float = Field(
        default=0.9, gt=0, lt=1, description="Largest share of a cell's inradius a wall may take"
    )
    strict_border: bool = Field(
        default=False, description="Reject self-intersecting borders instead of repairing them"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "VFILL_"
        extra = "ignore"


# Instantiate singleton settings object
settings = Settings()
