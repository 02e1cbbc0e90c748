"""Exceptions raised by the pattern pipeline."""

from typing import Any


class VoronoiFillError(ValueError):
    """Base class for all pattern generation errors."""


class InvalidPolygon(VoronoiFillError):
    """Border polygon is too small, degenerate or cannot be clipped."""


class InvalidBoundingBox(VoronoiFillError):
    """Bounding box has no extent, so no scale factor can be derived."""


class InvalidParameter(VoronoiFillError):
    """A numeric style parameter is out of range.

    The offending field is available as ``field`` and the rejected value as
    ``value`` so callers can report it without parsing the message.
    """

    def __init__(self, field: str, value: Any, reason: str = "must be >= 0"):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid parameter '{field}' = {value!r}: {reason}")
