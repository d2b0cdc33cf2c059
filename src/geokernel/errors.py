"""Exceptions raised by the geokernel geometry routines.

Two failure classes exist.  ``InvalidInputError`` reports a broken
calling contract (wrong dimension, bad tolerance, malformed bounds).
``DegenerateGeometryError`` reports geometry that is intrinsically
unusable for the requested operation (fewer than three points for a
plane, a self-crossing polygon handed to the triangulator).

Both derive from ``ValueError`` so callers that already guard geometry
calls with ``except ValueError`` keep working.
"""


class GeometryError(ValueError):
    """Base class for all geokernel failures."""

    def __init__(self, message, details=None):
        super().__init__(message)
        self.details = details or {}


class InvalidInputError(GeometryError):
    """Exception raised when an argument violates a precondition."""


class DegenerateGeometryError(GeometryError):
    """Exception raised when geometry is too degenerate to process."""


__all__ = [
    'GeometryError',
    'InvalidInputError',
    'DegenerateGeometryError',
]
