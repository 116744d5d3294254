from __future__ import annotations


class GeocodeError(Exception):
    """Base error for geocode-mcp."""


class UpstreamError(GeocodeError):
    """Raised when the geocoding backend fails or answers with garbage."""


class ValidationError(GeocodeError):
    """Raised when input validation fails."""
