"""Central error types used across the application."""

from __future__ import annotations


class JourneyMapError(RuntimeError):
    """Base error for the journey map pipeline."""


class ConfigError(JourneyMapError):
    """Raised when required configuration (credentials) is missing or invalid."""


class StravaAPIError(JourneyMapError):
    """Base error for Strava API failures."""


class StravaAuthError(StravaAPIError):
    """Raised when the token exchange fails or a request stays unauthorized."""


class StravaUnauthorizedError(StravaAuthError):
    """Raised for a single HTTP 401 response; callers may refresh and retry once."""


class StravaTransportError(StravaAPIError):
    """Raised for network, HTTP or payload failures unrelated to authentication."""


class StravaTimeoutError(StravaTransportError):
    """Raised when a fetch runs past its overall deadline."""


class StravaResourceNotFoundError(StravaAPIError):
    """Raised when an activity does not exist."""


class PolylineDecodeError(ValueError):
    """Raised when an encoded polyline is malformed."""


__all__ = [
    "JourneyMapError",
    "ConfigError",
    "StravaAPIError",
    "StravaAuthError",
    "StravaUnauthorizedError",
    "StravaTransportError",
    "StravaTimeoutError",
    "StravaResourceNotFoundError",
    "PolylineDecodeError",
]
