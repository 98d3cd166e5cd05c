"""Error kinds raised by the listing, recommendation and token layers."""

from __future__ import annotations


class PlaceFinderError(Exception):
    """Base class for errors surfaced to HTTP clients."""

    status_code: int = 500


class InvalidPage(PlaceFinderError):
    """Out-of-range or malformed page/offset."""

    status_code = 400


class InvalidCoordinate(PlaceFinderError):
    """Malformed latitude or longitude parameter."""

    status_code = 400


class Unauthorized(PlaceFinderError):
    """Missing, malformed, expired or forged access token."""

    status_code = 401


class BackendFailure(PlaceFinderError):
    """Search backend unreachable or returned an unusable response."""

    status_code = 500
