"""Nearest-place recommendations."""

from __future__ import annotations

import logging
import math
from typing import List

from placefinder.errors import InvalidCoordinate
from placefinder.index.backend import SearchBackend
from placefinder.models import RecPlace

LOGGER = logging.getLogger(__name__)

DEFAULT_LIMIT = 3


def parse_coordinate(raw: str | None, default: float, name: str) -> float:
    """Parse a ``lat``/``lon`` query value, falling back to ``default`` when absent."""
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise InvalidCoordinate(f"Invalid '{name}' parameter") from exc
    if not math.isfinite(value):
        raise InvalidCoordinate(f"Invalid '{name}' parameter")
    return value


class RecommendationRanker:
    """Turns backend nearest-neighbor hits into typed recommendations.

    Ordering is the backend's (ascending arc distance); hits whose id or
    coordinates fail to parse are dropped and the rest keep their order.
    """

    def __init__(self, backend: SearchBackend, *, limit: int = DEFAULT_LIMIT) -> None:
        self.backend = backend
        self.limit = limit

    def recommend(self, lat: float, lon: float, k: int | None = None) -> List[RecPlace]:
        k = self.limit if k is None else k
        documents = self.backend.nearest(lat, lon, k)
        places: List[RecPlace] = []
        for document in documents:
            try:
                places.append(RecPlace.from_document(document))
            except ValueError:
                LOGGER.debug("Dropping unparseable place %r", document.id)
        return places
