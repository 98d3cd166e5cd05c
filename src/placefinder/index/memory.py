"""In-process place store with arc-distance ranking."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, List

import numpy as np

from placefinder.models import Document

LOGGER = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0088


def arc_distance_km(lat: float, lon: float, lats: np.ndarray, lons: np.ndarray) -> np.ndarray:
    """Great-circle distance from one point to many, in kilometers."""
    lat1 = np.radians(lat)
    lat2 = np.radians(lats)
    dlat = lat2 - lat1
    dlon = np.radians(lons) - np.radians(lon)
    a = np.sin(dlat / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))


class MemoryBackend:
    """Search backend over a fixed list of documents.

    Used for local runs without Elasticsearch and as a test double. Documents
    whose location does not parse are treated as unmapped and never returned
    by :meth:`nearest`.
    """

    def __init__(self, documents: Iterable[Document] = ()) -> None:
        self._documents: List[Document] = list(documents)
        self.fetch_calls = 0
        self.nearest_calls = 0

    @classmethod
    def from_json(cls, path: Path) -> "MemoryBackend":
        """Load documents from a file of search hits.

        The file holds either a saved Elasticsearch search response or a bare
        list of ``_id/_source`` hits.
        """
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        hits = data
        if isinstance(data, dict):
            outer = data.get("hits")
            hits = outer.get("hits") if isinstance(outer, dict) else None
        if not isinstance(hits, list):
            raise ValueError(f"No search hits found in {path}")
        documents = [Document.from_hit(hit) for hit in hits if isinstance(hit, dict)]
        LOGGER.info("Loaded %d places from %s", len(documents), path)
        return cls(documents)

    def add(self, document: Document) -> None:
        self._documents.append(document)

    def fetch_all(self) -> List[Document]:
        self.fetch_calls += 1
        return list(self._documents)

    def nearest(self, lat: float, lon: float, k: int) -> List[Document]:
        self.nearest_calls += 1
        mapped: List[Document] = []
        coords: List[tuple[float, float]] = []
        for document in self._documents:
            try:
                location = document.parse_location()
            except ValueError:
                LOGGER.debug("Skipping unmapped document %s", document.id)
                continue
            mapped.append(document)
            coords.append((location.lat, location.lon))

        if not mapped or k <= 0:
            return []

        points = np.asarray(coords, dtype="float64")
        distances = arc_distance_km(lat, lon, points[:, 0], points[:, 1])
        order = np.argsort(distances, kind="stable")[:k]
        return [mapped[idx] for idx in order]
