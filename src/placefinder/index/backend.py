"""Search backend contract and the Elasticsearch implementation."""

from __future__ import annotations

import logging
from typing import Any, List, Protocol

import httpx

from placefinder.config import AppConfig
from placefinder.errors import BackendFailure
from placefinder.models import Document

LOGGER = logging.getLogger(__name__)


class SearchBackend(Protocol):
    """Narrow query contract the listing and recommendation layers rely on."""

    def fetch_all(self) -> List[Document]:
        """Return every stored place in backend order."""
        ...

    def nearest(self, lat: float, lon: float, k: int) -> List[Document]:
        """Return up to ``k`` places sorted by ascending arc distance in km."""
        ...


def match_all_query() -> dict[str, Any]:
    return {"query": {"match_all": {}}}


def geo_distance_query(lat: float, lon: float, k: int) -> dict[str, Any]:
    """Nearest-first query; documents without a mapped location are skipped."""
    return {
        "size": k,
        "sort": [
            {
                "_geo_distance": {
                    "location": {"lat": lat, "lon": lon},
                    "order": "asc",
                    "unit": "km",
                    "mode": "min",
                    "distance_type": "arc",
                    "ignore_unmapped": True,
                }
            }
        ],
    }


class ElasticsearchBackend:
    """Blocking Elasticsearch client speaking the ``_search`` REST API."""

    def __init__(
        self,
        url: str,
        *,
        index: str = "places",
        fetch_size: int = 20000,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.index = index
        self.fetch_size = fetch_size
        self._client = client or httpx.Client(base_url=self.url, timeout=timeout)

    @classmethod
    def from_config(cls, config: AppConfig) -> "ElasticsearchBackend":
        return cls(
            config.es_url,
            index=config.index,
            fetch_size=config.fetch_size,
            timeout=config.timeout,
        )

    def close(self) -> None:
        self._client.close()

    def fetch_all(self) -> List[Document]:
        return self._search(match_all_query(), params={"size": self.fetch_size})

    def nearest(self, lat: float, lon: float, k: int) -> List[Document]:
        return self._search(geo_distance_query(lat, lon, k))

    def _search(self, body: dict[str, Any], params: dict[str, Any] | None = None) -> List[Document]:
        try:
            response = self._client.post(f"/{self.index}/_search", json=body, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            LOGGER.error("Search request to %s/%s failed: %s", self.url, self.index, exc)
            raise BackendFailure("Search backend request failed") from exc
        except ValueError as exc:
            LOGGER.error("Search backend returned invalid JSON: %s", exc)
            raise BackendFailure("Search backend returned an invalid response") from exc

        try:
            hits = payload["hits"]["hits"]
        except (KeyError, TypeError) as exc:
            raise BackendFailure("Search backend response has no hits") from exc
        return [Document.from_hit(hit) for hit in hits]
