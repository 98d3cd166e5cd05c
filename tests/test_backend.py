"""Tests for the Elasticsearch search backend."""

from __future__ import annotations

import json
from typing import Any, Callable, List

import httpx
import pytest

from placefinder.config import AppConfig
from placefinder.errors import BackendFailure
from placefinder.index.backend import ElasticsearchBackend, geo_distance_query, match_all_query
from placefinder.index.cache import ResultCache
from placefinder.index.recommend import RecommendationRanker


def _hit(doc_id: str, lat: str = "55.7", lon: str = "37.6", score: float | None = 1.0) -> dict:
    return {
        "_index": "places",
        "_id": doc_id,
        "_score": score,
        "_source": {
            "name": f"Place {doc_id}",
            "address": "Somewhere",
            "phone": "+7",
            "location": {"lat": lat, "lon": lon},
        },
    }


def _backend(handler: Callable[[httpx.Request], httpx.Response]) -> ElasticsearchBackend:
    client = httpx.Client(base_url="http://es:9200", transport=httpx.MockTransport(handler))
    return ElasticsearchBackend("http://es:9200", index="places", fetch_size=500, client=client)


class TestQueries:
    """Test query bodies."""

    def test_match_all(self) -> None:
        assert match_all_query() == {"query": {"match_all": {}}}

    def test_geo_distance(self) -> None:
        """Should sort ascending by arc distance in km, ignoring unmapped fields."""
        body = geo_distance_query(55.79, 37.57, 3)

        assert body["size"] == 3
        sort = body["sort"][0]["_geo_distance"]
        assert sort["location"] == {"lat": 55.79, "lon": 37.57}
        assert sort["order"] == "asc"
        assert sort["unit"] == "km"
        assert sort["mode"] == "min"
        assert sort["distance_type"] == "arc"
        assert sort["ignore_unmapped"] is True


class TestElasticsearchBackend:
    """Test ElasticsearchBackend requests and parsing."""

    def test_fetch_all(self) -> None:
        """Should post a match_all search with the fetch size."""
        seen: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"hits": {"hits": [_hit("1"), _hit("2")]}})

        documents = _backend(handler).fetch_all()

        assert [d.id for d in documents] == ["1", "2"]
        assert seen[0].method == "POST"
        assert seen[0].url.path == "/places/_search"
        assert seen[0].url.params["size"] == "500"
        assert json.loads(seen[0].content) == {"query": {"match_all": {}}}

    def test_nearest(self) -> None:
        """Should send the geo-distance sort and keep hit order."""
        bodies: List[Any] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            hits = [_hit("3", score=None), _hit("1", score=None)]
            return httpx.Response(200, json={"hits": {"hits": hits}})

        documents = _backend(handler).nearest(55.0, 37.0, 2)

        assert [d.id for d in documents] == ["3", "1"]
        assert documents[0].score is None
        assert bodies[0] == geo_distance_query(55.0, 37.0, 2)

    def test_http_error(self) -> None:
        """Non-2xx responses become BackendFailure."""
        backend = _backend(lambda request: httpx.Response(503, json={"error": "unavailable"}))

        with pytest.raises(BackendFailure):
            backend.fetch_all()

    def test_transport_error(self) -> None:
        """Connection failures become BackendFailure."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(BackendFailure):
            _backend(handler).nearest(1.0, 2.0, 3)

    def test_invalid_json(self) -> None:
        """Unparseable bodies become BackendFailure."""
        backend = _backend(lambda request: httpx.Response(200, content=b"<html>"))

        with pytest.raises(BackendFailure):
            backend.fetch_all()

    def test_missing_hits(self) -> None:
        """Responses without hits become BackendFailure."""
        backend = _backend(lambda request: httpx.Response(200, json={"took": 1}))

        with pytest.raises(BackendFailure):
            backend.fetch_all()

    def test_from_config(self) -> None:
        """Should take url, index and sizes from the config."""
        backend = ElasticsearchBackend.from_config(
            AppConfig(es_url="http://search:9200/", index="cafes", fetch_size=10)
        )
        try:
            assert backend.url == "http://search:9200"
            assert backend.index == "cafes"
            assert backend.fetch_size == 10
        finally:
            backend.close()


class TestNonObjectLocations:
    """Hits whose location is not a lat/lon object."""

    def _mixed_backend(self) -> ElasticsearchBackend:
        hits = [
            _hit("1"),
            {"_id": "2", "_score": 1.0, "_source": {"name": "Geohash", "location": "55.7,37.6"}},
            {"_id": "3", "_score": 1.0, "_source": {"name": "Array", "location": [37.6, 55.7]}},
        ]
        return _backend(lambda request: httpx.Response(200, json={"hits": {"hits": hits}}))

    def test_listing_keeps_total(self) -> None:
        """String and array locations load as unmapped documents."""
        documents, total = ResultCache(self._mixed_backend()).get_page(10, 0)

        assert total == 3
        assert [d.id for d in documents] == ["1", "2", "3"]
        assert (documents[1].lat, documents[1].lon) == ("", "")
        assert (documents[2].lat, documents[2].lon) == ("", "")

    def test_recommend_skips_unmapped(self) -> None:
        places = RecommendationRanker(self._mixed_backend()).recommend(55.7, 37.6)

        assert [place.id for place in places] == [1]
