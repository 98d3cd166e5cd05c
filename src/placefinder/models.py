"""Core PlaceFinder data models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple


@dataclass(frozen=True, slots=True)
class Document:
    """Raw place record as stored in the search backend.

    Coordinates stay as strings here; typed views parse them on demand.
    """

    id: str
    score: float | None
    name: str = ""
    address: str = ""
    phone: str = ""
    lat: str = ""
    lon: str = ""

    @classmethod
    def from_hit(cls, hit: Mapping[str, Any]) -> "Document":
        """Build a document from an Elasticsearch-style ``_id/_score/_source`` hit."""
        source = hit.get("_source")
        if not isinstance(source, Mapping):
            source = {}
        location = source.get("location")
        if not isinstance(location, Mapping):
            # geo_point strings, arrays and geohashes are treated as unmapped
            location = {}
        score = hit.get("_score")
        return cls(
            id=str(hit.get("_id", "")),
            score=float(score) if score is not None else None,
            name=str(source.get("name", "")),
            address=str(source.get("address", "")),
            phone=str(source.get("phone", "")),
            lat=str(location.get("lat", "")),
            lon=str(location.get("lon", "")),
        )

    @property
    def fields(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "location": {"lat": self.lat, "lon": self.lon},
        }

    def parse_location(self) -> "Location":
        """Parse the string coordinates, raising ``ValueError`` on bad input."""
        return Location(lat=float(self.lat), lon=float(self.lon))


@dataclass(frozen=True, slots=True)
class Location:
    lat: float
    lon: float


@dataclass(frozen=True, slots=True)
class RecPlace:
    """Typed recommendation record."""

    id: int
    name: str
    address: str
    phone: str
    location: Location

    @classmethod
    def from_document(cls, document: Document) -> "RecPlace":
        """Parse a document; raises ``ValueError`` when id or coordinates are bad."""
        location = document.parse_location()
        return cls(
            id=int(document.id),
            name=document.name,
            address=document.address,
            phone=document.phone,
            location=location,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "location": {"lat": self.location.lat, "lon": self.location.lon},
        }


@dataclass(frozen=True, slots=True)
class Page:
    """Slice of the cached dataset."""

    items: Tuple[Document, ...]
    offset: int
    limit: int
    total: int
