"""Shared fixtures for PlaceFinder tests."""

from __future__ import annotations

from typing import Callable, List

import pytest

from placefinder.models import Document


def _make_document(
    doc_id: int | str,
    *,
    lat: str = "55.75",
    lon: str = "37.61",
    name: str | None = None,
) -> Document:
    return Document(
        id=str(doc_id),
        score=1.0,
        name=name or f"Place {doc_id}",
        address=f"Street {doc_id}",
        phone=f"+7 495 {doc_id}",
        lat=lat,
        lon=lon,
    )


@pytest.fixture
def make_document() -> Callable[..., Document]:
    return _make_document


@pytest.fixture
def documents_25() -> List[Document]:
    return [_make_document(i) for i in range(25)]
