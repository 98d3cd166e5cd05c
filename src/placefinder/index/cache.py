"""Load-once result cache serving page slices of the full place listing."""

from __future__ import annotations

import logging
import threading
from typing import Tuple

from placefinder.errors import InvalidPage
from placefinder.index.backend import SearchBackend
from placefinder.models import Document

LOGGER = logging.getLogger(__name__)


class ResultCache:
    """Holds the first full fetch of the backend and slices pages from it.

    The dataset is filled lazily on the first page request and never
    refreshed afterwards. A failed fill leaves the cache cold so a later
    request fetches again.
    """

    def __init__(self, backend: SearchBackend) -> None:
        self.backend = backend
        self._documents: Tuple[Document, ...] = ()
        self._filled = False
        self._lock = threading.Lock()
        self._stats_lock = threading.Lock()
        self._fills = 0
        self._hits = 0

    @property
    def is_warm(self) -> bool:
        return self._filled

    @property
    def total(self) -> int:
        return len(self._documents)

    def warm(self) -> int:
        """Fill the cache if it is still cold and return the dataset size."""
        return len(self._ensure_filled())

    def _count_hit(self) -> None:
        # the fill lock is never taken once warm, so hits get their own
        with self._stats_lock:
            self._hits += 1

    def _ensure_filled(self) -> Tuple[Document, ...]:
        if self._filled:
            self._count_hit()
            return self._documents

        with self._lock:
            # Another thread may have filled it while we waited.
            if self._filled:
                self._count_hit()
                return self._documents
            fetched = tuple(self.backend.fetch_all())
            self._fills += 1
            self._documents = fetched
            self._filled = True
            LOGGER.info("Result cache filled with %d places", len(fetched))
            return fetched

    def get_page(self, limit: int, offset: int) -> Tuple[Tuple[Document, ...], int]:
        """Return ``(items, total)`` for ``[offset, offset + limit)``.

        Raises :class:`InvalidPage` when the offset falls outside the dataset,
        including every offset on an empty dataset.
        """
        documents = self._ensure_filled()

        if offset < 0:
            raise InvalidPage(f"Invalid offset: {offset}")

        total = len(documents)
        if offset >= total:
            raise InvalidPage(f"Offset {offset} is out of range for {total} places")
        if offset + limit > total:
            limit = total - offset
        if limit < 0:
            raise InvalidPage(f"Invalid limit: {limit}")

        return documents[offset : offset + limit], total

    def stats(self) -> dict:
        """Cache state; every read is counted as exactly one fill or one hit."""
        with self._stats_lock:
            hits = self._hits
        return {
            "warm": self.is_warm,
            "size": self.total,
            "fills": self._fills,
            "hits": hits,
        }
