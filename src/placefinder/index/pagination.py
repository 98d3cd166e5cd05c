"""Page-number parsing and navigation metadata over the result cache."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Tuple

from placefinder.errors import InvalidPage
from placefinder.index.cache import ResultCache
from placefinder.models import Document, Page

LOGGER = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10

_PAGE_PATTERN = re.compile(r"-?[0-9]+")


def parse_page(raw: str | None) -> int:
    """Parse a 1-based ``page`` query value; absent or empty means page 1."""
    if raw is None or raw == "":
        return 1
    if not _PAGE_PATTERN.fullmatch(raw):
        LOGGER.info("Rejected page parameter %r", raw)
        raise InvalidPage("Invalid page value")
    page = int(raw)
    if page < 0:
        LOGGER.info("Rejected negative page %d", page)
        raise InvalidPage(f"Invalid page value: '{page}'")
    return page


@dataclass(frozen=True, slots=True)
class PageView:
    """One listing page with the links needed to navigate around it."""

    page: Page
    current: int
    page_size: int
    total_pages: int
    prev_page: int | None
    next_page: int | None

    @property
    def items(self) -> Tuple[Document, ...]:
        return self.page.items

    @property
    def total(self) -> int:
        return self.page.total


def navigation(page: int, page_size: int, total: int) -> Tuple[int, int | None, int | None]:
    """Return ``(total_pages, prev_page, next_page)`` for a page number."""
    total_pages = math.ceil(total / page_size)
    prev_page = page - 1 if page > 1 else None
    next_page = page + 1 if page + 1 <= total_pages else None
    return total_pages, prev_page, next_page


class Paginator:
    """Maps page numbers onto cache offsets."""

    def __init__(self, cache: ResultCache, *, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self.cache = cache
        self.page_size = page_size

    def paginate(self, page: int = 1) -> PageView:
        if page < 0:
            raise InvalidPage(f"Invalid page value: '{page}'")
        offset = (page - 1) * self.page_size
        try:
            items, total = self.cache.get_page(self.page_size, offset)
        except InvalidPage as exc:
            raise InvalidPage(f"Invalid page value: '{page}'") from exc

        total_pages, prev_page, next_page = navigation(page, self.page_size, total)
        return PageView(
            page=Page(items=items, offset=offset, limit=len(items), total=total),
            current=page,
            page_size=self.page_size,
            total_pages=total_pages,
            prev_page=prev_page,
            next_page=next_page,
        )
