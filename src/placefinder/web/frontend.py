"""HTML rendering of the place listing."""

from __future__ import annotations

from functools import lru_cache

from jinja2 import Environment, PackageLoader, Template, select_autoescape

from placefinder.index.pagination import PageView


@lru_cache(maxsize=1)
def _environment() -> Environment:
    return Environment(
        loader=PackageLoader("placefinder.web", "templates"),
        autoescape=select_autoescape(["html"], default=True),
    )


def _load_template() -> Template:
    # compiled once, then served from the environment's template cache
    return _environment().get_template("index.html")


def render_listing(view: PageView) -> str:
    return _load_template().render(
        places=view.items,
        total=view.total,
        current=view.current,
        total_pages=view.total_pages,
        prev_page=view.prev_page,
        next_page=view.next_page,
    )
