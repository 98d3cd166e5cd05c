"""FastAPI application serving the place listing and recommendations."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel

from placefinder.auth.tokens import TokenClaims, TokenService
from placefinder.config import AppConfig
from placefinder.errors import PlaceFinderError, Unauthorized
from placefinder.index.backend import ElasticsearchBackend, SearchBackend
from placefinder.index.cache import ResultCache
from placefinder.index.pagination import Paginator, parse_page
from placefinder.index.recommend import RecommendationRanker, parse_coordinate
from placefinder.models import Document
from placefinder.web.frontend import render_listing

LOGGER = logging.getLogger(__name__)


class PlaceLocation(BaseModel):
    lat: float
    lon: float


class ListedPlace(BaseModel):
    id: str
    name: str
    address: str
    phone: str
    location: PlaceLocation


class PlaceListing(BaseModel):
    name: str = "Places"
    total: int
    places: List[ListedPlace]


class RecommendedPlace(BaseModel):
    id: int
    name: str
    address: str
    phone: str
    location: PlaceLocation


class Recommendation(BaseModel):
    name: str = "Recommendation"
    places: List[RecommendedPlace]


class TokenResponse(BaseModel):
    token: str


def place_to_json(document: Document) -> Dict[str, Any] | None:
    """Listing representation of a document, or ``None`` if its location is bad."""
    try:
        location = document.parse_location()
    except ValueError:
        LOGGER.debug("Dropping place %r with unparseable location", document.id)
        return None
    return {
        "id": document.id,
        "name": document.name,
        "address": document.address,
        "phone": document.phone,
        "location": {"lat": location.lat, "lon": location.lon},
    }


def require_token(request: Request) -> TokenClaims:
    """Gate a route on a valid bearer token; claims live on ``request.state``."""
    tokens: TokenService = request.app.state.tokens
    claims = tokens.verify_header(request.headers.get("Authorization"))
    request.state.claims = claims
    return claims


def create_app(config: AppConfig | None = None, backend: SearchBackend | None = None) -> FastAPI:
    config = config or AppConfig.from_env()
    backend = backend if backend is not None else ElasticsearchBackend.from_config(config)

    app = FastAPI(title="PlaceFinder", version="0.1.0")
    app.state.config = config
    app.state.backend = backend
    app.state.cache = ResultCache(backend)
    app.state.paginator = Paginator(app.state.cache, page_size=config.page_size)
    app.state.ranker = RecommendationRanker(backend, limit=config.rec_limit)
    app.state.tokens = TokenService(config.secret_key, ttl=config.token_ttl)

    @app.on_event("startup")
    async def startup_event() -> None:
        logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        close = getattr(backend, "close", None)
        if callable(close):
            close()

    @app.exception_handler(PlaceFinderError)
    async def placefinder_error_handler(request: Request, exc: PlaceFinderError) -> JSONResponse:
        if exc.status_code >= 500:
            LOGGER.error("%s %s failed: %s", request.method, request.url.path, exc)
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
        return JSONResponse({"detail": str(exc)}, status_code=exc.status_code, headers=headers)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    if config.auth:

        @app.get("/api/get_token", response_model=TokenResponse)
        def get_token() -> TokenResponse:
            return TokenResponse(token=app.state.tokens.issue(config.token_subject))

    def recommend(lat: str | None = None, lon: str | None = None) -> Recommendation:
        lat_value = parse_coordinate(lat, config.default_lat, "lat")
        lon_value = parse_coordinate(lon, config.default_lon, "lon")
        places = app.state.ranker.recommend(lat_value, lon_value)
        return Recommendation(places=[place.to_dict() for place in places])

    app.add_api_route(
        "/api/recommend",
        recommend,
        methods=["GET"],
        response_model=Recommendation,
        dependencies=[Depends(require_token)] if config.auth else None,
    )

    @app.get("/api/{rest:path}", response_model=PlaceListing)
    def list_places_json(rest: str, page: str | None = None) -> PlaceListing:
        view = app.state.paginator.paginate(parse_page(page))
        places: List[Dict[str, Any]] = []
        for document in view.items:
            place = place_to_json(document)
            if place is not None:
                places.append(place)
        return PlaceListing(total=view.total, places=places)

    @app.get("/", response_class=HTMLResponse)
    def list_places_html(page: str | None = None) -> HTMLResponse:
        view = app.state.paginator.paginate(parse_page(page))
        return HTMLResponse(content=render_listing(view))

    return app


app = create_app()
