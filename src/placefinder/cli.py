"""Command line interface for PlaceFinder."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from placefinder.auth.tokens import TokenService
from placefinder.config import AppConfig
from placefinder.errors import PlaceFinderError
from placefinder.index.backend import ElasticsearchBackend
from placefinder.index.cache import ResultCache
from placefinder.index.memory import MemoryBackend
from placefinder.index.pagination import Paginator
from placefinder.index.recommend import RecommendationRanker
from placefinder.web.app import create_app

console = Console()
app = typer.Typer(help="PlaceFinder - paginated places and nearest recommendations")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8888, help="Server port"),
    es_url: Optional[str] = typer.Option(None, "--es-url", help="Elasticsearch URL"),
    index: Optional[str] = typer.Option(None, "--index", help="Elasticsearch index name"),
    auth: bool = typer.Option(False, "--auth", "-a", help="Require a token for recommendations"),
    warm: bool = typer.Option(False, "--warm", help="Load the listing cache before serving"),
    data: Optional[Path] = typer.Option(
        None,
        "--data",
        exists=True,
        dir_okay=False,
        help="Serve places from a JSON file of search hits instead of Elasticsearch",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Start the HTTP server."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - defensive
        raise typer.BadParameter(
            "uvicorn is not installed. Install it with \"python -m pip install uvicorn\""
        ) from exc

    _setup_logging(verbose)
    config = AppConfig.from_env(es_url=es_url, index=index, auth=auth or None)
    if data is not None:
        try:
            backend = MemoryBackend.from_json(data)
        except ValueError as exc:
            console.print(f"[red]Could not load {data}: {exc}[/red]")
            raise typer.Exit(code=1)
        web_app = create_app(config, backend)
        source = str(data)
    else:
        web_app = create_app(config)
        source = f"{config.es_url}/{config.index}"

    if warm:
        try:
            size = web_app.state.cache.warm()
        except PlaceFinderError as exc:
            console.print(f"[yellow]Warning: could not load places: {exc}[/yellow]")
        else:
            console.print(f"Loaded {size} places from [bold]{source}[/bold]")

    mode = "with token auth" if config.auth else "without auth"
    console.print(f"Starting server on http://{host}:{port} ({mode})")
    uvicorn.run(web_app, host=host, port=port, reload=False, log_level="info")


@app.command()
def places(
    page: int = typer.Option(1, help="Page number (1-based)"),
    es_url: Optional[str] = typer.Option(None, "--es-url", help="Elasticsearch URL"),
    index: Optional[str] = typer.Option(None, "--index", help="Elasticsearch index name"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Show one page of the place listing."""
    _setup_logging(verbose)
    config = AppConfig.from_env(es_url=es_url, index=index)
    backend = ElasticsearchBackend.from_config(config)
    paginator = Paginator(ResultCache(backend), page_size=config.page_size)
    try:
        view = paginator.paginate(page)
    except PlaceFinderError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    finally:
        backend.close()

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Address")
    table.add_column("Phone")
    for document in view.items:
        table.add_row(document.id, document.name, document.address, document.phone)

    console.print(table)
    console.print(f"Page {view.current} of {view.total_pages} ({view.total} places)")


@app.command()
def recommend(
    lat: float = typer.Option(AppConfig().default_lat, help="Latitude"),
    lon: float = typer.Option(AppConfig().default_lon, help="Longitude"),
    k: int = typer.Option(AppConfig().rec_limit, help="Number of places"),
    es_url: Optional[str] = typer.Option(None, "--es-url", help="Elasticsearch URL"),
    index: Optional[str] = typer.Option(None, "--index", help="Elasticsearch index name"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Show the places closest to a coordinate."""
    _setup_logging(verbose)
    config = AppConfig.from_env(es_url=es_url, index=index)
    backend = ElasticsearchBackend.from_config(config)
    ranker = RecommendationRanker(backend, limit=config.rec_limit)
    try:
        results = ranker.recommend(lat, lon, k)
    except PlaceFinderError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    finally:
        backend.close()

    if not results:
        console.print("[yellow]No places found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Address")
    table.add_column("Phone")
    table.add_column("Location")
    for place in results:
        table.add_row(
            str(place.id),
            place.name,
            place.address,
            place.phone,
            f"{place.location.lat:.6f}, {place.location.lon:.6f}",
        )
    console.print(table)


@app.command()
def token(
    subject: str = typer.Option(AppConfig().token_subject, help="Token subject name"),
) -> None:
    """Print a freshly signed access token."""
    config = AppConfig.from_env()
    service = TokenService(config.secret_key, ttl=config.token_ttl)
    console.print(service.issue(subject), soft_wrap=True)
