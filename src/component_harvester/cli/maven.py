"""Resolve a local POM through its parent chain and print the harvested document."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from ..documents import Document
from ..engine import dispatch
from ..exceptions import HarvesterError
from ..handlers.maven import MavenExtract
from ..handlers.registry import HandlerRegistry
from ..manifest import parse_pom, pom_identity
from ..registries import LocalMavenRepository, MavenCentralClient
from ..request import HarvestRequest, ReprocessPolicy
from ..sources import GitHubSourceFinder, NullSourceFinder
from . import app
from ._common import err_console, print_json, resolve_config


async def _harvest_pom(settings, pom: Path, url: str, repository: Optional[Path], discover_source: bool) -> dict:
    fetcher = LocalMavenRepository(str(repository)) if repository else MavenCentralClient.from_config(settings)
    finder = GitHubSourceFinder.from_config(settings) if discover_source else NullSourceFinder()
    handler = MavenExtract(settings, fetcher=fetcher, source_finder=finder)
    request = HarvestRequest(
        "maven",
        url,
        policy=ReprocessPolicy(mode="always"),
        document=Document(location=str(pom)),
    )
    try:
        await dispatch(HandlerRegistry([handler]), request)
    finally:
        if isinstance(fetcher, MavenCentralClient):
            await fetcher.close()
        if isinstance(finder, GitHubSourceFinder):
            await finder.close()
    return {
        "document": request.document.to_dict(),
        "edges": [
            {"kind": edge.kind.value, "name": edge.name, "source": edge.source, "target": edge.target}
            for edge in request.edges
        ],
        "queued": [{"kind": item.kind, "url": item.url} for item in request.queued],
    }


@app.command()
def maven(
    pom: Path = typer.Argument(..., help="Path to the pom.xml to resolve", exists=True, dir_okay=False, readable=True),
    url: Optional[str] = typer.Option(
        None, "--url", "-u", help="Component URL (default: derived from the POM coordinates)"
    ),
    repository: Optional[Path] = typer.Option(
        None,
        "--repository",
        "-r",
        help="Resolve parents from a local Maven repository instead of Maven Central",
        file_okay=False,
    ),
    discover_source: bool = typer.Option(
        True, "--discover-source/--no-discover-source", help="Look up source repositories on GitHub"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file path (TOML format)", exists=True, dir_okay=False
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose (DEBUG) logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress all but ERROR logging"),
):
    """Resolve a Maven POM with its ancestors and print document, edges and queued work as JSON."""
    try:
        settings = resolve_config(config, verbose=verbose, quiet=quiet)
        if url is None:
            url = pom_identity(parse_pom(pom.read_text(encoding="utf-8"), pom), pom).to_url()
        result = asyncio.run(_harvest_pom(settings, pom, url, repository, discover_source))
    except HarvesterError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    print_json(result)
