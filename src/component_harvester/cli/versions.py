"""Version selection commands."""

from typing import List

import typer
from rich.markup import escape

from ..exceptions import HarvesterError
from ..versions import aggregate_versions, get_latest_version
from ._common import console, err_console

versions_app = typer.Typer(help="Pick or combine component versions", add_completion=False)


@versions_app.command("latest")
def latest(versions: List[str] = typer.Argument(..., help="Candidate versions")):
    """Print the latest version, preferring releases over pre-releases."""
    try:
        result = get_latest_version(list(versions))
    except HarvesterError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    console.print(result)


@versions_app.command("aggregate")
def aggregate(
    versions: List[str] = typer.Argument(..., help="Dotted version triples to add together"),
    base: str = typer.Option("0.0.0", "--base", "-b", help="Starting version"),
):
    """Print the component-wise sum of dotted version triples."""
    try:
        result = aggregate_versions(list(versions), "Invalid version", base=base)
    except HarvesterError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    console.print(result)
