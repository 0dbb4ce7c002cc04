"""List the license-like files that would be attached for a folder."""

from pathlib import Path

import typer
from rich.table import Table

from ..attachments import attach_interestingly_named_files
from ..documents import Document
from . import app
from ._common import console, print_json


@app.command()
def attach(
    location: Path = typer.Argument(..., help="Component root folder", exists=True, file_okay=False),
    folder: str = typer.Option("", "--folder", "-f", help="Subfolder of LOCATION to search"),
    as_json: bool = typer.Option(False, "--json", help="Print the attachment index as JSON"),
):
    """Show license, notice and similar files found in LOCATION with their content tokens."""
    document = Document()
    attach_interestingly_named_files(document, location, folder)
    attachments = document.attachments or []

    if as_json:
        print_json(attachments)
        return

    if not attachments:
        console.print("[yellow]No license-like files found[/yellow]")
        return

    table = Table(title=f"Attachments in {location}")
    table.add_column("Path", style="cyan")
    table.add_column("Token", style="green")
    for attachment in attachments:
        table.add_row(attachment["path"], attachment["token"])
    console.print(table)
