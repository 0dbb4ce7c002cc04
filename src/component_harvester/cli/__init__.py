"""CLI entry point: registers all subcommands."""

import typer

app = typer.Typer(
    name="component-harvester",
    help="Component Harvester - license and provenance harvesting for software components",
    add_completion=False,
    rich_markup_mode="rich",
)


# Import subcommands to register them
from .maven import maven as _maven  # noqa: F401, E402
from .versions import versions_app  # noqa: E402
from .attach import attach as _attach  # noqa: F401, E402

app.add_typer(versions_app, name="versions")


def main() -> None:
    app()
