"""Shared CLI helpers."""

import json
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console

from ..config import HarvestConfig, load_config
from ..logging_config import setup_logging

console = Console()
err_console = Console(stderr=True)


def resolve_config(
    config: Optional[Path] = None,
    verbose: bool = False,
    quiet: bool = False,
    **overrides: Any,
) -> HarvestConfig:
    """Build settings from CLI options and configure logging to match."""
    settings = load_config(config_file=config, verbose=verbose, quiet=quiet, **overrides)
    setup_logging(verbose=settings.verbosity == "verbose", quiet=settings.verbosity == "quiet")
    return settings


def print_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, default=str))
