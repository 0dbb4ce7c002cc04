"""Exception hierarchy for Component Harvester."""

from .base import HarvesterError
from .config import ConfigurationError, InvalidConfigError
from .resolution import (
    FetchError,
    FormatError,
    NotFoundError,
    ParseError,
    ResolutionError,
)
from .tooling import ToolUnavailableError

__all__ = [
    "HarvesterError",
    "ResolutionError",
    "FormatError",
    "ParseError",
    "NotFoundError",
    "FetchError",
    "ToolUnavailableError",
    "ConfigurationError",
    "InvalidConfigError",
]
