"""Per-ecosystem handlers."""

from .base import BaseHandler
from .docker import DockerExtract
from .docker_fetch import DockerFetch
from .licensee import LicenseeHandler
from .maven import MavenExtract
from .registry import HandlerRegistry, default_fetchers, default_processors

__all__ = [
    "BaseHandler",
    "DockerExtract",
    "DockerFetch",
    "HandlerRegistry",
    "LicenseeHandler",
    "MavenExtract",
    "default_fetchers",
    "default_processors",
]
