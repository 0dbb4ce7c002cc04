"""Handler registry: selects the handler for a request by ecosystem."""

from typing import Iterable, Optional

from ..config import HarvestConfig
from ..logging_config import get_logger
from ..request import HarvestRequest
from .base import BaseHandler
from .docker import DockerExtract
from .docker_fetch import DockerFetch
from .licensee import LicenseeHandler
from .maven import MavenExtract

logger = get_logger(__name__)


class HandlerRegistry:
    """Ordered collection of handlers; the first one that opts in wins."""

    def __init__(self, handlers: Optional[Iterable[BaseHandler]] = None):
        self._handlers: list[BaseHandler] = list(handlers or [])

    def register(self, handler: BaseHandler) -> BaseHandler:
        self._handlers.append(handler)
        return handler

    def __iter__(self):
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)

    async def aclose(self) -> None:
        """Close every handler; the registry must not be used afterwards."""
        for handler in self._handlers:
            await handler.close()

    async def __aenter__(self) -> "HandlerRegistry":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def select(self, request: HarvestRequest) -> Optional[BaseHandler]:
        for handler in self._handlers:
            if handler.can_handle(request):
                logger.debug("%s selected for %s", type(handler).__name__, request.url)
                return handler
        return None


def default_fetchers(options: Optional[HarvestConfig] = None) -> HandlerRegistry:
    """Handlers that pull raw component data into the request document."""
    return HandlerRegistry([DockerFetch(options or HarvestConfig())])


def default_processors(options: Optional[HarvestConfig] = None) -> HandlerRegistry:
    """Handlers that turn fetched data into documents, edges and follow-on work.

    The Maven handler opens HTTP clients bound to the running event loop; use
    the registry as an async context manager (or await ``aclose()``) inside
    that loop.
    """
    options = options or HarvestConfig()
    return HandlerRegistry([DockerExtract(options), MavenExtract(options), LicenseeHandler(options)])
