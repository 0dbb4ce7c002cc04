"""Registry clients used to fetch descriptors of ancestor components."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import httpx

from .config import HarvestConfig
from .exceptions import FetchError
from .identity import ComponentIdentity
from .logging_config import get_logger

logger = get_logger(__name__)

# Registry listings advertise a sources jar with this classifier/extension.
MAVEN_SOURCE_EXTENSION = "-sources.jar"


class MavenCentralClient:
    """Async Maven repository client.

    Example:
        async with MavenCentralClient.from_config(config) as client:
            status = await client.fetch_pom(identity, "/tmp/parent.pom")
    """

    def __init__(
        self,
        base_url: str = "https://repo1.maven.org/maven2",
        timeout_seconds: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_seconds))

    @classmethod
    def from_config(cls, config: HarvestConfig) -> "MavenCentralClient":
        return cls(base_url=config.maven_repository_url, timeout_seconds=config.http_timeout_seconds)

    def pom_url(self, identity: ComponentIdentity) -> str:
        if not identity.namespace or not identity.revision:
            raise FetchError(identity.to_url(), "maven coordinates need a group and a version")
        group_path = identity.namespace.replace(".", "/")
        return (
            f"{self.base_url}/{group_path}/{identity.name}/{identity.revision}/"
            f"{identity.name}-{identity.revision}.pom"
        )

    async def fetch_pom(self, identity: ComponentIdentity, destination: str) -> int:
        """Download the POM for ``identity`` into ``destination``; return the HTTP status."""
        url = self.pom_url(identity)
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            raise FetchError(identity.to_url(), f"{type(e).__name__}: {e}")
        if response.status_code == 200:
            Path(destination).write_bytes(response.content)
        else:
            logger.debug("GET %s -> %d", url, response.status_code)
        return response.status_code

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "MavenCentralClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


class LocalMavenRepository:
    """Serves POMs from a directory laid out like a Maven repository (e.g. ~/.m2/repository)."""

    def __init__(self, root: str) -> None:
        self.root = Path(root).expanduser()

    def pom_path(self, identity: ComponentIdentity) -> Path:
        group_path = Path(*(identity.namespace or "").split("."))
        return (
            self.root / group_path / identity.name / (identity.revision or "")
            / f"{identity.name}-{identity.revision}.pom"
        )

    async def fetch_pom(self, identity: ComponentIdentity, destination: str) -> int:
        path = self.pom_path(identity)
        if not path.is_file():
            return 404
        try:
            Path(destination).write_bytes(path.read_bytes())
        except OSError as e:
            raise FetchError(identity.to_url(), str(e))
        return 200
