"""Maven extract handler: POM inheritance, release info and source discovery."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ..attachments import attach_interestingly_named_files
from ..config import HarvestConfig
from ..documents import Document, Manifest
from ..identity import ComponentIdentity, SourceLocation
from ..manifest import MavenManifestResolver, PomFetcher
from ..registries import MAVEN_SOURCE_EXTENSION, MavenCentralClient
from ..request import HarvestRequest
from ..sources import GitHubSourceFinder, SourceFinder
from .base import BaseHandler


class MavenExtract(BaseHandler):
    """Turns a fetched POM into a document with the full inherited manifest."""

    def __init__(
        self,
        options: Optional[HarvestConfig] = None,
        fetcher: Optional[PomFetcher] = None,
        source_finder: Optional[SourceFinder] = None,
    ):
        super().__init__(options)
        # Clients built here are closed by close(); injected ones belong to the caller.
        self._owned_clients: list = []
        if fetcher is None:
            fetcher = MavenCentralClient.from_config(self.options)
            self._owned_clients.append(fetcher)
        if source_finder is None:
            source_finder = GitHubSourceFinder.from_config(self.options)
            self._owned_clients.append(source_finder)
        self.fetcher = fetcher
        self.source_finder = source_finder
        self.resolver = MavenManifestResolver(self.fetcher, self._create_temp_file)

    async def close(self) -> None:
        while self._owned_clients:
            await self._owned_clients.pop().close()

    @property
    def schema_version(self) -> str:
        return "1.1.2"

    @property
    def tool_spec(self) -> dict:
        return {"tool": "clearlydefined", "toolVersion": self.schema_version}

    def can_handle(self, request: HarvestRequest) -> bool:
        if request.type != "maven":
            return False
        return self.to_identity(request).type == "maven"

    async def handle(self, request: HarvestRequest) -> HarvestRequest:
        # Traversal alone skips straight to linking the source.
        if self.is_processing(request):
            identity = self._process(request)
            self.add_basic_tool_links(request, identity)
            location = request.document.location
            manifest = await self.resolver.resolve(request, location)
            await self._create_document(request, identity, manifest, request.document.registry_data)
            attach_interestingly_named_files(request.document, _pom_folder(location))
        if request.document.source_info:
            source = SourceLocation.from_object(request.document.source_info)
            self.link_and_queue(request, "source", source.to_identity())
        return request

    def _discover_candidate_source_locations(self, manifest: Manifest) -> list[str]:
        scm = manifest.summary.get("project", {}).get("scm")
        candidates = []
        if isinstance(scm, dict):
            for key in ("url", "connection", "developerConnection"):
                value = scm.get(key)
                if isinstance(value, str) and value:
                    candidates.append(value)
        return candidates

    async def _discover_source(
        self, identity: ComponentIdentity, manifest: Manifest, registry_data: dict[str, Any]
    ) -> Optional[SourceLocation]:
        candidates = self._discover_candidate_source_locations(manifest)
        if candidates:
            found = await self.source_finder(
                identity.revision, candidates, {"github_token": self.options.github_token}
            )
            if found:
                return found
        # No repository found; fall back to the sources jar if the registry lists one.
        extensions = registry_data.get("ec") or []
        if MAVEN_SOURCE_EXTENSION not in extensions:
            return None
        return SourceLocation.from_identity(identity, type="sourcearchive")

    async def _create_document(
        self,
        request: HarvestRequest,
        identity: ComponentIdentity,
        manifest: Manifest,
        registry_data: dict[str, Any],
    ) -> None:
        request.document = Document(
            metadata=request.document.metadata,
            manifest=manifest,
            registry_data=registry_data,
            location=request.document.location,
        )
        timestamp = registry_data.get("timestamp")
        if timestamp:
            released = datetime.fromtimestamp(int(timestamp) / 1000, tz=timezone.utc)
            request.document.release_date = released.isoformat().replace("+00:00", "Z")
        source = await self._discover_source(identity, manifest, registry_data)
        if source:
            request.document.source_info = source.to_dict()


def _pom_folder(location: Optional[str]) -> Optional[str]:
    if location is None:
        return None
    path = Path(location)
    return str(path.parent if path.is_file() else path)
