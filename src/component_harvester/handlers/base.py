"""Base handler contract shared by every ecosystem handler."""

import os
import shutil
import tempfile
from typing import Optional

from ..config import HarvestConfig
from ..identity import ComponentIdentity, overlay
from ..logging_config import get_logger
from ..request import PROCESS_MODE, HarvestRequest

logger = get_logger(__name__)

TEMP_PREFIX = "cd-"
DEFAULT_SCHEMA_VERSION = "1"


class BaseHandler:
    """Per-ecosystem handler.

    Subclasses opt in through ``can_handle`` (never matches by default) and
    implement ``handle``. ``schema_version`` is stamped on every document the
    handler (re)processes so stale documents can be detected later.
    """

    def __init__(self, options: Optional[HarvestConfig] = None):
        self.options = options or HarvestConfig()
        self.logger = get_logger(type(self).__module__)

    @property
    def schema_version(self) -> Optional[str]:
        return None

    @property
    def tool_spec(self) -> dict:
        return {}

    def can_handle(self, request: HarvestRequest) -> bool:
        return False

    def should_fetch(self, request: HarvestRequest) -> bool:
        return True

    def should_process(self, request: HarvestRequest) -> bool:
        return request.policy.should_process(request, self.schema_version or DEFAULT_SCHEMA_VERSION)

    def should_traverse(self, request: HarvestRequest) -> bool:
        return request.policy.should_traverse(request)

    def is_processing(self, request: HarvestRequest) -> bool:
        return request.process_mode == PROCESS_MODE

    async def prepare(self, request: HarvestRequest) -> None:
        """Async setup that must happen before the lifecycle gates run (e.g. asking a tool for its version)."""

    async def close(self) -> None:
        """Release long-lived resources (HTTP clients) the handler created."""

    async def handle(self, request: HarvestRequest) -> HarvestRequest:
        raise NotImplementedError(f"{type(self).__name__} does not implement handle()")

    def _process(self, request: HarvestRequest) -> ComponentIdentity:
        """Stamp the document with this handler's schema version and return the identity."""
        request.document.metadata.schema_version = self.schema_version or DEFAULT_SCHEMA_VERSION
        return self.to_identity(request)

    def to_identity(self, request: HarvestRequest) -> ComponentIdentity:
        return request.identity

    # ── Request-scoped temp storage ──────────────────────────────────

    def _create_temp_file(self, request: HarvestRequest) -> str:
        fd, path = tempfile.mkstemp(prefix=TEMP_PREFIX, dir=self.options.temp_dir)
        os.close(fd)
        request.register_cleanup(lambda: _remove_file(path))
        logger.debug("Temp file %s registered for %s", path, request.url)
        return path

    def _create_temp_dir(self, request: HarvestRequest) -> str:
        path = tempfile.mkdtemp(prefix=TEMP_PREFIX, dir=self.options.temp_dir)
        request.register_cleanup(lambda: shutil.rmtree(path, ignore_errors=True))
        return path

    # ── Links ────────────────────────────────────────────────────────

    def add_self_link(self, request: HarvestRequest, urn: Optional[str] = None) -> None:
        request.link_resource("self", urn or self.to_identity(request).to_urn())

    def get_urn_for(self, request: HarvestRequest, identity: Optional[ComponentIdentity] = None) -> str:
        identity = identity or self.to_identity(request)
        return overlay(identity, self.tool_spec).to_urn()

    def add_basic_tool_links(self, request: HarvestRequest, identity: ComponentIdentity) -> None:
        """Link to this exact tool run and to the group of all runs of this tool."""
        request.link_resource("self", self.get_urn_for(request, identity))
        request.link_siblings(identity.group(self.tool_spec.get("tool")).to_urn())

    def link_and_queue(self, request: HarvestRequest, name: str, identity: Optional[ComponentIdentity] = None) -> None:
        identity = identity or self.to_identity(request)
        request.link_resource(name, identity.to_urn())
        request.enqueue(name, identity.to_url(), request.get_next_policy(name))

    def link_and_queue_tool(self, request: HarvestRequest, name: str, tool: Optional[str] = None) -> None:
        tool = tool or name
        identity = self.to_identity(request)
        request.link_collection(name, identity.with_tool(tool).to_urn())
        request.enqueue(tool, identity.to_url(), request.get_next_policy(name))


def _remove_file(path: str) -> None:
    if os.path.exists(path):
        os.remove(path)
