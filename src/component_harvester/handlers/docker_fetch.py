"""Docker fetch handler: pin an image to its digest and collect OS package inventories."""

import re
from typing import Optional

from ..config import HarvestConfig
from ..documents import Document
from ..exceptions import ToolUnavailableError
from ..identity import ComponentIdentity
from ..linking import RECORD_DELIMITER
from ..request import HarvestRequest
from ..tools import ToolRunner
from .base import BaseHandler

_DIGEST = re.compile(r"@sha256:([a-f0-9]+)")

# `dpkg --list` prints a five-line table header before the package rows.
DPKG_HEADER_LINES = 5


def format_dpkg_listing(output: str) -> str:
    """Render `dpkg --list` rows as ``name___version`` records."""
    records = []
    for line in output.splitlines()[DPKG_HEADER_LINES:]:
        columns = line.split()
        if len(columns) >= 3:
            records.append(f"{columns[1]}{RECORD_DELIMITER}{columns[2]}")
    return "\n".join(records)


class DockerFetch(BaseHandler):
    def __init__(self, options: Optional[HarvestConfig] = None, runner: Optional[ToolRunner] = None):
        super().__init__(options)
        self.runner = runner or ToolRunner(self.options.tool_timeout_seconds)

    def can_handle(self, request: HarvestRequest) -> bool:
        return self.to_identity(request).type == "docker"

    async def handle(self, request: HarvestRequest) -> HarvestRequest:
        identity = self.to_identity(request)
        try:
            revision = await self._get_revision(identity)
            identity = ComponentIdentity(
                type=identity.type,
                provider=identity.provider,
                namespace=identity.namespace,
                name=identity.name,
                revision=revision,
            )
            apk = await self._get_apk(identity)
            dpkg = await self._get_dpkg(identity)
        except ToolUnavailableError as e:
            return request.mark_skip(str(e))
        request.url = identity.to_url()
        if not apk and not dpkg:
            return request.mark_skip("no apk or dpkg inventory available")
        request.document = Document(
            metadata=request.document.metadata,
            location="",
            extra={"apk": apk, "dpkg": dpkg},
        )
        return request

    async def _get_revision(self, identity: ComponentIdentity) -> str:
        """Pull the tagged image and return its sha256 repo digest."""
        image = self._tag_image_name(identity)
        await self.runner.run(self.options.docker_command, "pull", image)
        output = await self.runner.run(
            self.options.docker_command, "inspect", "--format={{.RepoDigests}}", image
        )
        match = _DIGEST.search(output)
        if not match:
            raise ToolUnavailableError(self.options.docker_command, f"no digest reported for {image}")
        return match.group(1)

    async def _get_apk(self, identity: ComponentIdentity) -> Optional[dict]:
        # Names and versions are hyphen-joined and both may contain hyphens,
        # so the bare names are dumped separately to split them apart later.
        image = self._hash_image_name(identity)
        try:
            names = await self.runner.run(
                self.options.docker_command, "run", "--rm", "--entrypoint", "apk", image, "info"
            )
        except ToolUnavailableError as e:
            self.logger.debug("No apk inventory for %s: %s", image, e)
            return None
        names = names.strip()
        if not names:
            return None
        names_and_versions = await self.runner.run(
            self.options.docker_command, "run", "--rm", "--entrypoint", "apk", image, "info", "-v"
        )
        return {"names": names, "namesAndVersions": names_and_versions.strip()}

    async def _get_dpkg(self, identity: ComponentIdentity) -> Optional[str]:
        image = self._hash_image_name(identity)
        try:
            output = await self.runner.run(
                self.options.docker_command, "run", "--rm", "--entrypoint", "dpkg", image, "--list"
            )
        except ToolUnavailableError as e:
            self.logger.debug("No dpkg inventory for %s: %s", image, e)
            return None
        return format_dpkg_listing(output) or None

    @staticmethod
    def _image_name(identity: ComponentIdentity) -> str:
        return f"{identity.namespace}/{identity.name}" if identity.namespace else identity.name

    def _tag_image_name(self, identity: ComponentIdentity) -> str:
        return f"{self._image_name(identity)}:{identity.revision or 'latest'}"

    def _hash_image_name(self, identity: ComponentIdentity) -> str:
        return f"{self._image_name(identity)}@sha256:{identity.revision}"
