"""Docker extract handler: link every OS package embedded in an image."""

from ..documents import Document
from ..linking import link_embedded_components, pair_positional_listings, split_delimited_records
from ..request import HarvestRequest
from .base import BaseHandler


class DockerExtract(BaseHandler):
    @property
    def schema_version(self) -> str:
        return "1.0.0"

    @property
    def tool_spec(self) -> dict:
        return {"tool": "docker", "toolVersion": self.schema_version}

    def can_handle(self, request: HarvestRequest) -> bool:
        return request.type == "docker"

    async def handle(self, request: HarvestRequest) -> HarvestRequest:
        apk = request.document.extra.get("apk")
        dpkg = request.document.extra.get("dpkg")
        if self.is_processing(request):
            identity = self._process(request)
            self.add_basic_tool_links(request, identity)
            request.document = Document(
                metadata=request.document.metadata,
                location=request.document.location,
                extra={"apk": apk, "dpkg": dpkg},
            )
        self._queue_dpkgs(request, dpkg)
        self._queue_apks(request, apk)
        return request

    def _queue_dpkgs(self, request: HarvestRequest, dpkg) -> None:
        link_embedded_components(request, "dpkg", split_delimited_records(dpkg))

    def _queue_apks(self, request: HarvestRequest, apk) -> None:
        if not apk:
            return
        pairs = pair_positional_listings(apk.get("names"), apk.get("namesAndVersions"))
        link_embedded_components(request, "apk", pairs)
