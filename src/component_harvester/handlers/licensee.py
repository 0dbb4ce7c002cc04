"""Licensee handler: run the licensee classifier and attach the files it matched."""

import json
from typing import Optional

from ..attachments import attach_files
from ..config import HarvestConfig
from ..exceptions import FormatError, ToolUnavailableError
from ..request import HarvestRequest
from ..tools import ToolRunner
from ..versions import aggregate_versions, normalize_version
from .base import BaseHandler

HANDLER_SCHEMA_VERSION = "1.0.0"
INVALID_VERSION_LABEL = "Invalid Licensee version"


class LicenseeHandler(BaseHandler):
    """Runs after a component has been fetched to a local folder."""

    def __init__(self, options: Optional[HarvestConfig] = None, runner: Optional[ToolRunner] = None):
        super().__init__(options)
        self.runner = runner or ToolRunner(self.options.tool_timeout_seconds)
        self._tool_version: Optional[str] = None
        self._schema_version: Optional[str] = None

    @property
    def schema_version(self) -> Optional[str]:
        return self._schema_version

    @property
    def tool_spec(self) -> dict:
        return {"tool": "licensee", "toolVersion": self.schema_version}

    def can_handle(self, request: HarvestRequest) -> bool:
        return request.type == "licensee"

    async def _detect_version(self) -> str:
        """Licensee version, cached; the handler schema version is derived from it."""
        if self._tool_version is None:
            output = await self.runner.run(self.options.licensee_command, "version")
            version = output.strip()
            self._schema_version = aggregate_versions(
                [HANDLER_SCHEMA_VERSION, normalize_version(version, INVALID_VERSION_LABEL)],
                INVALID_VERSION_LABEL,
            )
            self._tool_version = version
        return self._tool_version

    async def prepare(self, request: HarvestRequest) -> None:
        try:
            await self._detect_version()
        except ToolUnavailableError as e:
            request.mark_skip(str(e))

    async def handle(self, request: HarvestRequest) -> HarvestRequest:
        location = request.document.location
        try:
            tool_version = await self._detect_version()
            if not self.is_processing(request):
                return request
            identity = self._process(request)
            output = await self._run(location)
        except ToolUnavailableError as e:
            return request.mark_skip(str(e))

        self.add_basic_tool_links(request, identity)
        request.document.extra["licensee"] = {
            "version": tool_version,
            "output": {"contentType": "application/json", "content": output},
        }
        matched = [entry.get("filename") for entry in output.get("matched_files", [])]
        attach_files(request.document, [path for path in matched if path], location)
        return request

    async def _run(self, location: str) -> dict:
        raw = await self.runner.run(
            self.options.licensee_command, "detect", "--json", "--no-readme", location
        )
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise FormatError("Invalid licensee output", raw[:200], str(e))
