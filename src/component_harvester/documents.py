"""Harvested document model.

A Document is the record produced for one component identity. Only
``to_dict()`` output is persisted; the internal attachment payload stays in
memory for the lifetime of the request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ProcessOutcome(str, Enum):
    """Terminal state of one request."""

    PROCESSED = "processed"
    TRAVERSED = "traversed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class Attachment:
    """A file attached to a document. ``content`` never leaves the process."""

    path: str
    token: str
    content: str = field(repr=False)

    def public(self) -> dict[str, str]:
        return {"path": self.path, "token": self.token}


@dataclass
class Manifest:
    """Merged descriptor plus the per-level fragments it came from (most specific first)."""

    summary: dict[str, Any] = field(default_factory=dict)
    fragments: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"summary": self.summary, "fragments": self.fragments}


@dataclass
class DocumentMetadata:
    schema_version: Optional[str] = None
    links: dict[str, list[dict[str, str]]] = field(default_factory=dict)
    outcome: Optional[ProcessOutcome] = None
    skip_reason: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"schemaVersion": self.schema_version, "links": self.links}
        if self.outcome is not None:
            result["outcome"] = self.outcome.value
        if self.skip_reason:
            result["skipReason"] = self.skip_reason
        return result


@dataclass
class Document:
    """The harvested record for one identity."""

    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    manifest: Optional[Manifest] = None
    registry_data: dict[str, Any] = field(default_factory=dict)
    release_date: Optional[str] = None
    source_info: Optional[dict[str, Any]] = None
    location: Optional[str] = None
    # Public attachment index; stays None until something is attached.
    attachments: Optional[list[dict[str, str]]] = None
    # Ecosystem-specific payload (tool output, inventories) persisted verbatim.
    extra: dict[str, Any] = field(default_factory=dict)
    internal_attachments: list[Attachment] = field(default_factory=list, repr=False)

    def to_dict(self) -> dict[str, Any]:
        """Persisted projection. Internal attachment content is never included."""
        result: dict[str, Any] = {"_metadata": self.metadata.to_dict()}
        if self.manifest is not None:
            result["manifest"] = self.manifest.to_dict()
        if self.registry_data:
            result["registryData"] = self.registry_data
        if self.release_date:
            result["releaseDate"] = self.release_date
        if self.source_info:
            result["sourceInfo"] = self.source_info
        if self.attachments is not None:
            result["attachments"] = [dict(a) for a in self.attachments]
        result.update(self.extra)
        return result
