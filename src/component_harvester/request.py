"""Request carrier and reprocessing policy.

The scheduler owns request objects; handlers only read the URL, consult the
policy, mutate the document and record edges, follow-on work and cleanups.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Optional, Protocol

from .documents import Document, ProcessOutcome
from .graph import EdgeKind, GraphEdge, WorkItem
from .identity import ComponentIdentity
from .logging_config import get_logger
from .versions import compare_versions

logger = get_logger(__name__)

PROCESS_MODE = "process"
TRAVERSE_MODE = "traverse"


class HarvestPolicy(Protocol):
    """Decides whether a request is (re)processed and how follow-ons are treated."""

    def should_process(self, request: "HarvestRequest", schema_version: str) -> bool: ...

    def should_traverse(self, request: "HarvestRequest") -> bool: ...

    def next_policy(self, kind: str) -> Any: ...


def _stored_schema_version(request: "HarvestRequest") -> Optional[str]:
    return request.document.metadata.schema_version


@dataclass
class ReprocessPolicy:
    """Policy driven by the schema version of the previously harvested document.

    Modes:
        always: reprocess every time
        stale: reprocess when the stored schema version is missing or older
        never: never reprocess, only traverse (if enabled)
    """

    mode: Literal["always", "stale", "never"] = "stale"
    traverse: bool = True
    follow_ons: dict[str, "ReprocessPolicy"] = field(default_factory=dict)
    stored_version: Callable[["HarvestRequest"], Optional[str]] = _stored_schema_version

    def should_process(self, request: "HarvestRequest", schema_version: str) -> bool:
        if self.mode == "always":
            return True
        if self.mode == "never":
            return False
        stored = self.stored_version(request)
        if not stored:
            return True
        return compare_versions(stored, schema_version) < 0

    def should_traverse(self, request: "HarvestRequest") -> bool:
        return self.traverse

    def next_policy(self, kind: str) -> "ReprocessPolicy":
        return self.follow_ons.get(kind, self)


class HarvestRequest:
    """One unit of crawl work: a component URL plus everything handling produces."""

    def __init__(
        self,
        type: str,
        url: str,
        policy: Optional[HarvestPolicy] = None,
        document: Optional[Document] = None,
    ):
        self.type = type
        self.url = url
        self.policy: HarvestPolicy = policy or ReprocessPolicy()
        self.document = document or Document()
        self.process_mode: Optional[str] = None
        self.edges: list[GraphEdge] = []
        self.queued: list[WorkItem] = []
        self.outcome: Optional[ProcessOutcome] = None
        self.skip_reason: Optional[str] = None
        self._cleanups: list[Callable[[], Any]] = []

    def __repr__(self) -> str:
        return f"HarvestRequest(type={self.type!r}, url={self.url!r})"

    @property
    def identity(self) -> ComponentIdentity:
        return ComponentIdentity.from_url(self.url)

    # ── Graph ────────────────────────────────────────────────────────

    def _add_edge(self, kind: EdgeKind, name: str, urn: str) -> GraphEdge:
        edge = GraphEdge(kind=kind, name=name, source=self.identity.to_urn(), target=urn)
        self.edges.append(edge)
        self.document.metadata.links.setdefault(name, []).append(edge.to_link())
        return edge

    def link_resource(self, name: str, urn: str) -> GraphEdge:
        kind = EdgeKind.SELF if name == EdgeKind.SELF.value else EdgeKind.SOURCE
        return self._add_edge(kind, name, urn)

    def link_siblings(self, urn: str) -> GraphEdge:
        return self._add_edge(EdgeKind.SIBLING, "siblings", urn)

    def link_collection(self, name: str, urn: str) -> GraphEdge:
        return self._add_edge(EdgeKind.COLLECTION_MEMBER, name, urn)

    def edges_of(self, kind: EdgeKind) -> list[GraphEdge]:
        return [edge for edge in self.edges if edge.kind == kind]

    # ── Follow-on work ───────────────────────────────────────────────

    def get_next_policy(self, kind: str) -> Any:
        return self.policy.next_policy(kind)

    def enqueue(self, kind: str, url: str, next_policy: Any = None) -> WorkItem:
        item = WorkItem(kind=kind, identity=ComponentIdentity.from_url(url), url=url, next_policy=next_policy)
        self.queued.append(item)
        logger.debug("Queued %s %s", kind, url)
        return item

    # ── Lifecycle ────────────────────────────────────────────────────

    def register_cleanup(self, callback: Callable[[], Any]) -> None:
        self._cleanups.append(callback)

    def run_cleanups(self) -> None:
        """Release request-scoped resources, most recent first."""
        while self._cleanups:
            callback = self._cleanups.pop()
            try:
                callback()
            except OSError as e:
                logger.warning("Cleanup failed for %s: %s", self.url, e)

    def mark_skip(self, reason: str) -> "HarvestRequest":
        self.outcome = ProcessOutcome.SKIPPED
        self.skip_reason = reason
        self.document.metadata.outcome = ProcessOutcome.SKIPPED
        self.document.metadata.skip_reason = reason
        logger.info("Skipping %s: %s", self.url, reason)
        return self

    @property
    def is_skipped(self) -> bool:
        return self.outcome == ProcessOutcome.SKIPPED
