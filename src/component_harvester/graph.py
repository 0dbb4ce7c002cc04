"""Resource graph primitives: edges between components and follow-on work."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .identity import ComponentIdentity


class EdgeKind(str, Enum):
    SELF = "self"
    SIBLING = "sibling"
    SOURCE = "source"
    COLLECTION_MEMBER = "collection-member"


@dataclass(frozen=True)
class GraphEdge:
    """Directed edge from the component being handled to another resource URN.

    ``name`` is the link label under which the edge is recorded in the
    document metadata (``self``, ``siblings``, ``source``, ``apk``, ...).
    """

    kind: EdgeKind
    name: str
    source: str
    target: str

    def to_link(self) -> dict[str, str]:
        link_type = "resource" if self.kind in (EdgeKind.SELF, EdgeKind.SOURCE) else "collection"
        return {"type": link_type, "href": self.target}


@dataclass(frozen=True)
class WorkItem:
    """Request to harvest a newly discovered identity. Consumed once by the scheduler."""

    kind: str
    identity: ComponentIdentity
    url: str
    next_policy: Optional[Any] = None

    @classmethod
    def for_identity(cls, kind: str, identity: ComponentIdentity, next_policy: Any = None) -> "WorkItem":
        return cls(kind=kind, identity=identity, url=identity.to_url(), next_policy=next_policy)
