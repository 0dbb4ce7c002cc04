"""
Component Harvester - license and provenance harvesting for software components

Resolves package descriptors through their inheritance chains, discovers
components embedded in containers, and links everything into a resource graph
for further harvesting.
"""

__version__ = "0.1.0"

from .documents import Document, Manifest, ProcessOutcome
from .engine import dispatch, harvest
from .graph import EdgeKind, GraphEdge, WorkItem
from .identity import ComponentIdentity, SourceLocation, overlay
from .request import HarvestRequest, ReprocessPolicy
from .versions import aggregate_versions, get_latest_version, is_prerelease_version

__all__ = [
    "dispatch",
    "harvest",
    "ComponentIdentity",
    "SourceLocation",
    "overlay",
    "Document",
    "Manifest",
    "ProcessOutcome",
    "EdgeKind",
    "GraphEdge",
    "WorkItem",
    "HarvestRequest",
    "ReprocessPolicy",
    "aggregate_versions",
    "get_latest_version",
    "is_prerelease_version",
]
