"""Maven POM manifest resolution.

A POM may declare a parent POM whose fields it inherits. Resolution walks
the ancestor chain one level at a time, fetching each parent into a
request-scoped temp file, and merges the levels so that the most specific
value of every top-level project field wins:

    fragments = [own pom, parent pom, grandparent pom, ...]
    summary   = {"project": grandparent <- parent <- own}
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Callable, Optional, Protocol, Union

from .documents import Manifest
from .exceptions import FetchError, NotFoundError, ParseError
from .identity import ComponentIdentity
from .logging_config import get_logger
from .request import HarvestRequest

logger = get_logger(__name__)

# Project sections irrelevant to license/provenance analysis.
IGNORED_SECTIONS = ("build", "dependencies", "dependencyManagement", "modules", "profiles")

HTTP_OK = 200
HTTP_NOT_FOUND = 404


class PomFetcher(Protocol):
    """Registry collaborator that downloads a POM to ``destination``.

    Returns the HTTP-like status of the fetch.
    """

    async def fetch_pom(self, identity: ComponentIdentity, destination: str) -> int: ...


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def element_to_dict(element: ET.Element) -> Union[str, dict[str, Any]]:
    """Convert an XML element to plain data.

    Leaf elements become their stripped text, repeated child tags become
    lists, everything else a dict keyed by the namespace-free tag name.
    """
    children = list(element)
    if not children:
        return (element.text or "").strip()
    result: dict[str, Any] = {}
    for child in children:
        if not isinstance(child.tag, str):
            continue
        key = _local_name(child.tag)
        value = element_to_dict(child)
        if key in result:
            existing = result[key]
            if isinstance(existing, list):
                existing.append(value)
            else:
                result[key] = [existing, value]
        else:
            result[key] = value
    return result


def parse_pom(content: str, location: Union[str, Path] = "<memory>") -> dict[str, Any]:
    """Parse POM text into ``{"project": {...}}`` with ignored sections removed."""
    try:
        root = ET.fromstring(content.strip())
    except ET.ParseError as e:
        raise ParseError(location, str(e))
    if _local_name(root.tag) != "project":
        raise ParseError(location, f"unexpected root element <{_local_name(root.tag)}>")
    project = element_to_dict(root)
    if not isinstance(project, dict):
        project = {}
    for section in IGNORED_SECTIONS:
        project.pop(section, None)
    return {"project": project}


def parent_identity(pom: dict[str, Any], location: Union[str, Path] = "<memory>") -> Optional[ComponentIdentity]:
    """Identity of the parent POM declared by ``pom``, or None."""
    parent = pom.get("project", {}).get("parent")
    if not parent:
        return None
    if not isinstance(parent, dict):
        raise ParseError(location, "malformed <parent> element")
    coordinates = {}
    for key in ("groupId", "artifactId", "version"):
        value = parent.get(key)
        if not isinstance(value, str) or not value.strip():
            raise ParseError(location, f"parent is missing {key}")
        coordinates[key] = value.strip()
    return ComponentIdentity(
        type="maven",
        provider="mavencentral",
        namespace=coordinates["groupId"],
        name=coordinates["artifactId"],
        revision=coordinates["version"],
    )


def pom_identity(pom: dict[str, Any], location: Union[str, Path] = "<memory>") -> ComponentIdentity:
    """Identity of the component a POM describes; group and version may be inherited."""
    project = pom.get("project", {})
    parent = project.get("parent") if isinstance(project.get("parent"), dict) else {}

    def _field(key: str) -> Optional[str]:
        value = project.get(key) or parent.get(key)
        return value.strip() if isinstance(value, str) and value.strip() else None

    group_id, artifact_id, version = _field("groupId"), project.get("artifactId"), _field("version")
    if not group_id or not isinstance(artifact_id, str) or not artifact_id.strip() or not version:
        raise ParseError(location, "POM does not declare complete coordinates")
    return ComponentIdentity(
        type="maven",
        provider="mavencentral",
        namespace=group_id,
        name=artifact_id.strip(),
        revision=version,
    )


def merge_pom_into(pom: dict[str, Any], manifest: Manifest) -> Manifest:
    """Layer ``pom`` over an already resolved ancestor manifest."""
    # Shallow: a child section replaces the whole ancestor section.
    summary = {"project": {**manifest.summary.get("project", {}), **pom["project"]}}
    return Manifest(summary=summary, fragments=[pom] + list(manifest.fragments))


class MavenManifestResolver:
    """Resolves a POM and its ancestors into a merged Manifest."""

    def __init__(self, fetcher: PomFetcher, create_temp_file: Callable[[HarvestRequest], str]):
        self.fetcher = fetcher
        self.create_temp_file = create_temp_file

    async def resolve(self, request: HarvestRequest, location: Union[str, Path]) -> Manifest:
        try:
            content = Path(location).read_text(encoding="utf-8")
        except OSError as e:
            raise ParseError(location, f"cannot read descriptor: {e}")
        pom = parse_pom(content, location)
        identity = parent_identity(pom, location)
        if identity is None:
            return Manifest(summary=pom, fragments=[pom])
        try:
            ancestors = await self._resolve_parent(request, identity)
        except NotFoundError:
            logger.info("Parent POM %s not found; treating as empty", identity.to_url())
            ancestors = Manifest()
        return merge_pom_into(pom, ancestors)

    async def _resolve_parent(self, request: HarvestRequest, identity: ComponentIdentity) -> Manifest:
        destination = self.create_temp_file(request)
        logger.debug("Fetching parent POM %s", identity.to_url())
        status = await self.fetcher.fetch_pom(identity, destination)
        if status == HTTP_NOT_FOUND:
            raise NotFoundError(identity.to_url())
        if status != HTTP_OK:
            raise FetchError(identity.to_url(), "unexpected registry status", status)
        return await self.resolve(request, destination)
