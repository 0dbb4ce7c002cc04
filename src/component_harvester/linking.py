"""Embedded-component discovery from package-manager inventories.

Container images report their OS packages in two shapes:

* positional (apk): ``apk info`` lists bare names and ``apk info -v`` lists
  ``name-version``. Both names and versions may contain hyphens, so the two
  listings are paired by line index and the ``name-`` prefix is stripped.
* delimited (dpkg): one ``name___version`` record per line.
"""

from __future__ import annotations

from typing import Optional

from .graph import WorkItem
from .identity import ComponentIdentity
from .logging_config import get_logger
from .request import HarvestRequest

logger = get_logger(__name__)

RECORD_DELIMITER = "___"


def _lines(listing: Optional[str]) -> list[str]:
    if not listing:
        return []
    return [line.strip() for line in listing.split("\n") if line.strip()]


def pair_positional_listings(names: Optional[str], names_and_versions: Optional[str]) -> list[tuple[str, str]]:
    """Pair a bare-name listing with a name+version listing by line index."""
    name_list = _lines(names)
    versioned_list = _lines(names_and_versions)
    if not name_list or not versioned_list:
        return []
    if len(name_list) != len(versioned_list):
        logger.warning(
            "Inventory listings differ in length (%d names, %d name+version entries); "
            "pairing the first %d",
            len(name_list),
            len(versioned_list),
            min(len(name_list), len(versioned_list)),
        )
    pairs = []
    for name, versioned in zip(name_list, versioned_list):
        prefix = f"{name}-"
        if not versioned.startswith(prefix):
            logger.warning("Skipping %r: %r does not start with %r", name, versioned, prefix)
            continue
        pairs.append((name, versioned[len(prefix):]))
    return pairs


def split_delimited_records(listing: Optional[str], delimiter: str = RECORD_DELIMITER) -> list[tuple[str, str]]:
    """Split ``name<delimiter>version`` lines on the first delimiter."""
    pairs = []
    for line in _lines(listing):
        name, sep, version = line.partition(delimiter)
        if not sep or not name or not version:
            logger.debug("Skipping malformed inventory record %r", line)
            continue
        pairs.append((name, version))
    return pairs


def embedded_identity(kind: str, name: str, version: str) -> ComponentIdentity:
    return ComponentIdentity(type=kind, provider=kind, namespace=None, name=name, revision=version)


def link_embedded_components(request: HarvestRequest, kind: str, pairs: list[tuple[str, str]]) -> list[WorkItem]:
    """Emit a collection-member edge and a follow-on work item per (name, version)."""
    items = []
    for name, version in pairs:
        identity = embedded_identity(kind, name, version)
        request.link_collection(kind, identity.to_urn())
        items.append(request.enqueue(kind, identity.to_url(), request.get_next_policy(kind)))
    if items:
        logger.info("Discovered %d embedded %s packages in %s", len(items), kind, request.url)
    return items
