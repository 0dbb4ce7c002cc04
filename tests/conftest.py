"""Shared test fixtures for Component Harvester tests."""

import asyncio
from pathlib import Path
from typing import Optional

import pytest

from component_harvester.config import HarvestConfig
from component_harvester.documents import Document
from component_harvester.identity import ComponentIdentity
from component_harvester.request import HarvestRequest, ReprocessPolicy


def build_pom(
    group: str,
    artifact: str,
    version: str,
    parent: Optional[tuple] = None,
    body: str = "",
) -> str:
    parent_xml = ""
    if parent:
        parent_xml = (
            "<parent>"
            f"<groupId>{parent[0]}</groupId>"
            f"<artifactId>{parent[1]}</artifactId>"
            f"<version>{parent[2]}</version>"
            "</parent>"
        )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<project xmlns="http://maven.apache.org/POM/4.0.0">'
        "<modelVersion>4.0.0</modelVersion>"
        f"{parent_xml}"
        f"<groupId>{group}</groupId>"
        f"<artifactId>{artifact}</artifactId>"
        f"<version>{version}</version>"
        f"{body}"
        "</project>"
    )


class FakePomRepository:
    """In-memory POM registry. Missing coordinates answer 404."""

    def __init__(self, poms=None, statuses=None, delays=None):
        self.poms = dict(poms or {})
        self.statuses = dict(statuses or {})
        self.delays = dict(delays or {})
        self.calls = []
        self.destinations = []

    async def fetch_pom(self, identity: ComponentIdentity, destination: str) -> int:
        key = (identity.namespace, identity.name, identity.revision)
        self.calls.append(key)
        self.destinations.append(destination)
        if key in self.delays:
            await asyncio.sleep(self.delays[key])
        if key in self.statuses:
            return self.statuses[key]
        if key not in self.poms:
            return 404
        Path(destination).write_text(self.poms[key], encoding="utf-8")
        return 200


class FakeSourceFinder:
    def __init__(self, result=None):
        self.result = result
        self.calls = []

    async def __call__(self, version, candidate_urls, options):
        self.calls.append((version, list(candidate_urls), dict(options)))
        return self.result


class FakeToolRunner:
    """Maps a command prefix (tuple of args) to output or to an exception."""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    async def run(self, *args, cwd=None):
        self.calls.append(args)
        for prefix, response in self.responses.items():
            if tuple(args[: len(prefix)]) == prefix:
                if isinstance(response, Exception):
                    raise response
                return response
        raise AssertionError(f"unexpected command {args}")


@pytest.fixture
def pom_builder():
    return build_pom


@pytest.fixture
def harvest_config(tmp_path):
    temp_dir = tmp_path / "temp"
    temp_dir.mkdir()
    return HarvestConfig(temp_location=str(temp_dir))


@pytest.fixture
def make_request():
    def _make(type_: str, url: str, mode: str = "always", location: Optional[str] = None, **document_fields):
        document = Document(location=location, **document_fields)
        return HarvestRequest(type_, url, policy=ReprocessPolicy(mode=mode), document=document)

    return _make


@pytest.fixture
def pom_repository():
    return FakePomRepository


@pytest.fixture
def source_finder():
    return FakeSourceFinder


@pytest.fixture
def tool_runner():
    return FakeToolRunner
