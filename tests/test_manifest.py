"""Tests for POM parsing and ancestor-chain resolution."""

import os

import pytest

from component_harvester.exceptions import FetchError, ParseError
from component_harvester.handlers.base import BaseHandler
from component_harvester.manifest import (
    MavenManifestResolver,
    element_to_dict,
    parent_identity,
    parse_pom,
    pom_identity,
)
from component_harvester.request import HarvestRequest

CHILD_URL = "cd:/maven/mavencentral/org.example/child/1.0"


@pytest.fixture
def resolver_for(harvest_config):
    def _make(repository):
        handler = BaseHandler(harvest_config)
        return MavenManifestResolver(repository, handler._create_temp_file)

    return _make


@pytest.fixture
def write_pom(tmp_path):
    def _write(content, name="pom.xml"):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return str(path)

    return _write


class TestParsePom:
    def test_strips_namespace_and_ignored_sections(self, pom_builder):
        content = pom_builder(
            "g",
            "a",
            "1.0",
            body=(
                "<dependencies><dependency><artifactId>x</artifactId></dependency></dependencies>"
                "<build><plugins/></build><modules><module>m</module></modules>"
                "<profiles/><dependencyManagement/>"
                "<licenses><license><name>MIT</name></license></licenses>"
            ),
        )
        pom = parse_pom(content)
        project = pom["project"]
        for section in ("dependencies", "build", "modules", "profiles", "dependencyManagement"):
            assert section not in project
        assert project["licenses"] == {"license": {"name": "MIT"}}
        assert project["artifactId"] == "a"

    def test_repeated_tags_become_lists(self, pom_builder):
        content = pom_builder(
            "g",
            "a",
            "1.0",
            body="<developers><developer><id>x</id></developer><developer><id>y</id></developer></developers>",
        )
        developers = parse_pom(content)["project"]["developers"]["developer"]
        assert developers == [{"id": "x"}, {"id": "y"}]

    def test_malformed_xml_raises_parse_error(self):
        with pytest.raises(ParseError) as exc_info:
            parse_pom("<project><groupId>g</project>", "bad.pom")
        assert "bad.pom" in str(exc_info.value)

    def test_wrong_root_element(self):
        with pytest.raises(ParseError):
            parse_pom("<settings/>")

    def test_element_to_dict_leaf_text_is_stripped(self):
        import xml.etree.ElementTree as ET

        assert element_to_dict(ET.fromstring("<a>  text \n</a>")) == "text"


class TestParentIdentity:
    def test_no_parent(self, pom_builder):
        assert parent_identity(parse_pom(pom_builder("g", "a", "1.0"))) is None

    def test_parent_coordinates_are_trimmed(self):
        pom = parse_pom(
            "<project><parent><groupId> org.p </groupId><artifactId>\nparent\n</artifactId>"
            "<version> 2 </version></parent><artifactId>a</artifactId></project>"
        )
        identity = parent_identity(pom)
        assert identity.to_url() == "cd:/maven/mavencentral/org.p/parent/2"

    def test_incomplete_parent(self):
        pom = parse_pom("<project><parent><groupId>g</groupId></parent></project>")
        with pytest.raises(ParseError):
            parent_identity(pom)

    def test_pom_identity_inherits_group_and_version(self, pom_builder):
        pom = parse_pom(
            "<project><parent><groupId>org.p</groupId><artifactId>p</artifactId>"
            "<version>3.1</version></parent><artifactId>child</artifactId></project>"
        )
        assert pom_identity(pom).to_url() == "cd:/maven/mavencentral/org.p/child/3.1"


class TestResolve:
    @pytest.mark.asyncio
    async def test_without_parent(self, resolver_for, pom_repository, pom_builder, write_pom):
        repository = pom_repository()
        location = write_pom(pom_builder("org.example", "child", "1.0"))
        manifest = await resolver_for(repository).resolve(HarvestRequest("maven", CHILD_URL), location)
        assert len(manifest.fragments) == 1
        assert manifest.summary == manifest.fragments[0]
        assert repository.calls == []

    @pytest.mark.asyncio
    async def test_child_overrides_ancestors_in_order(self, resolver_for, pom_repository, pom_builder, write_pom):
        grandparent = pom_builder(
            "org.example", "grandparent", "1", body="<name>gp</name><url>https://gp.example</url>"
        )
        parent = pom_builder(
            "org.example",
            "parent",
            "2",
            parent=("org.example", "grandparent", "1"),
            body="<name>parent</name><licenses><license><name>Apache-2.0</name></license></licenses>",
        )
        child = pom_builder("org.example", "child", "1.0", parent=("org.example", "parent", "2"), body="<name>child</name>")
        repository = pom_repository(
            poms={("org.example", "parent", "2"): parent, ("org.example", "grandparent", "1"): grandparent},
            # Slow parent, fast grandparent: order must still follow the chain.
            delays={("org.example", "parent", "2"): 0.05},
        )

        manifest = await resolver_for(repository).resolve(HarvestRequest("maven", CHILD_URL), write_pom(child))

        assert [f["project"]["artifactId"] for f in manifest.fragments] == ["child", "parent", "grandparent"]
        project = manifest.summary["project"]
        assert project["name"] == "child"
        assert project["artifactId"] == "child"
        assert project["licenses"] == {"license": {"name": "Apache-2.0"}}
        assert project["url"] == "https://gp.example"
        assert repository.calls == [("org.example", "parent", "2"), ("org.example", "grandparent", "1")]

    @pytest.mark.asyncio
    async def test_missing_parent_yields_child_only(self, resolver_for, pom_repository, pom_builder, write_pom):
        child = pom_builder("org.example", "child", "1.0", parent=("org.example", "gone", "9"), body="<name>c</name>")
        repository = pom_repository()
        manifest = await resolver_for(repository).resolve(HarvestRequest("maven", CHILD_URL), write_pom(child))
        assert len(manifest.fragments) == 1
        assert manifest.summary == manifest.fragments[0]
        assert manifest.summary["project"]["name"] == "c"

    @pytest.mark.asyncio
    async def test_missing_grandparent_keeps_parent(self, resolver_for, pom_repository, pom_builder, write_pom):
        parent = pom_builder("org.example", "parent", "2", parent=("org.example", "gone", "1"))
        child = pom_builder("org.example", "child", "1.0", parent=("org.example", "parent", "2"))
        repository = pom_repository(poms={("org.example", "parent", "2"): parent})
        manifest = await resolver_for(repository).resolve(HarvestRequest("maven", CHILD_URL), write_pom(child))
        assert len(manifest.fragments) == 2

    @pytest.mark.asyncio
    async def test_fetch_failure_aborts(self, resolver_for, pom_repository, pom_builder, write_pom):
        child = pom_builder("org.example", "child", "1.0", parent=("org.example", "parent", "2"))
        repository = pom_repository(statuses={("org.example", "parent", "2"): 503})
        with pytest.raises(FetchError) as exc_info:
            await resolver_for(repository).resolve(HarvestRequest("maven", CHILD_URL), write_pom(child))
        assert exc_info.value.status == 503

    @pytest.mark.asyncio
    async def test_malformed_parent_aborts(self, resolver_for, pom_repository, pom_builder, write_pom):
        child = pom_builder("org.example", "child", "1.0", parent=("org.example", "parent", "2"))
        repository = pom_repository(poms={("org.example", "parent", "2"): "<project><oops></project>"})
        with pytest.raises(ParseError):
            await resolver_for(repository).resolve(HarvestRequest("maven", CHILD_URL), write_pom(child))

    @pytest.mark.asyncio
    async def test_temp_files_are_registered_for_cleanup(self, resolver_for, pom_repository, pom_builder, write_pom):
        parent = pom_builder("org.example", "parent", "2")
        child = pom_builder("org.example", "child", "1.0", parent=("org.example", "parent", "2"))
        repository = pom_repository(poms={("org.example", "parent", "2"): parent})
        request = HarvestRequest("maven", CHILD_URL)
        await resolver_for(repository).resolve(request, write_pom(child))
        destination = repository.destinations[0]
        assert os.path.exists(destination)
        request.run_cleanups()
        assert not os.path.exists(destination)

    @pytest.mark.asyncio
    async def test_resolution_is_idempotent(self, resolver_for, pom_repository, pom_builder, write_pom):
        parent = pom_builder("org.example", "parent", "2", body="<name>p</name>")
        child = pom_builder("org.example", "child", "1.0", parent=("org.example", "parent", "2"))
        repository = pom_repository(poms={("org.example", "parent", "2"): parent})
        location = write_pom(child)
        first = await resolver_for(repository).resolve(HarvestRequest("maven", CHILD_URL), location)
        second = await resolver_for(repository).resolve(HarvestRequest("maven", CHILD_URL), location)
        assert first == second
