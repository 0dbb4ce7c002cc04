"""CLI command tests via typer's CliRunner."""

import json

import pytest
from typer.testing import CliRunner

from component_harvester.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("HARVESTER_TEMP_LOCATION", str(tmp_path))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def maven_layout(tmp_path, pom_builder):
    """A component folder with a POM and a local repository holding its parent."""
    component = tmp_path / "component"
    component.mkdir()
    (component / "pom.xml").write_text(
        pom_builder(
            "org.example",
            "child",
            "1.0",
            parent=("org.example", "parent", "2"),
            body="<name>child</name>",
        )
    )
    (component / "LICENSE").write_text("Apache License 2.0")

    repository = tmp_path / "m2"
    parent_dir = repository / "org" / "example" / "parent" / "2"
    parent_dir.mkdir(parents=True)
    (parent_dir / "parent-2.pom").write_text(
        pom_builder("org.example", "parent", "2", body="<url>https://example.org</url>")
    )
    return component, repository


class TestMavenCommand:
    def test_resolves_with_local_repository(self, maven_layout):
        component, repository = maven_layout
        result = runner.invoke(
            app,
            ["maven", str(component / "pom.xml"), "--repository", str(repository), "--no-discover-source"],
        )
        assert result.exit_code == 0, result.output
        output = json.loads(result.stdout)

        document = output["document"]
        assert document["manifest"]["summary"]["project"]["name"] == "child"
        assert document["manifest"]["summary"]["project"]["url"] == "https://example.org"
        assert len(document["manifest"]["fragments"]) == 2
        assert document["_metadata"]["schemaVersion"] == "1.1.2"
        assert document["_metadata"]["outcome"] == "processed"
        assert [a["path"] for a in document["attachments"]] == ["LICENSE"]
        assert {edge["kind"] for edge in output["edges"]} == {"self", "sibling"}
        assert output["queued"] == []

    def test_explicit_url(self, maven_layout):
        component, repository = maven_layout
        result = runner.invoke(
            app,
            [
                "maven",
                str(component / "pom.xml"),
                "--url",
                "cd:/maven/mavencentral/org.example/renamed/9.9",
                "-r",
                str(repository),
                "--no-discover-source",
            ],
        )
        assert result.exit_code == 0, result.output
        edges = json.loads(result.stdout)["edges"]
        assert edges[0]["source"] == "urn:maven:mavencentral:org.example:renamed:revision:9.9"

    def test_malformed_pom_exits_with_error(self, tmp_path):
        pom = tmp_path / "pom.xml"
        pom.write_text("<project><oops></project>")
        result = runner.invoke(app, ["maven", str(pom), "--no-discover-source"])
        assert result.exit_code == 1


class TestVersionsCommands:
    def test_latest(self):
        result = runner.invoke(app, ["versions", "latest", "1.0.0", "2.0.0-beta", "1.5.0"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "1.5.0"

    def test_latest_invalid(self):
        result = runner.invoke(app, ["versions", "latest", "1.0.0", "banana"])
        assert result.exit_code == 1

    def test_aggregate(self):
        result = runner.invoke(app, ["versions", "aggregate", "1.0.0", "9.14.0"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "10.14.0"

    def test_aggregate_with_base(self):
        result = runner.invoke(app, ["versions", "aggregate", "1.2.3", "--base", "1.0.0"])
        assert result.stdout.strip() == "2.2.3"


class TestAttachCommand:
    def test_json_output(self, tmp_path):
        folder = tmp_path / "pkg"
        folder.mkdir()
        (folder / "NOTICE").write_text("notice")
        (folder / "main.c").write_text("int main;")
        result = runner.invoke(app, ["attach", str(folder), "--json"])
        assert result.exit_code == 0
        attachments = json.loads(result.stdout)
        assert [a["path"] for a in attachments] == ["NOTICE"]
        assert len(attachments[0]["token"]) == 64

    def test_table_output(self, tmp_path):
        folder = tmp_path / "pkg"
        folder.mkdir()
        (folder / "COPYING").write_text("gpl")
        result = runner.invoke(app, ["attach", str(folder)])
        assert result.exit_code == 0
        assert "COPYING" in result.stdout

    def test_nothing_found(self, tmp_path):
        result = runner.invoke(app, ["attach", str(tmp_path)])
        assert result.exit_code == 0
        assert "No license-like files found" in result.stdout
