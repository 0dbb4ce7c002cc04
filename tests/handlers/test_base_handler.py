"""Tests for handlers/base.py - lifecycle defaults, policy gates and temp storage."""

import os

import pytest

from component_harvester.graph import EdgeKind
from component_harvester.handlers.base import BaseHandler
from component_harvester.request import PROCESS_MODE, TRAVERSE_MODE, ReprocessPolicy

URL = "cd:/npm/npmjs/-/left-pad/1.3.0"


class VersionedHandler(BaseHandler):
    @property
    def schema_version(self):
        return "1.2.0"

    @property
    def tool_spec(self):
        return {"tool": "scanner", "toolVersion": "3.0.0"}


class TestDefaults:
    """A bare handler opts out of everything except fetching."""

    def test_lifecycle_defaults(self, harvest_config, make_request):
        handler = BaseHandler(harvest_config)
        request = make_request("npm", URL)
        assert handler.can_handle(request) is False
        assert handler.should_fetch(request) is True
        assert handler.schema_version is None
        assert handler.tool_spec == {}

    @pytest.mark.asyncio
    async def test_handle_is_abstract(self, harvest_config, make_request):
        with pytest.raises(NotImplementedError):
            await BaseHandler(harvest_config).handle(make_request("npm", URL))

    def test_default_options(self):
        assert BaseHandler().options.tool_timeout_seconds == 600


class TestPolicyGates:
    def test_always(self, harvest_config, make_request):
        assert VersionedHandler(harvest_config).should_process(make_request("npm", URL, mode="always"))

    def test_never_still_traverses(self, harvest_config, make_request):
        handler = VersionedHandler(harvest_config)
        request = make_request("npm", URL, mode="never")
        assert handler.should_process(request) is False
        assert handler.should_traverse(request) is True

    def test_stale_document_is_reprocessed(self, harvest_config, make_request):
        handler = VersionedHandler(harvest_config)
        request = make_request("npm", URL, mode="stale")
        request.document.metadata.schema_version = "1.1.9"
        assert handler.should_process(request) is True

    def test_current_document_is_not_reprocessed(self, harvest_config, make_request):
        handler = VersionedHandler(harvest_config)
        request = make_request("npm", URL, mode="stale")
        request.document.metadata.schema_version = "1.2.0"
        assert handler.should_process(request) is False

    def test_unversioned_handler_compares_against_one(self, harvest_config, make_request):
        request = make_request("npm", URL, mode="stale")
        request.document.metadata.schema_version = "1"
        assert BaseHandler(harvest_config).should_process(request) is False

    def test_is_processing(self, harvest_config, make_request):
        handler = BaseHandler(harvest_config)
        request = make_request("npm", URL)
        request.process_mode = TRAVERSE_MODE
        assert handler.is_processing(request) is False
        request.process_mode = PROCESS_MODE
        assert handler.is_processing(request) is True


class TestProcess:
    def test_stamps_schema_version(self, harvest_config, make_request):
        request = make_request("npm", URL)
        identity = VersionedHandler(harvest_config)._process(request)
        assert request.document.metadata.schema_version == "1.2.0"
        assert identity.name == "left-pad"
        assert identity.revision == "1.3.0"

    def test_unversioned_handler_stamps_default(self, harvest_config, make_request):
        request = make_request("npm", URL)
        BaseHandler(harvest_config)._process(request)
        assert request.document.metadata.schema_version == "1"


class TestLinks:
    def test_basic_tool_links(self, harvest_config, make_request):
        handler = VersionedHandler(harvest_config)
        request = make_request("npm", URL)
        handler.add_basic_tool_links(request, request.identity)
        assert [(edge.kind, edge.target) for edge in request.edges] == [
            (EdgeKind.SELF, "urn:npm:npmjs:-:left-pad:revision:1.3.0:tool:scanner:3.0.0"),
            (EdgeKind.SIBLING, "urn:npm:npmjs:-:left-pad:tool:scanner"),
        ]

    def test_add_self_link_defaults_to_identity(self, harvest_config, make_request):
        request = make_request("npm", URL)
        BaseHandler(harvest_config).add_self_link(request)
        assert request.document.metadata.links == {
            "self": [{"type": "resource", "href": "urn:npm:npmjs:-:left-pad:revision:1.3.0"}]
        }

    def test_link_and_queue_tool(self, harvest_config, make_request):
        request = make_request("npm", URL)
        BaseHandler(harvest_config).link_and_queue_tool(request, "licensee")
        edge = request.edges[0]
        assert edge.kind == EdgeKind.COLLECTION_MEMBER
        assert edge.target == "urn:npm:npmjs:-:left-pad:revision:1.3.0:tool:licensee"
        assert [(item.kind, item.url) for item in request.queued] == [("licensee", URL)]

    def test_link_and_queue_uses_follow_on_policy(self, harvest_config, make_request):
        follow_on = ReprocessPolicy(mode="never")
        request = make_request("npm", URL)
        request.policy = ReprocessPolicy(mode="always", follow_ons={"source": follow_on})
        BaseHandler(harvest_config).link_and_queue(request, "source")
        assert request.queued[0].next_policy is follow_on


class TestTempStorage:
    def test_temp_file_is_removed_on_cleanup(self, harvest_config, make_request):
        request = make_request("npm", URL)
        path = BaseHandler(harvest_config)._create_temp_file(request)
        assert os.path.isfile(path)
        assert os.path.dirname(path) == harvest_config.temp_dir
        assert os.path.basename(path).startswith("cd-")
        request.run_cleanups()
        assert not os.path.exists(path)

    def test_temp_dir_is_removed_on_cleanup(self, harvest_config, make_request):
        request = make_request("npm", URL)
        path = BaseHandler(harvest_config)._create_temp_dir(request)
        with open(os.path.join(path, "inner.txt"), "w") as f:
            f.write("x")
        request.run_cleanups()
        assert not os.path.exists(path)
