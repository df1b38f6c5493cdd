"""Shared fixtures for Buildez MCP tests."""

import json

import httpx
import pytest

from buildez_mcp.adapters import BuildezAPI

BASE_URL = "http://buildez.test"

CONFIG_ENV_VARS = (
    "BUILDEZ_API_URL",
    "MCP_MODE",
    "MCP_HOST",
    "MCP_PORT",
    "BUILDEZ_EDITOR_URL",
    "BUILDEZ_API_TIMEOUT",
)


class FakeBuildez:
    """
    In-memory stand-in for the Buildez web app.

    Answers the three API endpoints from configurable attributes and
    records every request it receives.
    """

    def __init__(self):
        self.requests = []
        self.taken = set()
        self.check_error = None
        self.ai_builder_response = {
            "selectedPlugins": [{"plugin": "hero"}, {"plugin": "menu"}],
            "websiteType": "restaurant",
        }
        self.build_response = {"success": True}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/api/check-webid":
            if self.check_error is not None:
                raise self.check_error
            web_id = request.url.params["webId"]
            return httpx.Response(200, json={"available": web_id not in self.taken})
        if path == "/api/ai-builder":
            return httpx.Response(200, json=self.ai_builder_response)
        if path == "/api/build-website":
            return httpx.Response(200, json=self.build_response)
        return httpx.Response(404, text="Not found")

    def calls(self, path: str):
        return [r for r in self.requests if r.url.path == path]

    def body(self, path: str) -> dict:
        """JSON body of the last request sent to path."""
        return json.loads(self.calls(path)[-1].content)

    def api(self) -> BuildezAPI:
        return BuildezAPI(BASE_URL, transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_buildez():
    """Fake Buildez API with every web ID available."""
    return FakeBuildez()


@pytest.fixture(autouse=True)
def clean_config_env(monkeypatch):
    """Keep the developer's environment out of configuration tests."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
