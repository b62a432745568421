"""Tests for the MCP server factory."""

import pytest

pytest.importorskip("claude_agent_sdk")

from src.tools.server import PIPELINE_TOOLS, SERVER_NAME, TOOL_PREFIX, create_pipeline_server


class TestServerFactory:
    def test_creates_server(self, service):
        server = create_pipeline_server(service)
        assert server is not None
        assert server["name"] == SERVER_NAME

    def test_tool_names_share_prefix(self):
        assert len(PIPELINE_TOOLS) == 8
        assert all(name.startswith(TOOL_PREFIX) for name in PIPELINE_TOOLS)
        assert f"{TOOL_PREFIX}move_card" in PIPELINE_TOOLS
