"""Shared fixtures for skycast tests."""

import pytest
from mcp.types import Tool

from skycast.application import AgentLoop, MCPToolProvider, ToolRegistry

from tests.fakes import FakeChatEndpoint, FakeMCPClient


@pytest.fixture
def weather_tools() -> list[Tool]:
    return [
        Tool(
            name="get-alerts",
            description="Get weather alerts for a US state",
            inputSchema={
                "type": "object",
                "properties": {"state": {"type": "string", "minLength": 2, "maxLength": 2}},
                "required": ["state"],
            },
        ),
        Tool(
            name="get-latlong-from-name",
            description="Geocode a place name",
            inputSchema={
                "type": "object",
                "properties": {"location_name": {"type": "string", "minLength": 1}},
                "required": ["location_name"],
            },
        ),
        Tool(
            name="get-worldwide-forecast",
            description="Forecast for coordinates",
            inputSchema={
                "type": "object",
                "properties": {
                    "latitude": {"type": "number", "minimum": -90, "maximum": 90},
                    "longitude": {"type": "number", "minimum": -180, "maximum": 180},
                },
                "required": ["latitude", "longitude"],
            },
        ),
    ]


@pytest.fixture
def make_agent(weather_tools):
    """Build an AgentLoop around fakes: make_agent(replies, results=..., **kwargs)."""

    def _make(replies, results=None, list_error=None, max_tool_rounds=8):
        endpoint = FakeChatEndpoint(replies)
        client = FakeMCPClient(weather_tools, results=results, list_error=list_error)
        registry = ToolRegistry()
        registry.register_provider(MCPToolProvider(client, server_name="weather"))
        agent = AgentLoop(endpoint, registry, max_tool_rounds=max_tool_rounds)
        return agent, endpoint, client

    return _make
