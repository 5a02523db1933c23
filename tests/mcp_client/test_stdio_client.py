"""Tests for the stdio MCP client and its operations."""

import sys
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, Mock

import pytest
from mcp.types import ListToolsResult, Tool

from skycast.domain.types import ConnectionStatus
from skycast.exceptions import ToolHostError, ToolTransportError
from skycast.infrastructure.mcp import MCPStdioClient, command_for_script
from skycast.infrastructure.mcp import client as client_module
from skycast.infrastructure.mcp.operations import ToolsOperations


class TestCommandForScript:
    def test_python_script_uses_current_interpreter(self):
        assert command_for_script("weather_server.py") == (sys.executable, ["weather_server.py"])

    def test_javascript_build_uses_node(self):
        command, args = command_for_script("build/index.js")

        assert command.endswith("node")
        assert args == ["build/index.js"]

    def test_other_paths_run_directly(self):
        assert command_for_script("/usr/local/bin/weather-host") == ("/usr/local/bin/weather-host", [])


class TestForScript:
    def test_debug_forwarded_to_tool_host(self, monkeypatch):
        monkeypatch.setenv("SKYCAST_MODEL", "llama3.1")

        client = MCPStdioClient.for_script("weather_server.py", debug=True, request_timeout=5.0)

        assert client.env["DEBUG"] == "true"
        assert client.env["SKYCAST_MODEL"] == "llama3.1"
        assert client.request_timeout == 5.0
        assert client.connection_status == ConnectionStatus.DISCONNECTED


class TestToolsOperations:
    @pytest.mark.asyncio
    async def test_no_session(self):
        operations = ToolsOperations(lambda: None)

        with pytest.raises(ToolTransportError, match="no active MCP session"):
            await operations.list_tools()

    @pytest.mark.asyncio
    async def test_list_tools(self):
        session = Mock()
        session.list_tools = AsyncMock(
            return_value=ListToolsResult(tools=[Tool(name="get-alerts", inputSchema={"type": "object"})])
        )

        tools = await ToolsOperations(lambda: session).list_tools()

        assert [tool.name for tool in tools] == ["get-alerts"]

    @pytest.mark.asyncio
    async def test_call_failure_becomes_transport_error(self):
        session = Mock()
        session.call_tool = AsyncMock(side_effect=RuntimeError("broken pipe"))

        with pytest.raises(ToolTransportError, match="broken pipe"):
            await ToolsOperations(lambda: session).call_tool("get-alerts", {"state": "CA"})

        session.call_tool.assert_awaited_once_with("get-alerts", {"state": "CA"})

    @pytest.mark.asyncio
    async def test_unnamed_failure_uses_class_name(self):
        session = Mock()
        session.list_tools = AsyncMock(side_effect=TimeoutError())

        with pytest.raises(ToolTransportError, match="TimeoutError"):
            await ToolsOperations(lambda: session).list_tools()


class TestMCPStdioClient:
    @pytest.mark.asyncio
    async def test_calls_before_connect_fail(self):
        client = MCPStdioClient("python", ["weather_server.py"])

        assert client.is_connected is False
        with pytest.raises(ToolHostError):
            await client.call_tool("get-alerts", {"state": "CA"})

    @pytest.mark.asyncio
    async def test_connect_failure(self, monkeypatch):
        @asynccontextmanager
        async def failing_stdio_client(params):
            raise FileNotFoundError("No such file or directory: 'no-such-host'")
            yield

        monkeypatch.setattr(client_module, "stdio_client", failing_stdio_client)
        client = MCPStdioClient("no-such-host")

        with pytest.raises(ToolTransportError, match="Failed to connect to tool host"):
            await client.connect()

        assert client.connection_status == ConnectionStatus.ERROR

    @pytest.mark.asyncio
    async def test_disconnect_without_connect(self):
        client = MCPStdioClient("python")

        await client.disconnect()

        assert client.connection_status == ConnectionStatus.DISCONNECTED
