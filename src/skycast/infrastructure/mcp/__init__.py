"""MCP client infrastructure."""

from skycast.infrastructure.mcp.client import MCPStdioClient, command_for_script

__all__ = ["MCPStdioClient", "command_for_script"]
