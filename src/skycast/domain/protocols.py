"""Domain protocols - interfaces the orchestrator depends on.

Using protocols keeps the agent loop independent of the concrete chat
endpoint and MCP client, so tests can plug in fakes.
"""

from typing import Any, Optional, Protocol

from mcp.types import CallToolResult, Tool

from skycast.domain.types import ToolDescriptor, ToolOutput

__all__ = ["ChatBackend", "MCPClient", "ToolProvider"]


class ChatBackend(Protocol):
    """Protocol for a chat-completions backend."""

    @property
    def ready(self) -> bool:
        """Whether the backend accepted a warm-up call."""
        ...

    def complete(
        self,
        messages: list[dict[str, Any]],
        tools: Optional[list[dict[str, Any]]] = None,
    ) -> dict[str, Any]:
        """Send the transcript and return the first choice's message.

        Raises:
            ChatEndpointError: If the call fails.
        """
        ...


class MCPClient(Protocol):
    """Protocol for MCP client operations used by the orchestrator."""

    @property
    def is_connected(self) -> bool:
        """Check if client is currently connected."""
        ...

    async def list_tools(self) -> list[Tool]:
        """List available tools from the server.

        Raises:
            ToolTransportError: If the server cannot be reached.
        """
        ...

    async def call_tool(self, tool_name: str, arguments: dict[str, Any] | None = None) -> CallToolResult:
        """Call a specific tool.

        Raises:
            ToolTransportError: If the server cannot be reached.
        """
        ...


class ToolProvider(Protocol):
    """Protocol for tool providers registered with the ToolRegistry."""

    @property
    def provider_name(self) -> str:
        """Return the name of this tool provider."""
        ...

    async def get_tool_descriptors(self) -> list[ToolDescriptor]:
        """Return descriptors for every tool this provider exposes."""
        ...

    async def execute_tool(self, tool_name: str, arguments: dict[str, Any]) -> ToolOutput:
        """Execute a tool with given arguments.

        Raises:
            ToolHostError: If the tool cannot be executed.
        """
        ...
