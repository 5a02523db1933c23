"""MCP tool provider for ToolRegistry.

This module provides MCPToolProvider, a ToolProvider implementation that
exposes the tools of one MCP client and flattens call results into text.
"""

import json
from typing import Any

from skycast.domain.protocols import MCPClient
from skycast.domain.types import ToolDescriptor, ToolOutput
from skycast.logger import get_logger

logger = get_logger(__name__)

NO_CONTENT_MESSAGE = "Tool returned no content or an unexpected format."


def flatten_tool_content(content: Any) -> str:
    """Join MCP content items into one newline-separated text block.

    Text items contribute their text; any other item is serialized to JSON.

    Args:
        content: The ``content`` list of a ``CallToolResult``.

    Returns:
        The joined text, or a fixed notice when there is nothing to show.
    """
    if not isinstance(content, list) or not content:
        return NO_CONTENT_MESSAGE

    parts: list[str] = []
    for item in content:
        text = getattr(item, "text", None)
        if getattr(item, "type", None) == "text" and isinstance(text, str) and text:
            parts.append(text)
        elif hasattr(item, "model_dump_json"):
            parts.append(item.model_dump_json(exclude_none=True))
        elif isinstance(item, (dict, list)):
            parts.append(json.dumps(item, default=str))
        else:
            parts.append(str(item))
    return "\n".join(parts)


class MCPToolProvider:
    """Tool provider backed by a single MCP client.

    Example:
        >>> provider = MCPToolProvider(client, server_name="weather")
        >>> registry.register_provider(provider)
    """

    def __init__(self, client: MCPClient, server_name: str = "mcp"):
        """Initialize MCP tool provider.

        Args:
            client: Connected MCP client.
            server_name: Name used as the provider name in logs and routing.
        """
        self._client = client
        self._server_name = server_name

        logger.debug(f"MCPToolProvider initialized for server '{server_name}'")

    @property
    def provider_name(self) -> str:
        """Return provider name for logging and identification."""
        return self._server_name

    async def get_tool_descriptors(self) -> list[ToolDescriptor]:
        """Fetch the server's tools and convert them to descriptors.

        Tools whose metadata cannot be validated are skipped with a warning.

        Raises:
            ToolTransportError: If the server cannot be reached.
        """
        tools = await self._client.list_tools()

        descriptors: list[ToolDescriptor] = []
        for tool in tools:
            try:
                descriptors.append(ToolDescriptor.from_mcp_tool(tool))
            except ValueError as exc:
                logger.warning(
                    f"Skipping tool with invalid metadata from '{self._server_name}': {exc}"
                )

        logger.debug(
            f"Retrieved {len(descriptors)} tools from MCP server '{self._server_name}'"
        )
        return descriptors

    async def execute_tool(self, tool_name: str, arguments: dict[str, Any]) -> ToolOutput:
        """Execute a tool on the MCP server.

        Args:
            tool_name: Name of the tool to execute.
            arguments: Decoded tool arguments.

        Returns:
            Flattened text plus the server's error flag.

        Raises:
            ToolTransportError: If the call could not be completed.
        """
        logger.debug(f"Executing MCP tool '{tool_name}' on server '{self._server_name}'")

        result = await self._client.call_tool(tool_name, arguments)
        text = flatten_tool_content(getattr(result, "content", None))
        is_error = bool(getattr(result, "isError", False))

        logger.debug(
            f"MCP tool '{tool_name}' finished on '{self._server_name}': "
            f"{len(text)} chars, error={is_error}"
        )
        return ToolOutput(text=text, is_error=is_error)
