"""Tool-related operations for MCP sessions."""

from __future__ import annotations

from typing import Any, Optional

from mcp import types

from skycast.exceptions import ToolTransportError

from .base import OperationBase, SessionGetter


def _describe(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


class ToolsOperations(OperationBase):
    """Encapsulates tool discovery and invocation operations.

    Transport and protocol failures are raised as ``ToolTransportError``;
    errors reported by the tool itself come back inside the result with
    ``isError`` set.
    """

    def __init__(self, session_getter: SessionGetter) -> None:
        super().__init__(session_getter, logger_name="mcp_client.operations.tools")

    async def list_tools(self) -> list[types.Tool]:
        """Return the list of tools exposed by the connected server."""
        session = self._require_session("list tools")

        try:
            result = await session.list_tools()
        except Exception as exc:
            self.logger.error(f"Failed to list tools: {exc}")
            raise ToolTransportError(f"Failed to list tools: {_describe(exc)}") from exc

        tools = getattr(result, "tools", None)
        return list(tools or [])

    async def call_tool(
        self,
        tool_name: str,
        arguments: Optional[dict[str, Any]] = None,
    ) -> types.CallToolResult:
        """
        Invoke a tool on the connected server.

        Returns:
            The tool result, which may carry ``isError``.

        Raises:
            ToolTransportError: If the call could not be completed.
        """
        session = self._require_session(f"call tool '{tool_name}'")

        try:
            return await session.call_tool(tool_name, arguments or {})
        except Exception as exc:
            self.logger.error(f"Failed to call tool '{tool_name}': {exc}")
            raise ToolTransportError(_describe(exc)) from exc
