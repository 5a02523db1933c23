"""MCP client that launches a tool host as a subprocess and talks over stdio."""

from __future__ import annotations

import os
import shutil
import sys
from contextlib import AsyncExitStack
from datetime import timedelta
from typing import Any, Optional

from mcp import ClientSession, StdioServerParameters, types
from mcp.client.stdio import stdio_client

from skycast.domain.types import ConnectionStatus
from skycast.exceptions import ToolTransportError
from skycast.infrastructure.mcp.operations import ToolsOperations
from skycast.logger import get_logger

logger = get_logger("mcp_client")


def command_for_script(script_path: str) -> tuple[str, list[str]]:
    """Pick the interpreter for a tool host script.

    Python scripts run under the current interpreter, JavaScript builds under
    ``node``; anything else is treated as an executable.
    """
    if script_path.endswith(".py"):
        return sys.executable, [script_path]
    if script_path.endswith(".js"):
        return shutil.which("node") or "node", [script_path]
    return script_path, []


class MCPStdioClient:
    """MCP protocol client over a single persistent stdio pipe.

    The pipe is opened once by :meth:`connect` and held until
    :meth:`disconnect`; there is no reconnection.

    Example:
        >>> async with MCPStdioClient.for_script("weather_server.py") as client:
        ...     tools = await client.list_tools()
    """

    def __init__(
        self,
        command: str,
        args: Optional[list[str]] = None,
        env: Optional[dict[str, str]] = None,
        request_timeout: float = 60.0,
    ):
        self.command = command
        self.args = list(args or [])
        self.env = env
        self.request_timeout = request_timeout

        self._exit_stack: Optional[AsyncExitStack] = None
        self._session: Optional[ClientSession] = None
        self._status = ConnectionStatus.DISCONNECTED

        self._tools = ToolsOperations(self._get_session)

    @classmethod
    def for_script(
        cls,
        script_path: str,
        *,
        debug: bool = False,
        request_timeout: float = 60.0,
    ) -> "MCPStdioClient":
        """Create a client for a tool host script, forwarding the environment."""
        command, args = command_for_script(script_path)
        server_env = os.environ.copy()
        if debug:
            server_env["DEBUG"] = "true"
        return cls(command=command, args=args, env=server_env, request_timeout=request_timeout)

    # --------------------------------------------------------------------- #
    # Properties
    # --------------------------------------------------------------------- #

    @property
    def connection_status(self) -> ConnectionStatus:
        return self._status

    @property
    def is_connected(self) -> bool:
        """Whether the client currently has an active session."""
        return self._status == ConnectionStatus.CONNECTED

    def _get_session(self) -> Optional[ClientSession]:
        """Session getter passed to operations modules."""
        return self._session

    # --------------------------------------------------------------------- #
    # Connection lifecycle
    # --------------------------------------------------------------------- #

    async def connect(self) -> None:
        """
        Launch the tool host and initialize the MCP session.

        Raises:
            ToolTransportError: If the process cannot be started or the
                handshake fails.
        """
        if self._session is not None:
            return

        logger.info(f"Starting tool host: {self.command} {' '.join(self.args)}")
        params = StdioServerParameters(command=self.command, args=self.args, env=self.env)
        stack = AsyncExitStack()
        try:
            read_stream, write_stream = await stack.enter_async_context(stdio_client(params))
            session = await stack.enter_async_context(
                ClientSession(
                    read_stream,
                    write_stream,
                    read_timeout_seconds=timedelta(seconds=self.request_timeout),
                )
            )
            await session.initialize()
        except Exception as exc:
            self._status = ConnectionStatus.ERROR
            await stack.aclose()
            logger.error(f"Failed to connect to tool host: {exc}")
            reason = str(exc) or exc.__class__.__name__
            raise ToolTransportError(f"Failed to connect to tool host: {reason}") from exc

        self._exit_stack = stack
        self._session = session
        self._status = ConnectionStatus.CONNECTED
        logger.info("Session initialization completed")

    async def disconnect(self) -> None:
        """Close the session and terminate the tool host process."""
        stack, self._exit_stack = self._exit_stack, None
        self._session = None
        if stack is not None:
            await stack.aclose()
            logger.info("Disconnected from tool host")
        self._status = ConnectionStatus.DISCONNECTED

    async def __aenter__(self) -> "MCPStdioClient":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.disconnect()

    # --------------------------------------------------------------------- #
    # Operations delegation
    # --------------------------------------------------------------------- #

    async def list_tools(self) -> list[types.Tool]:
        """List tools exposed by the connected server."""
        return await self._tools.list_tools()

    async def call_tool(
        self,
        tool_name: str,
        arguments: Optional[dict[str, Any]] = None,
    ) -> types.CallToolResult:
        """Invoke a tool on the connected server."""
        return await self._tools.call_tool(tool_name, arguments)
