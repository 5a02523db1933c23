"""Base utilities for MCP session operations."""

from __future__ import annotations

from typing import Callable, Optional

from mcp.client.session import ClientSession

from skycast.exceptions import ToolTransportError
from skycast.logger import get_logger

SessionGetter = Callable[[], Optional[ClientSession]]


class OperationBase:
    """Shared helpers for operations that rely on an active MCP session."""

    def __init__(self, session_getter: SessionGetter, logger_name: str) -> None:
        self._session_getter = session_getter
        self._logger = get_logger(logger_name)

    def _require_session(self, action: str) -> ClientSession:
        """
        Retrieve the current session or fail if there is none.

        Args:
            action: Description used in the error when session is missing.

        Raises:
            ToolTransportError: If no session is active.
        """
        session = self._session_getter()
        if session is None:
            self._logger.warning(f"Cannot {action}: no active MCP session")
            raise ToolTransportError(f"Cannot {action}: no active MCP session")
        return session

    @property
    def logger(self):
        """Expose the configured logger for subclasses."""
        return self._logger
