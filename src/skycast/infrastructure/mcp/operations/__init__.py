"""Operations helpers for interacting with an MCP server session."""

from .tools import ToolsOperations

__all__ = [
    "ToolsOperations",
]
