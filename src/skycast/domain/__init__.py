"""Domain layer: types and protocols shared across skycast."""

from skycast.domain.protocols import ChatBackend, MCPClient, ToolProvider
from skycast.domain.types import (
    ConnectionStatus,
    LoopState,
    ToolDescriptor,
    ToolInvocation,
    ToolOutput,
    ToolResult,
)

__all__ = [
    "ChatBackend",
    "MCPClient",
    "ToolProvider",
    "ConnectionStatus",
    "LoopState",
    "ToolDescriptor",
    "ToolInvocation",
    "ToolOutput",
    "ToolResult",
]
