"""Application layer: chat endpoint adapter, transcript, tools and the agent loop."""

from skycast.application.agentic_loop import AgentLoop
from skycast.application.chat_endpoint import ChatEndpoint
from skycast.application.conversation import Conversation
from skycast.application.mcp_tool_provider import MCPToolProvider
from skycast.application.tool_registry import ToolRegistry

__all__ = [
    "AgentLoop",
    "ChatEndpoint",
    "Conversation",
    "MCPToolProvider",
    "ToolRegistry",
]
