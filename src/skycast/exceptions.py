"""Exception hierarchy for skycast.

Tool-level failures inside the weather host are reported through FastMCP's
``ToolError`` so that they reach the client as ``isError`` results; the
exceptions here cover the orchestrator side and configuration.
"""

__all__ = [
    "SkycastError",
    "ConfigError",
    "ChatEndpointError",
    "ChatEndpointNotReadyError",
    "ToolHostError",
    "ToolTransportError",
]


class SkycastError(Exception):
    """Base class for all skycast errors."""


class ConfigError(SkycastError):
    """Raised when an environment setting cannot be parsed."""


class ChatEndpointError(SkycastError):
    """The chat-completions endpoint failed or answered with an unusable body."""


class ChatEndpointNotReadyError(ChatEndpointError):
    """A query was attempted before a successful warm-up call."""

    def __init__(self, message: str = "Chat endpoint not ready"):
        super().__init__(message)


class ToolHostError(SkycastError):
    """Base class for failures talking to the tool host."""


class ToolTransportError(ToolHostError):
    """The tool host could not be reached or broke the protocol."""
