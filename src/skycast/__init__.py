"""Weather chat demo: an MCP weather tool host and a tool-calling chat client."""

__version__ = "0.1.0"
