"""Domain types shared by the orchestrator components."""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = [
    "ConnectionStatus",
    "LoopState",
    "ToolDescriptor",
    "ToolInvocation",
    "ToolOutput",
    "ToolResult",
]


class ConnectionStatus(Enum):
    """Status of the tool host connection."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    ERROR = "error"


class LoopState(Enum):
    """States of the tool-calling loop for a single query."""

    AWAITING_MODEL = "awaiting_model"
    AWAITING_TOOLS = "awaiting_tools"
    DONE = "done"


def _empty_object_schema() -> dict[str, Any]:
    return {"type": "object", "properties": {}}


class ToolDescriptor(BaseModel):
    """Schema metadata for one tool exposed by the tool host.

    Tool hosts are free to send loosely shaped schemas; the validators below
    reshape them into something every chat-completions backend accepts:
    a JSON object schema with a ``properties`` mapping.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    description: str = ""
    input_schema: dict[str, Any] = Field(default_factory=_empty_object_schema)

    @field_validator("description", mode="before")
    @classmethod
    def _default_description(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("input_schema", mode="before")
    @classmethod
    def _coerce_schema(cls, value: Any) -> dict[str, Any]:
        if not isinstance(value, dict):
            return _empty_object_schema()
        schema = dict(value)
        if schema.get("type") != "object":
            schema["type"] = "object"
        if not isinstance(schema.get("properties"), dict):
            schema["properties"] = {}
        return schema

    @classmethod
    def from_mcp_tool(cls, tool: Any) -> "ToolDescriptor":
        """Build a descriptor from an ``mcp.types.Tool``."""
        return cls(
            name=tool.name,
            description=getattr(tool, "description", None),
            input_schema=getattr(tool, "inputSchema", None),
        )

    def to_openai_tool(self) -> dict[str, Any]:
        """Format as an OpenAI-compatible function tool."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_schema,
            },
        }


@dataclass(frozen=True)
class ToolInvocation:
    """A tool call requested by the model.

    ``arguments`` is kept exactly as the model sent it (usually a JSON
    string) until :meth:`decode_arguments` is called.
    """

    id: Optional[str]
    name: str
    arguments: Any

    @classmethod
    def from_tool_call(cls, tool_call: dict[str, Any]) -> "ToolInvocation":
        function = tool_call.get("function")
        if not isinstance(function, dict):
            function = {}
        return cls(
            id=tool_call.get("id"),
            name=function.get("name") or "",
            arguments=function.get("arguments"),
        )

    def decode_arguments(self) -> dict[str, Any]:
        """Decode the argument payload into a keyword mapping.

        Raises:
            ValueError: If the payload is not a JSON object.
        """
        payload = self.arguments
        if payload is None or payload == "":
            return {}
        if isinstance(payload, str):
            payload = json.loads(payload)
        if not isinstance(payload, dict):
            raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
        return payload

    def raw_arguments(self) -> str:
        if isinstance(self.arguments, str):
            return self.arguments
        return json.dumps(self.arguments, default=str)


@dataclass(frozen=True)
class ToolOutput:
    """Flattened text returned by a tool provider."""

    text: str
    is_error: bool = False


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one tool invocation, ready to go into the transcript."""

    call_id: Optional[str]
    name: str
    content: str
    is_error: bool = False

    def to_message(self) -> dict[str, Any]:
        return {
            "role": "tool",
            "tool_call_id": self.call_id,
            "name": self.name,
            "content": self.content,
        }
