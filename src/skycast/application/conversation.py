"""Conversation transcript for one tool-calling run.

The transcript is append-only. It tracks which tool calls from the latest
assistant message are still unanswered, so the agent loop can verify that
every request got exactly one result before the model is called again.
"""

import copy
from datetime import datetime
from typing import Any, Optional

from skycast.domain.types import ToolResult
from skycast.logger import get_logger

logger = get_logger(__name__)


class Conversation:
    """Manages the message history sent to the chat endpoint.

    Example:
        >>> conversation = Conversation()
        >>> conversation.add_user_message("Any alerts in CA?")
        >>> conversation.get_messages_for_api()
        [{'role': 'user', 'content': 'Any alerts in CA?'}]
    """

    def __init__(self) -> None:
        self._messages: list[dict[str, Any]] = []
        self._pending_tool_calls: list[Optional[str]] = []
        self._created_at = datetime.now()
        self._last_modified_at = self._created_at

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def last_modified_at(self) -> datetime:
        return self._last_modified_at

    @property
    def messages(self) -> list[dict[str, Any]]:
        """Read-only view (a copy) of the transcript."""
        return self.get_messages_for_api()

    def add_user_message(self, content: str) -> None:
        self._append({"role": "user", "content": content})
        logger.debug(f"Added user message: {len(self._messages)} total messages")

    def add_assistant_message(self, message: dict[str, Any]) -> None:
        """Append an assistant message exactly as the endpoint returned it.

        Any ``tool_calls`` it carries become pending until answered via
        :meth:`add_tool_result`.

        Raises:
            ValueError: If earlier tool calls are still unanswered.
        """
        if self._pending_tool_calls:
            raise ValueError(
                f"Cannot add assistant message: tool calls still pending {self._pending_tool_calls}"
            )

        stored = copy.deepcopy(message)
        stored["role"] = "assistant"
        self._append(stored)

        tool_calls = stored.get("tool_calls") or []
        self._pending_tool_calls = [
            call.get("id") for call in tool_calls if isinstance(call, dict)
        ]

        logger.debug(
            f"Added assistant message with {len(self._pending_tool_calls)} tool calls: "
            f"{len(self._messages)} total messages"
        )

    def add_tool_result(self, result: ToolResult) -> None:
        """Append the result for one pending tool call.

        Raises:
            ValueError: If ``result.call_id`` does not match a pending call.
        """
        if result.call_id not in self._pending_tool_calls:
            raise ValueError(f"No pending tool call with id {result.call_id!r}")

        self._pending_tool_calls.remove(result.call_id)
        self._append(result.to_message())

        logger.debug(
            f"Added tool result for '{result.name}' (error={result.is_error}): "
            f"{len(self._pending_tool_calls)} still pending"
        )

    def pending_tool_call_ids(self) -> list[Optional[str]]:
        return list(self._pending_tool_calls)

    def has_pending_tool_calls(self) -> bool:
        return bool(self._pending_tool_calls)

    def get_messages_for_api(self) -> list[dict[str, Any]]:
        """Return a deep copy of the messages in chat-completions format."""
        return copy.deepcopy(self._messages)

    def get_roles(self) -> list[str]:
        return [message["role"] for message in self._messages]

    def get_message_count(self) -> int:
        return len(self._messages)

    def _append(self, message: dict[str, Any]) -> None:
        self._messages.append(message)
        self._last_modified_at = datetime.now()
