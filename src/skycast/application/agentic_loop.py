"""Tool-calling agent loop.

The AgentLoop manages the interaction cycle for one query:
1. User query → fresh Conversation
2. Transcript + tools → chat endpoint
3. If tool calls → execute them one by one, append results → back to step 2
4. If text → return it to the caller

The loop is bounded by ``max_tool_rounds``; a model that keeps asking for
tools gets a fixed degraded answer instead of looping forever.
"""

import asyncio
from typing import Any, Callable, Optional

from skycast.application.conversation import Conversation
from skycast.application.tool_registry import ToolRegistry
from skycast.domain.protocols import ChatBackend
from skycast.domain.types import LoopState, ToolInvocation, ToolResult
from skycast.exceptions import ToolHostError
from skycast.logger import get_logger

logger = get_logger("agent_loop")

EMPTY_ANSWER_MESSAGE = "Sorry, I couldn't get a final answer or the response was empty."
ROUND_LIMIT_MESSAGE = (
    "Sorry, I couldn't reach a final answer within the allowed number of tool rounds."
)
TOOLS_UNAVAILABLE_MESSAGE = "Sorry, I'm having trouble accessing my tools right now."
MISSING_TOOL_NAME_MESSAGE = "Error: Tool call is missing a function name."


def parse_tool_calls(message: dict[str, Any]) -> list[ToolInvocation]:
    """Extract tool invocation requests from an assistant message."""
    tool_calls = message.get("tool_calls") or []
    if not isinstance(tool_calls, list):
        return []
    return [ToolInvocation.from_tool_call(call) for call in tool_calls if isinstance(call, dict)]


class AgentLoop:
    """Orchestrates the conversation between the chat endpoint and the tool host.

    Every call to :meth:`run` starts a new transcript; nothing carries over
    between queries. The transcript of the most recent run stays available
    as ``last_conversation`` for inspection.

    Example:
        >>> agent = AgentLoop(endpoint, registry, max_tool_rounds=8)
        >>> answer = await agent.run("Any weather alerts in Texas?")
    """

    def __init__(
        self,
        endpoint: ChatBackend,
        tool_registry: ToolRegistry,
        max_tool_rounds: int = 8,
        callbacks: Optional[dict[str, Callable]] = None,
    ):
        """Initialize the agent loop.

        Args:
            endpoint: Chat-completions backend.
            tool_registry: Registry wrapping the tool host.
            max_tool_rounds: Maximum number of tool rounds per query.
            callbacks: Optional async callbacks (see :meth:`run`).
        """
        if max_tool_rounds < 1:
            raise ValueError("max_tool_rounds must be at least 1")

        self.endpoint = endpoint
        self.tool_registry = tool_registry
        self.max_tool_rounds = max_tool_rounds
        self.callbacks = callbacks or {}

        self.state = LoopState.DONE
        self.rounds_completed = 0
        self.model_calls = 0
        self.last_conversation: Optional[Conversation] = None

    async def run(self, query: str, callbacks: Optional[dict[str, Callable]] = None) -> str:
        """Answer a user query, executing tool calls as the model requests them.

        Args:
            query: User's question.
            callbacks: Optional callbacks override (uses instance callbacks if None).

        Returns:
            The model's final answer, or a fixed fallback message.

        Raises:
            ChatEndpointError: If the chat endpoint fails or is not ready.

        Callback interface:
            - on_tool_call(name: str, arguments: Any): before each tool execution
            - on_tool_result(name: str, result: str, success: bool): after each result
        """
        callbacks = callbacks or self.callbacks

        logger.info(f"Starting agent loop: query='{query[:100]}'")

        conversation = Conversation()
        self.last_conversation = conversation
        self.rounds_completed = 0
        self.model_calls = 0
        self.state = LoopState.AWAITING_MODEL

        conversation.add_user_message(query)

        try:
            await self.tool_registry.refresh_tools()
            tools = await self.tool_registry.get_tool_definitions_for_api()
        except ToolHostError as e:
            logger.error(f"Could not retrieve tools from tool host: {e}")
            self.state = LoopState.DONE
            return TOOLS_UNAVAILABLE_MESSAGE

        try:
            while True:
                logger.debug(
                    f"Chat endpoint call: {conversation.get_message_count()} messages, {len(tools)} tools"
                )
                reply = await asyncio.to_thread(
                    self.endpoint.complete, conversation.get_messages_for_api(), tools
                )
                self.model_calls += 1

                invocations = parse_tool_calls(reply)
                if not invocations:
                    conversation.add_assistant_message(reply)
                    return self._final_answer(reply)

                if self.rounds_completed >= self.max_tool_rounds:
                    logger.warning(
                        f"Model still requesting tools after {self.rounds_completed} rounds; giving up"
                    )
                    return ROUND_LIMIT_MESSAGE

                logger.info(f"LLM requested {len(invocations)} tool call(s)")
                conversation.add_assistant_message(reply)
                self.state = LoopState.AWAITING_TOOLS

                await self._execute_tools(conversation, invocations, callbacks)

                self.rounds_completed += 1
                self.state = LoopState.AWAITING_MODEL
        finally:
            self.state = LoopState.DONE

    async def _execute_tools(
        self,
        conversation: Conversation,
        invocations: list[ToolInvocation],
        callbacks: dict[str, Callable],
    ) -> None:
        """Resolve every pending invocation, in order, into exactly one result."""
        for invocation in invocations:
            result = await self._execute_tool(invocation, callbacks)
            conversation.add_tool_result(result)

            if "on_tool_result" in callbacks:
                await callbacks["on_tool_result"](invocation.name, result.content, not result.is_error)

        logger.debug(f"Added {len(invocations)} tool results to conversation")

    async def _execute_tool(
        self, invocation: ToolInvocation, callbacks: dict[str, Callable]
    ) -> ToolResult:
        tool_name = invocation.name

        if not tool_name:
            logger.error(f"Tool call {invocation.id!r} has no function name")
            return ToolResult(
                call_id=invocation.id,
                name=tool_name,
                content=MISSING_TOOL_NAME_MESSAGE,
                is_error=True,
            )

        try:
            arguments = invocation.decode_arguments()
        except ValueError as e:
            logger.error(f"Failed to parse arguments for tool {tool_name}: {invocation.raw_arguments()} ({e})")
            return ToolResult(
                call_id=invocation.id,
                name=tool_name,
                content=f"Error: Could not parse arguments: {invocation.raw_arguments()}",
                is_error=True,
            )

        if "on_tool_call" in callbacks:
            await callbacks["on_tool_call"](tool_name, arguments)

        logger.debug(f"Calling tool: {tool_name} with args: {arguments}")

        try:
            output = await self.tool_registry.execute_tool(tool_name, arguments)
        except Exception as e:
            logger.error(f"Error during MCP call to tool '{tool_name}': {e}", exc_info=True)
            message = str(e) or "Unknown MCP error"
            return ToolResult(
                call_id=invocation.id,
                name=tool_name,
                content=f"Error executing tool {tool_name} via MCP: {message}",
                is_error=True,
            )

        content = output.text
        if output.is_error:
            content = f"Tool {tool_name} execution resulted in an error from server: {content}"

        return ToolResult(
            call_id=invocation.id,
            name=tool_name,
            content=content,
            is_error=output.is_error,
        )

    def _final_answer(self, reply: dict[str, Any]) -> str:
        content = reply.get("content")
        if isinstance(content, str) and content.strip():
            logger.info(f"Agent loop completed: {len(content)} chars returned")
            return content

        logger.warning("Model reply had neither usable text nor tool calls; returning fallback")
        return EMPTY_ANSWER_MESSAGE
