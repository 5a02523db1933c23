"""Interactive Typer-based chat client for the weather tool host."""

from __future__ import annotations

import asyncio
import dataclasses
import json
import os
import sys
from typing import Any, Awaitable, Callable, Dict, Optional

import typer

from skycast.application import AgentLoop, ChatEndpoint, MCPToolProvider, ToolRegistry
from skycast.config import ClientConfig, load_environment
from skycast.exceptions import ChatEndpointError, ConfigError, SkycastError, ToolHostError
from skycast.infrastructure.mcp import MCPStdioClient
from skycast.logger import get_logger, setup_logger

logger = get_logger("cli")
app = typer.Typer(
    name="skycast-chat",
    help="Chat with a local LLM that answers weather questions through an MCP tool host.",
    add_completion=False,
)

CommandHandler = Callable[[AgentLoop, str], Awaitable[None]]


async def _handle_tools(agent_loop: AgentLoop, _: str) -> None:
    try:
        descriptors = await agent_loop.tool_registry.refresh_tools()
    except ToolHostError as exc:
        typer.echo(f"❌ Could not list tools: {exc}")
        return
    if not descriptors:
        typer.echo("No tools available.")
        return
    typer.echo("Available tools:")
    for descriptor in descriptors:
        typer.echo(f"  - {descriptor.name}: {descriptor.description}")


COMMANDS: Dict[str, CommandHandler] = {
    "tools": _handle_tools,
}


def _sanitize_command(text: str) -> str:
    """Normalize command text by removing carriage returns and trimming whitespace."""
    return text.replace("\r", "").strip()


def _read_command(prompt: str) -> str:
    """Read a line from stdin, ensuring carriage returns are stripped."""
    typer.echo(prompt, nl=False)
    sys.stdout.flush()

    line = sys.stdin.readline()
    if line == "":
        raise EOFError
    return _sanitize_command(line)


async def _on_tool_call(name: str, arguments: Any) -> None:
    typer.echo(typer.style(f"🔧 {name} {json.dumps(arguments)}", dim=True))


async def _dispatch_command(agent_loop: AgentLoop, command: str) -> bool:
    """Handle one line of input. Returns False when the session should end."""
    command = _sanitize_command(command)

    if not command:
        return True

    if command.lower() == "quit":
        return False

    handler = COMMANDS.get(command.lower())
    if handler is not None:
        await handler(agent_loop, "")
        return True

    try:
        answer = await agent_loop.run(command, callbacks={"on_tool_call": _on_tool_call})
    except ChatEndpointError as exc:
        typer.echo(f"❌ Error: {exc}")
        return True

    typer.echo("\nLLM Response:\n" + answer)
    return True


async def _interactive_loop(agent_loop: AgentLoop) -> None:
    typer.echo("")
    typer.echo("🌦  Weather chat started! Ask a question, type 'tools' to list tools, or 'quit' to exit.")

    while True:
        try:
            command = _read_command("\nQuery: ")
        except (KeyboardInterrupt, EOFError):
            typer.echo("\n👋 Goodbye!")
            break

        should_continue = await _dispatch_command(agent_loop, command)
        if not should_continue:
            break


def run_cli(server_path: str, config: ClientConfig) -> int:
    """Connect to the tool host and run the chat loop.

    Returns:
        Process exit code.
    """
    if not os.path.exists(server_path):
        typer.echo(f"❌ Tool host not found: {server_path}", err=True)
        return 1

    async def runner() -> int:
        endpoint = await asyncio.to_thread(ChatEndpoint.create, config)
        if not endpoint.ready:
            typer.echo("⚠️  Chat endpoint warm-up failed; queries will fail until it is reachable.", err=True)

        client = MCPStdioClient.for_script(
            server_path,
            debug=config.debug,
            request_timeout=config.tool_call_timeout,
        )
        try:
            await client.connect()
        except ToolHostError as exc:
            typer.echo(f"❌ Error: {exc}", err=True)
            return 1

        try:
            registry = ToolRegistry()
            registry.register_provider(MCPToolProvider(client, server_name="weather"))
            descriptors = await registry.refresh_tools()
            typer.echo(f"Connected with tools: {[d.name for d in descriptors]}")

            agent_loop = AgentLoop(endpoint, registry, max_tool_rounds=config.max_tool_rounds)
            await _interactive_loop(agent_loop)
        except SkycastError as exc:
            typer.echo(f"❌ Error: {exc}", err=True)
            logger.exception("Fatal error in chat loop")
            return 1
        finally:
            await client.disconnect()
        return 0

    return asyncio.run(runner())


@app.command()
def main(
    server_path: str = typer.Argument(..., help="Path to the tool host script (.py or .js) or executable"),
    endpoint_url: Optional[str] = typer.Option(None, "--endpoint-url", help="Chat-completions URL"),
    model: Optional[str] = typer.Option(None, "--model", help="Model identifier"),
    max_tool_rounds: Optional[int] = typer.Option(None, "--max-tool-rounds", min=1, help="Tool rounds allowed per query"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging (also DEBUG=1|true)"),
) -> None:
    """Connect to a weather tool host and start an interactive chat."""
    load_environment()
    try:
        config = ClientConfig.from_env()
    except ConfigError as exc:
        typer.echo(f"❌ Configuration error: {exc}", err=True)
        raise typer.Exit(code=1)

    overrides: dict[str, Any] = {}
    if endpoint_url:
        overrides["endpoint_url"] = endpoint_url
    if model:
        overrides["model"] = model
    if max_tool_rounds:
        overrides["max_tool_rounds"] = max_tool_rounds
    if debug:
        overrides["debug"] = True
    config = dataclasses.replace(config, **overrides)

    setup_logger(log_file=config.log_file, log_level=config.log_level)

    exit_code = run_cli(server_path, config)
    raise typer.Exit(code=exit_code)


if __name__ == "__main__":
    app()
