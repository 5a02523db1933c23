"""Tool registry with pluggable tool providers.

The registry collects tool descriptors from every registered provider,
formats them for the chat endpoint, and routes executions back to the
provider that owns each tool. Descriptors are cached until the next
:meth:`ToolRegistry.refresh_tools`, which the agent loop calls once per
query.
"""

from typing import Any, Optional

from skycast.domain.protocols import ToolProvider
from skycast.domain.types import ToolDescriptor, ToolOutput
from skycast.logger import get_logger

logger = get_logger(__name__)


class ToolRegistry:
    """Central registry for tools from one or more providers.

    Example:
        >>> registry = ToolRegistry()
        >>> registry.register_provider(MCPToolProvider(client))
        >>> tools = await registry.get_tool_definitions_for_api()
        >>> output = await registry.execute_tool("get-alerts", {"state": "CA"})
    """

    def __init__(self) -> None:
        self._providers: dict[str, ToolProvider] = {}
        self._descriptors: dict[str, ToolDescriptor] = {}
        self._tool_to_provider: dict[str, str] = {}  # tool_name -> provider_name
        self._cache_dirty = True

    def register_provider(self, provider: ToolProvider) -> None:
        """Register a tool provider.

        Raises:
            ValueError: If provider_name is already registered.
        """
        provider_name = provider.provider_name

        if provider_name in self._providers:
            raise ValueError(f"Provider '{provider_name}' is already registered")

        self._providers[provider_name] = provider
        self._cache_dirty = True

        logger.info(f"Registered tool provider: {provider_name}")

    async def refresh_tools(self) -> list[ToolDescriptor]:
        """Fetch descriptors from all providers and rebuild the routing table.

        Duplicate tool names keep the first provider's definition.

        Raises:
            ToolHostError: If a provider cannot list its tools.
        """
        descriptors: dict[str, ToolDescriptor] = {}
        routing: dict[str, str] = {}

        for provider_name, provider in self._providers.items():
            for descriptor in await provider.get_tool_descriptors():
                if descriptor.name in routing:
                    logger.warning(
                        f"Duplicate tool '{descriptor.name}' from {provider_name}, "
                        f"already provided by {routing[descriptor.name]}"
                    )
                    continue
                descriptors[descriptor.name] = descriptor
                routing[descriptor.name] = provider_name

        self._descriptors = descriptors
        self._tool_to_provider = routing
        self._cache_dirty = False

        logger.debug(f"Retrieved {len(descriptors)} tools from {len(self._providers)} providers")
        return list(descriptors.values())

    async def get_tool_descriptors(self) -> list[ToolDescriptor]:
        if self._cache_dirty:
            return await self.refresh_tools()
        return list(self._descriptors.values())

    async def get_tool_definitions_for_api(self) -> list[dict[str, Any]]:
        """Return cached tools as OpenAI-compatible function definitions."""
        return [descriptor.to_openai_tool() for descriptor in await self.get_tool_descriptors()]

    async def execute_tool(self, tool_name: str, arguments: dict[str, Any]) -> ToolOutput:
        """Execute a tool by routing to the appropriate provider.

        Unknown tool names are still forwarded to the sole provider when only
        one is registered, so the tool host can report the error itself.

        Raises:
            KeyError: If no provider can be chosen for tool_name.
            ToolHostError: If the provider fails to execute the tool.
        """
        if self._cache_dirty:
            await self.refresh_tools()

        provider_name = self._tool_to_provider.get(tool_name)
        if provider_name is None and len(self._providers) == 1:
            provider_name = next(iter(self._providers))
        if provider_name is None:
            raise KeyError(
                f"Tool '{tool_name}' not found in any registered provider. "
                f"Available tools: {list(self._tool_to_provider.keys())}"
            )

        logger.debug(f"Executing tool '{tool_name}' via provider '{provider_name}'")
        return await self._providers[provider_name].execute_tool(tool_name, arguments)

    def get_descriptor(self, tool_name: str) -> Optional[ToolDescriptor]:
        return self._descriptors.get(tool_name)

    def get_tool_count(self) -> int:
        return len(self._tool_to_provider)

    def get_tool_names(self) -> list[str]:
        return list(self._tool_to_provider.keys())
