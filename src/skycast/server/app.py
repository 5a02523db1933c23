"""Weather MCP server (tool host) running on stdio."""

from typing import Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from mcp.types import CallToolResult, TextContent
from pydantic import Field

from skycast.config import ServerConfig, load_environment
from skycast.exceptions import ConfigError
from skycast.logger import get_logger, setup_logger
from skycast.server.weather import WeatherService

logger = get_logger("weather.server")


def _tool_result(tool_name: str, call, *args) -> CallToolResult:
    """Run a service call and wrap its text in a tool result.

    A ``ToolError`` from the service becomes an ``isError`` result carrying the
    bare message, so JSON error payloads reach the client unchanged.
    """
    try:
        text = call(*args)
    except ToolError as exc:
        logger.warning(f"{tool_name} failed: {exc}")
        return CallToolResult(content=[TextContent(type="text", text=str(exc))], isError=True)
    return CallToolResult(content=[TextContent(type="text", text=text)])


def create_server(
    config: Optional[ServerConfig] = None,
    service: Optional[WeatherService] = None,
) -> FastMCP:
    """Build the FastMCP server with the weather tools registered.

    Args:
        config: Server configuration (read from the environment if omitted).
        service: Weather service to delegate to (built from config if omitted).
    """
    config = config or ServerConfig.from_env()
    service = service or WeatherService.from_config(config)

    mcp = FastMCP("weather", log_level="DEBUG" if config.debug else "ERROR")

    @mcp.tool(
        name="get-alerts",
        description="Get weather alerts for a US state from the National Weather Service (NWS). "
        "Example: 'CA' for California.",
    )
    def get_alerts(
        state: str = Field(
            min_length=2,
            max_length=2,
            pattern=r"^[A-Za-z]{2}$",
            description="Two-letter US state code (e.g. CA, NY)",
        ),
    ) -> CallToolResult:
        return _tool_result("get-alerts", service.get_alerts, state)

    @mcp.tool(
        name="get-latlong-from-name",
        description="Get latitude and longitude for a named location using Nominatim "
        "(OpenStreetMap API). Global coverage. Returns name, latitude, and longitude.",
    )
    def get_latlong_from_name(
        location_name: str = Field(
            min_length=1,
            description="The name of the location (e.g., 'New York', 'Paris, France', 'Tokyo', 'Paris TX')",
        ),
    ) -> CallToolResult:
        return _tool_result("get-latlong-from-name", service.get_latlong_from_name, location_name)

    @mcp.tool(
        name="get-worldwide-forecast",
        description="Get the current weather and a multi-day forecast for a given latitude, longitude "
        "using Open-Meteo API (global coverage). An optional timezone (e.g. America/New_York) can be provided.",
    )
    def get_worldwide_forecast(
        latitude: float = Field(ge=-90, le=90, description="Latitude of the location (e.g., from get-latlong-from-name tool)"),
        longitude: float = Field(ge=-180, le=180, description="Longitude of the location (e.g., from get-latlong-from-name tool)"),
        timezone: Optional[str] = Field(
            default=None,
            description="Timezone (e.g., 'America/New_York', 'Europe/London'). Defaults to 'auto' if not provided.",
        ),
    ) -> CallToolResult:
        return _tool_result("get-worldwide-forecast", service.get_worldwide_forecast, latitude, longitude, timezone)

    @mcp.tool(
        name="get-forecast",
        description="Get the National Weather Service forecast for a US location by latitude and longitude.",
    )
    def get_forecast(
        latitude: float = Field(ge=-90, le=90, description="Latitude of the location"),
        longitude: float = Field(ge=-180, le=180, description="Longitude of the location"),
    ) -> CallToolResult:
        return _tool_result("get-forecast", service.get_forecast, latitude, longitude)

    return mcp


def main() -> None:
    """Run the weather tool host on stdio."""
    load_environment()
    try:
        config = ServerConfig.from_env()
    except ConfigError as exc:
        setup_logger()
        logger.error(f"Configuration error: {exc}")
        raise SystemExit(1)
    setup_logger(log_file=config.log_file, log_level=config.log_level)

    server = create_server(config)
    logger.info("Weather MCP Server (Worldwide) running on stdio")
    try:
        server.run(transport="stdio")
    except Exception:
        logger.exception("Fatal error in weather server")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
