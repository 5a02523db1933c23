"""Weather tool host exposed over MCP stdio."""

from skycast.server.app import create_server, main
from skycast.server.weather import WeatherService

__all__ = ["create_server", "main", "WeatherService"]
