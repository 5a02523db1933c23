"""Weather operations backed by public APIs.

- Alerts: National Weather Service (US states only, no API key)
- Geocoding: Nominatim / OpenStreetMap (global, no API key)
- Worldwide forecast: Open-Meteo (global, no API key)
- US forecast: National Weather Service grid forecasts

Every operation returns plain text on success and raises ``ToolError`` on
failure, which the MCP server reports to the client as an error result.
"""

import json
import math
import re
from typing import Any, Optional

from mcp.server.fastmcp.exceptions import ToolError

from skycast.config import ServerConfig
from skycast.logger import get_logger
from skycast.server.http import WeatherAPIClient
from skycast.server.weather_codes import describe_weather_code

logger = get_logger("weather")

STATE_CODE_PATTERN = re.compile(r"^[A-Za-z]{2}$")

OPEN_METEO_CURRENT_FIELDS = ",".join(
    [
        "temperature_2m",
        "relative_humidity_2m",
        "apparent_temperature",
        "is_day",
        "precipitation",
        "rain",
        "showers",
        "snowfall",
        "weather_code",
        "cloud_cover",
        "pressure_msl",
        "surface_pressure",
        "wind_speed_10m",
        "wind_direction_10m",
        "wind_gusts_10m",
    ]
)
OPEN_METEO_DAILY_FIELDS = "weather_code,temperature_2m_max,temperature_2m_min,precipitation_sum"


def _error_json(message: str) -> str:
    return json.dumps({"error": message})


def _at(values: Any, index: int) -> Any:
    if isinstance(values, list) and index < len(values):
        return values[index]
    return None


def _validate_coordinate(value: Any, name: str, limit: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        raise ToolError(f"{name} must be a number")
    if not -limit <= value <= limit:
        raise ToolError(f"{name} must be between {-limit:g} and {limit:g}, got {value}")
    return float(value)


def format_alert(feature: dict[str, Any]) -> str:
    """Render one NWS alert feature as a fixed-field block."""
    props = feature.get("properties") or {}
    return "\n".join(
        [
            f"Event: {props.get('event') or 'Unknown'}",
            f"Area: {props.get('areaDesc') or 'Unknown'}",
            f"Severity: {props.get('severity') or 'Unknown'}",
            f"Status: {props.get('status') or 'Unknown'}",
            f"Headline: {props.get('headline') or 'No headline available'}",
            f"Description: {props.get('description') or 'No description available.'}",
            f"Instruction: {props.get('instruction') or 'No specific instructions.'}",
            "---",
        ]
    )


def format_forecast_report(data: dict[str, Any], latitude: float, longitude: float, timezone: str) -> str:
    """Render an Open-Meteo response as a current-conditions block plus one block per day."""
    lines = [
        f"Weather Forecast for location (lat: {latitude:.2f}, lon: {longitude:.2f}), "
        f"Timezone: {data.get('timezone') or timezone}:",
    ]

    current = data.get("current")
    if isinstance(current, dict):
        lines += [
            "",
            "--- Current Weather ---",
            f"Time: {current.get('time')}",
            f"Temperature: {current.get('temperature_2m')}°F",
            f"Apparent Temp: {current.get('apparent_temperature')}°F",
            f"Humidity: {current.get('relative_humidity_2m')}%",
            f"Weather: {describe_weather_code(current.get('weather_code'))}",
            f"Wind: {current.get('wind_speed_10m')} mph from {current.get('wind_direction_10m')}° "
            f"(Gusts: {current.get('wind_gusts_10m')} mph)",
            f"Precipitation: {current.get('precipitation')} in",
            f"Cloud Cover: {current.get('cloud_cover')}%",
            f"Pressure: {current.get('pressure_msl')} hPa",
        ]
    else:
        lines.append("Current weather data not available.")

    daily = data.get("daily")
    days = daily.get("time") if isinstance(daily, dict) else None
    if isinstance(days, list) and days:
        units = data.get("daily_units") or {}
        lines += ["", "--- Daily Forecast (7 days) ---"]
        for i, day in enumerate(days):
            lines += [
                f"Date: {day}",
                f"  Weather: {describe_weather_code(_at(daily.get('weather_code'), i))}",
                f"  Max Temp: {_at(daily.get('temperature_2m_max'), i)}{units.get('temperature_2m_max') or '°F'}",
                f"  Min Temp: {_at(daily.get('temperature_2m_min'), i)}{units.get('temperature_2m_min') or '°F'}",
            ]
            precipitation = _at(daily.get("precipitation_sum"), i)
            if precipitation is not None:
                lines.append(f"  Precipitation Sum: {precipitation}{units.get('precipitation_sum') or 'in'}")
            lines.append("  ---")
    else:
        lines.append("Daily forecast data not available.")

    return "\n".join(lines).strip()


def format_forecast_period(period: dict[str, Any]) -> str:
    """Render one NWS forecast period."""
    return "\n".join(
        [
            f"{period.get('name') or 'Unknown'}:",
            f"Temperature: {period.get('temperature', 'Unknown')}°{period.get('temperatureUnit') or 'F'}",
            f"Wind: {period.get('windSpeed') or 'Unknown'} {period.get('windDirection') or ''}".rstrip(),
            f"{period.get('shortForecast') or 'No forecast available'}",
            "---",
        ]
    )


class WeatherService:
    """Implements the weather tools on top of a :class:`WeatherAPIClient`.

    Arguments are validated before any request goes out, so malformed input
    never reaches the network.
    """

    def __init__(self, api: WeatherAPIClient, config: Optional[ServerConfig] = None):
        self.api = api
        self.config = config or ServerConfig()

    @classmethod
    def from_config(cls, config: ServerConfig) -> "WeatherService":
        return cls(WeatherAPIClient.from_config(config), config)

    def get_alerts(self, state: str) -> str:
        """Get active NWS alerts for a two-letter US state code.

        Args:
            state: Two-letter state code (e.g. "CA"); case-insensitive.

        Returns:
            One block per alert, or a "no active alerts" notice.

        Raises:
            ToolError: If the code is malformed or the feed is unreachable.
        """
        if not isinstance(state, str) or not STATE_CODE_PATTERN.match(state):
            raise ToolError("State code must be 2 letters.")

        state_code = state.upper()
        alerts_url = f"{self.config.nws_base_url}/alerts/active"
        logger.debug(f"get-alerts: state_code={state_code} url={alerts_url}")

        alerts_data = self.api.get_json(
            alerts_url,
            params={"area": state_code},
            headers={"Accept": "application/geo+json"},
        )
        if not isinstance(alerts_data, dict):
            raise ToolError(
                f"Failed to retrieve alerts data from NWS for {state_code}. The API might be down, "
                "the state code might be invalid, or there could be a network issue."
            )

        features = alerts_data.get("features") or []
        if not features:
            return f"No active NWS alerts for {state_code} at this time."

        formatted = [format_alert(feature) for feature in features if isinstance(feature, dict)]
        return f"Active NWS alerts for {state_code}:\n\n" + "\n".join(formatted)

    def get_latlong_from_name(self, location_name: str) -> str:
        """Geocode a place name with Nominatim.

        Args:
            location_name: Free-text place name (e.g. "Paris, France").

        Returns:
            JSON text ``{"name", "latitude", "longitude"}`` for the top match.

        Raises:
            ToolError: If the name is empty, nothing matches or the
                coordinates are not numeric. The message is JSON ``{"error": ...}``.
        """
        if not isinstance(location_name, str) or not location_name.strip():
            raise ToolError(_error_json("Location name cannot be empty."))

        logger.debug(f"get-latlong-from-name: location_name={location_name!r}")
        results = self.api.get_json(
            self.config.nominatim_url,
            params={"q": location_name, "format": "json", "limit": 1, "addressdetails": 0},
            headers={"User-Agent": self.config.nominatim_user_agent},
        )

        if not isinstance(results, list) or not results or not isinstance(results[0], dict):
            logger.debug(f"get-latlong-from-name: no match, raw response: {results!r}")
            raise ToolError(
                _error_json(
                    f"Could not find coordinates for the location: '{location_name}' using Nominatim. "
                    "Please be more specific, check spelling, or the location might not be found."
                )
            )

        first = results[0]
        try:
            latitude = float(first.get("lat"))
            longitude = float(first.get("lon"))
        except (TypeError, ValueError):
            latitude = longitude = math.nan
        if math.isnan(latitude) or math.isnan(longitude):
            raise ToolError(
                _error_json(
                    f"Nominatim returned invalid coordinate format for '{location_name}'. "
                    f"Received lat: {first.get('lat')}, lon: {first.get('lon')}"
                )
            )

        location = {
            "name": first.get("display_name"),
            "latitude": latitude,
            "longitude": longitude,
        }
        logger.debug(f"get-latlong-from-name: geocoding successful: {location}")
        return json.dumps(location)

    def get_worldwide_forecast(self, latitude: float, longitude: float, timezone: Optional[str] = None) -> str:
        """Current conditions and a 7-day outlook from Open-Meteo.

        Args:
            latitude: Latitude in [-90, 90].
            longitude: Longitude in [-180, 180].
            timezone: IANA timezone name; "auto" when omitted or blank.

        Returns:
            Multi-section text report (°F, mph, inches).

        Raises:
            ToolError: On invalid coordinates or upstream failure.
        """
        latitude = _validate_coordinate(latitude, "latitude", 90)
        longitude = _validate_coordinate(longitude, "longitude", 180)
        tz_param = timezone.strip() if isinstance(timezone, str) and timezone.strip() else "auto"

        params = {
            "latitude": f"{latitude:.4f}",
            "longitude": f"{longitude:.4f}",
            "current": OPEN_METEO_CURRENT_FIELDS,
            "daily": OPEN_METEO_DAILY_FIELDS,
            "temperature_unit": "fahrenheit",
            "wind_speed_unit": "mph",
            "precipitation_unit": "inch",
            "timezone": tz_param,
            "forecast_days": 7,
        }
        logger.debug(f"get-worldwide-forecast: params={params}")

        data = self.api.get_json(self.config.open_meteo_url, params=params)
        if not isinstance(data, dict):
            raise ToolError(
                _error_json(
                    "Failed to retrieve forecast data from Open-Meteo. The API might be temporarily "
                    "unavailable or location parameters are invalid."
                )
            )
        if data.get("error") and data.get("reason"):
            raise ToolError(_error_json(f"Open-Meteo forecast error: {data['reason']}"))

        return format_forecast_report(data, latitude, longitude, tz_param)

    def get_forecast(self, latitude: float, longitude: float) -> str:
        """NWS period forecast for a US location.

        Resolves the grid point first, then follows its forecast link.

        Raises:
            ToolError: On invalid coordinates, non-US locations or upstream failure.
        """
        latitude = _validate_coordinate(latitude, "latitude", 90)
        longitude = _validate_coordinate(longitude, "longitude", 180)

        points_url = f"{self.config.nws_base_url}/points/{latitude:.4f},{longitude:.4f}"
        logger.debug(f"get-forecast: points_url={points_url}")

        points = self.api.get_json(points_url, headers={"Accept": "application/geo+json"})
        if not isinstance(points, dict):
            raise ToolError(
                f"Failed to retrieve grid point data for coordinates: {latitude}, {longitude}. "
                "This location may not be supported by the NWS API (only US locations are supported)."
            )

        forecast_url = (points.get("properties") or {}).get("forecast")
        if not forecast_url:
            raise ToolError("Failed to get forecast URL from grid point data")

        forecast = self.api.get_json(forecast_url, headers={"Accept": "application/geo+json"})
        if not isinstance(forecast, dict):
            raise ToolError("Failed to retrieve forecast data")

        periods = (forecast.get("properties") or {}).get("periods") or []
        if not periods:
            return "No forecast periods available"

        formatted = [format_forecast_period(period) for period in periods if isinstance(period, dict)]
        return f"Forecast for {latitude}, {longitude}:\n\n" + "\n".join(formatted)
