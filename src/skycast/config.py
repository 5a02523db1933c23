"""Configuration for the chat client and the weather tool host.

Both processes read their settings from the environment (optionally seeded
from a ``.env`` file). The resulting config objects are passed explicitly to
the components that need them; nothing reads the debug toggle at log time.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from skycast.exceptions import ConfigError

DEFAULT_ENDPOINT_URL = "http://localhost:11434/v1/chat/completions"
DEFAULT_MODEL = "hhao/qwen2.5-coder-tools"

NWS_API_BASE = "https://api.weather.gov"
NOMINATIM_SEARCH_URL = "https://nominatim.openstreetmap.org/search"
OPEN_METEO_FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
USER_AGENT_BASE = "weather-app/1.0 (MCP Example)"

TRUTHY_VALUES = frozenset({"1", "true"})


def load_environment() -> None:
    """Load a ``.env`` file into the process environment, if one exists."""
    load_dotenv()


def is_truthy(value: Optional[str]) -> bool:
    """Return True for the debug toggle values "1" and "true"."""
    if value is None:
        return False
    return value.strip().lower() in TRUTHY_VALUES


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class ClientConfig:
    """Configuration for the chat client (orchestrator)."""

    # Chat endpoint
    endpoint_url: str = DEFAULT_ENDPOINT_URL
    model: str = DEFAULT_MODEL
    max_tokens: int = 1000
    temperature: float = 0.2
    request_timeout: float = 120.0

    # Tool loop
    max_tool_rounds: int = 8
    tool_call_timeout: float = 60.0

    # Diagnostics
    debug: bool = False
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ClientConfig":
        """Build a config from environment variables.

        Args:
            env: Mapping to read from (defaults to ``os.environ``).

        Raises:
            ConfigError: If a numeric setting cannot be parsed.
        """
        env = os.environ if env is None else env
        max_tool_rounds = _env_int(env, "SKYCAST_MAX_TOOL_ROUNDS", 8)
        if max_tool_rounds < 1:
            raise ConfigError(f"SKYCAST_MAX_TOOL_ROUNDS must be at least 1, got {max_tool_rounds}")
        return cls(
            endpoint_url=env.get("SKYCAST_ENDPOINT_URL") or DEFAULT_ENDPOINT_URL,
            model=env.get("SKYCAST_MODEL") or DEFAULT_MODEL,
            max_tokens=_env_int(env, "SKYCAST_MAX_TOKENS", 1000),
            temperature=_env_float(env, "SKYCAST_TEMPERATURE", 0.2),
            request_timeout=_env_float(env, "SKYCAST_REQUEST_TIMEOUT", 120.0),
            max_tool_rounds=max_tool_rounds,
            tool_call_timeout=_env_float(env, "SKYCAST_TOOL_CALL_TIMEOUT", 60.0),
            debug=is_truthy(env.get("DEBUG")),
            log_file=env.get("SKYCAST_LOG_FILE") or None,
        )

    @property
    def log_level(self) -> str:
        return "DEBUG" if self.debug else "WARNING"


@dataclass(frozen=True)
class ServerConfig:
    """Configuration for the weather tool host."""

    nws_base_url: str = NWS_API_BASE
    nominatim_url: str = NOMINATIM_SEARCH_URL
    open_meteo_url: str = OPEN_METEO_FORECAST_URL
    user_agent: str = USER_AGENT_BASE
    # Nominatim's usage policy asks for an identifying agent string
    nominatim_user_agent: str = f"MCPWeatherApp/1.0 ({USER_AGENT_BASE})"
    http_timeout: float = 10.0

    debug: bool = False
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        """Build a config from environment variables.

        Args:
            env: Mapping to read from (defaults to ``os.environ``).

        Raises:
            ConfigError: If a numeric setting cannot be parsed.
        """
        env = os.environ if env is None else env
        defaults = cls()
        return cls(
            nominatim_user_agent=env.get("SKYCAST_NOMINATIM_USER_AGENT") or defaults.nominatim_user_agent,
            http_timeout=_env_float(env, "SKYCAST_HTTP_TIMEOUT", defaults.http_timeout),
            debug=is_truthy(env.get("DEBUG")),
            log_file=env.get("SKYCAST_LOG_FILE") or None,
        )

    @property
    def log_level(self) -> str:
        return "DEBUG" if self.debug else "INFO"
