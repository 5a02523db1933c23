"""Tests for configuration loading and the error log."""

import pytest

from skycast.config import DEFAULT_ENDPOINT_URL, DEFAULT_MODEL, ClientConfig, ServerConfig, is_truthy
from skycast.exceptions import ConfigError
from skycast.infrastructure.cache import ErrorLog


class TestIsTruthy:
    @pytest.mark.parametrize("value", ["1", "true", "TRUE", " True "])
    def test_truthy_values(self, value):
        assert is_truthy(value) is True

    @pytest.mark.parametrize("value", [None, "", "0", "false", "yes", "on"])
    def test_other_values(self, value):
        assert is_truthy(value) is False


class TestClientConfig:
    def test_defaults(self):
        config = ClientConfig.from_env({})

        assert config.endpoint_url == DEFAULT_ENDPOINT_URL
        assert config.model == DEFAULT_MODEL
        assert config.max_tokens == 1000
        assert config.temperature == 0.2
        assert config.max_tool_rounds == 8
        assert config.debug is False
        assert config.log_level == "WARNING"

    def test_environment_overrides(self):
        config = ClientConfig.from_env(
            {
                "SKYCAST_ENDPOINT_URL": "http://gpu-box:8000/v1/chat/completions",
                "SKYCAST_MODEL": "llama3.1",
                "SKYCAST_MAX_TOOL_ROUNDS": "3",
                "SKYCAST_TEMPERATURE": "0.5",
                "DEBUG": "1",
            }
        )

        assert config.endpoint_url == "http://gpu-box:8000/v1/chat/completions"
        assert config.model == "llama3.1"
        assert config.max_tool_rounds == 3
        assert config.temperature == 0.5
        assert config.debug is True
        assert config.log_level == "DEBUG"

    def test_invalid_number(self):
        with pytest.raises(ConfigError, match="SKYCAST_MAX_TOKENS"):
            ClientConfig.from_env({"SKYCAST_MAX_TOKENS": "lots"})

    def test_round_cap_must_be_positive(self):
        with pytest.raises(ConfigError, match="SKYCAST_MAX_TOOL_ROUNDS"):
            ClientConfig.from_env({"SKYCAST_MAX_TOOL_ROUNDS": "0"})


class TestServerConfig:
    def test_defaults(self):
        config = ServerConfig.from_env({})

        assert config.http_timeout == 10.0
        assert config.nominatim_user_agent == "MCPWeatherApp/1.0 (weather-app/1.0 (MCP Example))"
        assert config.log_level == "INFO"

    def test_debug_and_timeout(self):
        config = ServerConfig.from_env({"DEBUG": "true", "SKYCAST_HTTP_TIMEOUT": "2.5"})

        assert config.debug is True
        assert config.http_timeout == 2.5

    def test_invalid_timeout(self):
        with pytest.raises(ConfigError):
            ServerConfig.from_env({"SKYCAST_HTTP_TIMEOUT": "soon"})


class TestErrorLog:
    def test_record_reports_new_messages(self):
        log = ErrorLog(capacity=3)

        assert log.record("boom") is True
        assert log.record("boom") is False
        assert len(log) == 1
        assert "boom" in log

    def test_oldest_evicted_at_capacity(self):
        log = ErrorLog(capacity=2)
        for message in ("a", "b", "c"):
            log.record(message)

        assert log.messages() == ["b", "c"]
        assert log.record("a") is True

    def test_clear(self):
        log = ErrorLog()
        log.record("x")
        log.clear()

        assert len(log) == 0
        assert log.capacity == 32

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            ErrorLog(capacity=0)
