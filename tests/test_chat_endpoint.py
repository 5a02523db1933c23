"""Tests for the chat-completions adapter."""

from unittest.mock import Mock

import pytest
import requests

from skycast.application.chat_endpoint import WARMUP_MESSAGES, ChatEndpoint
from skycast.config import ClientConfig
from skycast.exceptions import ChatEndpointError, ChatEndpointNotReadyError


def make_response(status_code=200, payload=None, text=None, json_error=False):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = text if text is not None else ""
    if json_error:
        response.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
    else:
        response.json.return_value = payload
    return response


def completion(message):
    return {"choices": [{"index": 0, "message": message, "finish_reason": "stop"}]}


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def ready_endpoint(session):
    session.post.return_value = make_response(payload=completion({"role": "assistant", "content": "Hi!"}))
    endpoint = ChatEndpoint(session=session)
    assert endpoint.warmup() is True
    session.post.reset_mock()
    return endpoint


class TestReadiness:
    def test_not_ready_refuses_without_request(self, session):
        endpoint = ChatEndpoint(session=session)

        with pytest.raises(ChatEndpointNotReadyError):
            endpoint.complete([{"role": "user", "content": "Weather?"}])

        session.post.assert_not_called()
        assert endpoint.errors == ["Chat endpoint not ready"]

    def test_warmup_success_sets_ready(self, session):
        session.post.return_value = make_response(payload=completion({"role": "assistant", "content": "Hello"}))
        endpoint = ChatEndpoint(session=session)

        assert endpoint.ready is False
        assert endpoint.warmup() is True
        assert endpoint.ready is True

        body = session.post.call_args.kwargs["json"]
        assert body["messages"] == WARMUP_MESSAGES
        assert "tools" not in body

    def test_warmup_failure_keeps_not_ready(self, session):
        session.post.side_effect = requests.ConnectionError("connection refused")
        endpoint = ChatEndpoint(session=session)

        assert endpoint.warmup() is False
        assert endpoint.ready is False
        assert len(endpoint.errors) == 1

    def test_create_runs_warmup(self, session):
        session.post.return_value = make_response(payload=completion({"role": "assistant", "content": "Hello"}))

        endpoint = ChatEndpoint.create(ClientConfig(model="llama3.1"), session=session)

        assert endpoint.ready is True
        assert session.post.call_args.kwargs["json"]["model"] == "llama3.1"


class TestRequestBody:
    def test_tools_and_tool_choice_sent_when_present(self, ready_endpoint, session):
        tools = [{"type": "function", "function": {"name": "get-alerts", "description": "", "parameters": {}}}]
        session.post.return_value = make_response(payload=completion({"role": "assistant", "content": "ok"}))

        ready_endpoint.complete([{"role": "user", "content": "Alerts?"}], tools)

        kwargs = session.post.call_args.kwargs
        assert kwargs["json"]["tools"] == tools
        assert kwargs["json"]["tool_choice"] == "auto"
        assert kwargs["json"]["max_tokens"] == 1000
        assert kwargs["json"]["temperature"] == 0.2
        assert kwargs["headers"] == {"Content-Type": "application/json"}
        assert kwargs["timeout"] == 120.0

    @pytest.mark.parametrize("tools", [None, []])
    def test_tools_omitted_when_empty(self, ready_endpoint, tools):
        body = ready_endpoint.build_payload([{"role": "user", "content": "hi"}], tools)

        assert "tools" not in body
        assert "tool_choice" not in body

    def test_returns_first_choice_message(self, ready_endpoint, session):
        message = {
            "role": "assistant",
            "content": None,
            "tool_calls": [{"id": "c1", "type": "function", "function": {"name": "get-alerts", "arguments": "{}"}}],
        }
        session.post.return_value = make_response(payload=completion(message))

        assert ready_endpoint.complete([{"role": "user", "content": "Alerts?"}]) == message


class TestFailures:
    def test_non_2xx_includes_status_and_body(self, ready_endpoint, session):
        session.post.return_value = make_response(status_code=500, text="model crashed")

        with pytest.raises(ChatEndpointError, match="500 - model crashed"):
            ready_endpoint.complete([{"role": "user", "content": "hi"}])

    def test_malformed_json(self, ready_endpoint, session):
        session.post.return_value = make_response(text="<html>", json_error=True)

        with pytest.raises(ChatEndpointError, match="Malformed JSON"):
            ready_endpoint.complete([{"role": "user", "content": "hi"}])

    def test_missing_choices(self, ready_endpoint, session):
        session.post.return_value = make_response(payload={"choices": []})

        with pytest.raises(ChatEndpointError, match="choices"):
            ready_endpoint.complete([{"role": "user", "content": "hi"}])

    @pytest.mark.parametrize(
        "payload",
        [{"choices": {"x": 1}}, {"choices": "message"}, {"choices": [{"message": "hi"}]}, ["not", "an", "object"]],
    )
    def test_unexpected_shapes(self, ready_endpoint, session, payload):
        session.post.return_value = make_response(payload=payload)

        with pytest.raises(ChatEndpointError, match="Unexpected LLM response format"):
            ready_endpoint.complete([{"role": "user", "content": "hi"}])

    def test_warmup_with_unexpected_shape_stays_not_ready(self, session):
        session.post.return_value = make_response(payload={"choices": {"x": 1}})
        endpoint = ChatEndpoint(session=session)

        assert endpoint.warmup() is False
        assert endpoint.ready is False
        assert endpoint.errors == ["Unexpected LLM response format: missing choices[0].message"]

    def test_transport_error(self, ready_endpoint, session):
        session.post.side_effect = requests.Timeout("read timed out")

        with pytest.raises(ChatEndpointError, match="read timed out"):
            ready_endpoint.complete([{"role": "user", "content": "hi"}])


class TestErrorDedupe:
    def test_repeated_error_recorded_once(self, ready_endpoint, session):
        session.post.return_value = make_response(status_code=503, text="busy")

        for _ in range(3):
            with pytest.raises(ChatEndpointError):
                ready_endpoint.complete([{"role": "user", "content": "hi"}])

        assert ready_endpoint.errors == ["Request failed: 503 - busy"]
        assert ready_endpoint.has_seen_error("Request failed: 503 - busy")

    def test_error_memory_is_bounded(self, session):
        endpoint = ChatEndpoint(session=session, error_capacity=2)

        assert endpoint.record_error("first") is True
        assert endpoint.record_error("second") is True
        assert endpoint.record_error("third") is True
        assert endpoint.record_error("second") is False

        assert endpoint.errors == ["second", "third"]
        assert not endpoint.has_seen_error("first")
