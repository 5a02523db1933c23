"""Adapter for OpenAI-compatible chat-completions endpoints.

The default target is a local Ollama server. The adapter performs one
blocking POST per call, never retries, and refuses to talk to the endpoint
until a warm-up call has succeeded.
"""

from typing import Any, Optional

import requests

from skycast.config import DEFAULT_ENDPOINT_URL, DEFAULT_MODEL, ClientConfig
from skycast.exceptions import ChatEndpointError, ChatEndpointNotReadyError
from skycast.infrastructure.cache import ErrorLog
from skycast.logger import get_logger
from skycast.utils import truncate

logger = get_logger("chat_endpoint")

WARMUP_MESSAGES: list[dict[str, Any]] = [{"role": "user", "content": "Hello!"}]


class ChatEndpoint:
    """Chat-completions client with a readiness gate.

    Example:
        >>> endpoint = ChatEndpoint.create(ClientConfig())
        >>> if endpoint.ready:
        ...     message = endpoint.complete([{"role": "user", "content": "Hi"}])
    """

    def __init__(
        self,
        endpoint_url: str = DEFAULT_ENDPOINT_URL,
        model: str = DEFAULT_MODEL,
        max_tokens: int = 1000,
        temperature: float = 0.2,
        request_timeout: float = 120.0,
        session: Optional[requests.Session] = None,
        error_capacity: int = 32,
    ):
        """Initialize the adapter.

        Args:
            endpoint_url: Full URL of the chat-completions endpoint.
            model: Model identifier sent with every request.
            max_tokens: Generation limit sent with every request.
            temperature: Sampling temperature sent with every request.
            request_timeout: Seconds to wait for each HTTP response.
            session: Optional ``requests.Session`` (tests inject a mock).
            error_capacity: How many distinct error messages to remember.
        """
        self.endpoint_url = endpoint_url
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.request_timeout = request_timeout
        self._session = session or requests.Session()
        self._errors = ErrorLog(capacity=error_capacity)
        self._ready = False

        logger.debug(f"ChatEndpoint initialized: url='{endpoint_url}', model='{model}'")

    @classmethod
    def from_config(cls, config: ClientConfig, session: Optional[requests.Session] = None) -> "ChatEndpoint":
        return cls(
            endpoint_url=config.endpoint_url,
            model=config.model,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            request_timeout=config.request_timeout,
            session=session,
        )

    @classmethod
    def create(cls, config: ClientConfig, session: Optional[requests.Session] = None) -> "ChatEndpoint":
        """Build an adapter and run the warm-up call.

        A failed warm-up is logged; the returned adapter simply stays not ready.
        """
        endpoint = cls.from_config(config, session=session)
        endpoint.warmup()
        return endpoint

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def errors(self) -> list[str]:
        """Distinct error messages seen so far, oldest first."""
        return self._errors.messages()

    def warmup(self) -> bool:
        """Send a trivial request and mark the adapter ready on success."""
        try:
            self._post(WARMUP_MESSAGES, None)
        except ChatEndpointError as exc:
            self.record_error(exc)
            logger.warning("Warmup failed; queries will be refused until the endpoint is ready")
            return False

        self._ready = True
        logger.info("Warmup complete, ready")
        return True

    def complete(
        self,
        messages: list[dict[str, Any]],
        tools: Optional[list[dict[str, Any]]] = None,
    ) -> dict[str, Any]:
        """Send the transcript and return ``choices[0].message``.

        Args:
            messages: Ordered transcript in chat-completions format.
            tools: Function tool definitions; omitted from the body when empty.

        Raises:
            ChatEndpointNotReadyError: If warm-up has not succeeded (no request is made).
            ChatEndpointError: On HTTP or response-format failure.
        """
        if not self._ready:
            error = ChatEndpointNotReadyError()
            self.record_error(error)
            raise error

        try:
            return self._post(messages, tools)
        except ChatEndpointError as exc:
            self.record_error(exc)
            raise

    def build_payload(
        self,
        messages: list[dict[str, Any]],
        tools: Optional[list[dict[str, Any]]] = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }
        if tools:
            body["tools"] = tools
            body["tool_choice"] = "auto"
        return body

    def record_error(self, error: BaseException | str) -> bool:
        """Remember an error message; returns True the first time it is seen."""
        message = str(error) or error.__class__.__name__
        is_new = self._errors.record(message)
        if is_new:
            logger.error(f"Chat endpoint error: {message}")
        else:
            logger.debug(f"Repeated chat endpoint error: {message}")
        return is_new

    def has_seen_error(self, error: BaseException | str) -> bool:
        return (str(error) or error.__class__.__name__) in self._errors

    def _post(
        self,
        messages: list[dict[str, Any]],
        tools: Optional[list[dict[str, Any]]],
    ) -> dict[str, Any]:
        body = self.build_payload(messages, tools)
        logger.debug(
            f"Sending to LLM: {len(messages)} messages, {len(tools or [])} tools"
        )

        try:
            response = self._session.post(
                self.endpoint_url,
                json=body,
                headers={"Content-Type": "application/json"},
                timeout=self.request_timeout,
            )
        except requests.RequestException as exc:
            raise ChatEndpointError(f"Request to {self.endpoint_url} failed: {exc}") from exc

        if not response.ok:
            raise ChatEndpointError(f"Request failed: {response.status_code} - {truncate(response.text, 500)}")

        try:
            data = response.json()
        except ValueError as exc:
            raise ChatEndpointError(f"Malformed JSON from chat endpoint: {exc}") from exc

        logger.debug(f"Received from LLM: {truncate(str(data), 1000)}")

        choices = data.get("choices") if isinstance(data, dict) else None
        first = choices[0] if isinstance(choices, list) and choices else None
        if isinstance(first, dict) and isinstance(first.get("message"), dict):
            return first["message"]

        raise ChatEndpointError("Unexpected LLM response format: missing choices[0].message")
