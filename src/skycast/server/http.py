"""HTTP access to the upstream weather APIs.

All failures (network errors, non-2xx statuses, bodies that are not JSON)
are logged and reported as ``None``; callers turn that into a tool error.
"""

import json
from typing import Any, Optional

import requests

from skycast.config import USER_AGENT_BASE, ServerConfig
from skycast.logger import get_logger
from skycast.utils import truncate

logger = get_logger("weather.http")


class WeatherAPIClient:
    """Thin ``requests`` wrapper with the identifying headers every upstream expects."""

    def __init__(
        self,
        user_agent: str = USER_AGENT_BASE,
        timeout: float = 10.0,
        debug: bool = False,
        session: Optional[requests.Session] = None,
    ):
        self.user_agent = user_agent
        self.timeout = timeout
        self.debug = debug
        self._session = session or requests.Session()

    @classmethod
    def from_config(cls, config: ServerConfig, session: Optional[requests.Session] = None) -> "WeatherAPIClient":
        return cls(
            user_agent=config.user_agent,
            timeout=config.http_timeout,
            debug=config.debug,
            session=session,
        )

    def get_json(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Optional[Any]:
        """GET a URL and decode its JSON body.

        Args:
            url: Endpoint URL.
            params: Query parameters.
            headers: Extra headers; they override the defaults.

        Returns:
            The decoded JSON document, or None on any failure.
        """
        request_headers = {"User-Agent": self.user_agent, **(headers or {})}
        request_headers.setdefault("Accept", "application/json")

        self._trace(f"Requesting URL: {url} params={params} headers={json.dumps(request_headers)}")

        try:
            response = self._session.get(url, params=params, headers=request_headers, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error(f"Error making API request to {url}: {exc}")
            return None

        body = response.text
        self._trace(f"Response status from {url}: {response.status_code}")

        if not response.ok:
            logger.error(
                f"Error making API request to {url}. Status: {response.status_code}, "
                f"Raw Body: {truncate(body, 500)}"
            )
            return None

        self._trace(f"Raw response text from {url}: {truncate(body, 1000)}")

        try:
            return json.loads(body)
        except ValueError as exc:
            logger.error(f"Error parsing JSON from {url}: {exc}. Raw text: {truncate(body, 1000)}")
            return None

    def _trace(self, message: str) -> None:
        if self.debug:
            logger.debug(message)
