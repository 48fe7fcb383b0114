"""Shared plumbing for backends that talk to an HTTP server with requests."""

import logging
from typing import Any, Dict, Optional, Sequence, Union

import requests

from uigen.application.interfaces.illm_backend import ILLMBackend
from uigen.application.services.exceptions import BackendFailure
from uigen.config import BackendSettings

logger = logging.getLogger(__name__)

PathPart = Union[str, int]


class HTTPBackend(ILLMBackend):
    """
    Base class for HTTP backends.

    Subclasses describe their wire contract through class attributes and
    override ``_payload`` (and ``_headers`` when they authenticate):

    - PROVIDER: provider id reported by ``name()``
    - DEFAULT_ENDPOINT / DEFAULT_MODEL / DEFAULT_TIMEOUT: used when the
      settings leave them unset
    - GENERATE_PATH: path appended to the endpoint for generation
    - TEXT_PATH: keys/indices leading to the generated text in the JSON body
    - HEALTH_PATH / HEALTH_TIMEOUT: the readiness check
    """

    PROVIDER = ""
    DEFAULT_ENDPOINT = ""
    DEFAULT_MODEL = ""
    DEFAULT_TIMEOUT = 120.0
    GENERATE_PATH = ""
    TEXT_PATH: Sequence[PathPart] = ()
    HEALTH_PATH = ""
    HEALTH_TIMEOUT = 5.0

    def __init__(self, settings: BackendSettings):
        self.endpoint = (settings.endpoint or self.DEFAULT_ENDPOINT).rstrip("/")
        self.model_name = settings.model or self.DEFAULT_MODEL
        self.api_key = settings.api_key
        self.timeout = settings.timeout_seconds or self.DEFAULT_TIMEOUT
        self.max_tokens = settings.max_tokens
        self.temperature = settings.temperature
        self.session = requests.Session()

    def name(self) -> str:
        return self.PROVIDER

    def model(self) -> str:
        return self.model_name

    def _headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    def _payload(self, prompt: str) -> Dict[str, Any]:
        raise NotImplementedError

    def generate(self, prompt: str) -> str:
        url = f"{self.endpoint}{self.GENERATE_PATH}"
        logger.debug(f"{self.PROVIDER}: POST {url} (timeout={self.timeout}s)")
        response = self._send(
            "POST",
            url,
            timeout=self.timeout,
            json=self._payload(prompt),
        )
        try:
            data = response.json()
        except ValueError as e:
            raise BackendFailure(
                self.PROVIDER,
                "Response body is not valid JSON",
                status_code=response.status_code,
                body=response.text,
            ) from e
        return self._extract_text(data, response)

    def health_check(self) -> None:
        self._send(
            "GET",
            f"{self.endpoint}{self.HEALTH_PATH}",
            timeout=self.HEALTH_TIMEOUT,
        )

    def close(self) -> None:
        self.session.close()

    def _send(self, method: str, url: str, timeout: float, **kwargs: Any) -> requests.Response:
        """Send a request and turn every transport or status problem into BackendFailure."""
        try:
            response = self.session.request(
                method, url, headers=self._headers(), timeout=timeout, **kwargs
            )
        except requests.Timeout as e:
            raise BackendFailure(self.PROVIDER, f"Request timed out after {timeout}s") from e
        except requests.ConnectionError as e:
            raise BackendFailure(self.PROVIDER, f"Could not connect to {url}: {e}") from e
        except requests.RequestException as e:
            raise BackendFailure(self.PROVIDER, f"Request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise BackendFailure(
                self.PROVIDER,
                "Request failed",
                status_code=response.status_code,
                body=response.text,
            )
        return response

    def _extract_text(self, data: Any, response: Optional[requests.Response] = None) -> str:
        value = data
        try:
            for part in self.TEXT_PATH:
                value = value[part]
        except (KeyError, IndexError, TypeError) as e:
            raise BackendFailure(
                self.PROVIDER,
                f"Response has no text at {'.'.join(str(p) for p in self.TEXT_PATH)}",
                status_code=response.status_code if response is not None else None,
                body=response.text if response is not None else None,
            ) from e
        if not isinstance(value, str):
            raise BackendFailure(
                self.PROVIDER,
                "Response text is not a string",
                status_code=response.status_code if response is not None else None,
                body=response.text if response is not None else None,
            )
        return value
