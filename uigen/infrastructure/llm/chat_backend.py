"""Shared plumbing for backends that call a chat completions SDK."""

import logging
from typing import Any, Optional, Type

from uigen.application.interfaces.illm_backend import ILLMBackend
from uigen.application.services.exceptions import BackendFailure
from uigen.config import BackendSettings

logger = logging.getLogger(__name__)


class ChatCompletionBackend(ILLMBackend):
    """
    Base class for the groq and openai SDK backends.

    Both SDKs expose the same client surface and the same error hierarchy,
    so subclasses only name the client constructor and the SDK error types.
    """

    PROVIDER = ""
    DEFAULT_MODEL = ""
    DEFAULT_TIMEOUT = 120.0
    HEALTH_TIMEOUT = 10.0

    STATUS_ERROR: Type[Exception] = Exception
    TIMEOUT_ERROR: Type[Exception] = Exception
    CONNECTION_ERROR: Type[Exception] = Exception
    API_ERROR: Type[Exception] = Exception

    def __init__(self, settings: BackendSettings):
        self.model_name = settings.model or self.DEFAULT_MODEL
        self.timeout = settings.timeout_seconds or self.DEFAULT_TIMEOUT
        self.max_tokens = settings.max_tokens
        self.temperature = settings.temperature
        self.client = self._create_client(settings)

    def _create_client(self, settings: BackendSettings) -> Any:
        raise NotImplementedError

    def name(self) -> str:
        return self.PROVIDER

    def model(self) -> str:
        return self.model_name

    def generate(self, prompt: str) -> str:
        logger.debug(f"{self.PROVIDER}: chat completion with {self.model_name}")
        response = self._call(
            lambda: self.client.chat.completions.create(
                model=self.model_name,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                timeout=self.timeout,
            )
        )
        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise BackendFailure(
                self.PROVIDER, "Response has no choices[0].message.content"
            ) from e
        if not isinstance(content, str):
            raise BackendFailure(self.PROVIDER, "Response message has no text content")
        return content

    def health_check(self) -> None:
        self._call(lambda: self.client.with_options(timeout=self.HEALTH_TIMEOUT).models.list())

    def close(self) -> None:
        self.client.close()

    def _call(self, fn: Any) -> Any:
        """Run an SDK call and turn SDK errors into BackendFailure."""
        try:
            return fn()
        except self.STATUS_ERROR as e:
            raise BackendFailure(
                self.PROVIDER,
                "Request failed",
                status_code=getattr(e, "status_code", None),
                body=_response_text(e),
            ) from e
        except self.TIMEOUT_ERROR as e:
            raise BackendFailure(self.PROVIDER, f"Request timed out after {self.timeout}s") from e
        except self.CONNECTION_ERROR as e:
            raise BackendFailure(self.PROVIDER, f"Could not connect: {e}") from e
        except self.API_ERROR as e:
            raise BackendFailure(self.PROVIDER, f"Request failed: {e}") from e


def _response_text(error: Exception) -> Optional[str]:
    response = getattr(error, "response", None)
    return getattr(response, "text", None) if response is not None else None
