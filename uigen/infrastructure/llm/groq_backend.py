"""Groq hosted API backend (development and testing only)."""

from typing import Any

import groq
from groq import Groq

from uigen.config import BackendSettings
from uigen.infrastructure.llm.chat_backend import ChatCompletionBackend


class GroqBackend(ChatCompletionBackend):
    PROVIDER = "groq"
    DEFAULT_MODEL = "llama-3.3-70b-versatile"
    DEFAULT_TIMEOUT = 60.0

    STATUS_ERROR = groq.APIStatusError
    TIMEOUT_ERROR = groq.APITimeoutError
    CONNECTION_ERROR = groq.APIConnectionError
    API_ERROR = groq.APIError

    def _create_client(self, settings: BackendSettings) -> Any:
        return Groq(
            api_key=settings.api_key,
            base_url=settings.endpoint,
            timeout=self.timeout,
            max_retries=settings.max_retries,
        )
