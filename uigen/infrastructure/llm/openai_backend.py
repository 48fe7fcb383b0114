"""OpenAI hosted API backend (development and testing only)."""

from typing import Any

import openai
from openai import OpenAI

from uigen.config import BackendSettings
from uigen.infrastructure.llm.chat_backend import ChatCompletionBackend


class OpenAIBackend(ChatCompletionBackend):
    PROVIDER = "openai"
    DEFAULT_MODEL = "gpt-4o-mini"

    STATUS_ERROR = openai.APIStatusError
    TIMEOUT_ERROR = openai.APITimeoutError
    CONNECTION_ERROR = openai.APIConnectionError
    API_ERROR = openai.APIError

    def _create_client(self, settings: BackendSettings) -> Any:
        return OpenAI(
            api_key=settings.api_key,
            base_url=settings.endpoint,
            timeout=self.timeout,
            max_retries=settings.max_retries,
        )
