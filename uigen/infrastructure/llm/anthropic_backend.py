"""Anthropic Messages API backend (development and testing only)."""

from typing import Any, Dict

from uigen.infrastructure.llm.http_backend import HTTPBackend

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicBackend(HTTPBackend):
    PROVIDER = "anthropic"
    DEFAULT_ENDPOINT = "https://api.anthropic.com/v1"
    DEFAULT_MODEL = "claude-3-5-sonnet-20241022"
    GENERATE_PATH = "/messages"
    TEXT_PATH = ("content", 0, "text")
    HEALTH_PATH = "/models"
    HEALTH_TIMEOUT = 10.0

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.api_key or "",
            "anthropic-version": ANTHROPIC_VERSION,
        }

    def _payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model_name,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
