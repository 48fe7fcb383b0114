"""Ollama server backend, the on-premise default."""

from typing import Any, Dict

from uigen.infrastructure.llm.http_backend import HTTPBackend


class OllamaBackend(HTTPBackend):
    """Calls ``/api/generate`` with streaming disabled and reads ``response``."""

    PROVIDER = "ollama"
    DEFAULT_ENDPOINT = "http://localhost:11434"
    DEFAULT_MODEL = "codellama:13b"
    GENERATE_PATH = "/api/generate"
    TEXT_PATH = ("response",)
    HEALTH_PATH = "/api/tags"

    def _payload(self, prompt: str) -> Dict[str, Any]:
        return {"model": self.model_name, "prompt": prompt, "stream": False}
