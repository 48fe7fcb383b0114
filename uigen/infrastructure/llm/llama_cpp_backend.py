"""llama.cpp server backend using its OpenAI-compatible completions API."""

from typing import Any, Dict

from uigen.infrastructure.llm.http_backend import HTTPBackend


class LlamaCppBackend(HTTPBackend):
    PROVIDER = "llama-cpp"
    DEFAULT_ENDPOINT = "http://localhost:8080"
    DEFAULT_MODEL = "codellama"
    GENERATE_PATH = "/v1/completions"
    TEXT_PATH = ("choices", 0, "text")
    HEALTH_PATH = "/health"

    def _payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model_name,
            "prompt": prompt,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }
