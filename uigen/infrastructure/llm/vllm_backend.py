"""vLLM server backend."""

from typing import Dict

from uigen.infrastructure.llm.llama_cpp_backend import LlamaCppBackend


class VLLMBackend(LlamaCppBackend):
    """Same completions contract as llama.cpp, with an optional bearer token."""

    PROVIDER = "vllm"
    DEFAULT_ENDPOINT = "http://localhost:8000"
    DEFAULT_MODEL = "codellama/CodeLlama-13b-hf"

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers
