"""Enums for LLM provider types."""

from enum import Enum


class ProviderType(Enum):
    """
    Enumeration of supported LLM providers.

    - OLLAMA: Ollama server, the on-premise default.
    - LLAMA_CPP: llama.cpp server through its OpenAI-compatible completions API.
    - LOCAL_LLAMA_CPP: GGUF model loaded in-process with llama-cpp-python.
    - VLLM: vLLM server with optional bearer authentication.
    - GROQ: Groq hosted API (development/testing only).
    - OPENAI: OpenAI hosted API (development/testing only).
    - ANTHROPIC: Anthropic hosted API (development/testing only).
    - MOCK: Deterministic canned responses for tests.
    """

    OLLAMA = "ollama"
    LLAMA_CPP = "llama-cpp"
    LOCAL_LLAMA_CPP = "local-llama-cpp"
    VLLM = "vllm"
    GROQ = "groq"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    MOCK = "mock"

    @property
    def is_remote(self) -> bool:
        return self in (ProviderType.GROQ, ProviderType.OPENAI, ProviderType.ANTHROPIC)
