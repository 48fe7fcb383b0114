"""Resolves the configured provider to a backend instance, once, at startup."""

import logging
from dataclasses import replace
from typing import Callable, Dict, Optional

from uigen.application.interfaces.illm_backend import ILLMBackend
from uigen.application.services.exceptions import ConfigurationError
from uigen.config import BackendSettings
from uigen.domain.models import LLMConfigRecord
from uigen.domain.provider_types import ProviderType
from uigen.infrastructure.llm.anthropic_backend import AnthropicBackend
from uigen.infrastructure.llm.groq_backend import GroqBackend
from uigen.infrastructure.llm.llama_cpp_backend import LlamaCppBackend
from uigen.infrastructure.llm.local_llama_cpp_backend import LocalLlamaCppBackend
from uigen.infrastructure.llm.mock_backend import MockBackend
from uigen.infrastructure.llm.ollama_backend import OllamaBackend
from uigen.infrastructure.llm.openai_backend import OpenAIBackend
from uigen.infrastructure.llm.vllm_backend import VLLMBackend

logger = logging.getLogger(__name__)

BACKEND_REGISTRY: Dict[ProviderType, Callable[[BackendSettings], ILLMBackend]] = {
    ProviderType.OLLAMA: OllamaBackend,
    ProviderType.LLAMA_CPP: LlamaCppBackend,
    ProviderType.LOCAL_LLAMA_CPP: LocalLlamaCppBackend,
    ProviderType.VLLM: VLLMBackend,
    ProviderType.GROQ: GroqBackend,
    ProviderType.OPENAI: OpenAIBackend,
    ProviderType.ANTHROPIC: AnthropicBackend,
    ProviderType.MOCK: lambda settings: MockBackend(),
}


def resolve_provider(provider: str) -> ProviderType:
    """Map a provider id to its type, falling back to ollama for unknown ids."""
    try:
        return ProviderType(provider.strip().lower())
    except ValueError:
        logger.warning(f"Unknown LLM provider '{provider}', falling back to ollama")
        return ProviderType.OLLAMA


def apply_llm_config(
    settings: BackendSettings, record: Optional[LLMConfigRecord]
) -> BackendSettings:
    """Overlay the admin-managed LLM configuration on the environment settings.

    Fields the record leaves empty keep their environment value.
    """
    if record is None:
        return settings

    overrides = {
        "provider": record.provider,
        "model": record.model_name,
        "endpoint": record.endpoint_url,
        "api_key": record.api_key,
        "timeout_seconds": record.timeout_seconds,
        "model_path": record.model_path,
        "context_size": record.context_size,
        "threads": record.threads,
        "max_tokens": record.max_tokens,
        "temperature": record.temperature,
    }
    return replace(settings, **{k: v for k, v in overrides.items() if v not in (None, "")})


def create_backend(settings: BackendSettings) -> ILLMBackend:
    """Create the backend for the configured provider.

    Args:
        settings: Backend configuration

    Returns:
        A ready-to-use backend

    Raises:
        ConfigurationError: If a remote provider is selected without an API key
    """
    provider = resolve_provider(settings.provider)
    if provider.is_remote and not settings.api_key:
        raise ConfigurationError(
            f"LLM_API_KEY is required for the {provider.value} provider"
        )

    backend = BACKEND_REGISTRY[provider](settings)
    logger.info(f"Using LLM backend {backend.name()} with model {backend.model()}")
    return backend
