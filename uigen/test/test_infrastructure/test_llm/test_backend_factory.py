import logging
from unittest.mock import patch

import pytest

from uigen.application.services.exceptions import ConfigurationError
from uigen.config import BackendSettings
from uigen.domain.models import LLMConfigRecord
from uigen.domain.provider_types import ProviderType
from uigen.infrastructure.llm.backend_factory import (
    apply_llm_config,
    create_backend,
    resolve_provider,
)
from uigen.infrastructure.llm.llama_cpp_backend import LlamaCppBackend
from uigen.infrastructure.llm.mock_backend import MockBackend
from uigen.infrastructure.llm.ollama_backend import OllamaBackend
from uigen.infrastructure.llm.vllm_backend import VLLMBackend


def test_resolve_known_provider():
    assert resolve_provider(" VLLM ") is ProviderType.VLLM


def test_unknown_provider_falls_back_to_ollama(caplog):
    with caplog.at_level(logging.WARNING):
        assert resolve_provider("gpt-neo") is ProviderType.OLLAMA
    assert "Unknown LLM provider 'gpt-neo'" in caplog.text


@pytest.mark.parametrize(
    "provider,expected",
    [
        ("ollama", OllamaBackend),
        ("llama-cpp", LlamaCppBackend),
        ("vllm", VLLMBackend),
        ("mock", MockBackend),
        ("something-else", OllamaBackend),
    ],
)
def test_create_backend(provider, expected):
    assert type(create_backend(BackendSettings(provider=provider))) is expected


@pytest.mark.parametrize("provider", ["groq", "openai", "anthropic"])
def test_remote_provider_requires_api_key(provider):
    with pytest.raises(ConfigurationError, match="LLM_API_KEY"):
        create_backend(BackendSettings(provider=provider))


def test_remote_provider_with_key():
    with patch("uigen.infrastructure.llm.groq_backend.Groq"):
        backend = create_backend(BackendSettings(provider="groq", api_key="gsk"))
    assert backend.name() == "groq"


def test_apply_llm_config_overrides_non_empty_fields():
    settings = BackendSettings(provider="ollama", model="codellama:13b", temperature=0.7)
    record = LLMConfigRecord(provider="vllm", model_name="", endpoint_url="http://gpu:8000")

    merged = apply_llm_config(settings, record)

    assert merged.provider == "vllm"
    assert merged.endpoint == "http://gpu:8000"
    assert merged.model == "codellama:13b"
    assert merged.temperature == 0.7


def test_apply_llm_config_without_record():
    settings = BackendSettings()
    assert apply_llm_config(settings, None) is settings
