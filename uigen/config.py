"""
Configuration for the UI generation service.

Settings are read once from the environment (and an optional ``.env`` file) at
the process edge. Everything below the CLI receives the immutable values built
from them, never the environment itself.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ALLOWLIST_FILE = str(
    Path(__file__).parent / "infrastructure" / "validation" / "allowlist.yml"
)


class Settings(BaseSettings):
    """Application settings."""

    DATABASE_URL: str = "sqlite:///./uigen.db"
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    LLM_PROVIDER: str = "ollama"
    LLM_ENDPOINT: Optional[str] = None
    LLM_MODEL: Optional[str] = None
    LLM_API_KEY: Optional[str] = None
    LLM_TIMEOUT_SECONDS: Optional[float] = None
    LLM_MAX_RETRIES: int = 0
    LLM_MODEL_PATH: str = "llm-models/codellama.gguf"
    LLM_CONTEXT_SIZE: int = 4096
    LLM_THREADS: int = 4
    LLM_MAX_TOKENS: int = 4096
    LLM_TEMPERATURE: float = 0.7

    PROMPT_TOKEN_BUDGET: int = 6000
    ALLOWLIST_MODE: str = "reject"
    ALLOWLIST_FILE: str = DEFAULT_ALLOWLIST_FILE

    QUEUE_IDLE_INTERVAL_SECONDS: float = 2.0
    QUEUE_ERROR_BACKOFF_SECONDS: float = 5.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )


@dataclass(frozen=True)
class BackendSettings:
    """Everything a backend variant needs to be constructed.

    ``endpoint``, ``model`` and ``timeout_seconds`` may be ``None``; each
    variant then applies its own provider default.
    """

    provider: str = "ollama"
    endpoint: Optional[str] = None
    model: Optional[str] = None
    api_key: Optional[str] = None
    timeout_seconds: Optional[float] = None
    max_retries: int = 0
    model_path: str = "llm-models/codellama.gguf"
    context_size: int = 4096
    threads: int = 4
    max_tokens: int = 4096
    temperature: float = 0.7

    @classmethod
    def from_settings(cls, settings: Settings) -> "BackendSettings":
        return cls(
            provider=settings.LLM_PROVIDER.strip().lower(),
            endpoint=settings.LLM_ENDPOINT,
            model=settings.LLM_MODEL,
            api_key=settings.LLM_API_KEY,
            timeout_seconds=settings.LLM_TIMEOUT_SECONDS,
            max_retries=settings.LLM_MAX_RETRIES,
            model_path=settings.LLM_MODEL_PATH,
            context_size=settings.LLM_CONTEXT_SIZE,
            threads=settings.LLM_THREADS,
            max_tokens=settings.LLM_MAX_TOKENS,
            temperature=settings.LLM_TEMPERATURE,
        )


@dataclass(frozen=True)
class PipelineSettings:
    """Validation pipeline configuration."""

    allowlist_mode: str = "reject"
    allowlist_file: str = DEFAULT_ALLOWLIST_FILE

    @classmethod
    def from_settings(cls, settings: Settings) -> "PipelineSettings":
        return cls(
            allowlist_mode=settings.ALLOWLIST_MODE.strip().lower(),
            allowlist_file=settings.ALLOWLIST_FILE,
        )


@dataclass(frozen=True)
class QueueSettings:
    """Timing of the job queue processor loop."""

    idle_interval_seconds: float = 2.0
    error_backoff_seconds: float = 5.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "QueueSettings":
        return cls(
            idle_interval_seconds=settings.QUEUE_IDLE_INTERVAL_SECONDS,
            error_backoff_seconds=settings.QUEUE_ERROR_BACKOFF_SECONDS,
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


@dataclass
class ValidationResult:
    """Result of a configuration validation."""

    is_valid: bool
    message: str


def validate_database_url(url: str) -> ValidationResult:
    """Validate database URL format."""
    valid_schemes = ["sqlite", "postgresql", "postgresql+psycopg2"]
    if "://" not in url:
        return ValidationResult(False, "Invalid database URL format")
    scheme = url.split("://")[0]
    if scheme not in valid_schemes:
        return ValidationResult(
            False,
            f"Invalid database scheme. Must be one of: {', '.join(valid_schemes)}",
        )
    return ValidationResult(True, "Valid database URL")


def validate_log_level(level: str) -> ValidationResult:
    """Validate log level."""
    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if level.upper() in valid_levels:
        return ValidationResult(True, "Valid log level")
    return ValidationResult(
        False, f"Invalid log level. Must be one of: {', '.join(valid_levels)}"
    )


def validate_provider(provider: str) -> ValidationResult:
    """Unknown providers are accepted but fall back to ollama at startup."""
    from uigen.domain.provider_types import ProviderType

    known = [p.value for p in ProviderType]
    if provider.strip().lower() in known:
        return ValidationResult(True, "Known LLM provider")
    return ValidationResult(
        False,
        f"Unknown LLM provider '{provider}', ollama will be used. "
        f"Known providers: {', '.join(known)}",
    )


def validate_allowlist_mode(mode: str) -> ValidationResult:
    """Validate allow-list filter mode."""
    if mode.strip().lower() in ("reject", "strip"):
        return ValidationResult(True, "Valid allow-list mode")
    return ValidationResult(False, "Invalid allow-list mode. Must be one of: reject, strip")


def validate_config(config: Dict[str, str]) -> Dict[str, ValidationResult]:
    """Validate all configuration settings."""
    results = {}

    if "DATABASE_URL" in config:
        results["DATABASE_URL"] = validate_database_url(config["DATABASE_URL"])

    if "LOG_LEVEL" in config:
        results["LOG_LEVEL"] = validate_log_level(config["LOG_LEVEL"])

    if "LLM_PROVIDER" in config:
        results["LLM_PROVIDER"] = validate_provider(config["LLM_PROVIDER"])

    if "ALLOWLIST_MODE" in config:
        results["ALLOWLIST_MODE"] = validate_allowlist_mode(config["ALLOWLIST_MODE"])

    return results
