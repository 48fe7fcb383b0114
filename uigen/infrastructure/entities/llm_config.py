"""Entity model for the admin-managed LLM configuration."""

from typing import Optional

from sqlalchemy import Boolean, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from uigen.domain.models import LLMConfigRecord

from .entity_base import EntityBase

__all__ = ["LLMConfigEntity"]


class LLMConfigEntity(EntityBase):
    """At most one row is expected to be active at a time."""

    __tablename__ = "llm_configs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    provider: Mapped[str] = mapped_column(String(50), nullable=False)
    model_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    endpoint_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    api_key: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    timeout_seconds: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    model_path: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    context_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    threads: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    max_tokens: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    temperature: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def to_domain_config(self) -> LLMConfigRecord:
        return LLMConfigRecord(
            provider=self.provider,
            model_name=self.model_name,
            endpoint_url=self.endpoint_url,
            api_key=self.api_key,
            timeout_seconds=self.timeout_seconds,
            model_path=self.model_path,
            context_size=self.context_size,
            threads=self.threads,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
