"""Entity model for the generation audit log."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, DateTime, Float, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from uigen.domain.models import GenerationLog

from .entity_base import EntityBase

__all__ = ["GenerationLogEntity"]


class GenerationLogEntity(EntityBase):
    """Database model for generation logs. Rows are written once and never updated."""

    __tablename__ = "generation_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    job_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    product: Mapped[str] = mapped_column(String(100), nullable=False)
    input_type: Mapped[str] = mapped_column(String(50), nullable=False)
    template_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    stage: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    error_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    artifact_summary: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    warnings: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    raw_output: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    generation_time_ms: Mapped[float] = mapped_column(Float, nullable=False)
    llm_provider: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    llm_model: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def to_domain_log(self) -> GenerationLog:
        return GenerationLog(
            id=self.id,
            job_id=self.job_id,
            product=self.product,
            input_type=self.input_type,
            template_version=self.template_version,
            status=self.status,
            stage=self.stage,
            error_type=self.error_type,
            error_message=self.error_message,
            artifact_summary=dict(self.artifact_summary or {}),
            warnings=tuple(self.warnings or ()),
            raw_output=self.raw_output,
            generation_time_ms=self.generation_time_ms,
            llm_provider=self.llm_provider,
            llm_model=self.llm_model,
            created_at=self.created_at,
        )

    @classmethod
    def to_entity_log(cls, domain: GenerationLog) -> "GenerationLogEntity":
        return cls(
            job_id=domain.job_id,
            product=domain.product,
            input_type=domain.input_type,
            template_version=domain.template_version,
            status=domain.status,
            stage=domain.stage,
            error_type=domain.error_type,
            error_message=domain.error_message,
            artifact_summary=dict(domain.artifact_summary),
            warnings=list(domain.warnings),
            raw_output=domain.raw_output,
            generation_time_ms=domain.generation_time_ms,
            llm_provider=domain.llm_provider,
            llm_model=domain.llm_model,
        )
