"""Entity model for queued generation jobs."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from uigen.domain.models import GenerationJob, JobStatus

from .entity_base import EntityBase

__all__ = ["GenerationJobEntity"]


class GenerationJobEntity(EntityBase):
    """Database model for generation jobs.

    ``status`` only ever moves queued -> processing -> completed | failed, and
    every move is a conditional update on the current status.
    """

    __tablename__ = "generation_jobs"
    __table_args__ = (
        Index("ix_generation_jobs_queue", "status", "priority", "queued_at", "id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    job_id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True)
    request_payload: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=JobStatus.QUEUED.value)
    attempt: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    queued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    artifact: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    error_stage: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    log_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    def to_domain_job(self) -> GenerationJob:
        return GenerationJob(
            id=self.id,
            job_id=self.job_id,
            request_payload=self.request_payload,
            status=JobStatus(self.status),
            attempt=self.attempt,
            priority=self.priority,
            queued_at=self.queued_at,
            started_at=self.started_at,
            completed_at=self.completed_at,
            artifact=self.artifact,
            error_stage=self.error_stage,
            error_message=self.error_message,
            log_id=self.log_id,
        )

    @classmethod
    def to_entity_job(cls, domain: GenerationJob) -> "GenerationJobEntity":
        return cls(
            job_id=domain.job_id,
            request_payload=domain.request_payload,
            status=domain.status.value,
            attempt=domain.attempt,
            priority=domain.priority,
            queued_at=domain.queued_at,
        )
