import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.orm import Session

from uigen.application.interfaces.ijob_repository import IJobRepository
from uigen.domain.models import GenerationJob, GenerationRequest, JobStatus, QueueStats
from uigen.infrastructure.entities.generation_job import GenerationJobEntity

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class JobRepository(IJobRepository):
    def __init__(self, session: Session):
        self.session = session

    def submit(self, request: GenerationRequest, priority: int = 0) -> GenerationJob:
        job = GenerationJob(
            id=None,
            job_id=str(uuid.uuid4()),
            request_payload=request.to_payload(),
            status=JobStatus.QUEUED,
            priority=priority,
            queued_at=_now(),
        )
        entity = GenerationJobEntity.to_entity_job(job)
        self.session.add(entity)
        self.session.commit()
        logger.info(f"Queued job {entity.job_id} for {request.product}")
        return entity.to_domain_job()

    def get_job(self, job_id: str) -> Optional[GenerationJob]:
        entity = self.session.execute(
            select(GenerationJobEntity)
            .where(GenerationJobEntity.job_id == job_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        return entity.to_domain_job() if entity else None

    def next_queued(self) -> Optional[GenerationJob]:
        entity = self.session.execute(
            select(GenerationJobEntity)
            .where(GenerationJobEntity.status == JobStatus.QUEUED.value)
            .order_by(
                GenerationJobEntity.priority,
                GenerationJobEntity.queued_at,
                GenerationJobEntity.id,
            )
            .limit(1)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        return entity.to_domain_job() if entity else None

    def claim(self, job_id: str) -> bool:
        return self._transition(
            job_id,
            JobStatus.QUEUED,
            JobStatus.PROCESSING,
            started_at=_now(),
            attempt=GenerationJobEntity.attempt + 1,
        )

    def mark_completed(self, job_id: str, artifact: str, log_id: Optional[int]) -> bool:
        return self._transition(
            job_id,
            JobStatus.PROCESSING,
            JobStatus.COMPLETED,
            completed_at=_now(),
            artifact=artifact,
            log_id=log_id,
        )

    def mark_failed(
        self,
        job_id: str,
        stage: str,
        message: str,
        log_id: Optional[int] = None,
    ) -> bool:
        return self._transition(
            job_id,
            JobStatus.PROCESSING,
            JobStatus.FAILED,
            completed_at=_now(),
            error_stage=stage,
            error_message=message,
            log_id=log_id,
        )

    def _transition(
        self, job_id: str, source: JobStatus, target: JobStatus, **values: Any
    ) -> bool:
        """Conditional status update: only applies while the job is in ``source``."""
        try:
            result = self.session.execute(
                update(GenerationJobEntity)
                .where(
                    GenerationJobEntity.job_id == job_id,
                    GenerationJobEntity.status == source.value,
                )
                .values(status=target.value, **values)
                .execution_options(synchronize_session=False)
            )
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        moved = result.rowcount == 1
        if not moved:
            logger.warning(
                f"Job {job_id} was not {source.value}, could not move it to {target.value}"
            )
        return moved

    def queue_stats(self) -> QueueStats:
        rows = self.session.execute(
            select(GenerationJobEntity.status, func.count(GenerationJobEntity.id)).group_by(
                GenerationJobEntity.status
            )
        ).all()
        counts = {status: count for status, count in rows}
        return QueueStats(
            queued=counts.get(JobStatus.QUEUED.value, 0),
            processing=counts.get(JobStatus.PROCESSING.value, 0),
            completed=counts.get(JobStatus.COMPLETED.value, 0),
            failed=counts.get(JobStatus.FAILED.value, 0),
        )

    def queue_position(self, job_id: str) -> Optional[int]:
        job = self.session.execute(
            select(GenerationJobEntity)
            .where(GenerationJobEntity.job_id == job_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if job is None or job.status != JobStatus.QUEUED.value:
            return None

        ahead = self.session.execute(
            select(func.count(GenerationJobEntity.id)).where(
                GenerationJobEntity.status == JobStatus.QUEUED.value,
                or_(
                    GenerationJobEntity.priority < job.priority,
                    and_(
                        GenerationJobEntity.priority == job.priority,
                        or_(
                            GenerationJobEntity.queued_at < job.queued_at,
                            and_(
                                GenerationJobEntity.queued_at == job.queued_at,
                                GenerationJobEntity.id < job.id,
                            ),
                        ),
                    ),
                ),
            )
        ).scalar_one()
        return ahead + 1
