from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from uigen.application.interfaces.ilog_repository import ILogRepository
from uigen.domain.models import GenerationLog
from uigen.infrastructure.entities.generation_log import GenerationLogEntity


class LogRepository(ILogRepository):
    def __init__(self, session: Session):
        self.session = session

    def write(self, log: GenerationLog) -> GenerationLog:
        entity = GenerationLogEntity.to_entity_log(log)
        self.session.add(entity)
        self.session.commit()
        return entity.to_domain_log()

    def get(self, log_id: int) -> Optional[GenerationLog]:
        entity = self.session.get(GenerationLogEntity, log_id)
        return entity.to_domain_log() if entity else None

    def list_for_job(self, job_id: str) -> List[GenerationLog]:
        entities = self.session.execute(
            select(GenerationLogEntity)
            .where(GenerationLogEntity.job_id == job_id)
            .order_by(GenerationLogEntity.id)
        ).scalars()
        return [e.to_domain_log() for e in entities]
