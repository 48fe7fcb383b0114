from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from uigen.application.interfaces.iprompt_source import ILLMConfigSource, IPromptSource
from uigen.domain.models import CompanyRule, KnowledgeSnippet, LLMConfigRecord, PromptTemplate
from uigen.infrastructure.entities.llm_config import LLMConfigEntity
from uigen.infrastructure.entities.prompt_material import (
    CompanyRuleEntity,
    KnowledgeEntryEntity,
    PromptTemplateEntity,
)


class PromptSourceRepository(IPromptSource):
    """Reads templates, rules and knowledge. Never writes."""

    def __init__(self, session: Session):
        self.session = session

    def get_template(
        self, product: str, screen_type: str, version: Optional[int] = None
    ) -> Optional[PromptTemplate]:
        query = select(PromptTemplateEntity).where(
            PromptTemplateEntity.product == product,
            PromptTemplateEntity.screen_type == screen_type,
        )
        if version is None:
            query = query.where(PromptTemplateEntity.is_active.is_(True))
        else:
            query = query.where(PromptTemplateEntity.version == version)
        entity = self.session.execute(
            query.order_by(PromptTemplateEntity.version.desc()).limit(1)
        ).scalar_one_or_none()
        return entity.to_domain_template() if entity else None

    def get_rules(self, product: str) -> List[CompanyRule]:
        entities = self.session.execute(
            select(CompanyRuleEntity)
            .where(CompanyRuleEntity.product == product, CompanyRuleEntity.is_active.is_(True))
            .order_by(CompanyRuleEntity.priority, CompanyRuleEntity.id)
        ).scalars()
        return [e.to_domain_rule() for e in entities]

    def get_knowledge(self) -> List[KnowledgeSnippet]:
        entities = self.session.execute(
            select(KnowledgeEntryEntity)
            .where(KnowledgeEntryEntity.is_active.is_(True))
            .order_by(KnowledgeEntryEntity.name)
        ).scalars()
        return [e.to_domain_snippet() for e in entities]


class LLMConfigRepository(ILLMConfigSource):
    def __init__(self, session: Session):
        self.session = session

    def get_active(self) -> Optional[LLMConfigRecord]:
        entity = self.session.execute(
            select(LLMConfigEntity)
            .where(LLMConfigEntity.is_active.is_(True))
            .order_by(LLMConfigEntity.id.desc())
            .limit(1)
        ).scalar_one_or_none()
        return entity.to_domain_config() if entity else None
