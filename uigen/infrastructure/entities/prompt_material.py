"""Entity models for the read-only prompt material."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from uigen.domain.models import CompanyRule, KnowledgeSnippet, PromptTemplate

from .entity_base import EntityBase

__all__ = ["PromptTemplateEntity", "CompanyRuleEntity", "KnowledgeEntryEntity"]


class PromptTemplateEntity(EntityBase):
    """Versioned prompt template per product and screen type."""

    __tablename__ = "prompt_templates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    product: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    screen_type: Mapped[str] = mapped_column(String(50), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    system_prompt: Mapped[str] = mapped_column(Text, nullable=False)
    user_prompt_template: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def to_domain_template(self) -> PromptTemplate:
        return PromptTemplate(
            product=self.product,
            screen_type=self.screen_type,
            version=self.version,
            system_prompt=self.system_prompt,
            user_prompt_template=self.user_prompt_template,
            name=self.name,
        )


class CompanyRuleEntity(EntityBase):
    """Additional generation rule for a product."""

    __tablename__ = "company_rules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    rule_text: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_domain_rule(self) -> CompanyRule:
        return CompanyRule(product=self.product, rule_text=self.rule_text, priority=self.priority)


class KnowledgeEntryEntity(EntityBase):
    """Reference snippet that may be added to prompts when the budget allows."""

    __tablename__ = "knowledge_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False, default="general")
    content: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[str] = mapped_column(String(10), nullable=False, default="medium")
    relevance_tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    token_estimate: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_domain_snippet(self) -> KnowledgeSnippet:
        return KnowledgeSnippet(
            name=self.name,
            content=self.content,
            priority=self.priority,
            relevance_tags=tuple(self.relevance_tags or ()),
            token_estimate=self.token_estimate,
            category=self.category,
        )
