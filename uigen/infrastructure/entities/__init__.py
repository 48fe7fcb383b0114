from .entity_base import EntityBase
from .generation_job import GenerationJobEntity
from .generation_log import GenerationLogEntity
from .llm_config import LLMConfigEntity
from .prompt_material import CompanyRuleEntity, KnowledgeEntryEntity, PromptTemplateEntity

__all__ = [
    "EntityBase",
    "GenerationJobEntity",
    "GenerationLogEntity",
    "LLMConfigEntity",
    "PromptTemplateEntity",
    "CompanyRuleEntity",
    "KnowledgeEntryEntity",
]
