"""Interface for read-only prompt material."""

from abc import ABC, abstractmethod
from typing import List, Optional

from uigen.domain.models import CompanyRule, KnowledgeSnippet, LLMConfigRecord, PromptTemplate


class IPromptSource(ABC):
    """Read-only access to templates, company rules and knowledge snippets.

    Managing these records happens elsewhere. The generation path only reads them.
    """

    @abstractmethod
    def get_template(
        self, product: str, screen_type: str, version: Optional[int] = None
    ) -> Optional[PromptTemplate]:
        """Return the requested template version, or the newest active one.

        Args:
            product: Product identifier
            screen_type: Screen type the template is written for
            version: Exact version, None for the newest active version

        Returns:
            The template, or None when nothing matches
        """
        pass

    @abstractmethod
    def get_rules(self, product: str) -> List[CompanyRule]:
        """Active company rules for the product, in priority order."""
        pass

    @abstractmethod
    def get_knowledge(self) -> List[KnowledgeSnippet]:
        """All active knowledge snippets, unranked."""
        pass


class ILLMConfigSource(ABC):
    """Read-only access to the admin-managed LLM configuration."""

    @abstractmethod
    def get_active(self) -> Optional[LLMConfigRecord]:
        """The active LLM configuration record, if any."""
        pass
