"""Compiles a generation request into the prompt sent to the backend."""

import logging
import re
from typing import List, Optional, Sequence, Tuple

from uigen.application.interfaces.iprompt_source import IPromptSource
from uigen.application.services.exceptions import PromptTooLarge
from uigen.application.services.input_normalizer import InputNormalizer
from uigen.domain.models import (
    CompanyRule,
    CompiledPrompt,
    GenerationRequest,
    KnowledgeSnippet,
    PromptTemplate,
    estimate_tokens,
)

logger = logging.getLogger(__name__)

RULES_HEADER = "COMPANY-SPECIFIC RULES:"
KNOWLEDGE_HEADER = "REFERENCE KNOWLEDGE:"
KNOWLEDGE_SEPARATOR = "\n\n---\n\n"

DEFAULT_SYSTEM_PROMPT = """You are an expert xFrame5 developer.
You generate xFrame5 screens as an XML layout and a JavaScript handler script.

Rules:
- The XML has exactly one <screen> root element.
- Datasets are declared with <xdataset id="ds_..."> and bound with link_data="ds_...".
- Event handlers are written as on_click="eventfunc:fn_name()".
- Handler functions are declared as this.fn_name = function() { ... };
- Only use documented xFrame5 components and APIs.
- Do not add functions that nothing calls.

Answer in exactly this format and nothing else:
--- XML ---
<screen ...>...</screen>

--- JS ---
this.fn_init = function() { ... };"""

DEFAULT_USER_TEMPLATE = """Generate an xFrame5 {{screen_type}} screen for {{product}}.

Request:
{{intent}}"""

PLACEHOLDER_RE = re.compile(r"\{\{\s*(\w+)\s*\}\}")
WORD_RE = re.compile(r"\w+")


def default_template(product: str, screen_type: str) -> PromptTemplate:
    return PromptTemplate(
        product=product,
        screen_type=screen_type,
        version=0,
        system_prompt=DEFAULT_SYSTEM_PROMPT,
        user_prompt_template=DEFAULT_USER_TEMPLATE,
        name="default",
    )


def render_template(template: str, values: dict) -> str:
    """Substitute ``{{name}}`` placeholders and drop ``{{#if}}``/``{{/if}}`` lines."""
    lines = [
        line
        for line in template.splitlines()
        if "{{#if" not in line and "{{/if}}" not in line
    ]
    text = "\n".join(lines)
    return PLACEHOLDER_RE.sub(lambda m: str(values.get(m.group(1), m.group(0))), text)


def rank_snippets(
    snippets: Sequence[KnowledgeSnippet], request: GenerationRequest
) -> List[KnowledgeSnippet]:
    """Order snippets by priority, then relevance to the request, then name."""
    words = {w.lower() for w in WORD_RE.findall(request.intent)}
    words.add(request.screen_type.lower())

    def matches(snippet: KnowledgeSnippet) -> int:
        return sum(1 for tag in snippet.relevance_tags if tag.lower() in words)

    return sorted(snippets, key=lambda s: (s.priority_rank, -matches(s), s.name))


class PromptCompiler:
    """Builds a CompiledPrompt that fits the token budget.

    The output only depends on the request and the stored material, so the
    same inputs always produce the same prompt.
    """

    def __init__(
        self,
        source: IPromptSource,
        token_budget: int = 6000,
        normalizer: Optional[InputNormalizer] = None,
    ):
        self.source = source
        self.token_budget = token_budget
        self.normalizer = normalizer or InputNormalizer()

    def compile(self, request: GenerationRequest) -> CompiledPrompt:
        """Compile the prompt for a request.

        Raises:
            InvalidInput: If a schema or query sample cannot be normalized
            PromptTooLarge: If template, rules and intent alone exceed the budget
        """
        ui_intent = self.normalizer.normalize(request)
        if request.input_type == "natural-language":
            intent_text = request.intent
        else:
            intent_text = ui_intent.describe()

        template = self.source.get_template(
            request.product, request.screen_type, request.template_version
        )
        if template is None:
            logger.debug(
                f"No stored template for {request.product}/{request.screen_type}, using default"
            )
            template = default_template(request.product, request.screen_type)

        rules = sorted(self.source.get_rules(request.product), key=lambda r: r.priority)
        rules_text = self._rules_text(rules)

        system = template.system_prompt.strip()
        if rules_text:
            system = f"{system}\n\n{RULES_HEADER}\n{rules_text}"
        user = render_template(
            template.user_prompt_template,
            {
                "intent": intent_text,
                "dsl_description": ui_intent.describe(),
                "screen_type": request.screen_type,
                "screen_name": ui_intent.screen_name,
                "product": request.product,
                "datasets": ui_intent.datasets_text(),
                "grid_columns": ui_intent.grid_columns_text(),
                "form_fields": ui_intent.grid_columns_text(),
                "actions": ui_intent.actions_text(),
                "notes": ui_intent.notes or "",
                "company_rules": rules_text,
            },
        ).strip()

        base_tokens = estimate_tokens(f"{system}\n\n{user}")
        if base_tokens > self.token_budget:
            raise PromptTooLarge(base_tokens, self.token_budget)

        snippets, total = self._fit_snippets(
            rank_snippets(self.source.get_knowledge(), request), base_tokens
        )
        if snippets:
            knowledge = KNOWLEDGE_SEPARATOR.join(s.content.strip() for s in snippets)
            system = f"{system}\n\n{KNOWLEDGE_HEADER}\n{knowledge}"

        logger.debug(
            f"Compiled prompt with template v{template.version}, {len(rules)} rule(s), "
            f"{len(snippets)} snippet(s), ~{total} tokens"
        )
        return CompiledPrompt(
            system=system,
            user=user,
            estimated_tokens=total,
            template_version=template.version,
            knowledge_used=tuple(s.name for s in snippets),
        )

    def _rules_text(self, rules: Sequence[CompanyRule]) -> str:
        return "\n".join(r.rule_text.strip() for r in rules if r.rule_text.strip())

    def _fit_snippets(
        self, ranked: List[KnowledgeSnippet], base_tokens: int
    ) -> Tuple[List[KnowledgeSnippet], int]:
        """Drop snippets from the tail of the ranking until the prompt fits."""
        kept = list(ranked)
        total = self._total(kept, base_tokens)
        while kept and total > self.token_budget:
            dropped = kept.pop()
            logger.debug(f"Dropped knowledge snippet '{dropped.name}' to fit the token budget")
            total = self._total(kept, base_tokens)
        return kept, total

    @staticmethod
    def _total(snippets: Sequence[KnowledgeSnippet], base_tokens: int) -> int:
        if not snippets:
            return base_tokens
        overhead = estimate_tokens(f"\n\n{KNOWLEDGE_HEADER}\n") + estimate_tokens(
            KNOWLEDGE_SEPARATOR
        ) * (len(snippets) - 1)
        return base_tokens + overhead + sum(s.tokens for s in snippets)
