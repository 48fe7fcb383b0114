"""Core domain models for UI generation."""

import json
import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

SCREEN_TYPES = ("list", "detail", "popup", "list_with_popup")
INPUT_TYPES = ("natural-language", "db-schema", "query-sample")


def estimate_tokens(text: str) -> int:
    """Rough token estimate used for prompt budgeting (four characters per token)."""
    return math.ceil(len(text) / 4)


@dataclass(frozen=True)
class GenerationRequest:
    """A request to generate one screen. Immutable once submitted."""

    product: str
    input_type: str
    intent: str
    template_version: Optional[int] = None
    screen_type: str = "list"

    def __post_init__(self) -> None:
        for name in ("product", "input_type", "intent", "screen_type"):
            if not isinstance(getattr(self, name), str):
                raise ValueError(f"{name} must be a string")
        if self.template_version is not None and (
            isinstance(self.template_version, bool) or not isinstance(self.template_version, int)
        ):
            raise ValueError("template_version must be an integer")
        if not self.product.strip():
            raise ValueError("product must not be empty")
        if not self.intent.strip():
            raise ValueError("intent must not be empty")
        if self.input_type not in INPUT_TYPES:
            raise ValueError(
                f"Unknown input type '{self.input_type}'. "
                f"Must be one of: {', '.join(INPUT_TYPES)}"
            )
        if self.screen_type not in SCREEN_TYPES:
            raise ValueError(
                f"Unknown screen type '{self.screen_type}'. "
                f"Must be one of: {', '.join(SCREEN_TYPES)}"
            )

    def to_payload(self) -> str:
        """Serialize to the JSON payload stored on a job."""
        return json.dumps(
            {
                "product": self.product,
                "input_type": self.input_type,
                "intent": self.intent,
                "template_version": self.template_version,
                "screen_type": self.screen_type,
            },
            sort_keys=True,
        )

    @classmethod
    def from_payload(cls, payload: Optional[str]) -> "GenerationRequest":
        """Rebuild a request from a job payload.

        Raises:
            ValueError: If the payload is missing, not JSON, or incomplete
        """
        if not payload:
            raise ValueError("No request payload")
        data = json.loads(payload)
        if not isinstance(data, dict):
            raise ValueError("Request payload must be a JSON object")
        try:
            return cls(
                product=data["product"],
                input_type=data.get("input_type", "natural-language"),
                intent=data["intent"],
                template_version=data.get("template_version"),
                screen_type=data.get("screen_type", "list"),
            )
        except KeyError as e:
            raise ValueError(f"Request payload is missing {e}") from e


@dataclass(frozen=True)
class CompiledPrompt:
    """The final prompt sent to a backend. Produced once per request."""

    system: str
    user: str
    estimated_tokens: int
    template_version: int = 0
    knowledge_used: Tuple[str, ...] = ()

    def full(self) -> str:
        """Combine system and user prompts into a single prompt string."""
        return f"{self.system}\n\n{self.user}"


@dataclass(frozen=True)
class PromptTemplate:
    """Read-only view of a stored prompt template."""

    product: str
    screen_type: str
    version: int
    system_prompt: str
    user_prompt_template: str
    name: str = ""


@dataclass(frozen=True)
class CompanyRule:
    """Read-only view of an additional company rule for a product."""

    product: str
    rule_text: str
    priority: int = 0


PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


@dataclass(frozen=True)
class KnowledgeSnippet:
    """Read-only view of a knowledge-base entry."""

    name: str
    content: str
    priority: str = "medium"
    relevance_tags: Tuple[str, ...] = ()
    token_estimate: Optional[int] = None
    category: str = "general"

    @property
    def tokens(self) -> int:
        if self.token_estimate is not None:
            return self.token_estimate
        return estimate_tokens(self.content)

    @property
    def priority_rank(self) -> int:
        return PRIORITY_ORDER.get((self.priority or "").lower(), len(PRIORITY_ORDER))


@dataclass(frozen=True)
class LLMConfigRecord:
    """Read-only view of the admin-managed LLM configuration row."""

    provider: str
    model_name: Optional[str] = None
    endpoint_url: Optional[str] = None
    api_key: Optional[str] = None
    timeout_seconds: Optional[float] = None
    model_path: Optional[str] = None
    context_size: Optional[int] = None
    threads: Optional[int] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None


class JobStatus(Enum):
    """Lifecycle of a generation job: queued -> processing -> completed | failed."""

    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


@dataclass(frozen=True)
class GenerationJob:
    """A persisted unit of queued generation work."""

    id: Optional[int]
    job_id: str
    request_payload: str
    status: JobStatus
    attempt: int = 0
    priority: int = 0
    queued_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    artifact: Optional[str] = None
    error_stage: Optional[str] = None
    error_message: Optional[str] = None
    log_id: Optional[int] = None


@dataclass(frozen=True)
class GenerationLog:
    """Audit record written exactly once per generation attempt."""

    product: str
    input_type: str
    status: str
    generation_time_ms: float
    template_version: int = 0
    job_id: Optional[str] = None
    stage: Optional[str] = None
    error_type: Optional[str] = None
    error_message: Optional[str] = None
    artifact_summary: Dict[str, Any] = field(default_factory=dict)
    warnings: Tuple[str, ...] = ()
    raw_output: Optional[str] = None
    llm_provider: Optional[str] = None
    llm_model: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class QueueStats:
    """Number of jobs per status."""

    queued: int = 0
    processing: int = 0
    completed: int = 0
    failed: int = 0
