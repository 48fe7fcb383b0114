"""Custom exceptions for the UI generation services."""

from typing import Iterable, Optional

BODY_PREVIEW_LIMIT = 500


class ConfigurationError(Exception):
    """Raised when a required setting or credential is missing at startup."""


class GenerationError(Exception):
    """Base class for failures of a single generation attempt.

    Every subclass names the stage that failed so the failure can be logged
    and stored on the job.
    """

    stage = "generation"

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if stage is not None:
            self.stage = stage

    @property
    def error_type(self) -> str:
        return type(self).__name__


class PromptTooLarge(GenerationError):
    """Raised when the template, rules and intent alone exceed the token budget."""

    stage = "prompt_compiler"

    def __init__(self, estimated_tokens: int, budget: int):
        super().__init__(
            f"Prompt needs {estimated_tokens} tokens without any knowledge snippets, "
            f"budget is {budget}"
        )
        self.estimated_tokens = estimated_tokens
        self.budget = budget


class InvalidInput(GenerationError):
    """Raised when a schema or query sample cannot be turned into a UI intent."""

    stage = "input_normalizer"


class BackendFailure(GenerationError):
    """Raised when a backend call or health check fails.

    Carries the provider, the HTTP status code when there was one, and the
    response body truncated to ``BODY_PREVIEW_LIMIT`` characters.
    """

    stage = "backend"

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        self.provider = provider
        self.status_code = status_code
        self.body = body[:BODY_PREVIEW_LIMIT] if body else None
        detail = f"{provider}: {message}"
        if status_code is not None:
            detail += f" (status {status_code})"
        if self.body:
            detail += f": {self.body}"
        super().__init__(detail)


class PipelineError(GenerationError):
    """Raised by a validation pass that rejects the model output."""

    stage = "pipeline"


class ParseError(PipelineError):
    """Raised when the XML or script section cannot be located or parsed."""

    stage = "output_parser"


class UnresolvedSymbol(PipelineError):
    """Raised when a handler, binding or call names something never declared."""

    stage = "symbol_linker"

    def __init__(self, names: Iterable[str]):
        self.names = tuple(sorted(set(names)))
        super().__init__(f"Unresolved symbol(s): {', '.join(self.names)}")


class AllowlistViolation(PipelineError):
    """Raised when a component or API is not on the allow-list and cannot be stripped."""

    stage = "api_allowlist"

    def __init__(self, violations: Iterable[str]):
        self.violations = tuple(violations)
        super().__init__(f"Not on the allow-list: {', '.join(self.violations)}")


class InvalidGraph(PipelineError):
    """Raised when the component/symbol graph is structurally unsound."""

    stage = "graph_validator"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class InternalError(GenerationError):
    """Raised for unexpected failures inside the generation or queue machinery."""

    stage = "internal"
