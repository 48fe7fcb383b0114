"""Service running one generation attempt end to end."""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from uigen.application.interfaces.illm_backend import ILLMBackend
from uigen.application.interfaces.ilog_repository import ILogRepository
from uigen.application.interfaces.ivalidation_pipeline import IValidationPipeline
from uigen.application.services.exceptions import GenerationError, InternalError, PipelineError
from uigen.application.services.prompt_compiler import PromptCompiler
from uigen.domain.artifacts import ValidatedArtifact
from uigen.domain.models import CompiledPrompt, GenerationLog, GenerationRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of one generation attempt: an artifact or a structured failure."""

    status: str
    elapsed_ms: float
    log_id: Optional[int] = None
    artifact: Optional[ValidatedArtifact] = None
    stage: Optional[str] = None
    error_type: Optional[str] = None
    message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.artifact is not None


class GenerationService:
    """Compiles the prompt, calls the backend and validates the output.

    Every call writes exactly one generation log, whatever the outcome, with
    the elapsed time measured from the start of the call.
    """

    def __init__(
        self,
        compiler: PromptCompiler,
        backend: ILLMBackend,
        pipeline: IValidationPipeline,
        log_repository: ILogRepository,
    ):
        self.compiler = compiler
        self.backend = backend
        self.pipeline = pipeline
        self.log_repository = log_repository

    def generate(self, request: GenerationRequest, job_id: Optional[str] = None) -> GenerationResult:
        """Run one generation attempt.

        Args:
            request: What to generate
            job_id: Queue job the attempt belongs to, if any

        Returns:
            The artifact on success, or the failing stage and message

        Raises:
            InternalError: On an unexpected failure (after it has been logged)
        """
        start = time.perf_counter()
        prompt: Optional[CompiledPrompt] = None
        raw_output: Optional[str] = None

        try:
            prompt = self.compiler.compile(request)
            raw_output = self.backend.generate(prompt.full())
            artifact = self.pipeline.run(raw_output)
        except GenerationError as e:
            elapsed_ms = self._elapsed_ms(start)
            logger.error(f"Generation failed at {e.stage}: {e.message}")
            log = self._write_log(
                request,
                job_id,
                prompt,
                elapsed_ms,
                status="failed",
                stage=e.stage,
                error_type=e.error_type,
                error_message=e.message,
                raw_output=raw_output if isinstance(e, PipelineError) else None,
            )
            return GenerationResult(
                status="failed",
                elapsed_ms=elapsed_ms,
                log_id=log.id,
                stage=e.stage,
                error_type=e.error_type,
                message=e.message,
            )
        except Exception as e:
            elapsed_ms = self._elapsed_ms(start)
            logger.exception(f"Unexpected error during generation: {e}")
            self._write_log(
                request,
                job_id,
                prompt,
                elapsed_ms,
                status="failed",
                stage=InternalError.stage,
                error_type=type(e).__name__,
                error_message=str(e),
                raw_output=raw_output,
            )
            raise InternalError(f"Unexpected error during generation: {e}") from e

        elapsed_ms = self._elapsed_ms(start)
        log = self._write_log(
            request,
            job_id,
            prompt,
            elapsed_ms,
            status="completed",
            artifact=artifact,
        )
        logger.info(
            f"Generated {request.screen_type} screen for {request.product} in {elapsed_ms:.1f} ms"
        )
        return GenerationResult(
            status="completed",
            elapsed_ms=elapsed_ms,
            log_id=log.id,
            artifact=artifact,
        )

    @staticmethod
    def _elapsed_ms(start: float) -> float:
        return (time.perf_counter() - start) * 1000

    def _write_log(
        self,
        request: GenerationRequest,
        job_id: Optional[str],
        prompt: Optional[CompiledPrompt],
        elapsed_ms: float,
        status: str,
        stage: Optional[str] = None,
        error_type: Optional[str] = None,
        error_message: Optional[str] = None,
        raw_output: Optional[str] = None,
        artifact: Optional[ValidatedArtifact] = None,
    ) -> GenerationLog:
        if prompt is not None:
            template_version = prompt.template_version
        else:
            template_version = request.template_version or 0

        return self.log_repository.write(
            GenerationLog(
                product=request.product,
                input_type=request.input_type,
                status=status,
                generation_time_ms=elapsed_ms,
                template_version=template_version,
                job_id=job_id,
                stage=stage,
                error_type=error_type,
                error_message=error_message,
                artifact_summary=artifact.summary() if artifact else {},
                warnings=artifact.warnings if artifact else (),
                raw_output=raw_output,
                llm_provider=self.backend.name(),
                llm_model=self.backend.model(),
            )
        )
