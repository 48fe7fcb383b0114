"""Helper module for setting up services with minimal configuration."""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from uigen.application.interfaces.illm_backend import ILLMBackend
from uigen.application.services.generation_service import GenerationService
from uigen.application.services.job_queue_processor import JobQueueProcessor
from uigen.application.services.prompt_compiler import PromptCompiler
from uigen.config import BackendSettings, PipelineSettings, QueueSettings, Settings
from uigen.infrastructure.llm.backend_factory import apply_llm_config, create_backend
from uigen.infrastructure.repositories.setup import Repositories
from uigen.infrastructure.validation.pipeline import ValidationPipeline


@dataclass
class Services:
    """A dataclass that holds all the services."""

    backend: ILLMBackend
    prompt_compiler: PromptCompiler
    validation_pipeline: ValidationPipeline
    generation_service: GenerationService
    job_processor: JobQueueProcessor


def setup_services(
    session: Session,
    repositories: Repositories,
    settings: Optional[Settings] = None,
    backend: Optional[ILLMBackend] = None,
) -> Services:
    """
    Set up services with minimal configuration.

    Args:
        session: Database session
        repositories: Repository instances
        settings: Application settings, defaults are used when omitted
        backend: Backend to use instead of the configured provider

    Returns:
        Services instance with all required services
    """
    settings = settings or Settings()

    if backend is None:
        backend_settings = apply_llm_config(
            BackendSettings.from_settings(settings),
            repositories.llm_config_source.get_active(),
        )
        backend = create_backend(backend_settings)

    prompt_compiler = PromptCompiler(repositories.prompt_source, settings.PROMPT_TOKEN_BUDGET)
    validation_pipeline = ValidationPipeline.from_settings(PipelineSettings.from_settings(settings))
    generation_service = GenerationService(
        prompt_compiler, backend, validation_pipeline, repositories.log_repo
    )
    job_processor = JobQueueProcessor(
        repositories.job_repo, generation_service, QueueSettings.from_settings(settings)
    )

    return Services(
        backend=backend,
        prompt_compiler=prompt_compiler,
        validation_pipeline=validation_pipeline,
        generation_service=generation_service,
        job_processor=job_processor,
    )
