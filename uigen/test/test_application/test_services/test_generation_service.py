from dataclasses import replace
from unittest.mock import MagicMock

import pytest

from uigen.application.interfaces.ilog_repository import ILogRepository
from uigen.application.interfaces.iprompt_source import IPromptSource
from uigen.application.services.exceptions import InternalError
from uigen.application.services.generation_service import GenerationService
from uigen.application.services.prompt_compiler import PromptCompiler
from uigen.infrastructure.llm.mock_backend import MockBackend
from uigen.infrastructure.validation.pipeline import ValidationPipeline
from uigen.test.fixtures import LOGIN_REQUEST


@pytest.fixture
def log_repository():
    repository = MagicMock(spec=ILogRepository)
    repository.write.side_effect = lambda log: replace(log, id=41)
    return repository


@pytest.fixture
def compiler():
    source = MagicMock(spec=IPromptSource)
    source.get_template.return_value = None
    source.get_rules.return_value = []
    source.get_knowledge.return_value = []
    return PromptCompiler(source)


def _service(compiler, backend, log_repository, pipeline=None):
    return GenerationService(compiler, backend, pipeline or ValidationPipeline(), log_repository)


def _written(log_repository):
    log_repository.write.assert_called_once()
    return log_repository.write.call_args[0][0]


def test_success_returns_artifact_and_logs_once(compiler, log_repository):
    backend = MockBackend()
    result = _service(compiler, backend, log_repository).generate(LOGIN_REQUEST, job_id="job-1")

    assert result.succeeded
    assert result.status == "completed"
    assert result.log_id == 41
    assert result.elapsed_ms > 0
    assert result.artifact.find("btn_login") is not None

    log = _written(log_repository)
    assert log.status == "completed"
    assert log.job_id == "job-1"
    assert log.product == "member-portal"
    assert log.template_version == 0
    assert log.llm_provider == "mock"
    assert log.llm_model == "mock-model"
    assert log.artifact_summary["root"] == "screen"
    assert log.raw_output is None
    assert "add login button" in backend.prompts[0]


def test_backend_failure_is_logged(compiler, log_repository):
    result = _service(compiler, MockBackend.failing("down"), log_repository).generate(
        LOGIN_REQUEST
    )

    assert not result.succeeded
    assert result.stage == "backend"
    assert result.error_type == "BackendFailure"
    assert "down" in result.message

    log = _written(log_repository)
    assert log.status == "failed"
    assert log.stage == "backend"
    assert log.raw_output is None


def test_pipeline_failure_keeps_raw_output(compiler, log_repository):
    backend = MockBackend(["There is no code in this answer."])
    result = _service(compiler, backend, log_repository).generate(LOGIN_REQUEST)

    assert result.stage == "output_parser"
    assert result.error_type == "ParseError"
    assert result.artifact is None

    log = _written(log_repository)
    assert log.error_type == "ParseError"
    assert log.raw_output == "There is no code in this answer."
    assert log.artifact_summary == {}


def test_prompt_too_large_never_calls_backend(log_repository):
    source = MagicMock(spec=IPromptSource)
    source.get_template.return_value = None
    source.get_rules.return_value = []
    source.get_knowledge.return_value = []
    backend = MockBackend()

    result = _service(PromptCompiler(source, token_budget=10), backend, log_repository).generate(
        LOGIN_REQUEST
    )

    assert result.stage == "prompt_compiler"
    assert backend.call_count == 0
    assert _written(log_repository).stage == "prompt_compiler"


def test_unexpected_error_is_logged_then_raised(compiler, log_repository):
    pipeline = MagicMock()
    pipeline.run.side_effect = RuntimeError("bug")

    with pytest.raises(InternalError, match="bug"):
        _service(compiler, MockBackend(), log_repository, pipeline).generate(LOGIN_REQUEST)

    log = _written(log_repository)
    assert log.stage == "internal"
    assert log.error_type == "RuntimeError"
    assert log.raw_output is not None
