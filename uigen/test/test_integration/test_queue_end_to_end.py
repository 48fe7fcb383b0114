"""Queued jobs drained by the processor against the mock backend and an in-memory database."""

import json
from unittest.mock import MagicMock

import pytest
from sqlalchemy import update

from uigen.application.services.job_queue_processor import PollState
from uigen.config import Settings
from uigen.domain.models import GenerationRequest, JobStatus
from uigen.infrastructure.entities.generation_job import GenerationJobEntity
from uigen.infrastructure.llm.mock_backend import MockBackend
from uigen.infrastructure.services.setup import setup_services
from uigen.test.fixtures import LOGIN_REQUEST


@pytest.fixture
def settings(clean_env) -> Settings:
    return Settings(_env_file=None)


def _services(db_session, repositories, settings, backend):
    services = setup_services(db_session, repositories, settings, backend=backend)
    services.job_processor.sleep = MagicMock()
    return services


def test_login_button_job_completes(db_session, repositories, settings):
    services = _services(db_session, repositories, settings, MockBackend())
    job = repositories.job_repo.submit(LOGIN_REQUEST)

    assert services.job_processor.tick() is PollState.DRAIN
    assert services.job_processor.tick() is PollState.IDLE

    done = repositories.job_repo.get_job(job.job_id)
    assert done.status is JobStatus.COMPLETED
    assert done.attempt == 1
    assert done.completed_at is not None
    assert '<pushbutton id="btn_login"' in done.artifact
    assert "this.fn_login = function() {" in done.artifact

    log = repositories.log_repo.get(done.log_id)
    assert log.status == "completed"
    assert log.job_id == job.job_id
    assert log.generation_time_ms > 0
    assert repositories.log_repo.list_for_job(job.job_id) == [log]


def test_output_without_markers_fails_at_parser(db_session, repositories, settings):
    prose = "Sure! Add a login button next to the search button."
    services = _services(db_session, repositories, settings, MockBackend([prose]))
    job = repositories.job_repo.submit(LOGIN_REQUEST)

    services.job_processor.tick()

    failed = repositories.job_repo.get_job(job.job_id)
    assert failed.status is JobStatus.FAILED
    assert failed.artifact is None
    assert failed.error_stage == "output_parser"
    assert failed.error_message.startswith("ParseError: ")

    log = repositories.log_repo.get(failed.log_id)
    assert log.error_type == "ParseError"
    assert log.stage == "output_parser"
    assert log.raw_output == prose


def test_backend_failure_fails_job(db_session, repositories, settings):
    services = _services(db_session, repositories, settings, MockBackend.failing("model offline"))
    job = repositories.job_repo.submit(LOGIN_REQUEST)

    services.job_processor.tick()

    failed = repositories.job_repo.get_job(job.job_id)
    assert failed.status is JobStatus.FAILED
    assert failed.error_stage == "backend"
    assert "model offline" in failed.error_message


def test_failed_jobs_are_not_retried(db_session, repositories, settings):
    backend = MockBackend.fail_then_succeed()
    services = _services(db_session, repositories, settings, backend)
    first = repositories.job_repo.submit(LOGIN_REQUEST)
    second = repositories.job_repo.submit(LOGIN_REQUEST)

    ticks = services.job_processor.run(max_ticks=3)

    assert ticks == 3
    assert backend.call_count == 2
    assert repositories.job_repo.get_job(first.job_id).status is JobStatus.FAILED
    assert repositories.job_repo.get_job(second.job_id).status is JobStatus.COMPLETED
    stats = repositories.job_repo.queue_stats()
    assert (stats.queued, stats.processing, stats.completed, stats.failed) == (0, 0, 1, 1)


def test_mistyped_payload_fails_instead_of_sticking(db_session, repositories, settings):
    backend = MockBackend()
    services = _services(db_session, repositories, settings, backend)
    job = repositories.job_repo.submit(LOGIN_REQUEST)
    db_session.execute(
        update(GenerationJobEntity)
        .where(GenerationJobEntity.job_id == job.job_id)
        .values(request_payload=json.dumps({"product": 5, "intent": "add login button"}))
    )
    db_session.commit()

    assert services.job_processor.tick() is PollState.DRAIN

    failed = repositories.job_repo.get_job(job.job_id)
    assert failed.status is JobStatus.FAILED
    assert failed.error_stage == "payload"
    assert backend.call_count == 0


def test_schema_job_completes(db_session, repositories, settings):
    services = _services(db_session, repositories, settings, MockBackend())
    schema = {
        "table": "member",
        "columns": [
            {"name": "id", "column_type": "INTEGER", "pk": True},
            {"name": "name", "column_type": "VARCHAR(100)", "nullable": False},
        ],
    }
    request = GenerationRequest(
        product="member-portal", input_type="db-schema", intent=json.dumps(schema)
    )
    job = repositories.job_repo.submit(request)

    services.job_processor.tick()

    assert repositories.job_repo.get_job(job.job_id).status is JobStatus.COMPLETED


def test_unreadable_schema_fails_at_normalizer(db_session, repositories, settings):
    backend = MockBackend()
    services = _services(db_session, repositories, settings, backend)
    request = GenerationRequest(
        product="member-portal", input_type="db-schema", intent="member table please"
    )
    job = repositories.job_repo.submit(request)

    services.job_processor.tick()

    failed = repositories.job_repo.get_job(job.job_id)
    assert failed.status is JobStatus.FAILED
    assert failed.error_stage == "input_normalizer"
    assert failed.error_message.startswith("InvalidInput: ")
    assert backend.call_count == 0
