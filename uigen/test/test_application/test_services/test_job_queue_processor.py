import json
from unittest.mock import MagicMock, call

import pytest

from uigen.application.interfaces.ijob_repository import IJobRepository
from uigen.application.services.exceptions import InternalError
from uigen.application.services.generation_service import GenerationResult, GenerationService
from uigen.application.services.job_queue_processor import JobQueueProcessor, PollState
from uigen.config import QueueSettings
from uigen.domain.models import GenerationJob, JobStatus
from uigen.test.fixtures import LOGIN_REQUEST


def _job(payload=None):
    return GenerationJob(
        id=1,
        job_id="job-1",
        request_payload=LOGIN_REQUEST.to_payload() if payload is None else payload,
        status=JobStatus.QUEUED,
    )


@pytest.fixture
def jobs():
    repository = MagicMock(spec=IJobRepository)
    repository.next_queued.return_value = _job()
    repository.claim.return_value = True
    return repository


@pytest.fixture
def generation_service():
    return MagicMock(spec=GenerationService)


@pytest.fixture
def processor(jobs, generation_service):
    return JobQueueProcessor(
        jobs,
        generation_service,
        QueueSettings(idle_interval_seconds=2.0, error_backoff_seconds=5.0),
        sleep=MagicMock(),
    )


def test_empty_queue_is_idle(processor, jobs):
    jobs.next_queued.return_value = None
    assert processor.tick() is PollState.IDLE
    jobs.claim.assert_not_called()


def test_lost_claim_skips_job(processor, jobs, generation_service):
    jobs.claim.return_value = False
    assert processor.tick() is PollState.DRAIN
    generation_service.generate.assert_not_called()


def test_success_marks_job_completed(processor, jobs, generation_service):
    artifact = MagicMock()
    artifact.render.return_value = "--- XML ---\n<screen/>"
    generation_service.generate.return_value = GenerationResult(
        status="completed", elapsed_ms=3.2, log_id=5, artifact=artifact
    )

    assert processor.tick() is PollState.DRAIN

    generation_service.generate.assert_called_once_with(LOGIN_REQUEST, job_id="job-1")
    jobs.mark_completed.assert_called_once_with("job-1", "--- XML ---\n<screen/>", 5)
    jobs.mark_failed.assert_not_called()


def test_failure_marks_job_failed(processor, jobs, generation_service):
    generation_service.generate.return_value = GenerationResult(
        status="failed",
        elapsed_ms=1.0,
        log_id=6,
        stage="output_parser",
        error_type="ParseError",
        message="no markers",
    )

    assert processor.tick() is PollState.DRAIN
    jobs.mark_failed.assert_called_once_with("job-1", "output_parser", "ParseError: no markers", 6)


def test_invalid_payload_fails_job(processor, jobs, generation_service):
    jobs.next_queued.return_value = _job(payload="{broken")

    assert processor.tick() is PollState.DRAIN

    generation_service.generate.assert_not_called()
    job_id, stage, message = jobs.mark_failed.call_args[0]
    assert (job_id, stage) == ("job-1", "payload")
    assert message.startswith("Invalid request payload")


def test_unexpected_error_fails_job_and_raises(processor, jobs, generation_service):
    generation_service.generate.side_effect = RuntimeError("db gone")

    with pytest.raises(InternalError):
        processor.process_next()
    jobs.mark_failed.assert_called_once_with("job-1", "internal", "db gone")


def test_unexpected_error_backs_off(processor, generation_service):
    generation_service.generate.side_effect = RuntimeError("db gone")
    assert processor.tick() is PollState.ERROR


def test_repository_error_backs_off(processor, jobs):
    jobs.next_queued.side_effect = RuntimeError("connection refused")
    assert processor.tick() is PollState.ERROR


def test_delays(processor):
    assert processor.delay_for(PollState.DRAIN) == 0.0
    assert processor.delay_for(PollState.IDLE) == 2.0
    assert processor.delay_for(PollState.ERROR) == 5.0


def test_run_sleeps_between_ticks(processor):
    processor.tick = MagicMock(side_effect=[PollState.IDLE, PollState.ERROR, PollState.DRAIN])

    assert processor.run(max_ticks=3) == 3
    assert processor.sleep.call_args_list == [call(2.0), call(5.0)]


def test_stop_ends_the_loop(processor):
    processor.tick = MagicMock(return_value=PollState.IDLE)
    processor.sleep.side_effect = lambda seconds: processor.stop()

    assert processor.run() == 1


@pytest.mark.parametrize(
    "payload",
    [
        json.dumps({"product": 5, "intent": "add login button"}),
        json.dumps({"product": "crm", "intent": ["add", "login"]}),
        json.dumps({"product": "crm", "intent": "x", "template_version": "3"}),
        json.dumps({"product": "crm", "intent": "x", "input_type": "csv"}),
    ],
)
def test_mistyped_payload_fails_job(processor, jobs, generation_service, payload):
    jobs.next_queued.return_value = _job(payload=payload)

    assert processor.tick() is PollState.DRAIN

    generation_service.generate.assert_not_called()
    job_id, stage, message = jobs.mark_failed.call_args[0]
    assert (job_id, stage) == ("job-1", "payload")
    assert message.startswith("Invalid request payload")
