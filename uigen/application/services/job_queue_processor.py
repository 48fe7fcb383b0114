"""Polling processor that drains the generation job queue one job at a time."""

import logging
import time
from enum import Enum
from typing import Callable, Optional

from uigen.application.interfaces.ijob_repository import IJobRepository
from uigen.application.services.exceptions import InternalError
from uigen.application.services.generation_service import GenerationService
from uigen.config import QueueSettings
from uigen.domain.models import GenerationRequest

logger = logging.getLogger(__name__)


class PollState(Enum):
    """What the loop does after a tick.

    - DRAIN: a job was handled, poll again immediately
    - IDLE: the queue was empty, wait the idle interval
    - ERROR: an infrastructure error occurred, wait the error back-off
    """

    DRAIN = "drain"
    IDLE = "idle"
    ERROR = "error"


class JobQueueProcessor:
    """Claims queued jobs and runs them through the generation service.

    A job is claimed with a conditional update, so when several processes
    poll the same queue each job is handled by exactly one of them. Jobs are
    attempted once; failed jobs stay failed.
    """

    def __init__(
        self,
        job_repository: IJobRepository,
        generation_service: GenerationService,
        settings: Optional[QueueSettings] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.jobs = job_repository
        self.generation_service = generation_service
        self.settings = settings or QueueSettings()
        self.sleep = sleep
        self._stopped = False

    def process_next(self) -> bool:
        """Handle the oldest queued job.

        Returns:
            True if a job was handled or its claim was lost to another
            processor, False if the queue is empty

        Raises:
            InternalError: If processing failed unexpectedly after the claim
        """
        job = self.jobs.next_queued()
        if job is None:
            return False

        if not self.jobs.claim(job.job_id):
            logger.debug(f"Job {job.job_id} was claimed by another processor")
            return True
        logger.info(f"Processing job {job.job_id}")

        try:
            request = GenerationRequest.from_payload(job.request_payload)
        except (TypeError, ValueError) as e:
            logger.error(f"Job {job.job_id} has an invalid payload: {e}")
            self.jobs.mark_failed(job.job_id, "payload", f"Invalid request payload: {e}")
            return True

        try:
            result = self.generation_service.generate(request, job_id=job.job_id)
        except Exception as e:
            self.jobs.mark_failed(job.job_id, InternalError.stage, str(e))
            if isinstance(e, InternalError):
                raise
            raise InternalError(f"Job {job.job_id} failed unexpectedly: {e}") from e

        if result.succeeded:
            self.jobs.mark_completed(job.job_id, result.artifact.render(), result.log_id)
            logger.info(f"Job {job.job_id} completed in {result.elapsed_ms:.1f} ms")
        else:
            self.jobs.mark_failed(
                job.job_id,
                result.stage,
                f"{result.error_type}: {result.message}",
                result.log_id,
            )
            logger.info(f"Job {job.job_id} failed at {result.stage}")
        return True

    def tick(self) -> PollState:
        """Run one poll and return the state that decides the next delay."""
        try:
            handled = self.process_next()
        except Exception as e:
            logger.error(f"InternalError in job queue processor: {e}")
            return PollState.ERROR
        return PollState.DRAIN if handled else PollState.IDLE

    def delay_for(self, state: PollState) -> float:
        if state is PollState.IDLE:
            return self.settings.idle_interval_seconds
        if state is PollState.ERROR:
            return self.settings.error_backoff_seconds
        return 0.0

    def run(self, max_ticks: Optional[int] = None) -> int:
        """Poll until stopped, or for at most ``max_ticks`` ticks.

        Returns:
            The number of ticks run
        """
        self._stopped = False
        ticks = 0
        logger.info("Job queue processor started")
        while not self._stopped and (max_ticks is None or ticks < max_ticks):
            state = self.tick()
            ticks += 1
            delay = self.delay_for(state)
            if delay > 0 and not self._stopped and (max_ticks is None or ticks < max_ticks):
                self.sleep(delay)
        logger.info(f"Job queue processor stopped after {ticks} tick(s)")
        return ticks

    def stop(self) -> None:
        self._stopped = True
