"""Interface for generation job persistence."""

from abc import ABC, abstractmethod
from typing import Optional

from uigen.domain.models import GenerationJob, GenerationRequest, QueueStats


class IJobRepository(ABC):
    """Repository interface for queued generation jobs.

    Status transitions go through conditional updates so that two processors
    can never both move the same job out of a state.
    """

    @abstractmethod
    def submit(self, request: GenerationRequest, priority: int = 0) -> GenerationJob:
        """Queue a new job for the request.

        Args:
            request: The generation request to store as payload
            priority: Lower values are processed first

        Returns:
            The queued job
        """
        pass

    @abstractmethod
    def get_job(self, job_id: str) -> Optional[GenerationJob]:
        """Retrieve a job by its public id."""
        pass

    @abstractmethod
    def next_queued(self) -> Optional[GenerationJob]:
        """Return the oldest queued job without claiming it.

        Ordering is priority, then queue time, then insertion order.
        """
        pass

    @abstractmethod
    def claim(self, job_id: str) -> bool:
        """Atomically move a job from queued to processing.

        Returns:
            True if this caller won the claim, False if the job was no longer queued
        """
        pass

    @abstractmethod
    def mark_completed(self, job_id: str, artifact: str, log_id: Optional[int]) -> bool:
        """Move a processing job to completed and store its artifact.

        Returns:
            True if the job was in processing and has been updated
        """
        pass

    @abstractmethod
    def mark_failed(
        self,
        job_id: str,
        stage: str,
        message: str,
        log_id: Optional[int] = None,
    ) -> bool:
        """Move a processing job to failed and store the failing stage.

        Returns:
            True if the job was in processing and has been updated
        """
        pass

    @abstractmethod
    def queue_stats(self) -> QueueStats:
        """Count jobs per status."""
        pass

    @abstractmethod
    def queue_position(self, job_id: str) -> Optional[int]:
        """1-based position of a queued job, None if the job is not queued."""
        pass
