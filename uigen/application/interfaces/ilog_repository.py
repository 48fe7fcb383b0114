"""Interface for the generation audit log."""

from abc import ABC, abstractmethod
from typing import List, Optional

from uigen.domain.models import GenerationLog


class ILogRepository(ABC):
    """Append-only store of generation logs."""

    @abstractmethod
    def write(self, log: GenerationLog) -> GenerationLog:
        """Persist a log entry.

        Args:
            log: The entry to write

        Returns:
            The stored entry, with its id and creation time set
        """
        pass

    @abstractmethod
    def get(self, log_id: int) -> Optional[GenerationLog]:
        pass

    @abstractmethod
    def list_for_job(self, job_id: str) -> List[GenerationLog]:
        pass
