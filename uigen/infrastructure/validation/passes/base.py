"""Base class for validation pipeline passes."""

from abc import ABC, abstractmethod
from typing import Any


class ValidationPass(ABC):
    """One step of the validation pipeline.

    A pass consumes the artifact produced by the previous pass and returns a
    new artifact of the next type, or raises a ``PipelineError`` subclass.
    Passes never mutate their input.
    """

    name = ""

    @abstractmethod
    def run(self, artifact: Any) -> Any:
        """Run the pass.

        Args:
            artifact: Output of the previous pass

        Returns:
            The artifact for the next pass

        Raises:
            PipelineError: If the artifact is rejected
        """
        pass
