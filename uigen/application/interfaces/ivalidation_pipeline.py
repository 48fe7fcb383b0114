"""Interface for the validation pipeline."""

from abc import ABC, abstractmethod

from uigen.domain.artifacts import ValidatedArtifact


class IValidationPipeline(ABC):
    """Turns untrusted model output into a validated artifact."""

    @abstractmethod
    def run(self, raw_output: str) -> ValidatedArtifact:
        """Validate raw model output.

        Args:
            raw_output: Text returned by the backend

        Returns:
            The validated artifact

        Raises:
            PipelineError: If a pass rejects the output
        """
        pass
