"""Interface for language model backends."""

from abc import ABC, abstractmethod


class ILLMBackend(ABC):
    """A language model that turns a prompt into raw text.

    Implementations wrap one provider each. Every call is bounded by a
    timeout and either returns the complete text or raises
    ``BackendFailure``. Callers never receive partial text.
    """

    @abstractmethod
    def name(self) -> str:
        """Provider identifier, e.g. ``ollama``."""
        pass

    @abstractmethod
    def model(self) -> str:
        """Name of the model the backend talks to."""
        pass

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Generate a completion for the prompt.

        Args:
            prompt: The full compiled prompt

        Returns:
            The text produced by the model

        Raises:
            BackendFailure: On connection failure, timeout, non-success status,
                an undecodable body or a response without the expected text
        """
        pass

    @abstractmethod
    def health_check(self) -> None:
        """Check the backend with a short timeout.

        Raises:
            BackendFailure: If the backend is not reachable or not ready
        """
        pass

    def close(self) -> None:
        """Release connections or worker threads held by the backend."""
        pass
