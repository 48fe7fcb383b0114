"""In-process GGUF inference with llama-cpp-python.

The model is loaded on first use and kept for the life of the backend.
Install the ``local`` extra to enable it.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Any, Optional

from uigen.application.interfaces.illm_backend import ILLMBackend
from uigen.application.services.exceptions import BackendFailure
from uigen.config import BackendSettings

logger = logging.getLogger(__name__)


class LocalLlamaCppBackend(ILLMBackend):
    PROVIDER = "local-llama-cpp"
    DEFAULT_TIMEOUT = 120.0

    def __init__(self, settings: BackendSettings):
        self.model_path = Path(settings.model_path)
        self.context_size = settings.context_size
        self.threads = settings.threads
        self.max_tokens = settings.max_tokens
        self.temperature = settings.temperature
        self.timeout = settings.timeout_seconds or self.DEFAULT_TIMEOUT
        self._llm: Optional[Any] = None
        self._load_lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="llama")
        self._pending: Optional[Future] = None

    def name(self) -> str:
        return self.PROVIDER

    def model(self) -> str:
        return self.model_path.name

    def _load(self) -> Any:
        with self._load_lock:
            if self._llm is not None:
                return self._llm
            if not self.model_path.is_file():
                raise BackendFailure(self.PROVIDER, f"Model file not found: {self.model_path}")
            try:
                from llama_cpp import Llama
            except ImportError as e:
                raise BackendFailure(
                    self.PROVIDER,
                    "llama-cpp-python is not installed (pip install 'uigen[local]')",
                ) from e

            logger.info(
                f"Loading GGUF model {self.model_path} "
                f"(n_ctx={self.context_size}, n_threads={self.threads})"
            )
            try:
                self._llm = Llama(
                    model_path=str(self.model_path),
                    n_ctx=self.context_size,
                    n_threads=self.threads,
                    verbose=False,
                )
            except (ValueError, RuntimeError) as e:
                raise BackendFailure(self.PROVIDER, f"Could not load model: {e}") from e
            return self._llm

    def _complete(self, prompt: str) -> Any:
        llm = self._load()
        return llm(prompt, max_tokens=self.max_tokens, temperature=self.temperature)

    def generate(self, prompt: str) -> str:
        # A timed-out inference cannot be interrupted and still owns the worker
        if self._pending is not None and not self._pending.done():
            raise BackendFailure(self.PROVIDER, "A previous inference is still running")
        future = self._pending = self._executor.submit(self._complete, prompt)
        try:
            result = future.result(timeout=self.timeout)
        except FutureTimeoutError as e:
            raise BackendFailure(
                self.PROVIDER, f"Inference timed out after {self.timeout}s"
            ) from e
        except BackendFailure:
            raise
        except (ValueError, RuntimeError) as e:
            raise BackendFailure(self.PROVIDER, f"Inference failed: {e}") from e

        try:
            text = result["choices"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise BackendFailure(self.PROVIDER, "Completion has no choices[0].text") from e
        if not isinstance(text, str):
            raise BackendFailure(self.PROVIDER, "Completion text is not a string")
        return text

    def health_check(self) -> None:
        if not self.model_path.is_file():
            raise BackendFailure(self.PROVIDER, f"Model file not found: {self.model_path}")

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._llm = None
