"""
uigen: generates xFrame5 screens (XML layout plus JavaScript handlers) from
natural-language intents through a pluggable LLM backend and a validation
pipeline.
"""

from uigen.config import Settings, get_settings
from uigen.domain.models import GenerationRequest, JobStatus

__version__ = "0.1.0"

__all__ = [
    "GenerationRequest",
    "JobStatus",
    "Settings",
    "get_settings",
]
