"""The ordered validation pipeline that turns raw model text into a trusted artifact."""

import logging
from typing import Any, List, Optional

from uigen.application.interfaces.ivalidation_pipeline import IValidationPipeline
from uigen.application.services.exceptions import PipelineError
from uigen.config import PipelineSettings
from uigen.domain.artifacts import ValidatedArtifact
from uigen.infrastructure.validation.allowlist import Allowlist
from uigen.infrastructure.validation.passes.api_allowlist import ApiAllowlistFilter
from uigen.infrastructure.validation.passes.base import ValidationPass
from uigen.infrastructure.validation.passes.canonicalizer import Canonicalizer
from uigen.infrastructure.validation.passes.graph_validator import GraphValidator
from uigen.infrastructure.validation.passes.minimalism import MinimalismPass
from uigen.infrastructure.validation.passes.output_parser import OutputParser
from uigen.infrastructure.validation.passes.symbol_linker import SymbolLinker

logger = logging.getLogger(__name__)


class ValidationPipeline(IValidationPipeline):
    """Runs the passes in their fixed order and stops at the first failure.

    The pipeline:
    - parses the raw output into components and script functions
    - canonicalizes names, handlers and whitespace
    - links every reference to a declaration
    - filters components and calls through the allow-list
    - validates the structure of the graph
    - removes unreferenced functions and renders the result

    No partial artifact is returned when a pass fails.
    """

    def __init__(self, allowlist: Optional[Allowlist] = None, allowlist_mode: str = "reject"):
        self.allowlist = allowlist or Allowlist.load()
        self.passes: List[ValidationPass] = [
            OutputParser(),
            Canonicalizer(),
            SymbolLinker(),
            ApiAllowlistFilter(self.allowlist, allowlist_mode),
            GraphValidator(self.allowlist),
            MinimalismPass(),
        ]

    @classmethod
    def from_settings(cls, settings: PipelineSettings) -> "ValidationPipeline":
        return cls(Allowlist.load(settings.allowlist_file), settings.allowlist_mode)

    def run(self, raw_output: str) -> ValidatedArtifact:
        """Validate raw model output.

        Args:
            raw_output: Untrusted text returned by the backend

        Returns:
            The validated artifact

        Raises:
            PipelineError: The first rejection, tagged with the failing pass
        """
        artifact: Any = raw_output
        for validation_pass in self.passes:
            logger.debug(f"Running pass {validation_pass.name}")
            try:
                artifact = validation_pass.run(artifact)
            except PipelineError as e:
                e.stage = validation_pass.name
                logger.warning(f"Pass {validation_pass.name} rejected output: {e.message}")
                raise
            logger.debug(f"Finished pass {validation_pass.name}")
        return artifact
