"""Run the early passes to build inputs for the later ones."""

from uigen.domain.artifacts import CanonicalArtifact, LinkedArtifact
from uigen.infrastructure.validation.passes.canonicalizer import Canonicalizer
from uigen.infrastructure.validation.passes.output_parser import OutputParser
from uigen.infrastructure.validation.passes.symbol_linker import SymbolLinker


def canonical(raw: str) -> CanonicalArtifact:
    return Canonicalizer().run(OutputParser().run(raw))


def linked(raw: str) -> LinkedArtifact:
    return SymbolLinker().run(canonical(raw))
