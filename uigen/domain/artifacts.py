"""
Artifact types flowing through the validation pipeline.

Each pass consumes one artifact type and produces the next:

    str -> ParsedArtifact -> CanonicalArtifact -> LinkedArtifact
        -> FilteredArtifact -> ValidatedArtifact

All of them are frozen. A pass that changes something builds a new artifact.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterator, Mapping, Optional, Set, Tuple

Attribute = Tuple[str, str]

DATASET_TAGS = frozenset({"dataset", "xdataset", "linkdataset", "xlinkdataset"})


@dataclass(frozen=True)
class Component:
    """One XML element of the screen layout."""

    tag: str
    attributes: Tuple[Attribute, ...] = ()
    children: Tuple["Component", ...] = ()
    text: str = ""

    @property
    def node_id(self) -> Optional[str]:
        return self.get("id")

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        for key, value in self.attributes:
            if key == name:
                return value
        return default

    def walk(self) -> Iterator["Component"]:
        """Yield this component and all of its descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def with_children(self, children: Tuple["Component", ...]) -> "Component":
        return replace(self, children=children)


@dataclass(frozen=True)
class ScriptFunction:
    """One function declared in the handler script.

    ``style`` records the declaration form so the function can be rendered
    back the way it was written: ``method`` for ``this.fn = function() {}``,
    ``declaration`` for ``function fn() {}`` and ``variable`` for
    ``var fn = function() {}``.
    """

    name: str
    params: Tuple[str, ...] = ()
    body: str = ""
    style: str = "method"

    def render(self) -> str:
        params = ", ".join(self.params)
        body = f"\n{self.body}\n" if self.body else ""
        if self.style == "declaration":
            return f"function {self.name}({params}) {{{body}}}"
        if self.style == "variable":
            return f"var {self.name} = function({params}) {{{body}}};"
        return f"this.{self.name} = function({params}) {{{body}}};"


def walk_all(roots: Tuple[Component, ...]) -> Iterator[Component]:
    for root in roots:
        yield from root.walk()


@dataclass(frozen=True)
class Declaration:
    """Where and as what a symbol was declared."""

    name: str
    kind: str
    site: str


class SymbolTable:
    """Declarations and reference sites of every symbol in one artifact.

    Built once by the symbol linker and shared by reference with every later
    artifact. It is read-only after construction.
    """

    def __init__(
        self,
        declarations: Dict[str, Declaration],
        references: Dict[str, Set[str]],
    ):
        self._declarations = MappingProxyType(dict(declarations))
        self._references = MappingProxyType(
            {name: frozenset(sites) for name, sites in references.items()}
        )

    @property
    def declarations(self) -> Mapping[str, Declaration]:
        return self._declarations

    @property
    def references(self) -> Mapping[str, FrozenSet[str]]:
        return self._references

    def is_declared(self, name: str) -> bool:
        return name in self._declarations

    def referrers(self, name: str) -> FrozenSet[str]:
        return self._references.get(name, frozenset())

    def is_referenced(self, name: str) -> bool:
        """True when anything other than the symbol itself refers to it."""
        return any(site != name for site in self.referrers(name))

    def unresolved(self) -> Tuple[str, ...]:
        return tuple(
            sorted(name for name in self._references if name not in self._declarations)
        )

    def __repr__(self) -> str:
        return (
            f"SymbolTable(declarations={len(self._declarations)}, "
            f"references={len(self._references)})"
        )


@dataclass(frozen=True)
class ParsedArtifact:
    raw_output: str
    xml_source: str
    script_source: str
    roots: Tuple[Component, ...]
    functions: Tuple[ScriptFunction, ...]
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CanonicalArtifact:
    roots: Tuple[Component, ...]
    functions: Tuple[ScriptFunction, ...]
    warnings: Tuple[str, ...] = ()

    def components(self) -> Iterator[Component]:
        return walk_all(self.roots)


@dataclass(frozen=True)
class LinkedArtifact:
    roots: Tuple[Component, ...]
    functions: Tuple[ScriptFunction, ...]
    symbol_table: SymbolTable = field(compare=False)
    warnings: Tuple[str, ...] = ()

    def components(self) -> Iterator[Component]:
        return walk_all(self.roots)


@dataclass(frozen=True)
class FilteredArtifact:
    roots: Tuple[Component, ...]
    functions: Tuple[ScriptFunction, ...]
    symbol_table: SymbolTable = field(compare=False)
    stripped: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    def components(self) -> Iterator[Component]:
        return walk_all(self.roots)


@dataclass(frozen=True)
class ValidatedArtifact:
    """The trusted output of the pipeline."""

    roots: Tuple[Component, ...]
    functions: Tuple[ScriptFunction, ...]
    symbol_table: SymbolTable = field(compare=False)
    xml: str = ""
    javascript: str = ""
    removed: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    def components(self) -> Iterator[Component]:
        return walk_all(self.roots)

    def find(self, node_id: str) -> Optional[Component]:
        for component in self.components():
            if component.node_id == node_id:
                return component
        return None

    def summary(self) -> Dict[str, object]:
        """Compact description stored on the generation log."""
        components = list(self.components())
        return {
            "root": self.roots[0].tag if self.roots else None,
            "components": len(components),
            "datasets": sorted(
                c.node_id for c in components if c.tag in DATASET_TAGS and c.node_id
            ),
            "functions": [f.name for f in self.functions],
            "removed": list(self.removed),
        }

    def render(self) -> str:
        """The stored artifact text, in the same layout the model is asked for."""
        return f"--- XML ---\n{self.xml}\n\n--- JS ---\n{self.javascript}"
