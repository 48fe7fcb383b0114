"""Builds the symbol table and resolves every reference in the artifact."""

import logging
import re
from collections import defaultdict
from typing import Dict, List, Set

from uigen.application.services.exceptions import UnresolvedSymbol
from uigen.domain.artifacts import (
    DATASET_TAGS,
    CanonicalArtifact,
    Component,
    Declaration,
    LinkedArtifact,
    SymbolTable,
)
from uigen.infrastructure.validation.passes.base import ValidationPass
from uigen.infrastructure.validation.script import dataset_lookups, find_calls, mentioned

logger = logging.getLogger(__name__)

EVENTFUNC_RE = re.compile(r"^eventfunc:([A-Za-z_$][\w$]*)\(")
BINDING_ATTRIBUTES = ("link_data", "dataset")


def component_site(component: Component) -> str:
    return component.node_id or f"<{component.tag}>"


def binding_target(value: str) -> str:
    """``ds_list:COLUMN`` binds to the dataset ``ds_list``."""
    return value.split(":", 1)[0].strip()


class SymbolLinker(ValidationPass):
    """CanonicalArtifact -> LinkedArtifact.

    Declares components with ids, datasets and script functions, then records
    who refers to each of them:

    - event handler attributes (``on_*="eventfunc:fn_x()"``)
    - ``link_data`` / ``dataset`` bindings
    - ``getDataset("...")`` lookups in the script
    - calls between script functions (``this.fn_x()`` or ``fn_x()``)
    - component ids used directly in the script
    """

    name = "symbol_linker"

    def run(self, artifact: CanonicalArtifact) -> LinkedArtifact:
        declarations: Dict[str, Declaration] = {}
        references: Dict[str, Set[str]] = defaultdict(set)
        warnings: List[str] = list(artifact.warnings)

        def declare(name: str, kind: str, site: str) -> None:
            if name in declarations:
                if declarations[name].kind != kind:
                    warnings.append(
                        f"Symbol '{name}' declared as both {declarations[name].kind} and {kind}"
                    )
                return
            declarations[name] = Declaration(name=name, kind=kind, site=site)

        components = list(artifact.components())
        for component in components:
            if component.node_id:
                kind = "dataset" if component.tag in DATASET_TAGS else "component"
                declare(component.node_id, kind, f"xml:<{component.tag}>")
        for fn in artifact.functions:
            declare(fn.name, "function", f"js:{fn.name}")

        unresolved: Set[str] = set()

        for component in components:
            site = component_site(component)
            for attr, value in component.attributes:
                if attr.startswith("on_"):
                    match = EVENTFUNC_RE.match(value)
                    if match is None:
                        unresolved.add(f"{site}.{attr}={value}")
                        continue
                    references[match.group(1)].add(site)
                elif attr in BINDING_ATTRIBUTES and value:
                    references[binding_target(value)].add(site)

        function_names = {fn.name for fn in artifact.functions}
        component_ids = {c.node_id for c in components if c.node_id}
        for fn in artifact.functions:
            for call in find_calls(fn.body):
                if call.receiver == "this" and call.name.startswith("fn_"):
                    references[call.name].add(fn.name)
                elif call.receiver in (None, "this") and call.name in function_names:
                    references[call.name].add(fn.name)
            for dataset in dataset_lookups(fn.body):
                references[dataset].add(fn.name)
            for name in mentioned(fn.body, (function_names | component_ids) - {fn.name}):
                references[name].add(fn.name)

        symbol_table = SymbolTable(declarations, references)
        unresolved.update(symbol_table.unresolved())
        if unresolved:
            logger.debug(f"Unresolved symbols: {sorted(unresolved)}")
            raise UnresolvedSymbol(unresolved)

        logger.debug(f"Linked {symbol_table!r}")
        return LinkedArtifact(
            roots=artifact.roots,
            functions=artifact.functions,
            symbol_table=symbol_table,
            warnings=tuple(warnings),
        )
