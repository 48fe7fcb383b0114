"""Structural checks on the filtered component and symbol graph."""

import logging
from collections import Counter
from typing import Dict, List, Optional, Set

from uigen.application.services.exceptions import InvalidGraph
from uigen.domain.artifacts import DATASET_TAGS, FilteredArtifact
from uigen.infrastructure.validation.allowlist import Allowlist
from uigen.infrastructure.validation.passes.base import ValidationPass
from uigen.infrastructure.validation.passes.symbol_linker import (
    BINDING_ATTRIBUTES,
    EVENTFUNC_RE,
    binding_target,
    component_site,
)
from uigen.infrastructure.validation.script import dataset_lookups, find_calls, mentioned

logger = logging.getLogger(__name__)


class GraphValidator(ValidationPass):
    """FilteredArtifact -> FilteredArtifact (unchanged when valid).

    Checks, in order:

    - exactly one root, and its tag is an allowed root tag
    - component ids are unique
    - every binding and handler points at a node that is still present
    - every dataset is bound or looked up somewhere
    - the function call graph has no cycle
    """

    name = "graph_validator"

    def __init__(self, allowlist: Allowlist):
        self.allowlist = allowlist

    def run(self, artifact: FilteredArtifact) -> FilteredArtifact:
        self._check_root(artifact)
        self._check_unique_ids(artifact)
        self._check_dangling(artifact)
        self._check_orphan_datasets(artifact)
        self._check_call_cycles(artifact)
        logger.debug("Graph validation passed")
        return artifact

    def _check_root(self, artifact: FilteredArtifact) -> None:
        if len(artifact.roots) != 1:
            raise InvalidGraph(f"Expected exactly one root component, found {len(artifact.roots)}")
        root = artifact.roots[0]
        if root.tag not in self.allowlist.root_tags:
            raise InvalidGraph(
                f"Root component <{root.tag}> is not one of: {', '.join(sorted(self.allowlist.root_tags))}"
            )

    def _check_unique_ids(self, artifact: FilteredArtifact) -> None:
        counts = Counter(c.node_id for c in artifact.components() if c.node_id)
        duplicates = sorted(node_id for node_id, count in counts.items() if count > 1)
        if duplicates:
            raise InvalidGraph(f"Duplicate component id(s): {', '.join(duplicates)}")

    def _check_dangling(self, artifact: FilteredArtifact) -> None:
        datasets = {c.node_id for c in artifact.components() if c.tag in DATASET_TAGS and c.node_id}
        functions = {fn.name for fn in artifact.functions}
        problems: List[str] = []

        for component in artifact.components():
            site = component_site(component)
            for attr, value in component.attributes:
                if attr.startswith("on_"):
                    match = EVENTFUNC_RE.match(value)
                    if match and match.group(1) not in functions:
                        problems.append(f"{site}.{attr} -> missing function {match.group(1)}")
                elif attr in BINDING_ATTRIBUTES and value:
                    target = binding_target(value)
                    if target not in datasets:
                        problems.append(f"{site}.{attr} -> missing dataset {target}")

        for fn in artifact.functions:
            for dataset in dataset_lookups(fn.body):
                if dataset not in datasets:
                    problems.append(f"{fn.name} -> missing dataset {dataset}")
            for call in find_calls(fn.body):
                if call.receiver == "this" and call.name.startswith("fn_") and call.name not in functions:
                    problems.append(f"{fn.name} -> missing function {call.name}")

        if problems:
            raise InvalidGraph(f"Dangling reference(s): {'; '.join(problems)}")

    def _check_orphan_datasets(self, artifact: FilteredArtifact) -> None:
        datasets = {c.node_id for c in artifact.components() if c.tag in DATASET_TAGS and c.node_id}
        used: Set[str] = set()
        for component in artifact.components():
            for attr, value in component.attributes:
                if attr in BINDING_ATTRIBUTES and value:
                    used.add(binding_target(value))
        for fn in artifact.functions:
            used.update(dataset_lookups(fn.body))
            used.update(mentioned(fn.body, datasets))

        orphans = sorted(datasets - used)
        if orphans:
            raise InvalidGraph(f"Orphan dataset(s) never bound or used: {', '.join(orphans)}")

    def _check_call_cycles(self, artifact: FilteredArtifact) -> None:
        names = {fn.name for fn in artifact.functions}
        graph: Dict[str, List[str]] = {}
        for fn in artifact.functions:
            graph[fn.name] = sorted(
                {
                    call.name
                    for call in find_calls(fn.body)
                    if call.receiver in (None, "this") and call.name in names
                }
            )

        cycle = find_cycle(graph)
        if cycle:
            raise InvalidGraph(f"Function call cycle: {' -> '.join(cycle)}")


def find_cycle(graph: Dict[str, List[str]]) -> Optional[List[str]]:
    """Return one cycle of the directed graph as a path, or None."""
    WHITE, GREY, BLACK = 0, 1, 2
    color = {node: WHITE for node in graph}
    stack: List[str] = []

    def visit(node: str) -> Optional[List[str]]:
        color[node] = GREY
        stack.append(node)
        for nxt in graph.get(node, []):
            if color.get(nxt, BLACK) == GREY:
                return stack[stack.index(nxt) :] + [nxt]
            if color.get(nxt) == WHITE:
                found = visit(nxt)
                if found:
                    return found
        stack.pop()
        color[node] = BLACK
        return None

    for node in sorted(graph):
        if color[node] == WHITE:
            found = visit(node)
            if found:
                return found
    return None
