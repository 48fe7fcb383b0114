"""Rejects or strips components and script calls that are not on the allow-list."""

import logging
from typing import FrozenSet, List, Optional, Tuple

from uigen.application.services.exceptions import AllowlistViolation, ConfigurationError
from uigen.domain.artifacts import Component, FilteredArtifact, LinkedArtifact, ScriptFunction
from uigen.infrastructure.validation.allowlist import Allowlist
from uigen.infrastructure.validation.passes.base import ValidationPass
from uigen.infrastructure.validation.script import balanced, find_calls, statement_span

logger = logging.getLogger(__name__)

MODES = ("reject", "strip")


class ApiAllowlistFilter(ValidationPass):
    """LinkedArtifact -> FilteredArtifact.

    In ``reject`` mode any violation raises ``AllowlistViolation``. In
    ``strip`` mode violating components (with their subtree) and the script
    statements holding violating calls are removed. The result is checked
    again and must still have balanced brackets.
    """

    name = "api_allowlist"

    def __init__(self, allowlist: Allowlist, mode: str = "reject"):
        if mode not in MODES:
            raise ConfigurationError(f"Unknown allow-list mode '{mode}'. Must be one of: {', '.join(MODES)}")
        self.allowlist = allowlist
        self.mode = mode

    def run(self, artifact: LinkedArtifact) -> FilteredArtifact:
        user_functions = frozenset(fn.name for fn in artifact.functions)
        violations = self.violations(artifact.roots, artifact.functions, user_functions)

        if not violations:
            return FilteredArtifact(
                roots=artifact.roots,
                functions=artifact.functions,
                symbol_table=artifact.symbol_table,
                warnings=artifact.warnings,
            )

        if self.mode == "reject":
            raise AllowlistViolation(violations)

        stripped: List[str] = []
        roots = tuple(
            c for c in (self._strip_component(root, stripped) for root in artifact.roots) if c
        )
        functions = tuple(self._strip_function(fn, user_functions, stripped) for fn in artifact.functions)

        remaining = self.violations(roots, functions, user_functions)
        if remaining:
            raise AllowlistViolation(remaining)

        logger.info(f"Allow-list stripped {len(stripped)} item(s): {', '.join(stripped)}")
        return FilteredArtifact(
            roots=roots,
            functions=functions,
            symbol_table=artifact.symbol_table,
            stripped=tuple(stripped),
            warnings=artifact.warnings + tuple(f"Stripped {item}" for item in stripped),
        )

    def violations(
        self,
        roots: Tuple[Component, ...],
        functions: Tuple[ScriptFunction, ...],
        user_functions: FrozenSet[str],
    ) -> List[str]:
        found: List[str] = []
        for root in roots:
            for component in root.walk():
                if not self.allowlist.allows_component(component.tag):
                    found.append(f"component <{component.tag}>")
        for fn in functions:
            for call in find_calls(fn.body):
                if not self._call_allowed(call.name, call.receiver, user_functions):
                    found.append(f"{call.qualified}() in {fn.name}")
        return sorted(set(found))

    def _call_allowed(
        self, name: str, receiver: Optional[str], user_functions: FrozenSet[str]
    ) -> bool:
        if receiver in (None, "this") and name in user_functions:
            return True
        return self.allowlist.allows_call(name, receiver)

    def _strip_component(self, component: Component, stripped: List[str]) -> Optional[Component]:
        if not self.allowlist.allows_component(component.tag):
            label = f"#{component.node_id}" if component.node_id else ""
            stripped.append(f"component <{component.tag}>{label}")
            return None
        children = tuple(
            c for c in (self._strip_component(child, stripped) for child in component.children) if c
        )
        if children == component.children:
            return component
        return component.with_children(children)

    def _strip_function(
        self, fn: ScriptFunction, user_functions: FrozenSet[str], stripped: List[str]
    ) -> ScriptFunction:
        bad = [
            call
            for call in find_calls(fn.body)
            if not self._call_allowed(call.name, call.receiver, user_functions)
        ]
        if not bad:
            return fn

        spans: List[Tuple[int, int]] = []
        for call in bad:
            stripped.append(f"{call.qualified}() in {fn.name}")
            spans.append(self._line_span(fn.body, *statement_span(fn.body, call.offset)))

        body = fn.body
        for start, end in reversed(merge_spans(spans)):
            body = body[:start] + body[end:]

        if not balanced(body):
            raise AllowlistViolation(
                f"{call.qualified}() in {fn.name} (cannot be stripped cleanly)" for call in bad
            )
        return ScriptFunction(name=fn.name, params=fn.params, body=body, style=fn.style)

    @staticmethod
    def _line_span(body: str, start: int, end: int) -> Tuple[int, int]:
        """Widen a span to whole lines when nothing else shares them."""
        line_start = body.rfind("\n", 0, start) + 1
        line_end = body.find("\n", end)
        line_end = len(body) if line_end == -1 else line_end + 1
        if body[line_start:start].strip() or body[end:line_end].strip():
            return start, end
        return line_start, line_end


def merge_spans(spans: List[Tuple[int, int]]) -> List[Tuple[int, int]]:
    merged: List[Tuple[int, int]] = []
    for start, end in sorted(spans):
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(end, merged[-1][1]))
        else:
            merged.append((start, end))
    return merged
