"""Normalizes the parsed artifact into one canonical form.

Running the canonicalizer on its own output changes nothing.
"""

import logging
import re
import textwrap
from typing import Dict, List, Tuple

from uigen.domain.artifacts import CanonicalArtifact, Component, ParsedArtifact, ScriptFunction
from uigen.infrastructure.validation.passes.base import ValidationPass
from uigen.infrastructure.validation.script import mask

logger = logging.getLogger(__name__)

HTML_EVENT_RE = re.compile(r"^on([a-z]+)$")
HANDLER_RE = re.compile(r"^(?:eventfunc\s*:\s*)?([A-Za-z_$][\w$]*)\s*(?:\((.*)\))?\s*;?$", re.DOTALL)

FONT_FIXES = {
    "맑은 고딭": "맑은 고딕",
    "맑은고딭": "맑은 고딕",
}


def canonical_attribute_name(name: str) -> str:
    name = name.strip().lower()
    match = HTML_EVENT_RE.match(name)
    if match:
        return f"on_{match.group(1)}"
    return name


def canonical_args(args: str) -> str:
    """Re-join handler arguments as ``a, b``; commas in strings or brackets stay put."""
    masked = mask(args, strings=True)
    parts, start, depth = [], 0, 0
    for i, ch in enumerate(masked):
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append(args[start:i])
            start = i + 1
    parts.append(args[start:])
    return ", ".join(p.strip() for p in parts if p.strip())


def canonical_handler(value: str) -> str:
    """``fn_x``, ``fn_x()`` and ``eventfunc:fn_x`` all become ``eventfunc:fn_x()``."""
    match = HANDLER_RE.match(value)
    if not match:
        return value
    return f"eventfunc:{match.group(1)}({canonical_args(match.group(2) or '')})"


def canonical_value(name: str, value: str) -> str:
    value = value.strip()
    for wrong, right in FONT_FIXES.items():
        value = value.replace(wrong, right)
    if name.startswith("on_"):
        value = canonical_handler(value)
    return value


def canonical_body(body: str) -> str:
    lines = [line.rstrip() for line in textwrap.dedent(body.expandtabs(4)).splitlines()]
    text = re.sub(r"\n{3,}", "\n\n", "\n".join(lines)).strip("\n")
    return textwrap.indent(text, "    ")


class Canonicalizer(ValidationPass):
    """ParsedArtifact -> CanonicalArtifact."""

    name = "canonicalizer"

    def run(self, artifact: ParsedArtifact) -> CanonicalArtifact:
        fixes: List[str] = []
        roots = tuple(self._component(c, fixes) for c in artifact.roots)
        functions = self._functions(artifact.functions, fixes)

        warnings = list(artifact.warnings)
        for fix in sorted(set(fixes)):
            warnings.append(f"Canonicalized: {fix}")
        logger.debug(f"Canonicalizer applied {len(set(fixes))} kind(s) of fix")
        return CanonicalArtifact(roots=roots, functions=functions, warnings=tuple(warnings))

    def _component(self, component: Component, fixes: List[str]) -> Component:
        tag = component.tag.strip().lower()
        if tag != component.tag:
            fixes.append("lower-cased tag names")

        attributes: Dict[str, str] = {}
        for raw_name, raw_value in component.attributes:
            name = canonical_attribute_name(raw_name)
            value = canonical_value(name, raw_value)
            if name != raw_name.strip().lower():
                fixes.append(f"renamed event attribute {raw_name.strip().lower()} to {name}")
            elif name != raw_name:
                fixes.append("lower-cased attribute names")
            if name.startswith("on_") and value != raw_value.strip():
                fixes.append("rewrote event handlers to eventfunc form")
            attributes.setdefault(name, value)

        return Component(
            tag=tag,
            attributes=tuple(sorted(attributes.items())),
            children=tuple(self._component(c, fixes) for c in component.children),
            text=component.text.strip(),
        )

    def _functions(
        self, functions: Tuple[ScriptFunction, ...], fixes: List[str]
    ) -> Tuple[ScriptFunction, ...]:
        unique: Dict[str, ScriptFunction] = {}
        for fn in functions:
            if fn.name in unique:
                fixes.append(f"dropped duplicate function {fn.name}")
                continue
            unique[fn.name] = ScriptFunction(
                name=fn.name.strip(),
                params=tuple(p.strip() for p in fn.params if p.strip()),
                body=canonical_body(fn.body),
                style=fn.style,
            )
        return tuple(unique[name] for name in sorted(unique))
