"""Removes unreferenced script functions and renders the final artifact."""

import logging
import xml.etree.ElementTree as ET
from typing import Tuple

from uigen.domain.artifacts import Component, FilteredArtifact, ScriptFunction, ValidatedArtifact
from uigen.infrastructure.validation.passes.base import ValidationPass

logger = logging.getLogger(__name__)

LIFECYCLE_FUNCTIONS = frozenset(
    {
        "on_load",
        "fn_init",
        "on_unload",
        "on_resize",
        "fn_search",
        "fn_save",
        "fn_delete",
        "fn_create",
        "fn_edit",
        "fn_add",
        "fn_remove",
        "fn_refresh",
        "fn_close",
        "fn_onEditorClose",
        "fn_onPopupClose",
    }
)


def to_element(component: Component) -> ET.Element:
    element = ET.Element(component.tag, dict(component.attributes))
    if component.text:
        element.text = component.text
    for child in component.children:
        element.append(to_element(child))
    return element


def render_xml(roots: Tuple[Component, ...]) -> str:
    parts = []
    for root in roots:
        element = to_element(root)
        ET.indent(element, space="  ")
        parts.append(ET.tostring(element, encoding="unicode"))
    return "\n".join(parts)


def render_script(functions: Tuple[ScriptFunction, ...]) -> str:
    return "\n\n".join(fn.render() for fn in functions)


class MinimalismPass(ValidationPass):
    """FilteredArtifact -> ValidatedArtifact."""

    name = "minimalism"

    def run(self, artifact: FilteredArtifact) -> ValidatedArtifact:
        table = artifact.symbol_table
        kept = []
        removed = []
        for fn in artifact.functions:
            if fn.name in LIFECYCLE_FUNCTIONS or table.is_referenced(fn.name):
                kept.append(fn)
            else:
                removed.append(fn.name)

        if removed:
            logger.info(f"Removed unreferenced function(s): {', '.join(removed)}")

        functions = tuple(kept)
        return ValidatedArtifact(
            roots=artifact.roots,
            functions=functions,
            symbol_table=table,
            xml=render_xml(artifact.roots),
            javascript=render_script(functions),
            removed=tuple(removed),
            warnings=artifact.warnings + tuple(f"Removed unreferenced function {name}" for name in removed),
        )
