"""Splits raw model output into an XML layout and a handler script and parses both."""

import logging
import re
import xml.etree.ElementTree as ET
from typing import List, Optional, Sequence, Tuple

from uigen.application.services.exceptions import ParseError
from uigen.domain.artifacts import Component, ParsedArtifact
from uigen.infrastructure.validation.passes.base import ValidationPass
from uigen.infrastructure.validation.script import ScriptSyntaxError, extract_functions

logger = logging.getLogger(__name__)

XML_MARKERS = (
    "--- XML ---",
    "---XML---",
    "<!-- XML -->",
    "```xml",
    "**XML:**",
    "**XML**",
    "## XML",
    "# XML",
)

JS_MARKERS = (
    "--- JS ---",
    "---JS---",
    "// JS",
    "```javascript",
    "```js",
    "**JavaScript:**",
    "**JavaScript**",
    "**JS:**",
    "**JS**",
    "## JavaScript",
    "# JavaScript",
    "## JS",
    "# JS",
)

EXPLANATION_MARKERS = (
    "\n\nNote that",
    "\n\nPlease note",
    "\n\nThis code",
    "\n\nAlso,",
    "\n\nI've ",
    "\n\n**",
    "\n\nThe above",
)

CONTENT_JS_PATTERNS = ("this.", "function ", "var ", "let ", "const ", "//")

FENCE_RE = re.compile(r"^[ \t]*```[\w-]*[ \t]*$", re.MULTILINE)
XML_DECLARATION_RE = re.compile(r"<\?xml[^>]*\?>")


def find_marker(raw: str, markers: Sequence[str]) -> Optional[Tuple[int, int]]:
    """Earliest occurrence of any marker, as (position, marker length)."""
    found = None
    for marker in markers:
        pos = raw.find(marker)
        if pos != -1 and (found is None or pos < found[0]):
            found = (pos, len(marker))
    return found


def clean_section(section: str) -> str:
    """Strip code fences, trailing prose and stray wrapper tags from a section."""
    result = FENCE_RE.sub("", section).strip()

    end = result.find("</screen>")
    if end != -1:
        result = result[: end + len("</screen>")]

    for marker in EXPLANATION_MARKERS:
        pos = result.find(marker)
        if pos != -1:
            result = result[:pos].strip()

    for junk in ("<![CDATA[", "]]>", "<script>", "</script>"):
        result = result.replace(junk, "")
    return result.strip()


def split_by_content(raw: str) -> Optional[Tuple[str, str]]:
    """Split unmarked output at the first script-looking line after the markup."""
    xml_start = raw.find("<")
    if xml_start == -1:
        return None

    xml_end = len(raw)
    js_start = len(raw)
    for pattern in CONTENT_JS_PATTERNS:
        pos = raw.find(pattern, xml_start)
        if pos == -1:
            continue
        last_bracket = raw.rfind(">", 0, pos)
        if last_bracket != -1 and last_bracket + 1 < pos < js_start:
            xml_end = last_bracket + 1
            js_start = pos

    if js_start >= len(raw):
        return None

    xml = raw[xml_start:xml_end].strip()
    js = raw[js_start:].strip()
    if not xml or not js:
        return None
    return xml, js


def to_component(element: ET.Element) -> Component:
    return Component(
        tag=element.tag,
        attributes=tuple(element.attrib.items()),
        children=tuple(to_component(child) for child in element),
        text=(element.text or "").strip(),
    )


class OutputParser(ValidationPass):
    """str -> ParsedArtifact."""

    name = "output_parser"

    def run(self, raw_output: str) -> ParsedArtifact:
        warnings: List[str] = []
        xml_source, script_source = self._split(raw_output, warnings)

        roots = self._parse_xml(xml_source)
        try:
            functions, leftover = extract_functions(script_source)
        except ScriptSyntaxError as e:
            raise ParseError(f"Malformed JavaScript: {e}") from e
        if leftover:
            warnings.append("Dropped script statements outside of functions")

        logger.debug(f"Parsed {len(roots)} root component(s) and {len(functions)} function(s)")
        return ParsedArtifact(
            raw_output=raw_output,
            xml_source=xml_source,
            script_source=script_source,
            roots=roots,
            functions=tuple(functions),
            warnings=tuple(warnings),
        )

    def _split(self, raw: str, warnings: List[str]) -> Tuple[str, str]:
        xml_marker = find_marker(raw, XML_MARKERS)
        js_marker = find_marker(raw, JS_MARKERS)

        if xml_marker is None or js_marker is None:
            split = split_by_content(raw)
            if split is None:
                raise ParseError("Could not separate XML and JavaScript sections")
            warnings.append("No section markers found, split output by content")
            xml, js = (clean_section(part) for part in split)
        else:
            (xml_pos, xml_len), (js_pos, js_len) = xml_marker, js_marker
            if xml_pos < js_pos:
                xml = clean_section(raw[xml_pos + xml_len : js_pos])
                js = clean_section(raw[js_pos + js_len :])
            else:
                js = clean_section(raw[js_pos + js_len : xml_pos])
                xml = clean_section(raw[xml_pos + xml_len :])
            if not js:
                split = split_by_content(raw)
                if split is not None:
                    js = clean_section(split[1])
                    warnings.append("JavaScript section was empty, recovered it by content")

        if not xml:
            raise ParseError("XML section is empty")
        if not js:
            raise ParseError("JavaScript section is empty")
        return xml, js

    def _parse_xml(self, xml: str) -> Tuple[Component, ...]:
        source = XML_DECLARATION_RE.sub("", xml).strip()
        try:
            wrapper = ET.fromstring(f"<artifact>{source}</artifact>")
        except ET.ParseError as e:
            raise ParseError(f"Malformed XML: {e}") from e
        roots = tuple(to_component(child) for child in wrapper)
        if not roots:
            raise ParseError("XML section contains no elements")
        return roots
