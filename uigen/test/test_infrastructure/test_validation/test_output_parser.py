import pytest

from uigen.application.services.exceptions import ParseError
from uigen.infrastructure.validation.passes.output_parser import OutputParser, find_marker
from uigen.test.fixtures import VALID_OUTPUT


@pytest.fixture
def parser() -> OutputParser:
    return OutputParser()


def test_parses_marked_output(parser):
    artifact = parser.run(VALID_OUTPUT)

    assert len(artifact.roots) == 1
    assert artifact.roots[0].tag == "screen"
    assert [f.name for f in artifact.functions] == ["fn_init", "fn_search", "fn_login"]
    assert artifact.warnings == ()
    assert artifact.raw_output == VALID_OUTPUT


def test_parses_markdown_fences_and_drops_trailing_prose(parser):
    raw = (
        "Here you go:\n"
        "```xml\n<screen id=\"scr_a\"/>\n```\n\n"
        "```javascript\nthis.fn_init = function() {};\n```\n\n"
        "Note that this screen is empty."
    )
    artifact = parser.run(raw)

    assert artifact.xml_source == '<screen id="scr_a"/>'
    assert artifact.script_source == "this.fn_init = function() {};"


def test_script_section_may_come_first(parser):
    raw = '--- JS ---\nthis.fn_init = function() {};\n--- XML ---\n<screen id="scr_a"/>'
    artifact = parser.run(raw)

    assert artifact.roots[0].node_id == "scr_a"
    assert artifact.functions[0].name == "fn_init"


def test_unmarked_output_is_split_by_content(parser):
    artifact = parser.run('<screen id="scr_a"/>\nthis.fn_init = function() {};')

    assert artifact.roots[0].tag == "screen"
    assert artifact.functions[0].name == "fn_init"
    assert "No section markers found, split output by content" in artifact.warnings


def test_output_without_structure_is_rejected(parser):
    with pytest.raises(ParseError, match="Could not separate XML and JavaScript"):
        parser.run("Sorry, I can only describe the screen in words.")


def test_malformed_xml(parser):
    raw = "--- XML ---\n<screen><grid></screen>\n--- JS ---\nthis.fn_init = function() {};"
    with pytest.raises(ParseError, match="Malformed XML"):
        parser.run(raw)


def test_empty_script_section(parser):
    with pytest.raises(ParseError, match="JavaScript section is empty"):
        parser.run("--- XML ---\n<screen/>\n--- JS ---\n")


def test_unclosed_function(parser):
    raw = "--- XML ---\n<screen/>\n--- JS ---\nthis.fn_init = function() {\n    alert(1);"
    with pytest.raises(ParseError, match="Malformed JavaScript"):
        parser.run(raw)


def test_loose_statements_produce_a_warning(parser):
    raw = '--- XML ---\n<screen/>\n--- JS ---\nvar x = 1;\nthis.fn_init = function() {};'
    artifact = parser.run(raw)

    assert "Dropped script statements outside of functions" in artifact.warnings


def test_find_marker_returns_earliest():
    assert find_marker("## JS then --- JS ---", ("--- JS ---", "## JS")) == (0, 5)
    assert find_marker("nothing", ("--- JS ---",)) is None
