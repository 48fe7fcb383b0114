"""Shared sample model outputs and helpers for pipeline tests."""

from uigen.domain.models import GenerationRequest
from uigen.infrastructure.llm.mock_backend import DEFAULT_JS, DEFAULT_XML, xframe5_output

VALID_OUTPUT = xframe5_output()

LOGIN_REQUEST = GenerationRequest(
    product="member-portal",
    input_type="natural-language",
    intent="add login button",
)

SIMPLE_XML = """<screen id="scr_simple">
  <pushbutton id="btn_ok" text="OK" on_click="eventfunc:fn_ok()"/>
</screen>"""

SIMPLE_JS = """this.fn_ok = function() {
    alert("ok");
};"""


def output(xml: str = SIMPLE_XML, js: str = SIMPLE_JS) -> str:
    return xframe5_output(xml, js)


__all__ = ["VALID_OUTPUT", "LOGIN_REQUEST", "SIMPLE_XML", "SIMPLE_JS", "DEFAULT_XML", "DEFAULT_JS", "output"]
