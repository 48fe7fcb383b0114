"""Mock backend returning canned responses, for tests and offline runs."""

import threading
from typing import List, Optional, Sequence, Union

from uigen.application.interfaces.illm_backend import ILLMBackend
from uigen.application.services.exceptions import BackendFailure

DEFAULT_XML = """<screen id="scr_member_list" width="1024" height="768">
  <xdataset id="ds_member">
    <column name="member_id" type="STRING" size="20"/>
    <column name="member_name" type="STRING" size="100"/>
    <column name="email" type="STRING" size="255"/>
  </xdataset>
  <grid id="grid_member" link_data="ds_member" x="10" y="50" width="1000" height="600">
    <column name="member_id" header="ID" width="80"/>
    <column name="member_name" header="Name" width="150"/>
    <column name="email" header="Email" width="200"/>
  </grid>
  <pushbutton id="btn_search" text="Search" x="10" y="10" on_click="eventfunc:fn_search()"/>
  <pushbutton id="btn_login" text="Login" x="110" y="10" on_click="eventfunc:fn_login()"/>
</screen>"""

DEFAULT_JS = """this.fn_init = function() {
    this.fn_search();
};

this.fn_search = function() {
    var ds = this.getDataset("ds_member");
    ds.clearData();
};

this.fn_login = function() {
    alert("Login");
};"""

MockResponse = Union[str, Exception]


def xframe5_output(xml: str = DEFAULT_XML, js: str = DEFAULT_JS) -> str:
    """Format XML and JS the way the prompt asks the model to answer."""
    return f"--- XML ---\n{xml}\n\n--- JS ---\n{js}"


class MockBackend(ILLMBackend):
    """Returns predefined responses without calling a model.

    Responses are returned in order and cycle when exhausted. A response that
    is an exception is raised instead of returned.
    """

    PROVIDER = "mock"
    MODEL = "mock-model"

    def __init__(self, responses: Optional[Sequence[MockResponse]] = None, healthy: bool = True):
        self.responses: List[MockResponse] = list(responses) if responses else [xframe5_output()]
        self.healthy = healthy
        self._call_count = 0
        self._lock = threading.Lock()
        self.prompts: List[str] = []

    @classmethod
    def failing(cls, message: str) -> "MockBackend":
        return cls([BackendFailure(cls.PROVIDER, message)])

    @classmethod
    def unhealthy(cls) -> "MockBackend":
        return cls(healthy=False)

    @classmethod
    def fail_then_succeed(cls) -> "MockBackend":
        return cls([BackendFailure(cls.PROVIDER, "First attempt failed"), xframe5_output()])

    @property
    def call_count(self) -> int:
        return self._call_count

    def name(self) -> str:
        return self.PROVIDER

    def model(self) -> str:
        return self.MODEL

    def generate(self, prompt: str) -> str:
        with self._lock:
            index = self._call_count % len(self.responses)
            self._call_count += 1
            self.prompts.append(prompt)
        response = self.responses[index]
        if isinstance(response, Exception):
            raise response
        return response

    def health_check(self) -> None:
        if not self.healthy:
            raise BackendFailure(self.PROVIDER, "Mock LLM is unhealthy")
