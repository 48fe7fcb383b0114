import pytest

from uigen.application.services.exceptions import UnresolvedSymbol
from uigen.test.fixtures import VALID_OUTPUT, output
from uigen.test.test_infrastructure.test_validation.helpers import linked


def test_declares_components_datasets_and_functions():
    table = linked(VALID_OUTPUT).symbol_table

    assert table.declarations["ds_member"].kind == "dataset"
    assert table.declarations["grid_member"].kind == "component"
    assert table.declarations["fn_login"].kind == "function"
    assert table.declarations["fn_login"].site == "js:fn_login"


def test_records_reference_sites():
    table = linked(VALID_OUTPUT).symbol_table

    assert table.referrers("fn_search") == {"btn_search", "fn_init"}
    assert table.referrers("fn_login") == {"btn_login"}
    assert {"grid_member", "fn_search"} <= table.referrers("ds_member")
    assert table.unresolved() == ()


def test_unknown_handler_function():
    xml = '<screen id="scr_a"><pushbutton id="btn_a" on_click="eventfunc:fn_missing()"/></screen>'
    with pytest.raises(UnresolvedSymbol) as exc_info:
        linked(output(xml, "this.fn_init = function() {};"))

    assert exc_info.value.names == ("fn_missing",)
    assert exc_info.value.stage == "symbol_linker"


def test_unknown_dataset_binding():
    xml = '<screen id="scr_a"><grid id="grid_a" link_data="ds_nope"/></screen>'
    with pytest.raises(UnresolvedSymbol, match="ds_nope"):
        linked(output(xml, "this.fn_init = function() {};"))


def test_unknown_function_call_in_script():
    js = "this.fn_init = function() {\n    this.fn_undefined();\n};"
    with pytest.raises(UnresolvedSymbol, match="fn_undefined"):
        linked(output('<screen id="scr_a"/>', js))


def test_unknown_dataset_lookup_in_script():
    js = 'this.fn_init = function() {\n    var ds = this.getDataset("ds_ghost");\n};'
    with pytest.raises(UnresolvedSymbol, match="ds_ghost"):
        linked(output('<screen id="scr_a"/>', js))


def test_handler_that_is_not_a_function_reference():
    xml = '<screen id="scr_a"><pushbutton id="btn_a" on_click="return false;"/></screen>'
    with pytest.raises(UnresolvedSymbol) as exc_info:
        linked(output(xml, "this.fn_init = function() {};"))

    assert exc_info.value.names[0].startswith("btn_a.on_click=")
