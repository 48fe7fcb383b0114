import pytest

from uigen.application.services.exceptions import InvalidGraph
from uigen.domain.artifacts import Component, FilteredArtifact, ScriptFunction, SymbolTable
from uigen.infrastructure.validation.passes.graph_validator import GraphValidator, find_cycle


def _artifact(children=(), functions=(), roots=None):
    if roots is None:
        roots = (Component("screen", (("id", "scr_a"),), tuple(children)),)
    return FilteredArtifact(
        roots=tuple(roots),
        functions=tuple(functions),
        symbol_table=SymbolTable({}, {}),
    )


def _c(tag, **attributes):
    return Component(tag, tuple(attributes.items()))


@pytest.fixture
def validator(allowlist) -> GraphValidator:
    return GraphValidator(allowlist)


def test_valid_graph_is_returned_unchanged(validator):
    artifact = _artifact(
        children=[
            _c("xdataset", id="ds_a"),
            _c("grid", id="grid_a", link_data="ds_a"),
            _c("pushbutton", id="btn_a", on_click="eventfunc:fn_a()"),
        ],
        functions=[ScriptFunction("fn_a", body="    this.fn_b();"), ScriptFunction("fn_b")],
    )
    assert validator.run(artifact) is artifact


def test_requires_exactly_one_root(validator):
    with pytest.raises(InvalidGraph, match="exactly one root"):
        validator.run(_artifact(roots=[_c("screen", id="a"), _c("screen", id="b")]))


def test_root_tag_must_be_allowed(validator):
    with pytest.raises(InvalidGraph, match="Root component <panel>"):
        validator.run(_artifact(roots=[_c("panel", id="pnl_a")]))


def test_duplicate_ids(validator):
    with pytest.raises(InvalidGraph, match="Duplicate component id.*btn_a"):
        validator.run(_artifact(children=[_c("pushbutton", id="btn_a"), _c("text", id="btn_a")]))


def test_dangling_binding(validator):
    with pytest.raises(InvalidGraph, match="missing dataset ds_x"):
        validator.run(_artifact(children=[_c("grid", id="grid_a", link_data="ds_x")]))


def test_dangling_handler(validator):
    with pytest.raises(InvalidGraph, match="missing function fn_gone"):
        validator.run(
            _artifact(children=[_c("pushbutton", id="btn_a", on_click="eventfunc:fn_gone()")])
        )


def test_dangling_call_in_script(validator):
    with pytest.raises(InvalidGraph, match="fn_a -> missing function fn_gone"):
        validator.run(_artifact(functions=[ScriptFunction("fn_a", body="    this.fn_gone();")]))


def test_orphan_dataset(validator):
    with pytest.raises(InvalidGraph, match="Orphan dataset.*ds_a"):
        validator.run(_artifact(children=[_c("xdataset", id="ds_a")]))


def test_dataset_named_in_script_is_not_orphan(validator):
    artifact = _artifact(
        children=[_c("xdataset", id="ds_a")],
        functions=[ScriptFunction("fn_init", body='    var name = "ds_a";')],
    )
    assert validator.run(artifact) is artifact


def test_call_cycle(validator):
    functions = [
        ScriptFunction("fn_a", body="    this.fn_b();"),
        ScriptFunction("fn_b", body="    fn_a();"),
    ]
    with pytest.raises(InvalidGraph, match="Function call cycle: fn_a -> fn_b -> fn_a"):
        validator.run(_artifact(functions=functions))


def test_self_recursion_is_a_cycle(validator):
    with pytest.raises(InvalidGraph, match="fn_a -> fn_a"):
        validator.run(_artifact(functions=[ScriptFunction("fn_a", body="    this.fn_a();")]))


def test_find_cycle():
    assert find_cycle({"a": ["b"], "b": ["c"], "c": []}) is None
    assert find_cycle({"a": ["b"], "b": ["c"], "c": ["b"]}) == ["b", "c", "b"]
