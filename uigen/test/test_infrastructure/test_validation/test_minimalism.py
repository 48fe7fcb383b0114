from uigen.domain.artifacts import Component, FilteredArtifact, ScriptFunction, SymbolTable
from uigen.infrastructure.validation.passes.minimalism import MinimalismPass


def _artifact():
    screen = Component(
        "screen",
        (("id", "scr_a"),),
        (Component("pushbutton", (("id", "btn_a"), ("on_click", "eventfunc:fn_used()"))),),
    )
    return FilteredArtifact(
        roots=(screen,),
        functions=(
            ScriptFunction("fn_init", body="    alert(1);"),
            ScriptFunction("fn_unused", body="    this.fn_unused();"),
            ScriptFunction("fn_used"),
        ),
        symbol_table=SymbolTable(
            {}, {"fn_used": {"btn_a"}, "fn_unused": {"fn_unused"}}
        ),
        warnings=("Canonicalized: lower-cased tag names",),
    )


def test_removes_unreferenced_functions():
    validated = MinimalismPass().run(_artifact())

    assert [f.name for f in validated.functions] == ["fn_init", "fn_used"]
    assert validated.removed == ("fn_unused",)
    assert validated.warnings == (
        "Canonicalized: lower-cased tag names",
        "Removed unreferenced function fn_unused",
    )


def test_renders_xml_and_script():
    validated = MinimalismPass().run(_artifact())

    assert validated.xml.startswith('<screen id="scr_a">')
    assert 'on_click="eventfunc:fn_used()"' in validated.xml
    assert validated.javascript == (
        "this.fn_init = function() {\n    alert(1);\n};\n\nthis.fn_used = function() {};"
    )
    assert "fn_unused" not in validated.javascript
