import pytest

from uigen.infrastructure.validation.script import (
    ScriptSyntaxError,
    balanced,
    dataset_lookups,
    extract_functions,
    find_calls,
    mask,
    mentioned,
    statement_span,
)

SCRIPT = """this.fn_a = function(x, y) {
    return x;
};
function fn_b() { if (a) { b(); } }
var fn_c = function() {};
console.log("loose");"""


def test_extract_functions_styles_and_params():
    functions, leftover = extract_functions(SCRIPT)

    assert [f.name for f in functions] == ["fn_a", "fn_b", "fn_c"]
    assert [f.style for f in functions] == ["method", "declaration", "variable"]
    assert functions[0].params == ("x", "y")
    assert functions[0].body.strip() == "return x;"
    assert leftover.startswith("console.log")


def test_extract_functions_ignores_braces_in_strings_and_comments():
    source = 'this.fn_a = function() {\n    var s = "}"; // }\n    return s;\n};'
    functions, leftover = extract_functions(source)

    assert len(functions) == 1
    assert 'var s = "}";' in functions[0].body
    assert leftover == ""


def test_extract_functions_unclosed_body():
    with pytest.raises(ScriptSyntaxError, match="fn_a"):
        extract_functions("this.fn_a = function() {\n    alert(1);\n")


def test_mask_preserves_length():
    source = 'a(); // b()\n/* c() */ d("e()");'
    masked = mask(source, strings=True)
    assert len(masked) == len(source)
    assert "b()" not in masked
    assert "e()" not in masked
    assert "d(" in masked


def test_find_calls():
    code = 'this.fn_a();\nds.clearData();\nalert("x");\nif (x) {}\n// evil()\nvar s = "eval()";'
    calls = find_calls(code)

    assert [(c.receiver, c.name) for c in calls] == [
        ("this", "fn_a"),
        ("ds", "clearData"),
        (None, "alert"),
    ]
    assert calls[1].qualified == "ds.clearData"
    assert calls[1].line == 2


def test_dataset_lookups_skip_comments():
    assert dataset_lookups('this.getDataset("ds_a"); // getDataset("ds_b")') == ["ds_a"]


def test_mentioned_matches_whole_identifiers():
    assert mentioned("var x = grid_a; // grid_b", ["grid_a", "grid_b", "grid"]) == {"grid_a"}


def test_statement_span_covers_multiline_call():
    code = '\n    badApi({\n        a: 1\n    });\n    alert("ok");\n'
    start, end = statement_span(code, code.index("badApi"))
    assert code[start:end] == "badApi({\n        a: 1\n    });"


def test_statement_span_stays_inside_enclosing_block():
    code = "if (x) { badApi(1); ok(); }"
    start, end = statement_span(code, code.index("badApi"))
    assert code[start:end] == "badApi(1);"


def test_statement_span_ends_at_line_break_without_semicolon():
    code = "ok()\nbadApi(1)\nalert(2)"
    start, end = statement_span(code, code.index("badApi"))
    assert code[start:end] == "badApi(1)"


def test_statement_span_keeps_chained_calls():
    code = "badApi(1)\n    .then(done);\nok();"
    start, end = statement_span(code, code.index("badApi"))
    assert code[start:end] == "badApi(1)\n    .then(done);"


def test_balanced_ignores_strings():
    assert balanced('alert("(}"); if (a) { b([1]); }')
    assert not balanced("a: 1\n    });")
    assert not balanced("f(]")
