"""
Expression tokenizer tests.
"""

import pytest

from tagsmith.compiler.brackets import Brackets
from tagsmith.compiler.errors import BracketsError
from tagsmith.compiler.expressions import (
    PLACEHOLDER,
    QUOTE_MARK,
    ExpressionPool,
    restore_expressions,
    split_expressions,
    split_template,
)
from tagsmith.compiler.options import CompilerOptions


def test_expression_is_replaced_by_placeholder(pool):
    text = split_expressions("<p>{ name }</p>", pool)

    assert text == f"<p>{PLACEHOLDER}0}}</p>"
    assert list(pool) == ["name"]


def test_indices_follow_source_order(pool):
    text = split_expressions('<a href="{ url }">{ label }</a>', pool)

    assert pool[0] == "url"
    assert pool[1] == "label"
    assert text == f'<a href="{PLACEHOLDER}0}}">{PLACEHOLDER}1}}</a>'


def test_text_without_opener_is_returned_as_is(pool):
    assert split_expressions("<p>plain</p>", pool) == "<p>plain</p>"
    assert len(pool) == 0


def test_unterminated_expression_stays_literal(pool):
    assert split_expressions("{x", pool) == "{x"
    assert len(pool) == 0


def test_escaped_opener_is_not_an_expression(pool):
    assert split_expressions(r"\{ not }", pool) == r"\{ not }"
    assert len(pool) == 0


def test_nested_braces_and_strings(pool):
    split_expressions("<p>{ { a: '}' }[key] }</p>", pool)

    assert pool[0] == "{ a: '}' }[key]"


def test_newlines_inside_expression_collapse(pool):
    split_expressions("{ a &&\n  b }", pool)

    assert pool[0] == "a &&   b"


def test_caret_marker_is_stripped(pool):
    split_expressions("{^ raw }", pool)

    assert pool[0] == "raw"


def test_custom_brackets():
    pool = ExpressionPool(Brackets.from_string("[[ ]]"))
    text = split_expressions("<p>[[ x ]] { y }</p>", pool)

    assert text == f"<p>{PLACEHOLDER}0]] {{ y }}</p>"
    assert restore_expressions(text, pool) == "<p>[[x]] { y }</p>"


def test_restore_replaces_double_quotes(pool):
    text = split_expressions('{ a ? "yes" : "no" }', pool)

    assert restore_expressions(text, pool) == "{a ? ⁗yes⁗ : ⁗no⁗}"
    assert QUOTE_MARK == "⁗"


def test_restore_escapes_tags_in_raw_expression_strings(pool):
    text = split_expressions("{= '<b>' + x }", pool)

    assert restore_expressions(text, pool) == "{= '&lt;b&gt;' + x}"


def test_restore_is_idempotent(pool):
    text = split_expressions('<p class="{ c }">{ n }</p>', pool)
    once = restore_expressions(text, pool)

    assert restore_expressions(once, pool) == once


def test_split_template_alternates_parts():
    parts = split_template("a { b } c { d }", Brackets.from_string())

    assert parts == ["a ", " b ", " c ", " d ", ""]


def test_expressions_go_through_script_preprocessor(pool):
    options = CompilerOptions(expr=True, parser=lambda code, opts, url: code.upper())
    split_expressions("{=name}", pool, options)

    assert pool[0] == "=NAME"


def test_expression_transform_drops_trailing_semicolon(pool):
    options = CompilerOptions(expr=True, parser=lambda code, opts, url: code + ";")
    split_expressions("{ a }", pool, options)

    assert pool[0] == "a"


@pytest.mark.parametrize("pair", ["{", "< >", "a b", "{ } }", "{ ;", "' '"])
def test_unsupported_brackets(pair):
    with pytest.raises(BracketsError, match="Unsupported brackets"):
        Brackets.from_string(pair)


def test_default_brackets():
    brackets = Brackets.from_string()

    assert (brackets.open, brackets.close) == ("{", "}")
    assert brackets.is_default
    assert brackets.wrap("x") == "{x}"
