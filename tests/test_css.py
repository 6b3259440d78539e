"""
CSS compiler tests.
"""

import pytest

from tagsmith.compiler.css import compile_css, scoped_css
from tagsmith.compiler.errors import PreprocessorNotFoundError, ScopedCSSError


def test_scoped_selector_has_two_variants():
    css = scoped_css("my-tag", "h1 { color: red }")

    assert css == 'my-tag h1,[riot-tag="my-tag"] h1 { color: red }'


def test_every_selector_in_a_group_is_scoped():
    css = scoped_css("my-tag", "h1, h2 { margin: 0 }")

    assert css == (
        'my-tag h1,[riot-tag="my-tag"] h1,'
        'my-tag h2,[riot-tag="my-tag"] h2 { margin: 0 }'
    )


def test_scope_placeholder_targets_root():
    css = scoped_css("my-tag", ":scope { display: block }")

    assert css == 'my-tag,[riot-tag="my-tag"] { display: block }'


def test_keyframe_stops_are_not_scoped():
    css = "@keyframes spin { from { top: 0 } 50% { top: 1px } to { top: 2px } }"

    assert scoped_css("my-tag", css) == css


def test_rules_inside_media_are_scoped():
    css = scoped_css("my-tag", "@media print { p { color: red } }")

    assert css == '@media print { my-tag p,[riot-tag="my-tag"] p { color: red } }'


def test_comments_and_whitespace_are_removed():
    css = compile_css("/* title */\nh1 {\n  color: red;\n}\n")

    assert css == "h1 { color: red; }"


def test_compile_scoped():
    css = compile_css("p {\n  margin: 0\n}", "x-tag", scoped=True)

    assert css == 'x-tag p,[riot-tag="x-tag"] p { margin: 0 }'


def test_scoped_css_type_forces_scoping():
    assert compile_css("p { a: b }", "x-tag", type="scoped-css").startswith("x-tag p,")


def test_plain_css_type():
    assert compile_css("p { a: b }", type="css") == "p { a: b }"


def test_scoped_without_tag_fails():
    with pytest.raises(ScopedCSSError, match="without a tagName"):
        compile_css("p { a: b }", scoped=True)


def test_unknown_style_language(registry):
    with pytest.raises(PreprocessorNotFoundError, match='CSS parser not found: "less"'):
        compile_css("p { a: b }", "x-tag", type="less", registry=registry)


def test_style_preprocessor_receives_tag_name(registry):
    seen = {}

    def upper(code, options, url):
        seen.update(options, url=url)
        return code.upper()

    registry.register("css", "upper", upper)
    css = compile_css("p { a: b }", "x-tag", type="upper", parser_options={"x": 1},
                      url="app.tag", registry=registry)

    assert css == "P { A: B }"
    assert seen == {"x": 1, "tag_name": "x-tag", "url": "app.tag"}


def test_comma_inside_quoted_attribute_value():
    css = scoped_css("my-t", 'a[title="x,y"] { color: red }')

    assert css == 'my-t a[title="x,y"],[riot-tag="my-t"] a[title="x,y"] { color: red }'


def test_brace_inside_quoted_attribute_value():
    css = scoped_css("my-t", "a[title='{'] { color: red }")

    assert css == "my-t a[title='{'],[riot-tag=\"my-t\"] a[title='{'] { color: red }"


def test_braces_in_declaration_strings_are_not_rules():
    css = scoped_css("my-t", 'p::after { content: "}{" } b { x: y }')

    assert css == (
        'my-t p::after,[riot-tag="my-t"] p::after { content: "}{" } '
        'my-t b,[riot-tag="my-t"] b { x: y }'
    )


def test_commas_inside_pseudo_class_arguments():
    css = scoped_css("my-t", ":not(a, b), i { x: y }")

    assert css == (
        'my-t :not(a, b),[riot-tag="my-t"] :not(a, b),'
        'my-t i,[riot-tag="my-t"] i { x: y }'
    )
