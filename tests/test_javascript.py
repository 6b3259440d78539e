"""
Script compiler tests.
"""

import pytest

from tagsmith.compiler.errors import PreprocessorNotFoundError
from tagsmith.compiler.javascript import compile_js, rewrite_methods
from tagsmith.compiler.options import CompilerOptions
from tagsmith.compiler.scanner import skip_group


def test_method_is_rewritten_and_bound():
    js = rewrite_methods("add(a, b) {\n  return a + b\n}")

    assert js == "this.add = function(a, b) {\n  return a + b\n}.bind(this)"


def test_control_flow_is_left_alone():
    code = "if (x) {\n  y()\n}"

    assert rewrite_methods(code) == code


def test_keywords_are_not_methods():
    for keyword in ("while", "for", "switch", "catch", "function"):
        code = f"{keyword} (x) {{\n}}"
        assert rewrite_methods(code) == code


def test_several_methods_keep_indentation():
    js = rewrite_methods("  a() {\n  }\n  b(x) {\n  }")

    assert js == (
        "  this.a = function() {\n  }.bind(this)\n"
        "  this.b = function(x) {\n  }.bind(this)"
    )


def test_explicit_bind_is_kept():
    js = rewrite_methods("add() {\n}.bind(other)")

    assert js == "this.add = function() {\n}.bind(other)"


def test_braces_in_strings_do_not_end_the_body():
    js = rewrite_methods("say() {\n  return '}'\n}")

    assert js == "this.say = function() {\n  return '}'\n}.bind(this)"


def test_nested_blocks_are_copied():
    code = "init() {\n  if (a) {\n    b()\n  }\n}"

    assert rewrite_methods(code) == (
        "this.init = function() {\n  if (a) {\n    b()\n  }\n}.bind(this)"
    )


def test_unterminated_method_is_left_as_written():
    assert rewrite_methods("foo(a) {\n  x()") == "foo(a) {\n  x()"


def test_skip_group_tells_closed_from_unclosed():
    assert skip_group("a }", 0, "{") == 3
    assert skip_group("a '}'", 0, "{") == -1


def test_methods_before_an_unterminated_one_are_rewritten():
    js = rewrite_methods("a() {\n}\nb() {\n  c(")

    assert js == "this.a = function() {\n}.bind(this)\nb() {\n  c("


def test_comments_are_removed():
    js = compile_js("// setup\nadd() {\n}")

    assert js == "\nthis.add = function() {\n}.bind(this)"


def test_plain_statements_untouched():
    assert compile_js("this.items = opts.items") == "this.items = opts.items"


def test_empty_script():
    assert compile_js("") == ""


def test_passthrough_language(registry):
    assert compile_js("add() {\n}", type="none", registry=registry) == "add() {\n}"


def test_default_language_from_options(registry):
    options = CompilerOptions(type="javascript")

    assert compile_js("add() {\n}", options, registry=registry) == "add() {\n}"


def test_unknown_script_language(registry):
    with pytest.raises(PreprocessorNotFoundError, match='JS parser not found: "coffee"'):
        compile_js("x = 1", type="coffee", registry=registry)


def test_parser_option_overrides_registry(registry):
    options = CompilerOptions(parser=lambda code, opts, url: code.replace("a", "b"))

    assert compile_js("a()", options, type="coffee", registry=registry) == "b()"


def test_trailing_whitespace_trimmed(registry):
    registry.register("js", "pad", lambda code, opts, url: code + "   \nx  ")

    assert compile_js("a", type="pad", registry=registry) == "a\nx"
