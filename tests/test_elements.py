"""
Custom-element compiler tests.
"""

import pytest

from tagsmith.compiler.elements import (
    Component,
    TagCompiler,
    compile_source,
    get_attr,
    get_type,
    quote,
    split_blocks,
)
from tagsmith.compiler.errors import ParserOptionsError, PreprocessorNotFoundError
from tagsmith.compiler.options import CompilerOptions


def test_inline_element():
    code = compile_source("<my-tag><p>{x}</p></my-tag>")

    assert code == "riot.tag2('my-tag', '<p>{x}</p>', '', '', function(opts) {\n}, '{ }');"


def test_self_closed_element():
    code = compile_source("<my-tag/>")

    assert code == "riot.tag2('my-tag', '', '', '', function(opts) {\n});"


def test_full_element(source):
    code = compile_source(source("""
        <todo-item class="item">
          <p>{ title }</p>
          <style scoped>
            p { color: red }
          </style>

          remove(e) {
            this.done = true
          }
        </todo-item>
    """))

    assert code == (
        "riot.tag2('todo-item', '<p>{title}</p>', "
        "'todo-item p,[riot-tag=\"todo-item\"] p { color: red }', "
        "'class=\"item\"', function(opts) {\n"
        "\n  this.remove = function(e) {\n    this.done = true\n  }.bind(this)\n"
        "}, '{ }');\n"
    )


def test_surrounding_code_is_kept():
    code = compile_source("var a = 1\n<my-tag><p>x</p></my-tag>\nvar b = 2\n")

    assert code == (
        "var a = 1\n"
        "riot.tag2('my-tag', '<p>x</p>', '', '', function(opts) {\n});\n"
        "var b = 2\n"
    )


def test_plain_tags_are_not_components():
    assert compile_source("<div><p>x</p></div>") == "<div><p>x</p></div>"


def test_indented_element_is_dedented():
    records = compile_source(
        "  <my-tag>\n    <p>x</p>\n  </my-tag>\n",
        CompilerOptions(entities=True),
    )

    assert records == [Component(tag_name="my-tag", html="<p>x</p>")]


def test_entities_output(source):
    records = compile_source(source("""
        <a-b>
          <p>{ x }</p>
        </a-b>
        <c-d><i>y</i></c-d>
    """), CompilerOptions(entities=True))

    assert [r.to_dict() for r in records] == [
        {"tagName": "a-b", "html": "<p>{x}</p>", "css": "", "attribs": "", "js": ""},
        {"tagName": "c-d", "html": "<i>y</i>", "css": "", "attribs": "", "js": ""},
    ]
    assert records[0].brackets == "{ }"
    assert records[1].brackets is None


def test_element_attributes_are_normalized():
    [record] = TagCompiler().compile_components(
        '<my-tag class="{ cls }" checked="{ c }"><p>x</p></my-tag>'
    )

    assert record.attribs == 'class="{cls}" __checked="{c}"'


def test_expression_pool_is_per_element():
    code = compile_source("<a-b><p>{ x }</p></a-b>\n<c-d><p>{ y }</p></c-d>")

    assert "'<p>{x}</p>'" in code
    assert "'<p>{y}</p>'" in code


def test_custom_brackets_are_passed_on():
    code = compile_source(
        "<my-tag><p>[ x ] {y}</p></my-tag>",
        CompilerOptions(brackets="[ ]"),
    )

    assert code == "riot.tag2('my-tag', '<p>[x] {y}</p>', '', '', function(opts) {\n}, '[ ]');"


def test_excluded_parts_are_empty(source):
    [record] = TagCompiler(CompilerOptions(exclude="css,js")).compile_components(source("""
        <my-tag>
          <p>x</p>
          <style>p { a: b }</style>
          go()
        </my-tag>
    """))

    assert record.html == "<p>x</p>"
    assert record.css == ""
    assert record.js == ""


def test_typed_script_block(registry, source):
    registry.register("js", "upper", lambda code, opts, url: code.upper())

    code = TagCompiler(registry=registry).compile(source("""
        <my-tag>
          <p>x</p>
          <script type="text/upper">
            go()
          </script>
        </my-tag>
    """))

    assert code == "riot.tag2('my-tag', '<p>x</p>', '', '', function(opts) {\n    GO()\n});\n"


def test_script_options_are_json(registry, source):
    seen = []
    registry.register("js", "rec", lambda code, opts, url: seen.append(opts) or code)

    TagCompiler(registry=registry).compile(source("""
        <my-tag>
          <p>x</p>
          <script type="rec" options='{"bare": true}'>
            go()
          </script>
        </my-tag>
    """))

    assert seen == [{"bare": True}]


def test_invalid_script_options(registry, source):
    registry.register("js", "rec", lambda code, opts, url: code)

    with pytest.raises(ParserOptionsError):
        TagCompiler(registry=registry).compile(source("""
            <my-tag>
              <script type="rec" options="{bad">
                go()
              </script>
            </my-tag>
        """))


def test_unknown_script_language_aborts(source):
    with pytest.raises(PreprocessorNotFoundError):
        compile_source(source("""
            <my-tag>
              <script type="coffee">
                go()
              </script>
            </my-tag>
        """))


def test_extra_blank_lines_in_script_collapse(source):
    [record] = TagCompiler().compile_components(source("""
        <my-tag>
          <p>x</p>
          a()



          b()
        </my-tag>
    """))

    assert record.js == "  a()\n\n  b()\n"


def test_template_preprocessor_runs_first(registry):
    registry.register("html", "shout", lambda code, opts, url: code.replace("P", "p"))
    options = CompilerOptions(template="shout")

    code = TagCompiler(options, registry).compile("<my-tag><P>x</P></my-tag>")

    assert "'<p>x</p>'" in code


def test_split_blocks():
    assert split_blocks("<p>x</p>\nfoo()\n") == ("<p>x</p>\n", "foo()\n")
    assert split_blocks("<p>x</p>") == ("<p>x</p>", "")
    assert split_blocks("foo()\n") == ("", "foo()\n")


def test_attribute_helpers():
    attrs = ' type="text/coffee" options=\'{"a": 1}\''

    assert get_type(attrs) == "coffee"
    assert get_attr(attrs, "options") == '{"a": 1}'
    assert get_type(None) == ""


def test_quote_escapes_script_string():
    assert quote("it's\n\\") == "'it\\'s\\n\\\\'"
