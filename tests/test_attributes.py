"""
Attribute parser tests.
"""

from tagsmith.compiler.brackets import Brackets
from tagsmith.compiler.expressions import ExpressionPool, restore_expressions, split_expressions
from tagsmith.compiler.attributes import parse_attributes


def normalize(text, pool=None):
    pool = pool or ExpressionPool()
    return restore_expressions(parse_attributes(split_expressions(text, pool), pool), pool)


def test_names_lowercased_and_values_double_quoted():
    assert parse_attributes("CLASS='a'  id=b disabled") == 'class="a" id="b" disabled'


def test_dynamic_boolean_attribute_is_prefixed():
    assert normalize('checked="{ done }"') == '__checked="{done}"'


def test_bare_no_counts_as_boolean():
    assert normalize('no="{ off }" nowrap="{ w }"') == '__no="{off}" __nowrap="{w}"'


def test_static_boolean_attribute_is_kept():
    assert normalize('checked="checked"') == 'checked="checked"'


def test_dynamic_runtime_attributes_are_renamed():
    assert normalize('src="{ url }" style="{ css }"') == 'riot-src="{url}" riot-style="{css}"'


def test_static_runtime_attribute_is_kept():
    assert normalize('src="a.png"') == 'src="a.png"'


def test_special_type_moves_last():
    assert normalize('type="number" value="3"') == 'value="3" type="number"'


def test_special_type_becomes_expression_with_dynamic_value():
    assert normalize('type="email" value="{ v }"') == "value=\"{v}\" type=\"{'email'}\""


def test_special_type_uses_element_brackets():
    pool = ExpressionPool(Brackets.from_string("[ ]"))

    assert normalize('type="date" value="[ d ]"', pool) == "value=\"[d]\" type=\"['date']\""


def test_plain_type_keeps_its_position():
    assert normalize('type="text" value="{ v }"') == 'type="text" value="{v}"'


def test_unquoted_expression_value_is_quoted():
    assert normalize("title={ t }") == 'title="{t}"'
