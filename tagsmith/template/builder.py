"""
Tagsmith Template Builder
=========================

Turns a parsed template into a static HTML skeleton plus the bindings a
runtime attaches to it.

Example:
    root = parse_template('<div><p class="{ cls }">Hi { name }</p></div>')
    html, bindings = TemplateBuilder().build(root)
    # html: '<div><p expr0> </p></div>'
    # bindings: [simple binding on [expr0] with a "class" attribute
    #            expression and a text expression for child node 0]

Static subtrees are written out as they are. Each dynamic node is written
with a selector attribute and described by one binding; loops and
conditionals get a nested template of their own.
"""

from __future__ import annotations

import itertools
import re
from dataclasses import dataclass, field, replace
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from tagsmith.compiler.elements import quote
from tagsmith.template.bindings import (
    Binding,
    BindingExpression,
    BindingType,
    ExpressionType,
    Template,
)
from tagsmith.template.nodes import (
    EACH_DIRECTIVE,
    IF_DIRECTIVE,
    IS_DIRECTIVE,
    Attribute,
    Expression,
    Node,
    close_tag,
    has_each,
    has_if,
    has_own_template,
    is_custom,
    is_static,
    is_void,
    node_to_string,
)
from tagsmith.utils.logger import get_logger

SELECTOR_PREFIX = "expr"

EACH_EXPRESSION = re.compile(r"^\s*([$\w]+)(?:\s*,\s*([$\w]+))?\s+in\s+([\s\S]+?)\s*$")

DIRECTIVES = (EACH_DIRECTIVE, IF_DIRECTIVE, IS_DIRECTIVE)

logger = get_logger("tagsmith.builder")


# Checked in order; the first match decides the binding type
CLASSIFIERS: Sequence[Tuple[BindingType, Callable[[Node], bool]]] = (
    (BindingType.EACH, has_each),
    (BindingType.IF, has_if),
    (BindingType.TAG, is_custom),
    (BindingType.SIMPLE, lambda node: True),
)


def classify(node: Node) -> BindingType:
    """Binding type of a dynamic node."""
    for binding_type, matches in CLASSIFIERS:
        if matches(node):
            return binding_type
    raise AssertionError("unreachable")


@dataclass
class BuildState:
    """
    Output of one template being built.

    Descending into a child copies the state with a new parent; the html
    and bindings lists stay shared. Selector numbers are drawn from
    ``selectors``, which nested templates share with their parent, so
    building into the same state twice never repeats a selector.
    """
    html: List[str] = field(default_factory=list)
    bindings: List[Binding] = field(default_factory=list)
    parent: Optional[Node] = None
    selectors: Iterator[int] = field(default_factory=itertools.count)

    def descend(self, node: Node) -> "BuildState":
        return replace(self, parent=node)

    def nested(self) -> "BuildState":
        """Fresh output for a nested template, numbering selectors on."""
        return BuildState(selectors=self.selectors)


def join_expressions(text: str, expressions: List[Expression]) -> str:
    """
    Script evaluating text with embedded expressions.

    A text that is one expression evaluates to the expression itself;
    anything else becomes ``['literal', expr, ...].join('')``.
    """
    if len(expressions) == 1:
        only = expressions[0]
        if only.start == 0 and only.end == len(text):
            return only.text

    parts: List[str] = []
    pos = 0
    for expression in expressions:
        if expression.start > pos:
            parts.append(quote(text[pos:expression.start]))
        parts.append(expression.text)
        pos = expression.end
    if pos < len(text):
        parts.append(quote(text[pos:]))

    return f"[{', '.join(parts)}].join('')"


def directive_expression(node: Node, name: str) -> str:
    attribute = node.get_attribute(name)
    if attribute is None:
        return ""
    if attribute.expressions:
        return join_expressions(attribute.value or "", attribute.expressions)
    return attribute.value or ""


def attribute_expression(attribute: Attribute) -> BindingExpression:
    name = attribute.name
    if name.startswith("on"):
        kind = ExpressionType.EVENT
    elif name == "value":
        kind = ExpressionType.VALUE
    else:
        kind = ExpressionType.ATTRIBUTE
    return BindingExpression(
        type=kind,
        name=name,
        evaluate=join_expressions(attribute.value or "", attribute.expressions),
    )


def attribute_expressions(node: Node) -> List[BindingExpression]:
    return [
        attribute_expression(a)
        for a in node.attributes
        if a.has_expressions and a.name not in DIRECTIVES
    ]


def text_expressions(node: Node) -> List[BindingExpression]:
    return [
        BindingExpression(
            type=ExpressionType.TEXT,
            evaluate=join_expressions(child.text or "", child.expressions),
            child_node_index=index,
        )
        for index, child in enumerate(node.children)
        if child.is_text and child.expressions
    ]


class TemplateBuilder:
    """
    Builds skeletons and bindings from node trees.

    Selectors are numbered by the build state, so a state never hands out
    the same selector twice, nested templates included.

    Example:
        builder = TemplateBuilder()
        template = builder.build_template(parse_template(source))
        template.to_dict()
    """

    def __init__(self, selector_prefix: str = SELECTOR_PREFIX) -> None:
        self.selector_prefix = selector_prefix

    def create_selector(self, state: BuildState) -> str:
        return f"{self.selector_prefix}{next(state.selectors)}"

    def build(self, node: Node, state: Optional[BuildState] = None) -> Tuple[str, List[Binding]]:
        """
        Build the skeleton and bindings of a node tree.

        Args:
            node: Root of the tree to build
            state: State to append to; a fresh one when omitted

        Returns:
            ``(html, bindings)`` accumulated in the state
        """
        state = state if state is not None else BuildState()
        self._walk(node, state)
        return "".join(state.html), state.bindings

    def build_template(self, node: Node, state: Optional[BuildState] = None) -> Template:
        html, bindings = self.build(node, state)
        logger.debug("Built template", root=node.name, bindings=len(bindings))
        return Template(html, bindings)

    def _walk(self, node: Node, state: BuildState) -> None:
        if node.is_text or is_static(node):
            state.html.append(node_to_string(node))
        else:
            html, binding = self._dynamic_node(node, state)
            state.html.append(html)
            state.bindings.append(binding)

        if node.is_text:
            return

        if node.children and not has_own_template(node):
            child_state = state.descend(node)
            for child in node.children:
                self._walk(child, child_state)

        if not is_void(node):
            state.html.append(close_tag(node))

    def _dynamic_node(self, node: Node, state: BuildState) -> Tuple[str, Binding]:
        selector = None
        marked = node
        if not node.is_root:
            name = self.create_selector(state)
            marked = replace(node, attributes=[Attribute(name)] + node.attributes)
            selector = f"[{name}]"

        binding_type = classify(node)
        binding = getattr(self, f"_{binding_type.value}_binding")(node, selector, state)
        return node_to_string(marked), binding

    def _nested_template(self, node: Node, state: BuildState) -> Template:
        root = node.without_attributes(EACH_DIRECTIVE, IF_DIRECTIVE)
        root.is_root = True
        root.parent = None
        return self.build_template(root, state.nested())

    def _each_binding(self, node: Node, selector: Optional[str], state: BuildState) -> Binding:
        source = directive_expression(node, EACH_DIRECTIVE)
        match = EACH_EXPRESSION.match(source)
        item_name = index_name = None
        if match:
            item_name, index_name, source = match.groups()

        return Binding(
            type=BindingType.EACH,
            selector=selector,
            evaluate=source.strip(),
            condition=directive_expression(node, IF_DIRECTIVE) or None,
            item_name=item_name,
            index_name=index_name,
            template=self._nested_template(node, state),
        )

    def _if_binding(self, node: Node, selector: Optional[str], state: BuildState) -> Binding:
        return Binding(
            type=BindingType.IF,
            selector=selector,
            evaluate=directive_expression(node, IF_DIRECTIVE),
            template=self._nested_template(node, state),
        )

    def _tag_binding(self, node: Node, selector: Optional[str], state: BuildState) -> Binding:
        component = directive_expression(node, IS_DIRECTIVE) or node.name
        return Binding(
            type=BindingType.TAG,
            selector=selector,
            component=component,
            expressions=attribute_expressions(node) + text_expressions(node),
        )

    def _simple_binding(self, node: Node, selector: Optional[str], state: BuildState) -> Binding:
        return Binding(
            type=BindingType.SIMPLE,
            selector=selector,
            expressions=attribute_expressions(node) + text_expressions(node),
        )


def build(node: Node, state: Optional[BuildState] = None) -> Tuple[str, List[Binding]]:
    """Build with a fresh ``TemplateBuilder``; numbering continues in ``state``."""
    return TemplateBuilder().build(node, state)


def build_template(node: Node) -> Template:
    return TemplateBuilder().build_template(node)
