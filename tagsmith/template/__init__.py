"""
Tagsmith Template Module
========================

Binding trees for component templates.

Components:
- Nodes: Template node model
- Parser: Default markup parser producing node trees
- Bindings: Binding descriptors
- Builder: Turns node trees into skeletons and bindings
"""

from tagsmith.template.nodes import Node, NodeType, Attribute, Expression
from tagsmith.template.parser import MarkupParser, parse_template
from tagsmith.template.bindings import (
    Binding,
    BindingExpression,
    BindingType,
    ExpressionType,
    Template,
)
from tagsmith.template.builder import BuildState, TemplateBuilder, build, build_template

__all__ = [
    "Node",
    "NodeType",
    "Attribute",
    "Expression",
    "MarkupParser",
    "parse_template",
    "Binding",
    "BindingExpression",
    "BindingType",
    "ExpressionType",
    "Template",
    "BuildState",
    "TemplateBuilder",
    "build",
    "build_template",
]
