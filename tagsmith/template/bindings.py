"""
Tagsmith Binding Descriptors
============================

Binding descriptors tell a runtime where a dynamic node sits in the static
skeleton and what to keep up to date on it. Every dynamic node is given a
selector attribute (``expr0``, ``expr1``, ...) in the skeleton; the root
node of a template is addressed directly and has no selector.

Kinds, in classification priority:
    each   - repeat a nested template for every item of a collection
    if     - mount a nested template while a condition holds
    tag    - mount a child component
    simple - update attributes, event handlers and text of a plain node
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class BindingType(Enum):
    """Binding kinds."""
    EACH = "each"
    IF = "if"
    TAG = "tag"
    SIMPLE = "simple"


class ExpressionType(Enum):
    """What a binding expression updates."""
    ATTRIBUTE = "attribute"
    EVENT = "event"
    VALUE = "value"
    TEXT = "text"


@dataclass
class BindingExpression:
    """
    One live value of a binding.

    ``evaluate`` is the script to evaluate; values mixing literal text and
    expressions are joined into a single script array expression.
    """
    type: ExpressionType
    evaluate: str
    name: Optional[str] = None
    child_node_index: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type.value, "evaluate": self.evaluate}
        if self.name is not None:
            data["name"] = self.name
        if self.child_node_index is not None:
            data["childNodeIndex"] = self.child_node_index
        return data


@dataclass
class Template:
    """Static skeleton plus the bindings attached to it."""
    html: str
    bindings: List["Binding"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "html": self.html,
            "bindings": [b.to_dict() for b in self.bindings],
        }


@dataclass
class Binding:
    """
    Dynamic binding descriptor.

    Attributes:
        type: Binding kind
        selector: Attribute selector of the node, None for the root
        expressions: Attribute, event, value and text expressions
        evaluate: Collection (each) or condition (if)
        condition: Filter applied to each item (each combined with if)
        item_name: Loop variable (each)
        index_name: Loop index variable (each)
        component: Component name (tag)
        template: Nested template (each, if)
    """
    type: BindingType
    selector: Optional[str] = None
    expressions: List[BindingExpression] = field(default_factory=list)
    evaluate: Optional[str] = None
    condition: Optional[str] = None
    item_name: Optional[str] = None
    index_name: Optional[str] = None
    component: Optional[str] = None
    template: Optional[Template] = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready record; unset fields are left out."""
        data: Dict[str, Any] = {"type": self.type.value}
        if self.selector is not None:
            data["selector"] = self.selector
        optional = {
            "evaluate": self.evaluate,
            "condition": self.condition,
            "itemName": self.item_name,
            "indexName": self.index_name,
            "component": self.component,
        }
        data.update((k, v) for k, v in optional.items() if v is not None)
        if self.expressions:
            data["expressions"] = [e.to_dict() for e in self.expressions]
        if self.template is not None:
            data["template"] = self.template.to_dict()
        return data
