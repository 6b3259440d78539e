"""
Tagsmith Template Nodes
=======================

Node tree consumed by the binding builder. A tree is produced by a markup
parser (see ``tagsmith.template.parser``) and describes one component
template: tag nodes with attributes and children, and text nodes.

Expressions found in attribute values and text are recorded on the
attribute or text node, so the builder never has to re-scan text.

Directive attributes:
    each="{ item, i in items }"  - repeat the node for every item
    if="{ visible }"             - mount the node conditionally
    is="todo-item"               - mount a plain tag as a component
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from html import escape as html_escape
from typing import Any, Dict, List, Optional

EACH_DIRECTIVE = "each"
IF_DIRECTIVE = "if"
IS_DIRECTIVE = "is"

VOID_TAGS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input", "keygen",
    "link", "meta", "param", "source", "track", "wbr",
})


class NodeType(Enum):
    """Template node types."""
    TAG = auto()
    TEXT = auto()


@dataclass
class Expression:
    """
    One expression embedded in text or an attribute value.

    ``start`` and ``end`` delimit the expression, brackets included, in the
    text that holds it.
    """
    text: str
    start: int = 0
    end: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "start": self.start, "end": self.end}


@dataclass
class Attribute:
    """A tag attribute; ``value`` is None for bare attributes."""
    name: str
    value: Optional[str] = None
    expressions: List[Expression] = field(default_factory=list)

    @property
    def has_expressions(self) -> bool:
        return bool(self.expressions)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "value": self.value}
        if self.expressions:
            data["expressions"] = [e.to_dict() for e in self.expressions]
        return data


@dataclass
class Node:
    """
    Template node.

    Attributes:
        type: Tag or text
        name: Lower-cased tag name (tag nodes)
        attributes: Attributes in source order (tag nodes)
        children: Child nodes in source order (tag nodes)
        text: Raw text (text nodes)
        expressions: Expressions found in ``text`` (text nodes)
        parent: Enclosing tag node, None for the root
        start: Source offset where the node begins
        end: Source offset after the node
        is_root: Top-level node of the template
        is_self_closing: Written as ``<name/>``
        is_void: HTML void element
    """
    type: NodeType
    name: Optional[str] = None
    attributes: List[Attribute] = field(default_factory=list)
    children: List["Node"] = field(default_factory=list)
    text: Optional[str] = None
    expressions: List[Expression] = field(default_factory=list)
    parent: Optional["Node"] = field(default=None, repr=False, compare=False)
    start: int = 0
    end: int = 0
    is_root: bool = False
    is_self_closing: bool = False
    is_void: bool = False

    @classmethod
    def tag(cls, name: str, *attributes: Attribute, **kwargs: Any) -> "Node":
        """Create a tag node."""
        name = name.lower()
        kwargs.setdefault("is_void", name in VOID_TAGS)
        return cls(type=NodeType.TAG, name=name, attributes=list(attributes), **kwargs)

    @classmethod
    def text_node(cls, text: str, expressions: Optional[List[Expression]] = None, **kwargs: Any) -> "Node":
        """Create a text node."""
        return cls(type=NodeType.TEXT, text=text, expressions=list(expressions or []), **kwargs)

    @property
    def is_text(self) -> bool:
        return self.type is NodeType.TEXT

    @property
    def is_tag(self) -> bool:
        return self.type is NodeType.TAG

    def add_child(self, child: "Node") -> "Node":
        """Append a child and link it to this node."""
        child.parent = self
        self.children.append(child)
        return child

    def get_attribute(self, name: str) -> Optional[Attribute]:
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute
        return None

    def has_attribute(self, name: str) -> bool:
        return self.get_attribute(name) is not None

    def without_attributes(self, *names: str) -> "Node":
        """Shallow copy without the named attributes."""
        return replace(
            self,
            attributes=[a for a in self.attributes if a.name not in names],
        )

    def find_by_name(self, name: str) -> List["Node"]:
        """Find all descendant tag nodes with the given name."""
        results = []
        if self.name == name:
            results.append(self)
        for child in self.children:
            results.extend(child.find_by_name(name))
        return results

    def to_dict(self) -> Dict[str, Any]:
        """Convert node to dictionary representation."""
        if self.is_text:
            data: Dict[str, Any] = {"type": "text", "text": self.text}
            if self.expressions:
                data["expressions"] = [e.to_dict() for e in self.expressions]
            return data
        return {
            "type": "tag",
            "name": self.name,
            "attributes": [a.to_dict() for a in self.attributes],
            "children": [c.to_dict() for c in self.children],
        }


def has_expressions(node: Node) -> bool:
    """
    Check whether a node carries expressions of its own.

    A tag node counts its attributes and its direct text children: the text
    of a tag is updated through the tag's binding.
    """
    if node.expressions:
        return True
    if any(a.has_expressions for a in node.attributes):
        return True
    return any(c.is_text and c.expressions for c in node.children)


def has_each(node: Node) -> bool:
    return node.has_attribute(EACH_DIRECTIVE)


def has_if(node: Node) -> bool:
    return node.has_attribute(IF_DIRECTIVE)


def has_own_template(node: Node) -> bool:
    """Loops and conditionals render their children from a nested template."""
    return has_each(node) or has_if(node)


def is_custom(node: Node) -> bool:
    """Hyphenated tags and tags with an ``is`` attribute are components."""
    if not node.is_tag:
        return False
    return "-" in (node.name or "") or node.has_attribute(IS_DIRECTIVE)


def is_void(node: Node) -> bool:
    return node.is_void or node.is_self_closing or node.name in VOID_TAGS


def is_static(node: Node) -> bool:
    """A static node renders the same markup on every update."""
    if node.is_text:
        return not node.expressions
    return not (has_expressions(node) or has_own_template(node) or is_custom(node))


def attribute_to_string(attribute: Attribute) -> str:
    if attribute.value is None:
        return attribute.name
    return f'{attribute.name}="{html_escape(attribute.value)}"'


def open_tag(node: Node) -> str:
    """
    Opening markup of a tag node.

    Only attributes without expressions are written; dynamic attributes are
    set by the bindings at runtime.
    """
    attrs = " ".join(
        attribute_to_string(a) for a in node.attributes if not a.has_expressions
    )
    head = f"{node.name} {attrs}" if attrs else node.name
    return f"<{head}/>" if is_void(node) else f"<{head}>"


def close_tag(node: Node) -> str:
    return f"</{node.name}>"


def node_to_string(node: Node) -> str:
    """Markup emitted for a node before its children."""
    if node.is_text:
        # Dynamic text is a placeholder filled by the parent's binding
        return " " if node.expressions else node.text or ""
    return open_tag(node)
