"""
Tagsmith Markup Parser
======================

Default markup parser feeding the binding builder. It reads the
well-formed subset of HTML used in component templates and returns the
single root node of the template.

Example:
    root = MarkupParser().parse('<ul><li each="{ item in items }">{ item }</li></ul>')
    root.children[0].get_attribute("each").expressions[0].text
    # 'item in items'

Attribute values holding expressions must be quoted.
"""

from __future__ import annotations

import bisect
from html.parser import HTMLParser
from typing import List, Optional, Tuple

from tagsmith.compiler.brackets import Brackets
from tagsmith.compiler.errors import TemplateSyntaxError
from tagsmith.compiler.expressions import iter_expressions
from tagsmith.template.nodes import VOID_TAGS, Attribute, Expression, Node
from tagsmith.utils.logger import get_logger

logger = get_logger("tagsmith.parser")


class MarkupParser(HTMLParser):
    """
    Builds a node tree from template markup.

    Character and entity references are kept verbatim in text. Comments are
    dropped. Closing tags must match the innermost open tag.
    """

    def __init__(self, brackets: Optional[Brackets] = None) -> None:
        super().__init__(convert_charrefs=False)
        self.brackets = brackets or Brackets.from_string()
        self._init_state("")

    def _init_state(self, source: str) -> None:
        self._source = source
        self._line_starts = [0]
        for index, char in enumerate(source):
            if char == "\n":
                self._line_starts.append(index + 1)
        self._stack: List[Node] = []
        self._roots: List[Node] = []
        self._text: List[str] = []
        self._text_start = 0

    def parse(self, source: str) -> Node:
        """
        Parse a template.

        Args:
            source: Template markup with exactly one top-level element

        Returns:
            The root node

        Raises:
            TemplateSyntaxError: Unbalanced tags, stray text or not exactly
                one root element
        """
        self.reset()
        self._init_state(source)
        self.feed(source)
        self.close()
        self._flush_text()

        if self._stack:
            node = self._stack[-1]
            raise TemplateSyntaxError(f"Unclosed tag <{node.name}>", *self._line_col(node.start))
        if not self._roots:
            raise TemplateSyntaxError("Template has no root element")
        if len(self._roots) > 1:
            extra = self._roots[1]
            raise TemplateSyntaxError(
                "Template must have a single root element",
                *self._line_col(extra.start),
            )

        root = self._roots[0]
        root.is_root = True
        logger.debug("Parsed template", root=root.name)
        return root

    # Positions

    def _offset(self) -> int:
        line, column = self.getpos()
        return self._line_starts[line - 1] + column

    def _line_col(self, offset: int) -> Tuple[int, int]:
        line = bisect.bisect_right(self._line_starts, offset)
        return line, offset - self._line_starts[line - 1] + 1

    # Tree building

    def _expressions(self, text: Optional[str]) -> List[Expression]:
        if not text or self.brackets.open not in text:
            return []
        return [
            Expression(body.strip(), start, end)
            for start, end, body in iter_expressions(text, self.brackets)
        ]

    def _append(self, node: Node) -> None:
        if self._stack:
            self._stack[-1].add_child(node)
        else:
            self._roots.append(node)

    def _flush_text(self) -> None:
        if not self._text:
            return
        text = "".join(self._text)
        self._text = []

        if not self._stack:
            if text.strip():
                raise TemplateSyntaxError(
                    "Text outside the root element",
                    *self._line_col(self._text_start),
                )
            return

        self._append(Node.text_node(
            text,
            self._expressions(text),
            start=self._text_start,
            end=self._text_start + len(text),
        ))

    def _add_text(self, text: str) -> None:
        if not self._text:
            self._text_start = self._offset()
        self._text.append(text)

    def _start(self, tag: str, attrs: List[Tuple[str, Optional[str]]], self_closing: bool) -> Node:
        self._flush_text()
        start = self._offset()
        raw = self.get_starttag_text() or ""
        node = Node.tag(
            tag,
            *(Attribute(name, value, self._expressions(value)) for name, value in attrs),
            start=start,
            end=start + len(raw),
            is_self_closing=self_closing,
        )
        self._append(node)
        return node

    # HTMLParser callbacks

    def handle_starttag(self, tag, attrs):
        node = self._start(tag, attrs, self_closing=False)
        if tag not in VOID_TAGS:
            self._stack.append(node)

    def handle_startendtag(self, tag, attrs):
        self._start(tag, attrs, self_closing=True)

    def handle_endtag(self, tag):
        self._flush_text()
        offset = self._offset()

        if tag in VOID_TAGS:
            return
        if not self._stack or self._stack[-1].name != tag:
            expected = f"</{self._stack[-1].name}>" if self._stack else "end of template"
            raise TemplateSyntaxError(
                f"Mismatched tags: expected {expected}, got </{tag}>",
                *self._line_col(offset),
            )

        node = self._stack.pop()
        node.end = self._source.find(">", offset) + 1

    def handle_data(self, data):
        self._add_text(data)

    def handle_entityref(self, name):
        self._add_text(f"&{name};")

    def handle_charref(self, name):
        self._add_text(f"&#{name};")

    def handle_comment(self, data):
        self._flush_text()


def parse_template(source: str, brackets: Optional[Brackets] = None) -> Node:
    """Parse template markup into its root node."""
    return MarkupParser(brackets).parse(source)
