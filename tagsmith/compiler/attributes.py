"""
Tagsmith Attribute Parser
=========================

Normalizes the attribute text of one tag. Runs on text where expressions
have already been replaced by placeholders.
"""

from __future__ import annotations

import re
from typing import List, Optional

from tagsmith.compiler.expressions import ExpressionPool, has_placeholder

# Rendered by the runtime only once the expression has a value
BOOL_ATTRS = frozenset({
    "allowfullscreen", "autofocus", "autoplay", "checked", "compact",
    "controls", "default", "disabled", "formnovalidate", "hidden", "ismap",
    "itemscope", "loop", "multiple", "muted", "no", "noresize", "noshade",
    "novalidate", "nowrap", "open", "readonly", "required", "reversed",
    "seamless", "selected", "sortable", "truespeed", "typemustmatch",
})

# Attributes the browser acts on as soon as they are set
RUNTIME_ATTRS = frozenset({"style", "src", "d"})

BOOL_PREFIX = "__"
RUNTIME_PREFIX = "riot-"

HTML_ATTR = re.compile(r""" ?([-\w:\xA0-\xFF]+) ?(?:= ?('[^']*'|"[^"]*"|\S+))?""")

SPEC_TYPES = re.compile(r'^"(?:number|date(?:time)?|time|month|email|color)\b', re.I)

_WHITESPACE = re.compile(r"\s+")

DQ = '"'


def parse_attributes(text: str, pool: Optional[ExpressionPool] = None) -> str:
    """
    Normalize attributes to ``name="value"`` pairs separated by one space.

    Names are lower-cased, values double-quoted, valueless attributes kept
    as they are. Dynamic values (holding a placeholder) rename boolean
    attributes with ``__`` and style/src/d with ``riot-``. A special input
    ``type`` is moved last; when the ``value`` attribute is dynamic the type
    is turned into an expression so the browser does not validate the
    placeholder.

    Args:
        text: Raw attribute text
        pool: Pool of the element, providing the active brackets

    Returns:
        Normalized attribute text
    """
    pool = pool or ExpressionPool()
    attrs: List[str] = []
    input_type = None
    dynamic_value = False

    for match in HTML_ATTR.finditer(_WHITESPACE.sub(" ", text)):
        name = match.group(1).lower()
        value = match.group(2)

        if not value:
            attrs.append(name)
            continue

        if value[0] != DQ:
            value = DQ + (value[1:-1] if value[0] == "'" else value) + DQ

        if name == "type" and SPEC_TYPES.match(value):
            input_type = value
            continue

        if has_placeholder(value):
            if name == "value":
                dynamic_value = True
            elif name in BOOL_ATTRS:
                name = BOOL_PREFIX + name
            elif name in RUNTIME_ATTRS:
                name = RUNTIME_PREFIX + name

        attrs.append(f"{name}={value}")

    if input_type:
        if dynamic_value:
            input_type = DQ + pool.brackets.wrap(f"'{input_type[1:-1]}'") + DQ
        attrs.append(f"type={input_type}")

    return " ".join(attrs)
