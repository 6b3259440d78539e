"""
Tagsmith CSS Compiler
=====================

Minifies component styles and, for scoped styles, confines every selector
to the component. A scoped selector is emitted twice: once under the tag
name and once under the ``riot-tag`` marker attribute the runtime sets on
plain elements mounted as the component::

    scoped_css("my-tag", "h1 { color: red }")
    # 'my-tag h1,[riot-tag="my-tag"] h1 { color: red }'

``:scope`` in a selector stands for the component root itself.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from tagsmith.compiler.errors import PreprocessorNotFoundError, ScopedCSSError
from tagsmith.compiler.preprocessors import PreprocessorRegistry
from tagsmith.compiler.scanner import skip_string
from tagsmith.utils.logger import get_logger

SCOPE = ":scope"

OWNER_ATTR = "riot-tag"

CSS_QUOTES = "\"'"

CSS_COMMENTS = re.compile(r"/\*[^*]*\*+(?:[^*/][^*]*\*+)*/")

KEYFRAME_STOPS = ("from", "to")

_WHITESPACE = re.compile(r"\s+")

logger = get_logger("tagsmith.css")


def split_selectors(group: str) -> List[str]:
    """Split a selector group on commas outside strings and brackets."""
    parts: List[str] = []
    depth = 0
    start = pos = 0
    while pos < len(group):
        c = group[pos]
        if c in CSS_QUOTES:
            pos = skip_string(group, pos)
            continue
        if c in "([":
            depth += 1
        elif c in ")]" and depth:
            depth -= 1
        elif c == "," and not depth:
            parts.append(group[start:pos])
            start = pos + 1
        pos += 1
    parts.append(group[start:])
    return parts


def scope_selector(tag: str, selector: str) -> str:
    if not selector or selector in KEYFRAME_STOPS or selector.endswith("%"):
        return selector
    if SCOPE not in selector:
        selector = f"{SCOPE} {selector}"
    return (
        selector.replace(SCOPE, tag, 1)
        + ","
        + selector.replace(SCOPE, f'[{OWNER_ATTR}="{tag}"]', 1)
    )


def _scope_prelude(tag: str, prelude: str) -> str:
    group = prelude.strip()
    if not group or group.startswith("@"):
        return prelude
    lead = prelude[:len(prelude) - len(prelude.lstrip())]
    trail = prelude[len(prelude.rstrip()):]
    scoped = ",".join(scope_selector(tag, s.strip()) for s in split_selectors(group))
    return lead + scoped + trail


def scoped_css(tag: str, style: str) -> str:
    """
    Prefix every selector of a minified stylesheet with the component.

    The text before each ``{`` outside a string is a selector group, unless
    it is an at-rule prelude. Declarations and strings are copied as they
    are.

    Args:
        tag: Owning tag name
        style: Stylesheet with comments removed and whitespace collapsed

    Returns:
        Scoped stylesheet
    """
    out: List[str] = []
    start = pos = 0
    while pos < len(style):
        c = style[pos]
        if c in CSS_QUOTES:
            pos = skip_string(style, pos)
            continue
        if c == "{":
            out.append(_scope_prelude(tag, style[start:pos]))
            out.append("{")
            start = pos + 1
        elif c in "};":
            out.append(style[start:pos + 1])
            start = pos + 1
        pos += 1

    out.append(style[start:])
    return "".join(out)


def compile_css(
    style: str,
    tag_name: Optional[str] = None,
    type: Optional[str] = None,
    scoped: bool = False,
    parser_options: Optional[Dict[str, Any]] = None,
    url: str = "",
    registry: Optional[PreprocessorRegistry] = None,
) -> str:
    """
    Compile a stylesheet.

    Args:
        style: Stylesheet source
        tag_name: Owning tag, required when scoped
        type: Style language; ``scoped-css`` forces scoping, ``css`` is plain
        scoped: Scope selectors to the tag
        parser_options: Options for the style preprocessor
        url: Source location passed to the preprocessor
        registry: Preprocessors to look the language up in

    Returns:
        Minified, optionally scoped stylesheet

    Raises:
        PreprocessorNotFoundError: Unknown style language
        ScopedCSSError: Scoping requested without a tag name
    """
    if type:
        registry = registry or PreprocessorRegistry()
        if type == "scoped-css":
            scoped = True
        elif registry.has("css", type):
            options = dict(parser_options or {})
            options.setdefault("tag_name", tag_name)
            style = registry.run("css", type, style, options, url)
        elif type != "css":
            raise PreprocessorNotFoundError("css", type)

    style = _WHITESPACE.sub(" ", CSS_COMMENTS.sub("", style)).strip()

    if scoped:
        if not tag_name:
            raise ScopedCSSError("Can not parse scoped CSS without a tagName")
        style = scoped_css(tag_name, style)
        logger.debug("Scoped stylesheet", tag=tag_name)

    return style
