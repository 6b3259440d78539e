"""
Tagsmith HTML Normalizer
========================

Compiles the markup of a custom element into the compact form stored in the
generated code:

- HTML comments removed, quoted strings untouched
- tag names lower-cased, attributes normalized
- ``<div/>`` expanded to ``<div></div>``, void elements left as ``<br>``
- whitespace collapsed outside ``<pre>`` blocks
- expressions kept verbatim (extracted first, restored last)

Example:
    compile_html("<DIV class='a'>\\n  <input/> { name }\\n</Div>")
    # '<div class="a"> <input> {name} </div>'
"""

from __future__ import annotations

import re
from typing import Optional

from tagsmith.compiler.attributes import parse_attributes
from tagsmith.compiler.expressions import (
    ExpressionPool,
    restore_expressions,
    split_expressions,
)
from tagsmith.compiler.options import CompilerOptions
from tagsmith.compiler.preprocessors import PreprocessorRegistry

VOID_TAGS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input", "keygen",
    "link", "meta", "param", "source", "track", "wbr",
})

# Comments, or strings whose content must survive comment removal
HTML_COMMENT = re.compile(
    r"""<!--(?!>)[\s\S]*?-->|"(?:[^"\n\\]|\\[\s\S])*"|'(?:[^'\n\\]|\\[\s\S])*'"""
)

HTML_TAGS = re.compile(r"""<([-\w]+)(\s+(?:[^"'/>]|"[^"]*"|'[^']*'|/[^>])*)?(/?)>""")

CLOSE_TAGS = re.compile(r"</([-\w]+)\s*>")

PRE_TAG = re.compile(r"""<pre(?:\s+(?:[^">]|"[^"]*")*)?>[\s\S]+?</pre\s*>""", re.I)

HAS_PRE = re.compile(r"<pre[\s>]")

TRIM_TRAIL = re.compile(r"[ \t]+$", re.M)

COMPACT_TAGS = re.compile(r">[ \t]+<([-\w/])")

_WHITESPACE = re.compile(r"\s+")

# Stands in for a <pre> block while whitespace is collapsed
PRE_MARK = "\x02"


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def strip_html_comments(text: str) -> str:
    """Remove ``<!-- -->`` comments without touching quoted strings."""
    return HTML_COMMENT.sub(lambda m: "" if m.group()[0] == "<" else m.group(), text)


def _normalize_tag(match: "re.Match[str]", pool: ExpressionPool) -> str:
    name = match.group(1).lower()
    attrs = match.group(2)
    ends = ""

    if match.group(3) and name not in VOID_TAGS:
        ends = f"></{name}"
    if attrs:
        name = f"{name} {parse_attributes(attrs, pool)}"

    return f"<{name}{ends}>"


def _collapse_whitespace(html: str) -> str:
    if not HAS_PRE.search(html):
        return _WHITESPACE.sub(" ", html.strip())

    blocks = []

    def hold(match: "re.Match[str]") -> str:
        blocks.append(match.group())
        return PRE_MARK

    html = _WHITESPACE.sub(" ", PRE_TAG.sub(hold, html).strip())
    held = iter(blocks)
    return re.sub(PRE_MARK, lambda _: next(held), html)


def compile_markup(
    html: str,
    options: CompilerOptions,
    pool: ExpressionPool,
    registry: Optional[PreprocessorRegistry] = None,
) -> str:
    """
    Normalize markup that is already free of comments.

    Used by the element compiler, which strips comments from the whole body
    before splitting it.
    """
    html = split_expressions(html, pool, options, registry)
    html = TRIM_TRAIL.sub("", html)
    html = HTML_TAGS.sub(lambda m: _normalize_tag(m, pool), html)
    html = CLOSE_TAGS.sub(lambda m: f"</{m.group(1).lower()}>", html)

    if not options.whitespace:
        html = _collapse_whitespace(html)

    if options.compact:
        html = COMPACT_TAGS.sub(r"><\1", html)

    return restore_expressions(html, pool)


def compile_html(
    html: str,
    options: Optional[CompilerOptions] = None,
    pool: Optional[ExpressionPool] = None,
    registry: Optional[PreprocessorRegistry] = None,
) -> str:
    """
    Compile a markup fragment.

    Args:
        html: Markup source
        options: Compiler options (brackets, whitespace, compact, expr)
        pool: Expression pool to share with other parts of one element
        registry: Preprocessors used for expression transforms

    Returns:
        Normalized markup
    """
    options = options or CompilerOptions()
    if pool is None:
        pool = ExpressionPool(options.get_brackets())

    html = strip_html_comments(normalize_newlines(html))
    return compile_markup(html, options, pool, registry)
