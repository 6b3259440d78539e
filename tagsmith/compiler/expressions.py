"""
Tagsmith Expressions
====================

Extraction and restoration of bracketed expressions.

Before markup is normalized, every ``{ expr }`` is moved into an
``ExpressionPool`` and replaced by a placeholder: the reserved character
``\\x01``, the pool index and the closing bracket. Tag and whitespace
rewriting then never sees expression text. ``restore_expressions`` puts the
expressions back at the end.

Example:
    pool = ExpressionPool(Brackets.from_string())
    text = split_expressions('<p class="{ cls }">{ name }</p>', pool)
    # '<p class="\\x010}">\\x011}</p>'
    restore_expressions(text, pool)
    # '<p class="{cls}">{name}</p>'
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Iterator, List, Optional, Tuple

from tagsmith.compiler.brackets import Brackets
from tagsmith.compiler.scanner import PAIRS, skip_group, skip_literal

if TYPE_CHECKING:
    from tagsmith.compiler.options import CompilerOptions
    from tagsmith.compiler.preprocessors import PreprocessorRegistry

PLACEHOLDER = "\x01"

# Replaces double quotes inside restored expressions
QUOTE_MARK = "⁗"

PLACEHOLDER_RE = re.compile("\x01(\\d+)")

STRINGS_RE = re.compile(
    r""""[^"\\]*(?:\\[\s\S][^"\\]*)*"|'[^'\\]*(?:\\[\s\S][^'\\]*)*'"""
)

_NEWLINES = re.compile(r"[\r\n]+")


class ExpressionPool:
    """
    Ordered, append-only store of extracted expressions.

    One pool serves one compiled element; its indices are the numbers
    embedded in the placeholders.
    """

    def __init__(self, brackets: Optional[Brackets] = None) -> None:
        self.brackets = brackets or Brackets.from_string()
        self._expressions: List[str] = []

    def append(self, expr: str) -> int:
        """Store an expression and return its index."""
        self._expressions.append(expr)
        return len(self._expressions) - 1

    def placeholder(self, index: int) -> str:
        return f"{PLACEHOLDER}{index}{self.brackets.close}"

    def __getitem__(self, index: int) -> str:
        return self._expressions[index]

    def __len__(self) -> int:
        return len(self._expressions)

    def __iter__(self) -> Iterator[str]:
        return iter(self._expressions)

    def __repr__(self) -> str:
        return f"<ExpressionPool {self.brackets.pair!r} size={len(self)}>"


def has_placeholder(text: str) -> bool:
    """Check whether text holds at least one expression placeholder."""
    return PLACEHOLDER_RE.search(text) is not None


def find_open(text: str, pos: int, brackets: Brackets) -> int:
    """Index of the next unescaped opening bracket, or -1."""
    index = text.find(brackets.open, pos)
    while index > 0 and text[index - 1] == "\\":
        index = text.find(brackets.open, index + 1)
    return index


def find_close(text: str, pos: int, brackets: Brackets) -> int:
    """
    Index of the bracket closing an expression whose body starts at ``pos``.

    Nested ``()``, ``[]`` and ``{}`` groups and string literals are skipped.
    Returns -1 when the expression is never closed.
    """
    close = brackets.close
    length = len(text)

    while pos < length:
        if text[pos] == "\\" and text.startswith(close, pos + 1):
            pos += 1 + len(close)
            continue
        end = skip_literal(text, pos)
        if end is not None:
            pos = end
            continue
        c = text[pos]
        if c in PAIRS:
            pos = skip_group(text, pos + 1, c)
            if pos < 0:
                return -1
            continue
        if text.startswith(close, pos):
            return pos
        pos += 1

    return -1


def iter_expressions(text: str, brackets: Brackets) -> Iterator[Tuple[int, int, str]]:
    """
    Yield ``(start, end, body)`` for each expression in ``text``.

    ``start`` and ``end`` delimit the expression including its brackets;
    ``body`` has escaped brackets unescaped. Scanning stops at an opening
    bracket that is never closed.
    """
    pos = 0
    open_len = len(brackets.open)

    while True:
        begin = find_open(text, pos, brackets)
        if begin < 0:
            return
        close = find_close(text, begin + open_len, brackets)
        if close < 0:
            return
        pos = close + len(brackets.close)
        yield begin, pos, brackets.unescape.sub(r"\1", text[begin + open_len:close])


def split_template(text: str, brackets: Brackets) -> List[str]:
    """
    Split text into alternating literal and expression parts.

    Even indices are literal text, odd indices are expression bodies. An
    opening bracket that is never closed is left in the last literal part.
    """
    parts: List[str] = []
    start = 0

    for begin, end, body in iter_expressions(text, brackets):
        parts.append(text[start:begin])
        parts.append(body)
        start = end

    parts.append(text[start:])
    return parts


def split_expressions(
    text: str,
    pool: ExpressionPool,
    options: Optional["CompilerOptions"] = None,
    registry: Optional["PreprocessorRegistry"] = None,
) -> str:
    """
    Move every expression in ``text`` into ``pool``.

    An expression starting with ``^`` only loses the marker. Other
    expressions are run through the script preprocessor when
    ``options.expr`` is set together with a script type; a leading ``=``
    (unescaped output) is kept out of the transform and put back afterwards.

    Args:
        text: Markup or attribute text
        pool: Pool receiving the expressions
        options: Compiler options
        registry: Preprocessors for the expression transform

    Returns:
        Text with placeholders in place of expressions
    """
    if not text or pool.brackets.open not in text:
        return text

    parts = split_template(text, pool.brackets)
    if len(parts) == 1:
        return text

    transform = options is not None and options.transforms_expressions

    for i in range(1, len(parts), 2):
        expr = parts[i]
        if expr.startswith("^"):
            expr = expr[1:]
        elif transform:
            expr = _transform(expr, options, registry)
        index = pool.append(_NEWLINES.sub(" ", expr).strip())
        parts[i] = pool.placeholder(index)

    return "".join(parts)


def _transform(
    expr: str,
    options: "CompilerOptions",
    registry: Optional["PreprocessorRegistry"],
) -> str:
    from tagsmith.compiler.javascript import compile_js

    raw = expr.startswith("=")
    if raw:
        expr = expr[1:]

    expr = compile_js(expr, options, registry=registry).strip()
    if expr.endswith(";"):
        expr = expr[:-1]

    return "=" + expr if raw else expr


def _escape_tags(match: "re.Match[str]") -> str:
    return match.group().replace("<", "&lt;").replace(">", "&gt;")


def restore_expressions(text: str, pool: ExpressionPool) -> str:
    """
    Replace placeholders with the expressions they stand for.

    The closing bracket is already part of the placeholder. Unescaped (``=``)
    expressions get ``<`` and ``>`` inside string literals entity-encoded,
    and double quotes in any expression become ``QUOTE_MARK`` since the
    result may sit inside a double-quoted attribute.
    """
    if not len(pool):
        return text

    opener = pool.brackets.open

    def restore(match: "re.Match[str]") -> str:
        expr = pool[int(match.group(1))]
        if expr.startswith("="):
            expr = STRINGS_RE.sub(_escape_tags, expr)
        return opener + expr.replace('"', QUOTE_MARK)

    return PLACEHOLDER_RE.sub(restore, text)
