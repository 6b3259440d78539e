"""
Tagsmith Source Scanner
=======================

Character-level helpers shared by the expression tokenizer and the script
rewriter. They track quote and bracket state explicitly, so every scan moves
forward and stops at the end of its input, even on unbalanced text.

All functions take the text and a start offset and return the offset just
past whatever they skipped. Unterminated strings and regexes consume the
rest of the input; an unclosed bracket group is reported as -1.
"""

from __future__ import annotations

import re
from typing import Optional

QUOTES = "\"'`"

# Closing character for each nesting opener
PAIRS = {
    "(": ")",
    "[": "]",
    "{": "}",
}

# Words after which a slash starts a regular expression, not a division
REGEX_PREFIX_WORDS = {"return", "typeof", "case", "in", "of", "void", "delete"}

_WORD_BEFORE = re.compile(r"([$\w]+)\s*$")


def skip_string(text: str, pos: int) -> int:
    """Skip the quoted string starting at ``pos``."""
    quote = text[pos]
    pos += 1
    length = len(text)

    while pos < length:
        c = text[pos]
        if c == "\\":
            pos += 2
            continue
        if c == quote:
            return pos + 1
        if c == "\n" and quote != "`":
            # Plain strings cannot span lines
            return pos
        pos += 1

    return length


def is_regex_start(text: str, pos: int) -> bool:
    """
    Decide whether the slash at ``pos`` opens a regular expression literal.

    A slash following a value (identifier, number, closing bracket or a
    postfix ``++``/``--``) is a division operator.
    """
    if text[pos + 1:pos + 2] in ("*", "/"):
        return False

    back = pos - 1
    while back >= 0 and text[back] in " \t\r\n":
        back -= 1
    if back < 0:
        return True

    prev = text[back]
    if prev in ")]":
        return False
    if text[back - 1:back + 1] in ("++", "--"):
        return False
    if prev.isalnum() or prev in "$_":
        match = _WORD_BEFORE.search(text, 0, back + 1)
        return bool(match and match.group(1) in REGEX_PREFIX_WORDS)
    return True


def skip_regex(text: str, pos: int) -> int:
    """
    Skip the regular expression literal starting at ``pos``.

    Returns ``pos + 1`` when no closing slash exists on the same line, so the
    slash is then read as an ordinary character.
    """
    i = pos + 1
    length = len(text)
    in_class = False

    while i < length:
        c = text[i]
        if c == "\\":
            i += 2
            continue
        if c == "\n":
            return pos + 1
        if in_class:
            if c == "]":
                in_class = False
        elif c == "[":
            in_class = True
        elif c == "/":
            i += 1
            while i < length and text[i].isalpha():
                i += 1
            return i
        i += 1

    return pos + 1


def skip_literal(text: str, pos: int) -> Optional[int]:
    """Skip a string or regex literal at ``pos``; None if there is none."""
    c = text[pos]
    if c in QUOTES:
        return skip_string(text, pos)
    if c == "/" and is_regex_start(text, pos):
        end = skip_regex(text, pos)
        if end > pos + 1:
            return end
    return None


def skip_group(text: str, pos: int, opener: str) -> int:
    """
    Skip past the bracket that closes ``opener``, scanning from ``pos``.

    Only brackets of the same type change the depth; literals are skipped.
    Returns -1 when the group is never closed.
    """
    closer = PAIRS[opener]
    depth = 1
    length = len(text)

    while pos < length:
        end = skip_literal(text, pos)
        if end is not None:
            pos = end
            continue
        c = text[pos]
        pos += 1
        if c == opener:
            depth += 1
        elif c == closer:
            depth -= 1
            if not depth:
                return pos

    return -1


def strip_comments(code: str) -> str:
    """
    Replace script comments with a single space each.

    Strings and regex literals are copied untouched. Offsets in the result do
    not line up with the input.
    """
    out = []
    pos = 0
    start = 0
    length = len(code)

    while pos < length:
        c = code[pos]
        if c == "/" and code[pos + 1:pos + 2] == "*":
            end = code.find("*/", pos + 2)
            end = length if end < 0 else end + 2
        elif c == "/" and code[pos + 1:pos + 2] == "/":
            end = pos + 2
            while end < length and code[end] not in "\r\n":
                end += 1
        else:
            end = skip_literal(code, pos)
            pos = pos + 1 if end is None else end
            continue

        out.append(code[start:pos])
        out.append(" ")
        pos = start = end

    out.append(code[start:])
    return "".join(out)
