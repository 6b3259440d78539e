"""
Tagsmith Brackets
=================

Expression delimiters. Expressions are written between an opening and a
closing bracket, ``{ expr }`` by default. A custom pair is configured as a
single string holding both brackets separated by one space::

    Brackets.from_string("[[ ]]")
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional, Pattern

from tagsmith.compiler.errors import BracketsError

DEFAULT_BRACKETS = "{ }"

# Characters that would clash with markup, attribute quoting or placeholders
_UNSUPPORTED = re.compile(r"[\x00-\x1F<>a-zA-Z0-9'\",;\\]")


@dataclass(frozen=True)
class Brackets:
    """
    An expression delimiter pair.

    Attributes:
        open: Opening bracket
        close: Closing bracket
        pair: The configured string, passed on to the generated code
    """
    open: str = "{"
    close: str = "}"
    pair: str = DEFAULT_BRACKETS
    unescape: Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        chars = "".join(sorted(set(self.open + self.close)))
        object.__setattr__(
            self, "unescape", re.compile(r"\\([" + re.escape(chars) + r"])")
        )

    @classmethod
    def from_string(cls, pair: Optional[str] = None) -> "Brackets":
        """
        Parse a bracket pair such as ``"{ }"`` or ``"[% %]"``.

        Raises:
            BracketsError: If the pair is malformed or uses reserved characters
        """
        return _parse(pair or DEFAULT_BRACKETS)

    @property
    def is_default(self) -> bool:
        return self.pair == DEFAULT_BRACKETS

    def wrap(self, expr: str) -> str:
        """Surround an expression with this pair."""
        return f"{self.open}{expr}{self.close}"


@lru_cache(maxsize=32)
def _parse(pair: str) -> Brackets:
    parts = pair.split(" ")
    if len(parts) != 2 or not all(parts) or _UNSUPPORTED.search(pair):
        raise BracketsError(pair)
    return Brackets(open=parts[0], close=parts[1], pair=pair)
