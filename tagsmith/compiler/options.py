"""
Tagsmith Compiler Options
=========================

Options recognized by every compiler entry point.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, FrozenSet, Iterable, Optional

from tagsmith.compiler.brackets import Brackets

if TYPE_CHECKING:
    from tagsmith.core.config import Config

# Parts of a component that can be left out of the output
EXCLUDABLE = frozenset({"html", "css", "js", "attribs"})


@dataclass
class CompilerOptions:
    """
    Compiler options.

    Attributes:
        brackets: Custom expression brackets, e.g. ``"[ ]"``
        whitespace: Keep whitespace in markup as written
        compact: Remove whitespace between adjacent tags
        exclude: Component parts to leave empty (html, css, js, attribs)
        expr: Run markup expressions through the script preprocessor
        type: Default script language
        style: Default style language
        template: Template language of the whole source
        template_options: Options for the template preprocessor
        entities: Return component records instead of generated code
        parser: Script transform used instead of any registered one
    """
    brackets: Optional[str] = None
    whitespace: bool = False
    compact: bool = False
    exclude: FrozenSet[str] = frozenset()
    expr: bool = False
    type: Optional[str] = None
    style: Optional[str] = None
    template: Optional[str] = None
    template_options: Dict[str, Any] = field(default_factory=dict)
    entities: bool = False
    parser: Optional[Callable[..., str]] = None

    def __post_init__(self) -> None:
        self.exclude = split_exclude(self.exclude)
        unknown = self.exclude - EXCLUDABLE
        if unknown:
            raise ValueError(f"Unknown exclude option(s): {', '.join(sorted(unknown))}")

    def included(self, part: str) -> bool:
        """Check whether a component part should be compiled."""
        return part not in self.exclude

    def get_brackets(self) -> Brackets:
        return Brackets.from_string(self.brackets)

    @property
    def transforms_expressions(self) -> bool:
        """Markup expressions go through a script transform."""
        return bool(self.expr and (self.parser or self.type))

    @classmethod
    def from_config(cls, config: "Config", prefix: str = "compiler") -> "CompilerOptions":
        """
        Build options from the ``compiler`` section of a configuration.

        Example:
            config.set("compiler.compact", True)
            options = CompilerOptions.from_config(config)
        """
        return cls(
            brackets=config.get(f"{prefix}.brackets"),
            whitespace=config.get_bool(f"{prefix}.whitespace"),
            compact=config.get_bool(f"{prefix}.compact"),
            exclude=split_exclude(config.get(f"{prefix}.exclude")),
            expr=config.get_bool(f"{prefix}.expr"),
            type=config.get(f"{prefix}.type"),
            style=config.get(f"{prefix}.style"),
            template=config.get(f"{prefix}.template"),
            template_options=config.get(f"{prefix}.template_options") or {},
            entities=config.get_bool(f"{prefix}.entities"),
        )

    def replace(self, **changes: Any) -> "CompilerOptions":
        """Copy with some fields changed."""
        values = {name: getattr(self, name) for name in self.__dataclass_fields__}
        values.update(changes)
        return CompilerOptions(**values)


def split_exclude(value: Optional[Iterable[str]]) -> FrozenSet[str]:
    """Normalize ``"html,css"`` or ``["html", "css"]`` into a set."""
    if not value:
        return frozenset()
    if isinstance(value, str):
        value = value.split(",")
    return frozenset(part.strip() for part in value if part.strip())
