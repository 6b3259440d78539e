"""
Tagsmith Preprocessors
======================

Secondary-language support. A preprocessor turns code written in another
dialect (a template language, a CSS superset, a script dialect) into plain
markup, CSS or script. It is any callable::

    def coffee(code: str, options: dict, url: str) -> str: ...

Preprocessors are looked up by kind (``html``, ``css`` or ``js``) and by the
language a block declares::

    registry = PreprocessorRegistry()
    registry.register("js", "coffee", coffee)

    compiler = TagCompiler(registry=registry)

Packages can ship preprocessors through the ``tagsmith.preprocessors``
entry-point group, naming each entry ``<kind>:<language>``::

    [project.entry-points."tagsmith.preprocessors"]
    "js:coffee" = "tagsmith_coffee:compile"
"""

from __future__ import annotations

from importlib.metadata import entry_points
from typing import Any, Callable, Dict, List, Optional

from tagsmith.compiler.errors import PreprocessorNotFoundError
from tagsmith.utils.logger import get_logger

Preprocessor = Callable[[str, Dict[str, Any], str], str]

KINDS = ("html", "css", "js")

ENTRY_POINT_GROUP = "tagsmith.preprocessors"

logger = get_logger("tagsmith.preprocessors")


def passthrough(code: str, options: Optional[Dict[str, Any]] = None, url: str = "") -> str:
    """Return the code untouched."""
    return code


class PreprocessorRegistry:
    """
    Preprocessors keyed by kind and language name.

    Example:
        registry = PreprocessorRegistry()
        registry.register("css", "upper", lambda css, opts, url: css.upper())

        registry.require("css", "upper")     # the callable
        registry.require("css", "sass")      # PreprocessorNotFoundError
    """

    def __init__(self, builtins: bool = True) -> None:
        self._preprocessors: Dict[str, Dict[str, Preprocessor]] = {
            kind: {} for kind in KINDS
        }
        if builtins:
            self.register("js", "none", passthrough)
            self.register("js", "javascript", passthrough)

    def register(self, kind: str, name: str, preprocessor: Preprocessor) -> "PreprocessorRegistry":
        """
        Register a preprocessor.

        Args:
            kind: html, css or js
            name: Language name as declared by ``type`` attributes
            preprocessor: Callable taking (code, options, url)

        Returns:
            The registry, for chaining
        """
        if kind not in self._preprocessors:
            raise ValueError(f"Unknown preprocessor kind: {kind!r}")
        if not callable(preprocessor):
            raise TypeError(f"Preprocessor {kind}:{name} is not callable")

        self._preprocessors[kind][name] = preprocessor
        logger.debug("Registered preprocessor", kind=kind, language=name)
        return self

    def unregister(self, kind: str, name: str) -> None:
        """Remove a preprocessor if present."""
        self._preprocessors.get(kind, {}).pop(name, None)

    def get(self, kind: str, name: str) -> Optional[Preprocessor]:
        return self._preprocessors.get(kind, {}).get(name)

    def has(self, kind: str, name: str) -> bool:
        return self.get(kind, name) is not None

    def require(self, kind: str, name: str) -> Preprocessor:
        """
        Get a preprocessor or fail naming the missing language.

        Raises:
            PreprocessorNotFoundError: If nothing is registered for the name
        """
        preprocessor = self.get(kind, name)
        if preprocessor is None:
            raise PreprocessorNotFoundError(kind, name)
        return preprocessor

    def run(
        self,
        kind: str,
        name: str,
        code: str,
        options: Optional[Dict[str, Any]] = None,
        url: str = "",
    ) -> str:
        """Run the named preprocessor over ``code``."""
        preprocessor = self.require(kind, name)
        logger.debug("Running preprocessor", kind=kind, language=name, url=url)
        return preprocessor(code, dict(options or {}), url)

    def names(self, kind: str) -> List[str]:
        """Registered language names for a kind."""
        return sorted(self._preprocessors.get(kind, {}))

    def load_entry_points(self, group: str = ENTRY_POINT_GROUP) -> int:
        """
        Register preprocessors published by installed packages.

        Args:
            group: Entry point group name

        Returns:
            Number of preprocessors registered
        """
        count = 0

        for ep in entry_points(group=group):
            kind, sep, name = ep.name.partition(":")
            if not sep or kind not in self._preprocessors:
                logger.warning("Skipping malformed preprocessor entry point", entry=ep.name)
                continue
            self.register(kind, name, ep.load())
            count += 1

        return count

    def copy(self) -> "PreprocessorRegistry":
        """Independent copy of this registry."""
        clone = PreprocessorRegistry(builtins=False)
        for kind, preprocessors in self._preprocessors.items():
            clone._preprocessors[kind].update(preprocessors)
        return clone

    def __contains__(self, key: str) -> bool:
        kind, _, name = key.partition(":")
        return self.has(kind, name)

    def __repr__(self) -> str:
        counts = ", ".join(f"{kind}={len(self._preprocessors[kind])}" for kind in KINDS)
        return f"<PreprocessorRegistry {counts}>"
