"""
Tagsmith Compiler Errors
========================

Exceptions raised while compiling custom-element sources. Every failure
aborts the whole compile call; nothing is recovered partially.
"""

from __future__ import annotations


class CompilerError(Exception):
    """Base exception for compiler errors."""
    pass


class BracketsError(CompilerError):
    """Raised when a bracket pair cannot be used as expression delimiters."""

    def __init__(self, pair: str) -> None:
        super().__init__(f'Unsupported brackets "{pair}"')
        self.pair = pair


class PreprocessorNotFoundError(CompilerError):
    """Raised when a block declares a language with no registered preprocessor."""

    LABELS = {
        "html": "Template",
        "css": "CSS",
        "js": "JS",
    }

    def __init__(self, kind: str, language: str) -> None:
        label = self.LABELS.get(kind, kind)
        super().__init__(f'{label} parser not found: "{language}"')
        self.kind = kind
        self.language = language


class ScopedCSSError(CompilerError):
    """Raised when scoped CSS is requested without an owning tag name."""
    pass


class ParserOptionsError(CompilerError, ValueError):
    """Raised when inline preprocessor options are not valid JSON."""
    pass


class TemplateSyntaxError(CompilerError):
    """Raised by the markup parser on input it cannot turn into a node tree."""

    def __init__(self, message: str, line: int = 0, column: int = 0) -> None:
        if line:
            message = f"{message} at line {line}:{column}"
        super().__init__(message)
        self.line = line
        self.column = column
