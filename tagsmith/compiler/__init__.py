"""
Tagsmith Compiler Module
========================

Compiles custom-element sources into component registrations.

Components:
- Expressions: Extraction and restoration of bracketed expressions
- Attributes: Attribute normalization
- HTML: Markup normalization
- CSS: Style minification and scoping
- JavaScript: Shorthand method rewriting
- Elements: Custom-element extraction and code generation
- Preprocessors: Registry of secondary-language preprocessors
"""

from tagsmith.compiler.brackets import Brackets
from tagsmith.compiler.errors import (
    CompilerError,
    BracketsError,
    PreprocessorNotFoundError,
    ScopedCSSError,
    ParserOptionsError,
    TemplateSyntaxError,
)
from tagsmith.compiler.options import CompilerOptions
from tagsmith.compiler.preprocessors import PreprocessorRegistry
from tagsmith.compiler.expressions import ExpressionPool, split_expressions, restore_expressions
from tagsmith.compiler.attributes import parse_attributes
from tagsmith.compiler.html import compile_html
from tagsmith.compiler.css import compile_css, scoped_css
from tagsmith.compiler.javascript import compile_js, rewrite_methods
from tagsmith.compiler.elements import Component, TagCompiler, compile_source

__all__ = [
    "Brackets",
    "CompilerError",
    "BracketsError",
    "PreprocessorNotFoundError",
    "ScopedCSSError",
    "ParserOptionsError",
    "TemplateSyntaxError",
    "CompilerOptions",
    "PreprocessorRegistry",
    "ExpressionPool",
    "split_expressions",
    "restore_expressions",
    "parse_attributes",
    "compile_html",
    "compile_css",
    "scoped_css",
    "compile_js",
    "rewrite_methods",
    "Component",
    "TagCompiler",
    "compile_source",
]
