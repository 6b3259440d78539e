"""
Tagsmith - Custom Element Compiler
==================================

Compiles single-file custom elements (markup, style and script in one
file) into component registration code, and component templates into a
static skeleton plus binding descriptors.

Features:
---------
- Expression-safe markup normalization
- Scoped CSS
- Shorthand method rewriting
- Pluggable preprocessors for other languages
- Binding trees for loops, conditionals, child components and live values

Quick Start:
    from tagsmith import compile_source

    code = compile_source(open("todo.tag").read())

    $ tagsmith compile todo.tag -o todo.js
"""

from __future__ import annotations

__version__ = "0.3.0"
__license__ = "MIT"

from tagsmith.compiler import (
    Brackets,
    CompilerError,
    CompilerOptions,
    Component,
    PreprocessorRegistry,
    TagCompiler,
    compile_css,
    compile_html,
    compile_js,
    compile_source,
)
from tagsmith.core.config import Config
from tagsmith.template import MarkupParser, TemplateBuilder, build, parse_template

__all__ = [
    "__version__",
    "Brackets",
    "CompilerError",
    "CompilerOptions",
    "Component",
    "PreprocessorRegistry",
    "TagCompiler",
    "compile_css",
    "compile_html",
    "compile_js",
    "compile_source",
    "Config",
    "MarkupParser",
    "TemplateBuilder",
    "build",
    "parse_template",
]
