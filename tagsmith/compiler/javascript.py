"""
Tagsmith Script Compiler
========================

Component scripts may declare methods with the shorthand syntax::

    add(a, b) {
      return a + b
    }

The generated component body is a plain function, so each shorthand method
is rewritten into a property of the instance, bound to it::

    this.add = function(a, b) {
      return a + b
    }.bind(this)

Control-flow statements share the ``name(...) {`` shape and are left alone.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from tagsmith.compiler.options import CompilerOptions
from tagsmith.compiler.preprocessors import PreprocessorRegistry
from tagsmith.compiler.scanner import skip_group, strip_comments

METHOD_SIGNATURE = re.compile(r"^([ \t]*)([$_A-Za-z][$\w]*)\s*(\([^()]*\)\s*\{)", re.M)

KEYWORDS = frozenset({"if", "while", "for", "switch", "catch", "function"})

BOUND = re.compile(r"^\s*\.\s*bind\b")

TRIM_TRAIL = re.compile(r"[ \t]+$", re.M)


def rewrite_methods(js: str) -> str:
    """
    Turn top-level shorthand methods into bound function properties.

    Comments are removed first. The body of a matched block, rewritten or
    not, is copied as is, so nested blocks are never rewritten. From a
    block whose closing brace is missing, the script is copied unchanged.

    Args:
        js: Script source

    Returns:
        Rewritten script
    """
    js = strip_comments(js)
    parts: List[str] = []

    while True:
        match = METHOD_SIGNATURE.search(js)
        if not match:
            break

        indent, name, signature = match.groups()
        parts.append(js[:match.start()])
        js = js[match.end():]
        end = skip_group(js, 0, "{")
        if end < 0:
            parts.append(match.group())
            break

        is_method = name not in KEYWORDS
        if is_method:
            parts.append(f"{indent}this.{name} = function{signature}")
        else:
            parts.append(match.group())

        parts.append(js[:end])
        js = js[end:]

        if is_method and not BOUND.match(js):
            parts.append(".bind(this)")

    if not parts:
        return js
    return "".join(parts) + js


def compile_js(
    js: str,
    options: Optional[CompilerOptions] = None,
    type: Optional[str] = None,
    parser_options: Optional[Dict[str, Any]] = None,
    url: str = "",
    registry: Optional[PreprocessorRegistry] = None,
) -> str:
    """
    Compile component script.

    Without a language the shorthand method rewriter runs. With a language
    the registered script preprocessor runs instead; ``options.parser``
    overrides both.

    Args:
        js: Script source
        options: Compiler options; ``options.type`` is the default language
        type: Declared language of this block
        parser_options: Options for the preprocessor
        url: Source location passed to the preprocessor
        registry: Preprocessors to look the language up in

    Returns:
        Compiled script without trailing whitespace on its lines

    Raises:
        PreprocessorNotFoundError: Unknown script language
    """
    if not js:
        return ""

    options = options or CompilerOptions()
    type = type or options.type

    if options.parser is not None:
        js = options.parser(js, dict(parser_options or {}), url)
    elif type:
        registry = registry or PreprocessorRegistry()
        js = registry.run("js", type, js, parser_options, url)
    else:
        js = rewrite_methods(js)

    return TRIM_TRAIL.sub("", js)
