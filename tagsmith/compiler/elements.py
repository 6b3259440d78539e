"""
Tagsmith Element Compiler
=========================

Finds custom elements in a source file and compiles each into a component
registration. An element starts at the beginning of a line with a
hyphenated tag and ends with the matching closing tag at the same
indentation, or on the same line::

    <todo-list class="list">
      <ul>
        <li each="{ items }">{ title }</li>
      </ul>

      <style scoped>
        ul { padding: 0 }
      </style>

      this.items = opts.items

      remove(e) {
        this.items.splice(e.item.index, 1)
      }
    </todo-list>

Inside the body, ``<style>`` and ``<script>`` blocks are compiled as CSS and
script, the remaining markup as HTML, and any free script after the last
closed tag as script. Blocks may declare a language with ``type`` and pass
JSON ``options`` to its preprocessor.

Textual output replaces each element with a registration call::

    riot.tag2('todo-list', '<ul>...</ul>', 'todo-list ul,...', 'class="list"',
    function(opts) {
    this.items = opts.items
    ...
    }, '{ }');

Structured output (``entities=True``) returns ``Component`` records instead.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

import orjson

from tagsmith.compiler.attributes import parse_attributes
from tagsmith.compiler.css import compile_css
from tagsmith.compiler.errors import ParserOptionsError
from tagsmith.compiler.expressions import (
    ExpressionPool,
    restore_expressions,
    split_expressions,
)
from tagsmith.compiler.html import compile_markup, normalize_newlines, strip_html_comments
from tagsmith.compiler.javascript import compile_js
from tagsmith.compiler.options import CompilerOptions
from tagsmith.compiler.preprocessors import PreprocessorRegistry
from tagsmith.utils.logger import get_logger

REGISTER_CALL = "riot.tag2"

CUSTOM_TAG = re.compile(
    r"""^([ \t]*)<([-\w]*-[-\w]*)"""
    r"""(?:\s+([^'"/>]*(?:(?:"(?:[^"\\]|\\[\s\S])*"|'(?:[^'\\]|\\[\s\S])*'|/[^>])[^'"/>]*)*)|\s*)?"""
    r"""(?:/>|>[ \t]*\n?([\s\S]*)^\1</\2\s*>|>(.*)</\2\s*>)""",
    re.I | re.M,
)

SCRIPTS = re.compile(r"<script(\s+[^>]*)?>\n?([\s\S]*?)</script\s*>", re.I)

STYLES = re.compile(r"<style(\s+[^>]*)?>\n?([\s\S]*?)</style\s*>", re.I)

# A tag closing a line: "/>", "</name>" or "<name ...>"
END_TAGS = re.compile(
    r"/>\n|^<(?:/[\w\-]+\s*|[\w\-]+(?:\s+(?:[-\w:\xA0-\xFF][\s\S]*?)?)?)>\n"
)

TYPE_ATTR = re.compile(r"""\stype\s*=\s*(?:(['"])(.+?)\1|(\S+))""", re.I)

ATTR_VALUE = r"""\s*=\s*("(?:\\[\s\S]|[^"\\])*"|'(?:\\[\s\S]|[^'\\])*'|\{[^}]+}|\S+)"""

SCOPED_ATTR = re.compile(r"\sscoped(\s|=|$)", re.I)

TRIM_TRAIL = re.compile(r"[ \t]+$", re.M)

EXTRA_NEWLINES = re.compile(r"\n{3,}")

logger = get_logger("tagsmith.elements")


@dataclass
class Component:
    """
    One compiled custom element.

    Attributes:
        tag_name: Lower-cased tag name
        html: Compiled markup
        css: Compiled style
        attribs: Normalized attributes of the element itself
        js: Compiled script
        brackets: Bracket pair, set when any expression was extracted
    """
    tag_name: str
    html: str = ""
    css: str = ""
    attribs: str = ""
    js: str = ""
    brackets: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        """Structured record as consumed by loaders."""
        return {
            "tagName": self.tag_name,
            "html": self.html,
            "css": self.css,
            "attribs": self.attribs,
            "js": self.js,
        }

    def to_code(self) -> str:
        """Registration statement for this component."""
        end = "}"
        if self.brackets:
            end += ", " + quote(self.brackets)
        end += ");"
        if self.js and not self.js.endswith("\n"):
            end = "\n" + end

        args = ", ".join([
            f"'{self.tag_name}'",
            quote(self.html),
            quote(self.css),
            quote(self.attribs),
        ])
        return f"{REGISTER_CALL}({args}, function(opts) {{\n{self.js}{end}"


def quote(text: str) -> str:
    """Single-quoted script string literal."""
    escaped = (
        text.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f"'{escaped}'"


def get_type(attrs: Optional[str]) -> str:
    """Language declared by a ``type`` attribute, without ``text/``."""
    if not attrs:
        return ""
    match = TYPE_ATTR.search(attrs)
    value = match and (match.group(2) or match.group(3))
    return value.replace("text/", "", 1) if value else ""


def get_attr(attrs: Optional[str], name: str) -> str:
    """Unquoted value of one attribute in raw attribute text."""
    if not attrs:
        return ""
    match = re.search(r"\s" + re.escape(name) + ATTR_VALUE, attrs, re.I)
    value = match.group(1) if match else ""
    if value[:1] in ("'", '"'):
        return value[1:-1]
    return value


def get_parser_options(attrs: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Preprocessor options given as JSON in an ``options`` attribute.

    Raises:
        ParserOptionsError: If the value is not valid JSON
    """
    raw = get_attr(attrs, "options")
    if not raw:
        return None
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise ParserOptionsError(f"Invalid preprocessor options {raw!r}: {exc}") from exc


def join_parts(parts: List[str], sep: str) -> str:
    """Join parts, adding the separator only after non-empty output."""
    out = ""
    for part in parts:
        out += (sep if out else "") + part
    return out


def split_blocks(body: str) -> Tuple[str, str]:
    """
    Split an element body into its markup part and trailing free script.

    The markup part ends after the last tag that closes a line: a
    self-closed tag, a closing tag or an opening tag. A body ending in ``>``
    is all markup; a body without such a tag is all script.
    """
    if body.endswith(">"):
        return body, ""

    k = body.rfind("<")
    while k >= 0:
        match = END_TAGS.search(body[k:])
        if match:
            k += match.end()
            return body[:k], body[k:]
        k = body.rfind("<", 0, k)

    return "", body


class TagCompiler:
    """
    Compiles custom-element sources.

    Example:
        compiler = TagCompiler(CompilerOptions(compact=True))
        code = compiler.compile(source, url="app.tag")

        records = TagCompiler(CompilerOptions(entities=True)).compile(source)
    """

    def __init__(
        self,
        options: Optional[CompilerOptions] = None,
        registry: Optional[PreprocessorRegistry] = None,
    ) -> None:
        self.options = options or CompilerOptions()
        self.registry = registry or PreprocessorRegistry()

    def compile(self, source: str, url: str = "") -> Union[str, List[Component]]:
        """
        Compile every custom element in ``source``.

        Args:
            source: Source file contents
            url: Source location, passed to preprocessors

        Returns:
            The source with elements replaced by registration code, or the
            list of components when ``options.entities`` is set
        """
        components: List[Component] = []
        output = self._compile(source, url, components)
        if self.options.entities:
            return components
        return output

    def compile_components(self, source: str, url: str = "") -> List[Component]:
        """Compile and always return component records."""
        components: List[Component] = []
        self._compile(source, url, components)
        return components

    def _compile(self, source: str, url: str, components: List[Component]) -> str:
        options = self.options
        brackets = options.get_brackets()

        if options.template:
            source = self.registry.run(
                "html", options.template, source, options.template_options, url
            )

        def replace(match: "re.Match[str]") -> str:
            pool = ExpressionPool(brackets)
            component = self.compile_element(match, pool, url)
            components.append(component)
            return component.to_code()

        output = CUSTOM_TAG.sub(replace, normalize_newlines(source))
        logger.debug("Compiled source", url=url, components=len(components))
        return output

    def compile_element(
        self,
        match: "re.Match[str]",
        pool: ExpressionPool,
        url: str = "",
    ) -> Component:
        """Compile one matched element using its own expression pool."""
        options = self.options
        indent, tag_name, attribs, body, inline_body = match.groups()
        tag_name = tag_name.lower()
        component = Component(tag_name=tag_name)

        if attribs and options.included("attribs"):
            attribs = split_expressions(attribs, pool, options, self.registry)
            component.attribs = restore_expressions(parse_attributes(attribs, pool), pool)

        if inline_body:
            body = inline_body
        if body:
            body = strip_html_comments(body)

        if body and body.strip():
            if inline_body:
                if options.included("html"):
                    component.html = compile_markup(body, options, pool, self.registry)
            else:
                self._compile_body(component, body, indent, pool, url)

        if component.js.strip():
            component.js = EXTRA_NEWLINES.sub("\n\n", component.js)
        else:
            component.js = ""

        if len(pool):
            component.brackets = pool.brackets.pair

        logger.debug(
            "Compiled element",
            tag=tag_name,
            expressions=len(pool),
            url=url,
        )
        return component

    def _compile_body(
        self,
        component: Component,
        body: str,
        indent: str,
        pool: ExpressionPool,
        url: str,
    ) -> None:
        options = self.options
        if indent:
            body = re.sub("^" + re.escape(indent), "", body, flags=re.M)
        markup, script = split_blocks(TRIM_TRAIL.sub("", body))

        styles: List[str] = []
        scripts: List[str] = []

        def take_style(match: "re.Match[str]") -> str:
            if options.included("css"):
                styles.append(self._style_code(match.group(2), match.group(1), component.tag_name, url))
            return ""

        def take_script(match: "re.Match[str]") -> str:
            if options.included("js"):
                attrs = match.group(1)
                scripts.append(compile_js(
                    match.group(2),
                    options,
                    get_type(attrs),
                    get_parser_options(attrs),
                    url,
                    self.registry,
                ))
            return ""

        markup = STYLES.sub(take_style, markup)
        markup = SCRIPTS.sub(take_script, markup)

        if options.included("html") and markup.strip():
            component.html = compile_markup(markup, options, pool, self.registry)

        if options.included("js") and script.strip():
            scripts.append(compile_js(script, options, url=url, registry=self.registry))

        component.css = join_parts(styles, " ")
        component.js = join_parts(scripts, "\n")

    def _style_code(self, code: str, attrs: Optional[str], tag_name: str, url: str) -> str:
        return compile_css(
            code,
            tag_name,
            get_type(attrs) or self.options.style,
            scoped=bool(attrs and SCOPED_ATTR.search(attrs)),
            parser_options=get_parser_options(attrs),
            url=url,
            registry=self.registry,
        )


def compile_source(
    source: str,
    options: Optional[CompilerOptions] = None,
    url: str = "",
    registry: Optional[PreprocessorRegistry] = None,
) -> Union[str, List[Component]]:
    """
    Compile a custom-element source file.

    Shortcut for ``TagCompiler(options, registry).compile(source, url)``.
    """
    return TagCompiler(options, registry).compile(source, url)
