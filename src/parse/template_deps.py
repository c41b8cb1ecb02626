"""Per-template dependency extraction across template handlers."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Literal

from parse.erb import erb_to_ruby
from parse.render_parser import RenderParser

if TYPE_CHECKING:
    from parse.inflector import Inflector

TemplateHandler = Literal["erb", "ruby"]

_EXPLICIT_DEPENDENCY = re.compile(r"#\s*Template Dependency:\s*([^\s%]+)")


def extract_explicit_dependencies(source: str) -> list[str]:
    """Return ``# Template Dependency: path`` directives in source order."""
    return [match.group(1) for match in _EXPLICIT_DEPENDENCY.finditer(source)]


def compile_template(source: str, handler: TemplateHandler) -> str:
    """Return the Ruby code to analyse for a template."""
    if handler == "erb":
        return erb_to_ruby(source)
    return source


def template_dependencies(
    name: str,
    source: str,
    handler: TemplateHandler = "erb",
    *,
    inflector: Inflector | None = None,
) -> list[str]:
    """Return render dependencies followed by explicit dependencies.

    Raises:
        RenderParseError: If the compiled template is not valid Ruby.
    """
    code = compile_template(source, handler)
    rendered = RenderParser(name, code, inflector).extract_render_dependencies()
    return rendered + extract_explicit_dependencies(source)


__all__ = [
    "TemplateHandler",
    "compile_template",
    "extract_explicit_dependencies",
    "template_dependencies",
]
