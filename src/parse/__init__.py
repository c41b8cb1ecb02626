"""Parsing utilities for viewdeps."""

from parse.erb import erb_to_ruby
from parse.errors import RenderParseError, ViewDepsError
from parse.inflector import EnglishInflector, Inflector
from parse.render_parser import (
    RenderParser,
    TemplateReference,
    extract_render_dependencies,
    partial_to_virtual_path,
)
from parse.ruby_nodes import parse_ruby
from parse.template_deps import (
    compile_template,
    extract_explicit_dependencies,
    template_dependencies,
)

__all__ = [
    "EnglishInflector",
    "Inflector",
    "RenderParseError",
    "RenderParser",
    "TemplateReference",
    "ViewDepsError",
    "compile_template",
    "erb_to_ruby",
    "extract_explicit_dependencies",
    "extract_render_dependencies",
    "parse_ruby",
    "partial_to_virtual_path",
    "template_dependencies",
]
