"""Static extraction of render dependencies from Ruby template source."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from parse.inflector import DEFAULT_INFLECTOR
from parse.ruby_nodes import (
    AssocNode,
    CallNode,
    ClassVariableReadNode,
    GlobalVariableReadNode,
    InstanceVariableReadNode,
    KeywordHashNode,
    LocalVariableReadNode,
    ParenthesesNode,
    StatementsNode,
    StringNode,
    SymbolNode,
    parse_ruby,
)

if TYPE_CHECKING:
    from parse.inflector import Inflector
    from parse.ruby_nodes import SyntaxNode

logger = logging.getLogger(__name__)

RenderType = Literal["partial", "template", "layout"]

RENDER_METHODS = frozenset({"render", "render_to_string"})

RENDER_TYPE_KEYS: tuple[RenderType, ...] = ("partial", "template", "layout")

ALL_KNOWN_KEYS = frozenset(
    {
        "partial",
        "template",
        "layout",
        "formats",
        "locals",
        "object",
        "collection",
        "as",
        "status",
        "content_type",
        "location",
        "spacer_template",
    }
)


@dataclass(frozen=True)
class TemplateReference:
    """The template a render call points at, before path normalization."""

    render_type: RenderType
    path: str
    # Never set by the resolver today; kept for the object/collection guard.
    is_object_inferred: bool = False


def partial_to_virtual_path(render_type: RenderType, partial_path: str) -> str:
    """Underscore-prefix the leaf segment of partial and layout paths.

    Examples:
        >>> partial_to_virtual_path("partial", "posts/comments/form")
        'posts/comments/_form'
        >>> partial_to_virtual_path("layout", "wrapper")
        '_wrapper'
        >>> partial_to_virtual_path("template", "posts/show")
        'posts/show'
    """
    if render_type == "template":
        return partial_path
    head, sep, leaf = partial_path.rpartition("/")
    return f"{head}{sep}_{leaf}"


def _unwrap_parentheses(node: SyntaxNode) -> SyntaxNode:
    current = node
    while (
        isinstance(current, ParenthesesNode)
        and isinstance(current.body, StatementsNode)
        and len(current.body.body) == 1
    ):
        current = current.body.body[0]
    return current


def _keyword_options(node: KeywordHashNode) -> dict[str, SyntaxNode | None] | None:
    options: dict[str, SyntaxNode | None] = {}
    for element in node.elements:
        if not isinstance(element, AssocNode) or not isinstance(
            element.key, SymbolNode
        ):
            return None
        options[element.key.unescaped] = element.value
    return options


def render_call_options(node: CallNode) -> dict[str, SyntaxNode | None] | None:
    """Return the options of a render call, or None if it is not one we can read.

    Two call shapes are understood: a template argument optionally followed by
    locals (``render "posts/post", post: post``), and a single keyword hash
    with symbol keys (``render partial: "form", locals: {...}``).
    """
    if node.name not in RENDER_METHODS:
        return None

    if node.arguments is None:
        return None

    arguments = [_unwrap_parentheses(arg) for arg in node.arguments.arguments]
    length = len(arguments)

    options: dict[str, SyntaxNode | None] | None = None
    if length in (1, 2) and not isinstance(arguments[0], KeywordHashNode):
        options = {"partial": arguments[0]}
        if length == 2:
            options["locals"] = arguments[1]
    elif length == 1 and isinstance(arguments[0], KeywordHashNode):
        options = _keyword_options(arguments[0])

    if options is None:
        return None

    keys = options.keys()
    if not any(key in keys for key in RENDER_TYPE_KEYS):
        return None
    if not keys <= ALL_KNOWN_KEYS:
        return None

    return options


def _reference_name(node: SyntaxNode | None) -> str | None:
    if isinstance(node, ClassVariableReadNode):
        return node.slice[2:]
    if isinstance(node, (InstanceVariableReadNode, GlobalVariableReadNode)):
        return node.slice[1:]
    if isinstance(node, LocalVariableReadNode):
        return node.slice
    if isinstance(node, CallNode) and node.arguments is None and not node.has_block:
        return node.name
    return None


def _select_render_type(options: dict[str, SyntaxNode | None]) -> RenderType:
    # First render-type key in source order wins.
    for key in options:
        if key in RENDER_TYPE_KEYS:
            return key  # type: ignore[return-value]
    msg = "render options carry no render type key"
    raise ValueError(msg)


class RenderParser:
    """Find the templates a Ruby template renders.

    Args:
        name: Virtual path of the template being analysed (e.g. "posts/show").
            Relative template names are resolved against its directory.
        code: Ruby source of the template.
        inflector: Pluralization rules used for ``render @product`` style
            calls. Defaults to English inflections.
    """

    def __init__(
        self, name: str, code: str, inflector: Inflector | None = None
    ) -> None:
        self._name = name
        self._code = code
        self._inflector = inflector or DEFAULT_INFLECTOR

    def extract_render_dependencies(self) -> list[str]:
        """Return virtual paths of rendered templates in discovery order.

        Raises:
            RenderParseError: If the source cannot be parsed.
        """
        queue: deque[SyntaxNode] = deque([parse_ruby(self._code, name=self._name)])
        templates: list[str] = []

        while queue:
            node = queue.popleft()
            queue.extend(node.compact_child_nodes())
            if isinstance(node, CallNode):
                templates.extend(self._call_dependencies(node))

        return templates

    render_calls = extract_render_dependencies

    def _call_dependencies(self, node: CallNode) -> list[str]:
        options = render_call_options(node)
        if options is None:
            if node.name in RENDER_METHODS:
                logger.debug("%s: skipping render call %r", self._name, node.slice)
            return []

        render_type = _select_render_type(options)
        reference = self.render_call_template(render_type, options[render_type])
        if reference is None:
            logger.debug("%s: unresolved template in %r", self._name, node.slice)
            return []

        if "object" in options or "collection" in options or (
            reference.is_object_inferred
        ):
            if "object" in options and "collection" in options:
                logger.debug(
                    "%s: both object and collection in %r", self._name, node.slice
                )
                return []
            if "partial" not in options:
                logger.debug(
                    "%s: object or collection without partial in %r",
                    self._name,
                    node.slice,
                )
                return []

        templates: list[str] = []

        spacer = options.get("spacer_template")
        if isinstance(spacer, StringNode):
            templates.append(
                partial_to_virtual_path("partial", self._literal_path(spacer))
            )

        templates.append(partial_to_virtual_path(render_type, reference.path))

        layout = options.get("layout")
        if render_type != "layout" and isinstance(layout, StringNode):
            templates.append(
                partial_to_virtual_path("layout", self._literal_path(layout))
            )

        return templates

    def render_call_template(
        self, render_type: RenderType, node: SyntaxNode | None
    ) -> TemplateReference | None:
        """Resolve the node in template position to a template reference."""
        if isinstance(node, StringNode):
            return TemplateReference(render_type, self._literal_path(node))

        dependency = _reference_name(node)
        if not dependency:
            return None

        plural = self._inflector.pluralize(dependency)
        singular = self._inflector.singularize(dependency)
        return TemplateReference(render_type, f"{plural}/{singular}")

    def _literal_path(self, node: StringNode) -> str:
        path = node.unescaped
        if "/" in path:
            return path
        directory = self._name.rpartition("/")[0]
        if not directory:
            return path
        return f"{directory}/{path}"


def extract_render_dependencies(
    name: str, code: str, inflector: Inflector | None = None
) -> list[str]:
    """Convenience wrapper around ``RenderParser.extract_render_dependencies``."""
    return RenderParser(name, code, inflector).extract_render_dependencies()


__all__ = [
    "ALL_KNOWN_KEYS",
    "RENDER_TYPE_KEYS",
    "RenderParser",
    "RenderType",
    "TemplateReference",
    "extract_render_dependencies",
    "partial_to_virtual_path",
    "render_call_options",
]
