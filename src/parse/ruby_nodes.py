"""Tree-sitter backed syntax nodes for Ruby template source.

The tree-sitter concrete syntax tree is exposed through a small, closed set of
node variants. Each variant knows its ``kind``, its source ``slice`` and how to
enumerate its children; only the shapes that render-call analysis cares about
get a dedicated variant; everything else is an ``OtherNode``.

Children are converted lazily, one level at a time, so that walking a very
deep tree never recurses.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from itertools import takewhile
from typing import Union

from tree_sitter import Language, Node, Parser
from tree_sitter_ruby import language as get_ruby_language

from parse.errors import RenderParseError

_PARSER: Parser | None = None

_SKIPPED_CHILD_TYPES = frozenset({"comment"})

# A heredoc body trails the statement that opens it; it is never an argument.
_NON_ARGUMENT_TYPES = frozenset({"comment", "heredoc_body", "block_argument"})

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "s": " ",
    "r": "\r",
    "e": "\x1b",
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "v": "\v",
}

_OCTAL_DIGITS = frozenset("01234567")


def _get_parser() -> Parser:
    """Initialize and return the Tree-sitter parser with Ruby language."""
    global _PARSER
    if _PARSER is None:
        lang = Language(get_ruby_language())
        _PARSER = Parser(lang)

    return _PARSER


def _node_text(node: Node) -> str:
    return (node.text or b"").decode("utf8", errors="ignore")


@dataclass(frozen=True)
class _TreeBacked:
    ts_node: Node = field(repr=False, compare=False)

    @property
    def kind(self) -> str:
        return self.ts_node.type

    @property
    def slice(self) -> str:
        return _node_text(self.ts_node)

    def compact_child_nodes(self) -> list[SyntaxNode]:
        return [
            to_syntax_node(child)
            for child in self.ts_node.named_children
            if child.type not in _SKIPPED_CHILD_TYPES
        ]


@dataclass(frozen=True)
class ProgramNode(_TreeBacked):
    pass


@dataclass(frozen=True)
class StringNode(_TreeBacked):
    unescaped: str


@dataclass(frozen=True)
class SymbolNode(_TreeBacked):
    unescaped: str


@dataclass(frozen=True)
class InstanceVariableReadNode(_TreeBacked):
    pass


@dataclass(frozen=True)
class ClassVariableReadNode(_TreeBacked):
    pass


@dataclass(frozen=True)
class GlobalVariableReadNode(_TreeBacked):
    pass


@dataclass(frozen=True)
class LocalVariableReadNode(_TreeBacked):
    """A bare identifier: a local variable or a receiver-less method call."""


@dataclass(frozen=True)
class AssocNode(_TreeBacked):
    key: SyntaxNode | None
    value: SyntaxNode | None


@dataclass(frozen=True)
class AssocSplatNode(_TreeBacked):
    pass


@dataclass(frozen=True)
class StatementsNode(_TreeBacked):
    body: tuple[SyntaxNode, ...]

    @property
    def kind(self) -> str:
        return "statements"

    def compact_child_nodes(self) -> list[SyntaxNode]:
        return list(self.body)


@dataclass(frozen=True)
class ParenthesesNode(_TreeBacked):
    body: StatementsNode | None


@dataclass(frozen=True)
class CallNode(_TreeBacked):
    name: str
    arguments: ArgumentsNode | None
    has_receiver: bool = False
    has_block: bool = False


@dataclass(frozen=True)
class OtherNode(_TreeBacked):
    pass


@dataclass(frozen=True)
class KeywordHashNode:
    """Keyword arguments passed without braces, e.g. ``render partial: "x"``."""

    elements: tuple[SyntaxNode, ...]

    @property
    def kind(self) -> str:
        return "keyword_hash"

    def compact_child_nodes(self) -> list[SyntaxNode]:
        return list(self.elements)


@dataclass(frozen=True)
class ArgumentsNode:
    arguments: tuple[SyntaxNode, ...]

    @property
    def kind(self) -> str:
        return "arguments"

    def compact_child_nodes(self) -> list[SyntaxNode]:
        return list(self.arguments)


SyntaxNode = Union[
    ProgramNode,
    CallNode,
    ArgumentsNode,
    KeywordHashNode,
    AssocNode,
    AssocSplatNode,
    StringNode,
    SymbolNode,
    ParenthesesNode,
    StatementsNode,
    InstanceVariableReadNode,
    ClassVariableReadNode,
    GlobalVariableReadNode,
    LocalVariableReadNode,
    OtherNode,
]


def _unescape_string(node: Node) -> str | None:
    """Return the literal value of a string node, or None if interpolated."""
    opening = _node_text(node.children[0]) if node.children else '"'
    single_quoted = opening.endswith("'") or opening.startswith("%q")

    parts: list[str] = []
    for child in node.named_children:
        if child.type == "string_content":
            text = _node_text(child)
            if single_quoted:
                text = text.replace("\\\\", "\\").replace("\\'", "'")
            parts.append(text)
        elif child.type == "escape_sequence":
            parts.append(_unescape_sequence(_node_text(child)))
        else:
            return None
    return "".join(parts)


def _unescape_sequence(sequence: str) -> str:
    body = sequence[1:]
    if not body:
        return sequence
    octal = "".join(takewhile(_OCTAL_DIGITS.__contains__, body[:3]))
    if octal:
        return chr(int(octal, 8)) + body[len(octal) :]
    if body[0] in _ESCAPES:
        return _ESCAPES[body[0]]
    if body[0] == "u" and len(body) > 1:
        digits = body[1:].strip("{}")
        try:
            return "".join(chr(int(code, 16)) for code in digits.split())
        except ValueError:
            return sequence
    if body[0] == "x" and len(body) > 1:
        try:
            return chr(int(body[1:], 16))
        except ValueError:
            return sequence
    return body


def _symbol_value(node: Node) -> str | None:
    text = _node_text(node)
    if node.type == "hash_key_symbol":
        return text
    if node.type == "simple_symbol":
        return text[1:]
    if node.type == "delimited_symbol":
        if any(child.type == "interpolation" for child in node.named_children):
            return None
        return "".join(
            _node_text(child)
            for child in node.named_children
            if child.type == "string_content"
        )
    return None


def _pair_key(key: Node) -> SyntaxNode:
    # "name": value is a symbol key, "name" => value is a string key
    if key.type == "string":
        separator = key.next_sibling
        if separator is not None and separator.type == ":":
            value = _unescape_string(key)
            if value is not None:
                return SymbolNode(ts_node=key, unescaped=value)
    return to_syntax_node(key)


def _arguments(argument_list: Node | None) -> ArgumentsNode | None:
    if argument_list is None:
        return None

    arguments: list[SyntaxNode] = []
    keywords: list[SyntaxNode] = []
    for child in argument_list.named_children:
        if child.type in _NON_ARGUMENT_TYPES:
            continue
        if child.type in ("pair", "hash_splat_argument"):
            keywords.append(to_syntax_node(child))
            continue
        if keywords:
            arguments.append(KeywordHashNode(elements=tuple(keywords)))
            keywords = []
        arguments.append(to_syntax_node(child))
    if keywords:
        arguments.append(KeywordHashNode(elements=tuple(keywords)))

    if not arguments:
        return None
    return ArgumentsNode(arguments=tuple(arguments))


def _call_node(node: Node) -> CallNode:
    method = node.child_by_field_name("method")
    name = _node_text(method) if method is not None else "call"
    return CallNode(
        ts_node=node,
        name=name,
        arguments=_arguments(node.child_by_field_name("arguments")),
        has_receiver=node.child_by_field_name("receiver") is not None,
        has_block=node.child_by_field_name("block") is not None,
    )


def _parentheses_node(node: Node) -> ParenthesesNode:
    statements = tuple(
        to_syntax_node(child)
        for child in node.named_children
        if child.type not in _NON_ARGUMENT_TYPES
    )
    body = StatementsNode(ts_node=node, body=statements) if statements else None
    return ParenthesesNode(ts_node=node, body=body)


_SIMPLE_VARIANTS: dict[str, type[_TreeBacked]] = {
    "program": ProgramNode,
    "instance_variable": InstanceVariableReadNode,
    "class_variable": ClassVariableReadNode,
    "global_variable": GlobalVariableReadNode,
    "identifier": LocalVariableReadNode,
    "hash_splat_argument": AssocSplatNode,
}


def to_syntax_node(node: Node) -> SyntaxNode:
    """Wrap a tree-sitter node in its syntax node variant."""
    node_type = node.type

    if node_type == "call":
        return _call_node(node)

    if node_type == "string":
        value = _unescape_string(node)
        if value is None:
            return OtherNode(ts_node=node)
        return StringNode(ts_node=node, unescaped=value)

    if node_type in ("hash_key_symbol", "simple_symbol", "delimited_symbol"):
        symbol = _symbol_value(node)
        if symbol is None:
            return OtherNode(ts_node=node)
        return SymbolNode(ts_node=node, unescaped=symbol)

    if node_type == "pair":
        key = node.child_by_field_name("key")
        value = node.child_by_field_name("value")
        return AssocNode(
            ts_node=node,
            key=_pair_key(key) if key is not None else None,
            value=to_syntax_node(value) if value is not None else None,
        )

    if node_type == "parenthesized_statements":
        return _parentheses_node(node)

    variant = _SIMPLE_VARIANTS.get(node_type, OtherNode)
    return variant(ts_node=node)  # type: ignore[return-value]


def _first_error(root: Node) -> Node | None:
    queue = deque([root])
    while queue:
        node = queue.popleft()
        if node.type == "ERROR" or node.is_missing:
            return node
        queue.extend(
            child for child in node.children if child.has_error or child.is_missing
        )
    return None


def parse_ruby(code: str, *, name: str = "<template>") -> ProgramNode:
    """Parse Ruby source and return the root program node.

    Raises:
        RenderParseError: If the source is not syntactically valid Ruby.
    """
    tree = _get_parser().parse(code.encode("utf8"))
    root = tree.root_node

    if root.has_error:
        error_node = _first_error(root) or root
        raise RenderParseError(
            name,
            line=error_node.start_point[0] + 1,
            column=error_node.start_point[1] + 1,
        )

    return ProgramNode(ts_node=root)


__all__ = [
    "ArgumentsNode",
    "AssocNode",
    "AssocSplatNode",
    "CallNode",
    "ClassVariableReadNode",
    "GlobalVariableReadNode",
    "InstanceVariableReadNode",
    "KeywordHashNode",
    "LocalVariableReadNode",
    "OtherNode",
    "ParenthesesNode",
    "ProgramNode",
    "StatementsNode",
    "StringNode",
    "SymbolNode",
    "SyntaxNode",
    "parse_ruby",
    "to_syntax_node",
]
