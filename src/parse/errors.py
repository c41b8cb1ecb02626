"""Exceptions raised by viewdeps."""

from __future__ import annotations


class ViewDepsError(Exception):
    """Base class for viewdeps errors."""


class RenderParseError(ViewDepsError):
    """Raised when template source is not syntactically valid Ruby."""

    def __init__(self, template: str, *, line: int, column: int) -> None:
        self.template = template
        self.line = line
        self.column = column
        super().__init__(f"{template}:{line}:{column}: syntax error")


__all__ = ["RenderParseError", "ViewDepsError"]
