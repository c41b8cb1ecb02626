"""Compile ERB templates down to the Ruby code their tags contain."""

from __future__ import annotations

import re

# <%% is a literal "<%" and never opens a tag.
_TAG = re.compile(r"<%(?!%)(?P<kind>==|=|#|-)?(?P<code>.*?)-?%>", re.DOTALL)


def erb_to_ruby(source: str) -> str:
    """Return the Ruby code embedded in an ERB template.

    Each code tag becomes one statement; literal text and ``<%# %>`` comments
    are dropped. Block helpers stay valid Ruby because their ``do`` and
    ``end`` tags are emitted in order::

        <%= form_with model: @post do |f| %>
          <%= render "fields", f: f %>
        <% end %>
    """
    statements: list[str] = []
    for match in _TAG.finditer(source):
        if match.group("kind") == "#":
            continue
        code = match.group("code").strip()
        if code:
            statements.append(code)

    if not statements:
        return ""
    return "\n".join(statements) + "\n"


__all__ = ["erb_to_ruby"]
