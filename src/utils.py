"""Shared utilities for viewdeps."""

from __future__ import annotations

from pathlib import Path


def path_to_template_name(file_path: str | Path) -> str:
    """Convert a template file path to its virtual path.

    Args:
        file_path: Path relative to the views directory (e.g.
            "posts/show.html.erb" or Path object)

    Returns:
        Template name without format and handler extensions (e.g. "posts/show")

    Examples:
        >>> path_to_template_name("posts/show.html.erb")
        'posts/show'
        >>> path_to_template_name("posts/_form.html+phone.erb")
        'posts/_form'
        >>> path_to_template_name(Path("feeds/index.atom.builder"))
        'feeds/index'
    """
    path_str = file_path.as_posix() if isinstance(file_path, Path) else str(file_path)
    normalized_parts = [part for part in path_str.replace("\\", "/").split("/") if part]

    if normalized_parts and normalized_parts[0] == ".":
        normalized_parts = normalized_parts[1:]

    # Everything after the first dot of the leaf is format/variant/handler.
    if normalized_parts:
        normalized_parts[-1] = normalized_parts[-1].split(".", 1)[0]

    return "/".join(normalized_parts)
