"""Template file discovery for viewdeps."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from fnmatch import fnmatch
from typing import TYPE_CHECKING

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

GitignoreMatcher = Callable[[str], bool]


def _gitignore_files(root: Path, *, nested: bool) -> list[Path]:
    """Return the .gitignore files that apply under ``root``, shallowest first.

    Symlinked .gitignore files are ignored so rules cannot be pulled in from
    outside the repository.
    """
    if nested:
        candidates = [root / ".gitignore", *root.rglob(".gitignore")]
    else:
        candidates = [root / ".gitignore"]

    found = {
        path for path in candidates if path.is_file() and not path.is_symlink()
    }
    return sorted(found, key=lambda path: path.relative_to(root).as_posix())


def _build_gitignore_matcher(
    root: Path,
    *,
    nested_gitignore: bool,
) -> GitignoreMatcher | None:
    """Compose the gitignore rules under ``root`` into one predicate."""
    matchers = [
        parse_gitignore(path)
        for path in _gitignore_files(root, nested=nested_gitignore)
    ]
    if not matchers:
        return None

    def ignored(path_str: str) -> bool:
        for matcher in matchers:
            try:
                if matcher(path_str):
                    return True
            except ValueError:
                # Path lies outside this .gitignore's base directory.
                continue
        return False

    return ignored


@dataclass(frozen=True)
class TemplateFilter:
    """Decides which files under a views directory are templates to analyse."""

    views_root: Path
    extensions: frozenset[str]
    output_dir: str = ""
    ignored: GitignoreMatcher | None = None
    include_patterns: tuple[str, ...] = ()
    exclude_patterns: tuple[str, ...] = ()

    def template_path(self, path: Path) -> str | None:
        """Return the views-relative POSIX path of an accepted template."""
        if path.suffix[1:] not in self.extensions:
            return None
        if path.is_symlink() or not path.is_file():
            return None

        try:
            path.resolve().relative_to(self.views_root.resolve())
            relative = path.relative_to(self.views_root)
        except (OSError, ValueError):
            return None

        if self.output_dir and relative.parts[0] == self.output_dir:
            return None
        if self.ignored is not None and self.ignored(str(path)):
            return None

        name = relative.as_posix()
        if self.include_patterns and not any(
            fnmatch(name, pattern) for pattern in self.include_patterns
        ):
            return None
        if any(fnmatch(name, pattern) for pattern in self.exclude_patterns):
            return None
        return name


def find_template_files(
    directory: Path,
    *,
    extensions: frozenset[str] | set[str],
    output_dir: str = ".viewdeps",
    include_patterns: list[str] | None = None,
    exclude_patterns: list[str] | None = None,
    nested_gitignore: bool = False,
    gitignore_root: Path | None = None,
) -> Iterator[Path]:
    """Find template files in a directory, respecting .gitignore.

    Args:
        directory: Views directory to search for templates
        extensions: Final file extensions to accept (e.g. {"erb", "rb"})
        output_dir: Directory name to skip (default ".viewdeps")
        include_patterns: Optional list of fnmatch patterns matched against
            the path relative to ``directory``; if provided, files must match
            at least one pattern to be included
        exclude_patterns: Optional list of fnmatch patterns; files matching
            any pattern are excluded
        gitignore_root: Directory holding the .gitignore to honour
            (default: ``directory``)

    Yields:
        Path objects for each template found, sorted by relative path.
    """
    if not extensions or not directory.is_dir():
        return

    template_filter = TemplateFilter(
        views_root=directory,
        extensions=frozenset(extensions),
        output_dir=output_dir,
        ignored=_build_gitignore_matcher(
            gitignore_root or directory, nested_gitignore=nested_gitignore
        ),
        include_patterns=tuple(include_patterns or ()),
        exclude_patterns=tuple(exclude_patterns or ()),
    )

    matched = [
        (name, path)
        for path in directory.rglob("*")
        if (name := template_filter.template_path(path)) is not None
    ]
    matched.sort()

    for _, path in matched:
        yield path


__all__ = ["TemplateFilter", "find_template_files"]
