"""Render dependency artifact generator."""

from __future__ import annotations

import logging
from fnmatch import fnmatchcase
from typing import TYPE_CHECKING, Any

from artifacts.models.artifacts.render_deps import ParseFailure, RenderDepsRecord
from artifacts.utils import _get_output_dir_name, _write_jsonl
from contract.artifacts import RENDER_DEPS_JSONL
from parse.errors import RenderParseError
from parse.render_parser import RenderParser
from parse.template_deps import compile_template, extract_explicit_dependencies
from rules.config import DEFAULT_HANDLERS
from scan.files import find_template_files
from utils import path_to_template_name

if TYPE_CHECKING:
    from pathlib import Path

    from parse.template_deps import TemplateHandler

logger = logging.getLogger(__name__)


def _expand_explicit(explicit: list[str], known_templates: list[str]) -> list[str]:
    """Expand ``dir/*`` style directives against the known template names."""
    expanded: list[str] = []
    for dependency in explicit:
        if "*" not in dependency:
            expanded.append(dependency)
            continue
        expanded.extend(
            name for name in known_templates if fnmatchcase(name, dependency)
        )
    return expanded


def analyze_template(
    file_path: Path,
    views_root: Path,
    handler: TemplateHandler,
) -> RenderDepsRecord:
    """Extract render and explicit dependencies of one template file.

    Parse failures are recorded on the returned record instead of raised.
    """
    relative_path = file_path.relative_to(views_root).as_posix()
    name = path_to_template_name(relative_path)
    source = file_path.read_text(encoding="utf-8", errors="replace")

    explicit = extract_explicit_dependencies(source)
    try:
        dependencies = RenderParser(
            name, compile_template(source, handler)
        ).extract_render_dependencies()
    except RenderParseError as exc:
        logger.debug("failed to parse %s: %s", relative_path, exc)
        return RenderDepsRecord(
            template=name,
            path=relative_path,
            handler=handler,
            explicit=explicit,
            error=ParseFailure(line=exc.line, column=exc.column, message=str(exc)),
        )

    return RenderDepsRecord(
        template=name,
        path=relative_path,
        handler=handler,
        dependencies=dependencies,
        explicit=explicit,
    )


class RenderDepsGenerator:
    """Generates render_deps.jsonl from the templates under a views directory."""

    @property
    def name(self) -> str:
        """Generator name for logging and identification."""
        return "render_deps"

    def generate(
        self,
        root: Path,
        out_dir: Path,
        **kwargs: Any,
    ) -> tuple[list[dict[str, Any]], dict[str, Any]]:
        """Generate render_deps artifact."""
        views_root: Path = kwargs.get("views_root") or root
        handlers: dict[str, TemplateHandler] = kwargs.get("handlers") or dict(
            DEFAULT_HANDLERS
        )
        include_patterns: list[str] | None = kwargs.get("include_patterns")
        exclude_patterns: list[str] | None = kwargs.get("exclude_patterns")
        nested_gitignore: bool = kwargs.get("nested_gitignore", False)

        out_dir.mkdir(parents=True, exist_ok=True)

        out_dir_name = _get_output_dir_name(out_dir, views_root)
        records: list[RenderDepsRecord] = []

        for file_path in find_template_files(
            views_root,
            extensions=frozenset(handlers),
            output_dir=out_dir_name,
            include_patterns=include_patterns,
            exclude_patterns=exclude_patterns,
            nested_gitignore=nested_gitignore,
            gitignore_root=root,
        ):
            handler = handlers[file_path.suffix[1:]]
            records.append(analyze_template(file_path, views_root, handler))

        records.sort(key=lambda record: (record.template, record.path))

        known_templates = sorted({record.template for record in records})
        for record in records:
            record.explicit = _expand_explicit(record.explicit, known_templates)

        _write_jsonl(out_dir / RENDER_DEPS_JSONL, records)

        parse_errors = sum(1 for record in records if record.error is not None)
        record_dicts = [record.model_dump() for record in records]
        return record_dicts, {
            "template_count": len(records),
            "parse_error_count": parse_errors,
        }


__all__ = ["RENDER_DEPS_JSONL", "RenderDepsGenerator", "analyze_template"]
