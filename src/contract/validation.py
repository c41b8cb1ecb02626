"""Validation helpers for viewdeps contract artifacts."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import orjson
from pydantic import ValidationError

from contract.artifacts import (
    ARTIFACT_SCHEMA_VERSION,
    ARTIFACT_SPECS,
    DEPS_EDGELIST,
    RENDER_DEPS_JSONL,
)
from contract.models import DepsSummary, RenderDepsRecord


@dataclass(frozen=True)
class ValidationMessage:
    artifact: str
    path: Path
    message: str
    line: int | None = None

    def location(self) -> str:
        if self.line is None:
            return str(self.path)
        return f"{self.path}:{self.line}"

    def to_dict(self) -> dict[str, object]:
        return {
            "artifact": self.artifact,
            "path": str(self.path),
            "line": self.line,
            "message": self.message,
        }


@dataclass
class ValidationResult:
    errors: list[ValidationMessage] = field(default_factory=list)
    warnings: list[ValidationMessage] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def error(
        self, artifact: str, path: Path, message: str, line: int | None = None
    ) -> None:
        self.errors.append(ValidationMessage(artifact, path, message, line))

    def warning(
        self, artifact: str, path: Path, message: str, line: int | None = None
    ) -> None:
        self.warnings.append(ValidationMessage(artifact, path, message, line))


def validate_artifacts(
    artifacts_dir: Path, *, strict_schema_version: bool = False
) -> ValidationResult:
    """Validate every contract artifact found in ``artifacts_dir``.

    Besides per-file schema checks, the edge list is cross-checked against
    the dependencies recorded in render_deps.jsonl.
    """
    result = ValidationResult()

    if not artifacts_dir.exists():
        result.error(
            "artifacts_dir", artifacts_dir, "Artifacts directory does not exist."
        )
        return result

    if not artifacts_dir.is_dir():
        result.error(
            "artifacts_dir", artifacts_dir, "Artifacts path is not a directory."
        )
        return result

    records: list[RenderDepsRecord] | None = None
    edges: set[tuple[str, str]] | None = None

    for artifact_name, spec in ARTIFACT_SPECS.items():
        path = artifacts_dir / spec.filename
        if not path.exists():
            result.error(artifact_name, path, "Required artifact file is missing.")
            continue

        if spec.format == "jsonl":
            records = _validate_render_deps(
                artifact_name,
                path,
                result,
                strict_schema_version=strict_schema_version,
            )
        elif spec.format == "json":
            _validate_deps_summary(
                artifact_name,
                path,
                result,
                strict_schema_version=strict_schema_version,
            )
        elif spec.format == "edgelist":
            edges = _validate_edgelist(artifact_name, path, result)
        else:
            result.error(
                artifact_name, path, f"Unsupported artifact format: {spec.format}."
            )

    if records is not None and edges is not None:
        _check_edges_match_records(artifacts_dir, records, edges, result)

    return result


def _validate_render_deps(
    artifact_name: str,
    path: Path,
    result: ValidationResult,
    *,
    strict_schema_version: bool,
) -> list[RenderDepsRecord] | None:
    try:
        handle = path.open("rb")
    except OSError as exc:
        result.error(artifact_name, path, f"Failed to read file: {exc}.")
        return None

    records: list[RenderDepsRecord] = []
    seen_templates: dict[str, int] = {}
    schema_reported = False
    with handle:
        for line_number, raw_line in enumerate(handle, 1):
            line = raw_line.strip()
            if not line:
                continue
            try:
                data = orjson.loads(line)
            except orjson.JSONDecodeError as exc:
                result.error(artifact_name, path, f"Invalid JSON: {exc}.", line_number)
                continue

            try:
                record = RenderDepsRecord.model_validate(data)
            except ValidationError as exc:
                result.error(
                    artifact_name,
                    path,
                    f"Schema validation failed: {exc}.",
                    line_number,
                )
                continue

            if not schema_reported:
                schema_reported = _check_schema_version(
                    artifact_name,
                    path,
                    line_number,
                    data,
                    record.schema_version,
                    result,
                    strict_schema_version=strict_schema_version,
                )

            first_line = seen_templates.setdefault(record.template, line_number)
            if first_line != line_number:
                result.warning(
                    artifact_name,
                    path,
                    f"Template '{record.template}' also defined on line {first_line}.",
                    line_number,
                )
            records.append(record)

    return records


def _validate_deps_summary(
    artifact_name: str,
    path: Path,
    result: ValidationResult,
    *,
    strict_schema_version: bool,
) -> None:
    try:
        raw = orjson.loads(path.read_bytes())
    except (OSError, orjson.JSONDecodeError) as exc:
        result.error(artifact_name, path, f"Invalid JSON: {exc}.")
        return

    if not isinstance(raw, dict):
        result.error(
            artifact_name, path, "Expected JSON object for deps_summary.json."
        )
        return

    try:
        summary = DepsSummary.model_validate(raw)
    except ValidationError as exc:
        result.error(artifact_name, path, f"Schema validation failed: {exc}.")
        return

    _check_schema_version(
        artifact_name,
        path,
        None,
        raw,
        summary.schema_version,
        result,
        strict_schema_version=strict_schema_version,
    )


def _validate_edgelist(
    artifact_name: str, path: Path, result: ValidationResult
) -> set[tuple[str, str]] | None:
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except UnicodeDecodeError as exc:
        result.error(
            artifact_name, path, f"Failed to read file: invalid UTF-8 ({exc})."
        )
        return None
    except OSError as exc:
        result.error(artifact_name, path, f"Failed to read file: {exc}.")
        return None

    edges: set[tuple[str, str]] = set()
    for line_number, raw_line in enumerate(lines, 1):
        line = raw_line.strip()
        if not line:
            continue
        if "->" not in line:
            result.error(
                artifact_name,
                path,
                "Malformed edgelist line (expected 'template -> dependency').",
                line_number,
            )
            continue
        source, target = (part.strip() for part in line.split("->", 1))
        if not source or not target:
            result.error(
                artifact_name,
                path,
                "Malformed edgelist line (empty template or dependency).",
                line_number,
            )
            continue
        edges.add((source, target))

    return edges


def _check_edges_match_records(
    artifacts_dir: Path,
    records: list[RenderDepsRecord],
    edges: set[tuple[str, str]],
    result: ValidationResult,
) -> None:
    expected = {
        (record.template, dependency)
        for record in records
        for dependency in [*record.dependencies, *record.explicit]
    }
    path = artifacts_dir / DEPS_EDGELIST
    for source, target in sorted(expected - edges):
        result.error(
            "deps_edgelist",
            path,
            f"Missing edge '{source} -> {target}' recorded in {RENDER_DEPS_JSONL}.",
        )
    for source, target in sorted(edges - expected):
        result.error(
            "deps_edgelist",
            path,
            f"Edge '{source} -> {target}' not recorded in {RENDER_DEPS_JSONL}.",
        )


def _check_schema_version(
    artifact_name: str,
    path: Path,
    line: int | None,
    data: Any,
    schema_version: int,
    result: ValidationResult,
    *,
    strict_schema_version: bool,
) -> bool:
    """Report a schema version problem; return True if one was reported."""
    schema_present = isinstance(data, dict) and "schema_version" in data
    if schema_present and schema_version != ARTIFACT_SCHEMA_VERSION:
        result.error(
            artifact_name,
            path,
            "Schema version mismatch: "
            f"expected {ARTIFACT_SCHEMA_VERSION}, got {schema_version}.",
            line,
        )
        return True

    if not schema_present:
        message = f"Missing schema_version; defaulted to {ARTIFACT_SCHEMA_VERSION}."
        if strict_schema_version:
            result.error(artifact_name, path, message, line)
        else:
            result.warning(artifact_name, path, message, line)
        return True

    return False


__all__ = [
    "ValidationMessage",
    "ValidationResult",
    "validate_artifacts",
]
