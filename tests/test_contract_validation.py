from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

from contract.artifacts import (
    ARTIFACT_SCHEMA_VERSION,
    ARTIFACT_SPECS,
    DEPS_EDGELIST,
    DEPS_SUMMARY_JSON,
    RENDER_DEPS_JSONL,
)
from contract.validation import (
    ValidationMessage,
    ValidationResult,
    validate_artifacts,
)

SHOW_RECORD: dict[str, Any] = {
    "schema_version": ARTIFACT_SCHEMA_VERSION,
    "template": "posts/show",
    "path": "posts/show.html.erb",
    "handler": "erb",
    "dependencies": ["posts/_post"],
    "explicit": ["shared/_nav"],
    "error": None,
}

POST_RECORD: dict[str, Any] = {
    "schema_version": ARTIFACT_SCHEMA_VERSION,
    "template": "posts/_post",
    "path": "posts/_post.html.erb",
    "handler": "erb",
    "dependencies": [],
    "explicit": [],
    "error": None,
}


def _write_records(d: Path, *records: dict[str, Any]) -> None:
    payload = "".join(json.dumps(record) + "\n" for record in records)
    (d / RENDER_DEPS_JSONL).write_text(payload, encoding="utf-8")


def _write_valid_artifacts(d: Path) -> None:
    """Write a minimal consistent artifact set to directory d."""
    d.mkdir(parents=True, exist_ok=True)

    _write_records(d, POST_RECORD, SHOW_RECORD)

    deps_summary = {
        "schema_version": ARTIFACT_SCHEMA_VERSION,
        "template_count": 2,
        "node_count": 3,
        "edge_count": 2,
        "missing": ["shared/_nav"],
    }
    (d / DEPS_SUMMARY_JSON).write_text(json.dumps(deps_summary), encoding="utf-8")

    (d / DEPS_EDGELIST).write_text(
        "posts/show -> posts/_post\nposts/show -> shared/_nav\n", encoding="utf-8"
    )


def _messages_contain(messages: list[ValidationMessage], needle: str) -> bool:
    """Return True when any validation message contains the given substring."""
    return any(needle in message.message for message in messages)


# Group 1: Data class tests


def test_validation_message_location_with_line() -> None:
    """ValidationMessage.location returns path:line when line is present."""
    msg = ValidationMessage("render_deps", Path("x.jsonl"), "bad", line=7)
    assert msg.location() == "x.jsonl:7"


def test_validation_message_location_without_line() -> None:
    """ValidationMessage.location returns only path when line is missing."""
    msg = ValidationMessage("render_deps", Path("x.jsonl"), "bad")
    assert msg.location() == "x.jsonl"


def test_validation_message_to_dict() -> None:
    """ValidationMessage.to_dict returns the expected payload."""
    msg = ValidationMessage("render_deps", Path("x.jsonl"), "bad", line=3)
    assert msg.to_dict() == {
        "artifact": "render_deps",
        "path": "x.jsonl",
        "line": 3,
        "message": "bad",
    }


def test_validation_result_ok_tracks_errors_only() -> None:
    """Warnings alone keep a ValidationResult ok."""
    result = ValidationResult()
    assert result.ok is True

    result.warning("x", Path("a"), "hmm")
    assert result.ok is True

    result.error("x", Path("a"), "boom")
    assert result.ok is False


# Group 2: Directory handling


def test_missing_directory() -> None:
    """validate_artifacts reports a missing artifacts directory."""
    result = validate_artifacts(Path("/nonexistent"))
    assert result.ok is False
    assert _messages_contain(result.errors, "Artifacts directory does not exist")


def test_not_a_directory(tmp_path: Path) -> None:
    """validate_artifacts reports a path that is not a directory."""
    file_path = tmp_path / "not-a-dir"
    file_path.write_text("x", encoding="utf-8")

    result = validate_artifacts(file_path)

    assert result.ok is False
    assert _messages_contain(result.errors, "Artifacts path is not a directory")


def test_missing_artifact_files(tmp_path: Path) -> None:
    """validate_artifacts reports each required artifact when directory is empty."""
    artifacts_dir = tmp_path / "artifacts"
    artifacts_dir.mkdir()

    result = validate_artifacts(artifacts_dir)

    assert result.ok is False
    assert len(result.errors) == len(ARTIFACT_SPECS)
    assert all("Required artifact file is missing" in m.message for m in result.errors)


# Group 3: Happy path


def test_valid_artifacts_pass(tmp_path: Path) -> None:
    """A complete valid artifact set produces no errors or warnings."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)

    result = validate_artifacts(artifacts_dir)

    assert result.ok is True
    assert result.errors == []
    assert result.warnings == []


def test_parse_failure_record_is_valid(tmp_path: Path) -> None:
    """Records carrying a parse failure validate like any other record."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    broken = {
        **POST_RECORD,
        "error": {"line": 2, "column": 1, "message": "posts/_post:2:1: syntax error"},
    }
    _write_records(artifacts_dir, broken, SHOW_RECORD)

    result = validate_artifacts(artifacts_dir)

    assert result.ok is True


# Group 4: JSONL validation


def test_jsonl_invalid_json(tmp_path: Path) -> None:
    """Invalid JSON in JSONL produces a line-level JSON error."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    (artifacts_dir / RENDER_DEPS_JSONL).write_text("{not-json}\n", encoding="utf-8")

    result = validate_artifacts(artifacts_dir)

    assert result.ok is False
    assert _messages_contain(result.errors, "Invalid JSON")
    assert any(m.line == 1 for m in result.errors)


def test_jsonl_pydantic_failure(tmp_path: Path) -> None:
    """Schema-invalid JSONL records produce schema validation errors."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    _write_records(artifacts_dir, {"schema_version": ARTIFACT_SCHEMA_VERSION})

    result = validate_artifacts(artifacts_dir)

    assert result.ok is False
    assert _messages_contain(result.errors, "Schema validation failed")


def test_jsonl_missing_schema_version_lenient(tmp_path: Path) -> None:
    """Missing schema_version is a warning in lenient mode."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    unversioned = {k: v for k, v in SHOW_RECORD.items() if k != "schema_version"}
    _write_records(artifacts_dir, POST_RECORD, unversioned)

    result = validate_artifacts(artifacts_dir)

    assert result.ok is True
    assert result.errors == []
    assert _messages_contain(result.warnings, "Missing schema_version")


def test_jsonl_missing_schema_version_strict(tmp_path: Path) -> None:
    """Missing schema_version is an error in strict mode."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    unversioned = {k: v for k, v in SHOW_RECORD.items() if k != "schema_version"}
    _write_records(artifacts_dir, POST_RECORD, unversioned)

    result = validate_artifacts(artifacts_dir, strict_schema_version=True)

    assert result.ok is False
    assert _messages_contain(result.errors, "Missing schema_version")


def test_jsonl_wrong_schema_version(tmp_path: Path) -> None:
    """Wrong schema_version produces a schema mismatch error."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    _write_records(artifacts_dir, POST_RECORD, {**SHOW_RECORD, "schema_version": 999})

    result = validate_artifacts(artifacts_dir)

    assert result.ok is False
    assert _messages_contain(result.errors, "Schema version mismatch")


def test_jsonl_os_error(tmp_path: Path) -> None:
    """JSONL file open OSError is surfaced as a validation error."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    target = artifacts_dir / RENDER_DEPS_JSONL
    original_open = Path.open

    def _patched_open(self: Path, *args: Any, **kwargs: Any) -> Any:
        if self == target and args and args[0] == "rb":
            raise OSError("boom")
        return original_open(self, *args, **kwargs)

    with patch.object(Path, "open", _patched_open):
        result = validate_artifacts(artifacts_dir)

    assert result.ok is False
    assert _messages_contain(result.errors, "Failed to read file")


def test_jsonl_schema_dedup(tmp_path: Path) -> None:
    """Missing schema_version warning is emitted once per JSONL file."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    _write_records(
        artifacts_dir,
        {k: v for k, v in POST_RECORD.items() if k != "schema_version"},
        {k: v for k, v in SHOW_RECORD.items() if k != "schema_version"},
    )

    result = validate_artifacts(artifacts_dir)

    warnings = [m for m in result.warnings if m.artifact == "render_deps"]
    assert len(warnings) == 1
    assert "Missing schema_version" in warnings[0].message


def test_jsonl_duplicate_template_warns(tmp_path: Path) -> None:
    """A template recorded twice is reported as a warning."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    _write_records(artifacts_dir, POST_RECORD, SHOW_RECORD, POST_RECORD)

    result = validate_artifacts(artifacts_dir)

    assert result.ok is True
    assert _messages_contain(result.warnings, "also defined on line 1")


def test_jsonl_empty_lines_skipped(tmp_path: Path) -> None:
    """Blank JSONL lines are ignored by validation."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    (artifacts_dir / RENDER_DEPS_JSONL).write_text(
        "\n\n" + json.dumps(SHOW_RECORD) + "\n\n", encoding="utf-8"
    )

    result = validate_artifacts(artifacts_dir)

    assert result.ok is True


# Group 5: deps_summary


def test_deps_summary_invalid_json(tmp_path: Path) -> None:
    """Invalid deps_summary JSON is reported as an error."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    (artifacts_dir / DEPS_SUMMARY_JSON).write_text("{", encoding="utf-8")

    result = validate_artifacts(artifacts_dir)

    assert result.ok is False
    assert _messages_contain(result.errors, "Invalid JSON")


def test_deps_summary_non_dict(tmp_path: Path) -> None:
    """A non-object deps_summary payload is rejected."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    (artifacts_dir / DEPS_SUMMARY_JSON).write_text("[]", encoding="utf-8")

    result = validate_artifacts(artifacts_dir)

    assert result.ok is False
    assert _messages_contain(result.errors, "Expected JSON object")


def test_deps_summary_pydantic_failure(tmp_path: Path) -> None:
    """Schema-invalid deps_summary payload produces validation error."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    bad_summary = {
        "schema_version": ARTIFACT_SCHEMA_VERSION,
        "template_count": 2,
        "node_count": "not_an_int",
        "edge_count": 2,
    }
    (artifacts_dir / DEPS_SUMMARY_JSON).write_text(
        json.dumps(bad_summary), encoding="utf-8"
    )

    result = validate_artifacts(artifacts_dir)

    assert result.ok is False
    assert _messages_contain(result.errors, "Schema validation failed")


# Group 6: Edgelist


def test_edgelist_non_utf8(tmp_path: Path) -> None:
    """Non-UTF-8 edgelist bytes are reported as decoding errors."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    (artifacts_dir / DEPS_EDGELIST).write_bytes(b"\xff\xfe")

    result = validate_artifacts(artifacts_dir)

    assert result.ok is False
    assert _messages_contain(result.errors, "invalid UTF-8")


def test_edgelist_missing_arrow(tmp_path: Path) -> None:
    """Edgelist lines missing '->' are rejected."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    (artifacts_dir / DEPS_EDGELIST).write_text("foo bar\n", encoding="utf-8")

    result = validate_artifacts(artifacts_dir)

    assert result.ok is False
    assert _messages_contain(result.errors, "expected 'template -> dependency'")


def test_edgelist_empty_source_or_target(tmp_path: Path) -> None:
    """Edgelist lines with an empty side are rejected."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    (artifacts_dir / DEPS_EDGELIST).write_text("posts/show -> \n", encoding="utf-8")

    result = validate_artifacts(artifacts_dir)

    assert result.ok is False
    assert _messages_contain(result.errors, "empty template or dependency")


def test_edgelist_empty_lines_skipped(tmp_path: Path) -> None:
    """Blank edgelist lines are ignored by validation."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    (artifacts_dir / DEPS_EDGELIST).write_text(
        "\n\nposts/show -> posts/_post\n\nposts/show -> shared/_nav\n",
        encoding="utf-8",
    )

    result = validate_artifacts(artifacts_dir)

    assert result.ok is True


# Group 7: Cross-artifact consistency


def test_edge_missing_from_edgelist(tmp_path: Path) -> None:
    """A recorded dependency without a matching edge is an error."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    (artifacts_dir / DEPS_EDGELIST).write_text(
        "posts/show -> posts/_post\n", encoding="utf-8"
    )

    result = validate_artifacts(artifacts_dir)

    assert result.ok is False
    assert _messages_contain(
        result.errors, "Missing edge 'posts/show -> shared/_nav'"
    )


def test_edge_not_recorded_in_render_deps(tmp_path: Path) -> None:
    """An edge no record accounts for is an error."""
    artifacts_dir = tmp_path / "artifacts"
    _write_valid_artifacts(artifacts_dir)
    with (artifacts_dir / DEPS_EDGELIST).open("a", encoding="utf-8") as handle:
        handle.write("posts/_post -> posts/show\n")

    result = validate_artifacts(artifacts_dir)

    assert result.ok is False
    assert _messages_contain(
        result.errors, "Edge 'posts/_post -> posts/show' not recorded"
    )
