"""Artifact contract definitions.

This module defines the stable filenames and formats consumers of viewdeps
artifacts (digest and cache-invalidation tooling) depend on.
"""

from __future__ import annotations

from dataclasses import dataclass

# Artifact schema version for all viewdeps artifacts.
ARTIFACT_SCHEMA_VERSION = 1

# Artifact filename constants (stable contract identifiers).
RENDER_DEPS_JSONL = "render_deps.jsonl"
DEPS_EDGELIST = "deps.edgelist"
DEPS_SUMMARY_JSON = "deps_summary.json"


@dataclass(frozen=True)
class ArtifactSpec:
    """Specification for a contract artifact."""

    filename: str
    format: str
    required_fields_note: str


ARTIFACT_SPECS: dict[str, ArtifactSpec] = {
    "render_deps": ArtifactSpec(
        filename=RENDER_DEPS_JSONL,
        format="jsonl",
        required_fields_note="RenderDepsRecord fields required by contract.",
    ),
    "deps_edgelist": ArtifactSpec(
        filename=DEPS_EDGELIST,
        format="edgelist",
        required_fields_note="Dependency edge pairs (template, dependency).",
    ),
    "deps_summary": ArtifactSpec(
        filename=DEPS_SUMMARY_JSON,
        format="json",
        required_fields_note="DepsSummary fields required by contract.",
    ),
}
