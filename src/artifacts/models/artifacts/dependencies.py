"""Dependency graph summary models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from contract.artifacts import ARTIFACT_SCHEMA_VERSION


class DepsSummary(BaseModel):
    """Summary of template dependency graph metrics."""

    schema_version: int = Field(default=ARTIFACT_SCHEMA_VERSION)
    template_count: int
    node_count: int
    edge_count: int
    cycles: list[list[str]] = Field(default_factory=list)
    fan_in: dict[str, int] = Field(default_factory=dict)
    fan_out: dict[str, int] = Field(default_factory=dict)
    top_templates: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    parse_errors: list[str] = Field(default_factory=list)


__all__ = ["DepsSummary"]
