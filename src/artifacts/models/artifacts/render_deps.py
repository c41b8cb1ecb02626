"""Per-template render dependency records."""

from __future__ import annotations

from pydantic import BaseModel, Field

from contract.artifacts import ARTIFACT_SCHEMA_VERSION


class ParseFailure(BaseModel):
    """Location of the syntax error that stopped a template's analysis."""

    line: int
    column: int
    message: str


class RenderDepsRecord(BaseModel):
    """Schema for render_deps.jsonl records."""

    schema_version: int = Field(default=ARTIFACT_SCHEMA_VERSION)
    template: str
    path: str
    handler: str
    dependencies: list[str] = Field(default_factory=list)
    explicit: list[str] = Field(default_factory=list)
    error: ParseFailure | None = None


__all__ = ["ParseFailure", "RenderDepsRecord"]
