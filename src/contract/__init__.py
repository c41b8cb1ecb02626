"""Stable artifact contract surface for viewdeps.

Treat these exports as the authoritative boundary for tools that consume
generated artifacts.
"""

from contract.artifacts import (
    ARTIFACT_SCHEMA_VERSION,
    ARTIFACT_SPECS,
    DEPS_EDGELIST,
    DEPS_SUMMARY_JSON,
    RENDER_DEPS_JSONL,
    ArtifactSpec,
)


def __getattr__(name: str) -> object:
    if name in {"DepsSummary", "RenderDepsRecord"}:
        from contract.models import DepsSummary, RenderDepsRecord

        return {
            "DepsSummary": DepsSummary,
            "RenderDepsRecord": RenderDepsRecord,
        }[name]

    if name in {"ValidationMessage", "ValidationResult", "validate_artifacts"}:
        from contract.validation import (
            ValidationMessage,
            ValidationResult,
            validate_artifacts,
        )

        return {
            "ValidationMessage": ValidationMessage,
            "ValidationResult": ValidationResult,
            "validate_artifacts": validate_artifacts,
        }[name]

    msg = f"module 'contract' has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "ARTIFACT_SCHEMA_VERSION",
    "ARTIFACT_SPECS",
    "DEPS_EDGELIST",
    "DEPS_SUMMARY_JSON",
    "RENDER_DEPS_JSONL",
    "ArtifactSpec",
    "DepsSummary",
    "RenderDepsRecord",
    "ValidationMessage",
    "ValidationResult",
    "validate_artifacts",
]
