from __future__ import annotations

from pathlib import Path
from typing import Any, get_args

import tomllib
from pydantic import BaseModel, ConfigDict, Field, field_validator

from parse.errors import ViewDepsError
from parse.template_deps import TemplateHandler

CONFIG_FILENAME = "viewdeps.toml"

VALID_HANDLERS = frozenset(get_args(TemplateHandler))

DEFAULT_HANDLERS: dict[str, TemplateHandler] = {
    "erb": "erb",
    "rb": "ruby",
    "builder": "ruby",
    "jbuilder": "ruby",
}


class ViewDepsConfig(BaseModel):
    """Configuration for viewdeps artifact generation."""

    model_config = ConfigDict(extra="forbid")

    output_dir: str = Field(
        default=".viewdeps",
        description="Output directory for generated artifacts",
    )
    views_dir: str = Field(
        default="app/views",
        description="Directory holding templates; names are relative to it",
    )
    include: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to include (empty = all templates)",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to exclude",
    )
    handlers: dict[str, TemplateHandler] = Field(
        default_factory=lambda: dict(DEFAULT_HANDLERS),
        description="Template handler per final file extension",
    )
    nested_gitignore: bool = Field(
        default=False,
        description=(
            "Enable nested .gitignore composition (default: false for root-only)"
        ),
    )

    @field_validator("handlers", mode="before")
    @classmethod
    def validate_handlers(cls, v: Any) -> Any:
        """Validate that handler values name a known template handler.

        Note: this runs in `mode="before"` so we can report a clear error
        message using the raw TOML values.
        """

        if v is None:
            return dict(DEFAULT_HANDLERS)

        if not isinstance(v, dict):
            msg = "handlers must be a mapping of extension -> handler"
            raise TypeError(msg)

        for extension, handler in v.items():
            if not isinstance(extension, str) or not isinstance(handler, str):
                msg = "handlers must be a mapping of str -> str"
                raise TypeError(msg)
            if extension.startswith(".") or not extension:
                msg = f"Invalid extension '{extension}': use e.g. 'erb', not '.erb'"
                raise ValueError(msg)
            if handler not in VALID_HANDLERS:
                msg = (
                    f"Invalid handler '{handler}' for extension '{extension}'. "
                    f"Valid handlers: {', '.join(sorted(VALID_HANDLERS))}"
                )
                raise ValueError(msg)

        return v


class ConfigError(ViewDepsError):
    """Raised when config file exists but cannot be parsed."""


def _resolve_within_root(root: Path, value: str, label: str) -> Path:
    if not value:
        msg = f"{label} must be a non-empty relative path"
        raise ConfigError(msg)

    if value.startswith("~") or Path(value).is_absolute():
        msg = f"{label} must be a relative path within the repo root"
        raise ConfigError(msg)

    try:
        resolved_root = root.resolve()
        resolved = (resolved_root / value).resolve()
    except OSError as exc:
        msg = f"Failed to resolve {label} '{value}': {exc}"
        raise ConfigError(msg) from exc

    try:
        resolved.relative_to(resolved_root)
    except ValueError as exc:
        msg = f"{label} '{value}' escapes the repository root"
        raise ConfigError(msg) from exc

    return resolved


def resolve_output_dir(root: Path, output_dir: str) -> Path:
    """Resolve a config-provided output_dir safely within the repo root.

    The config output_dir must be a non-empty relative path that remains
    within the repository root after resolution. Absolute paths and paths
    that escape the root are rejected.
    """
    return _resolve_within_root(root, output_dir, "output_dir")


def resolve_views_dir(root: Path, views_dir: str) -> Path:
    """Resolve the configured views directory within the repo root."""
    return _resolve_within_root(root, views_dir, "views_dir")


def load_config(root: Path) -> ViewDepsConfig:
    """Load configuration from viewdeps.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return ViewDepsConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return ViewDepsConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
