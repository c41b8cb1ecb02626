"""Configuration rules for viewdeps."""

from rules.config import (
    ConfigError,
    ViewDepsConfig,
    load_config,
    resolve_output_dir,
    resolve_views_dir,
)

__all__ = [
    "ConfigError",
    "ViewDepsConfig",
    "load_config",
    "resolve_output_dir",
    "resolve_views_dir",
]
