"""Artifact generators for viewdeps."""

from artifacts.generators.deps import DepsGenerator
from artifacts.generators.render_deps import RenderDepsGenerator

__all__ = [
    "DepsGenerator",
    "RenderDepsGenerator",
]
