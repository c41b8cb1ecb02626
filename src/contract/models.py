"""Artifact models exposed at the contract boundary."""

from artifacts.models.artifacts.dependencies import DepsSummary
from artifacts.models.artifacts.render_deps import RenderDepsRecord

__all__ = ["DepsSummary", "RenderDepsRecord"]
