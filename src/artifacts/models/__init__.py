"""Model namespace for viewdeps artifact schemas."""

from artifacts.models.artifacts.dependencies import DepsSummary
from artifacts.models.artifacts.render_deps import ParseFailure, RenderDepsRecord

__all__ = ["DepsSummary", "ParseFailure", "RenderDepsRecord"]
