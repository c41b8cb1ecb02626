"""Summary helpers for viewdeps artifacts."""

from artifacts.summaries.builders import compute_fan_stats

__all__ = ["compute_fan_stats"]
