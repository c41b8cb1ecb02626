from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from artifacts.generators import DepsGenerator, RenderDepsGenerator
from artifacts.models.artifacts.dependencies import DepsSummary
from contract.artifacts import DEPS_EDGELIST, DEPS_SUMMARY_JSON, RENDER_DEPS_JSONL
from rules.config import load_config, resolve_output_dir, resolve_views_dir

if TYPE_CHECKING:
    from pathlib import Path

    from rules.config import ViewDepsConfig

logger = logging.getLogger(__name__)


def generate_all_artifacts(
    *,
    root: Path,
    out_dir: Path | None = None,
    config: ViewDepsConfig | None = None,
) -> dict[str, object]:
    """Generate deterministic dependency artifacts for a repository.

    Args:
        root: Root directory of the repository to analyze
        out_dir: Optional output directory for generated artifacts
        config: Optional configuration; loaded from viewdeps.toml when omitted

    Returns:
        Dictionary with counts and list of generated artifact paths.
    """
    if config is None:
        config = load_config(root)

    if out_dir is None:
        out_dir = resolve_output_dir(root, config.output_dir)

    views_root = resolve_views_dir(root, config.views_dir)

    render_deps_gen = RenderDepsGenerator()
    _, render_stats = render_deps_gen.generate(
        root=root,
        out_dir=out_dir,
        views_root=views_root,
        handlers=config.handlers,
        include_patterns=config.include,
        exclude_patterns=config.exclude,
        nested_gitignore=config.nested_gitignore,
    )

    deps_gen = DepsGenerator()
    _, deps_summary_dict = deps_gen.generate(root=root, out_dir=out_dir)
    deps_summary = DepsSummary(**deps_summary_dict)
    logger.info(
        "analyzed %d templates into %s (%d edges, %d parse errors)",
        render_stats["template_count"],
        out_dir,
        deps_summary.edge_count,
        render_stats["parse_error_count"],
    )

    artifacts_list = [
        RENDER_DEPS_JSONL,
        DEPS_EDGELIST,
        DEPS_SUMMARY_JSON,
    ]

    return {
        "template_count": render_stats["template_count"],
        "parse_error_count": render_stats["parse_error_count"],
        "edge_count": deps_summary.edge_count,
        "node_count": deps_summary.node_count,
        "cycle_count": len(deps_summary.cycles),
        "missing_count": len(deps_summary.missing),
        "artifacts": [str(out_dir / name) for name in artifacts_list],
    }
