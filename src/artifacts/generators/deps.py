"""Template dependency graph generator."""

from __future__ import annotations

from pathlib import Path  # noqa: TC003
from typing import Any

from artifacts.models.artifacts.dependencies import DepsSummary
from artifacts.summaries.builders import compute_fan_stats
from artifacts.utils import _load_jsonl, _write_json
from contract.artifacts import DEPS_EDGELIST, DEPS_SUMMARY_JSON, RENDER_DEPS_JSONL
from graph.algos import build_dependency_graph, find_cycles


def _edges_from_record(record: dict[str, Any]) -> list[tuple[str, str]]:
    template = record.get("template")
    if not isinstance(template, str):
        return []

    edges: list[tuple[str, str]] = []
    for key in ("dependencies", "explicit"):
        targets = record.get(key)
        if not isinstance(targets, list):
            continue
        edges.extend(
            (template, target) for target in targets if isinstance(target, str)
        )
    return edges


class DepsGenerator:
    """Generates deps.edgelist and deps_summary.json from render_deps.jsonl."""

    @property
    def name(self) -> str:
        """Generator name for logging and identification."""
        return "deps"

    def generate(
        self,
        root: Path,
        out_dir: Path,
        **kwargs: Any,
    ) -> tuple[list[dict[str, Any]], dict[str, Any]]:
        """Generate dependency graph artifacts."""
        del root
        top_n: int = kwargs.get("top_n", 10)

        out_dir.mkdir(parents=True, exist_ok=True)

        records = _load_jsonl(out_dir / RENDER_DEPS_JSONL)

        templates: set[str] = set()
        parse_errors: list[str] = []
        all_edges: list[tuple[str, str]] = []
        for record in records:
            template = record.get("template")
            if not isinstance(template, str):
                continue
            templates.add(template)
            if record.get("error") is not None:
                parse_errors.append(template)
            all_edges.extend(_edges_from_record(record))

        unique_edges = sorted(set(all_edges))

        graph = build_dependency_graph(unique_edges)
        cycles = find_cycles(graph)
        sorted_cycles = [sorted(cycle) for cycle in cycles]
        sorted_cycles.sort()

        fan_in, fan_out = compute_fan_stats(unique_edges)

        all_nodes = set(templates)
        for source, target in unique_edges:
            all_nodes.add(source)
            all_nodes.add(target)

        missing = sorted({target for _, target in unique_edges} - templates)
        top_templates = sorted(fan_in.keys(), key=lambda t: (-fan_in[t], t))[:top_n]

        edgelist_path = out_dir / DEPS_EDGELIST
        with edgelist_path.open("w", encoding="utf-8") as f:
            for source, target in unique_edges:
                f.write(f"{source} -> {target}\n")

        summary = DepsSummary(
            template_count=len(templates),
            node_count=len(all_nodes),
            edge_count=len(unique_edges),
            cycles=sorted_cycles,
            fan_in=dict(sorted(fan_in.items())),
            fan_out=dict(sorted(fan_out.items())),
            top_templates=top_templates,
            missing=missing,
            parse_errors=sorted(parse_errors),
        )
        _write_json(out_dir / DEPS_SUMMARY_JSON, summary)

        return [], summary.model_dump()


__all__ = [
    "DEPS_EDGELIST",
    "DEPS_SUMMARY_JSON",
    "DepsGenerator",
]
