"""Graph algorithms for template dependency graphs."""

from __future__ import annotations


def build_dependency_graph(edges: list[tuple[str, str]]) -> dict[str, set[str]]:
    """Build an adjacency map from (template, dependency) edges.

    Every template and dependency appears as a key, so leaf templates map to
    an empty set.
    """
    graph: dict[str, set[str]] = {}

    for source, target in edges:
        graph.setdefault(source, set()).add(target)
        graph.setdefault(target, set())

    return graph


class _TarjanState:
    """Mutable state container for Tarjan's SCC algorithm."""

    def __init__(self) -> None:
        self.index = 0
        self.indices: dict[str, int] = {}
        self.low_link: dict[str, int] = {}
        self.on_stack: set[str] = set()
        self.stack: list[str] = []
        self.sccs: list[list[str]] = []

    def visit(self, node: str) -> None:
        self.indices[node] = self.index
        self.low_link[node] = self.index
        self.index += 1
        self.stack.append(node)
        self.on_stack.add(node)


def _extract_scc(state: _TarjanState, root: str) -> list[str]:
    """Pop one strongly connected component rooted at ``root``."""
    scc: list[str] = []
    while state.stack:
        w = state.stack.pop()
        state.on_stack.remove(w)
        scc.append(w)
        if w == root:
            break
    if root not in scc:
        msg = (
            f"Tarjan algorithm invariant violated: root node {root!r} "
            "not found in stack during SCC extraction."
        )
        raise RuntimeError(msg)
    return scc


def _strongconnect(
    start: str, graph: dict[str, set[str]], state: _TarjanState
) -> None:
    """Run Tarjan's algorithm from ``start`` with an explicit work stack.

    Render chains can be arbitrarily long, so neighbours are walked with
    iterators on a stack instead of recursion.
    """
    state.visit(start)
    work = [(start, iter(sorted(graph.get(start, set()))))]

    while work:
        node, neighbors = work[-1]
        advanced = False
        for neighbor in neighbors:
            if neighbor not in state.indices:
                state.visit(neighbor)
                work.append((neighbor, iter(sorted(graph.get(neighbor, set())))))
                advanced = True
                break
            if neighbor in state.on_stack:
                state.low_link[node] = min(
                    state.low_link[node], state.indices[neighbor]
                )
        if advanced:
            continue

        work.pop()
        if work:
            parent = work[-1][0]
            state.low_link[parent] = min(state.low_link[parent], state.low_link[node])

        if state.low_link[node] == state.indices[node]:
            scc = _extract_scc(state, node)
            if len(scc) > 1 or node in graph.get(node, set()):
                state.sccs.append(scc)


def find_cycles(graph: dict[str, set[str]]) -> list[list[str]]:
    """Find dependency cycles using Tarjan's algorithm.

    Args:
        graph: Adjacency map as returned by ``build_dependency_graph``

    Returns:
        List of cycles, where each cycle is a list of templates. Self-renders
        are reported as single-element cycles.
    """
    state = _TarjanState()

    for node in sorted(graph):
        if node not in state.indices:
            _strongconnect(node, graph, state)

    return state.sccs


__all__ = ["build_dependency_graph", "find_cycles"]
