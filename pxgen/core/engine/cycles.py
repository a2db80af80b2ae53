"""
Cycle detection over the augmented dependency graph.

A depth-first search from every unvisited node; whenever an edge
leads back to a node still on the current path, the path slice from
that node onwards is one cycle. This finds at least one cycle per
offending strongly-connected component, not every elementary cycle.

No I/O. Explicit work stacks, no recursion.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pxgen.core.errors import CyclicDependencyError

if TYPE_CHECKING:
    from pxgen.core.engine.graph import DependencyGraph


def find_cycles(graph: DependencyGraph) -> list[list[int]]:
    """Return the cycles found in the graph, as lists of node indices.

    Empty if the graph is acyclic.
    """
    visited: set[int] = set()
    cycles: list[list[int]] = []

    for start in range(len(graph.nodes)):
        if start in visited:
            continue

        path: list[int] = [start]
        on_path: dict[int, int] = {start: 0}
        visited.add(start)
        work = [iter(graph.outgoing[start])]

        while work:
            neighbour = next(work[-1], None)
            if neighbour is None:
                work.pop()
                on_path.pop(path.pop())
                continue

            if neighbour not in visited:
                visited.add(neighbour)
                on_path[neighbour] = len(path)
                path.append(neighbour)
                work.append(iter(graph.outgoing[neighbour]))
            elif neighbour in on_path:
                cycles.append(path[on_path[neighbour]:])

    return cycles


def cyclic_dependency_error(cycle: list[int], graph: DependencyGraph) -> CyclicDependencyError:
    """Render a cycle as the chain of relationships that closes it."""
    lines = [
        "There is a cyclic dependency in your workspace: this is not allowed!",
        "The cycle looks like this:",
    ]
    for i, node in enumerate(cycle):
        dependent = cycle[i - 1]  # wraps to the last node for i == 0
        relationship = graph.edge(dependent, node).kind.value
        lines.append(f"- `{graph.names[dependent]}` {relationship} `{graph.names[node]}`")

    return CyclicDependencyError(
        "\n".join(lines),
        cycle=[graph.nodes[node] for node in cycle],
    )
